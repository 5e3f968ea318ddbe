import asyncio
import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

from src.tutor_center_backend.common.exceptions import (
    CheckInNotFoundError,
    FormValidationError,
    PersistenceError,
    StudentNotFoundError,
)
from src.tutor_center_backend.database import models as db_models
from src.tutor_center_backend.database.store import TutoringStore
from src.tutor_center_backend.models.check_ins import CheckInForm
from src.tutor_center_backend.models.students import StudentCreate
from src.tutor_center_backend.services.roster_service import RosterService
from tests.constants import utc_ms
from tests.database.factories import (
    CheckInCreateFactory,
    CheckInFactory,
    CheckInFormFactory,
    StudentCreateFactory,
    StudentFactory,
)


@pytest.mark.anyio
class TestRosterServiceREAD:

    async def test_mount_loads_and_unmount_releases(self, roster_service: RosterService, store: TutoringStore):
        await store.add_student(StudentCreateFactory(name="Alice"))

        async with roster_service:
            assert roster_service.loading is False
            assert [s.name for s in roster_service.students] == ["Alice"]
            assert store.feed.listener_count(db_models.STUDENTS) == 1

        assert store.feed.listener_count(db_models.STUDENTS) == 0
        assert store.feed.listener_count(db_models.CHECK_INS) == 0

    async def test_stats_follow_check_ins(self, roster_service: RosterService, store: TutoringStore):
        student_id = await store.add_student(StudentCreateFactory(signed_up_lessons=10, cost_per_lesson=Decimal("50")))

        async with roster_service:
            for _ in range(3):
                await store.add_check_in(CheckInCreateFactory(student_id=student_id))

            student = roster_service.get_student(student_id)
            assert student.completed_lessons == 3
            assert student.total_amount_owed == Decimal("150")

    async def test_search(self, roster_service: RosterService, store: TutoringStore):
        await store.add_student(StudentCreateFactory(name="Alice", email="alice@x.com"))
        await store.add_student(StudentCreateFactory(name="Bob", email="bob@x.com"))

        async with roster_service:
            assert [s.name for s in roster_service.search("alice")] == ["Alice"]
            assert len(roster_service.search("")) == 2

    async def test_orphan_check_in_hidden_from_rows(self, roster_service: RosterService, store: TutoringStore):
        student_id = await store.add_student(StudentCreateFactory(name="Alice"))
        await store.add_check_in(CheckInCreateFactory(student_id=student_id))
        await store.add_check_in(CheckInCreateFactory(student_id="deleted-student"))

        async with roster_service:
            assert len(roster_service.check_ins) == 2
            assert [row.student_name for row in roster_service.check_in_rows] == ["Alice"]

    async def test_unknown_student(self, roster_service: RosterService):
        async with roster_service:
            with pytest.raises(StudentNotFoundError):
                roster_service.get_student("missing")

    async def test_dashboard(self, roster_service: RosterService, store: TutoringStore):
        student_id = await store.add_student(StudentCreateFactory(cost_per_lesson=Decimal("50")))
        await store.add_check_in(CheckInCreateFactory(student_id=student_id, timestamp=utc_ms(2024, 3, 4, 10)))
        await store.add_check_in(CheckInCreateFactory(student_id=student_id, timestamp=utc_ms(2024, 4, 1, 10)))

        async with roster_service:
            stats = roster_service.dashboard(date(2024, 3, 20))

        assert stats.total_students == 1
        assert stats.check_ins_this_month == 1
        assert stats.total_revenue == Decimal("100")

    async def test_invoice(self, roster_service: RosterService, store: TutoringStore):
        student_id = await store.add_student(StudentCreateFactory(name="Alice Smith", cost_per_lesson=Decimal("50")))
        await store.add_check_in(CheckInCreateFactory(student_id=student_id, lesson_cost=Decimal("50")))

        async with roster_service:
            invoice = roster_service.invoice(student_id, next_month_lessons=2)

        assert invoice.file_name == "invoice_Alice_Smith.pdf"
        assert len(invoice.lines) == 1
        assert invoice.projected_tuition == "$100.00"

    async def test_cancelled_mount_releases_every_subscription(self, roster_service: RosterService, store: TutoringStore):
        read_collection = store._read_collection

        async def cancel_check_ins(collection):
            if collection == db_models.CHECK_INS:
                raise asyncio.CancelledError
            return await read_collection(collection)

        store._read_collection = cancel_check_ins

        with pytest.raises(asyncio.CancelledError):
            await roster_service.mount()

        assert roster_service.mounted is False
        assert store.feed.listener_count(db_models.STUDENTS) == 0
        assert store.feed.listener_count(db_models.CHECK_INS) == 0

    def test_stats_do_not_depend_on_arrival_order(self):
        alice, bob = StudentFactory(name="Alice"), StudentFactory(name="Bob", cost_per_lesson=Decimal("42.5"))
        check_ins = [
            CheckInFactory(student_id=alice.id),
            CheckInFactory(student_id=bob.id),
            CheckInFactory(student_id=bob.id, active=False),
        ]
        students_first, check_ins_first = RosterService(store=None), RosterService(store=None)

        students_first._on_students([alice, bob])
        students_first._on_check_ins(check_ins)
        check_ins_first._on_check_ins(check_ins)
        check_ins_first._on_students([alice, bob])

        def figures(service: RosterService):
            return [(s.id, s.completed_lessons, s.total_amount_owed) for s in service.students_with_stats]

        assert figures(check_ins_first) == figures(students_first)
        assert figures(check_ins_first) == [(alice.id, 1, Decimal("50")), (bob.id, 2, Decimal("85.0"))]


@pytest.mark.anyio
class TestRosterServiceWRITE:

    async def test_add_student_requires_name_and_email(self, roster_service: RosterService):
        async with roster_service:
            with pytest.raises(FormValidationError):
                await roster_service.add_student(StudentCreate(name="Alice", email=""))

            assert roster_service.error == "Name and email are required"
            assert roster_service.students == []

    async def test_add_student_resets_form(self, roster_service: RosterService):
        async with roster_service:
            student_id = await roster_service.add_student(StudentCreateFactory(name="Alice"))

            assert roster_service.get_student(student_id).name == "Alice"
            assert roster_service.new_student.name == ""
            assert roster_service.error is None

    async def test_add_student_failure_keeps_form(self, roster_service: RosterService, store: TutoringStore):
        store.add_student = AsyncMock(side_effect=PersistenceError("down"))
        payload = StudentCreateFactory(name="Alice")

        async with roster_service:
            with pytest.raises(PersistenceError):
                await roster_service.add_student(payload)

        assert roster_service.error == "Failed to add student"
        assert roster_service.new_student == payload

    async def test_edit_and_save(self, roster_service: RosterService, store: TutoringStore):
        student_id = await store.add_student(StudentCreateFactory(name="Alice", signed_up_lessons=5))

        async with roster_service:
            editing = roster_service.start_edit(student_id)
            editing.signed_up_lessons = 12
            editing.cost_per_lesson = Decimal("60")
            await roster_service.save_student()

            student = roster_service.get_student(student_id)
            assert student.signed_up_lessons == 12
            assert student.cost_per_lesson == Decimal("60")
            assert roster_service.editing_student is None

    async def test_add_check_in(self, roster_service: RosterService, store: TutoringStore):
        student_id = await store.add_student(StudentCreateFactory(name="Alice"))

        async with roster_service:
            check_in_id = await roster_service.add_check_in(CheckInFormFactory(student_id=student_id))

            check_in = roster_service.get_check_in(check_in_id)
            assert check_in.lesson_cost == Decimal("45")
            assert check_in.active is True
            assert roster_service.new_check_in == CheckInForm()

    @pytest.mark.parametrize("form, message", [
        (CheckInForm(lesson_type="Reading", lesson_cost=Decimal("45")), "Student, lesson type and cost are required"),
        (CheckInForm(student_id="s1", lesson_type="  ", lesson_cost=Decimal("45")), "Student, lesson type and cost are required"),
        (CheckInForm(student_id="s1", lesson_type="Reading"), "Student, lesson type and cost are required"),
        (CheckInForm(student_id="s1", lesson_type="Reading", lesson_cost=Decimal("-1")), "Lesson cost cannot be negative"),
    ])
    async def test_add_check_in_validation(self, roster_service: RosterService, form: CheckInForm, message: str):
        async with roster_service:
            with pytest.raises(FormValidationError):
                await roster_service.add_check_in(form)

            assert roster_service.error == message
            assert roster_service.check_ins == []

    async def test_add_check_in_failure_keeps_form(self, roster_service: RosterService, store: TutoringStore):
        store.add_check_in = AsyncMock(side_effect=PersistenceError("down"))
        form = CheckInFormFactory(student_id="s1")

        async with roster_service:
            with pytest.raises(PersistenceError):
                await roster_service.add_check_in(form)

        assert roster_service.error == "Failed to add check-in"
        assert roster_service.new_check_in == form

    async def test_soft_delete_and_undo(self, roster_service: RosterService, store: TutoringStore):
        student_id = await store.add_student(StudentCreateFactory(cost_per_lesson=Decimal("50")))
        check_in_id = await store.add_check_in(CheckInCreateFactory(student_id=student_id))

        async with roster_service:
            await roster_service.delete_check_in(check_in_id)

            assert roster_service.check_in_rows == []
            assert [c.id for c in roster_service.recently_deleted] == [check_in_id]
            # still billed while soft-deleted
            assert roster_service.get_student(student_id).completed_lessons == 1

            await roster_service.undo_delete_check_in(check_in_id)

            assert [row.id for row in roster_service.check_in_rows] == [check_in_id]
            assert roster_service.recently_deleted == []

    async def test_delete_unknown_check_in(self, roster_service: RosterService):
        async with roster_service:
            with pytest.raises(CheckInNotFoundError):
                await roster_service.delete_check_in("missing")

    async def test_delete_failure_sets_message(self, roster_service: RosterService, store: TutoringStore):
        check_in_id = await store.add_check_in(CheckInCreateFactory())
        store.update_check_in = AsyncMock(side_effect=PersistenceError("down"))

        async with roster_service:
            with pytest.raises(PersistenceError):
                await roster_service.delete_check_in(check_in_id)

            assert roster_service.error == "Failed to delete check-in"
            assert roster_service.get_check_in(check_in_id).active is True
