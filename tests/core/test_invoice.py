'''
testing invoice assembly and PDF rendering
'''
from decimal import Decimal

from src.tutor_center_backend.core.invoice import (
    build_invoice,
    format_price,
    format_total,
    invoice_filename,
    render_invoice_pdf,
    render_teacher_invoice_pdf,
    teacher_invoice_filename,
)
from tests.constants import utc_ms
from tests.database.factories import CheckInFactory, StudentFactory


def test_filenames_replace_whitespace_runs():
    assert invoice_filename("Mary Jane  Watson") == "invoice_Mary_Jane_Watson.pdf"
    assert teacher_invoice_filename("Ken Adams") == "invoice-Ken_Adams.pdf"


def test_price_and_total_formats():
    assert format_price(Decimal("50")) == "$50"
    assert format_price(Decimal("42.50")) == "$42.5"
    assert format_total(Decimal("92.5")) == "$92.50"


def test_build_invoice():
    student = StudentFactory(name="Alice Smith", cost_per_lesson=Decimal("50"))
    check_ins = [
        CheckInFactory(student_id=student.id, lesson_type="Reading", lesson_cost=Decimal("50"), timestamp=utc_ms(2024, 3, 4, 10)),
        CheckInFactory(student_id=student.id, lesson_type="", lesson_cost=Decimal("42.5"), timestamp=utc_ms(2024, 3, 11, 10), active=False),
        CheckInFactory(student_id="someone-else"),
    ]

    invoice = build_invoice(student, check_ins, next_month_lessons=4)

    assert invoice.file_name == "invoice_Alice_Smith.pdf"
    assert invoice.class_label == "English"
    assert invoice.teacher_label == "Ken"
    # soft-deleted check-ins are billed too
    assert [line.lesson_type for line in invoice.lines] == ["Reading", "N/A"]
    assert [line.date for line in invoice.lines] == ["3/4/2024", "3/11/2024"]
    assert [line.price for line in invoice.lines] == ["$50", "$42.5"]
    assert invoice.total_amount == Decimal("92.5")
    assert invoice.total == "$92.50"
    assert invoice.projected_tuition == "$200.00"


def test_build_invoice_without_projection():
    invoice = build_invoice(StudentFactory(), [])
    assert invoice.lines == []
    assert invoice.total == "$0.00"
    assert invoice.projected_tuition is None


def test_render_invoice_pdf():
    student = StudentFactory(name="Alice Smith")
    # enough rows to spill onto a second page
    check_ins = [CheckInFactory(student_id=student.id) for _ in range(60)]

    content = render_invoice_pdf(build_invoice(student, check_ins, next_month_lessons=2))

    assert content.startswith(b"%PDF")
    assert len(content) > 1000


def test_render_teacher_invoice_pdf():
    assert render_teacher_invoice_pdf("Ken").startswith(b"%PDF")
