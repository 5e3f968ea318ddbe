'''
API endpoints for the student roster, billing figures and invoices.
'''
from typing import Annotated, Any, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ..common.exceptions import FormValidationError, PersistenceError, StudentNotFoundError
from ..core.invoice import render_invoice_pdf
from ..models import check_ins as check_in_models
from ..models import invoice as invoice_models
from ..models import students as student_models
from ..services.roster_service import RosterService


class StudentsAPI:
    """
    A class to encapsulate endpoints for Students.
    Every handler mounts the roster view for the duration of the request.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/students",
            tags=["Students"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
            "/",
            self.list_students,
            methods=["GET"],
            response_model=list[student_models.StudentWithStats])
        self.router.add_api_route(
            "/",
            self.create_student,
            methods=["POST"],
            status_code=status.HTTP_201_CREATED,
            response_model=student_models.StudentWithStats)
        self.router.add_api_route(
            "/{student_id}",
            self.get_student,
            methods=["GET"],
            response_model=student_models.StudentWithStats)
        self.router.add_api_route(
            "/{student_id}",
            self.update_student,
            methods=["PATCH"],
            response_model=student_models.StudentWithStats)
        self.router.add_api_route(
            "/{student_id}/check-ins",
            self.list_student_check_ins,
            methods=["GET"],
            response_model=list[check_in_models.CheckIn])
        self.router.add_api_route(
            "/{student_id}/invoice/preview",
            self.preview_invoice,
            methods=["GET"],
            response_model=invoice_models.Invoice)
        self.router.add_api_route(
            "/{student_id}/invoice",
            self.download_invoice,
            methods=["GET"],
            response_class=Response)

    async def list_students(
        self,
        roster: Annotated[RosterService, Depends(RosterService)],
        search: Annotated[str, Query(description="Case-insensitive match on name or email")] = ""
    ) -> list[Any]:
        """
        Lists well-formed students with their completed lessons and amount owed.
        """
        async with roster:
            return roster.search(search)

    async def create_student(
        self,
        student_data: student_models.StudentCreate,
        roster: Annotated[RosterService, Depends(RosterService)]
    ) -> Any:
        async with roster:
            try:
                student_id = await roster.add_student(student_data)
            except FormValidationError as e:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
            except PersistenceError:
                raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=roster.error)
            return roster.get_student(student_id)

    async def get_student(
        self,
        student_id: str,
        roster: Annotated[RosterService, Depends(RosterService)]
    ) -> Any:
        async with roster:
            try:
                return roster.get_student(student_id)
            except StudentNotFoundError:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found.")

    async def update_student(
        self,
        student_id: str,
        fields: student_models.StudentUpdate,
        roster: Annotated[RosterService, Depends(RosterService)]
    ) -> Any:
        """
        Partially updates a student. Only the fields present in the body are written.
        """
        async with roster:
            try:
                await roster.update_student(student_id, fields)
                return roster.get_student(student_id)
            except StudentNotFoundError:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found.")
            except PersistenceError:
                raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=roster.error)

    async def list_student_check_ins(
        self,
        student_id: str,
        roster: Annotated[RosterService, Depends(RosterService)]
    ) -> list[Any]:
        """
        The student's full check-in history, soft-deleted entries included.
        """
        async with roster:
            try:
                return roster.check_ins_of(student_id)
            except StudentNotFoundError:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found.")

    async def preview_invoice(
        self,
        student_id: str,
        roster: Annotated[RosterService, Depends(RosterService)],
        next_month_lessons: Annotated[Optional[int], Query(ge=0)] = None
    ) -> Any:
        async with roster:
            try:
                return roster.invoice(student_id, next_month_lessons)
            except StudentNotFoundError:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found.")

    async def download_invoice(
        self,
        student_id: str,
        roster: Annotated[RosterService, Depends(RosterService)],
        next_month_lessons: Annotated[Optional[int], Query(ge=0)] = None
    ) -> Response:
        """
        Renders the student's invoice as a PDF attachment. Nothing is stored.
        """
        async with roster:
            try:
                invoice = roster.invoice(student_id, next_month_lessons)
            except StudentNotFoundError:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found.")
        return Response(
            content=render_invoice_pdf(invoice),
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{invoice.file_name}"'}
        )


# Instantiate the class and export its router
students_api = StudentsAPI()
router = students_api.router
