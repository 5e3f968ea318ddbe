'''
API endpoints for teachers and classrooms.
'''
from typing import Annotated, Any
from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..common.exceptions import PersistenceError, TeacherNotFoundError
from ..models import directory as directory_models
from ..services.directory_service import DirectoryService


class TeachersAPI:
    """
    A class to encapsulate endpoints for Teachers.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/teachers",
            tags=["Teachers"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
            "/",
            self.list_teachers,
            methods=["GET"],
            response_model=list[directory_models.Teacher])
        self.router.add_api_route(
            "/",
            self.create_teacher,
            methods=["POST"],
            status_code=status.HTTP_201_CREATED,
            response_model=directory_models.Teacher)
        self.router.add_api_route(
            "/{teacher_id}/invoice",
            self.download_invoice,
            methods=["GET"],
            response_class=Response)

    async def list_teachers(
        self,
        directory_service: Annotated[DirectoryService, Depends(DirectoryService)]
    ) -> list[Any]:
        try:
            return await directory_service.list_teachers()
        except PersistenceError:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to load teachers")

    async def create_teacher(
        self,
        teacher_data: directory_models.TeacherCreate,
        directory_service: Annotated[DirectoryService, Depends(DirectoryService)]
    ) -> Any:
        try:
            return await directory_service.add_teacher(teacher_data)
        except PersistenceError:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to add teacher")

    async def download_invoice(
        self,
        teacher_id: str,
        directory_service: Annotated[DirectoryService, Depends(DirectoryService)]
    ) -> Response:
        """
        Renders the one-page teacher invoice as a PDF attachment.
        """
        try:
            file_name, content = await directory_service.teacher_invoice(teacher_id)
        except TeacherNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found.")
        return Response(
            content=content,
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{file_name}"'}
        )


class ClassroomsAPI:
    """
    A class to encapsulate endpoints for Classrooms.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/classrooms",
            tags=["Classrooms"]
        )
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route(
            "/",
            self.list_classrooms,
            methods=["GET"],
            response_model=list[directory_models.Classroom])
        self.router.add_api_route(
            "/",
            self.create_classroom,
            methods=["POST"],
            status_code=status.HTTP_201_CREATED,
            response_model=directory_models.Classroom)

    async def list_classrooms(
        self,
        directory_service: Annotated[DirectoryService, Depends(DirectoryService)]
    ) -> list[Any]:
        try:
            return await directory_service.list_classrooms()
        except PersistenceError:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to load classrooms")

    async def create_classroom(
        self,
        classroom_data: directory_models.ClassroomCreate,
        directory_service: Annotated[DirectoryService, Depends(DirectoryService)]
    ) -> Any:
        try:
            return await directory_service.add_classroom(classroom_data)
        except PersistenceError:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to add classroom")


# Instantiate the classes and export their routers
teachers_api = TeachersAPI()
classrooms_api = ClassroomsAPI()
teachers_router = teachers_api.router
classrooms_router = classrooms_api.router
