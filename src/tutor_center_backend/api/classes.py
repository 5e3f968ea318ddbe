'''
API endpoints for class definitions.
'''
from typing import Annotated, Any
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from ..common.exceptions import ClassValidationError, PersistenceError
from ..common.logger import log
from ..models import classes as class_models
from ..services.class_service import MISSING_FIELDS_MESSAGE, ClassService
from ..services.scheduler_service import SchedulerService


class ClassesAPI:
    """
    A class to encapsulate endpoints for Classes.

    The creation endpoint keeps its flat JSON contract ({"success": true} or
    {"error": ...}) since the scheduler page posts to it directly.
    """
    def __init__(self):
        self.router = APIRouter(tags=["Classes"])
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
            "/api/classes",
            self.create_class,
            methods=["POST"],
            response_class=JSONResponse)
        self.router.add_api_route(
            "/classes",
            self.list_classes,
            methods=["GET"],
            response_model=list[class_models.ClassListRow])

    async def create_class(
        self,
        request: Request,
        class_service: Annotated[ClassService, Depends(ClassService)]
    ) -> JSONResponse:
        try:
            data = await request.json()
        except ValueError:
            log.warning("Rejected class creation request with a body that is not JSON.")
            return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": MISSING_FIELDS_MESSAGE})

        try:
            await class_service.create_class_from_payload(data)
        except ClassValidationError as e:
            return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(e)})
        except PersistenceError as e:
            log.error(f"Error creating class: {e}")
            return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": "Failed to create class"})
        return JSONResponse(status_code=status.HTTP_200_OK, content={"success": True})

    async def list_classes(
        self,
        scheduler: Annotated[SchedulerService, Depends(SchedulerService)]
    ) -> list[Any]:
        """
        Every class with its weekly schedule and enrolled student names.
        """
        async with scheduler:
            return scheduler.class_rows


# Instantiate the class and export its router
classes_api = ClassesAPI()
router = classes_api.router
