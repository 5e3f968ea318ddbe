'''
API endpoints for manual check-ins and their soft deletion.
'''
from typing import Annotated, Any
from fastapi import APIRouter, Depends, HTTPException, status

from ..common.exceptions import CheckInNotFoundError, FormValidationError, PersistenceError
from ..models import check_ins as check_in_models
from ..services.roster_service import RosterService


class CheckInsAPI:
    """
    A class to encapsulate endpoints for Check-ins.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/check-ins",
            tags=["Check-ins"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
            "/",
            self.list_check_ins,
            methods=["GET"],
            response_model=list[check_in_models.CheckInRow])
        self.router.add_api_route(
            "/",
            self.create_check_in,
            methods=["POST"],
            status_code=status.HTTP_201_CREATED,
            response_model=check_in_models.CheckIn)
        self.router.add_api_route(
            "/deleted",
            self.list_deleted_check_ins,
            methods=["GET"],
            response_model=list[check_in_models.CheckIn])
        self.router.add_api_route(
            "/{check_in_id}/void",
            self.void_check_in,
            methods=["PATCH"],
            response_model=check_in_models.CheckIn)
        self.router.add_api_route(
            "/{check_in_id}/restore",
            self.restore_check_in,
            methods=["PATCH"],
            response_model=check_in_models.CheckIn)

    async def list_check_ins(
        self,
        roster: Annotated[RosterService, Depends(RosterService)]
    ) -> list[Any]:
        """
        Active check-ins joined with their student's name and session of day.
        Check-ins whose student no longer exists are left out.
        """
        async with roster:
            return roster.check_in_rows

    async def create_check_in(
        self,
        form: check_in_models.CheckInForm,
        roster: Annotated[RosterService, Depends(RosterService)]
    ) -> Any:
        async with roster:
            try:
                check_in_id = await roster.add_check_in(form)
            except FormValidationError as e:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
            except PersistenceError:
                raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=roster.error)
            return roster.get_check_in(check_in_id)

    async def list_deleted_check_ins(
        self,
        roster: Annotated[RosterService, Depends(RosterService)]
    ) -> list[Any]:
        async with roster:
            return roster.recently_deleted

    async def _toggle(self, roster: RosterService, check_in_id: str, active: bool) -> Any:
        async with roster:
            try:
                if active:
                    await roster.undo_delete_check_in(check_in_id)
                else:
                    await roster.delete_check_in(check_in_id)
                return roster.get_check_in(check_in_id)
            except CheckInNotFoundError:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Check-in not found.")
            except PersistenceError:
                raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=roster.error)

    async def void_check_in(
        self,
        check_in_id: str,
        roster: Annotated[RosterService, Depends(RosterService)]
    ) -> Any:
        """
        Soft-deletes a check-in. It stays in the student's history and billing.
        """
        return await self._toggle(roster, check_in_id, active=False)

    async def restore_check_in(
        self,
        check_in_id: str,
        roster: Annotated[RosterService, Depends(RosterService)]
    ) -> Any:
        return await self._toggle(roster, check_in_id, active=True)


# Instantiate the class and export its router
check_ins_api = CheckInsAPI()
router = check_ins_api.router
