'''
API endpoint for the roster dashboard figures.
'''
from datetime import date
from typing import Annotated, Any, Optional
from fastapi import APIRouter, Depends, Query

from ..models import students as student_models
from ..services.roster_service import RosterService


class DashboardAPI:
    """
    A class to encapsulate the Dashboard endpoint.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/dashboard",
            tags=["Dashboard"]
        )
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route(
            "/",
            self.get_dashboard,
            methods=["GET"],
            response_model=student_models.DashboardStats)

    async def get_dashboard(
        self,
        roster: Annotated[RosterService, Depends(RosterService)],
        reference_day: Annotated[Optional[date], Query(description="Day whose month is counted; defaults to today")] = None
    ) -> Any:
        """
        Roster totals shown above the student table.
        """
        async with roster:
            return roster.dashboard(reference_day)


# Instantiate the class and export its router
dashboard_api = DashboardAPI()
router = dashboard_api.router
