'''
API endpoint for the month calendar.
'''
from datetime import date
from typing import Annotated, Any, Optional
from fastapi import APIRouter, Depends, Query

from ..models import calendar as calendar_models
from ..services.calendar_service import CalendarService


class CalendarAPI:
    """
    A class to encapsulate the Calendar endpoint.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/calendar",
            tags=["Calendar"]
        )
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route(
            "/",
            self.get_month,
            methods=["GET"],
            response_model=calendar_models.CalendarMonth)

    async def get_month(
        self,
        calendar: Annotated[CalendarService, Depends(CalendarService)],
        year: Annotated[Optional[int], Query(ge=1, le=9999)] = None,
        month: Annotated[Optional[int], Query(ge=1, le=12)] = None,
        selected: Annotated[Optional[date], Query(description="Day whose classes and check-ins are listed")] = None
    ) -> Any:
        """
        Returns the day markers for a month plus the class occurrences and
        check-ins of the selected day. Defaults to the current month and today.
        """
        async with calendar:
            return calendar.month_view(year, month, selected)


# Instantiate the class and export its router
calendar_api = CalendarAPI()
router = calendar_api.router
