"""
Holiday calendar endpoints
Resolved holiday dates for the intake UI (read-only, no authentication)
"""

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel

from ..domain.calendar import holidays

router = APIRouter(prefix="/holidays", tags=["Holidays"])


class HolidayDate(BaseModel):
    occasionType: str
    occasionDate: date


@router.get("", response_model=list[HolidayDate])
async def list_holidays(year: Optional[int] = Query(None, ge=1900, le=2200)):
    """All supported holidays for a year (defaults to the current year)"""
    year = year or datetime.utcnow().year
    return [
        HolidayDate(occasionType=h.value, occasionDate=d) for h, d in holidays.holidays_for_year(year)
    ]


@router.get("/upcoming", response_model=list[HolidayDate])
async def list_upcoming_holidays(
    count: int = Query(3, ge=1, le=20),
    from_date: Optional[date] = Query(None, description="Defaults to today (UTC)"),
):
    """The next few holidays on or after a date"""
    reference = from_date or datetime.utcnow().date()
    return [
        HolidayDate(occasionType=h.value, occasionDate=d)
        for h, d in holidays.upcoming_holidays(reference, count)
    ]
