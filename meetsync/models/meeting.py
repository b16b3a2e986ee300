from datetime import date
from typing import Optional

from pydantic import BaseModel

from .enums import CourseType


class Meeting(BaseModel):
    """A canonical meeting imported from a qualifying-standards document.

    The name may embed a licence code ("... - 4NE252206") even when
    license_number is not set.
    """

    id: Optional[int] = None
    name: str
    license_number: Optional[str] = None
    live_meeting_id: Optional[int] = None


class MeetingRecord(BaseModel):
    """Normalized fields extracted from one listing row, before persistence."""

    meet_number: Optional[str] = None
    name: str
    region_name: Optional[str] = None
    county_name: Optional[str] = None
    city: Optional[str] = None
    venue: Optional[str] = None
    course_type: Optional[CourseType] = None  # Absent when the source doesn't say
    license_level: Optional[int] = None
    event_type: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    external_url: Optional[str] = None
