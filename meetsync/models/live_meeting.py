from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, computed_field, field_validator

from .enums import CourseType


class LiveMeeting(BaseModel):
    """A meeting scraped from an external listing site."""

    id: Optional[int] = None  # Assigned by the store on first save
    meet_number: Optional[str] = None  # External licence/entry code, unique
    name: str = Field(..., min_length=1)
    region_id: Optional[int] = None
    county_id: Optional[int] = None
    city: Optional[str] = None
    venue: Optional[str] = None
    course_type: CourseType = CourseType.SHORT
    license_level: Optional[int] = None
    start_date: date
    end_date: Optional[date] = None
    external_url: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("meet_number")
    @classmethod
    def blank_meet_number_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @computed_field  # type: ignore[misc]
    @property
    def course_type_display(self) -> str:
        if self.course_type == CourseType.SHORT:
            return "25m (Short Course)"
        return "50m (Long Course)"

    def is_ongoing(self, on: Optional[date] = None) -> bool:
        """True if the meeting has started and not yet finished on the given day."""
        on = on or date.today()
        return self.start_date <= on and (self.end_date is None or self.end_date >= on)
