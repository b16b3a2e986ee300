from abc import ABC, abstractmethod
from datetime import date
from typing import Dict, List, Optional

from loguru import logger

from meetsync.models.live_meeting import LiveMeeting
from meetsync.models.region import County, Region, seed_regions


class StoreError(Exception):
    """Persistence failure, e.g. a meet_number uniqueness conflict."""

    pass


class LiveMeetingStore(ABC):
    """Key-addressable record store for live meetings and region reference data."""

    @abstractmethod
    async def find_by_meet_number(self, meet_number: str) -> Optional[LiveMeeting]:
        pass

    @abstractmethod
    async def find_by_name_and_date(
        self, name: str, start_date: date
    ) -> Optional[LiveMeeting]:
        pass

    @abstractmethod
    async def find_by_name_containing(self, fragment: str) -> Optional[LiveMeeting]:
        """First meeting (lowest id) whose name contains the fragment."""
        pass

    @abstractmethod
    async def save(self, meeting: LiveMeeting) -> LiveMeeting:
        """Creates the meeting (id None) or updates it in place; returns the stored copy."""
        pass

    @abstractmethod
    async def find_region_by_name(self, name: str) -> Optional[Region]:
        pass

    @abstractmethod
    async def find_county_by_name(self, name: str, region_id: int) -> Optional[County]:
        pass

    @abstractmethod
    async def upcoming(
        self, from_date: date, region_id: Optional[int] = None
    ) -> List[LiveMeeting]:
        """Meetings starting on or after from_date, ordered by start date."""
        pass

    async def exists(
        self,
        meet_number: Optional[str] = None,
        name: Optional[str] = None,
        start_date: Optional[date] = None,
    ) -> bool:
        """True if a meeting with this meet_number (or name + start_date) is stored."""
        if meet_number:
            return await self.find_by_meet_number(meet_number) is not None
        if name and start_date:
            return await self.find_by_name_and_date(name, start_date) is not None
        return False


class InMemoryLiveMeetingStore(LiveMeetingStore):
    """Dict-backed store seeded with the known regions; used for tests and dry runs."""

    def __init__(self, seed: bool = True):
        self._meetings: Dict[int, LiveMeeting] = {}
        self._next_id = 1
        self.regions: List[Region] = []
        self.counties: List[County] = []
        if seed:
            self.regions, self.counties = seed_regions()

    @property
    def meetings(self) -> List[LiveMeeting]:
        return [self._meetings[k] for k in sorted(self._meetings)]

    async def find_by_meet_number(self, meet_number: str) -> Optional[LiveMeeting]:
        return next((m for m in self.meetings if m.meet_number == meet_number), None)

    async def find_by_name_and_date(
        self, name: str, start_date: date
    ) -> Optional[LiveMeeting]:
        return next(
            (
                m
                for m in self.meetings
                if m.name == name and m.start_date == start_date
            ),
            None,
        )

    async def find_by_name_containing(self, fragment: str) -> Optional[LiveMeeting]:
        return next((m for m in self.meetings if fragment in m.name), None)

    async def save(self, meeting: LiveMeeting) -> LiveMeeting:
        if meeting.meet_number:
            clash = await self.find_by_meet_number(meeting.meet_number)
            if clash and clash.id != meeting.id:
                raise StoreError(
                    f"Meet number {meeting.meet_number} has already been taken"
                )

        if meeting.id is None:
            meeting = meeting.model_copy(update={"id": self._next_id})
            self._next_id += 1
        elif meeting.id not in self._meetings:
            raise StoreError(f"No live meeting with id {meeting.id}")

        self._meetings[meeting.id] = meeting
        logger.debug(f"Stored live meeting {meeting.id}: {meeting.name}")
        return meeting

    async def find_region_by_name(self, name: str) -> Optional[Region]:
        return next((r for r in self.regions if r.name == name), None)

    async def find_county_by_name(self, name: str, region_id: int) -> Optional[County]:
        return next(
            (c for c in self.counties if c.name == name and c.region_id == region_id),
            None,
        )

    async def upcoming(
        self, from_date: date, region_id: Optional[int] = None
    ) -> List[LiveMeeting]:
        found = [
            m
            for m in self.meetings
            if m.start_date >= from_date
            and (region_id is None or m.region_id == region_id)
        ]
        return sorted(found, key=lambda m: m.start_date)
