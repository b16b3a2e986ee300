# meetsync/storage/supabase_client.py
from datetime import date
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger
from postgrest import APIResponse
from postgrest.exceptions import APIError
from pydantic import ValidationError
from supabase import AsyncClient, create_async_client

from meetsync.config.settings import settings
from meetsync.models.live_meeting import LiveMeeting
from meetsync.models.region import County, Region
from .store import LiveMeetingStore, StoreError

# Module-level storage for the async client instance
_async_supabase_client: Optional[AsyncClient] = None


async def initialize_supabase() -> Optional[AsyncClient]:
    """Initializes the global ASYNC Supabase client and returns it."""
    global _async_supabase_client
    if _async_supabase_client:
        logger.debug("Async Supabase client already initialized.")
        return _async_supabase_client

    if not settings.supabase_configured:
        logger.error("Supabase URL or Key not configured in settings.")
        return None

    logger.debug(
        f"Attempting to initialize Async Supabase client with URL: {settings.supabase_url}"
    )
    try:
        client: AsyncClient = await create_async_client(
            str(settings.supabase_url), settings.supabase_key
        )
        _async_supabase_client = client
        logger.success("Async Supabase client initialized successfully.")
        return client
    except Exception as e:
        logger.exception(f"Failed to initialize Async Supabase client: {e}")
        return None


class SupabaseLiveMeetingStore(LiveMeetingStore):
    """Live meeting store backed by the Supabase (PostgREST) tables."""

    def __init__(
        self,
        client: AsyncClient,
        meetings_table: str = settings.live_meetings_table,
        regions_table: str = settings.regions_table,
        counties_table: str = settings.counties_table,
    ):
        self.client = client
        self.meetings_table = meetings_table
        self.regions_table = regions_table
        self.counties_table = counties_table

    async def _execute(self, query, description: str) -> List[Dict[str, Any]]:
        try:
            response: APIResponse = await query.execute()
        except APIError as e:
            logger.error(f"Supabase error during {description}: {e.message}")
            logger.debug(f"Full APIError details: {e}")
            raise StoreError(f"{description} failed: {e.message}") from e
        except httpx.HTTPError as e:
            logger.error(f"Connection error during {description}: {e}")
            raise StoreError(f"{description} failed: {e}") from e
        return response.data or []

    def _meetings(self):
        return self.client.table(self.meetings_table)

    @staticmethod
    def _to_meeting(rows: List[Dict[str, Any]]) -> Optional[LiveMeeting]:
        if not rows:
            return None
        try:
            return LiveMeeting.model_validate(rows[0])
        except ValidationError as e:
            raise StoreError(f"Stored live meeting row is invalid: {e}") from e

    async def find_by_meet_number(self, meet_number: str) -> Optional[LiveMeeting]:
        rows = await self._execute(
            self._meetings().select("*").eq("meet_number", meet_number).limit(1),
            "find by meet_number",
        )
        return self._to_meeting(rows)

    async def find_by_name_and_date(
        self, name: str, start_date: date
    ) -> Optional[LiveMeeting]:
        rows = await self._execute(
            self._meetings()
            .select("*")
            .eq("name", name)
            .eq("start_date", start_date.isoformat())
            .limit(1),
            "find by name and start_date",
        )
        return self._to_meeting(rows)

    async def find_by_name_containing(self, fragment: str) -> Optional[LiveMeeting]:
        rows = await self._execute(
            self._meetings()
            .select("*")
            .like("name", f"%{fragment}%")
            .order("id")
            .limit(1),
            "find by name fragment",
        )
        return self._to_meeting(rows)

    async def exists(
        self,
        meet_number: Optional[str] = None,
        name: Optional[str] = None,
        start_date: Optional[date] = None,
    ) -> bool:
        query = self._meetings().select("id")
        if meet_number:
            query = query.eq("meet_number", meet_number)
        elif name and start_date:
            query = query.eq("name", name).eq("start_date", start_date.isoformat())
        else:
            return False
        rows = await self._execute(query.limit(1), "existence check")
        return bool(rows)

    async def save(self, meeting: LiveMeeting) -> LiveMeeting:
        data = meeting.model_dump(
            mode="json", exclude={"id", "course_type_display"}
        )
        if meeting.id is None:
            rows = await self._execute(self._meetings().insert(data), "insert")
        else:
            rows = await self._execute(
                self._meetings().update(data).eq("id", meeting.id), "update"
            )
        saved = self._to_meeting(rows)
        if saved is None:
            raise StoreError(f"Save of live meeting '{meeting.name}' returned no row")
        logger.debug(f"Saved live meeting {saved.id} to {self.meetings_table}")
        return saved

    async def find_region_by_name(self, name: str) -> Optional[Region]:
        rows = await self._execute(
            self.client.table(self.regions_table).select("*").eq("name", name).limit(1),
            "region lookup",
        )
        return Region.model_validate(rows[0]) if rows else None

    async def find_county_by_name(self, name: str, region_id: int) -> Optional[County]:
        rows = await self._execute(
            self.client.table(self.counties_table)
            .select("*")
            .eq("name", name)
            .eq("region_id", region_id)
            .limit(1),
            "county lookup",
        )
        return County.model_validate(rows[0]) if rows else None

    async def upcoming(
        self, from_date: date, region_id: Optional[int] = None
    ) -> List[LiveMeeting]:
        query = self._meetings().select("*").gte("start_date", from_date.isoformat())
        if region_id is not None:
            query = query.eq("region_id", region_id)
        rows = await self._execute(query.order("start_date"), "upcoming meetings")
        return [LiveMeeting.model_validate(row) for row in rows]
