import asyncio
from datetime import date, timedelta
from typing import Awaitable, Callable, List, Optional

from loguru import logger
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from meetsync.config.settings import settings
from meetsync.models.enums import CourseType
from meetsync.models.live_meeting import LiveMeeting
from meetsync.models.meeting import MeetingRecord
from meetsync.models.outcomes import Outcome, ScrapeReport
from meetsync.normalization.extractor import Extractor
from meetsync.storage.store import LiveMeetingStore, StoreError
from .base_scraper import BaseScraper, FetchError, WorkUnit

Sleeper = Callable[[float], Awaitable[None]]


class ScrapeOrchestrator:
    """Drives a scraper across a date range and upserts what it extracts.

    Work units are processed one after another; a failure in one unit is
    logged and recorded, never raised, so a scrape always runs to the end.
    """

    def __init__(
        self,
        scraper: BaseScraper,
        store: LiveMeetingStore,
        extractor: Optional[Extractor] = None,
        rate_limit_seconds: Optional[float] = None,
        fetch_attempts: Optional[int] = None,
        sleep: Sleeper = asyncio.sleep,
        today: Callable[[], date] = date.today,
    ):
        self.scraper = scraper
        self.store = store
        self.extractor = extractor or Extractor()
        self.rate_limit_seconds = (
            settings.rate_limit_seconds
            if rate_limit_seconds is None
            else rate_limit_seconds
        )
        self.fetch_attempts = (
            settings.fetch_attempts if fetch_attempts is None else fetch_attempts
        )
        if self.fetch_attempts < 1:
            raise ValueError(
                f"fetch_attempts must be at least 1, got {self.fetch_attempts}"
            )
        self._sleep = sleep
        self._today = today

    async def scrape(self, start_date: date, end_date: date) -> ScrapeReport:
        """Scrapes the inclusive range and returns every outcome.

        Raises:
            ValueError: if the arguments aren't dates or the range is reversed.
        """
        if not isinstance(start_date, date) or not isinstance(end_date, date):
            raise ValueError("start_date and end_date must be dates")
        if start_date > end_date:
            raise ValueError(f"start_date {start_date} is after end_date {end_date}")

        source = self.scraper.source.value
        logger.info(f"Scraping {source} meetings from {start_date} to {end_date}")

        report = ScrapeReport()
        units = self.scraper.work_units(start_date, end_date)
        for position, unit in enumerate(units):
            try:
                report.outcomes.extend(await self._process_unit(unit))
            except FetchError as e:
                logger.error(f"Error scraping {source} meetings for {unit.page_date}: {e}")
                report.outcomes.append(Outcome.skipped(f"{unit.page_date}: {e}"))
            except Exception as e:
                logger.exception(
                    f"Unexpected error scraping {source} meetings for {unit.page_date}: {e}"
                )
                report.outcomes.append(Outcome.skipped(f"{unit.page_date}: {e}"))

            # Rate limiting between successive fetches
            if position < len(units) - 1 and self.rate_limit_seconds > 0:
                await self._sleep(self.rate_limit_seconds)

        logger.info(
            f"Scraped {len(report.meetings)} meetings from {source} "
            f"({len(report.skipped)} skipped)"
        )
        if report.all_skipped:
            logger.warning(f"Every unit of the {source} scrape was skipped")
        return report

    async def scrape_meetings(self, start_date: date, end_date: date) -> List[LiveMeeting]:
        """Created or updated live meetings for the inclusive date range."""
        report = await self.scrape(start_date, end_date)
        return report.meetings

    async def refresh_upcoming_meetings(self) -> int:
        """Scrapes today through the refresh window; returns how many meetings were saved."""
        start_date = self._today()
        end_date = start_date + timedelta(days=settings.refresh_window_days)
        meetings = await self.scrape_meetings(start_date, end_date)
        return len(meetings)

    async def _fetch(self, url: str) -> str:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.fetch_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type(FetchError),
            sleep=self._sleep,
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(
                        f"Retrying fetch of {url} (attempt {attempt.retry_state.attempt_number})"
                    )
                return await self.scraper.fetch_page(url)

    async def _process_unit(self, unit: WorkUnit) -> List[Outcome]:
        html = await self._fetch(unit.url)
        row_outcomes = await self.extractor.extract(
            html, unit.page_date, self.scraper.config, store=self.store
        )

        outcomes: List[Outcome] = []
        for row_outcome in row_outcomes:
            if not row_outcome.is_ok:
                outcomes.append(row_outcome)
                continue
            record: MeetingRecord = row_outcome.value
            meeting = await self.upsert_meeting(record)
            if meeting is None:
                outcomes.append(Outcome.skipped(f"failed to save: {record.name}"))
            else:
                outcomes.append(Outcome.ok(meeting))
        return outcomes

    async def upsert_meeting(self, record: MeetingRecord) -> Optional[LiveMeeting]:
        """Creates or overwrites the live meeting matching the record.

        Identity is meet_number when present, otherwise (name, start_date).
        Validation and store failures are logged and yield None.
        """
        if not record.name or not record.name.strip():
            return None

        try:
            region = (
                await self.store.find_region_by_name(record.region_name)
                if record.region_name
                else None
            )
            county = (
                await self.store.find_county_by_name(record.county_name, region.id)
                if record.county_name and region
                else None
            )

            if record.meet_number:
                existing = await self.store.find_by_meet_number(record.meet_number)
            else:
                existing = await self.store.find_by_name_and_date(
                    record.name, record.start_date
                )

            fields = {
                "name": record.name,
                "region_id": region.id if region else None,
                "county_id": county.id if county else None,
                "city": record.city,
                "venue": record.venue,
                "course_type": record.course_type or CourseType.SHORT,
                "license_level": record.license_level,
                "start_date": record.start_date,
                "external_url": record.external_url,
            }
            # Keep the stored end date unless the listing gives one
            if record.end_date is not None:
                fields["end_date"] = record.end_date

            if existing:
                meeting = LiveMeeting.model_validate(
                    {**existing.model_dump(exclude={"course_type_display"}), **fields}
                )
            else:
                meeting = LiveMeeting(meet_number=record.meet_number, **fields)

            saved = await self.store.save(meeting)
        except ValidationError as e:
            logger.error(f"Failed to save meeting '{record.name}': {e}")
            return None
        except StoreError as e:
            logger.error(f"Failed to save meeting '{record.name}': {e}")
            return None

        action = "Updated" if existing else "Created"
        logger.info(f"{action} meeting: {saved.name} on {saved.start_date}")
        return saved
