from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional

import httpx
from loguru import logger

from meetsync.config.settings import settings
from meetsync.config.sources import SourceConfig
from meetsync.models.enums import MeetingSource


class ScraperError(Exception):
    """Custom exception for scraper-related errors."""

    pass


class FetchError(ScraperError):
    """A page could not be fetched: non-2xx status or transport failure."""

    def __init__(
        self, message: str, url: Optional[str] = None, status_code: Optional[int] = None
    ):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ExtractionError(ScraperError):
    """A listing row does not carry the fields needed to build a record."""

    pass


@dataclass(frozen=True)
class WorkUnit:
    """One page to fetch, and the date its rows belong to."""

    url: str
    page_date: date


class BaseScraper(ABC):
    """Abstract base class for meeting listing scrapers."""

    source: MeetingSource

    def __init__(
        self,
        config: Optional[SourceConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or self.default_config()
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.request_timeout),
            follow_redirects=True,
            headers={
                "User-Agent": settings.user_agent,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "en-GB,en;q=0.9",
            },
        )

    @abstractmethod
    def default_config(self) -> SourceConfig:
        """Source layout used when none is supplied."""
        pass

    def work_units(self, start_date: date, end_date: date) -> List[WorkUnit]:
        """Pages that together cover the inclusive date range.

        Date-partitioned sources get one page per day; otherwise a single
        fetch of the listing covers the whole range.
        """
        if not self.config.date_partitioned:
            return [WorkUnit(url=self.config.listing_url(), page_date=start_date)]

        units = []
        current = start_date
        while current <= end_date:
            units.append(
                WorkUnit(
                    url=self.config.listing_url(current.isoformat()),
                    page_date=current,
                )
            )
            current += timedelta(days=1)
        return units

    async def fetch_page(self, url: str) -> str:
        """GETs a page, following redirects. No retries at this layer.

        Raises:
            FetchError: on a non-2xx response or any transport failure.
        """
        logger.debug(f"Fetching {url} for {self.source.value}")
        try:
            response = await self.client.get(url)
        except httpx.RequestError as e:
            logger.warning(f"Network error fetching {url}: {e}")
            raise FetchError(f"Network error: {e}", url=url) from e

        if not response.is_success:
            logger.warning(f"HTTP {response.status_code} fetching {url}")
            raise FetchError(
                f"Failed to fetch {url}: HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )

        logger.debug(f"Fetched {url}: {response.status_code}, {len(response.text)} chars")
        return response.text

    async def close(self):
        """Closes the underlying HTTP client."""
        await self.client.aclose()
        logger.debug(f"Closed HTTP client for {self.source.value}")
