# meetsync/scrapers/streaming_results_scraper.py

from meetsync.config.sources import SourceConfig, streaming_results_source
from meetsync.models.enums import MeetingSource
from .base_scraper import BaseScraper


class StreamingResultsScraper(BaseScraper):
    """Scraper for the per-day meeting listing (one page per date)."""

    source: MeetingSource = MeetingSource.STREAMING_RESULTS

    def default_config(self) -> SourceConfig:
        return streaming_results_source()
