# meetsync/scrapers/swimming_results_scraper.py

from meetsync.config.sources import SourceConfig, swimming_results_source
from meetsync.models.enums import MeetingSource
from .base_scraper import BaseScraper


class SwimmingResultsScraper(BaseScraper):
    """Scraper for the licensed meets listing.

    The listing is not date-partitioned: one page lists every upcoming
    licensed meet, each row carrying its own date, name link and a details
    blob ("North East RegionShort CourseLevel 4Club").
    """

    source: MeetingSource = MeetingSource.SWIMMING_RESULTS

    def default_config(self) -> SourceConfig:
        return swimming_results_source()
