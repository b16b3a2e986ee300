from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from meetsync.config.settings import AppSettings, settings
from meetsync.models.enums import MeetingSource


class SourceConfig(BaseModel):
    """Describes where a meeting listing lives and how its table is laid out.

    Selectors and column positions are configuration because the source
    markup can change without notice.
    """

    model_config = ConfigDict(frozen=True)

    source: MeetingSource
    base_url: str
    # May contain a "{date}" placeholder (YYYY-MM-DD) for date-partitioned sites
    listing_path: str
    row_selector: str = "table tr"
    cell_selector: str = "td"
    header_rows: int = Field(0, ge=0)
    date_partitioned: bool = True
    # Skip deep parsing of rows that are already in the store
    check_existing: bool = False
    # Field name -> cell index
    columns: Dict[str, int] = Field(default_factory=dict)

    def listing_url(self, date_text: Optional[str] = None) -> str:
        path = self.listing_path
        if date_text is not None:
            path = path.format(date=date_text)
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"


def swimming_results_source(app_settings: AppSettings = settings) -> SourceConfig:
    """Licensed meets page: one table listing every upcoming meet."""
    return SourceConfig(
        source=MeetingSource.SWIMMING_RESULTS,
        base_url=app_settings.swimming_results_base_url,
        listing_path="/licensed_meets/",
        row_selector="table tr",
        header_rows=1,
        date_partitioned=False,
        check_existing=True,
        columns={"date": 0, "name": 1, "country": 2, "details": 3},
    )


def streaming_results_source(app_settings: AppSettings = settings) -> SourceConfig:
    """Per-day listing page with one meeting per row."""
    return SourceConfig(
        source=MeetingSource.STREAMING_RESULTS,
        base_url=app_settings.streaming_results_base_url,
        listing_path="/meetings?date={date}",
        row_selector="table tr.meeting-row",
        header_rows=0,
        date_partitioned=True,
        check_existing=False,
        columns={
            "meet_number": 0,
            "name": 1,
            "region": 2,
            "city": 3,
            "venue": 4,
            "course_type": 5,
            "license_level": 6,
        },
    )


def get_source_config(source: MeetingSource) -> SourceConfig:
    if source == MeetingSource.SWIMMING_RESULTS:
        return swimming_results_source()
    if source == MeetingSource.STREAMING_RESULTS:
        return streaming_results_source()
    raise ValueError(f"No source configuration for {source!r}")
