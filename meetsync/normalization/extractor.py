from datetime import date
from typing import Callable, Dict, List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag
from loguru import logger

from meetsync.config.sources import SourceConfig
from meetsync.models.enums import MeetingSource
from meetsync.models.meeting import MeetingRecord
from meetsync.models.outcomes import Outcome
from meetsync.normalization.parsers import (
    extract_meet_number,
    parse_course_type,
    parse_date,
    parse_license_level,
    parse_meeting_details,
)
from meetsync.scrapers.base_scraper import ExtractionError
from meetsync.storage.store import LiveMeetingStore
from meetsync.utils.misc_utils import absolute_url, clean_text

ALREADY_STORED = "already stored"


class Extractor:
    """Turns a fetched listing page into normalized meeting records."""

    def __init__(self):
        self._row_parsers: Dict[MeetingSource, Callable] = {
            MeetingSource.SWIMMING_RESULTS: self._extract_licensed_meet_row,
            MeetingSource.STREAMING_RESULTS: self._extract_daily_listing_row,
        }

    async def extract(
        self,
        html: str,
        page_date: date,
        config: SourceConfig,
        store: Optional[LiveMeetingStore] = None,
    ) -> List[Outcome]:
        """Extracts one outcome per listing row.

        Args:
            html: The fetched page body.
            page_date: The date the page was fetched for (used by sources whose
                rows don't carry a date).
            config: Layout of the source (row selector, header rows, columns).
            store: When given and the source asks for it, rows already in the
                store are skipped before their details are parsed.

        Returns:
            A list of Outcome objects: ok with a MeetingRecord, or skipped with
            the reason. A bad row never stops the remaining rows.
        """
        row_parser = self._row_parsers.get(config.source)
        if row_parser is None:
            raise ValueError(f"Extraction not implemented for source: {config.source}")

        soup = BeautifulSoup(html, "html.parser")
        rows = soup.select(config.row_selector)[config.header_rows :]
        logger.debug(
            f"Found {len(rows)} candidate rows for {config.source.value} on {page_date}"
        )

        outcomes: List[Outcome] = []
        for index, row in enumerate(rows):
            try:
                cells = row.select(config.cell_selector)
                outcomes.append(await row_parser(row, cells, page_date, config, store))
            except ExtractionError as e:
                logger.debug(f"Skipping row {index}: {e}")
                outcomes.append(Outcome.skipped(f"row {index}: {e}"))
            except Exception as e:
                logger.warning(f"Failed to extract meeting data from row {index}: {e}")
                outcomes.append(Outcome.skipped(f"row {index}: {e}"))

        extracted = sum(1 for o in outcomes if o.is_ok)
        logger.info(
            f"Extracted {extracted} of {len(outcomes)} rows for {config.source.value} ({page_date})"
        )
        return outcomes

    async def _extract_licensed_meet_row(
        self,
        row: Tag,
        cells: List[Tag],
        page_date: date,
        config: SourceConfig,
        store: Optional[LiveMeetingStore],
    ) -> Outcome:
        """Row layout: date | name (linked) | country flag | details blob."""
        columns = config.columns
        if len(cells) < 4 or len(cells) <= max(columns.values()):
            raise ExtractionError(f"expected at least 4 cells, found {len(cells)}")

        date_text = cells[columns["date"]].get_text(strip=True)
        start_date = parse_date(date_text)
        if start_date is None:
            raise ExtractionError(f"unparsable date '{date_text}'")

        name_cell = cells[columns["name"]]
        name = clean_text(name_cell.get_text(" ", strip=True))
        if not name:
            raise ExtractionError("missing meeting name")
        link = name_cell.find("a")
        href = link.get("href") if link else None
        meet_number = extract_meet_number(name, href)

        # Cheap existence check before the details blob is parsed
        if config.check_existing and store is not None:
            if await store.exists(
                meet_number=meet_number, name=name, start_date=start_date
            ):
                logger.debug(f"Skipping existing meeting: {name}")
                return Outcome.skipped(f"{ALREADY_STORED}: {name}")

        details = parse_meeting_details(cells[columns["details"]].get_text(strip=True))

        return Outcome.ok(
            MeetingRecord(
                meet_number=meet_number,
                name=name,
                region_name=details.region,
                course_type=details.course_type,
                license_level=details.license_level,
                event_type=details.event_type,
                start_date=start_date,
                external_url=absolute_url(config.base_url, href),
            )
        )

    async def _extract_daily_listing_row(
        self,
        row: Tag,
        cells: List[Tag],
        page_date: date,
        config: SourceConfig,
        store: Optional[LiveMeetingStore],
    ) -> Outcome:
        """Row layout comes entirely from config.columns; the date is the page date."""
        if not cells:
            raise ExtractionError("row has no cells")

        def cell_text(field_name: str) -> Optional[str]:
            index = config.columns.get(field_name)
            if index is None or index >= len(cells):
                return None
            return clean_text(cells[index].get_text(" ", strip=True))

        name = cell_text("name")
        if not name:
            raise ExtractionError("missing meeting name")

        meet_number = cell_text("meet_number")
        if config.check_existing and store is not None:
            if await store.exists(
                meet_number=meet_number, name=name, start_date=page_date
            ):
                return Outcome.skipped(f"{ALREADY_STORED}: {name}")

        link = row.find("a")
        return Outcome.ok(
            MeetingRecord(
                meet_number=meet_number,
                name=name,
                region_name=cell_text("region"),
                city=cell_text("city"),
                venue=cell_text("venue"),
                course_type=parse_course_type(cell_text("course_type")),
                license_level=parse_license_level(cell_text("license_level")),
                start_date=page_date,
                external_url=absolute_url(
                    config.base_url, link.get("href") if link else None
                ),
            )
        )
