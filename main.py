import sys
import asyncio
from datetime import date, datetime, timedelta
from typing import List, Optional

# --- Settings/Logging ---
from meetsync.logging.setup import setup_logging
from meetsync.config.settings import settings

setup_logging()

from loguru import logger

import typer
from rich import print
from rich.panel import Panel
from rich.table import Table

from meetsync.calculation.time_converter import (
    convert_lc_to_sc,
    convert_sc_to_lc,
    format_swim_time,
    parse_swim_time,
    Converted,
)
from meetsync.matching.meeting_matcher import extract_license_from_name, find_live_meeting
from meetsync.models.enums import Course, MeetingSource, Stroke
from meetsync.models.live_meeting import LiveMeeting
from meetsync.models.meeting import Meeting
from meetsync.scrapers.base_scraper import BaseScraper
from meetsync.scrapers.orchestrator import ScrapeOrchestrator
from meetsync.scrapers.streaming_results_scraper import StreamingResultsScraper
from meetsync.scrapers.swimming_results_scraper import SwimmingResultsScraper
from meetsync.storage.store import InMemoryLiveMeetingStore, LiveMeetingStore
from meetsync.storage.supabase_client import (
    initialize_supabase,
    SupabaseLiveMeetingStore,
)

app = typer.Typer(
    name="meetsync",
    help="Swim meet listing scraper, meeting matcher and SC/LC time converter",
    add_completion=False,
)

SCRAPERS = {
    MeetingSource.SWIMMING_RESULTS: SwimmingResultsScraper,
    MeetingSource.STREAMING_RESULTS: StreamingResultsScraper,
}


async def build_store() -> LiveMeetingStore:
    """Supabase when configured, otherwise an in-memory store (dry run)."""
    if settings.supabase_configured:
        client = await initialize_supabase()
        if client:
            return SupabaseLiveMeetingStore(client)
        logger.error("Supabase client unavailable; falling back to in-memory store.")
    else:
        logger.warning("Supabase not configured; results will not be persisted.")
    return InMemoryLiveMeetingStore()


def print_meetings(meetings: List[LiveMeeting], title: str) -> None:
    table = Table(title=title)
    table.add_column("Date", style="red")
    table.add_column("Meet #", style="magenta")
    table.add_column("Name", style="cyan", max_width=50)
    table.add_column("Course", style="green")
    table.add_column("Level", justify="right")
    for meeting in meetings:
        table.add_row(
            meeting.start_date.isoformat(),
            meeting.meet_number or "-",
            meeting.name,
            meeting.course_type_display,
            str(meeting.license_level) if meeting.license_level is not None else "-",
        )
    print(table)


async def run_scrape(
    source: MeetingSource, start_date: date, end_date: date
) -> List[LiveMeeting]:
    store = await build_store()
    scraper: BaseScraper = SCRAPERS[source]()
    try:
        orchestrator = ScrapeOrchestrator(scraper, store)
        return await orchestrator.scrape_meetings(start_date, end_date)
    finally:
        await scraper.close()


async def run_refresh(source: MeetingSource) -> int:
    store = await build_store()
    scraper: BaseScraper = SCRAPERS[source]()
    try:
        return await ScrapeOrchestrator(scraper, store).refresh_upcoming_meetings()
    finally:
        await scraper.close()


@app.command()
def scrape(
    source: MeetingSource = typer.Option(
        MeetingSource.SWIMMING_RESULTS, "--source", "-s", help="Listing site to scrape"
    ),
    start: Optional[datetime] = typer.Option(
        None, "--start", formats=["%Y-%m-%d"], help="First date (default: today)"
    ),
    end: Optional[datetime] = typer.Option(
        None, "--end", formats=["%Y-%m-%d"], help="Last date (default: start + 7 days)"
    ),
):
    """Scrape meetings for a date range and upsert them as live meetings."""
    start_date = start.date() if start else date.today()
    end_date = end.date() if end else start_date + timedelta(days=settings.refresh_window_days)

    try:
        meetings = asyncio.run(run_scrape(source, start_date, end_date))
    except Exception as e:
        logger.exception("Scrape failed.")
        print(f"[red]Scraping failed: {e}[/red]")
        raise typer.Exit(1)

    print_meetings(meetings, f"Scraped {len(meetings)} meetings ({start_date} to {end_date})")


@app.command()
def refresh(
    source: MeetingSource = typer.Option(
        MeetingSource.SWIMMING_RESULTS, "--source", "-s", help="Listing site to scrape"
    ),
):
    """Refresh upcoming meetings (today through the refresh window)."""
    try:
        count = asyncio.run(run_refresh(source))
    except Exception as e:
        logger.exception("Refresh failed.")
        print(f"[red]Refresh failed: {e}[/red]")
        raise typer.Exit(1)
    print(Panel(f"Refreshed {count} upcoming meetings", style="green"))


@app.command()
def match(
    name: str = typer.Argument(..., help="Meeting name, may embed a licence code"),
    license_number: Optional[str] = typer.Option(None, "--license", "-l"),
):
    """Find the live meeting for an imported meeting by licence code."""
    meeting = Meeting(name=name, license_number=license_number)

    async def _match():
        return await find_live_meeting(meeting, await build_store())

    live_meeting = asyncio.run(_match())
    if live_meeting is None:
        code = license_number or extract_license_from_name(name) or "none"
        print(f"[yellow]No live meeting found (licence code: {code})[/yellow]")
        raise typer.Exit(1)
    print_meetings([live_meeting], "Matched live meeting")


@app.command()
def convert(
    time: str = typer.Argument(..., help="Swim time, e.g. 1:02.34 or 62.34"),
    distance: int = typer.Argument(..., help="Distance in metres"),
    stroke: Stroke = typer.Argument(..., help="Stroke"),
    to: Course = typer.Option(Course.LC, "--to", help="Course to convert into"),
):
    """Convert a time between short course (SC) and long course (LC)."""
    try:
        seconds = parse_swim_time(time)
    except ValueError as e:
        print(f"[red]{e}[/red]")
        raise typer.Exit(2)

    if to == Course.LC:
        result = convert_sc_to_lc(seconds, distance, stroke)
    else:
        result = convert_lc_to_sc(seconds, distance, stroke)

    if isinstance(result, Converted):
        source_course = Course.SC if to == Course.LC else Course.LC
        print(
            f"{distance}m {stroke.value} {format_swim_time(seconds)} {source_course.value} "
            f"= [bold]{format_swim_time(result.value)}[/bold] {to.value}"
        )
    else:
        print(f"[yellow]Unchanged ({result.reason}): {format_swim_time(seconds)}[/yellow]")


@app.command()
def upcoming(
    region: Optional[str] = typer.Option(None, "--region", "-r", help="Region name"),
):
    """List stored meetings from today onwards."""

    async def _upcoming():
        store = await build_store()
        region_id = None
        if region:
            found = await store.find_region_by_name(region)
            if found is None:
                raise typer.BadParameter(f"Unknown region '{region}'")
            region_id = found.id
        return await store.upcoming(date.today(), region_id=region_id)

    meetings = asyncio.run(_upcoming())
    print_meetings(meetings, f"{len(meetings)} upcoming meetings")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
