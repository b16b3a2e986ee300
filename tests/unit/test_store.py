"""Tests for the in-memory and Supabase live meeting stores."""

import asyncio
from datetime import date
from types import SimpleNamespace

import httpx
import pytest
from postgrest.exceptions import APIError

from meetsync.matching.meeting_matcher import find_live_meeting
from meetsync.models.enums import CourseType
from meetsync.models.live_meeting import LiveMeeting
from meetsync.models.meeting import Meeting
from meetsync.scrapers.orchestrator import ScrapeOrchestrator
from meetsync.scrapers.swimming_results_scraper import SwimmingResultsScraper
from meetsync.storage.store import InMemoryLiveMeetingStore, StoreError
from meetsync.storage.supabase_client import SupabaseLiveMeetingStore

START = date(2025, 11, 18)


def run(coro):
    return asyncio.run(coro)


class TestInMemoryStore:
    def test_save_assigns_ids(self, store):
        first = run(store.save(LiveMeeting(name="A", start_date=START)))
        second = run(store.save(LiveMeeting(name="B", start_date=START)))
        assert (first.id, second.id) == (1, 2)

    def test_meet_number_is_unique(self, store):
        run(store.save(LiveMeeting(name="A", meet_number="85856", start_date=START)))
        with pytest.raises(StoreError, match="already been taken"):
            run(store.save(LiveMeeting(name="B", meet_number="85856", start_date=START)))

    def test_resaving_same_meeting_is_allowed(self, store):
        saved = run(store.save(LiveMeeting(name="A", meet_number="85856", start_date=START)))
        updated = run(store.save(saved.model_copy(update={"name": "A2"})))
        assert updated.id == saved.id
        assert [m.name for m in store.meetings] == ["A2"]

    def test_update_of_unknown_id_fails(self, store):
        with pytest.raises(StoreError):
            run(store.save(LiveMeeting(id=42, name="A", start_date=START)))

    def test_exists(self, store):
        run(store.save(LiveMeeting(name="Gala", meet_number="85856", start_date=START)))
        run(store.save(LiveMeeting(name="Open", start_date=START)))

        assert run(store.exists(meet_number="85856"))
        assert not run(store.exists(meet_number="00000"))
        assert run(store.exists(name="Open", start_date=START))
        assert not run(store.exists(name="Open", start_date=date(2025, 11, 19)))
        assert not run(store.exists())

    def test_region_and_county_lookup(self, store):
        region = run(store.find_region_by_name("West Midlands"))
        assert region.code == "WMID"
        county = run(store.find_county_by_name("Worcestershire", region.id))
        assert county.region_id == region.id
        assert run(store.find_county_by_name("Kent", region.id)) is None
        assert run(store.find_region_by_name("west midlands")) is None

    def test_unseeded_store_has_no_regions(self):
        assert run(InMemoryLiveMeetingStore(seed=False).find_region_by_name("London")) is None

    def test_upcoming(self, store):
        east = run(store.find_region_by_name("East"))
        run(store.save(LiveMeeting(name="Past", start_date=date(2025, 11, 1))))
        run(store.save(LiveMeeting(name="Later", start_date=date(2025, 12, 20))))
        run(store.save(LiveMeeting(name="Soon", start_date=START, region_id=east.id)))

        assert [m.name for m in run(store.upcoming(START))] == ["Soon", "Later"]
        assert [m.name for m in run(store.upcoming(START, region_id=east.id))] == ["Soon"]


class FakeQuery:
    """Records a PostgREST query chain and answers execute() with canned rows."""

    def __init__(self, table, rows=None, error=None):
        self.table = table
        self.rows = rows if rows is not None else []
        self.error = error
        self.calls = []

    def __getattr__(self, name):
        def method(*args, **kwargs):
            self.calls.append((name, args))
            return self

        return method

    async def execute(self):
        if self.error:
            raise self.error
        return SimpleNamespace(data=self.rows)


class FakeSupabaseClient:
    def __init__(self, rows=None, error=None):
        self.rows = rows
        self.error = error
        self.queries = []

    def table(self, name):
        query = FakeQuery(name, rows=self.rows, error=self.error)
        self.queries.append(query)
        return query


def meeting_row(**overrides):
    row = {
        "id": 3,
        "meet_number": "85856",
        "name": "Darlington ASC Club Gala 4 2025 - 4NE252206",
        "region_id": 4,
        "county_id": None,
        "city": None,
        "venue": None,
        "course_type": "25",
        "license_level": 4,
        "start_date": "2025-11-18",
        "end_date": None,
        "external_url": None,
        "notes": None,
    }
    row.update(overrides)
    return row


class TestSupabaseStore:
    def test_find_by_meet_number(self):
        client = FakeSupabaseClient(rows=[meeting_row()])
        meeting = run(SupabaseLiveMeetingStore(client).find_by_meet_number("85856"))

        assert meeting.id == 3
        assert meeting.start_date == START
        assert meeting.course_type == CourseType.SHORT
        query = client.queries[0]
        assert query.table == "live_meetings"
        assert ("eq", ("meet_number", "85856")) in query.calls

    def test_find_by_name_containing_uses_like_ordered_by_id(self):
        client = FakeSupabaseClient(rows=[meeting_row()])
        run(SupabaseLiveMeetingStore(client).find_by_name_containing("4NE252206"))

        calls = client.queries[0].calls
        assert ("like", ("name", "%4NE252206%")) in calls
        assert ("order", ("id",)) in calls

    def test_missing_row_returns_none(self):
        client = FakeSupabaseClient(rows=[])
        assert run(SupabaseLiveMeetingStore(client).find_by_name_and_date("Gala", START)) is None

    def test_insert_omits_id_and_display_field(self):
        client = FakeSupabaseClient(rows=[meeting_row(id=9)])
        saved = run(
            SupabaseLiveMeetingStore(client).save(
                LiveMeeting(name="Gala", meet_number="85856", start_date=START)
            )
        )

        assert saved.id == 9
        name, args = client.queries[0].calls[0]
        assert name == "insert"
        assert "id" not in args[0]
        assert "course_type_display" not in args[0]
        assert args[0]["start_date"] == "2025-11-18"
        assert args[0]["course_type"] == "25"

    def test_update_targets_id(self):
        client = FakeSupabaseClient(rows=[meeting_row()])
        run(
            SupabaseLiveMeetingStore(client).save(
                LiveMeeting(id=3, name="Gala", start_date=START)
            )
        )
        calls = client.queries[0].calls
        assert calls[0][0] == "update"
        assert ("eq", ("id", 3)) in calls

    def test_api_error_becomes_store_error(self):
        error = APIError(
            {
                "message": "duplicate key value violates unique constraint",
                "code": "23505",
                "hint": None,
                "details": None,
            }
        )
        client = FakeSupabaseClient(error=error)
        with pytest.raises(StoreError, match="duplicate key"):
            run(
                SupabaseLiveMeetingStore(client).save(
                    LiveMeeting(name="Gala", meet_number="85856", start_date=START)
                )
            )

    def test_exists_without_keys_skips_query(self):
        client = FakeSupabaseClient(rows=[meeting_row()])
        assert run(SupabaseLiveMeetingStore(client).exists()) is False

    def test_region_lookup(self):
        client = FakeSupabaseClient(
            rows=[{"id": 4, "name": "North East", "code": "NE", "description": None}]
        )
        region = run(SupabaseLiveMeetingStore(client).find_region_by_name("North East"))
        assert region.code == "NE"
        assert client.queries[0].table == "regions"

    def test_connection_error_on_save_becomes_store_error(self):
        client = FakeSupabaseClient(error=httpx.ConnectError("connection refused"))
        with pytest.raises(StoreError, match="connection refused"):
            run(
                SupabaseLiveMeetingStore(client).save(
                    LiveMeeting(name="Gala", meet_number="85856", start_date=START)
                )
            )

    def test_timeout_on_lookup_becomes_store_error(self):
        client = FakeSupabaseClient(error=httpx.ReadTimeout("read timed out"))
        with pytest.raises(StoreError):
            run(SupabaseLiveMeetingStore(client).find_by_meet_number("85856"))

    def test_matcher_returns_none_on_timeout(self):
        client = FakeSupabaseClient(error=httpx.ReadTimeout("read timed out"))
        meeting = Meeting(name="Gala - 4NE252206")
        assert run(find_live_meeting(meeting, SupabaseLiveMeetingStore(client))) is None


class FlakyInsertClient:
    """Empty tables; the Nth insert fails with a dropped connection."""

    def __init__(self, fail_on_insert):
        self.fail_on_insert = fail_on_insert
        self.inserts = 0
        self.saved = []

    def table(self, name):
        return FlakyInsertQuery(self)


class FlakyInsertQuery:
    def __init__(self, client):
        self.client = client
        self.inserted = None

    def insert(self, data):
        self.inserted = data
        return self

    def __getattr__(self, name):
        return lambda *args, **kwargs: self

    async def execute(self):
        if self.inserted is None:
            return SimpleNamespace(data=[])
        self.client.inserts += 1
        if self.client.inserts == self.client.fail_on_insert:
            raise httpx.ConnectError("connection reset by peer")
        row = {**self.inserted, "id": len(self.client.saved) + 1}
        self.client.saved.append(row)
        return SimpleNamespace(data=[row])


class TestSupabaseStoreInScrape:
    def test_connection_drop_skips_only_that_record(
        self, make_client, fake_sleep, licensed_meets_html
    ):
        client = FlakyInsertClient(fail_on_insert=2)
        scraper = SwimmingResultsScraper(
            client=make_client(lambda request: httpx.Response(200, text=licensed_meets_html))
        )
        orchestrator = ScrapeOrchestrator(
            scraper, SupabaseLiveMeetingStore(client), sleep=fake_sleep
        )

        report = run(orchestrator.scrape(START, date(2025, 12, 31)))

        assert [m.meet_number for m in report.meetings] == ["85856", "4WMID252313"]
        assert [row["meet_number"] for row in client.saved] == ["85856", "4WMID252313"]
        assert len(report.skipped) == 1
        assert "failed to save" in report.skipped[0].reason
