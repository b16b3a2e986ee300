"""Shared test fixtures and configuration."""

from typing import Callable, List

import httpx
import pytest

from meetsync.storage.store import InMemoryLiveMeetingStore

LICENSED_MEETS_HTML = """
<html><body>
<table>
  <tr><th>Date</th><th>Meet</th><th>Country</th><th>Details</th></tr>
  <tr>
    <td>18thNov 2025 </td>
    <td><a href="meet.php?meet=85856">Darlington ASC Club Gala 4 2025 - 4NE252206</a></td>
    <td><img src="/images/eng.png"></td>
    <td><span>North East Region</span><span>Short Course</span><span>Level 4</span><span>Club</span></td>
  </tr>
  <tr>
    <td>22nd Nov 2025</td>
    <td><a href="/meet.php?meet=85901">Maidstone Club Championships 2025 - 3SE251839</a></td>
    <td></td>
    <td>South East RegionLong CourseLevel 3Club Champs</td>
  </tr>
  <tr>
    <td>1st Dec 2025</td>
    <td>Droitwich Dolphins Open - 4WMID252313</td>
    <td></td>
    <td>West Midlands RegionLevel 4County</td>
  </tr>
</table>
</body></html>
"""

LICENSED_MEETS_WITH_BAD_ROWS_HTML = """
<table>
  <tr><th>Date</th><th>Meet</th><th>Country</th><th>Details</th></tr>
  <tr><td>TBC</td><td>Mystery Meet</td><td></td><td>Level 2</td></tr>
  <tr><td>only two</td><td>cells</td></tr>
  <tr>
    <td>3rd Jan 2026</td>
    <td><a href="meet.php?meet=90001">New Year Sprint - 2NW260001</a></td>
    <td></td>
    <td>North West RegionShort CourseLevel 2Club</td>
  </tr>
</table>
"""

DAILY_LISTING_HTML = """
<table>
  <tr class="meeting-row">
    <td>4NE252206</td>
    <td><a href="/meetings/4NE252206">Darlington Club Gala</a></td>
    <td>North East</td>
    <td>Darlington</td>
    <td>Dolphin Centre</td>
    <td>25m</td>
    <td>Level 4</td>
  </tr>
  <tr class="meeting-row">
    <td></td>
    <td>Tynemouth Open</td>
    <td>Atlantis</td>
    <td>North Shields</td>
    <td>Tynemouth Pool</td>
    <td>LC</td>
    <td>3</td>
  </tr>
</table>
"""

EMPTY_LISTING_HTML = "<html><body><table></table></body></html>"


class FakeSleep:
    """Records requested pauses instead of waiting."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def store() -> InMemoryLiveMeetingStore:
    return InMemoryLiveMeetingStore()


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def make_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Builds an AsyncClient whose requests are answered by the given handler."""

    def _make(handler):
        return httpx.AsyncClient(
            transport=httpx.MockTransport(handler), follow_redirects=True
        )

    return _make


@pytest.fixture
def licensed_meets_html() -> str:
    return LICENSED_MEETS_HTML


@pytest.fixture
def licensed_meets_with_bad_rows_html() -> str:
    return LICENSED_MEETS_WITH_BAD_ROWS_HTML


@pytest.fixture
def daily_listing_html() -> str:
    return DAILY_LISTING_HTML


@pytest.fixture
def empty_listing_html() -> str:
    return EMPTY_LISTING_HTML
