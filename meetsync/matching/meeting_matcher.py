import re
from typing import Optional

from loguru import logger

from meetsync.models.live_meeting import LiveMeeting
from meetsync.models.meeting import Meeting
from meetsync.storage.store import LiveMeetingStore, StoreError

# Level (1 digit) + region code (2-4 letters) + year/sequence (6 digits),
# e.g. 4NE252206, 3SE251839, 4WMID252313
LICENSE_PATTERN = re.compile(r"\b(\d[A-Z]{2,4}\d{6})\b")


def extract_license_from_name(name: Optional[str]) -> Optional[str]:
    """Pulls a licence code out of a name like "Darlington ASC Club Gala 4 2025 - 4NE252206"."""
    if not name or not name.strip():
        return None
    match = LICENSE_PATTERN.search(name)
    return match.group(1) if match else None


async def _find_by_license(
    store: LiveMeetingStore, license_number: Optional[str]
) -> Optional[LiveMeeting]:
    if not license_number or not license_number.strip():
        return None
    license_number = license_number.strip()

    # Exact meet_number first, then the code anywhere in the name ("... - 4NE252206")
    live_meeting = await store.find_by_meet_number(license_number)
    if live_meeting:
        return live_meeting
    return await store.find_by_name_containing(license_number)


async def find_live_meeting(
    meeting: Meeting, store: LiveMeetingStore
) -> Optional[LiveMeeting]:
    """Finds the scraped live meeting corresponding to an imported meeting.

    Licence codes are the only reliable join key between the two datasets,
    so both the explicit license_number and a code embedded in the name are
    tried before giving up. Read-only; returns None when nothing matches.
    """
    try:
        if meeting.license_number:
            live_meeting = await _find_by_license(store, meeting.license_number)
            if live_meeting:
                return live_meeting

        extracted_license = extract_license_from_name(meeting.name)
        if extracted_license:
            live_meeting = await _find_by_license(store, extracted_license)
            if live_meeting:
                return live_meeting
    except StoreError as e:
        logger.error(f"Store error while matching meeting '{meeting.name}': {e}")
        return None

    logger.debug(f"No live meeting found for '{meeting.name}'")
    return None


async def link_live_meeting(meeting: Meeting, store: LiveMeetingStore) -> Meeting:
    """Returns a copy of the meeting pointing at its live meeting, if one matches."""
    live_meeting = await find_live_meeting(meeting, store)
    if live_meeting is None:
        return meeting
    logger.info(f"Linked meeting '{meeting.name}' to live meeting {live_meeting.id}")
    return meeting.model_copy(update={"live_meeting_id": live_meeting.id})
