"""Text to value parsers for meeting listing fields.

Every parser returns None (or an empty result) for input it can't make sense
of; callers treat that as "field unknown" rather than a failure.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Pattern

from loguru import logger

from meetsync.models.enums import CourseType
from meetsync.models.region import KNOWN_REGION_NAMES

ORDINAL_SUFFIX = re.compile(r"(\d+)(st|nd|rd|th)", re.IGNORECASE)

# Listing sites mix "18Nov 2025" (after ordinal removal), "18 Nov 2025" and ISO dates
DATE_FORMATS = (
    "%d%b %Y",
    "%d %b %Y",
    "%d%B %Y",
    "%d %B %Y",
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%d-%m-%Y",
)

SHORT_COURSE_PATTERN = re.compile(r"(?<!\d)25(?!\d)|short|\bsc\b", re.IGNORECASE)
LONG_COURSE_PATTERN = re.compile(r"(?<!\d)50(?!\d)|long|\blc\b", re.IGNORECASE)

MEET_ID_IN_LINK = re.compile(r"meet=(\d+)")
TRAILING_TOKEN = re.compile(r"-\s*(\w+)$")


def parse_date(text: Optional[str]) -> Optional[date]:
    """Parses a listing date such as "18thNov 2025"."""
    if not text or not text.strip():
        return None

    cleaned = ORDINAL_SUFFIX.sub(r"\1", text.strip())
    cleaned = re.sub(r"\s+", " ", cleaned)
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue

    logger.warning(f"Failed to parse date '{text}'")
    return None


def parse_course_type(text: Optional[str]) -> Optional[CourseType]:
    """Classifies "25m"/"Short Course"/"SC" and "50m"/"Long Course"/"LC"."""
    if not text:
        return None
    if SHORT_COURSE_PATTERN.search(text):
        return CourseType.SHORT
    if LONG_COURSE_PATTERN.search(text):
        return CourseType.LONG
    return None


def parse_license_level(text: Optional[str]) -> Optional[int]:
    if not text:
        return None
    match = re.search(r"(\d+)", text)
    return int(match.group(1)) if match else None


def extract_meet_number(name: Optional[str], link_href: Optional[str]) -> Optional[str]:
    """Meet id from a "meet.php?meet=85856" link, else a trailing "- 4NE252206" in the name."""
    if link_href:
        match = MEET_ID_IN_LINK.search(link_href)
        if match:
            return match.group(1)

    if name:
        match = TRAILING_TOKEN.search(name.strip())
        if match:
            return match.group(1).strip()

    return None


@dataclass(frozen=True)
class DetailRule:
    """One independent pattern -> field rule applied to a details blob."""

    field_name: str
    pattern: Pattern[str]
    convert: Callable[[re.Match], object]


def _region_pattern() -> Pattern[str]:
    # Longest names first so "East Midlands" wins over "East"
    names = sorted(KNOWN_REGION_NAMES, key=len, reverse=True)
    alternation = "|".join(re.escape(name) for name in names)
    return re.compile(rf"({alternation})\s*Region", re.IGNORECASE)


_CANONICAL_REGION_NAMES = {name.lower(): name for name in KNOWN_REGION_NAMES}

DETAIL_RULES: List[DetailRule] = [
    DetailRule(
        "region",
        _region_pattern(),
        lambda m: _CANONICAL_REGION_NAMES[m.group(1).lower()],
    ),
    DetailRule(
        "course_type",
        re.compile(r"(Short Course|Long Course)", re.IGNORECASE),
        lambda m: CourseType.SHORT if m.group(1).lower().startswith("short") else CourseType.LONG,
    ),
    DetailRule(
        "license_level",
        re.compile(r"Level\s*(\d+)", re.IGNORECASE),
        lambda m: int(m.group(1)),
    ),
    DetailRule(
        "event_type",
        re.compile(r"(Club Champs|Club|County|Regional|National)", re.IGNORECASE),
        lambda m: m.group(1),
    ),
]


@dataclass
class MeetingDetails:
    """Fields recovered from a details blob; `matched` lists the rules that fired."""

    region: Optional[str] = None
    course_type: Optional[CourseType] = None
    license_level: Optional[int] = None
    event_type: Optional[str] = None
    matched: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, object]:
        return {
            "region": self.region,
            "course_type": self.course_type,
            "license_level": self.license_level,
            "event_type": self.event_type,
        }


def parse_meeting_details(
    text: Optional[str], rules: Optional[List[DetailRule]] = None
) -> MeetingDetails:
    """Decomposes e.g. "North East RegionShort CourseLevel 4Club" into fields."""
    details = MeetingDetails()
    if not text:
        return details

    for rule in rules if rules is not None else DETAIL_RULES:
        match = rule.pattern.search(text)
        if not match:
            continue
        try:
            value = rule.convert(match)
        except (KeyError, ValueError) as e:
            logger.debug(f"Detail rule '{rule.field_name}' matched but failed: {e}")
            continue
        setattr(details, rule.field_name, value)
        details.matched.append(rule.field_name)

    return details
