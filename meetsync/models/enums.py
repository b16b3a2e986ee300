from enum import Enum


class CourseType(str, Enum):
    SHORT = "25"  # 25m pool
    LONG = "50"  # 50m pool


class Course(str, Enum):
    """Course codes used by qualifying standards."""

    LC = "LC"
    SC = "SC"


class Stroke(str, Enum):
    FREE = "FREE"
    BACK = "BACK"
    BREAST = "BREAST"
    FLY = "FLY"
    IM = "IM"


class MeetingSource(str, Enum):
    SWIMMING_RESULTS = "swimming-results"
    STREAMING_RESULTS = "streaming-results"


class OutcomeStatus(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
