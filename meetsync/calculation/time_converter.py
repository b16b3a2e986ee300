"""Short course / long course swim time conversion.

Implements the British Swimming equivalent time algorithm:

    SC = LC - (TurnFactor / LC) * NumTurnFactor
    NumTurnFactor = (Distance / 100) ** 2 * 2

The inverse treats the forward formula as a quadratic in LC
(LC**2 - SC*LC - TurnFactor*NumTurnFactor = 0) and takes the positive root.
"""

import math
import re
from dataclasses import dataclass
from typing import Dict, Optional, Union

from meetsync.models.enums import Course, Stroke

# Turn factors per distance (metres) and stroke. A missing entry means there
# is no established conversion and both directions return the input unchanged.
TURN_FACTORS: Dict[int, Dict[Stroke, float]] = {
    50: {
        Stroke.FREE: 42.245,
        Stroke.BACK: 40.5,
        Stroke.BREAST: 63.616,
        Stroke.FLY: 38.269,
    },
    100: {
        Stroke.FREE: 42.245,
        Stroke.BACK: 40.5,
        Stroke.BREAST: 63.616,
        Stroke.FLY: 38.269,
    },
    200: {
        Stroke.FREE: 43.786,
        Stroke.BACK: 41.98,
        Stroke.BREAST: 66.598,
        Stroke.FLY: 39.76,
        Stroke.IM: 49.7,
    },
    400: {
        Stroke.FREE: 44.233,
        Stroke.IM: 55.366,
    },
    800: {
        Stroke.FREE: 45.525,
    },
    1500: {
        Stroke.FREE: 46.221,
    },
}


@dataclass(frozen=True)
class Converted:
    value: float


@dataclass(frozen=True)
class Unchanged:
    """The input is returned as-is; reason says which guard applied."""

    value: Optional[float]
    reason: str


ConversionResult = Union[Converted, Unchanged]


def get_turn_factor(distance_m: int, stroke: Union[Stroke, str]) -> Optional[float]:
    try:
        stroke = Stroke(stroke.upper() if isinstance(stroke, str) else stroke)
    except ValueError:
        return None
    return TURN_FACTORS.get(distance_m, {}).get(stroke)


def num_turn_factor(distance_m: int) -> float:
    return ((distance_m / 100.0) ** 2) * 2


def _guard(
    seconds: Optional[float], distance_m: int, stroke: Union[Stroke, str]
) -> Union[Unchanged, float]:
    if seconds is None:
        return Unchanged(seconds, "no time given")
    if seconds <= 0:
        return Unchanged(seconds, "time is not positive")
    turn_factor = get_turn_factor(distance_m, stroke)
    if turn_factor is None:
        stroke_name = stroke.value if isinstance(stroke, Stroke) else stroke
        return Unchanged(seconds, f"no turn factor for {distance_m}m {stroke_name}")
    return turn_factor


def convert_lc_to_sc(
    lc_seconds: Optional[float], distance_m: int, stroke: Union[Stroke, str]
) -> ConversionResult:
    guarded = _guard(lc_seconds, distance_m, stroke)
    if isinstance(guarded, Unchanged):
        return guarded

    sc_seconds = lc_seconds - (guarded / lc_seconds) * num_turn_factor(distance_m)
    if sc_seconds <= 0:
        return Unchanged(lc_seconds, "converted time is not positive")
    return Converted(sc_seconds)


def convert_sc_to_lc(
    sc_seconds: Optional[float], distance_m: int, stroke: Union[Stroke, str]
) -> ConversionResult:
    guarded = _guard(sc_seconds, distance_m, stroke)
    if isinstance(guarded, Unchanged):
        return guarded

    discriminant = sc_seconds**2 + 4 * guarded * num_turn_factor(distance_m)
    if discriminant < 0:
        return Unchanged(sc_seconds, "negative discriminant")

    lc_seconds = (sc_seconds + math.sqrt(discriminant)) / 2.0
    # LC is never faster than SC for the same swim
    if lc_seconds <= 0 or lc_seconds < sc_seconds:
        return Unchanged(sc_seconds, "converted time is faster than the input")
    return Converted(lc_seconds)


def lc_to_sc(
    lc_seconds: Optional[float], distance_m: int, stroke: Union[Stroke, str]
) -> Optional[float]:
    """Estimated 25m pool time for a 50m pool time."""
    return convert_lc_to_sc(lc_seconds, distance_m, stroke).value


def sc_to_lc(
    sc_seconds: Optional[float], distance_m: int, stroke: Union[Stroke, str]
) -> Optional[float]:
    """Estimated 50m pool time for a 25m pool time."""
    return convert_sc_to_lc(sc_seconds, distance_m, stroke).value


def get_time_for_course(
    lc_time: Optional[float],
    sc_time: Optional[float],
    desired_course: Optional[Union[Course, str]],
) -> Optional[float]:
    if desired_course == Course.LC:
        return lc_time
    if desired_course == Course.SC:
        return sc_time
    # Default to whichever is available, LC first
    return lc_time if lc_time is not None else sc_time


SWIM_TIME_PATTERN = re.compile(r"^(?:(\d+):)?(\d{1,2}(?:\.\d{1,2})?)$")


def parse_swim_time(text: str) -> float:
    """Parses "1:02.34", "62.34" or "16:40.00" into seconds.

    Raises:
        ValueError: if the text is not a swim time.
    """
    match = SWIM_TIME_PATTERN.match(text.strip()) if text else None
    if not match:
        # Plain seconds above a minute, e.g. "125.5"
        try:
            seconds = float(text)
        except (TypeError, ValueError):
            raise ValueError(f"Not a swim time: {text!r}") from None
        if seconds < 0:
            raise ValueError(f"Not a swim time: {text!r}")
        return seconds

    minutes = int(match.group(1)) if match.group(1) else 0
    return minutes * 60 + float(match.group(2))


def format_swim_time(seconds: float) -> str:
    """Formats seconds as M:SS.hh (or SS.hh under a minute)."""
    hundredths = int(round(seconds * 100))
    minutes, rest = divmod(hundredths, 6000)
    if minutes:
        return f"{minutes}:{rest // 100:02d}.{rest % 100:02d}"
    return f"{rest // 100}.{rest % 100:02d}"
