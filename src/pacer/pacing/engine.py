"""PACER Pacing Engine.

Linear daily pacing for a monthly quota, rendered as a three-zone bar:

    [past ▰▱][lens ┃▮▯┃][future ▰▱]

The lens magnifies today so intra-day progress is visible, while the
flanking zones compress the rest of the month into a fixed character width.
Everything here is pure: the caller supplies the calendar.
"""

import calendar
import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Tuple


OUTSIDE_WIDTH = 12      # Chars shared between past and future zones
LENS_INNER_WIDTH = 5    # Inner width of the lens: ┃▮▮▯▯▯┃
LENS_DELIMITER = "┃"

OUTSIDE_FILL = "▰"
OUTSIDE_EMPTY = "▱"
LENS_FILL = "▮"
LENS_EMPTY = "▯"

BAR_WIDTH = OUTSIDE_WIDTH + LENS_INNER_WIDTH + 2


class PacingZone(Enum):
    """Where cumulative usage sits relative to today's quota window."""

    AHEAD = "ahead"          # Below start-of-today quota
    ON_TRACK = "on_track"    # Inside today's window (both ends inclusive)
    OVERSPENT = "overspent"  # Past end-of-today quota, borrowing from the future


@dataclass(frozen=True)
class CalendarContext:
    """Day-of-month position, supplied by the caller."""

    days_in_month: int
    current_day: int

    @classmethod
    def for_date(cls, day: date) -> "CalendarContext":
        return cls(
            days_in_month=calendar.monthrange(day.year, day.month)[1],
            current_day=day.day,
        )

    @property
    def past_days(self) -> int:
        return self.current_day - 1

    @property
    def total_outside_days(self) -> int:
        return self.days_in_month - 1


@dataclass(frozen=True)
class UsageSnapshot:
    """Usage reported by a usage source for one refresh cycle."""

    used_units: float
    monthly_limit: float


@dataclass(frozen=True)
class QuotaWindow:
    """Cumulative quota boundaries around today."""

    daily_budget: float
    start_of_today: float
    end_of_today: float

    @classmethod
    def for_month(cls, monthly_limit: float, cal: CalendarContext) -> "QuotaWindow":
        daily_budget = monthly_limit / cal.days_in_month if cal.days_in_month else 0.0
        return cls(
            daily_budget=daily_budget,
            start_of_today=cal.past_days * daily_budget,
            end_of_today=cal.current_day * daily_budget,
        )


@dataclass(frozen=True)
class ZoneRatios:
    """Fill ratio for each bar zone, tagged with the active zone."""

    zone: PacingZone
    past_ratio: float = 0.0
    lens_ratio: float = 0.0
    future_ratio: float = 0.0


@dataclass(frozen=True)
class PacingResult:
    """Rendered pacing bar and daily buffer."""

    progress_bar: str
    buffer: float  # Positive = units left today; negative = overdrawn
    used_units: float
    monthly_limit: float
    zone: PacingZone

    @property
    def is_over_budget(self) -> bool:
        return self.buffer < 0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def render_block(width: int, ratio: float, fill_char: str, empty_char: str) -> str:
    """Render one zone as `width` chars, the first `ratio` share filled."""
    if width <= 0:
        return ""
    filled = round_half_up(max(0.0, min(1.0, ratio)) * width)
    return fill_char * filled + empty_char * (width - filled)


def allocate_outside_chars(cal: CalendarContext) -> Tuple[int, int]:
    """Split OUTSIDE_WIDTH between past and future in proportion to days.

    Future gets the complement so the total never drifts.
    """
    if cal.total_outside_days == 0:
        past_chars = 0
    else:
        past_chars = round_half_up(cal.past_days / cal.total_outside_days * OUTSIDE_WIDTH)
        past_chars = max(0, min(OUTSIDE_WIDTH, past_chars))
    return past_chars, OUTSIDE_WIDTH - past_chars


def classify_zone(
    used_units: float,
    monthly_limit: float,
    cal: CalendarContext,
) -> ZoneRatios:
    """Pick the active zone and its fill ratios."""
    window = QuotaWindow.for_month(monthly_limit, cal)

    if used_units < window.start_of_today:
        past_ratio = 0.0 if window.start_of_today == 0 else used_units / window.start_of_today
        return ZoneRatios(PacingZone.AHEAD, past_ratio=past_ratio)

    if used_units <= window.end_of_today:
        if window.daily_budget == 0:
            lens_ratio = 1.0
        else:
            lens_ratio = (used_units - window.start_of_today) / window.daily_budget
        return ZoneRatios(PacingZone.ON_TRACK, past_ratio=1.0, lens_ratio=lens_ratio)

    future_quota = monthly_limit - window.end_of_today
    if future_quota == 0:
        future_ratio = 1.0
    else:
        future_ratio = (used_units - window.end_of_today) / future_quota
    return ZoneRatios(
        PacingZone.OVERSPENT,
        past_ratio=1.0,
        lens_ratio=1.0,
        future_ratio=future_ratio,
    )


def calculate_pacing(
    used_units: float,
    monthly_limit: float,
    cal: CalendarContext,
) -> PacingResult:
    """Calculate the pacing bar and daily buffer.

    Args:
        used_units: Cumulative usage this month
        monthly_limit: Monthly quota (callers substitute a default when unset)
        cal: Calendar position for "today"

    Returns:
        PacingResult with a BAR_WIDTH-char bar and the signed buffer
    """
    past_chars, future_chars = allocate_outside_chars(cal)
    ratios = classify_zone(used_units, monthly_limit, cal)
    window = QuotaWindow.for_month(monthly_limit, cal)

    past = render_block(past_chars, ratios.past_ratio, OUTSIDE_FILL, OUTSIDE_EMPTY)
    lens = render_block(LENS_INNER_WIDTH, ratios.lens_ratio, LENS_FILL, LENS_EMPTY)
    future = render_block(future_chars, ratios.future_ratio, OUTSIDE_FILL, OUTSIDE_EMPTY)

    return PacingResult(
        progress_bar=f"{past}{LENS_DELIMITER}{lens}{LENS_DELIMITER}{future}",
        buffer=window.end_of_today - used_units,
        used_units=used_units,
        monthly_limit=monthly_limit,
        zone=ratios.zone,
    )


def calculate_snapshot(snapshot: UsageSnapshot, cal: CalendarContext) -> PacingResult:
    """Convenience wrapper taking a UsageSnapshot."""
    return calculate_pacing(snapshot.used_units, snapshot.monthly_limit, cal)
