"""PACER Pacing subsystem - Linear daily pacing of a monthly quota."""

from .engine import (
    BAR_WIDTH,
    LENS_INNER_WIDTH,
    OUTSIDE_WIDTH,
    CalendarContext,
    PacingResult,
    PacingZone,
    QuotaWindow,
    UsageSnapshot,
    ZoneRatios,
    allocate_outside_chars,
    calculate_pacing,
    calculate_snapshot,
    classify_zone,
    render_block,
    round_half_up,
)

__all__ = [
    "BAR_WIDTH",
    "LENS_INNER_WIDTH",
    "OUTSIDE_WIDTH",
    "CalendarContext",
    "PacingResult",
    "PacingZone",
    "QuotaWindow",
    "UsageSnapshot",
    "ZoneRatios",
    "allocate_outside_chars",
    "calculate_pacing",
    "calculate_snapshot",
    "classify_zone",
    "render_block",
    "round_half_up",
]
