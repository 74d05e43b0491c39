"""Tests for the PACER pacing engine."""

from datetime import date

import pytest
from pacer.pacing import (
    BAR_WIDTH,
    LENS_INNER_WIDTH,
    OUTSIDE_WIDTH,
    CalendarContext,
    PacingZone,
    QuotaWindow,
    UsageSnapshot,
    allocate_outside_chars,
    calculate_pacing,
    calculate_snapshot,
    classify_zone,
    render_block,
    round_half_up,
)


MID_JUNE = CalendarContext(days_in_month=30, current_day=15)


class TestCalendarContext:
    """Tests for CalendarContext."""

    def test_for_date(self):
        """Test deriving the calendar from a date."""
        cal = CalendarContext.for_date(date(2026, 10, 19))
        assert cal.days_in_month == 31
        assert cal.current_day == 19

    def test_leap_february(self):
        """Test February lengths."""
        assert CalendarContext.for_date(date(2024, 2, 10)).days_in_month == 29
        assert CalendarContext.for_date(date(2023, 2, 10)).days_in_month == 28

    def test_day_counts(self):
        """Test past and outside day counts."""
        assert MID_JUNE.past_days == 14
        assert MID_JUNE.total_outside_days == 29


class TestQuotaWindow:
    """Tests for quota boundaries."""

    def test_mid_month(self):
        """Test boundaries around day 15 of a 30-day month."""
        window = QuotaWindow.for_month(300, MID_JUNE)
        assert window.daily_budget == 10
        assert window.start_of_today == 140
        assert window.end_of_today == 150

    def test_zero_day_month(self):
        """Test that a zero-day month does not divide by zero."""
        window = QuotaWindow.for_month(300, CalendarContext(days_in_month=0, current_day=0))
        assert window.daily_budget == 0


class TestRenderBlock:
    """Tests for render_block."""

    def test_partial_fill(self):
        """Test a half-filled block."""
        assert render_block(4, 0.5, "#", ".") == "##.."

    def test_zero_width(self):
        """Test that zero width renders nothing regardless of ratio."""
        assert render_block(0, 0.7, "#", ".") == ""
        assert render_block(0, 5.0, "#", ".") == ""

    def test_ratio_clamped(self):
        """Test that ratios outside [0, 1] are clamped."""
        assert render_block(3, -2.0, "#", ".") == "..."
        assert render_block(3, 4.0, "#", ".") == "###"

    def test_rounds_half_up(self):
        """Test that a half char rounds up."""
        assert render_block(5, 0.5, "#", ".") == "###.."


class TestRoundHalfUp:
    """Tests for the shared rounding helper."""

    def test_half_rounds_up(self):
        """Test that halves round up, unlike built-in round."""
        assert round_half_up(2.5) == 3
        assert round_half_up(159.5) == 160
        assert round_half_up(2.4) == 2


class TestAllocateOutsideChars:
    """Tests for the past/future character split."""

    def test_mid_month(self):
        """Test the split on day 15 of 30."""
        assert allocate_outside_chars(MID_JUNE) == (6, 6)

    def test_first_day(self):
        """Test that day 1 gives the past zone nothing."""
        assert allocate_outside_chars(CalendarContext(31, 1)) == (0, OUTSIDE_WIDTH)

    def test_last_day(self):
        """Test that the last day gives the future zone nothing."""
        assert allocate_outside_chars(CalendarContext(31, 31)) == (OUTSIDE_WIDTH, 0)

    def test_single_day_month(self):
        """Test the total_outside_days == 0 guard."""
        assert allocate_outside_chars(CalendarContext(1, 1)) == (0, OUTSIDE_WIDTH)

    @pytest.mark.parametrize("days_in_month", [28, 29, 30, 31])
    def test_total_constant(self, days_in_month):
        """Test that past + future always equals OUTSIDE_WIDTH."""
        for day in range(1, days_in_month + 1):
            past, future = allocate_outside_chars(CalendarContext(days_in_month, day))
            assert past + future == OUTSIDE_WIDTH
            assert past >= 0 and future >= 0


class TestClassifyZone:
    """Tests for zone selection."""

    def test_ahead(self):
        """Test usage below the start-of-today quota."""
        ratios = classify_zone(70, 300, MID_JUNE)
        assert ratios.zone == PacingZone.AHEAD
        assert ratios.past_ratio == pytest.approx(0.5)
        assert ratios.lens_ratio == 0
        assert ratios.future_ratio == 0

    def test_zero_usage(self):
        """Test that zero usage leaves the past zone empty."""
        ratios = classify_zone(0, 300, MID_JUNE)
        assert ratios.zone == PacingZone.AHEAD
        assert ratios.past_ratio == 0

    def test_start_of_today_quota_zero(self):
        """Test the start_of_today_quota == 0 guard in the ahead zone."""
        ratios = classify_zone(-5, 300, CalendarContext(30, 1))
        assert ratios.zone == PacingZone.AHEAD
        assert ratios.past_ratio == 0

    def test_on_track_lower_boundary(self):
        """Test that usage equal to start-of-today is on track."""
        ratios = classify_zone(140, 300, MID_JUNE)
        assert ratios.zone == PacingZone.ON_TRACK
        assert ratios.past_ratio == 1
        assert ratios.lens_ratio == 0

    def test_on_track_upper_boundary(self):
        """Test that usage equal to end-of-today is on track, not overspent."""
        ratios = classify_zone(150, 300, MID_JUNE)
        assert ratios.zone == PacingZone.ON_TRACK
        assert ratios.lens_ratio == 1
        assert ratios.future_ratio == 0

    def test_overspent(self):
        """Test usage beyond end-of-today."""
        ratios = classify_zone(160, 300, MID_JUNE)
        assert ratios.zone == PacingZone.OVERSPENT
        assert ratios.past_ratio == 1
        assert ratios.lens_ratio == 1
        assert ratios.future_ratio == pytest.approx(10 / 150)

    def test_future_quota_zero(self):
        """Test the future_quota == 0 guard on the last day."""
        ratios = classify_zone(310, 300, CalendarContext(30, 30))
        assert ratios.zone == PacingZone.OVERSPENT
        assert ratios.future_ratio == 1


class TestCalculatePacing:
    """Tests for calculate_pacing."""

    def test_on_track_at_start_of_today(self):
        """Test 140 of 300 on day 15 of 30."""
        result = calculate_pacing(140, 300, MID_JUNE)
        assert result.zone == PacingZone.ON_TRACK
        assert result.buffer == 10
        assert result.progress_bar == "▰" * 6 + "┃▯▯▯▯▯┃" + "▱" * 6
        assert result.used_units == 140
        assert result.monthly_limit == 300

    def test_overspent(self):
        """Test 160 of 300 on day 15 of 30."""
        result = calculate_pacing(160, 300, MID_JUNE)
        assert result.zone == PacingZone.OVERSPENT
        assert result.buffer == -10
        assert result.is_over_budget
        assert result.progress_bar == "▰" * 6 + "┃▮▮▮▮▮┃" + "▱" * 6

    def test_ahead(self):
        """Test half the expected usage."""
        result = calculate_pacing(70, 300, MID_JUNE)
        assert result.zone == PacingZone.AHEAD
        assert result.buffer == 80
        assert result.progress_bar == "▰▰▰▱▱▱" + "┃▯▯▯▯▯┃" + "▱" * 6

    def test_first_day(self):
        """Test that day 1 skips straight to the lens."""
        result = calculate_pacing(5, 300, CalendarContext(30, 1))
        assert result.zone == PacingZone.ON_TRACK
        assert result.progress_bar == "┃▮▮▮▯▯┃" + "▱" * 12
        assert result.buffer == 5

    def test_last_day(self):
        """Test that the last day renders an empty future zone."""
        result = calculate_pacing(310, 300, CalendarContext(30, 30))
        assert result.progress_bar == "▰" * 12 + "┃▮▮▮▮▮┃"
        assert result.buffer == -10

    def test_last_day_exactly_on_limit(self):
        """Test using the whole quota on the last day."""
        result = calculate_pacing(300, 300, CalendarContext(30, 30))
        assert result.zone == PacingZone.ON_TRACK
        assert result.buffer == 0

    def test_single_day_month(self):
        """Test a degenerate one-day month."""
        result = calculate_pacing(50, 100, CalendarContext(1, 1))
        assert result.progress_bar == "┃▮▮▮▯▯┃" + "▱" * 12
        assert len(result.progress_bar) == BAR_WIDTH

    @pytest.mark.parametrize("monthly_limit", [0, -300])
    @pytest.mark.parametrize("used_units", [0, 5, 500])
    def test_degenerate_limit_does_not_raise(self, monthly_limit, used_units):
        """Test that a non-positive limit degrades instead of raising."""
        result = calculate_pacing(used_units, monthly_limit, MID_JUNE)
        assert len(result.progress_bar) == BAR_WIDTH

    def test_zero_day_month_does_not_raise(self):
        """Test that a zero-day calendar degrades instead of raising."""
        calculate_pacing(10, 300, CalendarContext(0, 0))

    @pytest.mark.parametrize("days_in_month", [28, 29, 30, 31])
    def test_width_constant(self, days_in_month):
        """Test that the bar width never changes."""
        for day in range(1, days_in_month + 1):
            cal = CalendarContext(days_in_month, day)
            for used in (0, 1, 150, 299.5, 300, 10_000):
                result = calculate_pacing(used, 300, cal)
                assert len(result.progress_bar) == OUTSIDE_WIDTH + LENS_INNER_WIDTH + 2

    def test_buffer_strictly_decreasing(self):
        """Test that more usage always means less buffer."""
        buffers = [calculate_pacing(used, 300, MID_JUNE).buffer for used in range(0, 400, 7)]
        assert all(a > b for a, b in zip(buffers, buffers[1:]))

    def test_idempotent(self):
        """Test that identical inputs give identical output."""
        first = calculate_pacing(123.4, 300, MID_JUNE)
        second = calculate_pacing(123.4, 300, MID_JUNE)
        assert first == second

    def test_snapshot_wrapper(self):
        """Test calculate_snapshot matches calculate_pacing."""
        snapshot = UsageSnapshot(used_units=160, monthly_limit=300)
        assert calculate_snapshot(snapshot, MID_JUNE) == calculate_pacing(160, 300, MID_JUNE)
