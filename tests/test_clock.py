"""Tests for today keys."""

from datetime import date

from birthdaybook.clock import FixedClock, day_key, today_key


class TestTodayKey:
    def test_zero_padded(self):
        assert today_key(FixedClock(date(2026, 3, 7))) == "03-07"

    def test_default_clock_is_local_today(self):
        assert today_key() == day_key(date.today())

    def test_advance(self):
        clock = FixedClock(date(2026, 12, 31))
        clock.advance()
        assert today_key(clock) == "01-01"
