"""Inclusive calendar-date arithmetic for leave ranges."""

from __future__ import annotations

from datetime import date

from hr_leave.exceptions import ValidationError

MAX_LEAVE_SPAN_DAYS = 365


def days_between(start: date, end: date) -> int:
    """Count calendar days from ``start`` to ``end``, both ends included.

    Weekends and public holidays are counted like any other day.
    """
    if end < start:
        raise ValidationError("End date must be on or after start date")
    return (end - start).days + 1


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Return True if the closed ranges share at least one day."""
    return a_start <= b_end and b_start <= a_end
