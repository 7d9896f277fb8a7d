"""Data models for the registration flow.

These are read-only snapshots of store rows, so the resolver and form logic
never touch ORM objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any


@dataclass(frozen=True)
class CourseOffering:
    """A course as offered in the registration dialog."""

    id: str
    title: str
    subtitle: str = ""
    fallback_locations: tuple[str, ...] = ()
    fallback_time_slots: tuple[str, ...] = ()

    @classmethod
    def from_row(cls, row: Any) -> CourseOffering:
        return cls(
            id=row.id,
            title=row.title,
            subtitle=row.subtitle or "",
            fallback_locations=tuple(row.locations or ()),
            fallback_time_slots=tuple(row.times or ()),
        )


@dataclass(frozen=True)
class ScheduleSlot:
    """One (location, day, time) offering of a course."""

    location: str
    day_of_week: str
    start_time: str
    end_time: str | None = None

    @classmethod
    def from_row(cls, row: Any) -> ScheduleSlot:
        return cls(
            location=row.location,
            day_of_week=row.day_of_week,
            start_time=row.start_time,
            end_time=row.end_time,
        )


@dataclass(frozen=True)
class LearningPeriod:
    """A named enrollment window of a course."""

    name: str
    start_date: date
    end_date: date
    is_active: bool = True

    @classmethod
    def from_row(cls, row: Any) -> LearningPeriod:
        return cls(
            name=row.name,
            start_date=row.start_date,
            end_date=row.end_date,
            is_active=row.is_active,
        )


@dataclass(frozen=True)
class VariantPrefill:
    """Selections carried over from a course variant the visitor clicked.

    Course detail pages open the dialog with the variant's gender, place, time
    and period already chosen.
    """

    gender: str | None = None
    location: str | None = None
    day_of_week: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    learning_period: str | None = None

    @classmethod
    def from_row(cls, row: Any) -> VariantPrefill:
        return cls(
            gender=row.gender,
            location=row.location,
            day_of_week=row.day_of_week,
            start_time=row.start_time,
            end_time=row.end_time,
            learning_period=row.learning_period,
        )
