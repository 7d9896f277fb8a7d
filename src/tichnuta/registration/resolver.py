"""Derivation of the registration form's option lists.

Pure functions over the schedule slots and learning periods fetched for the
selected course. When a course has no schedule slots, its coarse fallback
lists are used instead: every fallback location is offered with every
fallback time-slot, since the fallback data has no per-location times.
"""

from __future__ import annotations

from collections.abc import Sequence

from tichnuta.registration.models import LearningPeriod, ScheduleSlot

SELECT_COURSE_FIRST = "יש לבחור קורס תחילה"
NO_LOCATIONS_DEFINED = "לא הוגדרו מיקומים לקורס זה"
SELECT_LOCATION_FIRST = "יש לבחור מיקום תחילה"
NO_TIMES_DEFINED = "לא הוגדרו ימים ושעות"
NO_PERIODS_DEFINED = "לא הוגדרו תקופות לימוד לקורס זה"


def format_slot(slot: ScheduleSlot) -> str:
    """Render a slot as ``"{day} {start}"``, plus ``" - {end}"`` when it has an end time."""
    label = f"{slot.day_of_week} {slot.start_time}"
    if slot.end_time:
        label += f" - {slot.end_time}"
    return label


def resolve_locations(
    schedule_slots: Sequence[ScheduleSlot], fallback_locations: Sequence[str]
) -> list[str]:
    """Distinct slot locations in first-seen order, or the fallback list when there are no slots."""
    if not schedule_slots:
        return list(fallback_locations)
    return list(dict.fromkeys(slot.location for slot in schedule_slots))


def resolve_time_slots_for_location(
    schedule_slots: Sequence[ScheduleSlot],
    fallback_time_slots: Sequence[str],
    selected_location: str | None,
) -> list[str]:
    """Time-slot labels offered at ``selected_location``.

    Slots at the location keep their original order and are not deduplicated.
    With no matching slot the course's fallback times are offered, otherwise
    nothing. Without a selected location there is nothing to offer.
    """
    if not selected_location:
        return []
    matching = [slot for slot in schedule_slots if slot.location == selected_location]
    if matching:
        return [format_slot(slot) for slot in matching]
    if fallback_time_slots:
        return list(fallback_time_slots)
    return []


def resolve_periods(periods: Sequence[LearningPeriod]) -> list[str]:
    """Period names in the given order.

    The input is expected to be active-only and sorted by start date already;
    that is done when the periods are fetched.
    """
    return [period.name for period in periods]


def location_placeholder(course_selected: bool, locations: Sequence[str]) -> str | None:
    """Empty-state text for the location selector, or None when it has options."""
    if not course_selected:
        return SELECT_COURSE_FIRST
    if not locations:
        return NO_LOCATIONS_DEFINED
    return None


def time_placeholder(location_selected: bool, time_slots: Sequence[str]) -> str | None:
    """Empty-state text for the day/time selector, or None when it has options."""
    if not location_selected:
        return SELECT_LOCATION_FIRST
    if not time_slots:
        return NO_TIMES_DEFINED
    return None


def period_placeholder(course_selected: bool, periods: Sequence[str]) -> str | None:
    """Empty-state text for the learning-period selector, or None when it has options."""
    if not course_selected:
        return SELECT_COURSE_FIRST
    if not periods:
        return NO_PERIODS_DEFINED
    return None
