"""Loading of schedule slots and learning periods for the registration form."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from tichnuta.registration.models import LearningPeriod, ScheduleSlot
from tichnuta.site_store import SiteStoreError

if TYPE_CHECKING:
    from tichnuta.site_store import SiteStore

logger = logging.getLogger(__name__)

# Failures that mean "no data right now" rather than a bug in the caller
FETCH_ERRORS = (SiteStoreError, SQLAlchemyError, OSError)


class ScheduleLoader:
    """Fetches a course's schedule slots and active periods.

    A failed fetch degrades to an empty list and is only logged; the form then
    falls back to the course's own location/time lists or its empty-state
    placeholders.
    """

    def __init__(self, store: SiteStore) -> None:
        self._store = store

    def fetch_schedules(self, course_id: str) -> list[ScheduleSlot]:
        """Get the course's schedule slots, or [] if they could not be loaded."""
        try:
            rows = self._store.list_schedules(course_id)
        except FETCH_ERRORS:
            logger.warning("Failed to load schedules for course %s", course_id, exc_info=True)
            return []
        return [ScheduleSlot.from_row(row) for row in rows]

    def fetch_periods(self, course_id: str) -> list[LearningPeriod]:
        """Get the course's active periods by start date, or [] if they could not be loaded."""
        try:
            rows = self._store.list_periods(course_id, active_only=True)
        except FETCH_ERRORS:
            logger.warning("Failed to load periods for course %s", course_id, exc_info=True)
            return []
        return [LearningPeriod.from_row(row) for row in rows if row.is_active]
