"""Registration dialog - drives the form against the store."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from tichnuta.registration.form import FetchTicket, FormOptions, RegistrationForm
from tichnuta.registration.models import CourseOffering, VariantPrefill

if TYPE_CHECKING:
    from tichnuta.registration.handler import SubmissionHandler, SubmissionResult
    from tichnuta.registration.loader import ScheduleLoader

logger = logging.getLogger(__name__)


class RegistrationDialog:
    """A registration dialog over a list of course offerings.

    Loads run in worker threads; their results are applied on the event loop
    as they arrive, so schedules may show before periods (or the other way
    round). Results for a course the visitor has since moved away from are
    dropped.
    """

    def __init__(
        self,
        courses: Sequence[CourseOffering],
        loader: ScheduleLoader,
        handler: SubmissionHandler,
        selected_course_id: str | None = None,
        force_open: bool = False,
        on_close: Callable[[], None] | None = None,
        prefill: VariantPrefill | None = None,
    ) -> None:
        """Initialize the dialog.

        Args:
            courses: Courses offered in the course selector.
            loader: Fetches schedules and periods for a course.
            handler: Validates and stores the submission.
            selected_course_id: Course to preselect (e.g. from a course page).
            force_open: Open immediately, for deep links.
            on_close: Called whenever the dialog closes, e.g. to clear the
                deep-link query parameter.
            prefill: Variant selections to apply once the course data is loaded.
        """
        preselected = next((c.title for c in courses if c.id == selected_course_id), "")
        self.form = RegistrationForm(courses, preselected_course=preselected)
        self.is_open = force_open
        self._loader = loader
        self._handler = handler
        self._on_close = on_close
        self._prefill = prefill

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        """Close without submitting. The form state is discarded."""
        self.form.reset()
        self.is_open = False
        if self._on_close is not None:
            self._on_close()

    async def load(self) -> None:
        """Load data for the currently selected course (the preselected one on open).

        The variant prefill is applied only if the visitor has not switched
        course or closed the dialog while the load was running.
        """
        ticket = self.form.current_ticket()
        await self._load(ticket)
        if (
            self._prefill is not None
            and self.form.selected_course is not None
            and self.form.is_current(ticket)
        ):
            self.form.prefill(self._prefill)

    async def choose_course(self, title: str) -> None:
        """Select a course and load its schedules and periods."""
        await self._load(self.form.select_course(title))

    def choose_location(self, location: str) -> None:
        self.form.select_location(location)

    def set_field(self, name: str, value: str) -> None:
        self.form.set_field(name, value)

    def options(self) -> FormOptions:
        return self.form.options()

    async def submit(self) -> SubmissionResult:
        """Submit the form. On success the form is reset and the dialog closes."""
        result = await asyncio.to_thread(self._handler.submit, self.form.values.as_dict())
        if result.ok:
            self.close()
        return result

    async def _load(self, ticket: FetchTicket) -> None:
        if ticket.course_id is None:
            return
        course_id = ticket.course_id

        async def load_schedules() -> None:
            slots = await asyncio.to_thread(self._loader.fetch_schedules, course_id)
            if not self.form.apply_schedules(ticket, slots):
                logger.debug("Discarded stale schedules for course %s", course_id)

        async def load_periods() -> None:
            periods = await asyncio.to_thread(self._loader.fetch_periods, course_id)
            if not self.form.apply_periods(ticket, periods):
                logger.debug("Discarded stale periods for course %s", course_id)

        await asyncio.gather(load_schedules(), load_periods())
