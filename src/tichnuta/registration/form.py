"""Registration form state.

The form is a small state machine over the visitor's selections plus the two
collections loaded for the selected course:

- choosing a course clears location and time, and starts a fresh load;
- choosing a different location clears time;
- any other field changes on its own.

Every load is issued under a ``FetchTicket``. Choosing another course (or
resetting) bumps the form's generation, so results that arrive for an earlier
selection are dropped instead of overwriting the current options.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass, field

from tichnuta.registration.models import (
    CourseOffering,
    LearningPeriod,
    ScheduleSlot,
    VariantPrefill,
)
from tichnuta.registration.resolver import (
    format_slot,
    location_placeholder,
    period_placeholder,
    resolve_locations,
    resolve_periods,
    resolve_time_slots_for_location,
    time_placeholder,
)

CASCADING_FIELDS = frozenset({"course", "location"})


@dataclass
class FormValues:
    """Current values of the registration form fields."""

    name: str = ""
    phone: str = ""
    email: str = ""
    course: str = ""
    location: str = ""
    grade: str = ""
    time: str = ""
    gender: str = ""
    learning_period: str = ""
    message: str = ""

    def as_dict(self) -> dict[str, str]:
        return asdict(self)


FIELD_NAMES = frozenset(FormValues.__dataclass_fields__)


@dataclass(frozen=True)
class FetchTicket:
    """Identifies the course selection a load was issued for."""

    generation: int
    course_id: str | None


@dataclass
class FormOptions:
    """Everything needed to render the form's selectors."""

    values: FormValues
    locations: list[str] = field(default_factory=list)
    time_slots: list[str] = field(default_factory=list)
    periods: list[str] = field(default_factory=list)
    location_placeholder: str | None = None
    time_placeholder: str | None = None
    period_placeholder: str | None = None
    time_enabled: bool = False


class RegistrationForm:
    """Reducer for the registration dialog's fields and derived option lists."""

    def __init__(
        self,
        courses: Sequence[CourseOffering],
        preselected_course: str = "",
    ) -> None:
        """Initialize the form.

        Args:
            courses: Courses the visitor can choose from.
            preselected_course: Title of the course to start with (optional).
        """
        self._courses = {course.title: course for course in courses}
        self._preselected = preselected_course
        self._generation = 0
        self.values = FormValues(course=preselected_course)
        self.schedules: list[ScheduleSlot] = []
        self.learning_periods: list[LearningPeriod] = []

    @property
    def courses(self) -> list[CourseOffering]:
        return list(self._courses.values())

    @property
    def selected_course(self) -> CourseOffering | None:
        return self._courses.get(self.values.course)

    @property
    def generation(self) -> int:
        return self._generation

    def current_ticket(self) -> FetchTicket:
        """Ticket for loading the currently selected course's data."""
        course = self.selected_course
        return FetchTicket(self._generation, course.id if course else None)

    def is_current(self, ticket: FetchTicket) -> bool:
        return ticket.generation == self._generation

    # --- Transitions ---

    def select_course(self, title: str) -> FetchTicket:
        """Choose a course.

        Location and time are always cleared and previously loaded data is
        dropped, even when the same course is chosen again.

        Returns:
            Ticket to load the new course's schedules and periods under.
        """
        self.values.course = title
        self.values.location = ""
        self.values.time = ""
        self.schedules = []
        self.learning_periods = []
        self._generation += 1
        return self.current_ticket()

    def select_location(self, location: str) -> None:
        """Choose a location; the chosen time is cleared only if the location changed."""
        if location != self.values.location:
            self.values.time = ""
        self.values.location = location

    def set_field(self, name: str, value: str) -> None:
        """Set a non-cascading field (time, period, contact details, ...).

        Raises:
            ValueError: For unknown fields, or for course/location, which have
                their own transitions.
        """
        if name in CASCADING_FIELDS:
            raise ValueError(f"Use select_{name}() to change '{name}'")
        if name not in FIELD_NAMES:
            raise ValueError(f"Unknown form field: {name}")
        setattr(self.values, name, value)

    def apply_schedules(self, ticket: FetchTicket, slots: Sequence[ScheduleSlot]) -> bool:
        """Store loaded schedule slots if they are for the current selection.

        Returns:
            False if the result was stale and has been discarded.
        """
        if not self.is_current(ticket):
            return False
        self.schedules = list(slots)
        return True

    def apply_periods(self, ticket: FetchTicket, periods: Sequence[LearningPeriod]) -> bool:
        """Store loaded learning periods if they are for the current selection.

        Returns:
            False if the result was stale and has been discarded.
        """
        if not self.is_current(ticket):
            return False
        self.learning_periods = [p for p in periods if p.is_active]
        return True

    def prefill(self, variant: VariantPrefill) -> None:
        """Apply a course variant's selections on top of the current course."""
        if variant.location:
            self.select_location(variant.location)
        if variant.day_of_week and variant.start_time:
            self.values.time = format_slot(
                ScheduleSlot(
                    location=variant.location or "",
                    day_of_week=variant.day_of_week,
                    start_time=variant.start_time,
                    end_time=variant.end_time,
                )
            )
        if variant.gender:
            self.values.gender = variant.gender
        if variant.learning_period:
            self.values.learning_period = variant.learning_period

    def reset(self) -> None:
        """Return to the initial state. In-flight loads become stale."""
        self.values = FormValues(course=self._preselected)
        self.schedules = []
        self.learning_periods = []
        self._generation += 1

    # --- Derived lists ---

    @property
    def locations(self) -> list[str]:
        course = self.selected_course
        if course is None:
            return []
        return resolve_locations(self.schedules, course.fallback_locations)

    @property
    def time_slots(self) -> list[str]:
        course = self.selected_course
        if course is None:
            return []
        return resolve_time_slots_for_location(
            self.schedules, course.fallback_time_slots, self.values.location
        )

    @property
    def periods(self) -> list[str]:
        return resolve_periods(self.learning_periods)

    @property
    def time_enabled(self) -> bool:
        return bool(self.values.location)

    def options(self) -> FormOptions:
        """Snapshot of values and option lists for rendering."""
        course_selected = self.selected_course is not None
        locations = self.locations
        time_slots = self.time_slots
        periods = self.periods
        return FormOptions(
            values=FormValues(**self.values.as_dict()),
            locations=locations,
            time_slots=time_slots,
            periods=periods,
            location_placeholder=location_placeholder(course_selected, locations),
            time_placeholder=time_placeholder(self.time_enabled, time_slots),
            period_placeholder=period_placeholder(course_selected, periods),
            time_enabled=self.time_enabled,
        )
