"""Unit tests for RegistrationForm."""

from datetime import date

import pytest

from tichnuta.registration import (
    CourseOffering,
    LearningPeriod,
    RegistrationForm,
    ScheduleSlot,
    VariantPrefill,
)
from tichnuta.registration.resolver import NO_TIMES_DEFINED, SELECT_LOCATION_FIRST

PYTHON = CourseOffering(id="c-python", title="Python for Kids")
SCRATCH = CourseOffering(
    id="c-scratch",
    title="Scratch",
    fallback_locations=("Home",),
    fallback_time_slots=("Mon 10:00", "Wed 14:00"),
)

PYTHON_SLOTS = [
    ScheduleSlot("Center A", "Sunday", "17:00"),
    ScheduleSlot("Center A", "Tuesday", "18:00"),
    ScheduleSlot("Center B", "Monday", "16:00"),
]


@pytest.fixture
def form() -> RegistrationForm:
    return RegistrationForm([PYTHON, SCRATCH])


def loaded(form: RegistrationForm, title: str, slots=(), periods=()) -> RegistrationForm:
    ticket = form.select_course(title)
    form.apply_schedules(ticket, list(slots))
    form.apply_periods(ticket, list(periods))
    return form


@pytest.mark.unit
class TestInitialState:
    """Tests for a fresh form."""

    def test_empty_values(self, form: RegistrationForm) -> None:
        assert form.values.as_dict() == dict.fromkeys(form.values.as_dict(), "")
        assert form.selected_course is None
        assert form.locations == []
        assert form.time_slots == []
        assert not form.time_enabled

    def test_preselected_course(self) -> None:
        form = RegistrationForm([PYTHON], preselected_course="Python for Kids")
        assert form.values.course == "Python for Kids"
        assert form.current_ticket().course_id == "c-python"

    def test_no_course_ticket(self, form: RegistrationForm) -> None:
        assert form.current_ticket().course_id is None


@pytest.mark.unit
class TestCascade:
    """Tests for the course -> location -> time cascade."""

    def test_python_for_kids_scenario(self, form: RegistrationForm) -> None:
        """Locations, per-location times, and time cleared on location change."""
        loaded(form, "Python for Kids", PYTHON_SLOTS)
        assert form.locations == ["Center A", "Center B"]

        form.select_location("Center A")
        assert form.time_slots == ["Sunday 17:00", "Tuesday 18:00"]
        form.set_field("time", "Tuesday 18:00")

        form.select_location("Center B")
        assert form.time_slots == ["Monday 16:00"]
        assert form.values.time == ""

    def test_fallback_scenario(self, form: RegistrationForm) -> None:
        """No slots: fallback location offers every fallback time."""
        loaded(form, "Scratch")
        assert form.locations == ["Home"]

        form.select_location("Home")
        assert form.time_slots == ["Mon 10:00", "Wed 14:00"]

    def test_reselecting_same_location_keeps_time(self, form: RegistrationForm) -> None:
        loaded(form, "Python for Kids", PYTHON_SLOTS)
        form.select_location("Center B")
        form.set_field("time", "Monday 16:00")
        form.set_field("grade", "ד")

        form.select_location("Center B")

        assert form.values.time == "Monday 16:00"
        assert form.values.grade == "ד"

    def test_changing_course_clears_location_and_time(self, form: RegistrationForm) -> None:
        loaded(form, "Python for Kids", PYTHON_SLOTS)
        form.select_location("Center A")
        form.set_field("time", "Sunday 17:00")
        form.set_field("name", "נועם")

        form.select_course("Scratch")

        assert form.values.location == ""
        assert form.values.time == ""
        assert form.values.name == "נועם"
        assert form.schedules == []

    def test_changing_course_when_already_empty(self, form: RegistrationForm) -> None:
        form.select_course("Python for Kids")
        form.select_course("Python for Kids")
        assert form.values.location == ""
        assert form.values.time == ""

    def test_time_disabled_until_location(self, form: RegistrationForm) -> None:
        loaded(form, "Python for Kids", PYTHON_SLOTS)
        options = form.options()
        assert not options.time_enabled
        assert options.time_placeholder == SELECT_LOCATION_FIRST

        form.select_location("Center A")
        assert form.options().time_enabled

    def test_location_without_times(self) -> None:
        form = loaded(RegistrationForm([PYTHON]), "Python for Kids", PYTHON_SLOTS)
        form.select_location("Somewhere else")
        options = form.options()
        assert options.time_slots == []
        assert options.time_placeholder == NO_TIMES_DEFINED


@pytest.mark.unit
class TestSetField:
    """Tests for set_field."""

    @pytest.mark.parametrize("name", ["course", "location"])
    def test_cascading_fields_rejected(self, form: RegistrationForm, name: str) -> None:
        with pytest.raises(ValueError, match=f"select_{name}"):
            form.set_field(name, "x")

    def test_unknown_field_rejected(self, form: RegistrationForm) -> None:
        with pytest.raises(ValueError, match="Unknown form field"):
            form.set_field("age", "9")

    def test_sets_value(self, form: RegistrationForm) -> None:
        form.set_field("phone", "050-1234567")
        assert form.values.phone == "050-1234567"


@pytest.mark.unit
class TestStaleResults:
    """Tests for discarding loads issued for an earlier course selection."""

    def test_result_for_previous_course_discarded(self, form: RegistrationForm) -> None:
        first = form.select_course("Python for Kids")
        second = form.select_course("Scratch")

        assert form.apply_schedules(first, PYTHON_SLOTS) is False
        assert form.schedules == []
        assert form.apply_schedules(second, []) is True
        assert form.locations == ["Home"]

    def test_stale_periods_discarded(self, form: RegistrationForm) -> None:
        first = form.select_course("Python for Kids")
        form.select_course("Scratch")
        period = LearningPeriod("קיץ", date(2026, 7, 1), date(2026, 8, 31))

        assert form.apply_periods(first, [period]) is False
        assert form.periods == []

    def test_reset_invalidates_in_flight_loads(self, form: RegistrationForm) -> None:
        ticket = form.select_course("Python for Kids")
        form.reset()
        assert not form.is_current(ticket)
        assert form.apply_schedules(ticket, PYTHON_SLOTS) is False

    def test_inactive_periods_dropped(self, form: RegistrationForm) -> None:
        periods = [
            LearningPeriod("סמסטר א", date(2025, 9, 1), date(2026, 1, 31)),
            LearningPeriod("ישן", date(2024, 9, 1), date(2025, 1, 31), is_active=False),
        ]
        loaded(form, "Python for Kids", PYTHON_SLOTS, periods)
        assert form.periods == ["סמסטר א"]


@pytest.mark.unit
class TestPrefillAndReset:
    """Tests for prefill and reset."""

    def test_prefill_from_variant(self, form: RegistrationForm) -> None:
        loaded(form, "Python for Kids", PYTHON_SLOTS)
        form.prefill(
            VariantPrefill(
                gender="בנים",
                location="Center A",
                day_of_week="Sunday",
                start_time="17:00",
                learning_period="סמסטר א",
            )
        )

        assert form.values.location == "Center A"
        assert form.values.time == "Sunday 17:00"
        assert form.values.gender == "בנים"
        assert form.values.learning_period == "סמסטר א"

    def test_reset_restores_preselected_course(self) -> None:
        form = RegistrationForm([PYTHON], preselected_course="Python for Kids")
        form.select_location("Center A")
        form.set_field("name", "נועם")

        form.reset()

        assert form.values.course == "Python for Kids"
        assert form.values.location == ""
        assert form.values.name == ""

    def test_options_snapshot_is_a_copy(self, form: RegistrationForm) -> None:
        options = form.options()
        form.set_field("name", "changed")
        assert options.values.name == ""
