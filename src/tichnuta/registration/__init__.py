"""Registration - course registration form, option derivation and submission."""

from tichnuta.registration.dialog import RegistrationDialog
from tichnuta.registration.exceptions import (
    PersistenceError,
    RegistrationError,
    RegistrationValidationError,
)
from tichnuta.registration.form import FetchTicket, FormOptions, FormValues, RegistrationForm
from tichnuta.registration.handler import (
    SUBMIT_FAILURE,
    SUBMIT_SUCCESS,
    Notification,
    SubmissionHandler,
    SubmissionResult,
)
from tichnuta.registration.loader import ScheduleLoader
from tichnuta.registration.models import (
    CourseOffering,
    LearningPeriod,
    ScheduleSlot,
    VariantPrefill,
)
from tichnuta.registration.resolver import (
    format_slot,
    resolve_locations,
    resolve_periods,
    resolve_time_slots_for_location,
)
from tichnuta.registration.validation import RegistrationSubmission, validate_registration

__all__ = [
    "SUBMIT_FAILURE",
    "SUBMIT_SUCCESS",
    "CourseOffering",
    "FetchTicket",
    "FormOptions",
    "FormValues",
    "LearningPeriod",
    "Notification",
    "PersistenceError",
    "RegistrationDialog",
    "RegistrationError",
    "RegistrationForm",
    "RegistrationSubmission",
    "RegistrationValidationError",
    "ScheduleLoader",
    "ScheduleSlot",
    "SubmissionHandler",
    "SubmissionResult",
    "VariantPrefill",
    "format_slot",
    "resolve_locations",
    "resolve_periods",
    "resolve_time_slots_for_location",
    "validate_registration",
]
