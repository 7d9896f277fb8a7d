"""Submission of completed registration forms."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from tichnuta.logging import sanitize_for_log
from tichnuta.registration.exceptions import PersistenceError, RegistrationValidationError
from tichnuta.registration.validation import RegistrationSubmission, validate_registration
from tichnuta.site_store import SiteStoreError

if TYPE_CHECKING:
    from tichnuta.site_store import Registration, SiteStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    """A toast shown to the visitor after submitting."""

    title: str
    description: str
    variant: str = "default"


SUBMIT_SUCCESS = Notification(
    title="ההרשמה התקבלה בהצלחה!",
    description="ניצור איתך קשר בהקדם האפשרי",
)
SUBMIT_FAILURE = Notification(
    title="שגיאה בשמירה",
    description="אנא נסה שוב או צור קשר ישירות",
    variant="destructive",
)


@dataclass
class SubmissionResult:
    """Outcome of a submit attempt.

    Attributes:
        ok: Whether the registration was stored.
        registration_id: ID of the stored registration.
        field_errors: Localized validation message per field.
        notification: Toast to show, if any. Validation failures have none.
    """

    ok: bool
    registration_id: str | None = None
    field_errors: dict[str, str] = field(default_factory=dict)
    notification: Notification | None = None


class SubmissionHandler:
    """Validates registration forms and writes them to the store."""

    def __init__(self, store: SiteStore, school_name: str | None = None) -> None:
        """Initialize the handler.

        Args:
            store: Store that receives the registration.
            school_name: Partner school the form is shown for (optional).
        """
        self._store = store
        self._school_name = school_name

    def submit(self, values: Mapping[str, Any]) -> SubmissionResult:
        """Validate and store a registration.

        Nothing is written when validation fails. A store failure is reported
        as a single generic notification; the caller keeps the values so the
        visitor can retry.
        """
        try:
            submission = validate_registration(values)
        except RegistrationValidationError as e:
            logger.debug("Registration rejected, invalid fields: %s", sorted(e.field_errors))
            return SubmissionResult(ok=False, field_errors=e.field_errors)

        try:
            registration = self._persist(submission)
        except PersistenceError:
            logger.exception("Failed to store registration for course %r", submission.course)
            return SubmissionResult(ok=False, notification=SUBMIT_FAILURE)

        logger.info(
            "Registration %s stored for course %r (%s)",
            registration.id,
            registration.course,
            sanitize_for_log(registration.email),
        )
        return SubmissionResult(
            ok=True, registration_id=registration.id, notification=SUBMIT_SUCCESS
        )

    def _persist(self, submission: RegistrationSubmission) -> Registration:
        try:
            return self._store.create_registration(
                **submission.model_dump(), school_name=self._school_name
            )
        except (SiteStoreError, SQLAlchemyError) as e:
            raise PersistenceError("Could not store registration") from e
