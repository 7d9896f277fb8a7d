"""Custom exceptions for the registration flow."""


class RegistrationError(Exception):
    """Base exception for registration errors."""


class RegistrationValidationError(RegistrationError):
    """Submitted form values failed validation.

    Attributes:
        field_errors: Localized message per offending field.
    """

    def __init__(self, field_errors: dict[str, str]) -> None:
        super().__init__(f"Invalid fields: {', '.join(sorted(field_errors))}")
        self.field_errors = field_errors


class PersistenceError(RegistrationError):
    """The registration could not be written to the store."""
