# petition_site/errors.py
"""Failures raised by the petition services.

Hierarchy:
- PetitionError: base class
  - ValidationError: a field was missing or malformed, nothing was written
  - DuplicateSignatureError: the email already signed, use the edit flow
  - AuthenticationError: edit code missing, wrong, expired or already used
    - InvalidOrExpiredCodeError: raised by code verification
  - NotFoundError: a referenced public resource (forum thread) does not exist
  - ExternalServiceError: a third-party provider failed
    - TranslationError
    - NotificationError

Authentication failures always carry the same message whatever the cause, so
callers cannot tell a wrong code from an expired or unknown one.
"""


class PetitionError(Exception):
    """Base class for failures surfaced by the petition services."""
    pass


class ValidationError(PetitionError):
    """Raised when a submitted field is missing or malformed."""

    def __init__(self, field, reason):
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class DuplicateSignatureError(PetitionError):
    """Raised when an email address has already been used to sign."""

    DEFAULT_MESSAGE = (
        "This email address has already been used to sign the petition. "
        'Please click on "Manage my Signature" to update your information.'
    )

    def __init__(self, message=None):
        super().__init__(message or self.DEFAULT_MESSAGE)


class AuthenticationError(PetitionError):
    """Raised when an edit is attempted without a valid edit code."""

    DEFAULT_MESSAGE = "Session expired or invalid. Please request a new code."

    def __init__(self, message=None):
        super().__init__(message or self.DEFAULT_MESSAGE)


class InvalidOrExpiredCodeError(AuthenticationError):
    """Raised when no unused, unexpired code matches the email and code given."""

    DEFAULT_MESSAGE = "Invalid or expired code"


class NotFoundError(PetitionError):
    pass


class ExternalServiceError(PetitionError):
    pass


class TranslationError(ExternalServiceError):
    pass


class NotificationError(ExternalServiceError):
    pass
