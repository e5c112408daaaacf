"""
Letterbox Errors
================

Every failure a request can end in. Each error carries the HTTP status it maps
to and a message that is safe to show to the visitor; infrastructure errors keep
the underlying cause for the server log only.
"""


class LetterboxError(Exception):
    """Base class for all Letterbox errors."""

    status_code = 500
    public_message = 'Something went wrong while processing your request. Please try again later.'

    def __init__(self, message=None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ValidationError(LetterboxError):
    """Malformed input the visitor can correct."""

    status_code = 400
    public_message = 'Please enter a valid email address.'


class RateLimitError(LetterboxError):
    """Too many attempts from one client inside the rate window."""

    status_code = 429

    def __init__(self, retry_after):
        self.retry_after = max(int(retry_after), 1)
        minutes = max((self.retry_after + 59) // 60, 1)
        unit = 'minute' if minutes == 1 else 'minutes'
        super().__init__(f'Too many attempts. Please try again in {minutes} {unit}.')


class ConflictError(LetterboxError):
    """Email address is already subscribed. Informational, not a failure."""

    status_code = 200
    public_message = 'This email address is already subscribed.'


class NotFoundError(LetterboxError):
    """Unsubscribe token matches no subscriber. Informational, not a failure."""

    status_code = 200
    public_message = 'This subscription was not found. It may have already been removed.'


class StoreError(LetterboxError):
    """Database failure."""


class MailError(LetterboxError):
    """Outbound email could not be delivered."""
