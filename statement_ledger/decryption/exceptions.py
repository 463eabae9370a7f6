class DecryptionError(Exception):
    """Base exception for password resolution errors."""


class PasswordEntryCancelledError(DecryptionError):
    """Raised when the user declines to enter a password.

    Fatal for the document being opened; never retried.
    """
