"""Exceptions raised by the decision session core."""


class SessionError(Exception):
    """Base class for decision session errors."""

    pass


class InvalidStepError(SessionError):
    """Raised when an edit is attempted outside the step that owns it."""

    pass


class InvalidInputError(SessionError):
    """Raised for blank text or out-of-range positions."""

    pass


class RequestInFlightError(SessionError):
    """Raised when a second request is sent before the first settles."""

    pass


class SessionNotFoundError(SessionError):
    """Raised when a session id is not in the store."""

    pass
