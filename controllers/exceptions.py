"""Errors raised by the train session command API."""


class SessionError(Exception):
    """Base class for session errors, also raised for invalid lifecycle calls."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class NotConnectedError(SessionError):
    """A command was issued while the session was not connected."""

    pass


class TransportFailureError(SessionError):
    """The command frame could not be written to the link."""

    pass
