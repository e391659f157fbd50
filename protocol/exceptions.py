"""
Exceptions raised by the frame codec.

Command construction errors are caller bugs and propagate. Decode errors are
contained by the session that owns the notification stream.
"""


class ProtocolError(Exception):
    """Base class for codec errors."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class InvalidArgumentError(ProtocolError, ValueError):
    """Raised when a command is constructed with an out-of-range argument."""

    pass


class DecodeError(ProtocolError):
    """Raised when a notification frame cannot be interpreted."""

    def __init__(self, detail: str, frame: bytes):
        self.frame = frame
        super().__init__(detail)


class UnexpectedLengthError(DecodeError):
    """Frame length matches no known notification layout."""

    pass


class InvalidFieldValueError(DecodeError):
    """A known field carries a value outside its defined range."""

    pass
