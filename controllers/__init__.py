from .exceptions import NotConnectedError, SessionError, TransportFailureError
from .train_session import SessionState, TrainSession

__all__ = [
    "NotConnectedError",
    "SessionError",
    "TransportFailureError",
    "SessionState",
    "TrainSession",
]
