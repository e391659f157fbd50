"""
Link-level exceptions surfaced by the connection manager.

None of these are retried internally; reconnect and retry are caller policy.
"""


class TransportError(Exception):
    """Base class for link and transport failures."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class ConnectError(TransportError):
    """Link establishment failed."""

    pass


class ConnectTimeoutError(ConnectError):
    """Link or subscription was not established within the timeout."""

    pass


class DeviceNotFoundError(ConnectError):
    """The transport could not find the requested device."""

    pass


class ConnectTransportError(ConnectError):
    """The transport reported an error while connecting or subscribing."""

    pass


class WriteError(TransportError):
    """A command frame could not be handed to the transport."""

    pass


class WriteNotConnectedError(WriteError):
    """No link is established."""

    pass


class WriteTransportError(WriteError):
    """The transport rejected or failed the write."""

    pass
