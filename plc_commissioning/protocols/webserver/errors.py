# plc_commissioning/protocols/webserver/errors.py
"""
Exceptions raised by the webserver RPC session layer.

Hierarchy:
    WebserverRPCError
    ├── UninitializedError     (operation before initialize())
    ├── InvalidArgumentError   (rejected locally, no remote call)
    └── TransportFault         (anything the request transport reports)
        └── ConnectionFault    (connect / authentication failed)
"""


class WebserverRPCError(Exception):
    """Base class for all session layer errors."""


class UninitializedError(WebserverRPCError, RuntimeError):
    """An operation was attempted before the session was initialised."""

    def __init__(self, component: str = "RPCSession"):
        super().__init__(
            f"{component} is not initialized. Call initialize() first."
        )
        self.component = component


class InvalidArgumentError(WebserverRPCError, ValueError):
    """Argument rejected before any remote call was made."""

    def __init__(self, message: str, argument: str = ""):
        super().__init__(message)
        self.argument = argument


class TransportFault(WebserverRPCError):
    """
    Failure reported by (or raised inside) the request transport.

    Attributes:
        code: Device API error code when the device supplied one
        method: Remote method that failed, e.g. "PlcProgram.Read"
    """

    def __init__(self, message: str, code: int | None = None, method: str = ""):
        super().__init__(message)
        self.code = code
        self.method = method

    def __str__(self) -> str:
        text = super().__str__()
        if self.code is not None:
            text = f"{text} (code {self.code})"
        return text

    @classmethod
    def wrap(cls, error: Exception, method: str = "") -> "TransportFault":
        """Return error as a TransportFault, converting foreign exceptions."""
        if isinstance(error, TransportFault):
            return error
        fault = cls(f"{type(error).__name__}: {error}", method=method)
        fault.__cause__ = error
        return fault


class ConnectionFault(TransportFault):
    """Connecting or authenticating against the PLC failed."""
