# plc_commissioning/protocols/webserver/rpc_session.py
"""
Webserver RPC session.

Owns the request transport handle and guards every remote call behind a
one-time initialisation. Also answers "which remote methods does this
device expose?".

State machine:
    UNINITIALIZED --initialize() ok--> READY
    UNINITIALIZED --initialize() fails--> UNINITIALIZED (retry allowed)
    READY --initialize()--> READY (logged no-op)
"""

from collections.abc import Iterable
from enum import Enum
from typing import Any

from plc_commissioning.protocols.webserver.api_types import ApiMethod
from plc_commissioning.protocols.webserver.errors import (
    ConnectionFault,
    InvalidArgumentError,
    UninitializedError,
)
from plc_commissioning.security.logging_system import (
    EventCategory,
    ICSLogger,
    get_logger,
)


class SessionState(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class RPCSession:
    """
    Authenticated session against one PLC webserver.

    Expected transport interface (duck-typed, async):
      - connect(host, username, password) -> handle
      - browse_catalog(handle) -> iterable of ApiMethod
      - plus the mode and variable calls used by ControllerService and
        VariableService (see request_transport.RequestTransport)
    """

    def __init__(self, transport):
        self.transport = transport
        self.state = SessionState.UNINITIALIZED
        self.host: str | None = None
        self._handle: Any = None

        self.logger: ICSLogger = get_logger(__name__, device="webserver_rpc")

    @property
    def is_initialized(self) -> bool:
        return self.state is SessionState.READY

    @property
    def handle(self) -> Any:
        """Transport handle; only available once the session is ready."""
        self.ensure_ready()
        return self._handle

    def ensure_ready(self, component: str = "RPCSession") -> None:
        """Raise UninitializedError unless initialize() has succeeded."""
        if self.state is not SessionState.READY:
            self.logger.error(
                "%s used before initialization.", component
            )
            raise UninitializedError(component)

    # ------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------

    async def initialize(self, host: str, username: str, password: str) -> None:
        """
        Authenticate against host and keep the resulting handle.

        Raises:
            InvalidArgumentError: If host is blank
            ConnectionFault: If the transport fails to connect; the session
                stays uninitialised so the call may be retried
        """
        if self.state is SessionState.READY:
            self.logger.warning(
                "RPCSession is already initialized for %s; ignoring request for %s.",
                self.host,
                host,
            )
            return

        if not host or not host.strip():
            self.logger.error("Invalid host provided for initialization.")
            raise InvalidArgumentError("Host cannot be empty.", argument="host")

        self.logger.info("Initializing RPCSession for host: %s", host)
        try:
            handle = await self.transport.connect(host, username, password)
        except Exception as e:
            self.logger.record_fault(
                "Failed to initialize RPCSession.",
                error=e,
                category=EventCategory.SECURITY,
                device=host,
                component="RPCSession",
                method="Api.Login",
            )
            raise ConnectionFault(
                f"Failed to connect to {host}: {e}",
                code=getattr(e, "code", None),
                method="Api.Login",
            ) from e

        self._handle = handle
        self.host = host
        self.state = SessionState.READY
        self.logger.info("RPCSession initialized successfully.")

    @classmethod
    async def create(
        cls, transport, host: str, username: str, password: str
    ) -> "RPCSession":
        """Create a session and initialise it in one step."""
        session = cls(transport)
        await session.initialize(host, username, password)
        return session

    # ------------------------------------------------------------
    # capability discovery
    # ------------------------------------------------------------

    async def browse_methods(self) -> list[ApiMethod]:
        """
        Fetch the device's method catalog.

        Never cached. Returns an empty list when the catalog cannot be read.
        """
        self.ensure_ready()
        self.logger.info("Browsing API methods.")
        try:
            methods = await self.transport.browse_catalog(self._handle)
        except Exception as e:
            self.logger.record_fault(
                "Failed to browse API methods.",
                error=e,
                category=EventCategory.DIAGNOSTIC,
                device=self.host,
                component="RPCSession",
                method="Api.Browse",
            )
            return []

        unique = self._unique_by_name(methods)
        self.logger.info("Fetched %d API methods.", len(unique))
        for method in unique:
            self.logger.debug("API Method: %s", method.name)
        return unique

    async def has_required_methods(self, names: Iterable[str]) -> bool:
        """
        True if every name is in the catalog (case-insensitive, exact).
        A single str is one method name.
        """
        self.ensure_ready()
        required = [names] if isinstance(names, str) else list(names)
        available = {m.name.casefold() for m in await self.browse_methods()}
        missing = [name for name in required if name.casefold() not in available]
        if missing:
            self.logger.warning("Missing required API methods: %s", ", ".join(missing))
            return False
        return True

    @staticmethod
    def _unique_by_name(methods) -> list[ApiMethod]:
        seen = set()
        unique = []
        for method in methods or []:
            if method.name in seen:
                continue
            seen.add(method.name)
            unique.append(method)
        return unique
