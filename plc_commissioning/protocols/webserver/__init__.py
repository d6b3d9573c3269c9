"""PLC webserver RPC session layer."""

from plc_commissioning.protocols.webserver.api_types import (
    ApiErrorCode,
    ApiMethod,
    BrowseEntry,
    BrowseMode,
    BrowseResult,
    OperatingMode,
    ReadWriteMode,
)
from plc_commissioning.protocols.webserver.controller_service import (
    ControllerService,
)
from plc_commissioning.protocols.webserver.errors import (
    ConnectionFault,
    InvalidArgumentError,
    TransportFault,
    UninitializedError,
    WebserverRPCError,
)
from plc_commissioning.protocols.webserver.request_transport import (
    RequestTransport,
    TransportConfig,
)
from plc_commissioning.protocols.webserver.rpc_controller import RPCController
from plc_commissioning.protocols.webserver.rpc_session import RPCSession, SessionState
from plc_commissioning.protocols.webserver.variable_service import VariableService
from plc_commissioning.protocols.webserver.webserver_simulator import (
    SimulatedWebserverAdapter,
)

__all__ = [
    # Facade
    "RPCController",
    # Services
    "RPCSession",
    "SessionState",
    "ControllerService",
    "VariableService",
    # Transport
    "RequestTransport",
    "TransportConfig",
    "SimulatedWebserverAdapter",
    # Types
    "ApiErrorCode",
    "ApiMethod",
    "BrowseEntry",
    "BrowseMode",
    "BrowseResult",
    "OperatingMode",
    "ReadWriteMode",
    # Errors
    "WebserverRPCError",
    "UninitializedError",
    "InvalidArgumentError",
    "TransportFault",
    "ConnectionFault",
]
