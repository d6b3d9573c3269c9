# plc_commissioning/protocols/webserver/rpc_controller.py
"""
Single entry point for PLC webserver commissioning.

Composes RPCSession, ControllerService and VariableService around one
transport. Holds no behaviour of its own beyond construction and
forwarding.
"""

from collections.abc import Callable, Iterable
from typing import Any

from plc_commissioning.protocols.webserver.controller_service import (
    ControllerService,
)
from plc_commissioning.protocols.webserver.request_transport import (
    TransportConfig,
)
from plc_commissioning.protocols.webserver.rpc_session import RPCSession
from plc_commissioning.protocols.webserver.variable_service import VariableService
from plc_commissioning.security.logging_system import ICSLogger, get_logger


class RPCController:
    """
    Facade over the webserver session layer.

    Usage:
        rpc = await RPCController.connect(transport, "192.168.0.1", "Admin", "pw")
        if await rpc.supports(["PlcProgram.Read", "PlcProgram.Write"]):
            await rpc.variables.write('"Data".Integer', 99)
    """

    def __init__(self, transport):
        self.logger: ICSLogger = get_logger(__name__, device="webserver_rpc")

        self.session = RPCSession(transport)
        self.plc = ControllerService(self.session)
        self.variables = VariableService(self.session)

        self.logger.info("RPCController initialized.")

    @property
    def transport(self):
        return self.session.transport

    @property
    def is_initialized(self) -> bool:
        return self.session.is_initialized

    async def initialize(self, host: str, username: str, password: str) -> None:
        await self.session.initialize(host, username, password)

    async def supports(self, names: Iterable[str]) -> bool:
        """Does the device expose every method in names?"""
        return await self.session.has_required_methods(names)

    @classmethod
    async def connect(
        cls, transport, host: str, username: str, password: str
    ) -> "RPCController":
        """Create a controller and initialise its session in one step."""
        controller = cls(transport)
        await controller.initialize(host, username, password)
        return controller

    @classmethod
    async def from_config(
        cls,
        config: dict[str, Any],
        transport_factory: Callable[[TransportConfig], Any],
    ) -> "RPCController":
        """
        Build the transport from loaded configuration and connect.

        Args:
            config: Result of ConfigLoader.load_all()
            transport_factory: Called with the TransportConfig, returns a transport
        """
        transport_config = TransportConfig.from_dict(config.get("transport"))
        if not transport_config.verify_certificate:
            get_logger(__name__, device="webserver_rpc").warning(
                "Certificate verification disabled for this transport."
            )

        connection = config.get("connection", {})
        return await cls.connect(
            transport_factory(transport_config),
            connection.get("host", ""),
            connection.get("username", ""),
            connection.get("password", ""),
        )
