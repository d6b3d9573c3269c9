# plc_commissioning/protocols/webserver/controller_service.py
"""
Operating mode service.

Reads and changes the PLC run-state. Mode calls are best effort: a
transport fault is logged and returned as None / False so the calling
program can branch instead of crash.
"""

from plc_commissioning.protocols.webserver.api_types import OperatingMode
from plc_commissioning.protocols.webserver.errors import TransportFault
from plc_commissioning.protocols.webserver.rpc_session import RPCSession
from plc_commissioning.security.logging_system import (
    EventCategory,
    ICSLogger,
    get_logger,
)


class ControllerService:
    """Read and change the PLC operating mode through an RPCSession."""

    def __init__(self, session: RPCSession):
        self.session = session
        self.last_fault: TransportFault | None = None
        self.logger: ICSLogger = get_logger(__name__, device="webserver_rpc")

    async def get_operating_mode(self) -> str | None:
        """
        Read the current operating mode.

        Returns:
            Canonical mode text such as "Run", or None if the read failed
        """
        self.session.ensure_ready("ControllerService")
        self.logger.info("Reading PLC operating mode.")
        try:
            mode = await self.session.transport.read_mode(self.session.handle)
        except Exception as e:
            self.last_fault = TransportFault.wrap(e, method="Plc.ReadOperatingMode")
            self.logger.record_fault(
                "Error while reading PLC operating mode.",
                error=e,
                device=self.session.host,
                component="ControllerService",
                method="Plc.ReadOperatingMode",
            )
            return None

        self.last_fault = None
        if mode is None:
            self.logger.warning("PLC reported no operating mode.")
            return None
        text = str(mode)
        self.logger.info("PLC operating mode is %s.", text)
        return text

    async def change_operating_mode(self, mode: OperatingMode) -> bool:
        """
        Request a transition to mode.

        Returns:
            The device's reported success, or False if the request failed
        """
        self.session.ensure_ready("ControllerService")
        self.logger.info("Changing PLC mode to %s.", mode)
        try:
            success = await self.session.transport.write_mode(
                self.session.handle, mode
            )
        except Exception as e:
            self.last_fault = TransportFault.wrap(
                e, method="Plc.RequestChangeOperatingMode"
            )
            self.logger.record_fault(
                f"Error while changing PLC operating mode to {mode}.",
                error=e,
                category=EventCategory.PROCESS,
                device=self.session.host,
                component="ControllerService",
                method="Plc.RequestChangeOperatingMode",
                data={"mode": str(mode)},
            )
            return False

        self.last_fault = None
        success = bool(success)
        self.logger.info("PLC mode change to %s success: %s.", mode, success)
        return success
