# plc_commissioning/protocols/webserver/variable_service.py
"""
PLC program variable service.

Generic typed read, write and browse of variables held in the controller's
program memory. Addresses are opaque strings such as '"Data".Integer'.

Failure contract differs per operation:
  - read propagates TransportFault; no safe default of an arbitrary type
  - write returns False on any failure
  - browse returns an empty BrowseResult on any failure
Cancellation is never absorbed: asyncio.CancelledError always propagates.
"""

import asyncio
from typing import Any, TypeVar

from plc_commissioning.protocols.webserver.api_types import (
    BrowseMode,
    BrowseResult,
    ReadWriteMode,
)
from plc_commissioning.protocols.webserver.errors import (
    InvalidArgumentError,
    TransportFault,
)
from plc_commissioning.protocols.webserver.rpc_session import RPCSession
from plc_commissioning.security.logging_system import (
    EventCategory,
    ICSLogger,
    get_logger,
)

T = TypeVar("T")


def _is_blank(name: str | None) -> bool:
    return name is None or not str(name).strip()


class VariableService:
    """Read, write and browse PLC program variables through an RPCSession."""

    def __init__(self, session: RPCSession):
        if session is None:
            raise InvalidArgumentError("Session cannot be None.", argument="session")
        self.session = session
        self.last_fault: TransportFault | None = None
        self.logger: ICSLogger = get_logger(__name__, device="webserver_rpc")

    def _check_cancelled(self, cancel_event: asyncio.Event | None, name) -> None:
        if cancel_event is not None and cancel_event.is_set():
            self.logger.warning("Request for %s cancelled before sending.", name)
            raise asyncio.CancelledError(f"request for {name} cancelled")

    # ------------------------------------------------------------
    # read
    # ------------------------------------------------------------

    async def read(
        self,
        name: str,
        result_type: type[T] = object,
        mode: ReadWriteMode = ReadWriteMode.SIMPLE,
        cancel_event: asyncio.Event | None = None,
    ) -> T:
        """
        Read a variable, decoded by the transport into result_type.

        Args:
            name: Variable address, e.g. '"Data".Integer'
            result_type: Expected Python type of the value
            mode: SIMPLE (device converts) or RAW (byte list)
            cancel_event: Set to abandon this call

        Raises:
            InvalidArgumentError: If name is empty; nothing is sent
            TransportFault: If the read failed
        """
        self.session.ensure_ready("VariableService")
        if _is_blank(name):
            self.logger.error("Invalid variable name provided for Read operation.")
            raise InvalidArgumentError(
                "Variable name cannot be null or empty.", argument="name"
            )
        self._check_cancelled(cancel_event, name)

        self.logger.info("Reading variable %s with mode %s.", name, mode)
        try:
            value = await self.session.transport.read_variable(
                self.session.handle, name, mode, result_type, cancel_event
            )
        except Exception as e:
            fault = TransportFault.wrap(e, method="PlcProgram.Read")
            self.last_fault = fault
            self.logger.record_fault(
                f"Failed to read variable {name}.",
                error=e,
                device=self.session.host,
                component="VariableService",
                method="PlcProgram.Read",
                data={"variable": name, "mode": str(mode)},
            )
            if fault is e:
                raise
            raise fault from e

        self.last_fault = None
        self.logger.info("Read response for %s: %r", name, value)
        return value

    # ------------------------------------------------------------
    # write
    # ------------------------------------------------------------

    async def write(
        self,
        name: str,
        value: Any,
        mode: ReadWriteMode = ReadWriteMode.SIMPLE,
        cancel_event: asyncio.Event | None = None,
    ) -> bool:
        """
        Write value to a variable.

        Returns:
            The device's reported success; False if the arguments are
            invalid (nothing is sent) or the write failed
        """
        self.session.ensure_ready("VariableService")
        if _is_blank(name):
            self.logger.error("Invalid variable name provided for Write operation.")
            return False
        if value is None:
            self.logger.error("Null value provided for writing to variable %s.", name)
            return False
        self._check_cancelled(cancel_event, name)

        self.logger.info(
            "Writing to variable %s with value %r and mode %s.", name, value, mode
        )
        try:
            success = await self.session.transport.write_variable(
                self.session.handle, name, value, mode, cancel_event
            )
        except Exception as e:
            self.last_fault = TransportFault.wrap(e, method="PlcProgram.Write")
            self.logger.record_fault(
                f"Failed to write to variable {name}.",
                error=e,
                category=EventCategory.PROCESS,
                device=self.session.host,
                component="VariableService",
                method="PlcProgram.Write",
                data={"variable": name, "value": value, "mode": str(mode)},
            )
            return False

        self.last_fault = None
        success = bool(success)
        self.logger.info("Write response for %s: %s", name, success)
        return success

    # ------------------------------------------------------------
    # browse
    # ------------------------------------------------------------

    async def browse(
        self,
        mode: BrowseMode,
        name: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> BrowseResult:
        """
        Browse a single variable (VAR) or the children of a container
        (CHILDREN; name None browses the root).

        Returns:
            The browse result, or an empty BrowseResult on failure
        """
        self.session.ensure_ready("VariableService")
        target = name if not _is_blank(name) else None
        label = target or "root"

        if mode is BrowseMode.VAR and target is None:
            self.logger.error("Browse mode %s requires a variable name.", mode)
            return BrowseResult()
        self._check_cancelled(cancel_event, label)

        self.logger.info("Browsing variable %s with mode %s.", label, mode)
        try:
            result = await self.session.transport.browse_variable(
                self.session.handle, mode, target, cancel_event
            )
        except Exception as e:
            self.last_fault = TransportFault.wrap(e, method="PlcProgram.Browse")
            self.logger.record_fault(
                f"Failed to browse variable {label}.",
                error=e,
                category=EventCategory.DIAGNOSTIC,
                device=self.session.host,
                component="VariableService",
                method="PlcProgram.Browse",
                data={"variable": label, "mode": str(mode)},
            )
            return BrowseResult()

        self.last_fault = None
        if result is None:
            result = BrowseResult()
        self.logger.info("Browse response for %s: %d entries", label, len(result))
        return result
