# tests/unit/protocols/webserver/test_controller_service.py
"""
Unit tests for ControllerService (operating mode).
"""

import pytest

from plc_commissioning.protocols.webserver.api_types import OperatingMode
from plc_commissioning.protocols.webserver.controller_service import (
    ControllerService,
)
from plc_commissioning.protocols.webserver.errors import (
    TransportFault,
    UninitializedError,
)
from plc_commissioning.protocols.webserver.rpc_session import RPCSession


@pytest.fixture
def controller(ready_session):
    return ControllerService(ready_session)


# ================================================================
# READ MODE TESTS
# ================================================================
class TestGetOperatingMode:
    @pytest.mark.asyncio
    async def test_returns_canonical_text(self, controller, mock_transport):
        mock_transport.read_mode.return_value = OperatingMode.STOP

        assert await controller.get_operating_mode() == "Stop"
        mock_transport.read_mode.assert_awaited_once_with("ticket-1")

    @pytest.mark.asyncio
    async def test_fault_returns_none(self, controller, mock_transport):
        mock_transport.read_mode.side_effect = ConnectionResetError("lost")

        assert await controller.get_operating_mode() is None
        assert isinstance(controller.last_fault, TransportFault)
        assert controller.last_fault.method == "Plc.ReadOperatingMode"

    @pytest.mark.asyncio
    async def test_fault_is_recorded(self, controller, mock_transport):
        mock_transport.read_mode.side_effect = ConnectionResetError("lost")

        await controller.get_operating_mode()

        trail = controller.logger.get_fault_trail()
        assert trail[-1].component == "ControllerService"
        assert "lost" in trail[-1].error

    @pytest.mark.asyncio
    async def test_success_clears_last_fault(self, controller, mock_transport):
        mock_transport.read_mode.side_effect = [ConnectionResetError("lost"), OperatingMode.RUN]

        await controller.get_operating_mode()
        assert controller.last_fault is not None

        assert await controller.get_operating_mode() == "Run"
        assert controller.last_fault is None

    @pytest.mark.asyncio
    async def test_no_mode_reported_returns_none(self, controller, mock_transport):
        mock_transport.read_mode.return_value = None

        assert await controller.get_operating_mode() is None
        assert controller.last_fault is None


# ================================================================
# CHANGE MODE TESTS
# ================================================================
class TestChangeOperatingMode:
    @pytest.mark.asyncio
    async def test_returns_reported_success(self, controller, mock_transport):
        assert await controller.change_operating_mode(OperatingMode.STOP) is True
        mock_transport.write_mode.assert_awaited_once_with(
            "ticket-1", OperatingMode.STOP
        )

    @pytest.mark.asyncio
    async def test_device_refusal_returns_false(self, controller, mock_transport):
        mock_transport.write_mode.return_value = False

        assert await controller.change_operating_mode(OperatingMode.RUN) is False
        assert controller.last_fault is None

    @pytest.mark.asyncio
    async def test_fault_returns_false(self, controller, mock_transport):
        mock_transport.write_mode.side_effect = TransportFault("busy", code=3)

        assert await controller.change_operating_mode(OperatingMode.RUN) is False
        assert controller.last_fault.code == 3


# ================================================================
# GUARD TESTS
# ================================================================
class TestControllerServiceGuard:
    @pytest.mark.asyncio
    async def test_get_requires_initialized_session(self, mock_transport, call_count):
        controller = ControllerService(RPCSession(mock_transport))

        with pytest.raises(UninitializedError):
            await controller.get_operating_mode()

        assert call_count(mock_transport) == 0

    @pytest.mark.asyncio
    async def test_change_requires_initialized_session(
        self, mock_transport, call_count
    ):
        controller = ControllerService(RPCSession(mock_transport))

        with pytest.raises(UninitializedError):
            await controller.change_operating_mode(OperatingMode.STOP)

        assert call_count(mock_transport) == 0
