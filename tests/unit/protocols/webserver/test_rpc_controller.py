# tests/unit/protocols/webserver/test_rpc_controller.py
"""
Unit tests for the RPCController facade.
"""

import pytest

from plc_commissioning.protocols.webserver.api_types import ApiMethod
from plc_commissioning.protocols.webserver.controller_service import (
    ControllerService,
)
from plc_commissioning.protocols.webserver.errors import (
    ConnectionFault,
    UninitializedError,
)
from plc_commissioning.protocols.webserver.request_transport import TransportConfig
from plc_commissioning.protocols.webserver.rpc_controller import RPCController
from plc_commissioning.protocols.webserver.rpc_session import RPCSession
from plc_commissioning.protocols.webserver.variable_service import VariableService


class TestRPCControllerComposition:
    def test_services_share_one_session(self, mock_transport):
        rpc = RPCController(mock_transport)

        assert isinstance(rpc.session, RPCSession)
        assert isinstance(rpc.plc, ControllerService)
        assert isinstance(rpc.variables, VariableService)
        assert rpc.plc.session is rpc.session
        assert rpc.variables.session is rpc.session
        assert rpc.transport is mock_transport

    def test_construction_makes_no_remote_calls(self, mock_transport, call_count):
        RPCController(mock_transport)

        assert call_count(mock_transport) == 0

    @pytest.mark.asyncio
    async def test_services_guarded_until_initialize(self, mock_transport):
        rpc = RPCController(mock_transport)

        with pytest.raises(UninitializedError):
            await rpc.plc.get_operating_mode()
        with pytest.raises(UninitializedError):
            await rpc.supports(["Api.Browse"])


class TestRPCControllerConnect:
    @pytest.mark.asyncio
    async def test_connect_initializes_session(self, mock_transport):
        rpc = await RPCController.connect(mock_transport, "192.168.0.1", "Admin", "pw")

        assert rpc.is_initialized is True
        mock_transport.connect.assert_awaited_once_with("192.168.0.1", "Admin", "pw")

    @pytest.mark.asyncio
    async def test_connect_failure_propagates(self, failing_transport):
        with pytest.raises(ConnectionFault):
            await RPCController.connect(failing_transport, "192.168.0.1", "Admin", "pw")

    @pytest.mark.asyncio
    async def test_supports_forwards_to_session(self, mock_transport):
        mock_transport.browse_catalog.return_value = [
            ApiMethod("plcprogram.read"),
            ApiMethod("plcprogram.write"),
        ]
        rpc = await RPCController.connect(mock_transport, "192.168.0.1", "Admin", "pw")

        assert await rpc.supports(["PlcProgram.Read", "PlcProgram.Write"]) is True
        assert await rpc.supports(["PlcProgram.Browse"]) is False


class TestRPCControllerFromConfig:
    @pytest.mark.asyncio
    async def test_from_config_builds_transport(self, mock_transport):
        config = {
            "connection": {"host": "10.0.0.5", "username": "Admin", "password": "pw"},
            "transport": {"verify_certificate": False, "timeout": 5.0},
        }
        received = []

        def factory(transport_config):
            received.append(transport_config)
            return mock_transport

        rpc = await RPCController.from_config(config, factory)

        assert rpc.is_initialized is True
        assert received == [TransportConfig(verify_certificate=False, timeout=5.0)]
        mock_transport.connect.assert_awaited_once_with("10.0.0.5", "Admin", "pw")
