# tests/conftest.py
"""Shared pytest fixtures for PLC commissioning tests.

Services are tested two ways: against AsyncMock transports (to assert
exactly which remote calls happen) and against the in-memory
SimulatedWebserverAdapter (to run whole scenarios with real behaviour).
"""

import tempfile
from pathlib import Path
from typing import Generator
from unittest.mock import AsyncMock, Mock

import pytest
import yaml

from plc_commissioning.protocols.webserver.api_types import (
    ApiMethod,
    BrowseEntry,
    BrowseResult,
    OperatingMode,
)
from plc_commissioning.protocols.webserver.request_transport import TransportConfig
from plc_commissioning.protocols.webserver.rpc_controller import RPCController
from plc_commissioning.protocols.webserver.rpc_session import RPCSession
from plc_commissioning.protocols.webserver.webserver_simulator import (
    SimulatedWebserverAdapter,
)
from plc_commissioning.security import logging_system


# ----------------------------------------------------------------
# Logging isolation
# ----------------------------------------------------------------
@pytest.fixture(autouse=True)
def fresh_loggers():
    """Give every test its own loggers (and therefore its own fault trail)."""
    with logging_system._loggers_lock:
        logging_system._loggers.clear()
    logging_system.configure_logging(log_dir=None, enable_console=False)
    yield
    with logging_system._loggers_lock:
        logging_system._loggers.clear()
    logging_system.configure_logging(log_dir=None, enable_console=True)


# ----------------------------------------------------------------
# Configuration fixtures
# ----------------------------------------------------------------
@pytest.fixture
def temp_config_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test configuration files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def write_config_file(temp_config_dir):
    """Factory fixture for writing YAML configuration files."""

    def _write_config(config: dict, filename: str = "plc.yml") -> Path:
        config_file = temp_config_dir / filename
        with open(config_file, "w") as f:
            yaml.dump(config, f)
        return config_file

    return _write_config


# ----------------------------------------------------------------
# Transport fixtures
# ----------------------------------------------------------------
@pytest.fixture
def mock_transport():
    """Create a mock request transport with successful defaults."""
    transport = Mock()
    transport.connect = AsyncMock(return_value="ticket-1")
    transport.browse_catalog = AsyncMock(
        return_value=[ApiMethod("Api.Browse"), ApiMethod("PlcProgram.Read")]
    )
    transport.read_mode = AsyncMock(return_value=OperatingMode.RUN)
    transport.write_mode = AsyncMock(return_value=True)
    transport.read_variable = AsyncMock(return_value=42)
    transport.write_variable = AsyncMock(return_value=True)
    transport.browse_variable = AsyncMock(
        return_value=BrowseResult([BrowseEntry('"Data"', "DataBlock", True, 1)])
    )
    return transport


@pytest.fixture
def failing_transport(mock_transport):
    """Mock transport that faults on every call."""
    error = ConnectionResetError("connection lost")
    for name in (
        "connect",
        "browse_catalog",
        "read_mode",
        "write_mode",
        "read_variable",
        "write_variable",
        "browse_variable",
    ):
        getattr(mock_transport, name).side_effect = error
    return mock_transport


def transport_call_count(transport) -> int:
    """Total number of awaited calls on a mock transport."""
    return sum(
        getattr(transport, name).await_count
        for name in (
            "connect",
            "browse_catalog",
            "read_mode",
            "write_mode",
            "read_variable",
            "write_variable",
            "browse_variable",
        )
    )


@pytest.fixture
def call_count():
    return transport_call_count


@pytest.fixture
async def ready_session(mock_transport):
    """RPCSession initialised against the mock transport."""
    return await RPCSession.create(mock_transport, "192.168.0.1", "Admin", "pw")


@pytest.fixture
def simulator():
    """Simulated PLC webserver that accepts its self-signed certificate."""
    return SimulatedWebserverAdapter(
        config=TransportConfig.permissive(),
        users={"Admin": "secret"},
    )


@pytest.fixture
async def rpc(simulator):
    """RPCController connected to the simulator."""
    return await RPCController.connect(simulator, "192.168.0.1", "Admin", "secret")
