# plc_commissioning/protocols/webserver/request_transport.py
"""
Request transport contract.

The session layer never speaks the wire protocol. It calls an injected
transport object with the interface below (duck-typed: any object with
these coroutines works, subclassing RequestTransport is optional).

Connection lifecycle:
    1. handle = await transport.connect(host, username, password)
    2. await transport.<call>(handle, ...)   (any number of times)

Every call either returns its result or raises. Raising TransportFault
lets the transport attach a device error code; any other exception is
treated as a transport fault by the session layer.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from plc_commissioning.protocols.webserver.api_types import (
    ApiMethod,
    BrowseMode,
    BrowseResult,
    OperatingMode,
    ReadWriteMode,
)

TLS_VERSIONS = ("TLSv1.2", "TLSv1.3")


def _flag(data: dict[str, Any], key: str, default: bool) -> bool:
    # real bools only; quoted YAML ("false") arrives as a str
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return value


@dataclass(frozen=True)
class TransportConfig:
    """
    Explicit trust and connection settings handed to a transport.

    Certificate acceptance is chosen per transport instance by the caller
    rather than by mutating process-wide TLS state.
    """

    verify_certificate: bool = True
    ca_bundle: str | None = None
    tls_min_version: str = "TLSv1.2"
    timeout: float = 10.0

    def __post_init__(self):
        if self.tls_min_version not in TLS_VERSIONS:
            raise ValueError(
                f"tls_min_version must be one of {TLS_VERSIONS}, "
                f"got {self.tls_min_version!r}"
            )
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "TransportConfig":
        """Build from the 'transport' section of the loaded configuration."""
        data = data or {}
        return cls(
            verify_certificate=_flag(data, "verify_certificate", True),
            ca_bundle=data.get("ca_bundle"),
            tls_min_version=data.get("tls_min_version", "TLSv1.2"),
            timeout=float(data.get("timeout", 10.0)),
        )

    @classmethod
    def permissive(cls) -> "TransportConfig":
        """Accept any device certificate (commissioning on an isolated bench)."""
        return cls(verify_certificate=False)


class RequestTransport(ABC):
    """Interface for authenticated remote calls against a PLC webserver."""

    @abstractmethod
    async def connect(self, host: str, username: str, password: str) -> Any:
        """
        Authenticate against host.

        Returns:
            Opaque handle passed back into every other call

        Raises:
            Exception: If the device is unreachable or rejects the login
        """

    @abstractmethod
    async def browse_catalog(self, handle: Any) -> Iterable[ApiMethod]:
        """Api.Browse: list the remotely callable methods."""

    @abstractmethod
    async def read_mode(self, handle: Any) -> OperatingMode:
        """Plc.ReadOperatingMode."""

    @abstractmethod
    async def write_mode(self, handle: Any, mode: OperatingMode) -> bool:
        """Plc.RequestChangeOperatingMode."""

    @abstractmethod
    async def read_variable(
        self,
        handle: Any,
        name: str,
        mode: ReadWriteMode,
        result_type: type,
        cancel_event: asyncio.Event | None = None,
    ) -> Any:
        """PlcProgram.Read, decoded into result_type."""

    @abstractmethod
    async def write_variable(
        self,
        handle: Any,
        name: str,
        value: Any,
        mode: ReadWriteMode,
        cancel_event: asyncio.Event | None = None,
    ) -> bool:
        """PlcProgram.Write."""

    @abstractmethod
    async def browse_variable(
        self,
        handle: Any,
        browse_mode: BrowseMode,
        name: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> BrowseResult:
        """PlcProgram.Browse."""
