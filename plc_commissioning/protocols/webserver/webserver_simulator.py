#!/usr/bin/env python3
"""
In-memory PLC webserver adapter.

- Implements the RequestTransport calls against a simulated controller
- Models the method catalog, operating mode, typed program variables,
  raw (byte-exact) encoding, hierarchical browse and write protection
- Honours TransportConfig certificate trust, TLS floor and call timeout
- Supports fault injection per remote method or for every call

Raw values use the S7 data block layout via snap7.util.
Not a wire protocol implementation: nothing leaves the process.
"""

import asyncio
import math
import uuid
from dataclasses import dataclass
from typing import Any

from snap7.util import (
    get_bool,
    get_byte,
    get_dint,
    get_dword,
    get_int,
    get_lreal,
    get_real,
    get_string,
    get_udint,
    get_uint,
    get_word,
    set_bool,
    set_byte,
    set_dint,
    set_dword,
    set_int,
    set_lreal,
    set_real,
    set_string,
    set_udint,
    set_uint,
    set_word,
)

from plc_commissioning.protocols.webserver.api_types import (
    ApiErrorCode,
    ApiMethod,
    BrowseEntry,
    BrowseMode,
    BrowseResult,
    OperatingMode,
    ReadWriteMode,
)
from plc_commissioning.protocols.webserver.errors import TransportFault
from plc_commissioning.protocols.webserver.request_transport import (
    TLS_VERSIONS,
    RequestTransport,
    TransportConfig,
)

DEFAULT_METHODS = (
    "Api.Browse",
    "Api.CloseTicket",
    "Api.GetCertificateUrl",
    "Api.GetPermissions",
    "Api.Login",
    "Api.Logout",
    "Api.Ping",
    "Api.Version",
    "Plc.ReadOperatingMode",
    "Plc.RequestChangeOperatingMode",
    "PlcProgram.Browse",
    "PlcProgram.Read",
    "PlcProgram.Write",
)

# Served even when a device's catalog omits them
ALWAYS_SERVED = ("Api.Login", "Api.Browse")

STRING_MAX_LENGTH = 254

# datatype -> (raw size, snap7 getter, snap7 setter, python type)
DATATYPES = {
    "Bool": (1, get_bool, set_bool, bool),
    "Byte": (1, get_byte, set_byte, int),
    "Int": (2, get_int, set_int, int),
    "UInt": (2, get_uint, set_uint, int),
    "Word": (2, get_word, set_word, int),
    "DInt": (4, get_dint, set_dint, int),
    "UDInt": (4, get_udint, set_udint, int),
    "DWord": (4, get_dword, set_dword, int),
    "Real": (4, get_real, set_real, float),
    "LReal": (8, get_lreal, set_lreal, float),
    "String": (2 + STRING_MAX_LENGTH, get_string, set_string, str),
}

INTEGER_RANGES = {
    "Byte": (0, 0xFF),
    "Int": (-0x8000, 0x7FFF),
    "UInt": (0, 0xFFFF),
    "Word": (0, 0xFFFF),
    "DInt": (-0x80000000, 0x7FFFFFFF),
    "UDInt": (0, 0xFFFFFFFF),
    "DWord": (0, 0xFFFFFFFF),
}

REAL_MAX = 3.4028234663852886e38

# Operating modes a client may request
REQUESTABLE_MODES = (OperatingMode.RUN, OperatingMode.STOP)

DEMO_PROGRAM = {
    '"Data".Integer': ("Int", 0),
    '"Data".DoubleInteger': ("DInt", 0),
    '"Data".Real': ("Real", 0.0),
    '"Data".Bool': ("Bool", False),
    '"Data".String': ("String", ""),
    '"Data".Motor.Speed': ("Int", 0),
    '"Data".Motor.Running': ("Bool", False),
    '"Config".Version': ("String", "V1.0", True),
}


@dataclass
class SimulatedVariable:
    """One typed variable in simulated program memory."""

    datatype: str
    value: Any
    read_only: bool = False
    db_number: int | None = None


def split_address(name: str) -> list[str]:
    """
    Split a variable address into its path segments.

    '"Data".Motor.Speed' -> ['"Data"', 'Motor', 'Speed']
    Dots inside quotes do not split.

    Raises:
        ValueError: Unbalanced quotes or an empty segment
    """
    segments = []
    current = []
    quoted = False
    for char in name:
        if char == '"':
            quoted = not quoted
            current.append(char)
        elif char == "." and not quoted:
            segments.append("".join(current))
            current = []
        else:
            current.append(char)
    if quoted:
        raise ValueError(f"Unbalanced quotes in address {name!r}")
    segments.append("".join(current))
    if not all(segments):
        raise ValueError(f"Empty path segment in address {name!r}")
    return segments


def check_value(datatype: str, value: Any) -> Any:
    """
    Validate a Python value against an S7 datatype.

    No coercion across kinds: a str never becomes a number or a Bool, and
    a float only becomes an integer type when it has no fractional part.

    Returns:
        The value as the datatype's Python type

    Raises:
        TypeError: Value has the wrong kind
        ValueError: Value out of range, or a String that does not fit
    """
    python_type = DATATYPES[datatype][3]

    if python_type is bool:
        if not isinstance(value, bool):
            raise TypeError(f"Bool needs True or False, got {value!r}")
        return value

    if python_type is str:
        if not isinstance(value, str):
            raise TypeError(f"String needs str, got {type(value).__name__}")
        if len(value) > STRING_MAX_LENGTH:
            raise ValueError(
                f"String holds at most {STRING_MAX_LENGTH} characters, got {len(value)}"
            )
        if not value.isascii():
            raise ValueError("String holds single-byte ASCII characters only")
        return value

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{datatype} needs a number, got {value!r}")

    if python_type is float:
        value = float(value)
        if datatype == "Real" and math.isfinite(value) and abs(value) > REAL_MAX:
            raise ValueError(f"{value} does not fit in Real")
        return value

    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{datatype} needs a whole number, got {value}")
    value = int(value)
    low, high = INTEGER_RANGES[datatype]
    if not low <= value <= high:
        raise ValueError(f"{value} outside {datatype} range {low}..{high}")
    return value


def encode_raw(datatype: str, value: Any) -> list[int]:
    """Encode value as the byte list a raw read returns."""
    size, _, setter, _ = DATATYPES[datatype]
    data = bytearray(size)
    if datatype == "Bool":
        setter(data, 0, 0, value)
    elif datatype == "String":
        data[0] = STRING_MAX_LENGTH
        setter(data, 0, value, STRING_MAX_LENGTH)
        return list(data[: 2 + data[1]])
    else:
        setter(data, 0, value)
    return list(data)


def decode_raw(datatype: str, data) -> Any:
    """Decode a raw byte list into the datatype's Python value."""
    if isinstance(data, (int, str)):
        raise TypeError(f"raw data must be a byte sequence, got {type(data).__name__}")
    raw = bytearray(data)
    size, getter, _, _ = DATATYPES[datatype]

    if datatype == "String":
        if len(raw) < 2:
            raise ValueError("raw String needs at least 2 header bytes")
        max_length, length = raw[0], raw[1]
        if max_length > STRING_MAX_LENGTH or length > max_length:
            raise ValueError(f"bad String header [{max_length}, {length}]")
        if len(raw) < 2 + length:
            raise ValueError(
                f"raw String announces {length} characters, got {len(raw) - 2}"
            )
        return getter(raw, 0)

    if len(raw) != size:
        raise ValueError(f"{datatype} takes {size} raw bytes, got {len(raw)}")
    if datatype == "Bool":
        return getter(raw, 0, 0)
    return getter(raw, 0)


class SimulatedWebserverAdapter(RequestTransport):
    """Async in-memory PLC webserver."""

    def __init__(
        self,
        config: TransportConfig | None = None,
        users: dict[str, str] | None = None,
        self_signed: bool = True,
        tls_version: str = "TLSv1.3",
        operating_mode: OperatingMode = OperatingMode.RUN,
        methods=DEFAULT_METHODS,
        program: dict | None = None,
        latency: float = 0.0,
    ):
        """
        Args:
            config: Trust settings; verification against a self-signed
                device fails unless a ca_bundle is given
            users: username -> password; None accepts any credentials
            self_signed: Device presents a self-signed certificate
            tls_version: Highest TLS version the device negotiates
            operating_mode: Initial run-state
            methods: Method names listed by Api.Browse
            program: address -> (datatype, value[, read_only])
            latency: Seconds each call takes
        """
        if tls_version not in TLS_VERSIONS:
            raise ValueError(f"tls_version must be one of {TLS_VERSIONS}")

        self.config = config or TransportConfig()
        self.users = users
        self.self_signed = self_signed
        self.tls_version = tls_version
        self.operating_mode = operating_mode
        self.methods = list(methods)
        self.latency = latency

        self.variables: dict[str, SimulatedVariable] = {}
        self.load_program(DEMO_PROGRAM if program is None else program)

        self.fail_all = False
        self.failing_methods: set[str] = set()
        self.calls: list[str] = []
        self._tickets: set[str] = set()

    # ------------------------------------------------------------
    # simulator control
    # ------------------------------------------------------------

    def load_program(self, program: dict) -> None:
        """Replace program memory with the given variable table."""
        self.variables = {}
        block_numbers: dict[str, int] = {}
        for name, definition in program.items():
            datatype, value, *rest = definition
            if datatype not in DATATYPES:
                raise ValueError(f"Unsupported datatype {datatype!r} for {name}")
            block = split_address(name)[0]
            db_number = block_numbers.setdefault(block, len(block_numbers) + 1)
            self.variables[name] = SimulatedVariable(
                datatype=datatype,
                value=check_value(datatype, value),
                read_only=bool(rest and rest[0]),
                db_number=db_number,
            )

    def inject_fault(self, method: str | None = None) -> None:
        """Fail every call to method, or every call at all if None."""
        if method is None:
            self.fail_all = True
        else:
            self.failing_methods.add(method)

    def clear_faults(self) -> None:
        self.fail_all = False
        self.failing_methods.clear()

    async def _call(self, method: str, cancel_event: asyncio.Event | None = None):
        self.calls.append(method)
        if cancel_event is not None and cancel_event.is_set():
            raise asyncio.CancelledError(f"{method} cancelled")
        if self.latency:
            try:
                await asyncio.wait_for(
                    asyncio.sleep(self.latency), timeout=self.config.timeout
                )
            except TimeoutError as e:
                raise TransportFault(
                    f"No response within {self.config.timeout}s", method=method
                ) from e
            if cancel_event is not None and cancel_event.is_set():
                raise asyncio.CancelledError(f"{method} cancelled")
        if self.fail_all or method in self.failing_methods:
            raise ConnectionResetError(f"simulated connection loss during {method}")
        if method not in self.methods and method not in ALWAYS_SERVED:
            raise TransportFault(
                f"Method not found: {method}",
                code=ApiErrorCode.METHOD_NOT_FOUND,
                method=method,
            )

    def _check_ticket(self, handle: Any, method: str) -> None:
        if handle not in self._tickets:
            raise TransportFault(
                "Permission denied", code=ApiErrorCode.PERMISSION_DENIED, method=method
            )

    def _split(self, name: str, method: str) -> list[str]:
        try:
            return split_address(name)
        except ValueError as e:
            raise TransportFault(
                f"Invalid address: {name}",
                code=ApiErrorCode.INVALID_ADDRESS,
                method=method,
            ) from e

    def _lookup(self, name: str, method: str) -> SimulatedVariable:
        self._split(name, method)
        variable = self.variables.get(name)
        if variable is None:
            raise TransportFault(
                f"Address does not exist: {name}",
                code=ApiErrorCode.ADDRESS_DOES_NOT_EXIST,
                method=method,
            )
        return variable

    # ------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------

    async def connect(self, host: str, username: str, password: str) -> str:
        """Api.Login; returns an authentication ticket."""
        await self._call("Api.Login")

        floor = self.config.tls_min_version
        if TLS_VERSIONS.index(self.tls_version) < TLS_VERSIONS.index(floor):
            raise TransportFault(
                f"TLS handshake failed: {host} offers {self.tls_version}, "
                f"transport requires at least {floor}",
                method="Api.Login",
            )

        if self.config.verify_certificate and self.self_signed and not self.config.ca_bundle:
            raise TransportFault(
                f"certificate verify failed: self-signed certificate presented by {host}",
                method="Api.Login",
            )

        if self.users is not None and self.users.get(username) != password:
            raise TransportFault(
                "Login failed", code=ApiErrorCode.LOGIN_FAILED, method="Api.Login"
            )

        ticket = uuid.uuid4().hex
        self._tickets.add(ticket)
        return ticket

    # ------------------------------------------------------------
    # catalog and operating mode
    # ------------------------------------------------------------

    async def browse_catalog(self, handle: Any) -> list[ApiMethod]:
        await self._call("Api.Browse")
        self._check_ticket(handle, "Api.Browse")
        return [ApiMethod(name) for name in self.methods]

    async def read_mode(self, handle: Any) -> OperatingMode:
        await self._call("Plc.ReadOperatingMode")
        self._check_ticket(handle, "Plc.ReadOperatingMode")
        return self.operating_mode

    async def write_mode(self, handle: Any, mode: OperatingMode) -> bool:
        await self._call("Plc.RequestChangeOperatingMode")
        self._check_ticket(handle, "Plc.RequestChangeOperatingMode")
        if mode not in REQUESTABLE_MODES:
            raise TransportFault(
                f"Operating mode {mode} cannot be requested",
                code=ApiErrorCode.INVALID_PARAMS,
                method="Plc.RequestChangeOperatingMode",
            )
        self.operating_mode = mode
        return True

    # ------------------------------------------------------------
    # program variables
    # ------------------------------------------------------------

    async def read_variable(
        self,
        handle: Any,
        name: str,
        mode: ReadWriteMode,
        result_type: type,
        cancel_event: asyncio.Event | None = None,
    ) -> Any:
        await self._call("PlcProgram.Read", cancel_event)
        self._check_ticket(handle, "PlcProgram.Read")
        variable = self._lookup(name, "PlcProgram.Read")

        if mode is ReadWriteMode.RAW:
            value = encode_raw(variable.datatype, variable.value)
            return bytes(value) if result_type is bytes else value

        if result_type is object:
            return variable.value
        try:
            return result_type(variable.value)
        except (TypeError, ValueError) as e:
            raise TransportFault(
                f"Cannot convert {variable.datatype} to {result_type.__name__}",
                code=ApiErrorCode.INVALID_PARAMS,
                method="PlcProgram.Read",
            ) from e

    async def write_variable(
        self,
        handle: Any,
        name: str,
        value: Any,
        mode: ReadWriteMode,
        cancel_event: asyncio.Event | None = None,
    ) -> bool:
        await self._call("PlcProgram.Write", cancel_event)
        self._check_ticket(handle, "PlcProgram.Write")
        variable = self._lookup(name, "PlcProgram.Write")

        if variable.read_only:
            raise TransportFault(
                f"Variable {name} is write protected",
                code=ApiErrorCode.PERMISSION_DENIED,
                method="PlcProgram.Write",
            )

        try:
            if mode is ReadWriteMode.RAW:
                value = decode_raw(variable.datatype, value)
            new_value = check_value(variable.datatype, value)
        except (TypeError, ValueError) as e:
            raise TransportFault(
                f"Invalid value for {variable.datatype} variable {name}: {e}",
                code=ApiErrorCode.INVALID_PARAMS,
                method="PlcProgram.Write",
            ) from e

        variable.value = new_value
        return True

    async def browse_variable(
        self,
        handle: Any,
        browse_mode: BrowseMode,
        name: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> BrowseResult:
        await self._call("PlcProgram.Browse", cancel_event)
        self._check_ticket(handle, "PlcProgram.Browse")

        if browse_mode is BrowseMode.VAR:
            return BrowseResult([self._entry(name)])

        parent = self._split(name, "PlcProgram.Browse") if name else []
        if parent and not self._exists(parent):
            raise TransportFault(
                f"Address does not exist: {name}",
                code=ApiErrorCode.ADDRESS_DOES_NOT_EXIST,
                method="PlcProgram.Browse",
            )

        children = []
        for address in self.variables:
            segments = split_address(address)
            if len(segments) > len(parent) and segments[: len(parent)] == parent:
                child = ".".join(segments[: len(parent) + 1])
                if child not in children:
                    children.append(child)
        return BrowseResult([self._entry(child) for child in children])

    def _exists(self, segments: list[str]) -> bool:
        return any(
            split_address(address)[: len(segments)] == segments
            for address in self.variables
        )

    def _entry(self, name: str) -> BrowseEntry:
        segments = self._split(name, "PlcProgram.Browse")
        variable = self.variables.get(name)
        if variable is not None:
            return BrowseEntry(
                name=name,
                datatype=variable.datatype,
                has_children=False,
                db_number=variable.db_number,
                read_only=variable.read_only,
            )
        if not self._exists(segments):
            raise TransportFault(
                f"Address does not exist: {name}",
                code=ApiErrorCode.ADDRESS_DOES_NOT_EXIST,
                method="PlcProgram.Browse",
            )
        db_number = next(
            v.db_number
            for address, v in self.variables.items()
            if split_address(address)[0] == segments[0]
        )
        datatype = "DataBlock" if len(segments) == 1 else "Struct"
        return BrowseEntry(
            name=name, datatype=datatype, has_children=True, db_number=db_number
        )
