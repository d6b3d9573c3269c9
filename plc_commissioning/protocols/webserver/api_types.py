# plc_commissioning/protocols/webserver/api_types.py
"""
Value types shared between the session layer and request transports.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum


class OperatingMode(Enum):
    """PLC run-state as reported by Plc.ReadOperatingMode."""

    STOP = "Stop"
    STARTUP = "Startup"
    RUN = "Run"
    HOLD = "Hold"
    STOP_FW_UPDATE = "Stop_fw_update"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value


class ReadWriteMode(Enum):
    """
    Variable encoding for PlcProgram.Read / PlcProgram.Write.

    SIMPLE lets the device convert to and from JSON types.
    RAW transfers the byte-exact representation as a list of ints.
    """

    SIMPLE = "simple"
    RAW = "raw"

    def __str__(self) -> str:
        return self.value


class BrowseMode(Enum):
    """Traversal mode for PlcProgram.Browse."""

    VAR = "var"  # the named variable itself
    CHILDREN = "children"  # children of the named container (root if unnamed)

    def __str__(self) -> str:
        return self.value


class ApiErrorCode(IntEnum):
    """Error codes a webserver may attach to a failed call."""

    PERMISSION_DENIED = 2
    LOGIN_FAILED = 100
    ADDRESS_DOES_NOT_EXIST = 200
    INVALID_ADDRESS = 201
    INVALID_PARAMS = -32602
    METHOD_NOT_FOUND = -32601


@dataclass(frozen=True)
class ApiMethod:
    """A remotely callable method listed by Api.Browse."""

    name: str


@dataclass(frozen=True)
class BrowseEntry:
    """One variable or container returned by PlcProgram.Browse."""

    name: str
    datatype: str = ""
    has_children: bool = False
    db_number: int | None = None
    read_only: bool = False


@dataclass
class BrowseResult:
    """
    Result of PlcProgram.Browse.

    The default instance (no entries) is what failed browses return.
    """

    entries: list[BrowseEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    @property
    def names(self) -> list[str]:
        return [entry.name for entry in self.entries]
