# plc_commissioning/security/logging_system.py
"""
Structured logging for PLC commissioning sessions.

Provides:
- Console output with wall-clock timestamps
- JSON-lines file output with rotation
- Severity and category tags on every structured entry
- An in-memory fault trail of failed remote calls

Each failure on the remote-call path lands in the fault trail before it
is turned into a sentinel result or re-raised, so a caller that ignores
False or None can still find out what went wrong.
"""

import json
import logging
import logging.handlers
import threading
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

__all__ = [
    "EventSeverity",
    "EventCategory",
    "LogEntry",
    "ConsoleFormatter",
    "JSONFormatter",
    "ICSLogger",
    "configure_logging",
    "get_logger",
]

# ----------------------------------------------------------------
# Classification
# ----------------------------------------------------------------


class EventSeverity(Enum):
    """
    Severity of a session event.

    Values are the stdlib logging levels, so higher = more severe.
    """

    CRITICAL = logging.CRITICAL
    ERROR = logging.ERROR  # Failed remote call
    WARNING = logging.WARNING  # Misuse, missing capability
    INFO = logging.INFO
    DEBUG = logging.DEBUG

    @classmethod
    def from_level(cls, levelno: int) -> "EventSeverity":
        """Nearest severity at or below a logging level."""
        for severity in cls:
            if levelno >= severity.value:
                return severity
        return cls.DEBUG


class EventCategory(Enum):
    """What part of a commissioning session an event belongs to."""

    SECURITY = "security"  # Login, certificate trust
    PROCESS = "process"  # Run-state and variable writes
    SYSTEM = "system"  # Plain log records
    COMMUNICATION = "communication"  # Transport faults
    DIAGNOSTIC = "diagnostic"  # Catalog and variable browsing


# ----------------------------------------------------------------
# Structured entry
# ----------------------------------------------------------------


@dataclass
class LogEntry:
    """One structured session event."""

    wall_time: float
    severity: EventSeverity
    category: EventCategory
    message: str

    device: str = ""  # PLC host
    component: str = ""  # Service class
    method: str = ""  # Remote method, e.g. PlcProgram.Write
    error: str = ""

    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result = {
            "wall_time": self.wall_time,
            "severity": self.severity.name,
            "category": self.category.value,
            "message": self.message,
            "event_id": self.event_id,
        }
        for key in ("device", "component", "method", "error"):
            value = getattr(self, key)
            if value:
                result[key] = value
        if self.data:
            result["data"] = json.dumps(self.data, default=str)
        return result

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def to_human_readable(self) -> str:
        """'[SEVERITY] host:Component: message (error)'"""
        context = "".join(f"{part}:" for part in (self.device, self.component) if part)
        text = f"[{self.severity.name:8s}] {context} {self.message}"
        return f"{text} ({self.error})" if self.error else text


# ----------------------------------------------------------------
# Formatters
# ----------------------------------------------------------------


class ConsoleFormatter(logging.Formatter):
    """Plain console format with wall-clock timestamp."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)8s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


class JSONFormatter(logging.Formatter):
    """One JSON object per record, tagged with the PLC host."""

    def __init__(self, device: str = ""):
        super().__init__()
        self.device = device

    def format(self, record: logging.LogRecord) -> str:
        entry = LogEntry(
            wall_time=record.created,
            severity=EventSeverity.from_level(record.levelno),
            category=EventCategory.SYSTEM,
            message=record.getMessage(),
            device=self.device,
            component=record.name,
        )
        if record.exc_info:
            entry.data["exception"] = self.formatException(record.exc_info)
        return entry.to_json()


# ----------------------------------------------------------------
# Logger
# ----------------------------------------------------------------


class ICSLogger:
    """
    Logger shared by the commissioning services.

    A thin wrapper over a stdlib logger that owns its handlers (console
    and optional rotating JSON file) and keeps the fault trail.
    """

    def __init__(
        self,
        name: str,
        device: str = "",
        log_dir: Path | None = None,
        enable_json: bool = True,
        enable_console: bool = True,
        max_fault_entries: int = 1000,
    ):
        """
        Args:
            name: Logger name, usually the module's __name__
            device: PLC host attached to every entry
            log_dir: Where the JSON log goes; None disables the file
            enable_json: Write the JSON file when log_dir is set
            enable_console: Echo INFO and above to stderr
            max_fault_entries: Oldest faults are dropped past this count
        """
        self.name = name
        self.device = device
        self.log_dir = log_dir

        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False
        self.logger.handlers.clear()

        if enable_console:
            console = logging.StreamHandler()
            console.setLevel(logging.INFO)
            console.setFormatter(ConsoleFormatter())
            self.logger.addHandler(console)

        if enable_json and log_dir:
            self._add_json_handler()

        self.fault_trail: list[LogEntry] = []
        self._fault_lock = threading.Lock()
        self._max_fault_entries = max_fault_entries

    def _add_json_handler(self) -> None:
        self.log_dir.mkdir(parents=True, exist_ok=True)
        log_file = self.log_dir / f"{self.device or 'plc_commissioning'}.json.log"

        # 10MB per file, 5 backups
        handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5
        )
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(JSONFormatter(device=self.device))
        self.logger.addHandler(handler)

    def debug(self, message: str, *args, **kwargs) -> None:
        self.logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs) -> None:
        self.logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs) -> None:
        self.logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs) -> None:
        self.logger.error(message, *args, **kwargs)

    # ----------------------------------------------------------------
    # Fault trail
    # ----------------------------------------------------------------

    def record_fault(
        self,
        message: str,
        error: BaseException | None = None,
        category: EventCategory = EventCategory.COMMUNICATION,
        **kwargs,
    ) -> LogEntry:
        """
        Log a failed remote call at ERROR and append it to the fault trail.

        Args:
            message: What was being attempted
            error: Exception raised by the transport, if any
            category: Event category
            **kwargs: LogEntry context (device, component, method, data)

        Returns:
            The recorded entry
        """
        kwargs.setdefault("device", self.device)
        entry = LogEntry(
            wall_time=time.time(),
            severity=EventSeverity.ERROR,
            category=category,
            message=message,
            error=f"{type(error).__name__}: {error}" if error else "",
            **kwargs,
        )

        exc_info = (type(error), error, error.__traceback__) if error else None
        self.logger.error(entry.to_human_readable(), exc_info=exc_info)

        with self._fault_lock:
            self.fault_trail.append(entry)
            del self.fault_trail[: -self._max_fault_entries]

        return entry

    def get_fault_trail(
        self,
        limit: int = 100,
        category: EventCategory | None = None,
    ) -> list[LogEntry]:
        """Most recent faults, oldest first, optionally of one category."""
        with self._fault_lock:
            entries = [
                e for e in self.fault_trail if category is None or e.category == category
            ]
        return entries[-limit:]

    def clear_fault_trail(self) -> int:
        """Empty the fault trail; returns how many entries were dropped."""
        with self._fault_lock:
            count = len(self.fault_trail)
            self.fault_trail.clear()
        return count


# ----------------------------------------------------------------
# Factory
# ----------------------------------------------------------------

_loggers: dict[str, ICSLogger] = {}
_loggers_lock = threading.Lock()
_default_log_dir: Path | None = None
_default_enable_console: bool = True


def configure_logging(
    log_dir: Path | str | None = None,
    enable_console: bool = True,
) -> None:
    """
    Set the defaults used by get_logger for loggers not yet created.

    Args:
        log_dir: Directory for JSON log files; None disables file output
        enable_console: Echo log lines on stderr
    """
    global _default_log_dir, _default_enable_console

    _default_log_dir = Path(log_dir) if log_dir else None
    if _default_log_dir:
        _default_log_dir.mkdir(parents=True, exist_ok=True)
    _default_enable_console = enable_console


def get_logger(name: str, device: str = "", **kwargs) -> ICSLogger:
    """
    Return the ICSLogger for (name, device), creating it on first use.

    Extra keyword arguments are passed to ICSLogger on creation only.
    """
    key = f"{name}:{device}"

    with _loggers_lock:
        if key not in _loggers:
            if _default_log_dir and "log_dir" not in kwargs:
                kwargs["log_dir"] = _default_log_dir
            kwargs.setdefault("enable_console", _default_enable_console)
            _loggers[key] = ICSLogger(name, device, **kwargs)
        return _loggers[key]
