# plc_commissioning/security/__init__.py
"""
Security and diagnostics components.

Modules:
- logging_system: Structured logging with fault trail
"""

from plc_commissioning.security.logging_system import (
    EventCategory,
    EventSeverity,
    ICSLogger,
    configure_logging,
    get_logger,
)

__all__ = [
    "ICSLogger",
    "configure_logging",
    "get_logger",
    "EventSeverity",
    "EventCategory",
]
