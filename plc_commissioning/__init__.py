"""PLC commissioning library: session layer for PLC webserver remote calls."""

__version__ = "0.1.0"
