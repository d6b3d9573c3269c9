# tests/integration/__init__.py
"""
Integration tests for the PLC webserver session layer.

These tests run the real RPCController and services against the
in-memory SimulatedWebserverAdapter as complete commissioning scenarios.

Running Integration Tests:
    pytest tests/integration/
    pytest tests/integration/ -k fault
"""
