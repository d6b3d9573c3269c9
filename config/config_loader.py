# config/config_loader.py
"""
Config loader module for YAML commissioning configuration.
"""

from pathlib import Path

import yaml

DEFAULT_REQUIRED_METHODS = [
    "Api.Browse",
    "Plc.ReadOperatingMode",
    "Plc.RequestChangeOperatingMode",
    "PlcProgram.Browse",
    "PlcProgram.Read",
    "PlcProgram.Write",
]


class ConfigLoader:
    """Loads and merges commissioning configuration files."""

    def __init__(self, config_dir="config"):
        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def load_all(self):
        """Load all configuration files and merge them with defaults."""
        config = {}

        # Load PLC connection config
        plc_path = self.config_dir / "plc.yml"
        if plc_path.exists():
            with open(plc_path) as f:
                plc_data = yaml.safe_load(f) or {}
        else:
            plc_data = self._create_default_plc()
            self._save_plc(plc_data)

        connection = plc_data.get("connection", {}) or {}
        config["connection"] = {
            "host": connection.get("host", "192.168.0.1"),
            "username": connection.get("username", "Admin"),
            "password": connection.get("password", ""),
        }

        transport = plc_data.get("transport", {}) or {}
        config["transport"] = {
            "verify_certificate": transport.get("verify_certificate", True),
            "ca_bundle": transport.get("ca_bundle"),
            "tls_min_version": transport.get("tls_min_version", "TLSv1.2"),
            "timeout": transport.get("timeout", 10.0),
        }

        config["required_methods"] = plc_data.get(
            "required_methods", list(DEFAULT_REQUIRED_METHODS)
        )

        # Load logging config
        logging_path = self.config_dir / "logging.yml"
        if logging_path.exists():
            with open(logging_path) as f:
                logging_data = yaml.safe_load(f) or {}
                config["logging"] = {
                    "log_dir": logging_data.get("log_dir"),
                    "enable_console": logging_data.get("enable_console", True),
                }
        else:
            config["logging"] = {
                "log_dir": None,
                "enable_console": True,
            }

        return config

    def _create_default_plc(self):
        """Create default PLC connection configuration."""
        return {
            "connection": {
                "host": "192.168.0.1",
                "username": "Admin",
                "password": "",
            },
            "transport": {
                "verify_certificate": True,
                "ca_bundle": None,
                "tls_min_version": "TLSv1.2",
                "timeout": 10.0,
            },
            "required_methods": list(DEFAULT_REQUIRED_METHODS),
        }

    def _save_plc(self, plc_data):
        """Save PLC configuration to file."""
        plc_path = self.config_dir / "plc.yml"
        with open(plc_path, "w") as f:
            yaml.dump(plc_data, f, default_flow_style=False, sort_keys=False)
        print(f"[INFO] Created default PLC config at {plc_path}")
