# tests/unit/config/test_config_loader.py
import pytest
import yaml

from config.config_loader import DEFAULT_REQUIRED_METHODS, ConfigLoader
from plc_commissioning.protocols.webserver.request_transport import TransportConfig


def test_create_default_plc(tmp_path):
    loader = ConfigLoader(config_dir=tmp_path)
    defaults = loader._create_default_plc()
    assert defaults["connection"]["username"] == "Admin"
    assert defaults["transport"]["verify_certificate"] is True
    assert defaults["required_methods"] == DEFAULT_REQUIRED_METHODS


def test_missing_plc_file_is_created(tmp_path):
    loader = ConfigLoader(config_dir=tmp_path)
    config = loader.load_all()

    plc_path = tmp_path / "plc.yml"
    assert plc_path.exists()
    with open(plc_path) as f:
        data = yaml.safe_load(f)
    assert data["connection"]["host"] == config["connection"]["host"]


def test_load_plc_file(write_config_file, temp_config_dir):
    write_config_file(
        {
            "connection": {"host": "10.1.1.1", "username": "Ops", "password": "pw"},
            "transport": {"verify_certificate": False},
            "required_methods": ["PlcProgram.Read"],
        }
    )

    config = ConfigLoader(config_dir=temp_config_dir).load_all()

    assert config["connection"] == {
        "host": "10.1.1.1",
        "username": "Ops",
        "password": "pw",
    }
    assert config["transport"]["verify_certificate"] is False
    assert config["transport"]["tls_min_version"] == "TLSv1.2"
    assert config["required_methods"] == ["PlcProgram.Read"]


def test_logging_defaults(tmp_path):
    config = ConfigLoader(config_dir=tmp_path).load_all()
    assert config["logging"] == {"log_dir": None, "enable_console": True}


def test_logging_file(write_config_file, temp_config_dir):
    write_config_file({"log_dir": "logs", "enable_console": False}, "logging.yml")

    config = ConfigLoader(config_dir=temp_config_dir).load_all()

    assert config["logging"] == {"log_dir": "logs", "enable_console": False}


def test_transport_config_from_loaded(tmp_path):
    config = ConfigLoader(config_dir=tmp_path).load_all()
    transport = TransportConfig.from_dict(config["transport"])
    assert transport == TransportConfig()


def test_transport_config_validation():
    with pytest.raises(ValueError):
        TransportConfig(tls_min_version="SSLv3")
    with pytest.raises(ValueError):
        TransportConfig(timeout=0)


def test_quoted_verify_flag_rejected(temp_config_dir):
    (temp_config_dir / "plc.yml").write_text(
        'transport:\n  verify_certificate: "false"\n'
    )

    config = ConfigLoader(config_dir=temp_config_dir).load_all()

    assert config["transport"]["verify_certificate"] == "false"
    with pytest.raises(ValueError, match="verify_certificate"):
        TransportConfig.from_dict(config["transport"])


def test_yaml_bool_verify_flag_accepted(write_config_file, temp_config_dir):
    write_config_file({"transport": {"verify_certificate": False}})

    config = ConfigLoader(config_dir=temp_config_dir).load_all()

    assert TransportConfig.from_dict(config["transport"]).verify_certificate is False
