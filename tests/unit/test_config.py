"""
Unit tests for settings loading and validation.
"""

import pytest
from pydantic import ValidationError

from system_agent.config import COLLECTOR_IMAGE, Settings


def test_defaults():
    settings = Settings()

    assert settings.enabled is True
    assert settings.logging.enabled is False
    assert settings.logging.collector_image == COLLECTOR_IMAGE
    assert settings.logging.collector_port == 24224
    assert settings.logging.log_tag == "system-agent-log"


def test_from_env():
    settings = Settings.from_env({
        "SYSTEM_AGENT_ENABLED": "false",
        "SYSTEM_AGENT_DOCKER_TIMEOUT": "30",
        "SYSTEM_AGENT_NETWORK_ID": "agents-net",
        "SYSTEM_AGENT_NETWORK_SUBNET": "10.10.0.0/24",
        "SYSTEM_AGENT_NETWORK_GATEWAY": "10.10.0.1",
        "SYSTEM_AGENT_LOGGING_ENABLED": "true",
        "SYSTEM_AGENT_LOGGING_COLLECTOR_IP": "10.10.0.2",
        "SYSTEM_AGENT_LOGGING_COLLECTOR_CONFIG_PATH": "/etc/fb.conf",
        "UNRELATED": "x",
    })

    assert settings.enabled is False
    assert settings.docker_timeout == 30
    assert settings.network.id == "agents-net"
    assert settings.network.gateway == "10.10.0.1"
    assert settings.logging.enabled is True
    assert settings.logging.collector_ip == "10.10.0.2"
    assert settings.logging.collector_config_path == "/etc/fb.conf"


def test_from_mapping():
    settings = Settings.from_mapping({
        "network": {"id": "agents-net", "subnet": "10.10.0.0/24", "gateway": "10.10.0.1"},
        "logging": {"enabled": False},
    })

    assert settings.network.subnet == "10.10.0.0/24"


@pytest.mark.parametrize("network", [
    {"subnet": "not-a-subnet", "gateway": "10.10.0.1"},
    {"subnet": "10.10.0.0/24", "gateway": "10.10.0.300"},
    {"subnet": "10.10.0.0/24", "gateway": "10.20.0.1"},
])
def test_invalid_network(network):
    with pytest.raises(ValidationError):
        Settings.from_mapping({"network": network})


def test_logging_requires_collector_ip():
    with pytest.raises(ValidationError):
        Settings.from_mapping({"logging": {"enabled": True}})


def test_settings_are_read_only():
    settings = Settings()

    with pytest.raises(ValidationError):
        settings.enabled = False
