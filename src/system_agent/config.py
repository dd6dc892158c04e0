"""
Configuration for System Agent.

Values come either from ``SYSTEM_AGENT_*`` environment variables or from a
mapping produced by an external loader (e.g. a YAML file), and are read-only
once the agent is running.
"""

from __future__ import annotations

import ipaddress
import os
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ENV_PREFIX = "SYSTEM_AGENT_"

COLLECTOR_IMAGE = "fluent/fluent-bit:2.1.8"
COLLECTOR_PORT = 24224
LOG_TAG = "system-agent-log"


class LoggingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    collector_hostname: str = "fluent-bit"
    collector_config_path: str = "/etc/fluent-bit/fluent-bit.conf"
    collector_ip: str = ""
    collector_image: str = COLLECTOR_IMAGE
    collector_port: int = Field(default=COLLECTOR_PORT, ge=1, le=65535)
    log_tag: str = LOG_TAG

    @model_validator(mode="after")
    def _collector_ip_when_enabled(self) -> "LoggingConfig":
        if self.enabled and not self.collector_ip:
            raise ValueError("collector_ip is required when logging is enabled")
        return self


class NetworkConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = "system-agent"
    subnet: str = "172.30.0.0/24"
    gateway: str = "172.30.0.1"

    @field_validator("subnet")
    @classmethod
    def _valid_subnet(cls, value: str) -> str:
        ipaddress.ip_network(value, strict=False)
        return value

    @field_validator("gateway")
    @classmethod
    def _valid_gateway(cls, value: str) -> str:
        ipaddress.ip_address(value)
        return value

    @model_validator(mode="after")
    def _gateway_in_subnet(self) -> "NetworkConfig":
        if ipaddress.ip_address(self.gateway) not in ipaddress.ip_network(self.subnet, strict=False):
            raise ValueError(f"gateway {self.gateway} is outside subnet {self.subnet}")
        return self


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    docker_timeout: int = Field(default=60, gt=0)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "Settings":
        return cls.model_validate(dict(data or {}))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        ``SYSTEM_AGENT_ENABLED``, ``SYSTEM_AGENT_DOCKER_TIMEOUT``,
        ``SYSTEM_AGENT_LOGGING_<FIELD>`` and ``SYSTEM_AGENT_NETWORK_<FIELD>``,
        e.g. ``SYSTEM_AGENT_LOGGING_COLLECTOR_IP`` or ``SYSTEM_AGENT_NETWORK_SUBNET``.
        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        data: Dict[str, Any] = {}
        sections: Dict[str, Dict[str, Any]] = {"logging": {}, "network": {}}

        for key, value in env.items():
            if not key.startswith(ENV_PREFIX):
                continue
            name = key[len(ENV_PREFIX):].lower()
            section, _, field = name.partition("_")
            if section in sections and field:
                sections[section][field] = value
            elif name in ("enabled", "docker_timeout"):
                data[name] = value

        data.update({k: v for k, v in sections.items() if v})
        return cls.model_validate(data)


__all__ = ["Settings", "LoggingConfig", "NetworkConfig", "COLLECTOR_IMAGE", "LOG_TAG"]
