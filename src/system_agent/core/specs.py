"""
Value types for container provisioning.

Raw ``"host:container"`` strings are parsed once, when a ``ContainerSpec`` is
built, so provisioning never re-parses or discovers malformed input halfway
through talking to the runtime.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from system_agent.core.errors import ImagePullError, SpecValidationError

PROTOCOLS = ("tcp", "udp", "sctp")


class RestartPolicy(str, Enum):
    NO = "no"
    ALWAYS = "always"
    ON_FAILURE = "on-failure"
    UNLESS_STOPPED = "unless-stopped"


class ContainerRole(str, Enum):
    """What a container is for; decides whether it ships logs to the collector."""

    WORKLOAD = "workload"
    LOG_COLLECTOR = "log-collector"


class ContainerStatus(str, Enum):
    ABSENT = "absent"
    STOPPED = "stopped"
    RUNNING = "running"


def _split_pair(value: str, kind: str) -> Tuple[str, str]:
    parts = value.split(":")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise SpecValidationError(
            f"{kind} entry {value!r} must have the form 'host:container'", step="validate"
        )
    return parts[0], parts[1]


def _parse_port_number(value: str, original: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise SpecValidationError(f"port entry {original!r}: {value!r} is not a number", step="validate")
    if not 1 <= port <= 65535:
        raise SpecValidationError(f"port entry {original!r}: {port} is out of range", step="validate")
    return port


@dataclass(frozen=True)
class PortMapping:
    host_port: int
    container_port: int
    protocol: str = "tcp"

    @classmethod
    def parse(cls, value: str) -> "PortMapping":
        """Parse ``"8080:80"`` or ``"5353:53/udp"``."""
        host, container = _split_pair(value, "port")
        protocol = "tcp"
        if "/" in container:
            container, protocol = container.split("/", 1)
            protocol = protocol.lower()
            if protocol not in PROTOCOLS:
                raise SpecValidationError(
                    f"port entry {value!r}: unknown protocol {protocol!r}", step="validate"
                )
        return cls(
            host_port=_parse_port_number(host, value),
            container_port=_parse_port_number(container, value),
            protocol=protocol,
        )

    @property
    def exposed(self) -> str:
        return f"{self.container_port}/{self.protocol}"

    def __str__(self) -> str:
        return f"{self.host_port}:{self.exposed}"


@dataclass(frozen=True)
class VolumeBind:
    host_path: str
    container_path: str

    @classmethod
    def parse(cls, value: str) -> "VolumeBind":
        host, container = _split_pair(value, "volume")
        return cls(host_path=host, container_path=container)

    def __str__(self) -> str:
        return f"{self.host_path}:{self.container_path}"


def _coerce(items: Optional[Iterable], kind: str, value_type) -> Tuple:
    out = []
    for item in items or ():
        if isinstance(item, str):
            item = value_type.parse(item)
        elif not isinstance(item, value_type):
            raise SpecValidationError(f"{kind} entry must be a string or {value_type.__name__}, got {item!r}", step="validate")
        out.append(item)
    return tuple(out)


@dataclass
class ContainerSpec:
    """Everything needed to create and start one container on the managed network."""

    image: str
    name: str
    user: str = ""
    restart_policy: Union[RestartPolicy, str] = RestartPolicy.NO
    ip_address: str = ""
    ports: Sequence[Union[PortMapping, str]] = field(default_factory=tuple)
    volumes: Sequence[Union[VolumeBind, str]] = field(default_factory=tuple)
    environment: Sequence[str] = field(default_factory=tuple)
    commands: Sequence[str] = field(default_factory=tuple)
    role: ContainerRole = ContainerRole.WORKLOAD

    def __post_init__(self) -> None:
        if not self.image:
            raise SpecValidationError("image must not be empty", step="validate")
        if not self.name:
            raise SpecValidationError("container name must not be empty", step="validate")
        try:
            self.restart_policy = RestartPolicy(self.restart_policy)
        except ValueError:
            raise SpecValidationError(
                f"unknown restart policy {self.restart_policy!r}", step="validate"
            )
        try:
            self.role = ContainerRole(self.role)
        except ValueError:
            raise SpecValidationError(f"unknown container role {self.role!r}", step="validate")
        self.ports = _coerce(self.ports, "port", PortMapping)
        self.volumes = _coerce(self.volumes, "volume", VolumeBind)
        self.environment = tuple(self.environment or ())
        self.commands = tuple(self.commands or ())


@dataclass(frozen=True)
class ContainerState:
    status: ContainerStatus
    container_id: Optional[str] = None

    @classmethod
    def absent(cls) -> "ContainerState":
        return cls(ContainerStatus.ABSENT)

    @classmethod
    def stopped(cls, container_id: str) -> "ContainerState":
        return cls(ContainerStatus.STOPPED, container_id)

    @classmethod
    def running(cls, container_id: str) -> "ContainerState":
        return cls(ContainerStatus.RUNNING, container_id)

    @property
    def exists(self) -> bool:
        return self.status is not ContainerStatus.ABSENT

    @property
    def is_running(self) -> bool:
        return self.status is ContainerStatus.RUNNING


@dataclass(frozen=True)
class NetworkHandle:
    id: str
    warning: Optional[str] = None


@dataclass(frozen=True)
class PullResult:
    image: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise ImagePullError(f"pulling {self.image} failed: {self.error}", step="pull")


@dataclass(frozen=True)
class CreateResult:
    container_id: str
    warnings: List[str] = field(default_factory=list)


__all__ = [
    "RestartPolicy",
    "ContainerRole",
    "ContainerStatus",
    "PortMapping",
    "VolumeBind",
    "ContainerSpec",
    "ContainerState",
    "NetworkHandle",
    "PullResult",
    "CreateResult",
]
