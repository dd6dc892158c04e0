"""
Unit tests for container creation and start.
"""

import pytest
from docker.errors import APIError

from system_agent.config import LoggingConfig
from system_agent.core.errors import ContainerCreateError, ContainerStartError, SpecValidationError
from system_agent.core.images import ImagePuller
from system_agent.core.lifecycle import WORKING_DIR, ContainerLifecycleManager
from system_agent.core.specs import ContainerRole, ContainerSpec


def _lifecycle(runtime_client, logging_config):
    return ContainerLifecycleManager(runtime_client, ImagePuller(runtime_client), "agents-net", logging_config)


@pytest.fixture
def lifecycle(runtime_client, logging_config):
    return _lifecycle(runtime_client, logging_config)


@pytest.fixture
def web_spec():
    return ContainerSpec(
        image="nginx:alpine",
        name="web",
        user="1000:1000",
        restart_policy="always",
        ip_address="10.10.0.5",
        ports=["8080:80"],
        volumes=["/srv/www:/usr/share/nginx/html"],
        environment=["MODE=test"],
        commands=["nginx", "-g", "daemon off;"],
    )


def _create_kwargs(fake_api):
    (_, args, kwargs), = fake_api.calls_to("create_container")
    return args, kwargs


def test_create_and_start_returns_id_and_runs(lifecycle, fake_api, web_spec):
    result = lifecycle.create_and_start(web_spec)

    assert result.container_id
    assert result.warnings == []
    assert fake_api.containers_by_id[result.container_id]["State"] == "running"
    assert [c[0] for c in fake_api.calls if c[0] in ("pull", "create_container", "start")] == [
        "pull", "create_container", "start"
    ]


def test_ports_are_exposed_and_bound(lifecycle, fake_api, web_spec):
    lifecycle.create_and_start(web_spec)

    _, kwargs = _create_kwargs(fake_api)
    assert kwargs["ports"] == [(80, "tcp")]
    assert kwargs["host_config"]["port_bindings"] == {"80/tcp": "8080"}


def test_volumes_become_bind_mounts(lifecycle, fake_api, web_spec):
    lifecycle.create_and_start(web_spec)

    _, kwargs = _create_kwargs(fake_api)
    mount, = kwargs["host_config"]["mounts"]
    assert mount["Type"] == "bind"
    assert mount["Source"] == "/srv/www"
    assert mount["Target"] == "/usr/share/nginx/html"


def test_container_config(lifecycle, fake_api, web_spec):
    lifecycle.create_and_start(web_spec)

    args, kwargs = _create_kwargs(fake_api)
    assert args == ("nginx:alpine",)
    assert kwargs["name"] == "web"
    assert kwargs["hostname"] == "web"
    assert kwargs["user"] == "1000:1000"
    assert kwargs["working_dir"] == WORKING_DIR
    assert kwargs["tty"] is False
    assert kwargs["stdin_open"] is True
    assert kwargs["environment"] == ["MODE=test"]
    assert kwargs["command"] == ["nginx", "-g", "daemon off;"]
    assert kwargs["labels"]["system-agent.role"] == "workload"


def test_host_and_network_config(lifecycle, fake_api, web_spec):
    lifecycle.create_and_start(web_spec)

    _, kwargs = _create_kwargs(fake_api)
    host_config = kwargs["host_config"]
    assert host_config["restart_policy"] == {"Name": "always"}
    assert host_config["network_mode"] == "agents-net"

    endpoints = kwargs["networking_config"]["EndpointsConfig"]
    assert list(endpoints) == ["agents-net"]
    assert endpoints["agents-net"]["aliases"] == ["web"]
    assert endpoints["agents-net"]["ipv4_address"] == "10.10.0.5"


def test_workload_logs_to_collector(lifecycle, fake_api, web_spec):
    lifecycle.create_and_start(web_spec)

    _, kwargs = _create_kwargs(fake_api)
    log_config = kwargs["host_config"]["log_config"]
    assert log_config["Type"] == "fluentd"
    assert log_config["Config"] == {
        "fluentd-address": "tcp://10.10.0.2:24224",
        "tag": "system-agent-log",
    }


def test_collector_image_keeps_default_logging(lifecycle, fake_api, logging_config):
    spec = ContainerSpec(image=logging_config.collector_image, name="fluent-bit")

    lifecycle.create_and_start(spec)

    _, kwargs = _create_kwargs(fake_api)
    assert kwargs["host_config"]["log_config"] is None


def test_collector_role_keeps_default_logging(lifecycle, fake_api):
    spec = ContainerSpec(image="registry.local/collector:dev", name="collector", role=ContainerRole.LOG_COLLECTOR)

    lifecycle.create_and_start(spec)

    _, kwargs = _create_kwargs(fake_api)
    assert kwargs["host_config"]["log_config"] is None
    assert kwargs["labels"]["system-agent.role"] == "log-collector"


def test_logging_disabled_keeps_default_logging(runtime_client, fake_api, web_spec):
    lifecycle = _lifecycle(runtime_client, LoggingConfig(enabled=False))

    lifecycle.create_and_start(web_spec)

    _, kwargs = _create_kwargs(fake_api)
    assert kwargs["host_config"]["log_config"] is None


def test_malformed_port_fails_before_any_runtime_call(lifecycle, fake_api):
    with pytest.raises(SpecValidationError):
        lifecycle.create_and_start(ContainerSpec(image="nginx:alpine", name="web", ports=["8080"]))

    assert fake_api.calls == []


def test_failed_pull_does_not_block_create(lifecycle, fake_api, web_spec):
    fake_api.pull_errors["nginx:alpine"] = "toomanyrequests"

    result = lifecycle.create_and_start(web_spec)

    assert result.container_id


def test_create_failure_skips_start(lifecycle, fake_api, web_spec):
    fake_api.missing_images.add("nginx:alpine")

    with pytest.raises(ContainerCreateError) as exc_info:
        lifecycle.create_and_start(web_spec)

    assert exc_info.value.step == "create"
    assert fake_api.calls_to("start") == []


def test_duplicate_name_is_a_create_error(lifecycle, fake_api, web_spec):
    fake_api.add_container("web")

    with pytest.raises(ContainerCreateError):
        lifecycle.create_and_start(web_spec)


def test_start_failure_leaves_created_container(lifecycle, fake_api, web_spec):
    fake_api.start_error = APIError("driver failed programming external connectivity")

    with pytest.raises(ContainerStartError) as exc_info:
        lifecycle.create_and_start(web_spec)

    container_id = exc_info.value.container_id
    assert fake_api.containers_by_id[container_id]["State"] == "created"
    assert fake_api.calls_to("remove_container") == []


@pytest.mark.parametrize("image", [
    "fluent/fluent-bit:latest",
    "fluent/fluent-bit",
    "fluent/fluent-bit@sha256:" + "a" * 64,
])
def test_other_tags_of_collector_image_keep_default_logging(lifecycle, image):
    spec = ContainerSpec(image=image, name="fb")

    assert lifecycle.build_log_config(spec) is None


def test_similar_repository_still_logs_to_collector(lifecycle):
    spec = ContainerSpec(image="fluent/fluent-bit-exporter:1.0", name="exporter")

    assert lifecycle.build_log_config(spec)["Type"] == "fluentd"


def test_create_and_start_can_skip_pull(lifecycle, fake_api, web_spec):
    lifecycle.create_and_start(web_spec, pull=False)

    assert fake_api.calls_to("pull") == []
    assert len(fake_api.calls_to("start")) == 1


def test_create_records_container_name(lifecycle, fake_api, web_spec):
    lifecycle.create_and_start(web_spec)

    (_, _, kwargs), = fake_api.calls_to("create_container")
    assert kwargs["name"] == "web"
