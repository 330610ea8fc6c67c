"""Tests for the contract value types and error messages."""

from __future__ import annotations

from baobench.benchmarktests import ConfigError, ProvisioningError, RequestDescriptor, RuntimeDescriptor


def test_request_descriptor_renders_json_target() -> None:
    target = RequestDescriptor(
        method="GET",
        url="http://bao.test:8200/v1/bench/creds/benchmark-role",
        headers={"X-Vault-Token": "t", "X-Vault-Namespace": "team"},
    )

    assert target.to_json_target() == {
        "method": "GET",
        "url": "http://bao.test:8200/v1/bench/creds/benchmark-role",
        "header": {"X-Vault-Token": ["t"], "X-Vault-Namespace": ["team"]},
    }


def test_runtime_descriptor_management_path() -> None:
    runtime = RuntimeDescriptor(mount_path="/v1/bench", role_name="benchmark-role")

    assert runtime.management_path == "sys/mounts/bench"


def test_runtime_descriptor_copies_headers() -> None:
    headers = {"X-Vault-Token": "t"}
    runtime = RuntimeDescriptor(mount_path="/v1/bench", role_name="r", headers=headers)
    headers["X-Vault-Token"] = "changed"

    assert runtime.headers["X-Vault-Token"] == "t"


def test_config_error_message_includes_field_and_detail() -> None:
    error = ConfigError("missing required credential", field="db_connection.username", detail="set it")

    assert str(error) == "missing required credential: db_connection.username\nset it"


def test_provisioning_error_message_includes_stage() -> None:
    error = ProvisioningError("role-config", "denied")

    assert error.stage == "role-config"
    assert str(error) == "role-config: denied"
