"""Dynamic MSSQL credential benchmark (``mssql_secret``)."""

from __future__ import annotations

import argparse
import os
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .decoding import UNKNOWN_CONNECTION, decode_config, require_credentials, validate_duration
from .lifecycle import ConfiguredTest
from .provisioning import ProvisioningPlan, WriteStep
from .types import ConfigError

ENV_VAR_PREFIX = "VAULT_BENCHMARK_"

MSSQL_SECRET_TEST_TYPE = "mssql_secret"
MSSQL_SECRET_TEST_METHOD = "GET"
MSSQL_USERNAME_ENV_VAR = ENV_VAR_PREFIX + "MSSQL_USERNAME"
MSSQL_PASSWORD_ENV_VAR = ENV_VAR_PREFIX + "MSSQL_PASSWORD"

DEFAULT_CONNECTION_NAME = "benchmark-mssql"
DEFAULT_ROLE_NAME = "benchmark-role"
DEFAULT_PLUGIN_NAME = "mssql-database-plugin"


def _env(name: str) -> str:
    return os.environ.get(name, "")


class _Block(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class MSSQLConnectionConfig(_Block):
    """``db_connection`` block: how the database backend reaches MSSQL."""

    name: str = DEFAULT_CONNECTION_NAME
    plugin_name: str = DEFAULT_PLUGIN_NAME
    plugin_version: str | None = None
    verify_connection: bool | None = None
    allowed_roles: tuple[str, ...] = (DEFAULT_ROLE_NAME,)
    root_rotation_statements: tuple[str, ...] | None = None
    password_policy: str | None = None
    connection_url: str
    username: str = Field(default_factory=lambda: _env(MSSQL_USERNAME_ENV_VAR))
    password: str = Field(default_factory=lambda: _env(MSSQL_PASSWORD_ENV_VAR))
    disable_escaping: bool = False
    max_open_connections: int | None = Field(default=None, ge=0)
    max_idle_connections: int | None = Field(default=None, ge=0)
    max_connection_lifetime: str | None = None
    username_template: str | None = None
    contained_db: bool = False

    @field_validator("max_connection_lifetime")
    @classmethod
    def check_lifetime(cls, value: str | None) -> str | None:
        return validate_duration(value)


class MSSQLRoleConfig(_Block):
    """``role`` block: which credentials the backend issues."""

    name: str = DEFAULT_ROLE_NAME
    db_name: str = DEFAULT_CONNECTION_NAME
    default_ttl: str | None = None
    max_ttl: str | None = None
    creation_statements: str
    revocation_statements: str | None = None

    @field_validator("default_ttl", "max_ttl")
    @classmethod
    def check_ttls(cls, value: str | None) -> str | None:
        return validate_duration(value)


class MSSQLSecretTestConfig(_Block):
    """``config`` block wrapping the connection and role blocks."""

    db_connection: MSSQLConnectionConfig
    role: MSSQLRoleConfig


class _MSSQLSecretBody(_Block):
    config: MSSQLSecretTestConfig


def connection_payload(config: MSSQLConnectionConfig) -> dict[str, Any]:
    """Map the connection block onto the server's ``config/<name>`` fields."""

    payload: dict[str, Any] = {
        "plugin_name": config.plugin_name,
        "allowed_roles": list(config.allowed_roles),
        "connection_url": config.connection_url,
        "username": config.username,
        "password": config.password,
        "disable_escaping": config.disable_escaping,
        "contained_db": config.contained_db,
    }
    optional: dict[str, Any] = {
        "plugin_version": config.plugin_version,
        "verify_connection": config.verify_connection,
        "root_rotation_statements": (
            list(config.root_rotation_statements) if config.root_rotation_statements is not None else None
        ),
        "password_policy": config.password_policy,
        "max_open_connections": config.max_open_connections,
        "max_idle_connections": config.max_idle_connections,
        "max_connection_lifetime": config.max_connection_lifetime,
        "username_template": config.username_template,
    }
    payload.update({key: value for key, value in optional.items() if value is not None})
    return payload


def role_payload(config: MSSQLRoleConfig) -> dict[str, Any]:
    """Map the role block onto the server's ``roles/<name>`` fields."""

    payload: dict[str, Any] = {
        "db_name": config.db_name,
        "creation_statements": config.creation_statements,
    }
    optional = {
        "default_ttl": config.default_ttl,
        "max_ttl": config.max_ttl,
        "revocation_statements": config.revocation_statements,
    }
    payload.update({key: value for key, value in optional.items() if value is not None})
    return payload


def parse_mssql_config(body: Mapping[str, Any]) -> MSSQLSecretTestConfig:
    """Decode and validate a test block containing a ``config`` table."""

    config = decode_config(_MSSQLSecretBody, body).config
    require_credentials(
        {
            "db_connection.username": config.db_connection.username,
            "db_connection.password": config.db_connection.password,
        }
    )
    if config.role.db_name != config.db_connection.name:
        raise ConfigError(
            UNKNOWN_CONNECTION,
            field="role.db_name",
            detail=f"role references {config.role.db_name!r}, configured connection is {config.db_connection.name!r}",
        )
    return config


def build_plan(config: MSSQLSecretTestConfig) -> ProvisioningPlan:
    return ProvisioningPlan(
        backend_type="database",
        connection=WriteStep(
            path=f"config/{config.db_connection.name}",
            payload=connection_payload(config.db_connection),
            label="mssql db config",
        ),
        role=WriteStep(
            path=f"roles/{config.role.name}",
            payload=role_payload(config.role),
            label="mssql role",
        ),
    )


class MSSQLSecretTest:
    """Benchmarks issuance of dynamic MSSQL credentials."""

    name = MSSQL_SECRET_TEST_TYPE
    method = MSSQL_SECRET_TEST_METHOD

    def parse_config(self, body: Mapping[str, Any]) -> ConfiguredTest:
        config = parse_mssql_config(body)
        return ConfiguredTest(test_type=self.name, method=self.method, plan=build_plan(config))

    def add_flags(self, parser: argparse.ArgumentParser) -> None:
        """No test-specific flags."""


__all__ = [
    "MSSQLConnectionConfig",
    "MSSQLRoleConfig",
    "MSSQLSecretTest",
    "MSSQLSecretTestConfig",
    "MSSQL_PASSWORD_ENV_VAR",
    "MSSQL_SECRET_TEST_TYPE",
    "MSSQL_USERNAME_ENV_VAR",
    "build_plan",
    "connection_payload",
    "parse_mssql_config",
    "role_payload",
]
