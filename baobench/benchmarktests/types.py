"""Benchmark test contract primitives shared between the runner and test types."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Protocol

if TYPE_CHECKING:
    from .lifecycle import ConfiguredTest

API_VERSION_PREFIX = "/v1/"
MOUNTS_PREFIX = "sys/mounts/"


class LifecyclePhase(str, Enum):
    """Stages a benchmark test moves through, in order."""

    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    PROVISIONED = "provisioned"
    CLEANED = "cleaned"


@dataclass(frozen=True, slots=True)
class TopLevelOptions:
    """Harness-wide options that apply to every test."""

    random_mounts: bool = True


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """One HTTP request for the load driver to issue."""

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)

    def to_json_target(self) -> dict[str, Any]:
        """Render the vegeta JSON target format."""

        return {
            "method": self.method,
            "url": self.url,
            "header": {name: [value] for name, value in self.headers.items()},
        }


@dataclass(frozen=True, slots=True)
class RuntimeDescriptor:
    """State produced by setup; never written after construction."""

    mount_path: str
    role_name: str
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def management_path(self) -> str:
        """Server path used to remove the mount."""

        return self.mount_path.replace(API_VERSION_PREFIX, MOUNTS_PREFIX, 1)


@dataclass(frozen=True, slots=True)
class TargetInfo:
    """Summary of what a provisioned test sends."""

    method: str
    path_prefix: str


class BenchmarkTestType(Protocol):
    """Contract implemented by every benchmark test type."""

    name: str
    method: str

    def parse_config(self, body: Mapping[str, Any]) -> "ConfiguredTest": ...

    def add_flags(self, parser: argparse.ArgumentParser) -> None: ...


class BenchmarkError(RuntimeError):
    """Base error for benchmark test failures."""


class ConfigError(BenchmarkError):
    """Raised when a test configuration is missing or malformed."""

    def __init__(self, reason: str, *, field: str | None = None, detail: str | None = None) -> None:
        self.reason = reason
        self.field = field
        self.detail = detail
        message = reason
        if field:
            message = f"{message}: {field}"
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message)


class ProvisioningError(BenchmarkError):
    """Raised when the server rejects a setup step."""

    def __init__(self, stage: str, message: str) -> None:
        self.stage = stage
        super().__init__(f"{stage}: {message}")


class CleanupError(BenchmarkError):
    """Raised when removing a provisioned mount fails."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"error cleaning up mount {path!r}: {message}")


class UnknownTestTypeError(BenchmarkError):
    """Raised when a configuration names an unregistered test type."""
