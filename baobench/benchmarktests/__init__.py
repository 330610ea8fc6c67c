"""Benchmark test contract and built-in test types."""

from .lifecycle import CleanedTest, ConfiguredTest, ProvisionedTest
from .mssql import MSSQLSecretTest
from .provisioning import ProvisioningPlan, WriteStep
from .registry import BenchmarkRegistry, default_registry
from .types import (
    BenchmarkError,
    BenchmarkTestType,
    CleanupError,
    ConfigError,
    LifecyclePhase,
    ProvisioningError,
    RequestDescriptor,
    RuntimeDescriptor,
    TargetInfo,
    TopLevelOptions,
    UnknownTestTypeError,
)

__all__ = [
    "BenchmarkError",
    "BenchmarkRegistry",
    "BenchmarkTestType",
    "CleanedTest",
    "CleanupError",
    "ConfigError",
    "ConfiguredTest",
    "LifecyclePhase",
    "MSSQLSecretTest",
    "ProvisionedTest",
    "ProvisioningError",
    "ProvisioningPlan",
    "RequestDescriptor",
    "RuntimeDescriptor",
    "TargetInfo",
    "TopLevelOptions",
    "UnknownTestTypeError",
    "WriteStep",
    "default_registry",
]
