"""Explicit table of benchmark test types, built once at startup."""

from __future__ import annotations

from typing import Iterable

from .mssql import MSSQLSecretTest
from .types import BenchmarkTestType, UnknownTestTypeError


class BenchmarkRegistry:
    """Maps test type names to their implementations."""

    def __init__(self, test_types: Iterable[BenchmarkTestType] = ()) -> None:
        self._types: dict[str, BenchmarkTestType] = {}
        for test_type in test_types:
            self.register(test_type)

    def register(self, test_type: BenchmarkTestType) -> None:
        """Register a test type under its ``name``."""

        if test_type.name in self._types:
            raise ValueError(f"Test type '{test_type.name}' is already registered")
        self._types[test_type.name] = test_type

    def get(self, name: str) -> BenchmarkTestType:
        try:
            return self._types[name]
        except KeyError:
            raise UnknownTestTypeError(f"unknown test type '{name}'") from None

    def names(self) -> list[str]:
        return sorted(self._types)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self):
        return iter(self._types.values())


def default_registry() -> BenchmarkRegistry:
    """Registry holding the built-in test types."""

    return BenchmarkRegistry([MSSQLSecretTest()])
