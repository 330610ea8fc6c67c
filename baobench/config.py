"""Harness configuration loading helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomllib

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .benchmarktests.decoding import MALFORMED_CONFIGURATION
from .benchmarktests.types import ConfigError, TopLevelOptions


class BenchmarkBlock(BaseModel):
    """One ``[[test]]`` table: the test type, its mount name and raw config."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    type: str
    config: dict[str, Any] = Field(default_factory=dict)

    def body(self) -> dict[str, Any]:
        """Table handed to the test type's decoder."""

        return {"config": self.config}


class HarnessConfig(BaseModel):
    """Shape of the benchmark configuration file."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    random_mounts: bool = True
    log_level: str = "INFO"
    tests: list[BenchmarkBlock] = Field(default_factory=list, alias="test")

    def options(self) -> TopLevelOptions:
        return TopLevelOptions(random_mounts=self.random_mounts)


def load_harness_config(path: Path) -> HarnessConfig:
    """Read and validate a TOML benchmark configuration file."""

    try:
        with path.open("rb") as handle:
            raw = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(MALFORMED_CONFIGURATION, detail=f"config file not found: {path}") from exc
    except (tomllib.TOMLDecodeError, OSError) as exc:
        raise ConfigError(MALFORMED_CONFIGURATION, detail=f"{path}: {exc}") from exc
    return parse_harness_config(raw)


def parse_harness_config(raw: dict[str, Any]) -> HarnessConfig:
    try:
        return HarnessConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(MALFORMED_CONFIGURATION, detail=str(exc)) from exc


__all__ = ["HarnessConfig", "BenchmarkBlock", "load_harness_config", "parse_harness_config"]
