"""Helpers for turning raw configuration tables into validated test configs."""

from __future__ import annotations

import re
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

from .types import ConfigError

MALFORMED_CONFIGURATION = "malformed configuration"
MISSING_CREDENTIAL = "missing required credential"
UNKNOWN_CONNECTION = "unknown connection reference"

ModelT = TypeVar("ModelT", bound=BaseModel)

_DURATION_RE = re.compile(r"(?:\d+|(?:\d+(?:\.\d+)?(?:ns|us|µs|ms|s|m|h|d))+)")


def decode_config(model: type[ModelT], body: Mapping[str, Any]) -> ModelT:
    """Validate ``body`` against ``model``; model defaults are applied first."""

    try:
        return model.model_validate(dict(body))
    except ValidationError as exc:
        raise ConfigError(MALFORMED_CONFIGURATION, detail=str(exc)) from exc


def require_credentials(fields: Mapping[str, str | None]) -> None:
    """Reject the first credential field that is still empty after defaulting."""

    for name, value in fields.items():
        if not value:
            raise ConfigError(MISSING_CREDENTIAL, field=name)


def validate_duration(value: str | None) -> str | None:
    """Accept integer seconds or Go-style duration strings such as ``1h30m``."""

    if value is None:
        return None
    if not _DURATION_RE.fullmatch(value):
        raise ValueError(f"invalid duration {value!r}")
    return value


__all__ = [
    "MALFORMED_CONFIGURATION",
    "MISSING_CREDENTIAL",
    "UNKNOWN_CONNECTION",
    "decode_config",
    "require_credentials",
    "validate_duration",
]
