"""Readers for ``MM_*``, ``GITHUB_*`` and ``DEMOKIT_*`` environment variables."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import ConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence


def optional_env_var(name: str) -> str | None:
    """Return the stripped value of ``name``; unset and blank both read as ``None``."""

    value = os.getenv(name, "").strip()
    return value or None


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return every variable in ``names``, naming all absent ones in a single error."""

    values = {name: optional_env_var(name) for name in names}
    missing = sorted(name for name, value in values.items() if value is None)
    if missing:
        raise MissingConfigurationError(f"Missing configuration for: {', '.join(missing)}")
    return {name: value for name, value in values.items() if value is not None}


def _env_number[TNumber: (int, float)](
    name: str,
    default: TNumber,
    *,
    minimum: TNumber,
    convert: Callable[[str], TNumber],
    kind: str,
) -> TNumber:
    raw = optional_env_var(name)
    if raw is None:
        return default
    try:
        value = convert(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be {kind}, got {raw!r}") from exc
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


def env_float(name: str, default: float, *, minimum: float = 0.0) -> float:
    return _env_number(name, default, minimum=minimum, convert=float, kind="a number")


def env_int(name: str, default: int, *, minimum: int = 0) -> int:
    return _env_number(name, default, minimum=minimum, convert=int, kind="an integer")
