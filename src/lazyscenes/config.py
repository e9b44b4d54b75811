from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass


def _env_float(env: Mapping[str, str], name: str, default: float | None) -> float | None:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as ex:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from ex
    if value < 0 or value != value:
        raise ValueError(f"{name} must be a non-negative number of seconds, got {raw!r}")
    return value


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as ex:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from ex
    if value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {raw!r}")
    return value


@dataclass(frozen=True)
class RegistrySettings:
    """Tunables for a registry and the host serving it.

    Loads themselves are never bounded: `resolve_timeout_s` only limits how long
    one caller waits.
    """

    max_workers: int = 4
    resolve_timeout_s: float | None = None
    loading_delay_s: float = 0.2

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "RegistrySettings":
        env = os.environ if env is None else env
        defaults = cls()
        return cls(
            max_workers=_env_int(env, "LAZYSCENES_MAX_WORKERS", defaults.max_workers),
            resolve_timeout_s=_env_float(env, "LAZYSCENES_RESOLVE_TIMEOUT", defaults.resolve_timeout_s),
            loading_delay_s=_env_float(env, "LAZYSCENES_LOADING_DELAY", defaults.loading_delay_s),  # type: ignore[arg-type]
        )
