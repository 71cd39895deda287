"""
Pool configuration.

Values come from an optional YAML file and are then overridden by environment
variables:

    STAKEPOOL_DENOM             pool denomination (e.g. "orai")
    STAKEPOOL_REWARD_BUDGET     reward units emitted per emission period
    STAKEPOOL_EMISSION_PERIOD   period length in seconds (default 30 days)
    STAKEPOOL_DB                SQLite path; unset/empty keeps state in memory
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from ..core.staking import DEFAULT_EMISSION_PERIOD, MAX_AMOUNT
from ..state.store import InMemoryStore, KeyValueStore, SQLiteStore


MAX_EMISSION_PERIOD = 100 * 365 * 24 * 60 * 60


def _env_int(name: str, default: int, *, lo: int, hi: int) -> int:
    """Integer override from the environment; unset or blank keeps `default`.

    Malformed or out-of-range values raise `ValueError`; a typo in a reward
    parameter must not start a pool on a fallback value.
    """
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return int(default)
    s = raw.strip()
    if not (s.isascii() and s.isdigit()):
        raise ValueError(f"{name} must be a non-negative integer, got {raw!r}")
    v = int(s)
    if not (lo <= v <= hi):
        raise ValueError(f"{name} must be in [{lo}, {hi}]: {v}")
    return v


def _env_str(name: str, default: Optional[str]) -> Optional[str]:
    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _require_int(value: Any, *, name: str) -> int:
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an int")
    return int(value)


@dataclass(frozen=True)
class PoolConfig:
    denom: str
    reward_budget: int
    emission_period: int = DEFAULT_EMISSION_PERIOD
    # None keeps state in process memory.
    db_path: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.denom, str) or not self.denom.strip():
            raise ValueError("denom must be a non-empty string")
        if not isinstance(self.reward_budget, int) or isinstance(self.reward_budget, bool):
            raise TypeError("reward_budget must be an int")
        if not (0 <= self.reward_budget <= MAX_AMOUNT):
            raise ValueError(f"reward_budget must be in [0, {MAX_AMOUNT}]: {self.reward_budget}")
        if not isinstance(self.emission_period, int) or isinstance(self.emission_period, bool):
            raise TypeError("emission_period must be an int")
        if not (1 <= self.emission_period <= MAX_EMISSION_PERIOD):
            raise ValueError(f"emission_period must be in [1, {MAX_EMISSION_PERIOD}]: {self.emission_period}")


def config_from_mapping(raw: Mapping[str, Any]) -> PoolConfig:
    if not isinstance(raw, Mapping):
        raise TypeError("config must be a mapping")
    unknown = set(raw) - {"denom", "reward_budget", "emission_period", "db_path"}
    if unknown:
        raise ValueError(f"unknown config keys: {sorted(unknown)}")
    if "denom" not in raw or "reward_budget" not in raw:
        raise ValueError("config requires denom and reward_budget")
    db_path = raw.get("db_path")
    if db_path is not None and not isinstance(db_path, str):
        raise ValueError("db_path must be a string")
    return PoolConfig(
        denom=str(raw["denom"]).strip(),
        reward_budget=_require_int(raw["reward_budget"], name="reward_budget"),
        emission_period=_require_int(raw.get("emission_period", DEFAULT_EMISSION_PERIOD), name="emission_period"),
        db_path=db_path or None,
    )


def load_config(path: Union[str, Path, None] = None) -> PoolConfig:
    """Load config from an optional YAML file, then apply environment overrides."""
    raw: dict[str, Any] = {}
    if path is not None:
        obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
        if obj is None:
            obj = {}
        if not isinstance(obj, Mapping):
            raise TypeError("config YAML must be a mapping")
        raw.update(obj)

    denom = _env_str("STAKEPOOL_DENOM", raw.get("denom"))
    if denom is not None:
        raw["denom"] = denom
    db_path = _env_str("STAKEPOOL_DB", raw.get("db_path"))
    if db_path is not None:
        raw["db_path"] = db_path
    if os.environ.get("STAKEPOOL_REWARD_BUDGET", "").strip():
        raw["reward_budget"] = _env_int("STAKEPOOL_REWARD_BUDGET", 0, lo=0, hi=MAX_AMOUNT)
    if os.environ.get("STAKEPOOL_EMISSION_PERIOD", "").strip():
        raw["emission_period"] = _env_int(
            "STAKEPOOL_EMISSION_PERIOD", DEFAULT_EMISSION_PERIOD, lo=1, hi=MAX_EMISSION_PERIOD,
        )
    return config_from_mapping(raw)


def open_store(config: PoolConfig) -> KeyValueStore:
    if config.db_path:
        return SQLiteStore(config.db_path)
    return InMemoryStore()
