"""Typed configuration loader for chainhash tables."""

from __future__ import annotations

import math
import os
import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .contracts.error import BadInputError

DEFAULT_INITIAL_CAPACITY = 4
DEFAULT_LOAD_FACTOR = 0.75
DEFAULT_LARGE_REHASH_WARN = 1_000_000


@dataclass
class TablePolicy:
    initial_capacity: int = DEFAULT_INITIAL_CAPACITY
    load_factor_threshold: float = DEFAULT_LOAD_FACTOR
    large_rehash_warn_threshold: int = DEFAULT_LARGE_REHASH_WARN

    def validate(self) -> None:
        if isinstance(self.initial_capacity, bool) or not isinstance(self.initial_capacity, int):
            raise BadInputError("table.initial_capacity must be an integer")
        if self.initial_capacity < 0:
            raise BadInputError("table.initial_capacity must be >= 0")
        lf = self.load_factor_threshold
        if isinstance(lf, bool) or not isinstance(lf, (int, float)):
            raise BadInputError("table.load_factor_threshold must be a number")
        if math.isnan(lf) or not 0.0 < lf <= 1.0:
            raise BadInputError(
                "table.load_factor_threshold must be in (0, 1]",
                hint="the default threshold is 0.75",
            )
        if self.large_rehash_warn_threshold < 0:
            raise BadInputError("table.large_rehash_warn_threshold must be >= 0")


@dataclass
class AppConfig:
    table: TablePolicy = field(default_factory=TablePolicy)

    @classmethod
    def load(cls, path: Path | None) -> AppConfig:
        if path is None:
            cfg = cls()
        else:
            try:
                data = tomllib.loads(path.read_text(encoding="utf-8"))
            except FileNotFoundError as exc:
                raise BadInputError(f"Config file not found: {path}") from exc
            except tomllib.TOMLDecodeError as exc:
                raise BadInputError(f"Invalid TOML: {exc}") from exc
            cfg = cls.from_dict(data)
        cfg.apply_env_overrides(os.environ)
        cfg.validate()
        return cfg

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        table_data = data.get("table", {})
        if not isinstance(table_data, dict):
            raise BadInputError("[table] section must be a table")
        try:
            table = TablePolicy(**table_data)
        except TypeError as exc:
            raise BadInputError(f"Unknown key in [table]: {exc}") from exc
        return cls(table=table)

    def apply_env_overrides(self, env: Mapping[str, str]) -> None:
        table_mapping: dict[str, tuple[str, Callable[[str], Any]]] = {
            "CHAINHASH_INITIAL_CAPACITY": ("initial_capacity", int),
            "CHAINHASH_LOAD_FACTOR": ("load_factor_threshold", float),
            "CHAINHASH_LARGE_REHASH_WARN": ("large_rehash_warn_threshold", int),
        }
        for key, (attr, caster) in table_mapping.items():
            raw_value = env.get(key)
            if raw_value is None:
                continue
            try:
                value = caster(raw_value)
            except ValueError as exc:
                raise BadInputError(f"Invalid env override {key}={raw_value!r}") from exc
            setattr(self.table, attr, value)

    def validate(self) -> None:
        self.table.validate()


DEFAULT_CONFIG = AppConfig()


def load_app_config(path: str | None) -> AppConfig:
    config_path = Path(path) if path else None
    return AppConfig.load(config_path)
