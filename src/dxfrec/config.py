from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

from loguru import logger

MAX_PARAM = 10000


@dataclass(frozen=True)
class Config:
    # Out-of-range enumerated/flag values raise Malformed when set,
    # otherwise they are reported as diagnostics.
    strict_values: bool = True
    # Record types written or read below their first release raise
    # VersionMismatch when set.
    strict_versions: bool = False
    max_repeat: int = MAX_PARAM
    float_precision: int = 6

    def __post_init__(self) -> None:
        if self.max_repeat <= 0:
            raise ValueError(f"max_repeat must be positive, got {self.max_repeat}")
        if not 0 <= self.float_precision <= 17:
            raise ValueError(f"float_precision out of range: {self.float_precision}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Config":
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            if key not in known:
                logger.warning(f"Ignoring unknown config key: {key}")
                continue
            kwargs[key] = value
        return cls(**kwargs)

    @classmethod
    def from_file(cls, path: str | Path) -> "Config":
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"config root must be an object: {config_path}")
        logger.info(f"Loaded config: {config_path}")
        return cls.from_dict(data)


DEFAULT_CONFIG = Config()
