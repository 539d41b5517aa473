"""Configuration loading: YAML file, then environment, then CLI"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional
import logging

import yaml

logger = logging.getLogger(__name__)

ONE_MB = 1024 * 1024
MAX_PART_SIZE = 4096 * ONE_MB
ENV_PREFIX = "ICEAXE_"


@dataclass
class IceAxeConfig:
    """Vault access and transfer configuration"""
    region: str = "us-east-1"
    account_id: str = "-"  # '-' means the credentials' account
    chunk_size: int = ONE_MB
    retrieval_tier: str = "Bulk"
    endpoint_url: Optional[str] = None
    max_attempts: int = 3
    log_level: str = "INFO"
    strict_chunk_size: bool = False

    def validate(self):
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be positive: {self.chunk_size}")

        if self.strict_chunk_size:
            megabytes, remainder = divmod(self.chunk_size, ONE_MB)
            if remainder or megabytes & (megabytes - 1) or not ONE_MB <= self.chunk_size <= MAX_PART_SIZE:
                raise ValueError(
                    f"chunk_size must be a power of two multiple of 1 MiB up to 4 GiB: {self.chunk_size}"
                )

        if self.retrieval_tier not in ("Expedited", "Standard", "Bulk"):
            raise ValueError(f"Unknown retrieval tier: {self.retrieval_tier}")

    def merged(self, overrides: Dict[str, Any]) -> 'IceAxeConfig':
        """Copy with non-None overrides applied"""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in overrides.items() if v is not None and k in values})
        config = IceAxeConfig(**values)
        config.validate()
        return config


def _coerce(name: str, value: str) -> Any:
    default = getattr(IceAxeConfig, name, None)
    if isinstance(default, bool):
        return value.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default, int):
        return int(value)
    return value


def _from_environment() -> Dict[str, Any]:
    values = {}
    for f in fields(IceAxeConfig):
        raw = os.environ.get(ENV_PREFIX + f.name.upper())
        if raw is not None:
            values[f.name] = _coerce(f.name, raw)
    return values


def load_config(path: Optional[Path] = None) -> IceAxeConfig:
    """Load configuration from an optional YAML file and ICEAXE_* variables"""
    values: Dict[str, Any] = {}

    if path is not None:
        path = Path(path)
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {path} must contain a mapping")

        known = {f.name for f in fields(IceAxeConfig)}
        for key in data:
            if key not in known:
                logger.warning(f"Ignoring unknown configuration key: {key}")
        values.update({k: v for k, v in data.items() if k in known})
        logger.info(f"Loaded configuration from {path}")

    values.update(_from_environment())

    return IceAxeConfig().merged(values)
