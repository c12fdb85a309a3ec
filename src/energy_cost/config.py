"""Configuration loading from config/energy.yaml and environment variables.

Environment:
    ENERGY_COST_CONFIG: path to the YAML config file
    ENERGY_COST_TIMEZONE: overrides the configured timezone
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .prices import DEFAULT_PRICE_DIVISOR, DEFAULT_VAT_MULTIPLIER

DEFAULT_TIMEZONE = "Europe/Helsinki"
CONFIG_FILENAME = "energy.yaml"


class ConfigError(ValueError):
    """Raised when configuration is missing or invalid."""
    pass


@dataclass
class Config:
    """Settings for a cost calculation run."""

    timezone: str = DEFAULT_TIMEZONE
    vat_multiplier: float = DEFAULT_VAT_MULTIPLIER
    price_divisor: float = DEFAULT_PRICE_DIVISOR
    usage_file: Path | None = None
    spot_files: list[Path] = field(default_factory=list)
    contracts: dict[str, dict[str, Any]] = field(default_factory=dict)


def get_config_path() -> Path | None:
    """Find the config file, or None if there isn't one."""
    env_path = os.environ.get("ENERGY_COST_CONFIG")
    if env_path:
        path = Path(env_path)
        if not path.exists():
            raise ConfigError(f"ENERGY_COST_CONFIG points to missing file {path}")
        return path

    candidates = [
        Path.cwd() / "config" / CONFIG_FILENAME,
        Path.home() / ".config" / "energy-cost" / CONFIG_FILENAME,
    ]
    for path in candidates:
        if path.exists():
            return path
    return None


def _number(data: dict, key: str, default: float) -> float:
    value = data.get(key, default)
    if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
        raise ConfigError(f"Invalid {key} {value!r}, expected a positive number")
    return float(value)


def parse_config(data: dict | None, base_dir: Path | None = None) -> Config:
    """Build a Config from parsed YAML data.

    Relative file paths are resolved against base_dir.
    """
    data = data or {}
    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping")

    def resolve(p: str) -> Path:
        path = Path(p).expanduser()
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        return path

    contracts = data.get("contracts") or {}
    if not isinstance(contracts, dict) or not all(isinstance(c, dict) for c in contracts.values()):
        raise ConfigError("'contracts' must map contract names to settings")

    timezone = os.environ.get("ENERGY_COST_TIMEZONE") or data.get("timezone") or DEFAULT_TIMEZONE
    if not isinstance(timezone, str):
        raise ConfigError(f"Invalid timezone {timezone!r}, expected an IANA name such as Europe/Helsinki")

    spot_files = data.get("spot_files") or []
    if isinstance(spot_files, str):
        spot_files = [spot_files]

    return Config(
        timezone=timezone,
        vat_multiplier=_number(data, "vat_multiplier", DEFAULT_VAT_MULTIPLIER),
        price_divisor=_number(data, "price_divisor", DEFAULT_PRICE_DIVISOR),
        usage_file=resolve(data["usage_file"]) if data.get("usage_file") else None,
        spot_files=[resolve(p) for p in spot_files],
        contracts=contracts,
    )


def load_config(config_path: Path | None = None) -> Config:
    """Load config from YAML, falling back to defaults when no file exists."""
    load_dotenv()

    path = config_path or get_config_path()
    if path is None:
        return parse_config({})

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {path}: {e}") from e

    # Paths in the config file are relative to the project root (config/..)
    base_dir = path.parent.parent if path.parent.name == "config" else path.parent
    return parse_config(data, base_dir)
