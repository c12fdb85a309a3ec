"""Tests for configuration loading."""

from pathlib import Path

import pytest
from energy_cost import config
from energy_cost.config import ConfigError, load_config, parse_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate from the developer's environment and config files."""
    monkeypatch.delenv("ENERGY_COST_CONFIG", raising=False)
    monkeypatch.delenv("ENERGY_COST_TIMEZONE", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)


def test_defaults_without_config_file():
    cfg = load_config()

    assert cfg.timezone == "Europe/Helsinki"
    assert cfg.vat_multiplier == 1.24
    assert cfg.price_divisor == 10
    assert cfg.usage_file is None
    assert cfg.spot_files == []
    assert cfg.contracts == {}


def test_load_config_from_project_dir(tmp_path):
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "energy.yaml").write_text(
        "timezone: UTC\n"
        "vat_multiplier: 1.255\n"
        "usage_file: sahko.csv\n"
        "spot_files:\n"
        "  - prices/2019.json\n"
        "  - /data/prices.json\n"
        "contracts:\n"
        "  night: {kind: dayNight, day_rate: 6, night_rate: 5}\n"
    )

    cfg = load_config()

    assert cfg.timezone == "UTC"
    assert cfg.vat_multiplier == 1.255
    # Relative paths resolve against the project root
    assert cfg.usage_file == tmp_path / "sahko.csv"
    assert cfg.spot_files == [tmp_path / "prices" / "2019.json", Path("/data/prices.json")]
    assert cfg.contracts["night"]["kind"] == "dayNight"


def test_env_overrides(tmp_path, monkeypatch):
    path = tmp_path / "custom.yaml"
    path.write_text("timezone: UTC\n")
    monkeypatch.setenv("ENERGY_COST_CONFIG", str(path))
    monkeypatch.setenv("ENERGY_COST_TIMEZONE", "Europe/Stockholm")

    assert config.get_config_path() == path
    assert load_config().timezone == "Europe/Stockholm"


def test_env_config_missing(monkeypatch, tmp_path):
    monkeypatch.setenv("ENERGY_COST_CONFIG", str(tmp_path / "nope.yaml"))

    with pytest.raises(ConfigError):
        load_config()


def test_single_spot_file_string():
    cfg = parse_config({"spot_files": "prices.json"}, Path("/srv"))
    assert cfg.spot_files == [Path("/srv/prices.json")]


@pytest.mark.parametrize(
    "data",
    [
        {"vat_multiplier": 0},
        {"vat_multiplier": "24%"},
        {"price_divisor": -10},
        {"contracts": ["night"]},
        {"contracts": {"night": 6}},
        ["timezone"],
        {"timezone": 3},
    ],
)
def test_invalid_config(data):
    with pytest.raises(ConfigError):
        parse_config(data)


def test_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("contracts: [unclosed\n")

    with pytest.raises(ConfigError, match="Could not parse"):
        load_config(path)
