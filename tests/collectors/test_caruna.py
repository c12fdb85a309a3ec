"""Tests for the Caruna usage export reader."""

from energy_cost.collectors import caruna
from energy_cost.models import UsageRow

EXPORT = (
    "Aika;Kulutus (kWh)\n"
    "tiistai 1.1.2019 00:00;2,69\n"
    "tiistai 1.1.2019 01:00;Ei kulutustietoja tällä ajanjaksolla.\n"
    "\n"
    "tiistai 1.1.2019 02:00;0,41\n"
)


def test_parse_usage_csv_skips_header_and_blank_lines():
    rows = caruna.parse_usage_csv(EXPORT)

    assert rows == [
        UsageRow("tiistai 1.1.2019 00:00", "2,69"),
        UsageRow("tiistai 1.1.2019 01:00", "Ei kulutustietoja tällä ajanjaksolla."),
        UsageRow("tiistai 1.1.2019 02:00", "0,41"),
    ]


def test_parse_usage_csv_strips_bom():
    rows = caruna.parse_usage_csv("\ufeff" + EXPORT)
    assert len(rows) == 3
    assert rows[0].date_text == "tiistai 1.1.2019 00:00"


def test_parse_usage_csv_header_only():
    assert caruna.parse_usage_csv("Aika;Kulutus (kWh)\n") == []
    assert caruna.parse_usage_csv("") == []


def test_read_usage_csv(tmp_path):
    path = tmp_path / "sahko.csv"
    path.write_text(EXPORT, encoding="utf-8-sig")

    rows = caruna.read_usage_csv(path)

    assert len(rows) == 3
    assert rows[0] == UsageRow("tiistai 1.1.2019 00:00", "2,69")
