"""Caruna electricity usage export reader.

CSV format (semicolon separated, UTF-8 with BOM, one header line):
    Aika;Kulutus (kWh)
    tiistai 1.1.2019 00:00;2,69
    tiistai 1.1.2019 01:00;Ei kulutustietoja tällä ajanjaksolla.
"""

import csv
import io
from pathlib import Path

from ..models import UsageRow

DELIMITER = ";"


def parse_usage_csv(csv_data: str) -> list[UsageRow]:
    """Parse export text into raw usage rows, skipping the header line."""
    rows = []
    reader = csv.reader(io.StringIO(csv_data.lstrip("\ufeff")), delimiter=DELIMITER)
    next(reader, None)
    for row in reader:
        if len(row) < 2:
            continue
        rows.append(UsageRow(date_text=row[0], usage_text=row[1]))
    return rows


def read_usage_csv(csv_path: Path) -> list[UsageRow]:
    """Read a usage export file."""
    with open(csv_path, encoding="utf-8-sig", newline="") as f:
        return parse_usage_csv(f.read())
