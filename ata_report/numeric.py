"""
Ata Report - Numeric Normalization

Coerces the money/quantity columns of an Ata report from pt-BR text
("1.234,56", "R$ 10,00") to numbers at export time.

Unparsable content becomes 0; normalization never raises.
"""

import re
from typing import Any, FrozenSet

# Columns always written as numbers
NUMERIC_COLUMNS: FrozenSet[str] = frozenset({
    "Valor",
    "Saldo",
    "Inicial",
    "Solicitada",
    "Consumida",
    "Saldo Atual",
})

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_WHITESPACE = re.compile(r"\s")


def is_numeric_column(name: str) -> bool:
    return name in NUMERIC_COLUMNS


def normalize_numeric(value: Any) -> float:
    """
    Convert a raw cell value to a float.

    - None, "" and zero become 0
    - numbers pass through unchanged
    - text: whitespace removed; when a comma is present it is the decimal
      separator and dots are thousands separators; anything other than
      digits, '.' and '-' is dropped; the rest is parsed, 0 on failure
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)

    text = _WHITESPACE.sub("", str(value))
    if not text:
        return 0.0

    if "," in text:
        text = text.replace(".", "").replace(",", ".")
    text = _NON_NUMERIC.sub("", text)

    try:
        return float(text)
    except ValueError:
        return 0.0
