"""
Ata Report - Data Models

Rows, contract metadata, records and the scan accumulator used by the
single-pass extraction over a framework-agreement (Ata) report.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Tuple


# A single line item: column name -> raw cell value
Record = Dict[str, Any]

# Label that selects every unit section instead of a single one
ALL_UNITS = "Todas"

# Trimmed cell text starting with this marks a new unit subsection
UNIT_SENTINEL = "SESC - "


def cell_text(value: Any) -> str:
    """
    Stringify a raw cell value for text matching.

    None becomes "", dates are rendered dd/mm/yyyy the way they are
    typed in the reports, everything else goes through str().
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    return str(value)


def is_blank(value: Any) -> bool:
    """True for a missing cell, an empty string or a whitespace-only string"""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


@dataclass(frozen=True)
class SpreadsheetRow:
    """One row of the first sheet, as read from the document"""
    index: int                      # 1-based row number
    values: Tuple[Any, ...] = ()    # str | int | float | datetime | None

    @property
    def line_text(self) -> str:
        """Non-empty cell texts joined by a single space"""
        parts = [cell_text(v).strip() for v in self.values]
        return " ".join(p for p in parts if p).strip()

    def is_blank(self) -> bool:
        return all(is_blank(v) for v in self.values)


@dataclass
class ContractMetadata:
    """
    Contract-level fields found in the report preamble.

    Each field is assigned at most once: the first successful match wins
    and is never overwritten or cleared.
    """
    numero_ata: str = ""
    objeto: str = ""
    negociacao: str = ""
    inicio_vigencia: str = ""
    final_vigencia: str = ""

    FIELDS = ("numero_ata", "objeto", "negociacao", "inicio_vigencia", "final_vigencia")

    def is_set(self, name: str) -> bool:
        return getattr(self, name) != ""

    def latch(self, name: str, value: str) -> bool:
        """Assign ``name`` if still empty; returns True when the value was taken"""
        if self.is_set(name) or not value:
            return False
        setattr(self, name, value)
        return True

    def is_complete(self) -> bool:
        return all(self.is_set(name) for name in self.FIELDS)

    def to_dict(self) -> Dict[str, str]:
        """Serialize with the keys used by the web client"""
        return {
            "numeroAta": self.numero_ata,
            "objeto": self.objeto,
            "negociacao": self.negociacao,
            "inicioVigencia": self.inicio_vigencia,
            "finalVigencia": self.final_vigencia,
        }


class ScanPhase(Enum):
    """Where the scan is relative to the current unit section"""
    IDLE = "idle"                        # outside any selected section
    AWAITING_HEADER = "awaiting_header"  # selected section, header not seen yet
    CAPTURING = "capturing"              # header captured, rows become records


@dataclass
class ScanState:
    """
    Mutable accumulator threaded through one scan.

    A fresh instance is created for every scan; nothing here is shared
    between requests.
    """
    selected_unit: str = ALL_UNITS
    capturing: bool = False
    header_found: bool = False
    header: List[str] = field(default_factory=list)

    @property
    def phase(self) -> ScanPhase:
        if not self.capturing:
            return ScanPhase.IDLE
        if not self.header_found:
            return ScanPhase.AWAITING_HEADER
        return ScanPhase.CAPTURING


@dataclass
class ExtractionResult:
    """Structured output of one full scan"""
    metadata: ContractMetadata = field(default_factory=ContractMetadata)
    records: List[Record] = field(default_factory=list)

    @property
    def columns(self) -> List[str]:
        """Column names, in the key order of the first record"""
        if not self.records:
            return []
        return list(self.records[0].keys())

    def preview(self, limit: int = 5) -> List[Record]:
        return self.records[:limit]
