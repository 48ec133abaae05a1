"""
Ata Report - Contract Metadata Extractor

Scans the preamble of an Ata report for contract-level fields:
- Número da Ata (agreement number, e.g. RP-2024-SES-001-2)
- Objeto (what is being procured)
- Negociação (negotiation reference)
- Início / Final da Vigência (validity period, kept as dd/mm/yyyy text)

The reports have no fixed layout for these fields, so each one is located
by an ordered list of regex heuristics over the row's joined text, with an
optional "value is in the next cell" fallback. Rules are data: they are
evaluated in table order, and within a rule the patterns are tried in
order until one matches.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Pattern, Tuple

from .models import ContractMetadata, SpreadsheetRow, cell_text

logger = logging.getLogger(__name__)


# Only rows up to this (1-based) index are considered for metadata
METADATA_ROW_LIMIT = 20

_DATE = r"(\d{2}/\d{2}/\d{4})"


@dataclass(frozen=True)
class MetadataRule:
    """
    One field's extraction heuristic.

    keyword:   the row text must contain this before any pattern is tried
    patterns:  tried in order; group 1 (or the whole match) is the value
    next_cell: when no pattern matches, take the text of the cell right
               after the first cell containing ``keyword``
    """
    field: str
    keyword: Optional[Pattern]
    patterns: Tuple[Pattern, ...]
    next_cell: bool = False

    def apply(self, row: SpreadsheetRow, line: str) -> str:
        if self.keyword is not None and not self.keyword.search(line):
            return ""

        for pattern in self.patterns:
            match = pattern.search(line)
            if match:
                value = match.group(1) if pattern.groups else match.group(0)
                value = value.strip()
                if value:
                    return value

        if self.next_cell and self.keyword is not None:
            return self._value_after_keyword(row)

        return ""

    def _value_after_keyword(self, row: SpreadsheetRow) -> str:
        values = row.values
        for idx, value in enumerate(values):
            if value is None or not self.keyword.search(cell_text(value)):
                continue
            if idx + 1 < len(values):
                return cell_text(values[idx + 1]).strip()
            return ""
        return ""


def _rx(pattern: str, flags: int = re.IGNORECASE) -> Pattern:
    return re.compile(pattern, flags)


# =============================================================================
# RULE TABLE (evaluated top to bottom, first match per field wins)
# =============================================================================

METADATA_RULES: Tuple[MetadataRule, ...] = (
    MetadataRule(
        field="numero_ata",
        keyword=_rx(r"número da ata"),
        # Agreement numbers are upper-case codes, matched case-sensitively
        patterns=(_rx(r"\b[A-Z]{2}-\d{4}-[A-Z]{3}-\d{3}-\d\b", 0),),
    ),
    MetadataRule(
        field="objeto",
        keyword=_rx(r"objeto"),
        patterns=(_rx(r"objeto:\s*(.+)"),),
        next_cell=True,
    ),
    MetadataRule(
        field="negociacao",
        keyword=_rx(r"negocia[cç][aã]o"),
        patterns=(_rx(r"negocia[cç][aã]o:\s*(.+)"),),
        next_cell=True,
    ),
    MetadataRule(
        field="inicio_vigencia",
        keyword=None,
        patterns=(
            _rx(r"in[ií]cio.*?vig[eê]ncia.*?" + _DATE),
            _rx(_DATE + r".*?in[ií]cio"),
        ),
    ),
    MetadataRule(
        field="final_vigencia",
        keyword=None,
        patterns=(
            _rx(r"fim.*?vig[eê]ncia.*?" + _DATE),
            _rx(_DATE + r".*?fim"),
            _rx(r"validade.*?at[eé].*?" + _DATE),
        ),
    ),
)


class MetadataExtractor:
    """
    Apply the rule table to rows as they stream past.

    Usage:
        extractor = MetadataExtractor()
        for row in rows:
            extractor.feed(row, metadata)
    """

    def __init__(self, rules: Iterable[MetadataRule] = METADATA_RULES,
                 row_limit: int = METADATA_ROW_LIMIT):
        self.rules = tuple(rules)
        self.row_limit = row_limit

    def feed(self, row: SpreadsheetRow, metadata: ContractMetadata) -> None:
        """Try every still-empty field against ``row``; never raises"""
        if row.index > self.row_limit:
            return

        line = row.line_text
        if not line:
            return

        for rule in self.rules:
            if metadata.is_set(rule.field):
                continue
            value = rule.apply(row, line)
            if metadata.latch(rule.field, value):
                logger.debug(f"Row {row.index}: {rule.field} = {value!r}")

    def extract(self, rows: Iterable[SpreadsheetRow]) -> ContractMetadata:
        """Standalone pass over ``rows`` (the scanner calls ``feed`` instead)"""
        metadata = ContractMetadata()
        for row in rows:
            if row.index > self.row_limit:
                break
            self.feed(row, metadata)
        return metadata
