"""
Tests for contract metadata extraction from the report preamble.
"""

from datetime import datetime

import pytest

from ata_report.metadata_extractor import (
    METADATA_ROW_LIMIT,
    METADATA_RULES,
    MetadataExtractor,
)
from ata_report.models import ContractMetadata, SpreadsheetRow

from conftest import make_rows


def extract_from(*grid, start=1):
    return MetadataExtractor().extract(make_rows(grid, start=start))


class TestRuleTable:
    """The rule table itself"""

    def test_rules_cover_every_field_once_in_display_order(self):
        fields = [rule.field for rule in METADATA_RULES]
        assert fields == list(ContractMetadata.FIELDS)

    def test_final_vigencia_patterns_are_tried_in_order(self):
        rule = next(r for r in METADATA_RULES if r.field == "final_vigencia")
        assert len(rule.patterns) == 3
        assert "fim" in rule.patterns[0].pattern
        assert "validade" in rule.patterns[2].pattern


class TestNumeroAta:

    def test_number_after_label(self):
        metadata = extract_from(["Número da Ata: RP-2024-SES-001-2"])
        assert metadata.numero_ata == "RP-2024-SES-001-2"

    def test_label_and_number_in_separate_cells(self):
        metadata = extract_from(["NÚMERO DA ATA", None, "RP-2024-SES-001-2"])
        assert metadata.numero_ata == "RP-2024-SES-001-2"

    def test_number_without_label_is_ignored(self):
        metadata = extract_from(["Referência RP-2024-SES-001-2"])
        assert metadata.numero_ata == ""

    def test_lowercase_code_does_not_match(self):
        metadata = extract_from(["Número da Ata: rp-2024-ses-001-2"])
        assert metadata.numero_ata == ""


class TestObjetoAndNegociacao:

    def test_objeto_after_colon(self):
        metadata = extract_from(["Objeto: Aquisição de material de escritório"])
        assert metadata.objeto == "Aquisição de material de escritório"

    def test_objeto_value_in_next_cell_joins_into_line(self):
        metadata = extract_from(["Objeto:", "Material de limpeza"])
        assert metadata.objeto == "Material de limpeza"

    def test_objeto_next_cell_fallback_without_colon(self):
        metadata = extract_from(["OBJETO", "Material de limpeza"])
        assert metadata.objeto == "Material de limpeza"

    def test_objeto_label_without_value_stays_empty(self):
        metadata = extract_from(["Objeto"])
        assert metadata.objeto == ""

    def test_negociacao_accented(self):
        metadata = extract_from(["Negociação: Pregão Eletrônico 12/2024"])
        assert metadata.negociacao == "Pregão Eletrônico 12/2024"

    def test_negociacao_without_accents(self):
        metadata = extract_from(["Negociacao: Pregao 5"])
        assert metadata.negociacao == "Pregao 5"

    def test_negociacao_next_cell_fallback(self):
        metadata = extract_from(["Negociação", "Dispensa 7/2024"])
        assert metadata.negociacao == "Dispensa 7/2024"


class TestVigencia:

    def test_inicio_label_before_date(self):
        metadata = extract_from(["Início da Vigência:", "01/02/2024"])
        assert metadata.inicio_vigencia == "01/02/2024"

    def test_inicio_date_before_label(self):
        metadata = extract_from(["01/03/2024", "(início)"])
        assert metadata.inicio_vigencia == "01/03/2024"

    def test_inicio_from_date_cell(self):
        metadata = extract_from(["Inicio da Vigencia", datetime(2024, 2, 1)])
        assert metadata.inicio_vigencia == "01/02/2024"

    def test_fim_label_before_date(self):
        metadata = extract_from(["Fim da Vigência: 31/01/2025"])
        assert metadata.final_vigencia == "31/01/2025"

    def test_validade_ate(self):
        metadata = extract_from(["Validade até 28/02/2025"])
        assert metadata.final_vigencia == "28/02/2025"

    def test_dates_are_kept_as_text(self):
        metadata = extract_from(["Fim da Vigência: 31/02/2025"])
        assert metadata.final_vigencia == "31/02/2025"


class TestLatching:

    def test_first_match_wins(self):
        metadata = extract_from(
            ["Objeto: Primeiro objeto"],
            ["Objeto: Segundo objeto"],
        )
        assert metadata.objeto == "Primeiro objeto"

    def test_unmatched_fields_default_to_empty(self):
        metadata = extract_from(["Nada relevante aqui"])
        assert metadata == ContractMetadata()

    def test_rows_after_limit_are_ignored(self):
        extractor = MetadataExtractor()
        metadata = ContractMetadata()
        extractor.feed(
            SpreadsheetRow(index=METADATA_ROW_LIMIT + 1, values=("Objeto: tarde demais",)),
            metadata,
        )
        assert metadata.objeto == ""

    def test_row_at_limit_is_used(self):
        extractor = MetadataExtractor()
        metadata = ContractMetadata()
        extractor.feed(
            SpreadsheetRow(index=METADATA_ROW_LIMIT, values=("Objeto: no limite",)),
            metadata,
        )
        assert metadata.objeto == "no limite"

    def test_latch_never_overwrites(self):
        metadata = ContractMetadata(objeto="A")
        assert metadata.latch("objeto", "B") is False
        assert metadata.objeto == "A"

    @pytest.mark.parametrize("cells", [
        [],
        [None, None],
        ["   "],
        [0, 12.5],
    ])
    def test_rows_without_metadata_never_raise(self, cells):
        metadata = extract_from(cells)
        assert metadata.to_dict() == {
            "numeroAta": "",
            "objeto": "",
            "negociacao": "",
            "inicioVigencia": "",
            "finalVigencia": "",
        }


class TestSampleReport:

    def test_full_preamble(self, sample_rows):
        metadata = MetadataExtractor().extract(sample_rows)
        assert metadata.numero_ata == "RP-2024-SES-001-2"
        assert metadata.objeto == "Aquisição de material de escritório"
        assert metadata.negociacao == "Pregão Eletrônico 12/2024"
        assert metadata.inicio_vigencia == "01/02/2024"
        assert metadata.final_vigencia == "31/01/2025"
        assert metadata.is_complete()
