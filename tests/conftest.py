"""
Ata Report Test Configuration
=============================

Fixtures:
- SAMPLE_REPORT: a realistic Ata report grid (preamble + two unit sections)
- sample_rows: the grid as SpreadsheetRows
- sample_xlsx: the grid written to a real .xlsx file
- api_client: FastAPI TestClient bound to a temporary data directory
"""

import pytest
import sys
import os
from typing import Any, List, Sequence

from openpyxl import Workbook

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ata_report.models import SpreadsheetRow


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers"""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (real files / HTTP)")


# =============================================================================
# Sample Report - two unit sections with different headers
# =============================================================================

SAMPLE_REPORT: List[List[Any]] = [
    ["RELATÓRIO DE SALDO DA ATA DE REGISTRO DE PREÇOS"],               # 1
    ["Número da Ata: RP-2024-SES-001-2"],                              # 2
    ["Objeto:", "Aquisição de material de escritório"],                # 3
    ["Negociação:", "Pregão Eletrônico 12/2024"],                      # 4
    ["Início da Vigência:", "01/02/2024"],                             # 5
    ["Fim da Vigência:", "31/01/2025"],                                # 6
    [],                                                                # 7
    ["SESC - Unidade A"],                                              # 8
    ["Código", "Descrição", "Valor", "Saldo Atual"],                   # 9
    ["001", "Caneta azul", "1.234,56", "10"],                          # 10
    ["002", "Lápis preto", "2,50", "0"],                               # 11
    ["003", "Borracha branca", "0,75", "5"],                           # 12
    ["Total", "", "", ""],                                             # 13
    [],                                                                # 14
    ["SESC - Unidade B"],                                              # 15
    ["Item", "Descrição", "Valor", "Consumida"],                       # 16
    ["1", "Papel A4", "25,90", "3"],                                   # 17
    ["2", "Grampeador", "18,00", "1"],                                 # 18
    ["3", "Clips", "abc", "2"],                                        # 19
    ["Itens por unidade: 3"],                                          # 20
]

UNIT_A = "SESC - Unidade A"
UNIT_B = "SESC - Unidade B"


def make_rows(grid: Sequence[Sequence[Any]], start: int = 1) -> List[SpreadsheetRow]:
    """Build SpreadsheetRows from a list of cell lists"""
    return [
        SpreadsheetRow(index=idx, values=tuple(values))
        for idx, values in enumerate(grid, start=start)
    ]


def write_xlsx(path, grid: Sequence[Sequence[Any]], extra_sheets=None) -> str:
    """Write ``grid`` to the first sheet of a new workbook at ``path``"""
    wb = Workbook()
    ws = wb.active
    ws.title = "Relatorio"
    for values in grid:
        ws.append(list(values))
    for title, sheet_grid in (extra_sheets or {}).items():
        extra = wb.create_sheet(title)
        for values in sheet_grid:
            extra.append(list(values))
    wb.save(str(path))
    return str(path)


@pytest.fixture
def sample_rows() -> List[SpreadsheetRow]:
    return make_rows(SAMPLE_REPORT)


@pytest.fixture
def sample_xlsx(tmp_path) -> str:
    return write_xlsx(tmp_path / "relatorio.xlsx", SAMPLE_REPORT)


@pytest.fixture
def app_settings(tmp_path, monkeypatch):
    """Settings pointing at a throwaway data directory"""
    from api.config import Settings

    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    settings = Settings()
    settings.ensure_directories()
    return settings


@pytest.fixture
def api_client(app_settings):
    """Create a test client for the FastAPI app"""
    from fastapi.testclient import TestClient
    from api.config import get_settings
    from api.main import app

    app.dependency_overrides[get_settings] = lambda: app_settings
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
