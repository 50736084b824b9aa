"""Pytest configuration and shared fixtures for Excel Prime Finder tests."""

from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional

import openpyxl
import pytest
import xlwt
import yaml
from msoffcrypto.format.ooxml import OOXMLFile


WorkbookFactory = Callable[..., Path]


@pytest.fixture
def make_workbook(tmp_path: Path) -> WorkbookFactory:
    """Factory writing an .xlsx file whose first sheet holds the given rows.

    Each row is a sequence of cell values written from column A onwards;
    None leaves the cell unwritten. Strings are stored as text cells,
    ints and floats as numeric cells, and strings starting with '=' as
    formulas.
    """
    def factory(
        rows: Iterable[Iterable[Any]],
        name: str = "numbers.xlsx",
        extra_sheets: Optional[List[List[List[Any]]]] = None
    ) -> Path:
        workbook = openpyxl.Workbook()
        sheet = workbook.active
        sheet.title = "Primes"
        _fill(sheet, rows)

        for index, sheet_rows in enumerate(extra_sheets or [], 2):
            _fill(workbook.create_sheet(f"Sheet{index}"), sheet_rows)

        path = tmp_path / name
        workbook.save(path)
        return path

    return factory


def _fill(sheet, rows: Iterable[Iterable[Any]]) -> None:
    for row_number, values in enumerate(rows, 1):
        for column_number, value in enumerate(values, 1):
            if value is not None:
                sheet.cell(row=row_number, column=column_number, value=value)


@pytest.fixture
def column_b_workbook(make_workbook: WorkbookFactory) -> Path:
    """Workbook with the column B values "2", "4", "17", "abc", "09"."""
    return make_workbook([
        ["a", "2"],
        ["b", "4"],
        ["c", "17"],
        ["d", "abc"],
        ["e", "09"],
    ])


@pytest.fixture
def make_xls(tmp_path: Path) -> WorkbookFactory:
    """Factory writing a legacy .xls file whose first sheet holds the given rows.

    Strings are stored as text cells and numbers as numeric cells; None
    leaves the cell unwritten.
    """
    def factory(rows: Iterable[Iterable[Any]], name: str = "legacy.xls") -> Path:
        workbook = xlwt.Workbook()
        sheet = workbook.add_sheet("Primes")
        for row_number, values in enumerate(rows):
            for column_number, value in enumerate(values):
                if value is not None:
                    sheet.write(row_number, column_number, value)

        path = tmp_path / name
        workbook.save(str(path))
        return path

    return factory


@pytest.fixture
def encrypted_workbook(column_b_workbook: Path, tmp_path: Path) -> Path:
    """Password-protected copy of column_b_workbook (password "secret")."""
    path = tmp_path / "protected.xlsx"
    with open(column_b_workbook, "rb") as plain, open(path, "wb") as protected:
        OOXMLFile(plain).encrypt("secret", protected)
    return path


@pytest.fixture
def sample_config_dict() -> dict:
    """Sample configuration dictionary for testing."""
    return {
        "processing": {
            "error_exit_code": 3,
        },
        "logging": {
            "level": "debug",
            "file": {
                "enabled": False,
                "path": "./logs/test.log",
            },
            "structured": {
                "enabled": False,
            },
        },
    }


@pytest.fixture
def sample_config_file(tmp_path: Path, sample_config_dict: dict) -> Path:
    """Create a sample configuration file for testing."""
    config_file = tmp_path / "test_config.yaml"
    with open(config_file, 'w') as f:
        yaml.dump(sample_config_dict, f)
    return config_file
