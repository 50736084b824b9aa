"""Tests for the worksheet prime scanner."""

from pathlib import Path
from typing import List
from unittest.mock import patch

import pytest

from excel_primes.models.data_models import CellType, Column, ScanResult, SheetCell
from excel_primes.processors.sheet_scanner import (
    CLOSE_ERROR_MESSAGE,
    ENCRYPTED_MESSAGE,
    READ_ERROR_MESSAGE,
    ScanAborted,
    SheetScanner,
    scan,
)
from excel_primes.processors.workbook_reader import (
    WorkbookEncryptedError,
    WorkbookHandle,
    WorkbookReadError,
)


def text(row: int, value: str, column: int = 1) -> SheetCell:
    return SheetCell(row=row, column=column, cell_type=CellType.TEXT, value=value)


class FakeWorkbook(WorkbookHandle):
    """In-memory workbook handle recording how often it is closed."""

    def __init__(self, rows=(), rows_error=None, close_error=None):
        super().__init__(Path("fake.xlsx"))
        self._rows = list(rows)
        self._rows_error = rows_error
        self._close_error = close_error
        self.close_calls = 0
        self.requested_sheets: List[int] = []

    @property
    def sheet_count(self) -> int:
        return 1

    def iter_rows(self, sheet_index: int = 0):
        self.requested_sheets.append(sheet_index)
        for row in self._rows:
            yield row
        if self._rows_error is not None:
            raise self._rows_error

    def close(self) -> None:
        self.close_calls += 1
        if self._close_error is not None:
            raise self._close_error
        self.closed = True


class TestSheetScanner:
    """Test cases for SheetScanner.scan with real workbooks."""

    @pytest.fixture
    def output(self) -> List[str]:
        return []

    @pytest.fixture
    def scanner(self, output) -> SheetScanner:
        return SheetScanner(echo=output.append)

    def test_scan_prints_primes_in_row_order(self, scanner, output, column_b_workbook):
        result = scanner.scan(column_b_workbook)

        assert output == ["2", "17"]
        assert result.primes == ["2", "17"]
        assert result.rows_scanned == 5
        assert result.cells_evaluated == 5

    def test_leading_zeros_are_printed_verbatim(self, scanner, output, make_workbook):
        scanner.scan(make_workbook([["a", "013"], ["b", "0002"], ["c", "007"]]))

        assert output == ["013", "0002", "007"]

    def test_non_digit_text_is_never_printed(self, scanner, output, make_workbook):
        values = ["-7", "+7", "7.0", " 7", "7 ", "1,3", "", "seven"]
        scanner.scan(make_workbook([["x", value] for value in values]))

        assert output == []

    def test_numeric_cells_are_ignored(self, scanner, output, make_workbook):
        scanner.scan(make_workbook([["a", 7], ["b", 11.0], ["c", True], ["d", "=2+3"], ["e", "13"]]))

        assert output == ["13"]

    def test_only_column_b_is_scanned(self, scanner, output, make_workbook):
        scanner.scan(make_workbook([["3", "4", "5"], ["7", None, "11"]]))

        assert output == []

    def test_rows_without_column_b_are_skipped(self, scanner, output, make_workbook):
        result = scanner.scan(make_workbook([["a"], [None, "5"], [], ["b"]]))

        assert output == ["5"]
        assert result.cells_evaluated == 1

    def test_empty_sheet(self, scanner, output, make_workbook):
        result = scanner.scan(make_workbook([]))

        assert output == []
        assert result.prime_count == 0

    def test_only_first_sheet_is_scanned(self, scanner, output, make_workbook):
        scanner.scan(make_workbook([["a", "4"]], extra_sheets=[[["b", "3"]]]))

        assert output == []

    def test_scan_is_idempotent(self, scanner, output, column_b_workbook):
        first = scanner.scan(column_b_workbook).primes
        second = scanner.scan(column_b_workbook).primes

        assert first == second == ["2", "17"]
        assert output == ["2", "17", "2", "17"]

    def test_missing_file_aborts_with_read_message(self, scanner, output, tmp_path):
        with pytest.raises(ScanAborted) as exc_info:
            scanner.scan(tmp_path / "missing.xlsx")

        assert exc_info.value.message == READ_ERROR_MESSAGE
        assert isinstance(exc_info.value.__cause__, WorkbookReadError)
        assert output == []

    def test_encrypted_file_aborts_with_password_message(self, scanner, output, encrypted_workbook):
        with pytest.raises(ScanAborted) as exc_info:
            scanner.scan(encrypted_workbook)

        assert exc_info.value.message == ENCRYPTED_MESSAGE
        assert isinstance(exc_info.value.__cause__, WorkbookEncryptedError)
        assert output == []

    def test_legacy_xls_text_primes(self, scanner, output, make_xls):
        path = make_xls([
            ["a", "7"],
            ["b", 11],
            ["c", "09"],
            ["d", "13"],
        ])

        result = scanner.scan(path)

        assert output == ["7", "13"]
        assert result.rows_scanned == 4
        assert result.primes == ["7", "13"]


class TestScannerResourceHandling:
    """Test cases for close semantics and unexpected failures."""

    @pytest.fixture
    def output(self) -> List[str]:
        return []

    @pytest.fixture
    def scanner(self, output) -> SheetScanner:
        return SheetScanner(echo=output.append)

    def test_workbook_closed_once_after_success(self, scanner):
        workbook = FakeWorkbook(rows=[(None, text(0, "3"))])

        with patch('excel_primes.processors.sheet_scanner.open_workbook', return_value=workbook):
            scanner.scan("fake.xlsx")

        assert workbook.close_calls == 1
        assert workbook.requested_sheets == [0]

    def test_unexpected_error_is_logged_and_workbook_closed(self, scanner, output, caplog):
        workbook = FakeWorkbook(rows=[(None, text(0, "3"))], rows_error=IndexError("list index out of range"))

        with patch('excel_primes.processors.sheet_scanner.open_workbook', return_value=workbook):
            with caplog.at_level("ERROR"):
                result = scanner.scan("fake.xlsx")

        assert output == ["3"]
        assert result.primes == ["3"]
        assert workbook.close_calls == 1
        assert any(record.exc_info for record in caplog.records)
        assert "IndexError" in caplog.text

    def test_unexpected_open_error_is_logged(self, scanner, output, caplog):
        with patch('excel_primes.processors.sheet_scanner.open_workbook', side_effect=RuntimeError("boom")):
            with caplog.at_level("ERROR"):
                result = scanner.scan("fake.xlsx")

        assert output == []
        assert result.rows_scanned == 0
        assert "boom" in caplog.text

    def test_close_failure_prints_message(self, scanner, output):
        workbook = FakeWorkbook(rows=[(None, text(0, "5"))], close_error=OSError("cannot close"))

        with patch('excel_primes.processors.sheet_scanner.open_workbook', return_value=workbook):
            result = scanner.scan("fake.xlsx")

        assert output == ["5", CLOSE_ERROR_MESSAGE]
        assert result.primes == ["5"]
        assert workbook.close_calls == 1

    def test_close_failure_after_unexpected_error(self, scanner, output):
        workbook = FakeWorkbook(rows_error=ValueError("bad row"), close_error=OSError("cannot close"))

        with patch('excel_primes.processors.sheet_scanner.open_workbook', return_value=workbook):
            scanner.scan("fake.xlsx")

        assert output == [CLOSE_ERROR_MESSAGE]
        assert workbook.close_calls == 1

    def test_read_error_does_not_touch_a_workbook(self, scanner):
        error = WorkbookReadError("File not found: fake.xlsx")

        with patch('excel_primes.processors.sheet_scanner.open_workbook', side_effect=error):
            with pytest.raises(ScanAborted, match="could not be read"):
                scanner.scan("fake.xlsx")


class TestEvaluate:
    """Test cases for single cell evaluation."""

    @pytest.fixture
    def output(self) -> List[str]:
        return []

    @pytest.fixture
    def scanner(self, output) -> SheetScanner:
        return SheetScanner(echo=output.append)

    def test_prime_text_cell(self, scanner, output):
        assert scanner.evaluate(text(3, "7919"))
        assert output == ["7919"]

    @pytest.mark.parametrize("value", ["1", "0", "9", "09", "", "abc", "-2"])
    def test_rejected_text_cell(self, scanner, output, value):
        assert not scanner.evaluate(text(0, value))
        assert output == []

    @pytest.mark.parametrize("cell_type", [t for t in CellType if t is not CellType.TEXT])
    def test_non_text_cell_with_prime_value(self, scanner, output, cell_type):
        cell = SheetCell(row=0, column=Column.B.index, cell_type=cell_type, value="7")

        assert not scanner.evaluate(cell)
        assert output == []


def test_module_scan_uses_default_scanner(column_b_workbook, capsys):
    result = scan(column_b_workbook)

    assert isinstance(result, ScanResult)
    assert capsys.readouterr().out == "2\n17\n"
