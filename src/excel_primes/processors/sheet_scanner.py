"""Prime scanning of a worksheet column.

The scanner opens a workbook, walks the rows of its first worksheet and
prints every text cell of column B that holds a prime written as plain
decimal digits. Results go to stdout one per line, exactly as the cell
text was stored (leading zeros included).

Failures to open the file are reported by raising ScanAborted with the
user-facing message; the caller decides how to terminate. Any other
failure is logged with its traceback and the scan ends normally after
the workbook has been closed.
"""

import time
from pathlib import Path
from typing import Callable, Optional, Union

import click

from excel_primes.analysis.prime_checker import is_prime_literal
from excel_primes.models.data_models import Column, ScanResult, SheetCell
from excel_primes.processors.workbook_reader import (
    WorkbookEncryptedError,
    WorkbookHandle,
    WorkbookReadError,
    open_workbook,
)
from excel_primes.utils.logger import get_processing_logger
from excel_primes.utils.logging_decorators import operation_context


READ_ERROR_MESSAGE = "Given file could not be read."
ENCRYPTED_MESSAGE = "Given file is password protected."
CLOSE_ERROR_MESSAGE = "Failed to close the file properly."


class ScanAborted(Exception):
    """Raised when a scan cannot start; message is meant for the user."""

    def __init__(self, message: str, file_path: Optional[Path] = None):
        super().__init__(message)
        self.message = message
        self.file_path = file_path


class SheetScanner:
    """Finds primes stored as text in one column of a workbook's first sheet.

    Example:
        >>> scanner = SheetScanner()
        >>> result = scanner.scan("numbers.xlsx")
        2
        17
        >>> result.primes
        ['2', '17']
    """

    SHEET_INDEX = 0
    COLUMN = Column.B

    def __init__(self, echo: Callable[[str], None] = click.echo):
        """Initialize sheet scanner.

        Args:
            echo: Line writer for found primes and close failures
        """
        self.echo = echo
        self.logger = get_processing_logger(__name__)

    def scan(self, file_path: Union[str, Path]) -> ScanResult:
        """Scan a workbook and print the primes found in column B.

        Args:
            file_path: Path to the spreadsheet file

        Returns:
            Summary of the scan

        Raises:
            ScanAborted: If the file cannot be read or is password protected
        """
        file_path = Path(file_path)
        result = ScanResult(file_path=file_path)

        self.logger.log_scan_start(file_path)
        start = time.perf_counter()

        try:
            workbook = open_workbook(file_path)
        except WorkbookReadError as e:
            self.logger.debug(f"Cannot open {file_path}: {e}", extra={"error_type": "read_error"})
            raise ScanAborted(READ_ERROR_MESSAGE, file_path) from e
        except WorkbookEncryptedError as e:
            self.logger.debug(f"Cannot open {file_path}: {e}", extra={"error_type": "encrypted"})
            raise ScanAborted(ENCRYPTED_MESSAGE, file_path) from e
        except Exception as e:
            self.logger.log_error(type(e).__name__, f"Unexpected failure opening workbook: {e}",
                                  file_path, exc_info=True)
            return result

        try:
            with operation_context("sheet_scan", self.logger, file_path=str(file_path)) as details:
                self._scan_sheet(workbook, result)
                details["rows_scanned"] = result.rows_scanned
                details["prime_count"] = result.prime_count
        except Exception as e:
            self.logger.log_error(type(e).__name__, f"Unexpected failure scanning workbook: {e}",
                                  file_path, exc_info=True)
        finally:
            self._close(workbook)

        self.logger.log_scan_complete(file_path, result.rows_scanned, result.prime_count,
                                      time.perf_counter() - start)
        return result

    def _scan_sheet(self, workbook: WorkbookHandle, result: ScanResult) -> None:
        """Walk the first worksheet and evaluate each row's column cell."""
        column = self.COLUMN.index

        for row in workbook.iter_rows(self.SHEET_INDEX):
            result.rows_scanned += 1

            cell = row[column] if column < len(row) else None
            if cell is None:
                continue

            result.cells_evaluated += 1
            if self.evaluate(cell):
                result.primes.append(cell.value)

    def evaluate(self, cell: SheetCell) -> bool:
        """Print the cell's text if it is a prime decimal literal.

        Only text cells are considered; numeric, boolean, formula, date,
        error and blank cells are ignored even when they hold a prime.

        Args:
            cell: Cell to evaluate

        Returns:
            True if the cell text was printed
        """
        if not cell.is_text:
            return False

        value = cell.value
        if not is_prime_literal(value):
            return False

        self.echo(value)
        self.logger.log_prime_found(cell.row, value)
        return True

    def _close(self, workbook: WorkbookHandle) -> None:
        try:
            workbook.close()
        except Exception as e:
            self.logger.debug(f"Closing {workbook.file_path} failed: {e}", extra={"error_type": "close_error"})
            self.echo(CLOSE_ERROR_MESSAGE)


def scan(file_path: Union[str, Path]) -> ScanResult:
    """Scan a workbook with a default SheetScanner.

    Args:
        file_path: Path to the spreadsheet file

    Returns:
        Summary of the scan

    Raises:
        ScanAborted: If the file cannot be read or is password protected
    """
    return SheetScanner().scan(file_path)
