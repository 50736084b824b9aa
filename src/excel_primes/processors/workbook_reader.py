"""Workbook opening and row iteration for Excel Prime Finder.

This module hides the spreadsheet libraries behind a small handle:
- OOXML workbooks (.xlsx, .xlsm, .xltx, .xltm) are read with openpyxl
- Legacy binary workbooks (.xls) are read with xlrd
- Password-protected OOXML packages are detected with msoffcrypto-tool;
  password-protected .xls files are reported by xlrd

The format is detected from the file's leading bytes, not its extension.
"""

import zipfile
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Tuple, Union

import openpyxl
import xlrd
from msoffcrypto.exceptions import FileFormatError
from msoffcrypto.format.ooxml import OOXMLFile
from openpyxl.cell.read_only import EmptyCell
from openpyxl.utils.exceptions import InvalidFileException

from excel_primes.models.data_models import CellType, SheetCell
from excel_primes.utils.logger import get_processing_logger


ZIP_SIGNATURE = b"PK"
CFB_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

# openpyxl data_type codes
OPENPYXL_CELL_TYPES = {
    "s": CellType.TEXT,
    "n": CellType.NUMERIC,
    "b": CellType.BOOLEAN,
    "f": CellType.FORMULA,
    "d": CellType.DATE,
    "e": CellType.ERROR,
}

XLRD_CELL_TYPES = {
    xlrd.XL_CELL_TEXT: CellType.TEXT,
    xlrd.XL_CELL_NUMBER: CellType.NUMERIC,
    xlrd.XL_CELL_DATE: CellType.DATE,
    xlrd.XL_CELL_BOOLEAN: CellType.BOOLEAN,
    xlrd.XL_CELL_ERROR: CellType.ERROR,
    xlrd.XL_CELL_BLANK: CellType.BLANK,
}

Row = Tuple[Optional[SheetCell], ...]

logger = get_processing_logger(__name__)


class _XlrdLogSink:
    """File-like target for xlrd's diagnostics, which it prints to stdout by default."""

    def write(self, text: str) -> None:
        text = text.strip()
        if text:
            logger.debug(f"xlrd: {text}")

    def flush(self) -> None:
        pass


class WorkbookError(Exception):
    """Base class for workbook opening failures."""

    def __init__(self, message: str, file_path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.message = message
        self.file_path = Path(file_path) if file_path is not None else None


class WorkbookReadError(WorkbookError):
    """Raised when a file is missing, unreadable or not a spreadsheet."""
    pass


class WorkbookEncryptedError(WorkbookError):
    """Raised when a workbook is password protected."""
    pass


class WorkbookHandle:
    """An opened workbook owned by a single scan.

    Subclasses wrap one spreadsheet library each. A handle must be
    closed exactly once by its owner.
    """

    format_name = "unknown"

    def __init__(self, file_path: Path):
        self.file_path = file_path
        self.closed = False

    @property
    def sheet_count(self) -> int:
        raise NotImplementedError

    def iter_rows(self, sheet_index: int = 0) -> Iterator[Row]:
        """Yield the rows of a worksheet in document order.

        Each row is a tuple indexed by zero-based column; positions with no
        stored cell hold None.

        Args:
            sheet_index: Zero-based worksheet index

        Raises:
            IndexError: If the workbook has no such worksheet
        """
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


class OpenpyxlWorkbook(WorkbookHandle):
    """OOXML workbook opened with openpyxl in read-only mode.

    Formulas are kept (data_only=False) so formula cells report their
    own type instead of their cached result.
    """

    format_name = "ooxml"

    def __init__(self, file_path: Path, stream: BinaryIO):
        super().__init__(file_path)
        self._stream = stream
        self._workbook = openpyxl.load_workbook(stream, read_only=True, data_only=False)

    @property
    def sheet_count(self) -> int:
        return len(self._workbook.worksheets)

    def iter_rows(self, sheet_index: int = 0) -> Iterator[Row]:
        sheet = self._workbook.worksheets[sheet_index]
        # Stored dimensions may be stale and would truncate rows.
        sheet.reset_dimensions()

        for row_index, cells in enumerate(sheet.iter_rows()):
            yield tuple(self._convert_cell(row_index, column, cell) for column, cell in enumerate(cells))

    @staticmethod
    def _convert_cell(row: int, column: int, cell) -> Optional[SheetCell]:
        if isinstance(cell, EmptyCell):
            return None

        if cell.value is None:
            cell_type = CellType.BLANK
        else:
            cell_type = OPENPYXL_CELL_TYPES.get(cell.data_type, CellType.ERROR)

        return SheetCell(row=row, column=column, cell_type=cell_type, value=cell.value)

    def close(self) -> None:
        try:
            self._workbook.close()
        finally:
            self._stream.close()
            self.closed = True


class XlrdWorkbook(WorkbookHandle):
    """Legacy binary (BIFF) workbook opened with xlrd."""

    format_name = "xls"

    def __init__(self, file_path: Path):
        super().__init__(file_path)
        self._book = xlrd.open_workbook(str(file_path), on_demand=True, logfile=_XlrdLogSink())

    @property
    def sheet_count(self) -> int:
        return self._book.nsheets

    def iter_rows(self, sheet_index: int = 0) -> Iterator[Row]:
        sheet = self._book.sheet_by_index(sheet_index)

        for row_index in range(sheet.nrows):
            yield tuple(
                self._convert_cell(row_index, column, cell)
                for column, cell in enumerate(sheet.row(row_index))
            )

    @staticmethod
    def _convert_cell(row: int, column: int, cell: xlrd.sheet.Cell) -> Optional[SheetCell]:
        if cell.ctype == xlrd.XL_CELL_EMPTY:
            return None

        return SheetCell(
            row=row,
            column=column,
            cell_type=XLRD_CELL_TYPES.get(cell.ctype, CellType.BLANK),
            value=cell.value,
        )

    def close(self) -> None:
        self._book.release_resources()
        self.closed = True


def _read_signature(file_path: Path) -> bytes:
    try:
        with open(file_path, "rb") as f:
            return f.read(len(CFB_SIGNATURE))
    except OSError as e:
        raise WorkbookReadError(f"Cannot read file {file_path}: {e}", file_path) from e


def _is_encrypted_package(file_path: Path) -> bool:
    """Check whether an OLE2 compound file wraps an encrypted OOXML package.

    Legacy .xls files carry no EncryptionInfo stream; their encryption is
    reported by xlrd when the workbook is opened.

    Raises:
        WorkbookReadError: If the compound file is corrupt or unreadable
    """
    try:
        with open(file_path, "rb") as f:
            return OOXMLFile(f).is_encrypted()
    except FileFormatError:
        return False
    except OSError as e:
        raise WorkbookReadError(f"Not a readable compound file: {file_path}: {e}", file_path) from e


def _open_ooxml(file_path: Path) -> OpenpyxlWorkbook:
    try:
        stream = open(file_path, "rb")
    except OSError as e:
        raise WorkbookReadError(f"Cannot read file {file_path}: {e}", file_path) from e

    try:
        return OpenpyxlWorkbook(file_path, stream)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        stream.close()
        raise WorkbookReadError(f"Not a valid OOXML workbook: {file_path}: {e}", file_path) from e
    except Exception:
        stream.close()
        raise


def _open_xls(file_path: Path) -> XlrdWorkbook:
    try:
        return XlrdWorkbook(file_path)
    except xlrd.XLRDError as e:
        if "encrypted" in str(e).lower():
            raise WorkbookEncryptedError(f"Workbook is encrypted: {file_path}", file_path) from e
        raise WorkbookReadError(f"Not a valid xls workbook: {file_path}: {e}", file_path) from e
    except OSError as e:
        raise WorkbookReadError(f"Cannot read file {file_path}: {e}", file_path) from e


def open_workbook(file_path: Union[str, Path]) -> WorkbookHandle:
    """Open a spreadsheet file, detecting its format from its content.

    Args:
        file_path: Path to the spreadsheet file

    Returns:
        Opened workbook handle; the caller owns it and must close it

    Raises:
        WorkbookReadError: If the file cannot be read as a spreadsheet
        WorkbookEncryptedError: If the file is password protected
    """
    file_path = Path(file_path)

    if not file_path.is_file():
        raise WorkbookReadError(f"File not found: {file_path}", file_path)

    signature = _read_signature(file_path)

    if signature.startswith(ZIP_SIGNATURE):
        handle = _open_ooxml(file_path)
    elif signature == CFB_SIGNATURE:
        # Encrypted OOXML packages are wrapped in an OLE2 container too.
        if _is_encrypted_package(file_path):
            raise WorkbookEncryptedError(f"Workbook is password protected: {file_path}", file_path)
        handle = _open_xls(file_path)
    else:
        raise WorkbookReadError(f"Unrecognized spreadsheet format: {file_path}", file_path)

    logger.debug(
        f"Opened {handle.format_name} workbook {file_path}",
        extra={"file_path": str(file_path), "structured": {"format": handle.format_name}}
    )
    return handle
