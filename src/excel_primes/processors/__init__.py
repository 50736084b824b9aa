"""Workbook reading and prime scanning for Excel Prime Finder.

This package opens spreadsheet files in any supported container format
and scans the first worksheet for primes stored as text.
"""

from .sheet_scanner import ScanAborted, SheetScanner, scan
from .workbook_reader import (
    WorkbookEncryptedError,
    WorkbookError,
    WorkbookHandle,
    WorkbookReadError,
    open_workbook,
)

__all__ = [
    "ScanAborted",
    "SheetScanner",
    "scan",
    "WorkbookEncryptedError",
    "WorkbookError",
    "WorkbookHandle",
    "WorkbookReadError",
    "open_workbook",
]
