"""Excel Prime Finder.

A small batch utility that reads the first worksheet of a spreadsheet
file and prints every text cell of column B holding a prime number.
"""

__version__ = "1.0.0"
__author__ = "Excel Prime Finder Team"
__email__ = "info@example.com"

from excel_primes.models.data_models import (
    CellType,
    Column,
    Config,
    LoggingConfig,
    ScanResult,
    SheetCell,
)
from excel_primes.analysis.prime_checker import is_integer_literal, is_prime_literal
from excel_primes.processors.sheet_scanner import ScanAborted, SheetScanner, scan

__all__ = [
    "CellType",
    "Column",
    "Config",
    "LoggingConfig",
    "ScanResult",
    "SheetCell",
    "is_integer_literal",
    "is_prime_literal",
    "ScanAborted",
    "SheetScanner",
    "scan",
]
