"""Core data models for Excel Prime Finder.

This module contains the dataclasses, enums and type definitions used
throughout the application for structured data representation.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List


class CellType(Enum):
    """Stored value kind of a spreadsheet cell, independent of formatting."""
    TEXT = "text"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    FORMULA = "formula"
    DATE = "date"
    ERROR = "error"
    BLANK = "blank"


class Column(Enum):
    """Spreadsheet column letters mapped to zero-based indices."""
    B = 1

    @property
    def index(self) -> int:
        return self.value


@dataclass(frozen=True)
class SheetCell:
    """A single worksheet cell as seen by the scanner.

    Attributes:
        row: Row index (0-based) within the worksheet
        column: Column index (0-based)
        cell_type: Stored value kind of the cell
        value: Raw cell value as returned by the reading library
    """
    row: int
    column: int
    cell_type: CellType
    value: Any = None

    def __post_init__(self) -> None:
        if self.row < 0 or self.column < 0:
            raise ValueError("row and column must be non-negative")

    @property
    def is_text(self) -> bool:
        """Whether the cell stores a string value."""
        return self.cell_type is CellType.TEXT


@dataclass
class ScanResult:
    """Summary of a single worksheet scan.

    Attributes:
        file_path: Path of the scanned workbook
        rows_scanned: Number of rows iterated
        cells_evaluated: Number of column cells handed to the evaluator
        primes: Original cell texts that were printed, in row order
    """
    file_path: Path
    rows_scanned: int = 0
    cells_evaluated: int = 0
    primes: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.file_path, Path):
            self.file_path = Path(self.file_path)

    @property
    def prime_count(self) -> int:
        """Number of primes found."""
        return len(self.primes)


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level
        format: Log message format string
        file_enabled: Whether to log to file
        file_path: Path for log file
        console_enabled: Whether to log to the console (stderr)
        structured_enabled: Whether to use structured JSON logging
    """
    level: str = "WARNING"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_enabled: bool = False
    file_path: Path = Path("./logs/excel_primes.log")
    console_enabled: bool = True
    structured_enabled: bool = False

    def __post_init__(self) -> None:
        """Validate logging configuration after initialization."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.level.upper() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}")

        self.level = self.level.upper()

        if not isinstance(self.file_path, Path):
            self.file_path = Path(self.file_path)

    @property
    def log_level(self) -> int:
        """Get numeric logging level."""
        return getattr(logging, self.level)


@dataclass
class Config:
    """Main configuration for Excel Prime Finder.

    Attributes:
        logging: Logging configuration
        error_exit_code: Exit status used when a scan is aborted on a
            read or password error
    """
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    error_exit_code: int = 0

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if isinstance(self.error_exit_code, bool) or not isinstance(self.error_exit_code, int):
            raise ValueError("error_exit_code must be an integer")

        if not 0 <= self.error_exit_code <= 255:
            raise ValueError("error_exit_code must be between 0 and 255")

