"""Logging utilities for Excel Prime Finder.

This module provides logging setup with support for:
- Console logging to stderr, keeping stdout free for scan results
- Optional rotating file logging
- Optional structured JSON logging
- Domain-specific logging methods for scan events
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from excel_primes.models.data_models import LoggingConfig


class JSONFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging."""

    # Record attributes promoted to top-level JSON fields when present
    CONTEXT_FIELDS = ("event_type", "file_path", "row", "value", "error_type", "structured")

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON formatted log string
        """
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for name in self.CONTEXT_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class ProcessingLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter for scan-specific logging.

    Adds scan context to log records for better traceability.
    """

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        """Merge adapter context into the record's extra fields."""
        if "extra" not in kwargs:
            kwargs["extra"] = {}

        kwargs["extra"].update(self.extra)
        return msg, kwargs

    def log_scan_start(self, file_path: Union[str, Path]) -> None:
        """Log scan start event.

        Args:
            file_path: Path to the workbook being scanned
        """
        extra = {
            "event_type": "scan_start",
            "file_path": str(file_path),
        }
        self.info(f"Started scanning workbook: {file_path}", extra=extra)

    def log_prime_found(self, row: int, value: str) -> None:
        """Log a prime discovered in the scanned column.

        Args:
            row: Zero-based row index of the cell
            value: Original cell text
        """
        extra = {
            "event_type": "prime_found",
            "row": row,
            "value": value,
        }
        self.debug(f"Prime found in row {row + 1}: {value}", extra=extra)

    def log_scan_complete(
        self,
        file_path: Union[str, Path],
        rows_scanned: int,
        prime_count: int,
        duration: float
    ) -> None:
        """Log scan completion event.

        Args:
            file_path: Path to the scanned workbook
            rows_scanned: Number of rows iterated
            prime_count: Number of primes printed
            duration: Scan time in seconds
        """
        extra = {
            "event_type": "scan_complete",
            "file_path": str(file_path),
            "structured": {
                "rows_scanned": rows_scanned,
                "prime_count": prime_count,
                "duration": duration,
            },
        }
        self.info(
            f"Completed scanning {file_path}: {prime_count} primes "
            f"in {rows_scanned} rows ({duration:.2f}s)",
            extra=extra
        )

    def log_error(
        self,
        error_type: str,
        message: str,
        file_path: Optional[Union[str, Path]] = None,
        exc_info: bool = False
    ) -> None:
        """Log a scan error event.

        Args:
            error_type: Category of the error
            message: Error message
            file_path: Related workbook path
            exc_info: Whether to attach the active traceback
        """
        extra = {
            "event_type": "error",
            "error_type": error_type,
            "file_path": str(file_path) if file_path else None,
        }
        self.error(f"{error_type}: {message}", extra=extra, exc_info=exc_info)


class LoggerManager:
    """Manages logger setup and configuration.

    Provides centralized logger configuration with support for multiple
    output handlers (console, file, structured).
    """

    def __init__(self):
        self._configured = False
        self._loggers: Dict[str, logging.Logger] = {}
        self._adapters: Dict[str, ProcessingLoggerAdapter] = {}

    @property
    def is_configured(self) -> bool:
        return self._configured

    def setup_logging(self, config: LoggingConfig) -> None:
        """Set up logging configuration.

        Args:
            config: Logging configuration
        """
        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        root_logger.setLevel(config.log_level)

        if config.console_enabled:
            self._setup_console_handler(config)

        if config.file_enabled:
            self._setup_file_handler(config)

        if config.structured_enabled:
            self._setup_structured_handler(config)

        self._configure_third_party_loggers()

        self._configured = True

        logger = self.get_logger(__name__)
        logger.debug(f"Logging configured: level={config.level}, console={config.console_enabled}, "
                     f"file={config.file_enabled}, structured={config.structured_enabled}")

    def _setup_console_handler(self, config: LoggingConfig) -> None:
        """Set up console logging handler on stderr."""
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(config.log_level)

        formatter = logging.Formatter(
            fmt=config.format,
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        console_handler.setFormatter(formatter)

        logging.getLogger().addHandler(console_handler)

    def _setup_file_handler(self, config: LoggingConfig) -> None:
        """Set up file logging handler with rotation.

        Args:
            config: Logging configuration
        """
        config.file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=config.file_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(config.log_level)

        formatter = logging.Formatter(
            fmt=config.format,
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        file_handler.setFormatter(formatter)

        logging.getLogger().addHandler(file_handler)

    def _setup_structured_handler(self, config: LoggingConfig) -> None:
        """Set up structured JSON logging handler next to the log file."""
        structured_path = config.file_path.parent / "structured.json"
        structured_path.parent.mkdir(parents=True, exist_ok=True)

        structured_handler = logging.handlers.RotatingFileHandler(
            filename=structured_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        structured_handler.setLevel(config.log_level)
        structured_handler.setFormatter(JSONFormatter())

        logging.getLogger().addHandler(structured_handler)

    def _configure_third_party_loggers(self) -> None:
        """Reduce verbosity of spreadsheet libraries."""
        for name in ("openpyxl", "msoffcrypto"):
            logging.getLogger(name).setLevel(logging.WARNING)

    def get_logger(self, name: str) -> logging.Logger:
        """Get logger instance by name.

        Args:
            name: Logger name

        Returns:
            Logger instance
        """
        if name not in self._loggers:
            self._loggers[name] = logging.getLogger(name)

        return self._loggers[name]

    def get_processing_logger(
        self,
        name: str,
        context: Optional[Dict[str, Any]] = None
    ) -> ProcessingLoggerAdapter:
        """Get processing logger adapter with context.

        Args:
            name: Logger name
            context: Additional context for all log records

        Returns:
            Processing logger adapter
        """
        cache_key = f"{name}:{hash(str(context))}"

        if cache_key not in self._adapters:
            base_logger = self.get_logger(name)
            self._adapters[cache_key] = ProcessingLoggerAdapter(base_logger, context)

        return self._adapters[cache_key]


# Global logger manager instance
logger_manager = LoggerManager()


def setup_logging(config: LoggingConfig) -> None:
    """Set up application logging.

    Args:
        config: Logging configuration
    """
    logger_manager.setup_logging(config)


def get_processing_logger(
    name: str,
    context: Optional[Dict[str, Any]] = None
) -> ProcessingLoggerAdapter:
    """Get processing logger with context.

    Args:
        name: Logger name (typically __name__)
        context: Additional context for log records

    Returns:
        Processing logger adapter
    """
    return logger_manager.get_processing_logger(name, context)
