"""Logging helpers for operation tracking.

Provides a context manager that logs the start, completion and failure
of an operation together with its duration and any details collected
while it runs.
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional


@contextmanager
def operation_context(
    operation_name: str,
    logger: Optional[logging.Logger] = None,
    **metadata: Any
) -> Generator[Dict[str, Any], None, None]:
    """Context manager for operation tracking with logging.

    Args:
        operation_name: Name of the operation
        logger: Logger to use (defaults to this module's logger)
        **metadata: Additional metadata to include

    Yields:
        Mutable details dictionary logged when the operation ends
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    details: Dict[str, Any] = dict(metadata)
    start = time.perf_counter()

    logger.debug(
        f"Operation started: {operation_name}",
        extra={"structured": {"operation": operation_name, "status": "START", **metadata}}
    )

    try:
        yield details
    except Exception as e:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.error(
            f"Operation failed: {operation_name} ({type(e).__name__})",
            extra={
                "structured": {
                    "operation": operation_name,
                    "status": "ERROR",
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                    "duration_ms": duration_ms,
                    **details,
                }
            }
        )
        raise

    duration_ms = (time.perf_counter() - start) * 1000
    details["duration_ms"] = duration_ms
    logger.debug(
        f"Operation completed: {operation_name} ({duration_ms:.1f}ms)",
        extra={"structured": {"operation": operation_name, "status": "SUCCESS", **details}}
    )
