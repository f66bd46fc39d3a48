"""
Structured logging for the comparator.

Every record is one JSON object per line so that comparison runs can be
searched in CloudWatch Logs by category, nesting level or operation.
SDP text placed in a record's context goes through mask_ice_credentials()
first; the JSON encoding escapes its CRLF line endings.
"""

import json
import logging
import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from functools import wraps

_ICE_PWD_LINE = re.compile(r"^(a=ice-pwd:)[^\r\n]*", re.MULTILINE)


def mask_ice_credentials(sdp: str) -> str:
    """
    Mask ICE passwords in SDP text before it is logged.

    Format: a=ice-pwd:**** (line endings are preserved)

    Args:
        sdp: SDP text, possibly containing a=ice-pwd lines

    Returns:
        SDP text with every ice-pwd value replaced

    Example:
        >>> mask_ice_credentials("a=ice-ufrag:58b99ead\\r\\na=ice-pwd:e3baa26d\\r\\n")
        "a=ice-ufrag:58b99ead\\r\\na=ice-pwd:****\\r\\n"
    """
    if not sdp:
        return ""

    return _ICE_PWD_LINE.sub(r"\1****", sdp)


def _has_configured_ancestor(logger: logging.Logger) -> bool:
    parent = logger.parent
    while parent is not None and parent is not logging.root:
        if parent.level != logging.NOTSET:
            return True
        parent = parent.parent
    return False


class StructuredLogger:
    """
    JSON logger for comparison runs.

    A logger that nobody configured logs from DEBUG up. A level set on the
    logger itself, or on a package logger above it (Settings.apply_log_level),
    is left alone.
    """

    def __init__(self, name: str):
        """
        Args:
            name: Logger name, normally the calling module's __name__
        """
        self.logger = logging.getLogger(name)
        if self.logger.level == logging.NOTSET and not _has_configured_ancestor(self.logger):
            self.logger.setLevel(logging.DEBUG)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(logging.DEBUG)
            handler.setFormatter(logging.Formatter("%(message)s"))
            self.logger.addHandler(handler)

    def is_enabled_for(self, level: int) -> bool:
        return self.logger.isEnabledFor(level)

    def _format_log(
        self,
        level: str,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        duration_ms: Optional[float] = None,
        error: Optional[str] = None,
    ) -> str:
        """
        Render one record as a JSON line.

        Args:
            level: Level name, e.g. "ERROR"
            message: Human-readable message, e.g. "a=setup is neither equal
                to the reference nor to the original sdp"
            operation: Comparator entry point, e.g. "compare" or
                "track_candidate_parsing_failed"
            context: Diagnostic fields such as level, reference_value,
                candidate_value, original_value or (masked) original_sdp
            duration_ms: Wall time of a compare() call
            error: Exception text when an operation failed

        Returns:
            JSON string; optional fields are omitted when empty
        """
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": level,
            "message": message,
        }

        if operation:
            log_entry["operation"] = operation

        if context:
            log_entry["context"] = context

        if duration_ms is not None:
            log_entry["duration_ms"] = round(duration_ms, 2)

        if error:
            log_entry["error"] = error

        return json.dumps(log_entry, ensure_ascii=False)

    def _log(self, level: int, message: str, **fields) -> None:
        # SDP contexts are only encoded for enabled levels
        if self.logger.isEnabledFor(level):
            self.logger.log(level, self._format_log(logging.getLevelName(level), message, **fields))

    def debug(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self._log(logging.DEBUG, message, operation=operation, context=context)

    def info(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        duration_ms: Optional[float] = None,
    ):
        self._log(
            logging.INFO, message, operation=operation, context=context, duration_ms=duration_ms
        )

    def warning(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ):
        self._log(logging.WARNING, message, operation=operation, context=context, error=error)

    def error(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
        duration_ms: Optional[float] = None,
    ):
        self._log(
            logging.ERROR,
            message,
            operation=operation,
            context=context,
            error=error,
            duration_ms=duration_ms,
        )


def log_operation(operation_name: str):
    """
    Time a comparator entry point and log its verdict.

    Logs "Starting <name>" at DEBUG and "Completed <name>" at INFO with the
    duration and, for bool/int/str return values, the result. Failures are
    logged at ERROR and re-raised. The logger belongs to the decorated
    function's module and is created once, when the decorator is applied.

    Usage:
        @log_operation("compare")
        def compare(self, reference, candidate, original_sdp):
            ...
    """

    def decorator(func):
        logger = get_logger(func.__module__)

        @wraps(func)
        def wrapper(*args, **kwargs):
            context: Dict[str, Any] = {"function": func.__name__}
            logger.debug(f"Starting {operation_name}", operation=operation_name, context=context)

            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Failed {operation_name}",
                    operation=operation_name,
                    context=context,
                    error=str(e),
                    duration_ms=(time.time() - start_time) * 1000,
                )
                raise

            context["result"] = result if isinstance(result, (bool, int, str)) else None
            logger.info(
                f"Completed {operation_name}",
                operation=operation_name,
                context=context,
                duration_ms=(time.time() - start_time) * 1000,
            )
            return result

        return wrapper

    return decorator


def get_logger(name: str) -> StructuredLogger:
    """Return a StructuredLogger for name (normally __name__)."""
    return StructuredLogger(name)
