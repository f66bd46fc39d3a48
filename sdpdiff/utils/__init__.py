"""Utility helpers - structured logging."""

from .logger import StructuredLogger, get_logger, log_operation, mask_ice_credentials

__all__ = ["StructuredLogger", "get_logger", "log_operation", "mask_ice_credentials"]
