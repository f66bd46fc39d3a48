"""Configuration module - comparator settings."""

from .settings import DEFAULT_SETTINGS, Settings

__all__ = ["DEFAULT_SETTINGS", "Settings"]
