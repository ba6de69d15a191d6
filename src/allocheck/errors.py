# src/allocheck/errors.py
from __future__ import annotations

from datetime import datetime, timezone


class AllocheckError(Exception):
    """Base class for all structured allocheck exceptions."""

    def __init__(
        self, message: str, source: str | None = None, suggested_action: str | None = None
    ):
        super().__init__(message)
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.error_type = self.__class__.__name__
        self.source = source or "unknown"
        self.suggested_action = suggested_action

    def __str__(self) -> str:
        base = f"[{self.error_type}] {self.args[0]}"
        if self.source:
            base += f" (source={self.source})"
        if self.suggested_action:
            base += f" | action: {self.suggested_action}"
        return base


class ConfigError(AllocheckError):
    """Invalid or missing configuration (config.yaml)"""


class DataError(AllocheckError):
    """Unreadable workbook or structurally unusable table input"""


class ExportError(AllocheckError):
    """Export refused or failed (e.g. data set still has validation errors)"""


class VisualizationError(AllocheckError):
    """Plotting or rendering failure"""
