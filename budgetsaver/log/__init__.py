"""Logging package."""

from budgetsaver.log.logger import LedgerLogger, configure_logging

__all__ = ["LedgerLogger", "configure_logging"]
