"""Ledger event logging package."""

from subtrackr.audit.logger import EventLogger

__all__ = ["EventLogger"]
