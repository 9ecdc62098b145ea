"""Logging setup and audit trail."""

from .logging import setup_logging, AuditLogger

__all__ = ["setup_logging", "AuditLogger"]
