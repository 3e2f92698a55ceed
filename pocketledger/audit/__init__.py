"""Audit logging package."""

from pocketledger.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
