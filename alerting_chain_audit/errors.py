"""Exceptions raised by the alerting-chain audit."""
from __future__ import annotations


class AuditError(Exception):
    """Base class for errors raised by the audit toolkit."""


class GatewayUnavailableError(AuditError):
    """Raised when the resource data source cannot be reached or queried."""

    def __init__(self, operation: str, detail: str) -> None:
        super().__init__(f"{operation}: {detail}")
        self.operation = operation
        self.detail = detail


__all__ = ["AuditError", "GatewayUnavailableError"]
