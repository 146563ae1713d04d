"""Audit logging package."""

from meu_saldo.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
