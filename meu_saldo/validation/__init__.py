"""
Validation Package

Form precondition checks run before any mutation is dispatched.
"""

from meu_saldo.validation.validator import EntryValidator

__all__ = ["EntryValidator"]
