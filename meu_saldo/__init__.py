"""
Meu Saldo - Source Package

A single-user personal finance tracker: income, expenses with due-date
reminders, savings goals, monthly reports and AI budgeting advice.

DESIGN PRINCIPLES:
1. One store owns the state; every change is an explicit mutation
2. Side effects (storage, reminders, logging) are subscribers
3. Derived views are pure functions
4. External services fail soft: warnings, never crashes
"""

__version__ = "1.0.0"
__author__ = "Meu Saldo Team"
