"""
BudgetSaver - Source Package

A personal budgeting ledger: accounts, budgets, transactions and
recurring-transaction schedules that are materialized into concrete
transactions every time a session starts.

DESIGN PRINCIPLES:
1. The materialization engine is pure - snapshot in, records out
2. Materialization is re-entrant - running it twice never duplicates
3. Bad schedules are reported, never fatal
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "BudgetSaver Team"
