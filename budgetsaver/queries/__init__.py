"""Ledger summary queries."""

from budgetsaver.queries.summary import (
    UNCATEGORIZED,
    UNKNOWN_ACCOUNT,
    BudgetSpending,
    BudgetUsage,
    DashboardSummary,
    account_name,
    budget_name,
    budget_usage,
    dashboard_summary,
    group_transactions_by_day,
    newest_first,
    spending_by_budget_id,
)

__all__ = [
    "UNCATEGORIZED",
    "UNKNOWN_ACCOUNT",
    "BudgetSpending",
    "BudgetUsage",
    "DashboardSummary",
    "account_name",
    "budget_name",
    "budget_usage",
    "dashboard_summary",
    "group_transactions_by_day",
    "newest_first",
    "spending_by_budget_id",
]
