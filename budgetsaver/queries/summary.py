"""
Ledger Summaries

Deterministic aggregations over a LedgerState, feeding whatever
renders the dashboard and budget views:
- total spent vs. total budgeted
- spending per budget
- most recent transactions
- per-budget usage with warning levels
- transactions grouped by calendar day

Nothing here mutates state.
"""

from collections import OrderedDict
from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from budgetsaver.config import get_settings
from budgetsaver.ledger.state import LedgerState
from budgetsaver.models.entities import Transaction


UNCATEGORIZED = "Uncategorized"
UNKNOWN_ACCOUNT = "Unknown Account"


class BudgetSpending(BaseModel):
    budget_id: str
    name: str
    color: str
    spent: Decimal


class DashboardSummary(BaseModel):
    total_spent: Decimal
    total_budget: Decimal
    spending_by_budget: list[BudgetSpending] = Field(default_factory=list)
    recent_transactions: list[Transaction] = Field(default_factory=list)


class BudgetUsage(BaseModel):
    """How much of one budget has been used."""
    
    budget_id: str
    name: str
    limit: Decimal
    spent: Decimal
    remaining: Decimal
    percentage: float
    level: str = Field(..., pattern="^(ok|warning|danger)$")


def budget_name(state: LedgerState, budget_id: str) -> str:
    budget = state.find_budget(budget_id)
    return budget.name if budget else UNCATEGORIZED


def account_name(state: LedgerState, account_id: str) -> str:
    account = state.find_account(account_id)
    return account.name if account else UNKNOWN_ACCOUNT


def newest_first(transactions: Iterable[Transaction]) -> list[Transaction]:
    return sorted(transactions, key=lambda t: t.date, reverse=True)


def spending_by_budget_id(state: LedgerState) -> dict[str, Decimal]:
    """Sum of transaction amounts per budget id, including unknown budgets."""
    totals: dict[str, Decimal] = {b.id: Decimal("0") for b in state.budgets}
    for transaction in state.transactions:
        totals[transaction.budget_id] = (
            totals.get(transaction.budget_id, Decimal("0")) + transaction.amount
        )
    return totals


def dashboard_summary(
    state: LedgerState,
    recent_limit: Optional[int] = None,
) -> DashboardSummary:
    """
    Build the dashboard numbers.
    
    total_spent counts every transaction, even ones whose budget is gone;
    spending_by_budget only lists existing budgets with spending above zero.
    """
    if recent_limit is None:
        recent_limit = get_settings().app.recent_transactions_limit
    
    totals = spending_by_budget_id(state)
    spending = [
        BudgetSpending(
            budget_id=budget.id,
            name=budget.name,
            color=budget.color,
            spent=totals[budget.id],
        )
        for budget in state.budgets
        if totals[budget.id] > 0
    ]
    
    return DashboardSummary(
        total_spent=sum((t.amount for t in state.transactions), Decimal("0")),
        total_budget=sum((b.limit for b in state.budgets), Decimal("0")),
        spending_by_budget=spending,
        recent_transactions=newest_first(state.transactions)[:recent_limit],
    )


def budget_usage(
    state: LedgerState,
    warning_percent: Optional[float] = None,
    danger_percent: Optional[float] = None,
) -> list[BudgetUsage]:
    """Per-budget usage; a zero limit reports 0% used."""
    app_settings = get_settings().app
    if warning_percent is None:
        warning_percent = app_settings.budget_warning_percent
    if danger_percent is None:
        danger_percent = app_settings.budget_danger_percent
    
    totals = spending_by_budget_id(state)
    usage = []
    for budget in state.budgets:
        spent = totals[budget.id]
        percentage = float(spent / budget.limit * 100) if budget.limit > 0 else 0.0
        
        if percentage > danger_percent:
            level = "danger"
        elif percentage > warning_percent:
            level = "warning"
        else:
            level = "ok"
        
        usage.append(BudgetUsage(
            budget_id=budget.id,
            name=budget.name,
            limit=budget.limit,
            spent=spent,
            remaining=budget.limit - spent,
            percentage=percentage,
            level=level,
        ))
    return usage


def group_transactions_by_day(
    transactions: Iterable[Transaction],
) -> "OrderedDict[date, list[Transaction]]":
    """Group by UTC calendar day, newest day first, newest first within a day."""
    groups: OrderedDict[date, list[Transaction]] = OrderedDict()
    for transaction in newest_first(transactions):
        groups.setdefault(transaction.date.date(), []).append(transaction)
    return groups
