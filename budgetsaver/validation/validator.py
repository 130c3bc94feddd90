"""
Two-Stage Validation for Manually Created Entities

Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence
- Numeric amounts, non-negative
- Known frequency, parseable dates
- This catches malformed form input

STAGE 2 - SEMANTIC VALIDATION:
- Referenced budget/account must exist in the current ledger
- Duplicate names (warning only)
- This catches input that is well-formed but does not fit the ledger

Invalid input is never stored. Validation never silently fixes
anything beyond trimming whitespace and treating blank optional
fields as absent.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import ValidationError

from budgetsaver.ledger.state import LedgerState
from budgetsaver.models.entities import (
    AccountCreate,
    BudgetCreate,
    CreatePayload,
    Frequency,
    LedgerRecord,
    RecurringTransactionCreate,
    TransactionCreate,
    new_entity_id,
)
from budgetsaver.models.results import ValidationIssue, ValidationResult


class EntityValidationError(ValueError):
    """Raised when a creation payload fails validation."""
    
    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(
            f"{issue.field}: {issue.message}"
            for issue in result.issues
            if issue.severity == "error"
        )
        super().__init__(f"Invalid {result.entity_type}: {messages}")


# entity type -> (payload model, required fields, numeric fields)
ENTITY_RULES: dict[str, tuple[type[CreatePayload], tuple[str, ...], tuple[str, ...]]] = {
    "account": (AccountCreate, ("name",), ()),
    "budget": (BudgetCreate, ("name", "limit"), ("limit",)),
    "transaction": (
        TransactionCreate,
        ("description", "amount", "date", "budgetId", "accountId"),
        ("amount",),
    ),
    "recurring_transaction": (
        RecurringTransactionCreate,
        ("description", "amount", "startDate", "frequency", "budgetId", "accountId"),
        ("amount",),
    ),
}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class EntityValidator:
    """
    Validates raw creation payloads (e.g. form values) for every entity type.
    
    Stage 1 runs without the ledger; stage 2 needs the current state.
    """
    
    def _clean(self, raw: dict[str, Any]) -> dict[str, Any]:
        # Blank optional inputs (an empty end date field) mean "absent"
        return {k: v for k, v in raw.items() if not _is_blank(v)}
    
    def _validate_schema(
        self,
        entity_type: str,
        payload: dict[str, Any],
    ) -> tuple[Optional[CreatePayload], list[ValidationIssue]]:
        """
        Stage 1: Schema validation.
        
        Returns: (parsed_payload_or_None, list_of_issues)
        """
        model, required, numeric = ENTITY_RULES[entity_type]
        issues = []
        
        for field in required:
            if field not in payload:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing",
                    message=f"{field} is required",
                    severity="error",
                ))
        
        for field in numeric:
            if field not in payload:
                continue
            try:
                value = Decimal(str(payload[field]).strip())
            except InvalidOperation:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="not_numeric",
                    message=f"{field} must be a number, got {payload[field]!r}",
                    severity="error",
                ))
                continue
            if not value.is_finite():
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="not_numeric",
                    message=f"{field} must be a finite number",
                    severity="error",
                ))
            elif value < 0:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="negative",
                    message=f"{field} cannot be negative",
                    severity="error",
                ))
        
        frequency = payload.get("frequency")
        if entity_type == "recurring_transaction" and frequency is not None:
            if frequency not in {f.value for f in Frequency}:
                issues.append(ValidationIssue(
                    field="frequency",
                    issue_type="unknown_frequency",
                    message=f"Unknown frequency {frequency!r}",
                    severity="error",
                    suggested_fix="Use one of: daily, weekly, monthly, yearly",
                ))
        
        if issues:
            return None, issues
        
        try:
            return model.model_validate(payload), issues
        except ValidationError as e:
            for error in e.errors():
                issues.append(ValidationIssue(
                    field=".".join(str(part) for part in error["loc"]) or entity_type,
                    issue_type=error["type"],
                    message=error["msg"],
                    severity="error",
                ))
            return None, issues
    
    def _validate_semantic(
        self,
        entity_type: str,
        parsed: CreatePayload,
        state: LedgerState,
    ) -> list[ValidationIssue]:
        """Stage 2: checks against the current ledger."""
        issues = []
        
        budget_id = getattr(parsed, "budget_id", None)
        if budget_id is not None and state.find_budget(budget_id) is None:
            issues.append(ValidationIssue(
                field="budgetId",
                issue_type="unknown_reference",
                message=f"No budget with id {budget_id!r}",
                severity="error",
            ))
        
        account_id = getattr(parsed, "account_id", None)
        if account_id is not None and state.find_account(account_id) is None:
            issues.append(ValidationIssue(
                field="accountId",
                issue_type="unknown_reference",
                message=f"No account with id {account_id!r}",
                severity="error",
            ))
        
        if entity_type in ("account", "budget"):
            existing = state.accounts if entity_type == "account" else state.budgets
            name = parsed.name.casefold()
            if any(item.name.casefold() == name for item in existing):
                issues.append(ValidationIssue(
                    field="name",
                    issue_type="duplicate_name",
                    message=f"A {entity_type} named {parsed.name!r} already exists",
                    severity="warning",
                ))
        
        return issues
    
    def validate(
        self,
        entity_type: str,
        raw: dict[str, Any],
        state: LedgerState,
    ) -> tuple[ValidationResult, Optional[CreatePayload]]:
        """
        Run both stages. Stage 2 is skipped if stage 1 fails.
        
        Returns:
            (result, parsed payload if valid else None)
        """
        if entity_type not in ENTITY_RULES:
            raise KeyError(f"Unknown entity type: {entity_type}")
        
        payload = self._clean(raw)
        parsed, issues = self._validate_schema(entity_type, payload)
        schema_valid = parsed is not None
        
        semantic_valid = False
        if schema_valid:
            semantic_issues = self._validate_semantic(entity_type, parsed, state)
            issues.extend(semantic_issues)
            semantic_valid = not any(i.severity == "error" for i in semantic_issues)
        
        result = ValidationResult(
            entity_type=entity_type,
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            issues=issues,
        )
        return result, parsed if result.is_valid else None
    
    def build(
        self,
        entity_type: str,
        raw: dict[str, Any],
        state: LedgerState,
    ) -> LedgerRecord:
        """
        Validate and construct a new entity with a fresh id.
        
        Raises:
            EntityValidationError: If validation fails
        """
        result, parsed = self.validate(entity_type, raw, state)
        if parsed is None:
            raise EntityValidationError(result)
        return parsed.with_id(new_entity_id())
