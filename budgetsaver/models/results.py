"""
Result Models

Outputs of the engine and the validator. Nothing here is persisted;
these models carry what happened back to the caller so it can be
logged and shown to the user.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from budgetsaver.models.entities import RecurringTransaction, Transaction


# =============================================================================
# MATERIALIZATION
# =============================================================================

class ScheduleIssueKind(str, Enum):
    """Data-integrity problems that make a schedule unusable."""
    UNKNOWN_FREQUENCY = "unknown_frequency"
    END_BEFORE_START = "end_before_start"
    MALFORMED_RECORD = "malformed_record"


class ScheduleIssue(BaseModel):
    """A schedule the engine skipped, and why."""
    
    schedule_id: str
    kind: ScheduleIssueKind
    message: str


class MaterializationResult(BaseModel):
    """
    Output of one materialization pass.
    
    updated_schedules holds every input schedule, in input order.
    Skipped schedules appear unmodified and are listed in issues.
    """
    
    new_transactions: list[Transaction] = Field(default_factory=list)
    updated_schedules: list[RecurringTransaction] = Field(default_factory=list)
    issues: list[ScheduleIssue] = Field(default_factory=list)
    advanced_ids: set[str] = Field(
        default_factory=set,
        description="Ids of schedules whose checkpoint advanced"
    )
    
    @property
    def has_issues(self) -> bool:
        return bool(self.issues)
    
    @property
    def changed_schedules(self) -> list[RecurringTransaction]:
        """Schedules whose checkpoint moved during this pass."""
        return [s for s in self.updated_schedules if s.id in self.advanced_ids]


# =============================================================================
# VALIDATION
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""
    
    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'not_numeric', 'unknown_reference')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation of a creation payload.
    
    Stage 1: Schema validation (types, required fields)
    Stage 2: Semantic validation (references into the current ledger)
    """
    
    entity_type: str = Field(
        ...,
        description="Kind of entity being created"
    )
    schema_valid: bool
    semantic_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    
    @property
    def is_valid(self) -> bool:
        return self.schema_valid and self.semantic_valid
    
    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)
    
    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
