"""Validation package."""

from budgetsaver.validation.validator import (
    ENTITY_RULES,
    EntityValidationError,
    EntityValidator,
)

__all__ = ["ENTITY_RULES", "EntityValidationError", "EntityValidator"]
