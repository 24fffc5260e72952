"""
Domain Exceptions.

Custom exceptions for domain-level errors.
These exceptions represent business rule violations.
"""

from typing import Optional, Any, Dict


class DomainException(Exception):
    """Base exception for all domain errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "DOMAIN_ERROR"
        self.details = details or {}


class EntityNotFoundException(DomainException):
    """Raised when an entity is not found."""

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(
            message=f"{entity_type} with id '{entity_id}' not found",
            code="ENTITY_NOT_FOUND",
            details={"entity_type": entity_type, "entity_id": str(entity_id)}
        )


class ValidationException(DomainException):
    """Raised when validation fails."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"field": field, "value": str(value) if value is not None else None}
        )


class BusinessRuleViolationException(DomainException):
    """Raised when a business rule is violated."""

    def __init__(self, rule: str, message: str):
        super().__init__(
            message=message,
            code="BUSINESS_RULE_VIOLATION",
            details={"rule": rule}
        )


class CategoryMismatchException(BusinessRuleViolationException):
    """
    Raised when a part is swapped for a part of another category.

    The category is the prefix of the part code before the first '-'
    ("CPU-001" -> "CPU"). Only parts of the same category are interchangeable.
    """

    def __init__(self, primary_category: str, substitute_category: str):
        super().__init__(
            "CATEGORY_MISMATCH",
            f"Part category mismatch: primary part category is "
            f"'{primary_category}', replacement category is "
            f"'{substitute_category}'. Choose a part of the same category."
        )
        self.code = "CATEGORY_MISMATCH"
        self.primary_category = primary_category
        self.substitute_category = substitute_category
        self.details.update({
            "primary_category": primary_category,
            "substitute_category": substitute_category,
        })
