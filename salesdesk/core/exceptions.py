# File: salesdesk/core/exceptions.py

from typing import Dict, Any, List, Optional
from datetime import datetime


class SalesDeskException(Exception):
    """Base exception for all SalesDesk errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize a SalesDesk exception.

        Args:
            message: Human-readable error message
            code: Optional machine-processable error code
            details: Additional error details
        """
        self.message = message
        self.code = code or "GENERIC_ERROR"
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for API responses.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "timestamp": datetime.now().isoformat(),
        }


# Domain-specific exceptions
class DomainException(SalesDeskException):
    """Base exception for domain-related errors."""

    CODE_PREFIX = "DOMAIN_"


class EntityNotFoundException(DomainException):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(
            f"{entity_type} with ID {entity_id} not found",
            f"{self.CODE_PREFIX}001",
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class InvalidArgumentException(DomainException):
    """Raised when an operation receives an argument outside its accepted range."""

    def __init__(self, message: str, argument: Optional[str] = None):
        details = {"argument": argument} if argument else {}
        super().__init__(message, f"{self.CODE_PREFIX}002", details)


class ValidationException(SalesDeskException):
    """Raised when input validation fails."""

    def __init__(
        self, message: str, validation_errors: Optional[Dict[str, List[str]]] = None
    ):
        super().__init__(
            message, "VALIDATION_001", {"validation_errors": validation_errors or {}}
        )


# Business rule exceptions
class BusinessRuleException(SalesDeskException):
    """Raised when a business rule or constraint is violated."""

    CODE_PREFIX = "BUSINESS_"

    def __init__(
        self,
        message: str,
        rule_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if rule_name:
            error_details["rule_name"] = rule_name
        super().__init__(message, f"{self.CODE_PREFIX}001", error_details)


class InvalidStateException(BusinessRuleException):
    """Raised when an operation is not allowed in the entity's current state."""

    def __init__(
        self,
        message: str,
        current_state: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if current_state is not None:
            error_details["current_state"] = current_state
        super().__init__(message, rule_name="INVALID_STATE", details=error_details)


class DuplicateEntityException(SalesDeskException):
    """Raised when an attempt is made to create an entity that already exists."""

    def __init__(
        self,
        message: str = "Duplicate entity detected",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, "DUPLICATE_ENTITY", details or {})


# Concurrency exceptions
class ConcurrentModificationException(SalesDeskException):
    """Raised when a concurrent modification is detected."""

    def __init__(
        self,
        message: str,
        expected_version: Optional[int] = None,
        actual_version: Optional[int] = None,
    ):
        details = {}
        if expected_version is not None:
            details["expected_version"] = expected_version
        if actual_version is not None:
            details["actual_version"] = actual_version
        super().__init__(message, "CONCURRENCY_001", details)


class DatabaseException(SalesDeskException):
    """
    Exception raised for database-related errors.
    """

    CODE_PREFIX = "DATABASE_"

    def __init__(
        self,
        message: str,
        entity_type: Optional[str] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if entity_type:
            error_details["entity_type"] = entity_type
        code = error_code or f"{self.CODE_PREFIX}001"
        super().__init__(message=message, code=code, details=error_details)


class CommitFailedException(DatabaseException):
    """Raised when a unit of work could not commit its changes."""

    def __init__(self, message: str, entity_type: Optional[str] = None):
        super().__init__(
            message, entity_type=entity_type, error_code=f"{self.CODE_PREFIX}002"
        )
