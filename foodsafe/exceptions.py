"""FoodSafe Exception Hierarchy.

This module provides the exception hierarchy for the FoodSafe quality
management core with rich error context for debugging, monitoring, and
regulatory audit trails.

Exception Hierarchy:
    FoodSafeException (base)
    ├── TraceabilityException
    │   ├── NotFoundError
    │   └── IncompleteBatchError
    └── WorkflowException
        └── InvalidTransitionError

All exceptions include rich context:
- error_code: Unique error identifier
- context: Dictionary with error-specific details
- timestamp: When the error occurred

Example:
    >>> from foodsafe.exceptions import NotFoundError
    >>> raise NotFoundError(
    ...     message="Batch lot not found in snapshot",
    ...     entity_type="batch_lot",
    ...     entity_id="LOT-2024-001",
    ... )

Author: FoodSafe Platform Team
Status: Production Ready
"""

import json
import re
from datetime import datetime
from typing import Any, Dict, List, Optional


# ==============================================================================
# Base Exception
# ==============================================================================

class FoodSafeException(Exception):
    """Base exception for all FoodSafe errors.

    Attributes:
        message: Human-readable error message
        error_code: Unique error identifier (e.g., "FS_TRACEABILITY_NOT_FOUND_ERROR")
        context: Dictionary with error-specific details
        timestamp: When the error occurred
    """

    ERROR_PREFIX = "FS"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Initialize FoodSafe exception with rich context.

        Args:
            message: Human-readable error message
            error_code: Unique error identifier (auto-generated if not provided)
            context: Dictionary with error-specific details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self._generate_error_code()
        self.context = context or {}
        self.timestamp = datetime.now()

    def _generate_error_code(self) -> str:
        """Generate error code based on exception class.

        Returns:
            Error code like "FS_TRACEABILITY_NOT_FOUND_ERROR"
        """
        error_type = re.sub(r'(?<!^)(?=[A-Z])', '_', self.__class__.__name__).upper()
        return f"{self.ERROR_PREFIX}_{error_type}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def to_json(self) -> str:
        """Convert exception to JSON string."""
        return json.dumps(self.to_dict(), indent=2, default=str)

    def __str__(self) -> str:
        return f"[{self.error_code}] - {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}')"
        )


# ==============================================================================
# Traceability Exceptions
# ==============================================================================

class TraceabilityException(FoodSafeException):
    """Base exception for traceability graph and batch errors."""
    ERROR_PREFIX = "FS_TRACEABILITY"


class NotFoundError(TraceabilityException):
    """Traversal starting point is absent from the snapshot.

    Indicates a data-consistency problem upstream; never retried.

    Example:
        >>> raise NotFoundError(
        ...     message="Product PRD-001 not found",
        ...     entity_type="product",
        ...     entity_id="PRD-001",
        ... )
    """

    def __init__(
        self,
        message: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Initialize not-found error.

        Args:
            message: Error message
            entity_type: Kind of identifier looked up (product, batch_lot, ...)
            entity_id: The identifier that was not found
            context: Error context
        """
        context = dict(context or {})
        if entity_type:
            context["entity_type"] = entity_type
        if entity_id:
            context["entity_id"] = entity_id
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, context=context)


class IncompleteBatchError(TraceabilityException):
    """A BatchTrace lacks a field a rule needs.

    Raised by rule predicates and converted by the rule engine into a
    failed check, so a partial compliance report is always produced.

    Example:
        >>> raise IncompleteBatchError(
        ...     message="Batch LOT-7 has no HACCP checks",
        ...     batch_id="LOT-7",
        ...     missing_fields=["haccp_checks"],
        ... )
    """

    def __init__(
        self,
        message: str,
        batch_id: Optional[str] = None,
        missing_fields: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        context = dict(context or {})
        self.batch_id = batch_id
        self.missing_fields = list(missing_fields or [])
        if batch_id:
            context["batch_id"] = batch_id
        if self.missing_fields:
            context["missing_fields"] = self.missing_fields
        super().__init__(message, context=context)


# ==============================================================================
# Workflow Exceptions
# ==============================================================================

class WorkflowException(FoodSafeException):
    """Base exception for approval and status workflow errors."""
    ERROR_PREFIX = "FS_WORKFLOW"


class InvalidTransitionError(WorkflowException):
    """Requested state is not adjacent to the current state.

    Example:
        >>> raise InvalidTransitionError(
        ...     message="Cannot move from Document Review to Approved",
        ...     current_state="Document Review",
        ...     requested_state="Approved",
        ...     allowed_states=["Risk Assessment"],
        ... )
    """

    def __init__(
        self,
        message: str,
        current_state: Optional[str] = None,
        requested_state: Optional[str] = None,
        allowed_states: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        context = dict(context or {})
        self.current_state = current_state
        self.requested_state = requested_state
        self.allowed_states = list(allowed_states or [])
        if current_state:
            context["current_state"] = current_state
        if requested_state:
            context["requested_state"] = requested_state
        context["allowed_states"] = self.allowed_states
        super().__init__(message, context=context)


# ==============================================================================
# Exception Utilities
# ==============================================================================

def format_exception_chain(exc: Exception) -> str:
    """Format exception chain for logging/display.

    Args:
        exc: Exception to format

    Returns:
        Formatted string with full exception chain
    """
    lines = []
    current = exc

    while current is not None:
        if isinstance(current, FoodSafeException):
            lines.append(str(current))
            lines.append(f"  Context: {current.context}")
        else:
            lines.append(f"{type(current).__name__}: {current}")
        current = getattr(current, "__cause__", None)

    return "\n".join(lines)
