"""
Error types for the scoring engine.

Sparse or malformed provider data is never an error here: it surfaces as
null factor indices and lowers completeness. Exceptions are reserved for
programming-time inconsistencies (bad factor tables) and internal
consistency failures (a decision tree with no matching rule).
"""

from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # Configuration errors (5xx)
    CONFIG_TABLE_MISMATCH = "E501"
    CONFIG_WEIGHT_MISMATCH = "E502"
    CONFIG_INVALID = "E503"
    CONFIG_SECTOR_TABLE = "E504"

    # Internal errors (9xx)
    DECISION_TREE_EXHAUSTED = "E901"
    UNKNOWN = "E999"


class ScorerError(Exception):
    """
    Base exception for scoring engine failures.

    Provides structured error information for debugging and monitoring.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN,
        context: dict[str, Any] | None = None,
    ):
        self.code = code
        self.context = context or {}
        self.timestamp = datetime.now()
        self.message = message
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }


class ConfigurationInconsistency(ScorerError):
    """Raised when a factor table or sector table violates its invariants."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
        factor_id: str | None = None,
        **context: Any,
    ):
        self.factor_id = factor_id
        if factor_id:
            context["factor_id"] = factor_id
        super().__init__(message, code=code, context=context)


class DecisionTreeExhausted(ScorerError):
    """Raised when no trade-structure rule matches. Unreachable while the fallback rule exists."""

    def __init__(self, inputs: Any):
        super().__init__(
            "No trade-structure rule matched",
            code=ErrorCode.DECISION_TREE_EXHAUSTED,
            context={"inputs": repr(inputs)},
        )
