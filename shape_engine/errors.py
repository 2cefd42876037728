"""
Typed errors for the shape engine.

Only lookups and opt-in fail-fast loading raise. Validation problems are
returned as ValidationResult objects and resize clamping is silent.
"""

from typing import Optional


class ShapeEngineError(Exception):
    """Base error for the shape engine."""


class NotFoundError(ShapeEngineError, KeyError):
    """A shape type id was requested that is not registered."""

    def __init__(self, type_id: str):
        self.type_id = type_id
        super().__init__(f"Shape type '{type_id}' is not registered")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class LoadFailure(ShapeEngineError):
    """
    A shape type failed to load.

    Recorded per type id by the loader. Raised only when the loader runs
    in fail-fast mode.
    """

    def __init__(
        self,
        type_id: str,
        message: str,
        cause: Optional[BaseException] = None,
        errors: Optional[list[str]] = None,
    ):
        super().__init__(f"Failed to load shape '{type_id}': {message}")
        self.type_id = type_id
        self.message = message
        self.cause = cause
        self.errors = list(errors or [])

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type_id,
            "error": self.message,
            "errors": list(self.errors),
            "cause": type(self.cause).__name__ if self.cause else None,
        }
