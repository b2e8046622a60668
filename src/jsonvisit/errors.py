"""Exception types for jsonvisit.

Every error raised by the engine during a traversal is a TransformError,
so callers can catch a single type around ``visit()``. Workspace and
placeholder errors belong to the launcher layer.
"""

from __future__ import annotations

__all__ = [
    "ContractViolation",
    "JsonVisitError",
    "MaxDepthExceededError",
    "NotJsonValueError",
    "PlaceholderError",
    "PointerResolutionError",
    "TransformError",
    "WorkspaceError",
    "WorkspaceNotFoundError",
]


class JsonVisitError(Exception):
    """Base class for all jsonvisit errors."""


class TransformError(JsonVisitError):
    """A traversal failed at a specific node.

    Attributes:
        pointer: Pointer of the node being transformed when the failure occurred.
        cause: The underlying exception, if any (also set as ``__cause__``).
    """

    def __init__(
        self,
        message: str,
        pointer: str,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.pointer = pointer
        self.cause = cause

    @classmethod
    def from_callback(cls, pointer: str, cause: BaseException) -> TransformError:
        """Wrap an exception raised by a replace callback."""
        error = cls(
            f"Replace callback failed at {pointer!r}: {type(cause).__name__}: {cause}",
            pointer,
            cause,
        )
        error.__cause__ = cause
        return error


class MaxDepthExceededError(TransformError):
    """Descent went deeper than VisitorConfig.max_depth allows."""

    def __init__(self, pointer: str, depth: int) -> None:
        super().__init__(
            f"Maximum traversal depth {depth} exceeded at {pointer!r}", pointer
        )
        self.depth = depth


class ContractViolation(TransformError):
    """A callback result did not resolve to exactly one value.

    Raised when an async iterator result yields zero or several values,
    or when ``visit_sync()`` receives an awaitable.
    """


class NotJsonValueError(TransformError, TypeError):
    """A value that is not JSON-shaped reached the engine."""

    def __init__(self, value: object, pointer: str) -> None:
        super().__init__(
            f"Value of type {type(value).__name__} at {pointer!r} is not a JSON value",
            pointer,
        )
        self.value = value


class PointerResolutionError(JsonVisitError, LookupError):
    """A pointer does not address any value in the document."""

    def __init__(self, pointer: str, reason: str) -> None:
        super().__init__(f"Cannot resolve pointer {pointer!r}: {reason}")
        self.pointer = pointer
        self.reason = reason


class PlaceholderError(JsonVisitError):
    """A ``${...}`` placeholder could not be expanded."""


class WorkspaceError(JsonVisitError):
    """The workspace descriptor is invalid or does not define a target."""


class WorkspaceNotFoundError(WorkspaceError):
    """No workspace descriptor exists in the directory or its parents."""

    def __init__(self, file_name: str, start: str) -> None:
        super().__init__(
            f"Workspace configuration file ({file_name}) cannot be found in "
            f"'{start}' or in parent directories."
        )
        self.file_name = file_name
        self.start = start
