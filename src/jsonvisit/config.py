"""Traversal configuration for the visitor engine."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["DEFAULT_VISITOR_CONFIG", "SYNC_MAX_DEPTH", "VisitorConfig"]

#: Depth bound for visit_sync() when max_depth is None. Its walk recurses
#: on the Python stack and must stay under the interpreter recursion limit.
SYNC_MAX_DEPTH = 256


@dataclass(frozen=True)
class VisitorConfig:
    """Tunables for a single ``visit()`` call.

    Attributes:
        max_depth: Deepest container nesting the engine will descend into
            before raising MaxDepthExceededError. None disables the guard
            for visit(); visit_sync() then falls back to SYNC_MAX_DEPTH.
        concurrent: Schedule sibling visits as concurrent tasks. When False,
            siblings are visited one after another in key/index order.
        escape_pointers: Apply RFC 6901 escaping to keys in pointers.
        mutate_in_place: Write resolved children back into the container the
            callback returned instead of building a fresh one. Callers that
            retain that container will observe the transformed values.
    """

    max_depth: int | None = None
    concurrent: bool = True
    escape_pointers: bool = True
    mutate_in_place: bool = False

    def __post_init__(self) -> None:
        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")


#: Configuration used when visit() is called without one.
DEFAULT_VISITOR_CONFIG = VisitorConfig()
