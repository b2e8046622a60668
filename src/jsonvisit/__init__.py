"""jsonvisit: recursive, asynchronous JSON tree transformation.

This package provides:
- visit() engine: replace every node of a JSON tree through a callback
- JSON pointer helpers with RFC 6901 escaping
- Workspace launcher: resolve targets of a .workspace.json descriptor
- Testing utilities for replace callbacks
"""

from jsonvisit.config import DEFAULT_VISITOR_CONFIG, SYNC_MAX_DEPTH, VisitorConfig
from jsonvisit.errors import (
    ContractViolation,
    JsonVisitError,
    MaxDepthExceededError,
    NotJsonValueError,
    TransformError,
)
from jsonvisit.json_types import JsonKind, JsonValue, kind_of
from jsonvisit.pointer import ROOT_POINTER, join_pointer, resolve_pointer
from jsonvisit.visitor import ReplaceFunction, run_visit, visit, visit_sync

__all__ = [
    # Engine
    "ReplaceFunction",
    "run_visit",
    "visit",
    "visit_sync",
    # Configuration
    "DEFAULT_VISITOR_CONFIG",
    "SYNC_MAX_DEPTH",
    "VisitorConfig",
    # Types and pointers
    "JsonKind",
    "JsonValue",
    "ROOT_POINTER",
    "join_pointer",
    "kind_of",
    "resolve_pointer",
    # Errors
    "ContractViolation",
    "JsonVisitError",
    "MaxDepthExceededError",
    "NotJsonValueError",
    "TransformError",
]
__version__ = "0.1.0"
