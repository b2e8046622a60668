"""Testing utilities for code that drives the visitor engine.

Provides a recording fake callback with configurable sync/async behavior.
"""

from .fakes import RecordingReplacer, VisitCall

__all__ = ["RecordingReplacer", "VisitCall"]
