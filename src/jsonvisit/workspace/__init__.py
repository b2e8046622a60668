"""Workspace launcher collaborators.

Locates ``.workspace.json``, models it, and resolves target specs into
placeholder-free builder configurations using the visitor engine.
"""

from jsonvisit.workspace.discovery import WORKSPACE_FILE_NAME, find_up, locate_workspace
from jsonvisit.workspace.orchestrator import Orchestrator, TargetSpec, parse_target
from jsonvisit.workspace.placeholders import PlaceholderResolver, resolve_placeholders
from jsonvisit.workspace.schema import (
    BuilderConfiguration,
    ProjectDescriptor,
    TargetDescriptor,
    WorkspaceDescriptor,
)

__all__ = [
    "BuilderConfiguration",
    "Orchestrator",
    "PlaceholderResolver",
    "ProjectDescriptor",
    "TargetDescriptor",
    "TargetSpec",
    "WORKSPACE_FILE_NAME",
    "WorkspaceDescriptor",
    "find_up",
    "locate_workspace",
    "parse_target",
    "resolve_placeholders",
]
