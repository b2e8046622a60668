"""Resolve target specs against a workspace descriptor.

The Orchestrator turns ``project:target:configuration`` plus command-line
overrides into a BuilderConfiguration. Options are layered (target options,
then the named configuration, then overrides) and every ``${...}``
placeholder is expanded through the visitor engine.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from jsonvisit.config import VisitorConfig
from jsonvisit.errors import WorkspaceError
from jsonvisit.workspace.placeholders import resolve_placeholders
from jsonvisit.workspace.schema import BuilderConfiguration, WorkspaceDescriptor

logger = logging.getLogger(__name__)

__all__ = ["Orchestrator", "TargetSpec", "parse_target"]


@dataclass(frozen=True)
class TargetSpec:
    """What to run: project, target, configuration and option overrides.

    Any of the three names may be None; the orchestrator fills in the
    workspace's default project.
    """

    project: str | None = None
    target: str | None = None
    configuration: str | None = None
    overrides: dict[str, Any] = field(default_factory=dict)


def parse_target(target_str: str | None, overrides: dict[str, Any] | None = None) -> TargetSpec:
    """Split ``project:target:configuration`` into a TargetSpec.

    Empty parts become None.

    >>> parse_target("app:build:production")
    TargetSpec(project='app', target='build', configuration='production', overrides={})
    >>> parse_target(":test").target
    'test'
    """
    parts: list[str | None] = []
    if target_str:
        parts = [part or None for part in target_str.split(":")]
    if len(parts) > 3:
        raise WorkspaceError(
            f"Invalid target {target_str!r}; expected project:target:configuration"
        )
    parts.extend([None] * (3 - len(parts)))
    project, target, configuration = parts
    return TargetSpec(project, target, configuration, dict(overrides or {}))


class Orchestrator:
    """Resolves targets of one workspace.

    Args:
        root: Workspace root directory (the descriptor's directory)
        raw: Parsed descriptor JSON; target of ``${ref:...}`` placeholders
        config: Visitor configuration used for placeholder resolution
    """

    def __init__(
        self,
        root: Path,
        raw: dict[str, Any],
        *,
        config: VisitorConfig | None = None,
    ) -> None:
        try:
            self.workspace = WorkspaceDescriptor.model_validate(raw)
        except ValidationError as exc:
            raise WorkspaceError(f"Invalid workspace descriptor: {exc}") from exc
        if self.workspace.version != 1:
            raise WorkspaceError(
                f"Unsupported workspace version {self.workspace.version}"
            )
        self.root = root
        self.raw = raw
        self.config = config

    @classmethod
    def from_file(cls, path: Path, *, config: VisitorConfig | None = None) -> Orchestrator:
        """Load a descriptor file; its directory becomes the workspace root."""
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise WorkspaceError(f"Cannot parse {path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise WorkspaceError(f"Workspace descriptor {path} must be a JSON object")
        return cls(path.parent.resolve(), raw, config=config)

    async def get_target_configuration(self, spec: TargetSpec) -> BuilderConfiguration:
        """Resolve a TargetSpec into a BuilderConfiguration.

        Raises:
            WorkspaceError: If the project, target or configuration is unknown.
            TransformError: If a placeholder cannot be resolved.
        """
        project_name = spec.project or self.workspace.default_project
        if project_name is None:
            raise WorkspaceError("No project specified and no defaultProject set")
        project = self.workspace.projects.get(project_name)
        if project is None:
            raise WorkspaceError(f"Project {project_name!r} does not exist")
        if spec.target is None:
            raise WorkspaceError(f"No target specified for project {project_name!r}")
        target = project.targets.get(spec.target)
        if target is None:
            raise WorkspaceError(
                f"Project {project_name!r} has no target {spec.target!r}"
            )

        options: dict[str, Any] = dict(target.options)
        if spec.configuration is not None:
            if spec.configuration not in target.configurations:
                raise WorkspaceError(
                    f"Target {project_name}:{spec.target} has no configuration "
                    f"{spec.configuration!r}"
                )
            options.update(target.configurations[spec.configuration])
        options.update(spec.overrides)

        project_root = (self.root / project.root).resolve()
        variables = {
            **self.workspace.variables,
            "workspaceRoot": str(self.root),
            "projectRoot": str(project_root),
            "project": project_name,
            "target": spec.target,
            "configuration": spec.configuration or "",
        }
        logger.info(
            f"Resolving {project_name}:{spec.target}:{spec.configuration or ''} "
            f"({len(options)} options)"
        )
        resolved = await resolve_placeholders(
            options, variables, document=self.raw, config=self.config
        )

        return BuilderConfiguration(
            project=project_name,
            target=spec.target,
            configuration=spec.configuration,
            builder=target.builder,
            root=str(project_root),
            options=resolved,
        )

    async def run(self, configuration: BuilderConfiguration) -> AsyncIterator[dict[str, Any]]:
        """Report the resolved configuration as a stream of events.

        Builders are not executed; the single event describes what would run.
        """
        logger.info(f"Running {configuration.project}:{configuration.target}")
        yield {
            "success": True,
            "project": configuration.project,
            "target": configuration.target,
            "configuration": configuration.configuration,
            "builder": configuration.builder,
            "options": configuration.options,
        }
