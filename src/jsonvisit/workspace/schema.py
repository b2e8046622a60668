"""Pydantic models for the workspace descriptor and resolved targets.

A descriptor (``.workspace.json``) looks like::

    {
      "version": 1,
      "defaultProject": "app",
      "variables": {"outDir": "dist"},
      "projects": {
        "app": {
          "root": "packages/app",
          "targets": {
            "build": {
              "builder": "tools:bundle",
              "options": {"outputPath": "${workspaceRoot}/${outDir}/${project}"},
              "configurations": {"production": {"optimize": true}}
            }
          }
        }
      }
    }
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TargetDescriptor(BaseModel):
    """A runnable target of a project.

    Attributes:
        builder: Identifier of the builder that would execute the target
        options: Base options, may contain ``${...}`` placeholders
        configurations: Named option sets layered over ``options``
    """

    builder: str
    options: dict[str, Any] = Field(default_factory=dict)
    configurations: dict[str, dict[str, Any]] = Field(default_factory=dict)


class ProjectDescriptor(BaseModel):
    """A project and its targets.

    Attributes:
        root: Project directory relative to the workspace root
        targets: Targets by name
    """

    root: str = ""
    targets: dict[str, TargetDescriptor] = Field(default_factory=dict)


class WorkspaceDescriptor(BaseModel):
    """Top-level workspace descriptor.

    Attributes:
        version: Descriptor format version (only 1 is known)
        default_project: Project used when a target spec names none
        variables: Values available to ``${name}`` placeholders
        projects: Projects by name
    """

    model_config = ConfigDict(populate_by_name=True)

    version: int = 1
    default_project: str | None = Field(default=None, alias="defaultProject")
    variables: dict[str, Any] = Field(default_factory=dict)
    projects: dict[str, ProjectDescriptor] = Field(default_factory=dict)


class BuilderConfiguration(BaseModel):
    """A target resolved into concrete, placeholder-free options.

    Attributes:
        project: Project name
        target: Target name
        configuration: Applied configuration name, if any
        builder: Builder identifier from the target descriptor
        root: Absolute project root
        options: Merged and resolved options
    """

    project: str
    target: str
    configuration: str | None = None
    builder: str
    root: str
    options: dict[str, Any] = Field(default_factory=dict)
