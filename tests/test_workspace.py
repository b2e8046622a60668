"""Tests for workspace discovery, descriptor models and the Orchestrator."""

import json

import pytest

from jsonvisit.errors import TransformError, WorkspaceError, WorkspaceNotFoundError
from jsonvisit.workspace import (
    Orchestrator,
    TargetSpec,
    WorkspaceDescriptor,
    find_up,
    locate_workspace,
    parse_target,
)

# === Discovery ===


def test_find_up_in_start_directory(tmp_path):
    """A descriptor in the start directory is found."""
    descriptor = tmp_path / ".workspace.json"
    descriptor.write_text("{}")
    assert find_up(".workspace.json", tmp_path) == descriptor.resolve()


def test_find_up_walks_parents(tmp_path):
    """A descriptor in an ancestor directory is found."""
    descriptor = tmp_path / ".workspace.json"
    descriptor.write_text("{}")
    nested = tmp_path / "a" / "b" / "c"
    nested.mkdir(parents=True)
    assert find_up(".workspace.json", nested) == descriptor.resolve()


def test_find_up_prefers_nearest(tmp_path):
    """The closest ancestor wins."""
    (tmp_path / ".workspace.json").write_text("{}")
    inner = tmp_path / "inner"
    inner.mkdir()
    (inner / ".workspace.json").write_text("{}")
    assert find_up(".workspace.json", inner) == (inner / ".workspace.json").resolve()


def test_find_up_checks_names_in_order(tmp_path):
    """With several candidate names the first existing one is returned."""
    (tmp_path / "b.json").write_text("{}")
    (tmp_path / "a.json").write_text("{}")
    assert find_up(["a.json", "b.json"], tmp_path).name == "a.json"


def test_find_up_returns_none(tmp_path):
    """Nothing found returns None."""
    assert find_up("definitely-not-here.json", tmp_path) is None


def test_locate_workspace_raises_when_missing(tmp_path):
    """locate_workspace() raises with the original message format."""
    with pytest.raises(WorkspaceNotFoundError) as exc_info:
        locate_workspace(tmp_path, "definitely-not-here.json")
    assert str(exc_info.value) == (
        "Workspace configuration file (definitely-not-here.json) cannot be found "
        f"in '{tmp_path}' or in parent directories."
    )


# === Target specs ===


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        (None, (None, None, None)),
        ("", (None, None, None)),
        ("app", ("app", None, None)),
        ("app:build", ("app", "build", None)),
        ("app:build:production", ("app", "build", "production")),
        (":build", (None, "build", None)),
        ("::production", (None, None, "production")),
    ],
)
def test_parse_target(text, expected):
    """Target strings split into project, target and configuration."""
    spec = parse_target(text)
    assert (spec.project, spec.target, spec.configuration) == expected


def test_parse_target_keeps_overrides():
    """Overrides are copied onto the spec."""
    overrides = {"watch": True}
    spec = parse_target("app:serve", overrides)
    assert spec.overrides == {"watch": True}
    assert spec.overrides is not overrides


def test_parse_target_rejects_extra_parts():
    """More than three parts is an error."""
    with pytest.raises(WorkspaceError):
        parse_target("a:b:c:d")


# === Descriptor models ===


def test_descriptor_accepts_camel_case_alias(workspace_raw):
    """defaultProject maps to default_project."""
    descriptor = WorkspaceDescriptor.model_validate(workspace_raw)
    assert descriptor.default_project == "app"
    assert descriptor.projects["app"].targets["build"].builder == "tools:bundle"
    assert descriptor.projects["lib"].targets["test"].options == {}


def test_invalid_descriptor_is_workspace_error(tmp_path):
    """Schema violations are reported as WorkspaceError."""
    with pytest.raises(WorkspaceError, match="Invalid workspace descriptor"):
        Orchestrator(tmp_path, {"projects": {"app": {"targets": {"t": {}}}}})


def test_unsupported_version(tmp_path):
    """Only version 1 descriptors are accepted."""
    with pytest.raises(WorkspaceError, match="Unsupported workspace version 2"):
        Orchestrator(tmp_path, {"version": 2})


def test_from_file_rejects_bad_json(write_workspace):
    """Unparseable descriptors are WorkspaceErrors."""
    path = write_workspace("{not json")
    with pytest.raises(WorkspaceError, match="Cannot parse"):
        Orchestrator.from_file(path)


def test_from_file_rejects_non_object(write_workspace):
    """The descriptor must be a JSON object."""
    path = write_workspace("[1, 2]")
    with pytest.raises(WorkspaceError, match="must be a JSON object"):
        Orchestrator.from_file(path)


def test_from_file_rejects_invalid_utf8(tmp_path):
    """Descriptors that are not UTF-8 are WorkspaceErrors."""
    path = tmp_path / ".workspace.json"
    path.write_bytes(b'{"version": 1, "name": "\xff"}')
    with pytest.raises(WorkspaceError, match="Cannot parse"):
        Orchestrator.from_file(path)


def test_from_file_rejects_directory(tmp_path):
    """A directory named like the descriptor is a WorkspaceError."""
    path = tmp_path / ".workspace.json"
    path.mkdir()
    with pytest.raises(WorkspaceError, match="Cannot parse"):
        Orchestrator.from_file(path)


# === Orchestrator ===


async def test_get_target_configuration_resolves_placeholders(
    write_workspace, workspace_raw, tmp_path
):
    """Builtins, variables and references are expanded in options."""
    orchestrator = Orchestrator.from_file(write_workspace(workspace_raw))

    config = await orchestrator.get_target_configuration(parse_target("app:build"))

    root = tmp_path.resolve()
    assert config.project == "app"
    assert config.target == "build"
    assert config.configuration is None
    assert config.builder == "tools:bundle"
    assert config.root == str(root / "packages" / "app")
    assert config.options == {
        "outputPath": f"{root}/dist/app",
        "main": f"{root / 'packages' / 'app'}/main.py",
        "shared": {"sourceMap": True, "budgets": [{"type": "initial", "max": "2mb"}]},
        "optimize": False,
    }


async def test_configuration_and_overrides_layer_over_options(
    write_workspace, workspace_raw
):
    """Configuration options override target options; CLI overrides win."""
    orchestrator = Orchestrator.from_file(write_workspace(workspace_raw))
    spec = TargetSpec(
        target="build",
        configuration="production",
        overrides={"outputPath": "out/${project}", "extra": 1},
    )

    config = await orchestrator.get_target_configuration(spec)

    assert config.project == "app"
    assert config.configuration == "production"
    assert config.options["optimize"] is True
    assert config.options["label"] == "production-build"
    assert config.options["outputPath"] == "out/app"
    assert config.options["extra"] == 1


@pytest.mark.parametrize(
    ("spec", "message"),
    [
        (TargetSpec(project="nope", target="build"), "Project 'nope' does not exist"),
        (TargetSpec(project="app"), "No target specified"),
        (TargetSpec(project="app", target="deploy"), "has no target 'deploy'"),
        (
            TargetSpec(project="app", target="build", configuration="staging"),
            "has no configuration 'staging'",
        ),
    ],
)
async def test_get_target_configuration_errors(
    write_workspace, workspace_raw, spec, message
):
    """Unknown projects, targets and configurations are WorkspaceErrors."""
    orchestrator = Orchestrator.from_file(write_workspace(workspace_raw))
    with pytest.raises(WorkspaceError, match=message):
        await orchestrator.get_target_configuration(spec)


async def test_missing_default_project(tmp_path, workspace_raw):
    """Without a project or defaultProject there is nothing to run."""
    del workspace_raw["defaultProject"]
    orchestrator = Orchestrator(tmp_path, workspace_raw)
    with pytest.raises(WorkspaceError, match="no defaultProject"):
        await orchestrator.get_target_configuration(TargetSpec(target="build"))


async def test_unresolvable_placeholder_fails(write_workspace, workspace_raw):
    """Placeholder errors surface as TransformError with the option pointer."""
    orchestrator = Orchestrator.from_file(write_workspace(workspace_raw))
    with pytest.raises(TransformError) as exc_info:
        await orchestrator.get_target_configuration(parse_target("app:broken"))
    assert exc_info.value.pointer == "/token"


async def test_run_yields_single_event(write_workspace, workspace_raw):
    """run() reports the resolved configuration as one event."""
    orchestrator = Orchestrator.from_file(write_workspace(workspace_raw))
    config = await orchestrator.get_target_configuration(parse_target("lib:test"))

    events = [event async for event in orchestrator.run(config)]

    assert len(events) == 1
    assert events[0]["success"] is True
    assert events[0]["builder"] == "tools:pytest"
    assert json.loads(json.dumps(events[0])) == events[0]
