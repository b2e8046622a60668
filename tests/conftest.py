"""Pytest configuration and fixtures."""

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from sybil import Sybil
from sybil.parsers.myst import PythonCodeBlockParser

from jsonvisit.testing import RecordingReplacer

# Sybil configuration for MyST doctest integration
pytest_collect_file = Sybil(
    parsers=[PythonCodeBlockParser()],
    patterns=["*.md"],
).pytest()


WORKSPACE = {
    "version": 1,
    "defaultProject": "app",
    "variables": {"outDir": "dist", "mode": "${configuration}"},
    "shared": {"sourceMap": True, "budgets": [{"type": "initial", "max": "2mb"}]},
    "projects": {
        "app": {
            "root": "packages/app",
            "targets": {
                "build": {
                    "builder": "tools:bundle",
                    "options": {
                        "outputPath": "${workspaceRoot}/${outDir}/${project}",
                        "main": "${projectRoot}/main.py",
                        "shared": "${ref:/shared}",
                        "optimize": False,
                    },
                    "configurations": {
                        "production": {"optimize": True, "label": "${mode}-build"},
                    },
                },
                "broken": {
                    "builder": "tools:bundle",
                    "options": {"token": "${missing}"},
                },
            },
        },
        "lib": {
            "root": "packages/lib",
            "targets": {"test": {"builder": "tools:pytest"}},
        },
    },
}


@pytest.fixture
def recorder() -> RecordingReplacer:
    """Returns an identity RecordingReplacer."""
    return RecordingReplacer()


@pytest.fixture
def workspace_raw() -> dict[str, Any]:
    """Returns a fresh copy of the sample workspace descriptor."""
    return json.loads(json.dumps(WORKSPACE))


@pytest.fixture
def write_workspace(tmp_path: Path) -> Callable[[dict[str, Any] | str], Path]:
    """Factory fixture that writes a descriptor into tmp_path.

    Returns:
        Function taking descriptor content (dict or raw text) and returning
        the descriptor path.
    """

    def _write(content: dict[str, Any] | str) -> Path:
        path = tmp_path / ".workspace.json"
        text = content if isinstance(content, str) else json.dumps(content)
        path.write_text(text)
        return path

    return _write


@pytest.fixture
def clean_root_logger():
    """Remove all handlers from root logger after test.

    setup_logging() modifies global state (root logger). This fixture ensures
    tests don't leak handlers between test runs.
    """
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)
