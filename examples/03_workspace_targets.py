"""Example 03: Workspace Targets

Demonstrates resolving a target of a .workspace.json descriptor.

This example shows:
- Locating the descriptor from a nested directory with find_up()
- Layering configuration options over target options
- Placeholder expansion through the visitor engine

Tier: 2 (Async, filesystem)
"""

import json
import tempfile
from pathlib import Path

from jsonvisit.workspace import Orchestrator, find_up, parse_target

DESCRIPTOR = {
    "version": 1,
    "defaultProject": "site",
    "variables": {"outDir": "public"},
    "projects": {
        "site": {
            "root": "site",
            "targets": {
                "build": {
                    "builder": "tools:static",
                    "options": {"output": "${workspaceRoot}/${outDir}", "minify": False},
                    "configurations": {"production": {"minify": True}},
                }
            },
        }
    },
}


async def main() -> None:
    """Resolve site:build:production inside a temporary workspace."""
    with tempfile.TemporaryDirectory() as tmp:
        root = Path(tmp).resolve()
        (root / ".workspace.json").write_text(json.dumps(DESCRIPTOR))
        nested = root / "site" / "pages"
        nested.mkdir(parents=True)

        descriptor = find_up(".workspace.json", nested)
        assert descriptor == root / ".workspace.json"

        orchestrator = Orchestrator.from_file(descriptor)
        config = await orchestrator.get_target_configuration(
            parse_target(":build:production")
        )

        assert config.project == "site"
        assert config.options == {"output": f"{root}/public", "minify": True}

        async for event in orchestrator.run(config):
            assert event["success"] is True


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
    print("Example 03 completed")
