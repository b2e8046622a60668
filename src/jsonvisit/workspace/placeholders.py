"""Placeholder expansion for workspace values, built on ``visit()``.

Three placeholder forms are recognised inside strings:

- ``${name}``: a workspace variable (or builtin such as ``workspaceRoot``)
- ``${env:NAME}``: an environment variable
- ``${ref:/pointer}``: a value elsewhere in the reference document

A string that is exactly one placeholder is replaced by the raw value, so
``"${ref:/defaults}"`` can splice a whole object in place. The engine then
descends into the spliced value and expands placeholders inside it too.
Placeholders embedded in longer strings are rendered as text.
"""

from __future__ import annotations

import copy
import json
import os
import re
from collections.abc import Mapping

from jsonvisit.config import VisitorConfig
from jsonvisit.errors import PlaceholderError, PointerResolutionError
from jsonvisit.json_types import JsonValue
from jsonvisit.pointer import resolve_pointer
from jsonvisit.visitor import visit

__all__ = ["PLACEHOLDER_PATTERN", "PlaceholderResolver", "resolve_placeholders"]

PLACEHOLDER_PATTERN = re.compile(r"\$\{([^{}]+)\}")


class PlaceholderResolver:
    """Replace callback that expands ``${...}`` placeholders in strings.

    Args:
        variables: Values for ``${name}`` placeholders
        document: Target of ``${ref:...}`` placeholders
        environ: Environment for ``${env:...}``; defaults to os.environ
        max_expansions: Nesting limit when a placeholder's value contains
            further placeholders. Guards against reference cycles.
    """

    def __init__(
        self,
        variables: Mapping[str, JsonValue] | None = None,
        *,
        document: JsonValue = None,
        environ: Mapping[str, str] | None = None,
        max_expansions: int = 32,
    ) -> None:
        self.variables = dict(variables or {})
        self.document = document
        self.environ = os.environ if environ is None else environ
        self.max_expansions = max_expansions

    def __call__(self, value: JsonValue, pointer: str) -> JsonValue:
        if isinstance(value, str):
            return self.expand(value)
        return value

    def expand(self, text: str, _level: int = 0) -> JsonValue:
        """Expand all placeholders in ``text``.

        >>> PlaceholderResolver({"name": "app"}).expand("dist/${name}")
        'dist/app'
        >>> PlaceholderResolver({"n": 3}).expand("${n}")
        3
        """
        if _level > self.max_expansions:
            raise PlaceholderError(
                f"Placeholder expansion deeper than {self.max_expansions} levels "
                f"in {text!r}; check for reference cycles"
            )

        whole = PLACEHOLDER_PATTERN.fullmatch(text)
        if whole:
            return self._expand_value(self.lookup(whole.group(1)), _level)

        def render(match: re.Match[str]) -> str:
            value = self._expand_value(self.lookup(match.group(1)), _level)
            if isinstance(value, str):
                return value
            return json.dumps(value)

        return PLACEHOLDER_PATTERN.sub(render, text)

    def _expand_value(self, value: JsonValue, level: int) -> JsonValue:
        if isinstance(value, str) and PLACEHOLDER_PATTERN.search(value):
            return self.expand(value, level + 1)
        return value

    def lookup(self, expression: str) -> JsonValue:
        """Return the raw value for one placeholder expression."""
        scheme, sep, rest = expression.partition(":")
        if sep and scheme == "env":
            if rest not in self.environ:
                raise PlaceholderError(f"Environment variable {rest!r} is not set")
            return self.environ[rest]
        if sep and scheme == "ref":
            try:
                return copy.deepcopy(resolve_pointer(self.document, rest))
            except PointerResolutionError as exc:
                raise PlaceholderError(f"Unresolvable reference {rest!r}: {exc.reason}") from exc
        if expression not in self.variables:
            raise PlaceholderError(f"Unknown variable {expression!r}")
        return copy.deepcopy(self.variables[expression])


async def resolve_placeholders(
    value: JsonValue,
    variables: Mapping[str, JsonValue] | None = None,
    *,
    document: JsonValue = None,
    environ: Mapping[str, str] | None = None,
    config: VisitorConfig | None = None,
) -> JsonValue:
    """Expand every placeholder in ``value``.

    Args:
        value: Tree to resolve
        variables: Values for ``${name}`` placeholders
        document: Target of ``${ref:...}``; defaults to ``value`` itself
        environ: Environment for ``${env:...}``
        config: Visitor configuration

    Raises:
        TransformError: Wrapping the PlaceholderError of the first failing node.
    """
    resolver = PlaceholderResolver(
        variables,
        document=value if document is None else document,
        environ=environ,
    )
    return await visit(value, resolver, config=config)
