"""Recursive JSON tree transformer.

``visit()`` walks a JSON value pre-order. For every node it calls the
replace callback with the node's value and pointer, awaits the result if
needed, and then descends into the *resolved* value when it is a container.
Children are visited as concurrent asyncio tasks and reassembled in their
original key/index order, so the result is deterministic even when the
callbacks settle in a different order.

Example:
    async def shout(value, pointer):
        return value.upper() if isinstance(value, str) else value

    result = await visit({"a": ["x", "y"]}, shout)
    # {"a": ["X", "Y"]}
"""

from __future__ import annotations

import asyncio
import dataclasses
import inspect
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from typing import Any, TypeAlias

from jsonvisit.config import DEFAULT_VISITOR_CONFIG, SYNC_MAX_DEPTH, VisitorConfig
from jsonvisit.errors import ContractViolation, MaxDepthExceededError, TransformError
from jsonvisit.json_types import JsonKind, JsonValue, kind_of
from jsonvisit.pointer import ROOT_POINTER, join_pointer

logger = logging.getLogger(__name__)

__all__ = [
    "ReplaceFunction",
    "ReplaceResult",
    "SyncReplaceFunction",
    "run_visit",
    "visit",
    "visit_sync",
]

ReplaceResult: TypeAlias = (
    JsonValue | Awaitable[JsonValue] | AsyncIterator[JsonValue]
)
ReplaceFunction: TypeAlias = Callable[[JsonValue, str], ReplaceResult]
SyncReplaceFunction: TypeAlias = Callable[[JsonValue, str], JsonValue]


class _Walker:
    """Shared per-traversal state: callback, config and node count."""

    def __init__(self, replace: Callable[[JsonValue, str], Any], config: VisitorConfig):
        self._replace = replace
        self._config = config
        self.visited = 0

    def _check_depth(self, pointer: str, depth: int) -> None:
        max_depth = self._config.max_depth
        if max_depth is not None and depth > max_depth:
            raise MaxDepthExceededError(pointer, max_depth)

    def _call(self, value: JsonValue, pointer: str) -> Any:
        self.visited += 1
        try:
            return self._replace(value, pointer)
        except TransformError:
            raise
        except Exception as exc:
            raise TransformError.from_callback(pointer, exc) from exc

    def _children(
        self, kind: JsonKind, value: Any, pointer: str
    ) -> list[tuple[str | int, JsonValue, str]]:
        """List (key, child, child_pointer) triples in key/index order."""
        if kind is JsonKind.OBJECT:
            items: Sequence[tuple[str | int, JsonValue]] = list(value.items())
        else:
            items = list(enumerate(value))
        escape = self._config.escape_pointers
        return [
            (key, child, join_pointer(pointer, key, escape=escape))
            for key, child in items
        ]

    def _assemble(
        self,
        kind: JsonKind,
        value: Any,
        keys: list[str | int],
        resolved: list[JsonValue],
    ) -> JsonValue:
        if self._config.mutate_in_place and isinstance(value, (dict, list)):
            for key, child in zip(keys, resolved):
                value[key] = child
            return value
        if kind is JsonKind.OBJECT:
            return dict(zip(keys, resolved))
        return list(resolved)


class _AsyncWalker(_Walker):
    async def visit_node(self, value: JsonValue, pointer: str, depth: int) -> JsonValue:
        self._check_depth(pointer, depth)
        resolved = await self._resolve(value, pointer)

        kind = kind_of(resolved, pointer)
        if not kind.is_container:
            return resolved

        children = self._children(kind, resolved, pointer)
        results = await self._visit_children(children, depth + 1)
        return self._assemble(kind, resolved, [key for key, _, _ in children], results)

    async def _resolve(self, value: JsonValue, pointer: str) -> JsonValue:
        result = self._call(value, pointer)
        try:
            if inspect.isawaitable(result):
                return await result
            if isinstance(result, AsyncIterator):
                return await _single(result, pointer)
        except TransformError:
            raise
        except Exception as exc:
            raise TransformError.from_callback(pointer, exc) from exc
        return result

    async def _visit_children(
        self, children: list[tuple[str | int, JsonValue, str]], depth: int
    ) -> list[JsonValue]:
        if not children:
            return []

        if not self._config.concurrent:
            # One task at a time keeps the Python stack flat on deep trees.
            return [
                await asyncio.create_task(self.visit_node(child, child_pointer, depth))
                for _, child, child_pointer in children
            ]

        tasks = [
            asyncio.create_task(
                self.visit_node(child, child_pointer, depth), name=child_pointer
            )
            for _, child, child_pointer in children
        ]
        try:
            done, pending = await asyncio.wait(
                tasks, return_when=asyncio.FIRST_EXCEPTION
            )
        except asyncio.CancelledError:
            await _cancel_tasks(tasks)
            raise

        if pending:
            await _cancel_tasks(pending)
        for task in tasks:
            if task in done and task.exception() is not None:
                raise task.exception()  # type: ignore[misc]
        return [task.result() for task in tasks]


class _SyncWalker(_Walker):
    def visit_node(self, value: JsonValue, pointer: str, depth: int) -> JsonValue:
        self._check_depth(pointer, depth)
        resolved = self._call(value, pointer)
        if inspect.isawaitable(resolved) or isinstance(resolved, AsyncIterator):
            if inspect.iscoroutine(resolved):
                resolved.close()
            raise ContractViolation(
                f"Replace callback returned an awaitable at {pointer!r}; "
                "use visit() for asynchronous callbacks",
                pointer,
            )

        kind = kind_of(resolved, pointer)
        if not kind.is_container:
            return resolved

        children = self._children(kind, resolved, pointer)
        results = [
            self.visit_node(child, child_pointer, depth + 1)
            for _, child, child_pointer in children
        ]
        return self._assemble(kind, resolved, [key for key, _, _ in children], results)


async def _single(results: AsyncIterator[JsonValue], pointer: str) -> JsonValue:
    """Consume an async iterator that must produce exactly one value."""
    values: list[JsonValue] = []
    try:
        async for item in results:
            values.append(item)
            if len(values) > 1:
                break
    finally:
        aclose = getattr(results, "aclose", None)
        if aclose is not None:
            await aclose()

    if not values:
        raise ContractViolation(
            f"Replace callback at {pointer!r} completed without a value", pointer
        )
    if len(values) > 1:
        raise ContractViolation(
            f"Replace callback at {pointer!r} produced more than one value", pointer
        )
    return values[0]


async def _cancel_tasks(tasks: Sequence[asyncio.Task[Any]] | set[asyncio.Task[Any]]) -> None:
    """Cancel tasks and wait for them to finish."""
    for task in tasks:
        if not task.done():
            task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


async def visit(
    root: JsonValue,
    replace: ReplaceFunction,
    *,
    config: VisitorConfig | None = None,
) -> JsonValue:
    """Transform every node of ``root`` through ``replace``.

    The callback receives ``(value, pointer)`` and returns the node's
    replacement, either directly or as an awaitable. Replacements are
    themselves descended into, so returning a container from the callback
    causes its children to be visited as well. Returning the value unchanged
    leaves the node as is while still visiting its children.

    Args:
        root: The JSON value to transform.
        replace: Callback invoked exactly once per visited node.
        config: Traversal options. Defaults to DEFAULT_VISITOR_CONFIG.

    Returns:
        The fully transformed tree.

    Raises:
        TransformError: If any callback invocation fails. No partial result
            is returned and in-flight sibling visits are cancelled.
    """
    if config is None:
        config = DEFAULT_VISITOR_CONFIG
    walker = _AsyncWalker(replace, config)
    result = await walker.visit_node(root, ROOT_POINTER, 0)
    logger.debug(f"visit() resolved {walker.visited} nodes")
    return result


def visit_sync(
    root: JsonValue,
    replace: SyncReplaceFunction,
    *,
    config: VisitorConfig | None = None,
) -> JsonValue:
    """Synchronous counterpart of ``visit()`` for plain callbacks.

    Siblings are visited in key/index order. ``config.concurrent`` has no
    effect here. The walk recurses on the Python stack, so an unset
    ``max_depth`` is bounded by SYNC_MAX_DEPTH.

    >>> visit_sync({"a": 1, "b": [2]}, lambda v, p: v * 10 if isinstance(v, int) else v)
    {'a': 10, 'b': [20]}

    Raises:
        ContractViolation: If the callback returns an awaitable.
        TransformError: If any callback invocation fails.
    """
    if config is None:
        config = DEFAULT_VISITOR_CONFIG
    if config.max_depth is None:
        config = dataclasses.replace(config, max_depth=SYNC_MAX_DEPTH)
    walker = _SyncWalker(replace, config)
    result = walker.visit_node(root, ROOT_POINTER, 0)
    logger.debug(f"visit_sync() resolved {walker.visited} nodes")
    return result


def run_visit(
    root: JsonValue,
    replace: ReplaceFunction,
    *,
    config: VisitorConfig | None = None,
) -> JsonValue:
    """Run ``visit()`` to completion on a fresh event loop.

    For blocking callers; must not be used from inside a running loop.
    """
    return asyncio.run(visit(root, replace, config=config))
