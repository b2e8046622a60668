"""Example 02: Async Callbacks

Demonstrates visit() with coroutine callbacks that settle out of order.

This example shows:
- Siblings resolving concurrently
- Results assembled in original key order regardless of timing
- Callback failures surfacing as TransformError

Tier: 2 (Async)
"""

import asyncio

from jsonvisit import TransformError, visit


async def main() -> None:
    """Resolve a tree whose leaves take different amounts of time."""
    delays = {"/slow": 0.03, "/medium": 0.02, "/fast": 0.0}
    settled: list[str] = []

    async def lookup(value, pointer):
        await asyncio.sleep(delays.get(pointer, 0))
        settled.append(pointer)
        if isinstance(value, str):
            return value.upper()
        return value

    result = await visit({"slow": "a", "medium": "b", "fast": "c"}, lookup)

    assert settled == ["/", "/fast", "/medium", "/slow"]
    assert list(result) == ["slow", "medium", "fast"]
    assert result == {"slow": "A", "medium": "B", "fast": "C"}

    async def fail_on_b(value, pointer):
        if pointer == "/b":
            raise ValueError("no b allowed")
        return value

    try:
        await visit({"a": 1, "b": 2}, fail_on_b)
    except TransformError as exc:
        assert exc.pointer == "/b"
        assert isinstance(exc.cause, ValueError)
    else:
        raise AssertionError("expected TransformError")


if __name__ == "__main__":
    asyncio.run(main())
    print("Example 02 completed")
