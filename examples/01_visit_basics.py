"""Example 01: Visit Basics

Demonstrates synchronous tree transformation with visit_sync().

This example shows:
- Replacing leaves by value
- Replacing a node by pointer
- Replacing a leaf with a container whose children are visited too

Tier: 1 (Sync)
"""

from jsonvisit import visit_sync


def main() -> None:
    """Transform a small configuration tree."""
    tree = {"name": "demo", "ports": [80, 443], "tls": None}

    def rule(value, pointer):
        # Numbers become strings, the tls leaf becomes an object
        if pointer == "/tls":
            return {"enabled": True, "cert": "demo.pem"}
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    result = visit_sync(tree, rule)

    assert result == {
        "name": "demo",
        "ports": ["80", "443"],
        "tls": {"enabled": True, "cert": "demo.pem"},
    }
    # The input tree is never modified
    assert tree["tls"] is None

    # Pointers are built from position and escaped per RFC 6901
    seen: list[str] = []
    visit_sync({"a/b": [1]}, lambda value, pointer: seen.append(pointer) or value)
    assert seen == ["/", "/a~1b", "/a~1b/0"]


if __name__ == "__main__":
    main()
    print("Example 01 completed")
