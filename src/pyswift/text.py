# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Text helpers shared by the translation and synthesis stages."""


def split_top_level(text: str, separator: str) -> list[str]:
    """Split on ``separator`` outside brackets and string literals.

    Args:
        text: Text to split.
        separator: Single separator character.

    Returns:
        Stripped, non-empty parts.
    """
    parts: list[str] = []
    depth = 0
    quote: str | None = None
    current: list[str] = []
    for char in text:
        if quote:
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char in "([{":
            depth += 1
        elif char in ")]}":
            depth -= 1
        elif char == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    parts.append("".join(current).strip())
    return [part for part in parts if part]
