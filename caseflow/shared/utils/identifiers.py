"""Identifier helpers: CUID generation and id-list normalization."""

from collections.abc import Iterable

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def unique_ids(ids: Iterable[str]) -> list[str]:
    """Return ids with duplicates and blanks removed, first-seen order kept."""
    seen: set[str] = set()
    result: list[str] = []
    for raw in ids:
        value = raw.strip() if isinstance(raw, str) else raw
        if not value or value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result
