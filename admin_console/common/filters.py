"""In-memory filtering and free-text search utilities."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional, Sequence, TypeVar

T = TypeVar("T")


# ── Full-text search ────────────────────────────────────────────────

def build_haystack(values: Sequence[Optional[Any]]) -> str:
    """Join searchable values into one lowercased string.

    ``None`` values contribute an empty segment, so the relative position of
    the other fields is preserved.
    """
    return " ".join("" if v is None else str(v) for v in values).lower()


def matches_search(values: Sequence[Optional[Any]], search: Optional[str]) -> bool:
    """Case-insensitive substring match of *search* across *values* jointly."""
    if not search:
        return True
    return search.lower() in build_haystack(values)


def apply_search(
    items: Iterable[T],
    search: Optional[str],
    fields: Callable[[T], Sequence[Optional[Any]]],
) -> list[T]:
    """
    Keep the items whose searchable *fields* contain *search*.

    Order is preserved. An empty or ``None`` search keeps everything.
    """
    return [item for item in items if matches_search(fields(item), search)]
