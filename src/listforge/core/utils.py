"""Small helpers shared across the runtime."""

import inspect
from collections.abc import Iterable
from typing import Any, TypeVar

T = TypeVar("T")


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it as-is.

    Hooks and access predicates may be plain functions or coroutines.
    """
    if inspect.isawaitable(value):
        return await value
    return value


def unique(values: Iterable[T]) -> list[T]:
    """De-duplicate while preserving first-seen order."""
    seen: list[T] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


def id_key(value: Any) -> str:
    """Normalize an item id for comparison.

    GraphQL ``ID`` arguments arrive as strings while adapters may store ints.
    """
    return str(value)
