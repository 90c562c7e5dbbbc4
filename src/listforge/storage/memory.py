"""In-memory storage adapter.

Keeps items in insertion order and evaluates the full where-input
operator set in Python. Used by the test suite and the CLI, and as the
reference for what a database-backed adapter must support.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from listforge.core.utils import id_key

logger = logging.getLogger(__name__)

# Longest first so "_not_contains_i" wins over "_contains_i" and "_i"
FILTER_SUFFIXES = sorted(
    [
        "_not",
        "_contains",
        "_not_contains",
        "_starts_with",
        "_not_starts_with",
        "_ends_with",
        "_not_ends_with",
        "_i",
        "_not_i",
        "_contains_i",
        "_not_contains_i",
        "_starts_with_i",
        "_not_starts_with_i",
        "_ends_with_i",
        "_not_ends_with_i",
        "_in",
        "_not_in",
        "_lt",
        "_lte",
        "_gt",
        "_gte",
        "_is_null",
        "_some",
        "_none",
        "_every",
    ],
    key=len,
    reverse=True,
)


class MemoryAdapter:
    """Process-wide in-memory storage, one MemoryListAdapter per list."""

    name = "memory"

    def __init__(self):
        self.list_adapters: dict[str, MemoryListAdapter] = {}

    def new_list_adapter(self, key: str) -> MemoryListAdapter:
        adapter = MemoryListAdapter(key, self)
        self.list_adapters[key] = adapter
        return adapter

    def get_list_adapter(self, key: str) -> MemoryListAdapter:
        if key not in self.list_adapters:
            raise ValueError(f"No storage registered for list '{key}'")
        return self.list_adapters[key]


class MemoryListAdapter:
    """Items of one list, keyed by the string form of their id."""

    def __init__(self, key: str, parent_adapter: MemoryAdapter, start_id: int = 1):
        self.key = key
        self.parent_adapter = parent_adapter
        self.items: dict[str, dict[str, Any]] = {}
        self.fields: dict[str, Any] = {}
        self._next_id = start_id

    def add_field(self, field: Any) -> None:
        self.fields[field.path] = field

    def seed(self, items: Iterable[Mapping[str, Any]]) -> None:
        """Load items as-is, assigning ids to those without one."""
        for item in items:
            record = copy.deepcopy(dict(item))
            if record.get("id") is None:
                record["id"] = self._take_id()
            elif isinstance(record["id"], int) and record["id"] >= self._next_id:
                self._next_id = record["id"] + 1
            self.items[id_key(record["id"])] = record

    def _take_id(self) -> int:
        next_id = self._next_id
        self._next_id += 1
        return next_id

    def get(self, id: Any) -> dict[str, Any] | None:
        item = self.items.get(id_key(id))
        return copy.deepcopy(item) if item is not None else None

    # ------------------------------------------------------------------
    # ListStorageAdapter
    # ------------------------------------------------------------------

    async def items_query(
        self,
        args: dict[str, Any],
        *,
        meta: bool = False,
        context: Any = None,
        info: Any = None,
    ) -> list[dict[str, Any]] | dict[str, int]:
        """Filter, sort and slice items."""
        where = args.get("where") or {}
        items = [item for item in self.items.values() if self.matches(item, where)]
        items = self._sort(items, args.get("orderBy") or [])

        skip = args.get("skip") or 0
        first = args.get("first")
        items = items[skip:]
        if first is not None:
            items = items[:first]

        if meta:
            return {"count": len(items)}
        return [copy.deepcopy(item) for item in items]

    async def create(self, data: dict[str, Any]) -> dict[str, Any]:
        item = copy.deepcopy(dict(data))
        item["id"] = self._take_id()
        self.items[id_key(item["id"])] = item
        logger.debug("Created %s item %s", self.key, item["id"])
        return copy.deepcopy(item)

    async def update(self, id: Any, data: dict[str, Any]) -> dict[str, Any]:
        key = id_key(id)
        if key not in self.items:
            raise LookupError(f"No {self.key} item with id {id}")
        changes = {path: value for path, value in data.items() if path != "id"}
        self.items[key].update(copy.deepcopy(changes))
        return copy.deepcopy(self.items[key])

    async def delete(self, id: Any) -> dict[str, Any] | None:
        return self.items.pop(id_key(id), None)

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def _parse_key(self, key: str) -> tuple[str, str]:
        """Split a where key into (path, operator suffix)."""
        paths = set(self.fields) | {"id"}
        if key in paths:
            return key, ""
        for suffix in FILTER_SUFFIXES:
            if key.endswith(suffix) and key[: -len(suffix)] in paths:
                return key[: -len(suffix)], suffix
        raise ValueError(f"Unknown filter '{key}' for list '{self.key}'")

    def matches(self, item: dict[str, Any], where: Mapping[str, Any]) -> bool:
        """Whether ``item`` satisfies every condition of ``where``."""
        for key, value in where.items():
            if key == "AND":
                if not all(self.matches(item, clause) for clause in value or []):
                    return False
            elif key == "OR":
                if value and not any(self.matches(item, clause) for clause in value):
                    return False
            else:
                path, op = self._parse_key(key)
                if not self._check(item, path, op, value):
                    return False
        return True

    def _check(self, item: dict[str, Any], path: str, op: str, value: Any) -> bool:
        field = self.fields.get(path)
        if field is not None and getattr(field, "is_relationship", False):
            return self._check_relationship(item, field, op, value)

        actual = item.get(path)
        if path == "id":
            return self._check_id(actual, op, value)

        if op == "_is_null":
            return (actual is None) == bool(value)
        elif op == "_in":
            return value is None or actual in value
        elif op == "_not_in":
            return value is None or actual not in value
        elif op in ("_lt", "_lte", "_gt", "_gte"):
            if value is None:
                return True
            if actual is None:
                return False
            if op == "_lt":
                return actual < value
            elif op == "_lte":
                return actual <= value
            elif op == "_gt":
                return actual > value
            return actual >= value
        return self._check_string(actual, op, value)

    def _check_id(self, actual: Any, op: str, value: Any) -> bool:
        key = id_key(actual)
        if op == "":
            return key == id_key(value)
        elif op == "_not":
            return key != id_key(value)
        elif op == "_in":
            return value is None or key in {id_key(v) for v in value}
        elif op == "_not_in":
            return value is None or key not in {id_key(v) for v in value}
        raise ValueError(f"Unsupported id filter 'id{op}' for list '{self.key}'")

    def _check_string(self, actual: Any, op: str, value: Any) -> bool:
        insensitive = op.endswith("_i")
        base = op[:-2] if insensitive else op
        negate = base.startswith("_not")
        base = base[len("_not"):] if negate else base

        if base in ("_contains", "_starts_with", "_ends_with") and value is None:
            return True
        if insensitive and isinstance(actual, str) and isinstance(value, str):
            actual, value = actual.lower(), value.lower()

        if base == "":
            result = actual == value
        elif actual is None:
            result = False
        elif base == "_contains":
            result = value in actual
        elif base == "_starts_with":
            result = actual.startswith(value)
        elif base == "_ends_with":
            result = actual.endswith(value)
        else:
            raise ValueError(f"Unsupported filter suffix '{op}' for list '{self.key}'")
        return not result if negate else result

    def _check_relationship(self, item: dict[str, Any], field: Any, op: str, value: Any) -> bool:
        ref_adapter = self.parent_adapter.get_list_adapter(field.ref)
        actual = item.get(field.path)

        if not field.many:
            if op == "_is_null":
                return (actual is None) == bool(value)
            if op == "":
                if actual is None:
                    return False
                ref_item = ref_adapter.items.get(id_key(actual))
                return ref_item is not None and ref_adapter.matches(ref_item, value or {})
            raise ValueError(f"Unsupported filter '{field.path}{op}' for list '{self.key}'")

        ref_items = [ref_adapter.items.get(id_key(ref_id)) for ref_id in actual or []]
        results = [
            ref_adapter.matches(ref_item, value or {})
            for ref_item in ref_items
            if ref_item is not None
        ]
        if op == "_some":
            return any(results)
        elif op == "_none":
            return not any(results)
        elif op == "_every":
            return all(results)
        raise ValueError(f"Unsupported filter '{field.path}{op}' for list '{self.key}'")

    # ------------------------------------------------------------------
    # Sorting
    # ------------------------------------------------------------------

    def _sort(
        self, items: list[dict[str, Any]], order_by: list[Mapping[str, str]]
    ) -> list[dict[str, Any]]:
        # Stable sorts applied last key first
        for clause in reversed(order_by):
            for path, direction in reversed(list(clause.items())):
                if direction not in ("asc", "desc"):
                    raise ValueError(f"Invalid sort direction '{direction}' for '{path}'")
                items = sorted(
                    items,
                    key=lambda item, p=path: _sort_key(p, item.get(p)),
                    reverse=direction == "desc",
                )
        return items


def _sort_key(path: str, value: Any) -> tuple[bool, Any]:
    # None sorts first; ids given as GraphQL strings compare as numbers
    if path == "id" and isinstance(value, str) and value.isdigit():
        value = int(value)
    return (value is not None, value)
