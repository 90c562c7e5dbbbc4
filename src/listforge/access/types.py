"""Access specification types.

An access spec maps each operation to either a static grant or a
request-scoped predicate:

- StaticAccess(granted): decided once, at schema-build time
- DynamicAccess(predicate): evaluated per request with an AccessArgs bag

The static view decides which branches of the GraphQL schema exist; the
dynamic view is re-evaluated for every request.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

LIST_OPERATIONS = ("create", "read", "update", "delete", "auth")
FIELD_OPERATIONS = ("create", "read", "update", "delete")

# Operation -> GraphQL operation type, used in error payloads
OPERATION_TYPES = {
    "create": "mutation",
    "read": "query",
    "update": "mutation",
    "delete": "mutation",
    "auth": "mutation",
}


@dataclass(frozen=True)
class StaticAccess:
    granted: bool

    def is_possible(self) -> bool:
        return self.granted


@dataclass(frozen=True)
class DynamicAccess:
    predicate: Callable[["AccessArgs"], Any]

    def is_possible(self) -> bool:
        # Unknown until request time, so the schema must include it
        return True


AccessRule = Union[StaticAccess, DynamicAccess]


@dataclass
class AccessArgs:
    """Argument bag passed to every dynamic access predicate.

    Attributes:
        operation: The operation being checked (create, read, update, delete, auth)
        list_key: Key of the list being accessed
        authentication: {"item": authed item, "list_key": its list} or empty values
        original_input: The input the caller supplied, if any
        context: The request context
        gql_name: GraphQL operation name that triggered the check
        field_path: Field being checked (field-level access only)
        existing_item: Current item state (field-level update/read checks)
        item_id: Single target item id, when known
        item_ids: Target item ids for many-operations
    """

    operation: str
    list_key: str
    authentication: dict[str, Any] = field(default_factory=dict)
    original_input: Any = None
    context: Any = None
    gql_name: str | None = None
    field_path: str | None = None
    existing_item: dict[str, Any] | None = None
    item_id: Any = None
    item_ids: list[Any] | None = None


@dataclass(frozen=True)
class AccessSpec:
    """Effective, normalized access for a list or field."""

    rules: Mapping[str, AccessRule]

    def __getitem__(self, operation: str) -> AccessRule:
        return self.rules[operation]

    def allows(self, operation: str) -> bool:
        """Whether ``operation`` may be granted to anyone (schema-time view)."""
        rule = self.rules.get(operation)
        return rule is not None and rule.is_possible()

    def any_allowed(self) -> bool:
        return any(rule.is_possible() for rule in self.rules.values())

    def to_dict(self) -> dict[str, Any]:
        """Operation -> bool for static rules, predicate for dynamic ones."""
        return {
            op: rule.granted if isinstance(rule, StaticAccess) else rule.predicate
            for op, rule in self.rules.items()
        }


def _to_rule(value: Any, owner: str, operation: str) -> AccessRule:
    if isinstance(value, bool):
        return StaticAccess(value)
    if callable(value):
        return DynamicAccess(value)
    raise TypeError(
        f"{owner}.access.{operation} must be a boolean or a function, "
        f"got {type(value).__name__}"
    )


def parse_access(
    access: Any,
    operations: tuple[str, ...],
    owner: str,
    default: bool = True,
) -> AccessSpec:
    """Normalize an access config into an AccessSpec.

    Args:
        access: None, a bool, a callable, or a mapping of operation -> bool/callable
        operations: The operations this owner supports
        owner: Name used in error messages (e.g. "Post" or "Post.title")
        default: Grant used for operations the config leaves out

    Raises:
        ValueError: If the mapping names an unknown operation
        TypeError: If a value is neither a boolean nor callable
    """
    if access is None:
        return AccessSpec({op: StaticAccess(default) for op in operations})

    if isinstance(access, Mapping):
        unknown = [key for key in access if key not in operations]
        if unknown:
            raise ValueError(
                f"{owner}.access has unknown operation(s) {', '.join(map(str, unknown))}. "
                f"Expected one of: {', '.join(operations)}"
            )
        return AccessSpec(
            {
                op: _to_rule(access[op], owner, op) if op in access else StaticAccess(default)
                for op in operations
            }
        )

    return AccessSpec({op: _to_rule(access, owner, op) for op in operations})


def parse_list_access(access: Any, list_key: str) -> AccessSpec:
    return parse_access(access, LIST_OPERATIONS, list_key)


def parse_field_access(access: Any, list_key: str, field_path: str) -> AccessSpec:
    return parse_access(access, FIELD_OPERATIONS, f"{list_key}.{field_path}")
