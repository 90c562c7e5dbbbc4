"""Base field implementation.

A field type is a class deriving from Implementation. The List runtime
calls the same capability set on every field, whatever its kind:

- GraphQL fragments: gql_output_fields, gql_query_input_fields,
  gql_create_input_fields, gql_update_input_fields, get_gql_aux_types,
  get_gql_aux_queries
- resolvers: gql_output_field_resolvers, gql_aux_field_resolvers,
  gql_aux_query_resolvers
- defaults: get_default_value
- hooks: resolve_input, validate_input, before_change, after_change,
  validate_delete, before_delete, after_delete
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from listforge.access.types import parse_field_access
from listforge.hooks.registry import resolve_hooks
from listforge.hooks.types import HookContext

if TYPE_CHECKING:
    from listforge.lists.list import List

# Where-input suffixes contributed by string-like fields, in schema order
STRING_FILTER_SUFFIXES = (
    "",
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
)

NUMERIC_FILTER_SUFFIXES = ("", "_not", "_lt", "_lte", "_gt", "_gte")

# Config keys every field understands; anything else is type-specific
COMMON_CONFIG_KEYS = {
    "type",
    "access",
    "hooks",
    "is_required",
    "default_value",
    "schema_doc",
}


class Implementation:
    """Behaviour shared by every field type."""

    gql_type = "String"
    is_relationship = False
    is_orderable = False
    extra_config_keys: frozenset[str] = frozenset()

    def __init__(
        self,
        path: str,
        config: Mapping[str, Any],
        *,
        list_key: str,
        get_list_by_key: Callable[[str], "List | None"],
    ):
        unknown = set(config) - COMMON_CONFIG_KEYS - self.extra_config_keys
        if unknown:
            raise ValueError(
                f"{list_key}.{path} has unknown config option(s): "
                f"{', '.join(sorted(unknown))}"
            )
        self.path = path
        self.config = dict(config)
        self.list_key = list_key
        self.get_list_by_key = get_list_by_key
        self.access = parse_field_access(config.get("access"), list_key, path)
        self.hooks = resolve_hooks(config.get("hooks"), f"{list_key}.{path}")
        self.is_required = bool(config.get("is_required", False))
        self.schema_doc = config.get("schema_doc")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.list_key}.{self.path}>"

    # ------------------------------------------------------------------
    # GraphQL fragments
    # ------------------------------------------------------------------

    def _described(self, fragment: str) -> str:
        if self.schema_doc:
            return f'""" {self.schema_doc} """\n{fragment}'
        return fragment

    def gql_output_fields(self) -> list[str]:
        return [self._described(f"{self.path}: {self.gql_type}")]

    def gql_query_input_fields(self) -> list[str]:
        return self.equality_input_fields() + self.in_input_fields()

    def gql_create_input_fields(self) -> list[str]:
        return [f"{self.path}: {self.gql_type}"]

    def gql_update_input_fields(self) -> list[str]:
        return [f"{self.path}: {self.gql_type}"]

    def get_gql_aux_types(self) -> list[str]:
        return []

    def get_gql_aux_queries(self) -> list[str]:
        return []

    def equality_input_fields(self, gql_type: str | None = None) -> list[str]:
        gql_type = gql_type or self.gql_type
        return [f"{self.path}: {gql_type}", f"{self.path}_not: {gql_type}"]

    def in_input_fields(self, gql_type: str | None = None) -> list[str]:
        gql_type = gql_type or self.gql_type
        return [f"{self.path}_in: [{gql_type}]", f"{self.path}_not_in: [{gql_type}]"]

    # ------------------------------------------------------------------
    # Resolvers
    # ------------------------------------------------------------------

    def gql_output_field_resolvers(self) -> dict[str, Callable[..., Any]]:
        path = self.path

        def resolve(item, args, context, info):
            return item.get(path)

        return {path: resolve}

    def gql_aux_field_resolvers(self) -> dict[str, Any]:
        return {}

    def gql_aux_query_resolvers(self) -> dict[str, Any]:
        return {}

    # ------------------------------------------------------------------
    # Defaults
    # ------------------------------------------------------------------

    @property
    def has_default(self) -> bool:
        return self.config.get("default_value") is not None

    def get_default_value(self, context: Any = None, original_input: Any = None) -> Any:
        """Static value, or the result of calling a default factory."""
        default = self.config.get("default_value")
        if callable(default):
            return default(context=context, original_input=original_input)
        return default

    # ------------------------------------------------------------------
    # Lifecycle hooks (field-type level); overridden by field kinds
    # ------------------------------------------------------------------

    async def resolve_input(self, ctx: HookContext) -> Any:
        return (ctx.resolved_data or {}).get(self.path)

    async def validate_input(self, ctx: HookContext) -> None:
        pass

    async def before_change(self, ctx: HookContext) -> None:
        pass

    async def after_change(self, ctx: HookContext) -> None:
        pass

    async def validate_delete(self, ctx: HookContext) -> None:
        pass

    async def before_delete(self, ctx: HookContext) -> None:
        pass

    async def after_delete(self, ctx: HookContext) -> None:
        pass
