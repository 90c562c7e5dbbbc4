"""The List runtime.

A List is one named entity of the content model. It owns its fields,
derives its GraphQL surface, and mediates every read and write:

    resolver -> list access -> field access -> hook pipeline -> storage

Field-level read access is enforced lazily, per item, by the wrapped
output field resolvers returned from gql_field_resolvers().
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from listforge.access.types import OPERATION_TYPES, parse_list_access
from listforge.core.types import get_field_type
from listforge.core.utils import id_key, maybe_await
from listforge.errors import (
    AccessDeniedError,
    LimitsExceededError,
    ListforgeError,
    StorageError,
    UserInputError,
)
from listforge.fields import AutoIncrement, Implementation
from listforge.hooks.registry import resolve_hooks
from listforge.hooks.service import HookPipeline
from listforge.hooks.types import HookContext
from listforge.lists import schema
from listforge.lists.names import derive_gql_names, key_to_label, pluralize

logger = logging.getLogger(__name__)

LIST_CONFIG_KEYS = {
    "fields",
    "access",
    "hooks",
    "schema_doc",
    "plural",
    "list_query_name",
    "item_query_name",
    "label_field",
    "query_limits",
}

# Resolver signature used throughout: (root, args, context, info)
Resolver = Callable[[Any, dict[str, Any], Any, Any], Any]


@dataclass
class QueryMeta:
    """Result of a meta query; the count is only computed when asked for."""

    get_count: Callable[[], Awaitable[int]]


class List:
    """One entity of the content model."""

    def __init__(
        self,
        key: str,
        config: Mapping[str, Any],
        *,
        get_list_by_key: Callable[[str], "List | None"],
        adapter: Any,
    ):
        unknown = set(config) - LIST_CONFIG_KEYS
        if unknown:
            raise ValueError(f"List '{key}' has unknown config option(s): {', '.join(sorted(unknown))}")
        if "fields" not in config:
            raise ValueError(f"List '{key}' must define fields")

        self.key = key
        self.config = dict(config)
        self.label = key_to_label(key)
        self.plural = config.get("plural") or pluralize(self.label)
        self.gql_names = derive_gql_names(
            key,
            plural=config.get("plural"),
            list_query_name=config.get("list_query_name"),
            item_query_name=config.get("item_query_name"),
        )
        self.access = parse_list_access(config.get("access"), key)
        self.hooks = resolve_hooks(config.get("hooks"), key)
        self.schema_doc = config.get("schema_doc")
        self.label_field = config.get("label_field", "name")
        self.max_results = self._parse_query_limits(config.get("query_limits"))
        self.get_list_by_key = get_list_by_key
        self.adapter = adapter.new_list_adapter(key)

        self.fields: list[Implementation] = []
        self.fields_by_path: dict[str, Implementation] = {}
        self.hook_pipeline: HookPipeline | None = None
        self._fields_initialised = False

    def __repr__(self) -> str:
        return f"<List {self.key}>"

    def _parse_query_limits(self, limits: Mapping[str, Any] | None) -> int | None:
        if not limits:
            return None
        unknown = set(limits) - {"max_results"}
        if unknown:
            raise ValueError(f"{self.key}.query_limits has unknown option(s): {', '.join(sorted(unknown))}")
        max_results = limits.get("max_results")
        if max_results is None:
            return None
        if not isinstance(max_results, int) or isinstance(max_results, bool) or max_results < 1:
            raise ValueError(f"{self.key}.query_limits.max_results must be a positive integer")
        return max_results

    # ------------------------------------------------------------------
    # Field registry
    # ------------------------------------------------------------------

    def init_fields(self) -> None:
        """Instantiate the configured fields, in declaration order.

        Lists without an ``id`` field get an AutoIncrement one first.

        Raises:
            RuntimeError: If called twice
            ValueError: On duplicate paths or unknown field types
        """
        if self._fields_initialised:
            raise RuntimeError(f"Fields of list '{self.key}' are already initialised")

        declared = self.config["fields"]
        entries = list(declared.items()) if isinstance(declared, Mapping) else list(declared)
        if not any(path == "id" for path, _ in entries):
            entries.insert(0, ("id", {"type": AutoIncrement}))

        for path, field_config in entries:
            if path in self.fields_by_path:
                raise ValueError(f"List '{self.key}' declares field '{path}' more than once")
            field_type = get_field_type(field_config.get("type"))
            field = field_type(
                path,
                field_config,
                list_key=self.key,
                get_list_by_key=self.get_list_by_key,
            )
            self.adapter.add_field(field)
            self.fields.append(field)
            self.fields_by_path[path] = field

        self.hook_pipeline = HookPipeline(self.key, self.fields, self.hooks)
        self._fields_initialised = True
        logger.debug("Initialised %d fields for list %s", len(self.fields), self.key)

    def readable_fields(self) -> list[Implementation]:
        return [f for f in self.fields if f.access.allows("read")]

    def sortable_fields(self) -> list[Implementation]:
        return [f for f in self.readable_fields() if f.is_orderable]

    def input_fields(self, operation: str) -> list[str]:
        """Create or update input fragments of the fields allowing ``operation``."""
        fragments = []
        for f in self.fields:
            if not f.access.allows(operation):
                continue
            if operation == "create":
                fragments += f.gql_create_input_fields()
            else:
                fragments += f.gql_update_input_fields()
        return fragments

    def emits(self, operation: str) -> bool:
        """Whether the schema exposes mutations for ``operation``."""
        if not self.access.allows(operation):
            return False
        if operation in ("create", "update"):
            return bool(self.input_fields(operation))
        return True

    # ------------------------------------------------------------------
    # Schema synthesis
    # ------------------------------------------------------------------

    def get_gql_types(self) -> list[str]:
        return schema.gql_types(self)

    def get_graphql_filter_fragment(self) -> list[str]:
        return schema.filter_fragment(self)

    def get_gql_queries(self) -> list[str]:
        return schema.gql_queries(self)

    def get_gql_mutations(self) -> list[str]:
        return schema.gql_mutations(self)

    def gql_field_resolvers(self) -> dict[str, dict[str, Resolver]]:
        if not self.access.allows("read"):
            return {}
        resolvers: dict[str, Resolver] = {}
        for field in self.readable_fields():
            for name, inner in field.gql_output_field_resolvers().items():
                resolvers[name] = self._wrap_field_resolver(field, inner)
        return {self.gql_names.output_type_name: resolvers}

    def gql_aux_field_resolvers(self) -> dict[str, Any]:
        resolvers: dict[str, Any] = {}
        for field in self.fields:
            resolvers.update(field.gql_aux_field_resolvers())
        return resolvers

    def gql_aux_query_resolvers(self) -> dict[str, Any]:
        resolvers: dict[str, Any] = {}
        for field in self.fields:
            resolvers.update(field.gql_aux_query_resolvers())
        return resolvers

    def gql_query_resolvers(self) -> dict[str, Resolver]:
        if not self.access.allows("read"):
            return {}
        names = self.gql_names
        return {
            names.list_query_name: lambda _, args, context, info: self.list_query(
                args, context, names.list_query_name, info
            ),
            names.list_query_meta_name: lambda _, args, context, info: self.list_query_meta(
                args, context, names.list_query_meta_name, info
            ),
            names.list_query_count_name: lambda _, args, context, info: self.list_query_count(
                args, context, names.list_query_count_name, info
            ),
            names.item_query_name: lambda _, args, context, info: self.item_query(
                args, context, names.item_query_name, info
            ),
            **self.gql_aux_query_resolvers(),
        }

    def gql_mutation_resolvers(self) -> dict[str, Resolver]:
        names = self.gql_names
        resolvers: dict[str, Resolver] = {}
        if self.emits("create"):
            resolvers[names.create_mutation_name] = lambda _, args, context, info: (
                self.create_mutation(args.get("data") or {}, context, info)
            )
            resolvers[names.create_many_mutation_name] = lambda _, args, context, info: (
                self.create_many_mutation(args.get("data") or [], context, info)
            )
        if self.emits("update"):
            resolvers[names.update_mutation_name] = lambda _, args, context, info: (
                self.update_mutation(args["id"], args.get("data") or {}, context, info)
            )
            resolvers[names.update_many_mutation_name] = lambda _, args, context, info: (
                self.update_many_mutation(args.get("data") or [], context, info)
            )
        if self.emits("delete"):
            resolvers[names.delete_mutation_name] = lambda _, args, context, info: (
                self.delete_mutation(args["id"], context, info)
            )
            resolvers[names.delete_many_mutation_name] = lambda _, args, context, info: (
                self.delete_many_mutation(args.get("ids") or [], context, info)
            )
        return resolvers

    def _wrap_field_resolver(self, field: Implementation, inner: Resolver) -> Resolver:
        """Check the field's read access for each item before resolving it."""

        async def resolver(item, args, context, info):
            target = getattr(info, "field_name", field.path)
            item_id = (item or {}).get("id")
            allowed = await maybe_await(
                context.get_field_access_control_for_user(
                    field.access,
                    self.key,
                    field.path,
                    None,
                    item,
                    "read",
                    gql_name=target,
                    item_id=item_id,
                )
            )
            if not allowed:
                logger.info("Denied read of %s.%s on item %s", self.key, field.path, item_id)
                raise AccessDeniedError(
                    data={"type": "query", "target": target},
                    internal_data={"itemId": item_id},
                )
            return await maybe_await(inner(item, args, context, info))

        return resolver

    # ------------------------------------------------------------------
    # Access control
    # ------------------------------------------------------------------

    async def check_list_access(
        self,
        context: Any,
        original_input: Any,
        operation: str,
        *,
        gql_name: str | None = None,
        **extra: Any,
    ) -> bool | dict[str, Any]:
        """Evaluate list-level access.

        Returns:
            True, or a where mapping the caller's queries are restricted to

        Raises:
            AccessDeniedError: If access is denied
        """
        access = await maybe_await(
            context.get_list_access_control_for_user(
                self.access, self.key, original_input, operation, gql_name=gql_name, **extra
            )
        )
        if access is False or access is None:
            logger.info("Denied %s on list %s (%s)", operation, self.key, gql_name)
            logger.debug("Denied access internal data: %s", extra)
            raise AccessDeniedError(
                data={"type": OPERATION_TYPES[operation], "target": gql_name},
                internal_data=dict(extra),
            )
        return access

    async def check_auth_access(self, context: Any, *, gql_name: str | None = None) -> bool:
        access = await maybe_await(
            context.get_auth_access_control_for_user(self.access, self.key, gql_name=gql_name)
        )
        if not access:
            logger.info("Denied auth on list %s (%s)", self.key, gql_name)
            raise AccessDeniedError(data={"type": "mutation", "target": gql_name})
        return True

    async def check_field_access(
        self,
        operation: str,
        items_to_check: Sequence[Mapping[str, Any]],
        context: Any,
        *,
        gql_name: str | None = None,
        **extra: Any,
    ) -> None:
        """Check access to every field present in each item's data.

        ``items_to_check`` holds {"data": ..., "existing_item": ...} entries.

        Raises:
            AccessDeniedError: Listing every restricted field path
        """
        restricted: list[str] = []
        for entry in items_to_check:
            data = entry.get("data") or {}
            existing_item = entry.get("existing_item")
            for field in self.fields:
                if field.path not in data or field.path in restricted:
                    continue
                allowed = await maybe_await(
                    context.get_field_access_control_for_user(
                        field.access,
                        self.key,
                        field.path,
                        data,
                        existing_item,
                        operation,
                        gql_name=gql_name,
                        item_id=(existing_item or {}).get("id"),
                    )
                )
                if not allowed:
                    restricted.append(field.path)

        if restricted:
            logger.info("Denied %s of %s fields %s", operation, self.key, restricted)
            logger.debug("Denied field access internal data: %s", extra)
            raise AccessDeniedError(
                data={
                    "restrictedFields": restricted,
                    "target": gql_name,
                    "type": OPERATION_TYPES[operation],
                },
                internal_data=dict(extra),
            )

    async def get_access_controlled_item(
        self,
        item_id: Any,
        access: bool | Mapping[str, Any],
        *,
        context: Any = None,
        operation: str | None = None,
        gql_name: str | None = None,
        info: Any = None,
    ) -> dict[str, Any]:
        """Fetch one item by id, provided it also satisfies ``access``.

        Raises:
            AccessDeniedError: If no such item is visible, whether it is
                missing or filtered out
        """
        where = _merge_where({"id": item_id}, access)
        items = await self._query_storage({"where": where}, context=context, info=info)
        if not items:
            logger.info("No accessible %s item %s for %s", self.key, item_id, gql_name)
            raise AccessDeniedError(
                data={"type": OPERATION_TYPES.get(operation or "read", "query"), "target": gql_name},
                internal_data={"itemId": item_id},
            )
        return items[0]

    async def get_access_controlled_items(
        self,
        ids: Sequence[Any],
        access: bool | Mapping[str, Any],
        *,
        context: Any = None,
        info: Any = None,
    ) -> list[dict[str, Any]]:
        """Fetch the items with the given ids that ``access`` lets through."""
        if not ids:
            return []
        unique_ids = _unique_ids(ids)

        if access is True or not access:
            where: dict[str, Any] = {"id_in": unique_ids}
        else:
            allowed = _unique_ids(
                i for i in [access.get("id"), *(access.get("id_in") or [])] if i is not None
            )
            if allowed:
                where = {"id_in": _intersection(unique_ids, allowed)}
            else:
                where = {"id_in": unique_ids}

            forbidden = _unique_ids(
                i for i in [access.get("id_not"), *(access.get("id_not_in") or [])] if i is not None
            )
            if forbidden:
                where["id_not_in"] = _intersection(unique_ids, forbidden)

            rest = {
                key: value
                for key, value in access.items()
                if key not in ("id", "id_in", "id_not", "id_not_in")
            }
            if rest:
                where = {"AND": [where, rest]}

        return await self._query_storage(
            {"where": where, "orderBy": [{"id": "asc"}]}, context=context, info=info
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_query(
        self,
        args: Mapping[str, Any],
        context: Any,
        gql_name: str | None = None,
        info: Any = None,
    ) -> list[dict[str, Any]]:
        access = await self.check_list_access(context, None, "read", gql_name=gql_name)
        return await self._items_query(_merge_args(args, access), context=context, info=info)

    async def list_query_meta(
        self,
        args: Mapping[str, Any],
        context: Any,
        gql_name: str | None = None,
        info: Any = None,
    ) -> QueryMeta:
        access = await self.check_list_access(context, None, "read", gql_name=gql_name)
        query_args = _merge_args(args, access)

        async def get_count() -> int:
            result = await self._items_query(query_args, meta=True, context=context, info=info)
            return result["count"]

        return QueryMeta(get_count=get_count)

    async def list_query_count(
        self,
        args: Mapping[str, Any],
        context: Any,
        gql_name: str | None = None,
        info: Any = None,
    ) -> int:
        access = await self.check_list_access(context, None, "read", gql_name=gql_name)
        result = await self._items_query(
            _merge_args(args, access), meta=True, context=context, info=info
        )
        return result["count"]

    async def item_query(
        self,
        args: Mapping[str, Any],
        context: Any,
        gql_name: str | None = None,
        info: Any = None,
    ) -> dict[str, Any]:
        item_id = (args.get("where") or {}).get("id")
        access = await self.check_list_access(
            context, None, "read", gql_name=gql_name, item_id=item_id
        )
        return await self.get_access_controlled_item(
            item_id, access, context=context, operation="read", gql_name=gql_name, info=info
        )

    def _query_descriptor(self, args: Mapping[str, Any]) -> dict[str, Any]:
        """Translate GraphQL list arguments into the storage query descriptor."""
        first = args.get("first")
        skip = args.get("skip") or 0
        if first is not None and first < 0:
            raise UserInputError("first must not be negative")
        if skip < 0:
            raise UserInputError("skip must not be negative")

        where = dict(args.get("where") or {})
        search = args.get("search")
        if search:
            if self.label_field not in self.fields_by_path:
                raise UserInputError(f"List '{self.key}' does not support search")
            search_clause = {f"{self.label_field}_contains_i": search}
            where = {"AND": [where, search_clause]} if where else search_clause

        order_by = [dict(clause) for clause in args.get("orderBy") or []]
        if not order_by:
            for value in args.get("sortBy") or []:
                path, _, direction = value.rpartition("_")
                order_by.append({path: direction.lower()})

        if self.max_results is not None:
            # One extra row is enough to detect the limit being exceeded
            cap = self.max_results + 1
            first = cap if first is None else min(first, cap)

        return {"where": where, "orderBy": order_by, "first": first, "skip": skip}

    async def _items_query(
        self,
        args: Mapping[str, Any],
        *,
        meta: bool = False,
        context: Any = None,
        info: Any = None,
    ) -> Any:
        query = self._query_descriptor(args)
        if meta:
            # Limits bound returned items, not counts
            query["first"] = args.get("first")
        result = await self._query_storage(query, meta=meta, context=context, info=info)
        if meta:
            return result

        if self.max_results is not None and len(result) > self.max_results:
            raise LimitsExceededError(self.key, "maxResults", self.max_results)

        max_total = getattr(context, "max_total_results", None)
        if hasattr(context, "total_results"):
            context.total_results += len(result)
            if max_total is not None and context.total_results > max_total:
                raise LimitsExceededError(self.key, "maxTotalResults", max_total)
        return result

    async def _query_storage(
        self,
        query: dict[str, Any],
        *,
        meta: bool = False,
        context: Any = None,
        info: Any = None,
    ) -> Any:
        return await self._storage_call(
            self.adapter.items_query, query, meta=meta, context=context, info=info
        )

    async def _storage_call(self, method: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            return await maybe_await(method(*args, **kwargs))
        except ListforgeError:
            raise
        except Exception as exc:
            logger.error("Storage adapter failed for list %s: %s", self.key, exc)
            raise StorageError(str(exc), internal_data={"list_key": self.key}) from exc

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _with_defaults(self, data: Mapping[str, Any], context: Any) -> dict[str, Any]:
        resolved = dict(data)
        for field in self.fields:
            if field.path not in resolved and field.has_default:
                resolved[field.path] = field.get_default_value(context=context, original_input=data)
        return resolved

    async def _create_single(self, data: Mapping[str, Any], context: Any) -> dict[str, Any]:
        ctx = HookContext(
            list_key=self.key,
            operation="create",
            context=context,
            resolved_data=self._with_defaults(data, context),
            original_input=data,
        )
        return await self.hook_pipeline.run_change(
            ctx, lambda resolved: self._storage_call(self.adapter.create, resolved)
        )

    async def _update_single(
        self, data: Mapping[str, Any], existing_item: dict[str, Any], context: Any
    ) -> dict[str, Any]:
        ctx = HookContext(
            list_key=self.key,
            operation="update",
            context=context,
            resolved_data=dict(data),
            existing_item=existing_item,
            original_input=data,
        )
        return await self.hook_pipeline.run_change(
            ctx,
            lambda resolved: self._storage_call(self.adapter.update, existing_item["id"], resolved),
        )

    async def _delete_single(self, existing_item: dict[str, Any], context: Any) -> dict[str, Any]:
        ctx = HookContext(
            list_key=self.key,
            operation="delete",
            context=context,
            existing_item=existing_item,
        )
        return await self.hook_pipeline.run_delete(
            ctx, lambda: self._storage_call(self.adapter.delete, existing_item["id"])
        )

    async def create_mutation(
        self, data: Mapping[str, Any], context: Any, info: Any = None
    ) -> dict[str, Any]:
        gql_name = self.gql_names.create_mutation_name
        await self.check_list_access(context, data, "create", gql_name=gql_name)
        await self.check_field_access(
            "create", [{"data": data, "existing_item": None}], context, gql_name=gql_name
        )
        return await self._create_single(data, context)

    async def create_many_mutation(
        self, data: Sequence[Mapping[str, Any]], context: Any, info: Any = None
    ) -> list[asyncio.Task]:
        """Create each item independently.

        Returns:
            One task per input, resolving to the created item or raising
            that item's error
        """
        gql_name = self.gql_names.create_many_mutation_name
        await self.check_list_access(context, data, "create", gql_name=gql_name)

        async def create_one(item_data: Mapping[str, Any]) -> dict[str, Any]:
            await self.check_field_access(
                "create", [{"data": item_data, "existing_item": None}], context, gql_name=gql_name
            )
            return await self._create_single(item_data, context)

        return [asyncio.create_task(create_one(entry.get("data") or {})) for entry in data]

    async def update_mutation(
        self, item_id: Any, data: Mapping[str, Any], context: Any, info: Any = None
    ) -> dict[str, Any]:
        gql_name = self.gql_names.update_mutation_name
        access = await self.check_list_access(
            context, data, "update", gql_name=gql_name, item_id=item_id
        )
        existing_item = await self.get_access_controlled_item(
            item_id, access, context=context, operation="update", gql_name=gql_name, info=info
        )
        await self.check_field_access(
            "update", [{"data": data, "existing_item": existing_item}], context, gql_name=gql_name
        )
        return await self._update_single(data, existing_item, context)

    def _many_targets(
        self, ids: Sequence[Any], existing_items: list[dict[str, Any]], gql_name: str
    ) -> list[dict[str, Any] | ListforgeError]:
        """Pair each requested id with its accessible item, or the error its entry reports.

        A missing or inaccessible id gets the same generic denial as a
        single-item mutation. Repeats of an id already requested fail.
        """
        existing_by_id = {id_key(item["id"]): item for item in existing_items}
        seen: set[str] = set()
        targets: list[dict[str, Any] | ListforgeError] = []
        for item_id in ids:
            key = id_key(item_id)
            if key in seen:
                targets.append(UserInputError(f"{gql_name} received id {item_id} more than once"))
            elif key in existing_by_id:
                targets.append(existing_by_id[key])
            else:
                logger.info("No accessible %s item %s for %s", self.key, item_id, gql_name)
                targets.append(
                    AccessDeniedError(
                        data={"type": "mutation", "target": gql_name},
                        internal_data={"itemId": item_id},
                    )
                )
            seen.add(key)
        return targets

    async def update_many_mutation(
        self, data: Sequence[Mapping[str, Any]], context: Any, info: Any = None
    ) -> list[asyncio.Task]:
        """Update each item independently.

        Returns:
            One task per input entry, in input order, resolving to the
            updated item or raising that entry's error
        """
        gql_name = self.gql_names.update_many_mutation_name
        ids = [entry["id"] for entry in data]
        access = await self.check_list_access(
            context, data, "update", gql_name=gql_name, item_ids=ids
        )
        existing_items = await self.get_access_controlled_items(
            ids, access, context=context, info=info
        )

        async def update_one(item_data: Mapping[str, Any], target: Any) -> dict[str, Any]:
            if isinstance(target, ListforgeError):
                raise target
            await self.check_field_access(
                "update",
                [{"data": item_data, "existing_item": target}],
                context,
                gql_name=gql_name,
            )
            return await self._update_single(item_data, target, context)

        targets = self._many_targets(ids, existing_items, gql_name)
        return [
            asyncio.create_task(update_one(entry.get("data") or {}, target))
            for entry, target in zip(data, targets)
        ]

    async def delete_mutation(self, item_id: Any, context: Any, info: Any = None) -> dict[str, Any]:
        gql_name = self.gql_names.delete_mutation_name
        access = await self.check_list_access(
            context, None, "delete", gql_name=gql_name, item_id=item_id
        )
        existing_item = await self.get_access_controlled_item(
            item_id, access, context=context, operation="delete", gql_name=gql_name, info=info
        )
        return await self._delete_single(existing_item, context)

    async def delete_many_mutation(
        self, ids: Sequence[Any], context: Any, info: Any = None
    ) -> list[asyncio.Task]:
        """Delete each item independently; one task per requested id."""
        gql_name = self.gql_names.delete_many_mutation_name
        access = await self.check_list_access(
            context, None, "delete", gql_name=gql_name, item_ids=list(ids)
        )
        existing_items = await self.get_access_controlled_items(
            ids, access, context=context, info=info
        )

        async def delete_one(target: Any) -> dict[str, Any]:
            if isinstance(target, ListforgeError):
                raise target
            return await self._delete_single(target, context)

        return [
            asyncio.create_task(delete_one(target))
            for target in self._many_targets(ids, existing_items, gql_name)
        ]


def _unique_ids(ids) -> list[Any]:
    seen: set[str] = set()
    result = []
    for item_id in ids:
        if id_key(item_id) not in seen:
            seen.add(id_key(item_id))
            result.append(item_id)
    return result


def _intersection(ids: list[Any], other: list[Any]) -> list[Any]:
    other_keys = {id_key(i) for i in other}
    return [i for i in ids if id_key(i) in other_keys]


def _merge_where(where: dict[str, Any], access: bool | Mapping[str, Any]) -> dict[str, Any]:
    if not isinstance(access, Mapping) or not access:
        return where
    if not where:
        return dict(access)
    return {"AND": [where, dict(access)]}


def _merge_args(args: Mapping[str, Any], access: bool | Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(args)
    merged["where"] = _merge_where(dict(args.get("where") or {}), access)
    return merged
