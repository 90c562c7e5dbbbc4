"""Relationship field.

Stores the id (or list of ids, when ``many``) of items in another list.
The referenced list is looked up by key on every use rather than held,
so lists may reference each other in any order.

Input is a nested-operation object:

    {"connect": {"id": ...}, "disconnect": {"id": ...},
     "disconnectAll": true, "create": {...}}

For ``many`` relationships connect, disconnect and create take lists.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from listforge.core.utils import id_key
from listforge.errors import AccessDeniedError, RelationshipError
from listforge.fields.base import Implementation
from listforge.hooks.types import HookContext

if TYPE_CHECKING:
    from listforge.lists.list import List

logger = logging.getLogger(__name__)


class Relationship(Implementation):
    is_relationship = True
    extra_config_keys = frozenset({"ref", "many"})

    def __init__(self, path, config, *, list_key, get_list_by_key):
        super().__init__(path, config, list_key=list_key, get_list_by_key=get_list_by_key)
        ref = config.get("ref")
        if not ref or not isinstance(ref, str):
            raise ValueError(f"{list_key}.{path} is a Relationship and needs a 'ref' list key")
        self.ref = ref
        self.many = bool(config.get("many", False))

    @property
    def ref_list(self) -> "List":
        ref_list = self.get_list_by_key(self.ref)
        if ref_list is None:
            raise ValueError(
                f"Unable to resolve related list '{self.ref}' for {self.list_key}.{self.path}"
            )
        return ref_list

    @property
    def gql_type(self) -> str:
        return self.ref_list.gql_names.output_type_name

    def _ref_readable(self) -> bool:
        return self.ref_list.access.allows("read")

    # ------------------------------------------------------------------
    # GraphQL fragments
    # ------------------------------------------------------------------

    def gql_output_fields(self) -> list[str]:
        if not self._ref_readable():
            return []
        names = self.ref_list.gql_names
        if not self.many:
            return [self._described(f"{self.path}: {names.output_type_name}")]
        filter_args = "\n".join(self.ref_list.get_graphql_filter_fragment())
        return [
            self._described(f"{self.path}({filter_args}): [{names.output_type_name}!]!"),
            f"_{self.path}Meta({filter_args}): _QueryMeta",
            f"{self.path}Count(where: {names.where_input_name}! = {{}}): Int",
        ]

    def gql_query_input_fields(self) -> list[str]:
        if not self._ref_readable():
            return []
        where_input = self.ref_list.gql_names.where_input_name
        if self.many:
            return [
                f"{self.path}_every: {where_input}",
                f"{self.path}_some: {where_input}",
                f"{self.path}_none: {where_input}",
            ]
        return [f"{self.path}: {where_input}", f"{self.path}_is_null: Boolean"]

    def _relate_input_name(self) -> str:
        names = self.ref_list.gql_names
        if self.many:
            return names.relate_to_many_input_name
        return names.relate_to_one_input_name

    def gql_create_input_fields(self) -> list[str]:
        if not self._ref_readable():
            return []
        return [f"{self.path}: {self._relate_input_name()}"]

    def gql_update_input_fields(self) -> list[str]:
        return self.gql_create_input_fields()

    def get_gql_aux_types(self) -> list[str]:
        if not self._ref_readable():
            return []
        ref_list = self.ref_list
        names = ref_list.gql_names
        nested_create = ref_list.access.allows("create") and ref_list.input_fields("create")
        if self.many:
            create = f"create: [{names.create_input_name}]\n" if nested_create else ""
            return [
                f"input {names.relate_to_many_input_name} {{\n"
                f"{create}"
                f"connect: [{names.where_unique_input_name}]\n"
                f"disconnect: [{names.where_unique_input_name}]\n"
                f"disconnectAll: Boolean\n"
                f"}}"
            ]
        create = f"create: {names.create_input_name}\n" if nested_create else ""
        return [
            f"input {names.relate_to_one_input_name} {{\n"
            f"{create}"
            f"connect: {names.where_unique_input_name}\n"
            f"disconnect: {names.where_unique_input_name}\n"
            f"disconnectAll: Boolean\n"
            f"}}"
        ]

    # ------------------------------------------------------------------
    # Resolvers
    # ------------------------------------------------------------------

    def gql_output_field_resolvers(self) -> dict[str, Any]:
        path = self.path

        if not self.many:

            async def resolve_one(item, args, context, info):
                ref_id = item.get(path)
                if ref_id is None:
                    return None
                ref_list = self.ref_list
                items = await ref_list.list_query(
                    {"where": {"id": ref_id}},
                    context,
                    ref_list.gql_names.list_query_name,
                    info,
                )
                return items[0] if items else None

            return {path: resolve_one}

        def scoped(item, args):
            ids = list(item.get(path) or [])
            where = dict(args.get("where") or {})
            return {**args, "where": {"AND": [where, {"id_in": ids}]}}

        async def resolve_many(item, args, context, info):
            ref_list = self.ref_list
            return await ref_list.list_query(
                scoped(item, args), context, ref_list.gql_names.list_query_name, info
            )

        async def resolve_meta(item, args, context, info):
            ref_list = self.ref_list
            return await ref_list.list_query_meta(
                scoped(item, args), context, ref_list.gql_names.list_query_meta_name, info
            )

        async def resolve_count(item, args, context, info):
            ref_list = self.ref_list
            return await ref_list.list_query_count(
                scoped(item, args), context, ref_list.gql_names.list_query_count_name, info
            )

        return {
            path: resolve_many,
            f"_{path}Meta": resolve_meta,
            f"{path}Count": resolve_count,
        }

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    async def resolve_input(self, ctx: HookContext) -> Any:
        value = (ctx.resolved_data or {}).get(self.path)
        if value is None:
            return None
        if not isinstance(value, Mapping):
            raise RelationshipError(
                [
                    f"{self.list_key}.{self.path}<{self.ref}> expects an object with "
                    f"connect, disconnect, disconnectAll or create"
                ]
            )
        current = (ctx.existing_item or {}).get(self.path)
        if self.many:
            return await self._resolve_many(value, current, ctx)
        return await self._resolve_one(value, current, ctx)

    async def _resolve_one(self, value: Mapping[str, Any], current: Any, ctx: HookContext) -> Any:
        result = current
        if value.get("disconnectAll"):
            result = None
        elif value.get("disconnect") and current is not None:
            if id_key(value["disconnect"].get("id")) == id_key(current):
                result = None

        if value.get("create") is not None:
            (result,) = await self._create([value["create"]], ctx)
        elif value.get("connect") is not None:
            (result,) = await self._connect([value["connect"]], ctx)
        return result

    async def _resolve_many(
        self, value: Mapping[str, Any], current: Any, ctx: HookContext
    ) -> list[Any]:
        ids = [] if value.get("disconnectAll") else list(current or [])
        removed = {id_key(where.get("id")) for where in value.get("disconnect") or []}
        ids = [i for i in ids if id_key(i) not in removed]

        added = await self._connect(list(value.get("connect") or []), ctx)
        added += await self._create(list(value.get("create") or []), ctx)

        seen = {id_key(i) for i in ids}
        for ref_id in added:
            if id_key(ref_id) not in seen:
                seen.add(id_key(ref_id))
                ids.append(ref_id)
        return ids

    def _failure(self, operation: str, ids: list[Any]) -> RelationshipError:
        return RelationshipError(
            [f"Unable to {operation} a {self.list_key}.{self.path}<{self.ref}>"],
            internal_data={"ref": self.ref, "ids": ids},
        )

    async def _connect(self, wheres: list[Mapping[str, Any]], ctx: HookContext) -> list[Any]:
        if not wheres:
            return []
        ref_list = self.ref_list
        gql_name = ref_list.gql_names.item_query_name
        ids = [where.get("id") for where in wheres]
        try:
            access = await ref_list.check_list_access(ctx.context, None, "read", gql_name=gql_name)
            items = [
                await ref_list.get_access_controlled_item(
                    ref_id, access, context=ctx.context, operation="read", gql_name=gql_name
                )
                for ref_id in ids
            ]
        except AccessDeniedError as exc:
            logger.info("Rejected connect on %s.%s to %s", self.list_key, self.path, ids)
            raise self._failure("connect", ids) from exc
        return [item["id"] for item in items]

    async def _create(self, inputs: list[Mapping[str, Any]], ctx: HookContext) -> list[Any]:
        created = []
        for data in inputs:
            try:
                item = await self.ref_list.create_mutation(dict(data), ctx.context)
            except AccessDeniedError as exc:
                raise self._failure("create", []) from exc
            created.append(item["id"])
        return created
