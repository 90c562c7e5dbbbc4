"""List registry.

Owns every List of a process, lets lists find each other by key, and
turns their combined SDL and resolvers into an executable graphql-core
schema.

Usage:
    registry = ListRegistry()
    registry.create_list("Post", {"fields": {"title": {"type": "Text"}}})
    registry.init_lists()
    result = await registry.execute("{ allPosts { id title } }")
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from graphql import ExecutionResult, GraphQLObjectType, GraphQLSchema, build_schema, graphql

from listforge.access import RequestContext
from listforge.core.utils import unique
from listforge.lists import List
from listforge.lists.schema import QUERY_META_TYPE, block
from listforge.storage import MemoryAdapter

if TYPE_CHECKING:
    from listforge.config import ListforgeConfig

logger = logging.getLogger(__name__)


def _adapt(resolver):
    """(root, args, context, info) -> graphql-core's (root, info, **args)."""

    def resolve(root, info, **args):
        return resolver(root, args, info.context, info)

    return resolve


def _resolve_query_meta_count(meta, info):
    return meta.get_count()


class ListRegistry:
    """All lists of one schema."""

    def __init__(self, adapter: Any = None, *, max_total_results: int | None = None):
        self.adapter = adapter if adapter is not None else MemoryAdapter()
        self.max_total_results = max_total_results
        self.lists: dict[str, List] = {}
        self._schema: GraphQLSchema | None = None

    @classmethod
    def from_config(cls, config: "ListforgeConfig", adapter: Any = None) -> "ListRegistry":
        """Build and initialise a registry from the metadata directory."""
        from listforge.metadata.loader import MetadataLoader

        registry = cls(adapter, max_total_results=config.max_total_results)
        loader = MetadataLoader(config.metadata_path)
        for key, list_config in loader.load_lists().items():
            registry.create_list(key, list_config)
        registry.init_lists()
        return registry

    def create_list(self, key: str, config: Mapping[str, Any]) -> List:
        """Register a new list; its fields are initialised by init_lists()."""
        if key in self.lists:
            raise ValueError(f"List '{key}' is already registered")
        lst = List(key, config, get_list_by_key=self.get_list_by_key, adapter=self.adapter)
        self.lists[key] = lst
        self._schema = None
        return lst

    def get_list_by_key(self, key: str) -> List | None:
        return self.lists.get(key)

    def init_lists(self) -> None:
        """Initialise fields of every list not yet initialised.

        Runs after all lists are registered so relationships can refer to
        lists declared later.
        """
        for lst in self.lists.values():
            if lst.hook_pipeline is None:
                lst.init_fields()
        for lst in self.lists.values():
            for field in lst.fields:
                ref = getattr(field, "ref", None)
                if ref is not None and ref not in self.lists:
                    raise ValueError(
                        f"{lst.key}.{field.path} refers to unknown list '{ref}'"
                    )

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def get_type_defs(self) -> str:
        """Combined SDL of every list, identical fragments emitted once."""
        lists = list(self.lists.values())
        types = unique(t for lst in lists for t in lst.get_gql_types())
        queries = [q for lst in lists for q in lst.get_gql_queries()]
        mutations = [m for lst in lists for m in lst.get_gql_mutations()]

        parts = [QUERY_META_TYPE, *types]
        if queries:
            parts.append(block("type", "Query", queries))
        if mutations:
            parts.append(block("type", "Mutation", mutations))
        return "\n\n".join(parts)

    def build_schema(self) -> GraphQLSchema:
        """Build the executable schema and bind every list's resolvers."""
        schema = build_schema(self.get_type_defs())

        for lst in self.lists.values():
            for type_name, resolvers in lst.gql_field_resolvers().items():
                self._bind(schema, type_name, resolvers)
            for type_name, resolvers in lst.gql_aux_field_resolvers().items():
                self._bind(schema, type_name, resolvers)
            self._bind(schema, "Query", lst.gql_query_resolvers())
            self._bind(schema, "Mutation", lst.gql_mutation_resolvers())

        meta_type = schema.get_type("_QueryMeta")
        meta_type.fields["count"].resolve = _resolve_query_meta_count

        logger.info("Built schema for %d lists", len(self.lists))
        return schema

    def _bind(self, schema: GraphQLSchema, type_name: str, resolvers: Mapping[str, Any]) -> None:
        gql_type = schema.get_type(type_name)
        if not isinstance(gql_type, GraphQLObjectType):
            return
        for name, resolver in resolvers.items():
            if name in gql_type.fields:
                gql_type.fields[name].resolve = _adapt(resolver)

    @property
    def schema(self) -> GraphQLSchema:
        if self._schema is None:
            self._schema = self.build_schema()
        return self._schema

    async def execute(
        self,
        source: str,
        context: Any = None,
        variables: dict[str, Any] | None = None,
        operation_name: str | None = None,
    ) -> ExecutionResult:
        """Execute a GraphQL operation in-process."""
        if context is None:
            context = RequestContext(max_total_results=self.max_total_results)
        return await graphql(
            self.schema,
            source,
            context_value=context,
            variable_values=variables,
            operation_name=operation_name,
        )
