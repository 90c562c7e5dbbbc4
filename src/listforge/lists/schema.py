"""GraphQL type-language fragments for one list.

Every function takes a List whose fields are initialised and returns SDL
strings. Which fragments exist depends only on the static view of access
(StaticAccess(False) hides a branch, anything else keeps it).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from listforge.core.utils import unique

if TYPE_CHECKING:
    from listforge.lists.list import List

QUERY_META_TYPE = "type _QueryMeta { count: Int }"
ORDER_DIRECTION_ENUM = "enum OrderDirection { asc desc }"

SORT_BY_DEPRECATION = "sortBy has been deprecated in favour of orderBy"
META_QUERY_DEPRECATION = (
    "This query will be removed in a future version. Please use {count_name} instead."
)


def block(kind: str, name: str, lines: list[str], doc: str | None = None) -> str:
    body = "\n".join(f"  {line}" for line in lines)
    header = f'""" {doc} """\n' if doc else ""
    return f"{header}{kind} {name} {{\n{body}\n}}"


def filter_fragment(lst: "List") -> list[str]:
    """Arguments shared by every query returning a collection of items."""
    names = lst.gql_names
    args = [f"where: {names.where_input_name}! = {{}}", "search: String"]
    if lst.sortable_fields():
        args += [
            f'sortBy: [{names.list_sort_name}!] @deprecated(reason: "{SORT_BY_DEPRECATION}")',
            f"orderBy: [{names.list_order_name}!]! = []",
        ]
    args += ["first: Int", "skip: Int! = 0"]
    return args


def output_type(lst: "List") -> str:
    lines = [line for f in lst.readable_fields() for line in f.gql_output_fields()]
    return block("type", lst.gql_names.output_type_name, lines, lst.schema_doc or "A ListForge list")


def where_input(lst: "List") -> str:
    name = lst.gql_names.where_input_name
    lines = [f"AND: [{name}]", f"OR: [{name}]"]
    lines += [line for f in lst.readable_fields() for line in f.gql_query_input_fields()]
    return block("input", name, lines)


def where_unique_input(lst: "List") -> str:
    return block("input", lst.gql_names.where_unique_input_name, ["id: ID!"])


def sort_types(lst: "List") -> list[str]:
    fields = lst.sortable_fields()
    if not fields:
        return []
    names = lst.gql_names
    values = [value for f in fields for value in (f"{f.path}_ASC", f"{f.path}_DESC")]
    order_lines = [f"{f.path}: OrderDirection" for f in fields]
    return [
        block("enum", names.list_sort_name, values),
        block("input", names.list_order_name, order_lines),
    ]


def gql_types(lst: "List") -> list[str]:
    """All types the list contributes, in a stable order."""
    if not lst.access.any_allowed():
        return []

    names = lst.gql_names
    aux = unique(t for f in lst.fields for t in f.get_gql_aux_types())
    types = aux + [output_type(lst), where_input(lst), where_unique_input(lst)]
    types += sort_types(lst)
    types.append(ORDER_DIRECTION_ENUM)

    if lst.emits("update"):
        types += [
            block("input", names.update_input_name, lst.input_fields("update")),
            block(
                "input",
                names.update_many_input_name,
                ["id: ID!", f"data: {names.update_input_name}"],
            ),
        ]
    if lst.emits("create"):
        types += [
            block("input", names.create_input_name, lst.input_fields("create")),
            block("input", names.create_many_input_name, [f"data: {names.create_input_name}"]),
        ]
    return types


def gql_queries(lst: "List") -> list[str]:
    if not lst.access.allows("read"):
        return []

    names = lst.gql_names
    args = "\n".join(filter_fragment(lst))
    output = names.output_type_name
    deprecation = META_QUERY_DEPRECATION.format(count_name=names.list_query_count_name)
    aux = [q for f in lst.fields for q in f.get_gql_aux_queries()]
    return aux + [
        f'""" Search for all {output} items which match the where clause. """\n'
        f"{names.list_query_name}({args}): [{output}!]",
        f'""" Search for the {output} item with the matching ID. """\n'
        f"{names.item_query_name}(where: {names.where_unique_input_name}!): {output}",
        f'""" Perform a meta-query on all {output} items which match the where clause. """\n'
        f"{names.list_query_meta_name}({args}): _QueryMeta "
        f'@deprecated(reason: "{deprecation}")',
        f"{names.list_query_count_name}(where: {names.where_input_name}! = {{}}): Int",
    ]


def gql_mutations(lst: "List") -> list[str]:
    names = lst.gql_names
    output = names.output_type_name
    mutations = []
    if lst.emits("create"):
        mutations += [
            f'""" Create a single {output} item. """\n'
            f"{names.create_mutation_name}(data: {names.create_input_name}): {output}",
            f'""" Create multiple {output} items. """\n'
            f"{names.create_many_mutation_name}(data: [{names.create_many_input_name}]): [{output}]",
        ]
    if lst.emits("update"):
        mutations += [
            f'""" Update a single {output} item by ID. """\n'
            f"{names.update_mutation_name}(id: ID! data: {names.update_input_name}): {output}",
            f'""" Update multiple {output} items by ID. """\n'
            f"{names.update_many_mutation_name}(data: [{names.update_many_input_name}]): [{output}]",
        ]
    if lst.emits("delete"):
        mutations += [
            f'""" Delete a single {output} item by ID. """\n'
            f"{names.delete_mutation_name}(id: ID!): {output}",
            f'""" Delete multiple {output} items by ID. """\n'
            f"{names.delete_many_mutation_name}(ids: [ID!]): [{output}]",
        ]
    return mutations
