"""Lists - the runtime for one entity of the content model."""

from listforge.lists.list import List, QueryMeta
from listforge.lists.names import GqlNames, derive_gql_names

__all__ = ["GqlNames", "List", "QueryMeta", "derive_gql_names"]
