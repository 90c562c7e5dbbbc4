"""ListForge access control.

Three escalating checks guard every operation:
- list level: may this caller perform the operation at all?
- field level: may this caller read/write each referenced field?
- item level: which of the fetched items still match the caller's filter?

Usage:
    from listforge.access import RequestContext

    context = RequestContext(authed_item={"id": 1}, authed_list_key="User")
    await some_list.list_query({"where": {}}, context)
"""

from listforge.access.control import (
    AccessContext,
    RequestContext,
    validate_field_access,
    validate_list_access,
)
from listforge.access.types import (
    FIELD_OPERATIONS,
    LIST_OPERATIONS,
    OPERATION_TYPES,
    AccessArgs,
    AccessRule,
    AccessSpec,
    DynamicAccess,
    StaticAccess,
    parse_access,
    parse_field_access,
    parse_list_access,
)

__all__ = [
    "AccessArgs",
    "AccessContext",
    "AccessRule",
    "AccessSpec",
    "DynamicAccess",
    "FIELD_OPERATIONS",
    "LIST_OPERATIONS",
    "OPERATION_TYPES",
    "RequestContext",
    "StaticAccess",
    "parse_access",
    "parse_field_access",
    "parse_list_access",
    "validate_field_access",
    "validate_list_access",
]
