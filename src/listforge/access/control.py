"""Per-request access control evaluation.

The List runtime never evaluates an AccessSpec directly. It asks the
request context, which knows who is acting, through three methods:

- get_list_access_control_for_user
- get_field_access_control_for_user
- get_auth_access_control_for_user

RequestContext is the stock implementation. Anything exposing the same
methods (sync or async) can be passed as the context instead.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from listforge.access.types import (
    AccessArgs,
    AccessSpec,
    StaticAccess,
)
from listforge.core.utils import maybe_await
from listforge.errors import ListforgeError, ListforgeSystemError

logger = logging.getLogger(__name__)


class AccessContext(Protocol):
    """What the List runtime needs from a request context."""

    def get_list_access_control_for_user(
        self,
        access: AccessSpec,
        list_key: str,
        original_input: Any,
        operation: str,
        **extra: Any,
    ) -> Any: ...

    def get_field_access_control_for_user(
        self,
        access: AccessSpec,
        list_key: str,
        field_path: str,
        original_input: Any,
        existing_item: dict[str, Any] | None,
        operation: str,
        **extra: Any,
    ) -> Any: ...

    def get_auth_access_control_for_user(
        self,
        access: AccessSpec,
        list_key: str,
        **extra: Any,
    ) -> Any: ...


def _owner(args: AccessArgs) -> str:
    return f"{args.list_key}.{args.field_path}" if args.field_path else args.list_key


async def _evaluate(spec: AccessSpec, args: AccessArgs) -> Any:
    rule = spec[args.operation]
    if isinstance(rule, StaticAccess):
        return rule.granted
    try:
        return await maybe_await(rule.predicate(args))
    except ListforgeError:
        raise
    except Exception as exc:
        logger.error("%s.access.%s() failed: %s", _owner(args), args.operation, exc)
        raise ListforgeSystemError(
            [str(exc)],
            internal_data={"owner": _owner(args), "operation": args.operation},
        ) from exc


async def validate_list_access(spec: AccessSpec, args: AccessArgs) -> bool | dict[str, Any]:
    """Evaluate list-level access.

    Returns:
        A bool, or (for read/update/delete) a where mapping restricting
        which items the caller may see.

    Raises:
        ListforgeSystemError: If a predicate raises, returns anything else,
            or returns a mapping for create or auth
    """
    result = await _evaluate(spec, args)
    if isinstance(result, bool):
        return result
    if isinstance(result, Mapping):
        if args.operation in ("create", "auth"):
            raise ListforgeSystemError(
                [
                    f"Expected a boolean from {args.list_key}.access.{args.operation}(), "
                    f"got a mapping. Only read, update and delete accept a where filter."
                ]
            )
        return dict(result)
    raise ListforgeSystemError(
        [
            f"{args.list_key}.access.{args.operation}() must return a boolean or a "
            f"where mapping, got {type(result).__name__}"
        ]
    )


async def validate_field_access(spec: AccessSpec, args: AccessArgs) -> bool:
    """Evaluate field-level access. Field predicates must return a boolean."""
    if args.operation not in spec.rules:
        return True
    result = await _evaluate(spec, args)
    if not isinstance(result, bool):
        raise ListforgeSystemError(
            [
                f"{_owner(args)}.access.{args.operation}() must "
                f"return a boolean, got {type(result).__name__}"
            ]
        )
    return result


@dataclass
class RequestContext:
    """Request-scoped state handed to every resolver.

    Attributes:
        authed_item: The authenticated item (populated by the auth subsystem)
        authed_list_key: List key of the authenticated item
        max_total_results: Upper bound on items returned across one request
        total_results: Running count of items returned so far
        state: Free-form per-request values for hooks and predicates
    """

    authed_item: dict[str, Any] | None = None
    authed_list_key: str | None = None
    max_total_results: int | None = None
    total_results: int = 0
    state: dict[str, Any] = field(default_factory=dict)

    @property
    def authentication(self) -> dict[str, Any]:
        return {"item": self.authed_item, "list_key": self.authed_list_key}

    async def get_list_access_control_for_user(
        self,
        access: AccessSpec,
        list_key: str,
        original_input: Any,
        operation: str,
        *,
        gql_name: str | None = None,
        item_id: Any = None,
        item_ids: list[Any] | None = None,
        **_: Any,
    ) -> bool | dict[str, Any]:
        return await validate_list_access(
            access,
            AccessArgs(
                operation=operation,
                list_key=list_key,
                authentication=self.authentication,
                original_input=original_input,
                context=self,
                gql_name=gql_name,
                item_id=item_id,
                item_ids=item_ids,
            ),
        )

    async def get_field_access_control_for_user(
        self,
        access: AccessSpec,
        list_key: str,
        field_path: str,
        original_input: Any,
        existing_item: dict[str, Any] | None,
        operation: str,
        *,
        gql_name: str | None = None,
        item_id: Any = None,
        **_: Any,
    ) -> bool:
        return await validate_field_access(
            access,
            AccessArgs(
                operation=operation,
                list_key=list_key,
                authentication=self.authentication,
                original_input=original_input,
                context=self,
                gql_name=gql_name,
                field_path=field_path,
                existing_item=existing_item,
                item_id=item_id,
            ),
        )

    async def get_auth_access_control_for_user(
        self,
        access: AccessSpec,
        list_key: str,
        *,
        gql_name: str | None = None,
        **_: Any,
    ) -> bool:
        result = await validate_list_access(
            access,
            AccessArgs(
                operation="auth",
                list_key=list_key,
                authentication=self.authentication,
                context=self,
                gql_name=gql_name,
            ),
        )
        return bool(result)
