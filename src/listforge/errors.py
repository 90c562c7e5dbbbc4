"""Error types raised by the List runtime.

Every error is a ``GraphQLError`` so that executing an operation through
graphql-core reports a stable ``extensions.code``. Each error carries:

- data: client-visible structured detail
- internal_data: diagnostic context for logs, never serialized to clients
"""

from typing import Any

from graphql import GraphQLError


def _listed(messages: list[str]) -> str:
    return "\n".join(f"  - {m}" for m in messages)


class ListforgeError(GraphQLError):
    """Base class for all errors surfaced to GraphQL clients."""

    code = "INTERNAL_SERVER_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        *,
        data: dict[str, Any] | None = None,
        internal_data: dict[str, Any] | None = None,
    ):
        self.data = data or {}
        self.internal_data = internal_data or {}
        super().__init__(
            message or self.default_message,
            extensions=self.client_extensions(),
        )

    def client_extensions(self) -> dict[str, Any]:
        return {"code": self.code}


class AccessDeniedError(ListforgeError):
    """List, field or item level authorization failure.

    The message is deliberately generic. Field restrictions are the only
    detail a client ever sees (restrictedFields, target, type).
    """

    code = "ACCESS_DENIED"
    default_message = "You do not have access to this resource"

    def client_extensions(self) -> dict[str, Any]:
        extensions = super().client_extensions()
        if "restrictedFields" in self.data:
            extensions["data"] = dict(self.data)
        return extensions


class ValidationFailureError(ListforgeError):
    """One or more hook or required-field validation messages.

    ``errors`` groups the messages by field path (the list key for
    list-level hooks) and is reported to clients as ``data.errors``.
    """

    code = "VALIDATION_ERROR"

    def __init__(
        self,
        messages: list[str],
        errors: dict[str, list[str]] | None = None,
        **kwargs: Any,
    ):
        self.messages = list(messages)
        self.errors = {path: list(found) for path, found in (errors or {}).items()}
        super().__init__(
            f"You provided invalid data for this operation.\n{_listed(self.messages)}",
            **kwargs,
        )

    def client_extensions(self) -> dict[str, Any]:
        extensions = super().client_extensions()
        if self.errors:
            extensions["data"] = {"errors": self.errors}
        return extensions


class RelationshipError(ListforgeError):
    """A relationship input referenced an item that cannot be connected."""

    code = "RELATIONSHIP_ERROR"

    def __init__(self, messages: list[str], **kwargs: Any):
        self.messages = list(messages)
        super().__init__(f"Relationship error:\n{_listed(self.messages)}", **kwargs)


class ListforgeSystemError(ListforgeError):
    """Unexpected internal failure, e.g. a hook returning the wrong shape."""

    code = "SYSTEM_ERROR"

    def __init__(self, messages: list[str], **kwargs: Any):
        self.messages = list(messages)
        super().__init__(f"System error:\n{_listed(self.messages)}", **kwargs)


class StorageError(ListforgeError):
    """An exception raised by the storage adapter."""

    code = "STORAGE_ERROR"

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(f"Storage error: {message}", **kwargs)


class LimitsExceededError(ListforgeError):
    """A query returned more items than the configured limits allow."""

    code = "LIMITS_EXCEEDED"

    def __init__(self, list_key: str, limit_type: str, limit: int, **kwargs: Any):
        self.list_key = list_key
        self.limit_type = limit_type
        self.limit = limit
        super().__init__(
            f"Your request exceeded server limits. "
            f"'{list_key}' has {limit_type} limit of {limit}",
            **kwargs,
        )


class UserInputError(ListforgeError):
    """Arguments that are well-typed but semantically invalid."""

    code = "USER_INPUT_ERROR"
    default_message = "Invalid input"


__all__ = [
    "AccessDeniedError",
    "LimitsExceededError",
    "ListforgeError",
    "ListforgeSystemError",
    "RelationshipError",
    "StorageError",
    "UserInputError",
    "ValidationFailureError",
]
