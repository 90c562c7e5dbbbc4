"""StorageAdapter Protocol: the interface every list storage backend implements."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ListStorageAdapter(Protocol):
    """Storage for the items of one list.

    ``args`` passed to items_query carries the query descriptor built by
    the List: ``where`` (the filter operators of the list's where input),
    ``orderBy`` (a sequence of {path: "asc" | "desc"}), ``first`` and
    ``skip``. With ``meta=True`` the adapter returns {"count": n} instead
    of the items.
    """

    key: str

    def add_field(self, field: Any) -> None: ...

    async def items_query(
        self,
        args: dict[str, Any],
        *,
        meta: bool = False,
        context: Any = None,
        info: Any = None,
    ) -> list[dict[str, Any]] | dict[str, int]: ...

    async def create(self, data: dict[str, Any]) -> dict[str, Any]: ...

    async def update(self, id: Any, data: dict[str, Any]) -> dict[str, Any]: ...

    async def delete(self, id: Any) -> Any: ...


@runtime_checkable
class StorageAdapter(Protocol):
    """Process-wide storage; hands out one ListStorageAdapter per list."""

    name: str

    def new_list_adapter(self, key: str) -> ListStorageAdapter: ...
