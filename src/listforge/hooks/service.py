"""Hook pipeline for ListForge.

Runs the lifecycle stages around a single item's write. Within each stage
field-level hooks run first, in field declaration order (field-type hook,
then the field's configured hook), and the list-level hook runs last.

Change path: resolve_input -> validate_input -> before_change -> persist -> after_change
Delete path: validate_delete -> before_delete -> remove -> after_delete

A failing hook aborts the remaining stages. A hook raising anything other
than a ListforgeError is reported as a ListforgeSystemError. Persistence is not
transactional with hooks: a failure in after_change/after_delete is
propagated but the write stands.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from listforge.core.utils import maybe_await
from listforge.errors import ListforgeError, ListforgeSystemError, ValidationFailureError
from listforge.hooks.registry import HookFn
from listforge.hooks.types import HookContext

if TYPE_CHECKING:
    from listforge.fields.base import Implementation

logger = logging.getLogger(__name__)


class HookPipeline:
    """Orchestrates hook execution for one list."""

    def __init__(
        self,
        list_key: str,
        fields: Sequence["Implementation"],
        hooks: Mapping[str, HookFn],
    ):
        self.list_key = list_key
        self.fields = list(fields)
        self.hooks = dict(hooks)

    def _fields_in(self, data: Mapping[str, Any] | None) -> list["Implementation"]:
        data = data or {}
        return [f for f in self.fields if f.path in data]

    # ------------------------------------------------------------------
    # Change path
    # ------------------------------------------------------------------

    async def resolve_input(self, ctx: HookContext) -> dict[str, Any]:
        """Turn raw input into resolved values.

        Field types resolve the fields present in the data; configured
        field hooks may compute any field; the list hook sees the result
        and must return the full mapping.
        """
        resolved = dict(ctx.resolved_data or {})

        for f in self._fields_in(ctx.resolved_data):
            resolved[f.path] = await self._call(
                "resolve_input", f.resolve_input, ctx.for_field(f.path)
            )

        field_ctx_data = dict(resolved)
        for f in self.fields:
            field_hook = f.hooks.get("resolve_input")
            if field_hook is None:
                continue
            sub_ctx = ctx.for_field(f.path)
            sub_ctx.resolved_data = field_ctx_data
            resolved[f.path] = await self._call("resolve_input", field_hook, sub_ctx)

        list_hook = self.hooks.get("resolve_input")
        if list_hook is not None:
            ctx.resolved_data = resolved
            result = await self._call("resolve_input", list_hook, ctx)
            if not isinstance(result, Mapping):
                raise ListforgeSystemError(
                    [
                        f"Expected {self.list_key}.hooks.resolve_input() to return "
                        f"a mapping, but got {type(result).__name__}: {result!r}"
                    ]
                )
            resolved = dict(result)

        ctx.resolved_data = resolved
        return resolved

    async def validate_input(self, ctx: HookContext) -> None:
        data = ctx.resolved_data or {}
        missing = [
            f
            for f in self.fields
            if f.is_required
            and not f.is_relationship
            and (
                (ctx.operation == "create" and data.get(f.path) is None)
                or (ctx.operation == "update" and f.path in data and data[f.path] is None)
            )
        ]
        if missing:
            messages = {f.path: f'Required field "{f.path}" is null or undefined.' for f in missing}
            raise ValidationFailureError(
                list(messages.values()),
                {path: [message] for path, message in messages.items()},
                internal_data={"list_key": self.list_key, "operation": ctx.operation},
            )
        await self._validate_stage("validate_input", ctx, self._fields_in(data))

    async def before_change(self, ctx: HookContext) -> None:
        await self._run_stage("before_change", ctx, self._fields_in(ctx.resolved_data))

    async def after_change(self, ctx: HookContext) -> None:
        await self._run_stage("after_change", ctx, self._fields_in(ctx.resolved_data))

    async def run_change(
        self,
        ctx: HookContext,
        persist: Callable[[dict[str, Any]], Awaitable[dict[str, Any]]],
    ) -> dict[str, Any]:
        """Run the full change pipeline around ``persist``.

        Returns:
            The item returned by storage.
        """
        await self.resolve_input(ctx)
        await self.validate_input(ctx)
        await self.before_change(ctx)
        ctx.updated_item = await persist(ctx.resolved_data or {})
        try:
            await self.after_change(ctx)
        except Exception:
            logger.error(
                "after_change hook failed for %s (%s); the write was not rolled back",
                self.list_key,
                ctx.operation,
            )
            raise
        return ctx.updated_item

    # ------------------------------------------------------------------
    # Delete path
    # ------------------------------------------------------------------

    async def validate_delete(self, ctx: HookContext) -> None:
        await self._validate_stage("validate_delete", ctx, self.fields)

    async def before_delete(self, ctx: HookContext) -> None:
        await self._run_stage("before_delete", ctx, self.fields)

    async def after_delete(self, ctx: HookContext) -> None:
        await self._run_stage("after_delete", ctx, self.fields)

    async def run_delete(
        self,
        ctx: HookContext,
        remove: Callable[[], Awaitable[Any]],
    ) -> dict[str, Any] | None:
        """Run the full delete pipeline around ``remove``.

        Returns:
            The item as it was before deletion.
        """
        await self.validate_delete(ctx)
        await self.before_delete(ctx)
        await remove()
        try:
            await self.after_delete(ctx)
        except Exception:
            logger.error(
                "after_delete hook failed for %s; the item was already removed",
                self.list_key,
            )
            raise
        return ctx.existing_item

    # ------------------------------------------------------------------
    # Stage runners
    # ------------------------------------------------------------------

    async def _call(self, stage: str, hook: Callable[[HookContext], Any], ctx: HookContext) -> Any:
        """Run one hook. Anything other than a ListforgeError becomes a SYSTEM_ERROR."""
        try:
            return await maybe_await(hook(ctx))
        except ListforgeError:
            raise
        except Exception as exc:
            owner = f"{self.list_key}.{ctx.field_path}" if ctx.field_path else self.list_key
            logger.error("%s hook failed for %s: %s", stage, owner, exc)
            raise ListforgeSystemError(
                [str(exc)],
                internal_data={
                    "list_key": self.list_key,
                    "field_path": ctx.field_path,
                    "stage": stage,
                    "operation": ctx.operation,
                },
            ) from exc

    async def _run_field_hooks(
        self, stage: str, ctx: HookContext, fields: Sequence["Implementation"]
    ) -> None:
        for f in fields:
            await self._call(stage, getattr(f, stage), ctx.for_field(f.path))
        for f in fields:
            field_hook = f.hooks.get(stage)
            if field_hook is not None:
                await self._call(stage, field_hook, ctx.for_field(f.path))

    async def _run_stage(
        self, stage: str, ctx: HookContext, fields: Sequence["Implementation"]
    ) -> None:
        await self._run_field_hooks(stage, ctx, fields)
        list_hook = self.hooks.get(stage)
        if list_hook is not None:
            await self._call(stage, list_hook, ctx)

    async def _validate_stage(
        self, stage: str, ctx: HookContext, fields: Sequence["Implementation"]
    ) -> None:
        ctx.validation_errors = []
        await self._run_field_hooks(stage, ctx, fields)
        self._raise_if_invalid(ctx)

        list_hook = self.hooks.get(stage)
        if list_hook is not None:
            await self._call(stage, list_hook, ctx)
            self._raise_if_invalid(ctx)

    def _raise_if_invalid(self, ctx: HookContext) -> None:
        if ctx.validation_errors:
            errors: dict[str, list[str]] = {}
            for path, message in ctx.validation_errors:
                errors.setdefault(path, []).append(message)
            messages = [message for _, message in ctx.validation_errors]
            ctx.validation_errors = []
            raise ValidationFailureError(
                messages,
                errors,
                internal_data={"list_key": self.list_key, "operation": ctx.operation},
            )
