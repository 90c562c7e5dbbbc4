"""ListForge list lifecycle hook system.

Provides extension points around every write, run in this order:
- resolveInput: turn raw input into the data to persist
- validateInput: reject bad data with add_validation_error()
- beforeChange: after validation, before persist
- afterChange: after persist (the write is not rolled back on failure)
- validateDelete / beforeDelete / afterDelete: the same for deletes

Usage:
    from listforge.hooks import hook, HookContext

    @hook("slugifyTitle")
    async def slugify_title(ctx: HookContext) -> dict:
        data = dict(ctx.resolved_data)
        data["slug"] = data["title"].lower().replace(" ", "-")
        return data
"""

from listforge.hooks.registry import HookRegistry, hook, resolve_hooks
from listforge.hooks.service import HookPipeline
from listforge.hooks.types import (
    CAMEL_CASE_STAGES,
    CHANGE_STAGES,
    DELETE_STAGES,
    HOOK_STAGES,
    HookContext,
)

VALID_HOOK_STAGES = tuple(CAMEL_CASE_STAGES)

__all__ = [
    "CHANGE_STAGES",
    "DELETE_STAGES",
    "HOOK_STAGES",
    "HookContext",
    "HookPipeline",
    "HookRegistry",
    "VALID_HOOK_STAGES",
    "hook",
    "resolve_hooks",
]
