"""Hook registry for ListForge.

Lists may declare hooks as callables, or by name when their definition
comes from YAML metadata. Named hooks must be registered first, typically
with the @hook decorator at application startup.
"""

from collections.abc import Callable, Mapping
from typing import Any

from listforge.hooks.types import CAMEL_CASE_STAGES, HOOK_STAGES

# Hook signature: (HookContext) -> Any, sync or async
HookFn = Callable[..., Any]


class HookRegistry:
    """Registry for named hook implementations.

    Example:
        @hook("slugifyTitle")
        async def slugify_title(ctx: HookContext) -> dict:
            ...
    """

    _hooks: dict[str, HookFn] = {}

    @classmethod
    def register(cls, name: str, hook_fn: HookFn) -> None:
        """Register a hook function by name.

        Idempotent: re-registering the same name is a no-op.
        """
        if name in cls._hooks:
            return
        cls._hooks[name] = hook_fn

    @classmethod
    def get(cls, name: str) -> HookFn:
        """Get a registered hook function by name.

        Raises:
            ValueError: If hook is not registered
        """
        if name not in cls._hooks:
            raise ValueError(
                f"Hook '{name}' is not registered. "
                "Hooks must be explicitly registered at application startup."
            )
        return cls._hooks[name]

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._hooks

    @classmethod
    def list_registered(cls) -> list[str]:
        return sorted(cls._hooks.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._hooks.clear()


def hook(name: str) -> Callable[[HookFn], HookFn]:
    """Decorator to register a hook function.

    Usage:
        @hook("auditDelete")
        async def audit_delete(ctx: HookContext) -> None:
            ...
    """

    def decorator(fn: HookFn) -> HookFn:
        HookRegistry.register(name, fn)
        return fn

    return decorator


def resolve_hooks(hooks: Mapping[str, Any] | None, owner: str) -> dict[str, HookFn]:
    """Normalize a hooks config into stage -> callable.

    Accepts snake_case or camelCase stage names, and callables or
    registered hook names as values.

    Raises:
        ValueError: On an unknown stage or an unregistered hook name
        TypeError: On a value that is neither callable nor a string
    """
    resolved: dict[str, HookFn] = {}
    for stage, value in (hooks or {}).items():
        stage_name = CAMEL_CASE_STAGES.get(stage, stage)
        if stage_name not in HOOK_STAGES:
            raise ValueError(
                f"{owner}.hooks has unknown stage '{stage}'. "
                f"Expected one of: {', '.join(HOOK_STAGES)}"
            )
        if isinstance(value, str):
            value = HookRegistry.get(value)
        if not callable(value):
            raise TypeError(f"{owner}.hooks.{stage_name} must be callable")
        resolved[stage_name] = value
    return resolved
