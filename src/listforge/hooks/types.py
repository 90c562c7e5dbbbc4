"""Hook system types for ListForge.

Defines the data structures for the list lifecycle hook pipeline:
- CHANGE_STAGES / DELETE_STAGES: the ordered hook stages
- HookContext: the argument bag passed to every hook
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any

CHANGE_STAGES = ("resolve_input", "validate_input", "before_change", "after_change")
DELETE_STAGES = ("validate_delete", "before_delete", "after_delete")
HOOK_STAGES = CHANGE_STAGES + DELETE_STAGES

# YAML metadata spells stages the way GraphQL clients do
CAMEL_CASE_STAGES = {
    "resolveInput": "resolve_input",
    "validateInput": "validate_input",
    "beforeChange": "before_change",
    "afterChange": "after_change",
    "validateDelete": "validate_delete",
    "beforeDelete": "before_delete",
    "afterDelete": "after_delete",
}


@dataclass
class HookContext:
    """Runtime state passed to every hook, defined or not.

    Attributes:
        list_key: Key of the list being operated on
        operation: "create", "update" or "delete"
        context: The request context
        resolved_data: Input after defaults and resolve_input (change path)
        existing_item: Item before the operation (update, delete)
        original_input: Input exactly as the caller supplied it
        updated_item: Item returned by storage (after_change only)
        field_path: Path of the field whose hook is running, None for list hooks
        validation_errors: (field path or list key, message) pairs collected
            by add_validation_error
    """

    list_key: str
    operation: str
    context: Any = None
    resolved_data: dict[str, Any] | None = None
    existing_item: dict[str, Any] | None = None
    original_input: Any = None
    updated_item: dict[str, Any] | None = None
    field_path: str | None = None
    validation_errors: list[tuple[str, str]] = field(default_factory=list)

    def add_validation_error(self, message: str) -> None:
        """Record a validation failure against the current field, or the list.

        The stage raises once all of its hooks have run.
        """
        self.validation_errors.append((self.field_path or self.list_key, message))

    def for_field(self, path: str) -> "HookContext":
        """A view of this context for one field's hook.

        The validation error list is shared, so messages added by field
        hooks are collected on the parent context.
        """
        return dataclasses.replace(self, field_path=path)
