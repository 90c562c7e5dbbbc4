"""Field type registry: type name -> implementation class."""

from listforge.fields import AutoIncrement, Checkbox, Implementation, Integer, Relationship, Text

# Built-in field types, keyed by the name used in list metadata
FIELD_TYPES: dict[str, type[Implementation]] = {
    "ID": AutoIncrement,
    "AutoIncrement": AutoIncrement,
    "Text": Text,
    "Integer": Integer,
    "Checkbox": Checkbox,
    "Relationship": Relationship,
}


def get_field_type(type_spec: str | type) -> type:
    """Resolve a field config's ``type`` to an implementation class.

    Accepts a class directly, or the name of a registered type.

    Raises:
        ValueError: If the name is not registered or the value is neither
    """
    if isinstance(type_spec, type):
        return type_spec
    if isinstance(type_spec, str) and type_spec in FIELD_TYPES:
        return FIELD_TYPES[type_spec]
    raise ValueError(
        f"Unknown field type {type_spec!r}. "
        f"Expected a field class or one of: {', '.join(FIELD_TYPES)}"
    )


def register_field_type(name: str, implementation: type[Implementation]) -> None:
    """Make a custom field type available to metadata by name."""
    FIELD_TYPES[name] = implementation
