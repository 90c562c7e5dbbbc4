"""Built-in field types.

Every field type derives from Implementation and is registered by name in
listforge.core.types.FIELD_TYPES so YAML metadata can refer to it.
"""

from listforge.fields.auto_increment import AutoIncrement
from listforge.fields.base import Implementation
from listforge.fields.checkbox import Checkbox
from listforge.fields.integer import Integer
from listforge.fields.relationship import Relationship
from listforge.fields.text import Text

__all__ = [
    "AutoIncrement",
    "Checkbox",
    "Implementation",
    "Integer",
    "Relationship",
    "Text",
]
