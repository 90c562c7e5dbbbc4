"""Auto-increment id field.

Storage assigns the value, so the field never appears in create or
update inputs.
"""

from listforge.fields.base import Implementation


class AutoIncrement(Implementation):
    gql_type = "ID"
    is_orderable = True

    def gql_create_input_fields(self) -> list[str]:
        return []

    def gql_update_input_fields(self) -> list[str]:
        return []
