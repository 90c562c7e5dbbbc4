"""Checkbox field: a nullable boolean."""

from listforge.fields.base import Implementation


class Checkbox(Implementation):
    gql_type = "Boolean"
    is_orderable = True

    def gql_query_input_fields(self) -> list[str]:
        return self.equality_input_fields()
