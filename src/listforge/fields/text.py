"""Text field: a plain string with the full string filter set."""

from listforge.fields.base import STRING_FILTER_SUFFIXES, Implementation


class Text(Implementation):
    gql_type = "String"
    is_orderable = True

    def gql_query_input_fields(self) -> list[str]:
        return [
            f"{self.path}{suffix}: String" for suffix in STRING_FILTER_SUFFIXES
        ] + self.in_input_fields()
