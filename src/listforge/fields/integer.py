"""Integer field."""

from listforge.fields.base import NUMERIC_FILTER_SUFFIXES, Implementation


class Integer(Implementation):
    gql_type = "Int"
    is_orderable = True

    def gql_query_input_fields(self) -> list[str]:
        return [
            f"{self.path}{suffix}: Int" for suffix in NUMERIC_FILTER_SUFFIXES
        ] + self.in_input_fields()
