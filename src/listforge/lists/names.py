"""Name derivation for lists: labels, inflection and GraphQL names."""

import re
from dataclasses import asdict, dataclass
from typing import Any

UNCOUNTABLE = {
    "equipment", "information", "rice", "money", "species", "series",
    "fish", "sheep", "deer", "news", "data", "media", "metadata", "feedback",
}

IRREGULAR = {
    "person": "people",
    "man": "men",
    "woman": "women",
    "child": "children",
    "mouse": "mice",
    "goose": "geese",
    "tooth": "teeth",
    "foot": "feet",
    "ox": "oxen",
}
IRREGULAR_PLURALS = {plural: singular for singular, plural in IRREGULAR.items()}

# (pattern, replacement), first match wins
PLURAL_RULES = [
    (re.compile(r"(quiz)$", re.I), r"\1zes"),
    (re.compile(r"(matr|vert|ind)(?:ix|ex)$", re.I), r"\1ices"),
    (re.compile(r"(x|ch|ss|sh|zz)$", re.I), r"\1es"),
    (re.compile(r"([^aeiouy]|qu)y$", re.I), r"\1ies"),
    (re.compile(r"(?:([^f])fe|([lr])f)$", re.I), r"\1\2ves"),
    (re.compile(r"(bus|alias|status|campus)$", re.I), r"\1es"),
    (re.compile(r"(octop|vir)us$", re.I), r"\1i"),
    (re.compile(r"(ax|test)is$", re.I), r"\1es"),
    (re.compile(r"s$", re.I), "s"),
    (re.compile(r"$"), "s"),
]

SINGULAR_RULES = [
    (re.compile(r"(quiz)zes$", re.I), r"\1"),
    (re.compile(r"(matr)ices$", re.I), r"\1ix"),
    (re.compile(r"(vert|ind)ices$", re.I), r"\1ex"),
    (re.compile(r"(bus|alias|status|campus)es$", re.I), r"\1"),
    (re.compile(r"(octop|vir)i$", re.I), r"\1us"),
    (re.compile(r"(x|ch|ss|sh|zz)es$", re.I), r"\1"),
    (re.compile(r"([^aeiouy]|qu)ies$", re.I), r"\1y"),
    (re.compile(r"([lr])ves$", re.I), r"\1f"),
    (re.compile(r"([^f])ves$", re.I), r"\1fe"),
    (re.compile(r"(ss|us|is)$", re.I), r"\1"),
    (re.compile(r"s$", re.I), ""),
]


def _match_case(source: str, target: str) -> str:
    if source[:1].isupper():
        return target[:1].upper() + target[1:]
    return target


def _inflect_word(word: str, irregular: dict[str, str], rules: list) -> str:
    lower = word.lower()
    if not word or lower in UNCOUNTABLE:
        return word
    if lower in irregular:
        return _match_case(word, irregular[lower])
    for pattern, replacement in rules:
        if pattern.search(word):
            return pattern.sub(replacement, word, count=1)
    return word


def _last_word(phrase: str, transform) -> str:
    head, _, last = phrase.rpartition(" ")
    inflected = transform(last)
    return f"{head} {inflected}" if head else inflected


def singularize(phrase: str) -> str:
    """Singular form of the last word of ``phrase``."""
    return _last_word(
        phrase, lambda w: _inflect_word(w, IRREGULAR_PLURALS, SINGULAR_RULES)
    )


def pluralize(phrase: str) -> str:
    """Plural form of the last word of ``phrase``.

    Words that are already plural are returned unchanged, so callers can
    detect ambiguous names by comparing the result with the input.
    """

    def plural(word: str) -> str:
        lower = word.lower()
        if lower in IRREGULAR_PLURALS:
            return word
        singular = _inflect_word(word, IRREGULAR_PLURALS, SINGULAR_RULES)
        if singular != word and _inflect_word(singular, IRREGULAR, PLURAL_RULES) == word:
            return word
        return _inflect_word(word, IRREGULAR, PLURAL_RULES)

    return _last_word(phrase, plural)


def key_to_label(key: str) -> str:
    """``BlogPost`` -> ``Blog Post``, ``user_account`` -> ``User Account``."""
    spaced = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", key)
    spaced = re.sub(r"[_\-]+", " ", spaced)
    return " ".join(word[:1].upper() + word[1:] for word in spaced.split())


def label_to_class(label: str) -> str:
    """``Blog Posts`` -> ``BlogPosts``."""
    return "".join(word[:1].upper() + word[1:] for word in label.split())


def lower_first(value: str) -> str:
    return value[:1].lower() + value[1:]


@dataclass(frozen=True)
class GqlNames:
    """Every GraphQL name a list contributes to the schema."""

    output_type_name: str
    item_query_name: str
    list_query_name: str
    list_query_meta_name: str
    list_query_count_name: str
    list_sort_name: str
    list_order_name: str
    delete_mutation_name: str
    delete_many_mutation_name: str
    update_mutation_name: str
    create_mutation_name: str
    update_many_mutation_name: str
    create_many_mutation_name: str
    where_input_name: str
    where_unique_input_name: str
    update_input_name: str
    create_input_name: str
    update_many_input_name: str
    create_many_input_name: str
    relate_to_many_input_name: str
    relate_to_one_input_name: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def derive_gql_names(
    key: str,
    plural: str | None = None,
    list_query_name: str | None = None,
    item_query_name: str | None = None,
) -> GqlNames:
    """Derive the GraphQL name set for a list key.

    Raises:
        ValueError: If the key's plural form is indistinguishable from it
    """
    label = key_to_label(key)
    singular_label = singularize(label)
    plural_label = plural or pluralize(label)
    if plural_label == label:
        raise ValueError(
            f"Unable to use {label} as a List name - it has an ambiguous plural "
            f"({plural_label}). Please choose another name for your list."
        )

    list_name = list_query_name or label_to_class(plural_label)
    item_name = item_query_name or label_to_class(singular_label)

    return GqlNames(
        output_type_name=key,
        item_query_name=item_name,
        list_query_name=f"all{list_name}",
        list_query_meta_name=f"_all{list_name}Meta",
        list_query_count_name=f"{lower_first(list_name)}Count",
        list_sort_name=f"Sort{list_name}By",
        list_order_name=f"{item_name}OrderByInput",
        delete_mutation_name=f"delete{item_name}",
        delete_many_mutation_name=f"delete{list_name}",
        update_mutation_name=f"update{item_name}",
        create_mutation_name=f"create{item_name}",
        update_many_mutation_name=f"update{list_name}",
        create_many_mutation_name=f"create{list_name}",
        where_input_name=f"{item_name}WhereInput",
        where_unique_input_name=f"{item_name}WhereUniqueInput",
        update_input_name=f"{item_name}UpdateInput",
        create_input_name=f"{item_name}CreateInput",
        update_many_input_name=f"{list_name}UpdateInput",
        create_many_input_name=f"{list_name}CreateInput",
        relate_to_many_input_name=f"{item_name}RelateToManyInput",
        relate_to_one_input_name=f"{item_name}RelateToOneInput",
    )
