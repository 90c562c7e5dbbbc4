"""Load list definitions from YAML files.

One list per file under ``<metadata>/lists/``:

    list: Post
    schemaDoc: A blog post
    labelField: title
    access:
      delete: false
    hooks:
      beforeChange: stampPost
    fields:
      - name: title
        type: Text
        isRequired: true
      - name: author
        type: Relationship
        ref: User

Hooks are referred to by the name they were registered under with @hook.
"""

from pathlib import Path
from typing import Any

import yaml

from listforge.core.types import get_field_type

# YAML key -> list config key
LIST_KEYS = {
    "fields": "fields",
    "access": "access",
    "hooks": "hooks",
    "schemaDoc": "schema_doc",
    "plural": "plural",
    "listQueryName": "list_query_name",
    "itemQueryName": "item_query_name",
    "labelField": "label_field",
    "queryLimits": "query_limits",
}

# YAML key -> field config key
FIELD_KEYS = {
    "type": "type",
    "access": "access",
    "hooks": "hooks",
    "isRequired": "is_required",
    "defaultValue": "default_value",
    "schemaDoc": "schema_doc",
    "ref": "ref",
    "many": "many",
}


class MetadataLoader:
    """Loads list definitions from YAML files."""

    def __init__(self, metadata_path: Path):
        self.metadata_path = Path(metadata_path)
        self.lists: dict[str, dict[str, Any]] = {}
        self.sources: dict[str, Path] = {}

    def load_lists(self) -> dict[str, dict[str, Any]]:
        """Load every ``lists/*.yaml`` file, in file name order.

        Raises:
            ValueError: On malformed definitions or duplicate list keys
        """
        lists_path = self.metadata_path / "lists"
        if not lists_path.exists():
            return self.lists

        for yaml_file in sorted(lists_path.glob("*.yaml")):
            with open(yaml_file) as f:
                data = yaml.safe_load(f)
            if not data:
                continue
            if not isinstance(data, dict) or "list" not in data:
                raise ValueError(f"{yaml_file.name}: expected a mapping with a 'list' key")

            key = data["list"]
            if key in self.lists:
                raise ValueError(
                    f"List '{key}' is defined in both {self.sources[key].name} and {yaml_file.name}"
                )
            self.lists[key] = self._resolve_list(key, data)
            self.sources[key] = yaml_file
        return self.lists

    def _resolve_list(self, key: str, data: dict) -> dict[str, Any]:
        config: dict[str, Any] = {}
        for yaml_key, value in data.items():
            if yaml_key == "list":
                continue
            if yaml_key not in LIST_KEYS:
                raise ValueError(f"List '{key}' has unknown key '{yaml_key}'")
            config[LIST_KEYS[yaml_key]] = value

        fields: dict[str, dict[str, Any]] = {}
        for field_data in data.get("fields") or []:
            name = field_data.get("name")
            if not name:
                raise ValueError(f"List '{key}' has a field without a name")
            if name in fields:
                raise ValueError(f"List '{key}' declares field '{name}' more than once")
            fields[name] = self._resolve_field(key, field_data)
        config["fields"] = fields

        limits = config.get("query_limits")
        if limits:
            config["query_limits"] = {"max_results": limits.get("maxResults")}
        return config

    def _resolve_field(self, list_key: str, data: dict) -> dict[str, Any]:
        config: dict[str, Any] = {}
        for yaml_key, value in data.items():
            if yaml_key == "name":
                continue
            if yaml_key not in FIELD_KEYS:
                raise ValueError(f"{list_key}.{data['name']} has unknown key '{yaml_key}'")
            config[FIELD_KEYS[yaml_key]] = value
        config["type"] = get_field_type(data.get("type", "Text"))
        return config

    def get_list(self, key: str) -> dict[str, Any] | None:
        """Get a loaded list config by key."""
        return self.lists.get(key)

    def list_keys(self) -> list[str]:
        """List all loaded list keys."""
        return list(self.lists.keys())
