"""Tests for loading list definitions from YAML metadata."""

import pytest

from conftest import write_lists
from listforge.access import RequestContext
from listforge.config import ListforgeConfig
from listforge.fields import Integer, Relationship, Text
from listforge.metadata.loader import MetadataLoader
from listforge.registry import ListRegistry


class TestMetadataLoader:
    def test_loads_lists_in_file_order(self, metadata_dir):
        loader = MetadataLoader(metadata_dir)
        lists = loader.load_lists()
        assert list(lists) == ["Post", "Tag", "User"]
        assert loader.list_keys() == ["Post", "Tag", "User"]

    def test_keys_are_mapped(self, metadata_dir):
        loader = MetadataLoader(metadata_dir)
        loader.load_lists()
        post = loader.get_list("Post")
        assert post["label_field"] == "title"
        assert post["query_limits"] == {"max_results": 50}
        assert post["access"] == {"delete": False}
        assert post["hooks"] == {"beforeChange": "stampPost"}
        assert loader.get_list("User")["schema_doc"] == "People who can sign in"

    def test_fields_are_resolved(self, metadata_dir):
        loader = MetadataLoader(metadata_dir)
        loader.load_lists()
        fields = loader.get_list("Post")["fields"]
        assert list(fields) == ["title", "views", "author", "tags"]
        assert fields["views"] == {"type": Integer, "default_value": 0}
        assert fields["tags"] == {"type": Relationship, "ref": "Tag", "many": True}
        assert loader.get_list("Tag")["fields"]["label"] == {"type": Text}

    def test_missing_directory_loads_nothing(self, tmp_path):
        assert MetadataLoader(tmp_path / "missing").load_lists() == {}

    def test_empty_file_is_skipped(self, tmp_path):
        write_lists(tmp_path, empty="")
        assert MetadataLoader(tmp_path).load_lists() == {}

    def test_file_without_list_key_raises(self, tmp_path):
        write_lists(tmp_path, bad="fields: []\n")
        with pytest.raises(ValueError, match="bad.yaml: expected a mapping with a 'list' key"):
            MetadataLoader(tmp_path).load_lists()

    def test_duplicate_list_raises(self, tmp_path):
        write_lists(tmp_path, a="list: Post\nfields: []\n", b="list: Post\nfields: []\n")
        with pytest.raises(ValueError, match="defined in both a.yaml and b.yaml"):
            MetadataLoader(tmp_path).load_lists()

    def test_unknown_list_key_raises(self, tmp_path):
        write_lists(tmp_path, post="list: Post\nlabels: {}\nfields: []\n")
        with pytest.raises(ValueError, match="unknown key 'labels'"):
            MetadataLoader(tmp_path).load_lists()

    def test_unknown_field_key_raises(self, tmp_path):
        write_lists(tmp_path, post="list: Post\nfields:\n  - name: title\n    maxLength: 3\n")
        with pytest.raises(ValueError, match="Post.title has unknown key 'maxLength'"):
            MetadataLoader(tmp_path).load_lists()

    def test_duplicate_field_raises(self, tmp_path):
        write_lists(tmp_path, post="list: Post\nfields:\n  - name: title\n  - name: title\n")
        with pytest.raises(ValueError, match="declares field 'title' more than once"):
            MetadataLoader(tmp_path).load_lists()

    def test_unknown_field_type_raises(self, tmp_path):
        write_lists(tmp_path, post="list: Post\nfields:\n  - name: body\n    type: Markdown\n")
        with pytest.raises(ValueError, match="Unknown field type 'Markdown'"):
            MetadataLoader(tmp_path).load_lists()


class TestRegistryFromConfig:
    def test_builds_lists(self, metadata_dir):
        registry = ListRegistry.from_config(ListforgeConfig(metadata_path=metadata_dir))
        post = registry.get_list_by_key("Post")
        assert [f.path for f in post.fields] == ["id", "title", "views", "author", "tags"]
        assert post.max_results == 50
        assert not post.access.allows("delete")

    def test_max_total_results_carried_over(self, metadata_dir):
        config = ListforgeConfig(metadata_path=metadata_dir, max_total_results=5)
        assert ListRegistry.from_config(config).max_total_results == 5

    def test_unregistered_hook_raises(self, metadata_dir, stamp_hook):
        from listforge.hooks import HookRegistry

        HookRegistry.clear()
        with pytest.raises(ValueError, match="Hook 'stampPost' is not registered"):
            ListRegistry.from_config(ListforgeConfig(metadata_path=metadata_dir))

    @pytest.mark.asyncio
    async def test_named_hook_runs(self, metadata_dir):
        registry = ListRegistry.from_config(ListforgeConfig(metadata_path=metadata_dir))
        context = RequestContext()
        result = await registry.execute(
            'mutation { createPost(data: { title: "Hi" }) { title views } }', context
        )
        assert result.errors is None
        assert result.data == {"createPost": {"title": "Hi", "views": 0}}
        assert context.state == {"stamped": "create"}
