"""Tests for the built-in field types."""

import pytest

from listforge.access import RequestContext
from listforge.core.types import FIELD_TYPES, get_field_type, register_field_type
from listforge.errors import RelationshipError
from listforge.fields import AutoIncrement, Checkbox, Implementation, Integer, Relationship, Text
from listforge.registry import ListRegistry


def make_field(field_type, path="value", **config):
    return field_type(path, {"type": field_type, **config}, list_key="Post", get_list_by_key=lambda k: None)


# =============================================================================
# Field type table
# =============================================================================


class TestFieldTypes:
    def test_lookup_by_name(self):
        assert get_field_type("Text") is Text
        assert get_field_type("ID") is AutoIncrement

    def test_class_passes_through(self):
        assert get_field_type(Checkbox) is Checkbox

    def test_unknown_name_raises(self):
        with pytest.raises(ValueError, match="Unknown field type 'Markdown'"):
            get_field_type("Markdown")

    def test_register_custom_type(self, monkeypatch):
        class Slug(Text):
            pass

        monkeypatch.setitem(FIELD_TYPES, "Slug", Text)
        register_field_type("Slug", Slug)
        assert get_field_type("Slug") is Slug


# =============================================================================
# Scalar fields
# =============================================================================


class TestScalarFields:
    def test_text_fragments(self):
        field = make_field(Text, "title")
        assert field.gql_output_fields() == ["title: String"]
        assert field.gql_create_input_fields() == ["title: String"]
        filters = field.gql_query_input_fields()
        assert filters[0] == "title: String"
        assert "title_not_ends_with_i: String" in filters
        assert filters[-2:] == ["title_in: [String]", "title_not_in: [String]"]

    def test_integer_filters(self):
        assert make_field(Integer, "views").gql_query_input_fields() == [
            "views: Int",
            "views_not: Int",
            "views_lt: Int",
            "views_lte: Int",
            "views_gt: Int",
            "views_gte: Int",
            "views_in: [Int]",
            "views_not_in: [Int]",
        ]

    def test_checkbox_filters(self):
        field = make_field(Checkbox, "published")
        assert field.gql_output_fields() == ["published: Boolean"]
        assert field.gql_query_input_fields() == ["published: Boolean", "published_not: Boolean"]

    def test_auto_increment_has_no_inputs(self):
        field = make_field(AutoIncrement, "id")
        assert field.gql_output_fields() == ["id: ID"]
        assert field.gql_create_input_fields() == []
        assert field.gql_update_input_fields() == []
        assert field.is_orderable

    def test_schema_doc_describes_output(self):
        field = make_field(Text, "title", schema_doc="The headline")
        assert field.gql_output_fields() == ['""" The headline """\ntitle: String']

    def test_unknown_config_raises(self):
        with pytest.raises(ValueError, match="Post.title has unknown config option"):
            make_field(Text, "title", maxLength=10)

    def test_default_value(self):
        assert make_field(Text, default_value="draft").get_default_value() == "draft"
        assert not make_field(Text).has_default

    def test_callable_default_receives_context(self):
        def default(context, original_input):
            return original_input["title"].upper()

        field = make_field(Text, default_value=default)
        assert field.has_default
        assert field.get_default_value(context=None, original_input={"title": "x"}) == "X"

    def test_output_resolver_reads_item(self):
        resolve = make_field(Text, "title").gql_output_field_resolvers()["title"]
        assert resolve({"title": "Hi"}, {}, None, None) == "Hi"

    def test_base_implementation_defaults(self):
        field = make_field(Implementation, "misc")
        assert field.gql_type == "String"
        assert field.gql_query_input_fields() == [
            "misc: String",
            "misc_not: String",
            "misc_in: [String]",
            "misc_not_in: [String]",
        ]
        assert field.get_gql_aux_types() == []
        assert field.gql_aux_query_resolvers() == {}


# =============================================================================
# Relationship
# =============================================================================


@pytest.fixture
def registry():
    registry = ListRegistry()
    registry.create_list(
        "User",
        {
            "fields": {"name": {"type": "Text"}},
            "access": {"delete": False},
        },
    )
    registry.create_list(
        "Tag",
        {
            "fields": {"label": {"type": "Text"}},
            "access": {"create": False, "update": False, "delete": False},
        },
    )
    registry.create_list(
        "Post",
        {
            "fields": {
                "title": {"type": "Text"},
                "author": {"type": "Relationship", "ref": "User"},
                "tags": {"type": "Relationship", "ref": "Tag", "many": True},
            }
        },
    )
    registry.init_lists()
    registry.lists["User"].adapter.seed([{"id": 1, "name": "ada"}, {"id": 2, "name": "bob"}])
    registry.lists["Tag"].adapter.seed([{"id": 1, "label": "a"}, {"id": 2, "label": "b"}, {"id": 3, "label": "c"}])
    return registry


@pytest.fixture
def context():
    return RequestContext()


class TestRelationshipConfig:
    def test_ref_is_required(self):
        with pytest.raises(ValueError, match="needs a 'ref' list key"):
            make_field(Relationship, "author")

    def test_unknown_ref_raises_on_use(self):
        field = make_field(Relationship, "author", ref="Nobody")
        with pytest.raises(ValueError, match="Unable to resolve related list 'Nobody'"):
            field.gql_output_fields()

    def test_registry_rejects_unknown_ref(self):
        registry = ListRegistry()
        registry.create_list("Post", {"fields": {"author": {"type": "Relationship", "ref": "User"}}})
        with pytest.raises(ValueError, match="refers to unknown list 'User'"):
            registry.init_lists()


class TestRelationshipSchema:
    def test_to_one_fragments(self, registry):
        field = registry.lists["Post"].fields_by_path["author"]
        assert field.gql_output_fields() == ["author: User"]
        assert field.gql_query_input_fields() == ["author: UserWhereInput", "author_is_null: Boolean"]
        assert field.gql_create_input_fields() == ["author: UserRelateToOneInput"]
        (aux,) = field.get_gql_aux_types()
        assert "create: UserCreateInput" in aux
        assert "connect: UserWhereUniqueInput" in aux

    def test_to_many_fragments(self, registry):
        field = registry.lists["Post"].fields_by_path["tags"]
        outputs = field.gql_output_fields()
        assert outputs[0].startswith("tags(where: TagWhereInput! = {}")
        assert outputs[0].endswith("): [Tag!]!")
        assert outputs[1].startswith("_tagsMeta(")
        assert outputs[2] == "tagsCount(where: TagWhereInput! = {}): Int"
        assert field.gql_query_input_fields() == [
            "tags_every: TagWhereInput",
            "tags_some: TagWhereInput",
            "tags_none: TagWhereInput",
        ]
        (aux,) = field.get_gql_aux_types()
        assert aux.startswith("input TagRelateToManyInput")
        assert "create:" not in aux
        assert "connect: [TagWhereUniqueInput]" in aux

    def test_unreadable_ref_hides_field(self):
        registry = ListRegistry()
        registry.create_list("Secret", {"fields": {"name": {"type": "Text"}}, "access": {"read": False}})
        registry.create_list(
            "Post", {"fields": {"secret": {"type": "Relationship", "ref": "Secret"}}}
        )
        registry.init_lists()
        field = registry.lists["Post"].fields_by_path["secret"]
        assert field.gql_output_fields() == []
        assert field.gql_query_input_fields() == []
        assert field.get_gql_aux_types() == []


class TestRelationshipInput:
    @pytest.mark.asyncio
    async def test_connect_one(self, registry, context):
        post = await registry.lists["Post"].create_mutation(
            {"title": "Hi", "author": {"connect": {"id": "2"}}}, context
        )
        assert post["author"] == 2

    @pytest.mark.asyncio
    async def test_connect_missing_item_raises(self, registry, context):
        with pytest.raises(RelationshipError) as exc_info:
            await registry.lists["Post"].create_mutation(
                {"author": {"connect": {"id": "99"}}}, context
            )
        assert exc_info.value.messages == ["Unable to connect a Post.author<User>"]
        assert exc_info.value.extensions["code"] == "RELATIONSHIP_ERROR"

    @pytest.mark.asyncio
    async def test_nested_create(self, registry, context):
        post = await registry.lists["Post"].create_mutation(
            {"author": {"create": {"name": "cy"}}}, context
        )
        assert post["author"] == 3
        users = await registry.lists["User"].list_query({"where": {"name": "cy"}}, context)
        assert users == [{"name": "cy", "id": 3}]

    @pytest.mark.asyncio
    async def test_disconnect_one(self, registry, context):
        posts = registry.lists["Post"]
        post = await posts.create_mutation({"author": {"connect": {"id": 1}}}, context)

        unchanged = await posts.update_mutation(
            post["id"], {"author": {"disconnect": {"id": 2}}}, context
        )
        assert unchanged["author"] == 1

        cleared = await posts.update_mutation(
            post["id"], {"author": {"disconnect": {"id": 1}}}, context
        )
        assert cleared["author"] is None

    @pytest.mark.asyncio
    async def test_many_connect_and_disconnect(self, registry, context):
        posts = registry.lists["Post"]
        post = await posts.create_mutation(
            {"tags": {"connect": [{"id": 1}, {"id": 2}, {"id": 1}]}}, context
        )
        assert post["tags"] == [1, 2]

        post = await posts.update_mutation(
            post["id"], {"tags": {"disconnect": [{"id": 1}], "connect": [{"id": 3}]}}, context
        )
        assert post["tags"] == [2, 3]

        post = await posts.update_mutation(
            post["id"], {"tags": {"disconnectAll": True, "connect": [{"id": 1}]}}, context
        )
        assert post["tags"] == [1]

    @pytest.mark.asyncio
    async def test_nested_create_denied_by_ref_list(self, registry, context):
        with pytest.raises(RelationshipError, match="Unable to create a Post.tags<Tag>"):
            await registry.lists["Post"].create_mutation(
                {"tags": {"create": [{"label": "d"}]}}, context
            )

    @pytest.mark.asyncio
    async def test_malformed_input_raises(self, registry, context):
        with pytest.raises(RelationshipError, match="expects an object"):
            await registry.lists["Post"].create_mutation({"author": 1}, context)


class TestRelationshipResolvers:
    @pytest.mark.asyncio
    async def test_resolve_one(self, registry, context):
        field = registry.lists["Post"].fields_by_path["author"]
        resolve = field.gql_output_field_resolvers()["author"]
        assert await resolve({"author": 1}, {}, context, None) == {"id": 1, "name": "ada"}
        assert await resolve({"author": None}, {}, context, None) is None

    @pytest.mark.asyncio
    async def test_resolve_many_scoped_to_item(self, registry, context):
        field = registry.lists["Post"].fields_by_path["tags"]
        resolvers = field.gql_output_field_resolvers()
        item = {"tags": [1, 3]}

        tags = await resolvers["tags"](item, {"where": {}}, context, None)
        assert [t["label"] for t in tags] == ["a", "c"]

        filtered = await resolvers["tags"](item, {"where": {"label": "c"}}, context, None)
        assert [t["id"] for t in filtered] == [3]

        assert await resolvers["tagsCount"](item, {"where": {}}, context, None) == 2
        meta = await resolvers["_tagsMeta"](item, {}, context, None)
        assert await meta.get_count() == 2
