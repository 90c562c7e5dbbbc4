"""Tests for the list lifecycle hook system."""

import pytest
from unittest.mock import AsyncMock, Mock

from listforge.errors import ListforgeSystemError, ValidationFailureError
from listforge.fields import Integer, Text
from listforge.hooks import (
    HookContext,
    HookPipeline,
    HookRegistry,
    VALID_HOOK_STAGES,
    hook,
    resolve_hooks,
)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clear_hook_registry():
    """Clear hook registry before and after each test."""
    HookRegistry.clear()
    yield
    HookRegistry.clear()


def make_field(field_type, path, **config):
    return field_type(path, {"type": field_type, **config}, list_key="Post", get_list_by_key=lambda k: None)


def make_pipeline(fields, **hooks):
    return HookPipeline("Post", fields, resolve_hooks(hooks, "Post"))


@pytest.fixture
def base_context():
    """A basic HookContext for tests."""
    return HookContext(
        list_key="Post",
        operation="create",
        resolved_data={"title": "Hello", "views": 1},
        original_input={"title": "Hello", "views": 1},
    )


# =============================================================================
# HookRegistry
# =============================================================================


class TestHookRegistry:
    def test_register_and_get(self):
        async def my_hook(ctx):
            return None

        HookRegistry.register("myHook", my_hook)
        assert HookRegistry.get("myHook") is my_hook

    def test_get_unregistered_raises(self):
        with pytest.raises(ValueError, match="not registered"):
            HookRegistry.get("nonexistent")

    def test_register_idempotent(self):
        async def first(ctx):
            pass

        async def second(ctx):
            pass

        HookRegistry.register("h", first)
        HookRegistry.register("h", second)
        assert HookRegistry.get("h") is first

    def test_decorator(self):
        @hook("stampPost")
        async def stamp(ctx):
            pass

        assert HookRegistry.is_registered("stampPost")
        assert HookRegistry.list_registered() == ["stampPost"]

    def test_clear(self):
        HookRegistry.register("a", lambda ctx: None)
        HookRegistry.clear()
        assert not HookRegistry.is_registered("a")


class TestResolveHooks:
    def test_camel_case_stage_names(self):
        fn = Mock()
        resolved = resolve_hooks({"beforeChange": fn, "after_delete": fn}, "Post")
        assert resolved == {"before_change": fn, "after_delete": fn}

    def test_named_hooks_are_looked_up(self):
        @hook("auditDelete")
        def audit(ctx):
            pass

        assert resolve_hooks({"afterDelete": "auditDelete"}, "Post") == {"after_delete": audit}

    def test_unknown_stage_raises(self):
        with pytest.raises(ValueError, match="unknown stage 'beforeSave'"):
            resolve_hooks({"beforeSave": Mock()}, "Post")

    def test_unregistered_name_raises(self):
        with pytest.raises(ValueError, match="not registered"):
            resolve_hooks({"beforeChange": "missing"}, "Post")

    def test_non_callable_raises(self):
        with pytest.raises(TypeError, match="Post.title.hooks.validate_input"):
            resolve_hooks({"validateInput": 42}, "Post.title")

    def test_valid_stage_names(self):
        assert "resolveInput" in VALID_HOOK_STAGES
        assert "afterDelete" in VALID_HOOK_STAGES


# =============================================================================
# HookContext
# =============================================================================


class TestHookContext:
    def test_for_field_shares_validation_errors(self, base_context):
        field_ctx = base_context.for_field("title")
        field_ctx.add_validation_error("too short")
        assert field_ctx.field_path == "title"
        assert base_context.field_path is None
        assert base_context.validation_errors == [("title", "too short")]

    def test_list_level_errors_use_the_list_key(self, base_context):
        base_context.add_validation_error("posts are closed")
        assert base_context.validation_errors == [("Post", "posts are closed")]


# =============================================================================
# HookPipeline: change path
# =============================================================================


class TestResolveInput:
    @pytest.mark.asyncio
    async def test_without_hooks_keeps_data(self, base_context):
        pipeline = make_pipeline([make_field(Text, "title"), make_field(Integer, "views")])
        assert await pipeline.resolve_input(base_context) == {"title": "Hello", "views": 1}

    @pytest.mark.asyncio
    async def test_field_hook_sets_its_own_value(self, base_context):
        slug = make_field(
            Text,
            "slug",
            hooks={"resolveInput": lambda ctx: ctx.resolved_data["title"].lower()},
        )
        pipeline = make_pipeline([make_field(Text, "title"), slug])
        resolved = await pipeline.resolve_input(base_context)
        assert resolved == {"title": "Hello", "views": 1, "slug": "hello"}

    @pytest.mark.asyncio
    async def test_list_hook_result_replaces_data(self, base_context):
        async def drop_views(ctx):
            return {k: v for k, v in ctx.resolved_data.items() if k != "views"}

        pipeline = make_pipeline([make_field(Text, "title")], resolve_input=drop_views)
        assert await pipeline.resolve_input(base_context) == {"title": "Hello"}
        assert base_context.resolved_data == {"title": "Hello"}

    @pytest.mark.asyncio
    async def test_list_hook_must_return_mapping(self, base_context):
        pipeline = make_pipeline([], resolve_input=AsyncMock(return_value=None))
        with pytest.raises(ListforgeSystemError, match="Post.hooks.resolve_input"):
            await pipeline.resolve_input(base_context)


class TestValidateInput:
    @pytest.mark.asyncio
    async def test_required_field_missing_on_create(self, base_context):
        pipeline = make_pipeline([make_field(Text, "body", is_required=True)])
        with pytest.raises(ValidationFailureError) as exc_info:
            await pipeline.validate_input(base_context)
        assert exc_info.value.messages == ['Required field "body" is null or undefined.']

    @pytest.mark.asyncio
    async def test_required_field_absent_on_update_is_fine(self):
        pipeline = make_pipeline([make_field(Text, "body", is_required=True)])
        ctx = HookContext(list_key="Post", operation="update", resolved_data={"title": "x"})
        await pipeline.validate_input(ctx)

    @pytest.mark.asyncio
    async def test_required_field_cleared_on_update(self):
        pipeline = make_pipeline([make_field(Text, "body", is_required=True)])
        ctx = HookContext(list_key="Post", operation="update", resolved_data={"body": None})
        with pytest.raises(ValidationFailureError):
            await pipeline.validate_input(ctx)

    @pytest.mark.asyncio
    async def test_field_errors_collected_before_list_hook(self, base_context):
        def title_hook(ctx):
            ctx.add_validation_error("title is reserved")

        def views_hook(ctx):
            ctx.add_validation_error("views must be zero")

        list_hook = Mock()
        pipeline = make_pipeline(
            [
                make_field(Text, "title", hooks={"validateInput": title_hook}),
                make_field(Integer, "views", hooks={"validateInput": views_hook}),
            ],
            validate_input=list_hook,
        )
        with pytest.raises(ValidationFailureError) as exc_info:
            await pipeline.validate_input(base_context)
        assert exc_info.value.messages == ["title is reserved", "views must be zero"]
        assert "title is reserved" in str(exc_info.value)
        list_hook.assert_not_called()

    @pytest.mark.asyncio
    async def test_errors_grouped_by_field(self, base_context):
        def title_hook(ctx):
            ctx.add_validation_error("title is reserved")
            ctx.add_validation_error("title is too short")

        def views_hook(ctx):
            ctx.add_validation_error("views must be zero")

        pipeline = make_pipeline(
            [
                make_field(Text, "title", hooks={"validateInput": title_hook}),
                make_field(Integer, "views", hooks={"validateInput": views_hook}),
            ]
        )
        with pytest.raises(ValidationFailureError) as exc_info:
            await pipeline.validate_input(base_context)
        assert exc_info.value.errors == {
            "title": ["title is reserved", "title is too short"],
            "views": ["views must be zero"],
        }
        assert exc_info.value.extensions["data"] == {"errors": exc_info.value.errors}
        assert exc_info.value.messages == [
            "title is reserved",
            "title is too short",
            "views must be zero",
        ]

    @pytest.mark.asyncio
    async def test_required_errors_grouped_by_field(self, base_context):
        pipeline = make_pipeline([make_field(Text, "body", is_required=True)])
        with pytest.raises(ValidationFailureError) as exc_info:
            await pipeline.validate_input(base_context)
        assert exc_info.value.errors == {"body": ['Required field "body" is null or undefined.']}

    @pytest.mark.asyncio
    async def test_list_hook_errors(self, base_context):
        def reject(ctx):
            ctx.add_validation_error("posts are closed")

        pipeline = make_pipeline([make_field(Text, "title")], validate_input=reject)
        with pytest.raises(ValidationFailureError, match="posts are closed"):
            await pipeline.validate_input(base_context)


class TestRunChange:
    @pytest.mark.asyncio
    async def test_stage_order(self, base_context):
        calls = []

        def record(stage):
            return lambda ctx: calls.append(stage)

        title = make_field(
            Text,
            "title",
            hooks={"beforeChange": record("field.before_change"), "afterChange": record("field.after_change")},
        )
        pipeline = make_pipeline(
            [title],
            validate_input=record("validate_input"),
            before_change=record("before_change"),
            after_change=record("after_change"),
        )

        async def persist(data):
            calls.append("persist")
            return {**data, "id": 1}

        result = await pipeline.run_change(base_context, persist)
        assert result == {"title": "Hello", "views": 1, "id": 1}
        assert calls == [
            "validate_input",
            "field.before_change",
            "before_change",
            "persist",
            "field.after_change",
            "after_change",
        ]

    @pytest.mark.asyncio
    async def test_after_change_sees_updated_item(self, base_context):
        after = AsyncMock()
        pipeline = make_pipeline([make_field(Text, "title")], after_change=after)
        await pipeline.run_change(base_context, AsyncMock(return_value={"id": 5}))
        (ctx,), _ = after.call_args
        assert ctx.updated_item == {"id": 5}

    @pytest.mark.asyncio
    async def test_validation_failure_skips_persist(self, base_context):
        persist = AsyncMock()
        pipeline = make_pipeline(
            [], validate_input=lambda ctx: ctx.add_validation_error("no")
        )
        with pytest.raises(ValidationFailureError):
            await pipeline.run_change(base_context, persist)
        persist.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_after_change_failure_propagates(self, base_context, caplog):
        persist = AsyncMock(return_value={"id": 1})
        pipeline = make_pipeline([], after_change=AsyncMock(side_effect=RuntimeError("boom")))
        with pytest.raises(ListforgeSystemError, match="boom") as exc_info:
            await pipeline.run_change(base_context, persist)
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        persist.assert_awaited_once()
        assert "was not rolled back" in caplog.text


# =============================================================================
# HookPipeline: delete path
# =============================================================================


class TestRunDelete:
    @pytest.fixture
    def delete_context(self):
        return HookContext(list_key="Post", operation="delete", existing_item={"id": 3, "title": "Old"})

    @pytest.mark.asyncio
    async def test_returns_existing_item(self, delete_context):
        remove = AsyncMock()
        pipeline = make_pipeline([make_field(Text, "title")])
        assert await pipeline.run_delete(delete_context, remove) == {"id": 3, "title": "Old"}
        remove.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_validate_delete_blocks_removal(self, delete_context):
        remove = AsyncMock()
        pipeline = make_pipeline(
            [make_field(Text, "title", hooks={"validateDelete": lambda ctx: ctx.add_validation_error("locked")})]
        )
        with pytest.raises(ValidationFailureError, match="locked"):
            await pipeline.run_delete(delete_context, remove)
        remove.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_field_hooks_run_for_every_field(self, delete_context):
        before = Mock()
        pipeline = make_pipeline(
            [
                make_field(Text, "title", hooks={"beforeDelete": before}),
                make_field(Integer, "views", hooks={"beforeDelete": before}),
            ]
        )
        await pipeline.run_delete(delete_context, AsyncMock())
        assert [c.args[0].field_path for c in before.call_args_list] == ["title", "views"]
