"""Shared fixtures: a metadata directory with a small blog content model."""

import textwrap

import pytest

from listforge.hooks import HookRegistry

USER_YAML = """
list: User
schemaDoc: People who can sign in
fields:
  - name: name
    type: Text
    isRequired: true
  - name: email
    type: Text
"""

POST_YAML = """
list: Post
labelField: title
queryLimits:
  maxResults: 50
access:
  delete: false
hooks:
  beforeChange: stampPost
fields:
  - name: title
    type: Text
  - name: views
    type: Integer
    defaultValue: 0
  - name: author
    type: Relationship
    ref: User
  - name: tags
    type: Relationship
    ref: Tag
    many: true
"""

TAG_YAML = """
list: Tag
fields:
  - name: label
"""


def write_lists(metadata_dir, **files):
    lists_dir = metadata_dir / "lists"
    lists_dir.mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        (lists_dir / f"{name}.yaml").write_text(textwrap.dedent(content))
    return metadata_dir


@pytest.fixture
def stamp_hook():
    """Register the hook the Post metadata refers to."""
    HookRegistry.clear()

    def stamp_post(ctx):
        ctx.context.state["stamped"] = ctx.operation

    HookRegistry.register("stampPost", stamp_post)
    yield stamp_post
    HookRegistry.clear()


@pytest.fixture
def metadata_dir(tmp_path, stamp_hook):
    return write_lists(tmp_path / "metadata", user=USER_YAML, post=POST_YAML, tag=TAG_YAML)
