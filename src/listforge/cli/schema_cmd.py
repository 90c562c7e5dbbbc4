"""Schema CLI commands: print and validate."""

from pathlib import Path

import click
from graphql import GraphQLError, assert_valid_schema

from listforge.config import ListforgeConfig
from listforge.registry import ListRegistry


def _load_registry(metadata_path: Path | None) -> tuple[ListforgeConfig, ListRegistry]:
    """Resolve config from env and cwd, then load every list."""
    config = ListforgeConfig.from_env(Path.cwd())
    if metadata_path is not None:
        config.metadata_path = metadata_path
    config.configure_logging()

    if not config.metadata_path.exists():
        click.echo(f"Error: Metadata directory not found at {config.metadata_path}", err=True)
        raise SystemExit(1)
    return config, ListRegistry.from_config(config)


metadata_option = click.option(
    "--metadata",
    "metadata_path",
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Metadata directory (defaults to LISTFORGE_METADATA_PATH or ./metadata).",
)


@click.group()
def schema():
    """Schema commands."""
    pass


@schema.command("print")
@metadata_option
def print_cmd(metadata_path: Path | None):
    """Print the GraphQL SDL generated from the list metadata."""
    try:
        _, registry = _load_registry(metadata_path)
        type_defs = registry.get_type_defs()
    except (ValueError, TypeError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)
    click.echo(type_defs)


@schema.command()
@metadata_option
def validate(metadata_path: Path | None):
    """Load the list metadata and build the executable schema."""
    try:
        _, registry = _load_registry(metadata_path)
        assert_valid_schema(registry.build_schema())
    except (ValueError, TypeError, GraphQLError) as e:
        click.echo(click.style(f"\nSchema validation failed: {e}", fg="red"), err=True)
        raise SystemExit(1)

    click.echo(f"Loaded {len(registry.lists)} lists:")
    for key in sorted(registry.lists):
        lst = registry.lists[key]
        click.echo(f"  ✓ {key} ({len(lst.fields)} fields, query: {lst.gql_names.list_query_name})")

    click.echo(click.style("\nSchema is valid.", fg="green", bold=True))
