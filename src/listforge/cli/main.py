"""ListForge CLI entry point."""

import click


@click.group()
def cli():
    """ListForge: content-model-driven GraphQL API CLI."""
    pass


# Register subcommand groups
from listforge.cli.schema_cmd import schema  # noqa: E402

cli.add_command(schema)
