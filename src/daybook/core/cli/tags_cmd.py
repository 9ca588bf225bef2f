"""daybook tags — list, create and delete tags."""

from __future__ import annotations

import click


def _service(ctx: click.Context):
    from daybook.core.cli.common import create_backend, load_config
    from daybook.journal.tag_service import TagService

    return TagService(create_backend(load_config(ctx)))


@click.group(invoke_without_command=True)
@click.pass_context
def tags(ctx: click.Context) -> None:
    """List tags, or manage them with a subcommand."""
    if ctx.invoked_subcommand is not None:
        return

    from daybook.core.cli.common import run_command

    items = run_command(_service(ctx).list_tags)
    if not items:
        click.echo("No tags yet.")
        return
    for tag in items:
        click.echo(f"{tag.id:>5}  {tag.name}  {tag.color}".rstrip())


@tags.command("add")
@click.argument("name")
@click.option("--color", default=None, help="Display color as #rrggbb.")
@click.pass_context
def add(ctx: click.Context, name: str, color: str | None) -> None:
    """Create a tag called NAME."""
    from daybook.core.cli.common import run_command

    tag = run_command(_service(ctx).create_tag, name, color)
    click.echo(f"Created tag {tag.id}: {tag.name}")


@tags.command("delete")
@click.argument("tag_id", type=int)
@click.pass_context
def delete(ctx: click.Context, tag_id: int) -> None:
    """Delete tag TAG_ID (entries keep their other tags)."""
    from daybook.core.cli.common import run_command

    run_command(_service(ctx).delete_tag, tag_id)
    click.echo(f"Deleted tag {tag_id}.")
