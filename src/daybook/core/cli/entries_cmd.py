"""daybook entries — browse entries over a date range."""

from __future__ import annotations

import click

_PRESETS = ["7d", "30d", "90d", "thisMonth", "thisYear"]
_TYPES = ["note", "skill", "action", "event", "commit", "goal"]


@click.command()
@click.option("--preset", type=click.Choice(_PRESETS), default="30d", show_default=True, help="Date range.")
@click.option("--from", "start_str", default=None, help="Custom range start (YYYY-MM-DD); needs --to.")
@click.option("--to", "end_str", default=None, help="Custom range end (YYYY-MM-DD).")
@click.option("--type", "type_str", type=click.Choice(_TYPES, case_sensitive=False), default=None)
@click.option("--filter", "query", default="", help="Only entries whose title, content or tags contain this.")
@click.pass_context
def entries(
    ctx: click.Context,
    preset: str,
    start_str: str | None,
    end_str: str | None,
    type_str: str | None,
    query: str,
) -> None:
    """List entries grouped by day, newest first."""
    from daybook.core.cli.common import create_backend, load_config, parse_day, run_command
    from daybook.journal.browse import EntryBrowser
    from daybook.journal.models import EntryType

    start = parse_day(start_str, "--from")
    end = parse_day(end_str, "--to")
    if (start is None) != (end is None):
        raise click.UsageError("--from and --to must be given together")
    entry_type = EntryType(type_str.upper()) if type_str else None

    config = load_config(ctx)
    browser = EntryBrowser(create_backend(config))
    if start is not None and end is not None:
        run_command(browser.load, start, end, entry_type)
    else:
        run_command(browser.load_preset, preset, entry_type)

    groups = browser.grouped(query)
    if not groups:
        click.echo(f"No entries between {browser.start} and {browser.end}.")
        return
    total = sum(len(items) for _, items in groups)
    click.echo(f"{total} entries between {browser.start} and {browser.end}")
    for day, items in groups:
        click.echo("")
        click.echo(day)
        for entry in items:
            click.echo(f"  [{entry.type.value:<6}] {entry.title}")
