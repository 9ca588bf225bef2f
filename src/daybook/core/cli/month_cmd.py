"""daybook month — calendar grid with per-day entry counts."""

from __future__ import annotations

from datetime import date, datetime

import click


def _parse_month(value: str | None) -> date:
    if not value:
        return date.today().replace(day=1)
    try:
        return datetime.strptime(value, "%Y-%m").date()
    except ValueError:
        raise click.BadParameter("expected YYYY-MM", param_hint="--month") from None


@click.command()
@click.option("--month", "month_str", default=None, help="Month to show as YYYY-MM (default: this month).")
@click.option("--day", "day_str", default=None, help="Also list the entries of this day (YYYY-MM-DD).")
@click.pass_context
def month(ctx: click.Context, month_str: str | None, day_str: str | None) -> None:
    """Show a month calendar with the number of entries on each day."""
    from daybook.core.cli.common import create_backend, load_config, parse_day, run_command
    from daybook.journal.cache import TemporalCache
    from daybook.journal.config import CacheConfig

    anchor = _parse_month(month_str)
    day = parse_day(day_str, "--day")
    config = load_config(ctx)
    cache = TemporalCache(create_backend(config), CacheConfig.from_config(config))

    async def body() -> None:
        await cache.set_current_month(anchor)
        if day is not None:
            task = cache.select_day(day)
            if task is not None:
                await task

    run_command(body)

    grid = cache.month_grid()
    click.echo(grid.title.center(7 * 5))
    click.echo("".join(name.rjust(5) for name in grid.day_names()))
    for week in grid.weeks:
        row = []
        for cell in week:
            if not cell.in_month:
                row.append(" " * 5)
                continue
            count = len(cache.entries_for(cell.date) or ())
            mark = "*" if cell.is_today else " "
            row.append(f"{cell.date.day:>2}{mark}{count if count else '.':>2}")
        click.echo("".join(row))

    if day is not None:
        entries = cache.entries_for(day)
        click.echo("")
        if entries is None:
            click.echo(f"Could not load entries for {day.isoformat()}.")
        elif not entries:
            click.echo(f"No entries on {day.isoformat()}.")
        else:
            click.echo(f"Entries on {day.isoformat()}:")
            for entry in entries:
                click.echo(f"  [{entry.type.value:<6}] {entry.title}")
