"""daybook stats — all-time totals, type breakdown and weekly activity."""

from __future__ import annotations

import click


@click.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show totals, streaks, entries per type and the last eight weeks."""
    from daybook.core.cli.common import create_backend, load_config, run_command
    from daybook.journal.calendar import DAY_NAMES
    from daybook.journal.stats import RECENT_LIMIT, StatsService, type_breakdown

    config = load_config(ctx)
    service = StatsService(create_backend(config))

    async def body():
        return await service.overview(), await service.activity()

    overview, (weeks, weekdays) = run_command(body)

    click.echo(f"{overview.total_entries} entries on {overview.active_days} days")
    click.echo(f"Current streak: {overview.current_streak}  Longest streak: {overview.longest_streak}")

    breakdown = type_breakdown(overview)
    if breakdown:
        click.echo("")
        click.echo("By type:")
        for entry_type, count in breakdown:
            click.echo(f"  {entry_type.value:<6} {count}")

    click.echo("")
    click.echo("Weekly activity:")
    for week in weeks:
        click.echo(f"  {week.label:>6}  {'#' * week.count} {week.count}")
    click.echo("  " + "  ".join(f"{name} {n}" for name, n in zip(DAY_NAMES, weekdays)))

    if overview.recent_entries:
        click.echo("")
        click.echo("Recent entries:")
        for entry in overview.recent_entries[:RECENT_LIMIT]:
            click.echo(f"  {entry.date_key}  [{entry.type.value:<6}] {entry.title}")
