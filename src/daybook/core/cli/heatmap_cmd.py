"""daybook heatmap — 53-week activity grid and streaks."""

from __future__ import annotations

import click

_SYMBOLS = " .oO#"


@click.command()
@click.pass_context
def heatmap(ctx: click.Context) -> None:
    """Show the activity heatmap for the past year."""
    from daybook.core.cli.common import create_backend, load_config, run_command
    from daybook.journal.cache import TemporalCache
    from daybook.journal.config import CacheConfig

    config = load_config(ctx)
    cache = TemporalCache(create_backend(config), CacheConfig.from_config(config))
    run_command(cache.refresh_heatmap)

    view = cache.heatmap_view()
    if view is None:
        click.echo("No heatmap data.")
        return

    header = [" "] * len(view.weeks)
    for label in view.month_labels:
        for i, ch in enumerate(label.label):
            if label.column + i < len(header):
                header[label.column + i] = ch
    click.echo("".join(header))
    for row in range(7):
        click.echo("".join(_SYMBOLS[week[row].level] if week[row] else " " for week in view.weeks))

    snap = view.snapshot
    click.echo("")
    click.echo(f"{snap.total_entries} entries on {snap.active_days} days")
    click.echo(f"Current streak: {snap.current_streak}  Longest streak: {snap.longest_streak}")
