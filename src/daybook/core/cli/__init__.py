"""Daybook CLI: entry point for the month, heatmap, entries, goals, tags, stats and search commands."""

import click

from daybook import __version__


@click.group()
@click.version_option(version=__version__, package_name="daybook")
@click.option("--config", "config_file", default=None, help="Path to a YAML or JSON config file.")
@click.option("--log-level", default=None, help="Override the configured log level.")
@click.pass_context
def main(ctx: click.Context, config_file: str | None, log_level: str | None) -> None:
    """Daybook: your personal log from the terminal."""
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file
    ctx.obj["log_level"] = log_level


# Register subcommands
from .entries_cmd import entries
from .goals_cmd import goals
from .heatmap_cmd import heatmap
from .month_cmd import month
from .search_cmd import search
from .stats_cmd import stats
from .tags_cmd import tags

main.add_command(month)
main.add_command(heatmap)
main.add_command(goals)
main.add_command(search)
main.add_command(entries)
main.add_command(stats)
main.add_command(tags)
