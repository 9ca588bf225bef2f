"""daybook search — search entries by text."""

from __future__ import annotations

import click


@click.command()
@click.argument("query")
@click.pass_context
def search(ctx: click.Context, query: str) -> None:
    """Search all entries for QUERY."""
    from daybook.core.cli.common import create_backend, load_config, run_command
    from daybook.journal.config import SearchConfig
    from daybook.journal.search import SearchPipeline, SearchState

    config = load_config(ctx)
    pipeline = SearchPipeline(create_backend(config).search_entries, SearchConfig(debounce_seconds=0))

    async def body() -> None:
        pipeline.set_query(query)
        await pipeline.drain()

    run_command(body)

    if pipeline.state is SearchState.FAILED:
        click.echo(f"Error: {pipeline.error}", err=True)
        ctx.exit(1)
    results = pipeline.results or []
    if not results:
        click.echo(f"No entries match {query!r}.")
        return
    for entry in results:
        click.echo(f"{entry.date_key}  [{entry.type.value:<6}] {entry.title}")
