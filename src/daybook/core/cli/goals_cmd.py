"""daybook goals — goal progress and deadlines, plus goal management."""

from __future__ import annotations

import click


@click.group(invoke_without_command=True)
@click.option(
    "--status",
    type=click.Choice(["active", "completed", "archived"], case_sensitive=False),
    default=None,
    help="Only show goals with this status.",
)
@click.pass_context
def goals(ctx: click.Context, status: str | None) -> None:
    """List goals with milestone progress and deadline badges."""
    if ctx.invoked_subcommand is not None:
        return

    from daybook.core.cli.common import create_backend, load_config, run_command
    from daybook.journal.goal_service import GoalService
    from daybook.journal.goals import DeadlineBadge, GoalStatus

    config = load_config(ctx)
    service = GoalService(create_backend(config))
    items = run_command(service.list_goals, GoalStatus(status.upper()) if status else None)

    if not items:
        click.echo("No goals yet.")
        return

    for goal in items:
        progress = service.progress(goal)
        badge = f"  ({progress.badge_text})" if progress.badge is not DeadlineBadge.NONE else ""
        click.echo(
            f"{goal.title}: {progress.percent}% "
            f"[{progress.completed_milestones}/{progress.total_milestones}] {goal.status.value.lower()}{badge}"
        )


def _service(ctx: click.Context):
    from daybook.core.cli.common import create_backend, load_config
    from daybook.journal.goal_service import GoalService

    return GoalService(create_backend(load_config(ctx)))


@goals.command("add")
@click.argument("title")
@click.option("--type", "goal_type", default="PERSONAL", show_default=True, help="Goal category.")
@click.option("--description", default=None)
@click.option("--color", default="#818cf8", show_default=True, help="Display color as #rrggbb.")
@click.option("--target", "target_str", default=None, help="Target date (YYYY-MM-DD).")
@click.pass_context
def add(
    ctx: click.Context,
    title: str,
    goal_type: str,
    description: str | None,
    color: str,
    target_str: str | None,
) -> None:
    """Create a goal called TITLE."""
    from daybook.core.cli.common import parse_day, run_command
    from daybook.journal.goals import GoalDraft

    draft = GoalDraft(
        title=title,
        type=goal_type.upper(),
        description=description,
        color=color,
        target_date=parse_day(target_str, "--target"),
    )
    goal = run_command(_service(ctx).create_goal, draft)
    click.echo(f"Created goal {goal.id}: {goal.title}")


@goals.command("edit")
@click.argument("goal_id", type=int)
@click.option("--title", default=None)
@click.option("--type", "goal_type", default=None)
@click.option("--description", default=None)
@click.option("--color", default=None)
@click.option("--target", "target_str", default=None, help="Target date (YYYY-MM-DD).")
@click.pass_context
def edit(
    ctx: click.Context,
    goal_id: int,
    title: str | None,
    goal_type: str | None,
    description: str | None,
    color: str | None,
    target_str: str | None,
) -> None:
    """Change fields of goal GOAL_ID; only the options given are sent."""
    from daybook.core.cli.common import parse_day, run_command
    from daybook.journal.goals import GoalPatch

    patch = GoalPatch(
        title=title,
        type=goal_type.upper() if goal_type else None,
        description=description,
        color=color,
        target_date=parse_day(target_str, "--target"),
    )
    goal = run_command(_service(ctx).update_goal, goal_id, patch)
    click.echo(f"Updated goal {goal.id}: {goal.title}")


@goals.command("delete")
@click.argument("goal_id", type=int)
@click.confirmation_option(prompt="Delete this goal and its milestones?")
@click.pass_context
def delete(ctx: click.Context, goal_id: int) -> None:
    """Delete goal GOAL_ID."""
    from daybook.core.cli.common import run_command

    run_command(_service(ctx).delete_goal, goal_id)
    click.echo(f"Deleted goal {goal_id}.")
