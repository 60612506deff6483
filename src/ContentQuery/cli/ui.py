"""Click CLI interface definitions.

Defines the command-line interface structure and routes commands
to their respective runners.
"""

from __future__ import annotations

from pathlib import Path

import click
from dotenv import load_dotenv

from ContentQuery.cli.commands import EntriesCommand, EntryFilters, InvalidateCommand
from ContentQuery.cli.runner import CommandRunner
from ContentQuery.config import load_config_with_defaults


@click.group(help="ContentQuery: query entries of the content model.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=Path("config/default.yml"),
    show_default=True,
    help="Path to YAML config file (merged over config/default.yml).",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path) -> None:
    """CLI entry group.

    Loads environment variables from .env file before processing config.
    """
    load_dotenv()
    ctx.obj = load_config_with_defaults(config_path)


@cli.command("init-db")
@click.pass_context
def init_db_cmd(ctx: click.Context) -> None:
    """Create or upgrade the database schema."""
    runner = CommandRunner(ctx.obj)
    click.echo(runner.run(ctx.command.name, lambda storage: "database ready"))


@cli.command("entries")
@click.option("--section", multiple=True, help="Section handle (repeatable).")
@click.option("--type", "type_", multiple=True, help="Entry type handle (repeatable).")
@click.option("--author-id", multiple=True, type=int, help="Author user id (repeatable).")
@click.option("--author-group", multiple=True, help="Author group handle (repeatable).")
@click.option("--status", multiple=True, help="Status name (repeatable). Defaults to live.")
@click.option("--any-status", is_flag=True, help="Disable status filtering.")
@click.option("--post-date", help="Post date condition, e.g. '>= 2026-01-01'.")
@click.option("--before", help="Posted before this date.")
@click.option("--after", help="Posted on or after this date.")
@click.option("--expiry-date", help="Expiry date condition, e.g. ':empty:'.")
@click.option("--ref", help="Reference tokens: 'slug' or 'section/slug'.")
@click.option("--slug", help="Slug condition.")
@click.option("--editable", is_flag=True, help="Only entries the --user may edit.")
@click.option("--user", "username", help="Username of the acting user.")
@click.option("--order-by", help="Ordering, e.g. 'entries.postDate desc'.")
@click.option("--limit", type=int, help="Maximum number of rows.")
@click.option("--offset", type=int, help="Rows to skip.")
@click.option("--sql", "show_sql", is_flag=True, help="Print the SQL instead of running it.")
@click.option("--count", is_flag=True, help="Print the number of matching entries.")
@click.pass_context
def entries_cmd(
    ctx: click.Context,
    section: tuple[str, ...],
    type_: tuple[str, ...],
    author_id: tuple[int, ...],
    author_group: tuple[str, ...],
    status: tuple[str, ...],
    any_status: bool,
    post_date: str | None,
    before: str | None,
    after: str | None,
    expiry_date: str | None,
    ref: str | None,
    slug: str | None,
    editable: bool,
    username: str | None,
    order_by: str | None,
    limit: int | None,
    offset: int | None,
    show_sql: bool,
    count: bool,
) -> None:
    """Query entries and print them as JSON."""
    config = ctx.obj
    filters = EntryFilters(
        section=section,
        type=type_,
        author_id=author_id,
        author_group=author_group,
        status=status,
        any_status=any_status,
        post_date=post_date,
        before=before,
        after=after,
        expiry_date=expiry_date,
        ref=ref,
        slug=slug,
        editable=editable,
        order_by=order_by,
        limit=limit,
        offset=offset,
    )
    runner = CommandRunner(config)
    output = runner.run(
        ctx.command.name,
        lambda storage: EntriesCommand(
            config=config,
            storage=storage,
            filters=filters,
            username=username,
            show_sql=show_sql,
            count=count,
        ).execute(),
    )
    click.echo(output)


@cli.command("invalidate")
@click.option("--section-id", multiple=True, type=int, help="Section id whose results to drop.")
@click.option("--type-id", multiple=True, type=int, help="Entry type id whose results to drop.")
@click.option("--tag", multiple=True, help="Raw cache tag (repeatable).")
@click.pass_context
def invalidate_cmd(
    ctx: click.Context,
    section_id: tuple[int, ...],
    type_id: tuple[int, ...],
    tag: tuple[str, ...],
) -> None:
    """Invalidate cached query results."""
    runner = CommandRunner(ctx.obj)
    output = runner.run(
        ctx.command.name,
        lambda storage: InvalidateCommand(
            storage=storage,
            section_ids=section_id,
            type_ids=type_id,
            tags=tag,
        ).execute(),
    )
    click.echo(output)
