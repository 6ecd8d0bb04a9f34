"""codesearch CLI — build, sync, and find."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import click

from codesearch import __version__
from codesearch._codesearch import CodeSearch
from codesearch.config import (
    DEFAULT_EXTENSIONS,
    DEFAULT_FIND_LIMIT,
    DEFAULT_MIN_SIMILARITY,
    DEFAULT_MODEL,
    DEFAULT_PROVIDER,
)
from codesearch.exceptions import CodeSearchError, ProjectNotFoundError

if TYPE_CHECKING:
    from collections.abc import Coroutine


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _print_progress(processed: int, total: int) -> None:
    click.echo(f"Progress: {processed / total * 100:.2f}%")


async def _with_timeout(coro: Coroutine[Any, Any, Any], timeout: float | None) -> Any:
    if timeout is None:
        return await coro
    async with asyncio.timeout(timeout):
        return await coro


def _run(ctx: click.Context, coro: Coroutine[Any, Any, Any], action: str) -> Any:
    """Run *coro* to completion, turning codesearch errors into exit status 1."""
    try:
        return asyncio.run(_with_timeout(coro, ctx.obj["timeout"]))
    except ProjectNotFoundError as exc:
        click.echo(f"Error during {action} operation: {exc}", err=True)
        click.echo(
            f"Run 'codesearch build {exc.alias} <path>' to create the project first.", err=True
        )
        ctx.exit(1)
    except CodeSearchError as exc:
        click.echo(f"Error during {action} operation: {exc}", err=True)
        ctx.exit(1)
    except TimeoutError:
        click.echo(f"Error during {action} operation: timed out", err=True)
        ctx.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="codesearch")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory holding project databases (default: $CODESEARCH_DATA_DIR or ~/.codesearch)",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Abort the whole operation after this many seconds",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, data_dir: str | None, timeout: float | None) -> None:
    """CLI for managing code embeddings and search."""
    ctx.ensure_object(dict)
    ctx.obj["timeout"] = timeout
    ctx.obj.setdefault("codesearch", CodeSearch(data_dir=data_dir))
    configure_logging(verbose)


@cli.command("build")
@click.argument("alias")
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.argument("provider", required=False, default=DEFAULT_PROVIDER)
@click.argument("model", required=False, default=DEFAULT_MODEL)
@click.argument("extensions", required=False, default=",".join(DEFAULT_EXTENSIONS))
@click.pass_context
def build_command(
    ctx: click.Context, alias: str, path: str, provider: str, model: str, extensions: str
) -> None:
    """Build embeddings for a project.

    ALIAS names the project, PATH is its root directory.  PROVIDER is
    litellm or ollama, MODEL the embedding model, and EXTENSIONS a
    comma-separated list of file extensions to index.
    """
    cs: CodeSearch = ctx.obj["codesearch"]
    report = _run(
        ctx,
        cs.build(alias, path, provider, model, extensions, progress=_print_progress),
        "build",
    )
    if report.skipped:
        click.echo(f"Skipped {len(report.skipped)} files (see log)")
    click.echo(f"Project '{alias}' built successfully")


@cli.command("sync")
@click.argument("alias")
@click.pass_context
def sync_command(ctx: click.Context, alias: str) -> None:
    """Sync embeddings for a project using its stored configuration."""
    cs: CodeSearch = ctx.obj["codesearch"]
    report = _run(ctx, cs.sync(alias), "sync")
    click.echo(
        f"Added {len(report.added)}, updated {len(report.updated)}, "
        f"removed {len(report.removed)}, skipped {len(report.skipped)}"
    )
    click.echo(f"Project '{alias}' synced successfully")


@cli.command("find")
@click.argument("alias")
@click.argument("query", nargs=-1, required=True)
@click.option("--limit", type=click.IntRange(min=1), default=DEFAULT_FIND_LIMIT, show_default=True)
@click.option(
    "--min-similarity",
    type=click.FloatRange(0.0, 1.0),
    default=DEFAULT_MIN_SIMILARITY,
    show_default=True,
)
@click.pass_context
def find_command(
    ctx: click.Context, alias: str, query: tuple[str, ...], limit: int, min_similarity: float
) -> None:
    """Search for code files in a project.  Remaining arguments form the query."""
    cs: CodeSearch = ctx.obj["codesearch"]
    text = " ".join(query).strip()
    click.echo(f"Searching for: {text}")
    results = _run(
        ctx, cs.find(alias, text, limit=limit, min_similarity=min_similarity), "search"
    )
    click.echo(f"Found {len(results)} files")
    for result in results:
        click.echo(f"{result.path} \t ({result.distance:f} {result.id})")


if __name__ == "__main__":
    cli()
