"""
tokenforge — CLI entrypoint.

Usage:
    tokenforge --help
    tokenforge generate [--dry-run]
    tokenforge format [--check | --dry-run]
    tokenforge sync [--force]
    tokenforge init --producer | --consumer
    tokenforge serve
"""

from __future__ import annotations

import functools
import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from tokenforge import __version__
from tokenforge.core.config.loader import CONSUMER_CONFIG_FILE, PRODUCER_CONFIG_FILE
from tokenforge.core.errors import REPORT_ISSUE_HINT, TokenforgeError
from tokenforge.core.observability.logging_config import LogSettings, setup_logging

if TYPE_CHECKING:
    from tokenforge.core.services.formatter import FormatReport

logger = logging.getLogger(__name__)


def handle_errors(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Classified errors print their message; anything else is a bug.

    Both exit 1.  Only the unclassified path logs a traceback.
    """

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except TokenforgeError as e:
            click.echo(e.format(), err=True)
            sys.exit(1)
        except click.ClickException:
            raise
        except Exception as e:
            logger.exception("Unexpected error")
            click.secho(f"\nUnexpected error: {e}\n", fg="red", err=True)
            click.echo(REPORT_ISSUE_HINT, err=True)
            sys.exit(1)

    return wrapper


@click.group()
@click.version_option(version=__version__, prog_name="tokenforge")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, debug: bool) -> None:
    """tokenforge — generate design tokens and sync published releases."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    setup_logging(LogSettings.from_flags(verbose=verbose, quiet=quiet, debug=debug))


# ── generate ────────────────────────────────────────────────────────


@cli.command()
@click.option(
    "--config", "-c", "config_path",
    default=PRODUCER_CONFIG_FILE,
    show_default=True,
    help="Path to the producer config.",
)
@click.option("--tailwind", is_flag=True, help="Enable the Tailwind generator.")
@click.option("--figma", is_flag=True, help="Enable the Figma generator.")
@click.option("--output", "-o", default=None, help="Output directory (overrides config).")
@click.option("--dry-run", is_flag=True, help="Preview changes without writing files.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
@handle_errors
def generate(
    ctx: click.Context,
    config_path: str,
    tailwind: bool,
    figma: bool,
    output: str | None,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Generate platform outputs from design tokens (producers)."""
    from tokenforge.core.config.loader import load_producer_config
    from tokenforge.core.engine.generation import GenerationEngine
    from tokenforge.core.models.generation import RunMode
    from tokenforge.core.services.generators.registry import GeneratorRegistry

    path = Path(config_path)
    config = load_producer_config(path)

    if tailwind or figma:
        # Flags switch built-ins on; every other entry keeps its config
        overrides = {"tailwind": True} if tailwind else {}
        if figma:
            overrides["figma"] = True
        config = config.with_generators({**config.generators, **overrides})

    if output:
        config = config.with_output(output)

    tokens_dir = Path.cwd() / config.tokens
    output_dir = Path.cwd() / config.output

    engine = GenerationEngine(GeneratorRegistry(base_dir=path.parent.resolve()))
    mode = RunMode.DRY_RUN if dry_run else RunMode.WRITE
    result = engine.run(config, tokens_dir, output_dir, mode=mode)

    if as_json:
        data = result.model_dump(mode="json")
        if dry_run:
            data["output"] = str(output_dir)
        click.echo(json.dumps(data, indent=2))
        return

    if ctx.obj.get("quiet"):
        return

    label = "[dry-run] " if dry_run else ""
    click.secho(f"\n⚡ {label}generate", fg="cyan", bold=True)
    click.echo(f"   Tokens: {tokens_dir}")
    click.echo(f"   Output: {output_dir}")
    click.echo()
    for name in result.generators:
        click.secho(f"   ✓ {name}", fg="green")
        produced = [p for p in result.artifacts if p.startswith(f"{name}/")]
        verb = "would write" if dry_run else "wrote"
        for rel in produced:
            click.echo(f"     │ {verb} {rel}")
    click.echo()


# ── format ──────────────────────────────────────────────────────────


@cli.command("format")
@click.option(
    "--tokens", "-t", "tokens_path",
    default="./tokens",
    show_default=True,
    help="Token directory to format.",
)
@click.option("--check", is_flag=True, help="Exit 1 if any file is not formatted.")
@click.option("--dry-run", is_flag=True, help="Preview changes without writing files.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
@handle_errors
def format_cmd(
    ctx: click.Context,
    tokens_path: str,
    check: bool,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Rewrite token files into canonical JSON formatting."""
    from tokenforge.core.services.formatter import format_tokens

    report = format_tokens(Path(tokens_path), check=check, dry_run=dry_run)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    elif not ctx.obj.get("quiet"):
        _print_format_report(report, tokens_path)

    if check and not report.clean:
        sys.exit(1)


def _print_format_report(report: FormatReport, tokens_path: str) -> None:
    click.secho(f"\n⚡ format {tokens_path}", fg="cyan", bold=True)
    if report.total == 0:
        click.secho(f"   ⚠️  No JSON files found in {tokens_path}", fg="yellow")
        click.echo()
        return

    n, total = len(report.changed), report.total
    if report.mode == "check":
        if report.clean:
            click.secho(f"   ✓ All {total} files are correctly formatted", fg="green")
        else:
            click.secho(f"   {n} of {total} files are not formatted correctly:", fg="red")
            for rel in report.changed:
                click.echo(f"     - {rel}")
            click.echo(f"\n   Run 'tokenforge format --tokens {tokens_path}' to fix formatting.")
    elif report.mode == "dry_run":
        for rel in report.changed:
            click.echo(f"   [dry-run] Would format: {rel}")
        if report.clean:
            click.echo(f"   All {total} files are already formatted")
        else:
            click.echo(f"   Would format {n} of {total} files")
    else:
        for rel in report.changed:
            click.secho(f"   ✓ Formatted: {rel}", fg="green")
        if report.clean:
            click.secho(f"   ✓ All {total} files are already formatted", fg="green")
        else:
            click.secho(f"   Formatted {n} of {total} files", fg="green", bold=True)
    click.echo()


# ── sync ────────────────────────────────────────────────────────────


@cli.command()
@click.option(
    "--config", "-c", "config_path",
    default=CONSUMER_CONFIG_FILE,
    show_default=True,
    help="Path to the consumer config.",
)
@click.option("--force", "-f", is_flag=True, help="Sync even if versions match.")
@click.option("--dry-run", is_flag=True, help="Preview changes without writing files.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
@handle_errors
def sync(
    ctx: click.Context,
    config_path: str,
    force: bool,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Sync design tokens from a GitHub release (consumers)."""
    from tokenforge.core.config.loader import load_consumer_config
    from tokenforge.core.services.sync import SyncEngine

    config = load_consumer_config(Path(config_path))
    report = SyncEngine(Path.cwd()).sync(config, force=force, dry_run=dry_run)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    if ctx.obj.get("quiet"):
        return

    click.secho(f"\n🔄 {report.repo} @ {report.version}", fg="cyan", bold=True)
    click.echo(f"   Cached: {report.cached_version or 'none'}")
    click.echo()

    if report.status == "dry_run":
        for asset_name, output_path in report.planned.items():
            click.echo(f"   [dry-run] {asset_name} → {output_path}")
    elif report.status == "up_to_date":
        click.secho(f"   ✓ Already at {report.version} - no sync needed", fg="green")
    else:
        for rel in report.written:
            click.secho(f"   ✓ {rel}", fg="green")
        for name in report.skipped:
            click.secho(f"   ⊘ {name} (not in release)", fg="yellow")
        click.echo()
        click.secho(f"   Synced to {report.version}", fg="green", bold=True)
        if report.post_sync_ok is False:
            click.secho("   ⚠️  Post-sync command failed", fg="yellow")
    click.echo()


# ── init ────────────────────────────────────────────────────────────


@cli.command()
@click.option("--producer", is_flag=True, help="Set up as a design token producer.")
@click.option("--consumer", is_flag=True, help="Set up as a design token consumer.")
@click.option("--repo", "-r", default=None, help="GitHub repo for consumer mode (org/name).")
@handle_errors
def init(producer: bool, consumer: bool, repo: str | None) -> None:
    """Initialize tokenforge configuration."""
    from tokenforge.core.services.scaffold import init_consumer, init_producer

    if producer == consumer:
        raise click.UsageError("Choose exactly one of --producer or --consumer.")

    root = Path.cwd()
    created = init_producer(root) if producer else init_consumer(root, repo)

    for rel in created:
        click.secho(f"   ✓ Created {rel}", fg="green")

    click.echo()
    click.secho("Next steps:", bold=True)
    if producer:
        click.echo("  1. Edit tokens/colors/primitives.json with your design tokens")
        click.echo("  2. Run: tokenforge generate")
        click.echo("  3. Push to GitHub - releases will be created automatically")
    else:
        click.echo(f"  1. Update repo and version in {CONSUMER_CONFIG_FILE}")
        click.echo("  2. Set GITHUB_TOKEN environment variable (for private repos)")
        click.echo("  3. Run: tokenforge sync")
        click.echo("  4. Add .tokenforge/cache to .gitignore")
    click.echo()


# ── serve ───────────────────────────────────────────────────────────


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address.")
@click.option("--port", "-p", default=None, type=int, help="Port number (default: $PORT or 3001).")
@handle_errors
def serve(host: str, port: int | None) -> None:
    """Start the on-demand generation server."""
    from tokenforge.core.config.settings import load_settings
    from tokenforge.ui.web.server import create_app, run_server

    settings = load_settings()
    app = create_app(settings=settings)

    bind_port = port or settings.port
    click.echo()
    click.secho("⚡ tokenforge — generation server", bold=True)
    click.echo(f"   Listening:   http://{host}:{bind_port}")
    click.echo(f"   Environment: {settings.environment}")
    click.echo(f"   Preview:     {settings.preview_generator}")
    click.echo()

    run_server(app, host=host, port=bind_port)


if __name__ == "__main__":
    cli()
