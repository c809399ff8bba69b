"""
devinit — CLI entrypoint.

Usage:
    devinit                       # full initializeCommand hook
    devinit init --json
    devinit service
    devinit features check
    devinit retry -n 3 -s 5 -- git fetch
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from devinit.core.observability.logging_config import resolve_level, setup_logging
from devinit.core.observability.reporter import debug_enabled_from_env

from devinit import __version__


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="devinit")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging and [DEBUG] lines.")
@click.option(
    "--devcontainer-dir",
    "-d",
    "devcontainer_dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Path to .devcontainer (default: auto-detect).",
)
@click.option("--dry-run", is_flag=True, help="Print the plan without running commands.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    devcontainer_dir: str | None,
    dry_run: bool,
) -> None:
    """devinit — prepare the host before a devcontainer is built.

    Without a sub-command, runs the full initialize hook.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug or debug_enabled_from_env()
    ctx.obj["devcontainer_dir"] = Path(devcontainer_dir) if devcontainer_dir else None
    ctx.obj["dry_run"] = dry_run

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(
            debug=debug,
            verbose=verbose,
            quiet=quiet,
            env_level=os.environ.get("DEVINIT_LOG_LEVEL"),
        ),
        log_file=os.environ.get("DEVINIT_LOG_FILE"),
        log_file_level=os.environ.get("DEVINIT_LOG_FILE_LEVEL"),
        quiet_third_party=not debug,
    )

    if ctx.invoked_subcommand is None:
        ctx.invoke(init)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--skip-service", is_flag=True, help="Do not install/start the inference service.")
@click.option("--skip-docker", is_flag=True, help="Skip image pull and compose cleanup.")
@click.pass_context
def init(ctx: click.Context, as_json: bool, skip_service: bool, skip_docker: bool) -> None:
    """Run the initialize hook (env file, features, service, docker)."""
    from devinit.core.use_cases.initialize import run_initialize
    from devinit.ui.cli.common import (
        make_reporter,
        make_runner,
        make_sleep,
        resolve_devcontainer_dir,
        settings_or_exit,
    )

    devcontainer_dir = resolve_devcontainer_dir(ctx)
    if devcontainer_dir is None:
        click.secho("❌ No .devcontainer directory found.", fg="red", err=True)
        sys.exit(1)

    settings = settings_or_exit(devcontainer_dir)
    reporter, sink = make_reporter(ctx, as_json=as_json)

    result = run_initialize(
        devcontainer_dir,
        make_runner(ctx),
        reporter,
        settings=settings,
        sleep=make_sleep(ctx),
        skip_service=skip_service,
        skip_docker=skip_docker,
    )

    if as_json:
        payload = result.to_dict()
        payload["log"] = [{"level": lvl, "message": msg} for lvl, msg in sink.lines] if sink else []
        click.echo(json.dumps(payload, indent=2))

    sys.exit(result.exit_code)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def service(ctx: click.Context, as_json: bool) -> None:
    """Install, start and warm up the local inference service.

    Always exits 0: a degraded service is not an error.
    """
    from devinit.core.use_cases.initialize import bootstrap_service
    from devinit.ui.cli.common import (
        make_reporter,
        make_runner,
        make_sleep,
        resolve_devcontainer_dir,
        settings_or_exit,
    )

    devcontainer_dir = resolve_devcontainer_dir(ctx)
    settings = settings_or_exit(devcontainer_dir)
    reporter, sink = make_reporter(ctx, as_json=as_json)

    outcome = bootstrap_service(
        devcontainer_dir, make_runner(ctx), reporter, settings, sleep=make_sleep(ctx)
    )

    if as_json:
        payload = outcome.to_dict()
        payload["log"] = [{"level": lvl, "message": msg} for lvl, msg in sink.lines] if sink else []
        click.echo(json.dumps(payload, indent=2))


# ── Sub-command groups ───────────────────────────────────────────

from devinit.ui.cli.features import features
from devinit.ui.cli.tools import apt, download, pipe, retry, wait_network

cli.add_command(features)
cli.add_command(retry)
cli.add_command(apt)
cli.add_command(download)
cli.add_command(pipe)
cli.add_command(wait_network)


if __name__ == "__main__":
    cli()
