"""
CLI commands exposing the retry/download primitives to shell scripts.

Feature install scripts call these instead of hand-rolling loops:

    devinit retry -n 3 -s 5 -- git clone https://...
    devinit apt -- install -y curl
    devinit download https://example.com/f.tgz /tmp/f.tgz
    devinit pipe https://get.pnpm.io/install.sh -- sh -
    devinit wait-network --max-wait 60

Every command exits with the exit code of what it ran.
"""

from __future__ import annotations

import sys

import click

from devinit.ui.cli.common import (
    make_reporter,
    make_runner,
    make_sleep,
    resolve_devcontainer_dir,
    settings_or_exit,
)

_PASSTHROUGH = {"ignore_unknown_options": True, "allow_interspersed_args": False}


@click.command(context_settings=_PASSTHROUGH)
@click.option("--attempts", "-n", default=3, show_default=True, type=click.IntRange(min=1),
              help="Maximum number of attempts.")
@click.option("--delay", "-s", default=5.0, show_default=True, type=click.FloatRange(min=0),
              help="Seconds between attempts (initial delay with --exponential).")
@click.option("--exponential", "-e", is_flag=True, help="Double the delay after each failure.")
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_context
def retry(
    ctx: click.Context,
    attempts: int,
    delay: float,
    exponential: bool,
    command: tuple[str, ...],
) -> None:
    """Run COMMAND until it succeeds or attempts run out."""
    from devinit.core.models.command import Command
    from devinit.core.models.retry import ExponentialBackoff, FixedBackoff
    from devinit.core.reliability.retry import RetryExecutor

    reporter, _ = make_reporter(ctx)
    policy = ExponentialBackoff(delay) if exponential else FixedBackoff(delay)
    executor = RetryExecutor(make_runner(ctx), reporter, sleep=make_sleep(ctx))
    sys.exit(executor.run(Command(argv=command), attempts, policy))


@click.command(context_settings=_PASSTHROUGH)
@click.argument("args", nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_context
def apt(ctx: click.Context, args: tuple[str, ...]) -> None:
    """apt-get ARGS with lock waiting, repair and retries."""
    from devinit.core.services.bootstrap.execution.package_install import LockAwareInstaller

    settings = settings_or_exit(resolve_devcontainer_dir(ctx))
    reporter, _ = make_reporter(ctx)
    installer = LockAwareInstaller(make_runner(ctx), reporter, settings, sleep=make_sleep(ctx))
    sys.exit(installer.install(list(args)))


@click.command(context_settings=_PASSTHROUGH)
@click.argument("url")
@click.argument("destination", type=click.Path(dir_okay=False))
@click.argument("curl_options", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def download(ctx: click.Context, url: str, destination: str, curl_options: tuple[str, ...]) -> None:
    """Resumable download of URL to DESTINATION (extra curl options after --)."""
    from devinit.core.services.bootstrap.execution.download import DownloadPipeline

    settings = settings_or_exit(resolve_devcontainer_dir(ctx))
    reporter, _ = make_reporter(ctx)
    pipeline = DownloadPipeline(make_runner(ctx), reporter, settings, sleep=make_sleep(ctx))
    sys.exit(pipeline.download(url, destination, curl_options))


@click.command(context_settings=_PASSTHROUGH)
@click.argument("url")
@click.argument("interpreter", nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_context
def pipe(ctx: click.Context, url: str, interpreter: tuple[str, ...]) -> None:
    """Download URL, then feed it on stdin to INTERPRETER."""
    from devinit.core.services.bootstrap.execution.download import DownloadPipeline

    settings = settings_or_exit(resolve_devcontainer_dir(ctx))
    reporter, _ = make_reporter(ctx)
    pipeline = DownloadPipeline(make_runner(ctx), reporter, settings, sleep=make_sleep(ctx))
    sys.exit(pipeline.download_and_execute(url, interpreter))


@click.command("wait-network")
@click.option("--max-wait", default=None, type=click.FloatRange(min=0),
              help="Seconds to wait (default: network_max_wait setting).")
@click.option("--url", default=None, help="URL to probe (default: network_probe_url setting).")
@click.pass_context
def wait_network(ctx: click.Context, max_wait: float | None, url: str | None) -> None:
    """Block until the network is reachable; exit 1 on timeout."""
    from devinit.core.services.bootstrap.detection.network import wait_for_network

    settings = settings_or_exit(resolve_devcontainer_dir(ctx))
    reporter, _ = make_reporter(ctx)
    ok = wait_for_network(
        reporter,
        url=url or settings.network_probe_url,
        max_wait=settings.network_max_wait if max_wait is None else max_wait,
        interval=settings.network_poll_interval,
        timeout=settings.network_probe_timeout,
        sleep=make_sleep(ctx),
    )
    sys.exit(0 if ok else 1)
