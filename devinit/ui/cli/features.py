"""
CLI commands for devcontainer feature validation.

Thin wrappers over ``devinit.core.services.features``.
"""

from __future__ import annotations

import json
import sys

import click

from devinit.ui.cli.common import resolve_devcontainer_dir


@click.group()
def features() -> None:
    """Features — structural checks over .devcontainer/features."""


@features.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(ctx: click.Context, as_json: bool) -> None:
    """Validate every <category>/<feature> directory."""
    from devinit.core.services.features import validate_features
    from devinit.core.use_cases.initialize import FEATURES_DIR

    devcontainer_dir = resolve_devcontainer_dir(ctx)
    if devcontainer_dir is None:
        click.secho("❌ No .devcontainer directory found.", fg="red")
        sys.exit(1)

    dry_run = bool(ctx.obj.get("dry_run"))
    report = validate_features(devcontainer_dir / FEATURES_DIR, fix=not dry_run)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        sys.exit(0 if report.ok else 1)

    click.secho(f"\n🔍 Features: {len(report.checked)} checked", fg="cyan", bold=True)
    verb = "would make" if dry_run else "made"
    for name in report.fixed:
        click.secho(f"   🔧 {name}: {verb} install.sh executable", fg="yellow")
    for error in report.errors:
        click.secho(f"   ✗ {error}", fg="red")

    click.echo()
    if not report.ok:
        click.secho(f"❌ {len(report.errors)} critical error(s)", fg="red", bold=True)
        sys.exit(1)
    click.secho("✅ All features validated successfully", fg="green", bold=True)
