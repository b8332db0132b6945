from pathlib import Path

import click

from stew.cli.error_boundary import cli_error_boundary
from stew.core.context import StewContext, create_context
from stew.core.forge.real import DEFAULT_TIMEOUT
from stew.core.logging_setup import configure_logging
from stew.core.manifest import load_manifest
from stew.core.provision import run

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"], auto_envvar_prefix="STEW")


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="stew")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default="stew.yaml",
    show_default=True,
    envvar="STEW_CONFIG",
    help="Path to stew config file.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="Timeout in seconds for each forge API request.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output.")
@click.pass_context
@cli_error_boundary
def cli(ctx: click.Context, config_path: Path, timeout: float, verbose: bool) -> None:
    """Seed a fresh Gitea instance with repositories, commits and pull requests."""
    logger = configure_logging(verbose=verbose)
    manifest = load_manifest(config_path)

    # Only create context if not already provided (e.g., by tests)
    if isinstance(ctx.obj, StewContext):
        stew_ctx = ctx.obj
    else:
        stew_ctx = create_context(manifest, logger=logger, cwd=Path.cwd(), timeout=timeout)

    try:
        report = run(stew_ctx, manifest)
    finally:
        stew_ctx.forge.close()
    report.raise_for_failure()

    total_prs = sum(len(o.pull_requests) for o in report.outcomes)
    logger.info("Provisioned repositories=%d pull_requests=%d", len(report.outcomes), total_prs)


def main() -> None:
    """CLI entry point used by the `stew` console script."""
    cli()
