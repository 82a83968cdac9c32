"""CLI commands for replaycheck."""

from __future__ import annotations

import logging
import sys

import click

from replaycheck.config import DEFAULT_CREDENTIAL_FILE, OUTPUT_FORMATS, ReplayConfig, load_config
from replaycheck.errors import ReplayCheckError
from replaycheck.fixtures import FixtureLoader, load_credential
from replaycheck.http import HttpxTransport
from replaycheck.reporting import create_reporter
from replaycheck.runner import ReplayRunner, StatusPolicy

logger = logging.getLogger(__name__)

EXIT_FATAL = 2


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--config", "-c", type=click.Path(exists=True), help="Path to config file")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: str | None) -> None:
    """replaycheck - replay recorded API requests and diff the responses."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("fixture_paths", nargs=-1, type=click.Path())
@click.option(
    "--token",
    "-t",
    "credential_file",
    type=click.Path(),
    help=f'JSON file with {{"authorization": ...}} (default: {DEFAULT_CREDENTIAL_FILE})',
)
@click.option("--timeout", "request_timeout", type=float, help="Per-request timeout in seconds")
@click.option("--strict-status", is_flag=True, help="Require the live status to equal the recorded one")
@click.option(
    "--status-policy",
    type=click.Choice([policy.value for policy in StatusPolicy]),
    help="Which live statuses allow body comparison (default: ok = 200 only)",
)
@click.option("--skip-body-logging", is_flag=True, help="Do not print live response bodies")
@click.option("--workers", "-w", type=int, help="Number of fixtures replayed in parallel")
@click.option("--fail-fast", is_flag=True, help="Stop on first failure")
@click.option("--no-follow-redirects", is_flag=True, help="Report 3xx responses instead of following them")
@click.option("--format", "-f", "output_format", type=click.Choice(list(OUTPUT_FORMATS)), help="Output format")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def run(
    ctx: click.Context,
    fixture_paths: tuple[str, ...],
    credential_file: str | None,
    request_timeout: float | None,
    strict_status: bool,
    status_policy: str | None,
    skip_body_logging: bool,
    workers: int | None,
    fail_fast: bool,
    no_follow_redirects: bool,
    output_format: str | None,
    no_color: bool,
) -> None:
    """Replay fixtures and compare live responses with their baselines.

    FIXTURE_PATHS may be files or directories. With none given, the
    ``fixtures`` list from the config file is used.
    """
    verbose = ctx.obj.get("verbose", False)

    try:
        config = load_config(
            ctx.obj.get("config_path"),
            credential_file=credential_file,
            fixtures=list(fixture_paths) or None,
            request_timeout=request_timeout,
            strict_status_check=True if strict_status else None,
            status_policy=status_policy,
            skip_body_logging=True if skip_body_logging else None,
            workers=workers,
            fail_fast=True if fail_fast else None,
            follow_redirects=False if no_follow_redirects else None,
            output_format=output_format,
            color=False if no_color else None,
            verbose=True if verbose else None,
        )
    except ReplayCheckError as e:
        click.echo(e.format_verbose(), err=True)
        sys.exit(EXIT_FATAL)

    setup_logging(config.verbose)
    sys.exit(_execute(config))


def _execute(config: ReplayConfig) -> int:
    """Run a configured replay and return the process exit code."""
    reporter = create_reporter(
        config.output_format,
        color=config.color,
        show_body=not config.skip_body_logging,
    )

    try:
        credential = load_credential(config.credential_file)
    except ReplayCheckError as e:
        logger.error(f"Aborting run: {e}")
        reporter.fatal(e)
        return EXIT_FATAL

    if not config.fixtures:
        click.echo("No fixtures given. Pass fixture files or directories.", err=True)
        return EXIT_FATAL

    fixtures = FixtureLoader().load_many(config.fixtures)
    if not fixtures:
        click.echo(f"No fixture files found in: {', '.join(config.fixtures)}", err=True)
        return EXIT_FATAL

    runner_config = config.runner_config()
    with HttpxTransport(
        timeout=runner_config.request_timeout,
        follow_redirects=config.follow_redirects,
    ) as transport:
        runner = ReplayRunner(
            transport,
            config=runner_config,
            credential=credential,
            on_result=reporter.fixture_done,
        )
        summary = runner.run(fixtures)

    reporter.summary(summary)
    return summary.exit_code
