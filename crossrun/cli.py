"""CLI entry point for crossrun.

Usage:
    crossrun [options] -- <file ...>
    python -m crossrun.cli [options] -- <file ...>
"""

import logging
import sys
from typing import Optional

import click

from . import __version__
from .config import CliOptions, get_log_level, is_log_at_least, resolve_run_config
from .errors import CrossrunError, NoTestFilesError
from .runner import RunExecutor

logger = logging.getLogger(__name__)


def _split_values(ctx, param, value) -> list[str]:
    """Flatten repeated, comma separated option values."""
    return [item for entry in value for item in entry.split(",") if item]


def configure_logging(log_level: Optional[str]) -> None:
    """Configure host-side logging for the given crossrun log level."""
    logging.basicConfig(
        level=get_log_level(log_level).logging_level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def _finish(ctx, log_level: Optional[str], code: int) -> None:
    if is_log_at_least(log_level, "default"):
        click.echo(f"crossrun finished with code {code}")
    ctx.exit(code)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, prog_name="crossrun")
@click.argument("files", nargs=-1)
@click.option("--exclude", multiple=True, callback=_split_values,
              help="Exclude tests patterns (comma separated)")
@click.option("--browsers", multiple=True, callback=_split_values,
              help="Browsers to run (comma separated)")
@click.option("--reporter", help="Reporter name (default, concise, tap[-<type>])")
@click.option("--log-level", help="Log level (quiet, default, error, warn, info, debug)")
@click.option("--run-todo", is_flag=True, default=False, help="Run todo tests")
@click.option("--exit-timeout", type=float,
              help="Seconds to wait after the tests finish before reporting")
@click.option("--save-adapter", help="Save adapter processed by the bundler to a file")
@click.option("--unresolved-module", type=click.Choice(["ignore", "fail"]),
              help="Unresolved modules handling strategy")
@click.option("-p", "--browser-port", type=int, help="Browser port")
@click.option("-c", "--config", "config_file", help="Config file (JSON or YAML)")
@click.option("--karma-config", help="Test server config overrides (JSON or YAML)")
@click.pass_context
def cli(
    ctx,
    files,
    exclude,
    browsers,
    reporter,
    log_level,
    run_todo,
    exit_timeout,
    save_adapter,
    unresolved_module,
    browser_port,
    config_file,
    karma_config,
):
    """Run host-process JavaScript tests inside browsers."""
    options = CliOptions(
        files=list(files),
        exclude=exclude,
        browsers=browsers,
        reporter=reporter,
        log_level=log_level,
        run_todo=run_todo or None,
        exit_timeout=exit_timeout,
        save_adapter=save_adapter,
        unresolved_module=unresolved_module,
        browser_port=browser_port,
        config=config_file,
        karma_config=karma_config,
    )
    configure_logging(options.log_level)

    try:
        config = resolve_run_config(options)
    except NoTestFilesError as e:
        click.echo(f"{e}\n", err=True)
        click.echo(ctx.get_help(), err=True)
        _finish(ctx, options.log_level, 1)
    except CrossrunError as e:
        click.echo(str(e), err=True)
        ctx.exit(1)

    configure_logging(config.log_level)

    server_factory = (ctx.obj or {}).get("server_factory")
    executor = (
        RunExecutor(config, server_factory=server_factory)
        if server_factory
        else RunExecutor(config)
    )

    try:
        result = executor.execute()
    except KeyboardInterrupt:
        click.echo("Test run interrupted by user", err=True)
        ctx.exit(130)

    logger.debug("Run took %d ms", result.duration_ms)
    if result.error:
        click.echo(result.error, err=True)

    _finish(ctx, config.log_level, result.exit_code)


def main():
    """Main CLI entry point."""
    cli(prog_name="crossrun")


if __name__ == "__main__":
    main()
