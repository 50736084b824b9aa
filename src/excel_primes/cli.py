"""Command-line interface for Excel Prime Finder.

Usage:
    excel-primes [--config FILE] FILE_PATH

Prints every prime found as text in column B of the first worksheet of
FILE_PATH, one per line. Every outcome, including unreadable or password
protected files, exits with status 0 unless processing.error_exit_code
is configured otherwise.
"""

import sys
from typing import Optional, Tuple

import click

from excel_primes import __version__
from excel_primes.config.config_manager import ConfigurationError, config_manager
from excel_primes.processors.sheet_scanner import ScanAborted, SheetScanner
from excel_primes.utils.logger import setup_logging


USAGE_MESSAGE = "Need exactly one argument - the path to an Excel file."


@click.command(context_settings={'ignore_unknown_options': True})
@click.argument('file_paths', nargs=-1, metavar='FILE_PATH')
@click.option('--config', '-c', type=click.Path(exists=True, dir_okay=False), help='Configuration file path')
@click.option('--version', is_flag=True, help='Show version information')
@click.pass_context
def main(ctx: click.Context, file_paths: Tuple[str, ...], config: Optional[str], version: bool) -> None:
    """Excel Prime Finder - print primes stored as text in column B.

    Reads the first worksheet of FILE_PATH and prints each text cell of
    column B that is a plain decimal number and prime, in row order.
    """
    if version:
        click.echo(f"Excel Prime Finder v{__version__}")
        return

    if len(file_paths) != 1:
        click.echo(USAGE_MESSAGE)
        ctx.exit(0)

    try:
        settings = config_manager.load_config(config)
    except ConfigurationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    setup_logging(settings.logging)

    try:
        SheetScanner().scan(file_paths[0])
    except ScanAborted as e:
        click.echo(e.message)
        ctx.exit(settings.error_exit_code)


if __name__ == '__main__':
    main()
