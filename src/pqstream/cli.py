import itertools
import logging
import sys

from pathlib import Path

import click

from click_option_group import (
    RequiredMutuallyExclusiveOptionGroup,
    optgroup,
)

from ._version import get_version
from .config import ReaderConfig
from .constants import DEFAULT_HTTP_TIMEOUT
from .exceptions import PqStreamError
from .file_info import read_file_info
from .formatters import format_file_info, format_record
from .stream import RecordStream

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


def source_options(func):
    func = optgroup.option(
        '-u',
        '--url',
        help='HTTP(S), s3:// or s3x:// URL to Parquet file',
    )(func)
    func = optgroup.option(
        '-f',
        '--file',
        'file_path',
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help='Path to Parquet file',
    )(func)
    return optgroup.group(
        'Parquet source file',
        cls=RequiredMutuallyExclusiveOptionGroup,
        help='A parquet file local path or remote HTTP(S) or object storage url',
    )(func)


def timeout_option(func):
    return click.option(
        '--timeout',
        type=click.FloatRange(min=0, min_open=True),
        default=DEFAULT_HTTP_TIMEOUT,
        show_default=True,
        help='Timeout in seconds for HTTP requests',
    )(func)


def _source(file_path: Path | None, url: str | None) -> str:
    source = str(file_path) if file_path else url
    if source is None:
        raise click.UsageError("Didn't get a file or a url")
    return source


def _fail(error: Exception) -> None:
    click.echo(f'Error: {error}', err=True)
    sys.exit(1)


@click.group()
@click.option(
    '--log-level',
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default='WARNING',
    show_default=True,
    help='Logging level for diagnostic output on stderr',
)
def cli(log_level: str):
    """pqstream - lazy, schema-driven Parquet record streaming"""
    logging.basicConfig(
        level=log_level.upper(),
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )


@cli.command()
def version():
    """Show the installed version."""
    click.echo(get_version())


@cli.command()
@source_options
@timeout_option
def info(file_path: Path | None, url: str | None, timeout: float):
    """Show writer, schema name, row counts and field types."""
    source = _source(file_path, url)
    try:
        file_info = read_file_info(source, config=ReaderConfig(http_timeout=timeout))
    except PqStreamError as e:
        _fail(e)
    click.echo(format_file_info(file_info))


@cli.command()
@source_options
@timeout_option
@click.option(
    '--limit',
    '-n',
    type=click.IntRange(min=0),
    default=None,
    help='Stop after this many records',
)
def rows(file_path: Path | None, url: str | None, timeout: float, limit: int | None):
    """Print records as JSON lines."""
    source = _source(file_path, url)
    config = ReaderConfig(http_timeout=timeout)
    try:
        with RecordStream(source, config=config) as stream:
            for record in itertools.islice(stream, limit):
                click.echo(format_record(record))
    except PqStreamError as e:
        _fail(e)


if __name__ == '__main__':
    cli()
