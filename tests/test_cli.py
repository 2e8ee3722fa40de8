import json
import shlex

from collections.abc import Callable
from pathlib import Path

import pytest

from click.testing import CliRunner, Result

from pqstream._version import get_version
from pqstream.cli import cli

type Invoke = Callable[..., Result]


@pytest.fixture(scope='session')
def invoke() -> Invoke:
    runner = CliRunner()

    def _invoke(cmd: str, **kwargs) -> Result:
        kwargs['catch_exceptions'] = kwargs.get('catch_exceptions', False)
        return runner.invoke(cli, shlex.split(cmd), **kwargs)

    return _invoke


def test_cli_help(invoke: Invoke) -> None:
    result = invoke('--help')
    assert result.exit_code == 0
    assert 'pqstream' in result.output


def test_version_command(invoke: Invoke) -> None:
    result = invoke('version')
    assert result.exit_code == 0
    assert result.output.strip() == get_version()


def test_info(invoke: Invoke, simple_file: Path) -> None:
    result = invoke(f'info -f {simple_file}')
    assert result.exit_code == 0
    assert 'Total rows: 10' in result.output
    assert 'Row groups: 3' in result.output
    assert 'name: str OPTIONAL' in result.output


def test_rows(invoke: Invoke, simple_file: Path, expected_simple_records) -> None:
    result = invoke(f'rows --file {simple_file}')
    assert result.exit_code == 0
    lines = result.output.strip().splitlines()
    assert [json.loads(line) for line in lines] == expected_simple_records


def test_rows_limit(invoke: Invoke, simple_file: Path) -> None:
    result = invoke(f'rows -f {simple_file} -n 2')
    assert result.exit_code == 0
    lines = result.output.strip().splitlines()
    assert [json.loads(line)['id'] for line in lines] == [0, 1]


def test_rows_nested(invoke: Invoke, nested_file: Path) -> None:
    result = invoke(f'rows -f {nested_file} --limit 1')
    assert result.exit_code == 0
    assert json.loads(result.output) == {
        'address': {'street': 'Main', 'zip': 12345},
        'tags': {'list': {'element': 3}},
    }


def test_source_is_required(invoke: Invoke) -> None:
    result = invoke('rows')
    assert result.exit_code == 2


def test_sources_are_exclusive(invoke: Invoke, simple_file: Path) -> None:
    result = invoke(f'info -f {simple_file} -u http://example.com/a.parquet')
    assert result.exit_code == 2


def test_missing_file_is_a_usage_error(invoke: Invoke, tmp_path: Path) -> None:
    result = invoke(f'info -f {tmp_path / "missing.parquet"}')
    assert result.exit_code == 2


@pytest.mark.parametrize('command', ['info', 'rows'])
def test_invalid_file(invoke: Invoke, not_parquet_file: Path, command: str) -> None:
    result = invoke(f'{command} -f {not_parquet_file}')
    assert result.exit_code == 1
    assert 'Error:' in result.output
    assert 'magic' in result.output


def test_bad_url(invoke: Invoke) -> None:
    result = invoke('info -u ftp://example.com/a.parquet')
    assert result.exit_code == 1
    assert 'Error:' in result.output
