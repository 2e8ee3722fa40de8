import datetime
import decimal

from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq
import pytest

from pqstream.filesystem import LocalFileSystem

SIMPLE_ROWS = 10
SIMPLE_ROW_GROUP_SIZE = 4


def simple_table():
    names = [f'name-{i}' for i in range(SIMPLE_ROWS)]
    names[3] = None
    return pa.table(
        {
            'id': pa.array(range(SIMPLE_ROWS), type=pa.int64()),
            'name': pa.array(names, type=pa.string()),
            'score': pa.array(
                [i * 0.5 for i in range(SIMPLE_ROWS)],
                type=pa.float64(),
            ),
        },
    )


def simple_records() -> list[dict]:
    records = []
    for i in range(SIMPLE_ROWS):
        record = {'id': i, 'name': f'name-{i}', 'score': i * 0.5}
        if i == 3:
            del record['name']
        records.append(record)
    return records


def nested_table():
    address = pa.struct([('street', pa.string()), ('zip', pa.int32())])
    return pa.table(
        {
            'address': pa.array(
                [
                    {'street': 'Main', 'zip': 12345},
                    None,
                    {'street': None, 'zip': 1},
                ],
                type=address,
            ),
            'tags': pa.array([[1, 2, 3], [], None], type=pa.list_(pa.int64())),
        },
    )


def logical_table():
    return pa.table(
        {
            'day': pa.array(
                [
                    datetime.date(1970, 1, 1),
                    datetime.date(1970, 1, 2),
                    datetime.date(2020, 1, 1),
                    datetime.date(1969, 12, 31),
                ],
                type=pa.date32(),
            ),
            'ts_ms': pa.array(
                [0, -1, 1_577_836_800_000, None],
                type=pa.timestamp('ms'),
            ),
            'ts_us': pa.array(
                [0, 1, 1_577_836_800_000_001, None],
                type=pa.timestamp('us'),
            ),
            'amount': pa.array(
                [
                    decimal.Decimal('1.23'),
                    decimal.Decimal('-4.56'),
                    decimal.Decimal('0.00'),
                    None,
                ],
                type=pa.decimal128(10, 2),
            ),
            'blob': pa.array([b'abc', b'\xff\x00', b'', None], type=pa.binary()),
            'flag': pa.array([True, False, None, True], type=pa.bool_()),
            'ratio': pa.array([1.5, -0.25, None, 0.0], type=pa.float32()),
        },
    )


@pytest.fixture(scope='session')
def parquet_dir(tmp_path_factory) -> Path:
    return tmp_path_factory.mktemp('parquet')


@pytest.fixture(scope='session')
def simple_file(parquet_dir: Path) -> Path:
    path = parquet_dir / 'simple.parquet'
    pq.write_table(
        simple_table(),
        path,
        row_group_size=SIMPLE_ROW_GROUP_SIZE,
        compression='NONE',
    )
    return path


@pytest.fixture(scope='session')
def plain_file(parquet_dir: Path) -> Path:
    path = parquet_dir / 'plain.parquet'
    pq.write_table(
        simple_table(),
        path,
        row_group_size=SIMPLE_ROW_GROUP_SIZE,
        compression='NONE',
        use_dictionary=False,
    )
    return path


@pytest.fixture(scope='session')
def page_v2_file(parquet_dir: Path) -> Path:
    path = parquet_dir / 'page_v2.parquet'
    pq.write_table(
        simple_table(),
        path,
        row_group_size=SIMPLE_ROW_GROUP_SIZE,
        compression='gzip',
        data_page_version='2.0',
    )
    return path


@pytest.fixture(scope='session')
def nested_file(parquet_dir: Path) -> Path:
    path = parquet_dir / 'nested.parquet'
    pq.write_table(nested_table(), path, compression='NONE')
    return path


@pytest.fixture(scope='session')
def logical_file(parquet_dir: Path) -> Path:
    path = parquet_dir / 'logical.parquet'
    pq.write_table(logical_table(), path, compression='NONE')
    return path


@pytest.fixture(scope='session')
def not_parquet_file(parquet_dir: Path) -> Path:
    path = parquet_dir / 'not_parquet.parquet'
    path.write_bytes(b'this is certainly not a parquet file')
    return path


@pytest.fixture
def write_parquet(tmp_path: Path):
    """Write a table to a fresh file, forwarding writer options."""

    def _write(table, name: str = 'table.parquet', **kwargs) -> Path:
        path = tmp_path / name
        pq.write_table(table, path, **kwargs)
        return path

    return _write


class TrackedFile:
    """Wraps an open file, recording reads and closes on its filesystem."""

    def __init__(self, file, filesystem: 'CountingFileSystem'):
        self._file = file
        self._filesystem = filesystem

    def read(self, size: int = -1, /) -> bytes:
        position = self._file.tell()
        self._filesystem.check_read(position, size)
        return self._file.read(size)

    def seek(self, offset: int, whence: int = 0, /) -> int:
        return self._file.seek(offset, whence)

    def tell(self) -> int:
        return self._file.tell()

    def close(self) -> None:
        if not self._file.closed:
            self._filesystem.closed += 1
        self._file.close()


class CountingFileSystem:
    """Local filesystem that counts opens and closes."""

    def __init__(self):
        self.opened = 0
        self.closed = 0
        self._local = LocalFileSystem()

    def open(self, source: str) -> TrackedFile:
        file = self._local.open(source)
        self.opened += 1
        return TrackedFile(file, self)

    def check_read(self, position: int, size: int) -> None:
        pass


class FaultyFileSystem(CountingFileSystem):
    """Fails any read that starts inside `[start, end)`."""

    def __init__(self, start: int, end: int):
        super().__init__()
        self.start = start
        self.end = end

    def check_read(self, position: int, size: int) -> None:
        if self.start <= position < self.end:
            raise OSError(f'simulated truncation at offset {position}')


@pytest.fixture
def counting_filesystem() -> CountingFileSystem:
    return CountingFileSystem()


@pytest.fixture
def faulty_filesystem() -> type[FaultyFileSystem]:
    return FaultyFileSystem


@pytest.fixture(scope='session')
def expected_simple_records() -> list[dict]:
    return simple_records()


@pytest.fixture(scope='session')
def simple_arrow_table():
    return simple_table()
