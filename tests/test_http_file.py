import urllib.error
import urllib.request

from pathlib import Path

import pytest

from pqstream import ReaderConfig, read_records
from pqstream.exceptions import ParquetNetworkError, ParquetUrlError
from pqstream.util.http_file import HttpFile

URL = 'https://example.com/data/simple.parquet'


class FakeResponse:
    def __init__(self, data: bytes, start: int, end: int, size: int):
        self._data = data
        self.headers = {'Content-Range': f'bytes {start}-{end}/{size}'}

    def read(self) -> bytes:
        return self._data

    def __enter__(self):
        return self

    def __exit__(self, *args):
        return None


class RangeServer:
    """Stands in for `urlopen`, serving byte ranges of one local file."""

    def __init__(self, path: Path):
        self.data = path.read_bytes()
        self.requests: list[urllib.request.Request] = []

    def __call__(self, request: urllib.request.Request, timeout=None):
        self.requests.append(request)
        if request.full_url != URL:
            raise urllib.error.URLError('not found')
        byte_range = request.get_header('Range').removeprefix('bytes=')
        start, end = (int(part) for part in byte_range.split('-'))
        return FakeResponse(
            self.data[start : end + 1],
            start,
            end,
            len(self.data),
        )


@pytest.fixture
def server(simple_file: Path, monkeypatch) -> RangeServer:
    server = RangeServer(simple_file)
    monkeypatch.setattr(urllib.request, 'urlopen', server)
    return server


def test_size_and_reads(server: RangeServer) -> None:
    with HttpFile(URL) as remote:
        assert remote.size == len(server.data)
        assert remote.read(4) == b'PAR1'
        assert remote.tell() == 4
        remote.seek(-4, 2)
        assert remote.read() == b'PAR1'
        assert remote.read() == b''
    assert remote.closed


def test_repeated_read_is_served_once(server: RangeServer) -> None:
    remote = HttpFile(URL)
    remote.read(4)
    remote.seek(0)
    remote.read(4)
    # one size request plus one fetch
    assert len(server.requests) == 2


def test_only_last_range_is_kept(server: RangeServer) -> None:
    remote = HttpFile(URL)
    remote.read(16)
    remote.seek(-4, 2)
    assert remote.read() == b'PAR1'
    assert remote.cached_bytes == 4

    remote.seek(0)
    remote.read(16)
    assert len(server.requests) == 4
    assert remote.cached_bytes == 16

    remote.close()
    assert remote.cached_bytes == 0


def test_cache_stays_bounded_while_streaming(
    server: RangeServer,
    monkeypatch,
) -> None:
    read = HttpFile.read
    reads: list[tuple[int, int]] = []

    def tracked(self, size: int = -1, /) -> bytes:
        data = read(self, size)
        reads.append((len(data), self.cached_bytes))
        return data

    monkeypatch.setattr(HttpFile, 'read', tracked)
    records = list(read_records(URL))

    assert len(records) == 10
    assert all(cached == length for length, cached in reads if length)
    assert sum(length for length, _ in reads) > max(cached for _, cached in reads)


def test_closed_file_rejects_reads(server: RangeServer) -> None:
    remote = HttpFile(URL)
    remote.close()
    with pytest.raises(ValueError):
        remote.read(1)


def test_headers_are_forwarded(server: RangeServer) -> None:
    HttpFile(URL, headers={'Authorization': 'Bearer token'})
    assert server.requests[0].get_header('Authorization') == 'Bearer token'


def test_unreachable(server: RangeServer) -> None:
    with pytest.raises(ParquetNetworkError):
        HttpFile('https://example.com/other.parquet')


def test_invalid_scheme() -> None:
    with pytest.raises(ParquetUrlError):
        HttpFile('ftp://example.com/data.parquet')


def test_stream_over_http(server: RangeServer, expected_simple_records) -> None:
    config = ReaderConfig(http_timeout=5.0)
    assert list(read_records(URL, config=config)) == expected_simple_records
