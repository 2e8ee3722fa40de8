"""
Byte sources.

A `FileSystem` opens a named source for positioned reads. Streams receive
one as a collaborator, so remote sources and test doubles plug in without
the reader knowing where the bytes come from.
"""

from __future__ import annotations

import logging

from pathlib import Path
from typing import Any, Protocol, runtime_checkable
from urllib.parse import unquote, urlsplit

from .config import ReaderConfig
from .exceptions import ParquetUrlError
from .protocols import ReadableSeekable
from .util.http_file import HttpFile

logger = logging.getLogger(__name__)

OBJECT_STORE_SCHEMES = ('s3:', 's3x:')


@runtime_checkable
class FileSystem(Protocol):
    def open(self, source: str) -> ReadableSeekable: ...


class LocalFileSystem:
    """Opens local paths in binary read mode."""

    def open(self, source: str) -> ReadableSeekable:
        logger.debug('Opening local file %s', source)
        return Path(source).open('rb')


class HttpFileSystem:
    """Opens HTTP(S) URLs as range-request backed files."""

    def __init__(self, config: ReaderConfig | None = None):
        self.config = config or ReaderConfig()

    def open(self, source: str) -> ReadableSeekable:
        logger.debug('Opening remote file %s', source)
        return HttpFile(
            source,
            timeout=self.config.http_timeout,
            headers=self.config.http_headers,
        )


def get_fsspec():
    try:
        import fsspec
    except ImportError:
        raise ParquetUrlError(
            'Object storage sources require fsspec and s3fs: '
            "pip install 'pqstream[s3]'",
        ) from None
    return fsspec


def object_store_location(
    source: str,
    config: ReaderConfig,
) -> tuple[str, dict[str, Any]]:
    """
    Map an object-storage URI to an fsspec URL and its storage options.

    `s3://bucket/key` is handed to fsspec as is. The S3-compatible form
    `s3x://[key:secret@]host[:port]/bucket/key` becomes `s3://bucket/key`
    with the host as the endpoint and the user info as credentials.
    """
    options = dict(config.storage_options)
    if not source.startswith('s3x:'):
        return source, options

    parts = urlsplit(source)
    if not parts.hostname:
        raise ParquetUrlError(f'Missing endpoint host in {source}')
    if not parts.path.strip('/'):
        raise ParquetUrlError(f'Missing bucket in {source}')

    endpoint = f'{config.endpoint_scheme}://{parts.hostname}'
    if parts.port is not None:
        endpoint = f'{endpoint}:{parts.port}'
    options['client_kwargs'] = {
        **options.get('client_kwargs', {}),
        'endpoint_url': endpoint,
    }
    if parts.username:
        options['key'] = unquote(parts.username)
    if parts.password is not None:
        options['secret'] = unquote(parts.password)
    return f's3:/{parts.path}', options


class ObjectStoreFileSystem:
    """Opens `s3://` and `s3x://` object-storage URIs through fsspec."""

    def __init__(self, config: ReaderConfig | None = None):
        self.config = config or ReaderConfig()

    def open(self, source: str) -> ReadableSeekable:
        url, options = object_store_location(source, self.config)
        fs, path = get_fsspec().core.url_to_fs(url, **options)
        logger.debug('Opening object %s through %s', path, type(fs).__name__)
        return fs.open(path, 'rb')


def is_url(source: str | Path) -> bool:
    return isinstance(source, str) and source.startswith(('http:', 'https:'))


def is_object_store(source: str | Path) -> bool:
    return isinstance(source, str) and source.startswith(OBJECT_STORE_SCHEMES)


def resolve_filesystem(
    source: str | Path,
    config: ReaderConfig | None = None,
) -> FileSystem:
    """
    HTTP for `http:`/`https:` URLs, fsspec for `s3:`/`s3x:` URIs, the local
    filesystem otherwise.
    """
    if is_url(source):
        return HttpFileSystem(config)
    if is_object_store(source):
        return ObjectStoreFileSystem(config)
    return LocalFileSystem()
