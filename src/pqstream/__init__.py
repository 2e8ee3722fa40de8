from ._version import get_version
from .config import ReaderConfig
from .converters import ConverterTree, Record
from .decoding import decode_value
from .exceptions import (
    ConverterStateError,
    ParquetDataError,
    ParquetFormatError,
    ParquetOpenError,
    PqStreamError,
    RowGroupReadError,
    StreamStateError,
)
from .file_info import FieldInfo, FileInfo, read_file_info
from .filesystem import (
    FileSystem,
    HttpFileSystem,
    LocalFileSystem,
    ObjectStoreFileSystem,
    resolve_filesystem,
)
from .materializer import RowMaterializer
from .pager import RowGroupPager
from .schema import GroupField, MessageSchema, PrimitiveField
from .stream import RecordStream, StreamPosition, StreamState, read_records

__version__ = get_version()

__all__ = [
    'ConverterStateError',
    'ConverterTree',
    'FieldInfo',
    'FileInfo',
    'FileSystem',
    'GroupField',
    'HttpFileSystem',
    'LocalFileSystem',
    'MessageSchema',
    'ObjectStoreFileSystem',
    'ParquetDataError',
    'ParquetFormatError',
    'ParquetOpenError',
    'PqStreamError',
    'PrimitiveField',
    'ReaderConfig',
    'Record',
    'RecordStream',
    'RowGroupPager',
    'RowMaterializer',
    'RowGroupReadError',
    'StreamPosition',
    'StreamState',
    'StreamStateError',
    'decode_value',
    'read_file_info',
    'read_records',
]
