class PqStreamError(Exception):
    """Base exception for everything raised by pqstream."""


class ParquetFormatError(PqStreamError):
    """The byte source is not a structurally valid Parquet file."""


class ParquetMagicError(ParquetFormatError):
    """The file does not start or end with the Parquet magic bytes."""


class ThriftParsingError(ParquetFormatError):
    """A Thrift compact-protocol structure could not be decoded."""


class ParquetDataError(PqStreamError):
    """Page content (levels, values, compression) could not be decoded."""


class ParquetUrlError(PqStreamError):
    """A remote source URL is malformed or a byte range is invalid."""


class ParquetNetworkError(PqStreamError):
    """A remote source could not be reached or does not support ranges."""


class ConverterStateError(PqStreamError):
    """A converter received an event that is illegal in its current state."""


class StreamStateError(PqStreamError):
    """A record stream was driven from a state that holds no open reader."""


class ParquetOpenError(PqStreamError):
    """The source could not be opened or its footer could not be parsed."""

    def __init__(self, source: str, message: str):
        super().__init__(f'Cannot open {source}: {message}')
        self.source = source


class RowGroupReadError(PqStreamError):
    """A row-group could not be read after the file was opened."""

    def __init__(self, source: str, row_group: int, message: str):
        super().__init__(f'Cannot read row group {row_group} of {source}: {message}')
        self.source = source
        self.row_group = row_group
