import io

from pqstream.enums import Compression
from pqstream.exceptions import ParquetDataError


def get_brotli():
    try:
        import brotli
    except ImportError:
        raise ParquetDataError(
            'Brotli compression requires brotli package',
        ) from None
    return brotli


def get_gzip():
    import gzip

    return gzip


def get_lzo():
    try:
        import lzo
    except ImportError:
        raise ParquetDataError(
            'LZO compression requires python-lzo package',
        ) from None
    return lzo


def get_snappy():
    try:
        import snappy
    except ImportError:
        raise ParquetDataError(
            'Snappy compression requires python-snappy package',
        ) from None
    return snappy


def get_zstd():
    try:
        import zstandard
    except ImportError:
        raise ParquetDataError(
            'Zstandard compression requires zstandard package',
        ) from None
    return zstandard


def decompress(data: bytes, codec: Compression) -> bytes:
    """Decompress one page body (or the values section of a V2 page)."""
    try:
        match codec:
            case Compression.UNCOMPRESSED:
                return data
            case Compression.SNAPPY:
                return get_snappy().decompress(data)
            case Compression.GZIP:
                return get_gzip().decompress(data)
            case Compression.LZO:
                return get_lzo().decompress(data)
            case Compression.BROTLI:
                return get_brotli().decompress(data)
            case Compression.ZSTD:
                # frames written without a content size need the stream API
                dctx = get_zstd().ZstdDecompressor()
                reader = dctx.stream_reader(io.BytesIO(data))
                return reader.readall()
            case _:
                raise ParquetDataError(f'Unsupported compression codec: {codec.name}')
    except ParquetDataError:
        raise
    except Exception as e:
        raise ParquetDataError(f'{codec.name} decompression failed: {e}') from e
