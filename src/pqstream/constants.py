PARQUET_MAGIC = b'PAR1'

# 4-byte little-endian footer length followed by the magic bytes
FOOTER_SIZE = 8

DEFAULT_SCHEMA_NAME = 'schema'

DEFAULT_HTTP_TIMEOUT = 30.0
