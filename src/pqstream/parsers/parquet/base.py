from collections.abc import Callable
from typing import TypeVar

from ..thrift.parser import ThriftCompactParser

T = TypeVar('T')


class BaseParser:
    """Shared helpers for the Parquet struct parsers."""

    def __init__(self, parser: ThriftCompactParser):
        self.parser = parser

    def read_list(self, read_element_func: Callable[[], T]) -> list[T]:
        """Read a list header, then one element per call to the function."""
        _, size = self.parser.read_list_header()
        return [read_element_func() for _ in range(size)]

    def read_i32(self) -> int:
        return self.parser.read_i32()

    def read_string(self) -> str:
        return self.parser.read_string()
