from .data import DataPageParser, PageLevels
from .dictionary import DictionaryPageParser, DictType

__all__ = [
    'DataPageParser',
    'DictType',
    'DictionaryPageParser',
    'PageLevels',
]
