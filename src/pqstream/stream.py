"""
The lazy record stream.

`RecordStream` is a single state machine with one pull operation. It opens
the source on the first pull, walks row groups in file order and yields
exactly as many records as each row group declares. Whichever way the
stream ends (exhaustion, failure or an explicit close), the byte source is
released exactly once, before the end or the error reaches the consumer.

    PENDING -> BETWEEN_GROUPS <-> IN_GROUP
                    |                 |
                    v                 v
               EXHAUSTED           FAILED

Any non-terminal state moves to CLOSED on `close()`.
"""

from __future__ import annotations

import dataclasses
import logging
import weakref

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from .config import ReaderConfig
from .converters import ConverterTree, Record
from .exceptions import ParquetOpenError, RowGroupReadError, StreamStateError
from .file_metadata import FileMetadata
from .filesystem import FileSystem, resolve_filesystem
from .materializer import RowMaterializer
from .pager import RowGroupPager

logger = logging.getLogger(__name__)


class StreamState(StrEnum):
    PENDING = 'pending'
    BETWEEN_GROUPS = 'between_groups'
    IN_GROUP = 'in_group'
    EXHAUSTED = 'exhausted'
    FAILED = 'failed'
    CLOSED = 'closed'

    @property
    def is_terminal(self) -> bool:
        return self in (
            StreamState.EXHAUSTED,
            StreamState.FAILED,
            StreamState.CLOSED,
        )


@dataclass(frozen=True)
class StreamPosition:
    """Current row group (None outside one) and rows consumed from it."""

    row_group: int | None = None
    rows_read: int = 0
    row_count: int = 0

    @property
    def group_done(self) -> bool:
        return self.rows_read >= self.row_count


class RecordStream:
    """
    Forward-only, non-restartable sequence of records from one source.

    Nothing is opened until `open()` or the first pull. Use it as an
    iterator, or call `pull()` directly, which returns None at the end.
    """

    def __init__(
        self,
        source: str | Path,
        filesystem: FileSystem | None = None,
        config: ReaderConfig | None = None,
    ):
        self.source = str(source)
        self.config = config or ReaderConfig()
        self.filesystem = filesystem or resolve_filesystem(source, self.config)
        self._state = StreamState.PENDING
        self._position = StreamPosition()
        self._pager: RowGroupPager | None = None
        self._tree: ConverterTree | None = None
        self._materializer: RowMaterializer | None = None
        self._finalizer: weakref.finalize | None = None

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def position(self) -> StreamPosition:
        return self._position

    @property
    def metadata(self) -> FileMetadata | None:
        return self._pager.metadata if self._pager is not None else None

    def open(self) -> RecordStream:
        """Open the source and read its footer; a no-op once opened."""
        if self._state != StreamState.PENDING:
            return self

        try:
            pager = RowGroupPager.open(self.filesystem, self.source)
        except ParquetOpenError:
            self._transition(StreamState.FAILED)
            raise

        self._pager = pager
        # closes the handle if the stream is dropped without being closed
        self._finalizer = weakref.finalize(self, pager.close)
        self._tree = ConverterTree.build(pager.schema)
        self._transition(StreamState.BETWEEN_GROUPS)
        return self

    def pull(self) -> Record | None:
        """Return the next record, or None once the stream has ended."""
        while True:
            match self._state:
                case StreamState.PENDING:
                    self.open()
                case StreamState.BETWEEN_GROUPS:
                    self._advance_group()
                case StreamState.IN_GROUP:
                    record = self._read_row()
                    if record is not None:
                        return record
                case _:
                    return None

    def _advance_group(self) -> None:
        if self._pager is None or self._tree is None:
            raise StreamStateError(f'{self!r} has no open row-group pager')
        try:
            row_group = self._pager.next_row_group()
        except RowGroupReadError:
            self._terminate(StreamState.FAILED)
            raise

        if row_group is None:
            self._terminate(StreamState.EXHAUSTED)
            return

        self._materializer = RowMaterializer(self._tree, row_group)
        self._position = StreamPosition(row_group.index, 0, row_group.row_count)
        self._transition(StreamState.IN_GROUP)

    def _read_row(self) -> Record | None:
        if self._materializer is None:
            raise StreamStateError(f'{self!r} has no row group in progress')
        position = self._position
        if position.group_done:
            self._end_group()
            return None

        try:
            record = self._materializer.read_row()
        except Exception as e:
            self._terminate(StreamState.FAILED)
            raise RowGroupReadError(
                self.source,
                position.row_group or 0,
                str(e),
            ) from e

        if record is None:
            logger.warning(
                'Row group %s of %s ended after %d of %d rows',
                position.row_group,
                self.source,
                position.rows_read,
                position.row_count,
            )
            self._end_group()
            return None

        self._position = dataclasses.replace(
            position,
            rows_read=position.rows_read + 1,
        )
        return record

    def _end_group(self) -> None:
        self._materializer = None
        self._position = StreamPosition()
        self._transition(StreamState.BETWEEN_GROUPS)

    def close(self) -> None:
        """Stop the stream and release the source; safe to call repeatedly."""
        if not self._state.is_terminal:
            self._terminate(StreamState.CLOSED)

    def _terminate(self, state: StreamState) -> None:
        self._release()
        self._transition(state)

    def _release(self) -> None:
        self._materializer = None
        if self._finalizer is not None:
            self._finalizer()

    def _transition(self, state: StreamState) -> None:
        logger.debug('Stream %s: %s -> %s', self.source, self._state, state)
        self._state = state

    def __iter__(self) -> Iterator[Record]:
        return self

    def __next__(self) -> Record:
        record = self.pull()
        if record is None:
            raise StopIteration
        return record

    def __enter__(self) -> RecordStream:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f'RecordStream(source={self.source!r}, state={self._state})'


def read_records(
    source: str | Path,
    filesystem: FileSystem | None = None,
    config: ReaderConfig | None = None,
) -> Iterator[Record]:
    """Yield every record of `source`; closing the generator releases the source."""
    with RecordStream(source, filesystem, config) as stream:
        yield from stream
