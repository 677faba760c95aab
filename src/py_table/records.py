"""
Record-reader contract for bulk table ingestion.

Readers of files or other sources hand records to ``TableBuilder.read`` and
``TableBuilder.read_all`` through these two protocols; the sequence
adapters cover the in-memory case.
"""

from __future__ import annotations
from typing import Any, Iterable, Iterator, Protocol, Sequence, runtime_checkable


@runtime_checkable
class Record(Protocol):
    """One structured record, addressed by field position."""

    def size(self) -> int:
        ...

    def get(self, field: int) -> Any:
        ...


@runtime_checkable
class RecordReader(Protocol):
    """A forward-only source of records."""

    def has_next(self) -> bool:
        ...

    def next(self) -> Record:
        ...


class SequenceRecord:
    """Record over a plain Python sequence."""

    __slots__ = ('_values',)

    def __init__(self, values: Sequence[Any]):
        self._values = values

    def size(self) -> int:
        return len(self._values)

    def get(self, field: int) -> Any:
        return self._values[field]

    def __repr__(self):
        return f"SequenceRecord({list(self._values)!r})"


class SequenceRecordReader:
    """
    RecordReader over an iterable of sequences.

    >>> reader = SequenceRecordReader([(1, "a"), (2, "b")])
    >>> reader.next().get(1)
    'a'
    """

    _END = object()

    def __init__(self, rows: Iterable[Sequence[Any]]):
        self._rows: Iterator[Sequence[Any]] = iter(rows)
        self._peeked = self._END

    def has_next(self) -> bool:
        if self._peeked is self._END:
            self._peeked = next(self._rows, self._END)
        return self._peeked is not self._END

    def next(self) -> Record:
        if not self.has_next():
            raise StopIteration("no more records")
        row, self._peeked = self._peeked, self._END
        if isinstance(row, Record):
            return row
        return SequenceRecord(row)


def as_record(value) -> Record:
    """Wrap a plain sequence as a Record; pass Records through."""
    if isinstance(value, Record):
        return value
    return SequenceRecord(value)


def as_reader(source) -> RecordReader:
    """Wrap an iterable of sequences as a RecordReader; pass readers through."""
    if isinstance(source, RecordReader):
        return source
    return SequenceRecordReader(source)
