"""
Frozen backing stores for Column values.

int and float columns live in an ``array.array`` with the NA sentinel kept
inline; every other column is a tuple with None for NA. Both hand out
None for a missing value, and writes copy.
"""

from __future__ import annotations
from array import array
from typing import Any, Protocol, Iterator, Sequence
from collections.abc import Iterable

from .typing import INT_NA, FLOAT_NA


class Storage(Protocol):
    """What Column needs from a backing store."""

    def __len__(self) -> int:
        ...

    def __getitem__(self, i: int) -> Any:
        ...

    def __iter__(self) -> Iterator[Any]:
        ...

    def raw(self, i: int) -> Any:
        """The stored element, NA sentinel included."""
        ...

    def is_na(self, i: int) -> bool:
        ...

    def has_na(self) -> bool:
        ...

    def slice(self, slc: slice) -> Storage:
        ...

    def take(self, locations: Sequence[int]) -> Storage:
        ...

    def set(self, i: int, value: Any) -> Storage:
        ...


class ArrayStorage:
    """
    array.array store for int ('q') and float ('d') columns.

    A missing int is INT_NA and a missing float is NaN, so reads compare
    against the sentinel instead of consulting a mask.
    """

    __slots__ = ('_data', '_na')

    # element type -> (typecode, NA sentinel)
    _LAYOUT = {
        int: ('q', INT_NA),
        float: ('d', FLOAT_NA),
    }

    def __init__(self, data: array):
        self._data = data
        self._na = INT_NA if data.typecode == 'q' else FLOAT_NA

    @classmethod
    def from_iterable(cls, values: Iterable[Any], kind: type) -> ArrayStorage:
        if kind not in cls._LAYOUT:
            raise ValueError(f"No array layout for {kind.__name__} values")
        typecode, na = cls._LAYOUT[kind]
        return cls(array(typecode, [na if v is None else v for v in values]))

    def _missing(self, v) -> bool:
        # NaN is the only float unequal to itself
        if self._na == self._na:
            return v == self._na
        return v != v

    def __len__(self) -> int:
        return len(self._data)

    def __getitem__(self, i: int) -> Any:
        v = self._data[i]
        return None if self._missing(v) else v

    def __iter__(self) -> Iterator[Any]:
        missing = self._missing
        return (None if missing(v) else v for v in self._data)

    def raw(self, i: int) -> Any:
        return self._data[i]

    def is_na(self, i: int) -> bool:
        return self._missing(self._data[i])

    def has_na(self) -> bool:
        return any(map(self._missing, self._data))

    def slice(self, slc: slice) -> ArrayStorage:
        return ArrayStorage(self._data[slc])

    def take(self, locations: Sequence[int]) -> ArrayStorage:
        data = self._data
        return ArrayStorage(array(data.typecode, [data[i] for i in locations]))

    def set(self, i: int, value: Any) -> ArrayStorage:
        copy = array(self._data.typecode, self._data)
        copy[i] = self._na if value is None else value
        return ArrayStorage(copy)


class TupleStorage:
    """Tuple store for every other element type; NA is None."""

    __slots__ = ('_data',)

    def __init__(self, data: tuple):
        self._data = data

    @classmethod
    def from_iterable(cls, values: Iterable[Any]) -> TupleStorage:
        return cls(tuple(values))

    def __len__(self) -> int:
        return len(self._data)

    def __getitem__(self, i: int) -> Any:
        return self._data[i]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._data)

    raw = __getitem__

    def is_na(self, i: int) -> bool:
        return self._data[i] is None

    def has_na(self) -> bool:
        return any(v is None for v in self._data)

    def slice(self, slc: slice) -> TupleStorage:
        return TupleStorage(self._data[slc])

    def take(self, locations: Sequence[int]) -> TupleStorage:
        data = self._data
        return TupleStorage(tuple(data[i] for i in locations))

    def set(self, i: int, value: Any) -> TupleStorage:
        data = self._data
        return TupleStorage(data[:i] + (value,) + data[i + 1:])


def choose_storage(values: Sequence[Any], kind: type) -> Storage:
    """
    Store ``values`` (already coerced to ``kind``, NA as None).

    int and float values go into an array unless it rejects them, e.g. an
    int beyond 64 bits; then they fall back to a tuple like everything else.
    """
    if kind in ArrayStorage._LAYOUT:
        try:
            return ArrayStorage.from_iterable(values, kind)
        except (ValueError, TypeError, OverflowError):
            pass
    return TupleStorage.from_iterable(values)
