"""
Row and column labels for tables.

An Index is an injective map from unique hashable keys to the dense
locations ``0..n-1`` plus its inverse. Two representations exist:

  - RangeIndex: key == location, nothing stored
  - HashIndex: key -> location dict, location -> key list and an optional
    iteration order; sorting changes only the iteration order

Indexes are immutable. They are grown through RangeIndexBuilder or
HashIndexBuilder and frozen with ``build()``.
"""

from __future__ import annotations
from bisect import bisect_left, bisect_right
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, List, Optional, Sequence

from .errors import DuplicateKeyError
from .errors import KeyNotFoundError
from .errors import LocationError
from .errors import NotComparableError
from .errors import StateError


class Bound(Enum):
    """Whether a range endpoint is part of the selection."""
    INCLUSIVE = "inclusive"
    EXCLUSIVE = "exclusive"


def _is_int_key(key) -> bool:
    return isinstance(key, int) and not isinstance(key, bool)


def _within(key, start, stop, start_bound, stop_bound) -> bool:
    if start_bound is Bound.INCLUSIVE:
        lower = key >= start
    else:
        lower = key > start
    if stop_bound is Bound.INCLUSIVE:
        upper = key <= stop
    else:
        upper = key < stop
    return lower and upper


class Index:
    """Common read API of RangeIndex and HashIndex."""

    _hash: Optional[int] = None

    def __len__(self) -> int:
        raise NotImplementedError

    def size(self) -> int:
        return len(self)

    def location(self, key) -> int:
        """Location of ``key``; raises KeyNotFoundError when absent."""
        raise NotImplementedError

    def key(self, location: int):
        """Key at ``location``; raises LocationError when out of range."""
        raise NotImplementedError

    def contains(self, key) -> bool:
        raise NotImplementedError

    def __contains__(self, key) -> bool:
        return self.contains(key)

    def order(self) -> Sequence[int]:
        """Locations in iteration order."""
        raise NotImplementedError

    def __iter__(self) -> Iterator[Any]:
        key = self.key
        for loc in self.order():
            yield key(loc)

    def entries(self) -> Iterator[tuple]:
        """(key, location) pairs in iteration order."""
        key = self.key
        for loc in self.order():
            yield key(loc), loc

    def locations(self, keys: Iterable[Any]) -> List[int]:
        location = self.location
        return [location(k) for k in keys]

    def to_list(self) -> List[Any]:
        return list(self)

    def _check_location(self, location: int) -> int:
        if not _is_int_key(location) or not 0 <= location < len(self):
            raise LocationError(f"Location {location!r} out of range for index of size {len(self)}")
        return location

    def _sorted_keys(self) -> Optional[Sequence[Any]]:
        """Keys in ascending iteration order, or None if not known sorted."""
        return None

    def select_range(self, start, stop,
                     start_bound: Bound = Bound.INCLUSIVE,
                     stop_bound: Bound = Bound.EXCLUSIVE) -> List[Any]:
        """
        Keys between ``start`` and ``stop``, in iteration order.

        Parameters
        ----------
        start, stop : Any
            Endpoints; must be comparable with the keys
        start_bound, stop_bound : Bound
            Whether each endpoint is included (default: half-open)

        Raises
        ------
        NotComparableError
            If the endpoints and keys cannot be ordered against each other
        """
        try:
            if start > stop:
                return []
            keys = self._sorted_keys()
            if keys is not None:
                if start_bound is Bound.INCLUSIVE:
                    lo = bisect_left(keys, start)
                else:
                    lo = bisect_right(keys, start)
                if stop_bound is Bound.INCLUSIVE:
                    hi = bisect_right(keys, stop)
                else:
                    hi = bisect_left(keys, stop)
                return list(keys[lo:hi])
            return [k for k in self if _within(k, start, stop, start_bound, stop_bound)]
        except TypeError as exc:
            raise NotComparableError(
                f"Cannot select range [{start!r}, {stop!r}] over index keys: {exc}"
            ) from exc

    def new_builder(self):
        raise NotImplementedError

    def new_copy_builder(self):
        raise NotImplementedError

    def __eq__(self, other):
        if not isinstance(other, Index):
            return NotImplemented
        if len(self) != len(other):
            return False
        return all(a == b for a, b in zip(self.entries(), other.entries()))

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        if self._hash is None:
            self._hash = hash(tuple(self.entries()))
        return self._hash


class RangeIndex(Index):
    """
    Dense range index: the key of each location is the location itself.
    """

    def __init__(self, size: int = 0):
        if size < 0:
            raise ValueError("RangeIndex size must be non-negative")
        self._size = size
        self._hash = None

    def __len__(self):
        return self._size

    def location(self, key) -> int:
        if _is_int_key(key) and 0 <= key < self._size:
            return key
        raise KeyNotFoundError(key)

    def key(self, location: int):
        return self._check_location(location)

    def contains(self, key) -> bool:
        return _is_int_key(key) and 0 <= key < self._size

    def order(self) -> Sequence[int]:
        return range(self._size)

    def __iter__(self):
        return iter(range(self._size))

    def _sorted_keys(self):
        return range(self._size)

    def new_builder(self):
        return RangeIndexBuilder()

    def new_copy_builder(self):
        return RangeIndexBuilder(self._size)

    def __eq__(self, other):
        if isinstance(other, RangeIndex):
            return self._size == other._size
        return super().__eq__(other)

    __hash__ = Index.__hash__

    def __repr__(self):
        return f"RangeIndex({self._size})"


class HashIndex(Index):
    """
    Explicit index over arbitrary hashable keys.

    >>> idx = HashIndex(["b", "a", "c"])
    >>> idx.location("a")
    1
    >>> HashIndex(["a", "b", "a"])
    Traceback (most recent call last):
    ...
    py_table.errors.DuplicateKeyError: Duplicate key 'a'
    """

    def __init__(self, keys: Iterable[Any] = ()):
        keys = list(keys)
        locations = {}
        for loc, key in enumerate(keys):
            if key in locations:
                raise DuplicateKeyError(f"Duplicate key {key!r}")
            locations[key] = loc
        self._keys = keys
        self._locations = locations
        self._order = None
        self._sorted = False
        self._hash = None

    @classmethod
    def of(cls, keys: Iterable[Any]) -> "HashIndex":
        return cls(keys)

    @classmethod
    def _from_parts(cls, keys, locations, order, is_sorted):
        """Assemble an index from builder parts without revalidating."""
        instance = cls.__new__(cls)
        instance._keys = keys
        instance._locations = locations
        instance._order = order
        instance._sorted = is_sorted
        instance._hash = None
        return instance

    def __len__(self):
        return len(self._keys)

    def location(self, key) -> int:
        try:
            return self._locations[key]
        except (KeyError, TypeError):
            raise KeyNotFoundError(key) from None

    def key(self, location: int):
        return self._keys[self._check_location(location)]

    def contains(self, key) -> bool:
        try:
            return key in self._locations
        except TypeError:
            return False

    def order(self) -> Sequence[int]:
        if self._order is None:
            return range(len(self._keys))
        return self._order

    def __iter__(self):
        if self._order is None:
            return iter(self._keys)
        keys = self._keys
        return (keys[loc] for loc in self._order)

    def _sorted_keys(self):
        if not self._sorted:
            return None
        return list(self)

    def new_builder(self):
        return HashIndexBuilder()

    def new_copy_builder(self):
        builder = HashIndexBuilder()
        builder._keys = list(self._keys)
        builder._locations = dict(self._locations)
        builder._order = None if self._order is None else list(self._order)
        builder._sorted = self._sorted
        return builder

    def __repr__(self):
        return f"HashIndex({list(self)!r})"


def as_index(value) -> Index:
    """Accept an Index, a size, or an iterable of keys."""
    if isinstance(value, Index):
        return value
    if _is_int_key(value):
        return RangeIndex(value)
    return HashIndex(value)


# ============================================================
# Builders
# ============================================================

class IndexBuilder:
    """Shared behaviour of the index builders; ``build()`` may be called once."""

    _built = False

    def _check_open(self):
        if self._built:
            raise StateError("Index builder has already been built")

    def __len__(self) -> int:
        raise NotImplementedError

    def size(self) -> int:
        return len(self)

    def __contains__(self, key) -> bool:
        return self.contains(key)

    def get_or_add(self, key) -> int:
        """Location of ``key``, appending it first when absent."""
        if self.contains(key):
            return self.location(key)
        self.add(key)
        return len(self) - 1

    def _check_location(self, location: int) -> int:
        if not _is_int_key(location) or not 0 <= location < len(self):
            raise LocationError(f"Location {location!r} out of range for index of size {len(self)}")
        return location


class HashIndexBuilder(IndexBuilder):
    """
    Builder for a HashIndex.

    ``remove`` renumbers every later location down by one in O(n).
    ``swap`` exchanges the keys held by two locations. ``sort`` reorders
    iteration only; the key of every location stays put.
    """

    def __init__(self):
        self._keys: List[Any] = []
        self._locations = {}
        self._order: Optional[List[int]] = None
        self._sorted = False
        self._built = False

    def __len__(self):
        self._check_open()
        return len(self._keys)

    def contains(self, key) -> bool:
        self._check_open()
        try:
            return key in self._locations
        except TypeError:
            return False

    def location(self, key) -> int:
        self._check_open()
        try:
            return self._locations[key]
        except (KeyError, TypeError):
            raise KeyNotFoundError(key) from None

    def key(self, location: int):
        self._check_open()
        return self._keys[self._check_location(location)]

    def __iter__(self):
        self._check_open()
        if self._order is None:
            return iter(list(self._keys))
        keys = self._keys
        return iter([keys[loc] for loc in self._order])

    def add(self, key):
        """Append ``key`` at the next free location."""
        self._check_open()
        if key in self._locations:
            raise DuplicateKeyError(f"Duplicate key {key!r}")
        loc = len(self._keys)
        self._keys.append(key)
        self._locations[key] = loc
        if self._order is not None:
            self._order.append(loc)
        self._sorted = False
        return self

    def extend(self, size: int):
        """Append integer keys equal to their location for ``[len, size)``."""
        self._check_open()
        for i in range(len(self._keys), size):
            self.add(i)
        return self

    def resize(self, size: int):
        """Shrink from the tail, or extend, to exactly ``size`` entries."""
        self._check_open()
        while len(self._keys) > size:
            self.remove(len(self._keys) - 1)
        return self.extend(size)

    def remove(self, location: int):
        """Delete ``location`` and shift every later location down by one."""
        self._check_open()
        self._check_location(location)
        key = self._keys.pop(location)
        del self._locations[key]
        locations = self._locations
        for k in self._keys[location:]:
            locations[k] -= 1
        if self._order is not None:
            self._order = [loc - 1 if loc > location else loc
                           for loc in self._order if loc != location]
        return self

    def swap(self, a: int, b: int):
        """Exchange the keys held by locations ``a`` and ``b``."""
        self._check_open()
        self._check_location(a)
        self._check_location(b)
        keys = self._keys
        ka, kb = keys[a], keys[b]
        keys[a], keys[b] = kb, ka
        self._locations[ka] = b
        self._locations[kb] = a
        self._sorted = False
        return self

    def sort(self, key: Optional[Callable[[Any], Any]] = None, reverse: bool = False):
        """
        Reorder iteration by key (natural order by default).

        Locations are not renumbered. Raises NotComparableError when the
        keys cannot be ordered.
        """
        self._check_open()
        keys = self._keys
        if key is None:
            sort_key = keys.__getitem__
        else:
            sort_key = lambda loc: key(keys[loc])
        try:
            self._order = sorted(self._current_order(), key=sort_key, reverse=reverse)
        except TypeError as exc:
            raise NotComparableError(f"Index keys cannot be sorted: {exc}") from exc
        self._sorted = key is None and not reverse
        return self

    def sort_locations(self, key: Callable[[int], Any], reverse: bool = False):
        """Reorder iteration by a function of each location."""
        self._check_open()
        try:
            self._order = sorted(self._current_order(), key=key, reverse=reverse)
        except TypeError as exc:
            raise NotComparableError(f"Locations cannot be sorted: {exc}") from exc
        self._sorted = False
        return self

    def _current_order(self):
        if self._order is None:
            return range(len(self._keys))
        return self._order

    def build(self) -> HashIndex:
        self._check_open()
        index = HashIndex._from_parts(self._keys, self._locations, self._order, self._sorted)
        self._built = True
        self._keys = None
        self._locations = None
        self._order = None
        return index

    def __repr__(self):
        if self._built:
            return "HashIndexBuilder(<built>)"
        return f"HashIndexBuilder({list(self)!r})"


class RangeIndexBuilder(IndexBuilder):
    """
    Builder that stays a dense range while keys arrive as 0, 1, 2, ...

    The first key, removal, swap or sort that needs explicit labels moves
    the builder onto a HashIndexBuilder for good.
    """

    def __init__(self, size: int = 0):
        self._size = size
        self._delegate: Optional[HashIndexBuilder] = None
        self._built = False

    def _upgrade(self) -> HashIndexBuilder:
        if self._delegate is None:
            self._delegate = HashIndexBuilder().extend(self._size)
        return self._delegate

    def __len__(self):
        self._check_open()
        if self._delegate is not None:
            return len(self._delegate)
        return self._size

    def contains(self, key) -> bool:
        self._check_open()
        if self._delegate is not None:
            return self._delegate.contains(key)
        return _is_int_key(key) and 0 <= key < self._size

    def location(self, key) -> int:
        self._check_open()
        if self._delegate is not None:
            return self._delegate.location(key)
        if _is_int_key(key) and 0 <= key < self._size:
            return key
        raise KeyNotFoundError(key)

    def key(self, location: int):
        self._check_open()
        if self._delegate is not None:
            return self._delegate.key(location)
        return self._check_location(location)

    def __iter__(self):
        self._check_open()
        if self._delegate is not None:
            return iter(self._delegate)
        return iter(range(self._size))

    def add(self, key):
        self._check_open()
        if self._delegate is None and _is_int_key(key):
            if key == self._size:
                self._size += 1
                return self
            if 0 <= key < self._size:
                raise DuplicateKeyError(f"Duplicate key {key!r}")
        self._upgrade().add(key)
        return self

    def extend(self, size: int):
        self._check_open()
        if self._delegate is not None:
            self._delegate.extend(size)
        elif size > self._size:
            self._size = size
        return self

    def resize(self, size: int):
        self._check_open()
        if self._delegate is not None:
            self._delegate.resize(size)
        else:
            self._size = size
        return self

    def remove(self, location: int):
        self._check_open()
        if self._delegate is None:
            self._check_location(location)
            if location == self._size - 1:
                self._size -= 1
                return self
        self._upgrade().remove(location)
        return self

    def swap(self, a: int, b: int):
        self._check_open()
        if self._delegate is None:
            self._check_location(a)
            self._check_location(b)
            if a == b:
                return self
        self._upgrade().swap(a, b)
        return self

    def sort(self, key: Optional[Callable[[Any], Any]] = None, reverse: bool = False):
        self._check_open()
        if self._delegate is None and key is None and not reverse:
            return self
        self._upgrade().sort(key, reverse)
        return self

    def sort_locations(self, key: Callable[[int], Any], reverse: bool = False):
        self._check_open()
        self._upgrade().sort_locations(key, reverse)
        return self

    def build(self) -> Index:
        self._check_open()
        if self._delegate is not None:
            index = self._delegate.build()
        else:
            index = RangeIndex(self._size)
        self._built = True
        self._delegate = None
        return index

    def __repr__(self):
        if self._built:
            return "RangeIndexBuilder(<built>)"
        if self._delegate is not None:
            return f"RangeIndexBuilder({self._delegate!r})"
        return f"RangeIndexBuilder({self._size})"
