import math

from .errors import LocationError
from .errors import StateError
from .errors import UnsupportedOperationError
from .storage import choose_storage
from .typing import DataType
from .typing import FLOAT
from .typing import FLOAT_NA
from .typing import INT
from .typing import INT_NA
from .typing import OBJECT
from .typing import as_dtype
from .typing import coerce_scalar
from .typing import convert
from .typing import infer_dtype
from .typing import infer_kind
from .typing import is_na

from typing import Any
from typing import Iterable
from typing import List
from typing import Sequence

# Number of values shown before a repr is truncated
MAX_REPR_VALUES = 20


def _column_class(dtype):
	if dtype.kind is int:
		return IntColumn
	if dtype.kind is float:
		return FloatColumn
	return ObjectColumn


def _format_value(v):
	return "NA" if v is None else repr(v)


class Column():
	""" Immutable typed sequence of values, one per row """
	_dtype = None
	_storage = None
	_fixed_dtype = None

	# Fingerprint constants for hashing
	_FP_P = (1 << 61) - 1  # Mersenne prime (2^61 - 1)
	_FP_B = 1315423911     # Base for rolling hash

	def __new__(cls, values=(), dtype=None):
		"""
		Decide which typed Column to create based on contents.

		Called on a typed variant, the variant's element type wins:
		IntColumn(["1"]) converts to int, and ObjectColumn keeps numbers as
		objects.
		"""
		# Generators must be materialized once here, __init__ sees the same tuple.
		if not isinstance(values, (list, tuple, Column)):
			values = tuple(values)

		dtype = as_dtype(dtype)
		if cls._fixed_dtype is not None:
			if dtype is not None and dtype != cls._fixed_dtype:
				raise UnsupportedOperationError(f"{cls.__name__} cannot hold {dtype!r} values")
			dtype = cls._fixed_dtype
		elif dtype is None:
			dtype = infer_dtype(values)
		if cls is ObjectColumn and _column_class(dtype) is not ObjectColumn:
			dtype = OBJECT

		target_class = _column_class(dtype)
		instance = super(Column, target_class).__new__(target_class)
		instance._dtype = dtype
		instance._pending = values
		return instance

	def __init__(self, values=(), dtype=None):
		values = self.__dict__.pop('_pending', values)
		dtype = self._dtype
		self._storage = choose_storage([coerce_scalar(v, dtype) for v in values], dtype.kind)
		self._fp = None

	@classmethod
	def _from_storage(cls, storage, dtype):
		"""Wrap an existing storage without copying or coercing it."""
		target_class = _column_class(dtype)
		instance = super(Column, target_class).__new__(target_class)
		instance._dtype = dtype
		instance._storage = storage
		instance._fp = None
		return instance

	@property
	def dtype(self) -> DataType:
		return self._dtype

	def __len__(self):
		return len(self._storage)

	def size(self):
		return len(self._storage)

	def _check(self, i):
		if not 0 <= i < len(self._storage):
			raise LocationError(f"Location {i} out of range for column of length {len(self._storage)}")
		return i

	def __getitem__(self, key):
		"""
		Value at a location (NA reads as None), or a Column for a slice.
		"""
		if isinstance(key, slice):
			return Column._from_storage(self._storage.slice(key), self._dtype)
		if isinstance(key, int) and not isinstance(key, bool):
			if key < 0:
				key += len(self._storage)
			return self._storage[self._check(key)]
		raise UnsupportedOperationError(f"Column indices must be int or slice, not {type(key).__name__}")

	def __iter__(self):
		return iter(self._storage)

	def get(self, i, kind=object):
		"""
		Value at location ``i`` converted to ``kind``.

		Returns the NA sentinel of ``kind`` when the value is missing or
		cannot be converted.
		"""
		return convert(self._storage[self._check(i)], kind)

	def get_double(self, i) -> float:
		return convert(self._storage[self._check(i)], float)

	def get_int(self, i) -> int:
		return convert(self._storage[self._check(i)], int)

	def is_na(self, i) -> bool:
		return self._storage.is_na(self._check(i))

	def has_na(self) -> bool:
		return self._storage.has_na()

	def set(self, i, value):
		"""
		Return a new Column with ``value`` at location ``i``.

		The element type is promoted when the value does not fit it.
		"""
		self._check(i)
		new_dtype = self._dtype.promote_with(value)
		if new_dtype == self._dtype:
			storage = self._storage.set(i, coerce_scalar(value, self._dtype))
			return Column._from_storage(storage, self._dtype)
		values = list(self._storage)
		values[i] = value
		return Column(values, dtype=new_dtype)

	def take(self, locations: Sequence[int]):
		"""Return a new Column of the values at ``locations``, in that order."""
		for i in locations:
			self._check(i)
		return Column._from_storage(self._storage.take(locations), self._dtype)

	def to_list(self) -> List[Any]:
		return list(self._storage)

	def new_builder(self):
		"""An empty builder declared with this column's element type."""
		return ColumnBuilder(self._dtype)

	def new_copy_builder(self):
		"""A builder seeded with this column's values."""
		builder = ColumnBuilder(self._dtype, promote=True)
		builder._values = list(self._storage)
		return builder

	#-----------------------------------------------------
	# Equality and fingerprinting
	#-----------------------------------------------------

	def __eq__(self, other):
		if not isinstance(other, Column):
			return NotImplemented
		if len(self) != len(other):
			return False
		for a, b in zip(self._storage, other._storage):
			if a is None or b is None:
				if a is not b:
					return False
			elif a != b:
				return False
		return True

	def __ne__(self, other):
		result = self.__eq__(other)
		if result is NotImplemented:
			return result
		return not result

	@staticmethod
	def _hash_element(x: Any) -> int:
		if x is None:
			return 0x9E3779B97F4A7C15

		if isinstance(x, float) and math.isnan(x):
			return 0xDEADBEEFCAFEBABE

		try:
			return hash(x)
		except TypeError:
			return hash(repr(x))

	def fingerprint(self) -> int:
		if self._fp is None:
			P = self._FP_P
			B = self._FP_B
			total = 0
			for x in self._storage:
				total = (total * B + self._hash_element(x)) % P
			self._fp = total
		return self._fp

	def __hash__(self):
		return self.fingerprint()

	def __repr__(self):
		values = [_format_value(v) for v in self._storage.slice(slice(0, MAX_REPR_VALUES))]
		if len(self) > MAX_REPR_VALUES:
			values.append("...")
		return f"Column{self._dtype!r}[{', '.join(values)}]"


class IntColumn(Column):
	""" int column on array('q'); NA is INT_NA """
	_fixed_dtype = INT

	def get_int(self, i) -> int:
		v = self._storage.raw(self._check(i))
		return INT_NA if v is None else v

	def get_double(self, i) -> float:
		v = self._storage.raw(self._check(i))
		if v is None or v == INT_NA:
			return FLOAT_NA
		return float(v)


class FloatColumn(Column):
	""" float column on array('d'); NA is NaN """
	_fixed_dtype = FLOAT

	def get_double(self, i) -> float:
		return self._storage.raw(self._check(i))

	def get_int(self, i) -> int:
		v = self._storage.raw(self._check(i))
		if v != v or v in (math.inf, -math.inf):
			return INT_NA
		return int(v)


class ObjectColumn(Column):
	""" Column stored as a tuple; NA is None """
	pass


class ColumnBuilder():
	"""
	Growable, location-addressed staging area for one Column.

	Writing past the end pads with NA first. A builder created without a
	dtype infers it from the first non-NA value and promotes afterwards; a
	builder created with a dtype converts every value to it instead, unless
	``promote`` is set. ``build()`` may be called once.
	"""

	def __init__(self, dtype=None, promote=None):
		self._dtype = as_dtype(dtype)
		self._promote = self._dtype is None if promote is None else promote
		self._values = []

	def _check_open(self):
		if self._values is None:
			raise StateError("ColumnBuilder has already been built")

	@property
	def dtype(self) -> DataType:
		return self._dtype if self._dtype is not None else OBJECT

	def __len__(self):
		self._check_open()
		return len(self._values)

	def size(self):
		return len(self)

	def __getitem__(self, i):
		self._check_open()
		return self._values[i]

	def _accept(self, value):
		if is_na(value):
			return None
		if not self._promote:
			return coerce_scalar(value, self._dtype)
		if self._dtype is None:
			self._dtype = DataType(infer_kind(value))
		else:
			self._dtype = self._dtype.promote_with(value)
		return value

	def set(self, i, value):
		"""Set location ``i``, padding with NA up to it."""
		self._check_open()
		value = self._accept(value)
		values = self._values
		if i < len(values):
			values[i] = value
		else:
			values.extend([None] * (i - len(values)))
			values.append(value)
		return self

	def set_na(self, i):
		return self.set(i, None)

	def add(self, value):
		self._check_open()
		self._values.append(self._accept(value))
		return self

	def add_na(self):
		return self.add(None)

	def add_all(self, values: Iterable[Any]):
		for v in values:
			self.add(v)
		return self

	def set_from(self, i, column, j):
		"""Copy the value at location ``j`` of ``column`` to location ``i``."""
		return self.set(i, column[j])

	def read(self, record, field):
		"""Append field ``field`` of ``record``."""
		return self.add(record.get(field))

	def remove(self, i):
		self._check_open()
		del self._values[i]
		return self

	def swap(self, a, b):
		self._check_open()
		values = self._values
		values[a], values[b] = values[b], values[a]
		return self

	def pad(self, size):
		"""Append NA until the builder holds ``size`` values."""
		self._check_open()
		if size > len(self._values):
			self._values.extend([None] * (size - len(self._values)))
		return self

	def build(self) -> Column:
		self._check_open()
		dtype = self.dtype
		values = self._values
		self._values = None
		return Column(values, dtype=dtype)
