from collections.abc import Sequence

from .column import MAX_REPR_VALUES
from .errors import LocationError
from .errors import UnsupportedOperationError


def _format_value(v):
	return "NA" if v is None else repr(v)


class RowView:
	"""
	Lazy view of one table row, positional over the table's columns.

	Holds the table and a row location only; values are read through the
	table on every access. Tables are immutable, so the view never goes
	stale, and ``set`` returns a new table instead of writing through.
	"""
	__slots__ = ('_table', '_location')

	def __init__(self, table, location):
		self._table = table
		self._location = location

	@property
	def location(self):
		return self._location

	@property
	def key(self):
		"""Row label of this view."""
		return self._table.index.key(self._location)

	@property
	def dtype(self):
		"""Element type of the row: the table's most specific column type."""
		return self._table.most_specific_type

	@property
	def index(self):
		"""Labels of the row's elements: the table's column index."""
		return self._table.column_index

	def set_index(self, index):
		raise UnsupportedOperationError("Can't set index on a row view")

	def __len__(self):
		return self._table.ncols

	def size(self):
		return self._table.ncols

	def __getitem__(self, i):
		"""Value at column location ``i`` (negative counts from the end)."""
		if isinstance(i, slice):
			return [self._table.get_at(self._location, j) for j in range(*i.indices(len(self)))]
		if i < 0:
			i += len(self)
		return self._table.get_at(self._location, i)

	def get(self, column_key, kind=object):
		"""Value in the column labelled ``column_key``, converted to ``kind``."""
		table = self._table
		return table.get_at(self._location, table.column_index.location(column_key), kind)

	def get_at(self, i, kind=object):
		return self._table.get_at(self._location, i, kind)

	def get_double(self, i):
		return self._table.get_double_at(self._location, i)

	def get_int(self, i):
		return self._table.get_int_at(self._location, i)

	def is_na(self, i):
		return self._table.is_na_at(self._location, i)

	def set(self, i, value):
		"""Return a new table with ``value`` at column location ``i`` of this row."""
		return self._table.set_at(self._location, i, value)

	def __iter__(self):
		table = self._table
		loc = self._location
		for j in range(table.ncols):
			yield table.get_at(loc, j)

	def to_list(self):
		return list(self)

	def __eq__(self, other):
		if isinstance(other, RowView):
			return self.to_list() == other.to_list()
		if isinstance(other, (list, tuple)):
			return self.to_list() == list(other)
		return NotImplemented

	__hash__ = None

	def __repr__(self):
		values = [_format_value(v) for v in self[:MAX_REPR_VALUES]]
		if len(self) > MAX_REPR_VALUES:
			values.append("...")
		return f"Row({self.key!r}: {', '.join(values)})"


class RowList(Sequence):
	"""Row views of a table in row-index iteration order."""

	def __init__(self, table):
		self._table = table
		self._order = table.index.order()

	def __len__(self):
		return len(self._order)

	def __getitem__(self, i):
		if isinstance(i, slice):
			return [RowView(self._table, loc) for loc in self._order[i]]
		try:
			return RowView(self._table, self._order[i])
		except IndexError:
			raise LocationError(f"Row {i} out of range for table with {len(self)} rows") from None

	def __repr__(self):
		return f"RowList({len(self)} rows)"


class ColumnList(Sequence):
	"""Columns of a table in column-index iteration order (no copies)."""

	def __init__(self, table):
		self._columns = table._columns
		self._order = table.column_index.order()

	def __len__(self):
		return len(self._order)

	def __getitem__(self, i):
		if isinstance(i, slice):
			return [self._columns[loc] for loc in self._order[i]]
		try:
			return self._columns[self._order[i]]
		except IndexError:
			raise LocationError(f"Column {i} out of range for table with {len(self)} columns") from None

	def __repr__(self):
		return f"ColumnList({len(self)} columns)"
