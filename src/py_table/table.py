import functools

from .builder import TableBuilder
from .column import Column
from .errors import DimensionError
from .errors import LocationError
from .errors import StateError
from .errors import UnsupportedOperationError
from .index import Bound
from .index import HashIndex
from .index import RangeIndex
from .index import as_index
from .typing import as_kind
from .typing import convert
from .typing import most_specific
from .views import ColumnList
from .views import RowList
from .views import RowView

# Rows returned by head() when no count is given
DEFAULT_HEAD_ROWS = 10


def _mask_shape(mask):
	"""'rows' for a flat boolean sequence, 'cells' for nested ones, else None."""
	if not isinstance(mask, (list, tuple)):
		return None
	if all(isinstance(m, bool) for m in mask):
		return 'rows'
	if all(isinstance(m, (list, tuple)) and all(isinstance(x, bool) for x in m) for m in mask):
		return 'cells'
	return None


def _present_values(column, kind=None):
	"""Non-NA values of ``column``, converted to ``kind`` when given."""
	if kind is None:
		return [v for v in column if v is not None]
	return [convert(v, kind) for v in column if v is not None]


class Table():
	"""
	Immutable, column-oriented table with row and column labels.

	Every column holds ``nrows`` values. Cells are addressed either by label,
	``get(row_key, column_key)``, or by location, ``get_at(r, c)``; label
	forms resolve through the row and column Index and then use the
	location form. Transformations return new tables and share the columns
	they do not touch.

	Args:
		initial: dict of {label: values} or a list of columns/value sequences
		index: row labels (Index, iterable of keys, or None for 0..n-1)
		column_index: column labels; taken from the dict keys when omitted

	Examples:
		t = Table({"a": [1, 2, 3], "b": ["x", "y", "z"]})
		t.get(0, "a")       # 1
		t.row(0).to_list()  # [1, 'x']
	"""

	def __init__(self, initial=(), index=None, column_index=None):
		if isinstance(initial, dict):
			if column_index is None:
				column_index = HashIndex(initial.keys())
			initial = list(initial.values())
		columns = [c if isinstance(c, Column) else Column(c) for c in initial]

		lengths = {len(c) for c in columns}
		if len(lengths) > 1:
			raise DimensionError(f"Columns have different lengths: {sorted(lengths)}")
		if lengths:
			nrows = lengths.pop()
		elif index is not None:
			nrows = len(as_index(index))
		else:
			nrows = 0

		self._columns = columns
		self._nrows = nrows
		self._index = None
		self._column_index = None
		self._dtype = None
		if index is not None:
			self.index = index
		if column_index is not None:
			self.column_index = column_index

	@classmethod
	def _from_parts(cls, columns, nrows, index, column_index):
		"""Assemble a table from already validated parts."""
		table = cls.__new__(cls)
		table._columns = columns
		table._nrows = nrows
		table._index = index
		table._column_index = column_index
		table._dtype = None
		return table

	@classmethod
	def builder(cls, *dtypes):
		"""An empty TableBuilder, optionally with typed columns."""
		return TableBuilder(*dtypes)

	def new_builder(self):
		"""An empty builder with this table's column types."""
		return TableBuilder(*[c.dtype for c in self._columns])

	def new_copy_builder(self):
		"""A builder seeded with this table's columns and labels."""
		return TableBuilder.from_table(self)

	#-----------------------------------------------------
	# Shape and labels
	#-----------------------------------------------------

	@property
	def nrows(self):
		return self._nrows

	@property
	def ncols(self):
		return len(self._columns)

	@property
	def shape(self):
		return (self._nrows, len(self._columns))

	def __len__(self):
		return self._nrows

	@property
	def index(self):
		if self._index is None:
			self._index = RangeIndex(self._nrows)
		return self._index

	@index.setter
	def index(self, value):
		# Mutates this table in place; not safe while other threads read it.
		value = as_index(value)
		if len(value) != self._nrows:
			raise DimensionError(f"Index of size {len(value)} does not match {self._nrows} rows")
		self._index = value

	@property
	def column_index(self):
		if self._column_index is None:
			self._column_index = RangeIndex(len(self._columns))
		return self._column_index

	@column_index.setter
	def column_index(self, value):
		value = as_index(value)
		if len(value) != len(self._columns):
			raise DimensionError(
				f"Column index of size {len(value)} does not match {len(self._columns)} columns"
			)
		self._column_index = value

	def set_index(self, index):
		self.index = index

	def set_column_index(self, index):
		self.column_index = index

	@property
	def most_specific_type(self):
		"""Common element type of all columns, or OBJECT when they differ."""
		if self._dtype is None:
			self._dtype = most_specific(c.dtype for c in self._columns)
		return self._dtype

	#-----------------------------------------------------
	# Reads
	#-----------------------------------------------------

	def _check_row(self, r):
		if not 0 <= r < self._nrows:
			raise LocationError(f"Row {r} out of range for table with {self._nrows} rows")
		return r

	def column_at(self, c):
		if not 0 <= c < len(self._columns):
			raise LocationError(f"Column {c} out of range for table with {len(self._columns)} columns")
		return self._columns[c]

	def column(self, key):
		"""The Column labelled ``key``, without copying."""
		return self._columns[self.column_index.location(key)]

	def columns(self):
		return ColumnList(self)

	def row_at(self, r):
		return RowView(self, self._check_row(r))

	def row(self, key):
		return RowView(self, self.index.location(key))

	def rows(self):
		return RowList(self)

	def __iter__(self):
		return iter(self.rows())

	def get_at(self, r, c, kind=object):
		"""
		Value at row ``r``, column ``c`` converted to ``kind``.

		Missing or unconvertible values come back as the NA sentinel of
		``kind`` (None for ``object``).
		"""
		return self.column_at(c).get(self._check_row(r), kind)

	def get_double_at(self, r, c):
		return self.column_at(c).get_double(self._check_row(r))

	def get_int_at(self, r, c):
		return self.column_at(c).get_int(self._check_row(r))

	def is_na_at(self, r, c):
		return self.column_at(c).is_na(self._check_row(r))

	def get(self, row, column, kind=object):
		return self.get_at(self.index.location(row), self.column_index.location(column), kind)

	def get_double(self, row, column):
		return self.get_double_at(self.index.location(row), self.column_index.location(column))

	def get_int(self, row, column):
		return self.get_int_at(self.index.location(row), self.column_index.location(column))

	def is_na(self, row, column):
		return self.is_na_at(self.index.location(row), self.column_index.location(column))

	def __getitem__(self, key):
		"""
		Dispatch on the key:

		  - list or tuple of bools: the selected rows
		  - list of lists of bools: the table with unselected cells NA
		  - (row_key, column_key): a single value
		  - anything else: the column with that label

		A tuple made only of bools is always a mask, never a label pair.
		"""
		if isinstance(key, list) or _mask_shape(key) == 'rows':
			return self.mask(key)
		if isinstance(key, tuple) and len(key) == 2:
			return self.get(key[0], key[1])
		return self.column(key)

	#-----------------------------------------------------
	# Single-cell writes (copy-on-write)
	#-----------------------------------------------------

	def set_at(self, r, c, value):
		"""A new table with ``value`` at ``(r, c)``; other columns are shared."""
		self._check_row(r)
		self.column_at(c)
		return self.new_copy_builder().set_at(r, c, value).build()

	def set(self, row, column, value):
		return self.set_at(self.index.location(row), self.column_index.location(column), value)

	#-----------------------------------------------------
	# Boolean masks
	#-----------------------------------------------------

	def _mask_kind(self, mask):
		shape = _mask_shape(mask)
		if shape == 'rows' and len(mask) == self._nrows:
			return shape
		if (shape == 'cells' and len(mask) == self._nrows
				and all(len(m) == len(self._columns) for m in mask)):
			return shape
		raise UnsupportedOperationError(
			f"Mask must be {self._nrows} bools or {self._nrows}x{len(self._columns)} bools"
		)

	def mask(self, mask):
		"""
		Select with a boolean mask over row locations.

		A flat mask keeps the rows that are True (with their labels). A
		nested mask keeps the shape and reads the False cells as NA.
		"""
		if self._mask_kind(mask) == 'rows':
			return self.take_rows([r for r, keep in enumerate(mask) if keep])

		builder = self.new_builder()
		builder.set_index(self.index)
		builder.set_column_index(self.column_index)
		for c in range(len(self._columns)):
			for r in range(self._nrows):
				if mask[r][c]:
					builder.set_from_at(r, c, self, r, c)
				else:
					builder.set_na_at(r, c)
		return builder.build()

	def set_mask(self, mask, value):
		"""
		Write ``value`` where the mask is True; False leaves cells unchanged.

		A flat mask selects whole rows, a nested mask single cells.
		"""
		kind = self._mask_kind(mask)
		builder = self.new_copy_builder()
		for r in range(self._nrows):
			for c in range(len(self._columns)):
				if mask[r] if kind == 'rows' else mask[r][c]:
					builder.set_at(r, c, value)
		return builder.build()

	#-----------------------------------------------------
	# Row selection
	#-----------------------------------------------------

	def take_rows(self, locations):
		"""A new table of the rows at ``locations``, keeping their labels."""
		index = self.index
		builder = self.new_builder()
		builder.set_column_index(self.column_index)
		for r, loc in enumerate(locations):
			self._check_row(loc)
			builder.index.add(index.key(loc))
			for c in range(len(self._columns)):
				builder.set_from_at(r, c, self, loc, c)
		return builder.build()

	def filter(self, predicate):
		"""Rows (in index order) for which ``predicate(row_view)`` is true."""
		return self.take_rows([row.location for row in self.rows() if predicate(row)])

	def limit(self, n):
		"""The first ``n`` rows in index order."""
		return self.take_rows(list(self.index.order()[:max(n, 0)]))

	def head(self, n=DEFAULT_HEAD_ROWS):
		return self.limit(n)

	def get_rows(self, *keys):
		return self.take_rows(self.index.locations(keys))

	def select(self, start, stop, start_bound=Bound.INCLUSIVE, stop_bound=Bound.EXCLUSIVE):
		"""Rows whose labels fall between ``start`` and ``stop``."""
		return self.get_rows(*self.index.select_range(start, stop, start_bound, stop_bound))

	#-----------------------------------------------------
	# Column selection and removal
	#-----------------------------------------------------

	def take_columns(self, locations):
		"""A new table of the columns at ``locations``; columns are shared."""
		column_index = self.column_index
		builder = TableBuilder()
		builder.set_index(self.index)
		for c, loc in enumerate(locations):
			builder.column_index.add(column_index.key(loc))
			builder.set_column_at(c, self.column_at(loc))
		return builder.build()

	def get_columns(self, *keys):
		return self.take_columns(self.column_index.locations(keys))

	def select_columns(self, start, stop, start_bound=Bound.INCLUSIVE, stop_bound=Bound.INCLUSIVE):
		"""Columns whose labels fall between ``start`` and ``stop`` (inclusive by default)."""
		return self.get_columns(*self.column_index.select_range(start, stop, start_bound, stop_bound))

	def drop_at(self, *locations):
		dropped = set(locations)
		for c in dropped:
			self.column_at(c)
		return self.take_columns([c for c in range(len(self._columns)) if c not in dropped])

	def drop(self, *keys):
		return self.drop_at(*self.column_index.locations(keys))

	def drop_if(self, predicate):
		"""Drop every column for which ``predicate(column)`` is true."""
		return self.drop_at(*[c for c, col in enumerate(self._columns) if predicate(col)])

	def drop_na(self):
		"""Drop every column holding at least one NA."""
		return self.drop_if(lambda col: col.has_na())

	#-----------------------------------------------------
	# Transforms
	#-----------------------------------------------------

	def map(self, fn, kind=object):
		"""
		Apply ``fn`` to every non-NA value (converted to ``kind``).

		NA cells stay NA; labels are carried over.
		"""
		builder = TableBuilder()
		builder.set_index(self.index)
		builder.set_column_index(self.column_index)
		for c, column in enumerate(self._columns):
			for r in range(self._nrows):
				if column.is_na(r):
					builder.set_na_at(r, c)
				else:
					builder.set_at(r, c, fn(column.get(r, kind)))
		return builder.build()

	def apply(self, fn):
		"""
		Replace every column by ``fn(column)``.

		The row labels are kept when the new columns keep the row count.
		"""
		builder = TableBuilder()
		builder.set_column_index(self.column_index)
		for c, column in enumerate(self._columns):
			builder.set_column_at(c, fn(column))
		if builder.nrows == self._nrows:
			builder.set_index(self.index)
		return builder.build()

	def reduce(self, fn):
		"""A one-row table of ``fn(column)`` for every column."""
		builder = TableBuilder()
		builder.set_column_index(self.column_index)
		for c, column in enumerate(self._columns):
			builder.set_at(0, c, fn(column))
		return builder.build()

	def _typed_columns(self, kind):
		"""(label, column) in column-index order, keeping columns assignable to ``kind``."""
		return [
			(label, self._columns[loc]) for label, loc in self.column_index.entries()
			if kind is None or self._columns[loc].dtype.is_assignable_to(kind)
		]

	def collect(self, fn, kind=None):
		"""
		A one-row table of ``fn(values)`` per column.

		``fn`` receives the non-NA values of a column, converted to ``kind``
		when given; columns whose element type is not a subclass of ``kind``
		are left out. A column without values reduces to NA.

		Examples:
			table.collect(statistics.median, float)
		"""
		if kind is not None:
			kind = as_kind(kind)
		builder = TableBuilder()
		for label, column in self._typed_columns(kind):
			values = _present_values(column, kind)
			builder.set_column(label, [fn(values) if values else None])
		return builder.build()

	def fold(self, op, initial, kind=None):
		"""
		A one-row table folding each column's non-NA values with ``op``.

		Starts from ``initial``, so a column without values yields ``initial``.
		``kind`` filters and converts columns as in ``collect``.
		"""
		if kind is not None:
			kind = as_kind(kind)
		builder = TableBuilder()
		for label, column in self._typed_columns(kind):
			builder.set_column(label, [functools.reduce(op, _present_values(column, kind), initial)])
		return builder.build()

	def transpose(self):
		"""Rows become columns; the two indexes swap places."""
		builder = TableBuilder()
		for r in range(self._nrows):
			for c in range(len(self._columns)):
				builder.set_from_at(c, r, self, r, c)
		builder.set_index(self.column_index)
		builder.set_column_index(self.index)
		return builder.build()

	#-----------------------------------------------------
	# Sorting
	#-----------------------------------------------------

	def sort(self, key=None, reverse=False):
		"""
		Sort rows by label. Only the iteration order changes: locations and
		columns are shared with this table.
		"""
		builder = self.new_copy_builder()
		builder.index.sort(key, reverse)
		return builder.build()

	def sort_by(self, column, reverse=False):
		"""Sort rows by the values of ``column``; NA values go last."""
		col = self.column(column)
		if reverse:
			order_key = lambda loc: (not col.is_na(loc), 0 if col.is_na(loc) else col[loc])
		else:
			order_key = lambda loc: (col.is_na(loc), 0 if col.is_na(loc) else col[loc])
		builder = self.new_copy_builder()
		builder.index.sort_locations(order_key, reverse)
		return builder.build()

	def sort_columns(self, key=None, reverse=False):
		builder = self.new_copy_builder()
		builder.column_index.sort(key, reverse)
		return builder.build()

	#-----------------------------------------------------
	# Index helpers
	#-----------------------------------------------------

	def index_on(self, column):
		"""Use the values of ``column`` as row labels and drop the column."""
		values = self.column(column).to_list()
		result = self.drop(column)
		result.index = HashIndex(values)
		return result

	def reset_index(self):
		"""Move the row labels into a leading "index" column and relabel rows 0..n-1."""
		if "index" in self.column_index:
			raise StateError('Table already has an "index" column')
		index = self.index
		order = list(index.order())
		builder = TableBuilder()
		builder.set_column("index", [index.key(loc) for loc in order])
		for key, loc in self.column_index.entries():
			builder.set_column(key, self._columns[loc].take(order))
		return builder.build()

	def copy(self):
		return Table._from_parts(list(self._columns), self._nrows, self._index, self._column_index)

	#-----------------------------------------------------
	# Grouping
	#-----------------------------------------------------

	def group_by(self, *columns, key=None, combine=None):
		"""
		Partition the rows into groups.

		Args:
			*columns: zero, one or several column labels
			key: function applied to a non-NA key value (or the row label
				when no column is given)
			combine: function turning the tuple of several columns' values
				into one key (default: the tuple itself)

		Returns:
			GroupBy
		"""
		from .groupby import GroupBy

		if not columns:
			return GroupBy.from_index(self, key)
		if len(columns) == 1:
			return GroupBy.from_column(self, columns[0], key)
		return GroupBy.from_columns(self, columns, combine)

	#-----------------------------------------------------
	# Export
	#-----------------------------------------------------

	def to_records(self):
		"""Rows as tuples; rows in row-index order, values in column-index order like to_dict."""
		columns = self.columns()
		return [tuple(column[r] for column in columns) for r in self.index.order()]

	def to_dict(self):
		"""{column label: values in row-index order}."""
		order = self.index.order()
		result = {}
		for key, loc in self.column_index.entries():
			column = self._columns[loc]
			result[key] = [column[r] for r in order]
		return result

	#-----------------------------------------------------
	# Equality
	#-----------------------------------------------------

	def __eq__(self, other):
		if not isinstance(other, Table):
			return NotImplemented
		if self._nrows != other._nrows:
			return False
		if self.column_index != other.column_index or self.index != other.index:
			return False
		return all(self._columns[loc] == other._columns[loc] for loc in self.column_index.order())

	def __ne__(self, other):
		result = self.__eq__(other)
		if result is NotImplemented:
			return result
		return not result

	def __hash__(self):
		return hash((self.column_index, self.index, tuple(self._columns)))

	def __repr__(self):
		labels = ", ".join(repr(k) for k in self.column_index)
		return f"Table({self._nrows}x{len(self._columns)}, columns=[{labels}])"
