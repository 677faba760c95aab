"""
Mutable, single-use staging for tables.

AbstractTableBuilder turns label-based calls into location-based ones
through lazily created index builders, extends those indexes when a
location write grows the table, and delegates storage to the primitives a
concrete builder implements. TableBuilder stores one entry per column:
either a finished Column shared with a source table, or a ColumnBuilder
once the column has been written to.
"""

from collections.abc import Iterable

from .column import Column
from .column import ColumnBuilder
from .errors import DimensionError
from .errors import DuplicateKeyError
from .errors import LocationError
from .errors import StateError
from .index import RangeIndex
from .index import RangeIndexBuilder
from .index import as_index
from .records import Record
from .records import as_reader
from .records import as_record


def _check_non_negative(r, c):
	if r < 0 or c < 0:
		raise LocationError(f"Negative location ({r}, {c})")


class AbstractTableBuilder():
	"""
	Label layer and auto-extension over abstract storage primitives.

	Writing at row ``r`` / column ``c`` past the current bounds first fills
	every missing row and column with NA. Every call after ``build()``
	raises StateError.
	"""

	def __init__(self):
		self._index_builder = None
		self._column_index_builder = None
		self._built = False

	def _check_open(self):
		if self._built:
			raise StateError("TableBuilder has already been built")

	#-----------------------------------------------------
	# Shape and labels
	#-----------------------------------------------------

	@property
	def nrows(self):
		raise NotImplementedError

	@property
	def ncols(self):
		raise NotImplementedError

	@property
	def index(self):
		"""Row index builder, created on first use."""
		self._check_open()
		if self._index_builder is None:
			self._index_builder = RangeIndexBuilder(self.nrows)
		return self._index_builder

	@property
	def column_index(self):
		"""Column index builder, created on first use."""
		self._check_open()
		if self._column_index_builder is None:
			self._column_index_builder = RangeIndexBuilder(self.ncols)
		return self._column_index_builder

	def set_index(self, index):
		"""
		Label the rows with ``index``.

		Raises DimensionError when rows exist and their count differs. On
		an empty builder the index creates its rows, all NA.
		"""
		self._check_open()
		index = as_index(index)
		if self.nrows > 0 and len(index) != self.nrows:
			raise DimensionError(f"Index of size {len(index)} does not match {self.nrows} rows")
		self._index_builder = index.new_copy_builder()
		self._extend_rows(len(index))
		return self

	def set_column_index(self, index):
		self._check_open()
		index = as_index(index)
		if self.ncols > 0 and len(index) != self.ncols:
			raise DimensionError(f"Column index of size {len(index)} does not match {self.ncols} columns")
		self._column_index_builder = index.new_copy_builder()
		self._extend_columns(len(index))
		return self

	def _sync_indexes(self):
		"""Extend existing index builders to cover rows/columns added by storage."""
		if self._index_builder is not None and len(self._index_builder) < self.nrows:
			self._index_builder.extend(self.nrows)
		if self._column_index_builder is not None and len(self._column_index_builder) < self.ncols:
			self._column_index_builder.extend(self.ncols)

	#-----------------------------------------------------
	# Label-based operations
	#-----------------------------------------------------

	def set(self, row_key, column_key, value):
		self._check_open()
		r = self.index.get_or_add(row_key)
		c = self.column_index.get_or_add(column_key)
		return self.set_at(r, c, value)

	def set_na(self, row_key, column_key):
		self._check_open()
		r = self.index.get_or_add(row_key)
		c = self.column_index.get_or_add(column_key)
		return self.set_na_at(r, c)

	def set_column(self, column_key, column):
		"""Replace or append the column labelled ``column_key``."""
		self._check_open()
		return self.set_column_at(self.column_index.get_or_add(column_key), column)

	def add_column(self, column, key=None):
		"""Append ``column``; labelled ``key`` when given."""
		self._check_open()
		if key is not None:
			if key in self.column_index:
				raise DuplicateKeyError(f"Duplicate key {key!r}")
			return self.set_column(key, column)
		return self.set_column_at(self.ncols, column)

	def set_row(self, row_key, row):
		"""Replace or append the row labelled ``row_key``."""
		self._check_open()
		return self.set_row_at(self.index.get_or_add(row_key), row)

	def add_row(self, row, key=None):
		self._check_open()
		if key is not None:
			if key in self.index:
				raise DuplicateKeyError(f"Duplicate key {key!r}")
			return self.set_row(key, row)
		return self.set_row_at(self.nrows, row)

	def set_from(self, row_key, column_key, table, from_row, from_column):
		"""Copy the cell ``(from_row, from_column)`` of ``table`` by label."""
		self._check_open()
		r = self.index.get_or_add(row_key)
		c = self.column_index.get_or_add(column_key)
		return self.set_from_at(r, c, table, table.index.location(from_row),
			table.column_index.location(from_column))

	def remove(self, column_key):
		self._check_open()
		return self.remove_at(self.column_index.location(column_key))

	def remove_row(self, row_key):
		self._check_open()
		return self.remove_row_at(self.index.location(row_key))

	#-----------------------------------------------------
	# Location-based operations
	#-----------------------------------------------------

	def set_at(self, r, c, value):
		self._check_open()
		_check_non_negative(r, c)
		self._set_at(r, c, value)
		self._sync_indexes()
		return self

	def set_na_at(self, r, c):
		self._check_open()
		_check_non_negative(r, c)
		self._set_na_at(r, c)
		self._sync_indexes()
		return self

	def set_column_at(self, c, column):
		"""
		Replace column ``c``, or append it when ``c`` is past the last column.

		``column`` may be a Column, a ColumnBuilder or any iterable of values.
		"""
		self._check_open()
		_check_non_negative(0, c)
		if isinstance(column, ColumnBuilder):
			column = column.build()
		elif not isinstance(column, Column):
			column = Column(column)
		self._set_column_at(c, column)
		self._sync_indexes()
		return self

	def set_row_at(self, r, row):
		"""
		Replace row ``r``, or append it when ``r`` is past the last row.

		``row`` may be a RowView, a Record or any sequence of values;
		columns it does not reach are set to NA.
		"""
		self._check_open()
		_check_non_negative(r, 0)
		if isinstance(row, Record) and not isinstance(row, Iterable):
			row = [row.get(i) for i in range(row.size())]
		self._set_row_at(r, list(row))
		self._sync_indexes()
		return self

	def set_from_at(self, r, c, table, from_r, from_c):
		self._check_open()
		_check_non_negative(r, c)
		if table.is_na_at(from_r, from_c):
			self._set_na_at(r, c)
		else:
			self._set_at(r, c, table.get_at(from_r, from_c))
		self._sync_indexes()
		return self

	def remove_at(self, c):
		self._check_open()
		self._check_column(c)
		self._remove_at(c)
		if self._column_index_builder is not None:
			self._column_index_builder.remove(c)
		return self

	def remove_row_at(self, r):
		self._check_open()
		self._check_row(r)
		self._remove_row_at(r)
		if self._index_builder is not None:
			self._index_builder.remove(r)
		return self

	def swap_at(self, a, b):
		"""Swap columns ``a`` and ``b`` together with their labels."""
		self._check_open()
		self._check_column(a)
		self._check_column(b)
		self._swap_at(a, b)
		if self._column_index_builder is not None:
			self._column_index_builder.swap(a, b)
		return self

	def swap_rows_at(self, a, b):
		"""Swap rows ``a`` and ``b`` together with their labels."""
		self._check_open()
		self._check_row(a)
		self._check_row(b)
		self._swap_rows_at(a, b)
		if self._index_builder is not None:
			self._index_builder.swap(a, b)
		return self

	def _check_row(self, r):
		if not 0 <= r < self.nrows:
			raise LocationError(f"Row {r} out of range for builder with {self.nrows} rows")

	def _check_column(self, c):
		if not 0 <= c < self.ncols:
			raise LocationError(f"Column {c} out of range for builder with {self.ncols} columns")

	#-----------------------------------------------------
	# Record ingestion
	#-----------------------------------------------------

	def read(self, record):
		"""Append one record as a new row."""
		self._check_open()
		self._read_record(as_record(record))
		self._sync_indexes()
		return self

	def read_all(self, reader):
		"""Append every record of ``reader``; the row index is extended once, at the end."""
		self._check_open()
		reader = as_reader(reader)
		while reader.has_next():
			self._read_record(reader.next())
		self._sync_indexes()
		return self

	#-----------------------------------------------------
	# Storage primitives
	#-----------------------------------------------------

	def _set_at(self, r, c, value):
		raise NotImplementedError

	def _set_na_at(self, r, c):
		raise NotImplementedError

	def _set_column_at(self, c, column):
		raise NotImplementedError

	def _set_row_at(self, r, values):
		raise NotImplementedError

	def _remove_at(self, c):
		raise NotImplementedError

	def _remove_row_at(self, r):
		raise NotImplementedError

	def _swap_at(self, a, b):
		raise NotImplementedError

	def _swap_rows_at(self, a, b):
		raise NotImplementedError

	def _read_record(self, record):
		raise NotImplementedError

	def _extend_rows(self, nrows):
		raise NotImplementedError

	def _extend_columns(self, ncols):
		raise NotImplementedError

	def _build_columns(self, nrows):
		raise NotImplementedError

	#-----------------------------------------------------
	# Build
	#-----------------------------------------------------

	def build(self):
		"""
		Freeze into a Table.

		Every column is padded with NA to the row count, which is the larger
		of the longest column and the row index builder. The builder cannot
		be used afterwards.
		"""
		from .table import Table

		self._check_open()
		nrows = self.nrows
		if self._index_builder is not None:
			nrows = max(nrows, len(self._index_builder))
		if self._column_index_builder is not None and len(self._column_index_builder) > self.ncols:
			self._extend_columns(len(self._column_index_builder))
		columns = self._build_columns(nrows)

		if self._index_builder is not None:
			self._index_builder.extend(nrows)
			index = self._index_builder.build()
		else:
			index = RangeIndex(nrows)

		if self._column_index_builder is not None:
			self._column_index_builder.extend(len(columns))
			column_index = self._column_index_builder.build()
			if len(column_index) != len(columns):
				raise DimensionError(
					f"Column index of size {len(column_index)} does not match {len(columns)} columns"
				)
		else:
			column_index = RangeIndex(len(columns))

		self._built = True
		self._index_builder = None
		self._column_index_builder = None
		self._release()
		return Table._from_parts(columns, nrows, index, column_index)

	def _release(self):
		pass


class TableBuilder(AbstractTableBuilder):
	"""
	Column-list storage for AbstractTableBuilder.

	Args:
		*dtypes: element types of pre-created, empty columns

	Examples:
		builder = TableBuilder(int, str)
		builder.set_at(0, 0, 1).set_at(0, 1, "x")
		table = builder.build()
	"""

	def __init__(self, *dtypes):
		super().__init__()
		self._buffers = [ColumnBuilder(dtype) for dtype in dtypes]
		self._rows = 0

	@classmethod
	def from_table(cls, table):
		"""A builder holding ``table``'s columns and labels; columns are copied on first write."""
		builder = cls()
		builder._buffers = list(table._columns)
		builder._rows = table.nrows
		builder._index_builder = table.index.new_copy_builder()
		builder._column_index_builder = table.column_index.new_copy_builder()
		return builder

	@property
	def nrows(self):
		self._check_open()
		return self._rows

	@property
	def ncols(self):
		self._check_open()
		return len(self._buffers)

	def _writable(self, c):
		"""Column builder for location ``c``, creating NA columns up to it."""
		buffers = self._buffers
		while len(buffers) <= c:
			buffers.append(ColumnBuilder())
		entry = buffers[c]
		if isinstance(entry, Column):
			entry = entry.new_copy_builder()
			buffers[c] = entry
		return entry

	def _set_at(self, r, c, value):
		self._writable(c).set(r, value)
		self._rows = max(self._rows, r + 1)

	def _set_na_at(self, r, c):
		self._writable(c).set_na(r)
		self._rows = max(self._rows, r + 1)

	def _set_column_at(self, c, column):
		buffers = self._buffers
		while len(buffers) < c:
			buffers.append(ColumnBuilder())
		if c == len(buffers):
			buffers.append(column)
		else:
			buffers[c] = column
		self._rows = max(self._rows, len(column))

	def _set_row_at(self, r, values):
		for c in range(max(len(values), len(self._buffers))):
			self._writable(c).set(r, values[c] if c < len(values) else None)
		self._rows = max(self._rows, r + 1)

	def _remove_at(self, c):
		del self._buffers[c]

	def _remove_row_at(self, r):
		for c in range(len(self._buffers)):
			builder = self._writable(c)
			if r < len(builder):
				builder.remove(r)
		self._rows -= 1

	def _swap_at(self, a, b):
		buffers = self._buffers
		buffers[a], buffers[b] = buffers[b], buffers[a]

	def _swap_rows_at(self, a, b):
		for c in range(len(self._buffers)):
			builder = self._writable(c)
			builder.pad(self._rows)
			builder.swap(a, b)

	def _read_record(self, record):
		r = self._rows
		size = record.size()
		for c in range(size):
			self._writable(c).set(r, record.get(c))
		self._rows = r + 1

	def _extend_rows(self, nrows):
		self._rows = max(self._rows, nrows)

	def _extend_columns(self, ncols):
		while len(self._buffers) < ncols:
			self._buffers.append(ColumnBuilder())

	def _build_columns(self, nrows):
		columns = []
		for entry in self._buffers:
			if isinstance(entry, Column):
				if len(entry) == nrows:
					columns.append(entry)
					continue
				entry = entry.new_copy_builder()
			columns.append(entry.pad(nrows).build())
		return columns

	def _release(self):
		self._buffers = None

	def __repr__(self):
		if self._built:
			return "TableBuilder(<built>)"
		return f"TableBuilder({self._rows}x{len(self._buffers)})"
