from .builder import TableBuilder
from .errors import KeyNotFoundError
from .errors import StateError
from .index import HashIndex
from .typing import as_kind
from .typing import convert
from .typing import is_na


def _normalize_key(key):
	"""NA keys (and NA parts of tuple keys) all become None."""
	if isinstance(key, tuple):
		return tuple(None if is_na(k) else k for k in key)
	if is_na(key):
		return None
	return key


class GroupBy():
	"""
	Rows of a table partitioned by a derived key.

	Groups are computed once, in a single scan over the rows in index
	order. Every row lands in exactly one group; rows whose key is NA share
	the ``None`` group. Columns the key was derived from ("drop keys") are
	left out of ``collect`` and passed through unchanged by ``apply``.
	"""

	def __init__(self, table, groups, drop_keys=()):
		self._table = table
		self._groups = groups
		self._drop_keys = tuple(drop_keys)

	@classmethod
	def from_column(cls, table, column_key, key=None):
		"""Group by the values of one column, optionally mapped through ``key``."""
		column = table.column(column_key)
		buckets = {}
		for loc in table.index.order():
			value = column[loc]
			if key is not None and value is not None:
				value = key(value)
			buckets.setdefault(_normalize_key(value), []).append(loc)
		return cls(table, _freeze(buckets), (column_key,))

	@classmethod
	def from_columns(cls, table, column_keys, combine=None):
		"""Group by several columns; ``combine`` turns their value tuple into a key."""
		columns = [table.column(k) for k in column_keys]
		combine = combine or tuple
		buckets = {}
		for loc in table.index.order():
			values = tuple(c[loc] for c in columns)
			buckets.setdefault(_normalize_key(combine(values)), []).append(loc)
		return cls(table, _freeze(buckets), column_keys)

	@classmethod
	def from_index(cls, table, key=None):
		"""Group by row labels, optionally mapped through ``key``."""
		index = table.index
		buckets = {}
		for label, loc in index.entries():
			value = label if key is None else key(label)
			buckets.setdefault(_normalize_key(value), []).append(loc)
		return cls(table, _freeze(buckets))

	@property
	def table(self):
		return self._table

	@property
	def drop_keys(self):
		return self._drop_keys

	def __len__(self):
		return len(self._groups)

	def keys(self):
		return list(self._groups)

	def groups(self):
		"""{group key: tuple of row locations}, in first-seen order."""
		return dict(self._groups)

	def locations(self, key):
		try:
			return self._groups[_normalize_key(key)]
		except (KeyError, TypeError):
			raise KeyNotFoundError(key) from None

	def __iter__(self):
		for key in self._groups:
			yield key, self.get(key)

	def get(self, key):
		"""
		The rows of one group as a new table.

		Rows are copied label by label, so they keep their original row
		labels. Raises KeyNotFoundError for an unknown group.
		"""
		table = self._table
		index = table.index
		builder = table.new_builder()
		builder.set_column_index(table.column_index)
		for loc in self.locations(key):
			builder.set_row(index.key(loc), table.row_at(loc))
		return builder.build()

	def __getitem__(self, key):
		return self.get(key)

	def _retained(self):
		"""(label, location) of every column that is not a drop key."""
		table = self._table
		dropped = {table.column_index.location(k) for k in self._drop_keys}
		return [(k, loc) for k, loc in table.column_index.entries() if loc not in dropped]

	def apply(self, fn):
		"""
		Transform every retained column group by group.

		``fn`` receives the column restricted to one group and must return
		as many values; they are written back to the group's rows. Raises
		StateError when a result changes size.

		Returns:
			Table with the same shape and labels as the grouped table
		"""
		table = self._table
		builder = table.new_copy_builder()
		for _, c in self._retained():
			column = table.column_at(c)
			for locations in self._groups.values():
				result = fn(column.take(locations))
				if len(result) != len(locations):
					raise StateError("transformation must retain size")
				for loc, value in zip(locations, result):
					builder.set_at(loc, c, value)
		return builder.build()

	def collect(self, fn, kind=None):
		"""
		Reduce every retained column to one value per group.

		``fn`` receives the non-NA values of a column within one group; a
		group with none reduces to NA without calling ``fn``. With
		``kind``, columns whose element type is not a subclass of it are
		skipped and values are converted to ``kind`` first.

		Returns:
			Table with one row per group, labelled by the group key

		Examples:
			table.group_by("g").collect(statistics.mean)
		"""
		table = self._table
		if kind is not None:
			kind = as_kind(kind)
		retained = [
			(label, loc) for label, loc in self._retained()
			if kind is None or table.column_at(loc).dtype.is_assignable_to(kind)
		]

		builder = TableBuilder()
		builder.set_index(HashIndex(self._groups))
		for label, loc in retained:
			column = table.column_at(loc)
			results = []
			for locations in self._groups.values():
				values = [column[i] for i in locations if not column.is_na(i)]
				if kind is not None:
					values = [convert(v, kind) for v in values]
				results.append(fn(values) if values else None)
			builder.set_column(label, results)
		return builder.build()

	def __repr__(self):
		return f"GroupBy({len(self._groups)} groups, drop_keys={list(self._drop_keys)!r})"


def _freeze(buckets):
	return {key: tuple(locs) for key, locs in buckets.items()}
