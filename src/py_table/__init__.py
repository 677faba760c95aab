"""
py-table: A column-oriented, zero-dependency in-memory table library

Tables hold equal-length typed columns and label both axes with an Index,
so every cell can be reached by label or by location. Tables are
immutable; they are produced by single-use builders and transformed into
new tables that share untouched columns.

Main classes:
    - Table: 2D table with row and column labels
    - TableBuilder: mutable, single-use staging for a Table
    - Column / ColumnBuilder: typed column and its builder
    - RangeIndex / HashIndex: dense and explicit label indexes
    - GroupBy: rows partitioned by a derived key
    - RowView: lazy positional view of one row

Typed column variants (auto-created):
    - IntColumn: array-backed ints, NA is INT_NA
    - FloatColumn: array-backed floats, NA is NaN
    - ObjectColumn: everything else, NA is None

Zero external dependencies - pure Python stdlib only.
"""

from .errors import PyTableError, KeyNotFoundError, DuplicateKeyError, DimensionError
from .errors import NotComparableError, StateError, UnsupportedOperationError, LocationError
from .typing import DataType, INT_NA, FLOAT_NA, is_na, na_of, convert
from .column import Column, IntColumn, FloatColumn, ObjectColumn, ColumnBuilder
from .index import Index, RangeIndex, HashIndex, Bound, RangeIndexBuilder, HashIndexBuilder
from .records import Record, RecordReader, SequenceRecord, SequenceRecordReader
from .builder import AbstractTableBuilder, TableBuilder
from .views import RowView
from .table import Table
from .groupby import GroupBy


def builder(*dtypes):
	"""An empty TableBuilder, optionally with typed columns."""
	return TableBuilder(*dtypes)


__version__ = "0.1.0"
__all__ = [
	"Table",
	"TableBuilder",
	"AbstractTableBuilder",
	"builder",
	"Column",
	"IntColumn",
	"FloatColumn",
	"ObjectColumn",
	"ColumnBuilder",
	"Index",
	"RangeIndex",
	"HashIndex",
	"RangeIndexBuilder",
	"HashIndexBuilder",
	"Bound",
	"RowView",
	"GroupBy",
	"Record",
	"RecordReader",
	"SequenceRecord",
	"SequenceRecordReader",
	"DataType",
	"INT_NA",
	"FLOAT_NA",
	"is_na",
	"na_of",
	"convert",
	"PyTableError",
	"KeyNotFoundError",
	"DuplicateKeyError",
	"DimensionError",
	"NotComparableError",
	"StateError",
	"UnsupportedOperationError",
	"LocationError",
]
