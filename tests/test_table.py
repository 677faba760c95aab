import math
import operator
import statistics

import pytest

from py_table import Bound
from py_table import Column
from py_table import DimensionError
from py_table import HashIndex
from py_table import INT_NA
from py_table import KeyNotFoundError
from py_table import LocationError
from py_table import RangeIndex
from py_table import StateError
from py_table import Table
from py_table import UnsupportedOperationError
from py_table.typing import INT
from py_table.typing import OBJECT


@pytest.fixture
def people():
	return Table(
		{"name": ["ann", "bob", "cy"], "age": [31, None, 22], "score": [1.5, 2.5, 3.5]},
		index=["a", "b", "c"],
	)


class TestConstruction:
	"""Shape, labels and equal column lengths"""

	def test_round_trip(self):
		t = Table({"a": [1, 2, 3], "b": ["x", "y", "z"]})
		assert t.get(0, "a", int) == 1
		row = t.row(0)
		assert len(row) == 2
		assert row == [1, "x"]
		assert row[0] == 1
		assert row[1] == "x"

	def test_columns_match_indexes(self, people):
		assert len(people.columns()) == len(people.column_index) == 3
		assert len(people.rows()) == len(people.index) == 3
		assert all(len(c) == people.nrows for c in people.columns())
		assert people.shape == (3, 3)

	def test_ragged_columns(self):
		with pytest.raises(DimensionError):
			Table([[1, 2], [1]])

	def test_default_indexes(self):
		t = Table([[1, 2], ["a", "b"]])
		assert t.index == RangeIndex(2)
		assert t.column_index == RangeIndex(2)
		assert t.get(1, 1) == "b"

	def test_index_assignment_checks_size(self, people):
		with pytest.raises(DimensionError):
			people.index = ["x", "y"]
		with pytest.raises(DimensionError):
			people.column_index = RangeIndex(2)
		people.index = ["x", "y", "z"]
		assert people.get("z", "name") == "cy"

	def test_most_specific_type(self, people):
		assert people.most_specific_type == OBJECT
		assert Table([[1], [2]]).most_specific_type == INT
		assert people.row("a").dtype == OBJECT


class TestReads:
	"""Dual addressing and typed reads"""

	def test_label_equals_location(self, people):
		assert people.get("b", "name") == people.get_at(1, 0) == "bob"
		assert people.column("score") is people.column_at(2)

	def test_na_and_typed_reads(self, people):
		assert people.is_na("b", "age")
		assert people.get("b", "age") is None
		assert people.get_int("b", "age") == INT_NA
		assert math.isnan(people.get_double("b", "age"))
		assert people.get_double("a", "age") == 31.0
		assert people.get("a", "age", str) == "31"
		assert people.get("a", "name", int) == INT_NA

	def test_missing_labels(self, people):
		with pytest.raises(KeyNotFoundError):
			people.get("zz", "name")
		with pytest.raises(KeyNotFoundError):
			people.column("height")
		with pytest.raises(LocationError):
			people.get_at(3, 0)

	def test_getitem_dispatch(self, people):
		assert people["name"].to_list() == ["ann", "bob", "cy"]
		assert people["c", "age"] == 22
		assert people[[True, False, True]].index.to_list() == ["a", "c"]

	def test_columns_are_zero_copy(self, people):
		assert people.columns()[0] is people.column("name")

	def test_rows_follow_index_order(self, people):
		ordered = people.sort(reverse=True)
		assert [r.key for r in ordered.rows()] == ["c", "b", "a"]
		assert [r[0] for r in ordered] == ["cy", "bob", "ann"]


class TestWrites:
	"""Copy-on-write single-cell writes"""

	def test_set_returns_new_table(self, people):
		changed = people.set("a", "age", 40)
		assert changed.get("a", "age") == 40
		assert people.get("a", "age") == 31
		assert changed.index == people.index

	def test_set_shares_untouched_columns(self, people):
		changed = people.set_at(0, 1, 40)
		assert changed.column("name") is people.column("name")
		assert changed.column("age") is not people.column("age")


class TestMasks:
	"""Boolean row and cell masks"""

	def test_row_mask_keeps_labels(self, people):
		t = people.mask([False, True, True])
		assert t.index.to_list() == ["b", "c"]
		assert t.column("name").to_list() == ["bob", "cy"]

	def test_cell_mask_reads_na(self):
		t = Table({"x": [1, 2], "y": [3, 4]})
		masked = t.mask([[True, False], [False, True]])
		assert masked.to_dict() == {"x": [1, None], "y": [None, 4]}

	def test_set_mask_rows(self):
		t = Table({"x": [1, 2], "y": [3, 4]})
		assert t.set_mask([False, True], 0).to_dict() == {"x": [1, 0], "y": [3, 0]}

	def test_set_mask_cells_leave_false_unchanged(self):
		t = Table({"x": [1, 2], "y": [3, 4]})
		out = t.set_mask([[True, False], [False, False]], 9)
		assert out.to_dict() == {"x": [9, 2], "y": [3, 4]}

	@pytest.mark.parametrize("mask", [
		[True],
		[[True], [False]],
		[1, 0],
		[[True, "x"], [True, True]],
	])
	def test_illegal_shapes(self, mask):
		t = Table({"x": [1, 2], "y": [3, 4]})
		with pytest.raises(UnsupportedOperationError):
			t.mask(mask)


class TestTransforms:
	"""map, apply, reduce, filter, limit, transpose"""

	def test_map_skips_na(self, people):
		t = people.drop("name").map(lambda v: v * 2, float)
		assert t.to_dict() == {"age": [62.0, None, 44.0], "score": [3.0, 5.0, 7.0]}
		assert t.index == people.index

	def test_apply(self):
		t = Table({"x": [1, 2, 3]}, index=["a", "b", "c"])
		out = t.apply(lambda col: [v + 1 for v in col])
		assert out.to_dict() == {"x": [2, 3, 4]}
		assert out.index == t.index

	def test_reduce(self):
		t = Table({"x": [1, 2, 3], "y": [4, 5, 6]})
		out = t.reduce(lambda col: sum(col))
		assert out.shape == (1, 2)
		assert out.get(0, "y") == 15

	def test_filter(self, people):
		out = people.filter(lambda row: row.get("score") > 2)
		assert out.index.to_list() == ["b", "c"]

	def test_limit_and_head(self, people):
		assert people.limit(2).index.to_list() == ["a", "b"]
		assert people.head().nrows == 3
		assert people.limit(0).nrows == 0

	def test_transpose(self):
		t = Table({"x": [1, 2], "y": [3, 4]}, index=["r1", "r2"])
		tt = t.transpose()
		assert tt.shape == (2, 2)
		assert tt.index.to_list() == ["x", "y"]
		assert tt.column_index.to_list() == ["r1", "r2"]
		assert tt.get("y", "r1") == 3
		assert tt.transpose() == t


class TestDropAndSelect:
	"""Column removal and label-range selection"""

	def test_drop_shares_columns(self, people):
		out = people.drop("age")
		assert out.column_index.to_list() == ["name", "score"]
		assert out.column("score") is people.column("score")
		assert out.index == people.index

	def test_drop_if_and_drop_na(self, people):
		assert people.drop_na().column_index.to_list() == ["name", "score"]
		assert people.drop_if(lambda c: c.dtype.is_numeric).column_index.to_list() == ["name"]

	def test_select_rows(self, people):
		assert people.select("a", "c").index.to_list() == ["a", "b"]
		out = people.select("a", "c", Bound.EXCLUSIVE, Bound.INCLUSIVE)
		assert out.index.to_list() == ["b", "c"]

	def test_select_columns_and_get(self, people):
		assert people.select_columns("age", "name").column_index.to_list() == ["name", "age"]
		assert people.get_columns("score", "name").column_index.to_list() == ["score", "name"]
		assert people.get_rows("c", "a").column("name").to_list() == ["cy", "ann"]


class TestSorting:
	"""Sorting changes iteration order only"""

	def test_sort_shares_columns(self, people):
		out = people.sort(reverse=True)
		assert out.index.to_list() == ["c", "b", "a"]
		assert out.column("name") is people.column("name")
		assert out.get("c", "name") == "cy"

	def test_sort_by_puts_na_last(self, people):
		assert people.sort_by("age").index.to_list() == ["c", "a", "b"]
		assert people.sort_by("age", reverse=True).index.to_list() == ["a", "c", "b"]

	def test_sort_columns(self, people):
		out = people.sort_columns()
		assert list(out.to_dict()) == ["age", "name", "score"]


class TestIndexHelpers:
	"""index_on, reset_index, copy"""

	def test_index_on(self, people):
		out = people.index_on("name")
		assert out.index.to_list() == ["ann", "bob", "cy"]
		assert "name" not in out.column_index
		assert out.get("cy", "age") == 22

	def test_reset_index(self, people):
		out = people.reset_index()
		assert out.column("index").to_list() == ["a", "b", "c"]
		assert out.index == RangeIndex(3)
		with pytest.raises(StateError):
			out.reset_index()

	def test_copy_is_equal(self, people):
		assert people.copy() == people


class TestEquality:
	"""Equality covers labels and values; hash follows equality"""

	def test_equal_tables(self):
		a = Table({"x": [1, None], "y": ["p", "q"]})
		b = Table({"x": [1, None], "y": ["p", "q"]})
		assert a == b
		assert hash(a) == hash(b)

	def test_labels_matter(self):
		a = Table({"x": [1, 2]})
		assert a != Table({"x": [1, 2]}, index=["a", "b"])
		assert a != Table({"z": [1, 2]})
		assert a != Table({"x": [1, 3]})

	def test_sorted_index_compares_by_order(self, people):
		assert people.sort() == people
		assert people.sort(reverse=True) != people

	def test_dict_and_records(self, people):
		assert people.to_records()[1] == ("bob", None, 2.5)
		assert people.to_dict()["age"] == [31, None, 22]
		assert Table({"x": [1]}, index=HashIndex(["k"])).to_dict() == {"x": [1]}


class TestTupleMasks:
	"""Tuples of bools select rows like lists do"""

	def test_tuple_mask(self, people):
		assert people[(True, False, True)].index.to_list() == ["a", "c"]

	def test_two_row_tuple_mask_is_not_a_label_pair(self):
		t = Table({"x": [1, 2]})
		assert t[(False, True)].column("x").to_list() == [2]

	def test_wrong_length_tuple_mask(self, people):
		with pytest.raises(UnsupportedOperationError):
			people[(True, False)]


class TestExportOrder:
	"""to_dict and to_records agree on column order"""

	def test_after_sort_columns(self):
		t = Table({"a": [1], "b": ["x"]}).sort_columns(reverse=True)
		assert list(t.to_dict()) == ["b", "a"]
		assert t.to_records() == [("x", 1)]


class TestColumnReductions:
	"""Whole-table collect and fold"""

	def test_collect_skips_na(self):
		t = Table({"x": [1.0, None, 3.0], "y": [None, None, None]})
		out = t.collect(statistics.mean)
		assert out.shape == (1, 2)
		assert out.get(0, "x") == 2.0
		assert out.is_na(0, "y")

	def test_collect_with_kind(self, people):
		out = people.collect(max, float)
		assert out.column_index.to_list() == ["score"]
		assert out.get(0, "score") == 3.5

	def test_fold(self, people):
		out = people.fold(operator.add, 0, int)
		assert out.column_index.to_list() == ["age"]
		assert out.get(0, "age") == 53
		assert Table({"x": [None, None]}).fold(operator.add, 0).get(0, "x") == 0
