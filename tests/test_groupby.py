import statistics

import pytest

from py_table import GroupBy
from py_table import KeyNotFoundError
from py_table import StateError
from py_table import Table


@pytest.fixture
def sales():
	return Table({"g": [1, 2, 1, 2], "v": [30, 2, 33, 6]})


class TestConstruction:
	"""One scan, every row in exactly one bucket"""

	def test_partition_is_complete(self):
		t = Table({"k": ["a", None, "b", "a", None], "v": [1, 2, 3, 4, 5]})
		gb = t.group_by("k")
		assert gb.keys() == ["a", None, "b"]
		all_locations = sorted(loc for locs in gb.groups().values() for loc in locs)
		assert all_locations == list(range(t.nrows))

	def test_nan_keys_share_a_bucket(self):
		t = Table({"k": [1.5, float("nan"), float("nan")], "v": [1, 2, 3]})
		assert t.group_by("k").groups() == {1.5: (0,), None: (1, 2)}

	def test_key_function(self, sales):
		gb = sales.group_by("v", key=lambda v: v > 10)
		assert gb.groups() == {True: (0, 2), False: (1, 3)}

	def test_several_columns(self):
		t = Table({"a": [1, 1, 2], "b": ["x", "x", "y"], "v": [1, 2, 3]})
		gb = t.group_by("a", "b")
		assert gb.groups() == {(1, "x"): (0, 1), (2, "y"): (2,)}
		assert gb.drop_keys == ("a", "b")
		joined = t.group_by("a", "b", combine=lambda vals: f"{vals[0]}-{vals[1]}")
		assert joined.keys() == ["1-x", "2-y"]

	def test_by_row_labels(self):
		t = Table({"v": [1, 2, 3]}, index=["ax", "bx", "ay"])
		gb = t.group_by(key=lambda label: label[0])
		assert isinstance(gb, GroupBy)
		assert gb.groups() == {"a": (0, 2), "b": (1,)}
		assert gb.drop_keys == ()


class TestGet:
	"""Per-group tables keep their row labels"""

	def test_get(self, sales):
		sub = sales.group_by("g").get(2)
		assert sub.index.to_list() == [1, 3]
		assert sub.column("v").to_list() == [2, 6]
		assert sub.get(3, "v") == 6

	def test_unknown_group(self, sales):
		with pytest.raises(KeyNotFoundError):
			sales.group_by("g")[7]

	def test_iteration(self, sales):
		pairs = list(sales.group_by("g"))
		assert [k for k, _ in pairs] == [1, 2]
		assert pairs[0][1].column("v").to_list() == [30, 33]


class TestApply:
	"""Size-preserving per-group transforms"""

	def test_apply_writes_back_in_place(self, sales):
		out = sales.group_by("g").apply(lambda col: [v - min(col) for v in col])
		assert out.column("v").to_list() == [0, 0, 3, 4]
		assert out.column("g") is sales.column("g")
		assert out.index == sales.index

	def test_size_change_fails(self, sales):
		with pytest.raises(StateError, match="transformation must retain size"):
			sales.group_by("g").apply(lambda col: [sum(col)])


class TestCollect:
	"""One row per group"""

	def test_group_mean(self, sales):
		out = sales.group_by("g").collect(statistics.mean)
		assert out.index.to_list() == [1, 2]
		assert out.column_index.to_list() == ["v"]
		assert out.get(1, "v") == 31.5
		assert out.get(2, "v") == 4.0

	def test_na_values_are_skipped(self):
		t = Table({"g": ["a", "a"], "v": [1.0, None]})
		assert t.group_by("g").collect(len).get("a", "v") == 1

	def test_typed_collect_skips_other_columns(self):
		t = Table({"g": [1, 1], "n": [2, 4], "s": ["p", "q"]})
		out = t.group_by("g").collect(sum, int)
		assert out.column_index.to_list() == ["n"]
		assert out.get(1, "n") == 6

	def test_collect_by_label_groups(self):
		t = Table({"v": [1, 2, 3]}, index=["ax", "bx", "ay"])
		out = t.group_by(key=lambda label: label[0]).collect(max)
		assert out.to_dict() == {"v": [3, 2]}
		assert out.index.to_list() == ["a", "b"]

	def test_all_na_group_reduces_to_na(self):
		t = Table({"g": [1, 2], "v": [None, 3.0]})
		out = t.group_by("g").collect(statistics.mean)
		assert out.is_na(1, "v")
		assert out.get(2, "v") == 3.0
