import pytest

from py_table import Bound
from py_table import DuplicateKeyError
from py_table import HashIndex
from py_table import HashIndexBuilder
from py_table import KeyNotFoundError
from py_table import LocationError
from py_table import NotComparableError
from py_table import RangeIndex
from py_table import RangeIndexBuilder
from py_table import StateError


class TestRangeIndex:
	"""Dense range index: key == location"""

	def test_location_and_key_agree(self):
		idx = RangeIndex(4)
		assert len(idx) == 4
		assert idx.location(2) == 2
		assert idx.key(3) == 3
		assert list(idx) == [0, 1, 2, 3]

	def test_missing_key(self):
		idx = RangeIndex(3)
		with pytest.raises(KeyNotFoundError):
			idx.location(3)
		with pytest.raises(KeyNotFoundError):
			idx.location("a")
		assert not idx.contains(True)

	def test_bad_location(self):
		with pytest.raises(LocationError):
			RangeIndex(2).key(2)

	def test_select_range_half_open(self):
		assert RangeIndex(10).select_range(2, 5) == [2, 3, 4]
		assert RangeIndex(10).select_range(2, 5, Bound.EXCLUSIVE, Bound.INCLUSIVE) == [3, 4, 5]

	def test_select_range_not_comparable(self):
		with pytest.raises(NotComparableError):
			RangeIndex(3).select_range("a", "z")

	def test_equals_hash_index_with_same_entries(self):
		assert RangeIndex(3) == HashIndex([0, 1, 2])
		assert hash(RangeIndex(3)) == hash(HashIndex([0, 1, 2]))
		assert RangeIndex(3) != RangeIndex(4)


class TestHashIndex:
	"""Explicit index over arbitrary keys"""

	def test_duplicate_keys_rejected(self):
		with pytest.raises(DuplicateKeyError, match="'a'"):
			HashIndex.of(["a", "b", "a"])

	def test_bijection(self):
		idx = HashIndex(["c", "a", 7, (1, 2)])
		for i in range(len(idx)):
			assert idx.location(idx.key(i)) == i

	def test_unknown_key(self):
		idx = HashIndex(["a"])
		with pytest.raises(KeyNotFoundError):
			idx.location("b")
		with pytest.raises(KeyError):
			idx.location(["unhashable"])
		assert "a" in idx
		assert ["unhashable"] not in idx

	def test_select_range_scans_unsorted(self):
		idx = HashIndex(["d", "a", "c", "b"])
		assert idx.select_range("a", "c") == ["a", "b"]
		assert idx.select_range("a", "c", stop_bound=Bound.INCLUSIVE) == ["a", "c", "b"]

	def test_select_range_reversed_bounds_is_empty(self):
		assert HashIndex(["a", "b"]).select_range("b", "a") == []

	def test_select_range_mixed_keys(self):
		with pytest.raises(NotComparableError):
			HashIndex(["a", 1]).select_range("a", "z")

	def test_order_matters_for_equality(self):
		built = HashIndex(["b", "a"]).new_copy_builder().sort().build()
		assert built != HashIndex(["b", "a"])
		assert list(built) == ["a", "b"]


class TestHashIndexBuilder:
	"""Growth, removal, swapping and sorting"""

	def test_add_and_duplicate(self):
		b = HashIndexBuilder().add("x").add("y")
		assert b.location("y") == 1
		with pytest.raises(DuplicateKeyError):
			b.add("x")

	def test_extend_adds_integer_keys(self):
		b = HashIndexBuilder().add("x").extend(3)
		assert list(b) == ["x", 1, 2]

	def test_remove_renumbers_later_locations(self):
		b = HashIndexBuilder()
		for k in "abcd":
			b.add(k)
		b.remove(1)
		idx = b.build()
		assert list(idx) == ["a", "c", "d"]
		assert [idx.location(k) for k in "acd"] == [0, 1, 2]
		assert "b" not in idx

	def test_remove_keeps_sorted_order(self):
		b = HashIndexBuilder()
		for k in "dbca":
			b.add(k)
		b.sort()
		b.remove(0)  # drops "d"
		idx = b.build()
		assert list(idx) == ["a", "b", "c"]
		assert idx.location("a") == 2

	def test_swap_exchanges_keys(self):
		b = HashIndexBuilder().add("a").add("b").add("c")
		b.swap(0, 2)
		idx = b.build()
		assert idx.key(0) == "c"
		assert idx.location("a") == 2
		assert sorted(idx.order()) == [0, 1, 2]

	def test_sort_does_not_renumber(self):
		b = HashIndexBuilder()
		for k in ["b", "c", "a"]:
			b.add(k)
		idx = b.sort().build()
		assert list(idx) == ["a", "b", "c"]
		assert idx.location("b") == 0
		assert list(idx.order()) == [2, 0, 1]

	def test_sort_reverse_and_key(self):
		b = HashIndexBuilder()
		for k in ["bb", "a", "ccc"]:
			b.add(k)
		assert list(b.sort(key=len, reverse=True)) == ["ccc", "bb", "a"]

	def test_sorted_index_uses_fast_range(self):
		b = HashIndexBuilder()
		for k in [5, 1, 3, 9]:
			b.add(k)
		idx = b.sort().build()
		assert idx.select_range(2, 9) == [3, 5]
		assert idx.select_range(2, 9, stop_bound=Bound.INCLUSIVE) == [3, 5, 9]

	def test_sort_incomparable(self):
		b = HashIndexBuilder().add("a").add(1)
		with pytest.raises(NotComparableError):
			b.sort()

	def test_resize(self):
		b = HashIndexBuilder().add("a").add("b").add("c")
		assert list(b.resize(1)) == ["a"]
		assert list(b.resize(3)) == ["a", 1, 2]

	def test_single_use(self):
		b = HashIndexBuilder().add("a")
		idx = b.build()
		with pytest.raises(StateError):
			b.add("b")
		with pytest.raises(StateError):
			b.build()
		assert list(idx) == ["a"]


class TestRangeIndexBuilder:
	"""Dense until explicit labels are needed"""

	def test_stays_dense(self):
		b = RangeIndexBuilder()
		b.add(0).add(1).extend(4)
		idx = b.build()
		assert isinstance(idx, RangeIndex)
		assert len(idx) == 4

	def test_upgrades_on_label(self):
		b = RangeIndexBuilder(2).add("x")
		idx = b.build()
		assert isinstance(idx, HashIndex)
		assert list(idx) == [0, 1, "x"]

	def test_duplicate_int_key(self):
		with pytest.raises(DuplicateKeyError):
			RangeIndexBuilder(3).add(1)

	def test_tail_remove_stays_dense(self):
		idx = RangeIndexBuilder(3).remove(2).build()
		assert idx == RangeIndex(2)
		assert isinstance(idx, RangeIndex)

	def test_middle_remove_upgrades(self):
		idx = RangeIndexBuilder(3).remove(0).build()
		assert list(idx) == [1, 2]
		assert idx.location(2) == 1

	def test_get_or_add(self):
		b = RangeIndexBuilder(2)
		assert b.get_or_add(1) == 1
		assert b.get_or_add("z") == 2
		assert b.get_or_add("z") == 2
		assert len(b) == 3
