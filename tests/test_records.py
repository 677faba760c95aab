import pytest

from py_table import Record
from py_table import RecordReader
from py_table import SequenceRecord
from py_table import SequenceRecordReader
from py_table.records import as_reader
from py_table.records import as_record


def test_sequence_record():
    rec = SequenceRecord([1, 'x'])
    assert isinstance(rec, Record)
    assert rec.size() == 2
    assert rec.get(1) == 'x'


def test_reader_drains_in_order():
    reader = SequenceRecordReader([(1,), (2,)])
    assert isinstance(reader, RecordReader)
    seen = []
    while reader.has_next():
        seen.append(reader.next().get(0))
    assert seen == [1, 2]
    with pytest.raises(StopIteration):
        reader.next()


def test_has_next_is_repeatable():
    reader = SequenceRecordReader(iter([(1,)]))
    assert reader.has_next()
    assert reader.has_next()
    assert reader.next().get(0) == 1
    assert not reader.has_next()


def test_adapters_pass_through_protocol_objects():
    rec = SequenceRecord([1])
    reader = SequenceRecordReader([])
    assert as_record(rec) is rec
    assert as_reader(reader) is reader
    assert as_record((3, 4)).get(1) == 4
    assert as_reader([[5]]).next().get(0) == 5
