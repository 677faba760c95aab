"""
Element types, NA sentinels and conversions for py-table columns.

A DataType only names the Python type of a column's elements. Missing
values are stored inline as a per-type NA sentinel, and every conversion
between element types goes through the single ``_CONVERTERS`` table.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Type
import math
import warnings


# Smallest signed 64-bit value; fits array('q') and marks a missing int.
INT_NA = -(1 << 63)
FLOAT_NA = float("nan")
COMPLEX_NA = complex(FLOAT_NA, FLOAT_NA)


# Widening orders; a value moves a column up its ladder, never down.
_LADDERS = (
    (bool, int, float, complex),
    (date, datetime),
)


@dataclass(frozen=True)
class DataType:
    """
    Element type of a column.

    >>> DataType(int)
    <int>
    >>> DataType(int).promote_with(1.5)
    <float>
    >>> DataType(float).promote_with(None)
    <float>
    """

    kind: Type[Any]

    def __repr__(self):
        return f"<{self.kind.__name__}>"

    @property
    def is_numeric(self) -> bool:
        try:
            return issubclass(self.kind, (int, float, complex))
        except TypeError:
            return False

    @property
    def is_temporal(self) -> bool:
        try:
            return issubclass(self.kind, date)
        except TypeError:
            return False

    @property
    def na(self) -> Any:
        """The NA sentinel for this element type."""
        return na_of(self.kind)

    def is_assignable_to(self, kind) -> bool:
        """True if values of this type can be handed out as ``kind``."""
        kind = as_kind(kind)
        try:
            return issubclass(self.kind, kind)
        except TypeError:
            return False

    def promote_with(self, value: Any) -> "DataType":
        """
        The type a column of this type needs in order to also hold ``value``.

        NA never changes the type. Values on the same ladder as this type
        widen it (int + float gives float, date + datetime gives
        datetime). Anything else turns the column into ``object`` and emits
        a UserWarning.
        """
        if is_na(value):
            return self
        vtype = type(value)
        if vtype is self.kind:
            return self

        for ladder in _LADDERS:
            if self.kind in ladder and vtype in ladder:
                wider = ladder[max(ladder.index(self.kind), ladder.index(vtype))]
                return self if wider is self.kind else DataType(wider)

        if self.kind is object:
            return self
        warnings.warn(
            f"Degrading column<{self.kind.__name__}> to column<object>: "
            f"cannot hold a value of type {vtype.__name__}",
            stacklevel=3,
        )
        return OBJECT


INT = DataType(int)
FLOAT = DataType(float)
BOOL = DataType(bool)
COMPLEX = DataType(complex)
STRING = DataType(str)
DATE = DataType(date)
DATETIME = DataType(datetime)
OBJECT = DataType(object)


def as_kind(kind) -> Type[Any]:
    """Accept either a DataType or a plain Python type."""
    if isinstance(kind, DataType):
        return kind.kind
    return kind


def as_dtype(dtype) -> Optional[DataType]:
    if dtype is None or isinstance(dtype, DataType):
        return dtype
    return DataType(dtype)


def is_na(value: Any) -> bool:
    """True for None and for every per-type NA sentinel."""
    if value is None:
        return True
    vtype = type(value)
    if vtype is float:
        return value != value
    if vtype is int:
        return value == INT_NA
    if vtype is complex:
        return math.isnan(value.real) or math.isnan(value.imag)
    return False


def na_of(kind) -> Any:
    """
    The NA sentinel for an element type.

    int columns use INT_NA, float columns a NaN, complex columns a complex
    NaN; every other type uses None.
    """
    kind = as_kind(kind)
    if kind is int:
        return INT_NA
    if kind is float:
        return FLOAT_NA
    if kind is complex:
        return COMPLEX_NA
    return None



# Lookup order matters: bool before int, datetime before date.
_SCALAR_KINDS = (bool, int, float, complex, str, bytes, datetime, date, tuple)


def infer_kind(value: Any) -> Optional[Type]:
    """Element type for one scalar; None when it is NA."""
    if is_na(value):
        return None
    for kind in _SCALAR_KINDS:
        if isinstance(value, kind):
            return kind
    return object


def infer_dtype(values: Iterable[Any]) -> DataType:
    """
    Smallest DataType able to hold every value, skipping NA.

    >>> infer_dtype([1, 2.5, None])
    <float>
    >>> infer_dtype([None, None])
    <object>
    """
    dtype = None
    for v in values:
        if dtype is not None:
            dtype = dtype.promote_with(v)
        elif not is_na(v):
            dtype = DataType(infer_kind(v))
    return OBJECT if dtype is None else dtype


def most_specific(dtypes: Iterable[DataType]) -> DataType:
    """The single type shared by every entry, else OBJECT."""
    found = None
    for dtype in dtypes:
        if found is None:
            found = dtype
        elif dtype != found:
            return OBJECT
    return found if found is not None else OBJECT


# ============================================================
# Conversion table
# ============================================================

def _to_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered in ("true", "t", "yes", "1"):
        return True
    if lowered in ("false", "f", "no", "0"):
        return False
    raise ValueError(f"not a boolean: {text!r}")


def _complex_to_real(value: complex) -> float:
    if value.imag != 0:
        raise ValueError("complex value has an imaginary part")
    return value.real


_CONVERTERS: Dict[Tuple[type, type], Callable[[Any], Any]] = {
    (bool, int): int,
    (bool, float): float,
    (bool, complex): complex,
    (bool, str): str,

    (int, float): float,
    (int, complex): complex,
    (int, bool): lambda v: v == 1,
    (int, str): str,

    (float, int): int,
    (float, complex): complex,
    (float, bool): lambda v: v == 1.0,
    (float, str): str,

    (complex, float): _complex_to_real,
    (complex, int): lambda v: int(_complex_to_real(v)),
    (complex, str): str,

    (str, int): lambda v: int(v.strip()),
    (str, float): float,
    (str, complex): lambda v: complex(v.strip()),
    (str, bool): _to_bool,
    (str, date): date.fromisoformat,
    (str, datetime): datetime.fromisoformat,
    (str, bytes): str.encode,

    (bytes, str): bytes.decode,

    (date, datetime): lambda v: datetime.combine(v, datetime.min.time()),
    (date, str): date.isoformat,

    (datetime, date): datetime.date,
    (datetime, str): datetime.isoformat,
}


def convert(value: Any, kind) -> Any:
    """
    Convert a stored value to ``kind``.

    Returns the NA sentinel of ``kind`` when ``value`` is NA or when no
    conversion is defined; never raises for an unconvertible value.

    >>> convert("2.5", float)
    2.5
    >>> convert("x", int) == INT_NA
    True
    """
    kind = as_kind(kind)
    if is_na(value):
        return na_of(kind)
    if kind is object or type(value) is kind:
        return value

    source = infer_kind(value)
    converter = _CONVERTERS.get((source, kind))
    if converter is None:
        if isinstance(value, kind) and not isinstance(value, bool):
            return value
        return na_of(kind)
    try:
        result = converter(value)
    except (ValueError, TypeError, OverflowError):
        return na_of(kind)
    if is_na(result):
        return na_of(kind)
    return result


def coerce_scalar(value: Any, dtype: DataType) -> Any:
    """
    Prepare a scalar for storage in a column of ``dtype``.

    NA becomes None; other values are converted to the element type.
    """
    if is_na(value):
        return None
    kind = dtype.kind
    if kind is object or type(value) is kind:
        return value
    result = convert(value, kind)
    return None if is_na(result) else result
