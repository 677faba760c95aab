class PyTableError(Exception):
    """Base exception for py-table library."""
    pass


class KeyNotFoundError(PyTableError, KeyError):
    """Raised when a row/column label resolves to no location."""
    pass


class DuplicateKeyError(PyTableError, ValueError):
    """Raised when inserting a key that is already present in an index."""
    pass


class DimensionError(PyTableError, ValueError):
    """Raised for mismatched index sizes or ragged columns."""
    pass


class NotComparableError(PyTableError, TypeError):
    """Raised when a range selection meets keys that cannot be ordered."""
    pass


class StateError(PyTableError, RuntimeError):
    """Raised when an object is used in a state that forbids the call."""
    pass


class UnsupportedOperationError(PyTableError, TypeError):
    """Raised for operations a particular view or shape does not support."""
    pass


class LocationError(PyTableError, IndexError):
    """Raised for a location outside 0..n-1."""
    pass
