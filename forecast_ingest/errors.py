"""
Error types for the MET Norway ingestion pipeline.

Every failure that ends a run derives from IngestError so the command
handler can catch them with a single except clause and choose the exit code.
"""


class IngestError(Exception):
    """Base exception for all ingestion errors."""
    pass


class InvalidArgument(IngestError):
    """
    Unknown domain or variable name, or a malformed run specifier.

    Raised before any I/O is performed.
    """
    pass


class DatasetNotFound(IngestError):
    """The remote dataset has not been published yet."""
    pass


class TimeoutExceeded(IngestError):
    """Acquisition deadline passed while the dataset was still unavailable."""
    pass


class SchemaMismatch(IngestError):
    """
    Dataset dimensions do not match the grid definition.

    Raised when:
    - The dataset does not have exactly the x, y and time dimensions
    - x/y lengths differ from the grid
    - The time length is outside the accepted forecast horizon band
    - An array does not hold nx*ny*time values
    """
    pass


class MissingArray(IngestError):
    """A required array is absent from the dataset."""
    pass


class TypeMismatch(IngestError):
    """A required array is not floating point."""
    pass


class StoreWriteFailure(IngestError):
    """The array store rejected or failed a write."""
    pass
