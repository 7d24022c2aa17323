"""Exception types raised by fileog.

Filesystem failures are plain `OSError`s; they are recorded on the affected
operation rather than raised out of a batch.
"""


class FileogError(Exception):
    """Base class for fileog errors."""


class StoreError(FileogError):
    """The operation history could not be read or written."""
