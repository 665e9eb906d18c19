"""Exceptions raised outside the pure subtitle core."""


class MmsubError(Exception):
    """Base class for translator errors."""


class StoreError(MmsubError):
    """A project could not be written to or removed from the store."""


class AlignmentError(MmsubError):
    """Two tracks produced no aligned blocks."""
