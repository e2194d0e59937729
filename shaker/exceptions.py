"""Custom exceptions for shaker."""


class ShakerError(Exception):
    """Base exception for shaker operations."""


class InvalidOrdinal(ShakerError):
    """Ordinal is not a dotted sequence of non-negative integers."""

    def __init__(self, ordinal: str, reason: str = "not a dotted sequence of integers") -> None:
        self.ordinal = ordinal
        super().__init__(f"Invalid ordinal {ordinal!r}: {reason}")


class DuplicateOrdinal(ShakerError):
    """A record with the same ordinal is already stored."""

    def __init__(self, ordinal: str) -> None:
        self.ordinal = ordinal
        super().__init__(f"Duplicate ordinal {ordinal!r}")


class NotFound(ShakerError):
    """No record exists for the requested ordinal."""

    def __init__(self, ordinal: str) -> None:
        self.ordinal = ordinal
        super().__init__(f"No record for ordinal {ordinal!r}")


class StoreCorruption(ShakerError):
    """The underlying cache could not be read or written."""


class MetadataError(ShakerError):
    """A source entry has unreadable or incomplete metadata."""


__all__ = [
    "ShakerError",
    "InvalidOrdinal",
    "DuplicateOrdinal",
    "NotFound",
    "StoreCorruption",
    "MetadataError",
]
