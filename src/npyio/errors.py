"""Exceptions raised by npyio.

Every error derives from NpyError and from the closest builtin exception,
so callers can catch either the package-specific type or the builtin one.
"""

from __future__ import annotations


class NpyError(Exception):
    """Base class for all npyio errors."""


class UnsupportedDtypeError(NpyError, TypeError):
    """Host element type has no .npy representation."""

    def __init__(self, element_type: object):
        self.element_type = element_type
        super().__init__(f"Unsupported dtype: {element_type}")


class UnsupportedNumpyTypeError(NpyError, TypeError):
    """Decoded (type code, word size) pair has no host element type."""

    def __init__(self, code: str, word_size: int):
        self.code = code
        self.word_size = word_size
        super().__init__(f"Unsupported numpy type '{code}' with word size {word_size}")


class MalformedHeaderError(NpyError, ValueError):
    """Header dictionary is missing a field or cannot be parsed.

    Attributes:
        keyword: Name of the header field (or envelope part) that failed.
    """

    def __init__(self, keyword: str, detail: str | None = None):
        self.keyword = keyword
        message = f"Malformed .npy header: failed to find or parse '{keyword}'"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class UnsupportedByteOrderError(NpyError, ValueError):
    """Payload byte order is not little-endian."""

    def __init__(self, marker: str):
        self.marker = marker
        super().__init__(
            f"Unsupported byte order marker {marker!r}: only little-endian data is supported"
        )


class FileOpenError(NpyError, OSError):
    """File could not be opened in the requested mode."""

    def __init__(self, path: object, mode: str):
        self.path = path
        self.mode = mode
        super().__init__(f"Unable to open {path} (mode {mode!r})")


class TruncatedFileError(NpyError, EOFError):
    """Fewer data bytes were available than the header declares."""

    def __init__(self, expected: int, actual: int, source: object = None):
        self.expected = expected
        self.actual = actual
        where = f" in {source}" if source is not None else ""
        super().__init__(f"Truncated data{where}: expected {expected} bytes, got {actual}")


class ShortWriteError(NpyError, OSError):
    """Fewer bytes were written than requested."""

    def __init__(self, expected: int, actual: int, target: object = None):
        self.expected = expected
        self.actual = actual
        where = f" to {target}" if target is not None else ""
        super().__init__(f"Short write{where}: expected {expected} bytes, wrote {actual}")
