"""Element types and their mapping to numpy type codes.

The .npy header describes element types with a (type code, word size) pair,
e.g. 'f4' for 32-bit floats. ``ElementType`` is the host tensor library's
enumeration; ``NumpyKind`` is the closed set of element types that can be
stored in a .npy file by this package. The table in ``NumpyKind`` is the
only place the mapping is defined, in both directions.
"""

from __future__ import annotations

from enum import Enum

import numpy as np

from .errors import (
    UnsupportedByteOrderError,
    UnsupportedDtypeError,
    UnsupportedNumpyTypeError,
)


class ElementType(Enum):
    """Host element types with their display name and byte size."""

    FLOAT16 = ("Float16", 2)
    FLOAT32 = ("Float32", 4)
    FLOAT64 = ("Float64", 8)
    INT8 = ("Int8", 1)
    INT16 = ("Int16", 2)
    INT32 = ("Int32", 4)
    INT64 = ("Int64", 8)
    UINT8 = ("UInt8", 1)
    UINT16 = ("UInt16", 2)
    UINT32 = ("UInt32", 4)
    UINT64 = ("UInt64", 8)
    BOOL = ("Bool", 1)

    def __init__(self, display_name: str, byte_size: int):
        self.display_name = display_name
        self.byte_size = byte_size

    def __str__(self) -> str:
        return self.display_name

    @classmethod
    def from_name(cls, name: str) -> ElementType:
        """Look up an element type by display name (case-insensitive)."""
        for element_type in cls:
            if element_type.display_name.lower() == name.lower():
                return element_type
        raise ValueError(
            f"Unknown element type '{name}'. "
            f"Available: {[e.display_name for e in cls]}"
        )


class NumpyKind(Enum):
    """Element kinds representable in a .npy header.

    Each member carries its numpy type code, its word size and the host
    element type it corresponds to.
    """

    FLOAT32 = ("f", 4, ElementType.FLOAT32)
    FLOAT64 = ("f", 8, ElementType.FLOAT64)
    INT32 = ("i", 4, ElementType.INT32)
    INT64 = ("i", 8, ElementType.INT64)
    UINT8 = ("u", 1, ElementType.UINT8)
    UINT16 = ("u", 2, ElementType.UINT16)
    BOOL = ("b", 1, ElementType.BOOL)

    def __init__(self, code: str, word_size: int, element_type: ElementType):
        self.code = code
        self.word_size = word_size
        self.element_type = element_type

    @property
    def descr(self) -> str:
        """Type code and word size as written after the byte order marker."""
        return f"{self.code}{self.word_size}"

    @property
    def dtype(self) -> np.dtype:
        """Little-endian numpy dtype with the same layout."""
        return np.dtype(f"<{self.descr}")

    @classmethod
    def from_element_type(cls, element_type: ElementType) -> NumpyKind:
        for kind in cls:
            if kind.element_type is element_type:
                return kind
        raise UnsupportedDtypeError(element_type)

    @classmethod
    def from_code(cls, code: str, word_size: int) -> NumpyKind:
        """Inverse lookup. Word size is ignored for booleans."""
        if code == "b":
            return cls.BOOL
        for kind in cls:
            if kind.code == code and kind.word_size == word_size:
                return kind
        raise UnsupportedNumpyTypeError(code, word_size)

    @classmethod
    def from_dtype(cls, dtype: np.dtype) -> NumpyKind:
        """Map a numpy dtype to its kind, rejecting non-native layouts."""
        dtype = np.dtype(dtype)
        if dtype.byteorder == ">" or (dtype.byteorder == "=" and not np.little_endian):
            raise UnsupportedByteOrderError(">")
        return cls.from_code(dtype.kind, dtype.itemsize)


def to_numpy_code(element_type: ElementType) -> tuple[str, int]:
    """Return the (type code, word size) pair for a host element type.

    Raises:
        UnsupportedDtypeError: If the type cannot be stored in a .npy file.
    """
    kind = NumpyKind.from_element_type(element_type)
    return kind.code, kind.word_size


def from_numpy_code(code: str, word_size: int) -> ElementType:
    """Return the host element type for a (type code, word size) pair.

    Raises:
        UnsupportedNumpyTypeError: If no element type matches.
    """
    return NumpyKind.from_code(code, word_size).element_type
