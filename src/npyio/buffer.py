"""Owning byte buffer for .npy array data."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import BinaryIO

import numpy as np
from numpy.typing import DTypeLike

from .dtypes import ElementType, NumpyKind, from_numpy_code
from .errors import TruncatedFileError
from .header import HeaderInfo, check_shape


class ArrayBuffer:
    """Contiguous byte buffer plus the shape and type metadata of a .npy array.

    The buffer is zero-filled on construction and never resized, so
    ``nbytes == element_count * word_size`` always holds.

    Handles are shallow: ``share()`` (and ``copy.copy``) return a new handle
    over the same storage, and a write through any handle or typed view is
    visible through all of them. The storage is freed once the last handle
    and the last view referencing it are gone. Use ``copy.deepcopy`` for an
    independent buffer.

    Example:
        >>> buf = ArrayBuffer((2, 3), "f", 4)
        >>> buf.typed_view()[0, 1] = 1.5
        >>> alias = buf.share()
        >>> float(alias.const_typed_view()[0, 1])
        1.5
    """

    __slots__ = (
        "_storage",
        "_shape",
        "_type_code",
        "_word_size",
        "_fortran_order",
        "_element_count",
    )

    def __init__(
        self,
        shape: Sequence[int] | None = None,
        type_code: str = "",
        word_size: int = 0,
        fortran_order: bool = False,
    ):
        """Allocate a zero-filled buffer.

        Called without a shape, creates the empty default buffer: shape (),
        word size 0, no elements and no bytes.
        """
        if shape is None:
            self._shape: tuple[int, ...] = ()
            self._element_count = 0
            self._word_size = 0
        else:
            if word_size < 0:
                raise ValueError(f"Negative word size {word_size}")
            self._shape = check_shape(shape)
            self._element_count = math.prod(self._shape)
            self._word_size = word_size
        self._type_code = type_code
        self._fortran_order = bool(fortran_order)
        self._storage = memoryview(bytearray(self._element_count * self._word_size))

    @classmethod
    def from_header(cls, info: HeaderInfo) -> ArrayBuffer:
        """Allocate a buffer sized for the data described by a decoded header."""
        return cls(info.shape, info.type_code, info.word_size, info.fortran_order)

    @classmethod
    def from_array(cls, array: np.ndarray) -> ArrayBuffer:
        """Copy a numpy array into a new buffer.

        Fortran-contiguous arrays (that are not also C-contiguous) keep their
        column-major layout; everything else is stored row-major.

        Raises:
            UnsupportedNumpyTypeError: If the array's dtype has no .npy kind here.
            UnsupportedByteOrderError: If the array is big-endian.
        """
        array = np.asanyarray(array)
        kind = NumpyKind.from_dtype(array.dtype)
        fortran_order = bool(array.flags.f_contiguous and not array.flags.c_contiguous)
        buf = cls(array.shape, kind.code, kind.word_size, fortran_order)
        buf.typed_view()[...] = array
        return buf

    @property
    def shape(self) -> tuple[int, ...]:
        return self._shape

    @property
    def type_code(self) -> str:
        return self._type_code

    @property
    def word_size(self) -> int:
        return self._word_size

    @property
    def fortran_order(self) -> bool:
        return self._fortran_order

    @property
    def element_count(self) -> int:
        return self._element_count

    @property
    def nbytes(self) -> int:
        return len(self._storage)

    @property
    def element_type(self) -> ElementType:
        """Host element type, resolved from the type code and word size.

        Raises:
            UnsupportedNumpyTypeError: If the pair has no host element type.
        """
        return from_numpy_code(self._type_code, self._word_size)

    def typed_view(self, dtype: DTypeLike | None = None) -> np.ndarray:
        """Writable numpy view over the buffer, shaped like the array.

        The caller is responsible for passing a dtype whose item size and
        bit layout match the stored elements; no check is made beyond what
        numpy needs to build the view. Without a dtype, the buffer's own
        kind is used.
        """
        if dtype is None:
            dtype = NumpyKind.from_code(self._type_code, self._word_size).dtype
        order = "F" if self._fortran_order else "C"
        return np.frombuffer(self._storage, dtype=dtype).reshape(self._shape, order=order)

    def const_typed_view(self, dtype: DTypeLike | None = None) -> np.ndarray:
        """Read-only variant of typed_view()."""
        arr = self.typed_view(dtype)
        arr.flags.writeable = False
        return arr

    def memoryview(self) -> memoryview:
        """Writable byte view over the whole buffer."""
        return self._storage

    def tobytes(self) -> bytes:
        return self._storage.tobytes()

    def readinto(self, stream: BinaryIO, source: object = None) -> None:
        """Fill the buffer with exactly nbytes from a stream.

        Raises:
            TruncatedFileError: If the stream ends before the buffer is full.
        """
        filled = 0
        total = len(self._storage)
        while filled < total:
            n = stream.readinto(self._storage[filled:])
            if not n:
                break
            filled += n
        if filled != total:
            raise TruncatedFileError(total, filled, source)

    def share(self) -> ArrayBuffer:
        """New handle over the same storage."""
        other = ArrayBuffer.__new__(ArrayBuffer)
        for name in self.__slots__:
            setattr(other, name, getattr(self, name))
        return other

    def shares_storage(self, other: ArrayBuffer) -> bool:
        return self._storage.obj is other._storage.obj

    def __copy__(self) -> ArrayBuffer:
        return self.share()

    def __deepcopy__(self, memo: dict) -> ArrayBuffer:
        other = self.share()
        other._storage = memoryview(bytearray(self._storage))
        return other

    def __repr__(self) -> str:
        return (
            f"ArrayBuffer(shape={self._shape}, descr='{self._type_code}{self._word_size}', "
            f"fortran_order={self._fortran_order}, nbytes={self.nbytes})"
        )
