"""In-memory codecs producing and consuming complete .npy byte strings.

Recommended codecs:
- NpyArrayCodec: numpy arrays, zero-copy decode
- NpyBufferCodec: ArrayBuffer, decode copies into an owned buffer
"""

from __future__ import annotations

import io
from collections.abc import Buffer

import numpy as np

from .buffer import ArrayBuffer
from .dtypes import NumpyKind
from .errors import TruncatedFileError
from .header import HEADER_LINE_LIMIT, PREAMBLE_SIZE, decode_header, encode_header
from .npyfile import read, write


class Codec[T]:
    """Base class for encoding/decoding objects to/from bytes.

    Subclasses should implement encode() and decode() methods.
    """

    def encode(self, item: T) -> bytes:
        """Encode an object to bytes."""
        raise NotImplementedError

    def decode(self, data: Buffer) -> T:
        """Decode bytes to an object."""
        raise NotImplementedError


class NpyBufferCodec(Codec[ArrayBuffer]):
    """Codec for ArrayBuffer using the .npy file layout.

    Decoding copies the data section into a new, owned ArrayBuffer, so the
    result does not keep the input alive.
    """

    def __init__(self, max_header_len: int = HEADER_LINE_LIMIT):
        self.max_header_len = max_header_len

    def encode(self, item: ArrayBuffer) -> bytes:
        stream = io.BytesIO()
        write(
            stream,
            item.memoryview(),
            item.shape,
            item.element_type,
            fortran_order=item.fortran_order,
        )
        return stream.getvalue()

    def decode(self, data: Buffer) -> ArrayBuffer:
        return read(io.BytesIO(data), max_header_len=self.max_header_len)


class NpyArrayCodec(Codec[np.ndarray]):
    """Zero-copy codec for numpy arrays using the .npy file layout.

    The encoded bytes are a complete .npy file and can be written to disk
    and opened with ``np.load``.

    Example:
        >>> codec = NpyArrayCodec()
        >>> data = codec.encode(np.arange(6, dtype=np.int32).reshape(2, 3))
        >>> codec.decode(data).shape
        (2, 3)

    Note:
        Decoded arrays are read-only views into the input buffer. Keep a
        reference to the array (not the buffer) and the data stays alive.
    """

    def __init__(self, max_header_len: int = HEADER_LINE_LIMIT):
        self.max_header_len = max_header_len

    def encode(self, item: np.ndarray) -> bytes:
        """Encode a numpy array to .npy bytes.

        Fortran-contiguous arrays are stored column-major with
        ``fortran_order: True``; everything else is stored row-major.

        Raises:
            UnsupportedNumpyTypeError: If the dtype is not one of the supported kinds.
            UnsupportedByteOrderError: If the array is big-endian.
        """
        arr = np.asanyarray(item)
        kind = NumpyKind.from_dtype(arr.dtype)
        fortran_order = bool(arr.flags.f_contiguous and not arr.flags.c_contiguous)
        header = encode_header(arr.shape, kind.element_type, fortran_order=fortran_order)
        return header + arr.tobytes(order="F" if fortran_order else "C")

    def decode(self, data: Buffer) -> np.ndarray:
        """Decode .npy bytes to a read-only numpy array view (zero-copy).

        Raises:
            MalformedHeaderError: If the header cannot be parsed.
            UnsupportedByteOrderError: If the data is big-endian.
            UnsupportedNumpyTypeError: If the descr has no supported kind.
            TruncatedFileError: If data holds fewer bytes than declared.
        """
        mv = memoryview(data).cast("B")
        # Only the header region is copied for parsing
        head = bytes(mv[: PREAMBLE_SIZE + self.max_header_len])
        info = decode_header(io.BytesIO(head), max_header_len=self.max_header_len)
        kind = info.kind

        offset = info.header_size
        available = len(mv) - offset
        if available < info.nbytes:
            raise TruncatedFileError(info.nbytes, available)

        array_data = mv[offset : offset + info.nbytes]
        order = "F" if info.fortran_order else "C"
        arr = np.frombuffer(array_data, dtype=kind.dtype).reshape(info.shape, order=order)
        arr.flags.writeable = False
        return arr
