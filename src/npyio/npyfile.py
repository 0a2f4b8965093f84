"""Saving and loading .npy files.

Usage:
    # Raw buffers with an explicit shape and element type
    save("points.npy", data, (1024, 3), ElementType.FLOAT32)
    buf = load("points.npy")
    points = buf.typed_view()

    # numpy arrays
    save_array("points.npy", np.zeros((1024, 3), dtype=np.float32))
    points = load_array("points.npy")

Files are always opened in a ``with`` block, so handles are released on
every exit path. A failed save removes the partially written file.
"""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Buffer, Sequence
from pathlib import Path
from typing import BinaryIO

import numpy as np

from .buffer import ArrayBuffer
from .dtypes import ElementType
from .errors import FileOpenError, ShortWriteError
from .header import HEADER_LINE_LIMIT, check_shape, decode_header, encode_header

logger = logging.getLogger(__name__)


def write(
    stream: BinaryIO,
    data: Buffer,
    shape: Sequence[int],
    element_type: ElementType,
    *,
    fortran_order: bool = False,
) -> int:
    """Write a complete .npy file (header and data) to an open stream.

    Args:
        stream: Binary stream opened for writing
        data: Buffer holding exactly product(shape) * element_type.byte_size bytes
        shape: Array dimensions
        element_type: Host element type of the data
        fortran_order: Whether data is laid out column-major

    Returns:
        Total number of bytes written.

    Raises:
        UnsupportedDtypeError: If element_type has no numpy code.
        ValueError: If data does not hold the expected number of bytes.
        ShortWriteError: If the stream accepted fewer bytes than requested.
    """
    header, payload = _encode(data, shape, element_type, fortran_order)
    _write_all(stream, header)
    _write_all(stream, payload)
    return len(header) + payload.nbytes


def read(stream: BinaryIO, *, max_header_len: int = HEADER_LINE_LIMIT) -> ArrayBuffer:
    """Read a complete .npy file from an open stream.

    Raises:
        MalformedHeaderError: If the header cannot be parsed.
        UnsupportedByteOrderError: If the data is big-endian.
        TruncatedFileError: If the stream holds fewer data bytes than declared.
    """
    info = decode_header(stream, max_header_len=max_header_len)
    buf = ArrayBuffer.from_header(info)
    buf.readinto(stream, getattr(stream, "name", None))
    return buf


def save(
    path: str | os.PathLike[str],
    data: Buffer,
    shape: Sequence[int],
    element_type: ElementType,
    *,
    fortran_order: bool = False,
) -> None:
    """Save raw array data to a .npy file.

    The header is built and the data size checked before the file is
    opened. If writing fails after that, the partial file is deleted.

    Raises:
        FileOpenError: If the file cannot be created or opened for writing.
        ShortWriteError: If fewer bytes were written than requested.
    """
    path = Path(path)
    header, payload = _encode(data, shape, element_type, fortran_order)

    try:
        f = open(path, "wb")
    except OSError as e:
        raise FileOpenError(path, "wb") from e

    try:
        with f:
            _write_all(f, header, path)
            _write_all(f, payload, path)
    except BaseException:
        logger.warning("Removing partially written file %s", path)
        path.unlink(missing_ok=True)
        raise

    logger.debug(
        "Saved %s: shape=%s dtype=%s (%d bytes)",
        path,
        tuple(shape),
        element_type,
        len(header) + payload.nbytes,
    )


def load(path: str | os.PathLike[str], *, max_header_len: int = HEADER_LINE_LIMIT) -> ArrayBuffer:
    """Load a .npy file into a new ArrayBuffer.

    Raises:
        FileOpenError: If the file is missing or unreadable.
        MalformedHeaderError: If the header cannot be parsed.
        UnsupportedByteOrderError: If the data is big-endian.
        TruncatedFileError: If the file holds fewer data bytes than declared.
    """
    path = Path(path)
    try:
        f = open(path, "rb")
    except OSError as e:
        raise FileOpenError(path, "rb") from e

    with f:
        buf = read(f, max_header_len=max_header_len)

    logger.debug(
        "Loaded %s: shape=%s descr=%s%d fortran_order=%s",
        path,
        buf.shape,
        buf.type_code,
        buf.word_size,
        buf.fortran_order,
    )
    return buf


def save_buffer(path: str | os.PathLike[str], buf: ArrayBuffer) -> None:
    """Save an ArrayBuffer, keeping its memory layout."""
    save(path, buf.memoryview(), buf.shape, buf.element_type, fortran_order=buf.fortran_order)


def save_array(path: str | os.PathLike[str], array: np.ndarray) -> None:
    """Save a numpy array.

    Raises:
        UnsupportedNumpyTypeError: If the dtype is not one of the supported kinds.
        UnsupportedByteOrderError: If the array is big-endian.
    """
    save_buffer(path, ArrayBuffer.from_array(array))


def load_array(path: str | os.PathLike[str], *, max_header_len: int = HEADER_LINE_LIMIT) -> np.ndarray:
    """Load a .npy file as a writable numpy array backed by the loaded buffer."""
    return load(path, max_header_len=max_header_len).typed_view()


def _encode(
    data: Buffer,
    shape: Sequence[int],
    element_type: ElementType,
    fortran_order: bool,
) -> tuple[bytes, memoryview]:
    """Build the header and a byte view of the payload, checking its size."""
    dims = check_shape(shape)
    header = encode_header(dims, element_type, fortran_order=fortran_order)
    expected = math.prod(dims) * element_type.byte_size

    payload = memoryview(data)
    if not payload.contiguous:
        raise ValueError("Data buffer must be contiguous")
    # Bytes go out in the order the header declares
    in_order = payload.f_contiguous if fortran_order else payload.c_contiguous
    if not in_order:
        payload = memoryview(payload.tobytes(order="F" if fortran_order else "C"))
    if payload.nbytes != expected:
        raise ValueError(
            f"Data buffer holds {payload.nbytes} bytes, expected {expected} "
            f"for shape {dims} of {element_type}"
        )
    return header, payload


def _write_all(stream: BinaryIO, data: Buffer, target: object = None) -> None:
    expected = memoryview(data).nbytes
    written = stream.write(data)
    if written != expected:
        raise ShortWriteError(expected, written or 0, target)
