"""Tests for NpyArrayCodec and NpyBufferCodec."""

import io

import numpy as np
import pytest

from npyio import ArrayBuffer, ElementType
from npyio.codecs import Codec, NpyArrayCodec, NpyBufferCodec
from npyio.errors import (
    MalformedHeaderError,
    TruncatedFileError,
    UnsupportedByteOrderError,
    UnsupportedNumpyTypeError,
)

from ..test_utils import make_npy


class TestNpyArrayCodec:
    """Test NpyArrayCodec functionality."""

    def test_encode_decode_1d(self):
        """Test encoding and decoding 1D arrays."""
        codec = NpyArrayCodec()
        arr = np.array([1, 2, 3, 4, 5], dtype=np.int32)

        encoded = codec.encode(arr)
        decoded = codec.decode(encoded)

        np.testing.assert_array_equal(arr, decoded)
        assert decoded.dtype == arr.dtype
        assert decoded.shape == arr.shape

    def test_encode_decode_2d(self):
        """Test encoding and decoding 2D arrays."""
        codec = NpyArrayCodec()
        arr = np.array([[1.0, 2.0], [3.0, 4.0]], dtype=np.float64)

        decoded = codec.decode(codec.encode(arr))

        np.testing.assert_array_equal(arr, decoded)
        assert decoded.shape == arr.shape

    def test_encode_decode_various_dtypes(self):
        """Test every supported dtype."""
        codec = NpyArrayCodec()

        test_cases = [
            np.array([1, 2, 3], dtype=np.uint8),
            np.array([1, 2, 3], dtype=np.uint16),
            np.array([1, 2, 3], dtype=np.int32),
            np.array([1, 2, 3], dtype=np.int64),
            np.array([1.0, 2.0, 3.0], dtype=np.float32),
            np.array([1.0, 2.0, 3.0], dtype=np.float64),
            np.array([True, False, True], dtype=np.bool_),
        ]

        for arr in test_cases:
            decoded = codec.decode(codec.encode(arr))
            np.testing.assert_array_equal(arr, decoded)
            assert decoded.dtype == arr.dtype

    def test_encoded_bytes_are_npy_file(self):
        """Encoded bytes can be opened by np.load."""
        codec = NpyArrayCodec()
        arr = np.arange(12, dtype=np.int64).reshape(3, 4)
        loaded = np.load(io.BytesIO(codec.encode(arr)))
        np.testing.assert_array_equal(loaded, arr)

    def test_decodes_np_save_output(self):
        arr = np.arange(10, dtype=np.uint16)
        stream = io.BytesIO()
        np.save(stream, arr)
        decoded = NpyArrayCodec().decode(stream.getvalue())
        np.testing.assert_array_equal(decoded, arr)

    def test_zero_copy_view(self):
        """Decoded arrays are read-only views into the input."""
        codec = NpyArrayCodec()
        data = bytearray(codec.encode(np.array([1, 2, 3], dtype=np.int32)))
        arr = codec.decode(data)

        assert arr.base is not None
        assert not arr.flags.writeable
        data[-4:] = np.array([9], dtype="<i4").tobytes()
        assert arr[-1] == 9

    def test_fortran_array(self):
        codec = NpyArrayCodec()
        arr = np.asfortranarray(np.arange(6, dtype=np.float32).reshape(2, 3))
        encoded = codec.encode(arr)
        assert b"'fortran_order': True" in encoded
        decoded = codec.decode(encoded)
        assert decoded.flags.f_contiguous
        np.testing.assert_array_equal(decoded, arr)

    def test_scalar_array(self):
        codec = NpyArrayCodec()
        arr = np.array(3.5, dtype=np.float64)
        decoded = codec.decode(codec.encode(arr))
        assert decoded.shape == ()
        assert float(decoded) == 3.5

    def test_empty_array(self):
        """Test encoding/decoding empty arrays."""
        codec = NpyArrayCodec()
        arr = np.array([], dtype=np.float64)

        decoded = codec.decode(codec.encode(arr))

        np.testing.assert_array_equal(arr, decoded)
        assert decoded.dtype == arr.dtype
        assert decoded.shape == arr.shape

    def test_large_array(self):
        """Test encoding/decoding large arrays."""
        codec = NpyArrayCodec()
        arr = np.random.rand(1000, 1000).astype(np.float32)

        decoded = codec.decode(codec.encode(arr))

        np.testing.assert_array_equal(arr, decoded)

    def test_unsupported_dtype(self):
        with pytest.raises(UnsupportedNumpyTypeError):
            NpyArrayCodec().encode(np.zeros(3, dtype=np.int8))
        with pytest.raises(UnsupportedNumpyTypeError):
            NpyArrayCodec().decode(make_npy("{'descr': '<f2', 'fortran_order': False, 'shape': (1,), }", b"\x00\x00"))

    def test_big_endian(self):
        with pytest.raises(UnsupportedByteOrderError):
            NpyArrayCodec().encode(np.zeros(3, dtype=">f8"))

    def test_truncated(self):
        encoded = NpyArrayCodec().encode(np.arange(4, dtype=np.int32))
        with pytest.raises(TruncatedFileError):
            NpyArrayCodec().decode(encoded[:-2])

    def test_header_limit(self):
        data = make_npy("{'descr': '<u1', 'fortran_order': False, 'shape': (1,), }" + " " * 200, b"\x01")
        with pytest.raises(MalformedHeaderError):
            NpyArrayCodec(max_header_len=128).decode(data)
        assert NpyArrayCodec().decode(data).tolist() == [1]


class TestNpyBufferCodec:
    def test_encode_decode(self):
        codec = NpyBufferCodec()
        buf = ArrayBuffer((2, 2), "u", 2)
        buf.typed_view()[:] = [[1, 2], [3, 4]]

        decoded = codec.decode(codec.encode(buf))

        assert decoded.shape == (2, 2)
        assert decoded.element_type is ElementType.UINT16
        assert decoded.tobytes() == buf.tobytes()
        assert not decoded.shares_storage(buf)

    def test_decoded_buffer_owns_data(self):
        codec = NpyBufferCodec()
        data = bytearray(codec.encode(ArrayBuffer.from_array(np.array([5, 6], dtype=np.int64))))
        decoded = codec.decode(data)
        data[-8:] = b"\x00" * 8
        assert decoded.const_typed_view().tolist() == [5, 6]

    def test_matches_array_codec(self):
        arr = np.arange(6, dtype=np.float64).reshape(3, 2)
        assert NpyBufferCodec().encode(ArrayBuffer.from_array(arr)) == NpyArrayCodec().encode(arr)


class TestCodecBase:
    def test_base_methods_not_implemented(self):
        codec = Codec()
        with pytest.raises(NotImplementedError):
            codec.encode(b"")
        with pytest.raises(NotImplementedError):
            codec.decode(b"")
