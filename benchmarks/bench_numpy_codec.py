"""Benchmarks for .npy encoding and decoding."""

import io

import numpy as np
import pytest

from npyio import ArrayBuffer, ElementType, decode_header, encode_header, load, save_array
from npyio.codecs import NpyArrayCodec, NpyBufferCodec


@pytest.mark.benchmark(group="npy-header")
def test_encode_header(benchmark):
    """Benchmark building a header for a 3D array."""
    benchmark(encode_header, (128, 256, 3), ElementType.FLOAT32)


@pytest.mark.benchmark(group="npy-header")
def test_decode_header(benchmark):
    """Benchmark parsing a header produced by numpy."""
    stream = io.BytesIO()
    np.save(stream, np.zeros((128, 256, 3), dtype=np.float32))
    data = stream.getvalue()

    benchmark(lambda: decode_header(io.BytesIO(data)))


@pytest.mark.benchmark(group="npy-encode")
def test_array_codec_encode_small(benchmark):
    """Benchmark encoding small arrays (1KB)."""
    arr = np.random.rand(128).astype(np.float64)  # 1KB
    benchmark(NpyArrayCodec().encode, arr)


@pytest.mark.benchmark(group="npy-encode")
def test_array_codec_encode_large(benchmark):
    """Benchmark encoding large arrays (1MB)."""
    arr = np.random.rand(128, 1024).astype(np.float64)  # 1MB
    benchmark(NpyArrayCodec().encode, arr)


@pytest.mark.benchmark(group="npy-decode")
def test_array_codec_decode_large(benchmark):
    """Benchmark zero-copy decoding of large arrays (1MB)."""
    codec = NpyArrayCodec()
    data = codec.encode(np.random.rand(128, 1024).astype(np.float64))
    benchmark(codec.decode, data)


@pytest.mark.benchmark(group="npy-decode")
def test_buffer_codec_decode_large(benchmark):
    """Benchmark copying decode of large arrays (1MB) into an ArrayBuffer."""
    codec = NpyBufferCodec()
    data = codec.encode(ArrayBuffer.from_array(np.random.rand(128, 1024)))
    benchmark(codec.decode, data)


@pytest.mark.benchmark(group="npy-file")
def test_load_vs_numpy(benchmark, tmp_path):
    """Benchmark load() on a 1MB file (compare with test_numpy_load)."""
    path = tmp_path / "a.npy"
    save_array(path, np.random.rand(128, 1024))
    benchmark(load, path)


@pytest.mark.benchmark(group="npy-file")
def test_numpy_load(benchmark, tmp_path):
    """Baseline: np.load on the same 1MB file."""
    path = tmp_path / "a.npy"
    np.save(path, np.random.rand(128, 1024))
    benchmark(np.load, path)
