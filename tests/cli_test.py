"""Tests for the CLI module."""

from pathlib import Path

import numpy as np
import pytest

from npyio import ElementType, load
from npyio.cli import check, info, parse_shape, zeros

from .test_utils import write_npy


class TestParseShape:
    def test_comma_separated(self):
        assert parse_shape("2,3") == (2, 3)

    def test_tuple_literal(self):
        assert parse_shape("(2, 3)") == (2, 3)
        assert parse_shape("(5,)") == (5,)

    def test_scalar(self):
        assert parse_shape("") == ()
        assert parse_shape("()") == ()

    def test_invalid(self):
        with pytest.raises(ValueError, match="Invalid shape"):
            parse_shape("2,x")
        with pytest.raises(ValueError, match="non-negative"):
            parse_shape("2,-1")


class TestInfo:
    def test_prints_metadata(self, tmp_path: Path, capsys):
        path = tmp_path / "a.npy"
        np.save(path, np.zeros((2, 3), dtype=np.float32))

        info((path,))

        out = capsys.readouterr().out
        assert "descr=f4" in out
        assert "dtype=Float32" in out
        assert "shape=(2, 3)" in out
        assert "fortran_order=False" in out
        assert "data_bytes=24" in out

    def test_unsupported_type_still_described(self, tmp_path: Path, capsys):
        path = tmp_path / "half.npy"
        np.save(path, np.zeros(4, dtype=np.float16))

        info((path,))

        out = capsys.readouterr().out
        assert "descr=f2" in out
        assert "dtype=unsupported" in out

    def test_reports_truncation(self, tmp_path: Path, capsys):
        path = write_npy(tmp_path / "cut.npy", "{'descr': '<i8', 'fortran_order': False, 'shape': (3,), }", b"\x00" * 8)

        info((path,))

        assert "truncated" in capsys.readouterr().out

    def test_bad_file_exits_nonzero(self, tmp_path: Path, capsys):
        good = tmp_path / "good.npy"
        np.save(good, np.arange(3))
        bad = tmp_path / "bad.npy"
        bad.write_bytes(b"not a numpy file")

        with pytest.raises(SystemExit) as exc_info:
            info((good, bad))

        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert "good.npy" in captured.out
        assert "MalformedHeaderError" in captured.err
        assert "MalformedHeaderError" not in captured.out


class TestCheck:
    def test_all_ok(self, tmp_path: Path, capsys):
        paths = []
        for i, dtype in enumerate([np.uint8, np.int64, np.bool_]):
            path = tmp_path / f"{i}.npy"
            np.save(path, np.ones((2, 2), dtype=dtype))
            paths.append(path)

        check(tuple(paths))

        assert capsys.readouterr().out.count("OK") == 3

    def test_failures_exit_nonzero(self, tmp_path: Path, capsys):
        be = tmp_path / "be.npy"
        np.save(be, np.ones(2, dtype=">i4"))
        half = tmp_path / "half.npy"
        np.save(half, np.ones(2, dtype=np.float16))
        missing = tmp_path / "missing.npy"

        with pytest.raises(SystemExit) as exc_info:
            check((be, half, missing))

        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "UnsupportedByteOrderError" in err
        assert "UnsupportedNumpyTypeError" in err
        assert "FileOpenError" in err
        assert "3 of 3 files failed" in err


class TestZeros:
    def test_writes_zero_file(self, tmp_path: Path, capsys):
        path = tmp_path / "z.npy"

        zeros(path, shape="2,3", dtype="int64")

        buf = load(path)
        assert buf.shape == (2, 3)
        assert buf.element_type is ElementType.INT64
        assert buf.tobytes() == b"\x00" * 48
        np.testing.assert_array_equal(np.load(path), np.zeros((2, 3), dtype=np.int64))
        assert "48 data bytes" in capsys.readouterr().out

    def test_scalar_default(self, tmp_path: Path):
        path = tmp_path / "s.npy"
        zeros(path)
        assert np.load(path).shape == ()
        assert np.load(path).dtype == np.float32

    def test_fortran_order(self, tmp_path: Path):
        path = tmp_path / "f.npy"
        zeros(path, shape="3,2", dtype="UInt8", fortran_order=True)
        assert load(path).fortran_order is True

    @pytest.mark.parametrize(
        "shape,dtype,error",
        [
            ("2", "Float16", "UnsupportedDtypeError"),
            ("2", "Complex64", "Unknown element type"),
            ("2,x", "Int32", "Invalid shape"),
        ],
    )
    def test_bad_arguments_exit_nonzero(self, tmp_path: Path, capsys, shape, dtype, error):
        path = tmp_path / "bad.npy"

        with pytest.raises(SystemExit) as exc_info:
            zeros(path, shape=shape, dtype=dtype)

        assert exc_info.value.code == 1
        assert error in capsys.readouterr().err
        assert not path.exists()

    def test_unwritable_path_exits_nonzero(self, tmp_path: Path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            zeros(tmp_path / "missing" / "z.npy", shape="2")

        assert exc_info.value.code == 1
        assert "FileOpenError" in capsys.readouterr().err
