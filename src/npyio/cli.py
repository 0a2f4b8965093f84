"""npyio command-line interface.

Usage:
    npyio info weights.npy bias.npy
    npyio check data/*.npy
    npyio zeros empty.npy --shape 2,3 --dtype Float32
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import cyclopts
from rich.console import Console
from rich.text import Text

from .buffer import ArrayBuffer
from .dtypes import ElementType, NumpyKind
from .errors import NpyError
from .header import HEADER_LINE_LIMIT, decode_header
from .npyfile import load, save_buffer

app = cyclopts.App(
    name="npyio",
    help="Inspect, validate and create NumPy .npy files.",
)

console = Console()
err_console = Console(stderr=True)


def parse_shape(text: str) -> tuple[int, ...]:
    """Parse '2,3', '(2, 3)', '5' or '' into a shape tuple."""
    text = text.strip().strip("()")
    dims = [part.strip() for part in text.split(",")]
    try:
        shape = tuple(int(dim) for dim in dims if dim)
    except ValueError as e:
        raise ValueError(f"Invalid shape '{text}', expected comma-separated integers") from e
    if any(dim < 0 for dim in shape):
        raise ValueError(f"Invalid shape '{text}', dimensions must be non-negative")
    return shape


def _configure_logging(log_level: str) -> None:
    level = getattr(logging, log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s")
    logging.getLogger().setLevel(level)


def _error(path: Path, e: Exception) -> None:
    text = Text(f"{path}: ")
    text.append(f"{type(e).__name__}: {e}", style="red")
    err_console.print(text, soft_wrap=True)


@app.command
def info(
    paths: tuple[Path, ...],
    *,
    max_header_len: int = HEADER_LINE_LIMIT,
    log_level: str = "WARNING",
) -> None:
    """Print the header metadata of .npy files without reading their data.

    Parameters
    ----------
    paths
        One or more .npy files.
    max_header_len
        Maximum header dict length in bytes.
    log_level
        One of: DEBUG, INFO, WARNING, ERROR, CRITICAL. Default: WARNING.

    Examples
    --------
    $ npyio info weights.npy
    """
    _configure_logging(log_level)
    failed = False
    for path in paths:
        try:
            with open(path, "rb") as f:
                header = decode_header(f, max_header_len=max_header_len)
            file_size = path.stat().st_size
        except (NpyError, OSError) as e:
            _error(path, e)
            failed = True
            continue

        try:
            element_type = str(header.element_type)
        except NpyError:
            element_type = "unsupported"

        text = Text(f"{path}:", style="bold")
        text.append(
            f" descr={header.type_code}{header.word_size}"
            f" dtype={element_type}"
            f" shape={header.shape}"
            f" fortran_order={header.fortran_order}"
            f" version={header.version[0]}.{header.version[1]}"
            f" header_bytes={header.header_size}"
            f" data_bytes={header.nbytes}"
            f" file_bytes={file_size}"
        )
        console.print(text, soft_wrap=True)
        if file_size < header.header_size + header.nbytes:
            console.print(Text(f"{path}: file is truncated", style="yellow"), soft_wrap=True)
    if failed:
        sys.exit(1)


@app.command
def check(
    paths: tuple[Path, ...],
    *,
    max_header_len: int = HEADER_LINE_LIMIT,
    log_level: str = "WARNING",
) -> None:
    """Fully load .npy files and report any that are invalid.

    Exits with status 1 if any file fails to load or uses an element type
    with no host mapping.

    Parameters
    ----------
    paths
        One or more .npy files.
    max_header_len
        Maximum header dict length in bytes.
    log_level
        One of: DEBUG, INFO, WARNING, ERROR, CRITICAL. Default: WARNING.
    """
    _configure_logging(log_level)
    failed = 0
    for path in paths:
        try:
            buf = load(path, max_header_len=max_header_len)
            element_type = buf.element_type
        except NpyError as e:
            _error(path, e)
            failed += 1
            continue
        text = Text(f"{path}: ")
        text.append("OK", style="green")
        text.append(f" ({element_type}, shape={buf.shape})")
        console.print(text, soft_wrap=True)
    if failed:
        err_console.print(Text(f"{failed} of {len(paths)} files failed", style="red"), soft_wrap=True)
        sys.exit(1)


@app.command
def zeros(
    path: Path,
    *,
    shape: str = "",
    dtype: str = "Float32",
    fortran_order: bool = False,
    log_level: str = "WARNING",
) -> None:
    """Write a zero-filled .npy file.

    Parameters
    ----------
    path
        Output file.
    shape
        Comma-separated dimensions, e.g. "2,3". Empty for a scalar.
    dtype
        Element type: Float32, Float64, Int32, Int64, UInt8, UInt16 or Bool.
    fortran_order
        Mark the data as column-major.
    log_level
        One of: DEBUG, INFO, WARNING, ERROR, CRITICAL. Default: WARNING.

    Examples
    --------
    $ npyio zeros empty.npy --shape 2,3 --dtype Int64
    """
    _configure_logging(log_level)
    try:
        dims = parse_shape(shape)
        kind = NumpyKind.from_element_type(ElementType.from_name(dtype))
        buf = ArrayBuffer(dims, kind.code, kind.word_size, fortran_order)
        save_buffer(path, buf)
    except (NpyError, OSError, ValueError) as e:
        _error(path, e)
        sys.exit(1)
    console.print(Text(f"Wrote {path} ({buf.nbytes} data bytes)"), soft_wrap=True)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
