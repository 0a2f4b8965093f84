"""Example: saving raw buffers and numpy arrays as .npy files.

Demonstrates the raw-buffer API (explicit shape and element type), the
numpy helpers, shared ArrayBuffer handles and the in-memory codec.

Run with: uv run python -m examples.save_load
"""

import logging
from pathlib import Path
from tempfile import TemporaryDirectory

import numpy as np

from npyio import ElementType, load, load_array, save, save_array
from npyio.codecs import NpyArrayCodec


def main():
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s:%(name)s:%(message)s")

    with TemporaryDirectory() as tmpdir:
        tmp = Path(tmpdir)

        # Raw bytes with an explicit shape and element type
        raw = np.arange(6, dtype="<i4").tobytes()
        save(tmp / "raw.npy", raw, (2, 3), ElementType.INT32)
        print("numpy sees:", np.load(tmp / "raw.npy"))

        # Load into an ArrayBuffer and mutate through a shared handle
        buf = load(tmp / "raw.npy")
        alias = buf.share()
        alias.typed_view()[0, 0] = 100
        print(f"{buf!r} -> first element {buf.const_typed_view()[0, 0]}")

        # numpy helpers keep Fortran layout
        save_array(tmp / "fortran.npy", np.asfortranarray(np.eye(3)))
        print("fortran_order:", load(tmp / "fortran.npy").fortran_order)
        print(load_array(tmp / "fortran.npy"))

        # In-memory codec (zero-copy decode)
        codec = NpyArrayCodec()
        data = codec.encode(np.ones(4, dtype=np.uint8))
        print(f"{len(data)} bytes ->", codec.decode(data))


if __name__ == "__main__":
    main()
