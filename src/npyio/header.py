"""Encoding and decoding of the .npy header.

Format (version 1.0):
    - magic: b"\\x93NUMPY" (6 bytes)
    - major version: uint8 (1)
    - minor version: uint8 (0)
    - dict_len: uint16 little-endian, length of the dict including its newline
    - dict: ASCII Python literal, e.g.
      "{'descr': '<f4', 'fortran_order': False, 'shape': (2, 3), }"
      padded with spaces and terminated by a newline so that the preamble
      plus dict is a multiple of 16 bytes.

The raw element bytes follow the dict directly.
"""

from __future__ import annotations

import logging
import math
import re
import struct
import sys
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import BinaryIO, NamedTuple, NoReturn

from .dtypes import ElementType, NumpyKind, from_numpy_code, to_numpy_code
from .errors import MalformedHeaderError, UnsupportedByteOrderError

logger = logging.getLogger(__name__)

MAGIC = b"\x93NUMPY"
VERSION = (1, 0)
PREAMBLE_STRUCT = struct.Struct("<6sBBH")
PREAMBLE_SIZE = PREAMBLE_STRUCT.size  # 10
HEADER_ALIGNMENT = 16

# Upper bound on the dict line read by decode_header. The uint16 length
# field is not used to size the read.
HEADER_LINE_LIMIT = 4096

# Probed once; payloads are only ever supported in little-endian order.
BYTE_ORDER_MARKER = "<" if sys.byteorder == "little" else ">"
LITTLE_ENDIAN_MARKERS = ("<", "|")
_DIGITS_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class HeaderInfo:
    """Metadata decoded from a .npy header.

    Attributes:
        type_code: numpy type character ('f', 'i', 'u' or 'b' when supported)
        word_size: Bytes per element as declared in descr
        shape: Dimension sizes
        fortran_order: True if the data is stored column-major
        header_size: Bytes consumed from the stream, preamble included
        version: (major, minor) format version
    """

    type_code: str
    word_size: int
    shape: tuple[int, ...]
    fortran_order: bool = False
    header_size: int = 0
    version: tuple[int, int] = VERSION

    @property
    def element_count(self) -> int:
        return math.prod(self.shape)

    @property
    def nbytes(self) -> int:
        """Size of the data section that follows the header."""
        return self.element_count * self.word_size

    @property
    def element_type(self) -> ElementType:
        return from_numpy_code(self.type_code, self.word_size)

    @property
    def kind(self) -> NumpyKind:
        return NumpyKind.from_code(self.type_code, self.word_size)


def format_shape(shape: Sequence[int]) -> str:
    """Render a shape as a Python tuple literal.

    () -> "()", (5,) -> "(5,)", (2, 3) -> "(2, 3)"
    """
    if len(shape) == 1:
        return f"({shape[0]},)"
    return "(" + ", ".join(str(dim) for dim in shape) + ")"


def check_shape(shape: Sequence[int]) -> tuple[int, ...]:
    """Validate a shape and return it as a tuple of ints."""
    dims = tuple(int(dim) for dim in shape)
    for dim in dims:
        if dim < 0:
            raise ValueError(f"Negative dimension in shape {dims}")
    return dims


def encode_header(
    shape: Sequence[int],
    element_type: ElementType,
    *,
    fortran_order: bool = False,
) -> bytes:
    """Build the preamble and padded header dict for an array.

    Args:
        shape: Array dimensions
        element_type: Host element type of the array
        fortran_order: Whether the data will be written column-major

    Returns:
        Header bytes; their length is a multiple of 16.

    Raises:
        UnsupportedDtypeError: If element_type has no numpy code.
    """
    dims = check_shape(shape)
    code, word_size = to_numpy_code(element_type)
    header_dict = (
        f"{{'descr': '{BYTE_ORDER_MARKER}{code}{word_size}', "
        f"'fortran_order': {bool(fortran_order)}, "
        f"'shape': {format_shape(dims)}, }}"
    )
    # Pad so that preamble + dict (including the newline) is 16-byte aligned
    padding = HEADER_ALIGNMENT - (PREAMBLE_SIZE + len(header_dict)) % HEADER_ALIGNMENT - 1
    header_dict = header_dict + " " * padding + "\n"
    dict_bytes = header_dict.encode("ascii")

    preamble = PREAMBLE_STRUCT.pack(MAGIC, VERSION[0], VERSION[1], len(dict_bytes))
    return preamble + dict_bytes


def decode_header(stream: BinaryIO, *, max_header_len: int = HEADER_LINE_LIMIT) -> HeaderInfo:
    """Read a .npy header from a binary stream.

    On return the stream is positioned at the first data byte.

    Args:
        stream: Binary stream positioned at the start of a .npy file
        max_header_len: Maximum number of bytes read for the header dict

    Raises:
        MalformedHeaderError: Bad magic/version, unterminated dict, or a
            missing/unparseable fortran_order, shape or descr field.
        UnsupportedByteOrderError: descr declares big-endian data.
    """
    preamble = stream.read(PREAMBLE_SIZE)
    if len(preamble) != PREAMBLE_SIZE:
        raise MalformedHeaderError(
            "magic", f"expected {PREAMBLE_SIZE} preamble bytes, got {len(preamble)}"
        )
    magic, major, minor, declared_len = PREAMBLE_STRUCT.unpack(preamble)
    if magic != MAGIC:
        raise MalformedHeaderError("magic", f"got {magic!r}")
    if major != VERSION[0]:
        raise MalformedHeaderError("version", f"only version 1.x is supported, got {major}.{minor}")

    line = stream.readline(max_header_len)
    if not line.endswith(b"\n"):
        raise MalformedHeaderError(
            "newline", f"header dict not terminated within {max_header_len} bytes"
        )
    if len(line) != declared_len:
        logger.warning(
            "Header length field says %d bytes but dict line is %d bytes", declared_len, len(line)
        )

    info = parse_header_dict(line.decode("latin-1"))
    return replace(info, header_size=PREAMBLE_SIZE + len(line), version=(major, minor))


def parse_header_dict(text: str) -> HeaderInfo:
    """Extract descr, fortran_order and shape from a header dict literal.

    Fields are looked up by name, so key order and whitespace do not matter.
    """
    fields = _Parser(text).parse()

    if "fortran_order" not in fields:
        raise MalformedHeaderError("fortran_order")
    fortran_order = fields["fortran_order"] is True

    shape = fields.get("shape")
    if not isinstance(shape, tuple) or not all(
        isinstance(dim, int) and not isinstance(dim, bool) for dim in shape
    ):
        raise MalformedHeaderError("shape")

    descr = fields.get("descr")
    if not isinstance(descr, str):
        raise MalformedHeaderError("descr")
    type_code, word_size = _parse_descr(descr)

    return HeaderInfo(
        type_code=type_code,
        word_size=word_size,
        shape=shape,
        fortran_order=fortran_order,
    )


def _parse_descr(descr: str) -> tuple[str, int]:
    """Split '<f4' into ('f', 4), rejecting big-endian markers."""
    if len(descr) < 2:
        raise MalformedHeaderError("descr", f"got {descr!r}")
    marker = descr[0]
    if marker not in LITTLE_ENDIAN_MARKERS:
        raise UnsupportedByteOrderError(marker)
    type_code = descr[1]
    digits = descr[2:]
    if not _DIGITS_RE.fullmatch(digits):
        raise MalformedHeaderError("descr", f"bad word size in {descr!r}")
    return type_code, int(digits)


class _Token(NamedTuple):
    kind: str
    text: str
    pos: int


_TOKEN_RE = re.compile(
    r"""
    (?P<space>\s+)
    | (?P<string>'[^'\n]*'|"[^"\n]*")
    | (?P<int>\d+)
    | (?P<name>[A-Za-z_]\w*)
    | (?P<punct>[{}():,])
    """,
    re.VERBOSE,
)

_NAMES = {"True": True, "False": False, "None": None}


class _Parser:
    """Recursive-descent parser for the header dict grammar.

        dict  := '{' [entry (',' entry)* [',']] '}'
        entry := string ':' value
        value := string | int | True | False | None | tuple
        tuple := '(' [value (',' value)* [',']] ')'

    Tokens are scanned on demand and errors, lexical ones included, are
    attributed to the most recently seen key, so a broken shape tuple is
    reported as a 'shape' error.
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.key = "dict"
        self._lookahead: _Token | None = None

    def parse(self) -> dict[str, object]:
        fields: dict[str, object] = {}
        self._expect("{")
        while not self._accept("}"):
            token = self._next()
            if token.kind != "string":
                self._fail(f"expected key, got {token.text!r}")
            self.key = token.text[1:-1]
            self._expect(":")
            fields[self.key] = self._value()
            if not self._accept(","):
                self._expect("}")
                break
        trailing = self._peek()
        if trailing is not None:
            self._fail(f"trailing content {trailing.text!r}")
        return fields

    def _value(self) -> object:
        token = self._next()
        if token.kind == "string":
            return token.text[1:-1]
        if token.kind == "int":
            return int(token.text)
        if token.kind == "name" and token.text in _NAMES:
            return _NAMES[token.text]
        if token.text == "(":
            items = []
            while not self._accept(")"):
                items.append(self._value())
                if not self._accept(","):
                    self._expect(")")
                    break
            return tuple(items)
        self._fail(f"unexpected value {token.text!r}")

    def _scan(self) -> _Token | None:
        while self.pos < len(self.text):
            match = _TOKEN_RE.match(self.text, self.pos)
            if match is None:
                self._fail(f"unexpected character {self.text[self.pos]!r} at {self.pos}")
            self.pos = match.end()
            if match.lastgroup != "space":
                return _Token(match.lastgroup, match.group(), match.start())
        return None

    def _peek(self) -> _Token | None:
        if self._lookahead is None:
            self._lookahead = self._scan()
        return self._lookahead

    def _next(self) -> _Token:
        token = self._peek()
        if token is None:
            self._fail("unexpected end of header")
        self._lookahead = None
        return token

    def _accept(self, punct: str) -> bool:
        token = self._peek()
        if token is not None and token.text == punct:
            self._lookahead = None
            return True
        return False

    def _expect(self, punct: str) -> None:
        token = self._next()
        if token.text != punct:
            self._fail(f"expected {punct!r}, got {token.text!r}")

    def _fail(self, detail: str) -> NoReturn:
        raise MalformedHeaderError(self.key, detail)
