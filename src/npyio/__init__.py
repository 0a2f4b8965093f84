from .buffer import ArrayBuffer as ArrayBuffer
from .dtypes import ElementType as ElementType
from .dtypes import NumpyKind as NumpyKind
from .dtypes import from_numpy_code as from_numpy_code
from .dtypes import to_numpy_code as to_numpy_code
from .errors import FileOpenError as FileOpenError
from .errors import MalformedHeaderError as MalformedHeaderError
from .errors import NpyError as NpyError
from .errors import ShortWriteError as ShortWriteError
from .errors import TruncatedFileError as TruncatedFileError
from .errors import UnsupportedByteOrderError as UnsupportedByteOrderError
from .errors import UnsupportedDtypeError as UnsupportedDtypeError
from .errors import UnsupportedNumpyTypeError as UnsupportedNumpyTypeError
from .header import HeaderInfo as HeaderInfo
from .header import decode_header as decode_header
from .header import encode_header as encode_header
from .npyfile import load as load
from .npyfile import load_array as load_array
from .npyfile import read as read
from .npyfile import save as save
from .npyfile import save_array as save_array
from .npyfile import save_buffer as save_buffer
from .npyfile import write as write

# Codecs
from . import codecs as codecs
