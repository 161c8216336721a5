"""tpumsg core - protocol layout and field readers."""
from .fields import (
    DecodeError,
    OutOfBounds,
    TruncatedHeader,
    read_bytes,
    read_cstring,
    read_i32,
    read_u32,
    read_u64,
)
from .protocol import ApiId, HEADER_SIZE

__all__ = [
    "ApiId",
    "HEADER_SIZE",
    "DecodeError",
    "OutOfBounds",
    "TruncatedHeader",
    "read_bytes",
    "read_cstring",
    "read_i32",
    "read_u32",
    "read_u64",
]
