"""A53LITE API message protocol constants.

Single source of truth for API ids and record layouts.
Keep this file in step with the firmware headers; decoder and tools share it.

All layouts are packed. Formats carry no byte-order prefix; one of
BYTE_ORDERS is prepended at unpack time. Captures are assumed to come from a
platform with the same byte order as the reader unless told otherwise.
"""
from __future__ import annotations

from enum import IntEnum


class ApiId(IntEnum):
    LOAD_LIB = 0x90000001
    GET_FUNC = 0x90000002
    LAUNCH_FUNC = 0x90000003
    UNLOAD_LIB = 0x90000004


# Byte order prefixes accepted by the readers (struct notation)
BYTE_ORDERS = {"native": "=", "little": "<", "big": ">"}
DEFAULT_BYTE_ORDER = BYTE_ORDERS["native"]

# Header: [ApiId(4) | SizeWords(4) | Handle(8) | Seq(4) | Duration(4) | Result(4)] = 28 bytes
HEADER_FMT = "IIQIII"
HEADER_SIZE = 28
WORD_SIZE = 4

MD5SUM_LEN = 16
LIB_MAX_NAME_LEN = 64
FUNC_MAX_NAME_LEN = 64

# LOAD_LIB / UNLOAD_LIB:
# [Path(8) | Addr(8) | Size(4) | Name(64) | MD5(16) | CurRec(4)] = 104 bytes
LOAD_LIB_SIZE = 8 + 8 + 4 + LIB_MAX_NAME_LEN + MD5SUM_LEN + 4
# Path + Addr + Size: the prefix still decoded from a short LOAD_LIB payload
PARTIAL_LIB_MIN = 8 + 8 + 4

# GET_FUNC: [CoreId(4) | FuncId(4) | MD5(16) | Name(64)] = 88 bytes
GET_FUNC_SIZE = 4 + 4 + MD5SUM_LEN + FUNC_MAX_NAME_LEN

# LAUNCH_FUNC: [FuncId(4) | ParamSize(4) | Param(<=4096)]
LAUNCH_FUNC_FIXED_SIZE = 4 + 4
MAX_PARAM_LEN = 4096

# Preview bounds carried in decoded records
PARAM_PREVIEW_LEN = 64
UNKNOWN_PREVIEW_LEN = 256
HEX_DISPLAY_LEN = 16

# Largest single read issued against a byte source
READ_CHUNK_SIZE = 64 * 1024  # 64 KiB
