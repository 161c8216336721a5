import os
import random
import struct
from pathlib import Path

from tpumsg_core.protocol import (
    ApiId,
    BYTE_ORDERS,
    DEFAULT_BYTE_ORDER,
    FUNC_MAX_NAME_LEN,
    HEADER_FMT,
    LIB_MAX_NAME_LEN,
    MD5SUM_LEN,
    WORD_SIZE,
)

# --- CONFIGURATION ---
LIBRARIES = ["libtpu_kernel.so", "libbmcv_ext.so", "libdsp_fft.so"]
FUNCTIONS = ["conv2d_fwd", "softmax", "matmul_tiled", "nms_boxes"]


def pack_message(api_id, payload, seq, handle=0, duration=0, result=0, byte_order=DEFAULT_BYTE_ORDER):
    """Header + payload. Payload is padded to a whole number of words."""
    pad = (-len(payload)) % WORD_SIZE
    payload = payload + b"\x00" * pad
    header = struct.pack(
        byte_order + HEADER_FMT,
        int(api_id), len(payload) // WORD_SIZE, handle, seq, duration, result,
    )
    return header + payload


def pack_load_lib(path_ptr, addr, size, name, md5, cur_rec, byte_order=DEFAULT_BYTE_ORDER):
    return struct.pack(
        f"{byte_order}QQI{LIB_MAX_NAME_LEN}s{MD5SUM_LEN}si",
        path_ptr, addr, size, name, md5, cur_rec,
    )


def pack_get_func(core_id, f_id, md5, name, byte_order=DEFAULT_BYTE_ORDER):
    return struct.pack(
        f"{byte_order}ii{MD5SUM_LEN}s{FUNC_MAX_NAME_LEN}s",
        core_id, f_id, md5, name,
    )


def pack_launch_func(f_id, params, param_size=None, byte_order=DEFAULT_BYTE_ORDER):
    if param_size is None:
        param_size = len(params)
    return struct.pack(f"{byte_order}iI", f_id, param_size) + params


def random_session(rng, count, byte_order=DEFAULT_BYTE_ORDER):
    """Yield `count` packed messages following a load / get / launch / unload pattern."""
    handle = rng.getrandbits(64)
    lib = rng.choice(LIBRARIES).encode()
    md5 = rng.randbytes(MD5SUM_LEN)

    for seq in range(count):
        step = seq % 4
        if step == 0:
            api_id = ApiId.LOAD_LIB
            payload = pack_load_lib(0x7F0000001000, 0x100000000 + seq * 0x1000,
                                    rng.randint(4096, 1 << 20), lib, md5, seq, byte_order)
        elif step == 1:
            api_id = ApiId.GET_FUNC
            name = rng.choice(FUNCTIONS).encode()
            payload = pack_get_func(0, seq, md5, name, byte_order)
        elif step == 2:
            api_id = ApiId.LAUNCH_FUNC
            params = rng.randbytes(rng.randint(1, 64) * WORD_SIZE)
            payload = pack_launch_func(seq - 1, params, byte_order=byte_order)
        else:
            api_id = ApiId.UNLOAD_LIB
            payload = pack_load_lib(0x7F0000001000, 0, 0, lib, md5, seq, byte_order)

        yield pack_message(api_id, payload, seq, handle=handle,
                           duration=rng.randint(1, 5000), byte_order=byte_order)


def generate_capture(out_file, count=8, seed=0, truncate_last=0, byte_order=DEFAULT_BYTE_ORDER):
    rng = random.Random(seed)
    blob = b"".join(random_session(rng, count, byte_order))
    if truncate_last:
        blob = blob[:-truncate_last]

    path = Path(out_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        f.write(blob)
        f.flush()
        os.fsync(f.fileno())

    print(f"GENERATED: {path} ({count} messages, {len(blob)} bytes)")
    return path


if __name__ == "__main__":
    import sys

    # Usage:
    #   python tools/sim_capture.py OUT_FILE [--count N] [--seed S] [--truncate-last K] [--byte-order native|little|big]

    args = [a for a in sys.argv[1:] if a]

    def pop_option(arg_list, flag, default):
        """Remove `flag VALUE` from an argv-style list and return VALUE."""
        if flag not in arg_list:
            return default, arg_list
        i = arg_list.index(flag)
        if i + 1 >= len(arg_list):
            raise SystemExit(f"{flag} requires a value")
        return arg_list[i + 1], arg_list[:i] + arg_list[i + 2:]

    count, args = pop_option(args, "--count", "8")
    seed, args = pop_option(args, "--seed", "0")
    truncate_last, args = pop_option(args, "--truncate-last", "0")
    order, args = pop_option(args, "--byte-order", "native")

    if order not in BYTE_ORDERS:
        raise SystemExit(f"--byte-order must be one of {sorted(BYTE_ORDERS)}")

    out = args[0] if args else "captures/sim_capture.bin"
    generate_capture(out, count=int(count), seed=int(seed),
                     truncate_last=int(truncate_last), byte_order=BYTE_ORDERS[order])
