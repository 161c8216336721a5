"""Byte-level builders for synthetic A53LITE captures."""
import struct

from tpumsg_core.protocol import ApiId, HEADER_FMT

MD5 = bytes(range(16))


def header(api_id, words, seq=1, handle=0x1122334455667788, duration=0, result=0, order="="):
    return struct.pack(order + HEADER_FMT, int(api_id), words, handle, seq, duration, result)


def message(api_id, payload, seq=1, order="="):
    assert len(payload) % 4 == 0
    return header(api_id, len(payload) // 4, seq=seq, order=order) + payload


def load_lib(name=b"libtpu_kernel.so", path=0x7F0000001000, addr=0x100002000, size=65536,
             md5=MD5, cur_rec=3, order="="):
    return struct.pack(order + "QQI64s16si", path, addr, size, name, md5, cur_rec)


def get_func(name=b"conv2d_fwd", core_id=1, f_id=7, md5=MD5, order="="):
    return struct.pack(order + "ii16s64s", core_id, f_id, md5, name)


def launch_func(params, f_id=7, param_size=None, order="="):
    if param_size is None:
        param_size = len(params)
    return struct.pack(order + "iI", f_id, param_size) + params


def session(n):
    """n well-formed messages cycling through the four API ids."""
    makers = [
        lambda i: message(ApiId.LOAD_LIB, load_lib(cur_rec=i), seq=i),
        lambda i: message(ApiId.GET_FUNC, get_func(f_id=i), seq=i),
        lambda i: message(ApiId.LAUNCH_FUNC, launch_func(bytes(range(32)), f_id=i), seq=i),
        lambda i: message(ApiId.UNLOAD_LIB, load_lib(cur_rec=i), seq=i),
    ]
    return [makers[i % 4](i) for i in range(n)]
