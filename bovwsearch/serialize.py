"""Binary storage of matrices in a small header-plus-raw-data format.

A file holds three little-endian 32-bit integers: the element type code
(depth in the low three bits, channel count minus one above them), the
number of rows and the number of columns. The row-major element data
follows directly.
"""

from __future__ import annotations

import os
import struct
from typing import Union

import numpy as np

PathLike = Union[str, "os.PathLike[str]"]

_HEADER = struct.Struct("<iii")
_DEPTH_SHIFT = 3
_DEPTH_MASK = (1 << _DEPTH_SHIFT) - 1
_MAX_CHANNELS = 512

_DEPTH_DTYPES = {
    0: np.dtype(np.uint8),
    1: np.dtype(np.int8),
    2: np.dtype(np.uint16),
    3: np.dtype(np.int16),
    4: np.dtype(np.int32),
    5: np.dtype(np.float32),
    6: np.dtype(np.float64),
    7: np.dtype(np.float16),
}
_DTYPE_DEPTHS = {dtype: depth for depth, dtype in _DEPTH_DTYPES.items()}


def _type_code(dtype: np.dtype, channels: int) -> int:
    try:
        depth = _DTYPE_DEPTHS[np.dtype(dtype).newbyteorder("=")]
    except KeyError:
        raise ValueError(f"unsupported element type: {dtype}") from None
    if not 1 <= channels <= _MAX_CHANNELS:
        raise ValueError(f"unsupported channel count: {channels}")
    return depth | ((channels - 1) << _DEPTH_SHIFT)


def _decode_type(code: int) -> tuple[np.dtype, int]:
    if code < 0:
        raise ValueError(f"invalid type code: {code}")
    depth = code & _DEPTH_MASK
    channels = (code >> _DEPTH_SHIFT) + 1
    if depth not in _DEPTH_DTYPES or channels > _MAX_CHANNELS:
        raise ValueError(f"invalid type code: {code}")
    return _DEPTH_DTYPES[depth], channels


def serialize(matrix, filename: PathLike) -> None:
    """Write ``matrix`` to ``filename``.

    A 1-D array is stored as a single row; a 3-D array is stored with its
    last axis as channels.
    """
    array = np.asarray(matrix)
    if array.ndim == 1:
        array = array.reshape(1, -1)
    if array.ndim == 2:
        rows, cols = array.shape
        channels = 1
    elif array.ndim == 3:
        rows, cols, channels = array.shape
    else:
        raise ValueError(f"cannot store an array with {array.ndim} dimensions")

    code = _type_code(array.dtype, channels)
    little = array.dtype.newbyteorder("<")
    payload = np.ascontiguousarray(array, dtype=little).tobytes()

    with open(filename, "wb") as stream:
        stream.write(_HEADER.pack(code, rows, cols))
        stream.write(payload)


def deserialize(filename: PathLike) -> np.ndarray:
    """Read a matrix written by :func:`serialize`.

    Single-channel data comes back as a ``(rows, cols)`` array, multi-channel
    data as ``(rows, cols, channels)``.
    """
    with open(filename, "rb") as stream:
        header = stream.read(_HEADER.size)
        if len(header) < _HEADER.size:
            raise ValueError(f"{os.fspath(filename)}: truncated header")
        code, rows, cols = _HEADER.unpack(header)
        if rows < 0 or cols < 0:
            raise ValueError(f"{os.fspath(filename)}: negative dimensions")
        dtype, channels = _decode_type(code)

        count = rows * cols * channels
        expected = count * dtype.itemsize
        payload = stream.read(expected)
        if len(payload) < expected:
            raise ValueError(
                f"{os.fspath(filename)}: expected {expected} data bytes, "
                f"found {len(payload)}"
            )

    data = np.frombuffer(payload, dtype=dtype.newbyteorder("<"), count=count)
    data = data.astype(dtype)
    shape = (rows, cols) if channels == 1 else (rows, cols, channels)
    return data.reshape(shape)