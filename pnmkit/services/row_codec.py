"""Упаковка строк растра в байты для бинарных вариантов P4/P5/P6.

P4: 1 бит на пиксель, старший бит байта = левый столбец, хвост строки
дополняется нулевыми битами до целого байта. P5: 1 байт на пиксель.
P6: 3 байта на пиксель в порядке R, G, B.
"""
from __future__ import annotations

from typing import Sequence

import numpy as np

from pnmkit.models.errors import TruncatedData


def bytes_per_bit_row(width: int) -> int:
    """ceil(width / 8)."""
    return (width + 7) // 8


def pack_bits(row: Sequence[bool]) -> bytes:
    """Упаковывает строку bitmap в `ceil(width/8)` байт (MSB first, нулевой паддинг)."""
    return np.packbits(np.asarray(row, dtype=np.bool_)).tobytes()


def unpack_bits(data: bytes, width: int) -> np.ndarray:
    """Обратная операция к `pack_bits`; биты паддинга отбрасываются."""
    needed = bytes_per_bit_row(width)
    if len(data) < needed:
        raise TruncatedData(f"Строка bitmap: ожидалось {needed} байт, получено {len(data)}")
    bits = np.unpackbits(np.frombuffer(data, dtype=np.uint8, count=needed))
    return bits[:width].astype(np.bool_)


def pack_bit_raster(raster: np.ndarray) -> bytes:
    """Упаковывает весь растр bitmap построчно (каждая строка выровнена по байту)."""
    return np.packbits(raster.astype(np.bool_), axis=1).tobytes()


def unpack_bit_raster(data: bytes, width: int, height: int) -> np.ndarray:
    stride = bytes_per_bit_row(width)
    needed = stride * height
    if len(data) < needed:
        raise TruncatedData(
            f"Bitmap {width}x{height}: ожидалось {needed} байт, получено {len(data)} "
            f"(строка {len(data) // stride})"
        )
    packed = np.frombuffer(data, dtype=np.uint8, count=needed).reshape(height, stride)
    return np.unpackbits(packed, axis=1)[:, :width].astype(np.bool_)


def pack_byte_raster(raster: np.ndarray) -> bytes:
    """P5/P6: байты отсчётов как есть (для RGB — R, G, B подряд)."""
    return np.ascontiguousarray(raster, dtype=np.uint8).tobytes()


def unpack_byte_raster(data: bytes, width: int, height: int, channels: int = 1) -> np.ndarray:
    needed = width * height * channels
    if len(data) < needed:
        row_bytes = width * channels
        raise TruncatedData(
            f"Растр {width}x{height}x{channels}: ожидалось {needed} байт, получено {len(data)} "
            f"(строка {len(data) // row_bytes})"
        )
    arr = np.frombuffer(data, dtype=np.uint8, count=needed)
    shape = (height, width, channels) if channels > 1 else (height, width)
    return arr.reshape(shape).copy()
