"""Модели данных изображений Netpbm.

Принципы:
- SRP: только структура данных и инварианты, без кодеков и обработки.
- Заголовок неизменяем (`frozen=True`); растр меняется на месте, но заголовок
  и растр всегда согласованы: размеры меняются только через `replace`.
"""
from __future__ import annotations

import numbers
import operator
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Tuple, Union

import numpy as np

from pnmkit.config import Config
from pnmkit.models.errors import (
    IndexOutOfRange,
    InconsistentDimensions,
    InvalidMaxValue,
    InvalidSample,
    MalformedHeader,
)


class ImageFamily(Enum):
    BITMAP = "PBM"
    GRAYMAP = "PGM"
    PIXMAP = "PPM"


class MagicNumber(Enum):
    """Шесть вариантов Netpbm: семейство x (ASCII | binary)."""
    ASCII_BIT = "P1"
    ASCII_GRAY = "P2"
    ASCII_RGB = "P3"
    BINARY_BIT = "P4"
    BINARY_GRAY = "P5"
    BINARY_RGB = "P6"

    @property
    def token(self) -> str:
        return self.value

    @property
    def family(self) -> ImageFamily:
        return _FAMILY_BY_MAGIC[self]

    @property
    def is_binary(self) -> bool:
        return self in (MagicNumber.BINARY_BIT, MagicNumber.BINARY_GRAY, MagicNumber.BINARY_RGB)

    @classmethod
    def for_family(cls, family: ImageFamily, binary: bool) -> "MagicNumber":
        return _MAGIC_BY_FAMILY[(family, binary)]


_FAMILY_BY_MAGIC = {
    MagicNumber.ASCII_BIT: ImageFamily.BITMAP,
    MagicNumber.BINARY_BIT: ImageFamily.BITMAP,
    MagicNumber.ASCII_GRAY: ImageFamily.GRAYMAP,
    MagicNumber.BINARY_GRAY: ImageFamily.GRAYMAP,
    MagicNumber.ASCII_RGB: ImageFamily.PIXMAP,
    MagicNumber.BINARY_RGB: ImageFamily.PIXMAP,
}
_MAGIC_BY_FAMILY = {(magic.family, magic.is_binary): magic for magic in MagicNumber}

MAX_SUPPORTED_VALUE = 255


class Pixel(NamedTuple):
    r: int
    g: int
    b: int


class Point(NamedTuple):
    x: int
    y: int


Sample = Union[bool, int, Pixel]


@dataclass(frozen=True)
class Header:
    """Заголовок изображения.

    Fields:
        magic_number: Вариант формата.
        width: Ширина, px (> 0).
        height: Высота, px (> 0).
        max_value: Максимальное значение канала (1..255); `None` для bitmap.
    """
    magic_number: MagicNumber
    width: int
    height: int
    max_value: Optional[int] = None

    def __post_init__(self) -> None:
        try:
            # numpy integers are accepted and stored as plain int
            object.__setattr__(self, "width", operator.index(self.width))
            object.__setattr__(self, "height", operator.index(self.height))
        except TypeError as exc:
            raise MalformedHeader(f"Размеры должны быть целыми: {self.width!r} x {self.height!r}") from exc
        if self.max_value is not None:
            try:
                object.__setattr__(self, "max_value", operator.index(self.max_value))
            except TypeError as exc:
                raise InvalidMaxValue(f"max value должен быть целым: {self.max_value!r}") from exc
        if self.width <= 0 or self.height <= 0:
            raise MalformedHeader(f"Размеры должны быть положительными: {self.width} x {self.height}")
        if self.family is ImageFamily.BITMAP:
            if self.max_value is not None:
                raise InvalidMaxValue("Bitmap не имеет max value")
        elif self.max_value is None or not 1 <= self.max_value <= MAX_SUPPORTED_VALUE:
            raise InvalidMaxValue(f"max value должен быть в диапазоне 1..{MAX_SUPPORTED_VALUE}: {self.max_value!r}")

    @property
    def family(self) -> ImageFamily:
        return self.magic_number.family

    @property
    def raster_shape(self) -> Tuple[int, ...]:
        if self.family is ImageFamily.PIXMAP:
            return (self.height, self.width, 3)
        return (self.height, self.width)

    @property
    def dtype(self) -> type:
        return np.bool_ if self.family is ImageFamily.BITMAP else np.uint8


def _coerce_raster(header: Header, raster) -> np.ndarray:
    """Проверяет растр против заголовка и возвращает собственную копию."""
    arr = np.array(raster, copy=True)
    if arr.shape != header.raster_shape:
        raise InconsistentDimensions(
            f"Растр {arr.shape} не совпадает с заголовком {header.raster_shape}"
        )
    if header.family is ImageFamily.BITMAP:
        if arr.dtype != np.bool_:
            if arr.size and (arr.min() < 0 or arr.max() > 1):
                raise InvalidSample("Bitmap допускает только значения 0/1")
            arr = arr.astype(np.bool_)
        return arr

    if arr.size and not np.issubdtype(arr.dtype, np.integer):
        raise InvalidSample(f"Ожидались целые значения, получено {arr.dtype}")
    if arr.size and (arr.min() < 0 or arr.max() > header.max_value):
        raise InvalidSample(f"Значения растра выходят за 0..{header.max_value}")
    return arr.astype(np.uint8)


class NetpbmImage:
    """Изображение = заголовок + растр (numpy), всегда согласованные.

    Растр имеет форму `(height, width)` для PBM/PGM и `(height, width, 3)` для PPM.
    Адресация `at(x, y)` соответствует `raster[y, x]`; строка 0 — верх изображения.
    Прямой доступ за границами растра — `IndexOutOfRange`; `plot` молча отсекает.
    """

    def __init__(self, header: Header, raster) -> None:
        self._header = header
        self._raster = _coerce_raster(header, raster)

    @classmethod
    def blank(
        cls,
        magic_number: MagicNumber,
        width: int,
        height: int,
        max_value: Optional[int] = None,
        fill: Optional[Sample] = None,
    ) -> "NetpbmImage":
        """Создаёт пустой холст заданного формата, заполненный `fill` (по умолчанию нулями)."""
        if magic_number.family is not ImageFamily.BITMAP and max_value is None:
            max_value = Config.DEFAULT_MAX_VALUE
        header = Header(magic_number, width, height, max_value)
        image = cls(header, np.zeros(header.raster_shape, dtype=header.dtype))
        if fill is not None:
            image._raster[...] = image.coerce_value(fill)
        return image

    # ---- Header shortcuts ----
    @property
    def header(self) -> Header:
        return self._header

    @property
    def raster(self) -> np.ndarray:
        return self._raster

    @property
    def magic_number(self) -> MagicNumber:
        return self._header.magic_number

    @property
    def family(self) -> ImageFamily:
        return self._header.family

    @property
    def width(self) -> int:
        return self._header.width

    @property
    def height(self) -> int:
        return self._header.height

    @property
    def max_value(self) -> Optional[int]:
        return self._header.max_value

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height)."""
        return self._header.width, self._header.height

    # ---- Mutation ----
    def replace(self, header: Header, raster) -> None:
        """Атомарно заменяет заголовок и растр; при ошибке изображение не меняется."""
        new_raster = _coerce_raster(header, raster)
        self._header = header
        self._raster = new_raster

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def at(self, x: int, y: int) -> Sample:
        if not self.in_bounds(x, y):
            raise IndexOutOfRange(f"({x}, {y}) вне изображения {self.width}x{self.height}")
        value = self._raster[y, x]
        if self.family is ImageFamily.BITMAP:
            return bool(value)
        if self.family is ImageFamily.GRAYMAP:
            return int(value)
        return Pixel(int(value[0]), int(value[1]), int(value[2]))

    def set(self, x: int, y: int, value: Sample) -> None:
        if not self.in_bounds(x, y):
            raise IndexOutOfRange(f"({x}, {y}) вне изображения {self.width}x{self.height}")
        self._raster[y, x] = self.coerce_value(value)

    def plot(self, x: int, y: int, value: Sample) -> bool:
        """Как `set`, но точки за границами молча пропускаются. Возвращает True, если пиксель записан."""
        if not self.in_bounds(x, y):
            return False
        self._raster[y, x] = self.coerce_value(value)
        return True

    def copy(self) -> "NetpbmImage":
        return NetpbmImage(self._header, self._raster)

    def coerce_value(self, value: Sample):
        if self.family is ImageFamily.BITMAP:
            if isinstance(value, (bool, np.bool_)):
                return bool(value)
            if isinstance(value, numbers.Integral) and value in (0, 1):
                return bool(value)
            raise InvalidSample(f"Bitmap допускает только True/False или 0/1, получено {value!r}")
        if self.family is ImageFamily.GRAYMAP:
            channels = (int(value),)
        else:
            if len(value) != 3:
                raise InvalidSample(f"Ожидалось RGB, получено {value!r}")
            channels = tuple(int(c) for c in value)
        for channel in channels:
            if not 0 <= channel <= self.max_value:
                raise InvalidSample(f"Значение {value!r} вне диапазона 0..{self.max_value}")
        return channels[0] if len(channels) == 1 else channels

    # ---- Dunder ----
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NetpbmImage):
            return NotImplemented
        return self._header == other._header and np.array_equal(self._raster, other._raster)

    __hash__ = None

    def __repr__(self) -> str:
        h = self._header
        return f"NetpbmImage({h.magic_number.token}, {h.width}x{h.height}, max={h.max_value})"

    def __str__(self) -> str:
        """Текстовый дамп растра: одна строка изображения на строку текста."""
        lines = []
        for row in self._raster:
            if self.family is ImageFamily.BITMAP:
                lines.append(" ".join("1" if v else "0" for v in row))
            elif self.family is ImageFamily.GRAYMAP:
                lines.append(" ".join(str(int(v)) for v in row))
            else:
                lines.append("  ".join(f"{int(p[0])} {int(p[1])} {int(p[2])}" for p in row))
        return "\n".join(lines)
