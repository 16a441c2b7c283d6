from __future__ import annotations

import logging
import operator
from dataclasses import replace

import numpy as np

from pnmkit.models.errors import InvalidMaxValue, UnsupportedVariant
from pnmkit.models.image_model import (
    MAX_SUPPORTED_VALUE,
    Header,
    ImageFamily,
    MagicNumber,
    NetpbmImage,
)

logger = logging.getLogger(__name__)

# ITU-R BT.601 luma
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)


def round_half_up(values: np.ndarray) -> np.ndarray:
    return np.floor(values + 0.5)


class TransformService:
    # ---------- Геометрия и инверсия (на месте) ----------
    def invert(self, image: NetpbmImage) -> NetpbmImage:
        """
        Негатив: `max_value - v` по каждому каналу; для bitmap — логическое НЕ.
        """
        if image.family is ImageFamily.BITMAP:
            np.logical_not(image.raster, out=image.raster)
        else:
            image.raster[...] = image.max_value - image.raster
        return image

    def flip(self, image: NetpbmImage) -> NetpbmImage:
        """
        Горизонтальное зеркало: каждая строка разворачивается.
        """
        image.raster[...] = image.raster[:, ::-1].copy()
        return image

    def flop(self, image: NetpbmImage) -> NetpbmImage:
        """
        Вертикальное зеркало: разворачивается порядок строк.
        """
        image.raster[...] = image.raster[::-1].copy()
        return image

    def rotate_90_cw(self, image: NetpbmImage) -> NetpbmImage:
        """
        Поворот на 90° по часовой стрелке: out[i][j] = in[height-1-j][i].
        Ширина и высота меняются местами вместе с растром.
        """
        rotated = np.rot90(image.raster, k=-1, axes=(0, 1))
        header = replace(image.header, width=image.height, height=image.width)
        image.replace(header, rotated)
        logger.debug("Rotated to %dx%d", header.width, header.height)
        return image

    # ---------- Max value ----------
    def rescale_max(self, image: NetpbmImage, new_max: int) -> NetpbmImage:
        """
        Линейное масштабирование всех отсчётов на new_max / old_max с округлением
        до ближайшего целого; затем в заголовок записывается новый max value.
        """
        if image.family is ImageFamily.BITMAP:
            raise InvalidMaxValue("Bitmap не имеет max value")
        try:
            new_max = operator.index(new_max)
        except TypeError as exc:
            raise InvalidMaxValue(f"Новый max value должен быть целым: {new_max!r}") from exc
        if not 1 <= new_max <= MAX_SUPPORTED_VALUE:
            raise InvalidMaxValue(f"Новый max value должен быть в диапазоне 1..{MAX_SUPPORTED_VALUE}: {new_max}")
        old_max = image.max_value
        if not old_max or old_max <= 0:
            raise InvalidMaxValue(f"Исходный max value некорректен: {old_max}")

        scaled = round_half_up(image.raster.astype(np.float64) * (new_max / old_max))
        image.replace(replace(image.header, max_value=new_max), scaled.astype(np.uint8))
        return image

    # ---------- Смена формата ----------
    def set_magic_number(self, image: NetpbmImage, magic_number: MagicNumber) -> NetpbmImage:
        """
        Переключение между ASCII и binary вариантом в пределах одного семейства.
        """
        if magic_number.family is not image.family:
            raise UnsupportedVariant(
                f"{image.magic_number.token} -> {magic_number.token}: смена семейства, "
                f"используйте to_gray/to_bitmap"
            )
        image.replace(replace(image.header, magic_number=magic_number), image.raster)
        return image

    def luminance(self, image: NetpbmImage) -> np.ndarray:
        """
        Яркость float64 (height, width): luma для PPM, значение отсчёта для PGM.
        """
        if image.family is ImageFamily.PIXMAP:
            return image.raster.astype(np.float64) @ LUMA_WEIGHTS
        if image.family is ImageFamily.GRAYMAP:
            return image.raster.astype(np.float64)
        raise UnsupportedVariant("Яркость определена только для PGM/PPM")

    def to_gray(self, image: NetpbmImage) -> NetpbmImage:
        """
        PPM -> PGM: gray = round(0.299R + 0.587G + 0.114B), max value сохраняется.
        Вариант (ASCII/binary) наследуется от исходного изображения.
        """
        if image.family is not ImageFamily.PIXMAP:
            raise UnsupportedVariant(f"to_gray ожидает PPM, получен {image.magic_number.token}")
        gray = np.clip(round_half_up(self.luminance(image)), 0, image.max_value).astype(np.uint8)
        magic = MagicNumber.for_family(ImageFamily.GRAYMAP, image.magic_number.is_binary)
        header = Header(magic, image.width, image.height, image.max_value)
        logger.debug("Converted %s -> %s", image.magic_number.token, magic.token)
        return NetpbmImage(header, gray)

    def to_bitmap(self, image: NetpbmImage) -> NetpbmImage:
        """
        PPM/PGM -> PBM: пиксель True, если яркость больше max_value / 2.
        """
        if image.family is ImageFamily.BITMAP:
            return image.copy()
        bits = self.luminance(image) > image.max_value / 2
        magic = MagicNumber.for_family(ImageFamily.BITMAP, image.magic_number.is_binary)
        header = Header(magic, image.width, image.height)
        logger.debug("Converted %s -> %s", image.magic_number.token, magic.token)
        return NetpbmImage(header, bits)
