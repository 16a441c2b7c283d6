"""Кодеки PBM / PGM / PPM (ASCII и binary).

Принципы:
- Каждый кодек отвечает за одно семейство; вариант (ASCII/binary) выбирается
  один раз по magic number из заголовка через таблицу стратегий.
- Декодирование либо возвращает целое изображение, либо бросает исключение:
  частичных результатов нет.
"""
from __future__ import annotations

import io
import logging
from typing import BinaryIO, Callable, Dict, List, Union

import numpy as np

from pnmkit.models.errors import InconsistentDimensions, MalformedHeader, UnsupportedVariant
from pnmkit.models.image_model import Header, ImageFamily, NetpbmImage
from pnmkit.services.header_service import parse_header, write_header
from pnmkit.services.row_codec import (
    pack_bit_raster,
    pack_byte_raster,
    unpack_bit_raster,
    unpack_byte_raster,
)

logger = logging.getLogger(__name__)

Source = Union[bytes, bytearray, memoryview, BinaryIO]


def _as_stream(source: Source) -> BinaryIO:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(source))
    return source


class NetpbmCodec:
    """Общая часть кодеков: разбор заголовка, выбор стратегии, проверки."""
    family: ImageFamily
    channels: int = 1

    def __init__(self) -> None:
        # is_binary -> strategy
        self._readers: Dict[bool, Callable[[Header, bytes], np.ndarray]] = {
            False: self._read_ascii,
            True: self._read_binary,
        }
        self._writers: Dict[bool, Callable[[NetpbmImage], bytes]] = {
            False: self._write_ascii,
            True: self._write_binary,
        }

    # ---- Public API ----
    def decode(self, source: Source) -> NetpbmImage:
        """Читает изображение из байтов или бинарного потока.

        Raises:
            MalformedHeader: ошибка заголовка или ASCII-тела.
            UnsupportedVariant: другой формат/семейство.
            TruncatedData: бинарное тело короче объявленного.
        """
        header, stream = parse_header(_as_stream(source))
        return self.decode_body(header, stream)

    def decode_body(self, header: Header, stream: BinaryIO) -> NetpbmImage:
        if header.family is not self.family:
            raise UnsupportedVariant(
                f"{type(self).__name__} не читает {header.magic_number.token} ({header.family.value})"
            )
        body = stream.read()
        raster = self._readers[header.magic_number.is_binary](header, body)
        logger.debug("Decoded %s %dx%d", header.magic_number.token, header.width, header.height)
        return NetpbmImage(header, raster)

    def encode(self, image: NetpbmImage) -> bytes:
        """Сериализует изображение в вариант, заданный его magic number."""
        header = image.header
        if header.family is not self.family:
            raise UnsupportedVariant(
                f"{type(self).__name__} не пишет {header.magic_number.token} ({header.family.value})"
            )
        if image.raster.shape != header.raster_shape:
            raise InconsistentDimensions(
                f"Растр {image.raster.shape} не совпадает с заголовком {header.raster_shape}"
            )
        body = self._writers[header.magic_number.is_binary](image)
        logger.debug("Encoded %s %dx%d (%d bytes body)", header.magic_number.token, header.width, header.height, len(body))
        return write_header(header) + body

    def write(self, image: NetpbmImage, stream: BinaryIO) -> None:
        stream.write(self.encode(image))

    # ---- Strategies ----
    def _read_ascii(self, header: Header, body: bytes) -> np.ndarray:
        n = header.width * header.height * self.channels
        tokens = body.split()
        if len(tokens) < n:
            row = len(tokens) // (header.width * self.channels)
            raise MalformedHeader(
                f"ASCII-тело: ожидалось {n} значений, найдено {len(tokens)} (неполная строка {row})"
            )
        try:
            values = np.array([int(tok) for tok in tokens[:n]], dtype=np.int64)
        except (ValueError, OverflowError) as exc:
            raise MalformedHeader(f"ASCII-тело содержит нечисловой токен: {exc}") from exc
        self._check_range(header, values)
        return values.reshape(header.raster_shape).astype(np.uint8)

    def _read_binary(self, header: Header, body: bytes) -> np.ndarray:
        raster = unpack_byte_raster(body, header.width, header.height, self.channels)
        self._check_range(header, raster)
        return raster

    def _write_ascii(self, image: NetpbmImage) -> bytes:
        lines = [" ".join(str(int(v)) for v in row) for row in image.raster]
        return ("\n".join(lines) + "\n").encode("ascii")

    def _write_binary(self, image: NetpbmImage) -> bytes:
        return pack_byte_raster(image.raster)

    @staticmethod
    def _check_range(header: Header, values: np.ndarray) -> None:
        if values.size and (values.min() < 0 or values.max() > header.max_value):
            raise MalformedHeader(f"Значение отсчёта вне диапазона 0..{header.max_value}")


class PbmCodec(NetpbmCodec):
    """P1 / P4. В P1 цифры 0/1 могут идти как через пробел, так и слитно."""
    family = ImageFamily.BITMAP

    def _read_ascii(self, header: Header, body: bytes) -> np.ndarray:
        n = header.width * header.height
        digits = np.frombuffer(b"".join(body.split()), dtype=np.uint8)
        if digits.size < n:
            raise MalformedHeader(
                f"ASCII-тело PBM: ожидалось {n} значений, найдено {digits.size} "
                f"(неполная строка {digits.size // header.width})"
            )
        digits = digits[:n]
        if not np.isin(digits, (ord("0"), ord("1"))).all():
            raise MalformedHeader("ASCII-тело PBM допускает только 0 и 1")
        return (digits == ord("1")).reshape(header.raster_shape)

    def _read_binary(self, header: Header, body: bytes) -> np.ndarray:
        return unpack_bit_raster(body, header.width, header.height)

    def _write_ascii(self, image: NetpbmImage) -> bytes:
        lines = [" ".join("1" if v else "0" for v in row) for row in image.raster]
        return ("\n".join(lines) + "\n").encode("ascii")

    def _write_binary(self, image: NetpbmImage) -> bytes:
        return pack_bit_raster(image.raster)


class PgmCodec(NetpbmCodec):
    """P2 / P5, один байт на отсчёт."""
    family = ImageFamily.GRAYMAP


class PpmCodec(NetpbmCodec):
    """P3 / P6. В P3 каждый пиксель `R G B` пишется отдельной строкой."""
    family = ImageFamily.PIXMAP
    channels = 3

    def _write_ascii(self, image: NetpbmImage) -> bytes:
        pixels: List[str] = [
            f"{int(r)} {int(g)} {int(b)}" for r, g, b in image.raster.reshape(-1, 3)
        ]
        return ("\n".join(pixels) + "\n").encode("ascii")


CODECS: Dict[ImageFamily, NetpbmCodec] = {
    ImageFamily.BITMAP: PbmCodec(),
    ImageFamily.GRAYMAP: PgmCodec(),
    ImageFamily.PIXMAP: PpmCodec(),
}


def codec_for(family: ImageFamily) -> NetpbmCodec:
    return CODECS[family]


def decode(source: Source) -> NetpbmImage:
    """Читает любой из P1–P6, выбирая кодек по magic number."""
    header, stream = parse_header(_as_stream(source))
    return CODECS[header.family].decode_body(header, stream)


def encode(image: NetpbmImage) -> bytes:
    return CODECS[image.family].encode(image)
