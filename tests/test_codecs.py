import io

import numpy as np
import pytest

from pnmkit.models.errors import (
    InconsistentDimensions,
    MalformedHeader,
    TruncatedData,
    UnsupportedVariant,
)
from pnmkit.models.image_model import Header, ImageFamily, MagicNumber, NetpbmImage, Pixel
from pnmkit.services import codec_service
from pnmkit.services.codec_service import PbmCodec, PgmCodec, PpmCodec


def random_image(magic: MagicNumber, width: int, height: int, seed: int = 0) -> NetpbmImage:
    rng = np.random.default_rng(seed)
    header = Header(magic, width, height, None if magic.family is ImageFamily.BITMAP else 255)
    if header.max_value is None:
        raster = rng.integers(0, 2, size=header.raster_shape).astype(bool)
    else:
        raster = rng.integers(0, 256, size=header.raster_shape).astype(np.uint8)
    return NetpbmImage(header, raster)


def test_decode_ascii_graymap():
    image = PgmCodec().decode(b"P2\n2 2\n255\n0 255\n128 64\n")
    assert image.size == (2, 2)
    assert [image.at(0, 0), image.at(1, 0), image.at(0, 1), image.at(1, 1)] == [0, 255, 128, 64]


@pytest.mark.parametrize("magic", list(MagicNumber))
@pytest.mark.parametrize("size", [(1, 1), (10, 3), (13, 5)])
def test_round_trip(magic, size):
    image = random_image(magic, *size)
    assert codec_service.decode(codec_service.encode(image)) == image


def test_pbm_binary_padding_bytes():
    image = NetpbmImage(Header(MagicNumber.BINARY_BIT, 10, 1), [[1, 0, 1, 0, 1, 0, 1, 0, 1, 0]])
    assert PbmCodec().encode(image) == b"P4\n10 1\n\xaa\x80"


def test_pbm_binary_padding_bits_ignored_on_decode():
    image = PbmCodec().decode(b"P4\n10 1\n\xaa\xbf")
    assert image.raster.tolist() == [[True, False] * 5]


def test_pbm_binary_truncated():
    with pytest.raises(TruncatedData):
        PbmCodec().decode(b"P4\n10 2\n\xaa\x80\xaa")


def test_pgm_binary_truncated():
    with pytest.raises(TruncatedData):
        PgmCodec().decode(b"P5\n3 2\n255\n\x01\x02\x03\x04")


def test_pbm_ascii_accepts_packed_digits():
    image = PbmCodec().decode(b"P1\n# plain\n3 2\n010\n1 1 1\n")
    assert image.raster.tolist() == [[False, True, False], [True, True, True]]


def test_pbm_ascii_writer_layout():
    image = NetpbmImage(Header(MagicNumber.ASCII_BIT, 3, 2), [[0, 1, 0], [1, 1, 1]])
    assert PbmCodec().encode(image) == b"P1\n3 2\n0 1 0\n1 1 1\n"


def test_ppm_ascii_writer_one_pixel_per_line():
    image = NetpbmImage(Header(MagicNumber.ASCII_RGB, 2, 1, 255), [[(255, 0, 0), (0, 0, 255)]])
    assert PpmCodec().encode(image) == b"P3\n2 1\n255\n255 0 0\n0 0 255\n"


def test_ppm_binary_decode():
    image = PpmCodec().decode(b"P6\n2 1\n255\n\x01\x02\x03\x04\x05\x06")
    assert image.at(1, 0) == Pixel(4, 5, 6)


@pytest.mark.parametrize(
    "data",
    [
        b"P1\n3 2\n0 1 0\n1 1\n",
        b"P1\n2 1\n0 2\n",
        b"P2\n2 2\n255\n0 255\n128\n",
        b"P2\n2 1\n100\n0 101\n",
        b"P2\n2 1\n255\n0 x\n",
        b"P3\n1 1\n255\n1 2\n",
        b"P2\n1 1\n255\n99999999999999999999\n",
        b"P3\n1 1\n255\n1 2 -99999999999999999999\n",
    ],
)
def test_ascii_body_errors(data):
    with pytest.raises(MalformedHeader):
        codec_service.decode(data)


def test_decode_unknown_netpbm_variant():
    with pytest.raises(UnsupportedVariant):
        codec_service.decode(b"P9\n2 2\n255\n")


def test_codec_rejects_other_family():
    with pytest.raises(UnsupportedVariant):
        PgmCodec().decode(b"P3\n1 1\n255\n1 2 3\n")
    with pytest.raises(UnsupportedVariant):
        PbmCodec().encode(NetpbmImage.blank(MagicNumber.ASCII_GRAY, 1, 1))


def test_encode_inconsistent_raster():
    image = NetpbmImage.blank(MagicNumber.BINARY_GRAY, 2, 2)
    image._raster = np.zeros((3, 2), dtype=np.uint8)  # bypass the constructor check
    with pytest.raises(InconsistentDimensions):
        PgmCodec().encode(image)


def test_decode_from_stream_and_write_to_stream():
    image = random_image(MagicNumber.BINARY_RGB, 4, 3)
    buf = io.BytesIO()
    PpmCodec().write(image, buf)
    buf.seek(0)
    assert PpmCodec().decode(buf) == image
