import numpy as np
import pytest

from pnmkit.models.errors import (
    IndexOutOfRange,
    InconsistentDimensions,
    InvalidMaxValue,
    InvalidSample,
    MalformedHeader,
)
from pnmkit.models.image_model import Header, ImageFamily, MagicNumber, NetpbmImage, Pixel


def test_magic_number_properties():
    assert MagicNumber.BINARY_RGB.token == "P6"
    assert MagicNumber.BINARY_RGB.family is ImageFamily.PIXMAP
    assert MagicNumber.BINARY_RGB.is_binary
    assert not MagicNumber.ASCII_BIT.is_binary
    assert MagicNumber.for_family(ImageFamily.GRAYMAP, binary=True) is MagicNumber.BINARY_GRAY


def test_header_validation():
    with pytest.raises(MalformedHeader):
        Header(MagicNumber.ASCII_BIT, 0, 1)
    with pytest.raises(InvalidMaxValue):
        Header(MagicNumber.ASCII_GRAY, 1, 1)
    with pytest.raises(InvalidMaxValue):
        Header(MagicNumber.ASCII_GRAY, 1, 1, 256)
    with pytest.raises(InvalidMaxValue):
        Header(MagicNumber.ASCII_BIT, 1, 1, 1)


def test_raster_must_match_header():
    with pytest.raises(InconsistentDimensions):
        NetpbmImage(Header(MagicNumber.ASCII_GRAY, 2, 2, 255), [[1, 2, 3], [4, 5, 6]])
    with pytest.raises(InvalidSample):
        NetpbmImage(Header(MagicNumber.ASCII_GRAY, 1, 1, 10), [[11]])


def test_blank_canvas_and_pixel_access():
    image = NetpbmImage.blank(MagicNumber.ASCII_RGB, 3, 2, fill=(1, 2, 3))
    assert image.max_value == 255
    assert image.at(2, 1) == Pixel(1, 2, 3)
    image.set(0, 1, Pixel(9, 8, 7))
    assert image.raster[1, 0].tolist() == [9, 8, 7]


def test_out_of_range_access_raises():
    image = NetpbmImage.blank(MagicNumber.ASCII_GRAY, 2, 2)
    with pytest.raises(IndexOutOfRange):
        image.at(2, 0)
    with pytest.raises(IndexError):
        image.set(0, -1, 5)


def test_plot_clips_silently():
    image = NetpbmImage.blank(MagicNumber.ASCII_GRAY, 2, 2)
    assert image.plot(5, 5, 7) is False
    assert image.plot(1, 1, 7) is True
    assert image.at(1, 1) == 7


def test_set_rejects_sample_above_max_value():
    image = NetpbmImage.blank(MagicNumber.ASCII_GRAY, 1, 1, max_value=15)
    with pytest.raises(InvalidSample):
        image.set(0, 0, 16)


def test_copy_is_deep():
    image = NetpbmImage.blank(MagicNumber.BINARY_BIT, 2, 2)
    clone = image.copy()
    clone.set(0, 0, True)
    assert image.at(0, 0) is False
    assert clone != image


def test_constructor_does_not_share_raster():
    raster = np.zeros((1, 2), dtype=np.uint8)
    image = NetpbmImage(Header(MagicNumber.ASCII_GRAY, 2, 1, 255), raster)
    raster[0, 0] = 9
    assert image.at(0, 0) == 0


def test_str_dumps_rows():
    image = NetpbmImage(Header(MagicNumber.ASCII_BIT, 3, 2), [[0, 1, 0], [1, 1, 1]])
    assert str(image) == "0 1 0\n1 1 1"


@pytest.mark.parametrize("value", [2, -1, Pixel(0, 0, 0), (1,), "1", 0.5])
def test_bitmap_set_rejects_non_binary_values(value):
    image = NetpbmImage.blank(MagicNumber.ASCII_BIT, 1, 1)
    with pytest.raises(InvalidSample):
        image.set(0, 0, value)
    assert image.at(0, 0) is False


@pytest.mark.parametrize("value, expected", [(1, True), (0, False), (True, True), (np.bool_(True), True), (np.uint8(1), True)])
def test_bitmap_set_accepts_bools_and_zero_one(value, expected):
    image = NetpbmImage.blank(MagicNumber.BINARY_BIT, 1, 1)
    image.set(0, 0, value)
    assert image.at(0, 0) is expected


def test_header_accepts_numpy_integers():
    image = NetpbmImage.blank(MagicNumber.ASCII_GRAY, np.int64(3), np.int32(2), max_value=np.uint8(15))
    assert image.size == (3, 2)
    assert type(image.width) is int
    assert image.max_value == 15


@pytest.mark.parametrize("width", [2.0, "2"])
def test_header_rejects_non_integer_dimensions(width):
    with pytest.raises(MalformedHeader):
        Header(MagicNumber.ASCII_BIT, width, 1)


def test_header_rejects_non_integer_max_value():
    with pytest.raises(InvalidMaxValue):
        Header(MagicNumber.ASCII_GRAY, 1, 1, 2.5)
