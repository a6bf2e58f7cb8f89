import numpy as np
import pytest
from PIL import Image

from mosaic_redact.errors import InvalidBufferError
from mosaic_redact.raster import RasterBuffer


def test_from_bytes_rejects_size_mismatch():
    with pytest.raises(InvalidBufferError):
        RasterBuffer.from_bytes(2, 2, b"\x00" * 15)


def test_from_bytes_roundtrip_keeps_layout():
    data = bytes(range(16))
    raster = RasterBuffer.from_bytes(2, 2, data)
    assert raster.to_bytes() == data
    assert tuple(raster.pixels[0, 1]) == (4, 5, 6, 7)


def test_shape_mismatch_rejected():
    with pytest.raises(InvalidBufferError):
        RasterBuffer(width=3, height=2, pixels=np.zeros((3, 2, 4), dtype=np.uint8))


def test_zero_size_buffer_is_empty():
    raster = RasterBuffer(width=0, height=0, pixels=np.zeros((0, 0, 4), dtype=np.uint8))
    assert raster.is_empty


def test_from_pil_premultiplies_alpha():
    image = Image.new("RGBA", (2, 1), (255, 0, 100, 128))
    raster = RasterBuffer.from_pil(image)
    assert tuple(raster.pixels[0, 0]) == (128, 0, 50, 128)


def test_to_pil_unpremultiplies_opaque_pixels_exactly():
    image = Image.new("RGB", (3, 3), (12, 200, 99))
    raster = RasterBuffer.from_pil(image)
    out = raster.to_pil()
    assert out.mode == "RGBA"
    assert out.getpixel((1, 1)) == (12, 200, 99, 255)


def test_copy_is_independent():
    raster = RasterBuffer.solid(4, 4, (1, 2, 3, 255))
    clone = raster.copy()
    clone.pixels[0, 0] = (9, 9, 9, 9)
    assert raster != clone
    assert tuple(raster.pixels[0, 0]) == (1, 2, 3, 255)
