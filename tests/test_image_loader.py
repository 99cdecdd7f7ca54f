"""
Tests for image decoding.

Covers:
- PNG / JPEG / palette decoding to RGBA
- EXIF orientation
- Malformed, empty and unreadable input raising DecodeError
"""
import io

import pytest
from PIL import Image

from conftest import RED, encode
from services.image_loader import decode_image, load_image_file, DecodeError


class TestDecodeImage:

    def test_png(self, png_bytes):
        surface = decode_image(png_bytes(6, 4, RED))
        assert surface.size == (6, 4)
        assert (surface.read_pixels() == RED).all()

    def test_png_alpha_preserved(self):
        data = encode(Image.new('RGBA', (2, 2), (10, 20, 30, 40)))
        assert decode_image(data).read_pixels()[0, 0].tolist() == [10, 20, 30, 40]

    def test_jpeg_becomes_opaque_rgba(self):
        data = encode(Image.new('RGB', (8, 8), (200, 10, 10)), 'JPEG')
        pixels = decode_image(data).read_pixels()
        assert pixels.shape == (8, 8, 4)
        assert (pixels[..., 3] == 255).all()

    def test_palette_image(self):
        data = encode(Image.new('P', (3, 3), 5), 'GIF')
        assert decode_image(data).size == (3, 3)

    def test_exif_orientation_applied(self):
        image = Image.new('RGB', (4, 2), (0, 200, 0))
        exif = Image.Exif()
        exif[0x0112] = 6  # rotate 90 CW on display
        data = encode_with_exif(image, exif)
        assert decode_image(data).size == (2, 4)

    @pytest.mark.parametrize("data", [b'', b'not an image', b'\x89PNG\r\n\x1a\n' + b'\x00' * 20])
    def test_malformed(self, data):
        with pytest.raises(DecodeError):
            decode_image(data)

    def test_truncated_png(self, png_bytes):
        data = png_bytes(64, 64)
        with pytest.raises(DecodeError):
            decode_image(data[:len(data) // 2])


class TestLoadImageFile:

    def test_load(self, tmp_path, png_bytes):
        path = tmp_path / "object.png"
        path.write_bytes(png_bytes(5, 5))
        assert load_image_file(str(path)).size == (5, 5)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DecodeError):
            load_image_file(str(tmp_path / "missing.png"))

    def test_not_an_image(self, tmp_path):
        path = tmp_path / "notes.png"
        path.write_text("hello")
        with pytest.raises(DecodeError):
            load_image_file(str(path))


def encode_with_exif(image, exif):
    buffer = io.BytesIO()
    image.save(buffer, format='JPEG', exif=exif.tobytes())
    return buffer.getvalue()
