"""Unit tests for services/qr_service.py: PNG rendering."""

import struct

import pytest
import segno

from qrpass.services.qr_service import QRCodeEncoder, QRCodeEncodingError

_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def _png_size(png: bytes) -> tuple[int, int]:
    # IHDR is always the first chunk: width and height follow the chunk type
    return struct.unpack(">II", png[16:24])


class TestQRCodeEncoder:
    def test_returns_png(self, issuer, payload):
        png = QRCodeEncoder().encode(issuer.issue(payload).token)
        assert png.startswith(_PNG_SIGNATURE)

    def test_image_is_square_and_within_target(self, issuer, payload):
        width, height = _png_size(QRCodeEncoder(image_size=256).encode(issuer.issue(payload).token))
        assert width == height
        assert width <= 256

    def test_image_is_largest_whole_multiple_of_symbol_width(self, issuer, payload):
        token = issuer.issue(payload).token
        symbol_width = segno.make(token, error="m", micro=False, boost_error=False).symbol_size(scale=1)[0]
        width, _ = _png_size(QRCodeEncoder(image_size=256).encode(token))
        assert width % symbol_width == 0
        assert width + symbol_width > 256

    def test_larger_target_gives_larger_image(self):
        small = _png_size(QRCodeEncoder(image_size=128).encode("SKU-1"))[0]
        large = _png_size(QRCodeEncoder(image_size=512).encode("SKU-1"))[0]
        assert large > small

    def test_output_is_deterministic(self):
        encoder = QRCodeEncoder()
        assert encoder.encode("same-input") == encoder.encode("same-input")

    def test_error_correction_level_is_normalized(self):
        assert QRCodeEncoder(error_correction="H").error_correction == "h"

    def test_oversized_input_raises(self):
        with pytest.raises(QRCodeEncodingError):
            QRCodeEncoder(error_correction="H").encode("x" * 5000)
