"""Render signed tokens as PNG QR codes."""

import io
import logging

import segno

logger = logging.getLogger(__name__)

_QUIET_ZONE = 4


class QRCodeEncodingError(Exception):
    """The token could not be rendered as a QR code."""


class QRCodeEncoder:
    """Stateless token-to-PNG renderer.

    ``image_size`` is an upper bound on the edge length in pixels, not an exact
    size. Modules are scaled by a whole number, so the PNG is the largest
    multiple of the symbol width (quiet zone included) that fits the bound.
    For a token-sized payload at level M a 256 px target typically yields an
    image noticeably smaller than 256 px. Payloads whose symbol is wider than
    the bound are rendered at one pixel per module and exceed it.
    """

    def __init__(self, *, error_correction: str = "M", image_size: int = 256) -> None:
        self.error_correction = error_correction.lower()
        self.image_size = image_size

    def _scale_for(self, qr: segno.QRCode) -> int:
        width, _ = qr.symbol_size(scale=1, border=_QUIET_ZONE)
        return max(1, self.image_size // width)

    def encode(self, data: str) -> bytes:
        """Return PNG bytes encoding *data*."""
        try:
            qr = segno.make(data, error=self.error_correction, micro=False, boost_error=False)
            buf = io.BytesIO()
            qr.save(buf, kind="png", scale=self._scale_for(qr), border=_QUIET_ZONE)
        except (segno.DataOverflowError, ValueError) as exc:
            raise QRCodeEncodingError("Failed to generate QR code") from exc

        logger.debug("Rendered QR code version=%s bytes=%d", qr.version, buf.tell())
        return buf.getvalue()
