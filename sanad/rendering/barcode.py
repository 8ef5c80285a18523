"""
Barcode Generator

Encodes the verification identifier as a Code 128 barcode (with the
human-readable text centered under the bars) and, optionally, as a QR code.
Both are produced as reportlab drawings so they can be drawn onto a page as
vector content or rasterized to PNG.
"""
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from reportlab.graphics.barcode import createBarcodeDrawing
from reportlab.graphics.shapes import Drawing

from sanad.common.exceptions import BarcodeError
from sanad.common.logging_config import get_logger

logger = get_logger(__name__)

BARCODE_PREFIX = "RCP"
IDENTIFIER_PATTERN = re.compile(r"^[A-Z]{3}-\d{4}-\d{6}$")


def generate_barcode_id(sequence, year: Optional[int] = None, prefix: str = BARCODE_PREFIX) -> str:
    """
    Builds a verification identifier: PREFIX-YYYY-NNNNNN.

    >>> generate_barcode_id(42, 2024)
    'RCP-2024-000042'

    Raises:
        ValueError: the sequence is not an integer in 0..999999, or the
            result would not be a well-formed identifier
    """
    year = year or datetime.now().year
    try:
        number = int(sequence)
    except (TypeError, ValueError):
        raise ValueError(f"Sequence {sequence!r} is not a number") from None
    if not 0 <= number <= 999999:
        raise ValueError(f"Sequence {sequence!r} does not fit in six digits")
    identifier = f"{prefix}-{int(year):04d}-{number:06d}"
    if not IDENTIFIER_PATTERN.match(identifier):
        raise ValueError(f"Not a well-formed identifier: {identifier!r}")
    return identifier


def is_valid_barcode_id(value: Optional[str], prefixes: Iterable[str] = (BARCODE_PREFIX,)) -> bool:
    """True when ``value`` has the identifier shape and one of the given prefixes."""
    if not value or not IDENTIFIER_PATTERN.match(value):
        return False
    return value.split("-", 1)[0] in set(prefixes)


@dataclass
class BarcodeOptions:
    """
    Attributes:
        module_width: Width of the narrowest bar, in points
        bar_height: Height of the bars, in points
        include_text: Print the payload under the bars
        qr_size: Edge length of the QR code, in points
    """
    module_width: float = 1.2
    bar_height: float = 40.0
    include_text: bool = True
    qr_size: float = 80.0


@dataclass
class BarcodeImage:
    """An encoded barcode ready to be drawn or rasterized."""
    payload: str
    symbology: str
    drawing: Drawing

    @property
    def width(self) -> float:
        return float(self.drawing.width)

    @property
    def height(self) -> float:
        return float(self.drawing.height)

    def to_png(self, dpi: int = 144) -> bytes:
        """
        Rasterizes the drawing.

        Needs a reportlab renderPM backend (rl_renderPM or rlPyCairo).
        """
        from reportlab.graphics import renderPM

        try:
            return renderPM.drawToString(self.drawing, fmt="PNG", dpi=dpi)
        except Exception as e:
            raise BarcodeError(f"Could not rasterize {self.symbology} barcode: {e}") from e


def _check_payload(payload: Optional[str]) -> str:
    if not payload or not payload.strip():
        raise BarcodeError("Barcode payload is empty")
    if not all(32 <= ord(c) < 127 for c in payload):
        raise BarcodeError(f"Barcode payload is not printable ASCII: {payload!r}")
    return payload


class BarcodeGenerator:
    """
    Produces Code 128 and QR drawings for verification identifiers.

    Any encoding failure raises ``BarcodeError``: a voucher without a valid
    verification code is not a valid document.
    """

    def __init__(self, options: Optional[BarcodeOptions] = None):
        self.options = options or BarcodeOptions()

    def code128(self, payload: str) -> BarcodeImage:
        payload = _check_payload(payload)
        try:
            drawing = createBarcodeDrawing(
                "Code128",
                value=payload,
                barWidth=self.options.module_width,
                barHeight=self.options.bar_height,
                humanReadable=self.options.include_text,
                quiet=False,
            )
        except Exception as e:
            logger.error("Code128 encoding failed", payload=payload, error=str(e))
            raise BarcodeError(f"Failed to generate barcode: {e}") from e
        logger.debug("Code128 generated", payload=payload, width=drawing.width, height=drawing.height)
        return BarcodeImage(payload=payload, symbology="Code128", drawing=drawing)

    def qr(self, payload: str) -> BarcodeImage:
        if not payload or not payload.strip():
            raise BarcodeError("QR payload is empty")
        size = self.options.qr_size
        try:
            drawing = createBarcodeDrawing("QR", value=payload, width=size, height=size)
        except Exception as e:
            logger.error("QR encoding failed", payload=payload, error=str(e))
            raise BarcodeError(f"Failed to generate QR code: {e}") from e
        return BarcodeImage(payload=payload, symbology="QR", drawing=drawing)
