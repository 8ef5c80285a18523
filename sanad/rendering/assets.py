"""
Asset Embedder

Fetches the organization logo and stamp, decodes them with Pillow and draws
them on the first page, either inside the template's image field box or at a
fixed fallback position. Fetch and decode failures are logged and skipped;
they never abort a render.
"""
import io
import os
from dataclasses import dataclass
from typing import List, Optional, Tuple
from urllib.parse import urlparse

import requests
from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen.canvas import Canvas

from sanad.common.exceptions import AssetError
from sanad.common.logging_config import get_logger
from .fields import LOGO_IMAGE, STAMP_IMAGE, TemplateFieldRegistry
from .policy import LogoPlacement

logger = get_logger(__name__)

# Extension -> Pillow format. Only these two are accepted.
SUPPORTED_FORMATS = {
    ".png": "PNG",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
}

# Fallback boxes, measured from the page's top-left / bottom-right corners (points)
LOGO_FALLBACK_MARGIN = (36.0, 36.0)
LOGO_MAX_SIZE = (110.0, 70.0)
STAMP_FALLBACK_MARGIN = (48.0, 60.0)
STAMP_MAX_SIZE = (110.0, 110.0)


@dataclass
class PlacedImage:
    """An image and the box (x, y, width, height) it is drawn into."""
    kind: str
    image: Image.Image
    box: Tuple[float, float, float, float]


def image_format_for(reference: str) -> str:
    """Pillow format name for a reference, decided by its extension."""
    path = urlparse(reference).path if "://" in reference else reference
    ext = os.path.splitext(path)[1].lower()
    fmt = SUPPORTED_FORMATS.get(ext)
    if fmt is None:
        raise AssetError(f"Unsupported image type '{ext or '?'}'", reference=reference)
    return fmt


def fit_within(width: float, height: float, max_width: float, max_height: float) -> Tuple[float, float]:
    """Scales (width, height) down to fit the box, keeping the aspect ratio."""
    if width <= 0 or height <= 0:
        return 0.0, 0.0
    scale = min(max_width / width, max_height / height, 1.0)
    return min(width * scale, max_width), min(height * scale, max_height)


class AssetFetcher:
    """
    Loads raw image bytes from http(s) URLs, file:// URLs or local paths.

    Each remote fetch is bounded by ``timeout`` seconds.
    """

    def __init__(self, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session

    def fetch(self, reference: str) -> bytes:
        parsed = urlparse(reference)
        try:
            if parsed.scheme in ("http", "https"):
                getter = self.session.get if self.session is not None else requests.get
                response = getter(reference, timeout=self.timeout)
                response.raise_for_status()
                return response.content
            path = parsed.path if parsed.scheme == "file" else reference
            with open(path, "rb") as f:
                return f.read()
        except (requests.RequestException, OSError) as e:
            raise AssetError(f"Failed to fetch image: {e}", reference=reference) from e


def decode_image(data: bytes, reference: str) -> Image.Image:
    """Decodes bytes with the format the reference's extension announces."""
    fmt = image_format_for(reference)
    try:
        image = Image.open(io.BytesIO(data), formats=[fmt])
        image.load()
    except Exception as e:
        raise AssetError(f"Failed to decode {fmt} image: {e}", reference=reference) from e
    if image.mode not in ("RGB", "RGBA", "L"):
        image = image.convert("RGBA")
    return image


class AssetEmbedder:
    """
    Places logo and stamp images on the first page of a voucher.

    Args:
        fetcher: Source of raw image bytes
    """

    def __init__(self, fetcher: AssetFetcher):
        self.fetcher = fetcher

    def load(self, reference: Optional[str], kind: str) -> Optional[Image.Image]:
        """Fetch + decode. Returns None (and logs) on any asset failure."""
        if not reference:
            return None
        try:
            return decode_image(self.fetcher.fetch(reference), reference)
        except AssetError as e:
            logger.warning(f"Skipping {kind} image: {e}", asset=kind, reference=reference)
            return None

    def _field_box(self, registry: TemplateFieldRegistry, name: str):
        widget = registry.first_widget(name)
        if widget is None or widget.page_index != 0:
            return None
        return widget.rect[0], widget.rect[1], widget.width, widget.height

    def plan(
        self,
        registry: TemplateFieldRegistry,
        page_size: Tuple[float, float],
        placement: LogoPlacement,
        logo: Optional[Image.Image] = None,
        stamp: Optional[Image.Image] = None,
    ) -> List[PlacedImage]:
        """
        Decides where each decoded image goes.

        Logo:
            FORM_FIELD_ONLY     -> field box, skipped when the template has none
            PAGE_DRAW_FALLBACK  -> field box, else top-left of the page
            BOTH                -> field box (if any) and top-left of the page
        Stamp: field box, else bottom-right of the page (never for FORM_FIELD_ONLY).
        """
        page_width, page_height = page_size
        placed = []

        if logo is not None:
            field_box = self._field_box(registry, LOGO_IMAGE)
            if field_box is not None:
                placed.append(PlacedImage("logo", logo, field_box))
            elif placement == LogoPlacement.FORM_FIELD_ONLY:
                logger.warning("Template has no logo field; logo not drawn", placement=placement.value)

            if placement == LogoPlacement.BOTH or (
                placement == LogoPlacement.PAGE_DRAW_FALLBACK and field_box is None
            ):
                w, h = fit_within(logo.width, logo.height, *LOGO_MAX_SIZE)
                x = LOGO_FALLBACK_MARGIN[0]
                y = page_height - LOGO_FALLBACK_MARGIN[1] - h
                placed.append(PlacedImage("logo", logo, (x, y, w, h)))

        if stamp is not None:
            field_box = self._field_box(registry, STAMP_IMAGE)
            if field_box is not None:
                placed.append(PlacedImage("stamp", stamp, field_box))
            elif placement != LogoPlacement.FORM_FIELD_ONLY:
                w, h = fit_within(stamp.width, stamp.height, *STAMP_MAX_SIZE)
                x = page_width - STAMP_FALLBACK_MARGIN[0] - w
                y = STAMP_FALLBACK_MARGIN[1]
                placed.append(PlacedImage("stamp", stamp, (x, y, w, h)))

        return placed

    @staticmethod
    def draw(canvas: Canvas, placed: List[PlacedImage]) -> None:
        """Draws images centered in their boxes, aspect ratio preserved."""
        for item in placed:
            x, y, w, h = item.box
            canvas.drawImage(
                ImageReader(item.image), x, y, width=w, height=h,
                preserveAspectRatio=True, anchor="c", mask="auto",
            )
