"""
Document Compositor

Renders one voucher from the fillable template:

    load template -> NeedAppearances -> bind values -> visibility ->
    logo/stamp -> (flatten) -> barcode -> serialize

Every render works on its own in-memory copy of the template; the template
bytes themselves are read once and never mutated.
"""
import io
import os
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import tzinfo
from typing import Callable, Dict, List, Optional, Tuple

from pypdf import PdfReader, PdfWriter
from pypdf.generic import DictionaryObject
from reportlab.graphics import renderPDF
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen.canvas import Canvas

from sanad.common.exceptions import (
    MissingLogoError,
    RenderError,
    SerializationError,
    TemplateLoadError,
)
from sanad.common.logging_config import get_logger
from sanad.common.models import OrganizationRecord, TransactionRecord
from .assets import AssetEmbedder
from .barcode import BarcodeGenerator, BarcodeImage
from .binder import bind_fields
from .fields import CHEQUE_GROUP, IMAGE_FIELDS, TRANSFER_GROUP, TemplateFieldRegistry
from .forms import fill_values, flatten_form, set_visibility
from .policy import FontStrategy, RenderPolicy
from .visibility import plan_visibility

logger = get_logger(__name__)

# DejaVu Sans: Latin, Arabic and Arabic-Indic digits
DEFAULT_FONT_PATH = os.path.join(os.path.dirname(__file__), "fonts", "DejaVuSans.ttf")


class TemplateSource:
    """
    Read-only voucher template, loaded from disk once and then shared.

    Args:
        path: Path of the fillable PDF template
    """

    def __init__(self, path: str):
        self.path = path
        self._data: Optional[bytes] = None
        self._lock = threading.Lock()

    def read(self) -> bytes:
        with self._lock:
            if self._data is None:
                try:
                    with open(self.path, "rb") as f:
                        self._data = f.read()
                except OSError as e:
                    raise TemplateLoadError(f"Voucher template not readable: {e}") from e
                logger.info("Voucher template loaded", size_bytes=len(self._data))
            return self._data


@dataclass
class BarcodeLayout:
    """
    Attributes:
        top_offset: Distance from the page's top edge to the top of the barcode
        scale: Factor applied to the barcode drawing
        qr_gap: Horizontal gap between barcode and QR code
    """
    top_offset: float = 95.0
    scale: float = 0.75
    qr_gap: float = 12.0


def register_font(path: Optional[str]) -> str:
    """Registers a TrueType font with reportlab and returns its name."""
    if not path or not os.path.exists(path):
        raise TemplateLoadError("Custom font file is missing", step="font")
    name = "Sanad-" + os.path.splitext(os.path.basename(path))[0]
    if name not in pdfmetrics.getRegisteredFontNames():
        try:
            pdfmetrics.registerFont(TTFont(name, path))
        except Exception as e:
            raise TemplateLoadError(f"Custom font could not be loaded: {e}", step="font") from e
    return name


def _overlay_page(page_size: Tuple[float, float], draw: Callable[[Canvas], None]):
    """Draws with reportlab onto a blank page of the given size and returns it as a pypdf page."""
    buffer = io.BytesIO()
    canvas = Canvas(buffer, pagesize=page_size)
    draw(canvas)
    canvas.showPage()
    canvas.save()
    return PdfReader(io.BytesIO(buffer.getvalue())).pages[0]


class VoucherCompositor:
    """
    Renders vouchers to PDF bytes.

    Args:
        template: Shared template source
        assets: Logo / stamp embedder
        barcodes: Barcode generator
        layout: Barcode position on the first page
        font_path: TrueType font for FontStrategy.EMBED_CUSTOM_FONT
            (defaults to the bundled DEFAULT_FONT_PATH)
        tz: Display time zone for the voucher time
        verify_url: Public verification page; QR codes point there when set
        policy: Default RenderPolicy when render() gets none
    """

    def __init__(
        self,
        template: TemplateSource,
        assets: AssetEmbedder,
        barcodes: BarcodeGenerator,
        layout: Optional[BarcodeLayout] = None,
        font_path: Optional[str] = None,
        tz: Optional[tzinfo] = None,
        verify_url: Optional[str] = None,
        policy: Optional[RenderPolicy] = None,
    ):
        self.template = template
        self.assets = assets
        self.barcodes = barcodes
        self.layout = layout or BarcodeLayout()
        self.font_path = font_path or DEFAULT_FONT_PATH
        self.tz = tz
        self.verify_url = verify_url
        self.policy = policy or RenderPolicy()

    @contextmanager
    def _step(self, name: str, receipt_number: str):
        try:
            yield
        except RenderError as e:
            logger.error(f"Render failed at step '{e.step}': {e}", step=e.step, receipt_number=receipt_number)
            raise
        except Exception as e:
            logger.error(f"Render failed at step '{name}': {e}", step=name,
                         receipt_number=receipt_number, exc_info=True)
            raise RenderError(f"Step '{name}' failed: {e}", step=name) from e

    def _load(self) -> Tuple[PdfWriter, TemplateFieldRegistry]:
        try:
            reader = PdfReader(io.BytesIO(self.template.read()))
            if "/AcroForm" not in reader.trailer["/Root"]:
                raise TemplateLoadError("Voucher template has no form fields")
            writer = PdfWriter(clone_from=reader)
        except TemplateLoadError:
            raise
        except Exception as e:
            raise TemplateLoadError(f"Voucher template is corrupt: {e}") from e

        registry = TemplateFieldRegistry.from_reader(reader)
        missing = registry.missing()
        if missing:
            raise TemplateLoadError(f"Voucher template is missing fields: {', '.join(missing)}")
        return writer, registry

    def _barcode_payload(self, receipt: TransactionRecord) -> str:
        if receipt.barcode_id:
            return receipt.barcode_id
        logger.info("Receipt has no barcode id, encoding its receipt number",
                    receipt_number=receipt.receipt_number)
        return receipt.receipt_number

    def _qr_payload(self, payload: str) -> str:
        if not self.verify_url:
            return payload
        separator = "&" if "?" in self.verify_url else "?"
        return f"{self.verify_url}{separator}barcode_id={payload}"

    def _draw_codes(self, canvas: Canvas, page_size, barcode: BarcodeImage, qr: Optional[BarcodeImage]):
        page_width, page_height = page_size
        scale = self.layout.scale
        width, height = barcode.width * scale, barcode.height * scale
        x = (page_width - width) / 2
        y = page_height - self.layout.top_offset - height
        canvas.saveState()
        canvas.translate(x, y)
        canvas.scale(scale, scale)
        renderPDF.draw(barcode.drawing, canvas, 0, 0)
        canvas.restoreState()

        if qr is not None:
            qr_x = x + width + self.layout.qr_gap
            qr_y = y + height - qr.height * scale
            canvas.saveState()
            canvas.translate(qr_x, qr_y)
            canvas.scale(scale, scale)
            renderPDF.draw(qr.drawing, canvas, 0, 0)
            canvas.restoreState()

    def render(
        self,
        receipt: TransactionRecord,
        organization: OrganizationRecord,
        policy: Optional[RenderPolicy] = None,
    ) -> bytes:
        """
        Renders one voucher.

        Args:
            receipt: Voucher to render
            organization: Issuing organization (must have a logo)
            policy: Overrides the compositor's default policy

        Returns:
            PDF bytes

        Raises:
            MissingLogoError: organization has no usable logo
            RenderError: any fatal step failure (template, font, barcode, serialize)
        """
        policy = policy or self.policy
        if not organization.has_logo:
            raise MissingLogoError(organization.id)

        number = receipt.receipt_number
        logger.info("Rendering voucher", receipt_number=number, receipt_type=receipt.receipt_type.value,
                    payment_method=receipt.payment_method, flatten=policy.flatten_form,
                    font_strategy=policy.font_strategy.value)

        with self._step("template", number):
            writer, registry = self._load()
            mediabox = writer.pages[0].mediabox
            page_size = (float(mediabox.width), float(mediabox.height))

        font_name = None
        if policy.font_strategy == FontStrategy.EMBED_CUSTOM_FONT:
            with self._step("font", number):
                font_name = register_font(self.font_path)

        with self._step("fields", number):
            writer.set_need_appearances_writer(True)
            bound = bind_fields(receipt, organization, self.tz)
            dropped = [name for name in bound if name not in registry]
            if dropped:
                logger.debug("Template has no field for some bound values", fields=dropped)
            values = {name: value for name, value in bound.items() if name in registry}

        with self._step("visibility", number):
            plan = plan_visibility(receipt.payment_method)
            values = plan.apply_to_values(values)
            values = {name: value for name, value in values.items() if name in registry}
            fill_values(writer, values)
            visible: Dict[str, bool] = {name: plan.is_visible(name) for name in CHEQUE_GROUP + TRANSFER_GROUP}
            # Image boxes are placeholders only; images are drawn as page content
            visible.update({name: False for name in IMAGE_FIELDS})
            set_visibility(writer, visible)

        with self._step("assets", number):
            logo = self.assets.load(organization.logo_url, "logo")
            stamp = self.assets.load(organization.stamp_url, "stamp")
            placed = self.assets.plan(registry, page_size, policy.logo_placement, logo=logo, stamp=stamp)
            if placed:
                writer.pages[0].merge_page(_overlay_page(page_size, lambda c: self.assets.draw(c, placed)))
            logger.debug("Images embedded", count=len(placed))

        if policy.flatten_form:
            with self._step("flatten", number):
                texts: List[Tuple[Tuple[float, float, float, float], str]] = []
                hook = None
                if font_name is not None:
                    def hook(name: str, annot: DictionaryObject) -> bool:
                        value = values.get(name)
                        if not value:
                            return False
                        x0, y0, x1, y1 = [float(v) for v in annot["/Rect"]]
                        texts.append(((min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1)), value))
                        return True
                baked = flatten_form(writer, hook)
                if texts:
                    writer.pages[0].merge_page(_overlay_page(page_size, lambda c: _draw_texts(c, font_name, texts)))
                logger.debug("Form flattened", widgets=baked, custom_text=len(texts))

        with self._step("barcode", number):
            payload = self._barcode_payload(receipt)
            barcode = self.barcodes.code128(payload)
            qr = self.barcodes.qr(self._qr_payload(payload)) if policy.include_qr else None
            writer.pages[0].merge_page(_overlay_page(page_size, lambda c: self._draw_codes(c, page_size, barcode, qr)))

        try:
            buffer = io.BytesIO()
            # Plain write: no object streams, appearances are already final
            writer.write(buffer)
        except Exception as e:
            logger.error(f"Serialization failed: {e}", step="serialize", receipt_number=number, exc_info=True)
            raise SerializationError(f"Could not serialize voucher: {e}") from e

        data = buffer.getvalue()
        logger.info("Voucher rendered", receipt_number=number, size_bytes=len(data))
        return data


def _draw_texts(canvas: Canvas, font_name: str, texts) -> None:
    """Right-aligned field text in the custom font, vertically centered in each box."""
    for (x0, y0, x1, y1), value in texts:
        height = y1 - y0
        size = max(6.0, min(10.0, height * 0.7))
        canvas.setFont(font_name, size)
        canvas.drawRightString(x1 - 2, y0 + (height - size) / 2 + size * 0.2, value)
