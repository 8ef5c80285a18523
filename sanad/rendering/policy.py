"""
Render policy: the explicit switches of the document compositor.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FontStrategy(str, Enum):
    PRESERVE_TEMPLATE = "preserve_template"
    EMBED_CUSTOM_FONT = "embed_custom_font"


class LogoPlacement(str, Enum):
    FORM_FIELD_ONLY = "form_field_only"
    PAGE_DRAW_FALLBACK = "page_draw_fallback"
    BOTH = "both"


@dataclass(frozen=True)
class RenderPolicy:
    """
    Attributes:
        flatten_form: Bake fields into static content before the barcode is drawn
        font_strategy: Keep the template's field fonts, or draw bound text with
            a registered TrueType font (only possible while flattening).
            Left unset it follows flatten_form: flattened output embeds the
            font, interactive output keeps the template's fonts.
        logo_placement: Where the logo goes, see AssetEmbedder.plan
        include_qr: Also draw a QR code next to the barcode
    """
    flatten_form: bool = True
    font_strategy: Optional[FontStrategy] = None
    logo_placement: LogoPlacement = LogoPlacement.PAGE_DRAW_FALLBACK
    include_qr: bool = False

    def __post_init__(self):
        if self.font_strategy is None:
            # Standard template fonts carry no Arabic glyphs once baked into the page
            default = FontStrategy.EMBED_CUSTOM_FONT if self.flatten_form else FontStrategy.PRESERVE_TEMPLATE
            object.__setattr__(self, "font_strategy", default)
        if self.font_strategy == FontStrategy.EMBED_CUSTOM_FONT and not self.flatten_form:
            raise ValueError("EMBED_CUSTOM_FONT requires flatten_form=True")
