"""
Voucher rendering: fill the fillable template, toggle payment-method field
groups, embed logo/stamp images and stamp a verification barcode.
"""
from .barcode import BarcodeGenerator, BarcodeOptions, generate_barcode_id, is_valid_barcode_id
from .compositor import BarcodeLayout, TemplateSource, VoucherCompositor
from .policy import FontStrategy, LogoPlacement, RenderPolicy

__all__ = [
    'BarcodeGenerator',
    'BarcodeOptions',
    'BarcodeLayout',
    'FontStrategy',
    'LogoPlacement',
    'RenderPolicy',
    'TemplateSource',
    'VoucherCompositor',
    'generate_barcode_id',
    'is_valid_barcode_id',
]
