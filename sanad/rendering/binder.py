"""
Field Value Binder

Maps a transaction record and its organization onto template field names and
display strings. Text is used as stored: no Arabic reshaping and no bidi
reversal; the viewer (or the embedding font engine) lays out right-to-left text.
The only text transform applied is Eastern Arabic-Indic to Western digits.
"""
from datetime import datetime, tzinfo
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional

from sanad.common.models import OrganizationRecord, PaymentMethod, ReceiptType, TransactionRecord
from . import fields as f

RECEIPT_TYPE_LABELS = {
    ReceiptType.RECEIPT: "سند قبض",
    ReceiptType.PAYMENT: "سند صرف",
}

PAYMENT_METHOD_LABELS = {
    PaymentMethod.CASH: "نقداً",
    PaymentMethod.CHEQUE: "شيك",
    PaymentMethod.BANK_TRANSFER: "حوالة بنكية",
}

_DIGITS = str.maketrans(
    "٠١٢٣٤٥٦٧٨٩۰۱۲۳۴۵۶۷۸۹",
    "01234567890123456789",
)

_TWO_PLACES = Decimal("0.01")


def normalize_digits(text: Optional[str]) -> str:
    """Replaces Arabic-Indic digits with Western digits. None becomes ''."""
    if text is None:
        return ""
    return str(text).translate(_DIGITS)


def format_money(value: Optional[Decimal]) -> str:
    """Fixed point, exactly two decimals, no grouping: 1150 -> '1150.00'."""
    amount = Decimal(value or 0).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    return f"{amount:.2f}"


def format_date(value) -> str:
    return value.strftime("%d-%m-%Y")


def format_time(value: datetime, tz: Optional[tzinfo] = None) -> str:
    if tz is not None and value.tzinfo is not None:
        value = value.astimezone(tz)
    return value.strftime("%H:%M")


def payment_method_label(raw: Optional[str]) -> str:
    """
    Display label for a stored payment method.

    Empty means cash. Unknown values pass through unchanged.
    """
    if raw is None or not str(raw).strip():
        return PAYMENT_METHOD_LABELS[PaymentMethod.CASH]
    method = PaymentMethod.parse(raw)
    if method is None:
        return str(raw)
    return PAYMENT_METHOD_LABELS[method]


# --- Amount in words (Arabic) ---

_ONES = ["", "واحد", "اثنان", "ثلاثة", "أربعة", "خمسة", "ستة", "سبعة", "ثمانية", "تسعة"]
_TENS = ["", "", "عشرون", "ثلاثون", "أربعون", "خمسون", "ستون", "سبعون", "ثمانون", "تسعون"]
_TEENS = ["عشرة", "أحد عشر", "اثنا عشر", "ثلاثة عشر", "أربعة عشر",
          "خمسة عشر", "ستة عشر", "سبعة عشر", "ثمانية عشر", "تسعة عشر"]
_HUNDREDS = ["", "مائة", "مائتان", "ثلاثمائة", "أربعمائة", "خمسمائة",
             "ستمائة", "سبعمائة", "ثمانمائة", "تسعمائة"]
_SCALES = ["", "ألف", "مليون", "مليار", "تريليون"]
_AND = " و "


def _below_thousand(n: int) -> str:
    parts = []
    if n // 100:
        parts.append(_HUNDREDS[n // 100])
    rest = n % 100
    if 10 <= rest <= 19:
        parts.append(_TEENS[rest - 10])
    else:
        if rest // 10:
            parts.append(_TENS[rest // 10])
        if rest % 10:
            parts.append(_ONES[rest % 10])
    return _AND.join(p for p in parts if p)


def _whole_number_words(n: int) -> str:
    if n == 0:
        return "صفر"
    parts = []
    scale = 0
    while n > 0:
        chunk = n % 1000
        if chunk:
            words = _below_thousand(chunk)
            if scale == 0:
                parts.insert(0, words)
            elif scale == 1:
                if chunk == 1:
                    parts.insert(0, "ألف")
                elif chunk == 2:
                    parts.insert(0, "ألفان")
                elif chunk <= 10:
                    parts.insert(0, f"{words} آلاف")
                else:
                    parts.insert(0, f"{words} ألف")
            else:
                parts.insert(0, f"{words} {_SCALES[scale]}")
        n //= 1000
        scale += 1
    return _AND.join(parts)


def amount_in_words(value: Decimal) -> str:
    """
    Spells a riyal amount in Arabic, halalas included.

    >>> amount_in_words(Decimal("0"))
    'صفر ريال'
    """
    amount = Decimal(value).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    if amount == 0:
        return "صفر ريال"
    whole = int(amount)
    halalas = int((amount - whole) * 100)
    result = f"{_whole_number_words(whole)} ريال"
    if halalas:
        result += f"{_AND}{_whole_number_words(halalas)} هللة"
    return f"{result} فقط لا غير"


def bind_fields(
    receipt: TransactionRecord,
    organization: OrganizationRecord,
    tz: Optional[tzinfo] = None,
) -> Dict[str, str]:
    """
    Builds the field name -> display text mapping for one voucher.

    Conditional (cheque / transfer) fields are bound from the record as-is;
    the visibility engine clears whichever group the payment method hides.

    Args:
        receipt: The voucher being rendered
        organization: Its issuing organization
        tz: Optional display time zone for the creation time

    Returns:
        Dict mapping template field names to strings
    """
    values = {
        f.NAME_OF_COMPANY: organization.name_ar,
        f.COMPANY_DESCRIPTION: organization.description,
        f.ADDRESS: organization.address,
        f.PHONE: organization.phone,
        f.VAT_NUM_RIGHT: organization.tax_number,
        f.VAT_NUM_LEFT: organization.tax_number,
        f.CR_NUM_RIGHT: organization.commercial_registration,
        f.CR_NUM_LEFT: organization.commercial_registration,
        f.SANAAD_ID: receipt.receipt_number,
        f.SANAAD_DATE: format_date(receipt.date),
        f.SANAAD_TIME: format_time(receipt.created_at, tz),
        f.TYPE_OF_DOC: RECEIPT_TYPE_LABELS[receipt.receipt_type],
        f.PAYMENT_METHODE: payment_method_label(receipt.payment_method),
        f.PURPOSE: receipt.description,
        f.AMOUNT_WITHOUT_VAT: format_money(receipt.amount),
        f.VAT: format_money(receipt.vat_amount),
        f.TOTAL: format_money(receipt.total_amount),
        f.AMOUNT_WITH_VAT: format_money(receipt.total_amount),
        f.AMOUNT_IN_WORDS: amount_in_words(receipt.total_amount),
        f.NATIONAL_ID_FROM: receipt.national_id_from,
        f.NATIONAL_ID_TO: receipt.national_id_to,
        f.BANK_NAME_BANK: receipt.bank_name,
        f.CHEQUE_NUMBER: receipt.cheque_number,
        f.BANK_NAME_TRANSFER: receipt.bank_name,
        f.TRANSFER_NUMBER: receipt.transfer_number,
    }

    # Inbound: counterparty pays the organization. Outbound: the reverse.
    if receipt.is_inbound:
        values[f.FROM_NAME] = receipt.recipient_name
        values[f.TO_NAME] = organization.name_ar
    else:
        values[f.FROM_NAME] = organization.name_ar
        values[f.TO_NAME] = receipt.recipient_name

    return {name: normalize_digits(value) for name, value in values.items()}
