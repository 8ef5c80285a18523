"""
Verification Lookup

Public, read-only check of a verification identifier. Only a fixed projection
of the receipt and its organization ever leaves this module.
"""
from dataclasses import asdict, dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, Optional

from sanad.common.logging_config import get_logger
from sanad.rendering.barcode import BARCODE_PREFIX, IDENTIFIER_PATTERN
from sanad.rendering.binder import RECEIPT_TYPE_LABELS
from sanad.storage.repository import ReceiptRepository

logger = get_logger(__name__)

DEFAULT_PREFIXES = (BARCODE_PREFIX, "REC", "PAY")

MESSAGES = {
    "verified": ("تم التحقق من الإيصال بنجاح", "Receipt verified successfully"),
    "not_found": ("الإيصال غير موجود أو الباركود غير صحيح", "Receipt not found or invalid barcode"),
    "invalid_format": ("صيغة الباركود غير صحيحة", "Invalid barcode format"),
    "missing": ("رقم الباركود مطلوب", "Barcode ID is required"),
}


class VerificationStatus(str, Enum):
    VERIFIED = "verified"
    NOT_FOUND = "not_found"
    INVALID_FORMAT = "invalid_format"


@dataclass(frozen=True)
class OrganizationProjection:
    name_ar: str
    name_en: str
    commercial_registration: Optional[str]
    tax_number: Optional[str]


@dataclass(frozen=True)
class ReceiptProjection:
    """The only receipt data exposed to anonymous verifiers."""
    id: str
    receipt_number: str
    receipt_type: str
    receipt_type_ar: str
    amount: Decimal
    recipient_name: str
    date: str
    created_at: str
    barcode_id: Optional[str]
    organization: OrganizationProjection

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['amount'] = float(self.amount)
        return data


@dataclass(frozen=True)
class VerificationResult:
    status: VerificationStatus
    message: str
    message_en: str
    receipt: Optional[ReceiptProjection] = None

    @property
    def valid(self) -> bool:
        return self.status == VerificationStatus.VERIFIED

    def to_dict(self) -> Dict[str, Any]:
        data = {'valid': self.valid, 'message': self.message, 'message_en': self.message_en}
        if self.receipt is not None:
            data['receipt'] = self.receipt.to_dict()
        return data


def _result(status: VerificationStatus, key: str, receipt: Optional[ReceiptProjection] = None) -> VerificationResult:
    message, message_en = MESSAGES[key]
    return VerificationResult(status=status, message=message, message_en=message_en, receipt=receipt)


def is_well_formed(candidate: Optional[str], prefixes: Iterable[str] = DEFAULT_PREFIXES) -> bool:
    if not candidate or not IDENTIFIER_PATTERN.match(candidate):
        return False
    return candidate[:3] in set(prefixes)


def verify_identifier(
    candidate: Optional[str],
    repository: ReceiptRepository,
    prefixes: Iterable[str] = DEFAULT_PREFIXES,
) -> VerificationResult:
    """
    Looks up a receipt by barcode id or receipt number.

    Args:
        candidate: Identifier as typed or scanned
        repository: Read access to receipts and organizations
        prefixes: Accepted identifier prefixes (barcode and receipt-number)

    Returns:
        VerificationResult: VERIFIED with a projection, NOT_FOUND, or
        INVALID_FORMAT for anything not shaped like PREFIX-YYYY-NNNNNN
    """
    candidate = (candidate or "").strip()
    if not candidate:
        return _result(VerificationStatus.INVALID_FORMAT, "missing")
    if not is_well_formed(candidate, prefixes):
        logger.info("Verification rejected: malformed identifier", candidate=candidate[:40])
        return _result(VerificationStatus.INVALID_FORMAT, "invalid_format")

    found = repository.find_by_identifier(candidate)
    if found is None:
        logger.info("Verification failed: not found", candidate=candidate)
        return _result(VerificationStatus.NOT_FOUND, "not_found")

    receipt, organization = found
    projection = ReceiptProjection(
        id=receipt.id,
        receipt_number=receipt.receipt_number,
        receipt_type=receipt.receipt_type.value,
        receipt_type_ar=RECEIPT_TYPE_LABELS[receipt.receipt_type],
        amount=receipt.amount,
        recipient_name=receipt.recipient_name,
        date=receipt.date.isoformat(),
        created_at=receipt.created_at.isoformat(),
        barcode_id=receipt.barcode_id,
        organization=OrganizationProjection(
            name_ar=organization.name_ar,
            name_en=organization.name_en,
            commercial_registration=organization.commercial_registration,
            tax_number=organization.tax_number,
        ),
    )
    logger.info("Receipt verified", receipt_number=receipt.receipt_number)
    return _result(VerificationStatus.VERIFIED, "verified", projection)
