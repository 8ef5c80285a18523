from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional

LOGO_PLACEHOLDER = "PLACEHOLDER_LOGO_REQUIRED"


class ReceiptType(str, Enum):
    RECEIPT = "receipt"   # money in
    PAYMENT = "payment"   # money out


class PaymentMethod(str, Enum):
    CASH = "cash"
    CHEQUE = "check"
    BANK_TRANSFER = "bank_transfer"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["PaymentMethod"]:
        """
        Map a stored payment method to the enum.

        Returns None for values this system does not know; callers decide
        how to treat them (the binder passes them through, visibility treats
        them as cash).
        """
        if value is None:
            return None
        key = str(value).strip().lower()
        aliases = {
            "cash": cls.CASH,
            "check": cls.CHEQUE,
            "cheque": cls.CHEQUE,
            "bank_transfer": cls.BANK_TRANSFER,
            "bank-transfer": cls.BANK_TRANSFER,
            "transfer": cls.BANK_TRANSFER,
        }
        return aliases.get(key)


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    try:
        # str() first so floats like 0.1 keep their printed value
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid monetary amount: {value!r}")


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


@dataclass
class TransactionRecord:
    """
    One receipt (money in) or payment (money out) voucher, as persisted.

    The total is never stored here: ``total_amount`` is always
    ``amount + (vat_amount or 0)``.
    """
    id: str
    organization_id: str
    receipt_number: str
    receipt_type: ReceiptType
    amount: Decimal
    recipient_name: str
    date: date
    created_at: datetime
    description: Optional[str] = None
    payment_method: Optional[str] = None  # raw stored value, see PaymentMethod.parse
    national_id_from: Optional[str] = None
    national_id_to: Optional[str] = None
    bank_name: Optional[str] = None
    cheque_number: Optional[str] = None
    transfer_number: Optional[str] = None
    vat_amount: Optional[Decimal] = None
    barcode_id: Optional[str] = None
    pdf_url: Optional[str] = None
    created_by: Optional[str] = None

    @property
    def total_amount(self) -> Decimal:
        return self.amount + (self.vat_amount or Decimal("0"))

    @property
    def is_inbound(self) -> bool:
        return self.receipt_type == ReceiptType.RECEIPT

    @property
    def method(self) -> Optional[PaymentMethod]:
        return PaymentMethod.parse(self.payment_method)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransactionRecord":
        return cls(
            id=str(data['id']),
            organization_id=str(data['organization_id']),
            receipt_number=data['receipt_number'],
            receipt_type=ReceiptType(data.get('receipt_type', 'receipt')),
            amount=_to_decimal(data['amount']),
            recipient_name=data.get('recipient_name') or '',
            date=_to_date(data['date']),
            created_at=_to_datetime(data['created_at']),
            description=data.get('description'),
            payment_method=data.get('payment_method'),
            national_id_from=data.get('national_id_from'),
            national_id_to=data.get('national_id_to'),
            bank_name=data.get('bank_name'),
            cheque_number=data.get('cheque_number'),
            transfer_number=data.get('transfer_number'),
            vat_amount=_to_decimal(data.get('vat_amount')),
            barcode_id=data.get('barcode_id'),
            pdf_url=data.get('pdf_url'),
            created_by=data.get('created_by'),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'organization_id': self.organization_id,
            'receipt_number': self.receipt_number,
            'receipt_type': self.receipt_type.value,
            'amount': str(self.amount),
            'recipient_name': self.recipient_name,
            'date': self.date.isoformat(),
            'created_at': self.created_at.isoformat(),
            'description': self.description,
            'payment_method': self.payment_method,
            'national_id_from': self.national_id_from,
            'national_id_to': self.national_id_to,
            'bank_name': self.bank_name,
            'cheque_number': self.cheque_number,
            'transfer_number': self.transfer_number,
            'vat_amount': str(self.vat_amount) if self.vat_amount is not None else None,
            'total_amount': str(self.total_amount),
            'barcode_id': self.barcode_id,
            'pdf_url': self.pdf_url,
            'created_by': self.created_by,
        }


@dataclass
class OrganizationRecord:
    """
    A tenant issuing vouchers.

    Attributes:
        entity_type: 'company', 'establishment', 'office' or 'other'
        logo_url: Required before rendering; see ``has_logo``
        stamp_url: Optional stamp image drawn on every voucher
    """
    id: str
    name_ar: str
    name_en: str
    entity_type: str = "company"
    commercial_registration: Optional[str] = None
    tax_number: Optional[str] = None
    address: str = ""
    phone: str = ""
    email: str = ""
    description: Optional[str] = None
    logo_url: Optional[str] = None
    stamp_url: Optional[str] = None

    @property
    def has_logo(self) -> bool:
        return bool(self.logo_url and self.logo_url.strip() and self.logo_url != LOGO_PLACEHOLDER)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrganizationRecord":
        return cls(
            id=str(data['id']),
            name_ar=data.get('name_ar') or '',
            name_en=data.get('name_en') or '',
            entity_type=data.get('entity_type') or 'company',
            commercial_registration=data.get('commercial_registration'),
            tax_number=data.get('tax_number'),
            address=data.get('address') or '',
            phone=data.get('phone') or '',
            email=data.get('email') or '',
            description=data.get('description'),
            logo_url=data.get('logo_url'),
            stamp_url=data.get('stamp_url'),
        )
