"""
Template Field Registry

Names of the fillable fields on the voucher template and a registry of the
widgets found in a loaded template (name, page, rectangle, flags).
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from pypdf import PdfReader

# Header / organization
NAME_OF_COMPANY = "Name_Of_Company"
COMPANY_DESCRIPTION = "Company_description"
TYPE_OF_DOC = "Type_Of_Doc"
VAT_NUM_RIGHT = "VAT_Num_Right"
VAT_NUM_LEFT = "VAT_Num_Left"
CR_NUM_RIGHT = "CR_Num_Right"
CR_NUM_LEFT = "CR_Num_Left"
ADDRESS = "Address"
PHONE = "Phone"

# Voucher identity
SANAAD_ID = "Sanaad_Id"
SANAAD_DATE = "Sanaad_Date"
SANAAD_TIME = "Sanaad_Time"
PAYMENT_METHODE = "Payment_Methode"

# Parties
FROM_NAME = "From_Name"
TO_NAME = "To_Name"
NATIONAL_ID_FROM = "National_Id_From"
NATIONAL_ID_TO = "National_Id_To"

# Amounts
PURPOSE = "Purpose"
AMOUNT_WITHOUT_VAT = "Amount_Without_VAT"
VAT = "VAT"
TOTAL = "Total"
AMOUNT_WITH_VAT = "Amount_With_VAT"
AMOUNT_IN_WORDS = "Amount_In_Words"

# Cheque group
BANK_NAME_BANK = "Bank_Name_Bank"
BANK_NAME_LABEL = "Bank_Name_Label"
CHEQUE_NUMBER = "Cheque_Number"
CHEQUE_NUMBER_LABEL = "Cheque_Number_Label"

# Transfer group
BANK_NAME_TRANSFER = "Bank_Name_Transfer"
BANK_NAME_TRANS_LABEL = "Bank_Name_Trans_Label"
TRANSFER_NUMBER = "Transfer_Number"
TRANSFER_NUMBER_LABEL = "Transfer_Number_Label"

# Images
LOGO_IMAGE = "Logo_af_image"
STAMP_IMAGE = "Stamp_af_image"

CHEQUE_GROUP: Tuple[str, ...] = (BANK_NAME_BANK, BANK_NAME_LABEL, CHEQUE_NUMBER, CHEQUE_NUMBER_LABEL)
TRANSFER_GROUP: Tuple[str, ...] = (BANK_NAME_TRANSFER, BANK_NAME_TRANS_LABEL, TRANSFER_NUMBER, TRANSFER_NUMBER_LABEL)
IMAGE_FIELDS: Tuple[str, ...] = (LOGO_IMAGE, STAMP_IMAGE)

# Every field a usable template must carry. Image fields are optional because
# the asset embedder can draw at a fixed position instead.
REQUIRED_FIELDS: Tuple[str, ...] = (
    NAME_OF_COMPANY, COMPANY_DESCRIPTION, TYPE_OF_DOC,
    VAT_NUM_RIGHT, VAT_NUM_LEFT, CR_NUM_RIGHT, CR_NUM_LEFT,
    SANAAD_ID, SANAAD_DATE, SANAAD_TIME, PAYMENT_METHODE,
    FROM_NAME, TO_NAME, NATIONAL_ID_FROM, NATIONAL_ID_TO,
    PURPOSE, AMOUNT_WITHOUT_VAT, VAT, TOTAL, AMOUNT_WITH_VAT,
    ADDRESS, PHONE,
) + CHEQUE_GROUP + TRANSFER_GROUP

ALL_FIELDS: Tuple[str, ...] = REQUIRED_FIELDS + IMAGE_FIELDS + (AMOUNT_IN_WORDS,)


def annotation_field_name(annotation) -> Optional[str]:
    """
    Fully qualified field name of a widget annotation.

    Widgets either carry /T themselves (merged field/widget) or hang under a
    parent field as /Kids; partial names are joined with dots.
    """
    parts = []
    node = annotation
    while node is not None:
        if "/T" in node:
            parts.append(str(node["/T"]))
        parent = node.get("/Parent")
        node = parent.get_object() if parent is not None else None
    if not parts:
        return None
    return ".".join(reversed(parts))


@dataclass(frozen=True)
class FieldWidget:
    """
    One widget (visible box) of a form field.

    Attributes:
        name: Fully qualified field name
        page_index: 0-based page the widget sits on
        rect: (x0, y0, x1, y1) in PDF user space, normalized
        field_type: '/Tx', '/Btn', ... or None when not declared
        flags: Annotation flags (/F)
    """
    name: str
    page_index: int
    rect: Tuple[float, float, float, float]
    field_type: Optional[str] = None
    flags: int = 0

    @property
    def width(self) -> float:
        return self.rect[2] - self.rect[0]

    @property
    def height(self) -> float:
        return self.rect[3] - self.rect[1]


class TemplateFieldRegistry:
    """
    Registry of the form widgets found in a voucher template.
    """

    def __init__(self, widgets: Iterable[FieldWidget]):
        self._widgets: Dict[str, List[FieldWidget]] = {}
        for widget in widgets:
            self._widgets.setdefault(widget.name, []).append(widget)

    @classmethod
    def from_reader(cls, reader: PdfReader) -> "TemplateFieldRegistry":
        """Scans every page's /Annots for widget annotations."""
        widgets = []
        for page_index, page in enumerate(reader.pages):
            for ref in page.get("/Annots") or []:
                annot = ref.get_object()
                if annot.get("/Subtype") != "/Widget":
                    continue
                name = annotation_field_name(annot)
                if not name:
                    continue
                x0, y0, x1, y1 = [float(v) for v in annot.get("/Rect", [0, 0, 0, 0])]
                field_type = annot.get("/FT")
                if field_type is None and annot.get("/Parent") is not None:
                    field_type = annot["/Parent"].get_object().get("/FT")
                widgets.append(FieldWidget(
                    name=name,
                    page_index=page_index,
                    rect=(min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1)),
                    field_type=str(field_type) if field_type is not None else None,
                    flags=int(annot.get("/F", 0)),
                ))
        return cls(widgets)

    def __contains__(self, name: str) -> bool:
        return name in self._widgets

    def names(self) -> List[str]:
        return list(self._widgets)

    def widgets(self, name: str) -> List[FieldWidget]:
        return list(self._widgets.get(name, []))

    def first_widget(self, name: str) -> Optional[FieldWidget]:
        found = self._widgets.get(name)
        return found[0] if found else None

    def missing(self, required: Iterable[str] = REQUIRED_FIELDS) -> List[str]:
        """Required names the template does not carry, in declaration order."""
        return [name for name in required if name not in self._widgets]
