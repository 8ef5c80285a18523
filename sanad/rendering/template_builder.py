"""
Builds the default fillable voucher template with reportlab's AcroForm support.

    python -m sanad.rendering.template_builder assets/templates/voucher.pdf
"""
import argparse
import io
import os
from typing import Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen.canvas import Canvas

from . import fields as f

# name -> (x, y, width, height)
FIELD_BOXES = {
    f.LOGO_IMAGE: (40, 740, 110, 70),
    f.NAME_OF_COMPANY: (200, 790, 200, 20),
    f.COMPANY_DESCRIPTION: (200, 770, 200, 16),
    f.VAT_NUM_RIGHT: (420, 800, 140, 14),
    f.CR_NUM_RIGHT: (420, 784, 140, 14),
    f.TYPE_OF_DOC: (420, 756, 140, 20),
    f.VAT_NUM_LEFT: (40, 716, 140, 14),
    f.CR_NUM_LEFT: (40, 700, 140, 14),

    f.SANAAD_ID: (90, 660, 120, 18),
    f.SANAAD_DATE: (260, 660, 110, 18),
    f.SANAAD_TIME: (420, 660, 80, 18),
    f.FROM_NAME: (120, 630, 250, 18),
    f.NATIONAL_ID_FROM: (430, 630, 125, 18),
    f.TO_NAME: (120, 604, 250, 18),
    f.NATIONAL_ID_TO: (430, 604, 125, 18),
    f.PURPOSE: (120, 578, 435, 18),
    f.PAYMENT_METHODE: (120, 552, 150, 18),

    f.BANK_NAME_LABEL: (40, 526, 80, 18),
    f.BANK_NAME_BANK: (120, 526, 150, 18),
    f.CHEQUE_NUMBER_LABEL: (290, 526, 80, 18),
    f.CHEQUE_NUMBER: (370, 526, 185, 18),
    f.BANK_NAME_TRANS_LABEL: (40, 500, 80, 18),
    f.BANK_NAME_TRANSFER: (120, 500, 150, 18),
    f.TRANSFER_NUMBER_LABEL: (290, 500, 80, 18),
    f.TRANSFER_NUMBER: (370, 500, 185, 18),

    f.AMOUNT_WITHOUT_VAT: (120, 460, 110, 18),
    f.VAT: (290, 460, 90, 18),
    f.TOTAL: (440, 460, 115, 18),
    f.AMOUNT_WITH_VAT: (120, 434, 110, 18),
    f.AMOUNT_IN_WORDS: (120, 408, 435, 18),

    f.STAMP_IMAGE: (420, 150, 120, 90),
    f.ADDRESS: (90, 120, 260, 16),
    f.PHONE: (400, 120, 155, 16),
}

# Read-only fields carrying their own caption, hidden together with their group
LABEL_VALUES = {
    f.BANK_NAME_LABEL: "Bank:",
    f.CHEQUE_NUMBER_LABEL: "Cheque No.:",
    f.BANK_NAME_TRANS_LABEL: "Bank:",
    f.TRANSFER_NUMBER_LABEL: "Transfer No.:",
}

# Static captions drawn on the page: (text, x, y)
CAPTIONS = [
    ("No.", 40, 665),
    ("Date", 220, 665),
    ("Time", 385, 665),
    ("From", 40, 635),
    ("ID", 400, 635),
    ("To", 40, 609),
    ("ID", 400, 609),
    ("Purpose", 40, 583),
    ("Method", 40, 557),
    ("Amount", 40, 465),
    ("VAT", 250, 465),
    ("Total", 400, 465),
    ("With VAT", 40, 439),
    ("In words", 40, 413),
    ("Address", 40, 124),
    ("Phone", 360, 124),
]


def build_template(output: Optional[str] = None) -> bytes:
    """
    Draws the voucher template and returns its bytes.

    Args:
        output: Optional file path to also write the template to

    Returns:
        PDF bytes of a single A4 page with every voucher field
    """
    buffer = io.BytesIO()
    canvas = Canvas(buffer, pagesize=A4)
    canvas.setTitle("Voucher template")

    canvas.setStrokeColor(colors.grey)
    canvas.line(40, 690, 555, 690)
    canvas.line(40, 395, 555, 395)
    canvas.setFont("Helvetica", 9)
    for text, x, y in CAPTIONS:
        canvas.drawString(x, y, text)

    form = canvas.acroForm
    for name, (x, y, width, height) in FIELD_BOXES.items():
        is_label = name in LABEL_VALUES
        form.textfield(
            name=name,
            tooltip=name,
            value=LABEL_VALUES.get(name, ""),
            x=x, y=y, width=width, height=height,
            fontName="Helvetica",
            fontSize=9,
            borderWidth=0,
            fillColor=colors.white,
            textColor=colors.black,
            fieldFlags="readOnly" if is_label else "",
            annotationFlags="print",
            maxlen=500,
        )

    canvas.showPage()
    canvas.save()
    data = buffer.getvalue()

    if output:
        directory = os.path.dirname(output)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(output, "wb") as fh:
            fh.write(data)
    return data


def main(argv=None):
    parser = argparse.ArgumentParser(description="Write the default fillable voucher template.")
    parser.add_argument("output", help="Destination PDF path")
    args = parser.parse_args(argv)
    build_template(args.output)
    print(f"Template written to {args.output}")


if __name__ == "__main__":
    main()
