"""
Shared fixtures: a freshly built voucher template, sample organization and
receipts, and a compositor wired to local files only.
"""
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from PIL import Image

from sanad.common.models import OrganizationRecord, ReceiptType, TransactionRecord
from sanad.rendering.assets import AssetEmbedder, AssetFetcher
from sanad.rendering.barcode import BarcodeGenerator
from sanad.rendering.compositor import DEFAULT_FONT_PATH, TemplateSource, VoucherCompositor
from sanad.rendering.template_builder import build_template
from sanad.storage.repository import InMemoryReceiptRepository


# ============================================================================
# FILES
# ============================================================================

@pytest.fixture(scope="session")
def template_path(tmp_path_factory):
    """Default voucher template written once per test session."""
    path = tmp_path_factory.mktemp("templates") / "voucher.pdf"
    build_template(str(path))
    return str(path)


@pytest.fixture
def logo_path(tmp_path):
    path = tmp_path / "logo.png"
    Image.new("RGBA", (200, 120), (20, 90, 160, 255)).save(path, format="PNG")
    return str(path)


@pytest.fixture
def stamp_path(tmp_path):
    path = tmp_path / "stamp.jpg"
    Image.new("RGB", (120, 120), (160, 20, 20)).save(path, format="JPEG")
    return str(path)


@pytest.fixture(scope="session")
def font_path():
    """Bundled TrueType font with Arabic coverage."""
    return DEFAULT_FONT_PATH


# ============================================================================
# RECORDS
# ============================================================================

@pytest.fixture
def organization(logo_path):
    return OrganizationRecord(
        id="org-1",
        name_ar="شركة الاختبار",
        name_en="Test Co.",
        commercial_registration="1010123456",
        tax_number="300012345600003",
        address="Riyadh",
        phone="0110000000",
        description="General trading",
        logo_url=logo_path,
    )


def make_receipt(**overrides) -> TransactionRecord:
    data = dict(
        id="r-1",
        organization_id="org-1",
        receipt_number="REC-2024-000001",
        receipt_type=ReceiptType.RECEIPT,
        amount=Decimal("1000"),
        vat_amount=Decimal("150"),
        recipient_name="Ahmed",
        date=date(2024, 3, 15),
        created_at=datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc),
        description="Advance payment",
        payment_method="cash",
        barcode_id="RCP-2024-000001",
    )
    data.update(overrides)
    return TransactionRecord(**data)


@pytest.fixture
def receipt():
    return make_receipt()


@pytest.fixture
def repository(organization, receipt):
    repo = InMemoryReceiptRepository()
    repo.add_organization(organization)
    repo.add_receipt(receipt)
    return repo


# ============================================================================
# RENDERING
# ============================================================================

@pytest.fixture
def compositor(template_path):
    return VoucherCompositor(
        template=TemplateSource(template_path),
        assets=AssetEmbedder(AssetFetcher(timeout=2)),
        barcodes=BarcodeGenerator(),
    )


@pytest.fixture
def receipt_factory():
    """Builds receipts from the sample defaults plus overrides."""
    return make_receipt
