"""
Tests for the receipt repository and the local document store
"""
import json

import pytest
import yaml

from sanad.storage.documents import LocalDocumentStore, document_key, normalize_document_path
from sanad.storage.repository import InMemoryReceiptRepository


# ============================================================================
# TEST: DOCUMENT KEYS
# ============================================================================

class TestDocumentKeys:

    def test_key_layout(self):
        assert document_key("org-1", "REC-2024-000001", 1700000000000) == "org-1/REC-2024-000001-1700000000000.pdf"

    def test_key_defaults_to_now(self):
        key = document_key("org-1", "REC-2024-000001")
        assert key.startswith("org-1/REC-2024-000001-") and key.endswith(".pdf")

    def test_legacy_url_is_reduced_to_path(self):
        url = "https://project.supabase.co/storage/v1/object/public/receipts/org-1/REC-1-1.pdf"
        assert normalize_document_path(url) == "org-1/REC-1-1.pdf"

    def test_plain_path_unchanged(self):
        assert normalize_document_path("org-1/REC-1-1.pdf") == "org-1/REC-1-1.pdf"


# ============================================================================
# TEST: LOCAL STORE
# ============================================================================

class TestLocalDocumentStore:

    def test_save_and_load(self, tmp_path):
        store = LocalDocumentStore(str(tmp_path))

        assert store.save("org-1/a.pdf", b"%PDF-1") is True
        assert store.load("org-1/a.pdf") == b"%PDF-1"

    def test_no_overwrite_keeps_first(self, tmp_path):
        store = LocalDocumentStore(str(tmp_path))
        store.save("org-1/a.pdf", b"first")

        assert store.save("org-1/a.pdf", b"second", overwrite=False) is False
        assert store.load("org-1/a.pdf") == b"first"

    def test_overwrite_replaces(self, tmp_path):
        store = LocalDocumentStore(str(tmp_path))
        store.save("org-1/a.pdf", b"first")

        assert store.save("org-1/a.pdf", b"second", overwrite=True) is True
        assert store.load("org-1/a.pdf") == b"second"

    def test_missing_key(self, tmp_path):
        assert LocalDocumentStore(str(tmp_path)).load("org-1/none.pdf") is None

    def test_key_outside_root_rejected(self, tmp_path):
        store = LocalDocumentStore(str(tmp_path / "root"))

        with pytest.raises(ValueError):
            store.save("../escape.pdf", b"x")
        assert store.load("../escape.pdf") is None


# ============================================================================
# TEST: REPOSITORY
# ============================================================================

class TestInMemoryRepository:

    def test_receipt_is_scoped_to_organization(self, repository):
        assert repository.get_receipt("org-1", "r-1") is not None
        assert repository.get_receipt("org-2", "r-1") is None

    def test_find_by_barcode_or_number(self, repository):
        by_barcode = repository.find_by_identifier("RCP-2024-000001")
        by_number = repository.find_by_identifier("REC-2024-000001")

        assert by_barcode[0].id == by_number[0].id == "r-1"
        assert by_barcode[1].id == "org-1"
        assert repository.find_by_identifier("RCP-2099-999999") is None

    def test_set_document_path(self, repository):
        repository.set_document_path("r-1", "org-1/REC-2024-000001-1.pdf")
        assert repository.get_receipt("org-1", "r-1").pdf_url == "org-1/REC-2024-000001-1.pdf"

    def test_set_document_path_unknown_receipt(self, repository):
        with pytest.raises(KeyError):
            repository.set_document_path("missing", "x.pdf")

    @pytest.mark.parametrize("suffix,dump", [(".yaml", yaml.safe_dump), (".json", json.dumps)])
    def test_seed_from_file(self, tmp_path, suffix, dump):
        data = {
            "organizations": [{"id": "org-9", "name_ar": "مؤسسة", "name_en": "Est", "logo_url": "logo.png"}],
            "receipts": [{
                "id": "r-9", "organization_id": "org-9", "receipt_number": "PAY-2024-000009",
                "receipt_type": "payment", "amount": "75.25", "recipient_name": "Sara",
                "date": "2024-05-01", "created_at": "2024-05-01T08:00:00Z",
                "payment_method": "check", "barcode_id": "RCP-2024-000009",
            }],
        }
        path = tmp_path / f"seed{suffix}"
        path.write_text(dump(data), encoding="utf-8")

        repo = InMemoryReceiptRepository.from_file(str(path))

        receipt = repo.get_receipt("org-9", "r-9")
        assert str(receipt.amount) == "75.25"
        assert receipt.is_inbound is False
        assert repo.get_organization("org-9").has_logo
