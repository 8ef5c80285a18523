"""
Tests for the public verification lookup
"""
from unittest.mock import Mock

import pytest

from sanad.storage.repository import InMemoryReceiptRepository
from sanad.verification.lookup import VerificationStatus, is_well_formed, verify_identifier


class TestVerifyIdentifier:

    def test_verified_by_barcode_id(self, repository):
        result = verify_identifier("RCP-2024-000001", repository)

        assert result.status == VerificationStatus.VERIFIED
        assert result.valid
        assert result.message_en == "Receipt verified successfully"
        assert result.receipt.receipt_number == "REC-2024-000001"

    def test_verified_by_receipt_number(self, repository):
        result = verify_identifier("REC-2024-000001", repository)
        assert result.valid

    def test_surrounding_whitespace_ignored(self, repository):
        assert verify_identifier("  RCP-2024-000001\n", repository).valid

    def test_not_found(self, repository):
        result = verify_identifier("RCP-2099-999999", repository)

        assert result.status == VerificationStatus.NOT_FOUND
        assert not result.valid
        assert result.message == "الإيصال غير موجود أو الباركود غير صحيح"
        assert result.receipt is None

    @pytest.mark.parametrize("candidate", ["not-a-code", "RCP-24-42", "XYZ-2024-000042"])
    def test_malformed_is_distinct_from_not_found(self, candidate):
        repository = Mock()

        result = verify_identifier(candidate, repository)

        assert result.status == VerificationStatus.INVALID_FORMAT
        repository.find_by_identifier.assert_not_called()

    @pytest.mark.parametrize("candidate", ["", None, "   "])
    def test_missing_identifier(self, candidate):
        result = verify_identifier(candidate, InMemoryReceiptRepository())

        assert result.status == VerificationStatus.INVALID_FORMAT
        assert result.message_en == "Barcode ID is required"

    def test_lookup_is_idempotent_and_read_only(self, repository):
        before = repository.get_receipt("org-1", "r-1").to_dict()

        first = verify_identifier("RCP-2024-000001", repository).to_dict()
        second = verify_identifier("RCP-2024-000001", repository).to_dict()

        assert first == second
        assert repository.get_receipt("org-1", "r-1").to_dict() == before

    def test_custom_prefixes(self, repository):
        assert is_well_formed("INV-2024-000001", prefixes=("INV",))
        assert not is_well_formed("RCP-2024-000001", prefixes=("INV",))


class TestProjection:

    def test_projection_has_only_public_fields(self, repository):
        data = verify_identifier("RCP-2024-000001", repository).to_dict()

        assert set(data) == {"valid", "message", "message_en", "receipt"}
        assert set(data["receipt"]) == {
            "id", "receipt_number", "receipt_type", "receipt_type_ar", "amount",
            "recipient_name", "date", "created_at", "barcode_id", "organization",
        }
        assert set(data["receipt"]["organization"]) == {
            "name_ar", "name_en", "commercial_registration", "tax_number",
        }

    def test_projection_values(self, repository):
        receipt = verify_identifier("RCP-2024-000001", repository).to_dict()["receipt"]

        assert receipt["amount"] == 1000.0
        assert receipt["receipt_type"] == "receipt"
        assert receipt["receipt_type_ar"] == "سند قبض"
        assert receipt["date"] == "2024-03-15"
        assert receipt["organization"]["tax_number"] == "300012345600003"

    def test_failure_has_no_receipt_key(self, repository):
        assert "receipt" not in verify_identifier("RCP-2099-999999", repository).to_dict()
