"""
Tests for ReceiptDocumentService (retrieval and regeneration flows)

The compositor is mocked; rendering itself is covered in test_compositor.
"""
from unittest.mock import Mock

import pytest

from sanad.common.exceptions import DocumentStorageError, MissingLogoError, RecordNotFoundError
from sanad.common.models import LOGO_PLACEHOLDER
from sanad.rendering.compositor import VoucherCompositor
from sanad.services.receipts import ReceiptDocumentService
from sanad.storage.documents import LocalDocumentStore


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def mock_compositor():
    compositor = Mock(spec=VoucherCompositor)
    compositor.render.return_value = b"%PDF-rendered"
    return compositor


@pytest.fixture
def store(tmp_path):
    return LocalDocumentStore(str(tmp_path / "receipts"))


@pytest.fixture
def service(repository, store, mock_compositor):
    return ReceiptDocumentService(repository, store, mock_compositor)


# ============================================================================
# TEST: GET (CACHED) FLOW
# ============================================================================

class TestGetDocument:

    def test_first_access_renders_stores_and_points(self, service, repository, store, mock_compositor):
        document = service.get_document("org-1", "r-1")

        assert document.data == b"%PDF-rendered"
        assert document.cached is False
        assert document.filename == "REC-2024-000001.pdf"
        assert document.path.startswith("org-1/REC-2024-000001-")
        assert repository.get_receipt("org-1", "r-1").pdf_url == document.path
        assert store.load(document.path) == b"%PDF-rendered"
        mock_compositor.render.assert_called_once()

    def test_second_access_serves_stored_copy(self, service, mock_compositor):
        first = service.get_document("org-1", "r-1")
        second = service.get_document("org-1", "r-1")

        assert second.cached is True
        assert second.data == first.data
        assert mock_compositor.render.call_count == 1

    def test_legacy_url_pointer_resolves(self, service, repository, store, mock_compositor):
        store.save("org-1/old.pdf", b"%PDF-old")
        repository.set_document_path(
            "r-1", "https://project.supabase.co/storage/v1/object/public/receipts/org-1/old.pdf")

        document = service.get_document("org-1", "r-1")

        assert document.data == b"%PDF-old"
        mock_compositor.render.assert_not_called()

    def test_dangling_pointer_renders_again(self, service, repository, mock_compositor):
        repository.set_document_path("r-1", "org-1/gone.pdf")

        document = service.get_document("org-1", "r-1")

        assert document.cached is False
        mock_compositor.render.assert_called_once()

    def test_store_failure_still_returns_pdf(self, repository, mock_compositor):
        store = Mock()
        store.save.side_effect = OSError("disk full")
        service = ReceiptDocumentService(repository, store, mock_compositor)

        document = service.get_document("org-1", "r-1")

        assert document.data == b"%PDF-rendered"
        assert document.path is None
        assert repository.get_receipt("org-1", "r-1").pdf_url is None

    def test_key_collision_leaves_pointer_untouched(self, repository, mock_compositor):
        store = Mock()
        store.save.return_value = False
        service = ReceiptDocumentService(repository, store, mock_compositor)

        service.get_document("org-1", "r-1")

        store.save.assert_called_once()
        assert store.save.call_args.kwargs["overwrite"] is False
        assert repository.get_receipt("org-1", "r-1").pdf_url is None


# ============================================================================
# TEST: REGENERATE FLOW
# ============================================================================

class TestRegenerateDocument:

    def test_regenerate_always_renders(self, service, mock_compositor):
        service.get_document("org-1", "r-1")
        document = service.regenerate_document("org-1", "r-1")

        assert document.cached is False
        assert mock_compositor.render.call_count == 2

    def test_regenerate_overwrites(self, repository, mock_compositor):
        store = Mock()
        service = ReceiptDocumentService(repository, store, mock_compositor)

        document = service.regenerate_document("org-1", "r-1")

        assert store.save.call_args.kwargs["overwrite"] is True
        assert repository.get_receipt("org-1", "r-1").pdf_url == document.path

    def test_store_failure_is_an_error(self, repository, mock_compositor):
        store = Mock()
        store.save.side_effect = OSError("bucket unavailable")
        service = ReceiptDocumentService(repository, store, mock_compositor)

        with pytest.raises(DocumentStorageError) as exc:
            service.regenerate_document("org-1", "r-1")
        assert exc.value.step == "upload"
        assert repository.get_receipt("org-1", "r-1").pdf_url is None


# ============================================================================
# TEST: PRECONDITIONS
# ============================================================================

class TestPreconditions:

    def test_unknown_receipt(self, service):
        with pytest.raises(RecordNotFoundError) as exc:
            service.get_document("org-1", "missing")
        assert exc.value.kind == "receipt"

    def test_foreign_organization_cannot_read(self, service):
        with pytest.raises(RecordNotFoundError):
            service.regenerate_document("org-2", "r-1")

    def test_missing_logo_checked_before_render(self, service, organization, mock_compositor):
        organization.logo_url = LOGO_PLACEHOLDER

        with pytest.raises(MissingLogoError):
            service.regenerate_document("org-1", "r-1")
        mock_compositor.render.assert_not_called()
