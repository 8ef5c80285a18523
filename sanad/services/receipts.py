"""
Receipt Document Service

Ties the repository, the document store and the compositor together for the
two authenticated document flows: idempotent retrieval and forced regeneration.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from sanad.common.exceptions import DocumentStorageError, MissingLogoError, RecordNotFoundError
from sanad.common.logging_config import get_logger
from sanad.common.models import OrganizationRecord, TransactionRecord
from sanad.rendering.compositor import VoucherCompositor
from sanad.rendering.policy import RenderPolicy
from sanad.storage.documents import DocumentStore, document_key, normalize_document_path
from sanad.storage.repository import ReceiptRepository

logger = get_logger(__name__)


@dataclass
class ReceiptDocument:
    """
    Attributes:
        data: PDF bytes
        filename: Download name (<receipt number>.pdf)
        path: Storage key the document lives under, None when it was not stored
        cached: True when the bytes came from the store instead of a new render
    """
    data: bytes
    filename: str
    path: Optional[str]
    cached: bool = False


class ReceiptDocumentService:
    def __init__(
        self,
        repository: ReceiptRepository,
        store: DocumentStore,
        compositor: VoucherCompositor,
        policy: Optional[RenderPolicy] = None,
    ):
        self.repository = repository
        self.store = store
        self.compositor = compositor
        self.policy = policy

    def _records(self, organization_id: str, receipt_id: str) -> Tuple[TransactionRecord, OrganizationRecord]:
        receipt = self.repository.get_receipt(organization_id, receipt_id)
        if receipt is None:
            raise RecordNotFoundError("receipt", receipt_id)
        organization = self.repository.get_organization(organization_id)
        if organization is None:
            raise RecordNotFoundError("organization", organization_id)
        return receipt, organization

    def _render(self, receipt: TransactionRecord, organization: OrganizationRecord) -> bytes:
        if not organization.has_logo:
            logger.warning("Voucher requested before logo upload", organization_id=organization.id)
            raise MissingLogoError(organization.id)
        return self.compositor.render(receipt, organization, self.policy)

    def _cached(self, receipt: TransactionRecord) -> Optional[bytes]:
        if not receipt.pdf_url:
            return None
        path = normalize_document_path(receipt.pdf_url)
        data = self.store.load(path)
        if data is None:
            logger.info("Stored document pointer does not resolve, rendering again",
                        receipt_number=receipt.receipt_number, path=path)
        return data

    def get_document(self, organization_id: str, receipt_id: str) -> ReceiptDocument:
        """
        Returns the stored voucher, rendering and storing it on first access.

        A failed store is logged and the freshly rendered bytes are still
        returned; the receipt pointer is only updated after a successful store.
        """
        receipt, organization = self._records(organization_id, receipt_id)
        filename = f"{receipt.receipt_number}.pdf"

        cached = self._cached(receipt)
        if cached is not None:
            logger.info("Serving stored voucher", receipt_number=receipt.receipt_number)
            return ReceiptDocument(data=cached, filename=filename,
                                   path=normalize_document_path(receipt.pdf_url), cached=True)

        data = self._render(receipt, organization)
        key = document_key(organization_id, receipt.receipt_number)
        try:
            stored = self.store.save(key, data, overwrite=False)
        except (OSError, ValueError) as e:
            logger.error(f"Storing voucher failed: {e}", receipt_number=receipt.receipt_number, key=key)
            stored = False

        if not stored:
            return ReceiptDocument(data=data, filename=filename, path=None)

        self.repository.set_document_path(receipt.id, key)
        return ReceiptDocument(data=data, filename=filename, path=key)

    def regenerate_document(self, organization_id: str, receipt_id: str) -> ReceiptDocument:
        """
        Renders the voucher again and replaces the stored copy.

        Raises:
            RecordNotFoundError: unknown receipt or organization
            MissingLogoError: organization has no logo yet
            DocumentStorageError: the new document could not be stored
        """
        receipt, organization = self._records(organization_id, receipt_id)
        logger.info("Regenerating voucher", receipt_number=receipt.receipt_number,
                    payment_method=receipt.payment_method)

        data = self._render(receipt, organization)
        key = document_key(organization_id, receipt.receipt_number)
        try:
            self.store.save(key, data, overwrite=True)
        except (OSError, ValueError) as e:
            logger.error(f"Storing voucher failed: {e}", receipt_number=receipt.receipt_number, key=key)
            raise DocumentStorageError(f"Could not store voucher: {e}") from e

        try:
            self.repository.set_document_path(receipt.id, key)
        except KeyError:
            logger.warning("Receipt disappeared before pointer update", receipt_id=receipt.id)
        return ReceiptDocument(data=data, filename=f"{receipt.receipt_number}.pdf", path=key)
