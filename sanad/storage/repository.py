"""
Receipt Repository

Boundary to the relational store that owns receipts and organizations. The
hosted database and its row-level rules live outside this package; the
in-memory implementation backs development, tests and seeded demos.
"""
import json
import threading
from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple

import yaml

from sanad.common.logging_config import get_logger
from sanad.common.models import OrganizationRecord, TransactionRecord

logger = get_logger(__name__)


class ReceiptRepository(Protocol):
    def get_receipt(self, organization_id: str, receipt_id: str) -> Optional[TransactionRecord]:
        """Receipt scoped to its organization; None when absent or foreign."""

    def get_organization(self, organization_id: str) -> Optional[OrganizationRecord]:
        ...

    def find_by_identifier(self, identifier: str) -> Optional[Tuple[TransactionRecord, OrganizationRecord]]:
        """Receipt whose barcode id or receipt number equals ``identifier``, with its organization."""

    def set_document_path(self, receipt_id: str, path: str) -> None:
        ...


class InMemoryReceiptRepository:
    """
    Dictionary-backed repository.

    Receipts are immutable except for ``pdf_url``, which set_document_path updates.
    """

    def __init__(self):
        self._receipts: Dict[str, TransactionRecord] = {}
        self._organizations: Dict[str, OrganizationRecord] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_file(cls, path: str) -> "InMemoryReceiptRepository":
        """
        Seed from a YAML or JSON file with ``organizations`` and ``receipts`` lists.
        """
        file_path = Path(path)
        with open(file_path, 'r', encoding='utf-8') as f:
            if file_path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f) or {}

        repo = cls()
        for org in data.get('organizations', []):
            repo.add_organization(OrganizationRecord.from_dict(org))
        for receipt in data.get('receipts', []):
            repo.add_receipt(TransactionRecord.from_dict(receipt))
        logger.info("Repository seeded", source=str(file_path),
                    organizations=len(repo._organizations), receipts=len(repo._receipts))
        return repo

    def add_organization(self, organization: OrganizationRecord) -> None:
        with self._lock:
            self._organizations[organization.id] = organization

    def add_receipt(self, receipt: TransactionRecord) -> None:
        with self._lock:
            self._receipts[receipt.id] = receipt

    def get_receipt(self, organization_id: str, receipt_id: str) -> Optional[TransactionRecord]:
        with self._lock:
            receipt = self._receipts.get(receipt_id)
        if receipt is None or receipt.organization_id != organization_id:
            return None
        return receipt

    def get_organization(self, organization_id: str) -> Optional[OrganizationRecord]:
        with self._lock:
            return self._organizations.get(organization_id)

    def find_by_identifier(self, identifier: str) -> Optional[Tuple[TransactionRecord, OrganizationRecord]]:
        with self._lock:
            receipts = list(self._receipts.values())
            organizations = dict(self._organizations)

        # Barcode id first, then receipt number
        match = next((r for r in receipts if r.barcode_id == identifier), None)
        if match is None:
            match = next((r for r in receipts if r.receipt_number == identifier), None)
        if match is None:
            return None
        organization = organizations.get(match.organization_id)
        if organization is None:
            logger.warning("Receipt without organization", receipt_id=match.id)
            return None
        return match, organization

    def set_document_path(self, receipt_id: str, path: str) -> None:
        with self._lock:
            receipt = self._receipts.get(receipt_id)
            if receipt is None:
                raise KeyError(receipt_id)
            receipt.pdf_url = path
