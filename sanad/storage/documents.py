"""
Rendered document storage.

Object storage is external; ``LocalDocumentStore`` keeps the same contract on
a local directory.
"""
import os
import time
from pathlib import Path
from typing import Optional, Protocol

from sanad.common.logging_config import get_logger

logger = get_logger(__name__)

BUCKET_MARKER = "/receipts/"


def document_key(organization_id: str, receipt_number: str, timestamp_ms: Optional[int] = None) -> str:
    """Collision-resistant key: <organization>/<receipt number>-<epoch ms>.pdf"""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{organization_id}/{receipt_number}-{timestamp_ms}.pdf"


def normalize_document_path(pointer: str) -> str:
    """
    Storage key for a stored pointer.

    Older rows hold a full public URL; the key is the part after /receipts/.
    """
    if pointer.startswith("http") and BUCKET_MARKER in pointer:
        return pointer.split(BUCKET_MARKER, 1)[1]
    return pointer


class DocumentStore(Protocol):
    def save(self, key: str, data: bytes, overwrite: bool = False) -> bool:
        """Store ``data``; False when the key exists and overwrite is off."""

    def load(self, key: str) -> Optional[bytes]:
        ...


class LocalDocumentStore:
    """
    Filesystem-backed document store.

    Args:
        root: Directory holding one sub-directory per organization
    """

    def __init__(self, root: str):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"Document key escapes storage root: {key}")
        return path

    def save(self, key: str, data: bytes, overwrite: bool = False) -> bool:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        if not overwrite:
            try:
                # 'xb' fails when the file is already there
                with open(path, "xb") as f:
                    f.write(data)
            except FileExistsError:
                logger.info("Document already stored, not overwritten", key=key)
                return False
        else:
            tmp = path.with_suffix(path.suffix + ".tmp")
            with open(tmp, "wb") as f:
                f.write(data)
            os.replace(tmp, path)
        logger.info("Document stored", key=key, size_bytes=len(data), overwrite=overwrite)
        return True

    def load(self, key: str) -> Optional[bytes]:
        try:
            path = self._path(key)
        except ValueError:
            logger.warning("Rejected document key", key=key)
            return None
        if not path.exists():
            return None
        return path.read_bytes()
