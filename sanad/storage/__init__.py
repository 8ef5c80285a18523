from .documents import DocumentStore, LocalDocumentStore, document_key, normalize_document_path
from .repository import InMemoryReceiptRepository, ReceiptRepository

__all__ = [
    'DocumentStore',
    'LocalDocumentStore',
    'InMemoryReceiptRepository',
    'ReceiptRepository',
    'document_key',
    'normalize_document_path',
]
