from .receipts import ReceiptDocument, ReceiptDocumentService

__all__ = ['ReceiptDocument', 'ReceiptDocumentService']
