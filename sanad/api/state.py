from dataclasses import dataclass
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import Request

from sanad.common.config import Settings
from sanad.common.logging_config import get_logger
from sanad.rendering.assets import AssetEmbedder, AssetFetcher
from sanad.rendering.barcode import BarcodeGenerator, BarcodeOptions
from sanad.rendering.compositor import BarcodeLayout, TemplateSource, VoucherCompositor
from sanad.services.receipts import ReceiptDocumentService
from sanad.storage.documents import DocumentStore, LocalDocumentStore
from sanad.storage.repository import InMemoryReceiptRepository, ReceiptRepository

logger = get_logger(__name__)


# One context per application instance, reachable from request handlers
@dataclass
class AppContext:
    settings: Settings
    repository: ReceiptRepository
    store: DocumentStore
    compositor: VoucherCompositor
    documents: ReceiptDocumentService

    @classmethod
    def build(
        cls,
        settings: Settings,
        repository: Optional[ReceiptRepository] = None,
        store: Optional[DocumentStore] = None,
    ) -> "AppContext":
        if repository is None:
            if settings.data_file:
                repository = InMemoryReceiptRepository.from_file(settings.data_file)
            else:
                repository = InMemoryReceiptRepository()
        if store is None:
            store = LocalDocumentStore(settings.storage_root)

        tz = ZoneInfo(settings.display_timezone) if settings.display_timezone else None
        compositor = VoucherCompositor(
            template=TemplateSource(settings.template_path),
            assets=AssetEmbedder(AssetFetcher(timeout=settings.fetch_timeout)),
            barcodes=BarcodeGenerator(BarcodeOptions(
                module_width=settings.barcode_module_width,
                bar_height=settings.barcode_bar_height,
            )),
            layout=BarcodeLayout(top_offset=settings.barcode_top_offset, scale=settings.barcode_scale),
            font_path=settings.font_path,
            tz=tz,
            verify_url=settings.public_verify_url,
        )
        logger.info("Application context ready", template=settings.template_path,
                    storage_root=settings.storage_root, timezone=settings.display_timezone)
        return cls(
            settings=settings,
            repository=repository,
            store=store,
            compositor=compositor,
            documents=ReceiptDocumentService(repository, store, compositor),
        )


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the context of the app serving the request."""
    return request.app.state.context
