"""
Receipt document endpoints: authenticated voucher download and inline view.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, Field

from sanad.api.state import AppContext, get_context
from sanad.common.exceptions import MissingLogoError, RecordNotFoundError, RenderError
from sanad.common.logging_config import get_logger
from sanad.services.receipts import ReceiptDocument

logger = get_logger(__name__)

router = APIRouter()


class ReceiptRequest(BaseModel):
    receipt_id: str = Field(..., min_length=1)


def require_organization(x_organization_id: Optional[str] = Header(None)) -> str:
    """Organization of the caller, set by the authenticating gateway."""
    if not x_organization_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_organization_id


def _pdf_response(document: ReceiptDocument, disposition: str) -> Response:
    headers = {
        'Content-Disposition': f'{disposition}; filename="{document.filename}"'
    }
    return Response(content=document.data, media_type='application/pdf', headers=headers)


def _run(action, organization_id: str, receipt_id: str) -> ReceiptDocument:
    try:
        return action(organization_id, receipt_id)
    except MissingLogoError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=f"{e.kind.capitalize()} not found")
    except RenderError as e:
        # Step name only; paths and tracebacks stay in the logs
        raise HTTPException(status_code=500, detail=e.public_message)


@router.post("/generate-pdf")
def generate_pdf(
    req: ReceiptRequest,
    organization_id: str = Depends(require_organization),
    context: AppContext = Depends(get_context),
):
    """Renders the voucher again, replaces the stored copy and returns it as a download."""
    document = _run(context.documents.regenerate_document, organization_id, req.receipt_id)
    return _pdf_response(document, "attachment")


@router.post("/get-pdf")
def get_pdf(
    req: ReceiptRequest,
    organization_id: str = Depends(require_organization),
    context: AppContext = Depends(get_context),
):
    """Returns the stored voucher for inline viewing, rendering it on first access."""
    document = _run(context.documents.get_document, organization_id, req.receipt_id)
    return _pdf_response(document, "inline")
