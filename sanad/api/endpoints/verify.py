"""
Public receipt verification. No authentication; answers only with the fixed
projection built by the verification lookup.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from sanad.api.state import AppContext, get_context
from sanad.verification.lookup import VerificationStatus, verify_identifier

router = APIRouter()

STATUS_CODES = {
    VerificationStatus.VERIFIED: 200,
    VerificationStatus.INVALID_FORMAT: 400,
    VerificationStatus.NOT_FOUND: 404,
}


@router.get("/verify")
def verify_receipt(
    barcode_id: Optional[str] = Query(None),
    context: AppContext = Depends(get_context),
):
    result = verify_identifier(barcode_id, context.repository, context.settings.accepted_prefixes)
    return JSONResponse(status_code=STATUS_CODES[result.status], content=result.to_dict())
