"""
Exception taxonomy for voucher rendering and verification.

Only ``AssetError`` is recovered inside the render pipeline; every other
``RenderError`` aborts the render and reaches the caller.
"""
from typing import Optional


class SanadError(Exception):
    """Base class for all domain errors raised by this package."""


class MissingLogoError(SanadError):
    """
    Raised when an organization without a usable logo is asked to render a voucher.

    This is a setup problem the user can fix (upload a logo), not a render failure.
    """

    def __init__(self, organization_id: Optional[str] = None):
        self.organization_id = organization_id
        message = (
            "Organization logo is required. Please complete onboarding and "
            "upload a logo before generating receipts."
        )
        super().__init__(message)


class RecordNotFoundError(SanadError):
    """Raised when a receipt or organization does not exist for the caller."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind.capitalize()} not found: {identifier}")


class AssetError(SanadError):
    """Raised when a remote image cannot be fetched or decoded."""

    def __init__(self, message: str, reference: Optional[str] = None):
        self.reference = reference
        super().__init__(message)


class RenderError(SanadError):
    """
    Raised when a step of the render pipeline fails.

    Attributes:
        step: Name of the pipeline step that failed (e.g. "template", "barcode")
    """

    step = "render"

    def __init__(self, message: str, step: Optional[str] = None):
        if step:
            self.step = step
        super().__init__(message)

    @property
    def public_message(self) -> str:
        """Message safe to show to end users (no paths, no internals)."""
        return f"Failed to generate PDF (step: {self.step})"


class TemplateLoadError(RenderError):
    """Missing or corrupt template / font file. A deployment defect."""

    step = "template"


class BarcodeError(RenderError):
    """The verification identifier could not be encoded."""

    step = "barcode"


class SerializationError(RenderError):
    """The final document could not be written out."""

    step = "serialize"


class DocumentStorageError(RenderError):
    """The rendered document could not be written to the document store."""

    step = "upload"
