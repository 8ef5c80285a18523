"""
AcroForm helpers on top of pypdf: value filling, widget visibility flags and
flattening of widgets into static page content.
"""
from typing import Callable, Dict, Iterator, Optional, Tuple

from pypdf import PdfWriter, PageObject
from pypdf.generic import (
    ArrayObject,
    ContentStream,
    DictionaryObject,
    FloatObject,
    IndirectObject,
    NameObject,
    NumberObject,
)

from sanad.common.logging_config import get_logger
from .fields import annotation_field_name
from .visibility import FLAG_HIDDEN, FLAG_NOVIEW, updated_flags

logger = get_logger(__name__)


def iter_widgets(page: PageObject) -> Iterator[Tuple[str, DictionaryObject]]:
    """Yields (field name, widget dictionary) for every named widget on a page."""
    for ref in page.get("/Annots") or []:
        annot = ref.get_object()
        if annot.get("/Subtype") != "/Widget":
            continue
        name = annotation_field_name(annot)
        if name:
            yield name, annot


def fill_values(writer: PdfWriter, values: Dict[str, str]) -> None:
    """
    Writes text values into the form and regenerates their appearance streams.

    NeedAppearances stays on so interactive viewers redraw field glyphs from
    the values instead of trusting cached appearances.
    """
    for page in writer.pages:
        if not page.get("/Annots"):
            continue
        writer.update_page_form_field_values(page, values, auto_regenerate=True)


def set_visibility(writer: PdfWriter, visible: Dict[str, bool]) -> int:
    """
    Sets or clears the Hidden flag on every widget of the named fields.

    Args:
        writer: Document being composed
        visible: field name -> True (show) / False (hide)

    Returns:
        Number of widgets updated
    """
    updated = 0
    for page in writer.pages:
        for name, annot in iter_widgets(page):
            if name not in visible:
                continue
            flags = updated_flags(int(annot.get("/F", 0)), visible[name])
            annot[NameObject("/F")] = NumberObject(flags)
            updated += 1
    return updated


def _normal_appearance(annot: DictionaryObject) -> Optional[IndirectObject]:
    """The /AP /N stream reference of a widget, resolving appearance states."""
    ap = annot.get("/AP")
    if ap is None:
        return None
    ap = ap.get_object()
    normal = ap.raw_get("/N") if "/N" in ap else None
    if normal is None:
        return None
    resolved = normal.get_object()
    if not hasattr(resolved, "get_data"):
        # Checkbox-like dictionary of states keyed by /AS
        state = annot.get("/AS")
        if state is None or state not in resolved:
            return None
        normal = resolved.raw_get(state)
    return normal if isinstance(normal, IndirectObject) else None


TextDrawer = Callable[[str, DictionaryObject], bool]


def flatten_form(writer: PdfWriter, draw_text: Optional[TextDrawer] = None) -> int:
    """
    Bakes every visible widget's appearance into its page's content, then
    removes all widgets and the AcroForm. Hidden widgets leave blank space.

    After this call the document has no interactive fields left.

    Args:
        writer: Document being composed
        draw_text: Optional hook called with (field name, widget); when it
            returns True the widget's own appearance is not used (the caller
            has drawn the field content another way).

    Returns:
        Number of widgets baked into page content
    """
    baked = 0
    for page_index, page in enumerate(writer.pages):
        annots = page.get("/Annots")
        if not annots:
            continue

        resources = page.get("/Resources")
        resources = resources.get_object() if resources is not None else DictionaryObject()
        xobjects = resources.get("/XObject")
        xobjects = xobjects.get_object() if xobjects is not None else DictionaryObject()

        operations = []
        kept = ArrayObject()
        for i, ref in enumerate(annots):
            annot = ref.get_object()
            if annot.get("/Subtype") != "/Widget":
                kept.append(ref)
                continue

            flags = int(annot.get("/F", 0))
            if flags & (FLAG_HIDDEN | FLAG_NOVIEW):
                continue

            name = annotation_field_name(annot) or f"widget{i}"
            if draw_text is not None and draw_text(name, annot):
                continue

            stream_ref = _normal_appearance(annot)
            if stream_ref is None:
                logger.debug("Widget has no appearance stream, skipped", field=name)
                continue

            stream = stream_ref.get_object()
            x0, y0, x1, y1 = [float(v) for v in annot["/Rect"]]
            bx0, by0, bx1, by1 = [float(v) for v in stream.get("/BBox", [0, 0, x1 - x0, y1 - y0])]
            sx = (abs(x1 - x0) / (bx1 - bx0)) if bx1 != bx0 else 1.0
            sy = (abs(y1 - y0) / (by1 - by0)) if by1 != by0 else 1.0

            xobject_name = NameObject(f"/SanadFlat{page_index}_{i}")
            xobjects[xobject_name] = stream_ref
            operations.extend([
                ([], b"q"),
                ([FloatObject(sx), FloatObject(0), FloatObject(0), FloatObject(sy),
                  FloatObject(min(x0, x1) - bx0 * sx), FloatObject(min(y0, y1) - by0 * sy)], b"cm"),
                ([xobject_name], b"Do"),
                ([], b"Q"),
            ])
            baked += 1

        if operations:
            resources[NameObject("/XObject")] = xobjects
            page[NameObject("/Resources")] = resources
            content = page.get_contents()
            existing = content.operations if content is not None else []
            merged = ContentStream(None, writer)
            merged.operations = [([], b"q")] + list(existing) + [([], b"Q")] + operations
            page.replace_contents(merged)

        if kept:
            page[NameObject("/Annots")] = kept
        else:
            del page["/Annots"]

    root = writer.root_object
    if "/AcroForm" in root:
        del root["/AcroForm"]
    return baked
