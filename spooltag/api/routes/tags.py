"""Tag decoding API routes."""

import logging

from fastapi import APIRouter, HTTPException

from spooltag.core.config import settings
from spooltag.schemas.tags import DecodeRequest, DecodeResponse, DiagnosticsResponse, FieldSpecResponse
from spooltag.services.diagnostics import DiagnosticCollector
from spooltag.services.field_map import FIELD_MAP
from spooltag.services.tag_decoder import TagDecodeError, decode
from spooltag.services.tag_layout import get_layout

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tags", tags=["tags"])


@router.post("/decode", response_model=DecodeResponse)
async def decode_tag(req: DecodeRequest):
    """Decode a raw tag memory image posted as hex."""
    layout = get_layout(req.layout or settings.tag_layout)
    collector = DiagnosticCollector() if req.debug else None

    result = decode(req.buffer, req.uid, collector, layout=layout, technology=req.technology)
    try:
        info = result.unwrap()
    except TagDecodeError as e:
        logger.info("Tag %s could not be decoded: %s", req.uid, e)
        raise HTTPException(status_code=400, detail={"error": e.kind.value, "message": str(e)})

    return DecodeResponse(
        layout=layout.name,
        filament=info,
        diagnostics=DiagnosticsResponse(**collector.to_dict()) if collector else None,
    )


@router.get("/fields", response_model=list[FieldSpecResponse])
async def list_fields():
    """Return the tag field map."""
    return [FieldSpecResponse(**spec.to_dict()) for spec in FIELD_MAP]
