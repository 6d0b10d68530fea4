import base64
import binascii
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException

from ..decoder import decode
from ..derived import enrich
from ..schemas import DecodeRequest
from ..settings import Settings, load_settings

router = APIRouter(tags=["decode"])


def _payload_bytes(req: DecodeRequest) -> bytes:
    try:
        if req.encoding == "base64":
            return base64.b64decode(req.payload, validate=True)
        return bytes.fromhex(req.payload.replace(" ", ""))
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(status_code=400, detail=f"payload is not valid {req.encoding}") from exc


@router.post("/decode")
async def decode_payload(
    req: DecodeRequest, settings: Settings = Depends(load_settings)
) -> Optional[dict[str, Any]]:
    """Decode a raw payload. ``null`` means the port belongs to another scheme."""
    record = decode(_payload_bytes(req), req.port, accepted_port=settings.decoder_port)
    if record is None:
        return None
    return enrich(record).to_payload()
