import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..envelope import process_uplink
from ..schemas import UplinkError
from ..settings import Settings, load_settings
from ..sink import SqlMeasurementSink

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ingest"])


@router.post("/ingest/ttn")
async def ingest_ttn(
    payload: dict[str, Any],
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(load_settings),
):
    """Things Stack webhook: decode the uplink and store its sink record."""
    record = process_uplink(payload, settings=settings)
    if isinstance(record, UplinkError):
        raise HTTPException(status_code=422, detail=record.error)

    if settings.persist_measurements:
        await SqlMeasurementSink(db).write(record)
    else:
        logger.info("Persistence disabled; dropping record for %s", record.tags.get("device_id"))

    return {"ok": True, "record": record.model_dump(mode="json")}
