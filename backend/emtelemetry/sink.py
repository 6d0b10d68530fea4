"""Writers for sink records."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Protocol

from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Measurement
from .schemas import SinkRecord

logger = logging.getLogger(__name__)


class MeasurementSink(Protocol):
    async def write(self, record: SinkRecord) -> None:
        ...


def to_row(record: SinkRecord) -> dict[str, Any]:
    """Flatten a sink record into a ``measurements`` row. ``time`` becomes the ``ts`` column."""
    values = {k: v for k, v in record.values.items() if k != "time"}
    row: dict[str, Any] = {
        "device_id": record.tags["device_id"],
        "dev_eui": record.tags.get("dev_eui"),
        "values": values,
        "topic": record.topic,
    }
    ts = record.values.get("time")
    if isinstance(ts, datetime):
        row["ts"] = ts
    return row


class SqlMeasurementSink:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def write(self, record: SinkRecord) -> None:
        row = to_row(record)
        await self.session.execute(insert(Measurement).values([row]))
        await self.session.commit()
        logger.debug("Stored measurement for %s at %s", row["device_id"], row.get("ts"))
