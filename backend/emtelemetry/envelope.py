"""Things Stack v3 uplink handling.

Unwraps the uplink JSON document, decodes ``frm_payload`` and reshapes the
result into a value map and a tag map for a time-series sink. Envelope
problems come back as :class:`UplinkError` rather than exceptions.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any, Mapping, Union

from pydantic import ValidationError

from .decoder import decode
from .derived import enrich, heat_index_fallback
from .schemas import DecodedUplink, SinkRecord, UplinkEnvelope, UplinkError
from .settings import Settings, load_settings

logger = logging.getLogger(__name__)

MISSING_FRM_PAYLOAD = "No frm_payload in msg.payload"

Document = Union[str, bytes, Mapping[str, Any]]

# decoded field -> value-map key
MEASUREMENT_KEYS = {
    "temperature": "temperature",
    "humidity": "humidity",
    "conductivity": "conductivity",
    "dewpoint": "tDewpoint",
    "battery": "battery",
}


def _load(document: Document) -> dict[str, Any] | UplinkError:
    if isinstance(document, (str, bytes)):
        try:
            document = json.loads(document)
        except json.JSONDecodeError as exc:
            logger.warning("Uplink document is not valid JSON: %s", exc)
            return UplinkError(error=f"Invalid JSON: {exc.msg}")
    if not isinstance(document, Mapping):
        return UplinkError(error="Uplink document must be a JSON object")
    return dict(document)


def parse_envelope(document: Document) -> tuple[UplinkEnvelope, dict[str, Any]] | UplinkError:
    """Validate *document*; returns the envelope and the raw mapping it came from."""
    raw = _load(document)
    if isinstance(raw, UplinkError):
        return raw

    uplink = raw.get("uplink_message")
    if not isinstance(uplink, Mapping) or uplink.get("frm_payload") is None:
        logger.warning("Uplink without frm_payload from %s", _device_hint(raw))
        return UplinkError(error=MISSING_FRM_PAYLOAD)

    try:
        envelope = UplinkEnvelope.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Malformed uplink envelope from %s: %s", _device_hint(raw), exc)
        return UplinkError(error=f"Invalid uplink envelope: {exc.error_count()} validation error(s)")
    return envelope, raw


def _device_hint(raw: Mapping[str, Any]) -> str:
    ids = raw.get("end_device_ids")
    if isinstance(ids, Mapping):
        return str(ids.get("device_id") or "unknown device")
    return "unknown device"


def decode_uplink(
    document: Document, settings: Settings | None = None, topic: str | None = None
) -> DecodedUplink | UplinkError:
    settings = settings or load_settings()
    parsed = parse_envelope(document)
    if isinstance(parsed, UplinkError):
        return parsed
    envelope, raw = parsed

    try:
        payload = base64.b64decode(envelope.uplink_message.frm_payload or "", validate=True)
    except (binascii.Error, ValueError):
        logger.warning("frm_payload from %s is not valid base64", envelope.end_device_ids.device_id)
        return UplinkError(error="frm_payload is not valid base64")

    record = decode(payload, envelope.uplink_message.f_port, accepted_port=settings.decoder_port)
    if record is not None:
        record = enrich(record)

    return DecodedUplink(
        device_id=envelope.end_device_ids.device_id,
        dev_eui=envelope.end_device_ids.dev_eui,
        received_at=envelope.received_at,
        payload=record,
        payload_input=raw,
        envelope=envelope,
        local=dict(settings.local),
        topic=topic,
    )


def _radio_metrics(envelope: UplinkEnvelope) -> dict[str, Any]:
    message = envelope.uplink_message
    metrics: dict[str, Any] = {}
    if message.f_cnt is not None:
        metrics["uplinkCount"] = message.f_cnt
    if message.rx_metadata:
        first = message.rx_metadata[0]
        if first.rssi is not None:
            metrics["rssi"] = first.rssi
        if first.snr is not None:
            metrics["snr"] = first.snr
    lora = message.settings.data_rate.lora if message.settings and message.settings.data_rate else None
    if lora is not None:
        if lora.bandwidth is not None:
            metrics["bandwidth"] = lora.bandwidth
        if lora.spreading_factor is not None:
            metrics["spreading_factor"] = lora.spreading_factor
    return metrics


def to_sink_record(uplink: DecodedUplink) -> SinkRecord:
    values: dict[str, Any] = {"time": uplink.received_at}

    record = uplink.payload
    if record is not None:
        for attr, key in MEASUREMENT_KEYS.items():
            value = getattr(record, attr)
            if value is not None:
                values[key] = value
        hi = heat_index_fallback(record.heat_index, record.temperature)
        if hi is not None:
            values["tHeatIndex"] = hi

    values.update(_radio_metrics(uplink.envelope))

    tags = {"device_id": uplink.device_id}
    if uplink.dev_eui:
        tags["dev_eui"] = uplink.dev_eui

    return SinkRecord(values=values, tags=tags, topic=uplink.topic)


def process_uplink(
    document: Document, settings: Settings | None = None, topic: str | None = None
) -> SinkRecord | UplinkError:
    """Envelope in, sink record (or error) out."""
    uplink = decode_uplink(document, settings=settings, topic=topic)
    if isinstance(uplink, UplinkError):
        return uplink
    return to_sink_record(uplink)
