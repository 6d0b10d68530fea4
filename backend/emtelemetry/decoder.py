"""Decoder for Milesight channel-tagged uplink payloads.

The payload is a run of ``[channel-id][channel-type][data]`` records. The
width of ``data`` is implied by the (id, type) pair, so an unknown pair stops
the scan: there is no way to find where the next record starts.

Problems with the payload are reported in the returned record (``Error``,
``ErrorType``, ``channel_id``, ``channel_type``, ``byte_position``), never
raised.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from .channels import EM500_SMT_CHANNELS, SYSTEM_CHANNEL, ChannelSpec
from .schemas import DecodedRecord

logger = logging.getLogger(__name__)

UPLINK_PORT = 85

UNKNOWN_CHANNEL_ID = "unknown channel id"
UNKNOWN_CHANNEL_TYPE = "unknown channel type"
TRUNCATED_HEADER = "truncated header"
TRUNCATED_RECORD = "truncated record"


def _fail(fields: dict[str, Any], error_type: str, position: int,
          channel_id: int | None = None, channel_type: int | None = None) -> None:
    fields["Error"] = True
    fields["ErrorType"] = error_type
    fields["byte_position"] = position
    if channel_id is not None:
        fields["channel_id"] = channel_id
    if channel_type is not None:
        fields["channel_type"] = channel_type
    logger.warning(
        "Decode stopped at byte %d: %s (channel_id=%s, channel_type=%s)",
        position, error_type, channel_id, channel_type,
    )


def decode(
    payload: Sequence[int],
    port: Optional[int] = None,
    channels: Mapping[tuple[int, int], ChannelSpec] = EM500_SMT_CHANNELS,
    accepted_port: int = UPLINK_PORT,
) -> DecodedRecord | None:
    """Decode *payload* received on *port*.

    Returns ``None`` when *port* is given and is not *accepted_port*: the
    payload belongs to some other scheme. ``port=None`` always decodes.
    """
    if port is not None and port != accepted_port:
        logger.debug("Port %s is not handled (expected %s)", port, accepted_port)
        return None

    data = bytes(payload)
    fields: dict[str, Any] = {"Error": False}
    i = 0
    while i < len(data):
        if len(data) - i < 2:
            _fail(fields, TRUNCATED_HEADER, i)
            break

        channel_id = data[i]
        channel_type = data[i + 1]
        i += 2

        spec = channels.get((channel_id, channel_type))
        if spec is None:
            if channel_id == SYSTEM_CHANNEL:
                _fail(fields, UNKNOWN_CHANNEL_TYPE, i, channel_id, channel_type)
            else:
                _fail(fields, UNKNOWN_CHANNEL_ID, i, channel_id, channel_type)
            break

        if len(data) - i < spec.width:
            _fail(fields, TRUNCATED_RECORD, i, channel_id, channel_type)
            break
        fields[spec.field] = spec.transform(data[i:i + spec.width])
        i += spec.width

    return DecodedRecord.model_validate(fields)
