# channels.py
# Channel vocabulary for Milesight/Ursalink uplinks (port 85).
#
# Record layout: [channel-id][channel-type][channel-data]
# The data width is fixed by the (id, type) pair; there is no length byte.
#
#   01 75  battery        1 byte   %
#   03 67  temperature    2 bytes  int16 LE, 0.1 °C
#   04 68  humidity       1 byte   0.5 %RH (soil moisture on EM500-SMT)
#   05 7f  conductivity   2 bytes  int16 LE, µS/cm
#   ff ..  device/system information

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from .codec import read_hex_bytes, read_int16_le, read_version
from .schemas import DecodedRecord

SYSTEM_CHANNEL = 0xFF


@dataclass(frozen=True)
class ChannelSpec:
    channel_id: int
    channel_type: int
    width: int
    field: str
    transform: Callable[[bytes], Any]

    @property
    def key(self) -> tuple[int, int]:
        return (self.channel_id, self.channel_type)


def _u8(data: bytes) -> int:
    return data[0]


def _flag(data: bytes) -> int:
    return 1


EM500_SMT_FIELDS = [
    ChannelSpec(0x01, 0x75, 1, "battery", _u8),
    ChannelSpec(0x03, 0x67, 2, "temperature", lambda d: read_int16_le(d) / 10),
    ChannelSpec(0x04, 0x68, 1, "humidity", lambda d: d[0] / 2),
    ChannelSpec(0x05, 0x7F, 2, "conductivity", read_int16_le),
    ChannelSpec(SYSTEM_CHANNEL, 0x01, 1, "FormatVersion", _u8),
    ChannelSpec(SYSTEM_CHANNEL, 0x09, 2, "HardwareVersion", read_version),
    ChannelSpec(SYSTEM_CHANNEL, 0x0A, 2, "SoftwareVersion", read_version),
    ChannelSpec(SYSTEM_CHANNEL, 0x0B, 1, "restart", _flag),
    ChannelSpec(SYSTEM_CHANNEL, 0x0C, 1, "shutdown", _flag),
    ChannelSpec(SYSTEM_CHANNEL, 0x0F, 1, "Class", _u8),
    ChannelSpec(SYSTEM_CHANNEL, 0x16, 8, "SerialNumber", read_hex_bytes),
]


def _record_fields() -> set[str]:
    names = set()
    for name, info in DecodedRecord.model_fields.items():
        names.add(name)
        if info.alias:
            names.add(info.alias)
    return names


def build_table(specs: Iterable[ChannelSpec]) -> dict[tuple[int, int], ChannelSpec]:
    known = _record_fields()
    table: dict[tuple[int, int], ChannelSpec] = {}
    for spec in specs:
        if spec.key in table:
            raise ValueError(
                f"duplicate channel 0x{spec.channel_id:02x}/0x{spec.channel_type:02x}"
            )
        if spec.field not in known:
            raise ValueError(
                f"channel 0x{spec.channel_id:02x}/0x{spec.channel_type:02x} "
                f"maps to unknown field '{spec.field}'"
            )
        table[spec.key] = spec
    return table


EM500_SMT_CHANNELS: Mapping[tuple[int, int], ChannelSpec] = build_table(EM500_SMT_FIELDS)
