import re
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_FRACTION = re.compile(r"\.(\d+)")


class DecodedRecord(BaseModel):
    """Fields decoded from one uplink. Absent channels stay ``None``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    battery: Optional[int] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    conductivity: Optional[int] = None
    format_version: Optional[int] = Field(default=None, alias="FormatVersion")
    hardware_version: Optional[float] = Field(default=None, alias="HardwareVersion")
    software_version: Optional[float] = Field(default=None, alias="SoftwareVersion")
    restart: Optional[int] = None
    shutdown: Optional[int] = None
    device_class: Optional[int] = Field(default=None, alias="Class")
    serial_number: Optional[str] = Field(default=None, alias="SerialNumber")

    # derived
    dewpoint: Optional[float] = Field(default=None, alias="tDewC")
    heat_index: Optional[float] = Field(default=None, alias="tHeatIndexC")

    error: bool = Field(default=False, alias="Error")
    error_type: Optional[str] = Field(default=None, alias="ErrorType")
    channel_id: Optional[int] = None
    channel_type: Optional[int] = None
    byte_position: Optional[int] = None

    def to_payload(self) -> dict[str, Any]:
        """Name -> value map using the device's field names, absent fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


class DecodeRequest(BaseModel):
    payload: str
    encoding: Literal["hex", "base64"] = "hex"
    port: Optional[int] = None


class SinkRecord(BaseModel):
    """Value map plus tag map for a time-series sink. ``values["time"]`` is the time coordinate."""

    model_config = ConfigDict(frozen=True)

    values: dict[str, Any]
    tags: dict[str, str]
    topic: Optional[str] = None


class UplinkError(BaseModel):
    error: str


# Things Stack v3 uplink envelope (only the parts we read)

class LoraDataRate(BaseModel):
    bandwidth: Optional[int] = None
    spreading_factor: Optional[int] = None


class DataRate(BaseModel):
    lora: Optional[LoraDataRate] = None


class UplinkSettings(BaseModel):
    data_rate: Optional[DataRate] = None


class RxMetadata(BaseModel):
    gateway_ids: Optional[dict[str, Any]] = None
    rssi: Optional[float] = None
    snr: Optional[float] = None


class UplinkMessage(BaseModel):
    f_port: Optional[int] = None
    f_cnt: Optional[int] = None
    frm_payload: Optional[str] = None
    rx_metadata: list[RxMetadata] = Field(default_factory=list)
    settings: Optional[UplinkSettings] = None


class EndDeviceIds(BaseModel):
    device_id: str
    dev_eui: Optional[str] = None


class UplinkEnvelope(BaseModel):
    end_device_ids: EndDeviceIds
    received_at: datetime
    uplink_message: UplinkMessage

    @field_validator("received_at", mode="before")
    @classmethod
    def parse_received_at(cls, value: Any) -> Any:
        # The Things Stack sends nanosecond fractions and a "Z" suffix;
        # fromisoformat on 3.10 only takes 3 or 6 fraction digits
        if not isinstance(value, str):
            return value
        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        normalized = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), normalized, count=1)
        return datetime.fromisoformat(normalized)


class DecodedUplink(BaseModel):
    """An envelope after decoding: identity, timestamp, decoded payload and the input document."""

    device_id: str
    dev_eui: Optional[str] = None
    received_at: datetime
    payload: Optional[DecodedRecord] = None
    payload_input: dict[str, Any]
    envelope: UplinkEnvelope
    local: dict[str, str] = Field(default_factory=dict)
    topic: Optional[str] = None
