# derived.py
# Secondary quantities computed from decoded temperature and humidity.

from __future__ import annotations

import math
from typing import Optional

from .schemas import DecodedRecord

# Magnus coefficients (Alduchov & Eskridge)
C1 = 243.04
C2 = 17.625

HEAT_INDEX_MIN_F = 80.0


def dewpoint(t: float, rh: float) -> float:
    """Dewpoint in °C for temperature *t* (°C) and relative humidity *rh* (0..100).

    RH is clamped to [1 %, 100 %] so very dry or bogus readings stay finite.
    """
    h = rh / 100
    if h <= 0.01:
        h = 0.01
    elif h > 1.0:
        h = 1.0

    lnh = math.log(h)
    txc2_tpc1 = t * C2 / (t + C1)
    return C1 * (lnh + txc2_tpc1) / (C2 - lnh - txc2_tpc1)


def _c_to_f(t: float) -> float:
    return t * 1.8 + 32.0


def _f_to_c(t: float) -> float:
    return (t - 32.0) / 1.8


def heat_index(t: float, rh: float) -> Optional[float]:
    """NWS heat index in °C, or ``None`` below 80 °F where it is not defined."""
    tf = _c_to_f(t)
    if tf < HEAT_INDEX_MIN_F:
        return None

    simple = 0.5 * (tf + 61.0 + (tf - 68.0) * 1.2 + rh * 0.094)
    if (simple + tf) / 2 < HEAT_INDEX_MIN_F:
        return _f_to_c(simple)

    hi = (
        -42.379
        + 2.04901523 * tf
        + 10.14333127 * rh
        - 0.22475541 * tf * rh
        - 0.00683783 * tf * tf
        - 0.05481717 * rh * rh
        + 0.00122874 * tf * tf * rh
        + 0.00085282 * tf * rh * rh
        - 0.00000199 * tf * tf * rh * rh
    )
    if rh < 13 and tf <= 112:
        hi -= ((13 - rh) / 4) * math.sqrt((17 - abs(tf - 95)) / 17)
    elif rh > 85 and tf <= 87:
        hi += ((rh - 85) / 10) * ((87 - tf) / 5)
    return _f_to_c(hi)


def heat_index_fallback(upstream: Optional[float], temperature: Optional[float]) -> Optional[float]:
    """Heat index for storage: the computed value if defined, else the air temperature."""
    if upstream is not None:
        return upstream
    return temperature


def enrich(record: DecodedRecord) -> DecodedRecord:
    """Return a copy of *record* with ``tDewC`` and ``tHeatIndexC`` filled in when possible."""
    if record.temperature is None or record.humidity is None:
        return record
    return record.model_copy(
        update={
            "dewpoint": dewpoint(record.temperature, record.humidity),
            "heat_index": heat_index(record.temperature, record.humidity),
        }
    )
