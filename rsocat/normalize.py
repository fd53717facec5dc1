"""Unit and angle normalization for orbital elements.

Sources publish elements in different conventions: CelesTrak GP data
carries mean motion in rev/day and angles in degrees, while the intact
catalog already stores semi-major axis in meters and angles in radians.
The convention is declared per feed and never guessed from the values.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping

import numpy as np

MU_EARTH = 3.986004418e14  # m^3/s^2
SECONDS_PER_DAY = 86400.0

ANGLE_FIELDS = ("Inc", "RAAN", "ArgP", "MeanAnom")
MEAN_MOTION_FIELD = "MeanMotion"

ORBIT_CLASSES = {
    "L": "LEO",
    "M": "MEO",
    "G": "GEO",
    "H": "HEO",
}


class AngleUnit(str, Enum):
    DEGREES = "degrees"
    RADIANS = "radians"


class ElementRepresentation(str, Enum):
    SEMI_MAJOR_AXIS_M = "semi_major_axis_m"
    MEAN_MOTION_REV_PER_DAY = "mean_motion_rev_per_day"


@dataclass(frozen=True)
class SourceConvention:
    angle_unit: AngleUnit = AngleUnit.RADIANS
    element_representation: ElementRepresentation = ElementRepresentation.SEMI_MAJOR_AXIS_M


def to_float(value: Any) -> float | None:
    """Parse a cell to a finite float, or None for blank/garbage/non-finite input."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        # float() also takes "1_000"; source cells never use digit grouping
        if not text or "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return number


def format_decimal(value: float) -> str:
    """Shortest round-tripping positional decimal; never exponent notation."""
    return np.format_float_positional(float(value), trim="-")


def sma_from_mean_motion(rev_per_day: Any) -> float | None:
    """Semi-major axis in meters from mean motion in rev/day.

    Returns None when the mean motion is missing, non-finite or not
    positive, or when the conversion leaves the float range, so the
    record fails validity instead of carrying SMA=0.
    """
    n = to_float(rev_per_day)
    if n is None or n <= 0:
        return None
    omega = n * 2.0 * math.pi / SECONDS_PER_DAY
    with np.errstate(all="ignore"):
        sma = float(np.cbrt(np.float64(MU_EARTH) / np.square(np.float64(omega))))
    if not math.isfinite(sma) or sma <= 0:
        return None
    return sma


def deg_to_rad(degrees: Any) -> float:
    # a zero angle is physically valid, so absence degrades to 0
    value = to_float(degrees)
    if value is None:
        return 0.0
    return value * math.pi / 180.0


def orbit_class(letter: Any) -> str:
    key = str(letter or "").strip().upper()
    return ORBIT_CLASSES.get(key, "")


def normalize_fields(fields: Mapping[str, Any], convention: SourceConvention) -> Dict[str, str]:
    """Return a copy of ``fields`` with elements in canonical units.

    Values that need no conversion are passed through as text, untouched.
    """
    out: Dict[str, str] = {}
    for key, value in fields.items():
        if key == MEAN_MOTION_FIELD:
            continue
        out[key] = "" if value is None else str(value)

    if convention.element_representation is ElementRepresentation.MEAN_MOTION_REV_PER_DAY:
        sma = sma_from_mean_motion(fields.get(MEAN_MOTION_FIELD))
        out["SMA"] = "" if sma is None else format_decimal(sma)
        ecc = to_float(fields.get("Ecc"))
        out["Ecc"] = "" if ecc is None else format_decimal(ecc)

    if convention.angle_unit is AngleUnit.DEGREES:
        for name in ANGLE_FIELDS:
            out[name] = format_decimal(deg_to_rad(fields.get(name)))

    out["OrbitType"] = orbit_class(fields.get("OrbitType"))
    return out
