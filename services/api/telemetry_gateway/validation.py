"""Signal classification policy.

Digital signals accept only 0 or 1. Analog signals accept any number in
[ANALOG_MIN, ANALOG_MAX]. Everything that is not a plain number is a type
mismatch, and so is any name missing from the registry.
"""
import math
from dataclasses import dataclass
from enum import Enum
from numbers import Real
from typing import Any, Optional, Union

from .registry import SignalDefinition, SignalKind

ANALOG_MIN = 1.0
ANALOG_MAX = 65535.0


class RejectReason(str, Enum):
    TYPE_MISMATCH = "type_mismatch"
    OUT_OF_RANGE = "out_of_range"


@dataclass(frozen=True)
class Accepted:
    value: float


@dataclass(frozen=True)
class Rejected:
    reason: RejectReason
    # numeric value kept for the rejected row; None when the raw value was not a number
    value: Optional[float] = None


ValidationOutcome = Union[Accepted, Rejected]


def as_number(raw: Any) -> Optional[float]:
    """Return raw as a float if it is a plain JSON number, else None.

    bool is an int subclass in Python but never counts as a number here.
    """
    if isinstance(raw, bool) or not isinstance(raw, Real):
        return None
    try:
        return float(raw)
    except OverflowError:
        # integers too large for a double
        return math.inf if raw > 0 else -math.inf


def _stored(number: Optional[float]) -> Optional[float]:
    # NaN is stored as NULL
    if number is None or math.isnan(number):
        return None
    return number


def classify(definition: Optional[SignalDefinition], raw: Any) -> ValidationOutcome:
    number = as_number(raw)
    if definition is None or number is None:
        return Rejected(RejectReason.TYPE_MISMATCH, _stored(number))

    if definition.kind is SignalKind.DIGITAL:
        if number in (0.0, 1.0):
            return Accepted(number)
        return Rejected(RejectReason.TYPE_MISMATCH, _stored(number))

    # analog; NaN fails both comparisons
    if ANALOG_MIN <= number <= ANALOG_MAX:
        return Accepted(number)
    return Rejected(RejectReason.OUT_OF_RANGE, _stored(number))
