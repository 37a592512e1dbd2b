"""Input validation shared by every calculator."""

from __future__ import annotations

import math
import numbers

from pmsampsize._common import UsageError

_TYPE_ALIASES = {
    "c": "continuous",
    "continuous": "continuous",
    "b": "binary",
    "binary": "binary",
    "s": "survival",
    "survival": "survival",
}

# Outcome-specific fields; anything outside the chosen type's set must be None.
_TYPE_FIELDS = {
    "continuous": ("intercept", "sd", "mmoe"),
    "binary": ("prevalence",),
    "survival": ("rate", "timepoint", "meanfup", "mmoe"),
}
_ALL_FIELDS = ("prevalence", "rate", "timepoint", "meanfup", "intercept", "sd", "mmoe")


def _is_real(x: object) -> bool:
    return isinstance(x, numbers.Real) and not isinstance(x, bool)


def _require_real(name: str, value: object, type_: str) -> float:
    if value is None:
        raise UsageError(f"{name} must be specified for {type_} outcome sample size")
    if not _is_real(value):
        raise UsageError(f"{name} must be numeric, got {value!r}")
    try:
        x = float(value)
    except OverflowError:
        raise UsageError(f"{name} is too large, got {value}") from None
    if not math.isfinite(x):
        raise UsageError(f"{name} must be finite, got {value}")
    return x


def _require_positive(name: str, value: object, type_: str) -> float:
    x = _require_real(name, value, type_)
    if x <= 0.0:
        raise UsageError(f"{name} must be > 0, got {value}")
    return x


def check_outcome_type(type: object) -> str:
    """Return the canonical outcome type name for *type*."""
    key = type.lower() if isinstance(type, str) else None
    if key not in _TYPE_ALIASES:
        raise UsageError(
            "type must be one of ('continuous', 'binary', 'survival') "
            f"or ('c', 'b', 's'), got {type!r}"
        )
    return _TYPE_ALIASES[key]


def check_inputs(
    type: object,
    *,
    rsquared: object,
    parameters: object,
    shrinkage: object,
    prevalence: object = None,
    rate: object = None,
    timepoint: object = None,
    meanfup: object = None,
    intercept: object = None,
    sd: object = None,
    mmoe: object = None,
) -> str:
    """Validate a sample size request before any criterion is evaluated.

    Rules
    -----
    - *type* is a recognised outcome type.
    - *rsquared* in (0, 1); *shrinkage* in (0, 1].
    - *parameters* is a positive integer (integral floats are accepted).
    - continuous: *intercept* numeric, *sd* > 0.
    - binary: *prevalence* in (0, 1).
    - survival: *rate*, *timepoint*, *meanfup* > 0.
    - *mmoe* > 1 when given.
    - fields belonging to another outcome type must be ``None``.

    Returns
    -------
    str
        Canonical outcome type (``'continuous'``, ``'binary'`` or ``'survival'``).

    Raises
    ------
    UsageError
        On any validation failure.
    """
    type_ = check_outcome_type(type)

    fields = {
        "prevalence": prevalence,
        "rate": rate,
        "timepoint": timepoint,
        "meanfup": meanfup,
        "intercept": intercept,
        "sd": sd,
        "mmoe": mmoe,
    }
    foreign = [
        name for name in _ALL_FIELDS
        if name not in _TYPE_FIELDS[type_] and fields[name] is not None
    ]
    if foreign:
        raise UsageError(
            f"{', '.join(foreign)} not applicable to {type_} outcome sample size; "
            "remove these arguments or choose another outcome type"
        )

    r2 = _require_real("rsquared", rsquared, type_)
    if not (0.0 < r2 < 1.0):
        raise UsageError(f"rsquared must be in (0, 1), got {rsquared}")

    p = _require_real("parameters", parameters, type_)
    if not float(p).is_integer() or p < 1:
        raise UsageError(f"parameters must be a positive integer, got {parameters}")

    s = _require_real("shrinkage", shrinkage, type_)
    if not (0.0 < s <= 1.0):
        raise UsageError(f"shrinkage must be in (0, 1], got {shrinkage}")

    if mmoe is not None:
        m = _require_real("mmoe", mmoe, type_)
        if m <= 1.0:
            raise UsageError(f"mmoe must be > 1, got {mmoe}")

    if type_ == "continuous":
        _require_real("intercept", intercept, type_)
        _require_positive("sd", sd, type_)
    elif type_ == "binary":
        phi = _require_real("prevalence", prevalence, type_)
        if not (0.0 < phi < 1.0):
            raise UsageError(f"prevalence must be in (0, 1), got {prevalence}")
    else:
        _require_positive("rate", rate, type_)
        _require_positive("timepoint", timepoint, type_)
        _require_positive("meanfup", meanfup, type_)

    return type_
