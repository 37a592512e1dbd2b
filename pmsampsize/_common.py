"""Shared result types, configuration and numeric helpers for the criteria."""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field

from scipy.optimize import brentq
from scipy.stats import norm

DEFAULT_SHRINKAGE = 0.9
DEFAULT_MMOE = 1.1


class UsageError(ValueError):
    """Malformed, missing, out-of-range or mutually exclusive input."""


class DomainError(ValueError):
    """Inputs that pass validation but make a criterion mathematically undefined."""


@dataclass(frozen=True)
class CriteriaConfig:
    """Fixed tolerances shared by all calculators.

    Attributes
    ----------
    rsq_difference : float
        Acceptable absolute difference between apparent and adjusted
        R-squared (Nagelkerke's R-squared for binary/survival outcomes).
    risk_margin : float
        Absolute margin of error for the overall outcome risk.
    conf_level : float
        Confidence level for every interval and critical value.
    max_n : int
        Largest sample size any search will consider.
    """

    rsq_difference: float = 0.05
    risk_margin: float = 0.05
    conf_level: float = 0.95
    max_n: int = 10**9

    def __post_init__(self) -> None:
        if not (0.0 < self.rsq_difference < 1.0):
            raise UsageError(
                f"rsq_difference must be in (0, 1), got {self.rsq_difference}"
            )
        if not (0.0 < self.risk_margin < 1.0):
            raise UsageError(f"risk_margin must be in (0, 1), got {self.risk_margin}")
        if not (0.0 < self.conf_level < 1.0):
            raise UsageError(f"conf_level must be in (0, 1), got {self.conf_level}")
        if self.max_n < 2:
            raise UsageError(f"max_n must be >= 2, got {self.max_n}")

    @property
    def z(self) -> float:
        """Two-sided standard normal critical value."""
        return float(norm.ppf(1.0 - (1.0 - self.conf_level) / 2.0))


DEFAULT_CONFIG = CriteriaConfig()


@dataclass(frozen=True)
class Criterion:
    """Candidate sample size produced by one criterion."""

    name: str
    label: str
    n: int
    shrinkage: float
    per_parameter: float  # SPP (continuous) or EPP (binary/survival) at n


@dataclass(frozen=True)
class SampsizeResult:
    """Result of a minimum sample size calculation.

    ``sample_size`` is the largest candidate in ``criteria``; ``binding``
    names the first criterion reaching it. Statistics that do not apply to
    the outcome type (e.g. ``events`` for a continuous outcome) are ``None``.
    """

    type: str
    sample_size: int
    criteria: tuple[Criterion, ...]
    binding: str
    parameters: int
    rsquared: float
    shrinkage: float
    per_parameter: float
    ci: tuple[float, float]
    ci_estimate: float
    events: float | None = None
    person_years: float | None = None
    max_rsquared: float | None = None
    nagelkerke_rsquared: float | None = None
    prevalence: float | None = None
    rate: float | None = None
    timepoint: float | None = None
    meanfup: float | None = None
    intercept: float | None = None
    sd: float | None = None
    mmoe: float | None = None
    config: CriteriaConfig = field(default=DEFAULT_CONFIG)

    @property
    def candidates(self) -> dict[str, int]:
        """Candidate sample size keyed by criterion name."""
        return {c.name: c.n for c in self.criteria}

    def summary(self) -> str:
        """Human-readable report, similar to R's print.pmsampsize."""
        return render(self)

    def __str__(self) -> str:
        return render(self)


# ---------------------------------------------------------------------------
# Shared numerics
# ---------------------------------------------------------------------------

def _smallest_n(
    satisfied: Callable[[int], bool],
    start: int,
    *,
    max_n: int,
    what: str,
) -> int:
    """Smallest integer ``n >= start`` for which ``satisfied(n)`` holds.

    The predicate must be monotone beyond the first ``n`` where it turns
    true. The upper bound grows by doubling from *start* and is then
    bisected, so the number of evaluations is at most
    ``2 * log2(max_n / start)``.

    Raises
    ------
    DomainError
        If no ``n <= max_n`` satisfies the predicate.
    """
    lo, hi = start, start
    while not satisfied(hi):
        if hi >= max_n:
            raise DomainError(
                f"Cannot satisfy the {what} criterion with a sample size "
                f"below {max_n}. Try different input values."
            )
        lo, hi = hi, min(2 * hi, max_n)

    # satisfied(hi); not satisfied(lo) unless start itself was satisfied
    while hi - lo > 1:
        mid = (lo + hi) // 2
        if satisfied(mid):
            hi = mid
        else:
            lo = mid
    return hi


def _solve_parameter(
    func: Callable[[float], float],
    target: float,
    bracket: tuple[float, float],
    *,
    xtol: float = 1e-12,
    maxiter: int = 1000,
) -> float:
    """Solve ``func(x) == target`` via Brent's method.

    Raises
    ------
    DomainError
        If the bracket does not straddle the target (no sign change).
    """
    lo, hi = bracket
    f_lo = func(lo) - target
    f_hi = func(hi) - target

    if f_lo * f_hi > 0:
        raise DomainError(
            f"Cannot solve: target {target:.6f} is outside achievable range "
            f"[{func(lo):.6f}, {func(hi):.6f}] for the given parameters."
        )

    return brentq(lambda x: func(x) - target, lo, hi, xtol=xtol, maxiter=maxiter)


def _shrinkage_n(
    rsquared: float, parameters: int, shrinkage: float, *, max_n: int
) -> int:
    """Subjects needed for an expected shrinkage of *shrinkage* (Riley 2018).

    n = p / ((S - 1) * ln(1 - R2_cs / S))

    Raises
    ------
    DomainError
        If the formula is undefined or the size exceeds *max_n*.
    """
    if shrinkage >= 1.0:
        raise DomainError(
            f"An expected shrinkage of {shrinkage} needs an infinite sample size; "
            "choose shrinkage < 1"
        )
    ratio = rsquared / shrinkage
    if ratio >= 1.0:
        raise DomainError(
            f"R-squared ({rsquared}) must be smaller than the shrinkage "
            f"target ({shrinkage}) for the shrinkage criterion to be defined"
        )
    denom = (shrinkage - 1.0) * math.log1p(-ratio)
    if denom <= 0.0 or not math.isfinite(denom):
        raise DomainError(
            f"Shrinkage criterion undefined for R-squared={rsquared}, "
            f"shrinkage={shrinkage}"
        )
    n = parameters / denom
    if n > max_n:
        raise DomainError(
            f"The shrinkage criterion needs more than {max_n} subjects for "
            f"R-squared={rsquared}, shrinkage={shrinkage}; R-squared is too "
            "small for a finite sample size"
        )
    return math.ceil(n)


def expected_shrinkage(rsquared: float, parameters: int, n: int) -> float:
    """Expected (van Houwelingen) shrinkage of a model developed on *n* subjects.

    Solves ``S = 1 + p / (n * ln(1 - R2_cs / S))`` for S in ``(R2_cs, 1)``.
    The right-hand side minus S is strictly decreasing there, so the root
    is unique. When *n* is tiny relative to *p* the root lies within
    floating-point distance of R2_cs and the lower bracket is returned.

    Parameters
    ----------
    rsquared : float
        Anticipated (adjusted) Cox-Snell R-squared.
    parameters : int
        Number of candidate predictor parameters.
    n : int
        Development sample size.

    Returns
    -------
    float
    """
    if not (0.0 < rsquared < 1.0):
        raise DomainError(f"rsquared must be in (0, 1), got {rsquared}")
    if n < 1 or parameters < 1:
        raise DomainError(f"n and parameters must be positive, got n={n}, p={parameters}")

    def _rhs(s: float) -> float:
        return 1.0 + parameters / (n * math.log(1.0 - rsquared / s)) - s

    lo = rsquared + 1e-12 * (1.0 - rsquared)
    if _rhs(lo) <= 0.0:
        return lo
    return _solve_parameter(_rhs, 0.0, (lo, 1.0))


# ---------------------------------------------------------------------------
# Report rendering
# ---------------------------------------------------------------------------

_RENDER_MODES = ("summary", "print")


def _disclaimers(result: SampsizeResult) -> list[str]:
    cfg = result.config
    lines = [
        f"NB: Assuming {cfg.rsq_difference:g} acceptable difference in "
        "apparent & adjusted R-squared",
    ]
    if result.type == "continuous":
        lines.append(
            f"NB: Assuming MMOE <= {result.mmoe:g} in estimation of intercept "
            "& residual standard deviation"
        )
        lines.append("SPP - Subjects per Predictor Parameter")
    elif result.type == "binary":
        lines.append(
            f"NB: Assuming {cfg.risk_margin:g} margin of error in estimation "
            "of intercept"
        )
        lines.append(
            "NB: Events per Predictor Parameter (EPP) assumes prevalence = "
            f"{result.prevalence:g}"
        )
    else:
        lines.append(
            f"NB: Assuming {cfg.risk_margin:g} margin of error in estimation "
            f"of overall risk at time point = {result.timepoint:g}"
        )
        lines.append(
            "NB: Events per Predictor Parameter (EPP) assumes overall event "
            f"rate = {result.rate:g}"
        )
    return lines


def _table(result: SampsizeResult) -> list[str]:
    if result.type == "continuous":
        header = f"{'':<24}{'Samp_size':>10}{'Shrinkage':>10}{'Parameter':>10}{'Rsq_adj':>9}{'SPP':>8}"

        def _row(label: str, n: int, s: float, pp: float) -> str:
            return (
                f"{label:<24}{n:>10}{s:>10.3f}{result.parameters:>10}"
                f"{result.rsquared:>9.3f}{pp:>8.2f}"
            )
    else:
        header = (
            f"{'':<24}{'Samp_size':>10}{'Shrinkage':>10}{'Parameter':>10}"
            f"{'Rsq_cs':>8}{'Max_Rsq':>9}{'Nag_Rsq':>9}{'EPP':>8}"
        )

        def _row(label: str, n: int, s: float, pp: float) -> str:
            return (
                f"{label:<24}{n:>10}{s:>10.3f}{result.parameters:>10}"
                f"{result.rsquared:>8.3f}{result.max_rsquared:>9.3f}"
                f"{result.nagelkerke_rsquared:>9.3f}{pp:>8.2f}"
            )

    lines = [header]
    for c in result.criteria:
        label = c.label + (" *" if c.name == result.binding else "")
        lines.append(_row(label, c.n, c.shrinkage, c.per_parameter))
    lines.append(_row("Final", result.sample_size, result.shrinkage, result.per_parameter))
    return lines


def _narrative(result: SampsizeResult) -> list[str]:
    n = result.sample_size
    lo, hi = result.ci
    level = f"{result.config.conf_level:.0%}"
    head = (
        "Minimum sample size required for new model development based on "
        f"user inputs = {n}"
    )
    if result.type == "continuous":
        return [
            head,
            "",
            f"* {level} CI for intercept = ({lo:.3f}, {hi:.3f}), for sample size n = {n}",
        ]
    assert result.events is not None
    if result.type == "binary":
        return [
            head + ",",
            f"with {math.ceil(result.events)} events (assuming an outcome "
            f"prevalence = {result.prevalence:g}) and an EPP = {result.per_parameter:.2f}",
            "",
            f"* {level} CI for prevalence = ({lo:.3f}, {hi:.3f}), for sample size n = {n}",
        ]
    assert result.person_years is not None
    return [
        head + ",",
        f"corresponding to {result.person_years:.1f} person-years of follow-up, "
        f"with {math.ceil(result.events)} outcome events",
        f"assuming an overall event rate = {result.rate:g} and therefore an "
        f"EPP = {result.per_parameter:.2f}",
        "",
        f"* {level} CI for overall risk = ({lo:.3f}, {hi:.3f}), for true value of "
        f"{result.ci_estimate:.3f} and sample size n = {n}",
    ]


def render(result: SampsizeResult, mode: str = "summary") -> str:
    """Format a result as text.

    Parameters
    ----------
    result : SampsizeResult
    mode : str
        ``'summary'`` returns the text; ``'print'`` also writes it to stdout.

    Returns
    -------
    str
    """
    if mode not in _RENDER_MODES:
        raise UsageError(f"mode must be one of {_RENDER_MODES}, got {mode!r}")

    lines = _disclaimers(result) + [""] + _table(result) + [""] + _narrative(result)
    text = "\n".join(lines)
    if mode == "print":
        print(text)
    return text
