"""Minimum sample size for linear prediction models (continuous outcomes).

Criteria from Riley et al. (2018) Part I:

1. expected shrinkage of predictor effects >= target,
2. small absolute difference between apparent and adjusted R-squared,
3. precise estimation of the residual standard deviation,
4. precise estimation of the mean outcome (intercept).

Validates against: R pmsampsize(type = "c")
"""

from __future__ import annotations

import logging
import math

from scipy.stats import chi2
from scipy.stats import t as t_dist

from pmsampsize._common import (
    DEFAULT_CONFIG,
    DEFAULT_MMOE,
    DEFAULT_SHRINKAGE,
    CriteriaConfig,
    Criterion,
    DomainError,
    SampsizeResult,
    _smallest_n,
)
from pmsampsize._validate import check_inputs

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal computations
# ---------------------------------------------------------------------------

def _apparent_rsquared(rsquared: float, parameters: int, n: int) -> float:
    """Apparent R-squared implied by an adjusted R-squared at size n."""
    return (rsquared * (n - parameters - 1) + parameters) / (n - 1)


def _linear_shrinkage(rsquared: float, parameters: int, n: int) -> float:
    """Expected shrinkage of a linear model with p parameters fitted to n subjects.

    S = 1 + (p - 2) / (n * ln(1 - R2_app))
    """
    r2app = _apparent_rsquared(rsquared, parameters, n)
    return 1.0 + (parameters - 2) / (n * math.log(1.0 - r2app))


def _residual_sd_mmoe(df: int, conf_level: float) -> float:
    """Largest multiplicative margin of error of the residual SD estimate."""
    alpha = 1.0 - conf_level
    lower = math.sqrt(df / chi2.ppf(alpha / 2.0, df))
    upper = math.sqrt(chi2.ppf(1.0 - alpha / 2.0, df) / df)
    return max(lower, upper)


def _intercept_halfwidth(
    n: int, parameters: int, residual_sd: float, conf_level: float
) -> float:
    df = n - parameters - 1
    tcrit = t_dist.ppf(1.0 - (1.0 - conf_level) / 2.0, df)
    return float(tcrit * residual_sd / math.sqrt(n))


def _compute_continuous(
    rsquared: float,
    parameters: int,
    intercept: float,
    sd: float,
    shrinkage: float,
    mmoe: float,
    config: CriteriaConfig,
) -> SampsizeResult:
    """Evaluate the four linear-model criteria and pick the largest.

    The shrinkage criterion works on the apparent R-squared at each n, whose
    log argument ``1 - R2_app`` is always positive, so there is no
    ``rsquared / shrinkage >= 1`` failure here as in the binary and survival
    closed form. Its only undefined case is a target of 1 with p > 2.
    """
    p = parameters
    start = p + 2  # smallest n leaving one residual degree of freedom

    # criterion 1: expected shrinkage
    if shrinkage >= 1.0 and p > 2:
        raise DomainError(
            "An expected shrinkage of 1 cannot be reached with more than two "
            "parameters; choose shrinkage < 1"
        )
    n1 = _smallest_n(
        lambda n: _linear_shrinkage(rsquared, p, n) >= shrinkage,
        start,
        max_n=config.max_n,
        what="shrinkage",
    )

    # criterion 2: apparent vs adjusted R-squared
    n2 = max(start, math.ceil(1.0 + p * (1.0 - rsquared) / config.rsq_difference))

    # criterion 3: residual standard deviation
    n3 = _smallest_n(
        lambda n: _residual_sd_mmoe(n - p - 1, config.conf_level) <= mmoe,
        start,
        max_n=config.max_n,
        what="residual standard deviation",
    )

    # criterion 4: intercept
    if intercept == 0.0:
        raise DomainError(
            "A multiplicative margin of error for the intercept is undefined "
            "when intercept = 0"
        )
    residual_sd = sd * math.sqrt(1.0 - rsquared)
    margin = (mmoe - 1.0) * abs(intercept)
    n4 = _smallest_n(
        lambda n: _intercept_halfwidth(n, p, residual_sd, config.conf_level) <= margin,
        start,
        max_n=config.max_n,
        what="intercept",
    )

    labels = {
        "shrinkage": "Criteria 1 (shrinkage)",
        "rsquared_difference": "Criteria 2 (Rsq diff)",
        "residual_sd": "Criteria 3 (residual SD)",
        "intercept": "Criteria 4 (intercept)",
    }
    sizes = {"shrinkage": n1, "rsquared_difference": n2, "residual_sd": n3, "intercept": n4}
    criteria = tuple(
        Criterion(
            name=name,
            label=labels[name],
            n=n,
            shrinkage=_linear_shrinkage(rsquared, p, n),
            per_parameter=n / p,
        )
        for name, n in sizes.items()
    )
    logger.debug("continuous criteria: %s", sizes)

    final = max(c.n for c in criteria)
    binding = next(c for c in criteria if c.n == final)
    halfwidth = _intercept_halfwidth(final, p, residual_sd, config.conf_level)

    return SampsizeResult(
        type="continuous",
        sample_size=final,
        criteria=criteria,
        binding=binding.name,
        parameters=p,
        rsquared=rsquared,
        shrinkage=binding.shrinkage,
        per_parameter=final / p,
        ci=(intercept - halfwidth, intercept + halfwidth),
        ci_estimate=intercept,
        intercept=intercept,
        sd=sd,
        mmoe=mmoe,
        config=config,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def samplesize_continuous(
    rsquared: float,
    parameters: int,
    intercept: float,
    sd: float,
    shrinkage: float = DEFAULT_SHRINKAGE,
    mmoe: float = DEFAULT_MMOE,
    config: CriteriaConfig = DEFAULT_CONFIG,
) -> SampsizeResult:
    """Minimum sample size for a linear prediction model.

    Parameters
    ----------
    rsquared : float
        Anticipated adjusted R-squared of the new model.
    parameters : int
        Number of candidate predictor parameters.
    intercept : float
        Average outcome value in the population.
    sd : float
        Standard deviation of the outcome in the population.
    shrinkage : float
        Target expected shrinkage of predictor effects (default 0.9).
    mmoe : float
        Acceptable multiplicative margin of error for the intercept and the
        residual standard deviation (default 1.1).
    config : CriteriaConfig
        Tolerances shared by the criteria.

    Returns
    -------
    SampsizeResult

    Examples
    --------
    >>> r = samplesize_continuous(rsquared=0.2, parameters=25, intercept=1.9, sd=0.6)
    >>> r.sample_size
    918

    Validates against: R pmsampsize(type = "c")
    """
    check_inputs(
        "continuous",
        rsquared=rsquared,
        parameters=parameters,
        shrinkage=shrinkage,
        intercept=intercept,
        sd=sd,
        mmoe=mmoe,
    )
    return _compute_continuous(
        float(rsquared), int(parameters), float(intercept), float(sd),
        float(shrinkage), float(mmoe), config,
    )
