"""Minimum sample size for logistic prediction models (binary outcomes).

Validates against: R pmsampsize(type = "b")
"""

from __future__ import annotations

import logging
import math

from pmsampsize._common import (
    DEFAULT_CONFIG,
    DEFAULT_SHRINKAGE,
    CriteriaConfig,
    Criterion,
    DomainError,
    SampsizeResult,
    _shrinkage_n,
    expected_shrinkage,
)
from pmsampsize._validate import check_inputs

logger = logging.getLogger(__name__)


def max_rsquared_binary(prevalence: float) -> float:
    """Largest Cox-Snell R-squared attainable for a binary outcome.

    max R2_cs = 1 - exp(2 * lnL_null / n), with the null log-likelihood per
    subject equal to phi*ln(phi) + (1-phi)*ln(1-phi).
    """
    phi = prevalence
    lnl_null = phi * math.log(phi) + (1.0 - phi) * math.log(1.0 - phi)
    return 1.0 - math.exp(2.0 * lnl_null)


def _compute_binary(
    rsquared: float,
    parameters: int,
    prevalence: float,
    shrinkage: float,
    config: CriteriaConfig,
) -> SampsizeResult:
    p = parameters
    phi = prevalence

    max_r2 = max_rsquared_binary(phi)
    if rsquared >= max_r2:
        raise DomainError(
            f"R-squared ({rsquared}) must be smaller than the maximum possible "
            f"Cox-Snell R-squared ({max_r2:.4f}) for an outcome prevalence of {phi}"
        )
    nag_r2 = rsquared / max_r2

    # criterion 1: expected shrinkage
    n1 = _shrinkage_n(rsquared, p, shrinkage, max_n=config.max_n)

    # criterion 2: small optimism in Nagelkerke's R-squared
    s_small_overfit = rsquared / (rsquared + config.rsq_difference * max_r2)
    n2 = _shrinkage_n(rsquared, p, s_small_overfit, max_n=config.max_n)

    # criterion 3: overall risk within +/- risk_margin
    z = config.z
    n3 = math.ceil(z**2 * phi * (1.0 - phi) / config.risk_margin**2)

    criteria = (
        Criterion("shrinkage", "Criteria 1 (shrinkage)", n1, shrinkage, n1 * phi / p),
        Criterion(
            "rsquared_difference", "Criteria 2 (Rsq diff)", n2,
            s_small_overfit, n2 * phi / p,
        ),
        Criterion(
            "overall_risk", "Criteria 3 (overall risk)", n3,
            expected_shrinkage(rsquared, p, n3), n3 * phi / p,
        ),
    )
    logger.debug("binary criteria: %s", {c.name: c.n for c in criteria})

    final = max(c.n for c in criteria)
    binding = next(c for c in criteria if c.n == final)
    events = final * phi
    halfwidth = z * math.sqrt(phi * (1.0 - phi) / final)

    return SampsizeResult(
        type="binary",
        sample_size=final,
        criteria=criteria,
        binding=binding.name,
        parameters=p,
        rsquared=rsquared,
        shrinkage=binding.shrinkage,
        per_parameter=events / p,
        ci=(phi - halfwidth, phi + halfwidth),
        ci_estimate=phi,
        events=events,
        max_rsquared=max_r2,
        nagelkerke_rsquared=nag_r2,
        prevalence=phi,
        config=config,
    )


def samplesize_binary(
    rsquared: float,
    parameters: int,
    prevalence: float,
    shrinkage: float = DEFAULT_SHRINKAGE,
    config: CriteriaConfig = DEFAULT_CONFIG,
) -> SampsizeResult:
    """Minimum sample size for a logistic prediction model.

    Parameters
    ----------
    rsquared : float
        Anticipated Cox-Snell R-squared of the new model.
    parameters : int
        Number of candidate predictor parameters.
    prevalence : float
        Overall outcome proportion in the development population.
    shrinkage : float
        Target expected shrinkage of predictor effects (default 0.9).
    config : CriteriaConfig
        Tolerances shared by the criteria.

    Returns
    -------
    SampsizeResult

    Examples
    --------
    >>> r = samplesize_binary(rsquared=0.288, parameters=24, prevalence=0.174)
    >>> r.sample_size
    662

    Validates against: R pmsampsize(type = "b")
    """
    check_inputs(
        "binary",
        rsquared=rsquared,
        parameters=parameters,
        shrinkage=shrinkage,
        prevalence=prevalence,
    )
    return _compute_binary(
        float(rsquared), int(parameters), float(prevalence), float(shrinkage), config,
    )
