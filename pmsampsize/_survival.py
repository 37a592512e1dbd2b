"""Minimum sample size for time-to-event (Cox-type) prediction models.

Follow-up is summarised by the mean follow-up per subject, so a study of n
subjects accrues ``n * meanfup`` person-years and ``n * meanfup * rate``
events. Risk at the prediction timepoint assumes a constant hazard equal to
the overall event rate.

Validates against: R pmsampsize(type = "s")
"""

from __future__ import annotations

import logging
import math

from pmsampsize._common import (
    DEFAULT_CONFIG,
    DEFAULT_MMOE,
    DEFAULT_SHRINKAGE,
    CriteriaConfig,
    Criterion,
    DomainError,
    SampsizeResult,
    _shrinkage_n,
    _smallest_n,
    expected_shrinkage,
)
from pmsampsize._validate import check_inputs

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal computations
# ---------------------------------------------------------------------------

def max_rsquared_survival(rate: float, meanfup: float) -> float:
    """Largest Cox-Snell R-squared attainable for an exponential null model.

    With x = rate * meanfup events per subject, the null log-likelihood per
    subject is x*ln(x) - x.
    """
    x = rate * meanfup
    lnl_null = x * math.log(x) - x
    return 1.0 - math.exp(2.0 * lnl_null)


def cumulative_incidence(rate: float, timepoint: float) -> float:
    """Risk of the event by *timepoint* under a constant hazard *rate*."""
    return 1.0 - math.exp(-rate * timepoint)


def _risk_interval(
    n: int, rate: float, timepoint: float, meanfup: float, z: float
) -> tuple[float, float]:
    """Confidence interval for the cumulative incidence after n subjects' follow-up."""
    se = math.sqrt(rate / (n * meanfup))
    lci = cumulative_incidence(rate - z * se, timepoint)
    uci = cumulative_incidence(rate + z * se, timepoint)
    return lci, uci


def _compute_survival(
    rsquared: float,
    parameters: int,
    rate: float,
    timepoint: float,
    meanfup: float,
    shrinkage: float,
    mmoe: float,
    config: CriteriaConfig,
) -> SampsizeResult:
    p = parameters
    events_per_subject = rate * meanfup

    max_r2 = max_rsquared_survival(rate, meanfup)
    if max_r2 <= 0.0:
        raise DomainError(
            f"No positive Cox-Snell R-squared is attainable when rate * meanfup "
            f"({events_per_subject:g} events per subject) is e or larger; check "
            "the event rate and mean follow-up"
        )
    if rsquared >= max_r2:
        raise DomainError(
            f"R-squared ({rsquared}) must be smaller than the maximum possible "
            f"Cox-Snell R-squared ({max_r2:.4f}) for an event rate of {rate} "
            f"and mean follow-up of {meanfup}"
        )
    nag_r2 = rsquared / max_r2

    # criterion 1: expected shrinkage
    n1 = _shrinkage_n(rsquared, p, shrinkage, max_n=config.max_n)

    # criterion 2: small optimism in Nagelkerke's R-squared
    s_small_overfit = rsquared / (rsquared + config.rsq_difference * max_r2)
    n2 = _shrinkage_n(rsquared, p, s_small_overfit, max_n=config.max_n)

    # criterion 3: overall risk at timepoint within +/- risk_margin
    z = config.z
    cuminc = cumulative_incidence(rate, timepoint)

    def _precise(n: int) -> bool:
        lci, uci = _risk_interval(n, rate, timepoint, meanfup, z)
        return cuminc - lci <= config.risk_margin and uci - cuminc <= config.risk_margin

    n3 = _smallest_n(_precise, 1, max_n=config.max_n, what="overall risk")

    criteria = (
        Criterion(
            "shrinkage", "Criteria 1 (shrinkage)", n1, shrinkage,
            n1 * events_per_subject / p,
        ),
        Criterion(
            "rsquared_difference", "Criteria 2 (Rsq diff)", n2, s_small_overfit,
            n2 * events_per_subject / p,
        ),
        Criterion(
            "overall_risk", "Criteria 3 (overall risk)", n3,
            expected_shrinkage(rsquared, p, n3), n3 * events_per_subject / p,
        ),
    )
    logger.debug("survival criteria: %s", {c.name: c.n for c in criteria})

    final = max(c.n for c in criteria)
    binding = next(c for c in criteria if c.n == final)
    person_years = final * meanfup
    events = person_years * rate

    return SampsizeResult(
        type="survival",
        sample_size=final,
        criteria=criteria,
        binding=binding.name,
        parameters=p,
        rsquared=rsquared,
        shrinkage=binding.shrinkage,
        per_parameter=events / p,
        ci=_risk_interval(final, rate, timepoint, meanfup, z),
        ci_estimate=cuminc,
        events=events,
        person_years=person_years,
        max_rsquared=max_r2,
        nagelkerke_rsquared=nag_r2,
        rate=rate,
        timepoint=timepoint,
        meanfup=meanfup,
        mmoe=mmoe,
        config=config,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def samplesize_survival(
    rsquared: float,
    parameters: int,
    rate: float,
    timepoint: float,
    meanfup: float,
    shrinkage: float = DEFAULT_SHRINKAGE,
    mmoe: float = DEFAULT_MMOE,
    config: CriteriaConfig = DEFAULT_CONFIG,
) -> SampsizeResult:
    """Minimum sample size for a survival (time-to-event) prediction model.

    Parameters
    ----------
    rsquared : float
        Anticipated Cox-Snell R-squared of the new model.
    parameters : int
        Number of candidate predictor parameters.
    rate : float
        Overall event rate (events per person-time unit).
    timepoint : float
        Timepoint of interest for prediction, in the same time unit.
    meanfup : float
        Anticipated mean follow-up per subject.
    shrinkage : float
        Target expected shrinkage of predictor effects (default 0.9).
    mmoe : float
        Multiplicative margin of error; echoed in the result only.
    config : CriteriaConfig
        Tolerances shared by the criteria.

    Returns
    -------
    SampsizeResult

    Examples
    --------
    >>> r = samplesize_survival(rsquared=0.051, parameters=30, rate=0.065,
    ...                         timepoint=2, meanfup=2.07)
    >>> r.sample_size
    5143

    Validates against: R pmsampsize(type = "s")
    """
    check_inputs(
        "survival",
        rsquared=rsquared,
        parameters=parameters,
        shrinkage=shrinkage,
        rate=rate,
        timepoint=timepoint,
        meanfup=meanfup,
        mmoe=mmoe,
    )
    return _compute_survival(
        float(rsquared), int(parameters), float(rate), float(timepoint),
        float(meanfup), float(shrinkage), float(mmoe), config,
    )
