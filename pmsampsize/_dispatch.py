"""Single entry point selecting the calculator by outcome type."""

from __future__ import annotations

from pmsampsize._binary import _compute_binary
from pmsampsize._common import (
    DEFAULT_CONFIG,
    DEFAULT_MMOE,
    DEFAULT_SHRINKAGE,
    CriteriaConfig,
    SampsizeResult,
)
from pmsampsize._continuous import _compute_continuous
from pmsampsize._survival import _compute_survival
from pmsampsize._validate import check_inputs


def pmsampsize(
    type: str,
    rsquared: float,
    parameters: int,
    shrinkage: float = DEFAULT_SHRINKAGE,
    prevalence: float | None = None,
    rate: float | None = None,
    timepoint: float | None = None,
    meanfup: float | None = None,
    intercept: float | None = None,
    sd: float | None = None,
    mmoe: float | None = None,
    config: CriteriaConfig = DEFAULT_CONFIG,
) -> SampsizeResult:
    """Minimum sample size for developing a multivariable prediction model.

    Only the arguments belonging to the chosen outcome type may be given:

    - ``'continuous'`` (``'c'``): *intercept*, *sd*, *mmoe*
    - ``'binary'`` (``'b'``): *prevalence*
    - ``'survival'`` (``'s'``): *rate*, *timepoint*, *meanfup*, *mmoe*

    *mmoe* defaults to 1.1 where it applies.

    Examples
    --------
    >>> pmsampsize("b", rsquared=0.288, parameters=24, prevalence=0.174).sample_size
    662

    Validates against: R pmsampsize()
    """
    type_ = check_inputs(
        type,
        rsquared=rsquared,
        parameters=parameters,
        shrinkage=shrinkage,
        prevalence=prevalence,
        rate=rate,
        timepoint=timepoint,
        meanfup=meanfup,
        intercept=intercept,
        sd=sd,
        mmoe=mmoe,
    )
    mmoe_ = DEFAULT_MMOE if mmoe is None else float(mmoe)

    if type_ == "continuous":
        return _compute_continuous(
            float(rsquared), int(parameters), float(intercept), float(sd),
            float(shrinkage), mmoe_, config,
        )
    if type_ == "binary":
        return _compute_binary(
            float(rsquared), int(parameters), float(prevalence), float(shrinkage), config,
        )
    return _compute_survival(
        float(rsquared), int(parameters), float(rate), float(timepoint),
        float(meanfup), float(shrinkage), mmoe_, config,
    )
