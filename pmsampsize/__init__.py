"""
pmsampsize: Minimum sample size for developing a multivariable prediction model.

Implements the criteria of Riley et al. (2018, Statistics in Medicine) for
continuous, binary and time-to-event outcomes. Each calculation returns the
smallest sample size meeting every criterion, together with the candidate
size of each criterion and supporting statistics.

Usage:
    from pmsampsize import pmsampsize
    print(pmsampsize("b", rsquared=0.288, parameters=24, prevalence=0.174))
"""

import logging

__version__ = "0.1.0"

from pmsampsize._common import (
    DEFAULT_CONFIG,
    DEFAULT_MMOE,
    DEFAULT_SHRINKAGE,
    CriteriaConfig,
    Criterion,
    DomainError,
    SampsizeResult,
    UsageError,
    expected_shrinkage,
    render,
)
from pmsampsize._validate import check_inputs
from pmsampsize._continuous import samplesize_continuous
from pmsampsize._binary import max_rsquared_binary, samplesize_binary
from pmsampsize._survival import (
    cumulative_incidence,
    max_rsquared_survival,
    samplesize_survival,
)
from pmsampsize._dispatch import pmsampsize

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "pmsampsize",
    "samplesize_continuous",
    "samplesize_binary",
    "samplesize_survival",
    "check_inputs",
    "expected_shrinkage",
    "max_rsquared_binary",
    "max_rsquared_survival",
    "cumulative_incidence",
    "render",
    "SampsizeResult",
    "Criterion",
    "CriteriaConfig",
    "DEFAULT_CONFIG",
    "DEFAULT_SHRINKAGE",
    "DEFAULT_MMOE",
    "UsageError",
    "DomainError",
]
