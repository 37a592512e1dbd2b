"""Tests for samplesize_survival."""

import math

import numpy as np
import pytest

from pmsampsize import (
    DomainError,
    cumulative_incidence,
    max_rsquared_survival,
    samplesize_survival,
)


class TestSurvivalPublishedExample:
    """R pmsampsize example: R2_cs=0.051, rate=0.065, timepoint=2, meanfup=2.07."""

    def test_thirty_parameters(self):
        r = samplesize_survival(
            rsquared=0.051, parameters=30, rate=0.065, timepoint=2, meanfup=2.07,
        )
        assert r.sample_size == 5143
        assert r.person_years == pytest.approx(10646.01)
        assert math.ceil(r.events) == 692

    def test_twenty_five_parameters(self):
        r = samplesize_survival(
            rsquared=0.051, parameters=25, rate=0.065, timepoint=2, meanfup=2.07,
        )
        assert r.candidates == {
            "shrinkage": 4286,
            "rsquared_difference": 866,
            "overall_risk": 158,
        }
        assert r.sample_size == 4286
        assert r.binding == "shrinkage"
        assert math.ceil(r.events) == 577
        assert r.per_parameter == pytest.approx(23.07, abs=5e-3)

    def test_rsquared_scales(self):
        r = samplesize_survival(
            rsquared=0.051, parameters=25, rate=0.065, timepoint=2, meanfup=2.07,
        )
        assert r.max_rsquared == pytest.approx(0.5546, abs=1e-4)
        assert r.nagelkerke_rsquared == pytest.approx(0.0920, abs=1e-3)

    def test_risk_interval(self):
        r = samplesize_survival(
            rsquared=0.051, parameters=25, rate=0.065, timepoint=2, meanfup=2.07,
        )
        lo, hi = r.ci
        assert r.ci_estimate == pytest.approx(0.1219, abs=1e-4)
        assert lo < r.ci_estimate < hi
        assert hi - r.ci_estimate <= 0.05
        assert r.ci_estimate - lo <= 0.05


class TestSurvivalProperties:

    def test_cumulative_incidence(self):
        assert cumulative_incidence(0.065, 2) == pytest.approx(1 - math.exp(-0.13))

    def test_selection_law(self):
        r = samplesize_survival(
            rsquared=0.1, parameters=10, rate=0.2, timepoint=1, meanfup=1.5,
        )
        assert r.sample_size == max(c.n for c in r.criteria)

    def test_idempotent(self):
        kw = dict(rsquared=0.051, parameters=25, rate=0.065, timepoint=2, meanfup=2.07)
        assert samplesize_survival(**kw) == samplesize_survival(**kw)

    def test_stricter_shrinkage_more_n(self):
        sizes = [
            samplesize_survival(
                rsquared=0.051, parameters=25, rate=0.065, timepoint=2,
                meanfup=2.07, shrinkage=float(s),
            ).sample_size
            for s in np.linspace(0.6, 0.95, 8)
        ]
        assert all(a <= b for a, b in zip(sizes, sizes[1:]))

    def test_lower_rsquared_more_n(self):
        sizes = [
            samplesize_survival(
                rsquared=float(r2), parameters=25, rate=0.065, timepoint=2, meanfup=2.07,
            ).sample_size
            for r2 in np.linspace(0.1, 0.02, 8)
        ]
        assert all(a <= b for a, b in zip(sizes, sizes[1:]))

    def test_high_rate_risk_criterion(self):
        """Risk precision needs more subjects when follow-up is short."""
        short = samplesize_survival(
            rsquared=0.05, parameters=5, rate=0.3, timepoint=3, meanfup=0.2,
        )
        long = samplesize_survival(
            rsquared=0.05, parameters=5, rate=0.3, timepoint=3, meanfup=2.0,
        )
        assert short.candidates["overall_risk"] > long.candidates["overall_risk"]

    def test_mmoe_echoed(self):
        r = samplesize_survival(
            rsquared=0.051, parameters=25, rate=0.065, timepoint=2, meanfup=2.07, mmoe=1.2,
        )
        assert r.mmoe == 1.2


class TestSurvivalDomainErrors:

    def test_no_attainable_rsquared(self):
        """Above e events per subject the maximum R-squared is not positive."""
        assert max_rsquared_survival(2.0, 2.0) <= 0.0
        with pytest.raises(DomainError, match=r"rate \* meanfup \(4 events per subject\)"):
            samplesize_survival(rsquared=0.05, parameters=5, rate=2.0, timepoint=1, meanfup=2.0)

    def test_rsquared_above_max(self):
        with pytest.raises(DomainError, match="maximum possible"):
            samplesize_survival(rsquared=0.6, parameters=25, rate=0.065, timepoint=2, meanfup=2.07)

    @pytest.mark.parametrize("r2", [1e-10, 1e-13])
    def test_tiny_rsquared_raises(self, r2):
        with pytest.raises(DomainError, match="needs more than"):
            samplesize_survival(rsquared=r2, parameters=25, rate=0.065, timepoint=2, meanfup=2.07)

    def test_shrinkage_one(self):
        with pytest.raises(DomainError):
            samplesize_survival(
                rsquared=0.051, parameters=25, rate=0.065, timepoint=2,
                meanfup=2.07, shrinkage=1.0,
            )
