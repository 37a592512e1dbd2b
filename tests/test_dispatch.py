"""Tests for the pmsampsize entry point and report rendering."""

import dataclasses

import pytest

from pmsampsize import (
    UsageError,
    pmsampsize,
    render,
    samplesize_binary,
    samplesize_continuous,
    samplesize_survival,
)


class TestDispatch:

    def test_continuous(self):
        r = pmsampsize("c", rsquared=0.2, parameters=25, intercept=1.9, sd=0.6)
        assert r == samplesize_continuous(rsquared=0.2, parameters=25, intercept=1.9, sd=0.6)
        assert r.mmoe == 1.1

    def test_binary(self):
        r = pmsampsize("b", rsquared=0.288, parameters=24, prevalence=0.174)
        assert r == samplesize_binary(rsquared=0.288, parameters=24, prevalence=0.174)

    def test_survival(self):
        r = pmsampsize(
            "survival", rsquared=0.051, parameters=25, rate=0.065, timepoint=2, meanfup=2.07,
        )
        assert r == samplesize_survival(
            rsquared=0.051, parameters=25, rate=0.065, timepoint=2, meanfup=2.07,
        )
        assert r.type == "survival"

    def test_cross_contamination(self):
        with pytest.raises(UsageError, match="prevalence"):
            pmsampsize(
                "continuous", rsquared=0.2, parameters=25, intercept=1.9, sd=0.6,
                prevalence=0.1,
            )

    def test_result_is_frozen(self):
        r = pmsampsize("b", rsquared=0.288, parameters=24, prevalence=0.174)
        with pytest.raises(dataclasses.FrozenInstanceError):
            r.sample_size = 1


class TestRender:

    def test_binary_report(self):
        r = pmsampsize("b", rsquared=0.288, parameters=24, prevalence=0.174)
        text = r.summary()
        assert "assumes prevalence = 0.174" in text
        assert "Criteria 2 (Rsq diff) *" in text
        assert "Nag_Rsq" in text
        assert "user inputs = 662" in text
        assert "with 116 events" in text

    def test_continuous_report(self):
        r = pmsampsize("c", rsquared=0.2, parameters=25, intercept=1.9, sd=0.6)
        text = render(r)
        assert "SPP - Subjects per Predictor Parameter" in text
        assert "MMOE <= 1.1" in text
        assert "95% CI for intercept = (1.865, 1.935)" in text

    def test_survival_report(self):
        r = pmsampsize(
            "s", rsquared=0.051, parameters=30, rate=0.065, timepoint=2, meanfup=2.07,
        )
        text = render(r)
        assert "overall risk at time point = 2" in text
        assert "10646.0 person-years" in text
        assert "692 outcome events" in text

    def test_print_mode_matches_summary(self, capsys):
        r = pmsampsize("b", rsquared=0.288, parameters=24, prevalence=0.174)
        text = render(r, mode="print")
        assert capsys.readouterr().out == text + "\n"
        assert text == r.summary() == str(r)

    def test_invalid_mode(self):
        r = pmsampsize("b", rsquared=0.288, parameters=24, prevalence=0.174)
        with pytest.raises(UsageError, match="mode"):
            render(r, mode="html")
