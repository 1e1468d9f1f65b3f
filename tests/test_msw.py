'''
Tests for the SVAR-IV inference engine.

This module covers msw_inference end to end on synthetic reduced forms with a
strong and a weak instrument, together with its collaborators: the Cholesky
benchmark, the structural shock recovery and the first-stage diagnostics.
'''

import dataclasses
import logging

import numpy as np
import pandas as pd
import pytest
from scipy import linalg

from svariv.core.config import set_config
from svariv.core.exceptions import (
    NumericalError, NumericWarning, ParameterError, WeakInstrumentWarning
)
from svariv.core.types import IntervalCase
from svariv.models.svar import msw
from svariv.models.svar.cholesky import cholesky_benchmark
from svariv.models.svar.diagnostics import first_stage_diagnostics
from svariv.models.svar.ma_representation import build_ma_representation
from svariv.models.svar.msw import PluginInference, RobustInference, msw_inference
from svariv.models.svar.shocks import recover_structural_shock
from svariv.models.svar.weak_iv import BoundedInterval, WholeLine, critical_value

from .conftest import make_rform


def _off_pinned(shape, nvar=1):
    mask = np.ones(shape, dtype=bool)
    mask[nvar - 1, 0] = False
    return mask


class TestStrongInstrument:
    """msw_inference with a strong instrument."""

    @pytest.fixture
    def results(self, strong_rform):
        return msw_inference(0.68, 1, 1.0, 10, strong_rform)

    def test_result_types(self, results):
        inference, plugin, chol = results
        assert isinstance(inference, RobustInference)
        assert isinstance(plugin, PluginInference)
        assert chol.irf.shape == (2, 11)

    def test_shapes(self, results):
        inference, plugin, _ = results
        for arr in (inference.a, inference.b, inference.c, inference.delta,
                    inference.case, inference.lower, inference.upper,
                    inference.lower_cum, inference.upper_cum, inference.case_cum,
                    inference.dmethod_lower, inference.dmethod_upper,
                    inference.dmethod_lower_cum, inference.dmethod_upper_cum,
                    plugin.irf, plugin.irf_std_error, plugin.irf_cum, plugin.irf_std_error_cum):
            assert arr.shape == (2, 11)
        assert plugin.epsilon.shape == (500,)

    def test_all_sets_bounded(self, results):
        inference, _, _ = results
        mask = _off_pinned(inference.case.shape)
        assert np.all(inference.case[mask] == IntervalCase.BOUNDED)
        assert np.all(inference.case_cum[mask] == IntervalCase.BOUNDED)
        assert inference.diagnostics.bounded_guaranteed

    @pytest.mark.parametrize("confidence, horizons", [(0.68, 10), (0.90, 4)])
    def test_robust_close_to_delta_method(self, strong_rform, confidence, horizons):
        inference, _, _ = msw_inference(confidence, 1, 1.0, horizons, strong_rform)
        mask = _off_pinned(inference.case.shape)
        for suffix in ("", "_cum"):
            lower = getattr(inference, "lower" + suffix)
            upper = getattr(inference, "upper" + suffix)
            d_lower = getattr(inference, "dmethod_lower" + suffix)
            d_upper = getattr(inference, "dmethod_upper" + suffix)
            width = d_upper - d_lower
            assert np.all(np.abs(lower - d_lower)[mask] <= 0.25 * width[mask])
            assert np.all(np.abs(upper - d_upper)[mask] <= 0.25 * width[mask])
            assert np.all((lower < d_upper)[mask])
            assert np.all((d_lower < upper)[mask])

    def test_robust_sets_contain_point_estimates(self, results):
        inference, plugin, _ = results
        mask = _off_pinned(inference.case.shape)
        assert np.all((inference.lower <= plugin.irf)[mask])
        assert np.all((plugin.irf <= inference.upper)[mask])

    def test_normalization_pinned(self, strong_rform):
        inference, plugin, chol = msw_inference(0.9, 1, -2.0, 4, strong_rform)
        assert inference.lower[0, 0] == -2.0
        assert inference.upper[0, 0] == -2.0
        assert inference.lower_cum[0, 0] == -2.0
        assert inference.confidence_set(0, 0) == BoundedInterval(-2.0, -2.0)
        assert plugin.irf[0, 0] == pytest.approx(-2.0)
        assert plugin.irf_std_error[0, 0] == pytest.approx(0.0, abs=1e-12)
        assert chol.irf[0, 0] == pytest.approx(-2.0)

    def test_cumulative_equals_non_cumulative_at_impact(self, results):
        inference, plugin, chol = results
        np.testing.assert_allclose(plugin.irf_cum[:, 0], plugin.irf[:, 0])
        np.testing.assert_allclose(inference.lower_cum[:, 0], inference.lower[:, 0])
        np.testing.assert_allclose(inference.dmethod_upper_cum[:, 0], inference.dmethod_upper[:, 0])
        np.testing.assert_allclose(chol.irf_cum[:, 0], chol.irf[:, 0])

    def test_cumulative_point_is_running_sum(self, results):
        _, plugin, _ = results
        np.testing.assert_allclose(plugin.irf_cum, np.cumsum(plugin.irf, axis=1))

    def test_second_normalization_variable(self, strong_rform):
        inference, plugin, chol = msw_inference(0.68, 2, 1.0, 3, strong_rform)
        assert inference.lower[1, 0] == 1.0
        assert plugin.irf[1, 0] == pytest.approx(1.0)
        assert chol.irf[1, 0] == pytest.approx(1.0)
        assert inference.metadata["norm_var"] == 2

    def test_zero_horizons(self, strong_rform):
        inference, plugin, chol = msw_inference(0.68, 1, 1.0, 0, strong_rform)
        assert inference.case.shape == (2, 1)
        assert plugin.irf.shape == (2, 1)
        assert chol.irf.shape == (2, 1)

    def test_to_pandas(self, results):
        inference, plugin, _ = results
        table = inference.to_pandas()
        assert isinstance(table.index, pd.MultiIndex)
        assert table.index.names == ["variable", "horizon"]
        assert len(table) == 22
        assert {"lower", "upper", "case", "dmethod_lower_cum"} <= set(table.columns)
        assert table.loc[("y2", 3), "upper"] == inference.upper[1, 3]

        irfs = plugin.to_pandas()
        assert list(irfs.columns) == ["irf", "irf_std_error", "irf_cum", "irf_std_error_cum"]
        shocks = plugin.shocks_to_pandas()
        assert shocks.shape == (500, 2)

    def test_summary(self, results):
        inference, _, _ = results
        text = inference.summary()
        assert "Critical value" in text
        assert "Cases (1-4), non-cumulative:" in text
        assert "First-stage Wald statistic: 125.0000" in text

    def test_no_weak_instrument_warning(self, strong_rform, recwarn):
        msw_inference(0.68, 1, 1.0, 5, strong_rform)
        assert not any(issubclass(w.category, WeakInstrumentWarning) for w in recwarn)


class TestWeakInstrument:
    """msw_inference with a nearly irrelevant instrument."""

    @pytest.mark.parametrize("gamma_scale, expected", [
        (1.0, IntervalCase.BOUNDED),
        (1e-3, IntervalCase.WHOLE_LINE),
    ])
    def test_case_switches_with_instrument_strength(self, rng, gamma_scale, expected, recwarn):
        rform = make_rform(rng, gamma_scale=gamma_scale)
        inference, _, _ = msw_inference(0.90, 1, 1.0, 4, rform)

        W2 = rform.covariance_blocks().W2
        strong = rform.T * rform.gamma[0] ** 2 > critical_value(0.90) * W2[0, 0]
        assert strong == (expected == IntervalCase.BOUNDED)
        assert np.all((inference.a > 0) == strong)

        mask = _off_pinned(inference.case.shape)
        assert np.all(inference.case[mask] == expected)
        assert np.all(inference.case_cum[mask] == expected)

    def test_whole_line_sets(self, weak_rform):
        with pytest.warns(WeakInstrumentWarning):
            inference, plugin, _ = msw_inference(0.68, 1, 1.0, 8, weak_rform)

        mask = _off_pinned(inference.case.shape)
        assert np.all(inference.case[mask] == IntervalCase.WHOLE_LINE)
        assert np.all(inference.case_cum[mask] == IntervalCase.WHOLE_LINE)
        assert np.all(np.isneginf(inference.lower[mask]))
        assert np.all(np.isposinf(inference.upper[mask]))
        assert isinstance(inference.confidence_set(1, 2, cumulative=True), WholeLine)

        # The pinned cell is still reported as the scale
        assert inference.lower[0, 0] == 1.0
        assert inference.upper[0, 0] == 1.0
        assert not inference.diagnostics.bounded_guaranteed

        # Delta-method intervals stay finite regardless
        assert np.all(np.isfinite(inference.dmethod_lower))
        assert np.all(np.isfinite(plugin.irf_std_error))

    def test_warning_carries_statistic(self, weak_rform):
        with pytest.warns(WeakInstrumentWarning) as record:
            msw_inference(0.68, 1, 1.0, 2, weak_rform)
        warning = next(w.message for w in record if isinstance(w.message, WeakInstrumentWarning))
        assert warning.wald_statistic < warning.critical_value

    def test_near_zero_gamma_warns(self, strong_rform):
        rform = dataclasses.replace(strong_rform, gamma=np.array([1e-12, 0.3]))
        with pytest.warns(NumericWarning):
            msw_inference(0.68, 1, 1.0, 2, rform)

    def test_threshold_from_config(self, weak_rform):
        set_config("numerical", "gamma_warning_threshold", 1e-2)
        with pytest.warns(NumericWarning):
            msw_inference(0.68, 1, 1.0, 2, weak_rform)


class TestInferenceErrors:
    """Error handling of msw_inference."""

    @pytest.mark.parametrize("confidence", [0.0, 1.0, 1.2, -0.1])
    def test_invalid_confidence(self, strong_rform, confidence):
        with pytest.raises(ParameterError):
            msw_inference(confidence, 1, 1.0, 5, strong_rform)

    @pytest.mark.parametrize("norm_var", [0, 3, 1.0, True])
    def test_invalid_norm_var(self, strong_rform, norm_var):
        with pytest.raises(ParameterError):
            msw_inference(0.68, norm_var, 1.0, 5, strong_rform)

    @pytest.mark.parametrize("scale", [0.0, np.nan, np.inf])
    def test_invalid_scale(self, strong_rform, scale):
        with pytest.raises(ParameterError):
            msw_inference(0.68, 1, scale, 5, strong_rform)

    @pytest.mark.parametrize("horizons", [-1, 2.5])
    def test_invalid_horizons(self, strong_rform, horizons):
        with pytest.raises(ParameterError):
            msw_inference(0.68, 1, 1.0, horizons, strong_rform)

    def test_zero_gamma(self, strong_rform):
        rform = dataclasses.replace(strong_rform, gamma=np.array([0.0, 0.3]))
        with pytest.raises(NumericalError):
            msw_inference(0.68, 1, 1.0, 5, rform)

    def test_non_positive_definite_sigma(self, rng, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("intervals computed for an invalid Sigma")

        monkeypatch.setattr(msw, "robust_quadratic", fail)
        rform = make_rform(rng, sigma=np.array([[1.0, 2.0], [2.0, 1.0]]))
        with pytest.raises(NumericalError):
            msw_inference(0.68, 1, 1.0, 5, rform)

    def test_asymmetric_sigma(self, rng):
        rform = make_rform(rng, sigma=np.array([[1.0, 0.3], [0.2, 1.0]]))
        with pytest.raises(NumericalError):
            msw_inference(0.68, 1, 1.0, 5, rform)


class TestCholeskyBenchmark:
    """Tests for cholesky_benchmark."""

    def test_responses(self, strong_rform):
        ma = build_ma_representation(strong_rform.al, 1, 6)
        chol = cholesky_benchmark(strong_rform.sigma, ma.C, ma.Ccum, 2, 0.5)

        L = linalg.cholesky(strong_rform.sigma, lower=True)
        impact = 0.5 * L[:, 0] / L[1, 0]
        np.testing.assert_allclose(chol.impact, impact)
        for h in range(7):
            np.testing.assert_allclose(chol.irf[:, h], ma.C[h] @ impact)
        np.testing.assert_allclose(chol.irf_cum, np.cumsum(chol.irf, axis=1))
        assert chol.irf[1, 0] == pytest.approx(0.5)

    def test_zero_pivot_warns(self):
        ma = build_ma_representation(np.array([[0.5, 0.0], [0.0, 0.5]]), 1, 2)
        with pytest.warns(NumericWarning):
            chol = cholesky_benchmark(np.eye(2), ma.C, ma.Ccum, 2, 1.0)
        assert not np.all(np.isfinite(chol.impact))

    def test_to_pandas(self, strong_rform):
        ma = build_ma_representation(strong_rform.al, 1, 3)
        chol = cholesky_benchmark(strong_rform.sigma, ma.C, ma.Ccum, 1, 1.0, var_names=["gdp", "cpi"])
        table = chol.to_pandas()
        assert table.index.get_level_values("variable").unique().tolist() == ["gdp", "cpi"]
        assert "Normalization variable: 1" in chol.summary()


class TestStructuralShock:
    """Tests for recover_structural_shock."""

    def test_shock_series(self, strong_rform):
        shock = recover_structural_shock(
            strong_rform.gamma, strong_rform.sigma, strong_rform.eta, 1, 2.0
        )
        gamma = strong_rform.gamma
        expected = 2.0 * gamma @ np.linalg.inv(strong_rform.sigma) @ strong_rform.eta / gamma[0]
        np.testing.assert_allclose(shock.epsilon, expected)

    def test_standardized(self, strong_rform):
        shock = recover_structural_shock(
            strong_rform.gamma, strong_rform.sigma, strong_rform.eta, 2, 1.0
        )
        assert shock.epsilon_std.mean() == pytest.approx(0.0, abs=1e-12)
        assert shock.epsilon_std.std(ddof=1) == pytest.approx(1.0)

    def test_singular_sigma(self, strong_rform):
        with pytest.raises(NumericalError):
            recover_structural_shock(strong_rform.gamma, np.ones((2, 2)), strong_rform.eta, 1, 1.0)

    def test_zero_gamma(self, strong_rform):
        with pytest.raises(NumericalError):
            recover_structural_shock(np.array([0.3, 0.0]), strong_rform.sigma, strong_rform.eta, 2, 1.0)


class TestFirstStageDiagnostics:
    """Tests for first_stage_diagnostics."""

    def test_wald_statistic(self, strong_rform):
        critval = critical_value(0.68)
        diag = first_stage_diagnostics(
            strong_rform.gamma, strong_rform.w_hat, 500, 2, 1, 1, 0.68, critval
        )
        # T Gamma_1² / WHat[4, 4]
        assert diag.wald_statistic == pytest.approx(500 * 0.25 / 1.0)
        assert diag.critical_value == critval
        assert diag.bounded_guaranteed

    def test_display_logs_summary(self, strong_rform, caplog):
        with caplog.at_level(logging.INFO, logger="svariv.models.svar.diagnostics"):
            msw_inference(0.68, 1, 1.0, 2, strong_rform, display_diagnostics=True)
        assert "First-stage Wald statistic" in caplog.text
        assert "nominal confidence level is 68%" in caplog.text

    def test_silent_by_default(self, strong_rform, caplog):
        with caplog.at_level(logging.INFO, logger="svariv.models.svar.diagnostics"):
            msw_inference(0.68, 1, 1.0, 2, strong_rform)
        assert "First-stage Wald statistic" not in caplog.text

    def test_display_flag_from_config(self, strong_rform, caplog):
        set_config("inference", "display_diagnostics", True)
        with caplog.at_level(logging.INFO, logger="svariv.models.svar.diagnostics"):
            msw_inference(0.68, 1, 1.0, 2, strong_rform)
        assert "First-stage Wald statistic" in caplog.text


class TestConfiguredDefaults:
    """Request parameters left as None come from the inference configuration."""

    def test_package_defaults(self, strong_rform):
        inference, plugin, _ = msw_inference(None, 1, None, None, strong_rform)
        assert inference.case.shape == (2, 21)
        assert inference.confidence == 0.68
        assert inference.metadata["scale"] == 1.0
        assert plugin.irf[0, 0] == pytest.approx(1.0)

    def test_configured_values(self, strong_rform):
        set_config("inference", "confidence", 0.9)
        set_config("inference", "scale", -2.0)
        set_config("inference", "horizons", 4)
        inference, plugin, _ = msw_inference(None, 1, None, None, strong_rform)
        expected, expected_plugin, _ = msw_inference(0.9, 1, -2.0, 4, strong_rform)

        assert inference.critical_value == pytest.approx(critical_value(0.9))
        np.testing.assert_array_equal(inference.case, expected.case)
        np.testing.assert_allclose(inference.lower, expected.lower)
        np.testing.assert_allclose(plugin.irf, expected_plugin.irf)

    def test_explicit_arguments_win(self, strong_rform):
        set_config("inference", "horizons", 4)
        inference, _, _ = msw_inference(0.68, 1, 1.0, 2, strong_rform)
        assert inference.case.shape == (2, 3)
