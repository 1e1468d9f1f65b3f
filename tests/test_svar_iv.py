'''
End-to-end tests for svar_iv on simulated SVAR data with an external instrument.
'''

import logging

import numpy as np
import pandas as pd
import pytest

from svariv import SVARIVResult, estimate_reduced_form, svar_iv
from svariv.core.config import set_config
from svariv.core.results import load_result
from svariv.core.types import IntervalCase
from svariv.models.svar.cholesky import CholeskyBenchmark


@pytest.fixture
def result(svar_data):
    y, z, _ = svar_data
    return svar_iv(y, z, p=1, confidence=0.68, nw_lags=0, norm=1, scale=1.0,
                   horizons=10, display_diagnostics=False)


class TestSVARIV:
    """Tests for the svar_iv entry point."""

    def test_result_structure(self, result):
        assert isinstance(result, SVARIVResult)
        assert result.reduced_form.T == 999
        assert result.plugin.irf.shape == (2, 11)
        assert result.inference.case.shape == (2, 11)
        assert result.cholesky.irf.shape == (2, 11)
        assert result.metadata["horizons"] == 10

    def test_strong_instrument_bounded(self, result):
        assert result.inference.diagnostics.bounded_guaranteed
        case = result.inference.case.copy()
        case[0, 0] = IntervalCase.BOUNDED
        assert np.all(case == IntervalCase.BOUNDED)

    def test_recovers_true_responses(self, result, svar_data):
        _, _, B = svar_data
        A = np.array([[0.5, 0.1], [0.2, 0.4]])
        impact = B[:, 0] / B[0, 0]
        for h in range(6):
            true_irf = np.linalg.matrix_power(A, h) @ impact
            np.testing.assert_allclose(result.plugin.irf[:, h], true_irf, atol=0.2)

    def test_shock_tracks_instrument(self, result, svar_data):
        _, z, _ = svar_data
        corr = np.corrcoef(result.plugin.epsilon_std, z[1:])[0, 1]
        assert corr > 0.7

    def test_to_pandas(self, result):
        table = result.to_pandas()
        assert len(table) == 22
        assert {"irf", "irf_std_error", "lower", "upper", "case", "dmethod_lower"} <= set(table.columns)
        assert table.loc[("y1", 0), "irf"] == pytest.approx(1.0)

    def test_dataframe_names(self, svar_data):
        y, z, _ = svar_data
        frame = pd.DataFrame(y, columns=["gdp", "cpi"])
        res = svar_iv(frame, z, 1, 0.9, 2, 2, 1.0, 4, display_diagnostics=False)
        table = res.to_pandas()
        assert table.index.get_level_values("variable").unique().tolist() == ["gdp", "cpi"]
        assert res.plugin.irf[1, 0] == pytest.approx(1.0)

    def test_displays_diagnostics(self, svar_data, caplog):
        y, z, _ = svar_data
        with caplog.at_level(logging.INFO, logger="svariv"):
            svar_iv(y, z, 1, 0.68, 0, 1, 1.0, 2)
        assert "First-stage Wald statistic" in caplog.text

    def test_summary(self, result):
        text = result.summary()
        assert "Model: SVAR-IV" in text
        assert "Variables: y1, y2" in text
        assert "Critical value" in text

    def test_repr_is_compact(self, result):
        assert repr(result) == "SVARIVResult(model_name='SVAR-IV')"
        assert repr(result.inference) == "RobustInference(model_name='Weak-IV robust inference')"
        assert repr(result.plugin) == "PluginInference(model_name='Plug-in inference')"
        assert repr(result.cholesky) == "CholeskyBenchmark(model_name='Cholesky benchmark')"

    def test_to_dict(self, result):
        data = result.to_dict()
        assert data["model_name"] == "SVAR-IV"
        assert len(data["plugin"]["irf"]) == 2
        assert data["reduced_form"]["p"] == 1

    def test_save_and_load(self, result, tmp_path):
        path = result.save(tmp_path / "svar_iv.pkl")
        assert path.exists()
        loaded = load_result(path, SVARIVResult)
        np.testing.assert_array_equal(loaded.plugin.irf, result.plugin.irf)
        np.testing.assert_array_equal(loaded.inference.case, result.inference.case)
        assert loaded.reduced_form.names == ["y1", "y2"]

    def test_load_wrong_type(self, result, tmp_path):
        path = result.save(tmp_path / "svar_iv.pkl")
        with pytest.raises(TypeError):
            load_result(path, CholeskyBenchmark)

    def test_defaults_from_config(self, svar_data):
        y, z, _ = svar_data
        set_config("inference", "nw_lags", 2)
        set_config("inference", "horizons", 3)
        res = svar_iv(y, z, 1, display_diagnostics=False)

        assert res.metadata["confidence"] == 0.68
        assert res.metadata["nw_lags"] == 2
        assert res.metadata["scale"] == 1.0
        assert res.plugin.irf.shape == (2, 4)
        expected = estimate_reduced_form(y, z, 1, nw_lags=2)
        np.testing.assert_allclose(res.reduced_form.w_hat, expected.w_hat)
