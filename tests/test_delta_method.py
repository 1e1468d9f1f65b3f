'''
Tests for the delta-method confidence intervals of SVAR-IV impulse responses.
'''

import numpy as np
import pytest

from svariv.models.svar.delta_method import delta_method
from svariv.models.svar.ma_representation import build_ma_representation
from svariv.models.svar.weak_iv import critical_value


def _solve(rform, horizons=6, nvar=1, scale=1.0, confidence=0.68, cumulative=False):
    ma = build_ma_representation(rform.al, rform.p, horizons)
    C, G = ma.select(cumulative)
    return delta_method(
        C, G, rform.gamma, rform.w_hat, rform.T, nvar, scale, critical_value(confidence)
    ), ma


class TestDeltaMethod:
    """Tests for delta_method."""

    def test_shapes(self, strong_rform):
        sol, _ = _solve(strong_rform, horizons=5)
        for arr in (sol.point, sol.variance, sol.std_error, sol.lower, sol.upper):
            assert arr.shape == (2, 6)

    def test_point_estimates(self, strong_rform):
        sol, ma = _solve(strong_rform, scale=2.0)
        gamma = strong_rform.gamma
        for h in range(ma.C.shape[0]):
            np.testing.assert_allclose(sol.point[:, h], 2.0 * ma.C[h] @ gamma / gamma[0])

    def test_symmetric_around_point(self, strong_rform):
        sol, _ = _solve(strong_rform)
        np.testing.assert_allclose(sol.upper - sol.point, sol.point - sol.lower)
        half_width = np.sqrt(critical_value(0.68)) * sol.std_error
        np.testing.assert_allclose(sol.upper - sol.point, half_width)

    def test_pinned_normalization(self, strong_rform):
        sol, _ = _solve(strong_rform, scale=3.0)
        assert sol.point[0, 0] == pytest.approx(3.0)
        assert sol.std_error[0, 0] == pytest.approx(0.0, abs=1e-12)

    def test_variance_matches_gradient(self, strong_rform):
        sol, ma = _solve(strong_rform, nvar=2, scale=1.5)
        gamma, w_hat, T = strong_rform.gamma, strong_rform.w_hat, strong_rform.T
        x, i, j, h = 1.5, 1, 0, 3

        e_j = np.zeros(2)
        e_j[j] = 1.0
        e_i = np.zeros(2)
        e_i[i] = 1.0
        lam = x * e_j @ ma.C[h] @ gamma / gamma[i]
        grad = np.concatenate([
            x * np.kron(gamma, e_j) @ ma.G[h],
            x * e_j @ ma.C[h] - lam * e_i,
        ])
        variance = grad @ w_hat @ grad

        assert sol.variance[j, h] == pytest.approx(variance)
        assert sol.std_error[j, h] == pytest.approx(np.sqrt(variance) / (np.sqrt(T) * abs(gamma[i])))

    def test_wider_at_higher_confidence(self, strong_rform):
        narrow, _ = _solve(strong_rform, confidence=0.68)
        wide, _ = _solve(strong_rform, confidence=0.95)
        np.testing.assert_array_less(narrow.upper[1:] - narrow.lower[1:],
                                     wide.upper[1:] - wide.lower[1:])

    def test_finite_under_weak_instrument(self, weak_rform):
        sol, _ = _solve(weak_rform)
        assert np.all(np.isfinite(sol.lower))
        assert np.all(np.isfinite(sol.upper))
        assert np.all(sol.variance >= 0)

    def test_cumulative_starts_at_impact(self, strong_rform):
        sol, _ = _solve(strong_rform)
        sol_cum, _ = _solve(strong_rform, cumulative=True)
        np.testing.assert_allclose(sol_cum.point[:, 0], sol.point[:, 0])
        np.testing.assert_allclose(sol_cum.point[:, -1], sol.point.sum(axis=1))
