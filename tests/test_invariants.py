"""Tests for nonlinear lens invariants and their parameters."""

import warnings

import pytest
import numpy as np
from numpy.testing import assert_allclose

from beamdiag.config.parameters import ParameterStore
from beamdiag.config.validation import ConfigurationError, ConfigurationWarning
from beamdiag.core.invariants import (
    InvariantParameters,
    NonlinearLensInvariants,
    nonlinear_lens_invariants,
)


class TestInvariantParameters:
    """Tests for InvariantParameters."""

    def test_defaults(self):
        params = InvariantParameters()
        assert params.as_tuple() == (0.0, 1.0, 0.4, 0.01)

    def test_from_empty_store_uses_defaults(self):
        store = ParameterStore()
        params = InvariantParameters.from_store(store)
        assert params == InvariantParameters()

    def test_from_store_records_defaults(self):
        store = ParameterStore()
        InvariantParameters.from_store(store)
        assert store.to_dict() == {
            "diag.alpha": 0.0,
            "diag.beta": 1.0,
            "diag.tn": 0.4,
            "diag.cn": 0.01,
        }

    def test_from_store_overrides(self, parameter_store):
        params = InvariantParameters.from_store(parameter_store)
        assert params == InvariantParameters(alpha=0.0, beta=1.0, tn=0.3, cn=0.02)

    def test_from_none(self):
        assert InvariantParameters.from_store(None) == InvariantParameters()

    def test_custom_prefix(self):
        store = ParameterStore({"lens1": {"beta": 2.5}})
        params = InvariantParameters.from_store(store, prefix="lens1")
        assert params.beta == 2.5
        assert params.tn == 0.4

    def test_integer_values_become_floats(self):
        params = InvariantParameters.from_store(ParameterStore({"diag": {"beta": 2}}))
        assert isinstance(params.beta, float)

    @pytest.mark.parametrize("kwargs", [
        {"beta": 0.0},
        {"beta": -1.0},
        {"cn": 0.0},
        {"tn": float("nan")},
        {"alpha": float("inf")},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigurationError):
            InvariantParameters(**kwargs).validate()

    def test_unstable_strength_warns(self):
        with pytest.warns(ConfigurationWarning, match="unbounded"):
            InvariantParameters(tn=0.5).validate()

    def test_default_is_silent(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            InvariantParameters().validate()


class TestNonlinearLensInvariants:
    """Tests for nonlinear_lens_invariants."""

    def test_origin(self):
        H, I = nonlinear_lens_invariants(0.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.4, 0.01)
        assert H == pytest.approx(0.0)
        assert I == pytest.approx(0.0)

    def test_linear_limit(self, rtol):
        """With tn = 0 and unit normalization H and I are the linear invariants."""
        x = np.array([0.1, -0.3, 0.5])
        y = np.array([0.2, 0.0, -0.4])
        px = np.array([0.0, 0.7, 0.1])
        py = np.array([-0.2, 0.3, 0.0])

        H, I = nonlinear_lens_invariants(x, y, px, py, 0.0, 1.0, 0.0, 1.0)

        assert_allclose(H, 0.5 * (x**2 + y**2 + px**2 + py**2), rtol=rtol)
        assert_allclose(I, (x * py - y * px) ** 2 + x**2 + px**2, rtol=rtol)

    def test_normalization(self, rtol):
        """Scaling coordinates with cn*sqrt(beta) leaves the invariants unchanged."""
        x, y, px, py = 0.2, -0.1, 0.05, 0.3
        beta, cn = 4.0, 0.25
        scale = cn * np.sqrt(beta)

        H_ref, I_ref = nonlinear_lens_invariants(x, y, px, py, 0.0, 1.0, 0.3, 1.0)
        H, I = nonlinear_lens_invariants(
            x * scale, y * scale, px * cn / np.sqrt(beta), py * cn / np.sqrt(beta),
            0.0, beta, 0.3, cn,
        )

        assert_allclose(H, H_ref, rtol=rtol)
        assert_allclose(I, I_ref, rtol=rtol)

    def test_mirror_symmetry(self, rtol):
        """The lens potential is even in x and in y."""
        x, y, px, py = 0.3, 0.2, 0.1, -0.05
        args = (0.0, 1.0, 0.4, 1.0)
        H, I = nonlinear_lens_invariants(x, y, px, py, *args)
        H_x, I_x = nonlinear_lens_invariants(-x, y, -px, py, *args)
        H_y, I_y = nonlinear_lens_invariants(x, -y, px, -py, *args)

        assert_allclose([H_x, H_y], [H, H], rtol=rtol)
        assert_allclose([I_x, I_y], [I, I], rtol=rtol)

    def test_identical_inputs_identical_outputs(self):
        x = np.array([1e-3, 1e-3, 2e-3])
        y = np.array([-2e-3, -2e-3, 0.0])
        px = np.array([1e-4, 1e-4, 0.0])
        py = np.array([0.0, 0.0, 1e-4])

        H, I = nonlinear_lens_invariants(x, y, px, py, 0.0, 1.0, 0.4, 0.01)

        assert H[0] == H[1]
        assert I[0] == I[1]

    def test_finite_inside_lens(self):
        rng = np.random.default_rng(1234)
        x, y = rng.uniform(-0.009, 0.009, size=(2, 200))
        px, py = rng.normal(0.0, 1e-3, size=(2, 200))

        H, I = nonlinear_lens_invariants(x, y, px, py, 0.0, 1.0, 0.4, 0.01)

        assert np.all(np.isfinite(H))
        assert np.all(np.isfinite(I))
        assert H.shape == (200,)

    def test_scalar_inputs(self):
        H, I = nonlinear_lens_invariants(1e-3, 0.0, 0.0, 0.0, 0.0, 1.0, 0.4, 0.01)
        assert np.ndim(H) == 0
        assert np.ndim(I) == 0
        assert H > 0.0

    def test_bound_calculator(self):
        params = InvariantParameters(alpha=0.1, beta=2.0, tn=0.2, cn=0.05)
        lens = NonlinearLensInvariants(params)
        assert lens(0.01, 0.02, 0.0, 0.001) == nonlinear_lens_invariants(
            0.01, 0.02, 0.0, 0.001, 0.1, 2.0, 0.2, 0.05
        )
