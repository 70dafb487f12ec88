"""Tests for configuration: enums, default constants, run parameter store, validation."""

import pytest

from beamdiag.config import (
    ConfigurationError,
    OutputType,
    ParameterStore,
    validate_invariant_parameters,
)
from beamdiag.config.defaults import (
    DEFAULT_INVARIANT_ALPHA,
    DEFAULT_INVARIANT_BETA,
    DEFAULT_INVARIANT_CN,
    DEFAULT_INVARIANT_TN,
)
from beamdiag.core.invariants import InvariantParameters


class TestOutputType:
    """Tests for OutputType."""

    def test_members(self):
        assert {member.value for member in OutputType} == {
            "print_particles",
            "print_nonlinear_lens_invariants",
            "print_ref_particle",
        }

    def test_per_particle(self):
        assert OutputType.PRINT_PARTICLES.per_particle
        assert OutputType.PRINT_NONLINEAR_LENS_INVARIANTS.per_particle
        assert not OutputType.PRINT_REF_PARTICLE.per_particle


class TestDefaults:
    """Lens parameter defaults come from beamdiag.config.defaults only."""

    def test_invariant_defaults(self):
        assert InvariantParameters().as_tuple() == (
            DEFAULT_INVARIANT_ALPHA,
            DEFAULT_INVARIANT_BETA,
            DEFAULT_INVARIANT_TN,
            DEFAULT_INVARIANT_CN,
        ) == (0.0, 1.0, 0.4, 0.01)

    def test_environment_is_ignored(self, tmp_path, monkeypatch):
        path = tmp_path / "defaults.yaml"
        path.write_text("diag:\n  tn: 0.25\n")
        monkeypatch.setenv("BEAMDIAG_DEFAULTS_PATH", str(path))
        assert InvariantParameters.from_store(ParameterStore()).tn == DEFAULT_INVARIANT_TN

    def test_yaml_values_go_through_the_store(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text("diag:\n  tn: 0.25\n")
        params = InvariantParameters.from_store(ParameterStore.from_yaml(path))
        assert params.tn == 0.25
        assert params.cn == DEFAULT_INVARIANT_CN


class TestParameterStore:
    """Tests for ParameterStore."""

    def test_flattens_nested_mapping(self):
        store = ParameterStore({"diag": {"tn": 0.3, "lens": {"cn": 0.02}}, "algo": 1})
        assert store.to_dict() == {"diag.tn": 0.3, "diag.lens.cn": 0.02, "algo": 1}

    def test_query(self, parameter_store):
        assert parameter_store.query("diag.tn") == 0.3
        assert parameter_store.query("diag.alpha") is None
        assert parameter_store.query("diag.alpha", 1.5) == 1.5
        assert not parameter_store.contains("diag.alpha")

    def test_query_add(self, parameter_store):
        assert parameter_store.query_add("diag.tn", 0.4) == 0.3
        assert parameter_store.query_add("diag.alpha", 0.0) == 0.0
        assert parameter_store.contains("diag.alpha")
        assert len(parameter_store) == 3

    def test_add_overrides(self, parameter_store):
        parameter_store.add("diag.tn", 0.1)
        assert parameter_store.query("diag.tn") == 0.1

    def test_section(self, parameter_store):
        assert parameter_store.section("diag") == {"tn": 0.3, "cn": 0.02}
        assert parameter_store.section("other") == {}

    def test_iteration(self, parameter_store):
        assert sorted(parameter_store) == ["diag.cn", "diag.tn"]

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text("diag:\n  alpha: -0.5\n  beta: 2.0\n  per_rank_files: true\n")
        store = ParameterStore.from_yaml(path)
        assert store.query("diag.alpha") == -0.5
        assert store.query("diag.beta") == 2.0
        assert store.query("diag.per_rank_files") is True

    def test_from_empty_yaml(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text("")
        assert len(ParameterStore.from_yaml(path)) == 0

    def test_from_yaml_not_a_mapping(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError, match="mapping"):
            ParameterStore.from_yaml(path)


class TestValidation:
    """Tests for validate_invariant_parameters."""

    def test_valid(self):
        assert validate_invariant_parameters(InvariantParameters()) == (True, [])

    def test_collects_errors(self):
        params = InvariantParameters(beta=-1.0, cn=0.0)
        is_valid, errors = validate_invariant_parameters(params, raise_on_error=False)
        assert not is_valid
        assert len(errors) == 2

    def test_raises(self):
        with pytest.raises(ConfigurationError, match="diag.beta must be > 0"):
            validate_invariant_parameters(InvariantParameters(beta=0.0))
