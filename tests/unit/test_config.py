"""
Tests for configuration validation, persistence and model construction.
"""

import json

import pytest

from sparse_sgd import (
    AdagradOptimizer, L2Penalty, LabeledInstance, LeastSquaresRegression, LinearModel,
    TruncationPolicy, build_model, create_default_config, load_config, save_config,
    validate_config,
)
from sparse_sgd.api.config import merge_configs


@pytest.fixture
def config():
    return {
        "family": {"name": "least_squares"},
        "optimizer": {"name": "adagrad", "params": {"initial_learning_rate": 0.5}},
        "penalty": {"name": "l2", "params": {"lam": 0.01}},
        "truncation": {"period": 10, "threshold": 0.05, "update_rate": 0.01},
        "freeze_key_set": False,
    }


class TestValidation:
    def test_default_config_is_valid(self):
        assert validate_config(create_default_config()) == {}

    def test_valid_config(self, config):
        assert validate_config(config) == {}

    @pytest.mark.parametrize("truncation", [
        {"period": -1},
        {"threshold": -0.5},
        {"update_rate": -0.1},
        {"period": 1.5},
        {"unknown": 1},
    ])
    def test_invalid_truncation(self, config, truncation):
        config["truncation"] = truncation
        with pytest.raises(ValueError):
            validate_config(config)

    def test_missing_required_section(self, config):
        del config["optimizer"]
        with pytest.raises(ValueError):
            validate_config(config)

    def test_unknown_component(self, config):
        config["family"] = {"name": "poisson"}
        with pytest.raises(ValueError, match="Unknown family"):
            validate_config(config)

    def test_non_strict_collects_errors(self, config):
        config["optimizer"] = {"name": "lbfgs"}
        errors = validate_config(config, strict=False)
        assert "optimizer" in errors
        assert "lbfgs" in errors["optimizer"][0]


class TestPersistence:
    @pytest.mark.parametrize("suffix", [".json", ".yaml", ".yml"])
    def test_round_trip(self, config, tmp_path, suffix):
        path = tmp_path / "nested" / f"model{suffix}"
        save_config(config, path)
        assert load_config(path) == config

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.json")

    def test_unknown_extension(self, tmp_path):
        path = tmp_path / "model.toml"
        path.write_text("family = 'logistic'")
        with pytest.raises(ValueError):
            load_config(path)

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "model.json"
        path.write_text("{not json")
        with pytest.raises(ValueError):
            load_config(path)

    def test_save_rejects_invalid(self, config, tmp_path):
        config["truncation"]["period"] = -3
        with pytest.raises(ValueError):
            save_config(config, tmp_path / "model.json")

    def test_unknown_format(self, config, tmp_path):
        with pytest.raises(ValueError):
            save_config(config, tmp_path / "model.cfg", format="ini")


class TestBuildModel:
    def test_components(self, config):
        model = build_model(config)
        assert isinstance(model, LinearModel)
        assert isinstance(model.family, LeastSquaresRegression)
        assert isinstance(model.optimizer, AdagradOptimizer)
        assert model.optimizer.initial_learning_rate == 0.5
        assert len(model) == 0
        assert model.truncation == TruncationPolicy(period=10, threshold=0.05, update_rate=0.01)

    def test_arg_string_records_effective_config(self, config):
        model = build_model(config)
        recorded = json.loads(model.arg_string)
        assert recorded["family"]["name"] == "least_squares"
        assert recorded["penalty"]["params"] == {"lam": 0.01}
        assert "meta" in recorded

    def test_defaults_fill_missing_sections(self):
        model = build_model({"family": {"name": "logistic"}, "optimizer": {"name": "sgd"}})
        assert model.model_type == "logistic"
        assert not model.truncation.enabled

    def test_built_model_trains(self, config):
        model = build_model(config)
        for _ in range(20):
            model.update(LabeledInstance(2.0, {"x": 1.0}))
        assert model.predict({"x": 1.0}) > 0.5

    def test_invalid_config_fails_fast(self, config):
        config["truncation"]["threshold"] = -1.0
        with pytest.raises(ValueError):
            build_model(config)

    def test_penalty_reaches_store(self, config):
        model = build_model(config)
        assert isinstance(model._param.penalty, L2Penalty)


class TestMergeConfigs:
    def test_later_sections_win(self):
        merged = merge_configs(
            {"truncation": {"period": 1, "threshold": 0.1}, "freeze_key_set": False},
            {"truncation": {"period": 5}, "freeze_key_set": True},
        )
        assert merged == {"truncation": {"period": 5, "threshold": 0.1}, "freeze_key_set": True}

    def test_component_change_drops_old_params(self):
        merged = merge_configs(
            {"optimizer": {"name": "sgd", "params": {"schedule": "inverse"}}},
            {"optimizer": {"name": "adagrad"}},
        )
        assert merged == {"optimizer": {"name": "adagrad"}}
