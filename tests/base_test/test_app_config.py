#!filepath: tests/base_test/test_app_config.py
import yaml
import pytest
from pathlib import Path

from dispbdt.config import AppConfig, default_config_path
from dispbdt.config.log_config import LogConfig
from dispbdt.config.training_config import (
    ASTRI_TEL_TYPE,
    DEFAULT_METHOD_OPTIONS,
    TrainingConfig,
)
from dispbdt.utils.errors import ConfigurationError


@pytest.fixture
def sample_config_file(tmp_path):
    data = {
        "log": {
            "dir": str(tmp_path / "logs"),
            "rotation": "1 day",
            "retention": "30 days",
            "level": "DEBUG",
        },
        "training": {
            "output_dir": str(tmp_path / "out"),
            "train_fraction": 0.7,
            "tel_type": 10408618,
            "alignment_check": "strict",
            "reader": {"batch_size": 128},
        },
    }

    config_file = tmp_path / "config.yaml"
    config_file.write_text(yaml.safe_dump(data), encoding="utf-8")
    return config_file


def test_app_config_load(sample_config_file):
    cfg = AppConfig.load(path=str(sample_config_file))

    assert isinstance(cfg, AppConfig)
    assert isinstance(cfg.log, LogConfig)
    assert isinstance(cfg.training, TrainingConfig)

    assert cfg.log.level == "DEBUG"
    assert cfg.training.train_fraction == 0.7
    assert cfg.training.tel_type == 10408618
    assert cfg.training.alignment_check == "strict"
    assert cfg.training.reader.batch_size == 128

    # untouched keys keep their defaults
    assert cfg.training.method_options == DEFAULT_METHOD_OPTIONS
    assert cfg.training.min_events == 100
    assert cfg.training.damping == 0.8


def test_packaged_defaults():
    assert default_config_path().exists()

    cfg = AppConfig.load()

    assert cfg.training.target == "disp-angle"
    assert cfg.training.astri_tel_type == ASTRI_TEL_TYPE
    assert cfg.training.trainer == "sklearn-bdt"
    assert cfg.training.reload_mode is False


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigurationError):
        AppConfig.load(tmp_path / "nope.yml")


def test_invalid_config_is_configuration_error(tmp_path):
    f = tmp_path / "bad.yml"
    f.write_text(yaml.safe_dump({"training": {"train_fraction": 1.5}}), encoding="utf-8")

    with pytest.raises(ConfigurationError):
        AppConfig.load(f)


def test_with_training_overrides(tmp_path):
    cfg = AppConfig.load()

    new = cfg.with_training(
        input_list=str(tmp_path / "in.list"),
        train_fraction=0.3,
        dataset_dir=str(tmp_path / "trees"),
        quality_cut=None,
    )

    assert new.training.input_list == tmp_path / "in.list"
    assert new.training.train_fraction == 0.3
    assert new.training.reload_mode is True
    # None keeps the configured value
    assert new.training.quality_cut == cfg.training.quality_cut
    # original untouched
    assert cfg.training.train_fraction == 0.5


@pytest.mark.parametrize("fraction", [0.0, 1.0, -0.2])
def test_with_training_rejects_fraction(fraction):
    with pytest.raises(ConfigurationError):
        AppConfig.load().with_training(train_fraction=fraction)
