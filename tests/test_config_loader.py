import json

import pytest

from posenet_decoder.core import config_loader
from posenet_decoder.core.config_loader import (
    DecodingSettings,
    EstimationType,
    apply_env_overrides,
    get_config,
    get_decoding_settings,
    load_config,
)
from posenet_decoder.core.constants import Constants
from posenet_decoder.core.errors import DecoderConfigError


@pytest.fixture
def write_config(tmp_path):
    def _write(data):
        path = tmp_path / "system_config.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return _write


@pytest.fixture(autouse=True)
def _restore_singleton(monkeypatch):
    monkeypatch.setattr(config_loader, "_config_instance", None)
    for name in ("POSENET_CONFIG", "POSENET_LOG_LEVEL", "POSENET_ESTIMATION_TYPE", "POSENET_MAX_POSES"):
        monkeypatch.delenv(name, raising=False)


def test_missing_sections_use_defaults(write_config):
    config = load_config(write_config({"system": {"name": "test"}}))

    assert config.system.name == "test"
    assert config.decoding.max_poses == Constants.MAX_POSES
    assert config.decoding.nms_radius == Constants.NMS_RADIUS
    assert config.logging.enable_file is False


def test_partial_section_is_completed(write_config):
    config = load_config(write_config({"decoding": {"estimation_type": "multi_pose", "max_poses": 5}}))
    settings = get_decoding_settings(config)

    assert settings.estimation_type is EstimationType.MULTI_POSE
    assert settings.max_poses == 5
    assert settings.score_threshold == pytest.approx(Constants.SCORE_THRESHOLD)
    assert settings.image_dims == Constants.IMAGE_DIMS


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.json")


def test_malformed_json_raises(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_env_var_selects_config(monkeypatch, write_config):
    path = write_config({"decoding": {"nms_radius": 42}})
    monkeypatch.setenv("POSENET_CONFIG", str(path))

    assert get_config(reload=True).decoding.nms_radius == 42


def test_get_config_is_cached(write_config):
    path = write_config({})
    first = get_config(config_path=path)
    assert get_config() is first
    assert get_config(config_path=path, reload=True) is not first


def test_env_overrides(monkeypatch, write_config):
    config = load_config(write_config({}))
    monkeypatch.setenv("POSENET_LOG_LEVEL", "debug")
    monkeypatch.setenv("POSENET_ESTIMATION_TYPE", "MultiPose")
    monkeypatch.setenv("POSENET_MAX_POSES", "7")

    settings = get_decoding_settings(apply_env_overrides(config))

    assert config.logging.level == "DEBUG"
    assert settings.estimation_type is EstimationType.MULTI_POSE
    assert settings.max_poses == 7


def test_invalid_max_poses_env_is_ignored(monkeypatch, write_config):
    config = load_config(write_config({}))
    monkeypatch.setenv("POSENET_MAX_POSES", "many")

    assert apply_env_overrides(config).decoding.max_poses == Constants.MAX_POSES


def test_resolve_path_relative_to_config(write_config):
    path = write_config({})
    config = load_config(path)

    assert config.resolve_path("logs") == path.parent / "logs"
    assert config.resolve_path(None) is None


@pytest.mark.parametrize("value, expected", [
    ("single_pose", EstimationType.SINGLE_POSE),
    ("SinglePose", EstimationType.SINGLE_POSE),
    ("multi-pose", EstimationType.MULTI_POSE),
    (EstimationType.MULTI_POSE, EstimationType.MULTI_POSE),
])
def test_estimation_type_parse(value, expected):
    assert EstimationType.parse(value) is expected


@pytest.mark.parametrize("kwargs", [
    {"estimation_type": "dance"},
    {"max_poses": 0},
    {"max_poses": 21},
    {"score_threshold": 1.5},
    {"score_threshold": -0.1},
    {"nms_radius": -1},
    {"local_maximum_radius": -1},
    {"image_dims": (0, 256)},
])
def test_invalid_settings(kwargs):
    with pytest.raises(DecoderConfigError):
        DecodingSettings(**kwargs)
