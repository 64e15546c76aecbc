import json

import numpy as np

from posenet_decoder.core.config_loader import EstimationType
from posenet_decoder.core.telemetry import TelemetryBuilder, format_floats
from posenet_decoder.decoding.types import Keypoint, Pose
from posenet_decoder.engines.pose_engine import PoseResult


def test_format_floats_recurses():
    data = {
        "a": 1.23456,
        "b": [np.float32(0.5), (2.0001, 3)],
        "c": np.array([0.12345, 1.0]),
        "d": True,
        "e": np.int64(4),
    }

    assert format_floats(data) == {
        "a": 1.235,
        "b": [0.5, [2.0, 3]],
        "c": [0.123, 1.0],
        "d": True,
        "e": 4,
    }


def _result(frame_index):
    pose = Pose(num_parts=2)
    pose.root = Keypoint(score=0.9, position=(1.0, 2.0), part_id=0)
    pose.set_keypoint(pose.root)
    return PoseResult(
        poses=[pose],
        stride=16,
        estimation_type=EstimationType.MULTI_POSE,
        latency_ms=1.5,
        speed_fps=666.7,
        timestamp=0.0,
        frame_index=frame_index,
    )


def test_build_and_print(capsys):
    builder = TelemetryBuilder(print_enabled=True, print_interval=2)

    telemetry = builder.build(_result(1), part_names=["head", "neck"])
    assert capsys.readouterr().out == ""

    builder.build(_result(2))
    out = capsys.readouterr().out
    assert "[Telemetry]" in out
    payload = json.loads(out.strip()[len("[Telemetry] "):])
    assert payload["pose_count"] == 1
    assert payload["poses"][0]["keypoints"]["0"]["score"] == 0.9

    assert telemetry["estimation_type"] == "multi_pose"
    assert telemetry["poses"][0]["filled_count"] == 1
    assert telemetry["poses"][0]["keypoints"]["neck"]["filled"] is False


def test_reset_clears_cache():
    builder = TelemetryBuilder(print_enabled=False)
    builder.build(_result(1))
    builder.reset()
    assert builder.get_last_telemetry() is None
