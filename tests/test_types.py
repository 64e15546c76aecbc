import numpy as np
import pytest

from posenet_decoder.decoding.types import Keypoint, Pose


def test_new_pose_is_all_unfilled():
    pose = Pose(num_parts=4)

    assert len(pose) == 4
    assert [kp.part_id for kp in pose] == [0, 1, 2, 3]
    assert not any(kp.filled for kp in pose)
    assert all(kp.score == 0.0 for kp in pose)
    assert pose.root is None
    assert pose.root_score == 0.0


def test_filled_slot_is_never_overwritten():
    pose = Pose(num_parts=2)
    pose.set_keypoint(Keypoint(score=0.0, position=(1.0, 2.0), part_id=1))

    with pytest.raises(ValueError):
        pose.set_keypoint(Keypoint(score=0.9, position=(3.0, 4.0), part_id=1))
    assert pose[1].position == (1.0, 2.0)


def test_set_keypoint_rejects_out_of_range_id():
    with pytest.raises(IndexError):
        Pose(num_parts=2).set_keypoint(Keypoint(score=0.5, position=(0.0, 0.0), part_id=2))


def test_to_arrays_and_to_dict():
    pose = Pose(num_parts=3)
    pose.set_keypoint(Keypoint(score=0.8, position=(10.0, 20.0), part_id=2))

    positions, scores, filled = pose.to_arrays()

    assert positions.shape == (3, 2)
    np.testing.assert_allclose(positions[2], [10.0, 20.0])
    np.testing.assert_allclose(scores, [0.0, 0.0, 0.8], rtol=1e-6)
    assert filled.tolist() == [False, False, True]

    named = pose.to_dict(["a", "b", "c"])
    assert named["c"] == {"x": 10.0, "y": 20.0, "score": 0.8, "filled": True}
    assert pose.to_dict()["0"]["filled"] is False


def test_with_position_keeps_score_and_id():
    kp = Keypoint(score=0.4, position=(1.0, 1.0), part_id=5)
    moved = kp.with_position((8.0, 16.0))

    assert moved == Keypoint(score=0.4, position=(8.0, 16.0), part_id=5)
    assert (moved.x, moved.y) == (8.0, 16.0)
