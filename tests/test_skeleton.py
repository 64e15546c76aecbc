import pytest

from posenet_decoder.decoding.skeleton import (
    KEYPOINT_INDICES,
    PARENT_CHILD_EDGES,
    PART_NAMES,
    POSENET_SKELETON,
    SkeletonTopology,
)


def test_reference_topology():
    assert POSENET_SKELETON.num_parts == 17
    assert POSENET_SKELETON.num_edges == 16
    assert POSENET_SKELETON.edges == (
        (0, 1), (1, 3), (0, 2), (2, 4), (0, 5), (5, 7), (7, 9), (5, 11),
        (11, 13), (13, 15), (0, 6), (6, 8), (8, 10), (6, 12), (12, 14), (14, 16),
    )


def test_reference_topology_spans_all_parts():
    children = {child for _, child in PARENT_CHILD_EDGES}
    assert children == set(range(1, 17))


def test_part_names_match_indices():
    assert len(PART_NAMES) == 17
    assert KEYPOINT_INDICES["nose"] == 0
    assert KEYPOINT_INDICES["right_ankle"] == 16
    assert PART_NAMES[KEYPOINT_INDICES["left_wrist"]] == "left_wrist"


def test_partial_topology_allowed():
    skeleton = SkeletonTopology(num_parts=3, edges=[(0, 1)])
    assert skeleton.edges == ((0, 1),)


@pytest.mark.parametrize("edges", [
    ((0, 3),),          # out of range
    ((1, 1),),          # self loop
    ((1, 0),),          # root as child
    ((0, 1), (2, 1)),   # two parents
])
def test_invalid_topologies(edges):
    with pytest.raises(ValueError):
        SkeletonTopology(num_parts=3, edges=edges)
