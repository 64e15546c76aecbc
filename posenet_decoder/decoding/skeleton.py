"""
Fixed PoseNet skeleton topology.

The edge order is significant: decoding walks it backwards (child -> parent)
and then forwards (parent -> child), and displacement channels are indexed by
edge position.
"""
from dataclasses import dataclass
from typing import Dict, Tuple

# COCO 17-keypoint order used by PoseNet
PART_NAMES: Tuple[str, ...] = (
    "nose",
    "left_eye",
    "right_eye",
    "left_ear",
    "right_ear",
    "left_shoulder",
    "right_shoulder",
    "left_elbow",
    "right_elbow",
    "left_wrist",
    "right_wrist",
    "left_hip",
    "right_hip",
    "left_knee",
    "right_knee",
    "left_ankle",
    "right_ankle",
)

KEYPOINT_INDICES: Dict[str, int] = {name: idx for idx, name in enumerate(PART_NAMES)}

PARENT_CHILD_EDGES: Tuple[Tuple[int, int], ...] = (
    (0, 1),    # nose -> left eye
    (1, 3),    # left eye -> left ear
    (0, 2),    # nose -> right eye
    (2, 4),    # right eye -> right ear
    (0, 5),    # nose -> left shoulder
    (5, 7),    # left shoulder -> left elbow
    (7, 9),    # left elbow -> left wrist
    (5, 11),   # left shoulder -> left hip
    (11, 13),  # left hip -> left knee
    (13, 15),  # left knee -> left ankle
    (0, 6),    # nose -> right shoulder
    (6, 8),    # right shoulder -> right elbow
    (8, 10),   # right elbow -> right wrist
    (6, 12),   # right shoulder -> right hip
    (12, 14),  # right hip -> right knee
    (14, 16),  # right knee -> right ankle
)


@dataclass(frozen=True)
class SkeletonTopology:
    """Ordered parent -> child edges over ``num_parts`` part ids, rooted at 0."""
    num_parts: int
    edges: Tuple[Tuple[int, int], ...]

    def __post_init__(self):
        edges = tuple((int(parent), int(child)) for parent, child in self.edges)
        object.__setattr__(self, "edges", edges)

        if self.num_parts <= 0:
            raise ValueError(f"num_parts must be positive, got {self.num_parts}")

        seen_children = set()
        for parent, child in edges:
            for part_id in (parent, child):
                if not 0 <= part_id < self.num_parts:
                    raise ValueError(f"edge ({parent}, {child}) references part outside [0, {self.num_parts})")
            if parent == child:
                raise ValueError(f"self loop on part {parent}")
            if child == 0:
                raise ValueError("root part 0 cannot be a child")
            if child in seen_children:
                raise ValueError(f"part {child} has more than one parent")
            seen_children.add(child)

    @property
    def num_edges(self) -> int:
        return len(self.edges)


POSENET_SKELETON = SkeletonTopology(num_parts=len(PART_NAMES), edges=PARENT_CHILD_EDGES)
