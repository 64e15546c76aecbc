"""
Keypoint / Pose data model for decoded PoseNet outputs.

Positions are ``(x, y)`` tuples. During heatmap scanning they are grid
coordinates (x = column, y = row); after refinement they are image-space
pixel coordinates of the model input.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class Keypoint:
    """
    One body part hypothesis.

    ``filled`` marks whether the slot has been decoded. A filled keypoint may
    legitimately carry a score of 0.0 (raw heatmap value at the displaced
    location), so the score is never used as an "unset" marker.
    """
    score: float
    position: Tuple[float, float]
    part_id: int
    filled: bool = True

    @property
    def x(self) -> float:
        return self.position[0]

    @property
    def y(self) -> float:
        return self.position[1]

    def with_position(self, position: Tuple[float, float]) -> "Keypoint":
        return replace(self, position=(float(position[0]), float(position[1])))

    @classmethod
    def unfilled(cls, part_id: int) -> "Keypoint":
        return cls(score=0.0, position=(0.0, 0.0), part_id=part_id, filled=False)


@dataclass(eq=False)
class Pose:
    """
    Fixed-length pose: one slot per part id, created unfilled.

    Filled slots are never overwritten; ``set_keypoint`` raises instead.
    """
    num_parts: int
    root: Optional[Keypoint] = None
    _slots: List[Keypoint] = field(init=False, repr=False)

    def __post_init__(self):
        if self.num_parts <= 0:
            raise ValueError(f"num_parts must be positive, got {self.num_parts}")
        self._slots = [Keypoint.unfilled(part_id) for part_id in range(self.num_parts)]

    def __len__(self) -> int:
        return self.num_parts

    def __getitem__(self, part_id: int) -> Keypoint:
        return self._slots[part_id]

    def __iter__(self) -> Iterator[Keypoint]:
        return iter(self._slots)

    def is_filled(self, part_id: int) -> bool:
        return self._slots[part_id].filled

    def set_keypoint(self, keypoint: Keypoint) -> None:
        """Fill the slot ``keypoint.part_id``."""
        if not 0 <= keypoint.part_id < self.num_parts:
            raise IndexError(f"part id {keypoint.part_id} out of range [0, {self.num_parts})")
        if self._slots[keypoint.part_id].filled:
            raise ValueError(f"part {keypoint.part_id} is already decoded for this pose")
        if not keypoint.filled:
            keypoint = replace(keypoint, filled=True)
        self._slots[keypoint.part_id] = keypoint

    def filled_keypoints(self) -> List[Keypoint]:
        return [kp for kp in self._slots if kp.filled]

    @property
    def root_score(self) -> float:
        return self.root.score if self.root is not None else 0.0

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Returns:
            positions: (K, 2) float32 ``[x, y]``
            scores: (K,) float32
            filled: (K,) bool
        """
        positions = np.array([kp.position for kp in self._slots], dtype=np.float32)
        scores = np.array([kp.score for kp in self._slots], dtype=np.float32)
        filled = np.array([kp.filled for kp in self._slots], dtype=bool)
        return positions, scores, filled

    def to_dict(self, part_names: Optional[Sequence[str]] = None) -> Dict[str, Dict[str, object]]:
        """Name -> {x, y, score, filled}; part ids are used when no names are given."""
        result = {}
        for kp in self._slots:
            name = part_names[kp.part_id] if part_names is not None else str(kp.part_id)
            result[name] = {
                "x": kp.x,
                "y": kp.y,
                "score": kp.score,
                "filled": kp.filled,
            }
        return result


# Decode order == descending root score
PoseSet = List[Pose]
