"""
Heatmap scanning: per-channel maxima (single pose) and local-maximum
candidate lists (multi pose).
"""
from typing import List

import numpy as np
from scipy.ndimage import maximum_filter

from ..core.logger import get_logger
from .tensor_view import TensorView
from .types import Keypoint

logger = get_logger(__name__)


def find_single_channel_maxima(heatmaps: TensorView) -> List[Keypoint]:
    """
    One grid-space keypoint per channel at its highest score.

    Cells are visited in row-major order and only a strictly greater score
    replaces the current best, so ties resolve to the first cell. The running
    best starts at score 0 on cell (0, 0).
    """
    planes = heatmaps.planes()
    num_parts, _, width = planes.shape
    # argmax returns the first occurrence in row-major order
    flat_index = planes.reshape(num_parts, -1).argmax(axis=1)

    keypoints = []
    for part_id in range(num_parts):
        row, col = divmod(int(flat_index[part_id]), width)
        score = float(planes[part_id, row, col])
        if not score > 0.0:
            row, col, score = 0, 0, 0.0
        keypoints.append(Keypoint(score=score, position=(float(col), float(row)), part_id=part_id))
    return keypoints


def score_is_maximum_in_local_window(
    part_id: int,
    score: float,
    row: int,
    col: int,
    local_maximum_radius: int,
    heatmaps: TensorView,
) -> bool:
    """
    True if no cell in the clamped window around ``(row, col)`` beats ``score``.

    Per-cell form of the local-maximum test in ``build_part_list``; not part of
    the package exports.
    """
    row_start = max(row - local_maximum_radius, 0)
    row_end = min(row + local_maximum_radius + 1, heatmaps.height)
    col_start = max(col - local_maximum_radius, 0)
    col_end = min(col + local_maximum_radius + 1, heatmaps.width)

    window = heatmaps.channel_plane(part_id)[row_start:row_end, col_start:col_end]
    return not bool((window > np.float32(score)).any())


def build_part_list(
    heatmaps: TensorView,
    score_threshold: float,
    local_maximum_radius: int = 1,
) -> List[Keypoint]:
    """
    Candidate roots: cells at or above ``score_threshold`` that are local maxima.

    A neighbour with an equal score does not disqualify a cell, so a plateau
    yields every one of its cells. Candidates come back in discovery order
    (channel, row, column) and are not sorted.
    """
    planes = heatmaps.planes()
    size = 2 * local_maximum_radius + 1
    # mode="nearest" only repeats edge cells, equivalent to clamping the window
    local_max = maximum_filter(planes, size=(1, size, size), mode="nearest")

    mask = (planes >= np.float32(score_threshold)) & (planes >= local_max)
    part_ids, rows, cols = np.nonzero(mask)

    candidates = [
        Keypoint(score=float(planes[c, y, x]), position=(float(x), float(y)), part_id=int(c))
        for c, y, x in zip(part_ids, rows, cols)
    ]
    logger.debug("build_part_list: %d candidates (threshold=%.3f, radius=%d)",
                 len(candidates), score_threshold, local_maximum_radius)
    return candidates
