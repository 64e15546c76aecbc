"""
Grid <-> image coordinate helpers and offset/displacement sampling.
"""
from typing import Sequence, Tuple

from .tensor_view import TensorView
from .types import Keypoint


def get_offset_vector(row: int, col: int, part_id: int, offsets: TensorView) -> Tuple[float, float]:
    """Offset ``(x, y)`` for ``part_id`` at a grid cell; y lives in channel k, x in k + K."""
    num_parts = offsets.channels // 2
    return (
        offsets[row, col, part_id + num_parts],
        offsets[row, col, part_id],
    )


def get_image_coords(part: Keypoint, stride: int, offsets: TensorView) -> Tuple[float, float]:
    """Scale a grid-space keypoint up to image space and refine it with its offset."""
    offset_x, offset_y = get_offset_vector(
        int(part.position[1]), int(part.position[0]), part.part_id, offsets
    )
    return (
        part.position[0] * stride + offset_x,
        part.position[1] * stride + offset_y,
    )


def get_strided_index_near_point(
    point: Sequence[float], stride: int, height: int, width: int
) -> Tuple[int, int]:
    """
    Nearest heatmap cell ``(row, col)`` for an image-space ``(x, y)`` point.

    Each axis is rounded half-to-even and clamped to the grid independently.
    """
    col = min(max(round(float(point[0]) / stride), 0), width - 1)
    row = min(max(round(float(point[1]) / stride), 0), height - 1)
    return int(row), int(col)


def get_displacement(edge_id: int, grid_index: Tuple[int, int], displacements: TensorView) -> Tuple[float, float]:
    """Displacement ``(x, y)`` along ``edge_id``; y lives in channel e, x in e + E."""
    num_edges = displacements.channels // 2
    row, col = grid_index
    return (
        displacements[row, col, num_edges + edge_id],
        displacements[row, col, edge_id],
    )
