"""
Single- and multi-pose assembly from PoseNet output tensors.

Multi-pose decoding follows the greedy scheme: candidate roots are taken in
descending score order, roots too close to an already decoded pose's
same-part keypoint are suppressed, and every accepted root is expanded into
a full pose by walking the skeleton edges with the displacement fields.
"""
from typing import List, Tuple

from ..core.errors import DecoderConfigError
from ..core.logger import get_logger
from .field_sampler import (
    get_displacement,
    get_image_coords,
    get_offset_vector,
    get_strided_index_near_point,
)
from .heatmap_scanner import build_part_list, find_single_channel_maxima
from .skeleton import POSENET_SKELETON, SkeletonTopology
from .tensor_view import TensorView, validate_output_tensors
from .types import Keypoint, Pose, PoseSet

logger = get_logger(__name__)


def _check_stride(stride: int) -> int:
    if int(stride) != stride or stride <= 0:
        raise DecoderConfigError(f"stride must be a positive integer, got {stride}")
    return int(stride)


def decode_single_pose(heatmaps, offsets, stride: int) -> Pose:
    """
    Best cell per part, refined to image coordinates.

    Args:
        heatmaps: [1, H, W, K] part scores
        offsets: [1, H, W, 2K] sub-pixel offsets
        stride: input image / heatmap grid downscale factor

    Returns:
        Pose with every slot filled
    """
    stride = _check_stride(stride)
    heatmaps = TensorView.wrap(heatmaps, "heatmaps")
    offsets = TensorView.wrap(offsets, "offsets")
    validate_output_tensors(heatmaps, offsets)

    pose = Pose(num_parts=heatmaps.channels)
    for part in find_single_channel_maxima(heatmaps):
        pose.set_keypoint(part.with_position(get_image_coords(part, stride, offsets)))

    return pose


def traverse_to_target_keypoint(
    edge_id: int,
    source_keypoint: Keypoint,
    target_keypoint_id: int,
    scores: TensorView,
    offsets: TensorView,
    stride: int,
    displacements: TensorView,
) -> Keypoint:
    """
    Follow one displacement edge from a decoded keypoint to its neighbour.

    The target score is the raw heatmap value at the displaced cell; no
    threshold is applied.
    """
    height, width = scores.height, scores.width

    source_index = get_strided_index_near_point(source_keypoint.position, stride, height, width)
    displacement = get_displacement(edge_id, source_index, displacements)
    displaced_point = (
        source_keypoint.position[0] + displacement[0],
        source_keypoint.position[1] + displacement[1],
    )

    row, col = get_strided_index_near_point(displaced_point, stride, height, width)
    offset_x, offset_y = get_offset_vector(row, col, target_keypoint_id, offsets)
    score = scores[row, col, target_keypoint_id]

    return Keypoint(
        score=score,
        position=(col * stride + offset_x, row * stride + offset_y),
        part_id=target_keypoint_id,
    )


def decode_pose(
    root: Keypoint,
    scores: TensorView,
    offsets: TensorView,
    stride: int,
    displacements_fwd: TensorView,
    displacements_bwd: TensorView,
    skeleton: SkeletonTopology = POSENET_SKELETON,
) -> Pose:
    """
    Expand a grid-space root into a full pose.

    Edges are walked twice: last to first with the backward displacements
    (child -> parent, recovers ancestors of a non-nose root), then first to
    last with the forward displacements (parent -> child). A step runs only
    when its source slot is filled and its target slot is not.
    """
    pose = Pose(num_parts=scores.channels)
    root_point = get_image_coords(root, stride, offsets)
    pose.root = root.with_position(root_point)
    pose.set_keypoint(pose.root)

    edges = skeleton.edges

    for edge_id in range(len(edges) - 1, -1, -1):
        target_id, source_id = edges[edge_id]
        if pose.is_filled(source_id) and not pose.is_filled(target_id):
            pose.set_keypoint(traverse_to_target_keypoint(
                edge_id, pose[source_id], target_id, scores, offsets, stride, displacements_bwd))

    for edge_id, (source_id, target_id) in enumerate(edges):
        if pose.is_filled(source_id) and not pose.is_filled(target_id):
            pose.set_keypoint(traverse_to_target_keypoint(
                edge_id, pose[source_id], target_id, scores, offsets, stride, displacements_fwd))

    return pose


def within_nms_radius_of_corresponding_point(
    poses: PoseSet,
    squared_nms_radius: float,
    point: Tuple[float, float],
    keypoint_id: int,
) -> bool:
    """True if any pose already holds part ``keypoint_id`` within the NMS radius."""
    for pose in poses:
        existing = pose[keypoint_id]
        if not existing.filled:
            continue
        dx = point[0] - existing.position[0]
        dy = point[1] - existing.position[1]
        if dx * dx + dy * dy <= squared_nms_radius:
            return True
    return False


def decode_multiple_poses(
    heatmaps,
    offsets,
    displacements_fwd,
    displacements_bwd,
    stride: int,
    max_pose_detections: int,
    score_threshold: float = 0.5,
    nms_radius: int = 20,
    local_maximum_radius: int = 1,
    skeleton: SkeletonTopology = POSENET_SKELETON,
) -> PoseSet:
    """
    Detect multiple poses from part scores and displacement fields.

    Args:
        heatmaps: [1, H, W, K] part scores
        offsets: [1, H, W, 2K] sub-pixel offsets
        displacements_fwd: [1, H, W, 2E] parent -> child displacements
        displacements_bwd: [1, H, W, 2E] child -> parent displacements
        stride: input image / heatmap grid downscale factor
        max_pose_detections: cap on returned poses
        score_threshold: minimum root candidate score
        nms_radius: minimum image-space distance between same-part roots
        local_maximum_radius: candidate window radius (1 -> 3x3)
        skeleton: edge order for the traversal

    Returns:
        Poses in decode order (non-increasing root score)

    Raises:
        TensorShapeError: inconsistent tensors
        DecoderConfigError: invalid stride / limits
    """
    stride = _check_stride(stride)
    if max_pose_detections < 0:
        raise DecoderConfigError(f"max_pose_detections must be non-negative, got {max_pose_detections}")
    if nms_radius < 0:
        raise DecoderConfigError(f"nms_radius must be non-negative, got {nms_radius}")
    if local_maximum_radius < 0:
        raise DecoderConfigError(f"local_maximum_radius must be non-negative, got {local_maximum_radius}")

    heatmaps = TensorView.wrap(heatmaps, "heatmaps")
    offsets = TensorView.wrap(offsets, "offsets")
    displacements_fwd = TensorView.wrap(displacements_fwd, "displacements_fwd")
    displacements_bwd = TensorView.wrap(displacements_bwd, "displacements_bwd")
    validate_output_tensors(heatmaps, offsets, displacements_fwd, displacements_bwd, skeleton.num_edges)
    if heatmaps.channels != skeleton.num_parts:
        raise DecoderConfigError(
            f"skeleton has {skeleton.num_parts} parts but heatmaps have {heatmaps.channels} channels"
        )

    squared_nms_radius = float(nms_radius) * nms_radius

    # sorted() is stable: equal scores keep discovery order
    candidates = sorted(
        build_part_list(heatmaps, score_threshold, local_maximum_radius),
        key=lambda kp: kp.score,
        reverse=True,
    )

    poses: List[Pose] = []
    suppressed = 0
    for root in candidates:
        if len(poses) >= max_pose_detections:
            break

        root_image_coords = get_image_coords(root, stride, offsets)
        if within_nms_radius_of_corresponding_point(poses, squared_nms_radius, root_image_coords, root.part_id):
            suppressed += 1
            continue

        poses.append(decode_pose(
            root, heatmaps, offsets, stride, displacements_fwd, displacements_bwd, skeleton))

    logger.debug("decode_multiple_poses: %d poses from %d candidates (%d suppressed)",
                 len(poses), len(candidates), suppressed)
    return poses
