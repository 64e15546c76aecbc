"""
PoseNet 输出解码模块

热力图扫描、偏移量细化、位移场遍历，将四个网络输出张量解码为图像坐标系下的姿态。
"""
from .field_sampler import (
    get_displacement,
    get_image_coords,
    get_offset_vector,
    get_strided_index_near_point,
)
from .heatmap_scanner import (
    build_part_list,
    find_single_channel_maxima,
)
from .pose_assembler import (
    decode_multiple_poses,
    decode_pose,
    decode_single_pose,
    traverse_to_target_keypoint,
)
from .skeleton import (
    KEYPOINT_INDICES,
    PARENT_CHILD_EDGES,
    PART_NAMES,
    POSENET_SKELETON,
    SkeletonTopology,
)
from .tensor_view import TensorView, validate_output_tensors
from .types import Keypoint, Pose, PoseSet

__all__ = [
    # Data model
    "Keypoint",
    "Pose",
    "PoseSet",
    "TensorView",
    "validate_output_tensors",
    # Topology
    "SkeletonTopology",
    "POSENET_SKELETON",
    "PARENT_CHILD_EDGES",
    "PART_NAMES",
    "KEYPOINT_INDICES",
    # Field sampling
    "get_offset_vector",
    "get_image_coords",
    "get_strided_index_near_point",
    "get_displacement",
    # Scanning
    "find_single_channel_maxima",
    "build_part_list",
    # Assembly
    "decode_single_pose",
    "decode_multiple_poses",
    "decode_pose",
    "traverse_to_target_keypoint",
]
