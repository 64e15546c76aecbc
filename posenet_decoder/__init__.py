"""
posenet_decoder
===============

Decode PoseNet output tensors (heatmaps, offsets, forward/backward
displacements) into single- or multi-person keypoint skeletons.
"""
from .core.config_loader import DecodingSettings, EstimationType
from .core.errors import DecoderConfigError, DecoderError, TensorShapeError
from .decoding import (
    Keypoint,
    Pose,
    POSENET_SKELETON,
    SkeletonTopology,
    decode_multiple_poses,
    decode_single_pose,
)
from .engines import PoseDecodeEngine, PoseResult

__version__ = "0.1.0"

__all__ = [
    "DecodingSettings",
    "EstimationType",
    "DecoderError",
    "DecoderConfigError",
    "TensorShapeError",
    "Keypoint",
    "Pose",
    "POSENET_SKELETON",
    "SkeletonTopology",
    "decode_single_pose",
    "decode_multiple_poses",
    "PoseDecodeEngine",
    "PoseResult",
]
