"""
解码引擎模块
===========

封装每个推理周期的姿态解码流程。
"""
from .pose_engine import (
    PoseDecodeEngine,
    PoseResult,
    compute_input_dims,
    compute_stride,
    scale_poses,
)

__all__ = [
    'PoseDecodeEngine',
    'PoseResult',
    'compute_input_dims',
    'compute_stride',
    'scale_poses',
]
