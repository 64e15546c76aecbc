"""
姿态解码引擎
===========

封装每个推理周期的解码流程，包括：
- 由输入尺寸与热力图尺寸计算 stride
- 按估计模式分派单人 / 多人解码
- 坐标缩放到原始视频分辨率
- 性能监控（EMA 延迟统计）
- 可选 telemetry 输出

网络推理本身不在此模块内：调用方传入已计算好的四个输出张量。
"""

import os
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ..core.config_loader import (
    DecodingSettings,
    EstimationType,
    SystemConfig,
    apply_env_overrides,
    get_config,
    get_decoding_settings,
)
from ..core.constants import Constants
from ..core.errors import DecoderConfigError
from ..core.logger import get_logger
from ..core.telemetry import TelemetryBuilder
from ..decoding import (
    PART_NAMES,
    POSENET_SKELETON,
    Pose,
    PoseSet,
    SkeletonTopology,
    TensorView,
    decode_multiple_poses,
    decode_single_pose,
)

logger = get_logger(__name__)


def compute_stride(input_height: int, heatmap_height: int) -> int:
    """
    计算输入图像到热力图网格的下采样倍数

    stride = (input_height - 1) // (heatmap_height - 1)，再向下取整到 8 的倍数

    Raises:
        DecoderConfigError: 热力图高度 < 2 或结果 stride <= 0
    """
    if heatmap_height < 2:
        raise DecoderConfigError(f"heatmap height must be at least 2, got {heatmap_height}")

    stride = (int(input_height) - 1) // (int(heatmap_height) - 1)
    stride -= stride % Constants.STRIDE_MULTIPLE
    if stride <= 0:
        raise DecoderConfigError(
            f"input height {input_height} too small for heatmap height {heatmap_height} (stride={stride})"
        )
    return stride


def compute_input_dims(source_size: Tuple[int, int], image_dims: Tuple[int, int]) -> Tuple[int, int]:
    """
    计算模型输入尺寸 (width, height)

    高度不低于 64 并保持不变，宽度按源视频宽高比推导。

    Args:
        source_size: 源视频尺寸 (width, height)
        image_dims: 期望的模型输入尺寸 (width, height)
    """
    source_w, source_h = source_size
    if source_w <= 0 or source_h <= 0:
        raise DecoderConfigError(f"source size must be positive, got {source_size}")

    height = max(int(image_dims[1]), Constants.MIN_IMAGE_DIM)
    width = int(height * (source_w / source_h))
    return width, height


def scale_poses(poses: PoseSet, source_size: Tuple[int, int], input_dims: Tuple[int, int]) -> PoseSet:
    """
    将模型输入坐标缩放到源视频分辨率

    scale = min(source_w, source_h) / min(input_w, input_h)；分数与填充标志不变。
    """
    scale = min(source_size) / min(input_dims)

    scaled_poses = []
    for pose in poses:
        scaled = Pose(num_parts=pose.num_parts)
        if pose.root is not None:
            scaled.root = pose.root.with_position((pose.root.x * scale, pose.root.y * scale))
        for kp in pose.filled_keypoints():
            scaled.set_keypoint(kp.with_position((kp.x * scale, kp.y * scale)))
        scaled_poses.append(scaled)
    return scaled_poses


@dataclass
class PoseResult:
    """
    姿态解码结果

    Attributes:
        poses: 解码得到的姿态（按根节点分数降序；坐标为模型输入图像坐标，传入 source_size 时为源分辨率坐标）
        stride: 本次解码使用的 stride
        estimation_type: 估计模式
        latency_ms: EMA 平滑后的解码延迟（毫秒）
        speed_fps: 理论解码速度（FPS）
        timestamp: 解码时间戳
        frame_index: 引擎内部的解码计数
    """
    poses: PoseSet
    stride: int
    estimation_type: EstimationType
    latency_ms: float
    speed_fps: float
    timestamp: float
    frame_index: int


class PoseDecodeEngine:
    """
    姿态解码引擎

    职责:
    - 计算 stride（输入图像高度 / 热力图高度）
    - 单人模式：每个部位取全局最大值
    - 多人模式：局部最大值候选 + NMS + 骨架遍历
    - 性能监控（EMA 延迟统计）

    使用示例:
        engine = PoseDecodeEngine.from_config()

        # 每个推理周期调用
        result = engine.process_output(heatmaps, offsets, displacement_fwd, displacement_bwd)
        for pose in result.poses:
            positions, scores, filled = pose.to_arrays()
    """

    def __init__(
        self,
        settings: Optional[DecodingSettings] = None,
        skeleton: SkeletonTopology = POSENET_SKELETON,
        latency_smoothing: float = Constants.LATENCY_SMOOTHING,
        telemetry: Optional[TelemetryBuilder] = None,
    ):
        """
        初始化姿态解码引擎

        Args:
            settings: 已校验的解码参数（None 时使用参考默认值）
            skeleton: 骨架拓扑（边顺序决定遍历顺序）
            latency_smoothing: 延迟 EMA 平滑系数，默认 0.7
            telemetry: 可选的 telemetry 构建器
        """
        self.settings = settings or DecodingSettings()
        self.skeleton = skeleton
        self.latency_smoothing = latency_smoothing
        self.telemetry = telemetry

        self._frame_index = 0
        self._latency_ms = 0.0
        self._log_interval_frames = max(1, int(os.getenv("POSENET_LOG_INTERVAL_FRAMES", "30")))

        logger.info(
            f"PoseDecodeEngine 已初始化 (mode={self.settings.estimation_type.value}, "
            f"max_poses={self.max_poses}, threshold={self.settings.score_threshold}, "
            f"nms_radius={self.settings.nms_radius})"
        )

    @classmethod
    def from_config(cls, config: Optional[SystemConfig] = None, **kwargs) -> "PoseDecodeEngine":
        """从 system_config.json（含环境变量覆盖）创建引擎"""
        if config is None:
            config = get_config()
        settings = get_decoding_settings(apply_env_overrides(config))
        return cls(settings=settings, **kwargs)

    @property
    def max_poses(self) -> int:
        """单人模式固定为 1"""
        if self.settings.estimation_type == EstimationType.SINGLE_POSE:
            return 1
        return self.settings.max_poses

    def process_output(
        self,
        heatmaps,
        offsets,
        displacements_fwd=None,
        displacements_bwd=None,
        input_height: Optional[int] = None,
        source_size: Optional[Tuple[int, int]] = None,
    ) -> PoseResult:
        """
        解码一次推理的输出张量

        Args:
            heatmaps: [1, H, W, K] 热力图（sigmoid 之后）
            offsets: [1, H, W, 2K] 偏移量
            displacements_fwd: [1, H, W, 2E] 前向位移（多人模式必需）
            displacements_bwd: [1, H, W, 2E] 后向位移（多人模式必需）
            input_height: 模型输入图像高度（None 时使用配置中的 image_dims）
            source_size: 源视频尺寸 (width, height)；提供时输出坐标缩放到源分辨率

        Returns:
            PoseResult

        Raises:
            TensorShapeError: 张量形状不一致
            DecoderConfigError: stride / 模式配置无效
        """
        start = time.perf_counter()

        heatmaps = TensorView.wrap(heatmaps, "heatmaps")
        input_dims = None
        if source_size is not None:
            input_dims = compute_input_dims(source_size, self.settings.image_dims)
        if input_height is None:
            input_height = input_dims[1] if input_dims else self.settings.image_dims[1]
        stride = compute_stride(input_height, heatmaps.height)

        if self.settings.estimation_type == EstimationType.SINGLE_POSE:
            poses = [decode_single_pose(heatmaps, offsets, stride)]
        else:
            if displacements_fwd is None or displacements_bwd is None:
                raise DecoderConfigError("multi-pose decoding requires both displacement tensors")
            poses = decode_multiple_poses(
                heatmaps, offsets,
                displacements_fwd, displacements_bwd,
                stride=stride,
                max_pose_detections=self.max_poses,
                score_threshold=self.settings.score_threshold,
                nms_radius=self.settings.nms_radius,
                local_maximum_radius=self.settings.local_maximum_radius,
                skeleton=self.skeleton,
            )

        if source_size is not None:
            poses = scale_poses(poses, source_size, input_dims)

        # 延迟（EMA 平滑）
        instant_latency = (time.perf_counter() - start) * 1000.0
        if self._frame_index == 0:
            self._latency_ms = instant_latency
        else:
            self._latency_ms = (
                self.latency_smoothing * self._latency_ms +
                (1 - self.latency_smoothing) * instant_latency
            )
        self._frame_index += 1

        if self._frame_index % self._log_interval_frames == 0:
            logger.debug(
                "【解码性能】本次=%.2fms | EMA=%.2fms | poses=%d | stride=%d",
                instant_latency, self._latency_ms, len(poses), stride
            )

        result = PoseResult(
            poses=poses,
            stride=stride,
            estimation_type=self.settings.estimation_type,
            latency_ms=self._latency_ms,
            speed_fps=self._get_speed_fps(),
            timestamp=time.time(),
            frame_index=self._frame_index,
        )

        if self.telemetry is not None:
            part_names = PART_NAMES if self.skeleton.num_parts == len(PART_NAMES) else None
            self.telemetry.build(result, part_names=part_names)

        return result

    def _get_speed_fps(self) -> float:
        """计算理论解码速度（FPS）"""
        return 1000.0 / self._latency_ms if self._latency_ms > 0 else 0.0

    def reset(self):
        """重置引擎状态"""
        self._frame_index = 0
        self._latency_ms = 0.0
        if self.telemetry is not None:
            self.telemetry.reset()
        logger.info("[PoseDecodeEngine] 状态已重置")

    def get_stats(self) -> Dict[str, Any]:
        """
        获取引擎统计信息

        Returns:
            统计字典
        """
        return {
            'latency_ms': self._latency_ms,
            'speed_fps': self._get_speed_fps(),
            'frame_index': self._frame_index,
            'estimation_type': self.settings.estimation_type.value,
            'max_poses': self.max_poses,
        }
