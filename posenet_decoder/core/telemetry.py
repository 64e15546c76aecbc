"""
遥测数据构建模块
===============

负责把解码结果（PoseResult）构建、格式化为 JSON 友好的遥测数据并按间隔输出。
"""
import json
import time
from typing import Any, Dict, Optional, Sequence

import numpy as np


def format_floats(obj: Any) -> Any:
    """
    递归格式化对象中的浮点数为3位小数

    Args:
        obj: 要格式化的对象（dict、list、tuple、float、ndarray等）

    Returns:
        格式化后的对象
    """
    if isinstance(obj, dict):
        return {k: format_floats(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [format_floats(item) for item in obj]
    elif isinstance(obj, bool):
        return obj
    elif isinstance(obj, float):
        return round(obj, 3)
    elif isinstance(obj, np.ndarray):
        return format_floats(obj.tolist())
    elif isinstance(obj, np.generic):
        val = obj.item()
        return round(val, 3) if isinstance(val, float) else val
    else:
        return obj


class TelemetryBuilder:
    """
    遥测数据构建器

    职责:
    - 从 PoseResult 构建 telemetry 字典
    - 格式化浮点数为固定精度
    - 每 N 帧打印一次 JSON 格式的 telemetry

    使用示例:
        builder = TelemetryBuilder(print_enabled=True, print_interval=30)
        telemetry = builder.build(result, part_names=PART_NAMES)
    """

    def __init__(
        self,
        print_enabled: bool = True,
        print_interval: int = 30
    ):
        """
        初始化遥测构建器

        Args:
            print_enabled: 是否启用 telemetry 打印
            print_interval: 打印间隔（每N帧打印一次）
        """
        self.print_enabled = print_enabled
        self.print_interval = max(1, print_interval)
        self._last_telemetry: Optional[Dict[str, Any]] = None

    def build(self, result, part_names: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        """
        构建 telemetry 数据

        Args:
            result: PoseResult（poses, stride, estimation_type, latency_ms, frame_index ...）
            part_names: 关键点名称（None 时使用部位编号）

        Returns:
            telemetry 字典
        """
        telemetry = {
            "estimation_type": getattr(result.estimation_type, "value", result.estimation_type),
            "stride": result.stride,
            "pose_count": len(result.poses),
            "poses": [
                {
                    "root_score": pose.root_score,
                    "filled_count": len(pose.filled_keypoints()),
                    "keypoints": pose.to_dict(part_names),
                }
                for pose in result.poses
            ],
            "latency_ms": result.latency_ms,
            "speed_fps": result.speed_fps,
            "frame_index": result.frame_index,
            "timestamp": time.time(),
        }

        self._last_telemetry = telemetry
        self._print_if_enabled(telemetry, result.frame_index)
        return telemetry

    def _print_if_enabled(self, telemetry: Dict[str, Any], frame_count: int):
        """根据配置打印 telemetry（带格式化）"""
        if not self.print_enabled:
            return

        if frame_count % self.print_interval != 0:
            return

        formatted_telemetry = format_floats(telemetry)
        print(f"\n[Telemetry] {json.dumps(formatted_telemetry, ensure_ascii=False)}\n", flush=True)

    def get_last_telemetry(self) -> Optional[Dict[str, Any]]:
        """获取上一帧的 telemetry 数据"""
        return self._last_telemetry

    def reset(self):
        """重置 telemetry 缓存"""
        self._last_telemetry = None
