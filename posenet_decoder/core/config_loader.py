"""
统一配置加载器 - 使用 dataclass 实现轻量级配置管理
=====================================================

此模块负责：
1. 从 system_config.json 读取并验证解码配置
2. 提供类型安全的配置访问接口（DecodingSettings）
3. 统一管理路径解析逻辑
4. 支持环境变量覆盖

配置文件位置：
- 默认: system_config.json 或 config/system_config.json
- 环境变量: POSENET_CONFIG=path/to/config.json
- 参数指定: load_config(config_path="path/to/config.json")

使用示例：
```python
from posenet_decoder.core.config_loader import get_config, get_decoding_settings

config = get_config()  # 单例模式
settings = get_decoding_settings(config)
print(settings.estimation_type, settings.max_poses, settings.nms_radius)
```
"""
from __future__ import annotations

import copy
import json
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .constants import Constants
from .errors import DecoderConfigError


# ============================================================================
# 简化配置类（不依赖 Pydantic）
# ============================================================================

class DictConfig:
    """字典风格的配置基类"""

    def __init__(self, **kwargs):
        for key, value in kwargs.items():
            if isinstance(value, dict):
                # 递归转换嵌套字典
                setattr(self, key, DictConfig(**value))
            elif isinstance(value, list) and value and isinstance(value[0], dict):
                setattr(self, key, [DictConfig(**item) if isinstance(item, dict) else item for item in value])
            else:
                setattr(self, key, value)

    def get(self, key: str, default=None):
        """字典风格的 get 方法"""
        return getattr(self, key, default)

    def __getitem__(self, key: str):
        """支持 config["key"] 语法"""
        return getattr(self, key)

    def __repr__(self):
        attrs = {k: v for k, v in self.__dict__.items() if not k.startswith("_")}
        return f"{self.__class__.__name__}({attrs})"


class SystemConfig(DictConfig):
    """
    系统配置（顶层）

    属性:
        system: 系统信息
        paths: 路径配置
        logging: 日志配置
        decoding: 解码配置（estimation_type, max_poses, score_threshold, ...）
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._config_path: Optional[Path] = None

    def set_config_path(self, path: Path) -> None:
        """设置配置文件路径（用于相对路径解析）"""
        self._config_path = path

    def resolve_path(self, path_str: Optional[str]) -> Optional[Path]:
        """解析相对/绝对路径（相对路径以配置文件所在目录为基准）"""
        if not path_str:
            return None

        if not self._config_path:
            raise RuntimeError("配置文件路径未设置，无法解析相对路径")

        candidate = Path(path_str)
        if not candidate.is_absolute():
            candidate = self._config_path.parent / candidate

        return candidate


# ============================================================================
# 解码配置
# ============================================================================

class EstimationType(str, Enum):
    """姿态估计模式"""
    SINGLE_POSE = "single_pose"
    MULTI_POSE = "multi_pose"

    @classmethod
    def parse(cls, value: Any) -> "EstimationType":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("-", "_")
        aliases = {
            "singlepose": cls.SINGLE_POSE,
            "single": cls.SINGLE_POSE,
            "multipose": cls.MULTI_POSE,
            "multi": cls.MULTI_POSE,
        }
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError:
            raise DecoderConfigError(f"Unknown estimation type: {value!r}") from None


@dataclass(frozen=True)
class DecodingSettings:
    """
    解码参数（已校验）

    Attributes:
        estimation_type: 单人 / 多人模式
        max_poses: 最大姿态数 [1, 20]
        score_threshold: 候选根节点阈值 [0, 1]
        nms_radius: NMS 半径（像素，>= 0）
        local_maximum_radius: 局部最大值窗口半径（>= 0）
        image_dims: 模型输入尺寸 (width, height)
    """
    estimation_type: EstimationType = EstimationType.SINGLE_POSE
    max_poses: int = Constants.MAX_POSES
    score_threshold: float = Constants.SCORE_THRESHOLD
    nms_radius: int = Constants.NMS_RADIUS
    local_maximum_radius: int = Constants.LOCAL_MAXIMUM_RADIUS
    image_dims: Tuple[int, int] = Constants.IMAGE_DIMS

    def __post_init__(self):
        object.__setattr__(self, "estimation_type", EstimationType.parse(self.estimation_type))

        if not 1 <= int(self.max_poses) <= Constants.MAX_POSES_LIMIT:
            raise DecoderConfigError(
                f"max_poses must be in [1, {Constants.MAX_POSES_LIMIT}], got {self.max_poses}"
            )
        if not 0.0 <= float(self.score_threshold) <= 1.0:
            raise DecoderConfigError(f"score_threshold must be in [0, 1], got {self.score_threshold}")
        if int(self.nms_radius) < 0:
            raise DecoderConfigError(f"nms_radius must be non-negative, got {self.nms_radius}")
        if int(self.local_maximum_radius) < 0:
            raise DecoderConfigError(
                f"local_maximum_radius must be non-negative, got {self.local_maximum_radius}"
            )
        if len(self.image_dims) != 2 or min(self.image_dims) <= 0:
            raise DecoderConfigError(f"image_dims must be two positive integers, got {self.image_dims}")

        object.__setattr__(self, "max_poses", int(self.max_poses))
        object.__setattr__(self, "score_threshold", float(self.score_threshold))
        object.__setattr__(self, "nms_radius", int(self.nms_radius))
        object.__setattr__(self, "local_maximum_radius", int(self.local_maximum_radius))
        object.__setattr__(self, "image_dims", (int(self.image_dims[0]), int(self.image_dims[1])))


DEFAULT_CONFIG: Dict[str, Any] = {
    "system": {"name": "posenet-decoder"},
    "paths": {"logs_dir": "logs"},
    "logging": {
        "level": "INFO",
        "enable_console": True,
        "enable_file": False,
        "file_rotation": "daily",
        "max_size_mb": 100,
    },
    "decoding": {
        "estimation_type": EstimationType.SINGLE_POSE.value,
        "max_poses": Constants.MAX_POSES,
        "score_threshold": Constants.SCORE_THRESHOLD,
        "nms_radius": Constants.NMS_RADIUS,
        "local_maximum_radius": Constants.LOCAL_MAXIMUM_RADIUS,
        "image_dims": list(Constants.IMAGE_DIMS),
    },
}


# ============================================================================
# 配置加载器（单例模式）
# ============================================================================

_config_instance: Optional[SystemConfig] = None


def find_config_path() -> Path:
    """
    Locate the configuration file

    Search order: env POSENET_CONFIG > root/system_config.json > root/config/system_config.json.
    The returned path may not exist.
    """
    config_env = os.getenv("POSENET_CONFIG")
    if config_env:
        return Path(config_env)

    root_dir = Path(__file__).parent.parent.parent
    root_config = root_dir / "system_config.json"
    config_config = root_dir / "config" / "system_config.json"

    if root_config.exists():
        return root_config
    if config_config.exists():
        return config_config
    return root_config


def load_config(config_path: Optional[str | Path] = None) -> SystemConfig:
    """
    Load configuration from JSON file

    Args:
        config_path: Configuration file path (default: auto-detect via find_config_path)

    Returns:
        SystemConfig: Configuration object, missing sections filled with reference defaults

    Raises:
        FileNotFoundError: Configuration file does not exist
        ValueError: Configuration file format error
    """
    config_path = find_config_path() if config_path is None else Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as f:
            raw_data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Configuration file JSON parsing failed: {e}") from e

    if not isinstance(raw_data, dict):
        raise ValueError(f"Configuration root must be a JSON object: {config_path}")

    # 缺失的段落/字段使用参考默认值补齐
    for section, defaults in DEFAULT_CONFIG.items():
        current = raw_data.get(section)
        if current is None:
            raw_data[section] = copy.deepcopy(defaults)
        elif isinstance(current, dict):
            for key, value in defaults.items():
                current.setdefault(key, copy.deepcopy(value))

    config = SystemConfig(**raw_data)
    config.set_config_path(config_path)
    return config


def get_config(config_path: Optional[str | Path] = None, reload: bool = False) -> SystemConfig:
    """
    获取配置单例（懒加载）

    Args:
        config_path: 配置文件路径（仅首次加载时有效）
        reload: 是否强制重新加载配置

    Returns:
        SystemConfig: 配置单例
    """
    global _config_instance

    if _config_instance is None or reload:
        _config_instance = load_config(config_path)

    return _config_instance


# ============================================================================
# 环境变量覆盖支持
# ============================================================================

def apply_env_overrides(config: SystemConfig) -> SystemConfig:
    """
    应用环境变量覆盖（优先级：ENV > system_config.json > 默认值）

    支持的环境变量：
    - POSENET_LOG_LEVEL: 日志级别
    - POSENET_ESTIMATION_TYPE: 姿态估计模式（single_pose / multi_pose）
    - POSENET_MAX_POSES: 最大姿态数

    Args:
        config: 原始配置对象

    Returns:
        应用环境变量后的配置对象
    """
    if log_level := os.getenv("POSENET_LOG_LEVEL"):
        config.logging.level = log_level.upper()

    if estimation_type := os.getenv("POSENET_ESTIMATION_TYPE"):
        config.decoding.estimation_type = estimation_type

    if max_poses := os.getenv("POSENET_MAX_POSES"):
        try:
            config.decoding.max_poses = int(max_poses)
        except ValueError:
            pass

    return config


def get_decoding_settings(config: Optional[SystemConfig] = None) -> DecodingSettings:
    """
    从配置对象构建已校验的解码参数

    Args:
        config: 配置对象（None 时使用单例）

    Returns:
        DecodingSettings

    Raises:
        DecoderConfigError: 参数越界或模式未知
    """
    if config is None:
        config = get_config()

    decoding = config.decoding
    return DecodingSettings(
        estimation_type=decoding.get("estimation_type", EstimationType.SINGLE_POSE),
        max_poses=decoding.get("max_poses", Constants.MAX_POSES),
        score_threshold=decoding.get("score_threshold", Constants.SCORE_THRESHOLD),
        nms_radius=decoding.get("nms_radius", Constants.NMS_RADIUS),
        local_maximum_radius=decoding.get("local_maximum_radius", Constants.LOCAL_MAXIMUM_RADIUS),
        image_dims=tuple(decoding.get("image_dims", Constants.IMAGE_DIMS)),
    )
