"""
日志配置模块 - 从 system_config.json 读取配置

包内统一使用 ``posenet_decoder`` 日志层级：
- ``setup_logger()`` 配置包根 logger（handler 只挂在这一层）
- 各模块通过 ``get_logger(__name__)`` 取子 logger，消息向上传递到包根

使用示例：
```python
from posenet_decoder.core.logger import get_logger

logger = get_logger(__name__)   # posenet_decoder.decoding.pose_assembler
logger.debug("decoded %d poses", n)
```
"""
import logging
import os
from datetime import datetime
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional

ROOT_LOGGER_NAME = 'posenet_decoder'

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _load_system_config():
    """尽力加载配置；失败时返回 None，日志系统退回默认值"""
    try:
        # 延迟导入避免循环依赖
        from .config_loader import get_config, find_config_path

        config_path = find_config_path()
        if config_path.exists():
            return get_config(config_path=config_path)
    except (OSError, ValueError) as e:
        print(f"Warning: 无法加载 system_config.json，使用默认日志配置: {e}")
    return None


def _resolve_log_dir(config) -> Path:
    """logs_dir 相对路径以配置文件所在目录为基准；无配置文件路径时以当前目录为基准"""
    logs_dir = 'logs'
    if config is not None and hasattr(config, 'paths'):
        logs_dir = getattr(config.paths, 'logs_dir', None) or logs_dir
        try:
            return config.resolve_path(logs_dir)
        except RuntimeError:
            pass
    return Path(logs_dir)


def _resolve_level(config, level: Optional[int]) -> int:
    if level is not None:
        return level
    env_level = os.getenv("POSENET_LOG_LEVEL")
    if env_level:
        return getattr(logging, env_level.upper(), logging.INFO)
    if config is not None and hasattr(config, 'logging'):
        return getattr(logging, str(config.logging.get('level', 'INFO')).upper(), logging.INFO)
    return logging.INFO


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: Optional[int] = None,
    log_dir: Optional[str] = None,
    enable_console: Optional[bool] = None,
    enable_file: Optional[bool] = None,
    config=None,
) -> logging.Logger:
    """
    配置日志对象（参数从 system_config.json 读取）

    优先级：参数传入 > 环境变量 POSENET_LOG_LEVEL（仅级别）> system_config.json > 默认值

    Args:
        name: 日志名称（默认包根 ``posenet_decoder``）
        level: 日志级别
        log_dir: 日志目录（None 时取 paths.logs_dir，相对配置文件解析）
        enable_console: 是否启用控制台
        enable_file: 是否启用文件（默认关闭）
        config: 已加载的 SystemConfig（None 时自动查找）

    Returns:
        logger: 配置好的日志对象
    """
    if config is None:
        config = _load_system_config()
    logging_cfg = config.logging if config is not None and hasattr(config, 'logging') else None

    level = _resolve_level(config, level)
    log_path = Path(log_dir) if log_dir is not None else _resolve_log_dir(config)
    if enable_console is None:
        enable_console = logging_cfg.get('enable_console', True) if logging_cfg else True
    if enable_file is None:
        enable_file = logging_cfg.get('enable_file', False) if logging_cfg else False
    file_rotation = logging_cfg.get('file_rotation', 'daily') if logging_cfg else 'daily'
    max_size_mb = logging_cfg.get('max_size_mb', 100) if logging_cfg else 100

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # 如果logger已有handler，则不重复添加
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    if enable_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if enable_file:
        log_path.mkdir(parents=True, exist_ok=True)
        if file_rotation == 'daily':
            log_file = log_path / f'{name}_{datetime.now().strftime("%Y%m%d")}.log'
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
        else:
            log_file = log_path / f'{name}.log'
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=max_size_mb * 1024 * 1024,
                backupCount=5,
                encoding='utf-8'
            )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """包内子 logger；名称须位于 ``posenet_decoder`` 层级下才会共享包根的 handler"""
    return logging.getLogger(name)


# 包根 logger（导入时按配置文件初始化）
logger = setup_logger()
