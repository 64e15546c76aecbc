"""
系统常量配置
"""

class Constants:
    """解码常量（system_config.json 缺省时的参考值）"""
    # 多人姿态配置
    MAX_POSES = 20  # 最大姿态数
    MAX_POSES_LIMIT = 20  # 允许配置的上限
    SCORE_THRESHOLD = 0.25  # 候选根节点置信度阈值
    NMS_RADIUS = 100  # 非极大值抑制半径（像素）
    LOCAL_MAXIMUM_RADIUS = 1  # 局部最大值窗口半径（3x3）

    # 输入尺寸配置
    IMAGE_DIMS = (256, 256)  # 模型输入尺寸 (width, height)
    MIN_IMAGE_DIM = 64  # 输入尺寸下限
    STRIDE_MULTIPLE = 8  # stride 向下取整到 8 的倍数

    # 引擎配置
    LATENCY_SMOOTHING = 0.7  # 延迟 EMA 平滑系数
