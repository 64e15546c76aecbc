"""
解码错误类型
===========

所有错误都同步抛给调用方，解码核心内部不记录也不吞掉异常。
"""


class DecoderError(ValueError):
    """Base class for decoder input/configuration errors."""


class TensorShapeError(DecoderError):
    """Output tensors are malformed or inconsistent with each other."""


class DecoderConfigError(DecoderError):
    """Invalid decoding configuration (stride, max poses, thresholds...)."""
