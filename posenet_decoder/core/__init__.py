"""
Core module for common utilities and constants
"""
from .constants import Constants
from .errors import DecoderConfigError, DecoderError, TensorShapeError
from .logger import get_logger, setup_logger, logger

__all__ = [
    'Constants',
    'DecoderError',
    'DecoderConfigError',
    'TensorShapeError',
    'get_logger',
    'setup_logger',
    'logger',
]
