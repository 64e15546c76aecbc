import numpy as np
import pytest


def _zeros(height, width, channels):
    return np.zeros((1, height, width, channels), dtype=np.float32)


@pytest.fixture
def make_tensor():
    """Factory for a zeroed [1, H, W, C] float32 tensor."""
    return _zeros


@pytest.fixture
def make_outputs():
    """
    Factory for a consistent set of network outputs.

    Returns (heatmaps, offsets, displacements_fwd, displacements_bwd), all zero.
    """
    def _make(height, width, num_parts, num_edges):
        return (
            _zeros(height, width, num_parts),
            _zeros(height, width, 2 * num_parts),
            _zeros(height, width, 2 * num_edges),
            _zeros(height, width, 2 * num_edges),
        )
    return _make
