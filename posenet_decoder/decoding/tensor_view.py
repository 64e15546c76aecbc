"""
Read-only view over one ``[1, H, W, C]`` network output tensor.
"""
from typing import Optional, Tuple

import numpy as np

from ..core.errors import TensorShapeError


class TensorView:
    """
    Immutable float32 accessor indexed ``[row, col, channel]`` (batch 0).

    The wrapped data is a private non-writeable copy, so the decode pass can
    neither mutate the caller's buffer nor hand out references into it.
    """

    __slots__ = ("_data", "_planes", "name")

    def __init__(self, data, name: str = "tensor"):
        self.name = name
        array = np.array(data, dtype=np.float32, copy=True)

        if array.ndim != 4:
            raise TensorShapeError(f"{name}: expected 4-D [1, H, W, C] tensor, got shape {array.shape}")
        if array.shape[0] != 1:
            raise TensorShapeError(f"{name}: batch dimension must be 1, got {array.shape[0]}")
        if min(array.shape[1:]) <= 0:
            raise TensorShapeError(f"{name}: empty dimension in shape {array.shape}")

        array.setflags(write=False)
        self._data = array
        # (C, H, W) channel-major view for per-channel scans
        self._planes = np.transpose(array[0], (2, 0, 1))

    @classmethod
    def wrap(cls, data, name: str = "tensor") -> "TensorView":
        """Return ``data`` unchanged if it is already a view."""
        if isinstance(data, TensorView):
            return data
        return cls(data, name=name)

    @property
    def shape(self) -> Tuple[int, int, int, int]:
        return self._data.shape

    @property
    def height(self) -> int:
        return self._data.shape[1]

    @property
    def width(self) -> int:
        return self._data.shape[2]

    @property
    def channels(self) -> int:
        return self._data.shape[3]

    def __getitem__(self, index: Tuple[int, int, int]) -> float:
        row, col, channel = index
        return float(self._data[0, row, col, channel])

    def channel_plane(self, channel: int) -> np.ndarray:
        """(H, W) read-only plane for one channel."""
        return self._planes[channel]

    def planes(self) -> np.ndarray:
        """(C, H, W) read-only channel-major array."""
        return self._planes

    def __repr__(self):
        return f"TensorView(name={self.name!r}, shape={self.shape})"


def validate_output_tensors(
    heatmaps: TensorView,
    offsets: TensorView,
    displacements_fwd: Optional[TensorView] = None,
    displacements_bwd: Optional[TensorView] = None,
    num_edges: Optional[int] = None,
) -> None:
    """
    Check the layout contract shared by the network outputs.

    heatmaps ``[1,H,W,K]``, offsets ``[1,H,W,2K]``, each displacement tensor
    ``[1,H,W,2E]``.

    Raises:
        TensorShapeError: on any inconsistency
    """
    grid = (heatmaps.height, heatmaps.width)
    num_parts = heatmaps.channels

    if (offsets.height, offsets.width) != grid:
        raise TensorShapeError(
            f"offsets grid {(offsets.height, offsets.width)} does not match heatmaps grid {grid}"
        )
    if offsets.channels != 2 * num_parts:
        raise TensorShapeError(
            f"offsets must have 2K={2 * num_parts} channels, got {offsets.channels}"
        )

    for view in (displacements_fwd, displacements_bwd):
        if view is None:
            continue
        if (view.height, view.width) != grid:
            raise TensorShapeError(
                f"{view.name} grid {(view.height, view.width)} does not match heatmaps grid {grid}"
            )
        if num_edges is not None and view.channels != 2 * num_edges:
            raise TensorShapeError(
                f"{view.name} must have 2E={2 * num_edges} channels, got {view.channels}"
            )
        if view.channels % 2 != 0:
            raise TensorShapeError(f"{view.name} must have an even channel count, got {view.channels}")
