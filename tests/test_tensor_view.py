import numpy as np
import pytest

from posenet_decoder.core.errors import TensorShapeError
from posenet_decoder.decoding.tensor_view import TensorView, validate_output_tensors


def test_dimensions_and_indexing(make_tensor):
    data = make_tensor(3, 4, 2)
    data[0, 2, 1, 1] = 0.75
    view = TensorView(data)

    assert view.shape == (1, 3, 4, 2)
    assert (view.height, view.width, view.channels) == (3, 4, 2)
    assert view[2, 1, 1] == pytest.approx(0.75)
    assert view.channel_plane(1)[2, 1] == pytest.approx(0.75)
    assert view.planes().shape == (2, 3, 4)


def test_view_is_isolated_from_source(make_tensor):
    data = make_tensor(2, 2, 1)
    view = TensorView(data)
    data[0, 0, 0, 0] = 5.0

    assert view[0, 0, 0] == 0.0
    with pytest.raises(ValueError):
        view.planes()[0, 0, 0] = 1.0


def test_wrap_returns_existing_view(make_tensor):
    view = TensorView(make_tensor(2, 2, 1))
    assert TensorView.wrap(view) is view


@pytest.mark.parametrize("shape", [(2, 2, 1), (2, 3, 3, 1), (1, 0, 3, 1)])
def test_rejects_bad_shapes(shape):
    with pytest.raises(TensorShapeError):
        TensorView(np.zeros(shape, dtype=np.float32))


def test_validate_accepts_consistent_outputs(make_outputs):
    views = [TensorView(t) for t in make_outputs(4, 5, 3, 2)]
    validate_output_tensors(*views, num_edges=2)


def test_validate_rejects_offset_channel_mismatch(make_tensor):
    heatmaps = TensorView(make_tensor(4, 4, 3))
    offsets = TensorView(make_tensor(4, 4, 5))
    with pytest.raises(TensorShapeError):
        validate_output_tensors(heatmaps, offsets)


def test_validate_rejects_grid_mismatch(make_tensor):
    heatmaps = TensorView(make_tensor(4, 4, 3))
    offsets = TensorView(make_tensor(4, 5, 6))
    with pytest.raises(TensorShapeError):
        validate_output_tensors(heatmaps, offsets)


def test_validate_rejects_displacement_channel_mismatch(make_outputs, make_tensor):
    heatmaps, offsets, fwd, _ = make_outputs(4, 4, 3, 2)
    bad_bwd = make_tensor(4, 4, 6)
    with pytest.raises(TensorShapeError):
        validate_output_tensors(
            TensorView(heatmaps), TensorView(offsets),
            TensorView(fwd), TensorView(bad_bwd, name="displacements_bwd"),
            num_edges=2,
        )
