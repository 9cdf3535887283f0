import numpy as np
import pytest

from depthseg.abstract_diff import ProjectionAngles, SimpleDiff
from depthseg.diff_factory import DiffType
from depthseg.linear_labeler import LinearImageLabeler
from depthseg.pixel_coords import PixelCoord


def _params(rows, cols):
    step = 2 * np.pi / cols
    return ProjectionAngles(
        np.linspace(-0.1, 0.1, rows),
        [-np.pi + c * step for c in range(cols)],
        2 * np.pi,
    )


def _two_blobs():
    depth = np.zeros((3, 6), dtype=np.float32)
    depth[:, 0:2] = 1.0
    depth[:, 3:5] = 5.0
    return depth


def test_neighborhood_order():
    labeler = LinearImageLabeler(np.ones((3, 3)), _params(3, 3), 0.1, 2, 1)
    assert labeler.neighborhood == (
        PixelCoord(-2, 0),
        PixelCoord(2, 0),
        PixelCoord(-1, 0),
        PixelCoord(1, 0),
        PixelCoord(0, -1),
        PixelCoord(0, 1),
    )


def test_wrap_cols():
    labeler = LinearImageLabeler(np.ones((2, 5)), _params(2, 5), 0.1)
    assert labeler.wrap_cols(-1) == 4
    assert labeler.wrap_cols(5) == 0
    assert labeler.wrap_cols(2) == 2


def test_depth_and_label_access():
    depth = np.arange(6, dtype=np.float32).reshape(2, 3)
    labeler = LinearImageLabeler(depth, _params(2, 3), 0.1)
    coord = PixelCoord(1, 2)
    assert labeler.depth_at(coord) == pytest.approx(depth[1, 2])
    assert labeler.label_at(coord) == 0
    labeler.set_label(coord, 7)
    assert labeler.label_at(coord) == 7
    assert labeler.label_image[1, 2] == 7


def test_simple_diff_separates_blobs():
    depth = _two_blobs()
    labeler = LinearImageLabeler(depth, _params(3, 6), 0.5)
    labeler.compute_labels(DiffType.SIMPLE)
    labels = labeler.label_image
    assert np.all(labels[depth == 0] == 0)
    first = labels[:, 0:2]
    second = labels[:, 3:5]
    assert len(np.unique(first)) == 1
    assert len(np.unique(second)) == 1
    assert first[0, 0] > 0 and second[0, 0] > 0
    assert first[0, 0] != second[0, 0]
    assert set(np.unique(labels)) == {0, int(first[0, 0]), int(second[0, 0])}


def test_labels_start_at_one_in_row_major_order():
    labeler = LinearImageLabeler(_two_blobs(), _params(3, 6), 0.5)
    labeler.compute_labels(DiffType.SIMPLE)
    assert labeler.label_image[0, 0] == 1
    assert labeler.label_image[0, 3] == 2


def test_columns_wrap_around():
    depth = np.zeros((2, 5), dtype=np.float32)
    depth[:, 0] = 2.0
    depth[:, 4] = 2.0
    labeler = LinearImageLabeler(depth, _params(2, 5), 0.5)
    labeler.compute_labels(DiffType.SIMPLE)
    labels = labeler.label_image
    assert len(np.unique(labels[depth > 0])) == 1
    assert labels[0, 0] == labels[1, 4]


def test_angle_diff_keeps_flat_wall_together():
    depth = np.full((4, 8), 10.0, dtype=np.float32)
    labeler = LinearImageLabeler(depth, _params(4, 8), np.radians(10.0))
    labeler.compute_labels(DiffType.ANGLES)
    assert np.all(labeler.label_image == labeler.label_image[0, 0])
    assert labeler.label_image[0, 0] > 0


def test_label_one_component_only_touches_reachable_pixels():
    depth = _two_blobs()
    labeler = LinearImageLabeler(depth, _params(3, 6), 0.5)
    labeler.label_one_component(9, PixelCoord(1, 1), SimpleDiff(depth))
    expected = [[9, 9, 0, 0, 0, 0]] * 3
    assert labeler.label_image.tolist() == expected
    assert labeler.label_at(PixelCoord(2, 0)) == 9
    assert labeler.label_at(PixelCoord(0, 3)) == 0


def test_label_one_component_on_zero_depth_labels_only_start():
    depth = _two_blobs()
    labeler = LinearImageLabeler(depth, _params(3, 6), 0.5)
    labeler.label_one_component(4, PixelCoord(0, 2), SimpleDiff(depth))
    assert labeler.label_at(PixelCoord(0, 2)) == 4
    assert int(np.count_nonzero(labeler.label_image)) == 1


def test_compute_labels_resets_previous_labels():
    depth = _two_blobs()
    labeler = LinearImageLabeler(depth, _params(3, 6), 0.5)
    labeler.set_label(PixelCoord(0, 2), 30)
    labeler.compute_labels(DiffType.SIMPLE)
    assert labeler.label_at(PixelCoord(0, 2)) == 0


def test_compute_labels_with_none_diff_raises():
    labeler = LinearImageLabeler(_two_blobs(), _params(3, 6), 0.5)
    with pytest.raises(ValueError):
        labeler.compute_labels(DiffType.NONE)