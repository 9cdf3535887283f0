import numpy as np
import pytest

from depthseg.abstract_diff import AbstractDiff, ProjectionAngles, SimpleDiff
from depthseg.pixel_coords import PixelCoord


def test_projection_angles_lookup():
    params = ProjectionAngles([0.1, 0.2, 0.3], [-1.0, 0.0], h_span=2.0)
    assert params.rows == 3
    assert params.cols == 2
    assert params.angle_from_row(2) == pytest.approx(0.3)
    assert params.angle_from_col(0) == pytest.approx(-1.0)
    assert params.h_span == pytest.approx(2.0)


def test_projection_angles_need_rows_and_cols():
    with pytest.raises(ValueError):
        ProjectionAngles([], [0.0], h_span=1.0)
    with pytest.raises(ValueError):
        ProjectionAngles([0.0], [], h_span=1.0)


def test_projection_angles_out_of_range():
    params = ProjectionAngles([0.1], [0.2], h_span=1.0)
    with pytest.raises(IndexError):
        params.angle_from_row(1)


def test_abstract_diff_cannot_be_instantiated():
    with pytest.raises(TypeError):
        AbstractDiff(np.zeros((2, 2)))


def test_simple_diff_is_symmetric_absolute_difference():
    image = np.array([[1.0, 4.5], [2.0, 2.0]])
    diff = SimpleDiff(image)
    a, b = PixelCoord(0, 0), PixelCoord(0, 1)
    assert diff.diff_at(a, b) == pytest.approx(3.5)
    assert diff.diff_at(b, a) == diff.diff_at(a, b)
    assert diff.diff_at(PixelCoord(1, 0), PixelCoord(1, 1)) == 0.0


def test_simple_diff_threshold_is_strictly_below():
    diff = SimpleDiff(np.zeros((1, 1)))
    assert diff.satisfies_threshold(0.5, 1.0)
    assert not diff.satisfies_threshold(1.0, 1.0)
    assert not diff.satisfies_threshold(2.0, 1.0)


def test_source_image_is_float32():
    diff = SimpleDiff([[1, 2], [3, 4]])
    assert diff.source_image.dtype == np.float32
    assert diff.source_image.shape == (2, 2)


def test_default_visualize_is_empty_colour_image():
    image = SimpleDiff(np.ones((3, 3))).visualize()
    assert image.size == 0
    assert image.shape[-1] == 3