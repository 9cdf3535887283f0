import numpy as np
import pytest

from depthseg.abstract_diff import ProjectionAngles
from depthseg.labeler import AbstractImageLabeler, labels_to_color


class _RecordingLabeler(AbstractImageLabeler):
    def compute_labels(self, diff_type):
        self._label_image = (self.depth_image > 0).astype(np.uint16)


def _params(rows=2, cols=3):
    return ProjectionAngles(
        np.linspace(-0.1, 0.1, rows), np.linspace(-3.0, 3.0, cols), 2 * np.pi
    )


def test_color_table_first_and_last_entries():
    colors = labels_to_color(np.array([[0, 199]], dtype=np.uint16))
    assert tuple(int(v) for v in colors[0, 0]) == (104, 109, 253)
    assert tuple(int(v) for v in colors[0, 1]) == (100, 156, 216)


def test_labels_to_color_uses_table_and_wraps():
    labels = np.array([[0, 1], [200, 201]], dtype=np.uint16)
    colors = labels_to_color(labels)
    assert colors.shape == (2, 2, 3)
    assert colors.dtype == np.uint8
    assert tuple(int(v) for v in colors[0, 0]) == (104, 109, 253)
    assert tuple(int(v) for v in colors[0, 1]) == (125, 232, 153)
    assert tuple(int(v) for v in colors[1, 0]) == (104, 109, 253)
    assert tuple(int(v) for v in colors[1, 1]) == (125, 232, 153)


def test_labels_to_color_same_label_same_color():
    labels = np.full((3, 4), 17, dtype=np.uint16)
    colors = labels_to_color(labels)
    assert colors.reshape(-1, 3).tolist() == [[205, 129, 168]] * 12


def test_abstract_labeler_cannot_be_instantiated():
    with pytest.raises(TypeError):
        AbstractImageLabeler(np.zeros((2, 3)), _params(), 0.1)


def test_initial_label_image_is_zero_and_matches_depth_shape():
    labeler = _RecordingLabeler(np.ones((2, 3)), _params(), 0.25)
    assert labeler.label_image.shape == (2, 3)
    assert labeler.label_image.dtype == np.uint16
    assert not labeler.label_image.any()
    assert labeler.radians_threshold == pytest.approx(0.25)


def test_set_depth_image_is_used_by_labeling():
    labeler = _RecordingLabeler(np.zeros((2, 3)), _params(), 0.1)
    new_depth = np.array([[0.0, 1.0, 0.0], [2.0, 0.0, 0.0]])
    labeler.set_depth_image(new_depth)
    labeler.compute_labels(None)
    np.testing.assert_array_equal(labeler.label_image, new_depth > 0)


def test_depth_image_must_be_two_dimensional():
    with pytest.raises(ValueError):
        _RecordingLabeler(np.zeros(5), _params(), 0.1)