"""Breadth-first labeling of connected components in a depth image."""

from __future__ import annotations

from collections import deque
from typing import Deque, Tuple

import numpy as np

from depthseg.abstract_diff import AbstractDiff, ProjectionAngles
from depthseg.diff_factory import build_diff
from depthseg.labeler import AbstractImageLabeler
from depthseg.pixel_coords import PixelCoord

_MIN_DEPTH = 0.001
_LABEL_MODULUS = 1 << 16


class LinearImageLabeler(AbstractImageLabeler):
    """Labels components by breadth-first search over a cross neighbourhood.

    Columns wrap around; rows do not.
    """

    def __init__(
        self,
        depth_image,
        params: ProjectionAngles,
        angle_threshold: float,
        step_row: int = 1,
        step_col: int = 1,
    ) -> None:
        super().__init__(depth_image, params, angle_threshold)
        neighborhood = []
        for r in range(step_row, 0, -1):
            neighborhood.extend((PixelCoord(-r, 0), PixelCoord(r, 0)))
        for c in range(step_col, 0, -1):
            neighborhood.extend((PixelCoord(0, -c), PixelCoord(0, c)))
        self.neighborhood: Tuple[PixelCoord, ...] = tuple(neighborhood)

    def label_one_component(
        self, label: int, start: PixelCoord, diff_helper: AbstractDiff
    ) -> None:
        """Give ``label`` to every unlabeled pixel reachable from ``start``."""
        rows = self._label_image.shape[0]
        queue: Deque[PixelCoord] = deque([start])
        while queue:
            current = queue.popleft()
            if self.label_at(current) > 0:
                continue
            self.set_label(current, label)
            if self.depth_at(current) < _MIN_DEPTH:
                # unreliable depth: label it but do not grow from it
                continue
            for step in self.neighborhood:
                moved = current + step
                if not 0 <= moved.row < rows:
                    continue
                neighbor = PixelCoord(moved.row, self.wrap_cols(moved.col))
                if self.label_at(neighbor) > 0:
                    continue
                diff = diff_helper.diff_at(current, neighbor)
                if diff_helper.satisfies_threshold(diff, self.radians_threshold):
                    queue.append(neighbor)

    def depth_at(self, coord: PixelCoord) -> float:
        """Return the depth at ``coord``."""
        return float(self._depth_image[coord.row, coord.col])

    def label_at(self, coord: PixelCoord) -> int:
        """Return the label at ``coord``."""
        return int(self._label_image[coord.row, coord.col])

    def set_label(self, coord: PixelCoord, label: int) -> None:
        """Set the label at ``coord``."""
        self._label_image[coord.row, coord.col] = label

    def wrap_cols(self, col: int) -> int:
        """Fold a column that stepped just over either border back into the image."""
        cols = self._label_image.shape[1]
        if col < 0:
            return col + cols
        if col >= cols:
            return col - cols
        return col

    def compute_labels(self, diff_type) -> None:
        """Label every component of pixels with valid depth, from label 1 upwards."""
        self._label_image = np.zeros(self._depth_image.shape, dtype=np.uint16)
        diff_helper = build_diff(diff_type, self._depth_image, self.params)
        label = 1
        for row, col in np.argwhere(self._depth_image >= _MIN_DEPTH):
            coord = PixelCoord(int(row), int(col))
            if self.label_at(coord) > 0:
                continue
            self.label_one_component(label, coord, diff_helper)
            label = (label + 1) % _LABEL_MODULUS