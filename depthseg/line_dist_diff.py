"""Line-distance differences between neighbouring depth pixels.

The angle between the beams' endpoints is computed as for angle differences;
the difference is then the distance ``d1 * sin(beta)`` to the line that the
two measurements span.
"""

from __future__ import annotations

import math

import numpy as np

from depthseg.abstract_diff import AbstractDiff, ProjectionAngles
from depthseg.angle_diff import _beta_array, _col_alphas, _row_alphas, get_beta
from depthseg.pixel_coords import PixelCoord

_MIN_DEPTH = 0.001
_MIN_VISIBLE_DEPTH = 0.01
_BORDER_MARGIN = 0.05
_MAX_DIST = 20.0


def line_dist(alpha: float, current_depth: float, neighbor_depth: float) -> float:
    """Return the distance to the line spanned by the endpoints of two beams.

    ``alpha`` is the angle between the beams; the depths are their readings.
    """
    d1 = max(current_depth, neighbor_depth)
    beta = get_beta(alpha, current_depth, neighbor_depth)
    return d1 * math.sin(beta)


def _line_dist_array(alpha, current, neighbor) -> np.ndarray:
    d1 = np.maximum(current, neighbor)
    return d1 * np.sin(_beta_array(alpha, current, neighbor))


class LineDistDiff(AbstractDiff):
    """Line distance between neighbouring beams' endpoints, computed on demand."""

    def __init__(self, source_image, params: ProjectionAngles) -> None:
        super().__init__(source_image)
        self.params = params
        self._row_alphas = _row_alphas(params)
        self._col_alphas = _col_alphas(params, absolute_wrap=False)

    def _compute_alpha(self, current: PixelCoord, neighbor: PixelCoord) -> float:
        last_col = self.params.cols - 1
        if (current.col == 0 and neighbor.col == last_col) or (
            neighbor.col == 0 and current.col == last_col
        ):
            return self._col_alphas[-1]
        if current.row < neighbor.row:
            return self._row_alphas[current.row]
        if current.row > neighbor.row:
            return self._row_alphas[neighbor.row]
        if current.col < neighbor.col:
            return self._col_alphas[current.col]
        if current.col > neighbor.col:
            return self._col_alphas[neighbor.col]
        return 0.0

    def diff_at(self, from_coord: PixelCoord, to_coord: PixelCoord) -> float:
        image = self.source_image
        current_depth = float(image[from_coord.row, from_coord.col])
        neighbor_depth = float(image[to_coord.row, to_coord.col])
        alpha = self._compute_alpha(from_coord, to_coord)
        span = self.params.h_span
        if alpha > span - _BORDER_MARGIN:
            # the pair lies across the horizontal border
            alpha = alpha - span if alpha > span else span - alpha
        return line_dist(alpha, current_depth, neighbor_depth)

    def satisfies_threshold(self, value: float, threshold: float) -> bool:
        """The threshold holds when the value is bigger than it."""
        return value > threshold


class LineDistDiffPrecomputed(AbstractDiff):
    """Line distances computed once for every row and column neighbour."""

    def __init__(self, source_image, params: ProjectionAngles) -> None:
        super().__init__(source_image)
        self.params = params
        if self.source_image.shape != (params.rows, params.cols):
            raise ValueError(
                f"image shape {self.source_image.shape} does not match "
                f"projection {(params.rows, params.cols)}"
            )
        self._row_alphas = np.asarray(_row_alphas(params), dtype=np.float64)
        self._col_alphas = np.asarray(
            _col_alphas(params, absolute_wrap=True), dtype=np.float64
        )
        self._dists_row, self._dists_col = self._precompute_line_dists()

    def _precompute_line_dists(self):
        depth = self.source_image.astype(np.float64)
        valid = depth >= _MIN_DEPTH

        next_in_row = np.roll(depth, -1, axis=1)
        dists_col = np.where(
            valid,
            _line_dist_array(self._col_alphas[np.newaxis, :], depth, next_in_row),
            0.0,
        ).astype(np.float32)

        dists_row = np.zeros(depth.shape, dtype=np.float32)
        if depth.shape[0] > 1:
            dists = _line_dist_array(
                self._row_alphas[:-1, np.newaxis], depth[:-1], depth[1:]
            )
            dists_row[:-1] = np.where(valid[:-1], dists, 0.0)
        return dists_row, dists_col

    def diff_at(self, from_coord: PixelCoord, to_coord: PixelCoord) -> float:
        last_row = self.params.rows - 1
        if (from_coord.row == last_row and to_coord.row == 0) or (
            from_coord.row == 0 and to_coord.row == last_row
        ):
            row = last_row
        else:
            row = min(from_coord.row, to_coord.row)
        last_col = self.params.cols - 1
        if (from_coord.col == last_col and to_coord.col == 0) or (
            from_coord.col == 0 and to_coord.col == last_col
        ):
            col = last_col
        else:
            col = min(from_coord.col, to_coord.col)
        if from_coord.row != to_coord.row:
            return float(self._dists_row[row, col])
        if from_coord.col != to_coord.col:
            return float(self._dists_col[row, col])
        raise ValueError("Asking for difference of same pixels.")

    def satisfies_threshold(self, value: float, threshold: float) -> bool:
        """The threshold holds when the value is bigger than it."""
        return value > threshold

    def visualize(self) -> np.ndarray:
        """Colour image: channel 0 shows row-wise distances, channel 1 column-wise."""
        colors = np.zeros(self._dists_row.shape + (3,), dtype=np.uint8)
        mask = self.source_image >= _MIN_VISIBLE_DEPTH

        def to_color(dists: np.ndarray) -> np.ndarray:
            scaled = 255.0 * (dists.astype(np.float64) / _MAX_DIST)
            return np.clip(scaled, 0, 255).astype(np.uint8).astype(np.int32)

        colors[..., 0] = np.where(mask, 255 - to_color(self._dists_row), 0)
        colors[..., 1] = np.where(mask, 255 - to_color(self._dists_col), 0)
        return colors