"""Angle-based differences between neighbouring depth pixels."""

from __future__ import annotations

import math

import numpy as np

from depthseg.abstract_diff import AbstractDiff, ProjectionAngles
from depthseg.pixel_coords import PixelCoord

_MIN_DEPTH = 0.001
_MIN_VISIBLE_DEPTH = 0.01
_BORDER_MARGIN = 0.05
_MAX_ANGLE_DEG = 90.0


def get_beta(alpha: float, current_depth: float, neighbor_depth: float) -> float:
    """Return the incline angle of the line through the endpoints of two beams.

    ``alpha`` is the angle between the beams; the depths are their readings.
    """
    d1 = max(current_depth, neighbor_depth)
    d2 = min(current_depth, neighbor_depth)
    return abs(math.atan2(d2 * math.sin(alpha), d1 - d2 * math.cos(alpha)))


def _beta_array(alpha, current, neighbor) -> np.ndarray:
    d1 = np.maximum(current, neighbor)
    d2 = np.minimum(current, neighbor)
    return np.abs(np.arctan2(d2 * np.sin(alpha), d1 - d2 * np.cos(alpha)))


def _row_alphas(params: ProjectionAngles) -> list:
    alphas = [
        abs(params.angle_from_row(r + 1) - params.angle_from_row(r))
        for r in range(params.rows - 1)
    ]
    alphas.append(0.0)
    return alphas


def _col_alphas(params: ProjectionAngles, absolute_wrap: bool) -> list:
    alphas = [
        abs(params.angle_from_col(c + 1) - params.angle_from_col(c))
        for c in range(params.cols - 1)
    ]
    last = (
        abs(params.angle_from_col(0) - params.angle_from_col(params.cols - 1))
        - params.h_span
    )
    alphas.append(abs(last) if absolute_wrap else last)
    return alphas


class AngleDiff(AbstractDiff):
    """Angle between neighbouring beams' endpoints, computed on demand."""

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
        return get_beta(alpha, current_depth, neighbor_depth)

    def satisfies_threshold(self, value: float, threshold: float) -> bool:
        """The threshold holds when the angle is bigger than it."""
        return value > threshold


class AngleDiffPrecomputed(AbstractDiff):
    """Angle differences computed once for every row and column neighbour."""

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
        self._beta_rows, self._beta_cols = self._precompute_betas()

    def _precompute_betas(self):
        depth = self.source_image.astype(np.float64)
        valid = depth >= _MIN_DEPTH

        next_in_row = np.roll(depth, -1, axis=1)
        beta_cols = np.where(
            valid,
            _beta_array(self._col_alphas[np.newaxis, :], depth, next_in_row),
            0.0,
        ).astype(np.float32)

        beta_rows = np.zeros(depth.shape, dtype=np.float32)
        if depth.shape[0] > 1:
            upper = depth[:-1]
            lower = depth[1:]
            betas = _beta_array(self._row_alphas[:-1, np.newaxis], upper, lower)
            beta_rows[:-1] = np.where(valid[:-1], betas, 0.0)
        return beta_rows, beta_cols

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
            return float(self._beta_rows[row, col])
        if from_coord.col != to_coord.col:
            return float(self._beta_cols[row, col])
        raise ValueError("Asking for difference of same pixels.")

    def satisfies_threshold(self, value: float, threshold: float) -> bool:
        """The threshold holds when the angle is bigger than it."""
        return value > threshold

    def visualize(self) -> np.ndarray:
        """Colour image: channel 0 shows row-wise angles, channel 1 column-wise."""
        colors = np.zeros(self._beta_rows.shape + (3,), dtype=np.uint8)
        mask = self.source_image >= _MIN_VISIBLE_DEPTH

        def to_color(betas: np.ndarray) -> np.ndarray:
            scaled = 255.0 * (np.degrees(betas.astype(np.float64)) / _MAX_ANGLE_DEG)
            return np.clip(scaled, 0, 255).astype(np.uint8).astype(np.int32)

        colors[..., 0] = np.where(mask, 255 - to_color(self._beta_rows), 0)
        colors[..., 1] = np.where(mask, 255 - to_color(self._beta_cols), 0)
        return colors