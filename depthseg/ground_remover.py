"""Removal of ground pixels from depth images."""

from __future__ import annotations

import logging
import math
import time
from typing import Any

import numpy as np
from scipy import ndimage

from depthseg.abstract_diff import ProjectionAngles, SimpleDiff
from depthseg.communication import AbstractClient, AbstractSender, SenderType
from depthseg.linear_labeler import LinearImageLabeler
from depthseg.pixel_coords import PixelCoord

logger = logging.getLogger(__name__)

_MIN_DEPTH = 0.001
_START_ANGLE = math.radians(30.0)

# Savitsky-Golay smoothing coefficients and their normalisers.
_SAVITSKY_GOLAY = {
    5: ((-3.0, 12.0, 17.0, 12.0, -3.0), 35.0),
    7: ((-2.0, 3.0, 6.0, 7.0, 6.0, 3.0, -2.0), 21.0),
    9: ((-21.0, 14.0, 39.0, 54.0, 59.0, 54.0, 39.0, 14.0, -21.0), 231.0),
    11: (
        (-36.0, 9.0, 44.0, 69.0, 84.0, 89.0, 84.0, 69.0, 44.0, 9.0, -36.0),
        429.0,
    ),
}


def savitsky_golay_kernel(window_size: int) -> np.ndarray:
    """Return a column kernel of Savitsky-Golay smoothing weights.

    Only the window sizes 5, 7, 9 and 11 are supported.
    """
    if window_size % 2 == 0:
        raise ValueError("only odd window size allowed")
    try:
        coeffs, norm = _SAVITSKY_GOLAY[window_size]
    except KeyError:
        raise ValueError("bad window size") from None
    kernel = np.array(coeffs, dtype=np.float32) / np.float32(norm)
    return kernel.reshape(-1, 1)


def uniform_kernel(window_size: int) -> np.ndarray:
    """Return a column kernel averaging the two pixels at its ends."""
    if window_size % 2 == 0:
        raise ValueError("only odd window size allowed")
    kernel = np.zeros((window_size, 1), dtype=np.float32)
    kernel[0, 0] = 1.0
    kernel[-1, 0] = 1.0
    return kernel / np.float32(2.0)


def _filter_columns(image, kernel: np.ndarray) -> np.ndarray:
    data = np.asarray(image, dtype=np.float32)
    return ndimage.correlate1d(data, kernel.ravel(), axis=0, mode="mirror")


def apply_savitsky_golay_smoothing(image, window_size: int) -> np.ndarray:
    """Smooth every column of ``image`` with a Savitsky-Golay filter."""
    return _filter_columns(image, savitsky_golay_kernel(window_size))


def repair_depth(depth_image, step: int, depth_threshold: float) -> np.ndarray:
    """Fill missing depth values from reliable neighbours in the same column.

    A missing pixel takes the mean of every pair of valid readings above and
    below it, within ``step`` rows, that differ by less than
    ``depth_threshold``. Pixels are repaired column by column, top to bottom,
    so values repaired earlier take part in later repairs.
    """
    repaired = np.array(depth_image, dtype=np.float32, copy=True)
    if repaired.ndim != 2:
        raise ValueError("depth image must be 2-dimensional")
    for c in range(repaired.shape[1]):
        column = repaired[:, c]
        for r in np.flatnonzero(column < _MIN_DEPTH):
            above = column[max(r - step + 1, 0):r]
            below = column[r + 1:r + step]
            pairs = [
                float(prev) + float(nxt)
                for prev in above
                for nxt in below
                if prev > _MIN_DEPTH
                and nxt > _MIN_DEPTH
                and abs(float(prev) - float(nxt)) < depth_threshold
            ]
            if pairs:
                column[r] = sum(pairs) / (2 * len(pairs))
    return repaired


def repair_depth_smooth(depth_image) -> np.ndarray:
    """Fill non-positive depths from a column filter, keeping valid values."""
    depth = np.asarray(depth_image, dtype=np.float32)
    smoothed = _filter_columns(depth, uniform_kernel(5))
    return np.where(depth > 0, depth, smoothed).astype(np.float32)


class DepthGroundRemover(AbstractClient, AbstractSender):
    """Removes the ground from depth images and passes them on to clients.

    Received objects are 2-dimensional depth images whose rows and columns
    match the projection ``params``.
    """

    def __init__(
        self,
        params: ProjectionAngles,
        ground_remove_angle: float = math.radians(5.0),
        window_size: int = 5,
    ) -> None:
        super().__init__(SenderType.STREAMER)
        self.params = params
        self.ground_remove_angle = float(ground_remove_angle)
        self.window_size = int(window_size)
        self.eps = _MIN_DEPTH
        self.counter = 0
        rows = range(params.rows)
        self._row_sines = np.array(
            [math.sin(params.angle_from_row(r)) for r in rows], dtype=np.float32
        )
        self._row_cosines = np.array(
            [math.cos(params.angle_from_row(r)) for r in rows], dtype=np.float32
        )

    def create_angle_image(self, depth_image) -> np.ndarray:
        """Return the inclination, in radians, between each pixel and the one above.

        The first row holds zeros.
        """
        depth = np.asarray(depth_image, dtype=np.float32)
        x = depth * self._row_cosines[:, np.newaxis]
        y = depth * self._row_sines[:, np.newaxis]
        angles = np.zeros(depth.shape, dtype=np.float32)
        dx = np.abs(x[1:] - x[:-1])
        dy = np.abs(y[1:] - y[:-1])
        angles[1:] = np.arctan2(dy, dx)
        return angles

    def zero_out_ground(self, image, angle_image, threshold: float) -> np.ndarray:
        """Keep only pixels whose angle exceeds ``threshold``; zero the rest."""
        depth = np.asarray(image, dtype=np.float32)
        angles = np.asarray(angle_image, dtype=np.float32)
        return np.where(angles > threshold, depth, 0.0).astype(np.float32)

    def zero_out_ground_bfs(
        self, image, angle_image, threshold: float, kernel_size: int
    ) -> np.ndarray:
        """Zero the ground found by growing from the lowest valid pixel of each column."""
        depth = np.asarray(image, dtype=np.float32)
        angles = np.asarray(angle_image, dtype=np.float32)
        labeler = LinearImageLabeler(depth, self.params, threshold)
        diff_helper = SimpleDiff(angles)
        for c in range(depth.shape[1]):
            valid_rows = np.flatnonzero(depth[1:, c] >= _MIN_DEPTH)
            r = int(valid_rows[-1]) + 1 if valid_rows.size else 0
            start = PixelCoord(r, c)
            if labeler.label_at(start) > 0:
                continue
            if angles[r, c] > _START_ANGLE:
                continue
            labeler.label_one_component(1, start, diff_helper)
        labels = labeler.label_image
        if labels.shape != depth.shape:
            raise ValueError("label image and result do not correspond")
        kernel_size = max(kernel_size - 2, 3)
        footprint = uniform_kernel(kernel_size) != 0
        dilated = ndimage.maximum_filter(
            labels, footprint=footprint, mode="constant", cval=0
        )
        return np.where(dilated == 0, depth, 0.0).astype(np.float32)

    def line_angle(
        self, depth_image, col: int, row_curr: int, row_neigh: int
    ) -> float:
        """Return the inclination of the line through two pixels of one column.

        Unreliable (near-zero) depths give an angle of 0.
        """
        depth = np.asarray(depth_image, dtype=np.float32)
        depth_current = float(depth[row_curr, col])
        depth_neighbor = float(depth[row_neigh, col])
        if depth_current < self.eps or depth_neighbor < self.eps:
            return 0.0
        current_angle = self.params.angle_from_row(row_curr)
        neighbor_angle = self.params.angle_from_row(row_neigh)
        dx = abs(
            depth_current * math.cos(current_angle)
            - depth_neighbor * math.cos(neighbor_angle)
        )
        dy = abs(
            depth_current * math.sin(current_angle)
            - depth_neighbor * math.sin(neighbor_angle)
        )
        return math.atan2(dy, dx)

    def remove_ground(self, depth_image) -> np.ndarray:
        """Return a copy of ``depth_image`` with ground pixels set to zero."""
        depth = repair_depth(depth_image, 5, 1.0)
        angle_image = self.create_angle_image(depth)
        smoothed = apply_savitsky_golay_smoothing(angle_image, self.window_size)
        return self.zero_out_ground_bfs(
            depth, smoothed, self.ground_remove_angle, self.window_size
        )

    def on_new_object_received(self, obj: Any, sender_id: int) -> None:
        """Remove the ground from a received depth image and share the result."""
        if obj is None:
            logger.warning("no depth image received; skipping ground removal")
            return
        started = time.perf_counter()
        no_ground = self.remove_ground(obj)
        logger.info(
            "ground removed in %d us", int((time.perf_counter() - started) * 1e6)
        )
        self.share_data_with_all_clients(no_ground)
        self.counter += 1