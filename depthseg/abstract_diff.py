"""Projection angles and the pixel-difference interface used for labeling."""

from __future__ import annotations

import abc
from typing import Iterable

import numpy as np

from depthseg.pixel_coords import PixelCoord


class ProjectionAngles:
    """Beam angles, in radians, for every image row and column of a projection."""

    def __init__(
        self,
        row_angles: Iterable[float],
        col_angles: Iterable[float],
        h_span: float,
    ) -> None:
        self._row_angles = tuple(float(a) for a in row_angles)
        self._col_angles = tuple(float(a) for a in col_angles)
        if not self._row_angles or not self._col_angles:
            raise ValueError("projection needs at least one row and one column")
        self.h_span = float(h_span)

    @property
    def rows(self) -> int:
        return len(self._row_angles)

    @property
    def cols(self) -> int:
        return len(self._col_angles)

    def angle_from_row(self, row: int) -> float:
        """Return the vertical angle of the beam at ``row``."""
        return self._row_angles[row]

    def angle_from_col(self, col: int) -> float:
        """Return the horizontal angle of the beam at ``col``."""
        return self._col_angles[col]


class AbstractDiff(abc.ABC):
    """Measures the difference between neighbouring pixels of a float image."""

    def __init__(self, source_image) -> None:
        self.source_image = np.asarray(source_image, dtype=np.float32)

    @abc.abstractmethod
    def diff_at(self, from_coord: PixelCoord, to_coord: PixelCoord) -> float:
        """Return the difference between two pixels."""

    @abc.abstractmethod
    def satisfies_threshold(self, value: float, threshold: float) -> bool:
        """Tell whether a difference keeps two pixels in one component."""

    def visualize(self) -> np.ndarray:
        """Return a colour image of the differences; empty when not supported."""
        return np.zeros((0, 0, 3), dtype=np.uint8)


class SimpleDiff(AbstractDiff):
    """Absolute difference of the two pixel values."""

    def diff_at(self, from_coord: PixelCoord, to_coord: PixelCoord) -> float:
        image = self.source_image
        return float(
            abs(
                image[from_coord.row, from_coord.col]
                - image[to_coord.row, to_coord.col]
            )
        )

    def satisfies_threshold(self, value: float, threshold: float) -> bool:
        return value < threshold