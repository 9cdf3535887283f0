"""Construction of difference helpers by kind."""

from __future__ import annotations

import enum
from typing import Optional

from depthseg.abstract_diff import AbstractDiff, ProjectionAngles, SimpleDiff
from depthseg.angle_diff import AngleDiff, AngleDiffPrecomputed
from depthseg.line_dist_diff import LineDistDiff, LineDistDiffPrecomputed


class DiffType(enum.Enum):
    """The kinds of pixel difference available for labeling."""

    SIMPLE = enum.auto()
    ANGLES = enum.auto()
    ANGLES_PRECOMPUTED = enum.auto()
    LINE_DIST = enum.auto()
    LINE_DIST_PRECOMPUTED = enum.auto()
    NONE = enum.auto()


_WITH_PARAMS = {
    DiffType.ANGLES: AngleDiff,
    DiffType.ANGLES_PRECOMPUTED: AngleDiffPrecomputed,
    DiffType.LINE_DIST: LineDistDiff,
    DiffType.LINE_DIST_PRECOMPUTED: LineDistDiffPrecomputed,
}


def build_diff(
    diff_type: DiffType,
    source_image,
    params: Optional[ProjectionAngles] = None,
) -> AbstractDiff:
    """Build the difference helper of kind ``diff_type`` over ``source_image``."""
    diff_type = DiffType(diff_type)
    if diff_type is DiffType.NONE:
        raise ValueError("DiffType is NONE. Please set it.")
    if diff_type is DiffType.SIMPLE:
        return SimpleDiff(source_image)
    if params is None:
        raise ValueError(f"{diff_type.name} difference needs projection params")
    return _WITH_PARAMS[diff_type](source_image, params)