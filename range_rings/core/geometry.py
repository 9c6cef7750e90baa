"""
Ring geometry generation.

Turns a RingConfig into an ordered list of RingDescriptors: concentric closed
polylines in the XY plane of the overlay's root node, one per multiple of the
spacing up to the max radius.
"""

import math
from dataclasses import dataclass
from typing import List, Tuple, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from range_rings.core.config import RingConfig

# The renderable line strip holds at most 100 vertices and a ring uses
# resolution + 1 of them.
MIN_RESOLUTION = 3
MAX_RESOLUTION = 99


class ConfigValidationError(ValueError):
    """A configuration value violates its bound. `code` names the violation."""

    def __init__(self, message: str, code: str = "INVALID_VALUE"):
        super().__init__(message)
        self.code = code


class ResolutionExceeded(ConfigValidationError):
    """Resolution above MAX_RESOLUTION; the overlay must stay empty."""

    def __init__(self, resolution: int):
        super().__init__(
            f"Resolution {resolution} exceeds maximum of {MAX_RESOLUTION} points per ring",
            code="RESOLUTION_EXCEEDED",
        )
        self.resolution = resolution


@dataclass(frozen=True, eq=False)
class RingDescriptor:
    """
    One concentric ring.

    points is an (resolution + 1, 3) array; the last row repeats the first so
    the polyline is closed. Every point carries the same baked color.
    """
    index: int
    radius: float
    points: np.ndarray
    color: Tuple[int, int, int, int]
    closed: bool = True

    @property
    def point_count(self) -> int:
        return len(self.points)

    def point_colors(self) -> List[Tuple[int, int, int, int]]:
        return [self.color] * len(self.points)

    def point_tuples(self) -> List[Tuple[float, float, float]]:
        return [tuple(float(v) for v in p) for p in self.points]


def ring_count(max_radius: float, spacing: float) -> int:
    """Number of rings for the given extent; 0 when either value is non-positive."""
    if spacing <= 0.0 or max_radius <= 0.0:
        return 0
    return int(math.floor(max_radius / spacing))


def circle_points(radius: float, resolution: int) -> np.ndarray:
    """Sample resolution + 1 points on a circle, closing on the first sample."""
    s = np.arange(resolution + 1, dtype=np.float64)
    theta = 2.0 * np.pi * s / resolution
    points = np.zeros((resolution + 1, 3), dtype=np.float64)
    points[:, 0] = radius * np.cos(theta)
    points[:, 1] = radius * np.sin(theta)
    points[-1] = points[0]
    points.setflags(write=False)
    return points


def generate_rings(config: "RingConfig") -> List[RingDescriptor]:
    """
    Build the full ring set for a configuration.

    Raises:
        ResolutionExceeded: If config.resolution > MAX_RESOLUTION

    Returns an empty list (no error) when spacing or max_radius is <= 0, or
    when spacing > max_radius.
    """
    if config.resolution > MAX_RESOLUTION:
        raise ResolutionExceeded(config.resolution)
    if config.resolution < MIN_RESOLUTION:
        raise ConfigValidationError(
            f"Resolution {config.resolution} below minimum of {MIN_RESOLUTION}",
            code="INVALID_RESOLUTION",
        )

    rings = []
    for i in range(1, ring_count(config.max_radius, config.spacing) + 1):
        radius = config.spacing * i
        rings.append(RingDescriptor(
            index=i,
            radius=radius,
            points=circle_points(radius, config.resolution),
            color=tuple(config.color),
        ))
    return rings
