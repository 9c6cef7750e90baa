"""
Transform resolution for named reference frames.

TransformBuffer keeps the latest pose of each frame relative to its parent and
resolves any frame to the fixed frame by walking the parent chain. Lookups
never wait: a frame that is unknown, or whose chain does not reach the fixed
frame, resolves to None.

Quaternions are (x, y, z, w), matching OptiTrack/ROS ordering.
"""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Protocol, Sequence, Tuple, Union

import numpy as np
import yaml

logger = logging.getLogger(__name__)

IDENTITY_QUATERNION = (0.0, 0.0, 0.0, 1.0)
LATEST = "latest"

# Parent chains longer than this are treated as cycles
MAX_CHAIN_DEPTH = 64


def normalize_quaternion(quat: Sequence[float]) -> Tuple[float, float, float, float]:
    q = np.asarray(quat, dtype=np.float64)
    norm = np.linalg.norm(q)
    if norm == 0.0 or not np.isfinite(norm):
        raise ValueError(f"Invalid quaternion: {tuple(quat)}")
    q = q / norm
    return (float(q[0]), float(q[1]), float(q[2]), float(q[3]))


def quaternion_multiply(q1: Sequence[float], q2: Sequence[float]) -> Tuple[float, float, float, float]:
    """Hamilton product q1 * q2 (apply q2 first, then q1)."""
    x1, y1, z1, w1 = q1
    x2, y2, z2, w2 = q2
    return (
        w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
        w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
        w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
        w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
    )


def rotate_vectors(quat: Sequence[float], vectors) -> np.ndarray:
    """Rotate a (3,) vector or an (N, 3) array of vectors by a unit quaternion."""
    x, y, z, w = quat
    u = np.array([x, y, z], dtype=np.float64)
    v = np.asarray(vectors, dtype=np.float64)
    t = 2.0 * np.cross(u, v)
    return v + w * t + np.cross(u, t)


def quaternion_to_yaw(quat: Sequence[float]) -> float:
    """Extract yaw (Z-axis rotation) in radians."""
    x, y, z, w = quat
    siny_cosp = 2.0 * (w * z + x * y)
    cosy_cosp = 1.0 - 2.0 * (y * y + z * z)
    return math.atan2(siny_cosp, cosy_cosp)


def yaw_to_quaternion(yaw: float) -> Tuple[float, float, float, float]:
    half = yaw / 2.0
    return (0.0, 0.0, math.sin(half), math.cos(half))


@dataclass(frozen=True)
class Pose:
    """Resolved pose of a frame: position (meters) and orientation quaternion."""
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    orientation: Tuple[float, float, float, float] = IDENTITY_QUATERNION

    def compose(self, child: "Pose") -> "Pose":
        """Pose of `child` (expressed in this pose's frame) in the parent frame."""
        offset = rotate_vectors(self.orientation, child.position)
        position = tuple(float(a + b) for a, b in zip(self.position, offset))
        orientation = normalize_quaternion(quaternion_multiply(self.orientation, child.orientation))
        return Pose(position, orientation)

    @property
    def yaw(self) -> float:
        return quaternion_to_yaw(self.orientation)


class TransformResolver(Protocol):
    """Transform resolution service consumed by the frame follower."""

    def lookup(self, frame_id: str, time: str = LATEST) -> Optional[Pose]:
        """Pose of frame_id in the fixed frame, or None if unavailable."""
        ...


@dataclass
class FrameTransform:
    """Latest transform of a frame relative to its parent."""
    frame_id: str
    parent: str
    pose: Pose = field(default_factory=Pose)
    stamp: float = 0.0


class TransformBuffer:
    """
    In-process transform buffer.

    Frames are registered with a parent and a pose relative to that parent.
    lookup() only supports the latest transform.
    """

    def __init__(self, fixed_frame: str = "map"):
        self.fixed_frame = fixed_frame
        self._frames: Dict[str, FrameTransform] = {}

    def set_transform(self, frame_id: str, parent: str,
                      position: Sequence[float] = (0.0, 0.0, 0.0),
                      orientation: Sequence[float] = IDENTITY_QUATERNION,
                      stamp: float = 0.0) -> None:
        if frame_id == parent:
            raise ValueError(f"Frame '{frame_id}' cannot be its own parent")
        if len(position) != 3:
            raise ValueError(f"Position must have 3 components, got {len(position)}")
        pose = Pose(tuple(float(v) for v in position), normalize_quaternion(orientation))
        self._frames[frame_id] = FrameTransform(frame_id, parent, pose, stamp)

    def remove_transform(self, frame_id: str) -> bool:
        if frame_id in self._frames:
            del self._frames[frame_id]
            return True
        return False

    def has_frame(self, frame_id: str) -> bool:
        return frame_id == self.fixed_frame or frame_id in self._frames

    def list_frames(self):
        return [self.fixed_frame] + sorted(self._frames)

    def lookup(self, frame_id: str, time: str = LATEST) -> Optional[Pose]:
        if time != LATEST:
            logger.debug(f"Only latest transforms are buffered (requested {time!r})")
            return None
        if frame_id == self.fixed_frame:
            return Pose()

        chain = []
        current = frame_id
        while current != self.fixed_frame:
            transform = self._frames.get(current)
            if transform is None or len(chain) >= MAX_CHAIN_DEPTH:
                return None
            chain.append(transform.pose)
            current = transform.parent

        pose = Pose()
        for link in reversed(chain):
            pose = pose.compose(link)
        return pose

    # --- Loading ---

    @classmethod
    def from_dict(cls, data: dict) -> "TransformBuffer":
        """
        Build a buffer from a dict like:

            fixed_frame: map
            frames:
              base_link: {parent: map, position: [1, 2, 0], yaw: 0.5}
              lidar: {parent: base_link, position: [0, 0, 1], orientation: [0, 0, 0, 1]}
        """
        buffer = cls(fixed_frame=data.get('fixed_frame', 'map'))
        for frame_id, frame in (data.get('frames') or {}).items():
            if 'orientation' in frame:
                orientation = tuple(frame['orientation'])
            else:
                orientation = yaw_to_quaternion(float(frame.get('yaw', 0.0)))
            buffer.set_transform(
                frame_id,
                frame.get('parent', buffer.fixed_frame),
                position=tuple(frame.get('position', [0.0, 0.0, 0.0])),
                orientation=orientation,
            )
        return buffer

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "TransformBuffer":
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
        buffer = cls.from_dict(data)
        logger.info(f"Loaded {len(buffer._frames)} frames from {path} "
                    f"(fixed frame '{buffer.fixed_frame}')")
        return buffer
