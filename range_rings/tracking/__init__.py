"""Reference frame tracking for range rings."""

from range_rings.tracking.transforms import (
    Pose,
    TransformBuffer,
    TransformResolver,
    LATEST,
    quaternion_to_yaw,
    yaw_to_quaternion,
)
from range_rings.tracking.follower import FrameFollower

__all__ = [
    "Pose",
    "TransformBuffer",
    "TransformResolver",
    "LATEST",
    "quaternion_to_yaw",
    "yaw_to_quaternion",
    "FrameFollower",
]
