"""
Frame follower: re-anchors the overlay root node to its reference frame.

Runs once per render tick. The lookup is a steady-state poll: every tick is
independent, there is no retry or backoff.
"""

import logging
from typing import Callable, Optional

from range_rings.core.status import StatusBoard, StatusLevel, CATEGORY_TRANSFORM
from range_rings.rendering.scene_graph import Handle, SceneGraph
from range_rings.tracking.transforms import LATEST, Pose, TransformResolver

logger = logging.getLogger(__name__)

ORIGIN = (0.0, 0.0, 0.0)
TRANSFORM_UNAVAILABLE = "transform not available"


class FrameFollower:
    """
    Writes the resolved pose of the reference frame into the overlay root.

    Only the node's position/orientation is touched. When the frame cannot be
    resolved the position falls back to the origin and the orientation is
    left as it was.
    """

    def __init__(self, graph: SceneGraph, resolver: TransformResolver,
                 root: Callable[[], Optional[Handle]],
                 status: Optional[StatusBoard] = None):
        """
        Args:
            graph: Scene graph holding the overlay root node
            resolver: Transform resolution service
            root: Returns the current overlay root node (None if not attached)
            status: Sink for "Transform" status reports
        """
        self._graph = graph
        self._resolver = resolver
        self._root = root
        self._status = status
        self.last_pose: Optional[Pose] = None

    def tick(self, frame_id: str) -> bool:
        """Resolve frame_id and update the root node. Returns True if resolved."""
        node = self._root()
        if node is None:
            return False

        pose = self._resolver.lookup(frame_id, LATEST)
        self.last_pose = pose

        if pose is None:
            self._graph.set_node_pose(node, ORIGIN)
            self._report(StatusLevel.WARN,
                         f"{TRANSFORM_UNAVAILABLE} for reference frame '{frame_id}'")
            return False

        self._graph.set_node_pose(node, pose.position, pose.orientation)
        self._report(StatusLevel.OK, "OK")
        return True

    def _report(self, level: StatusLevel, message: str) -> None:
        if self._status is not None:
            self._status.report(CATEGORY_TRANSFORM, level, message)
