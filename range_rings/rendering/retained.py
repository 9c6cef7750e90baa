"""
Retained-mode scene graph.

Keeps nodes, line strips and text labels in plain Python containers so the
overlay can run without a GPU. The pygame viewer draws it every frame and the
tests inspect it directly.
"""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from range_rings.core.labels import HAlign, VAlign
from range_rings.rendering.scene_graph import (
    Handle, Vec3, Quaternion, RGBA, SceneGraphError,
)
from range_rings.tracking.transforms import (
    IDENTITY_QUATERNION, Pose, normalize_quaternion, rotate_vectors,
)

logger = logging.getLogger(__name__)

ROOT_NODE: Handle = 0

# Vertex capacity of one line strip
MAX_LINE_STRIP_POINTS = 100


@dataclass
class SceneNode:
    handle: Handle
    parent: Optional[Handle]
    position: Vec3 = (0.0, 0.0, 0.0)
    orientation: Quaternion = IDENTITY_QUATERNION
    visible: bool = True
    children: List[Handle] = field(default_factory=list)


@dataclass
class LineStrip:
    handle: Handle
    parent: Handle
    points: np.ndarray
    colors: List[RGBA]
    width: float


@dataclass
class TextLabel:
    handle: Handle
    parent: Handle
    text: str
    anchor: Vec3
    h_align: HAlign
    v_align: VAlign
    height: float
    color: RGBA
    visible: bool = True


class RetainedSceneGraph:
    """SceneGraph implementation backed by dicts keyed by handle."""

    def __init__(self, max_line_points: int = MAX_LINE_STRIP_POINTS):
        self.max_line_points = max_line_points
        self._ids = itertools.count(ROOT_NODE + 1)
        self._nodes: Dict[Handle, SceneNode] = {ROOT_NODE: SceneNode(ROOT_NODE, None)}
        self._lines: Dict[Handle, LineStrip] = {}
        self._texts: Dict[Handle, TextLabel] = {}
        self.render_requests = 0

    # --- Nodes ---

    def create_node(self, parent: Optional[Handle] = None) -> Handle:
        parent_node = self._require_node(ROOT_NODE if parent is None else parent)
        handle = next(self._ids)
        self._nodes[handle] = SceneNode(handle, parent_node.handle)
        parent_node.children.append(handle)
        return handle

    def set_node_pose(self, node: Handle, position: Vec3,
                      orientation: Optional[Quaternion] = None) -> None:
        scene_node = self._require_node(node)
        scene_node.position = tuple(float(v) for v in position)
        if orientation is not None:
            scene_node.orientation = normalize_quaternion(orientation)

    def set_node_visible(self, node: Handle, visible: bool) -> None:
        self._require_node(node).visible = visible

    # --- Renderables ---

    def create_line_strip(self, parent: Handle, points: Sequence[Vec3],
                          colors: Sequence[RGBA], width: float) -> Handle:
        parent_node = self._require_node(parent)
        array = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if len(array) > self.max_line_points:
            raise SceneGraphError(
                f"Line strip with {len(array)} points exceeds capacity of {self.max_line_points}")
        if len(colors) != len(array):
            raise SceneGraphError(f"Got {len(colors)} colors for {len(array)} points")
        handle = next(self._ids)
        self._lines[handle] = LineStrip(handle, parent, array, [tuple(c) for c in colors], width)
        parent_node.children.append(handle)
        return handle

    def create_text_label(self, parent: Handle, text: str, anchor: Vec3,
                          h_align: HAlign, v_align: VAlign, height: float,
                          color: RGBA, visible: bool = True) -> Handle:
        parent_node = self._require_node(parent)
        handle = next(self._ids)
        self._texts[handle] = TextLabel(handle, parent, text, tuple(anchor), h_align,
                                        v_align, height, tuple(color), visible)
        parent_node.children.append(handle)
        return handle

    def set_line_width(self, handle: Handle, width: float) -> None:
        self._require(self._lines, handle).width = width

    def set_text_color(self, handle: Handle, color: RGBA) -> None:
        self._require(self._texts, handle).color = tuple(color)

    def set_text_visible(self, handle: Handle, visible: bool) -> None:
        self._require(self._texts, handle).visible = visible

    def set_text_height(self, handle: Handle, height: float) -> None:
        self._require(self._texts, handle).height = height

    # --- Lifetime ---

    def destroy(self, handle: Handle) -> bool:
        if handle == ROOT_NODE:
            logger.warning("Refusing to destroy the scene root")
            return False

        if handle in self._nodes:
            node = self._nodes[handle]
            for child in list(node.children):
                self.destroy(child)
            del self._nodes[handle]
            parent = node.parent
        elif handle in self._lines:
            parent = self._lines.pop(handle).parent
        elif handle in self._texts:
            parent = self._texts.pop(handle).parent
        else:
            logger.debug(f"destroy() on unknown handle {handle}")
            return False

        parent_node = self._nodes.get(parent)
        if parent_node is not None and handle in parent_node.children:
            parent_node.children.remove(handle)
        return True

    def queue_render(self) -> None:
        self.render_requests += 1

    # --- Inspection ---

    def contains(self, handle: Handle) -> bool:
        return handle in self._nodes or handle in self._lines or handle in self._texts

    def node(self, handle: Handle) -> SceneNode:
        return self._require_node(handle)

    def line_strip(self, handle: Handle) -> LineStrip:
        return self._require(self._lines, handle)

    def text_label(self, handle: Handle) -> TextLabel:
        return self._require(self._texts, handle)

    def line_strips(self) -> Iterator[LineStrip]:
        return iter(list(self._lines.values()))

    def text_labels(self) -> Iterator[TextLabel]:
        return iter(list(self._texts.values()))

    @property
    def object_count(self) -> int:
        """Renderables plus nodes, excluding the scene root."""
        return len(self._lines) + len(self._texts) + len(self._nodes) - 1

    def world_pose(self, node: Handle) -> Pose:
        """Compose node poses from the scene root down to `node`."""
        chain = []
        current: Optional[Handle] = node
        while current is not None:
            scene_node = self._require_node(current)
            chain.append(Pose(scene_node.position, scene_node.orientation))
            current = scene_node.parent
        pose = Pose()
        for link in reversed(chain):
            pose = pose.compose(link)
        return pose

    def is_visible(self, handle: Handle) -> bool:
        """True if the object and every ancestor node are visible."""
        if handle in self._texts:
            if not self._texts[handle].visible:
                return False
            current = self._texts[handle].parent
        elif handle in self._lines:
            current = self._lines[handle].parent
        else:
            current = handle
        while current is not None:
            node = self._require_node(current)
            if not node.visible:
                return False
            current = node.parent
        return True

    def world_points(self, handle: Handle) -> np.ndarray:
        """Line strip points transformed into the scene root frame."""
        strip = self.line_strip(handle)
        pose = self.world_pose(strip.parent)
        return rotate_vectors(pose.orientation, strip.points) + np.asarray(pose.position)

    def world_anchor(self, handle: Handle) -> Tuple[float, float, float]:
        label = self.text_label(handle)
        pose = self.world_pose(label.parent)
        point = rotate_vectors(pose.orientation, label.anchor) + np.asarray(pose.position)
        return (float(point[0]), float(point[1]), float(point[2]))

    def _require_node(self, handle: Handle) -> SceneNode:
        return self._require(self._nodes, handle)

    @staticmethod
    def _require(container: dict, handle: Handle):
        try:
            return container[handle]
        except KeyError:
            raise SceneGraphError(f"Unknown handle {handle}") from None
