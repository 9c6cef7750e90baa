"""
Scene synchronizer: sole owner of the overlay's scene-graph objects.

Architecture:
    host scene root
    └── overlay root node   (pose written by the frame follower)
        ├── ring line strips   (one per RingDescriptor)
        └── radius text labels (one per LabelDescriptor)

Every rebuild destroys all owned rings and labels before creating
replacements. Nothing else may create or destroy these objects.
"""

import logging
from typing import List, Optional, Sequence

from range_rings.core.geometry import RingDescriptor
from range_rings.core.labels import LabelDescriptor
from range_rings.rendering.scene_graph import Handle, RGBA, SceneGraph

logger = logging.getLogger(__name__)


class SceneSynchronizer:
    """Owns the overlay root node and every ring/label handle under it."""

    def __init__(self, graph: SceneGraph):
        self._graph = graph
        self._root: Optional[Handle] = None
        self._rings: List[Handle] = []
        self._labels: List[Handle] = []

    @property
    def root(self) -> Optional[Handle]:
        """Overlay root node, or None before attach() / after teardown()."""
        return self._root

    @property
    def ring_handles(self) -> List[Handle]:
        return list(self._rings)

    @property
    def label_handles(self) -> List[Handle]:
        return list(self._labels)

    @property
    def ring_count(self) -> int:
        return len(self._rings)

    @property
    def label_count(self) -> int:
        return len(self._labels)

    def is_empty(self) -> bool:
        return not self._rings and not self._labels

    def attach(self, parent: Optional[Handle] = None) -> Handle:
        """Create the overlay root node under parent (idempotent)."""
        if self._root is None:
            self._root = self._graph.create_node(parent)
            logger.debug(f"Overlay root node {self._root} created")
        return self._root

    def rebuild(self, rings: Sequence[RingDescriptor],
                labels: Sequence[LabelDescriptor], line_width: float) -> None:
        """
        Replace all rings and labels.

        If the backend fails partway, every object created by this call is
        destroyed before the error propagates, leaving the overlay empty.
        """
        self.clear()
        if self._root is None:
            raise RuntimeError("rebuild() before attach()")

        rings_created: List[Handle] = []
        labels_created: List[Handle] = []
        try:
            for ring in rings:
                rings_created.append(self._graph.create_line_strip(
                    self._root, ring.point_tuples(), ring.point_colors(), line_width))
            for label in labels:
                labels_created.append(self._graph.create_text_label(
                    self._root, label.text, label.anchor, label.h_align, label.v_align,
                    label.character_height, label.color, label.visible))
        except Exception:
            for handle in rings_created + labels_created:
                self._graph.destroy(handle)
            self._graph.queue_render()
            raise

        self._rings = rings_created
        self._labels = labels_created
        logger.debug(f"Rebuilt overlay: {len(self._rings)} rings, {len(self._labels)} labels")
        self._graph.queue_render()

    def clear(self) -> None:
        """Destroy every owned ring and label (root node kept)."""
        if self.is_empty():
            return
        rings, labels = self._rings, self._labels
        self._rings, self._labels = [], []
        for handle in rings + labels:
            self._graph.destroy(handle)
        self._graph.queue_render()

    def apply_style(self, color: RGBA, line_width: float) -> None:
        """Update line width on rings and color on labels in place."""
        for handle in self._rings:
            self._graph.set_line_width(handle, line_width)
        for handle in self._labels:
            self._graph.set_text_color(handle, color)
        self._graph.queue_render()

    def set_labels_visible(self, visible: bool) -> None:
        for handle in self._labels:
            self._graph.set_text_visible(handle, visible)
        self._graph.queue_render()

    def set_label_height(self, height: float) -> None:
        for handle in self._labels:
            self._graph.set_text_height(handle, height)
        self._graph.queue_render()

    def set_visible(self, visible: bool) -> None:
        if self._root is not None:
            self._graph.set_node_visible(self._root, visible)
            self._graph.queue_render()

    def teardown(self) -> None:
        """Destroy everything owned, including the root node. Safe to repeat."""
        self.clear()
        if self._root is not None:
            root, self._root = self._root, None
            self._graph.destroy(root)
            logger.debug(f"Overlay root node {root} destroyed")
            self._graph.queue_render()
