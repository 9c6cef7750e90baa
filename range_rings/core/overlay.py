"""
Range ring overlay.

Wires the configuration store, ring generator, label formatter, scene
synchronizer and frame follower together behind the two host call sites:

- set_property(): invoked synchronously when the host UI edits a field
- tick(): invoked once per render frame

The host serializes both; nothing here blocks or spawns work.

Update paths per changed field:
    max_radius, spacing, resolution,
    reference_frame, color           -> full rebuild
    line_width                       -> in-place line width
    label_size                       -> in-place label height
    show_labels                      -> in-place label visibility
"""

import logging
from typing import Any, Dict, List, Optional

from range_rings.core.config import ChangeKind, ConfigChange, ConfigStore, RingConfig
from range_rings.core.geometry import RingDescriptor, ResolutionExceeded, generate_rings
from range_rings.core.labels import LabelDescriptor, format_labels
from range_rings.core.status import (
    StatusBoard, StatusLevel, CATEGORY_GEOMETRY, CATEGORY_RESOLUTION,
)
from range_rings.rendering.scene_graph import Handle, SceneGraph, SceneGraphError
from range_rings.rendering.synchronizer import SceneSynchronizer
from range_rings.tracking.follower import FrameFollower
from range_rings.tracking.transforms import TransformResolver

logger = logging.getLogger(__name__)


class RingOverlay:
    """Concentric, radius-labeled rings that follow a reference frame."""

    def __init__(self, graph: SceneGraph, resolver: TransformResolver,
                 config: Optional[RingConfig] = None,
                 status: Optional[StatusBoard] = None,
                 parent: Optional[Handle] = None):
        """
        Args:
            graph: Scene graph service the overlay renders into
            resolver: Transform resolution service for the reference frame
            config: Initial configuration (defaults if None)
            status: Status sink exposed to the host (created if None)
            parent: Node the overlay root is attached under (scene root if None)
        """
        self.status = status if status is not None else StatusBoard()
        self.store = ConfigStore(config, status=self.status)
        self.synchronizer = SceneSynchronizer(graph)
        self.follower = FrameFollower(graph, resolver, lambda: self.synchronizer.root,
                                      status=self.status)
        self._parent = parent
        self._initialized = False
        self._enabled = True
        # Set while a resolution above the cap was requested and not yet corrected
        self._resolution_blocked = False

        self.rings: List[RingDescriptor] = []
        self.labels: List[LabelDescriptor] = []

        self.store.subscribe(self._on_config_change)

    @property
    def config(self) -> RingConfig:
        return self.store.config

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def enabled(self) -> bool:
        return self._enabled

    # --- Lifecycle ---

    def initialize(self) -> None:
        """Create the root node and the initial geometry."""
        if self._initialized:
            return
        self.synchronizer.attach(self._parent)
        self._initialized = True
        self._regenerate()
        logger.info(f"Ring overlay initialized on frame '{self.store.get('reference_frame')}'")

    def enable(self) -> None:
        self._enabled = True
        if self._initialized:
            self.synchronizer.set_visible(True)
            self._regenerate()

    def disable(self) -> None:
        self._enabled = False
        if self._initialized:
            self.synchronizer.set_visible(False)

    def teardown(self) -> None:
        """Release the root node and everything under it. Safe to repeat."""
        self.synchronizer.teardown()
        self.rings, self.labels = [], []
        if self._initialized:
            logger.info("Ring overlay torn down")
        self._initialized = False

    # --- Host call sites ---

    def set_property(self, name: str, value: Any) -> Dict[str, Any]:
        """Edit one configuration field. Returns the store's result dict."""
        return self.store.set(name, value)

    def update(self, values: Dict[str, Any]) -> List[Dict[str, Any]]:
        return self.store.update(values)

    def tick(self) -> bool:
        """Per-frame pose update. Returns True if the reference frame resolved."""
        if not self._initialized:
            return False
        return self.follower.tick(self.store.get('reference_frame'))

    def describe(self) -> Dict[str, Any]:
        """Snapshot of the overlay state for the host."""
        return {
            'initialized': self._initialized,
            'enabled': self._enabled,
            'config': self.store.config.to_dict(),
            'rings': self.synchronizer.ring_count,
            'labels': self.synchronizer.label_count,
            'status': {name: report.to_dict() for name, report in self.status.snapshot().items()},
        }

    # --- Update paths ---

    def _on_config_change(self, change: ConfigChange) -> None:
        # The block is tracked before initialize() so the first build honors it
        if not change.accepted and change.code == "RESOLUTION_EXCEEDED":
            self._resolution_blocked = True
        elif change.accepted and change.field == 'resolution':
            self._resolution_blocked = False

        if not self._initialized:
            return

        if not change.accepted:
            if change.code == "RESOLUTION_EXCEEDED":
                self._clear()
            return

        config = self.store.config
        if change.kind is ChangeKind.GEOMETRY:
            self._regenerate()
        elif change.kind is ChangeKind.VISIBILITY:
            self.synchronizer.set_labels_visible(config.show_labels)
        elif change.field == 'label_size':
            self.synchronizer.set_label_height(config.label_size)
        elif change.field == 'line_width':
            self.synchronizer.apply_style(config.color, config.line_width)
        elif change.field == 'color':
            # Ring colors are baked per point, so the rings are rebuilt as well.
            self.synchronizer.apply_style(config.color, config.line_width)
            self._regenerate()

    def _regenerate(self) -> None:
        if self._resolution_blocked:
            self._clear()
            return

        config = self.store.config
        try:
            rings = generate_rings(config)
        except ResolutionExceeded as e:
            self.status.report(CATEGORY_RESOLUTION, StatusLevel.ERROR, str(e))
            self._clear()
            return

        labels = format_labels(rings, config, include_hidden=True)
        try:
            self.synchronizer.rebuild(rings, labels, config.line_width)
        except SceneGraphError as e:
            self.rings, self.labels = [], []
            self.status.report(CATEGORY_GEOMETRY, StatusLevel.ERROR, f"Rebuild failed: {e}")
            return

        self.rings, self.labels = rings, labels
        current = self.status.get(CATEGORY_GEOMETRY)
        if current is not None and current.level is not StatusLevel.OK:
            self.status.report(CATEGORY_GEOMETRY, StatusLevel.OK, "OK")

    def _clear(self) -> None:
        self.synchronizer.clear()
        self.rings, self.labels = [], []
