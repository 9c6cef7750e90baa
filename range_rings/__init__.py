"""
Range Rings - concentric, radius-labeled rings that follow a reference frame.

This package provides:
- RingOverlay: the overlay wired behind two host call sites (set_property, tick)
- A configuration store with validated fields and change notifications
- Pure ring geometry and label generation
- A scene synchronizer that owns every ring/label object it creates
- A frame follower that re-anchors the overlay to the latest frame pose
"""

from range_rings.core.config import RingConfig, ConfigStore, ConfigChange, ChangeKind
from range_rings.core.geometry import RingDescriptor, ResolutionExceeded, generate_rings
from range_rings.core.labels import LabelDescriptor, format_label
from range_rings.core.status import StatusBoard, StatusLevel, StatusReport
from range_rings.core.overlay import RingOverlay
from range_rings.rendering.retained import RetainedSceneGraph
from range_rings.tracking.transforms import Pose, TransformBuffer

__version__ = "1.0.0"
__all__ = [
    "RingConfig",
    "ConfigStore",
    "ConfigChange",
    "ChangeKind",
    "RingDescriptor",
    "ResolutionExceeded",
    "generate_rings",
    "LabelDescriptor",
    "format_label",
    "StatusBoard",
    "StatusLevel",
    "StatusReport",
    "RingOverlay",
    "RetainedSceneGraph",
    "Pose",
    "TransformBuffer",
]
