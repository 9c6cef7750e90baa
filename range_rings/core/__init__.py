"""Core components for range rings."""

from range_rings.core.geometry import (
    RingDescriptor,
    ConfigValidationError,
    ResolutionExceeded,
    generate_rings,
    MIN_RESOLUTION,
    MAX_RESOLUTION,
)
from range_rings.core.labels import LabelDescriptor, HAlign, VAlign, format_label, format_labels
from range_rings.core.status import StatusBoard, StatusLevel, StatusReport
from range_rings.core.config import RingConfig, ConfigStore, ConfigChange, ChangeKind
from range_rings.core.overlay import RingOverlay

__all__ = [
    "RingDescriptor",
    "ConfigValidationError",
    "ResolutionExceeded",
    "generate_rings",
    "MIN_RESOLUTION",
    "MAX_RESOLUTION",
    "LabelDescriptor",
    "HAlign",
    "VAlign",
    "format_label",
    "format_labels",
    "StatusBoard",
    "StatusLevel",
    "StatusReport",
    "RingConfig",
    "ConfigStore",
    "ConfigChange",
    "ChangeKind",
    "RingOverlay",
]
