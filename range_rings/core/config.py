"""
Configuration store for the ring overlay.

RingConfig holds the style and geometry parameters. ConfigStore is the single
mutable copy: every edit goes through set(), which validates the value,
keeps the prior value on rejection, and notifies subscribers with exactly one
ConfigChange per call.
"""

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from range_rings.core.geometry import (
    MIN_RESOLUTION, MAX_RESOLUTION, ConfigValidationError, ResolutionExceeded,
)
from range_rings.core.status import (
    StatusBoard, StatusLevel, CATEGORY_RESOLUTION, CATEGORY_CONFIGURATION,
)
from range_rings.utils.color import parse_color

logger = logging.getLogger(__name__)


class ChangeKind(Enum):
    """Which downstream update path a field change takes."""
    STYLE = "style"
    GEOMETRY = "geometry"
    VISIBILITY = "visibility"


@dataclass
class RingConfig:
    """Style and geometry parameters of the overlay (RGBA color, meters)."""
    color: Tuple[int, int, int, int] = (200, 200, 200, 255)
    line_width: float = 0.02
    max_radius: float = 200.0
    spacing: float = 10.0
    resolution: int = 99
    show_labels: bool = True
    label_size: float = 5.0
    reference_frame: str = "base_link"

    def to_dict(self) -> dict:
        return {
            'color': list(self.color),
            'line_width': self.line_width,
            'max_radius': self.max_radius,
            'spacing': self.spacing,
            'resolution': self.resolution,
            'show_labels': self.show_labels,
            'label_size': self.label_size,
            'reference_frame': self.reference_frame,
        }


FIELD_KINDS: Dict[str, ChangeKind] = {
    'color': ChangeKind.STYLE,
    'line_width': ChangeKind.STYLE,
    'label_size': ChangeKind.STYLE,
    'max_radius': ChangeKind.GEOMETRY,
    'spacing': ChangeKind.GEOMETRY,
    'resolution': ChangeKind.GEOMETRY,
    'reference_frame': ChangeKind.GEOMETRY,
    'show_labels': ChangeKind.VISIBILITY,
}

# Display labels the host UI shows for each field
FIELD_LABELS: Dict[str, str] = {
    'color': "Color",
    'line_width': "Line Width",
    'max_radius': "Max Radius",
    'spacing': "Spacing",
    'resolution': "Resolution",
    'show_labels': "Show Text",
    'label_size': "Text Size",
    'reference_frame': "Reference Frame",
}

_LABEL_TO_FIELD = {label.lower(): name for name, label in FIELD_LABELS.items()}


def resolve_field(name: str) -> str:
    """Map a field name or display label to the RingConfig attribute name."""
    if name in FIELD_KINDS:
        return name
    resolved = _LABEL_TO_FIELD.get(str(name).strip().lower())
    if resolved is None:
        raise ConfigValidationError(f"Unknown field: {name}", code="UNKNOWN_FIELD")
    return resolved


def _non_negative_float(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigValidationError(
            f"{FIELD_LABELS[name]} must be a number, got {type(value).__name__}",
            code="INVALID_TYPE")
    value = float(value)
    if not math.isfinite(value):
        raise ConfigValidationError(f"{FIELD_LABELS[name]} must be finite", code="NOT_FINITE")
    if value < 0.0:
        raise ConfigValidationError(
            f"{FIELD_LABELS[name]} must be >= 0, got {value}", code="NEGATIVE_VALUE")
    return value


def _resolution(value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigValidationError("Resolution must be an integer", code="INVALID_TYPE")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise ConfigValidationError(
            f"Resolution must be an integer, got {value!r}", code="INVALID_TYPE")
    if value > MAX_RESOLUTION:
        raise ResolutionExceeded(value)
    if value < MIN_RESOLUTION:
        raise ConfigValidationError(
            f"Resolution {value} below minimum of {MIN_RESOLUTION}", code="INVALID_RESOLUTION")
    return value


def validate_field(name: str, value: Any) -> Any:
    """
    Validate and normalize a value for a field.

    Raises:
        ConfigValidationError: If the value violates the field's bound
    """
    if name == 'color':
        try:
            return parse_color(value)
        except ValueError as e:
            raise ConfigValidationError(str(e), code="INVALID_COLOR") from e
    if name in ('line_width', 'max_radius', 'spacing', 'label_size'):
        return _non_negative_float(name, value)
    if name == 'resolution':
        return _resolution(value)
    if name == 'show_labels':
        if not isinstance(value, bool):
            raise ConfigValidationError(
                f"Show Text must be a bool, got {value!r}", code="INVALID_TYPE")
        return value
    if name == 'reference_frame':
        if not isinstance(value, str) or not value.strip():
            raise ConfigValidationError(
                "Reference Frame must be a non-empty frame id", code="INVALID_FRAME")
        return value.strip()
    raise ConfigValidationError(f"Unknown field: {name}", code="UNKNOWN_FIELD")


@dataclass(frozen=True)
class ConfigChange:
    """Notification for one set() call. accepted=False carries the rejection code."""
    field: str
    kind: Optional[ChangeKind]
    old: Any
    new: Any
    accepted: bool = True
    code: Optional[str] = None


ConfigListener = Callable[[ConfigChange], None]


class ConfigStore:
    """
    Single logical copy of the overlay configuration.

    Rejected values leave the prior value in effect and are reported on the
    status board ("Resolution" for the resolution bound, "Configuration"
    otherwise).
    """

    def __init__(self, config: Optional[RingConfig] = None,
                 status: Optional[StatusBoard] = None):
        self._config = replace(config) if config is not None else RingConfig()
        self._status = status
        self._listeners: List[ConfigListener] = []

    @property
    def config(self) -> RingConfig:
        """A copy of the current configuration."""
        return replace(self._config)

    def get(self, name: str) -> Any:
        return getattr(self._config, resolve_field(name))

    def subscribe(self, listener: ConfigListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: ConfigListener) -> bool:
        if listener in self._listeners:
            self._listeners.remove(listener)
            return True
        return False

    def set(self, name: str, value: Any) -> Dict[str, Any]:
        """
        Validate and apply a field edit.

        Returns:
            Result dict: {"status": "success", ...} or
            {"status": "error", "message", "code", ...}
        """
        try:
            field_name = resolve_field(name)
        except ConfigValidationError as e:
            logger.warning(str(e))
            return {"status": "error", "message": str(e), "code": e.code, "field": name}

        old = getattr(self._config, field_name)
        kind = FIELD_KINDS[field_name]
        category = CATEGORY_RESOLUTION if field_name == 'resolution' else CATEGORY_CONFIGURATION

        try:
            new = validate_field(field_name, value)
        except ConfigValidationError as e:
            if self._status is not None:
                level = StatusLevel.ERROR if field_name == 'resolution' else StatusLevel.WARN
                self._status.report(category, level, str(e))
            self._notify(ConfigChange(field_name, kind, old, value, accepted=False, code=e.code))
            return {"status": "error", "message": str(e), "code": e.code, "field": field_name}

        setattr(self._config, field_name, new)
        logger.debug(f"{FIELD_LABELS[field_name]}: {old!r} -> {new!r}")
        if self._status is not None:
            current = self._status.get(category)
            if current is not None and current.level is not StatusLevel.OK:
                self._status.report(category, StatusLevel.OK, "OK")
        self._notify(ConfigChange(field_name, kind, old, new))
        return {"status": "success", "field": field_name, "value": new}

    def update(self, values: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Apply several fields through set(), in order."""
        return [self.set(name, value) for name, value in values.items()]

    def _notify(self, change: ConfigChange) -> None:
        for listener in list(self._listeners):
            listener(change)
