"""Radius labels for the rings."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, TYPE_CHECKING

from range_rings.core.geometry import RingDescriptor

if TYPE_CHECKING:
    from range_rings.core.config import RingConfig


class HAlign(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class VAlign(Enum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"


@dataclass(frozen=True)
class LabelDescriptor:
    """Text anchored at a ring's rightmost point, (radius, 0, 0)."""
    text: str
    anchor: Tuple[float, float, float]
    character_height: float
    color: Tuple[int, int, int, int]
    visible: bool = True
    h_align: HAlign = HAlign.LEFT
    v_align: VAlign = VAlign.CENTER


def format_radius(radius: float) -> str:
    """Radius with zero decimal places, e.g. 37.6 -> "38"."""
    return f"{radius:.0f}"


def format_label(ring: RingDescriptor, config: "RingConfig",
                 include_hidden: bool = False) -> Optional[LabelDescriptor]:
    """
    Build the label for one ring.

    Returns None when labels are switched off, unless include_hidden is set,
    in which case an invisible label is returned so it can later be shown
    without regenerating anything.
    """
    if not config.show_labels and not include_hidden:
        return None
    return LabelDescriptor(
        text=format_radius(ring.radius),
        anchor=(float(ring.radius), 0.0, 0.0),
        character_height=config.label_size,
        color=tuple(config.color),
        visible=config.show_labels,
    )


def format_labels(rings: List[RingDescriptor], config: "RingConfig",
                  include_hidden: bool = False) -> List[LabelDescriptor]:
    labels = []
    for ring in rings:
        label = format_label(ring, config, include_hidden=include_hidden)
        if label is not None:
            labels.append(label)
    return labels
