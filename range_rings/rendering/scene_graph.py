"""
Scene graph protocol consumed by the ring overlay.

Isolates the overlay from the host's rendering backend. Objects are referred
to by opaque integer handles; nodes form a tree and every line strip or text
label is attached to exactly one node.
"""

from typing import Optional, Protocol, Sequence, Tuple

from range_rings.core.labels import HAlign, VAlign

Handle = int
Vec3 = Tuple[float, float, float]
Quaternion = Tuple[float, float, float, float]  # (x, y, z, w)
RGBA = Tuple[int, int, int, int]


class SceneGraphError(RuntimeError):
    """The backend failed to create or update an object."""


class SceneGraph(Protocol):
    """Protocol for scene graph backends."""

    # ── Nodes ─────────────────────────────────────────────────

    def create_node(self, parent: Optional[Handle] = None) -> Handle:
        """Create a child node of parent (or of the scene root)."""
        ...

    def set_node_pose(self, node: Handle, position: Vec3,
                      orientation: Optional[Quaternion] = None) -> None:
        """Set node position; orientation None leaves it untouched."""
        ...

    def set_node_visible(self, node: Handle, visible: bool) -> None:
        ...

    # ── Renderables ───────────────────────────────────────────

    def create_line_strip(self, parent: Handle, points: Sequence[Vec3],
                          colors: Sequence[RGBA], width: float) -> Handle:
        """Create a line strip with one color per point."""
        ...

    def create_text_label(self, parent: Handle, text: str, anchor: Vec3,
                          h_align: HAlign, v_align: VAlign, height: float,
                          color: RGBA, visible: bool = True) -> Handle:
        ...

    def set_line_width(self, handle: Handle, width: float) -> None:
        ...

    def set_text_color(self, handle: Handle, color: RGBA) -> None:
        ...

    def set_text_visible(self, handle: Handle, visible: bool) -> None:
        ...

    def set_text_height(self, handle: Handle, height: float) -> None:
        ...

    # ── Lifetime ──────────────────────────────────────────────

    def destroy(self, handle: Handle) -> bool:
        """Destroy an object or node (recursively). False if unknown."""
        ...

    def queue_render(self) -> None:
        """Request a redraw on the next frame."""
        ...
