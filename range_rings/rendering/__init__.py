"""Rendering components for range rings.

pygame_view is not imported here so the overlay can run headless.
"""

from range_rings.rendering.scene_graph import SceneGraph, SceneGraphError, Handle
from range_rings.rendering.retained import RetainedSceneGraph, ROOT_NODE, MAX_LINE_STRIP_POINTS
from range_rings.rendering.synchronizer import SceneSynchronizer

__all__ = [
    "SceneGraph",
    "SceneGraphError",
    "Handle",
    "RetainedSceneGraph",
    "ROOT_NODE",
    "MAX_LINE_STRIP_POINTS",
    "SceneSynchronizer",
]
