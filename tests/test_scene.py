import math

import numpy as np
import pytest

from range_rings.core.config import RingConfig
from range_rings.core.geometry import generate_rings
from range_rings.core.labels import HAlign, VAlign, format_labels
from range_rings.rendering.retained import ROOT_NODE, RetainedSceneGraph
from range_rings.rendering.scene_graph import SceneGraphError
from range_rings.rendering.synchronizer import SceneSynchronizer
from range_rings.tracking.transforms import yaw_to_quaternion


class FailingLabelGraph(RetainedSceneGraph):
    """Fails on the n-th text label to exercise partial rebuild cleanup."""

    def __init__(self, fail_on: int):
        super().__init__()
        self.fail_on = fail_on
        self.labels_created = 0

    def create_text_label(self, *args, **kwargs):
        self.labels_created += 1
        if self.labels_created == self.fail_on:
            raise SceneGraphError("text backend unavailable")
        return super().create_text_label(*args, **kwargs)


def rings_and_labels(**overrides):
    config = RingConfig(**{"max_radius": 5.0, "spacing": 1.0, "resolution": 8, **overrides})
    rings = generate_rings(config)
    return rings, format_labels(rings, config, include_hidden=True)


# --- RetainedSceneGraph ---

def test_destroy_is_recursive_and_refuses_root() -> None:
    graph = RetainedSceneGraph()
    node = graph.create_node()
    strip = graph.create_line_strip(node, [(0, 0, 0), (1, 0, 0)], [(1, 1, 1, 1)] * 2, 0.1)
    text = graph.create_text_label(node, "1", (1, 0, 0), HAlign.LEFT, VAlign.CENTER,
                                   1.0, (1, 1, 1, 1))

    assert graph.object_count == 3
    assert graph.destroy(ROOT_NODE) is False
    assert graph.destroy(node) is True
    assert not graph.contains(strip) and not graph.contains(text)
    assert graph.object_count == 0
    assert graph.destroy(node) is False


def test_line_strip_capacity_and_color_count_are_enforced() -> None:
    graph = RetainedSceneGraph(max_line_points=4)

    with pytest.raises(SceneGraphError):
        graph.create_line_strip(ROOT_NODE, [(0, 0, 0)] * 5, [(0, 0, 0, 255)] * 5, 0.1)
    with pytest.raises(SceneGraphError):
        graph.create_line_strip(ROOT_NODE, [(0, 0, 0)] * 3, [(0, 0, 0, 255)] * 2, 0.1)
    assert graph.object_count == 0


def test_unknown_handles_raise() -> None:
    graph = RetainedSceneGraph()

    with pytest.raises(SceneGraphError):
        graph.set_line_width(42, 1.0)
    with pytest.raises(SceneGraphError):
        graph.create_node(42)


def test_world_points_follow_node_pose() -> None:
    graph = RetainedSceneGraph()
    node = graph.create_node()
    strip = graph.create_line_strip(node, [(1, 0, 0), (2, 0, 0)], [(0, 0, 0, 255)] * 2, 0.1)

    graph.set_node_pose(node, (5.0, 5.0, 0.0), yaw_to_quaternion(math.pi / 2))

    np.testing.assert_allclose(graph.world_points(strip), [[5, 6, 0], [5, 7, 0]], atol=1e-12)


def test_visibility_is_inherited() -> None:
    graph = RetainedSceneGraph()
    node = graph.create_node()
    text = graph.create_text_label(node, "1", (1, 0, 0), HAlign.LEFT, VAlign.CENTER,
                                   1.0, (1, 1, 1, 1))

    graph.set_node_visible(node, False)
    assert graph.is_visible(text) is False

    graph.set_node_visible(node, True)
    graph.set_text_visible(text, False)
    assert graph.is_visible(text) is False


# --- SceneSynchronizer ---

def test_rebuild_creates_one_strip_and_label_per_ring() -> None:
    graph = RetainedSceneGraph()
    sync = SceneSynchronizer(graph)
    root = sync.attach()
    rings, labels = rings_and_labels()

    sync.rebuild(rings, labels, 0.02)

    assert sync.ring_count == 5 and sync.label_count == 5
    assert all(graph.line_strip(h).parent == root for h in sync.ring_handles)
    assert [graph.text_label(h).text for h in sync.label_handles] == ["1", "2", "3", "4", "5"]
    assert all(graph.line_strip(h).width == 0.02 for h in sync.ring_handles)
    assert graph.render_requests > 0


def test_rebuild_replaces_everything_without_leaks() -> None:
    graph = RetainedSceneGraph()
    sync = SceneSynchronizer(graph)
    sync.attach()

    sync.rebuild(*rings_and_labels(), 0.02)
    first = set(sync.ring_handles + sync.label_handles)
    sync.rebuild(*rings_and_labels(max_radius=3.0), 0.02)

    assert first.isdisjoint(sync.ring_handles + sync.label_handles)
    assert not any(graph.contains(h) for h in first)
    # root node plus three rings and three labels
    assert graph.object_count == 1 + 3 + 3


def test_partial_failure_leaves_overlay_empty() -> None:
    graph = FailingLabelGraph(fail_on=3)
    sync = SceneSynchronizer(graph)
    sync.attach()

    with pytest.raises(SceneGraphError):
        sync.rebuild(*rings_and_labels(), 0.02)

    assert sync.is_empty()
    assert graph.object_count == 1


def test_rebuild_requires_attach() -> None:
    sync = SceneSynchronizer(RetainedSceneGraph())

    with pytest.raises(RuntimeError):
        sync.rebuild(*rings_and_labels(), 0.02)


def test_in_place_updates_keep_handles() -> None:
    graph = RetainedSceneGraph()
    sync = SceneSynchronizer(graph)
    sync.attach()
    sync.rebuild(*rings_and_labels(), 0.02)
    handles = sync.ring_handles + sync.label_handles

    sync.apply_style((255, 0, 0, 255), 0.5)
    sync.set_label_height(2.0)
    sync.set_labels_visible(False)

    assert sync.ring_handles + sync.label_handles == handles
    assert all(graph.line_strip(h).width == 0.5 for h in sync.ring_handles)
    for h in sync.label_handles:
        label = graph.text_label(h)
        assert label.color == (255, 0, 0, 255)
        assert label.height == 2.0
        assert label.visible is False


def test_clear_keeps_root_and_teardown_is_repeatable() -> None:
    graph = RetainedSceneGraph()
    sync = SceneSynchronizer(graph)
    root = sync.attach()
    assert sync.attach() == root
    sync.rebuild(*rings_and_labels(), 0.02)

    sync.clear()
    assert sync.is_empty() and graph.contains(root)

    sync.teardown()
    sync.teardown()
    assert sync.root is None
    assert graph.object_count == 0
