import logging
import math

import pytest

from range_rings.core.status import StatusLevel
from range_rings.tracking.transforms import TransformBuffer
from range_rings.viewer import DemoOrbit, RangeRingsViewer

CONFIG = """
display:
  size: [640, 480]
  update_rate: 15
overlay:
  spacing: 25
  max_radius: 100
  resolution: 250
transforms:
  fixed_frame: world
  frames:
    odom: {parent: world, position: [1, 2, 0]}
demo:
  enabled: false
"""


def test_load_config_applies_sections(tmp_path) -> None:
    path = tmp_path / "viewer.yaml"
    path.write_text(CONFIG)
    viewer = RangeRingsViewer(config_path=str(path))

    assert viewer.load_config() is True

    assert viewer.window_size == (640, 480)
    assert viewer.update_rate == 15
    assert viewer.transforms.fixed_frame == "world"
    assert viewer.transforms.lookup("odom").position == (1.0, 2.0, 0.0)
    assert viewer.demo is None
    config = viewer.overlay.config
    assert (config.spacing, config.max_radius) == (25.0, 100.0)
    # out-of-range startup value is skipped and reported
    assert config.resolution == 99
    assert viewer.status.get("Resolution").level is StatusLevel.ERROR

    viewer.overlay.initialize()
    assert viewer.overlay.synchronizer.ring_count == 0


def test_missing_config_file_fails(tmp_path) -> None:
    viewer = RangeRingsViewer(config_path=str(tmp_path / "nope.yaml"))

    assert viewer.load_config() is False


def test_no_config_uses_defaults() -> None:
    viewer = RangeRingsViewer()

    assert viewer.load_config() is True
    assert viewer.overlay.config.reference_frame == "base_link"
    assert viewer.demo is not None


def test_demo_orbit_moves_and_drops_frame() -> None:
    buffer = TransformBuffer(fixed_frame="map")
    orbit = DemoOrbit("base_link", radius=10.0, period=4.0)

    orbit.update(buffer, 1.0)
    pose = buffer.lookup("base_link")
    assert pose.position[0] == pytest.approx(0.0, abs=1e-9)
    assert pose.position[1] == pytest.approx(10.0)
    assert abs(pose.yaw) == pytest.approx(math.pi)

    orbit.toggle(buffer)
    assert buffer.lookup("base_link") is None
    orbit.update(buffer, 2.0)
    assert buffer.lookup("base_link") is None


def test_transforms_file_overrides_config_section(tmp_path) -> None:
    config_path = tmp_path / "viewer.yaml"
    config_path.write_text(CONFIG)
    frames_path = tmp_path / "frames.yaml"
    frames_path.write_text(
        "fixed_frame: map\n"
        "frames:\n"
        "  base_link: {parent: map, position: [5, 0, 0]}\n"
    )
    viewer = RangeRingsViewer(config_path=str(config_path), transforms_path=str(frames_path))

    assert viewer.load_config() is True

    assert viewer.transforms.fixed_frame == "map"
    assert viewer.transforms.lookup("odom") is None
    viewer.overlay.set_property("resolution", 8)
    viewer.overlay.initialize()
    assert viewer.overlay.tick() is True


def test_transforms_file_without_config(tmp_path) -> None:
    frames_path = tmp_path / "frames.yaml"
    frames_path.write_text("fixed_frame: world\n")
    viewer = RangeRingsViewer(transforms_path=str(frames_path))

    assert viewer.load_config() is True
    assert viewer.transforms.list_frames() == ["world"]


def test_missing_transforms_file_fails(tmp_path) -> None:
    viewer = RangeRingsViewer(transforms_path=str(tmp_path / "nope.yaml"))

    assert viewer.load_config() is False


def test_missing_reference_frame_is_logged(tmp_path, caplog) -> None:
    path = tmp_path / "viewer.yaml"
    path.write_text(CONFIG)
    viewer = RangeRingsViewer(config_path=str(path))

    with caplog.at_level(logging.WARNING, logger="range_rings.viewer"):
        viewer.load_config()

    assert any("'base_link' is not in the transform buffer" in r.getMessage()
               for r in caplog.records)


def test_caption_clears_when_status_recovers() -> None:
    viewer = RangeRingsViewer()
    assert viewer.window_caption() == "Range Rings"

    viewer.status.report("Transform", StatusLevel.WARN, "transform not available")
    viewer.status.report("Resolution", StatusLevel.ERROR, "too many points")
    assert viewer.window_caption() == "Range Rings - Resolution: too many points"

    viewer.status.report("Resolution", StatusLevel.OK, "OK")
    assert viewer.window_caption() == "Range Rings - Transform: transform not available"

    viewer.status.report("Transform", StatusLevel.OK, "OK")
    assert viewer.window_caption() == "Range Rings"
