"""
Range rings viewer: host application for the ring overlay.

Opens a pygame window, drives a RetainedSceneGraph and a TransformBuffer,
ticks the overlay every frame and lets the keyboard edit overlay properties.

Keys:
    Up/Down      spacing +/- 1 m           Left/Right   max radius -/+ 10 m
    [ / ]        resolution -/+ 1          L            toggle labels
    , / .        label size -/+ 0.5 m      W / S        line width +/- 0.05 m
    C            cycle color               D            drop/restore the demo frame
    E            enable/disable overlay    mouse wheel  zoom
    Esc / Q      quit
"""

import argparse
import math
import signal
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional

import pygame
import yaml

from range_rings.core.overlay import RingOverlay
from range_rings.core.status import StatusBoard, StatusLevel, StatusReport
from range_rings.rendering.pygame_view import PygameRenderer, SceneView
from range_rings.rendering.retained import RetainedSceneGraph
from range_rings.tracking.transforms import TransformBuffer, yaw_to_quaternion
from range_rings.utils.logging import setup_logging, get_logger

DEFAULT_UPDATE_RATE = 30  # Hz
DEFAULT_WINDOW_SIZE = (1280, 800)
DEFAULT_BACKGROUND_COLOR = (20, 20, 24)
DEFAULT_PIXELS_PER_METER = 2.0
DEFAULT_CAPTION = "Range Rings"

COLOR_CYCLE = [
    (200, 200, 200, 255),
    (255, 200, 0, 255),
    (0, 200, 255, 255),
    (120, 255, 120, 160),
]

STATUS_COLORS = {
    StatusLevel.OK: (120, 220, 120),
    StatusLevel.WARN: (255, 200, 0),
    StatusLevel.ERROR: (255, 80, 80),
}


class DemoOrbit:
    """Moves a frame around the fixed frame's origin so the rings follow it."""

    def __init__(self, frame_id: str, radius: float = 40.0, period: float = 30.0):
        self.frame_id = frame_id
        self.radius = radius
        self.period = period
        self.active = True

    def update(self, buffer: TransformBuffer, t: float) -> None:
        if not self.active:
            return
        angle = 2.0 * math.pi * t / self.period if self.period > 0 else 0.0
        buffer.set_transform(
            self.frame_id, buffer.fixed_frame,
            position=(self.radius * math.cos(angle), self.radius * math.sin(angle), 0.0),
            orientation=yaw_to_quaternion(angle + math.pi / 2.0),
            stamp=t,
        )

    def toggle(self, buffer: TransformBuffer) -> None:
        self.active = not self.active
        if not self.active:
            buffer.remove_transform(self.frame_id)


class RangeRingsViewer:
    """
    Architecture:
        Viewer
        ├── RetainedSceneGraph ── drawn by SceneView/PygameRenderer
        ├── TransformBuffer    ── static frames + DemoOrbit
        └── RingOverlay        ── ticked once per frame
    """

    def __init__(self, config_path: Optional[str] = None, verbose: bool = False,
                 transforms_path: Optional[str] = None):
        self.config_path = config_path
        self.transforms_path = transforms_path
        self.verbose = verbose
        self.config: Dict[str, Any] = {}

        self.update_rate = DEFAULT_UPDATE_RATE
        self.window_size = DEFAULT_WINDOW_SIZE
        self.background_color = DEFAULT_BACKGROUND_COLOR

        self.graph = RetainedSceneGraph()
        self.transforms = TransformBuffer()
        self.status = StatusBoard(self._on_status)
        self.overlay = RingOverlay(self.graph, self.transforms, status=self.status)
        self.view = SceneView(DEFAULT_PIXELS_PER_METER)
        self.renderer: Optional[PygameRenderer] = None
        self.demo: Optional[DemoOrbit] = DemoOrbit(self.overlay.config.reference_frame)

        self._color_index = 0
        self._running = True
        self._start_time = time.monotonic()

        self.logger = get_logger(__name__)

        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        self.logger.info(f"Shutdown initiated: Received signal {signum}")
        self._running = False

    def _on_status(self, report: StatusReport) -> None:
        if self.renderer is not None:
            pygame.display.set_caption(self.window_caption())

    def window_caption(self) -> str:
        """Caption naming the worst active status, or the plain title when all are OK."""
        worst = None
        for report in self.status.snapshot().values():
            if report.level is StatusLevel.OK:
                continue
            if worst is None or report.level.value > worst.level.value:
                worst = report
        if worst is None:
            return DEFAULT_CAPTION
        return f"{DEFAULT_CAPTION} - {worst.category}: {worst.message}"

    def load_config(self) -> bool:
        """
        Load startup settings from YAML. Overlay values go through the
        validated store; rejected values are logged and skipped.

        Returns:
            True if successful
        """
        if not self.config_path:
            self.logger.info("No config file specified, using defaults")
            return self._load_transforms()

        config_file = Path(self.config_path)
        if not config_file.exists():
            self.logger.error(f"Config file not found: {self.config_path}")
            return False

        try:
            with open(config_file, 'r') as f:
                self.config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            self.logger.error(f"Failed to load config: {e}")
            return False

        display_config = self.config.get('display', {})
        self.update_rate = display_config.get('update_rate', DEFAULT_UPDATE_RATE)
        self.window_size = tuple(display_config.get('size', DEFAULT_WINDOW_SIZE))
        self.background_color = tuple(display_config.get('background_color',
                                                         DEFAULT_BACKGROUND_COLOR))
        self.view.pixels_per_meter = display_config.get('pixels_per_meter',
                                                        DEFAULT_PIXELS_PER_METER)

        if not self._load_transforms():
            return False

        for result in self.overlay.update(self.config.get('overlay', {})):
            if result["status"] != "success":
                self.logger.warning(f"Ignoring overlay setting: {result['message']}")

        demo_config = self.config.get('demo', {})
        if demo_config.get('enabled', True):
            self.demo = DemoOrbit(
                demo_config.get('frame', self.overlay.config.reference_frame),
                radius=demo_config.get('orbit_radius', 40.0),
                period=demo_config.get('orbit_period', 30.0),
            )
        else:
            self.demo = None

        reference_frame = self.overlay.config.reference_frame
        if self.demo is None and not self.transforms.has_frame(reference_frame):
            self.logger.warning(f"Reference frame '{reference_frame}' is not in the transform "
                                f"buffer, rings stay at the origin until it appears")

        self.logger.info(f"Config loaded: update_rate={self.update_rate}Hz, "
                         f"frames={self.transforms.list_frames()}")
        return True

    def _load_transforms(self) -> bool:
        """
        Build the transform buffer from the --transforms file, or else from the
        config's transforms section. Keeps the default buffer when neither is set.
        """
        try:
            if self.transforms_path:
                buffer = TransformBuffer.from_yaml(self.transforms_path)
            elif self.config.get('transforms'):
                buffer = TransformBuffer.from_dict(self.config['transforms'])
            else:
                return True
        except (OSError, yaml.YAMLError, ValueError, TypeError) as e:
            self.logger.error(f"Failed to load transforms: {e}")
            return False

        self.transforms = buffer
        self.overlay = RingOverlay(self.graph, self.transforms, status=self.status)
        return True

    def init_display(self) -> bool:
        try:
            self.renderer = PygameRenderer()
            self.renderer.init(self.window_size, DEFAULT_CAPTION)
            return True
        except pygame.error as e:
            self.logger.error(f"Failed to initialize display: {e}")
            return False

    # --- Input ---

    def _adjust(self, name: str, delta: float) -> None:
        result = self.overlay.set_property(name, self.overlay.store.get(name) + delta)
        if result["status"] != "success":
            self.logger.info(f"{name} unchanged: {result['message']}")

    def handle_key(self, key: int) -> None:
        if key in (pygame.K_ESCAPE, pygame.K_q):
            self._running = False
        elif key == pygame.K_UP:
            self._adjust('spacing', 1.0)
        elif key == pygame.K_DOWN:
            self._adjust('spacing', -1.0)
        elif key == pygame.K_RIGHT:
            self._adjust('max_radius', 10.0)
        elif key == pygame.K_LEFT:
            self._adjust('max_radius', -10.0)
        elif key == pygame.K_RIGHTBRACKET:
            self._adjust('resolution', 1)
        elif key == pygame.K_LEFTBRACKET:
            self._adjust('resolution', -1)
        elif key == pygame.K_PERIOD:
            self._adjust('label_size', 0.5)
        elif key == pygame.K_COMMA:
            self._adjust('label_size', -0.5)
        elif key == pygame.K_w:
            self._adjust('line_width', 0.05)
        elif key == pygame.K_s:
            self._adjust('line_width', -0.05)
        elif key == pygame.K_l:
            self.overlay.set_property('show_labels', not self.overlay.config.show_labels)
        elif key == pygame.K_c:
            self._color_index = (self._color_index + 1) % len(COLOR_CYCLE)
            self.overlay.set_property('color', COLOR_CYCLE[self._color_index])
        elif key == pygame.K_d and self.demo is not None:
            self.demo.toggle(self.transforms)
        elif key == pygame.K_e:
            if self.overlay.enabled:
                self.overlay.disable()
            else:
                self.overlay.enable()

    # --- Loop ---

    def render_frame(self) -> None:
        self.renderer.clear(self.background_color)
        self.view.draw(self.renderer, self.graph)
        self._draw_hud()
        self.renderer.flip()

    def _draw_hud(self) -> None:
        state = self.overlay.describe()
        cfg = state['config']
        lines = [
            (f"frame={cfg['reference_frame']}  spacing={cfg['spacing']:.1f}m  "
             f"max={cfg['max_radius']:.0f}m  resolution={cfg['resolution']}  "
             f"rings={state['rings']}", (220, 220, 220)),
        ]
        for report in self.status.snapshot().values():
            lines.append((f"{report.category}: {report.message}", STATUS_COLORS[report.level]))
        for i, (text, color) in enumerate(lines):
            self.renderer.draw_text(text, (10, 16 + i * 20), color, 20)

    def run(self) -> None:
        """Main loop."""
        self.overlay.initialize()
        self.logger.info("Starting render loop...")

        try:
            while self._running:
                for event in self.renderer.get_events():
                    if event.type == pygame.QUIT:
                        self._running = False
                    elif event.type == pygame.KEYDOWN:
                        self.handle_key(event.key)
                    elif event.type == pygame.MOUSEWHEEL:
                        self.view.zoom(1.1 if event.y > 0 else 1 / 1.1)

                if self.demo is not None:
                    self.demo.update(self.transforms, time.monotonic() - self._start_time)
                self.overlay.tick()

                self.render_frame()
                self.renderer.tick(self.update_rate)

        except KeyboardInterrupt:
            self.logger.info("Keyboard interrupt received")
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        self.logger.info("Shutting down...")
        self._running = False
        self.overlay.teardown()
        if self.renderer:
            self.renderer.quit()
        self.logger.info("Shutdown complete")


def main():
    """Entry point for the viewer."""
    parser = argparse.ArgumentParser(
        description="Range Rings - concentric radius rings following a reference frame"
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to viewer configuration YAML"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "-t", "--transforms",
        help="Path to a YAML file of static frames (overrides the config's transforms section)"
    )
    parser.add_argument(
        "--rate", "-r",
        type=int,
        help=f"Update rate in Hz (default: {DEFAULT_UPDATE_RATE})"
    )
    parser.add_argument(
        "--no-demo",
        action="store_true",
        help="Do not animate the reference frame"
    )

    args = parser.parse_args()

    setup_logging(verbose=args.verbose)

    viewer = RangeRingsViewer(config_path=args.config, verbose=args.verbose,
                              transforms_path=args.transforms)

    if not viewer.load_config():
        sys.exit(1)

    if args.rate:
        viewer.update_rate = args.rate
    if args.no_demo:
        viewer.demo = None

    if not viewer.init_display():
        sys.exit(1)

    viewer.run()


if __name__ == "__main__":
    main()
