import os
import sys
import time
import warnings
from dataclasses import dataclass

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import tensorflow as tf

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")

from argparse import ArgumentParser

from fractalzoom import (
    ConfigurationError,
    FrameRenderer,
    Recurrence,
    Viewport,
    ZoomController,
    ZoomRequest,
    build_color_table,
    get_colormap,
    new_buffer,
    parse_hex_color,
    point_to_pixel,
)
from fractalzoom.viewer import Explorer

# Rendering stays on the CPU; the band pool supplies the parallelism.
DEVICE = '/CPU:0'


@dataclass(frozen=True)
class ExplorerConfig:
    """Startup constants for one session; never reloaded."""

    width: int
    height: int
    viewport: Viewport
    scaling_factor: float
    max_iterations: int
    recurrence: Recurrence
    colormap: str
    invert: bool
    inside_color: tuple[int, int, int]
    workers: int | None
    band_height: int
    dpi_scale: float

    @property
    def bounds(self) -> tuple[int, int]:
        return self.width, self.height


def build_parser():
    parser = ArgumentParser(description='Interactive escape-time fractal explorer. Left click zooms in around the cursor.')

    parser.add_argument('--width', type=int,
                        dest='width', help='canvas width in pixels',
                        metavar='WIDTH', default=800)

    parser.add_argument('--height', type=int,
                        dest='height', help='canvas height in pixels',
                        metavar='HEIGHT', default=800)

    parser.add_argument('--upper-left', type=float, nargs=2,
                        dest='upper_left', help='complex coordinate of the upper left canvas corner',
                        metavar=('RE', 'IM'), default=[-1.0, 1.0])

    parser.add_argument('--lower-right', type=float, nargs=2,
                        dest='lower_right', help='complex coordinate of the lower right canvas corner',
                        metavar=('RE', 'IM'), default=[1.0, -1.0])

    parser.add_argument('--scaling-factor', type=float,
                        dest='scaling_factor', help='factor by which each click shrinks the viewport (must be > 1)',
                        metavar='SCALING_FACTOR', default=2.0)

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='maximum number of escape-time iterations per pixel',
                        metavar='MAX_ITERATIONS', default=1000)

    parser.add_argument('--fractal', type=str,
                        dest='fractal', help='escape-time map: "mandelbrot" (z^2 + c) or "cubic" (z^3 + c)',
                        metavar='FRACTAL', default=Recurrence.QUADRATIC.value)

    parser.add_argument('--colormap', type=str,
                        dest='colormap', help='matplotlib colormap to build the color table from (e.g. "plasma", "viridis")',
                        metavar='COLORMAP', default='plasma')

    parser.add_argument('--invert', action='store_true', help='Invert the selected colormap.')
    parser.add_argument('--inside-color', type=str, default='#000000', help='Hex color for points inside the set.')

    parser.add_argument('--workers', type=int,
                        dest='workers', help='number of band rendering threads',
                        metavar='WORKERS', default=os.cpu_count())

    parser.add_argument('--band-height', type=int,
                        dest='band_height', help='rows per band handed to a worker',
                        metavar='BAND_HEIGHT', default=16)

    parser.add_argument('--dpi-scale', type=float,
                        dest='dpi_scale', help='factor converting window pointer coordinates to device pixels',
                        metavar='DPI_SCALE', default=1.0)

    parser.add_argument('--benchmark', type=int,
                        dest='benchmark', help='render FRAMES frames without a window, zooming on the canvas center, and report timings',
                        metavar='FRAMES', default=None)

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow diagnostics and per-frame timings.')

    return parser


def build_config(opt) -> ExplorerConfig:
    """Validate parsed options. Raises ConfigurationError on unusable values."""

    if opt.width < 1 or opt.height < 1:
        raise ConfigurationError(f"Canvas must be at least 1x1 pixels, got {opt.width}x{opt.height}.")
    if opt.max_iterations < 1:
        raise ConfigurationError(f"--max-iterations must be at least 1, got {opt.max_iterations}.")
    if opt.band_height < 1:
        raise ConfigurationError(f"--band-height must be at least 1, got {opt.band_height}.")
    if opt.workers is not None and opt.workers < 1:
        raise ConfigurationError(f"--workers must be at least 1, got {opt.workers}.")
    if not opt.scaling_factor > 1:
        raise ConfigurationError(f"--scaling-factor must be greater than 1, got {opt.scaling_factor}.")

    viewport = Viewport(complex(*opt.upper_left), complex(*opt.lower_right)).validate()
    recurrence = Recurrence.from_name(opt.fractal)
    get_colormap(opt.colormap)

    try:
        inside_color = parse_hex_color(opt.inside_color)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid --inside-color '{opt.inside_color}': {exc}") from exc

    return ExplorerConfig(
        width=opt.width,
        height=opt.height,
        viewport=viewport,
        scaling_factor=opt.scaling_factor,
        max_iterations=opt.max_iterations,
        recurrence=recurrence,
        colormap=opt.colormap,
        invert=bool(opt.invert),
        inside_color=inside_color,
        workers=opt.workers,
        band_height=opt.band_height,
        dpi_scale=opt.dpi_scale,
    )


def build_renderer(config: ExplorerConfig) -> FrameRenderer:
    cmap = get_colormap(config.colormap, invert=config.invert)
    color_table = build_color_table(config.max_iterations, cmap, inside=config.inside_color)
    return FrameRenderer(
        color_table,
        config.max_iterations,
        config.recurrence,
        band_height=config.band_height,
        workers=config.workers,
        device=DEVICE,
    )


def run_benchmark(config: ExplorerConfig, frames: int) -> list[float]:
    """Render ``frames`` frames headless, zooming on the canvas center between frames."""

    controller = ZoomController(config.viewport, config.scaling_factor, config.bounds)
    buffer = new_buffer(config.bounds)
    center = ZoomRequest(config.width // 2, config.height // 2)
    frame_times: list[float] = []

    with build_renderer(config) as renderer:
        for i in range(frames):
            snapshot = controller.snapshot()
            t0 = time.perf_counter()
            renderer.render(buffer, config.bounds, snapshot.viewport)
            render_ms = (time.perf_counter() - t0) * 1000
            frame_times.append(render_ms)
            origin = point_to_pixel(config.bounds, 0j, snapshot.viewport)
            log("frame {0} zoom {1}: {2:.1f}ms {3} origin at pixel {4}".format(
                i, snapshot.zoom_level, render_ms, snapshot.viewport, origin))
            controller.submit(center)
            controller.apply_pending()

    if frame_times:
        avg_ms = sum(frame_times) / len(frame_times)
        print(f"Rendered {len(frame_times)} frames")
        print(f"Average frame time: {avg_ms:.1f}ms")
    return frame_times


def main():
    parser = build_parser()
    opt = parser.parse_args()

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    try:
        config = build_config(opt)
    except ConfigurationError as exc:
        parser.error(str(exc))

    log("TensorFlow version: %s" % tf.__version__)
    log("Canvas %dx%d, %s, %d iterations, %s workers, bands of %d rows" % (
        config.width, config.height, config.recurrence.value, config.max_iterations,
        config.workers, config.band_height))

    if opt.benchmark is not None:
        run_benchmark(config, opt.benchmark)
        return

    controller = ZoomController(config.viewport, config.scaling_factor, config.bounds)
    title = "Mandelbrot" if config.recurrence is Recurrence.QUADRATIC else "Cubic Mandelbrot"
    with build_renderer(config) as renderer:
        Explorer(controller, renderer, title=title, dpi_scale=config.dpi_scale).run()


if __name__ == '__main__':
    main()
