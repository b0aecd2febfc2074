import os
import sys
import threading
import time
from argparse import ArgumentParser
from dataclasses import dataclass

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import numpy as np
import PIL.Image

from mandelview import (
    DEFAULT_GRID,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_VIEWPORT,
    IN_SET_COLOR,
    ColormapPalette,
    ConfigurationError,
    Grid,
    RenderCancelled,
    RenderParameters,
    ViewportParseError,
    apply_zoom,
    colorize,
    parse_hex_color,
    parse_viewport,
    recenter,
    render_frame,
    sampling_metadata,
    to_image,
)

# Border around the canvas of the interactive window.
CANVAS_MARGIN = 25


@dataclass
class ExploreConfig:
    params: RenderParameters
    backend: str
    palette: object
    preview: bool
    columns: int
    timeout: float | None


def build_parser():
    parser = ArgumentParser(description="Render a region of the Mandelbrot set in the terminal.")

    parser.add_argument('--re-min', type=str, dest='re_min', metavar='RE_MIN',
                        default=str(DEFAULT_VIEWPORT.re_min), help='left edge of the viewport on the real axis')
    parser.add_argument('--re-max', type=str, dest='re_max', metavar='RE_MAX',
                        default=str(DEFAULT_VIEWPORT.re_max), help='right edge of the viewport on the real axis')
    parser.add_argument('--im-min', type=str, dest='im_min', metavar='IM_MIN',
                        default=str(DEFAULT_VIEWPORT.im_min), help='lower edge of the viewport on the imaginary axis')
    parser.add_argument('--im-max', type=str, dest='im_max', metavar='IM_MAX',
                        default=str(DEFAULT_VIEWPORT.im_max), help='upper edge of the viewport on the imaginary axis')

    parser.add_argument('--width', type=int, dest='width', metavar='WIDTH',
                        default=DEFAULT_GRID.width, help='number of pixel columns to sample')
    parser.add_argument('--height', type=int, dest='height', metavar='HEIGHT',
                        default=DEFAULT_GRID.height, help='number of pixel rows to sample')
    parser.add_argument('--max-iterations', type=int, dest='max_iterations', metavar='MAX_ITERATIONS',
                        default=DEFAULT_MAX_ITERATIONS, help='iteration budget before a point is presumed in the set')

    parser.add_argument('--coordinates', choices=['direct', 'accumulate'], default='direct',
                        help='"direct" computes each plane coordinate from the pixel index; '
                             '"accumulate" adds the pixel step along each axis one pixel at a time.')
    parser.add_argument('--backend', choices=['python', 'tensorflow'], default='python',
                        help='Scalar python evaluator or the vectorised TensorFlow kernel.')

    parser.add_argument('--focus', type=int, nargs=2, metavar=('X', 'Y'), default=None,
                        help='recenter the viewport on this pixel of the requested grid before rendering')
    parser.add_argument('--zoom', type=float, dest='zoom', metavar='FACTOR', default=None,
                        help='scale the viewport around its centre. Choose < 1 to zoom in, > 1 to zoom out.')

    parser.add_argument('--colormap', type=str, dest='colormap', metavar='COLORMAP', default=None,
                        help='matplotlib colormap for escaping points (e.g. "viridis"). Defaults to the green gradient.')
    parser.add_argument('--inside-color', type=str, default=None,
                        help='Hex color for points inside the Mandelbrot set (only with --colormap).')
    parser.add_argument('--invert', action='store_true', help='Invert the selected colormap.')

    parser.add_argument('--preview', action='store_true', help='print a 24-bit ANSI preview of the render')
    parser.add_argument('--columns', type=int, default=80, help='terminal columns used by the preview')
    parser.add_argument('--timeout', type=float, default=None,
                        help='cancel the render after this many seconds')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def resolve_config(opt, parser: ArgumentParser) -> ExploreConfig:
    try:
        viewport = parse_viewport(opt.re_min, opt.re_max, opt.im_min, opt.im_max)
    except ViewportParseError as exc:
        parser.error(str(exc))
    except ConfigurationError as exc:
        parser.error(str(exc))

    try:
        grid = Grid(opt.width, opt.height).validate()
        if opt.focus is not None:
            focus_params = RenderParameters(viewport=viewport, grid=grid, coordinates=opt.coordinates)
            viewport = recenter(viewport, sampling_metadata(focus_params), opt.focus[0], opt.focus[1])
        if opt.zoom is not None:
            viewport = apply_zoom(viewport, opt.zoom)
        params = RenderParameters(
            viewport=viewport,
            grid=grid,
            max_iterations=opt.max_iterations,
            coordinates=opt.coordinates,
        )
    except (ConfigurationError, IndexError) as exc:
        parser.error(str(exc))

    if opt.inside_color is not None and opt.colormap is None:
        parser.error("--inside-color requires --colormap.")
    if opt.invert and opt.colormap is None:
        parser.error("--invert requires --colormap.")

    palette = None
    if opt.colormap is not None:
        inside = IN_SET_COLOR
        if opt.inside_color is not None:
            try:
                inside = parse_hex_color(opt.inside_color)
            except ValueError as exc:
                parser.error(f"Invalid --inside-color '{opt.inside_color}': {exc}")
        try:
            palette = ColormapPalette(opt.colormap, inside_color=inside, invert=bool(opt.invert))
        except ConfigurationError as exc:
            parser.error(str(exc))

    if opt.columns <= 0:
        parser.error("--columns must be positive.")
    if opt.timeout is not None and opt.timeout <= 0:
        parser.error("--timeout must be positive.")

    return ExploreConfig(
        params=params,
        backend=opt.backend,
        palette=palette,
        preview=bool(opt.preview),
        columns=opt.columns,
        timeout=opt.timeout,
    )


def ansi_preview(image: PIL.Image.Image, columns: int) -> str:
    """Render ``image`` as lines of half-block characters with 24-bit colours."""

    columns = min(columns, image.width)
    rows = max(1, int(round(image.height * columns / image.width)))
    rows += rows % 2
    small = image.resize((columns, rows), PIL.Image.Resampling.NEAREST)
    pixels = np.asarray(small)

    lines = []
    for top in range(0, rows, 2):
        cells = []
        for col in range(columns):
            fr, fg, fb = pixels[top, col]
            br, bg, bb = pixels[top + 1, col]
            cells.append(f"\033[38;2;{fr};{fg};{fb}m\033[48;2;{br};{bg};{bb}m▀")
        lines.append("".join(cells) + "\033[0m")
    return "\n".join(lines)


def summarize(params: RenderParameters, iterations: np.ndarray, metadata, elapsed: float) -> list[str]:
    viewport = params.viewport
    inside = int(np.count_nonzero(iterations == params.max_iterations))
    total = iterations.size
    return [
        f"Viewport: re [{viewport.re_min:.6g}, {viewport.re_max:.6g}], im [{viewport.im_min:.6g}, {viewport.im_max:.6g}]",
        f"Grid: {metadata.width}x{metadata.height}, max iterations {params.max_iterations}, coordinates {metadata.coordinates}",
        f"Precision: {metadata.precision:.6g} per pixel",
        f"Rendered extent: re [{metadata.re_min:.6g}, {metadata.re_last:.6g}], im [{metadata.im_min:.6g}, {metadata.im_last:.6g}]",
        f"In set: {inside} of {total} pixels ({100.0 * inside / total:.2f}%)",
        f"Escape iterations: min {int(iterations.min())}, max {int(iterations.max())}, mean {float(iterations.mean()):.2f}",
        f"Elapsed: {elapsed:.2f}s",
    ]


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    config = resolve_config(opt, parser)
    params = config.params

    device = None
    if config.backend == "tensorflow":
        import tensorflow as tf

        from mandelview.kernels import default_device

        if not VERBOSE:
            tf.get_logger().setLevel("ERROR")
        log("TensorFlow version: %s" % tf.__version__)
        device = default_device()
        log("Rendering on %s" % device)

    log("Window size: {0}x{1}".format(
        params.grid.width + 2 * CANVAS_MARGIN, params.grid.height + 2 * CANVAS_MARGIN))

    cancel = threading.Event()
    timer = None
    if config.timeout is not None:
        timer = threading.Timer(config.timeout, cancel.set)
        timer.daemon = True
        timer.start()

    start = time.perf_counter()
    try:
        result = render_frame(params, backend=config.backend, cancel=cancel, device=device)
    except RenderCancelled:
        print(f"Render cancelled after {config.timeout}s.", file=sys.stderr)
        return 1
    finally:
        if timer is not None:
            timer.cancel()
    elapsed = time.perf_counter() - start

    for line in summarize(params, result.iterations, result.metadata, elapsed):
        print(line)

    if config.preview:
        colors = colorize(result.iterations, params.max_iterations, config.palette)
        print(ansi_preview(to_image(colors), config.columns))

    return 0


if __name__ == '__main__':
    sys.exit(main())
