"""
Command line application.

Parses options, renders one image with MandelbrotRenderer and shows the
finished buffer in a static pygame window. The window only presents the
pixels; ESC or closing the window quits.
"""

import logging
import sys
from argparse import ArgumentParser

import numpy as np

from .colormaps import list_palette_names
from .compute import list_evaluator_names
from .config import ConfigurationError, load_config
from .log import configure_logging
from .renderer import MandelbrotRenderer


logger = logging.getLogger(__name__)


def build_parser():
    parser = ArgumentParser(prog="escapetime",
                            description="Render the Mandelbrot set and related escape-time fractals.")
    parser.add_argument('--width', type=int,
                        help='image width in pixels')
    parser.add_argument('--height', type=int,
                        help='image height in pixels')
    parser.add_argument('--center-re', type=float,
                        help='real part of the image center')
    parser.add_argument('--center-im', type=float,
                        help='imaginary part of the image center')
    parser.add_argument('--scale', type=float,
                        help='complex-plane units per pixel')
    parser.add_argument('--max-iterations', type=int,
                        help='iteration cap; more detail, more cost')
    parser.add_argument('--escape-radius-squared', type=float,
                        help='squared escape radius (default 4.0)')
    parser.add_argument('--evaluator', choices=list_evaluator_names(),
                        help='escape-time algorithm')
    parser.add_argument('--palette', choices=list_palette_names(),
                        help='color palette')
    parser.add_argument('--no-smooth', dest='smooth', action='store_false', default=None,
                        help='color by integer iteration counts')
    parser.add_argument('--workers', type=int,
                        help='worker threads (default: one per CPU)')
    parser.add_argument('--settings', type=str, default=None,
                        help='JSON settings file layered over the defaults')
    parser.add_argument('--no-window', dest='window', action='store_false',
                        help='render and report timing without opening a window')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='enable debug logging')
    return parser


def parse_args(argv=None):
    return build_parser().parse_args(argv)


def config_overrides(args):
    """Options given on the command line, keyed like RenderConfig fields."""
    return {
        "width": args.width,
        "height": args.height,
        "center_re": args.center_re,
        "center_im": args.center_im,
        "scale": args.scale,
        "max_iterations": args.max_iterations,
        "escape_radius_squared": args.escape_radius_squared,
        "evaluator": args.evaluator,
        "palette": args.palette,
        "smooth": args.smooth,
        "workers": args.workers,
    }


def show(rgba, title="Mandelbrot"):
    """
    Display a finished RGBA buffer until ESC or window close.

    Args:
        rgba: (height, width, 4) uint8 array
        title: Window caption
    """
    import pygame

    height, width = rgba.shape[:2]
    pygame.init()
    try:
        screen = pygame.display.set_mode((width, height))
        pygame.display.set_caption(title)
        # pygame surfaces are indexed (x, y)
        surface = pygame.surfarray.make_surface(np.ascontiguousarray(rgba[:, :, :3].swapaxes(0, 1)))
        clock = pygame.time.Clock()
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False
            screen.blit(surface, (0, 0))
            pygame.display.flip()
            clock.tick(30)
    finally:
        pygame.quit()


def main(argv=None):
    """
    Entry point.

    Returns:
        Process exit status
    """
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(args.settings, config_overrides(args))
    except ConfigurationError as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    renderer = MandelbrotRenderer(config)
    logger.info("Running on %d workers", renderer.workers)
    renderer.warmup()
    rgba = renderer.render()

    if args.window:
        logger.info("Press ESC to exit")
        show(rgba, title=f"Mandelbrot ({renderer.evaluator.name.lower()})")
    return 0


def run(argv=None):
    try:
        sys.exit(main(argv))
    except KeyboardInterrupt:
        sys.exit(130)
