"""
Grid evaluation driver.

Splits the rows of a viewport into disjoint contiguous bands and evaluates
each band on a worker thread. The band kernels are compiled with
nogil=True, so the workers run truly in parallel. Every band writes only
its own rows of the shared output arrays; no locking is involved and the
result is identical for any number of workers.

Usage:
    renderer = MandelbrotRenderer(config)
    rgba = renderer.render()
"""

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from .colormaps import apply_palette_band
from .compute import EscapeGrid, Evaluator, check_parameters, compute_escape_band, warmup_jit


logger = logging.getLogger(__name__)


def default_workers():
    return os.cpu_count() or 1


def partition_rows(height, workers):
    """
    Split rows 0..height into at most `workers` contiguous bands.

    Band sizes differ by at most one row. Empty bands are never produced.

    Returns:
        list of (row_start, row_stop) tuples, in order

    Raises:
        ValueError for a non-positive height or worker count
    """
    if height <= 0:
        raise ValueError(f"height must be positive, got {height}")
    if workers <= 0:
        raise ValueError(f"workers must be positive, got {workers}")
    count = min(workers, height)
    base, extra = divmod(height, count)
    bands = []
    start = 0
    for i in range(count):
        stop = start + base + (1 if i < extra else 0)
        bands.append((start, stop))
        start = stop

    # Bands must tile the rows exactly: contiguous, non-overlapping, complete
    assert bands[0][0] == 0 and bands[-1][1] == height
    assert all(a[1] == b[0] for a, b in zip(bands, bands[1:]))
    assert all(lo < hi for lo, hi in bands)
    return bands


def _run_bands(bands, task, workers):
    """Run task(row_start, row_stop) for every band and wait for all of them."""
    if workers == 1 or len(bands) == 1:
        for row_start, row_stop in bands:
            task(row_start, row_stop)
        return
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="escapetime") as pool:
        futures = [pool.submit(task, row_start, row_stop) for row_start, row_stop in bands]
        # result() re-raises the first band failure
        for future in futures:
            future.result()


def _resolve_workers(workers):
    if workers is None:
        return default_workers()
    if isinstance(workers, bool) or not isinstance(workers, int) or workers <= 0:
        raise ValueError(f"workers must be a positive integer, got {workers!r}")
    return workers


def compute_escape_grid(viewport, max_iterations, escape_radius_squared,
                        evaluator=Evaluator.OPTIMIZED, workers=None):
    """
    Evaluate every pixel of a viewport.

    Args:
        viewport: Viewport to sample
        max_iterations: Iteration cap, >= 0
        escape_radius_squared: Squared escape radius
        evaluator: Evaluator, id or name
        workers: Number of worker threads (default: one per CPU)

    Returns:
        EscapeGrid
    """
    max_iterations, escape_radius_squared = check_parameters(max_iterations, escape_radius_squared)
    evaluator_id = int(Evaluator.parse(evaluator))
    workers = _resolve_workers(workers)

    height, width = viewport.height, viewport.width
    iterations = np.empty((height, width), dtype=np.int32)
    smooth = np.empty((height, width), dtype=np.float64)
    escaped = np.empty((height, width), dtype=np.bool_)
    center = viewport.center

    def task(row_start, row_stop):
        compute_escape_band(center.real, center.imag, viewport.scale, width, height,
                            row_start, row_stop, max_iterations, escape_radius_squared,
                            evaluator_id, iterations, smooth, escaped)

    _run_bands(partition_rows(height, workers), task, workers)
    return EscapeGrid(iterations, smooth, escaped, max_iterations)


def render(viewport, max_iterations, escape_radius_squared, evaluator, palette,
           workers=None, smooth=True):
    """
    Render a viewport to an RGBA pixel buffer.

    Each band is evaluated and colored by the same worker, so the escape
    data never crosses threads.

    Args:
        viewport: Viewport to render
        max_iterations: Iteration cap, >= 0
        escape_radius_squared: Squared escape radius, conventionally 4.0
        evaluator: Evaluator, id or name
        palette: Palette
        workers: Number of worker threads (default: one per CPU)
        smooth: Color by fractional iteration counts

    Returns:
        (height, width, 4) uint8 array; only returned once every row is done
    """
    max_iterations, escape_radius_squared = check_parameters(max_iterations, escape_radius_squared)
    evaluator_id = int(Evaluator.parse(evaluator))
    workers = _resolve_workers(workers)

    height, width = viewport.height, viewport.width
    iterations = np.empty((height, width), dtype=np.int32)
    values = np.empty((height, width), dtype=np.float64)
    escaped = np.empty((height, width), dtype=np.bool_)
    out = np.empty((height, width, 4), dtype=np.uint8)
    center = viewport.center
    palette_args = palette.kernel_args()

    def task(row_start, row_stop):
        compute_escape_band(center.real, center.imag, viewport.scale, width, height,
                            row_start, row_stop, max_iterations, escape_radius_squared,
                            evaluator_id, iterations, values, escaped)
        if not smooth:
            values[row_start:row_stop] = iterations[row_start:row_stop]
        apply_palette_band(values, escaped, max_iterations, *palette_args,
                           row_start, row_stop, out)

    _run_bands(partition_rows(height, workers), task, workers)
    return out


class MandelbrotRenderer:
    """
    Renders viewports with the settings of one RenderConfig.

    Attributes:
        config: The validated RenderConfig
        workers: Resolved worker count
        last_elapsed: Seconds spent in the most recent render
    """

    def __init__(self, config):
        self.config = config.validate()
        self.evaluator = config.evaluator_choice()
        self.palette = config.palette_choice()
        self.workers = _resolve_workers(config.workers)
        self.last_elapsed = None

    def warmup(self):
        """Compile the kernels before the first real render."""
        t0 = time.perf_counter()
        warmup_jit()
        self.render(self.config.viewport().resized(2, 2))
        logger.debug("JIT warmup took %.3fs", time.perf_counter() - t0)

    def render(self, viewport=None):
        """
        Render a viewport (default: the configured one).

        Returns:
            (height, width, 4) uint8 RGBA array
        """
        if viewport is None:
            viewport = self.config.viewport()
        t0 = time.perf_counter()
        rgba = render(
            viewport,
            self.config.max_iterations,
            self.config.escape_radius_squared,
            self.evaluator,
            self.palette,
            workers=self.workers,
            smooth=self.config.smooth,
        )
        self.last_elapsed = time.perf_counter() - t0
        logger.info("Compute time: %.3fs (%dx%d, %d workers, %s)",
                    self.last_elapsed, viewport.width, viewport.height,
                    self.workers, self.evaluator.name.lower())
        return rgba

    def escape_grid(self, viewport=None):
        """Raw escape data for a viewport (default: the configured one)."""
        if viewport is None:
            viewport = self.config.viewport()
        return compute_escape_grid(
            viewport,
            self.config.max_iterations,
            self.config.escape_radius_squared,
            self.evaluator,
            workers=self.workers,
        )
