"""
Module `indices.evaluator` applies an :class:`IndexDefinition` to a composite.

Floating-point degeneracies are part of the output, not errors: a zero
denominator yields a signed infinity, 0/0 and the square root of a negative
number yield NaN. Rendering and export decide how to show those pixels.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
import logging
from typing import Any, Optional, Tuple

import numpy as np

from vegindx.core.logger import Logger
from .errors import MissingBand
from .registry import IndexDefinition

logger = Logger.get_logger(__name__)


@dataclass(frozen=True)
class IndexResult:
    """Single-band output raster plus the display hints of its index."""

    name: str
    raster: np.ndarray
    display_range: Optional[Tuple[float, float]]
    palette: Tuple[str, ...]
    transform: Any = None
    crs: Any = None

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.raster.shape

    def finite_fraction(self) -> float:
        """Share of pixels holding a finite value (0.0 for an empty raster)."""
        if self.raster.size == 0:
            return 0.0
        return float(np.isfinite(self.raster).sum()) / self.raster.size


def check_bands(definition: IndexDefinition, composite) -> None:
    """Raise :class:`MissingBand` for the first required band the composite lacks."""
    available = composite.bands
    for band in definition.required_bands:
        if band not in available:
            raise MissingBand(band, definition.name)


def _apply(definition: IndexDefinition, values: dict) -> np.ndarray:
    shape = np.broadcast_shapes(*(v.shape for v in values.values()))
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        out = definition.formula(values)
    # Constant formulas still need the shape of their inputs.
    return np.broadcast_to(np.asarray(out, dtype=np.float64), shape)


def evaluate(
    definition: IndexDefinition,
    composite,
    *,
    block_rows: Optional[int] = None,
    max_workers: Optional[int] = None,
    log: Optional[logging.Logger] = None,
) -> IndexResult:
    """
    Compute ``definition`` over every pixel of ``composite``.

    Args:
        definition: index to compute.
        composite: object exposing ``bands`` (set of SpectralBand) and
            ``band(SpectralBand) -> ndarray``; ``transform``/``crs`` are
            carried over when present.
        block_rows: optional number of raster rows per block. Blocks are
            evaluated concurrently; the output is identical to a single pass.
        max_workers: thread count for block evaluation.

    Returns:
        IndexResult with a read-only float64 raster shaped like the composite.

    Raises:
        MissingBand: before any pixel is computed, if a required band is absent.
    """
    log = log or logger
    if block_rows is not None and block_rows < 1:
        raise ValueError(f"block_rows must be positive, got {block_rows}")
    check_bands(definition, composite)

    values = {
        band: np.asarray(composite.band(band), dtype=np.float64)
        for band in definition.required_bands
    }
    shape = np.broadcast_shapes(*(v.shape for v in values.values()))

    if block_rows is None or len(shape) < 2 or shape[0] <= block_rows:
        raster = _apply(definition, values)
    else:
        starts = range(0, shape[0], block_rows)

        def _block(start: int) -> np.ndarray:
            rows = slice(start, start + block_rows)
            return _apply(definition, {b: v[rows] for b, v in values.items()})

        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            raster = np.concatenate(list(pool.map(_block, starts)), axis=0)

    raster = np.array(raster, dtype=np.float64)
    raster.setflags(write=False)

    result = IndexResult(
        name=definition.name,
        raster=raster,
        display_range=definition.display_range,
        palette=definition.palette,
        transform=getattr(composite, "transform", None),
        crs=getattr(composite, "crs", None),
    )
    log.debug(
        "Computed %s over %s pixels (%.1f%% finite)",
        definition.name,
        raster.size,
        100.0 * result.finite_fraction(),
    )
    return result
