from __future__ import annotations

"""Rendering sink: draw an index raster with its palette and a colour legend."""

import os
from typing import Optional, Sequence, Tuple

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
from matplotlib.colors import LinearSegmentedColormap  # noqa: E402

from vegindx.core.logger import Logger  # noqa: E402
from vegindx.indices.evaluator import IndexResult  # noqa: E402

logger = Logger.get_logger(__name__)

# Colour used for NaN / infinite pixels
NO_DATA_COLOR = (0.0, 0.0, 0.0, 0.0)


def resolve_display_range(result: IndexResult) -> Tuple[float, float]:
    """
    Return the stretch used to draw ``result``.

    A fixed range from the index definition is used verbatim; otherwise the
    min/max of the finite pixels. Rasters without a finite pixel fall back
    to (0, 1), and a flat raster is widened by 0.5 on each side.
    """
    if result.display_range is not None:
        return result.display_range
    finite = result.raster[np.isfinite(result.raster)]
    if finite.size == 0:
        return (0.0, 1.0)
    lo, hi = float(finite.min()), float(finite.max())
    if lo == hi:
        return (lo - 0.5, hi + 0.5)
    return (lo, hi)


def build_colormap(palette: Sequence[str], name: str = "index") -> LinearSegmentedColormap:
    """Linear ramp through ``palette``; non-finite pixels render transparent."""
    if len(palette) < 2:
        raise ValueError("A palette needs at least two colours")
    cmap = LinearSegmentedColormap.from_list(name, list(palette))
    cmap.set_bad(NO_DATA_COLOR)
    return cmap


def render_png(
    result: IndexResult,
    output_path: str,
    title: Optional[str] = None,
    legend: bool = True,
    dpi: int = 150,
) -> str:
    """
    Save ``result`` as a PNG map with an optional colour-bar legend.

    Args:
        result: index raster with palette and display range.
        output_path: destination PNG path.
        title: figure title (defaults to the index name).
        legend: draw a colour bar labelled with the index name.
        dpi: output resolution.

    Returns:
        The written path.
    """
    vmin, vmax = resolve_display_range(result)
    cmap = build_colormap(result.palette, name=result.name)
    data = np.ma.masked_invalid(result.raster)

    fig, ax = plt.subplots(figsize=(8, 6))
    im = ax.imshow(data, cmap=cmap, vmin=vmin, vmax=vmax, interpolation="nearest")
    ax.set_title(title or result.name)
    ax.set_axis_off()
    if legend:
        cbar = fig.colorbar(im, ax=ax, fraction=0.046, pad=0.04)
        cbar.set_label(result.name)

    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    fig.tight_layout()
    fig.savefig(output_path, dpi=dpi)
    plt.close(fig)
    logger.info("Rendered %s to %s (range %.3f..%.3f)", result.name, output_path, vmin, vmax)
    return output_path
