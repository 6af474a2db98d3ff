from __future__ import annotations

"""Utility helpers for raster operations."""

from typing import Optional
import logging

from rasterio.enums import Resampling
from rasterio.errors import RasterioError

from vegindx.core.storage import StorageAdapter, LocalFS

OVERVIEW_LEVELS = [2, 4, 8, 16]
TILE_SIZE = 512


def convert_to_cog(
    path: str,
    storage: StorageAdapter,
    logger: Optional[logging.Logger] = None,
) -> bool:
    """Rewrite *path* GeoTIFF in place as a Cloud Optimized GeoTIFF.

    Tags and band descriptions are carried over; overviews are only built for
    levels that fit inside the raster. Returns ``False`` (and logs a warning)
    when ``storage`` is not ``LocalFS`` or the conversion fails.
    """
    logger = logger or logging.getLogger(__name__)
    if not isinstance(storage, LocalFS):
        logger.warning("COG conversion skipped for non-local storage: %s", path)
        return False

    try:
        with storage.open_raster(path) as src:
            profile = src.profile
            data = src.read()
            tags = src.tags()
            descriptions = src.descriptions

        profile.update(driver="GTiff", compress="deflate")
        smallest = min(data.shape[1], data.shape[2])
        if smallest >= TILE_SIZE:
            profile.update(tiled=True, blockxsize=TILE_SIZE, blockysize=TILE_SIZE)
        else:
            profile.update(tiled=False)
            profile.pop("blockxsize", None)
            profile.pop("blockysize", None)
        levels = [f for f in OVERVIEW_LEVELS if smallest // f >= 1]

        with storage.open_raster(path, "w", **profile) as dst:
            dst.write(data)
            dst.update_tags(**tags)
            for idx, desc in enumerate(descriptions, start=1):
                if desc:
                    dst.set_band_description(idx, desc)
            if levels:
                dst.build_overviews(levels, Resampling.nearest)
                dst.update_tags(OVR_RESAMPLING="NEAREST")
        logger.info("Converted to COG: %s", path)
        return True
    except RasterioError as cog_err:
        logger.warning("COG conversion failed for %s: %s", path, cog_err)
        return False
