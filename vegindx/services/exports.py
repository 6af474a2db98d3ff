from __future__ import annotations

"""Export sink writing index rasters to GeoTIFF."""

from dataclasses import dataclass
import logging
from typing import Optional

import numpy as np
from rasterio.io import MemoryFile
from rasterio.transform import from_origin

from vegindx.core.storage import LocalFS, StorageAdapter
from vegindx.indices.evaluator import IndexResult
from .base import BaseService
from .raster_utils import convert_to_cog

SUPPORTED_FORMATS = {"geotiff": "GTiff"}


@dataclass
class ExportRequest:
    """Destination descriptor for one index export."""

    output: str
    file_format: str = "GeoTIFF"
    scale: float = 30
    description: Optional[str] = None
    cog: bool = True
    max_pixels: float = 1e9

    def describe(self, index: str) -> str:
        return self.description or f"Exported_{index}"


class GeoTiffExporter(BaseService):
    """
    Write an :class:`IndexResult` as a single-band float32 GeoTIFF.

    NaN and infinite pixels are written unchanged; NaN is declared as the
    band's nodata value so GIS tools mask it.
    """

    def __init__(
        self,
        storage: StorageAdapter | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(logger)
        self.storage = storage or LocalFS()

    def _profile(self, result: IndexResult, request: ExportRequest) -> dict:
        height, width = result.raster.shape
        transform = result.transform
        if transform is None:
            # Ungeoreferenced rasters get a unit grid at the requested scale.
            transform = from_origin(0, 0, request.scale, request.scale)
        profile = {
            "driver": SUPPORTED_FORMATS[request.file_format.lower()],
            "height": height,
            "width": width,
            "count": 1,
            "dtype": "float32",
            "nodata": float("nan"),
            "transform": transform,
        }
        if result.crs is not None:
            profile["crs"] = result.crs
        return profile

    def to_bytes(self, result: IndexResult, request: ExportRequest) -> bytes:
        """Encode ``result`` in the requested format and return the file bytes."""
        if request.file_format.lower() not in SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported export format '{request.file_format}'. "
                f"Choose from: GeoTIFF"
            )
        if result.raster.ndim != 2:
            raise ValueError(
                f"Expected a 2-D raster for {result.name}, got {result.raster.shape}"
            )
        if result.raster.size > request.max_pixels:
            raise ValueError(
                f"{result.name} raster has {result.raster.size} pixels, "
                f"above max_pixels={request.max_pixels:g}"
            )
        profile = self._profile(result, request)
        with MemoryFile() as memfile:
            with memfile.open(**profile) as dst:
                dst.write(result.raster.astype(np.float32), 1)
                dst.set_band_description(1, result.name)
                dst.update_tags(
                    INDEX=result.name,
                    DESCRIPTION=request.describe(result.name),
                    PALETTE=",".join(result.palette),
                )
            return memfile.read()

    def submit(self, result: IndexResult, request: ExportRequest) -> str:
        """Write ``result`` to ``request.output`` and return the written URI."""
        data = self.to_bytes(result, request)
        uri = self.storage.write_bytes(request.output, data)
        if request.cog:
            convert_to_cog(uri, storage=self.storage, logger=self.logger)
        self.logger.info(
            "Export %s written to %s", request.describe(result.name), uri
        )
        return uri
