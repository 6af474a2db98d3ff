from __future__ import annotations

"""Earth Engine backed provider of cloud-free composites."""

from datetime import datetime
import logging
from typing import Optional, Sequence

import ee
import requests

from vegindx.core.logger import Logger
from vegindx.geo.aoi import AOI
from vegindx.indices.bands import CANONICAL_BANDS, SpectralBand
from .composite import Composite
from .eemanager import EarthEngineManager, ee_manager
from .sensorspec import SensorSpec

DATE_FMT = "%Y-%m-%d"
DEFAULT_COLLECTION = "LANDSAT/LC08/C02/T1"
# Earth Engine rejects getDownloadURL requests above this size
MAX_DOWNLOAD_BYTES = 50_331_648
# Composites are requested as float32
BYTES_PER_SAMPLE = 4


def validate_date_range(start: str, end: str) -> tuple[datetime, datetime]:
    """Parse ``YYYY-MM-DD`` strings and require ``start`` before ``end``."""
    parsed = []
    for label, value in (("start", start), ("end", end)):
        try:
            parsed.append(datetime.strptime(value, DATE_FMT))
        except (TypeError, ValueError):
            raise ValueError(
                f"Invalid {label} date {value!r}; expected YYYY-MM-DD"
            ) from None
    if parsed[0] >= parsed[1]:
        raise ValueError(f"Start date {start} must be before end date {end}")
    return parsed[0], parsed[1]


class EarthEngineCompositeProvider:
    """
    Build a single cloud-free composite for a region and date window and
    download it as a :class:`Composite`.

    Landsat collections are composited with
    ``ee.Algorithms.Landsat.simpleComposite`` (TOA reflectance as float,
    cloud-scored per pixel); other collections are cloud-masked per scene
    with the sensor's mask and reduced to a per-pixel median.
    """

    def __init__(
        self,
        sensor: Optional[SensorSpec] = None,
        ee_manager_instance: EarthEngineManager = ee_manager,
        scale: Optional[int] = None,
        timeout: int = 120,
        logger: Optional[logging.Logger] = None,
        max_pixels: Optional[float] = None,
    ) -> None:
        self.sensor = sensor or SensorSpec.from_collection_id(DEFAULT_COLLECTION)
        self.ee = ee_manager_instance
        self.scale = scale or self.sensor.native_resolution
        self.timeout = timeout
        self.max_pixels = max_pixels
        self.logger = logger or Logger.get_logger(__name__)

    def get_image(self, aoi: AOI, start: str, end: str) -> ee.Image:
        """Return the composite ``ee.Image`` clipped to ``aoi``."""
        validate_date_range(start, end)
        self.ee.initialize()
        region = aoi.ee_geometry()
        cloud_mask = self.sensor.cloud_mask if self.sensor.masks_clouds else None
        coll = self.ee.get_image_collection(
            self.sensor.collection_id, start, end, region, cloud_mask=cloud_mask
        )
        count = self.ee.safe_get_info(coll.size())
        if not count:
            raise ValueError(
                f"No {self.sensor.collection_id} scenes between {start} and {end} "
                "for the selected region"
            )
        self.logger.info(
            "Compositing %d scenes of %s (%s to %s)",
            count,
            self.sensor.collection_id,
            start,
            end,
        )
        if self.sensor.composite_method == "landsat_simple":
            img = ee.Algorithms.Landsat.simpleComposite(collection=coll, asFloat=True)
        else:
            img = coll.median()
        return img.clip(region)

    def check_download_size(self, aoi: AOI, n_bands: int) -> int:
        """
        Estimate the pixel count of a download over ``aoi`` and raise
        ``ValueError`` if it exceeds ``max_pixels`` or Earth Engine's
        request size limit.
        """
        pixels = aoi.estimated_pixels(self.scale)
        if self.max_pixels is not None and pixels > self.max_pixels:
            raise ValueError(
                f"Region covers ~{pixels} pixels at {self.scale} m, above "
                f"max_pixels={self.max_pixels:g}; use a coarser scale or a "
                "smaller region"
            )
        size = pixels * n_bands * BYTES_PER_SAMPLE
        if size > MAX_DOWNLOAD_BYTES:
            raise ValueError(
                f"Download of {n_bands} bands over ~{pixels} pixels at "
                f"{self.scale} m is ~{size} bytes, above the Earth Engine limit "
                f"of {MAX_DOWNLOAD_BYTES}; use a coarser scale or a smaller region"
            )
        return pixels

    def fetch(
        self,
        aoi: AOI,
        start: str,
        end: str,
        bands: Sequence[SpectralBand] = CANONICAL_BANDS,
    ) -> Composite:
        """Download the composite's ``bands`` over ``aoi`` at ``self.scale``."""
        codes = self.sensor.band_codes(bands)
        pixels = self.check_download_size(aoi, len(codes))
        img = self.get_image(aoi, start, end)
        url = img.select(codes).getDownloadURL(
            {"scale": self.scale, "region": aoi.ee_geometry(), "format": "GEO_TIFF"}
        )
        self.logger.info(
            "Downloading bands %s at %d m (~%d pixels)",
            codes,
            self.scale,
            pixels,
        )
        resp = requests.get(url, timeout=self.timeout)
        resp.raise_for_status()
        composite = Composite.from_bytes(
            resp.content, sensor=self.sensor, band_order=list(bands)
        )
        self.logger.info("Fetched %r", composite)
        return composite
