from __future__ import annotations

"""Read-only multi-band raster keyed by canonical spectral band."""

from typing import Any, Iterator, Mapping, Optional, Sequence

import numpy as np
import rasterio
from rasterio.io import MemoryFile

from vegindx.core.logger import Logger
from vegindx.indices.bands import CANONICAL_BANDS, SpectralBand
from vegindx.indices.errors import MissingBand
from .sensorspec import SensorSpec

logger = Logger.get_logger(__name__)


class Composite:
    """
    Cloud-free composite over one spatial extent.

    Band arrays are copied on construction and frozen, so neither the
    evaluator nor the caller can alter a composite once built.
    """

    def __init__(
        self,
        bands: Mapping[SpectralBand | str, Any],
        transform: Any = None,
        crs: Any = None,
    ) -> None:
        if not bands:
            raise ValueError("A composite needs at least one band")
        arrays: dict[SpectralBand, np.ndarray] = {}
        shape = None
        for key, values in bands.items():
            band = SpectralBand.parse(key)
            arr = np.array(values, dtype=np.float64)
            if arr.ndim == 0:
                arr = arr.reshape(1, 1)
            if arr.ndim != 2:
                raise ValueError(
                    f"Band {band.name} must be 2-D, got shape {arr.shape}"
                )
            if shape is None:
                shape = arr.shape
            elif arr.shape != shape:
                raise ValueError(
                    f"Band {band.name} has shape {arr.shape}, expected {shape}"
                )
            arr.setflags(write=False)
            arrays[band] = arr
        self._arrays = arrays
        self._shape = shape
        self.transform = transform
        self.crs = crs

    @classmethod
    def from_arrays(
        cls,
        bands: Mapping[SpectralBand | str, Any],
        transform: Any = None,
        crs: Any = None,
    ) -> "Composite":
        return cls(bands, transform=transform, crs=crs)

    @classmethod
    def from_dataset(
        cls,
        src,
        sensor: Optional[SensorSpec] = None,
        band_order: Optional[Sequence[SpectralBand | str]] = None,
    ) -> "Composite":
        """
        Build a composite from an open rasterio dataset.

        Bands are identified by ``band_order`` when given, otherwise by the
        dataset's band descriptions translated through ``sensor``, otherwise
        by canonical order.
        """
        if band_order is not None:
            order = [SpectralBand.parse(b) for b in band_order]
        else:
            order = _bands_from_descriptions(src.descriptions, sensor)
        if len(order) > src.count:
            raise ValueError(
                f"Raster has {src.count} bands but {len(order)} were named"
            )
        scale = sensor.scale_factor if sensor and sensor.scale_factor else None
        arrays = {}
        for idx, band in enumerate(order, start=1):
            data = src.read(idx, masked=True).astype(np.float64)
            arr = data.filled(np.nan)
            if scale is not None:
                arr = arr * scale
            arrays[band] = arr
        logger.debug(
            "Read composite %dx%d with bands %s",
            src.height,
            src.width,
            [b.name for b in order],
        )
        return cls(arrays, transform=src.transform, crs=src.crs)

    @classmethod
    def from_geotiff(
        cls,
        path: str,
        sensor: Optional[SensorSpec] = None,
        band_order: Optional[Sequence[SpectralBand | str]] = None,
    ) -> "Composite":
        with rasterio.open(path) as src:
            return cls.from_dataset(src, sensor=sensor, band_order=band_order)

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        sensor: Optional[SensorSpec] = None,
        band_order: Optional[Sequence[SpectralBand | str]] = None,
    ) -> "Composite":
        with MemoryFile(data) as memfile:
            with memfile.open() as src:
                return cls.from_dataset(src, sensor=sensor, band_order=band_order)

    @property
    def bands(self) -> frozenset[SpectralBand]:
        return frozenset(self._arrays)

    @property
    def shape(self) -> tuple[int, int]:
        return self._shape

    def band(self, band: SpectralBand | str) -> np.ndarray:
        """Return the (read-only) pixel array of *band*."""
        band = SpectralBand.parse(band)
        try:
            return self._arrays[band]
        except KeyError:
            raise MissingBand(band) from None

    def __contains__(self, band: object) -> bool:
        try:
            return SpectralBand.parse(band) in self._arrays
        except ValueError:
            return False

    def __iter__(self) -> Iterator[SpectralBand]:
        return (b for b in CANONICAL_BANDS if b in self._arrays)

    def __repr__(self) -> str:
        names = ",".join(b.name for b in self)
        return f"Composite(bands=[{names}], shape={self._shape})"


def _bands_from_descriptions(
    descriptions: Sequence[Optional[str]], sensor: Optional[SensorSpec]
) -> list[SpectralBand]:
    names = list(descriptions or ())
    if names and all(names):
        order = []
        for name in names:
            band = sensor.band_for_code(name) if sensor else None
            if band is None:
                try:
                    band = SpectralBand.parse(name)
                except ValueError:
                    band = None
            if band is None:
                break
            order.append(band)
        else:
            return order
    # No usable descriptions: assume canonical order.
    return list(CANONICAL_BANDS[: len(names) or len(CANONICAL_BANDS)])
