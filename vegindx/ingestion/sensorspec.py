"""
Module `ingestion.sensorspec` defines the SensorSpec class, which maps the
canonical spectral bands onto a collection's band codes and records how a
cloud-free composite is built for it, including the per-scene cloud mask
applied before median compositing.
"""

import json
import os
from pathlib import Path
from typing import Iterable, Optional

import ee

from vegindx.indices.bands import CANONICAL_BANDS, SpectralBand

CLOUD_MASK_METHODS = ("none", "s2_scl", "qa60")

_DEFAULT_SPECS = (
    Path(__file__).resolve().parent.parent / "resources" / "sensor_specs.json"
)


class SensorSpec:
    """
    Holds metadata for a sensor (band codes, collection ID, compositing).
    """

    _registry: Optional[dict] = None

    def __init__(
        self,
        collection_id: str,
        bands: dict,
        native_resolution: int,
        composite_method: str = "landsat_simple",
        scale_factor: float | None = None,
        cloud_mask_method: str = "none",
        mask_band: str | None = None,
        scl_exclude: list[int] | None = None,
    ):
        self.collection_id = collection_id
        self.bands = {SpectralBand.parse(k).alias: v for k, v in bands.items()}
        self.native_resolution = native_resolution
        self.composite_method = composite_method
        self.scale_factor = scale_factor
        self.cloud_mask_method = cloud_mask_method.lower()
        if self.cloud_mask_method not in CLOUD_MASK_METHODS:
            raise ValueError(
                f"Unknown cloud_mask_method '{cloud_mask_method}' for {collection_id}. "
                f"Choose from: {list(CLOUD_MASK_METHODS)}"
            )
        self.mask_band = mask_band
        # Scene Classification codes to drop: cloud shadow, cloud medium/high, cirrus
        self.scl_exclude = scl_exclude or [3, 8, 9, 10]

    def __repr__(self) -> str:
        return f"SensorSpec({self.collection_id!r})"

    @property
    def available_bands(self) -> tuple[SpectralBand, ...]:
        """Canonical bands this sensor provides, in canonical order."""
        return tuple(b for b in CANONICAL_BANDS if b.alias in self.bands)

    def band_code(self, band: SpectralBand | str) -> str:
        """Return the collection band code (e.g. ``B5``) for a canonical band."""
        band = SpectralBand.parse(band)
        try:
            return self.bands[band.alias]
        except KeyError:
            raise ValueError(
                f"{self.collection_id} has no band mapped to {band.name}"
            ) from None

    def band_codes(self, bands: Iterable[SpectralBand | str]) -> list[str]:
        return [self.band_code(b) for b in bands]

    def band_for_code(self, code: str) -> SpectralBand | None:
        """Inverse of :meth:`band_code`; ``None`` for unmapped codes."""
        for alias, value in self.bands.items():
            if value == code:
                return SpectralBand.parse(alias)
        return None

    @property
    def masks_clouds(self) -> bool:
        return self.cloud_mask_method != "none"

    def cloud_mask(self, img: ee.Image) -> ee.Image:
        """
        Apply cloud mask based on this sensor's cloud_mask_method.
        Supports 's2_scl' (Scene Classification Layer) and 'qa60' (Sentinel-2
        opaque/cirrus bits); 'none' returns the image unchanged.
        """
        band = self.mask_band
        if self.cloud_mask_method == "s2_scl":
            scl = img.select(band or "SCL")
            mask = None
            for code in self.scl_exclude:
                cond = scl.neq(code)
                mask = cond if mask is None else mask.And(cond)
            return img.updateMask(mask)
        if self.cloud_mask_method == "qa60":
            qa = img.select(band or "QA60")
            # Bit 10: opaque clouds, bit 11: cirrus
            clear = qa.bitwiseAnd(1 << 10).eq(0).And(qa.bitwiseAnd(1 << 11).eq(0))
            return img.updateMask(clear)
        return img

    @classmethod
    def _load_registry(cls) -> dict:
        """Load sensor specs from resources/sensor_specs.json."""
        if cls._registry is None:
            spec_file = os.getenv("VEGINDX_SENSOR_SPECS") or _DEFAULT_SPECS
            with open(spec_file, "r", encoding="utf-8") as f:
                cls._registry = json.load(f)
        return cls._registry

    @classmethod
    def from_collection_id(cls, collection_id: str) -> "SensorSpec":
        """
        Factory method: create a SensorSpec from a collection ID by reading the registry.
        """
        registry = cls._load_registry()
        spec = registry.get(collection_id)
        if spec is None:
            raise ValueError(
                f"Collection ID '{collection_id}' not found in sensor_specs.json"
            )
        return cls(
            collection_id=collection_id,
            bands=spec["bands"],
            native_resolution=spec["native_resolution"],
            composite_method=spec.get("composite_method", "landsat_simple"),
            scale_factor=spec.get("scale_factor"),
            cloud_mask_method=spec.get("cloud_mask_method", "none"),
            mask_band=spec.get("mask_band"),
            scl_exclude=spec.get("scl_exclude"),
        )
