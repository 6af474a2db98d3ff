"""
Module `indices.bands` defines the canonical spectral bands that index
formulas are written against. Sensor-specific band codes (e.g. Landsat 8
``B5`` for near-infrared) are mapped onto these by
:class:`vegindx.ingestion.sensorspec.SensorSpec`.
"""

from __future__ import annotations

from enum import Enum


class SpectralBand(Enum):
    """One channel of a multi-band optical raster."""

    BLUE = ("B", "blue")
    GREEN = ("G", "green")
    RED = ("R", "red")
    NIR = ("N", "nir")
    SWIR1 = ("S1", "swir1")
    SWIR2 = ("S2", "swir2")

    def __init__(self, code: str, alias: str) -> None:
        self.code = code
        self.alias = alias

    def __str__(self) -> str:
        return self.name

    @classmethod
    def parse(cls, value: "SpectralBand | str") -> "SpectralBand":
        """Return the band named by a member, its name, alias or short code."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            token = value.strip().upper()
            for band in cls:
                if token in (band.name, band.code, band.alias.upper()):
                    return band
        raise ValueError(
            f"Unknown spectral band {value!r}. Choose from: "
            f"{[b.name for b in cls]}"
        )


CANONICAL_BANDS: tuple[SpectralBand, ...] = tuple(SpectralBand)
