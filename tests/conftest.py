# pylint: disable=missing-module-docstring,missing-function-docstring,redefined-outer-name
import numpy as np
import pytest
import rasterio
from rasterio.transform import from_origin

from vegindx.indices.bands import SpectralBand
from vegindx.ingestion.composite import Composite

# Reflectance of one vegetated pixel
PIXEL = {
    SpectralBand.BLUE: 0.05,
    SpectralBand.GREEN: 0.08,
    SpectralBand.RED: 0.10,
    SpectralBand.NIR: 0.40,
    SpectralBand.SWIR1: 0.20,
    SpectralBand.SWIR2: 0.15,
}

LANDSAT_CODES = {
    SpectralBand.BLUE: "B2",
    SpectralBand.GREEN: "B3",
    SpectralBand.RED: "B4",
    SpectralBand.NIR: "B5",
    SpectralBand.SWIR1: "B6",
    SpectralBand.SWIR2: "B7",
}


@pytest.fixture
def pixel_values():
    return dict(PIXEL)


@pytest.fixture
def make_pixel():
    """Factory for single-pixel composites."""

    def _make(**values):
        return Composite.from_arrays(values)

    return _make


@pytest.fixture
def full_pixel():
    return Composite.from_arrays(PIXEL)


@pytest.fixture
def scene():
    """Six-band 12x9 composite with a georeference."""
    rng = np.random.default_rng(42)
    bands = {band: rng.uniform(0.01, 0.6, size=(12, 9)) for band in SpectralBand}
    return Composite.from_arrays(
        bands, transform=from_origin(10.0, 45.0, 0.0003, 0.0003), crs="EPSG:4326"
    )


@pytest.fixture
def landsat_tif(tmp_path):
    """Write a 4x5 six-band GeoTIFF labelled with Landsat 8 band codes."""
    path = tmp_path / "composite.tif"
    profile = {
        "driver": "GTiff",
        "height": 4,
        "width": 5,
        "count": 6,
        "dtype": "float32",
        "transform": from_origin(30.0, 40.0, 0.00027, 0.00027),
        "crs": "EPSG:4326",
    }
    with rasterio.open(path, "w", **profile) as dst:
        for idx, band in enumerate(SpectralBand, start=1):
            dst.write(np.full((4, 5), PIXEL[band], dtype="float32"), idx)
            dst.set_band_description(idx, LANDSAT_CODES[band])
    return path
