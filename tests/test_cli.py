# pylint: disable=missing-function-docstring
import json

import numpy as np
import pytest
import rasterio
import requests
from click.testing import CliRunner

from vegindx.core.cli import cli
from vegindx.ingestion.composite import Composite

SQUARE = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {"id": 1},
            "geometry": {
                "type": "Polygon",
                "coordinates": [[[0, 0], [0, 0.01], [0.01, 0.01], [0.01, 0], [0, 0]]],
            },
        }
    ],
}


def test_indices_list():
    result = CliRunner().invoke(cli, ["indices", "list"])
    assert result.exit_code == 0
    names = result.output.split()
    assert len(names) == 25
    assert names[0] == "NDVI"
    assert names[-1] == "WDRVI"


def test_indices_show():
    result = CliRunner().invoke(cli, ["indices", "show", "GVI"])
    assert result.exit_code == 0
    assert "SWIR2" in result.output
    assert "auto" in result.output

    ndvi = CliRunner().invoke(cli, ["indices", "show", "NDVI"])
    assert "-1 to 1" in ndvi.output


def test_indices_show_unknown():
    result = CliRunner().invoke(cli, ["indices", "show", "FOO"])
    assert result.exit_code == 1
    assert "not supported" in result.output


def test_compute_from_local_raster(landsat_tif, tmp_path):
    out = tmp_path / "ndvi.tif"
    png = tmp_path / "ndvi.png"
    result = CliRunner().invoke(
        cli,
        ["compute", str(landsat_tif), "--index", "NDVI", "-o", str(out), "--png", str(png)],
    )
    assert result.exit_code == 0, result.output
    assert png.exists()
    with rasterio.open(out) as src:
        assert np.allclose(src.read(1), 0.6)


def test_compute_uses_config_defaults(landsat_tif, tmp_path):
    cfg = tmp_path / "cfg.yaml"
    cfg.write_text(
        "default_index: SAVI\npalette: mine\npalettes:\n  mine: [white, red]\n"
    )
    out = tmp_path / "savi.tif"
    result = CliRunner().invoke(
        cli, ["--config", str(cfg), "compute", str(landsat_tif), "-o", str(out)]
    )
    assert result.exit_code == 0, result.output
    with rasterio.open(out) as src:
        assert src.tags()["INDEX"] == "SAVI"
        assert src.tags()["PALETTE"] == "white,red"


def test_compute_missing_band(landsat_tif, tmp_path):
    result = CliRunner().invoke(
        cli,
        [
            "compute",
            str(landsat_tif),
            "--index",
            "GVI",
            "--band-order",
            "B,G,R,N,S1",
            "-o",
            str(tmp_path / "gvi.tif"),
        ],
    )
    assert result.exit_code == 1
    assert "SWIR2" in result.output


def test_compute_rejects_unknown_index(landsat_tif, tmp_path):
    result = CliRunner().invoke(
        cli, ["compute", str(landsat_tif), "--index", "FOO", "-o", str(tmp_path / "x.tif")]
    )
    assert result.exit_code == 2


def test_fetch(monkeypatch, tmp_path, pixel_values):
    calls = {}

    class FakeProvider:
        def __init__(
            self,
            sensor=None,
            ee_manager_instance=None,
            scale=None,
            logger=None,
            max_pixels=None,
        ):
            calls["scale"] = scale
            calls["max_pixels"] = max_pixels
            calls["collection"] = sensor.collection_id

        def fetch(self, aoi, start, end, bands=()):
            calls["dates"] = (start, end)
            calls["bands"] = bands
            calls["bounds"] = aoi.bounds
            return Composite.from_arrays({b: pixel_values[b] for b in bands})

    monkeypatch.setattr("vegindx.core.cli.EarthEngineCompositeProvider", FakeProvider)
    monkeypatch.setattr(
        "vegindx.core.cli.EarthEngineManager", lambda project=None, logger=None: None
    )

    geojson = tmp_path / "roi.geojson"
    geojson.write_text(json.dumps(SQUARE))
    out = tmp_path / "msavi2.tif"
    result = CliRunner().invoke(
        cli,
        [
            "fetch",
            str(geojson),
            "--start",
            "2021-05-01",
            "--end",
            "2021-08-31",
            "--index",
            "MSAVI2",
            "--scale",
            "60",
            "-o",
            str(out),
        ],
    )
    assert result.exit_code == 0, result.output
    assert calls["scale"] == 60
    assert calls["max_pixels"] == pytest.approx(1e9)
    assert calls["collection"] == "LANDSAT/LC08/C02/T1"
    assert calls["dates"] == ("2021-05-01", "2021-08-31")
    assert calls["bounds"] == (0.0, 0.0, 0.01, 0.01)
    assert out.exists()


def test_fetch_bad_dates(monkeypatch, tmp_path):
    geojson = tmp_path / "roi.geojson"
    geojson.write_text(json.dumps(SQUARE))
    monkeypatch.setattr(
        "vegindx.core.cli.EarthEngineManager", lambda project=None, logger=None: None
    )
    result = CliRunner().invoke(
        cli,
        [
            "fetch",
            str(geojson),
            "--start",
            "2021-09-01",
            "--end",
            "2021-01-01",
            "-o",
            str(tmp_path / "x.tif"),
        ],
    )
    assert result.exit_code == 1
    assert "before end date" in result.output


def test_compute_unreadable_raster(tmp_path):
    bad = tmp_path / "bad.tif"
    bad.write_text("not a raster")
    out = tmp_path / "o.tif"
    result = CliRunner().invoke(cli, ["compute", str(bad), "-i", "NDVI", "-o", str(out)])
    assert result.exit_code == 1
    assert "❌  Compute failed" in result.output
    assert isinstance(result.exception, SystemExit)
    assert not out.exists()


def test_fetch_download_error(monkeypatch, tmp_path):
    class FailingProvider:
        def __init__(self, **_kwargs):
            pass

        def fetch(self, aoi, start, end, bands=()):
            raise requests.HTTPError("400 Client Error: request too large")

    monkeypatch.setattr("vegindx.core.cli.EarthEngineCompositeProvider", FailingProvider)
    monkeypatch.setattr(
        "vegindx.core.cli.EarthEngineManager", lambda project=None, logger=None: None
    )
    geojson = tmp_path / "roi.geojson"
    geojson.write_text(json.dumps(SQUARE))
    result = CliRunner().invoke(
        cli,
        [
            "fetch",
            str(geojson),
            "-s",
            "2021-05-01",
            "-e",
            "2021-08-31",
            "-o",
            str(tmp_path / "x.tif"),
        ],
    )
    assert result.exit_code == 1
    assert "❌  Fetch failed: 400 Client Error" in result.output
    assert isinstance(result.exception, SystemExit)
