"""
VegIndX CLI entrypoint: list the index catalog, compute an index from a local
composite raster, or fetch an Earth Engine composite for a region and export
the index.
"""

import sys

import click  # type: ignore
from click import echo

from vegindx.core.config import ConfigManager, ConfigValidationError
from vegindx.core.logger import Logger
from vegindx.geo.aoi import AOI
from vegindx.indices.errors import VegIndexError
from vegindx.indices.registry import INDEX_REGISTRY
from vegindx.ingestion.composite import Composite
from vegindx.ingestion.eemanager import EarthEngineManager
from vegindx.ingestion.provider import EarthEngineCompositeProvider
from vegindx.ingestion.sensorspec import SensorSpec
from vegindx.services.exports import ExportRequest, GeoTiffExporter
from vegindx.services.vegindex import VegetationIndexService

logger = Logger.get_logger(__name__)

INDEX_NAMES = INDEX_REGISTRY.list_names()


def _fail(err: Exception) -> None:
    echo(f"❌  {err}", err=True)
    sys.exit(1)


def _registry(config: ConfigManager, palette: str | None):
    if palette is None and config.get("palette") == ConfigManager.DEFAULT_PALETTE:
        return INDEX_REGISTRY
    return INDEX_REGISTRY.with_palette(config.get_palette(palette))


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML/TOML/JSON configuration file",
)
@click.pass_context
def cli(ctx, config_path):
    """VegIndX: vegetation indices from cloud-free optical composites."""
    Logger.setup()
    try:
        ctx.obj = ConfigManager(config_path)
    except ConfigValidationError as e:
        _fail(e)


@cli.group()
def indices():
    """Inspect the vegetation index catalog."""


@indices.command(name="list")
def list_indices():
    """Print every supported index name."""
    for name in INDEX_REGISTRY.list_names():
        echo(name)


@indices.command(name="show")
@click.argument("name")
def show_index(name):
    """Show bands, display range and palette of index NAME."""
    try:
        definition = INDEX_REGISTRY.get(name)
    except VegIndexError as e:
        _fail(e)
    rng = definition.display_range
    echo(f"{definition.name}: {definition.description}")
    echo(f"  bands:   {', '.join(b.name for b in definition.required_bands)}")
    echo(f"  range:   {'auto' if rng is None else f'{rng[0]:g} to {rng[1]:g}'}")
    echo(f"  palette: {', '.join(definition.palette)}")


@cli.command()
@click.argument("raster", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--index",
    "-i",
    type=click.Choice(INDEX_NAMES),
    default=None,
    help="Vegetation index to compute (defaults to config default_index)",
)
@click.option("--output", "-o", type=click.Path(), required=True, help="Output GeoTIFF")
@click.option("--png", type=click.Path(), default=None, help="Optional PNG rendering")
@click.option(
    "--band-order",
    default=None,
    help="Comma-separated bands of RASTER in order, e.g. B,G,R,N,S1,S2",
)
@click.option(
    "--collection",
    "-c",
    default=None,
    help="Collection ID whose band codes label RASTER's bands",
)
@click.option("--palette", default=None, help="Preset palette name")
@click.pass_obj
def compute(config, raster, index, output, png, band_order, collection, palette):
    """Compute an index from a local multi-band composite RASTER."""
    try:
        sensor = SensorSpec.from_collection_id(
            collection or config.get("collection_id")
        )
        order = band_order.split(",") if band_order else None
        composite = Composite.from_geotiff(raster, sensor=sensor, band_order=order)
        service = VegetationIndexService(
            registry=_registry(config, palette),
            exporter=GeoTiffExporter(logger=logger),
            logger=logger,
        )
        result = service.compute(index or config.get("default_index"), composite)
        request = ExportRequest(
            output=output,
            file_format=config.get("export_format"),
            scale=config.get("scale"),
            max_pixels=config.get("max_pixels"),
        )
        service.export(result, request)
        if png:
            service.render(result, png)
    except (VegIndexError, ValueError, ConfigValidationError) as e:
        _fail(e)
    # pylint: disable=broad-exception-caught
    except Exception as e:
        echo(f"❌  Compute failed: {e}", err=True)
        sys.exit(1)
    echo(f"✅  {result.name} written to `{output}`")


@cli.command()
@click.argument("geojson", type=click.Path(exists=True, dir_okay=False))
@click.option("--start", "-s", required=True, help="Start date (YYYY-MM-DD)")
@click.option("--end", "-e", required=True, help="End date (YYYY-MM-DD)")
@click.option(
    "--index",
    "-i",
    type=click.Choice(INDEX_NAMES),
    default=None,
    help="Vegetation index to compute (defaults to config default_index)",
)
@click.option("--output", "-o", type=click.Path(), required=True, help="Output GeoTIFF")
@click.option("--png", type=click.Path(), default=None, help="Optional PNG rendering")
@click.option("--collection", "-c", default=None, help="Earth Engine collection ID")
@click.option("--scale", type=int, default=None, help="Spatial resolution (meters)")
@click.option("--project", default=None, help="Earth Engine cloud project")
@click.option("--palette", default=None, help="Preset palette name")
@click.pass_obj
def fetch(
    config, geojson, start, end, index, output, png, collection, scale, project, palette
):
    """Composite imagery over GEOJSON for a date range and export an index."""
    try:
        region = AOI.merge(AOI.from_geojson(geojson))
        scale = scale or config.get("scale")
        provider = EarthEngineCompositeProvider(
            sensor=SensorSpec.from_collection_id(
                collection or config.get("collection_id")
            ),
            ee_manager_instance=EarthEngineManager(project=project, logger=logger),
            scale=scale,
            logger=logger,
            max_pixels=config.get("max_pixels"),
        )
        service = VegetationIndexService(
            registry=_registry(config, palette), provider=provider, logger=logger
        )
        result = service.compute_for_region(
            index or config.get("default_index"), region, start, end
        )
        service.export(
            result,
            ExportRequest(
                output=output,
                file_format=config.get("export_format"),
                scale=scale,
                max_pixels=config.get("max_pixels"),
            ),
        )
        if png:
            service.render(result, png)
    except (VegIndexError, ValueError, ConfigValidationError) as e:
        _fail(e)
    # pylint: disable=broad-exception-caught
    except Exception as e:
        echo(f"❌  Fetch failed: {e}", err=True)
        sys.exit(1)
    echo(f"✅  {result.name} written to `{output}`")


if __name__ == "__main__":
    cli()
