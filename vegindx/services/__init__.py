"""Service-layer helpers used by the CLI and tests."""

from importlib import import_module

__all__ = [
    "ExportRequest",
    "GeoTiffExporter",
    "VegetationIndexService",
]


def __getattr__(name):
    if name in ("ExportRequest", "GeoTiffExporter"):
        return getattr(import_module(".exports", __name__), name)
    if name == "VegetationIndexService":
        return import_module(".vegindex", __name__).VegetationIndexService
    raise AttributeError(name)
