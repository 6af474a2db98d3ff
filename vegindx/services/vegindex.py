from __future__ import annotations

"""Service tying the index registry to composite providers and sinks."""

import logging
from typing import Optional

from vegindx.geo.aoi import AOI
from vegindx.indices.evaluator import IndexResult, evaluate
from vegindx.indices.registry import INDEX_REGISTRY, IndexRegistry
from vegindx.ingestion.composite import Composite
from vegindx.ingestion.provider import EarthEngineCompositeProvider
from vegindx.visualization.render import render_png
from .base import BaseService
from .exports import ExportRequest, GeoTiffExporter


class VegetationIndexService(BaseService):
    """Select an index, compute it over a composite, then render or export it."""

    def __init__(
        self,
        registry: IndexRegistry = INDEX_REGISTRY,
        provider: Optional[EarthEngineCompositeProvider] = None,
        exporter: Optional[GeoTiffExporter] = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(logger)
        self.registry = registry
        self._provider = provider
        self.exporter = exporter or GeoTiffExporter(logger=self.logger)

    @property
    def provider(self) -> EarthEngineCompositeProvider:
        # Built lazily: local-only workflows never touch Earth Engine.
        if self._provider is None:
            self._provider = EarthEngineCompositeProvider(logger=self.logger)
        return self._provider

    def list_indices(self) -> list[str]:
        return self.registry.list_names()

    def compute(self, index: str, composite: Composite, **kwargs) -> IndexResult:
        """Look up ``index`` and evaluate it over ``composite``."""
        definition = self.registry.get(index)
        self.logger.info(
            "Computing %s from bands %s",
            definition.name,
            [b.name for b in definition.required_bands],
        )
        result = evaluate(definition, composite, log=self.logger, **kwargs)
        finite = result.finite_fraction()
        if finite < 1.0:
            self.logger.warning(
                "%s: %.1f%% of pixels are NaN or infinite",
                definition.name,
                100.0 * (1.0 - finite),
            )
        return result

    def compute_for_region(
        self, index: str, aoi: AOI, start: str, end: str, **kwargs
    ) -> IndexResult:
        """Fetch a composite for ``aoi`` and the date window, then compute ``index``."""
        # Resolve first so an unknown name never triggers a download.
        definition = self.registry.get(index)
        composite = self.provider.fetch(aoi, start, end, bands=definition.required_bands)
        return self.compute(definition.name, composite, **kwargs)

    def export(self, result: IndexResult, request: ExportRequest) -> str:
        return self.exporter.submit(result, request)

    def render(self, result: IndexResult, output_path: str, **kwargs) -> str:
        return render_png(result, output_path, **kwargs)
