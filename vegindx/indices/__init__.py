"""Vegetation index catalog and evaluator."""

from .bands import CANONICAL_BANDS, SpectralBand
from .errors import MissingBand, UnknownIndex, VegIndexError
from .registry import (
    INDEX_REGISTRY,
    IndexDefinition,
    IndexRegistry,
    get_index,
    list_names,
)
from .evaluator import IndexResult, evaluate

__all__ = [
    "CANONICAL_BANDS",
    "SpectralBand",
    "MissingBand",
    "UnknownIndex",
    "VegIndexError",
    "INDEX_REGISTRY",
    "IndexDefinition",
    "IndexRegistry",
    "get_index",
    "list_names",
    "IndexResult",
    "evaluate",
]
