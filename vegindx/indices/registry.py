"""
Module `indices.registry` holds the catalog of supported vegetation indices.

Each :class:`IndexDefinition` pairs a published formula, written as a pure
function over a ``{SpectralBand: array}`` mapping, with the bands it reads
and the defaults used to display its output. Formulas keep the operator
grouping and literal constants of their reference expressions, so results
match the published definitions to the last bit.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Iterator, Mapping, Optional, Sequence, Tuple

import numpy as np

from .bands import CANONICAL_BANDS, SpectralBand
from .errors import UnknownIndex

B = SpectralBand.BLUE
G = SpectralBand.GREEN
R = SpectralBand.RED
N = SpectralBand.NIR
S1 = SpectralBand.SWIR1
S2 = SpectralBand.SWIR2

BandValues = Mapping[SpectralBand, np.ndarray]
Formula = Callable[[BandValues], np.ndarray]

DEFAULT_PALETTE: Tuple[str, ...] = ("black", "yellow", "green")


@dataclass(frozen=True)
class IndexDefinition:
    """Immutable description of one vegetation index."""

    name: str
    required_bands: Tuple[SpectralBand, ...]
    formula: Formula = field(compare=False)
    display_range: Optional[Tuple[float, float]] = None
    palette: Tuple[str, ...] = DEFAULT_PALETTE
    description: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Index name must be a non-empty string")
        bands = tuple(SpectralBand.parse(b) for b in self.required_bands)
        if not bands:
            raise ValueError(f"{self.name}: required_bands must not be empty")
        if len(set(bands)) != len(bands):
            raise ValueError(f"{self.name}: required_bands contains duplicates")
        # Canonical order makes "first missing band" deterministic.
        ordered = tuple(b for b in CANONICAL_BANDS if b in bands)
        object.__setattr__(self, "required_bands", ordered)

        palette = tuple(self.palette)
        if len(palette) < 2:
            raise ValueError(f"{self.name}: palette needs at least two colours")
        object.__setattr__(self, "palette", palette)

        if self.display_range is not None:
            lo, hi = (float(v) for v in self.display_range)
            if not lo < hi:
                raise ValueError(
                    f"{self.name}: display_range min must be below max, got {lo}, {hi}"
                )
            object.__setattr__(self, "display_range", (lo, hi))


# ---------------------------------------------------------------------------
# Formulas
# ---------------------------------------------------------------------------


def _ndvi(b: BandValues) -> np.ndarray:
    return (b[N] - b[R]) / (b[N] + b[R])


def _dvi(b: BandValues) -> np.ndarray:
    return b[N] - b[R]


def _evi(b: BandValues) -> np.ndarray:
    return 2.5 * ((b[N] - b[R]) / (b[N] + 6 * b[R] - 7.5 * b[B] + 1))


def _gemi(b: BandValues) -> np.ndarray:
    n, r = b[N], b[R]
    return ((2 * ((n * n) - (r * r))) + 1.5 * n + 0.5 * r) / (n + r + 0.5)


def _gari(b: BandValues) -> np.ndarray:
    n, g, r, bl = b[N], b[G], b[R], b[B]
    return (n - (g - 1.7 * (bl - r))) / (n + (g - 1.7 * (bl - r)))


def _gci(b: BandValues) -> np.ndarray:
    return (b[N] / b[G]) - 1


def _gdvi(b: BandValues) -> np.ndarray:
    return b[N] - b[G]


def _gli(b: BandValues) -> np.ndarray:
    g, r, bl = b[G], b[R], b[B]
    return ((g - r) + (g - bl)) / ((2 * g) + r + bl)


def _gndvi(b: BandValues) -> np.ndarray:
    return (b[N] - b[G]) / (b[N] + b[G])


def _gosavi(b: BandValues) -> np.ndarray:
    return (b[N] - b[G]) / (b[N] + b[G] + 0.16)


def _grvi(b: BandValues) -> np.ndarray:
    return b[N] / b[G]


def _gsavi(b: BandValues) -> np.ndarray:
    return 1.5 * ((b[N] - b[G]) / (b[N] + b[G] + 0.5))


def _gvi(b: BandValues) -> np.ndarray:
    # Landsat 8 tasseled-cap greenness coefficients
    return (
        (-0.2848 * b[B])
        + (-0.2435 * b[G])
        + (-0.5436 * b[R])
        + (0.7243 * b[N])
        + (0.0840 * b[S1])
        + (-0.1800 * b[S2])
    )


def _ipvi(b: BandValues) -> np.ndarray:
    return b[N] / (b[N] - b[R])


def _mnli(b: BandValues) -> np.ndarray:
    n, r = b[N], b[R]
    return (((n * n) - r) * (1 + 0.5)) / ((n * n) + r + 0.5)


def _msavi2(b: BandValues) -> np.ndarray:
    n, r = b[N], b[R]
    return (2 * n + 1 - np.sqrt((2 * n + 1) ** 2 - 8 * (n - r))) / 2


def _msr(b: BandValues) -> np.ndarray:
    ratio = b[N] / b[R]
    return (ratio - 1) / (np.sqrt(ratio) + 1)


def _nli(b: BandValues) -> np.ndarray:
    n, r = b[N], b[R]
    return ((n * n) - r) / ((n * n) + r)


def _osavi(b: BandValues) -> np.ndarray:
    return (b[N] - b[R]) / (b[N] + b[R] + 0.16)


def _rdvi(b: BandValues) -> np.ndarray:
    return (b[N] - b[R]) / np.sqrt(b[N] + b[R])


def _savi(b: BandValues) -> np.ndarray:
    return (1.5 * (b[N] - b[R])) / (b[N] + b[R] + 0.5)


def _sr(b: BandValues) -> np.ndarray:
    return b[N] / b[R]


def _tdvi(b: BandValues) -> np.ndarray:
    n, r = b[N], b[R]
    return 1.5 * ((n - r) / np.sqrt((n * n) + r + 0.5))


def _vari(b: BandValues) -> np.ndarray:
    g, r, bl = b[G], b[R], b[B]
    return (g - r) / (g + r - bl)


def _wdrvi(b: BandValues) -> np.ndarray:
    return (0.2 * (b[N] - b[R])) / (0.2 * (b[N] + b[R]))


CATALOG: Tuple[IndexDefinition, ...] = (
    IndexDefinition(
        "NDVI", (N, R), _ndvi, (-1.0, 1.0),
        description="Normalized Difference Vegetation Index",
    ),
    IndexDefinition(
        "DVI", (N, R), _dvi, (0.0, 1.0),
        description="Difference Vegetation Index",
    ),
    IndexDefinition(
        "EVI", (N, R, B), _evi, description="Enhanced Vegetation Index"
    ),
    IndexDefinition(
        "GEMI", (N, R), _gemi,
        description="Global Environmental Monitoring Index",
    ),
    IndexDefinition(
        "GARI", (N, G, R, B), _gari,
        description="Green Atmospherically Resistant Index",
    ),
    IndexDefinition("GCI", (N, G), _gci, description="Green Chlorophyll Index"),
    IndexDefinition(
        "GDVI", (N, G), _gdvi, description="Green Difference Vegetation Index"
    ),
    IndexDefinition("GLI", (G, R, B), _gli, description="Green Leaf Index"),
    IndexDefinition(
        "GNDVI", (N, G), _gndvi,
        description="Green Normalized Difference Vegetation Index",
    ),
    IndexDefinition(
        "GOSAVI", (N, G), _gosavi,
        description="Green Optimized Soil Adjusted Vegetation Index",
    ),
    IndexDefinition("GRVI", (N, G), _grvi, description="Green Ratio Vegetation Index"),
    IndexDefinition(
        "GSAVI", (N, G), _gsavi,
        description="Green Soil Adjusted Vegetation Index",
    ),
    IndexDefinition(
        "GVI", (B, G, R, N, S1, S2), _gvi,
        description="Tasseled Cap Green Vegetation Index",
    ),
    IndexDefinition(
        "IPVI", (N, R), _ipvi, description="Infrared Percentage Vegetation Index"
    ),
    IndexDefinition("MNLI", (N, R), _mnli, description="Modified Non-Linear Index"),
    IndexDefinition(
        "MSAVI2", (N, R), _msavi2,
        description="Modified Soil Adjusted Vegetation Index 2",
    ),
    IndexDefinition("MSR", (N, R), _msr, description="Modified Simple Ratio"),
    IndexDefinition("NLI", (N, R), _nli, description="Non-Linear Index"),
    IndexDefinition(
        "OSAVI", (N, R), _osavi,
        description="Optimized Soil Adjusted Vegetation Index",
    ),
    IndexDefinition(
        "RDVI", (N, R), _rdvi,
        description="Renormalized Difference Vegetation Index",
    ),
    IndexDefinition(
        "SAVI", (N, R), _savi, description="Soil Adjusted Vegetation Index"
    ),
    IndexDefinition("SR", (N, R), _sr, description="Simple Ratio"),
    IndexDefinition(
        "TDVI", (N, R), _tdvi,
        description="Transformed Difference Vegetation Index",
    ),
    IndexDefinition(
        "VARI", (G, R, B), _vari,
        description="Visible Atmospherically Resistant Index",
    ),
    IndexDefinition(
        "WDRVI", (N, R), _wdrvi,
        description="Wide Dynamic Range Vegetation Index",
    ),
)


class IndexRegistry:
    """Read-only, ordered lookup of :class:`IndexDefinition` by exact name."""

    def __init__(self, definitions: Iterable[IndexDefinition]) -> None:
        entries: dict[str, IndexDefinition] = {}
        for definition in definitions:
            if definition.name in entries:
                raise ValueError(f"Duplicate index name '{definition.name}'")
            entries[definition.name] = definition
        self._entries = entries

    def list_names(self) -> list[str]:
        """Return every registered index name in catalog order."""
        return list(self._entries)

    def get(self, name: Optional[str]) -> IndexDefinition:
        """Return the definition registered under *name* (case-sensitive)."""
        if not isinstance(name, str) or name not in self._entries:
            raise UnknownIndex(name, self._entries)
        return self._entries[name]

    def with_palette(self, palette: Sequence[str]) -> "IndexRegistry":
        """Return a copy of this registry whose indices use *palette*."""
        palette = tuple(palette)
        return IndexRegistry(replace(d, palette=palette) for d in self)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[IndexDefinition]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


INDEX_REGISTRY = IndexRegistry(CATALOG)


def list_names() -> list[str]:
    """Names of the default catalog, for populating a selection control."""
    return INDEX_REGISTRY.list_names()


def get_index(name: Optional[str]) -> IndexDefinition:
    """Look up *name* in the default catalog."""
    return INDEX_REGISTRY.get(name)
