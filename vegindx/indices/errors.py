"""Errors raised by the index registry and evaluator."""

from __future__ import annotations

from typing import Iterable

from .bands import SpectralBand


class VegIndexError(Exception):
    """Base class for index lookup and evaluation failures."""


class UnknownIndex(VegIndexError, ValueError):
    """Raised when an index name is not registered."""

    def __init__(self, name, available: Iterable[str] = ()) -> None:
        self.name = name
        self.available = list(available)
        msg = f"Index {name!r} not supported."
        if self.available:
            msg += f" Choose from: {self.available}"
        super().__init__(msg)


class MissingBand(VegIndexError, ValueError):
    """Raised when a composite lacks a band that an index formula needs."""

    def __init__(self, band: SpectralBand, index: str | None = None) -> None:
        self.band = band
        self.index = index
        if index:
            msg = f"Composite is missing band {band.name} required by {index}"
        else:
            msg = f"Composite is missing band {band.name}"
        super().__init__(msg)
