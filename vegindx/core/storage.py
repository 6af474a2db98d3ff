"""Storage adapter abstractions for exported rasters."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod

import rasterio


class StorageAdapter(ABC):
    """Abstract interface for persisting binary data."""

    @abstractmethod
    def write_bytes(self, uri: str, data: bytes) -> str:
        """Write bytes to the destination and return the URI."""

    @abstractmethod
    def open_raster(self, uri: str, mode: str = "r", **kwargs):
        """Open *uri* with rasterio."""


class LocalFS(StorageAdapter):
    """Store files on the local filesystem."""

    def write_bytes(self, uri: str, data: bytes) -> str:
        dirpath = os.path.dirname(uri) or "."
        os.makedirs(dirpath, exist_ok=True)
        with open(uri, "wb") as fh:
            fh.write(data)
        return uri

    def open_raster(self, uri: str, mode: str = "r", **kwargs):
        """Open a local raster file using rasterio."""
        return rasterio.open(uri, mode, **kwargs)
