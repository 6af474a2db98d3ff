"""Composite ingestion: sensor band mapping, Earth Engine access and rasters."""

from .sensorspec import SensorSpec
from .composite import Composite
from .eemanager import EarthEngineManager, ee_manager
from .provider import EarthEngineCompositeProvider, validate_date_range

__all__ = [
    "SensorSpec",
    "Composite",
    "EarthEngineManager",
    "ee_manager",
    "EarthEngineCompositeProvider",
    "validate_date_range",
]
