"""VegIndX: vegetation index computation for cloud-free optical composites."""

__version__ = "1.0.0"
