"""Rendering helpers for index rasters."""

from .render import build_colormap, render_png, resolve_display_range

__all__ = ["build_colormap", "render_png", "resolve_display_range"]
