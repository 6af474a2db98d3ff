"""core.config
---------------

Configuration loader/manager for VegIndX. Provides a central API for
loading settings from YAML/TOML/JSON and retrieving them via
:py:meth:`ConfigManager.get`.
"""

import os
import json
import yaml
import toml


class ConfigValidationError(Exception):
    """Raised when configuration loading or validation fails."""


class ConfigManager:
    """
    Loads and manages configuration from file or defaults.
    Provides a central entry point for parameterization and global options.
    """

    # Default preset color palettes for index rendering
    PRESET_PALETTES: dict[str, tuple[str, ...]] = {
        "black-yellow-green": ("black", "yellow", "green"),
        "white-green": ("white", "green"),
        "red-white-green": ("red", "white", "green"),
        "brown-green": ("brown", "green"),
        "red-yellow-green": ("#d7191c", "#ffffbf", "#1a9641"),
    }

    DEFAULT_INDEX: str = "NDVI"
    DEFAULT_PALETTE: str = "black-yellow-green"
    DEFAULT_COLLECTION: str = "LANDSAT/LC08/C02/T1"
    DEFAULT_SCALE: int = 30
    DEFAULT_EXPORT_FORMAT: str = "GeoTIFF"
    DEFAULT_MAX_PIXELS: float = 1e9

    def __init__(self, config_path=None):
        self.config = {
            "default_index": self.DEFAULT_INDEX,
            "palette": self.DEFAULT_PALETTE,
            "collection_id": self.DEFAULT_COLLECTION,
            "scale": self.DEFAULT_SCALE,
            "export_format": self.DEFAULT_EXPORT_FORMAT,
            "max_pixels": self.DEFAULT_MAX_PIXELS,
        }
        self.preset_palettes = {k: list(v) for k, v in self.PRESET_PALETTES.items()}
        if config_path:
            self.load(config_path)

    def load(self, path: str) -> None:
        """
        Load configuration from a file (YAML, TOML, or JSON).
        Overwrites existing keys in self.config; a ``palettes`` mapping in the
        file extends the preset palettes.
        """
        ext = os.path.splitext(path)[1].lower()
        try:
            with open(path, "r", encoding="utf-8") as f:
                if ext in (".yaml", ".yml"):
                    data = yaml.safe_load(f)
                elif ext == ".toml":
                    data = toml.load(f)
                elif ext == ".json":
                    data = json.load(f)
                else:
                    raise ConfigValidationError(f"Unsupported config format: {ext}")
        except Exception as e:
            raise ConfigValidationError(
                f"Failed to load config from {path}: {e}"
            ) from e
        if not isinstance(data, dict):
            raise ConfigValidationError(f"Config file {path} did not produce a dict")
        palettes = data.pop("palettes", None)
        if palettes is not None:
            if not isinstance(palettes, dict):
                raise ConfigValidationError("'palettes' must map names to colour lists")
            for name, colours in palettes.items():
                if not isinstance(colours, list) or len(colours) < 2:
                    raise ConfigValidationError(
                        f"Palette '{name}' needs at least two colours"
                    )
                self.preset_palettes[name] = [str(c) for c in colours]
        self.config.update(data)

    def get(self, key, default=None):
        """
        Retrieve a configuration value by key, or return `default` if not present.
        Also resolves default attributes such as `preset_palettes`.

        Args:
            key (str): The configuration parameter to look up.
            default:  The value to return if `key` is not found.
        """
        if key in self.config:
            return self.config.get(key, default)
        elif hasattr(self, key):
            return getattr(self, key)
        else:
            return default

    def merge(self, other: "ConfigManager") -> None:
        """
        Merge another ConfigManager into this one.
        Values in other.config override this.config; palettes are combined.
        """
        if not isinstance(other, ConfigManager):
            raise TypeError("Can only merge ConfigManager instances")
        self.config.update(other.config)
        self.preset_palettes.update(other.preset_palettes)

    def get_palette(self, name: str | None = None) -> tuple[str, ...]:
        """Return the colours of preset palette *name* (default: configured one)."""
        key = name or self.get("palette", self.DEFAULT_PALETTE)
        if key not in self.preset_palettes:
            raise ConfigValidationError(
                f"Unknown palette '{key}'. Choose from: {list(self.preset_palettes)}"
            )
        return tuple(self.preset_palettes[key])
