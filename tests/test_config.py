"""Test suite for ConfigManager: verifying loading formats, defaults, palettes and merging."""

import json
import pytest

import yaml
import toml

from vegindx.core.config import ConfigManager, ConfigValidationError


def test_defaults():
    """Fresh managers carry the built-in index, collection and export defaults."""
    cfg = ConfigManager()
    assert cfg.get("default_index") == "NDVI"
    assert cfg.get("palette") == "black-yellow-green"
    assert cfg.get("collection_id") == "LANDSAT/LC08/C02/T1"
    assert cfg.get("scale") == 30
    assert cfg.get("export_format") == "GeoTIFF"
    assert cfg.get("max_pixels") == pytest.approx(1e9)


def test_load_json(tmp_path):
    """Ensure JSON files load correctly and default values are returned for missing keys."""
    cfg_file = tmp_path / "cfg.json"
    cfg_file.write_text(json.dumps({"default_index": "EVI", "scale": 60}), encoding="utf-8")

    cfg = ConfigManager()
    cfg.load(str(cfg_file))

    assert cfg.get("default_index") == "EVI"
    assert cfg.get("scale") == 60
    assert cfg.get("missing", "def") == "def"


def test_load_yaml(tmp_path):
    """Verify YAML files are parsed and values retrieved accurately."""
    cfg_file = tmp_path / "cfg.yaml"
    data = {"collection_id": "LANDSAT/LC09/C02/T1", "max_pixels": 1e6}
    cfg_file.write_text(yaml.safe_dump(data), encoding="utf-8")

    cfg = ConfigManager(str(cfg_file))

    assert cfg.get("collection_id") == "LANDSAT/LC09/C02/T1"
    assert cfg.get("max_pixels") == pytest.approx(1e6)


def test_load_toml(tmp_path):
    """Check TOML file loading and value retrieval functionality."""
    cfg_file = tmp_path / "cfg.toml"
    cfg_file.write_text(toml.dumps({"palette": "white-green"}), encoding="utf-8")

    cfg = ConfigManager()
    cfg.load(str(cfg_file))

    assert cfg.get_palette() == ("white", "green")


def test_load_unsupported_extension(tmp_path):
    """Confirm that loading unsupported file extensions raises ConfigValidationError."""
    cfg_file = tmp_path / "cfg.txt"
    cfg_file.write_text("whatever", encoding="utf-8")

    with pytest.raises(ConfigValidationError):
        ConfigManager().load(str(cfg_file))


def test_load_invalid_content(tmp_path):
    """Ensure invalid JSON content triggers a ConfigValidationError."""
    cfg_file = tmp_path / "bad.json"
    cfg_file.write_text("not a json!", encoding="utf-8")

    with pytest.raises(ConfigValidationError):
        ConfigManager().load(str(cfg_file))


def test_load_non_mapping(tmp_path):
    """A YAML list at the top level is not a configuration."""
    cfg_file = tmp_path / "list.yaml"
    cfg_file.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigValidationError):
        ConfigManager().load(str(cfg_file))


def test_custom_palettes(tmp_path):
    """A ``palettes`` mapping extends the presets and can be selected."""
    cfg_file = tmp_path / "cfg.yaml"
    cfg_file.write_text(
        yaml.safe_dump({"palette": "sand", "palettes": {"sand": ["tan", "olive"]}}),
        encoding="utf-8",
    )

    cfg = ConfigManager(str(cfg_file))

    assert cfg.get_palette() == ("tan", "olive")
    assert cfg.get_palette("white-green") == ("white", "green")
    assert "palettes" not in cfg.config


@pytest.mark.parametrize(
    "palettes",
    [["tan", "olive"], {"sand": ["tan"]}, {"sand": "tan,olive"}],
)
def test_invalid_palettes(tmp_path, palettes):
    """Palettes must map names to lists of at least two colours."""
    cfg_file = tmp_path / "cfg.json"
    cfg_file.write_text(json.dumps({"palettes": palettes}), encoding="utf-8")

    with pytest.raises(ConfigValidationError):
        ConfigManager().load(str(cfg_file))


def test_unknown_palette():
    """Asking for a palette that was never defined fails with the known names."""
    with pytest.raises(ConfigValidationError, match="black-yellow-green"):
        ConfigManager().get_palette("rainbow")


def test_default_attributes():
    """Preset palettes are reachable through ``get``."""
    palettes = ConfigManager().get("preset_palettes")
    assert isinstance(palettes, dict)
    assert "white-green" in palettes


def test_merge_configs():
    """Test merging two ConfigManager instances combines configs and palettes."""
    cfg1 = ConfigManager()
    cfg1.config = {"a": 1}
    cfg1.preset_palettes = {"p1": ["red", "green"]}

    cfg2 = ConfigManager()
    cfg2.config = {"b": 2}
    cfg2.preset_palettes = {"p2": ["blue", "white"]}

    cfg1.merge(cfg2)

    assert cfg1.get("a") == 1
    assert cfg1.get("b") == 2
    assert cfg1.preset_palettes["p1"] == ["red", "green"]
    assert cfg1.preset_palettes["p2"] == ["blue", "white"]


def test_merge_wrong_type():
    """Assert merging with a non-ConfigManager object raises a TypeError."""
    cfg = ConfigManager()
    with pytest.raises(TypeError):
        cfg.merge("not a config manager")
