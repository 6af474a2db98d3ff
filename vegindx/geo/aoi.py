"""
Module `geo.aoi` defines the AOI (Area of Interest) class, which holds a single
geographic region (Polygon/MultiPolygon) and its static properties.
"""

import json
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Union

import geopandas as gpd
import ee
from shapely.geometry import MultiPolygon, Polygon, mapping, shape
from shapely.ops import unary_union

# Approximate length of 1 degree of latitude in metres
_METRES_PER_DEGREE = 111_320.0


@dataclass
class AOI:
    """Area of Interest with static properties."""

    geometry: Union[Polygon, MultiPolygon]
    static_props: Dict[str, Any]

    @classmethod
    def from_file(cls, path: str, id_col: str = "id") -> List["AOI"]:
        """
        Load a vector file (GeoJSON, Shapefile, etc.) into AOI instances.
        """
        gdf = gpd.read_file(path)
        if gdf.crs is not None and gdf.crs.to_epsg() != 4326:
            gdf = gdf.to_crs("EPSG:4326")
        return cls.from_gdf(gdf, id_col)

    @classmethod
    def from_geojson(cls, geojson: Union[str, dict], id_col: str = "id") -> List["AOI"]:
        """
        Parse a GeoJSON object (or path to a GeoJSON file) and return AOI instances.
        """
        if isinstance(geojson, str):
            with open(geojson, "r", encoding="utf-8") as f:
                data = json.load(f)
        else:
            data = geojson
        if data.get("type") == "Feature":
            features = [data]
        elif data.get("type") in ("Polygon", "MultiPolygon"):
            features = [{"type": "Feature", "properties": {}, "geometry": data}]
        else:
            features = data.get("features", [])
        if not features:
            raise ValueError("No polygon features found in the provided GeoJSON.")
        gdf = gpd.GeoDataFrame(
            [
                {**feat.get("properties", {}), "geometry": shape(feat["geometry"])}
                for feat in features
            ],
            crs="EPSG:4326",
        )
        return cls.from_gdf(gdf, id_col)

    @classmethod
    def from_gdf(cls, gdf: gpd.GeoDataFrame, id_col: str = "id") -> List["AOI"]:
        """
        Build AOI instances from a GeoDataFrame, adding a sequential id_col
        when missing.
        """
        if id_col not in gdf.columns:
            gdf[id_col] = gdf.index.astype(int) + 1
        aois: List[AOI] = []
        for _, row in gdf.iterrows():
            props: Dict = row.drop(labels="geometry").to_dict()
            aois.append(cls(row.geometry, props))
        return aois

    @classmethod
    def merge(cls, aois: Sequence["AOI"], **props) -> "AOI":
        """Dissolve several AOIs into one region."""
        if not aois:
            raise ValueError("Cannot merge an empty list of AOIs")
        if len(aois) == 1 and not props:
            return aois[0]
        geom = unary_union([a.geometry for a in aois])
        ids = [a.static_props.get("id") for a in aois]
        return cls(geom, {"id": props.pop("id", ids[0]), "members": ids, **props})

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """(min_x, min_y, max_x, max_y) in degrees."""
        return tuple(self.geometry.bounds)

    def ee_geometry(self) -> ee.Geometry:
        """
        Return an Earth Engine Geometry corresponding to this AOI's Shapely geometry.
        """
        return ee.Geometry(mapping(self.geometry))

    def estimated_pixels(self, scale: float) -> int:
        """
        Approximate number of pixels of the AOI's bounding box at *scale* metres.
        """
        min_x, min_y, max_x, max_y = self.bounds
        mean_lat = (min_y + max_y) / 2.0
        height_m = (max_y - min_y) * _METRES_PER_DEGREE
        width_m = (max_x - min_x) * _METRES_PER_DEGREE * math.cos(math.radians(mean_lat))
        return int(math.ceil(abs(width_m) / scale) * math.ceil(abs(height_m) / scale))
