"""
Landmass and terrain collaborators.

The cyclone model only needs two capabilities from the outside world:
    - land.contains((lon, lat)) / land.is_near((lon, lat), threshold)
    - terrain.elevation_at((lon, lat))

LandMask and TerrainMap implement them over GeoJSON features with shapely
geometries. Anything exposing the same methods (a raster mask, a test fake)
can be passed to CycloneModel instead.
"""

import geojson
import numpy as np
import shapely.geometry
import shapely.strtree

from config import TERRAIN_FEATURES

NEAR_LAND_THRESHOLD_DEG = 0.1


def _features_of(collection):
    """Accept a FeatureCollection, a list of features or bare geometries."""
    if isinstance(collection, dict) and collection.get('type') == 'FeatureCollection':
        return list(collection['features'])
    return list(collection)


def _geometry_of(feature):
    if isinstance(feature, dict) and feature.get('type') == 'Feature':
        return feature['geometry']
    return feature


class LandMask:
    """
    Point-in-polygon land test over a set of GeoJSON polygons.

    Polygons are indexed in an STRtree so containment queries only touch
    candidate geometries. The near-land test compares against the raw
    polygon vertices, which is what makes small islands "felt" by a storm
    passing within a tenth of a degree.
    """

    def __init__(self, features):
        self.features = _features_of(features)
        self.polygons = [shapely.geometry.shape(_geometry_of(f)) for f in self.features]
        self._tree = shapely.strtree.STRtree(self.polygons) if self.polygons else None

        vertices = []
        for feature in self.features:
            vertices.extend(geojson.utils.coords(_geometry_of(feature)))
        self.vertices = np.array(vertices, dtype=float).reshape(-1, 2)

    @classmethod
    def from_file(cls, filepath):
        """Load a GeoJSON FeatureCollection from disk."""
        with open(filepath, 'r', encoding='utf-8') as f:
            return cls(geojson.load(f))

    @classmethod
    def empty(cls):
        """An all-ocean planet."""
        return cls([])

    def contains(self, point):
        if self._tree is None:
            return False
        pt = shapely.geometry.Point(point[0], point[1])
        for idx in self._tree.query(pt):
            if self.polygons[int(idx)].contains(pt):
                return True
        return False

    def is_near(self, point, threshold=NEAR_LAND_THRESHOLD_DEG):
        if len(self.vertices) == 0:
            return False
        close = (np.abs(self.vertices[:, 0] - point[0]) < threshold) & \
                (np.abs(self.vertices[:, 1] - point[1]) < threshold)
        return bool(np.any(close))


class TerrainMap:
    """Named elevated terrain polygons; the first match wins."""

    def __init__(self, features=TERRAIN_FEATURES):
        self.features = _features_of(features)
        self._shapes = [
            (feature['properties']['name'],
             float(feature['properties'].get('elevation', 0)),
             shapely.geometry.shape(feature['geometry']))
            for feature in self.features
        ]

    def feature_at(self, point):
        """Name of the terrain feature containing point, or None."""
        pt = shapely.geometry.Point(point[0], point[1])
        for name, _, shape in self._shapes:
            if shape.contains(pt):
                return name
        return None

    def elevation_at(self, point):
        """Effective elevation in meters; 0 outside every feature."""
        pt = shapely.geometry.Point(point[0], point[1])
        for _, elevation, shape in self._shapes:
            if shape.contains(pt):
                return elevation
        return 0.0
