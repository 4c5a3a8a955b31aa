"""Tests for vector features and the reproject/extent filter."""

import pytest
from shapely.geometry import Point, Polygon

from maplat.vector import Feature, features_from_geojson, filter_features, transform_geometry
from tests.helpers.maps import register_scaled

pytestmark = pytest.mark.unit

HALF_WORLD = 20037508.342789244


@pytest.fixture
def lonlat_features():
    return [
        Feature(Point(0.0, 0.0), {"name": "null island"}),
        Feature(Point(90.0, 0.0), {"name": "indian ocean"}),
        Feature(Polygon([(-1, -1), (1, -1), (1, 1), (-1, 1)]), {"name": "square"}),
    ]


class TestFeature:

    def test_clone_copies_properties_and_shares_geometry(self):
        feature = Feature(Point(1, 2), {"a": 1})
        clone = feature.clone()

        clone.properties["a"] = 2
        assert feature.properties["a"] == 1
        assert clone.geometry is feature.geometry
        assert clone is not feature

    def test_features_compare_by_identity(self):
        assert Feature(Point(0, 0), {"a": 1}) != Feature(Point(0, 0), {"a": 1})

    def test_geojson_collection(self):
        doc = {
            "type": "FeatureCollection",
            "features": [
                {"type": "Feature", "geometry": {"type": "Point", "coordinates": [135.0, 35.0]},
                 "properties": {"name": "kyoto"}},
                {"type": "Feature", "geometry": {"type": "Point", "coordinates": [139.7, 35.7]},
                 "properties": None},
            ],
        }
        features = features_from_geojson(doc)

        assert [f.geometry.x for f in features] == [135.0, 139.7]
        assert features[0].get("name") == "kyoto"
        assert features[1].properties == {}

    def test_single_feature_document(self):
        doc = {"type": "Feature", "geometry": {"type": "Point", "coordinates": [1, 2]},
               "properties": {"k": "v"}}
        feature, = features_from_geojson(doc)
        assert feature.to_geojson()["properties"] == {"k": "v"}
        assert feature.to_geojson()["geometry"]["coordinates"] == (1.0, 2.0)


class TestTransformGeometry:

    def test_point_to_reference(self, registry):
        geom = transform_geometry(Point(90.0, 0.0), registry, "EPSG:4326", "EPSG:3857")
        assert (geom.x, geom.y) == pytest.approx((HALF_WORLD / 2, 0.0), abs=1e-6)

    def test_polygon_keeps_its_vertices(self, registry):
        register_scaled(registry, "Maplat:a", 2.0)
        square = Polygon([(0, 0), (10, 0), (10, 10), (0, 10)])

        geom = transform_geometry(square, registry, "EPSG:3857", "Maplat:a")

        assert geom.geom_type == "Polygon"
        assert geom.bounds == pytest.approx((0.0, 0.0, 20.0, 20.0))
        assert len(geom.exterior.coords) == len(square.exterior.coords)


class TestFilterFeatures:

    def test_without_extent_keeps_everything(self, registry, lonlat_features):
        kept = filter_features(lonlat_features, registry)

        assert len(kept) == 3
        assert all(k is not f for k, f in zip(kept, lonlat_features))

    def test_reprojects_then_filters_by_extent(self, registry, lonlat_features):
        extent = (-200000.0, -200000.0, 200000.0, 200000.0)
        kept = filter_features(lonlat_features, registry, extent, project_to="EPSG:3857")

        assert [f.get("name") for f in kept] == ["null island", "square"]
        assert kept[1].geometry.bounds[2] == pytest.approx(111319.49, abs=0.01)

    def test_input_features_are_not_modified(self, registry, lonlat_features):
        filter_features(lonlat_features, registry, project_to="EPSG:3857")
        assert lonlat_features[1].geometry.x == 90.0

    def test_extent_without_reprojection(self, registry, lonlat_features):
        kept = filter_features(lonlat_features, registry, (80.0, -5.0, 100.0, 5.0))
        assert [f.get("name") for f in kept] == ["indian ocean"]
