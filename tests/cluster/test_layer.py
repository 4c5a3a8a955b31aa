"""Tests for the cluster layer: styles and the hover / click state machine."""

import asyncio
import logging

import pytest
from shapely.geometry import Point

from maplat.cluster import ClusterLayer
from maplat.vector import Feature

pytestmark = pytest.mark.unit


class FakeView:
    """Records fit() calls; zoom and resolution are set by the test."""

    def __init__(self, resolution=1.0, zoom=3, max_zoom=10):
        self.resolution = resolution
        self.zoom = zoom
        self.max_zoom = max_zoom
        self.fits = []

    def get_resolution(self):
        return self.resolution

    def get_zoom(self):
        return self.zoom

    def get_max_zoom(self):
        return self.max_zoom

    def fit(self, extent, padding, duration):
        self.fits.append((extent, tuple(padding), duration))


class StaticHitTester:
    """Answers every hit-test immediately with ``hits``."""

    def __init__(self, hits=()):
        self.hits = list(hits)

    async def clusters_at_pixel(self, pixel):
        return self.hits


class ScriptedHitTester:
    """Hit-tests block until the test resolves them, in any order."""

    def __init__(self):
        self.pending = []

    async def clusters_at_pixel(self, pixel):
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future

    def resolve(self, index, hits):
        self.pending[index].set_result(list(hits))


def make_features():
    return [
        Feature(Point(0, 0), {"name": "gate"}),
        Feature(Point(10, 0), {"name": "well"}),
        Feature(Point(0, 10), {"name": "shrine"}),
        Feature(Point(1000, 1000), {"name": "castle"}),
    ]


@pytest.fixture
def layer(internal_config):
    return ClusterLayer(make_features(), internal_config)


@pytest.fixture
def group(layer):
    """The three-member cluster at resolution 1."""
    return layer.clusters(1.0)[0]


@pytest.fixture
def single(layer):
    return layer.clusters(1.0)[1]


def run(coro):
    return asyncio.run(coro)


class TestStyles:

    def test_aggregate_gets_count_badge(self, layer, group):
        styles = layer.cluster_style(group)

        assert len(styles) == 2
        assert styles[0].image.radius == 20.0
        assert styles[1].image.radius == 14.0
        assert styles[1].text.text == "3"

    def test_singleton_gets_member_style(self, internal_config):
        layer = ClusterLayer(make_features(), internal_config,
                             icon_generator=lambda f: f"icon:{f.get('name')}")
        single = layer.clusters(1.0)[1]

        styles = layer.cluster_style(single)

        assert len(styles) == 1
        assert styles[0].image == "icon:castle"
        assert styles[0].geometry is single.members[0].geometry

    def test_hull_only_for_hovered_aggregate(self, layer, group, single):
        assert layer.hull_style(group) is None

        layer.state.hover_feature = group
        hull = layer.hull_style(group)
        assert hull.geometry.geom_type == "Polygon"
        assert hull.geometry.area == pytest.approx(50.0)
        assert hull.fill.color == "rgba(255, 153, 0, 0.4)"

        layer.state.hover_feature = single
        assert layer.hull_style(single) is None

    def test_badge_colors_come_from_config(self, make_config):
        config = make_config(cluster={"badge": {"outer_fill": "red"}})
        layer = ClusterLayer(make_features(), config)
        assert layer.outer_circle.fill.color == "red"


class TestClusterAtCoordinate:

    def test_hit_within_badge_radius(self, layer, group):
        assert layer.clusters_at_coordinate((3.0, 3.0), 1.0) == [group]

    def test_miss(self, layer):
        assert layer.clusters_at_coordinate((500.0, 500.0), 1.0) == []


class TestPointerMove:

    def test_hover_sets_cursor(self, layer, group):
        layer.register_map(FakeView(), StaticHitTester([group]))

        assert run(layer.on_pointer_move((5, 5))) is True
        assert layer.state.hover_feature is group
        assert layer.cursor == "pointer"

    def test_same_cluster_again_is_no_change(self, layer, group):
        layer.register_map(FakeView(), StaticHitTester([group]))
        run(layer.on_pointer_move((5, 5)))

        assert run(layer.on_pointer_move((6, 5))) is False

    def test_leaving_clears_hover(self, layer, group):
        tester = StaticHitTester([group])
        layer.register_map(FakeView(), tester)
        run(layer.on_pointer_move((5, 5)))

        tester.hits = []
        assert run(layer.on_pointer_move((400, 400))) is True
        assert layer.state.hover_feature is None
        assert layer.cursor == ""

    def test_older_move_resolving_late_is_discarded(self, layer, group, single):
        tester = ScriptedHitTester()
        layer.register_map(FakeView(), tester)

        async def scenario():
            first = asyncio.create_task(layer.on_pointer_move((5, 5)))
            second = asyncio.create_task(layer.on_pointer_move((990, 990)))
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            tester.resolve(1, [single])
            tester.resolve(0, [group])
            return await first, await second

        stale, fresh = run(scenario())

        assert stale is False
        assert fresh is True
        assert layer.state.hover_feature is single

    def test_events_require_a_registered_map(self, layer):
        with pytest.raises(RuntimeError, match="register_map"):
            run(layer.on_pointer_move((0, 0)))


class TestClick:

    def test_single_member_reports_properties(self, layer, group, single, caplog):
        hits = StaticHitTester([group])
        layer.register_map(FakeView(resolution=1.0, zoom=10, max_zoom=10), hits)
        assert run(layer.on_click((0, 0))).action == "expand"

        hits.hits = [single]
        with caplog.at_level(logging.INFO, logger="maplat.cluster.layer"):
            outcome = run(layer.on_click((5, 5)))

        assert outcome.action == "properties"
        assert outcome.properties == {"name": "castle"}
        assert layer.state.click_feature is group
        assert layer.state.click_resolution == 1.0
        assert "castle" in caplog.text

    def test_aggregate_below_max_zoom_fits_extent(self, layer, group):
        view = FakeView(zoom=3, max_zoom=10)
        layer.register_map(view, StaticHitTester([group]))

        outcome = run(layer.on_click((0, 0)))

        assert outcome.action == "fit"
        assert view.fits == [((0.0, 0.0, 10.0, 10.0), (50.0, 50.0, 50.0, 50.0), 500)]
        assert layer.state.click_feature is None

    def test_aggregate_at_max_zoom_expands(self, layer, group):
        layer.register_map(FakeView(zoom=10, max_zoom=10), StaticHitTester([group]))

        outcome = run(layer.on_click((0, 0)))

        assert outcome.action == "expand"
        assert layer.state.click_feature is group
        assert layer.state.click_resolution == 1.0

    def test_sub_pixel_extent_expands_below_max_zoom(self, internal_config):
        layer = ClusterLayer([Feature(Point(0, 0)), Feature(Point(0.5, 0.5))], internal_config)
        cluster = layer.clusters(1.0)[0]
        view = FakeView(zoom=2, max_zoom=10)
        layer.register_map(view, StaticHitTester([cluster]))

        assert run(layer.on_click((0, 0))).action == "expand"
        assert view.fits == []

    def test_empty_click_clears_expansion(self, layer, group):
        tester = StaticHitTester([group])
        layer.register_map(FakeView(zoom=10, max_zoom=10), tester)
        run(layer.on_click((0, 0)))

        tester.hits = []
        assert run(layer.on_click((400, 400))).action == "none"
        assert layer.state.click_feature is None
        assert layer.state.click_resolution is None

    def test_older_click_resolving_late_is_discarded(self, layer, group):
        tester = ScriptedHitTester()
        layer.register_map(FakeView(zoom=10, max_zoom=10), tester)

        async def scenario():
            first = asyncio.create_task(layer.on_click((0, 0)))
            second = asyncio.create_task(layer.on_click((400, 400)))
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            tester.resolve(1, [])
            tester.resolve(0, [group])
            return await first, await second

        stale, fresh = run(scenario())

        assert stale.action == "stale"
        assert fresh.action == "none"
        assert layer.state.click_feature is None

    def test_move_older_than_committed_click_is_discarded(self, layer, group, single):
        tester = ScriptedHitTester()
        layer.register_map(FakeView(zoom=10, max_zoom=10), tester)

        async def scenario():
            move = asyncio.create_task(layer.on_pointer_move((990, 990)))
            click = asyncio.create_task(layer.on_click((0, 0)))
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            tester.resolve(1, [group])
            tester.resolve(0, [single])
            return await move, await click

        moved, clicked = run(scenario())

        assert clicked.action == "expand"
        assert moved is False
        assert layer.state.hover_feature is None


class TestSpiderfy:

    def test_expanded_cluster_draws_legs_then_members(self, layer, group):
        layer.register_map(FakeView(zoom=10, max_zoom=10), StaticHitTester([group]))
        run(layer.on_click((0, 0)))

        styles = layer.circle_style(group, 1.0)

        assert len(styles) == 6
        assert [s.geometry.geom_type for s in styles] == ["LineString"] * 3 + ["Point"] * 3
        placed = [s.geometry.coords[0] for s in styles[3:]]
        assert placed == [pytest.approx(p) for p in layer.spider_points(group, 1.0)]

    def test_resolution_change_lapses_expansion(self, layer, group):
        layer.register_map(FakeView(zoom=10, max_zoom=10), StaticHitTester([group]))
        run(layer.on_click((0, 0)))

        assert layer.circle_style(group, 2.0) is None

    def test_rebuilt_clusters_are_not_expanded(self, layer, group):
        layer.register_map(FakeView(zoom=10, max_zoom=10), StaticHitTester([group]))
        run(layer.on_click((0, 0)))

        layer.set_features(make_features())
        rebuilt = layer.clusters(1.0)[0]

        assert rebuilt is not group
        assert layer.circle_style(rebuilt, 1.0) is None

    def test_placed_members_keep_their_properties(self, internal_config):
        layer = ClusterLayer(make_features(), internal_config,
                             icon_generator=lambda f: f.get("name"))
        group = layer.clusters(1.0)[0]
        layer.register_map(FakeView(zoom=10, max_zoom=10), StaticHitTester([group]))
        run(layer.on_click((0, 0)))

        icons = [s.image for s in layer.circle_style(group, 1.0)[3:]]
        assert icons == ["gate", "well", "shrine"]
