"""Cluster layer: styling and the hover / click interaction state machine.

States, per layer:

- Idle: no hover, no expanded cluster.
- Hovering(cluster): the pointer is over a cluster; its convex hull is
  drawn when it has more than one member.
- Expanded(cluster, resolution): a multi-member cluster was clicked at
  maximum zoom, or with a member extent below one screen pixel; its
  members are drawn spiderfied around it.

Expanded state is tied to the resolution at click time and to the cluster
object identity, so it lapses by itself once the view resolution changes
or the clusters are rebuilt.

Pointer handlers are coroutines: hit-testing is asynchronous, and a
result is committed only if no newer event has been committed in the
meantime (tracked with a monotonic event version).
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, NamedTuple, Optional, Protocol, Sequence, TYPE_CHECKING

from shapely.geometry import LineString, Point

from maplat.cluster.engine import Cluster, ClusterEngine
from maplat.cluster.hull import hull_geometry
from maplat.cluster.spider import generate_points_circle
from maplat.cluster.styles import CircleStyle, Fill, Stroke, Style, TextStyle
from maplat.vector.feature import Feature

if TYPE_CHECKING:
    from maplat.schemas import InternalConfig

__all__ = [
    'ClusterLayer',
    'InteractionState',
    'ClickOutcome',
    'ViewLike',
    'HitTester',
]

logger = logging.getLogger(__name__)

Pixel = tuple[float, float]
Extent = tuple[float, float, float, float]
IconGenerator = Callable[[Feature], Any]


class ViewLike(Protocol):
    """The map view the layer is displayed in."""

    def get_resolution(self) -> float: ...

    def get_zoom(self) -> float: ...

    def get_max_zoom(self) -> float: ...

    def fit(self, extent: Extent, padding: Sequence[float], duration: int) -> None: ...


class HitTester(Protocol):
    """Resolves the clusters drawn at a screen pixel, top-most first."""

    async def clusters_at_pixel(self, pixel: Pixel) -> Sequence[Cluster]: ...


@dataclass
class InteractionState:
    hover_feature: Optional[Cluster] = None
    click_feature: Optional[Cluster] = None
    click_resolution: Optional[float] = None
    # Version of the last committed pointer event
    version: int = 0


class ClickOutcome(NamedTuple):
    """What a click did.

    ``action`` is one of ``"none"`` (empty space), ``"properties"``
    (single member), ``"expand"``, ``"fit"`` or ``"stale"`` (discarded).
    """
    action: str
    cluster: Optional[Cluster] = None
    properties: Optional[dict] = None
    extent: Optional[Extent] = None


class ClusterLayer:
    """Clustered point layer with hull-on-hover and spiderfy-on-click.

    Parameters
    ----------
    features : iterable of Feature
        Point features in the view's projection.
    config : InternalConfig
        Resolved configuration; ``config.cluster`` supplies distances,
        layout constants and styles.
    icon_generator : callable, optional
        ``member -> image`` used for individual member styling.

    Examples
    --------
    >>> layer = ClusterLayer(features, config)
    >>> layer.register_map(view, hit_tester)
    >>> await layer.on_pointer_move((120, 45))
    """

    def __init__(self, features, config: "InternalConfig",
                 icon_generator: Optional[IconGenerator] = None):
        cfg = config.cluster
        self.engine = ClusterEngine(features, cfg.distance)
        self.icon_generator = icon_generator

        self.circle_distance_multiplier = cfg.circle_distance_multiplier
        self.circle_foot_separation = cfg.circle_foot_separation
        self.circle_start_angle = cfg.circle_start_angle
        self.min_leg_length = cfg.min_leg_length
        self.fit_padding = tuple(cfg.fit_padding)
        self.fit_duration_ms = cfg.fit_duration_ms

        self.hull_fill = Fill(cfg.hull.fill_color)
        self.hull_stroke = Stroke(cfg.hull.stroke_color, cfg.hull.stroke_width)
        badge = cfg.badge
        self.outer_circle = CircleStyle(badge.outer_radius, Fill(badge.outer_fill))
        self.inner_circle = CircleStyle(badge.inner_radius, Fill(badge.inner_fill))
        self.text_fill = Fill(badge.text_fill)
        self.text_stroke = Stroke(badge.text_stroke_color, badge.text_stroke_width)

        self.state = InteractionState()
        self.cursor = ""
        self.view: Optional[ViewLike] = None
        self.hit_tester: Optional[HitTester] = None

        self._dispatched = 0
        self._latest_move = 0
        self._latest_click = 0

    def register_map(self, view: ViewLike, hit_tester: HitTester) -> None:
        self.view = view
        self.hit_tester = hit_tester

    def set_features(self, features) -> None:
        self.engine.set_features(features)

    def clusters(self, resolution: float) -> tuple[Cluster, ...]:
        return self.engine.clusters(resolution)

    def clusters_at_coordinate(self, coordinate: Sequence[float], resolution: float,
                               tolerance_px: Optional[float] = None) -> list[Cluster]:
        """Clusters whose badge covers ``coordinate``, nearest first.

        A plain geometric hit-test for collaborators without rasterized
        hit detection; ``tolerance_px`` defaults to the outer badge radius.
        """
        radius = (tolerance_px if tolerance_px is not None else self.outer_circle.radius) * resolution
        target = Point(coordinate[0], coordinate[1])
        hits = [(c.geometry.distance(target), i, c)
                for i, c in enumerate(self.clusters(resolution))]
        return [c for d, _, c in sorted(hits) if d <= radius]

    # ------------------------------------------------------------------
    # Styles
    # ------------------------------------------------------------------

    def member_style(self, member: Feature) -> Style:
        image = self.icon_generator(member) if self.icon_generator else None
        return Style(geometry=member.geometry, image=image)

    def cluster_style(self, cluster: Cluster) -> list[Style]:
        """Count badge for aggregates, the member's own style for singletons."""
        if cluster.size > 1:
            return [
                Style(image=self.outer_circle),
                Style(
                    image=self.inner_circle,
                    text=TextStyle(str(cluster.size), self.text_fill, self.text_stroke),
                ),
            ]
        return [self.member_style(cluster.members[0])]

    def hull_style(self, cluster: Cluster) -> Optional[Style]:
        """Convex hull of the hovered cluster's members, else None."""
        if cluster is not self.state.hover_feature or cluster.size < 2:
            return None
        geometry = hull_geometry(m.geometry.coords[0] for m in cluster.members)
        return Style(geometry=geometry, fill=self.hull_fill, stroke=self.hull_stroke)

    def spider_points(self, cluster: Cluster, resolution: float) -> list[tuple[float, float]]:
        return generate_points_circle(
            cluster.size,
            cluster.coordinates,
            resolution,
            multiplier=self.circle_distance_multiplier,
            foot_separation=self.circle_foot_separation,
            start_angle=self.circle_start_angle,
            min_leg=self.min_leg_length,
        )

    def circle_style(self, cluster: Cluster, resolution: float) -> Optional[list[Style]]:
        """Spiderfied legs and members of the expanded cluster, else None.

        Legs come first so members draw on top of them.
        """
        if cluster is not self.state.click_feature or resolution != self.state.click_resolution:
            return None

        center = cluster.coordinates
        styles: list[Style] = []
        for member, placed in zip(cluster.members, self.spider_points(cluster, resolution)):
            styles.insert(0, Style(geometry=LineString([center, placed]), stroke=self.hull_stroke))
            styles.append(self.member_style(Feature(Point(placed), member.properties)))
        return styles

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def _dispatch(self) -> int:
        self._dispatched += 1
        return self._dispatched

    def _require_map(self) -> None:
        if self.view is None or self.hit_tester is None:
            raise RuntimeError("ClusterLayer.register_map() must be called before pointer events")

    async def on_pointer_move(self, pixel: Pixel) -> bool:
        """Track the top-most cluster under the pointer.

        Returns True when the hover state changed.
        """
        self._require_map()
        version = self._dispatch()
        self._latest_move = version

        hits = await self.hit_tester.clusters_at_pixel(pixel)

        if version != self._latest_move or version < self.state.version:
            logger.debug("Discarding stale pointer-move result (event %d)", version)
            return False

        self.state.version = version
        top = hits[0] if hits else None
        if top is self.state.hover_feature:
            return False

        self.state.hover_feature = top
        self.cursor = "pointer" if top is not None else ""
        return True

    async def on_click(self, pixel: Pixel) -> ClickOutcome:
        """Expand, zoom to, or report the cluster under the pointer."""
        self._require_map()
        version = self._dispatch()
        self._latest_click = version

        hits = await self.hit_tester.clusters_at_pixel(pixel)

        if version != self._latest_click:
            logger.debug("Discarding stale click result (event %d)", version)
            return ClickOutcome("stale")
        self.state.version = max(self.state.version, version)

        if not hits:
            self.state.click_feature = None
            self.state.click_resolution = None
            return ClickOutcome("none")

        cluster = hits[0]
        if cluster.size == 1:
            properties = dict(cluster.members[0].properties)
            logger.info("Feature properties: %s", properties)
            return ClickOutcome("properties", cluster, properties)

        extent = cluster.extent
        resolution = self.view.get_resolution()
        width = extent[2] - extent[0]
        height = extent[3] - extent[1]

        if self.view.get_zoom() == self.view.get_max_zoom() or (width < resolution and height < resolution):
            self.state.click_feature = cluster
            self.state.click_resolution = resolution
            return ClickOutcome("expand", cluster, extent=extent)

        self.view.fit(extent, padding=self.fit_padding, duration=self.fit_duration_ms)
        return ClickOutcome("fit", cluster, extent=extent)
