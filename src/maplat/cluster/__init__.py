"""Cluster engine: point clustering, hull, spiderfy layout and interaction."""

from maplat.cluster.engine import Cluster, ClusterEngine, cluster_features
from maplat.cluster.hull import hull_geometry, monotone_chain_convex_hull
from maplat.cluster.layer import ClickOutcome, ClusterLayer, InteractionState
from maplat.cluster.spider import generate_points_circle, leg_length
from maplat.cluster.styles import CircleStyle, Fill, Stroke, Style, TextStyle

__all__ = [
    'Cluster',
    'ClusterEngine',
    'cluster_features',
    'hull_geometry',
    'monotone_chain_convex_hull',
    'ClickOutcome',
    'ClusterLayer',
    'InteractionState',
    'generate_points_circle',
    'leg_length',
    'CircleStyle',
    'Fill',
    'Stroke',
    'Style',
    'TextStyle',
]
