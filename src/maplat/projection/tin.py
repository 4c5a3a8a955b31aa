"""Triangulated Irregular Network (TIN) warp between image and map space.

A TIN is a piecewise-linear mapping defined by control point pairs
(image pixel ↔ reference coordinate) joined into triangles. Inside each
triangle the mapping is the unique affine map that sends the three source
vertices onto their targets, computed here with barycentric coordinates.

Compiled data (the ``compiled`` object of a map descriptor) provides:

- ``points``: list of ``[source_xy, target_xy]`` control point pairs
- ``centroid_point``: optional ``[source_xy, target_xy]``
- ``vertices_points``: optional list of ``[source_xy, target_xy]`` boundary
  vertices, so the mesh covers the whole image
- ``tins_points``: optional triangle lists. Entry 0 is used forward, entry
  1 (when present) backward. Vertex keys are point indices, ``"c"`` for the
  centroid and ``"bN"`` for boundary vertex N.
- ``yaxisMode``: ``"invert"`` (default, image Y grows downward) or
  ``"follow"`` (image Y already grows upward).

When ``tins_points`` is absent the source nodes are triangulated with
``scipy.spatial.Delaunay``.

Points outside the mesh are extrapolated with the triangle they are least
outside of.
"""

import logging
from typing import Any, Optional, Sequence

import numpy as np
from scipy.spatial import Delaunay, QhullError

from maplat.errors import DescriptorError

__all__ = ['Tin']

logger = logging.getLogger(__name__)

# Barycentric tolerance for points on shared edges
_EDGE_EPS = 1e-10


class _Mesh:
    """One direction of a TIN: triangles located in ``src``, valued in ``dst``."""

    def __init__(self, src: np.ndarray, dst: np.ndarray, triangles: np.ndarray):
        self.src = src
        self.dst = dst
        self.triangles = triangles

        a = src[triangles[:, 0]]
        self._origin = a
        self._v0 = src[triangles[:, 1]] - a
        self._v1 = src[triangles[:, 2]] - a
        self._den = self._v0[:, 0] * self._v1[:, 1] - self._v1[:, 0] * self._v0[:, 1]
        self._valid = self._den != 0
        if not self._valid.all():
            logger.debug("TIN mesh has %d degenerate triangle(s)", int((~self._valid).sum()))

    def barycentric(self, point: np.ndarray) -> np.ndarray:
        v2 = point - self._origin
        with np.errstate(divide="ignore", invalid="ignore"):
            l1 = (v2[:, 0] * self._v1[:, 1] - self._v1[:, 0] * v2[:, 1]) / self._den
            l2 = (self._v0[:, 0] * v2[:, 1] - v2[:, 0] * self._v0[:, 1]) / self._den
        l0 = 1.0 - l1 - l2
        return np.stack([l0, l1, l2], axis=1)

    def transform(self, point: Sequence[float]) -> tuple[float, float]:
        p = np.asarray(point[:2], dtype=float)
        weights = self.barycentric(p)
        worst = np.where(self._valid, weights.min(axis=1), -np.inf)

        inside = np.flatnonzero(worst >= -_EDGE_EPS)
        index = inside[0] if inside.size else int(np.argmax(worst))

        tri = self.triangles[index]
        out = weights[index] @ self.dst[tri]
        return (float(out[0]), float(out[1]))


class Tin:
    """Piecewise-linear warp built from compiled control point data.

    Examples
    --------
    >>> tin = Tin()
    >>> tin.set_compiled({"points": [[[0, 0], [0, 0]], [[10, 0], [20, 0]],
    ...                              [[0, 10], [0, -20]], [[10, 10], [20, -20]]]})
    >>> tin.transform((5, 5))
    (10.0, -10.0)
    >>> tin.transform((10.0, -10.0), inverse=True)
    (5.0, 5.0)
    """

    def __init__(self):
        self._forward: Optional[_Mesh] = None
        self._backward: Optional[_Mesh] = None
        self.yaxis_follow = False
        self.wh: Optional[tuple[int, int]] = None

    @property
    def is_compiled(self) -> bool:
        return self._forward is not None

    def set_compiled(self, compiled: dict[str, Any]) -> None:
        """Load compiled TIN data.

        Raises
        ------
        DescriptorError
            If the data has fewer than three control points or references
            unknown vertices.
        """
        if not isinstance(compiled, dict):
            raise DescriptorError("TIN compiled data must be a JSON object")

        pairs = [pair[:2] for pair in compiled.get("points") or []]
        keys: dict[str, int] = {}

        centroid = compiled.get("centroid_point")
        if centroid:
            keys["c"] = len(pairs)
            pairs.append(centroid[:2])

        for i, vertex in enumerate(compiled.get("vertices_points") or []):
            keys[f"b{i}"] = len(pairs)
            pairs.append(vertex[:2])

        if len(pairs) < 3:
            raise DescriptorError(
                f"TIN compiled data needs at least 3 control points, got {len(pairs)}"
            )

        try:
            src = np.array([p[0] for p in pairs], dtype=float)
            dst = np.array([p[1] for p in pairs], dtype=float)
        except (TypeError, ValueError, IndexError) as exc:
            raise DescriptorError(f"TIN control points are malformed: {exc}") from exc

        self.yaxis_follow = compiled.get("yaxisMode") == "follow"
        wh = compiled.get("wh")
        try:
            self.wh = (int(wh[0]), int(wh[1])) if wh else None
        except (TypeError, ValueError, IndexError, KeyError) as exc:
            raise DescriptorError(f"TIN wh is not a [width, height] pair: {wh!r}") from exc

        tins = compiled.get("tins_points")
        if tins:
            forward = self._resolve_triangles(tins[0], keys, len(pairs))
            backward = self._resolve_triangles(tins[1], keys, len(pairs)) if len(tins) > 1 else forward
        else:
            try:
                forward = Delaunay(src).simplices.astype(int)
            except QhullError as exc:
                raise DescriptorError(f"TIN control points cannot be triangulated: {exc}") from exc
            backward = forward

        self._forward = _Mesh(src, dst, forward)
        self._backward = _Mesh(dst, src, backward)
        logger.debug("TIN compiled: %d nodes, %d forward / %d backward triangles",
                     len(pairs), len(forward), len(backward))

    @staticmethod
    def _resolve_triangles(triangles, keys: dict[str, int], count: int) -> np.ndarray:
        resolved = []
        for tri in triangles:
            row = []
            for key in tri:
                if isinstance(key, str) and key in keys:
                    row.append(keys[key])
                elif isinstance(key, (int, np.integer)) and 0 <= key < count:
                    row.append(int(key))
                else:
                    raise DescriptorError(f"TIN triangle references unknown vertex {key!r}")
            resolved.append(row)
        return np.array(resolved, dtype=int).reshape(-1, 3)

    def transform(self, xy: Sequence[float], inverse: bool = False) -> tuple[float, float]:
        """Map a point image → target (``inverse=False``) or target → image."""
        if self._forward is None:
            raise RuntimeError("Tin.transform() called before set_compiled()")

        if inverse:
            x, y = self._backward.transform(xy)
            return (x, -y) if self.yaxis_follow else (x, y)

        if self.yaxis_follow:
            xy = (xy[0], -xy[1])
        return self._forward.transform(xy)
