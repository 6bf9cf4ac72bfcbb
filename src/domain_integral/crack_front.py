"""Crack-front geometry: local frames, segment lengths and q-function rings.

The interaction integral only relies on the :class:`CrackFrontFrame`
protocol. :class:`CrackFrontDefinition` is the implementation used by the
examples and tests: a polyline of crack-front points with per-point rotation
to local crack-front coordinates ``(x1, x2, x3) = (crack direction, crack
plane normal, front tangent)``.
"""

from __future__ import annotations

from typing import Dict, Optional, Protocol, Sequence, Tuple

import numpy as np
from scipy.sparse import diags
from scipy.sparse.csgraph import shortest_path

from domain_integral.errors import ConfigurationError
from domain_integral.fem.mesh import Mesh, find_nearest_node, node_adjacency


class CrackFrontFrame(Protocol):
    """Read-only crack-front services consumed by the interaction integral."""

    n_points: int

    def treat_as_2d(self) -> bool: ...

    def rotation_matrix(self, point: int) -> np.ndarray: ...

    def rotate_vector(self, v: np.ndarray, point: int) -> np.ndarray: ...

    def rotate_tensor(self, T: np.ndarray, point: int) -> np.ndarray: ...

    def forward_segment_length(self, point: int) -> float: ...

    def backward_segment_length(self, point: int) -> float: ...

    def tangential_strain(self, point: int) -> float: ...

    def geometric_weight(self, point: int, ring: int, node_coords: np.ndarray) -> float: ...

    def topological_weight(self, point: int, ring: int, node_id: int) -> float: ...

    def has_geometric_ring(self, ring: int) -> bool: ...

    def has_topological_ring(self, ring: int) -> bool: ...


def _unit(v: np.ndarray, what: str) -> np.ndarray:
    n = float(np.linalg.norm(v))
    if n <= 1e-14:
        raise ConfigurationError(f"{what} has zero length")
    return np.asarray(v, dtype=float) / n


def _pad3(p) -> np.ndarray:
    p = np.asarray(p, dtype=float).reshape(-1)
    out = np.zeros(3, dtype=float)
    out[: min(3, p.size)] = p[:3]
    return out


class CrackFrontDefinition:
    """Polyline crack front with geometric and topological q-functions.

    Parameters
    ----------
    points : (n, 2|3) array
        Ordered crack-front points. A single point is treated as 2D.
    crack_direction : (3,) optional
        Global crack-extension direction; projected normal to the tangent.
    crack_plane_normal : (3,) optional
        Crack-plane normal; the direction is then ``normal x tangent``
        (order the front so this points into the uncracked ligament).
    tangent_2d : (3,)
        Front tangent used when the front is treated as 2D.
    treat_as_2d : bool, optional
        Override the 2D detection (default: ``n == 1``).
    radius_inner, radius_outer : sequences
        Geometric q-function radii, one pair per ring (ring 1 first).
    """

    def __init__(
        self,
        points,
        *,
        crack_direction: Optional[Sequence[float]] = None,
        crack_plane_normal: Optional[Sequence[float]] = None,
        tangent_2d: Sequence[float] = (0.0, 0.0, 1.0),
        treat_as_2d: Optional[bool] = None,
        radius_inner: Sequence[float] = (),
        radius_outer: Sequence[float] = (),
    ):
        pts = np.atleast_2d(np.asarray(points, dtype=float))
        if pts.shape[0] < 1:
            raise ConfigurationError("A crack front needs at least one point")
        self.points = np.array([_pad3(p) for p in pts], dtype=float)
        self.n_points = int(self.points.shape[0])
        self._treat_as_2d = bool(self.n_points == 1) if treat_as_2d is None else bool(treat_as_2d)

        if crack_direction is not None and crack_plane_normal is not None:
            raise ConfigurationError("Give either crack_direction or crack_plane_normal, not both")
        if crack_direction is None and crack_plane_normal is None:
            crack_direction = (1.0, 0.0, 0.0)

        self.radius_inner = np.asarray(radius_inner, dtype=float).reshape(-1)
        self.radius_outer = np.asarray(radius_outer, dtype=float).reshape(-1)
        if self.radius_inner.shape != self.radius_outer.shape:
            raise ConfigurationError("radius_inner and radius_outer must have one entry per ring")
        if np.any(self.radius_outer <= self.radius_inner) or np.any(self.radius_inner < 0.0):
            raise ConfigurationError("Each ring needs 0 <= radius_inner < radius_outer")

        self._forward = np.zeros(self.n_points, dtype=float)
        self._backward = np.zeros(self.n_points, dtype=float)
        for i in range(self.n_points - 1):
            L = float(np.linalg.norm(self.points[i + 1] - self.points[i]))
            self._forward[i] = L
            self._backward[i + 1] = L

        self.tangents = self._compute_tangents(tangent_2d)
        self.rotations = np.zeros((self.n_points, 3, 3), dtype=float)
        for i in range(self.n_points):
            t = self.tangents[i]
            if crack_plane_normal is not None:
                d = _unit(np.cross(_pad3(crack_plane_normal), t), "crack direction (normal x tangent)")
            else:
                v = _pad3(crack_direction)
                d = _unit(v - float(np.dot(v, t)) * t, "crack direction projected normal to the tangent")
            n = np.cross(t, d)
            self.rotations[i] = np.vstack([d, n, t])

        self._tangential_strain = np.zeros(self.n_points, dtype=float)

        # (point, ring) -> boolean node mask
        self._rings: Dict[Tuple[int, int], np.ndarray] = {}
        self._ring_range: Optional[Tuple[int, int]] = None
        self.front_nodes: Optional[np.ndarray] = None

    # ------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------

    def _compute_tangents(self, tangent_2d) -> np.ndarray:
        T = np.zeros((self.n_points, 3), dtype=float)
        if self._treat_as_2d or self.n_points == 1:
            T[:] = _unit(_pad3(tangent_2d), "tangent_2d")
            return T
        for i in range(self.n_points):
            acc = np.zeros(3, dtype=float)
            if i < self.n_points - 1:
                acc += _unit(self.points[i + 1] - self.points[i], f"crack-front segment {i}")
            if i > 0:
                acc += _unit(self.points[i] - self.points[i - 1], f"crack-front segment {i - 1}")
            T[i] = _unit(acc, f"tangent at crack-front point {i}")
        return T

    def _check_point(self, point: int) -> int:
        p = int(point)
        if p < 0 or p >= self.n_points:
            raise ConfigurationError(
                f"crack_front_point_index={point} out of range (front has {self.n_points} points)"
            )
        return p

    def treat_as_2d(self) -> bool:
        return self._treat_as_2d

    def crack_front_point(self, point: int) -> np.ndarray:
        return self.points[self._check_point(point)]

    def rotation_matrix(self, point: int) -> np.ndarray:
        return self.rotations[self._check_point(point)]

    def rotate_vector(self, v, point: int) -> np.ndarray:
        return self.rotation_matrix(point) @ _pad3(v)

    def rotate_tensor(self, T, point: int) -> np.ndarray:
        R = self.rotation_matrix(point)
        return R @ np.asarray(T, dtype=float) @ R.T

    def forward_segment_length(self, point: int) -> float:
        return float(self._forward[self._check_point(point)])

    def backward_segment_length(self, point: int) -> float:
        return float(self._backward[self._check_point(point)])

    # ------------------------------------------------------------------
    # Tangential strain (T-stress correction)
    # ------------------------------------------------------------------

    def tangential_strain(self, point: int) -> float:
        return float(self._tangential_strain[self._check_point(point)])

    def set_tangential_strain(self, values) -> None:
        values = np.asarray(values, dtype=float).reshape(-1)
        if values.shape != (self.n_points,):
            raise ConfigurationError(f"Expected {self.n_points} tangential strains, got {values.shape[0]}")
        self._tangential_strain = values.copy()

    def update_tangential_strain(self, displacements) -> np.ndarray:
        """Tangential strain from crack-front point displacements (n, 2|3).

        Each point takes the mean stretch of its forward and backward
        segments (one segment at the ends, zero for a single point).
        """
        u = np.array([_pad3(v) for v in np.atleast_2d(displacements)], dtype=float)
        if u.shape[0] != self.n_points:
            raise ConfigurationError(f"Expected {self.n_points} displacements, got {u.shape[0]}")
        seg = np.zeros(max(self.n_points - 1, 0), dtype=float)
        for i in range(self.n_points - 1):
            d0 = self.points[i + 1] - self.points[i]
            d1 = d0 + (u[i + 1] - u[i])
            L0 = float(np.linalg.norm(d0))
            seg[i] = (float(np.linalg.norm(d1)) - L0) / L0
        eps = np.zeros(self.n_points, dtype=float)
        for i in range(self.n_points):
            vals = []
            if i > 0:
                vals.append(seg[i - 1])
            if i < self.n_points - 1:
                vals.append(seg[i])
            eps[i] = float(np.mean(vals)) if vals else 0.0
        self._tangential_strain = eps
        return eps.copy()

    # ------------------------------------------------------------------
    # Geometric q-function
    # ------------------------------------------------------------------

    def has_geometric_ring(self, ring: int) -> bool:
        return 0 <= int(ring) < int(self.radius_inner.size)

    def project_to_front(self, point: int, node_coords) -> Tuple[float, float]:
        """Return (distance to the front axis, signed distance along the tangent)."""
        p = self.crack_front_point(point)
        t = self.tangents[int(point)]
        x = _pad3(node_coords) - p
        s = float(np.dot(x, t))
        r = float(np.linalg.norm(x - s * t))
        return r, s

    def geometric_weight(self, point: int, ring: int, node_coords) -> float:
        """Radial ramp between the ring radii, times a tangential tent in 3D.

        ``ring`` is the zero-based index into the radius lists.
        """
        if not self.has_geometric_ring(ring):
            raise ConfigurationError(f"Geometric ring index {ring} has no radii defined")
        r_in = float(self.radius_inner[int(ring)])
        r_out = float(self.radius_outer[int(ring)])
        r, s = self.project_to_front(point, node_coords)

        q = 1.0
        if r_in < r < r_out:
            q = (r_out - r) / (r_out - r_in)
        elif r >= r_out:
            q = 0.0

        if q > 0.0 and not self._treat_as_2d:
            fwd = self.forward_segment_length(point)
            bwd = self.backward_segment_length(point)
            mult = 1.0
            if s >= 0.0:
                if fwd > 0.0:
                    mult = 1.0 - s / fwd
            elif bwd > 0.0:
                mult = 1.0 + s / bwd
            q *= min(max(mult, 0.0), 1.0)
        return float(q)

    # ------------------------------------------------------------------
    # Topological q-function
    # ------------------------------------------------------------------

    def build_topological_rings(
        self,
        mesh: Mesh,
        first_ring: int,
        last_ring: int,
        node_ids: Optional[Sequence[int]] = None,
    ) -> None:
        """Build cumulative node rings around every crack-front point.

        Ring 1 holds the crack-front node(s); ring ``k+1`` adds every node
        sharing an element with ring ``k``. In 3D the other crack-front nodes
        are excluded from the rings of a point.
        """
        first_ring = int(first_ring)
        last_ring = int(last_ring)
        if first_ring < 1 or last_ring < first_ring:
            raise ConfigurationError(
                f"Topological rings need 1 <= first_ring <= last_ring, got ({first_ring}, {last_ring})"
            )
        if node_ids is None:
            node_ids = [find_nearest_node(mesh.nodes, p[: mesh.dim]) for p in self.points]
        front = np.asarray(node_ids, dtype=int).reshape(-1)
        if front.shape[0] != self.n_points:
            raise ConfigurationError(f"Expected {self.n_points} crack-front nodes, got {front.shape[0]}")

        G = node_adjacency(mesh)
        self._rings.clear()
        if self._treat_as_2d:
            hops = np.min(shortest_path(G, unweighted=True, indices=np.unique(front)), axis=0)
            for i in range(self.n_points):
                for ring in range(first_ring, last_ring + 1):
                    self._rings[(i, ring)] = hops <= ring - 1
        else:
            for i in range(self.n_points):
                allowed = np.ones(mesh.n_nodes, dtype=float)
                allowed[front] = 0.0
                allowed[front[i]] = 1.0
                mask = diags(allowed)
                Gi = (mask @ G @ mask).tocsr()
                Gi.eliminate_zeros()
                hops = shortest_path(Gi, unweighted=True, indices=int(front[i]))
                for ring in range(first_ring, last_ring + 1):
                    self._rings[(i, ring)] = hops <= ring - 1

        self._ring_range = (first_ring, last_ring)
        self.front_nodes = front

    def has_topological_ring(self, ring: int) -> bool:
        if self._ring_range is None:
            return False
        return self._ring_range[0] <= int(ring) <= self._ring_range[1]

    def topological_weight(self, point: int, ring: int, node_id: int) -> float:
        key = (self._check_point(point), int(ring))
        if key not in self._rings:
            raise ConfigurationError(
                f"Topological ring {ring} is not built; call build_topological_rings() first"
            )
        return 1.0 if bool(self._rings[key][int(node_id)]) else 0.0
