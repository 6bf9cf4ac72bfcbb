"""Ring weight functions (q) and their interpolation over an element.

Two strategies produce nodal q values around a crack-front point:

* :class:`GeometricRing` -- radius-based q from the crack-front geometry.
  Rings are numbered from 1, the geometry stores them from 0.
* :class:`TopologicalRing` -- node-connectivity rings, looked up by their
  own number.

The ring-index offset is a property of the strategy. Whatever the solution
order, q and its gradient are interpolated with the element's first-order
Lagrange basis on the element's quadrature rule.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from domain_integral.errors import ConfigurationError
from domain_integral.fem.mesh import ElementQuadrature, Mesh


@dataclass(frozen=True)
class GeometricRing:
    ring_index: int

    kind = "geometry"
    ring_offset = 1

    @property
    def lookup_index(self) -> int:
        return int(self.ring_index) - self.ring_offset

    def validate(self, frame) -> None:
        if int(self.ring_index) < 1:
            raise ConfigurationError(f"Geometric ring_index must be >= 1, got {self.ring_index}")
        if not frame.has_geometric_ring(self.lookup_index):
            raise ConfigurationError(
                f"ring_index={self.ring_index} has no radii defined on the crack front"
            )

    def nodal_weight(self, frame, point: int, mesh: Mesh, node_id: int) -> float:
        return float(frame.geometric_weight(point, self.lookup_index, mesh.node_coords3(node_id)))


@dataclass(frozen=True)
class TopologicalRing:
    ring_index: int
    ring_first: int

    kind = "topology"
    ring_offset = 0

    @property
    def lookup_index(self) -> int:
        return int(self.ring_index) - self.ring_offset

    def validate(self, frame) -> None:
        if int(self.ring_first) < 1:
            raise ConfigurationError(f"ring_first must be >= 1, got {self.ring_first}")
        if int(self.ring_index) < int(self.ring_first):
            raise ConfigurationError(
                f"ring_index={self.ring_index} is below ring_first={self.ring_first}"
            )
        if not frame.has_topological_ring(self.lookup_index):
            raise ConfigurationError(
                f"Topological ring {self.ring_index} has not been built on the crack front"
            )

    def nodal_weight(self, frame, point: int, mesh: Mesh, node_id: int) -> float:
        return float(frame.topological_weight(point, self.lookup_index, int(node_id)))


def make_ring_weight(q_function_type: str, ring_index: int, ring_first: Optional[int] = None):
    if q_function_type == "geometry":
        return GeometricRing(int(ring_index))
    if q_function_type == "topology":
        if ring_first is None:
            raise ConfigurationError("q_function_type='topology' requires ring_first")
        return TopologicalRing(int(ring_index), int(ring_first))
    raise ConfigurationError(f"Unknown q_function_type='{q_function_type}'")


def nodal_weights(ring, frame, point: int, mesh: Mesh, e: int) -> np.ndarray:
    """q at every node of element ``e`` (higher-order nodes included)."""
    return np.array(
        [ring.nodal_weight(frame, point, mesh, int(n)) for n in mesh.elems[int(e)]],
        dtype=float,
    )


@dataclass
class WeightField:
    """q on one element: nodal values plus values and gradients at the qps."""

    q_nodes: np.ndarray
    q: np.ndarray
    grad_q: np.ndarray

    @property
    def is_zero(self) -> bool:
        return not np.any(self.q_nodes)


def interpolate_weights(q_nodes: np.ndarray, phi: np.ndarray, dphi: np.ndarray) -> WeightField:
    """Interpolate vertex q values with the first-order basis.

    phi : (nqp, nv), dphi : (nqp, nv, 3)
    """
    nv = phi.shape[1]
    qv = np.asarray(q_nodes, dtype=float)[:nv]
    q = phi @ qv
    grad_q = np.einsum("knj,n->kj", dphi, qv)
    return WeightField(q_nodes=np.asarray(q_nodes, dtype=float), q=q, grad_q=grad_q)


def build_weight_field(ring, frame, point: int, mesh: Mesh, quad: ElementQuadrature, e: int) -> WeightField:
    return interpolate_weights(nodal_weights(ring, frame, point, mesh, e), quad.phi, quad.dphi[int(e)])
