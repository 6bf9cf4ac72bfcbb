"""Mesh container, structured generators and per-element quadrature data."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
import scipy.sparse as sp

from domain_integral.errors import ConfigurationError
from domain_integral.fem.quadrature import quadrature_rule
from domain_integral.fem.shapes import element_family, first_order_shape

COORD_SYSTEMS = ("xyz", "rz")


@dataclass
class Mesh:
    """Unstructured mesh of a single element type.

    ``nodes`` is (nn, dim) with ``dim`` equal to the element's parent
    dimension; ``elems`` is (ne, nen) with vertex nodes listed first.
    ``coord_system='rz'`` treats x as the radial axis (axisymmetric).
    """

    nodes: np.ndarray
    elems: np.ndarray
    elem_type: str = "QUAD4"
    coord_system: str = "xyz"

    def __post_init__(self):
        self.nodes = np.asarray(self.nodes, dtype=float)
        self.elems = np.asarray(self.elems, dtype=int)
        self.elem_type = str(self.elem_type).strip().upper()
        self.coord_system = str(self.coord_system).strip().lower()
        family, nv, pdim = element_family(self.elem_type)
        if self.coord_system not in COORD_SYSTEMS:
            raise ConfigurationError(
                f"Unknown coord_system='{self.coord_system}'. Use 'xyz' or 'rz'."
            )
        if self.nodes.ndim != 2 or self.nodes.shape[1] != pdim:
            raise ConfigurationError(
                f"{self.elem_type} needs nodes of shape (n, {pdim}), got shape={self.nodes.shape}"
            )
        if self.elems.ndim != 2 or self.elems.shape[1] < nv:
            raise ConfigurationError(
                f"{self.elem_type} needs at least {nv} nodes per element, got shape={self.elems.shape}"
            )
        if self.coord_system == "rz" and pdim != 2:
            raise ConfigurationError("Axisymmetric (rz) meshes must be two-dimensional")

    @property
    def dim(self) -> int:
        return int(self.nodes.shape[1])

    @property
    def n_elements(self) -> int:
        return int(self.elems.shape[0])

    @property
    def n_nodes(self) -> int:
        return int(self.nodes.shape[0])

    @property
    def family(self) -> str:
        return element_family(self.elem_type)[0]

    @property
    def n_vertices(self) -> int:
        return element_family(self.elem_type)[1]

    def node_coords3(self, node_id: int) -> np.ndarray:
        p = np.zeros(3, dtype=float)
        p[: self.dim] = self.nodes[int(node_id)]
        return p


def structured_quad_mesh(L: float, H: float, nx: int, ny: int, x0: float = 0.0, y0: float = 0.0):
    xs = x0 + np.linspace(0.0, L, nx + 1)
    ys = y0 + np.linspace(0.0, H, ny + 1)
    nodes = np.array([[x, y] for y in ys for x in xs], dtype=float)

    def nid(i, j):  # i along x, j along y
        return j * (nx + 1) + i

    elems = []
    for j in range(ny):
        for i in range(nx):
            n1 = nid(i, j)
            n2 = nid(i + 1, j)
            n3 = nid(i + 1, j + 1)
            n4 = nid(i, j + 1)
            elems.append([n1, n2, n3, n4])
    return nodes, np.array(elems, dtype=int)


def structured_hex_mesh(
    L: float, H: float, W: float, nx: int, ny: int, nz: int,
    x0: float = 0.0, y0: float = 0.0, z0: float = 0.0,
):
    """Box of HEX8 elements; node ids run x fastest, then y, then z."""
    xs = x0 + np.linspace(0.0, L, nx + 1)
    ys = y0 + np.linspace(0.0, H, ny + 1)
    zs = z0 + np.linspace(0.0, W, nz + 1)
    nodes = np.array([[x, y, z] for z in zs for y in ys for x in xs], dtype=float)

    def nid(i, j, k):
        return (k * (ny + 1) + j) * (nx + 1) + i

    elems = []
    for k in range(nz):
        for j in range(ny):
            for i in range(nx):
                elems.append([
                    nid(i, j, k), nid(i + 1, j, k), nid(i + 1, j + 1, k), nid(i, j + 1, k),
                    nid(i, j, k + 1), nid(i + 1, j, k + 1), nid(i + 1, j + 1, k + 1), nid(i, j + 1, k + 1),
                ])
    return nodes, np.array(elems, dtype=int)


def find_nearest_node(nodes: np.ndarray, point) -> int:
    """Return index of the node closest to ``point`` in Euclidean distance."""
    nodes = np.asarray(nodes, dtype=float)
    if nodes.ndim != 2:
        raise ValueError(f"nodes must be (n,dim) array, got shape={nodes.shape}")
    p = np.asarray(point, dtype=float).reshape(-1)[: nodes.shape[1]]
    d = nodes - p[None, :]
    return int(np.argmin(np.einsum("ij,ij->i", d, d)))


def node_adjacency(mesh: Mesh) -> sp.csr_matrix:
    """Symmetric node graph: two nodes are connected if they share an element."""
    rows = []
    cols = []
    for conn in mesh.elems:
        a, b = np.meshgrid(conn, conn, indexing="ij")
        rows.append(a.ravel())
        cols.append(b.ravel())
    rows = np.concatenate(rows) if rows else np.zeros(0, dtype=int)
    cols = np.concatenate(cols) if cols else np.zeros(0, dtype=int)
    keep = rows != cols
    data = np.ones(int(np.count_nonzero(keep)), dtype=float)
    n = mesh.n_nodes
    G = sp.coo_matrix((data, (rows[keep], cols[keep])), shape=(n, n)).tocsr()
    G.data[:] = 1.0
    return G


@dataclass
class ElementQuadrature:
    """Quadrature data for every element of a mesh.

    Attributes
    ----------
    points : (ne, nqp, 3) physical quadrature points (zero-padded in 2D)
    JxW : (ne, nqp) quadrature weight times Jacobian determinant
    coord : (ne, nqp) coordinate-system factor (1, or 2*pi*r for rz)
    phi : (nqp, nv) first-order shape values
    dphi : (ne, nqp, nv, 3) first-order shape gradients (zero-padded in 2D)
    """

    points: np.ndarray
    JxW: np.ndarray
    coord: np.ndarray
    phi: np.ndarray
    dphi: np.ndarray
    order: int

    @property
    def n_qp(self) -> int:
        return int(self.JxW.shape[1])


def element_quadrature(mesh: Mesh, order: int = 2) -> ElementQuadrature:
    """Map the parent quadrature rule onto every element of ``mesh``.

    ``order`` is the number of Gauss points per direction for quads and hexes
    and the polynomial degree for triangles and tetrahedra.
    """
    family, nv, pdim = element_family(mesh.elem_type)
    xi_q, w_q = quadrature_rule(family, order)
    nqp = int(w_q.shape[0])
    ne = mesh.n_elements

    shape_data = [first_order_shape(family, xi) for xi in xi_q]
    phi = np.array([N for N, _ in shape_data], dtype=float)

    points = np.zeros((ne, nqp, 3), dtype=float)
    JxW = np.zeros((ne, nqp), dtype=float)
    dphi = np.zeros((ne, nqp, nv, 3), dtype=float)

    for e, conn in enumerate(mesh.elems):
        xe = mesh.nodes[conn[:nv], :]
        for k, (N, dN) in enumerate(shape_data):
            J = dN.T @ xe
            detJ = float(np.linalg.det(J))
            if detJ <= 0.0:
                raise ConfigurationError(
                    f"Element {e} has a non-positive Jacobian (detJ={detJ:.3e}); check node ordering."
                )
            points[e, k, :pdim] = N @ xe
            JxW[e, k] = w_q[k] * detJ
            dphi[e, k, :, :pdim] = dN @ np.linalg.inv(J).T

    if mesh.coord_system == "rz":
        coord = 2.0 * math.pi * points[:, :, 0]
    else:
        coord = np.ones((ne, nqp), dtype=float)

    return ElementQuadrature(points=points, JxW=JxW, coord=coord, phi=phi, dphi=dphi, order=int(order))
