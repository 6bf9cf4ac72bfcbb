"""Quadrature rules on the parent elements.

Tensor-product Gauss-Legendre rules for quadrilaterals and hexahedra,
symmetric rules for triangles and tetrahedra (reference simplex with vertices
at the origin and the unit axes).
"""

from __future__ import annotations

from itertools import product
from typing import Tuple

import numpy as np
from scipy.special import roots_legendre

from domain_integral.errors import ConfigurationError


def gauss_legendre(n: int) -> Tuple[np.ndarray, np.ndarray]:
    if int(n) < 1:
        raise ConfigurationError(f"Gauss order must be >= 1, got {n}")
    x, w = roots_legendre(int(n))
    return np.asarray(x, dtype=float), np.asarray(w, dtype=float)


def _tensor_rule(n: int, dim: int) -> Tuple[np.ndarray, np.ndarray]:
    x, w = gauss_legendre(n)
    pts = np.array(list(product(x, repeat=dim)), dtype=float)
    wts = np.array([float(np.prod(c)) for c in product(w, repeat=dim)], dtype=float)
    # product() varies the last coordinate fastest; reverse so xi runs fastest
    return pts[:, ::-1].copy(), wts


def _tri_rule(order: int) -> Tuple[np.ndarray, np.ndarray]:
    if order <= 1:
        return np.array([[1.0 / 3.0, 1.0 / 3.0]]), np.array([0.5])
    if order == 2:
        a, b = 1.0 / 6.0, 2.0 / 3.0
        pts = np.array([[a, a], [b, a], [a, b]])
        return pts, np.full(3, 1.0 / 6.0)
    if order == 3:
        pts = np.array([[1.0 / 3.0, 1.0 / 3.0], [0.6, 0.2], [0.2, 0.6], [0.2, 0.2]])
        wts = np.array([-27.0 / 96.0, 25.0 / 96.0, 25.0 / 96.0, 25.0 / 96.0])
        return pts, wts
    raise ConfigurationError(f"Triangle quadrature of order {order} is not available (max 3)")


def _tet_rule(order: int) -> Tuple[np.ndarray, np.ndarray]:
    if order <= 1:
        return np.array([[0.25, 0.25, 0.25]]), np.array([1.0 / 6.0])
    if order == 2:
        a = 0.5854101966249685
        b = 0.1381966011250105
        pts = np.array([[b, b, b], [a, b, b], [b, a, b], [b, b, a]])
        return pts, np.full(4, 1.0 / 24.0)
    raise ConfigurationError(f"Tetrahedron quadrature of order {order} is not available (max 2)")


def quadrature_rule(family: str, order: int) -> Tuple[np.ndarray, np.ndarray]:
    """Return parent points (nqp, dim) and weights (nqp,).

    For ``QUAD``/``HEX`` the order is the number of Gauss points per
    direction; for ``TRI``/``TET`` it is the polynomial degree.
    """
    order = int(order)
    if family == "QUAD":
        return _tensor_rule(order, 2)
    if family == "HEX":
        return _tensor_rule(order, 3)
    if family == "TRI":
        return _tri_rule(order)
    if family == "TET":
        return _tet_rule(order)
    raise ConfigurationError(f"Unknown element family '{family}'")
