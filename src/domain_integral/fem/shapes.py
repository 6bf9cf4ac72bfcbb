"""First-order Lagrange shape functions.

Higher-order element types are mapped to their vertex nodes: the q-function
is interpolated with a first-order basis whatever the order of the solution.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from domain_integral.errors import ConfigurationError

# element type -> (family, number of vertex nodes, parent dimension)
ELEMENT_TYPES = {
    "TRI3": ("TRI", 3, 2),
    "TRI6": ("TRI", 3, 2),
    "QUAD4": ("QUAD", 4, 2),
    "QUAD8": ("QUAD", 4, 2),
    "QUAD9": ("QUAD", 4, 2),
    "TET4": ("TET", 4, 3),
    "TET10": ("TET", 4, 3),
    "HEX8": ("HEX", 8, 3),
    "HEX20": ("HEX", 8, 3),
    "HEX27": ("HEX", 8, 3),
}

# HEX8 vertex signs (bottom face counter-clockwise, then top face)
_HEX_SIGNS = np.array(
    [[-1, -1, -1], [1, -1, -1], [1, 1, -1], [-1, 1, -1],
     [-1, -1, 1], [1, -1, 1], [1, 1, 1], [-1, 1, 1]],
    dtype=float,
)


def element_family(elem_type: str) -> Tuple[str, int, int]:
    key = str(elem_type).strip().upper()
    if key not in ELEMENT_TYPES:
        raise ConfigurationError(
            f"Unknown element type '{elem_type}'. Use one of {sorted(ELEMENT_TYPES)}."
        )
    return ELEMENT_TYPES[key]


def q4_shape(xi: float, eta: float):
    # N1..N4 (counter-clockwise)
    N = 0.25 * np.array(
        [(1 - xi) * (1 - eta),
         (1 + xi) * (1 - eta),
         (1 + xi) * (1 + eta),
         (1 - xi) * (1 + eta)],
        dtype=float,
    )
    dN_dxi = 0.25 * np.array(
        [-(1 - eta), (1 - eta), (1 + eta), -(1 + eta)], dtype=float
    )
    dN_deta = 0.25 * np.array(
        [-(1 - xi), -(1 + xi), (1 + xi), (1 - xi)], dtype=float
    )
    return N, dN_dxi, dN_deta


def first_order_shape(family: str, xi: np.ndarray):
    """Shape values ``N`` (nv,) and parent derivatives ``dN`` (nv, dim)."""
    xi = np.asarray(xi, dtype=float)
    if family == "TRI":
        r, s = xi
        N = np.array([1.0 - r - s, r, s], dtype=float)
        dN = np.array([[-1.0, -1.0], [1.0, 0.0], [0.0, 1.0]], dtype=float)
        return N, dN
    if family == "QUAD":
        N, dN_dxi, dN_deta = q4_shape(float(xi[0]), float(xi[1]))
        return N, np.column_stack([dN_dxi, dN_deta])
    if family == "TET":
        r, s, t = xi
        N = np.array([1.0 - r - s - t, r, s, t], dtype=float)
        dN = np.array(
            [[-1.0, -1.0, -1.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]],
            dtype=float,
        )
        return N, dN
    if family == "HEX":
        f = 1.0 + _HEX_SIGNS * xi[None, :]
        N = 0.125 * f[:, 0] * f[:, 1] * f[:, 2]
        dN = np.empty((8, 3), dtype=float)
        dN[:, 0] = 0.125 * _HEX_SIGNS[:, 0] * f[:, 1] * f[:, 2]
        dN[:, 1] = 0.125 * _HEX_SIGNS[:, 1] * f[:, 0] * f[:, 2]
        dN[:, 2] = 0.125 * _HEX_SIGNS[:, 2] * f[:, 0] * f[:, 1]
        return N, dN
    raise ConfigurationError(f"Unknown element family '{family}'")
