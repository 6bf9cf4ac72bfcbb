"""Analytical K-field problems for checking the interaction integral.

The "real" fields are a Williams near-tip field imposed directly at the
quadrature points, so the recovered stress-intensity factor is exact up to
quadrature error. Both helpers are used by the example scripts and tests.
"""

from __future__ import annotations

from typing import Dict, Optional

import numpy as np

from domain_integral.aux_fields import auxiliary_fields, crack_front_local_coords, symmetric_components, williams_fields
from domain_integral.fem.mesh import ElementQuadrature
from domain_integral.fields import QuadratureFields


def _to_global(R: np.ndarray, T: np.ndarray) -> np.ndarray:
    """R^T T R for a stack of (..., 3, 3) tensors."""
    return np.einsum("ki,...kl,lj->...ij", R, T, R)


def k_field_quadrature_fields(
    quad: ElementQuadrature,
    crack_front,
    point: int,
    K: Dict[str, float],
    aux_mode: str,
    E: float,
    nu: float,
    plane_stress: bool = False,
    grad_temp: Optional[np.ndarray] = None,
    thermal_expansion: Optional[np.ndarray] = None,
) -> QuadratureFields:
    """Quadrature fields of a superposed mixed-mode K field around ``point``.

    ``K`` maps mode (``"I"``, ``"II"``, ``"III"``) to its stress-intensity
    factor. Real fields are returned in global coordinates, auxiliary fields
    (unit ``aux_mode``) in crack-front coordinates.
    """
    R = crack_front.rotation_matrix(point)
    x_local = crack_front_local_coords(crack_front, point, quad.points)

    shape = x_local.shape[:-1]
    stress = np.zeros(shape + (3, 3), dtype=float)
    strain = np.zeros(shape + (3, 3), dtype=float)
    grad = np.zeros(shape + (3, 3), dtype=float)
    for mode, k in K.items():
        w = williams_fields(mode, x_local, E, nu, K=float(k), plane_stress=plane_stress)
        stress += w["stress"]
        strain += w["strain"]
        grad += w["grad_disp"]

    stress_g = _to_global(R, stress)
    strain_g = _to_global(R, strain)
    grad_g = _to_global(R, grad)

    aux_stress, aux_grad = auxiliary_fields(aux_mode, x_local, E, nu, plane_stress=plane_stress)

    return QuadratureFields.from_arrays(
        stress=symmetric_components(stress_g),
        strain=symmetric_components(strain_g),
        grad_disp_x=grad_g[..., 0, :],
        grad_disp_y=grad_g[..., 1, :],
        grad_disp_z=grad_g[..., 2, :],
        aux_stress=aux_stress,
        aux_grad_disp=aux_grad,
        grad_temp=grad_temp,
        thermal_expansion=thermal_expansion,
    )


def k_field_factory(quad: ElementQuadrature, crack_front, K: Dict[str, float], aux_mode: str, E: float, nu: float,
                    plane_stress: bool = False):
    """``point -> QuadratureFields`` callable for :func:`post.evaluate_rings`."""

    def fields_for_point(point: int) -> QuadratureFields:
        return k_field_quadrature_fields(quad, crack_front, point, K, aux_mode, E, nu, plane_stress=plane_stress)

    return fields_for_point
