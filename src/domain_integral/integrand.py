"""Pointwise interaction-integral integrand.

All inputs are expressed in crack-front coordinates, ``x1`` being the crack
extension direction. With ``dq`` the tensor whose first row is grad(q):

    term1 = aux_du : (dq . stress)
    term2 = sum_i du_i/dx1 * (dq . aux_stress)[0, i]
    term3 = dq/dx1 * (aux_stress : strain)
    term4 = q * tr(aux_stress) * alpha * dT/dx1     (thermal coupling only)

    I = (term1 + term2 - term3 + term4) * (2 if symmetry plane) / segment_average

The dependence of ``alpha`` on position is not included in term4.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from domain_integral.errors import DegenerateCrackFrontError
from domain_integral.tensors import QpTensors


def directional_gradient(grad_q: np.ndarray) -> np.ndarray:
    """Embed grad(q) as row 0 of an otherwise zero 3x3 tensor."""
    dq = np.zeros((3, 3), dtype=float)
    dq[0, :] = np.asarray(grad_q, dtype=float)[:3]
    return dq


def interaction_integrand_terms(
    grad_q: np.ndarray,
    grad_disp: np.ndarray,
    stress: np.ndarray,
    strain: np.ndarray,
    aux_stress: np.ndarray,
    aux_du: np.ndarray,
    q: float = 0.0,
    thermal: Optional[Tuple[np.ndarray, float]] = None,
) -> Tuple[float, float, float, float]:
    """Return ``(term1, term2, term3, term4)`` at one quadrature point.

    ``thermal`` is ``None`` or ``(grad_temp, alpha)`` in crack-front
    coordinates.
    """
    dq = directional_gradient(grad_q)

    tmp1 = dq @ stress
    term1 = float(np.sum(aux_du * tmp1))

    tmp2 = dq @ aux_stress
    term2 = float(np.dot(grad_disp[:, 0], tmp2[0, :]))

    term3 = float(dq[0, 0] * np.sum(aux_stress * strain))

    term4 = 0.0
    if thermal is not None:
        grad_temp, alpha = thermal
        term4 = float(q) * float(np.trace(aux_stress)) * float(alpha) * float(grad_temp[0])

    return term1, term2, term3, term4


def interaction_integrand(
    grad_q: np.ndarray,
    grad_disp: np.ndarray,
    stress: np.ndarray,
    strain: np.ndarray,
    aux_stress: np.ndarray,
    aux_du: np.ndarray,
    q: float = 0.0,
    thermal: Optional[Tuple[np.ndarray, float]] = None,
    *,
    symmetry_plane: bool = False,
    segment_average: float = 1.0,
) -> float:
    term1, term2, term3, term4 = interaction_integrand_terms(
        grad_q, grad_disp, stress, strain, aux_stress, aux_du, q, thermal
    )
    eq = term1 + term2 - term3 + term4
    if symmetry_plane:
        eq *= 2.0
    return eq / float(segment_average)


def segment_normalization(frame, point: int) -> float:
    """Divisor turning the domain integral into a per-unit-front-length value.

    1 for a 2D front, otherwise the mean of the forward and backward segment
    lengths at ``point``.
    """
    if frame.treat_as_2d():
        return 1.0
    fwd = float(frame.forward_segment_length(point))
    bwd = float(frame.backward_segment_length(point))
    avg = 0.5 * (fwd + bwd)
    if not np.isfinite(avg) or avg <= 0.0:
        raise DegenerateCrackFrontError(
            f"Crack-front point {point} has zero-length segments "
            f"(forward={fwd:.6g}, backward={bwd:.6g}); cannot normalise the domain integral."
        )
    return avg


def rotate_qp_tensors(
    frame,
    point: int,
    tensors: QpTensors,
    grad_q: np.ndarray,
    thermal: Optional[Tuple[np.ndarray, float]] = None,
):
    """Rotate the real-field quantities into the crack-front frame.

    The auxiliary fields are already given in crack-front coordinates and are
    passed through unchanged.
    """
    grad_q_cf = frame.rotate_vector(grad_q, point)
    grad_disp_cf = frame.rotate_tensor(tensors.grad_disp, point)
    stress_cf = frame.rotate_tensor(tensors.stress, point)
    strain_cf = frame.rotate_tensor(tensors.strain, point)
    thermal_cf = None
    if thermal is not None:
        grad_temp, alpha = thermal
        thermal_cf = (frame.rotate_vector(grad_temp, point), float(alpha))
    return grad_q_cf, grad_disp_cf, stress_cf, strain_cf, thermal_cf
