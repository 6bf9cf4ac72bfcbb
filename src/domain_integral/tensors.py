"""Dense 3x3 tensors at a quadrature point.

Symmetric tensors (stress, strain) are stored with six independent components
in the order ``[xx, yy, zz, xy, yz, xz]`` (tensor shear, not engineering).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np


@dataclass(frozen=True)
class QpTensors:
    """Tensors assembled at one quadrature point, in global coordinates."""

    stress: np.ndarray
    strain: np.ndarray
    grad_disp: np.ndarray
    aux_stress: np.ndarray
    aux_du: np.ndarray


def symmetric_tensor(c6: Sequence[float]) -> np.ndarray:
    """Expand ``[xx, yy, zz, xy, yz, xz]`` to a dense symmetric (3,3) matrix."""
    xx, yy, zz, xy, yz, xz = (float(v) for v in c6)
    return np.array(
        [[xx, xy, xz],
         [xy, yy, yz],
         [xz, yz, zz]],
        dtype=float,
    )


def _as_gradient(g: Optional[Sequence[float]]) -> np.ndarray:
    out = np.zeros(3, dtype=float)
    if g is None:
        return out
    g = np.asarray(g, dtype=float).reshape(-1)
    out[: min(3, g.size)] = g[:3]
    return out


def displacement_gradient(
    grad_x: Sequence[float],
    grad_y: Sequence[float],
    grad_z: Optional[Sequence[float]] = None,
) -> np.ndarray:
    """Row ``i`` holds the spatial gradient of displacement component ``i``.

    Two-component gradients (2D meshes) are padded with a zero z entry; a
    missing ``grad_z`` leaves the third row zero.
    """
    G = np.zeros((3, 3), dtype=float)
    G[0, :] = _as_gradient(grad_x)
    G[1, :] = _as_gradient(grad_y)
    G[2, :] = _as_gradient(grad_z)
    return G


def aux_displacement_gradient(aux_grad_disp: np.ndarray) -> np.ndarray:
    """Keep only row 0 of the auxiliary displacement gradient.

    Row 0 is the only part used by the interaction integral; the remaining
    rows are left at zero.
    """
    A = np.asarray(aux_grad_disp, dtype=float)
    du = np.zeros((3, 3), dtype=float)
    du[0, :] = A[0, :3]
    return du


def assemble_qp_tensors(fields, e: int, qp: int) -> QpTensors:
    """Build all dense tensors for element ``e`` at quadrature point ``qp``."""
    return QpTensors(
        stress=symmetric_tensor(fields.stress_components(e, qp)),
        strain=symmetric_tensor(fields.strain_components(e, qp)),
        grad_disp=displacement_gradient(*fields.displacement_gradients(e, qp)),
        aux_stress=np.array(fields.aux_stress_at(e, qp), dtype=float),
        aux_du=aux_displacement_gradient(fields.aux_grad_disp_at(e, qp)),
    )
