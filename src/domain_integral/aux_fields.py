"""Williams near-tip fields in crack-front coordinates.

Used as auxiliary fields of the interaction integral (unit K) and as
reference "real" fields in verification problems. Coordinates are local to a
crack-front point: ``x1`` along the crack extension, ``x2`` normal to the
crack plane, the crack faces at ``theta = +-pi``.

Mode I / II displacements (Anderson, Table 2.2):

    u = K / (2 mu) * sqrt(r / (2 pi)) * f(theta)

Mode III: ``u3 = 2 K / mu * sqrt(r / (2 pi)) * sin(theta / 2)``.
"""

from __future__ import annotations

import math
from typing import Dict, Tuple

import numpy as np

from domain_integral.errors import ConfigurationError
from domain_integral.linear_elastic import isotropic_strain, kolosov_constant, shear_modulus


def crack_front_local_coords(frame, point: int, x: np.ndarray) -> np.ndarray:
    """Map global points (..., 2|3) into the frame of crack-front ``point``."""
    x = np.asarray(x, dtype=float)
    x3 = np.zeros(x.shape[:-1] + (3,), dtype=float)
    x3[..., : x.shape[-1]] = x
    p = frame.crack_front_point(point)
    R = frame.rotation_matrix(point)
    return np.einsum("ij,...j->...i", R, x3 - p)


def _polar(x_local: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    x1 = x_local[..., 0]
    x2 = x_local[..., 1]
    r = np.sqrt(x1 * x1 + x2 * x2)
    if np.any(r <= 0.0):
        raise ValueError("Williams fields are singular at the crack front (r = 0)")
    return r, np.arctan2(x2, x1)


def williams_fields(
    mode: str,
    x_local: np.ndarray,
    E: float,
    nu: float,
    K: float = 1.0,
    plane_stress: bool = False,
) -> Dict[str, np.ndarray]:
    """Stress, strain, displacement and displacement gradient of a K field.

    Returns a dict with ``stress``, ``strain`` (..., 3, 3), ``disp`` (..., 3)
    and ``grad_disp`` (..., 3, 3) where row ``i`` is grad(u_i).
    """
    key = str(mode).strip().upper()
    x_local = np.asarray(x_local, dtype=float)
    r, th = _polar(x_local)
    mu = shear_modulus(E, nu)
    kap = kolosov_constant(nu, plane_stress)

    s = np.sin(0.5 * th)
    c = np.cos(0.5 * th)
    s3 = np.sin(1.5 * th)
    c3 = np.cos(1.5 * th)
    sq = np.sqrt(r / (2.0 * math.pi))
    amp = float(K) / np.sqrt(2.0 * math.pi * r)

    shape = r.shape
    stress = np.zeros(shape + (3, 3), dtype=float)
    disp = np.zeros(shape + (3,), dtype=float)
    dfdth = np.zeros(shape + (3,), dtype=float)
    pref = np.zeros(3, dtype=float)

    if key in ("I", "KI"):
        stress[..., 0, 0] = amp * c * (1.0 - s * s3)
        stress[..., 1, 1] = amp * c * (1.0 + s * s3)
        stress[..., 0, 1] = amp * c * s * c3
        f = np.stack([c * (kap - 1.0 + 2.0 * s * s), s * (kap + 1.0 - 2.0 * c * c)], axis=-1)
        df = np.stack(
            [-0.5 * s * (kap - 1.0) - s ** 3 + 2.0 * s * c * c,
             0.5 * c * (kap + 1.0) - c ** 3 + 2.0 * s * s * c],
            axis=-1,
        )
        pref[:2] = float(K) / (2.0 * mu)
    elif key in ("II", "KII"):
        stress[..., 0, 0] = -amp * s * (2.0 + c * c3)
        stress[..., 1, 1] = amp * s * c * c3
        stress[..., 0, 1] = amp * c * (1.0 - s * s3)
        f = np.stack([s * (kap + 1.0 + 2.0 * c * c), -c * (kap - 1.0 - 2.0 * s * s)], axis=-1)
        df = np.stack(
            [0.5 * c * (kap + 1.0) + c ** 3 - 2.0 * s * s * c,
             0.5 * s * (kap - 1.0) - s ** 3 + 2.0 * s * c * c],
            axis=-1,
        )
        pref[:2] = float(K) / (2.0 * mu)
    elif key in ("III", "KIII"):
        stress[..., 0, 2] = -amp * s
        stress[..., 1, 2] = amp * c
        f = np.stack([np.zeros(shape), np.zeros(shape), s], axis=-1)
        df = np.stack([np.zeros(shape), np.zeros(shape), 0.5 * c], axis=-1)
        pref[2] = 2.0 * float(K) / mu
    else:
        raise ConfigurationError(f"Unknown Williams mode '{mode}'. Use I, II or III.")

    ncomp = f.shape[-1]
    disp[..., :ncomp] = pref[:ncomp] * sq[..., None] * f
    dfdth[..., :ncomp] = df

    stress[..., 1, 0] = stress[..., 0, 1]
    stress[..., 2, 0] = stress[..., 0, 2]
    stress[..., 2, 1] = stress[..., 1, 2]
    if key in ("I", "KI", "II", "KII") and not plane_stress:
        stress[..., 2, 2] = float(nu) * (stress[..., 0, 0] + stress[..., 1, 1])

    du_dr = disp / (2.0 * r[..., None])
    du_dth = pref * sq[..., None] * dfdth
    cth = np.cos(th)[..., None]
    sth = np.sin(th)[..., None]
    rr = r[..., None]
    grad = np.zeros(shape + (3, 3), dtype=float)
    grad[..., :, 0] = cth * du_dr - sth / rr * du_dth
    grad[..., :, 1] = sth * du_dr + cth / rr * du_dth

    return {
        "stress": stress,
        "strain": isotropic_strain(stress, E, nu),
        "disp": disp,
        "grad_disp": grad,
    }


def auxiliary_fields(
    mode: str,
    x_local: np.ndarray,
    E: float,
    nu: float,
    plane_stress: bool = False,
) -> Tuple[np.ndarray, np.ndarray]:
    """Unit-K auxiliary stress and displacement gradient.

    The gradient is returned with row 0 holding ``du_j/dx1`` (the transpose
    of ``grad_disp``), the layout the interaction integral reads.
    """
    w = williams_fields(mode, x_local, E, nu, K=1.0, plane_stress=plane_stress)
    return w["stress"], np.swapaxes(w["grad_disp"], -1, -2).copy()


def symmetric_components(T: np.ndarray) -> np.ndarray:
    """(..., 3, 3) symmetric tensors -> (..., 6) ``[xx, yy, zz, xy, yz, xz]``."""
    T = np.asarray(T, dtype=float)
    return np.stack(
        [T[..., 0, 0], T[..., 1, 1], T[..., 2, 2], T[..., 0, 1], T[..., 1, 2], T[..., 0, 2]],
        axis=-1,
    )
