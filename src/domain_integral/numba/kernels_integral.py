"""Numba element kernel for the interaction integral.

The kernel is stateless and works on primitive arrays gathered for a set of
elements, so the element loop can run in parallel (``prange``). Each element
writes only its own output slot; the caller sums the slots.

Array layout (m elements, nqp points, nv vertices)
--------------------------------------------------
q_nodes : (m, nv)          vertex q values
phi : (nqp, nv)            first-order shape values
dphi : (m, nqp, nv, 3)     first-order shape gradients (global)
JxW, coord : (m, nqp)
grad_disp : (m, nqp, 3, 3) row i = grad u_i (global)
stress6, strain6 : (m, nqp, 6)   [xx, yy, zz, xy, yz, xz] (global)
aux_stress, aux_grad : (m, nqp, 3, 3)  crack-front coordinates
grad_temp : (m, nqp, 3), alpha : (m, nqp)  (ignored unless has_temp)
R : (3, 3) rotation global -> crack front
"""

from __future__ import annotations

import numpy as np
from numba import njit, prange


@njit(cache=True)
def _sym3(c: np.ndarray) -> np.ndarray:
    T = np.empty((3, 3), dtype=np.float64)
    T[0, 0] = c[0]
    T[1, 1] = c[1]
    T[2, 2] = c[2]
    T[0, 1] = c[3]
    T[1, 0] = c[3]
    T[1, 2] = c[4]
    T[2, 1] = c[4]
    T[0, 2] = c[5]
    T[2, 0] = c[5]
    return T


@njit(cache=True)
def _rotate_tensor(R: np.ndarray, A: np.ndarray) -> np.ndarray:
    """R @ A @ R^T with explicit loops."""
    tmp = np.zeros((3, 3), dtype=np.float64)
    for i in range(3):
        for j in range(3):
            s = 0.0
            for k in range(3):
                s += R[i, k] * A[k, j]
            tmp[i, j] = s
    out = np.zeros((3, 3), dtype=np.float64)
    for i in range(3):
        for j in range(3):
            s = 0.0
            for k in range(3):
                s += tmp[i, k] * R[j, k]
            out[i, j] = s
    return out


@njit(cache=True)
def _rotate_vector(R: np.ndarray, v: np.ndarray) -> np.ndarray:
    out = np.zeros(3, dtype=np.float64)
    for i in range(3):
        s = 0.0
        for k in range(3):
            s += R[i, k] * v[k]
        out[i] = s
    return out


@njit(cache=True)
def qp_integrand_numba(
    R: np.ndarray,
    grad_q: np.ndarray,
    q: float,
    grad_disp: np.ndarray,
    stress6: np.ndarray,
    strain6: np.ndarray,
    aux_stress: np.ndarray,
    aux_grad: np.ndarray,
    has_temp: bool,
    grad_temp: np.ndarray,
    alpha: float,
) -> float:
    """``term1 + term2 - term3 + term4`` for global-frame inputs."""
    gq = _rotate_vector(R, grad_q)
    S = _rotate_tensor(R, _sym3(stress6))
    E = _rotate_tensor(R, _sym3(strain6))
    G = _rotate_tensor(R, grad_disp)

    term1 = 0.0
    for m in range(3):
        tmp1 = 0.0
        for j in range(3):
            tmp1 += gq[j] * S[j, m]
        term1 += aux_grad[0, m] * tmp1

    term2 = 0.0
    for i in range(3):
        tmp2 = 0.0
        for j in range(3):
            tmp2 += gq[j] * aux_stress[j, i]
        term2 += G[i, 0] * tmp2

    ddot = 0.0
    for i in range(3):
        for j in range(3):
            ddot += aux_stress[i, j] * E[i, j]
    term3 = gq[0] * ddot

    term4 = 0.0
    if has_temp:
        gT = _rotate_vector(R, grad_temp)
        trace = aux_stress[0, 0] + aux_stress[1, 1] + aux_stress[2, 2]
        term4 = q * trace * alpha * gT[0]

    return term1 + term2 - term3 + term4


@njit(cache=True, parallel=True)
def element_contributions_numba(
    q_nodes: np.ndarray,
    phi: np.ndarray,
    dphi: np.ndarray,
    JxW: np.ndarray,
    coord: np.ndarray,
    R: np.ndarray,
    grad_disp: np.ndarray,
    stress6: np.ndarray,
    strain6: np.ndarray,
    aux_stress: np.ndarray,
    aux_grad: np.ndarray,
    has_temp: bool,
    grad_temp: np.ndarray,
    alpha: np.ndarray,
    factor: float,
) -> np.ndarray:
    """Per-element sums of JxW * coord * integrand * factor.

    ``factor`` carries the symmetry doubling and the segment normalisation.
    """
    m = q_nodes.shape[0]
    nqp = phi.shape[0]
    nv = phi.shape[1]
    out = np.zeros(m, dtype=np.float64)

    for e in prange(m):
        acc = 0.0
        for k in range(nqp):
            q = 0.0
            gq = np.zeros(3, dtype=np.float64)
            for n in range(nv):
                q += phi[k, n] * q_nodes[e, n]
                for j in range(3):
                    gq[j] += dphi[e, k, n, j] * q_nodes[e, n]
            val = qp_integrand_numba(
                R,
                gq,
                q,
                grad_disp[e, k],
                stress6[e, k],
                strain6[e, k],
                aux_stress[e, k],
                aux_grad[e, k],
                has_temp,
                grad_temp[e, k],
                alpha[e, k],
            )
            acc += JxW[e, k] * coord[e, k] * val * factor
        out[e] = acc
    return out
