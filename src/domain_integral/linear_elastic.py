"""Linear-elastic helpers shared across the package.

Includes the calibration factors that turn an interaction-integral value into
a stress-intensity factor or a T-stress.
"""

from __future__ import annotations

import numpy as np

from domain_integral.errors import ConfigurationError


def shear_modulus(E: float, nu: float) -> float:
    return float(E) / (2.0 * (1.0 + float(nu)))


def kolosov_constant(nu: float, plane_stress: bool = False) -> float:
    """kappa = 3 - 4 nu (plane strain) or (3 - nu) / (1 + nu) (plane stress)."""
    nu = float(nu)
    if plane_stress:
        return (3.0 - nu) / (1.0 + nu)
    return 3.0 - 4.0 * nu


def isotropic_strain(stress: np.ndarray, E: float, nu: float) -> np.ndarray:
    """Strain from stress for isotropic elasticity, ``(..., 3, 3)`` tensors.

    eps = ((1 + nu) sigma - nu tr(sigma) I) / E
    """
    s = np.asarray(stress, dtype=float)
    tr = np.trace(s, axis1=-2, axis2=-1)
    eye = np.eye(3, dtype=float)
    return ((1.0 + float(nu)) * s - float(nu) * tr[..., None, None] * eye) / float(E)


def k_factor(kind: str, E: float, nu: float, plane_stress: bool = False) -> float:
    """Conversion factor from interaction integral to the reported parameter.

    ``kind`` is one of ``KI``, ``KII``, ``KIII`` or ``T`` (unit auxiliary
    fields assumed).

    * KI, KII: ``E' / 2`` with ``E' = E / (1 - nu^2)`` (plane strain / 3D) or
      ``E`` (plane stress)
    * KIII: ``mu`` (shear modulus)
    * T: ``E'``
    """
    E = float(E)
    nu = float(nu)
    key = str(kind).strip().upper()
    E_prime = E if plane_stress else E / (1.0 - nu * nu)
    if key in ("KI", "KII"):
        return 0.5 * E_prime
    if key == "KIII":
        return shear_modulus(E, nu)
    if key == "T":
        return E_prime
    raise ConfigurationError(f"Unknown integral kind '{kind}'. Use KI, KII, KIII or T.")
