"""Quadrature-point field storage consumed by the interaction integral.

All arrays are indexed ``[element, qp, ...]`` and every accessor takes the
element and quadrature-point ids explicitly; there is no "current point"
state.

Layouts
-------
stress, strain : (ne, nqp, 6)
    ``[xx, yy, zz, xy, yz, xz]``.
grad_disp_x/y/z : (ne, nqp, dim)
    Gradient of each displacement component (``dim`` is 2 or 3).
aux_stress : (ne, nqp, 3, 3)
    Auxiliary stress in crack-front coordinates.
aux_grad_disp : (ne, nqp, 3, 3)
    Auxiliary displacement gradient in crack-front coordinates; row 0 holds
    the crack-direction derivatives ``du_j/dx1``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from domain_integral.errors import ConfigurationError


def _pad3(a: np.ndarray) -> np.ndarray:
    a = np.asarray(a, dtype=float)
    if a.shape[-1] == 3:
        return a
    out = np.zeros(a.shape[:-1] + (3,), dtype=float)
    out[..., : a.shape[-1]] = a
    return out


@dataclass(frozen=True)
class ThermalFields:
    """Temperature gradient and thermal expansion, always present together."""

    grad_temp: np.ndarray
    thermal_expansion: np.ndarray

    def at(self, e: int, qp: int) -> Tuple[np.ndarray, float]:
        return self.grad_temp[e, qp], float(self.thermal_expansion[e, qp])


@dataclass
class QuadratureFields:
    stress: np.ndarray
    strain: np.ndarray
    grad_disp_x: np.ndarray
    grad_disp_y: np.ndarray
    aux_stress: np.ndarray
    aux_grad_disp: np.ndarray
    grad_disp_z: Optional[np.ndarray] = None
    thermal: Optional[ThermalFields] = None

    def __post_init__(self):
        self.stress = np.asarray(self.stress, dtype=float)
        self.strain = np.asarray(self.strain, dtype=float)
        self.grad_disp_x = _pad3(self.grad_disp_x)
        self.grad_disp_y = _pad3(self.grad_disp_y)
        if self.grad_disp_z is not None:
            self.grad_disp_z = _pad3(self.grad_disp_z)
        self.aux_stress = np.asarray(self.aux_stress, dtype=float)
        self.aux_grad_disp = np.asarray(self.aux_grad_disp, dtype=float)

        if self.stress.ndim != 3 or self.stress.shape[-1] != 6:
            raise ConfigurationError(f"stress must be (ne, nqp, 6), got shape={self.stress.shape}")
        shape = self.stress.shape[:2]
        checks = {
            "strain": (self.strain, shape + (6,)),
            "grad_disp_x": (self.grad_disp_x, shape + (3,)),
            "grad_disp_y": (self.grad_disp_y, shape + (3,)),
            "aux_stress": (self.aux_stress, shape + (3, 3)),
            "aux_grad_disp": (self.aux_grad_disp, shape + (3, 3)),
        }
        if self.grad_disp_z is not None:
            checks["grad_disp_z"] = (self.grad_disp_z, shape + (3,))
        if self.thermal is not None:
            checks["grad_temp"] = (self.thermal.grad_temp, shape + (3,))
            checks["thermal_expansion"] = (self.thermal.thermal_expansion, shape)
        for name, (arr, expected) in checks.items():
            if arr.shape != expected:
                raise ConfigurationError(f"{name} must have shape {expected}, got shape={arr.shape}")

    @classmethod
    def from_arrays(
        cls,
        *,
        stress: np.ndarray,
        strain: np.ndarray,
        grad_disp_x: np.ndarray,
        grad_disp_y: np.ndarray,
        aux_stress: np.ndarray,
        aux_grad_disp: np.ndarray,
        grad_disp_z: Optional[np.ndarray] = None,
        grad_temp: Optional[np.ndarray] = None,
        thermal_expansion: Optional[np.ndarray] = None,
    ) -> "QuadratureFields":
        """Build fields, pairing temperature with thermal expansion.

        A temperature gradient without a thermal-expansion coefficient is a
        configuration error. A coefficient without temperature is ignored.
        """
        thermal = None
        if grad_temp is not None:
            if thermal_expansion is None:
                raise ConfigurationError(
                    "To include the thermal strain term in the interaction integral, both the "
                    "temperature gradient and the thermal expansion coefficient must be provided."
                )
            grad_temp = _pad3(grad_temp)
            thermal = ThermalFields(
                grad_temp=grad_temp,
                thermal_expansion=np.broadcast_to(
                    np.asarray(thermal_expansion, dtype=float), grad_temp.shape[:2]
                ).copy(),
            )
        return cls(
            stress=stress,
            strain=strain,
            grad_disp_x=grad_disp_x,
            grad_disp_y=grad_disp_y,
            aux_stress=aux_stress,
            aux_grad_disp=aux_grad_disp,
            grad_disp_z=grad_disp_z,
            thermal=thermal,
        )

    @property
    def n_elements(self) -> int:
        return int(self.stress.shape[0])

    @property
    def n_qp(self) -> int:
        return int(self.stress.shape[1])

    @property
    def has_temperature(self) -> bool:
        return self.thermal is not None

    def stress_components(self, e: int, qp: int) -> np.ndarray:
        return self.stress[e, qp]

    def strain_components(self, e: int, qp: int) -> np.ndarray:
        return self.strain[e, qp]

    def displacement_gradients(self, e: int, qp: int):
        gz = None if self.grad_disp_z is None else self.grad_disp_z[e, qp]
        return self.grad_disp_x[e, qp], self.grad_disp_y[e, qp], gz

    def aux_stress_at(self, e: int, qp: int) -> np.ndarray:
        return self.aux_stress[e, qp]

    def aux_grad_disp_at(self, e: int, qp: int) -> np.ndarray:
        return self.aux_grad_disp[e, qp]

    def thermal_at(self, e: int, qp: int) -> Optional[Tuple[np.ndarray, float]]:
        if self.thermal is None:
            return None
        return self.thermal.at(e, qp)

    def grad_disp_tensor(self) -> np.ndarray:
        """All displacement gradients as (ne, nqp, 3, 3), row ``i`` = grad u_i."""
        G = np.zeros(self.stress.shape[:2] + (3, 3), dtype=float)
        G[:, :, 0, :] = self.grad_disp_x
        G[:, :, 1, :] = self.grad_disp_y
        if self.grad_disp_z is not None:
            G[:, :, 2, :] = self.grad_disp_z
        return G

    @classmethod
    def zeros(cls, ne: int, nqp: int) -> "QuadratureFields":
        z6 = np.zeros((ne, nqp, 6), dtype=float)
        z3 = np.zeros((ne, nqp, 3), dtype=float)
        z33 = np.zeros((ne, nqp, 3, 3), dtype=float)
        return cls(
            stress=z6, strain=z6.copy(),
            grad_disp_x=z3, grad_disp_y=z3.copy(), grad_disp_z=z3.copy(),
            aux_stress=z33, aux_grad_disp=z33.copy(),
        )
