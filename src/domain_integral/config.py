"""Parameter container for one interaction-integral evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from domain_integral.errors import ConfigurationError

_Q_FUNCTION_ALIASES = {
    "geometry": "geometry",
    "geometric": "geometry",
    "geo": "geometry",
    "topology": "topology",
    "topological": "topology",
    "topo": "topology",
}

_AXES = {"x": 0, "y": 1, "z": 2}


@dataclass
class InteractionIntegralConfig:
    ring_index: int
    k_factor: float

    crack_front_point_index: int = 0

    # q-function selector: geometry | topology
    q_function_type: str = "geometry"
    ring_first: Optional[int] = None  # topology only

    # Symmetry plane through the crack plane, normal to this axis (0/1/2 or x/y/z)
    symmetry_plane: Optional[Union[int, str]] = None

    # T-stress correction (3D fronts only)
    t_stress: bool = False
    poissons_ratio: Optional[float] = None

    # Optional Numba element kernel
    use_numba: bool = False

    debug: bool = False

    def __post_init__(self):
        qt = str(self.q_function_type or "geometry").strip().lower()
        if qt not in _Q_FUNCTION_ALIASES:
            raise ConfigurationError(
                f"Unknown q_function_type='{self.q_function_type}'. Use 'geometry' or 'topology'."
            )
        self.q_function_type = _Q_FUNCTION_ALIASES[qt]

        if int(self.ring_index) != self.ring_index or int(self.ring_index) < 0:
            raise ConfigurationError(f"ring_index must be a non-negative integer, got {self.ring_index}")
        self.ring_index = int(self.ring_index)

        if int(self.crack_front_point_index) < 0:
            raise ConfigurationError(
                f"crack_front_point_index must be non-negative, got {self.crack_front_point_index}"
            )
        self.crack_front_point_index = int(self.crack_front_point_index)

        if self.q_function_type == "topology":
            if self.ring_first is None:
                raise ConfigurationError("q_function_type='topology' requires ring_first")
            self.ring_first = int(self.ring_first)
        elif self.ring_index < 1:
            raise ConfigurationError(f"Geometric rings are numbered from 1, got ring_index={self.ring_index}")

        if self.symmetry_plane is not None:
            sp = self.symmetry_plane
            if isinstance(sp, str):
                key = sp.strip().lower()
                if key not in _AXES:
                    raise ConfigurationError(f"Unknown symmetry_plane axis '{sp}'. Use x, y or z.")
                sp = _AXES[key]
            if int(sp) not in (0, 1, 2):
                raise ConfigurationError(f"symmetry_plane must be 0, 1 or 2, got {self.symmetry_plane}")
            self.symmetry_plane = int(sp)

        if self.t_stress and self.poissons_ratio is None:
            raise ConfigurationError("t_stress=True requires poissons_ratio")

        self.k_factor = float(self.k_factor)

    @property
    def has_symmetry_plane(self) -> bool:
        return self.symmetry_plane is not None
