"""Interaction integral at one crack-front point for one q-function ring.

Evaluation pass
---------------
1. :meth:`InteractionIntegral.validate` checks the whole setup once, before
   any element work.
2. Every local element contributes ``sum_qp JxW * coord * integrand``
   (:func:`element_contribution`, or the Numba kernel).
3. Local sums are combined with a blocking ``allreduce``.
4. :meth:`InteractionIntegral.finalize` adds the T-stress correction once and
   applies the calibration (K) factor.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from domain_integral.config import InteractionIntegralConfig
from domain_integral.errors import ConfigurationError
from domain_integral.fem.mesh import ElementQuadrature, Mesh, element_quadrature
from domain_integral.fields import QuadratureFields
from domain_integral.integrand import interaction_integrand, rotate_qp_tensors, segment_normalization
from domain_integral.numba.kernels_integral import element_contributions_numba
from domain_integral.parallel import gather_sum, rank_elements
from domain_integral.q_function import build_weight_field, make_ring_weight, nodal_weights
from domain_integral.tensors import assemble_qp_tensors


def element_contribution(
    e: int,
    *,
    mesh: Mesh,
    quad: ElementQuadrature,
    fields: QuadratureFields,
    frame,
    ring,
    point: int,
    symmetry_plane: bool = False,
    segment_average: float = 1.0,
) -> float:
    """Quadrature sum of the integrand over element ``e``."""
    wf = build_weight_field(ring, frame, point, mesh, quad, e)
    if wf.is_zero:
        return 0.0

    total = 0.0
    for qp in range(quad.n_qp):
        tensors = assemble_qp_tensors(fields, e, qp)
        grad_q_cf, grad_disp_cf, stress_cf, strain_cf, thermal_cf = rotate_qp_tensors(
            frame, point, tensors, wf.grad_q[qp], fields.thermal_at(e, qp)
        )
        val = interaction_integrand(
            grad_q_cf,
            grad_disp_cf,
            stress_cf,
            strain_cf,
            tensors.aux_stress,
            tensors.aux_du,
            float(wf.q[qp]),
            thermal_cf,
            symmetry_plane=symmetry_plane,
            segment_average=segment_average,
        )
        total += float(quad.JxW[e, qp]) * float(quad.coord[e, qp]) * val
    return total


class InteractionIntegral:
    """Evaluate one (crack-front point, ring) interaction integral.

    Parameters
    ----------
    mesh : Mesh
    fields : QuadratureFields
        Field data at the quadrature points of ``quadrature``.
    crack_front : CrackFrontFrame
    config : InteractionIntegralConfig
    quadrature : ElementQuadrature, optional
        Defaults to ``element_quadrature(mesh, quadrature_order)``.
    """

    def __init__(
        self,
        mesh: Mesh,
        fields: QuadratureFields,
        crack_front,
        config: InteractionIntegralConfig,
        quadrature: Optional[ElementQuadrature] = None,
        quadrature_order: int = 2,
    ):
        self.mesh = mesh
        self.fields = fields
        self.crack_front = crack_front
        self.config = config
        self.quad = quadrature if quadrature is not None else element_quadrature(mesh, quadrature_order)
        self.ring = make_ring_weight(config.q_function_type, config.ring_index, config.ring_first)

        self._integral_value = 0.0
        self._treat_as_2d = False
        self._segment_average = 1.0
        self._validated = False

    @property
    def point(self) -> int:
        return int(self.config.crack_front_point_index)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """Check the whole setup; raise before any element is visited."""
        ne, nqp = self.fields.n_elements, self.fields.n_qp
        if ne != self.mesh.n_elements or nqp != self.quad.n_qp:
            raise ConfigurationError(
                f"Field arrays are (ne={ne}, nqp={nqp}) but the mesh quadrature is "
                f"(ne={self.mesh.n_elements}, nqp={self.quad.n_qp})"
            )
        n_points = int(self.crack_front.n_points)
        if self.point >= n_points:
            raise ConfigurationError(
                f"crack_front_point_index={self.point} out of range (front has {n_points} points)"
            )
        self.ring.validate(self.crack_front)

        self._treat_as_2d = bool(self.crack_front.treat_as_2d())
        self._segment_average = segment_normalization(self.crack_front, self.point)
        self._validated = True

        if self.config.debug:
            print(
                f"[interaction] point={self.point} ring={self.config.ring_index} "
                f"q={self.config.q_function_type} 2d={'yes' if self._treat_as_2d else 'no'} "
                f"seg_avg={self._segment_average:.6g} thermal={'yes' if self.fields.has_temperature else 'no'}"
            )

    # ------------------------------------------------------------------
    # Element loop
    # ------------------------------------------------------------------

    def element_contributions(self, elements: Optional[Sequence[int]] = None) -> np.ndarray:
        """Contribution of each element in ``elements`` (default: all)."""
        if not self._validated:
            self.validate()
        if elements is None:
            elements = np.arange(self.mesh.n_elements, dtype=int)
        elements = np.asarray(elements, dtype=int).reshape(-1)
        if elements.size == 0:
            return np.zeros(0, dtype=float)

        if self.config.use_numba:
            return self._element_contributions_numba(elements)

        return np.array(
            [
                element_contribution(
                    int(e),
                    mesh=self.mesh,
                    quad=self.quad,
                    fields=self.fields,
                    frame=self.crack_front,
                    ring=self.ring,
                    point=self.point,
                    symmetry_plane=self.config.has_symmetry_plane,
                    segment_average=self._segment_average,
                )
                for e in elements
            ],
            dtype=float,
        )

    def _element_contributions_numba(self, elements: np.ndarray) -> np.ndarray:
        nv = self.mesh.n_vertices
        q_nodes = np.array(
            [nodal_weights(self.ring, self.crack_front, self.point, self.mesh, int(e))[:nv] for e in elements],
            dtype=np.float64,
        )
        f = self.fields
        if f.thermal is not None:
            grad_temp = f.thermal.grad_temp[elements]
            alpha = f.thermal.thermal_expansion[elements]
        else:
            grad_temp = np.zeros((elements.size, self.quad.n_qp, 3), dtype=np.float64)
            alpha = np.zeros((elements.size, self.quad.n_qp), dtype=np.float64)

        factor = (2.0 if self.config.has_symmetry_plane else 1.0) / self._segment_average

        def c(a):
            return np.ascontiguousarray(a, dtype=np.float64)

        return element_contributions_numba(
            c(q_nodes),
            c(self.quad.phi),
            c(self.quad.dphi[elements]),
            c(self.quad.JxW[elements]),
            c(self.quad.coord[elements]),
            c(self.crack_front.rotation_matrix(self.point)),
            c(f.grad_disp_tensor()[elements]),
            c(f.stress[elements]),
            c(f.strain[elements]),
            c(f.aux_stress[elements]),
            c(f.aux_grad_disp[elements]),
            bool(f.thermal is not None),
            c(grad_temp),
            c(alpha),
            float(factor),
        )

    def compute_local(self, elements: Optional[Sequence[int]] = None) -> float:
        """Reset the accumulator and sum the local element contributions."""
        self._integral_value = 0.0
        contrib = self.element_contributions(elements)
        self._integral_value = float(np.sum(contrib))
        if self.config.debug:
            print(
                f"[interaction] local elements={contrib.size} "
                f"nonzero={int(np.count_nonzero(contrib))} sum={self._integral_value:.6e}"
            )
        return self._integral_value

    # ------------------------------------------------------------------
    # Reduction and final value
    # ------------------------------------------------------------------

    def finalize(self, total: float) -> float:
        """Add the T-stress correction (3D only) and apply the K factor."""
        value = float(total)
        if self.config.t_stress and not self._treat_as_2d:
            value += float(self.config.poissons_ratio) * float(self.crack_front.tangential_strain(self.point))
        return self.config.k_factor * value

    def evaluate(self, elements: Optional[Sequence[int]] = None, comm=None) -> float:
        """Finalized value for this point and ring.

        ``elements`` are the ids this rank owns; by default a block partition
        of the mesh over ``comm`` (the whole mesh without a communicator).
        """
        self.validate()
        if elements is None:
            elements = rank_elements(self.mesh.n_elements, comm)
        local = self.compute_local(elements)
        total = gather_sum(local, comm)
        value = self.finalize(total)
        if self.config.debug:
            print(f"[interaction] total={total:.6e} value={value:.6e}")
        return value
