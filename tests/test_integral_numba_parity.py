import numpy as np
import pytest

from domain_integral import CrackFrontDefinition, InteractionIntegral, InteractionIntegralConfig
from domain_integral.fem import Mesh, element_quadrature, structured_quad_mesh
from domain_integral.numba.kernels_integral import qp_integrand_numba
from domain_integral.integrand import interaction_integrand, rotate_qp_tensors
from domain_integral.tensors import QpTensors, symmetric_tensor
from domain_integral.verification import k_field_quadrature_fields

E, NU = 200e3, 0.3


@pytest.fixture(scope="module")
def thermal_problem():
    nodes, elems = structured_quad_mesh(1.2, 1.2, 12, 12, x0=-0.6, y0=-0.6)
    mesh = Mesh(nodes, elems)
    quad = element_quadrature(mesh, 2)
    front = CrackFrontDefinition(
        [[0.0, 0.0]], crack_direction=(0.6, 0.8, 0.0), radius_inner=[0.15], radius_outer=[0.45]
    )
    rng = np.random.default_rng(7)
    grad_temp = rng.normal(size=(mesh.n_elements, quad.n_qp, 2))
    alpha = 1e-5 * (1.0 + rng.random((mesh.n_elements, quad.n_qp)))
    fields = k_field_quadrature_fields(
        quad, front, 0, {"I": 1.0, "II": 0.3}, "I", E, NU, grad_temp=grad_temp, thermal_expansion=alpha
    )
    return mesh, quad, front, fields


@pytest.mark.parametrize("symmetry_plane", [None, "y"])
def test_element_contributions_numba_matches_python(thermal_problem, symmetry_plane):
    mesh, quad, front, fields = thermal_problem
    values = {}
    for use_numba in (False, True):
        cfg = InteractionIntegralConfig(ring_index=1, k_factor=1.0, use_numba=use_numba, symmetry_plane=symmetry_plane)
        integral = InteractionIntegral(mesh, fields, front, cfg, quadrature=quad)
        values[use_numba] = integral.element_contributions()

    assert np.count_nonzero(values[False]) > 0
    scale = np.abs(values[False]).max()
    assert np.allclose(values[True], values[False], rtol=1e-10, atol=1e-12 * scale)


def test_numba_subset_of_elements(thermal_problem):
    mesh, quad, front, fields = thermal_problem
    cfg = InteractionIntegralConfig(ring_index=1, k_factor=1.0, use_numba=True)
    integral = InteractionIntegral(mesh, fields, front, cfg, quadrature=quad)
    full = integral.element_contributions()
    subset = np.array([5, 60, 61, 100])
    assert np.allclose(integral.element_contributions(subset), full[subset])
    assert integral.element_contributions([]).shape == (0,)


def test_qp_kernel_matches_python_integrand():
    rng = np.random.default_rng(11)
    front = CrackFrontDefinition([[0.0, 0.0]], crack_direction=(1.0, 1.0, 0.0))
    R = np.ascontiguousarray(front.rotation_matrix(0))
    stress6 = rng.normal(size=6)
    strain6 = rng.normal(size=6)
    grad_disp = rng.normal(size=(3, 3))
    aux_stress = rng.normal(size=(3, 3))
    aux_stress = 0.5 * (aux_stress + aux_stress.T)
    aux_grad = rng.normal(size=(3, 3))
    grad_q = rng.normal(size=3)
    grad_temp = rng.normal(size=3)

    got = qp_integrand_numba(R, grad_q, 0.4, grad_disp, stress6, strain6, aux_stress, aux_grad, True, grad_temp, 2.0)

    aux_du = np.zeros((3, 3))
    aux_du[0] = aux_grad[0]
    t = QpTensors(symmetric_tensor(stress6), symmetric_tensor(strain6), grad_disp, aux_stress, aux_du)
    gq, G, S, Eps, thermal = rotate_qp_tensors(front, 0, t, grad_q, (grad_temp, 2.0))
    expected = interaction_integrand(gq, G, S, Eps, aux_stress, aux_du, 0.4, thermal)
    assert got == pytest.approx(expected, rel=1e-12)
