import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from domain_integral.crack_front import CrackFrontDefinition
from domain_integral.errors import DegenerateCrackFrontError
from domain_integral.integrand import (
    interaction_integrand,
    interaction_integrand_terms,
    rotate_qp_tensors,
    segment_normalization,
)
from domain_integral.tensors import QpTensors


def _random_state(seed=0):
    rng = np.random.default_rng(seed)

    def sym():
        A = rng.normal(size=(3, 3))
        return 0.5 * (A + A.T)

    aux_du = np.zeros((3, 3))
    aux_du[0] = rng.normal(size=3)
    return dict(
        grad_q=rng.normal(size=3),
        grad_disp=rng.normal(size=(3, 3)),
        stress=sym(),
        strain=sym(),
        aux_stress=sym(),
        aux_du=aux_du,
    )


def test_terms_match_index_notation():
    s = _random_state(1)
    t1, t2, t3, t4 = interaction_integrand_terms(**s)
    g, G, S, E, A, du = (s[k] for k in ("grad_q", "grad_disp", "stress", "strain", "aux_stress", "aux_du"))
    assert t1 == pytest.approx(np.einsum("k,kj,j->", g, S, du[0]))
    assert t2 == pytest.approx(np.einsum("k,ki,i->", g, A, G[:, 0]))
    assert t3 == pytest.approx(g[0] * np.sum(A * E))
    assert t4 == 0.0


def test_unit_q_with_temperature_leaves_only_thermal_term():
    aux_stress = np.diag([1.0, 2.0, 2.0])
    thermal = (np.array([2.0, 0.0, 0.0]), 1.0)
    s = _random_state(2)
    s.update(grad_q=np.zeros(3), aux_stress=aux_stress)
    terms = interaction_integrand_terms(**s, q=1.0, thermal=thermal)
    assert terms[:3] == (0.0, 0.0, 0.0)
    assert terms[3] == pytest.approx(10.0)
    assert interaction_integrand(**s, q=1.0, thermal=thermal) == pytest.approx(10.0)


def test_thermal_term_absent_without_coupling():
    s = _random_state(3)
    with_zero_grad = interaction_integrand(**s, q=0.7, thermal=(np.zeros(3), 1e-5))
    uncoupled = interaction_integrand(**s, q=0.7)
    assert with_zero_grad == pytest.approx(uncoupled)


def test_symmetry_plane_doubles_and_segments_divide():
    s = _random_state(4)
    base = interaction_integrand(**s)
    assert interaction_integrand(**s, symmetry_plane=True) == pytest.approx(2.0 * base)
    assert interaction_integrand(**s, segment_average=0.25) == pytest.approx(4.0 * base)


def test_integrand_is_frame_invariant():
    """Global inputs rotated into the front frame give the crack-front value."""
    Q = Rotation.from_rotvec([0.4, -1.1, 0.7]).as_matrix().T
    front = CrackFrontDefinition([[0.0, 0.0, 0.0]], crack_direction=Q[0], tangent_2d=Q[2])
    s = _random_state(5)
    expected = interaction_integrand(**s, q=0.6, thermal=(np.array([0.3, -0.2, 0.1]), 2.0))

    glob = QpTensors(
        stress=Q.T @ s["stress"] @ Q,
        strain=Q.T @ s["strain"] @ Q,
        grad_disp=Q.T @ s["grad_disp"] @ Q,
        aux_stress=s["aux_stress"],
        aux_du=s["aux_du"],
    )
    thermal_g = (Q.T @ np.array([0.3, -0.2, 0.1]), 2.0)
    grad_q, grad_disp, stress, strain, thermal = rotate_qp_tensors(front, 0, glob, Q.T @ s["grad_q"], thermal_g)
    got = interaction_integrand(
        grad_q, grad_disp, stress, strain, glob.aux_stress, glob.aux_du, 0.6, thermal
    )
    assert got == pytest.approx(expected)


def test_segment_normalization():
    assert segment_normalization(CrackFrontDefinition([[0.0, 0.0]]), 0) == 1.0
    front = CrackFrontDefinition([[0.0, 0.0, 0.0], [0.0, 0.0, 1.0], [0.0, 0.0, 3.0]])
    assert segment_normalization(front, 1) == pytest.approx(1.5)
    assert segment_normalization(front, 0) == pytest.approx(0.5)


def test_degenerate_segments_raise():
    # a single point handled as a 3D front has no segments
    front = CrackFrontDefinition([[0.0, 0.0, 0.0]], treat_as_2d=False)
    with pytest.raises(DegenerateCrackFrontError, match="zero-length"):
        segment_normalization(front, 0)
