"""Stress-intensity factors recovered from imposed near-tip K fields."""

import numpy as np
import pytest

from domain_integral import CrackFrontDefinition, InteractionIntegral, InteractionIntegralConfig
from domain_integral.fem import Mesh, element_quadrature, structured_hex_mesh, structured_quad_mesh
from domain_integral.linear_elastic import k_factor
from domain_integral.verification import k_field_quadrature_fields

E, NU = 30e3, 0.2


@pytest.fixture(scope="module")
def square():
    nodes, elems = structured_quad_mesh(1.6, 1.6, 16, 16, x0=-0.8, y0=-0.8)
    mesh = Mesh(nodes, elems)
    return mesh, element_quadrature(mesh, 3)


def _front(**kw):
    return CrackFrontDefinition([[0.0, 0.0]], radius_inner=[0.2, 0.3], radius_outer=[0.5, 0.7], **kw)


def _recover(mesh, quad, front, K, aux_mode, kind, plane_stress=False, **cfg):
    point = cfg.get("crack_front_point_index", 0)
    fields = k_field_quadrature_fields(quad, front, point, K, aux_mode, E, NU, plane_stress=plane_stress)
    base = dict(ring_index=1, k_factor=k_factor(kind, E, NU, plane_stress=plane_stress))
    base.update(cfg)
    config = InteractionIntegralConfig(**base)
    return InteractionIntegral(mesh, fields, front, config, quadrature=quad).evaluate()


@pytest.mark.parametrize("mode,kind", [("I", "KI"), ("II", "KII"), ("III", "KIII")])
def test_single_mode_recovery(square, mode, kind):
    mesh, quad = square
    K = _recover(mesh, quad, _front(), {mode: 2.0}, mode, kind)
    assert K == pytest.approx(2.0, rel=1e-2)


def test_mixed_mode_separation(square):
    mesh, quad = square
    K = {"I": 1.5, "II": -0.7}
    KI = _recover(mesh, quad, _front(), K, "I", "KI")
    KII = _recover(mesh, quad, _front(), K, "II", "KII", ring_index=2)
    assert KI == pytest.approx(1.5, rel=1e-2)
    assert KII == pytest.approx(-0.7, rel=1e-2)


def test_plane_stress_recovery(square):
    mesh, quad = square
    K = _recover(mesh, quad, _front(), {"I": 1.0}, "I", "KI", plane_stress=True)
    assert K == pytest.approx(1.0, rel=1e-2)


def test_rotated_crack_direction(square):
    mesh, quad = square
    front = _front(crack_direction=(0.0, 1.0, 0.0))
    K = _recover(mesh, quad, front, {"I": 1.0, "II": 0.5}, "II", "KII")
    assert K == pytest.approx(0.5, rel=1e-2)


def test_topological_ring_recovery(square):
    mesh, quad = square
    front = _front()
    front.build_topological_rings(mesh, 1, 5)
    K = _recover(mesh, quad, front, {"I": 1.0}, "I", "KI", q_function_type="topology", ring_index=5, ring_first=1)
    assert K == pytest.approx(1.0, rel=1e-2)


@pytest.mark.slow
def test_straight_3d_front_recovers_plane_strain_k():
    nodes, elems = structured_hex_mesh(1.6, 1.6, 1.0, 16, 16, 4, x0=-0.8, y0=-0.8, z0=0.0)
    mesh = Mesh(nodes, elems, elem_type="HEX8")
    quad = element_quadrature(mesh, 2)
    front = CrackFrontDefinition(
        [[0.0, 0.0, z] for z in np.linspace(0.0, 1.0, 5)],
        radius_inner=[0.2],
        radius_outer=[0.5],
    )
    assert not front.treat_as_2d()
    K = _recover(mesh, quad, front, {"I": 1.0}, "I", "KI", crack_front_point_index=2)
    assert K == pytest.approx(1.0, rel=1e-2)
