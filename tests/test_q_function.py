import numpy as np
import pytest

from domain_integral.crack_front import CrackFrontDefinition
from domain_integral.errors import ConfigurationError
from domain_integral.fem import Mesh, element_quadrature, structured_quad_mesh
from domain_integral.q_function import (
    GeometricRing,
    TopologicalRing,
    build_weight_field,
    interpolate_weights,
    make_ring_weight,
    nodal_weights,
)


@pytest.fixture
def unit_square_setup():
    nodes, elems = structured_quad_mesh(2.0, 2.0, 2, 2, x0=-1.0, y0=-1.0)
    mesh = Mesh(nodes, elems)
    front = CrackFrontDefinition([[0.0, 0.0]], radius_inner=[0.5, 1.0], radius_outer=[1.5, 2.0])
    return mesh, front, element_quadrature(mesh, 2)


def test_ring_offset_belongs_to_the_strategy():
    geo = make_ring_weight("geometry", 2)
    topo = make_ring_weight("topology", 2, ring_first=1)
    assert isinstance(geo, GeometricRing) and geo.lookup_index == 1
    assert isinstance(topo, TopologicalRing) and topo.lookup_index == 2
    with pytest.raises(ConfigurationError):
        make_ring_weight("topology", 2)


def test_geometric_ring_uses_zero_based_radii(unit_square_setup):
    mesh, front, _ = unit_square_setup
    corner = int(np.argmin(np.linalg.norm(mesh.nodes - [1.0, 1.0], axis=1)))
    r = np.sqrt(2.0)
    q1 = GeometricRing(1).nodal_weight(front, 0, mesh, corner)
    q2 = GeometricRing(2).nodal_weight(front, 0, mesh, corner)
    assert q1 == pytest.approx((1.5 - r) / 1.0)
    assert q2 == pytest.approx((2.0 - r) / 1.0)


def test_unit_q_on_an_element_has_zero_gradient():
    phi = np.array([[0.25, 0.25, 0.25, 0.25]])
    dphi = np.zeros((1, 4, 3))
    dphi[0, :, 0] = [-0.5, 0.5, 0.5, -0.5]
    dphi[0, :, 1] = [-0.5, -0.5, 0.5, 0.5]
    wf = interpolate_weights(np.ones(4), phi, dphi)
    assert wf.q[0] == pytest.approx(1.0)
    assert np.allclose(wf.grad_q, 0.0)
    assert not wf.is_zero


def test_linear_q_is_interpolated_exactly(unit_square_setup):
    mesh, _, quad = unit_square_setup
    e = 0
    xe = mesh.nodes[mesh.elems[e]]
    q_nodes = 0.3 + 0.5 * xe[:, 0] - 0.25 * xe[:, 1]
    wf = interpolate_weights(q_nodes, quad.phi, quad.dphi[e])
    expected_q = 0.3 + 0.5 * quad.points[e, :, 0] - 0.25 * quad.points[e, :, 1]
    assert np.allclose(wf.q, expected_q)
    assert np.allclose(wf.grad_q, [[0.5, -0.25, 0.0]] * quad.n_qp)


def test_weight_field_outside_ring_is_zero(unit_square_setup):
    mesh, _, quad = unit_square_setup
    front = CrackFrontDefinition([[-5.0, -5.0]], radius_inner=[0.1], radius_outer=[0.2])
    wf = build_weight_field(GeometricRing(1), front, 0, mesh, quad, 3)
    assert wf.is_zero
    assert np.allclose(nodal_weights(GeometricRing(1), front, 0, mesh, 3), 0.0)


def test_topological_ring_weights(unit_square_setup):
    mesh, front, quad = unit_square_setup
    front.build_topological_rings(mesh, 1, 2)
    ring = TopologicalRing(1, ring_first=1)
    ring.validate(front)
    q = nodal_weights(ring, front, 0, mesh, 0)
    # only the tip node (shared corner of all four elements) is in ring 1
    assert q.sum() == 1.0
    q2 = nodal_weights(TopologicalRing(2, ring_first=1), front, 0, mesh, 0)
    assert np.all(q2 == 1.0)
    assert np.allclose(build_weight_field(TopologicalRing(2, 1), front, 0, mesh, quad, 0).grad_q, 0.0)
