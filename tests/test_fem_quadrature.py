import math

import numpy as np
import pytest

from domain_integral.errors import ConfigurationError
from domain_integral.fem import (
    Mesh,
    element_family,
    element_quadrature,
    first_order_shape,
    node_adjacency,
    quadrature_rule,
    structured_hex_mesh,
    structured_quad_mesh,
)


@pytest.mark.parametrize(
    "family,order,volume",
    [("QUAD", 2, 4.0), ("HEX", 2, 8.0), ("TRI", 1, 0.5), ("TRI", 3, 0.5), ("TET", 2, 1.0 / 6.0)],
)
def test_rule_weights_sum_to_parent_volume(family, order, volume):
    xi, w = quadrature_rule(family, order)
    assert w.sum() == pytest.approx(volume)
    assert xi.shape[0] == w.shape[0]


@pytest.mark.parametrize("family,xi", [("QUAD", [0.3, -0.2]), ("HEX", [0.1, 0.5, -0.7]),
                                       ("TRI", [0.2, 0.3]), ("TET", [0.1, 0.2, 0.3])])
def test_first_order_shapes_partition_unity(family, xi):
    N, dN = first_order_shape(family, np.array(xi))
    assert N.sum() == pytest.approx(1.0)
    assert np.allclose(dN.sum(axis=0), 0.0)


def test_higher_order_types_use_vertex_family():
    assert element_family("QUAD8")[:2] == ("QUAD", 4)
    assert element_family("tet10")[:2] == ("TET", 4)
    with pytest.raises(ConfigurationError):
        element_family("PYRAMID5")


def test_quad_mesh_area_and_gradients():
    nodes, elems = structured_quad_mesh(2.0, 1.0, 4, 2)
    mesh = Mesh(nodes, elems)
    quad = element_quadrature(mesh, 2)
    assert quad.JxW.sum() == pytest.approx(2.0)
    assert np.allclose(quad.coord, 1.0)
    # gradient of x interpolated from the vertices is (1, 0, 0)
    xv = nodes[elems][:, :, 0]
    gx = np.einsum("eknj,en->ekj", quad.dphi, xv)
    assert np.allclose(gx, [1.0, 0.0, 0.0])


def test_axisymmetric_coordinate_factor():
    nodes, elems = structured_quad_mesh(1.0, 1.0, 2, 2, x0=1.0)
    mesh = Mesh(nodes, elems, coord_system="rz")
    quad = element_quadrature(mesh, 2)
    assert np.allclose(quad.coord, 2.0 * math.pi * quad.points[:, :, 0])
    # volume of the ring 1 <= r <= 2, height 1
    assert np.sum(quad.JxW * quad.coord) == pytest.approx(math.pi * (4.0 - 1.0))


def test_hex_mesh_volume():
    nodes, elems = structured_hex_mesh(1.0, 2.0, 3.0, 2, 2, 3)
    mesh = Mesh(nodes, elems, elem_type="HEX8")
    assert element_quadrature(mesh, 2).JxW.sum() == pytest.approx(6.0)


def test_inverted_element_is_rejected():
    nodes, elems = structured_quad_mesh(1.0, 1.0, 1, 1)
    mesh = Mesh(nodes, elems[:, ::-1])
    with pytest.raises(ConfigurationError, match="Jacobian"):
        element_quadrature(mesh)


def test_mesh_validation():
    with pytest.raises(ConfigurationError):
        Mesh(np.zeros((4, 3)), np.array([[0, 1, 2, 3]]), elem_type="QUAD4")
    with pytest.raises(ConfigurationError):
        Mesh(np.zeros((8, 3)), np.array([list(range(8))]), elem_type="HEX8", coord_system="rz")


def test_node_adjacency_shares_elements():
    nodes, elems = structured_quad_mesh(2.0, 1.0, 2, 1)
    G = node_adjacency(Mesh(nodes, elems))
    assert G.shape == (6, 6)
    assert G[0, 4] == 1.0
    assert G[0, 2] == 0.0
    assert G.diagonal().sum() == 0.0
