"""Element geometry helpers: shapes, quadrature, meshes."""

from .shapes import ELEMENT_TYPES, element_family, first_order_shape, q4_shape
from .quadrature import gauss_legendre, quadrature_rule
from .mesh import (
    Mesh,
    ElementQuadrature,
    element_quadrature,
    structured_quad_mesh,
    structured_hex_mesh,
    find_nearest_node,
    node_adjacency,
)

__all__ = [
    "ELEMENT_TYPES", "element_family", "first_order_shape", "q4_shape",
    "gauss_legendre", "quadrature_rule",
    "Mesh", "ElementQuadrature", "element_quadrature",
    "structured_quad_mesh", "structured_hex_mesh",
    "find_nearest_node", "node_adjacency",
]
