"""domain_integral package: interaction integrals at crack-front points."""

from .errors import ConfigurationError, DegenerateCrackFrontError, DomainIntegralError
from .config import InteractionIntegralConfig
from .fields import QuadratureFields, ThermalFields
from .tensors import QpTensors, assemble_qp_tensors
from .crack_front import CrackFrontDefinition, CrackFrontFrame
from .q_function import GeometricRing, TopologicalRing, WeightField, build_weight_field, make_ring_weight
from .integrand import interaction_integrand, interaction_integrand_terms
from .interaction_integral import InteractionIntegral, element_contribution
from .parallel import LocalCommunicator, gather_sum, partition_elements
from .linear_elastic import k_factor
from .aux_fields import auxiliary_fields, crack_front_local_coords, williams_fields

__all__ = [
    "ConfigurationError", "DegenerateCrackFrontError", "DomainIntegralError",
    "InteractionIntegralConfig",
    "QuadratureFields", "ThermalFields",
    "QpTensors", "assemble_qp_tensors",
    "CrackFrontDefinition", "CrackFrontFrame",
    "GeometricRing", "TopologicalRing", "WeightField", "build_weight_field", "make_ring_weight",
    "interaction_integrand", "interaction_integrand_terms",
    "InteractionIntegral", "element_contribution",
    "LocalCommunicator", "gather_sum", "partition_elements",
    "k_factor",
    "auxiliary_fields", "crack_front_local_coords", "williams_fields",
]
