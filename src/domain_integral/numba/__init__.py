"""Numba-accelerated kernels.

Kernels here are stateless and operate on primitive NumPy arrays so they
compile in Numba's ``nopython`` mode. Enable them with
``InteractionIntegralConfig(use_numba=True)``.
"""

from .kernels_integral import element_contributions_numba, qp_integrand_numba

__all__ = [
    "element_contributions_numba",
    "qp_integrand_numba",
]
