"""Exception types raised by the domain-integral evaluator."""

from __future__ import annotations


class DomainIntegralError(Exception):
    """Base class for all evaluator errors."""


class ConfigurationError(DomainIntegralError, ValueError):
    """Invalid or inconsistent setup, detected before any element work."""


class DegenerateCrackFrontError(DomainIntegralError, RuntimeError):
    """Crack-front geometry that would make the normalisation ill-defined."""
