"""Fiat valuation providers."""
from .pyth import PythFiatValues

__all__ = ["PythFiatValues"]
