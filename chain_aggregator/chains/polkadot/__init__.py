"""Substrate chain family, read through API Sidecar."""
from .reducers import PolkadotReducer
from .source import PolkadotSource

__all__ = ["PolkadotReducer", "PolkadotSource"]
