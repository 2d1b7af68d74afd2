"""Network store implementations."""
from .static import StaticNetworkStore

__all__ = ["StaticNetworkStore"]
