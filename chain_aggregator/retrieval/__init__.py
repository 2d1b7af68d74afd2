"""Retrieval layer: retrying REST client and its response cache."""
from .cache import ResponseCache
from .client import RestClient

__all__ = ["ResponseCache", "RestClient"]
