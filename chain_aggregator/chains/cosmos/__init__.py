"""Cosmos-SDK chain family."""
from .reducers import CosmosReducer
from .source import CosmosSource

__all__ = ["CosmosReducer", "CosmosSource"]
