"""Protocol interfaces for the chain aggregator."""
from .fiat import FiatValuesAPI
from .reducer import ChainReducer
from .source import ChainSource
from .store import NetworkStore

__all__ = ["ChainReducer", "ChainSource", "FiatValuesAPI", "NetworkStore"]
