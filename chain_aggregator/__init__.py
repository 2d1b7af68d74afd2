"""Chain-agnostic read-and-normalize layer over Cosmos-SDK and Polkadot nodes."""

__version__ = "0.1.0"
