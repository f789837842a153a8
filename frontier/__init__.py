"""Ethereum RPC types, log filtering, JSON-RPC dispatch and block-mapping storage for Substrate-style chains."""

__version__ = "0.1.0"

__all__ = ["__version__"]