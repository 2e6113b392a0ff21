"""Pump.fun and Solana token intelligence service."""

__version__ = "1.0.0"
