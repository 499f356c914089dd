"""Griffin - cross-chain payment intent orchestrator."""

__version__ = "0.1.0"
