"""
Backend ChainRisk: multi-chain address risk analysis.

Fetches balance and recent transactions for an address on one of several
chains, normalizes them into a common shape, derives pattern statistics,
and scores the address from an investigator and a user-safety perspective.
Modular layout: chains (detection + adapters), analytics (patterns,
scorers, pipeline), API server, and tools.
"""

__version__ = "0.1.0"
