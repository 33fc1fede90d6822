"""
Structured logging for Backend ChainRisk.

JSON logs with timestamp, event_type, chain and address context.
Modules call get_logger(__name__) and log snake_case events with keyword context.
"""

from backend_chainrisk.chainrisk_logging.logger import get_logger, short_address

__all__ = ["get_logger", "short_address"]
