"""Shared utilities for the network sandbox engine."""

from netsim.utils.errors import (
    DocumentError,
    ErrorCodes,
    GraphError,
    NetsimError,
    TopologyInvariantError,
)
from netsim.utils.logging import configure_logging, session_logger

__all__ = [
    'DocumentError',
    'ErrorCodes',
    'GraphError',
    'NetsimError',
    'TopologyInvariantError',
    'configure_logging',
    'session_logger',
]
