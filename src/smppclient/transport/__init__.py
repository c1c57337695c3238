"""
SMPP Transport Layer

This module provides the blocking TCP transport used by the session engine
and the structural interfaces the engine depends on.
"""

from .base import DebugSink, Transport
from .socket import ResolvedHost, SocketTransport

__all__ = [
    'DebugSink',
    'Transport',
    'ResolvedHost',
    'SocketTransport',
]
