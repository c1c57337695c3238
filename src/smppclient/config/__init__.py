"""
SMPP Configuration Management

This module provides validated, dataclass-based configuration for the SMPP
client: connection pool and timeouts, bind parameters, submit_sm defaults and
the concatenated-SMS method.
"""

from .base import BaseConfig
from .settings import (
    BindConfig,
    ConnectionConfig,
    CsmsMethod,
    IPFamily,
    SMPPClientConfig,
    SubmitConfig,
    create_client_config,
)

__all__ = [
    # Base configuration classes
    'BaseConfig',
    'ConnectionConfig',
    'BindConfig',
    'SubmitConfig',
    'SMPPClientConfig',
    'IPFamily',
    'CsmsMethod',
    # Factory functions
    'create_client_config',
]
