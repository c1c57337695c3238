"""
SMPP Client Module

This module provides the blocking SMPP session engine for connecting to SMSC
servers, sending SMS messages, and receiving messages and delivery receipts.

The module includes:
- SMPPClient: Session engine with bind, submit, query and receive operations
- BindMode: Session states
"""

from .client import BindMode, SMPPClient

__all__ = [
    # Main client class
    'SMPPClient',
    'BindMode',
]
