"""
smppclient - Blocking SMPP Protocol v3.4 Client

A synchronous implementation of the ESME side of the SMPP (Short Message
Peer-to-Peer) protocol v3.4.

This package provides:
- Blocking TCP transport with multi-host failover and IPv6 support
- Session engine: bind, unbind, reconnect, command/response correlation
- Concatenated SMS via SAR tags, 8-bit UDH or message_payload
- Delivery receipt parsing and query_sm status lookups
- Validated configuration and a typed exception hierarchy

Quick Start:
    from smppclient import SMPPClient, create_client_config

    config = create_client_config(
        host='localhost',
        port=2775,
        system_id='test_client',
        password='password',
    )

    with SMPPClient(config) as client:
        client.bind_transmitter()
        message_id = (
            client.set_sender('INFO')
            .set_recipient('4512345678')
            .send_sms('Hello World!')
        )
"""

import logging

# Main client class
from .client import BindMode, SMPPClient

# Configuration management
from .config import (
    BindConfig,
    ConnectionConfig,
    CsmsMethod,
    IPFamily,
    SMPPClientConfig,
    SubmitConfig,
    create_client_config,
)

# Exception classes
from .exceptions import (
    SMPPBindException,
    SMPPConfigurationException,
    SMPPErrorCode,
    SMPPException,
    SMPPInvalidStateException,
    SMPPMessageException,
    SMPPParseException,
    SMPPPDUException,
    SMPPProtocolException,
    SMPPTimeoutException,
    SMPPTransportException,
    SMPPValidationException,
)

# Protocol constants and enums
from .protocol import (
    CommandId,
    CommandStatus,
    DataCoding,
    EsmClass,
    InterfaceVersion,
    MessageState,
    NpiType,
    OptionalTag,
    PriorityFlag,
    RegisteredDelivery,
    ReplaceIfPresentFlag,
    TonType,
    get_error_message,
    parse_delivery_receipt,
)

# PDU types
from .protocol.pdu import Address, DeliveryReceipt, Pdu, QueryResult, Sms, Tag

# Transport layer
from .transport import DebugSink, SocketTransport, Transport
from .utils import SmppRelativeTime, parse_smpp_time

__version__ = '0.1.0'

__all__ = [
    # Main classes
    'SMPPClient',
    'BindMode',
    # Protocol constants
    'CommandId',
    'CommandStatus',
    'DataCoding',
    'EsmClass',
    'InterfaceVersion',
    'NpiType',
    'PriorityFlag',
    'RegisteredDelivery',
    'ReplaceIfPresentFlag',
    'TonType',
    'MessageState',
    'OptionalTag',
    'get_error_message',
    # PDU types
    'Pdu',
    'Address',
    'Tag',
    'Sms',
    'DeliveryReceipt',
    'QueryResult',
    'parse_delivery_receipt',
    'parse_smpp_time',
    'SmppRelativeTime',
    # Configuration
    'SMPPClientConfig',
    'ConnectionConfig',
    'BindConfig',
    'SubmitConfig',
    'IPFamily',
    'CsmsMethod',
    'create_client_config',
    # Exceptions
    'SMPPErrorCode',
    'SMPPException',
    'SMPPConfigurationException',
    'SMPPValidationException',
    'SMPPTransportException',
    'SMPPTimeoutException',
    'SMPPProtocolException',
    'SMPPPDUException',
    'SMPPBindException',
    'SMPPInvalidStateException',
    'SMPPMessageException',
    'SMPPParseException',
    # Transport
    'SocketTransport',
    'Transport',
    'DebugSink',
]

# Set up default logging to reduce noise unless explicitly configured
logging.getLogger(__name__).addHandler(logging.NullHandler())
