"""
SMPP PDU Module

This module provides the PDU (Protocol Data Unit) layer used by the client.

The module is organized into:
- base: Pdu framing, Address and Tag value types
- bind: bind_receiver/transmitter/transceiver bodies
- message: submit_sm encoding and deliver_sm decoding (Sms, DeliveryReceipt)
- session: enquire_link, generic_nack, query_sm and response builders
"""

from .base import Address, Pdu, Tag, decode_tags, encode_tags, unpack_header
from .bind import encode_bind_body
from .message import (
    DeliveryReceipt,
    InboundMessage,
    ShortMessage,
    Sms,
    decode_deliver_sm,
    encode_submit_sm_body,
    is_delivery_receipt,
)
from .session import (
    EMPTY_RESPONSE_BODY,
    QueryResult,
    decode_query_sm_resp,
    deliver_sm_response,
    encode_query_sm_body,
    enquire_link_response,
    is_generic_nack_for,
)

__all__ = [
    # Base types
    'Pdu',
    'Address',
    'Tag',
    'encode_tags',
    'decode_tags',
    'unpack_header',
    # Bind
    'encode_bind_body',
    # Messages
    'ShortMessage',
    'Sms',
    'DeliveryReceipt',
    'InboundMessage',
    'encode_submit_sm_body',
    'decode_deliver_sm',
    'is_delivery_receipt',
    # Session
    'EMPTY_RESPONSE_BODY',
    'QueryResult',
    'encode_query_sm_body',
    'decode_query_sm_resp',
    'enquire_link_response',
    'deliver_sm_response',
    'is_generic_nack_for',
]
