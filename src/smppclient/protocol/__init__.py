"""
SMPP Protocol Layer

Constants, field codecs, PDU bodies and the delivery receipt parser.
"""

from .codec import (
    BodyReader,
    decode_message,
    encode_cstring,
    decode_gsm0338,
    encode_gsm0338,
    encode_message,
    encode_time_field,
)
from .constants import (
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
    get_response_command_id,
)
from .receipt import parse_delivery_receipt

__all__ = [
    'BodyReader',
    'encode_cstring',
    'encode_time_field',
    'encode_gsm0338',
    'decode_gsm0338',
    'encode_message',
    'decode_message',
    'CommandId',
    'CommandStatus',
    'DataCoding',
    'EsmClass',
    'InterfaceVersion',
    'MessageState',
    'NpiType',
    'OptionalTag',
    'PriorityFlag',
    'RegisteredDelivery',
    'ReplaceIfPresentFlag',
    'TonType',
    'get_error_message',
    'get_response_command_id',
    'parse_delivery_receipt',
]
