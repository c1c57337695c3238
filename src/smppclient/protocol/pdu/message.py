"""
SMPP Message PDU Bodies

This module encodes submit_sm bodies and decodes deliver_sm bodies into one
of two variants sharing a common set of fields:

- Sms: a mobile-originated short message
- DeliveryReceipt: an SMSC delivery receipt (esm_class receipt bit set)
"""

import logging
import struct
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Union

from ...exceptions import SMPPPDUException
from ..codec import BodyReader, encode_cstring, encode_time_field, decode_message
from ..constants import (
    MAX_ADDRESS_LENGTH,
    MAX_SERVICE_TYPE_LENGTH,
    MAX_TIME_LENGTH,
    CommandId,
    EsmClass,
)
from ..receipt import parse_delivery_receipt
from .base import Address, Pdu, Tag, decode_tags, encode_tags

logger = logging.getLogger(__name__)


def encode_submit_sm_body(
    source: Address,
    destination: Address,
    short_message: bytes = b'',
    tags: Optional[Iterable[Tag]] = None,
    service_type: str = '',
    esm_class: int = 0,
    protocol_id: int = 0,
    priority_flag: int = 0,
    schedule_delivery_time: Optional[str] = None,
    validity_period: Optional[str] = None,
    registered_delivery: int = 0,
    replace_if_present_flag: int = 0,
    data_coding: int = 0,
    sm_default_msg_id: int = 0,
    null_terminate_octet_strings: bool = False,
) -> bytes:
    """Encode the mandatory parameters of submit_sm followed by any tags.

    The same layout is used by deliver_sm.
    """
    if len(short_message) > 0xFF:
        raise SMPPPDUException(
            f'Short message too long: {len(short_message)} > 255',
            command_id=CommandId.SUBMIT_SM,
        )
    sm_field = short_message + (b'\x00' if null_terminate_octet_strings else b'')

    return (
        encode_cstring(service_type, MAX_SERVICE_TYPE_LENGTH)
        + struct.pack('BB', source.ton, source.npi)
        + encode_cstring(source.value, MAX_ADDRESS_LENGTH)
        + struct.pack('BB', destination.ton, destination.npi)
        + encode_cstring(destination.value, MAX_ADDRESS_LENGTH)
        + struct.pack('BBB', esm_class, protocol_id, priority_flag)
        + encode_time_field(schedule_delivery_time)
        + encode_time_field(validity_period)
        + struct.pack(
            'BBBBB',
            registered_delivery,
            replace_if_present_flag,
            data_coding,
            sm_default_msg_id,
            len(short_message),
        )
        + sm_field
        + encode_tags(tags)
    )


@dataclass
class ShortMessage:
    """Fields shared by every deliver_sm variant."""

    service_type: str
    source: Address
    destination: Address
    esm_class: int
    protocol_id: int
    priority_flag: int
    registered_delivery: int
    data_coding: int
    message: str
    short_message: bytes = b''
    tags: List[Tag] = field(default_factory=list)
    sequence_number: int = 0
    body: bytes = b''

    def get_tag(self, tag_id: int) -> Optional[Tag]:
        for tag in self.tags:
            if tag.id == tag_id:
                return tag
        return None


@dataclass
class Sms(ShortMessage):
    """A mobile-originated short message."""


@dataclass
class DeliveryReceipt(ShortMessage):
    """A delivery receipt parsed per SMPP v3.4 Appendix B."""

    message_id: str = ''
    status: str = ''
    final_date: Optional[datetime] = None
    error_code: str = ''
    id: str = ''
    sub: str = ''
    dlvrd: str = ''
    submit_date: str = ''
    done_date: str = ''
    stat: str = ''
    err: str = ''
    text: str = ''


InboundMessage = Union[Sms, DeliveryReceipt]


def is_delivery_receipt(esm_class: int) -> bool:
    return bool(esm_class & EsmClass.SMSC_DELIVERY_RECEIPT)


def decode_deliver_sm(pdu: Pdu) -> InboundMessage:
    """
    Decode a deliver_sm PDU into an Sms or a DeliveryReceipt.

    Raises:
        SMPPPDUException: If the PDU is not a deliver_sm or its tags are malformed
        SMPPParseException: If a receipt body matches no known receipt format
    """
    if pdu.command_id != CommandId.DELIVER_SM:
        raise SMPPPDUException(
            'PDU is not a received SMS',
            command_id=pdu.command_id,
            sequence_number=pdu.sequence_number,
        )

    reader = BodyReader(pdu.body)
    service_type = reader.read_cstring(MAX_SERVICE_TYPE_LENGTH).decode('latin-1')
    source = _read_address(reader)
    destination = _read_address(reader)
    esm_class = reader.read_uint8()
    protocol_id = reader.read_uint8()
    priority_flag = reader.read_uint8()
    reader.read_cstring(MAX_TIME_LENGTH)  # schedule_delivery_time
    reader.read_cstring(MAX_TIME_LENGTH)  # validity_period
    registered_delivery = reader.read_uint8()
    reader.read_uint8()  # replace_if_present_flag
    data_coding = reader.read_uint8()
    reader.read_uint8()  # sm_default_msg_id
    sm_length = reader.read_uint8()
    short_message = reader.read_octets(sm_length)
    tags = decode_tags(reader)

    fields = dict(
        service_type=service_type,
        source=source,
        destination=destination,
        esm_class=esm_class,
        protocol_id=protocol_id,
        priority_flag=priority_flag,
        registered_delivery=registered_delivery,
        data_coding=data_coding,
        message=decode_message(short_message, data_coding),
        short_message=short_message,
        tags=tags,
        sequence_number=pdu.sequence_number,
        body=pdu.body,
    )

    if is_delivery_receipt(esm_class):
        receipt = parse_delivery_receipt(fields['message'], pdu.body)
        return DeliveryReceipt(**fields, **receipt)
    return Sms(**fields)


def _read_address(reader: BodyReader) -> Address:
    ton = reader.read_uint8()
    npi = reader.read_uint8()
    value = reader.read_cstring(MAX_ADDRESS_LENGTH).decode('latin-1')
    return Address(value, ton, npi)
