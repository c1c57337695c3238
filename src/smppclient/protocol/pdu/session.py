"""
SMPP Session Management PDU Bodies

Bodies and response builders for the session-level commands the client
exchanges with an SMSC: enquire_link, unbind, generic_nack, query_sm and
the deliver_sm acknowledgement.
"""

import struct
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from ...utils import SmppRelativeTime, parse_smpp_time
from ..codec import BodyReader, encode_cstring
from ..constants import (
    MAX_ADDRESS_LENGTH,
    MAX_MESSAGE_ID_LENGTH,
    MAX_TIME_LENGTH,
    CommandId,
    CommandStatus,
)
from .base import Address, Pdu

# enquire_link_resp and deliver_sm_resp carry a single null octet; for
# deliver_sm_resp it is the empty message_id, which SMSCs expect.
EMPTY_RESPONSE_BODY = b'\x00'


def enquire_link_response(request: Pdu) -> Pdu:
    """Build the enquire_link_resp answering request, echoing its sequence."""
    return Pdu(
        CommandId.ENQUIRE_LINK_RESP,
        CommandStatus.ESME_ROK,
        request.sequence_number,
        EMPTY_RESPONSE_BODY,
    )


def deliver_sm_response(request: Pdu) -> Pdu:
    """Build the deliver_sm_resp acknowledging request."""
    return Pdu(
        CommandId.DELIVER_SM_RESP,
        CommandStatus.ESME_ROK,
        request.sequence_number,
        EMPTY_RESPONSE_BODY,
    )


def is_generic_nack_for(pdu: Pdu, sequence_number: int) -> bool:
    """
    Check whether pdu is a generic_nack that answers sequence_number.

    A generic_nack with sequence 0 matches any outstanding request; some
    SMSCs report unattributable failures this way.
    """
    if pdu.command_id != CommandId.GENERIC_NACK:
        return False
    return pdu.sequence_number in (0, sequence_number)


def encode_query_sm_body(message_id: str, source: Address) -> bytes:
    """Encode query_sm: message_id, source_addr_ton, source_addr_npi, source_addr."""
    return (
        encode_cstring(message_id, MAX_MESSAGE_ID_LENGTH)
        + struct.pack('BB', source.ton, source.npi)
        + encode_cstring(source.value, MAX_ADDRESS_LENGTH)
    )


@dataclass(frozen=True)
class QueryResult:
    """Parsed query_sm_resp body."""

    message_id: str
    final_date: Optional[Union[datetime, SmppRelativeTime]]
    message_state: int
    error_code: int


def decode_query_sm_resp(pdu: Pdu) -> QueryResult:
    reader = BodyReader(pdu.body)
    message_id = reader.read_cstring(MAX_MESSAGE_ID_LENGTH).decode('latin-1')
    final_date_raw = reader.read_cstring(MAX_TIME_LENGTH).decode('latin-1')
    message_state = reader.read_uint8()
    error_code = reader.read_uint8()

    final_date = parse_smpp_time(final_date_raw) if final_date_raw else None
    return QueryResult(message_id, final_date, message_state, error_code)
