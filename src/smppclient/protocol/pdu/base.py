"""
SMPP PDU Base Types

This module contains the value types every PDU body is built from:

- Pdu: one framed SMPP message (header fields plus raw body)
- Address: source/destination address triple
- Tag: TLV optional parameter
"""

import struct
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ...exceptions import SMPPPDUException
from ..codec import BodyReader, pack_tlv_parameter, unpack_tlv_parameter
from ..constants import MAX_PDU_SIZE, PDU_HEADER_SIZE, CommandStatus

HEADER_FORMAT = '>LLLL'


@dataclass(frozen=True)
class Pdu:
    """
    A single SMPP protocol data unit.

    Attributes:
        command_id: SMPP command identifier
        command_status: 0 on requests, SMSC error code on responses
        sequence_number: Client-assigned on requests, echoed on responses
        body: Serialized mandatory and optional parameters
    """

    command_id: int
    command_status: int = CommandStatus.ESME_ROK
    sequence_number: int = 0
    body: bytes = b''

    @property
    def length(self) -> int:
        return PDU_HEADER_SIZE + len(self.body)

    @property
    def is_success(self) -> bool:
        return self.command_status == CommandStatus.ESME_ROK

    def encode(self) -> bytes:
        """Encode header and body into wire format."""
        if self.length > MAX_PDU_SIZE:
            raise SMPPPDUException(
                f'PDU too large: {self.length} bytes exceeds maximum {MAX_PDU_SIZE}',
                command_id=self.command_id,
                sequence_number=self.sequence_number,
            )
        try:
            header = struct.pack(
                HEADER_FORMAT,
                self.length,
                self.command_id,
                self.command_status,
                self.sequence_number,
            )
        except struct.error as e:
            raise SMPPPDUException(
                f'Header encoding error: {e}',
                command_id=self.command_id,
                original_error=e,
            ) from e
        return header + self.body

    @classmethod
    def decode(cls, data: bytes) -> 'Pdu':
        """Decode a complete frame (header plus body)."""
        if len(data) < PDU_HEADER_SIZE:
            raise SMPPPDUException(
                f'Insufficient data for PDU header: {len(data)} < {PDU_HEADER_SIZE}'
            )
        length, command_id, command_status, sequence_number = unpack_header(
            data[:PDU_HEADER_SIZE]
        )
        if length != len(data):
            raise SMPPPDUException(
                f'PDU length mismatch: header says {length}, got {len(data)} bytes',
                command_id=command_id,
                sequence_number=sequence_number,
            )
        return cls(command_id, command_status, sequence_number, bytes(data[16:]))


def unpack_header(header: bytes):
    """Unpack the 16-byte header into (length, id, status, sequence)."""
    if len(header) != PDU_HEADER_SIZE:
        raise SMPPPDUException(f'Invalid PDU header size: {len(header)}')
    length, command_id, command_status, sequence_number = struct.unpack(
        HEADER_FORMAT, header
    )
    if length < PDU_HEADER_SIZE or length > MAX_PDU_SIZE:
        raise SMPPPDUException(
            f'Invalid PDU length: {length}',
            command_id=command_id,
            sequence_number=sequence_number,
        )
    return length, command_id, command_status, sequence_number


@dataclass(frozen=True)
class Address:
    """An SMPP address: number or alphanumeric value with its TON and NPI."""

    value: str
    ton: int = 0
    npi: int = 0


@dataclass(frozen=True)
class Tag:
    """
    TLV optional parameter.

    The declared length is kept separately from the value so numeric tags can
    be packed into a field width chosen by the caller.
    """

    id: int
    value: bytes
    length: Optional[int] = None

    def __post_init__(self) -> None:
        if self.length is None:
            object.__setattr__(self, 'length', len(self.value))

    @classmethod
    def numeric(cls, tag_id: int, number: int, length: int) -> 'Tag':
        """Create a tag whose value is number packed big-endian into length octets."""
        try:
            value = number.to_bytes(length, 'big')
        except OverflowError as e:
            raise SMPPPDUException(
                f'Value {number} does not fit TLV 0x{tag_id:04X} of {length} bytes',
                original_error=e,
            ) from e
        return cls(tag_id, value, length)

    def encode(self) -> bytes:
        return pack_tlv_parameter(self.id, self.value, self.length)

    @property
    def int_value(self) -> int:
        return int.from_bytes(self.value, 'big')


def encode_tags(tags: Optional[Iterable[Tag]]) -> bytes:
    """Concatenate tags as id|length|value triples."""
    if not tags:
        return b''
    return b''.join(tag.encode() for tag in tags)


def decode_tags(reader: BodyReader) -> List[Tag]:
    """Parse every remaining byte in reader as TLV tags."""
    tags = []
    while not reader.at_end():
        parsed = unpack_tlv_parameter(reader)
        if parsed is None:
            continue
        tag_id, value = parsed
        tags.append(Tag(tag_id, value, len(value)))
    return tags
