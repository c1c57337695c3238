"""
SMPP Protocol Codec Utilities

This module provides the field-level building blocks for SMPP PDU bodies:
C-string and time-field encoding, a sequential reader over received bodies,
TLV packing, and text encoding for the data codings the client sends.
"""

import struct
from typing import Optional, Tuple, Union

from ..exceptions import SMPPPDUException, SMPPValidationException
from .constants import GSM_ESCAPE, DataCoding

# GSM 03.38 default alphabet, indexed by septet value. Position 0x1B is the
# escape to the extension table and never maps to a character.
GSM_BASIC_CHARSET = (
    '@£$¥èéùìòÇ\nØø\rÅå'
    'Δ_ΦΓΛΩΠΨΣΘΞ\x00ÆæßÉ'
    ' !"#¤%&\'()*+,-./'
    '0123456789:;<=>?'
    '¡ABCDEFGHIJKLMNO'
    'PQRSTUVWXYZÄÖÑÜ§'
    '¿abcdefghijklmno'
    'pqrstuvwxyzäöñüà'
)

GSM_EXTENSION_CHARSET = {
    '\f': 0x0A,
    '^': 0x14,
    '{': 0x28,
    '}': 0x29,
    '\\': 0x2F,
    '[': 0x3C,
    '~': 0x3D,
    ']': 0x3E,
    '|': 0x40,
    '€': 0x65,
}

_GSM_ENCODE = {
    char: index for index, char in enumerate(GSM_BASIC_CHARSET) if index != GSM_ESCAPE
}

_GSM_EXTENSION_DECODE = {code: char for char, code in GSM_EXTENSION_CHARSET.items()}


def encode_cstring(s: Union[str, bytes], max_length: Optional[int] = None) -> bytes:
    """
    Encode a value as a C-style null-terminated string.

    Args:
        s: String (latin-1 encoded) or raw bytes
        max_length: Maximum field width including the null terminator

    Returns:
        Encoded bytes with null terminator

    Raises:
        SMPPValidationException: If the value does not fit the field
    """
    try:
        encoded = s.encode('latin-1') if isinstance(s, str) else bytes(s)
    except UnicodeEncodeError as e:
        raise SMPPValidationException(
            f'String encoding error: {e}', field_value=str(s), original_error=e
        ) from e

    if max_length is not None and len(encoded) >= max_length:
        raise SMPPValidationException(
            f'String too long: {len(encoded)} bytes, max {max_length - 1} allowed',
            field_value=encoded.decode('latin-1'),
            validation_rule='max_length',
        )
    return encoded + b'\x00'


def encode_time_field(value: Optional[str]) -> bytes:
    """
    Encode schedule_delivery_time or validity_period.

    Absent values are a single null byte; present values occupy 16 octets
    padded with nulls, followed by the terminating null.
    """
    if not value:
        return b'\x00'
    return value.encode('latin-1')[:16].ljust(16, b'\x00') + b'\x00'


class BodyReader:
    """
    Sequential cursor over a received PDU body.

    Every read advances the position; reads past the end of the body raise
    SMPPPDUException rather than returning partial data, except for
    read_octets which mirrors the "copy what is there" contract of SMSCs
    that truncate optional parameters.
    """

    def __init__(self, data: bytes, offset: int = 0) -> None:
        self.data = bytes(data)
        self.position = offset

    @property
    def remaining(self) -> int:
        return max(len(self.data) - self.position, 0)

    def at_end(self) -> bool:
        return self.position >= len(self.data)

    def read_uint8(self) -> int:
        if self.remaining < 1:
            raise SMPPPDUException(
                f'Insufficient data for 1-byte integer at offset {self.position}'
            )
        value = self.data[self.position]
        self.position += 1
        return value

    def read_uint16(self) -> int:
        if self.remaining < 2:
            raise SMPPPDUException(
                f'Insufficient data for 2-byte integer at offset {self.position}'
            )
        (value,) = struct.unpack_from('>H', self.data, self.position)
        self.position += 2
        return value

    def read_cstring(self, max_length: int = 255) -> bytes:
        """
        Read a null-terminated string of at most max_length octets.

        Stops early on the null byte (which is consumed but not returned) and
        never reads more than max_length octets, terminator included.
        """
        start = self.position
        limit = min(len(self.data), start + max_length)
        end = start
        while end < limit and self.data[end] != 0:
            end += 1
        value = self.data[start:end]
        # consume the terminator when it lies within the field
        self.position = end + 1 if end < limit else end
        return value

    def read_octets(self, length: int) -> bytes:
        """Read exactly length octets without stopping at null bytes."""
        value = self.data[self.position : self.position + length]
        self.position += len(value)
        return value

    def read_rest(self) -> bytes:
        return self.read_octets(self.remaining)


def pack_tlv_parameter(tag: int, value: bytes, length: Optional[int] = None) -> bytes:
    """
    Pack a TLV (Tag-Length-Value) parameter.

    Args:
        tag: Parameter tag (16-bit)
        value: Parameter value bytes
        length: Declared length; defaults to len(value)

    Returns:
        Packed TLV bytes
    """
    if length is None:
        length = len(value)
    if not (0 <= tag <= 0xFFFF):
        raise SMPPPDUException(f'Invalid TLV tag: 0x{tag:04X}')
    if not (0 <= length <= 0xFFFF):
        raise SMPPPDUException(f'TLV value too long: {length} bytes')
    return struct.pack('>HH', tag, length) + value


def unpack_tlv_parameter(reader: BodyReader) -> Optional[Tuple[int, bytes]]:
    """
    Unpack the next TLV parameter from reader.

    Returns None for trailing padding: an id=0,length=0 pair or a tail of
    null bytes too short to be a tag header, both of which some SMSCs append.

    Raises:
        SMPPPDUException: If the tag header or value is truncated
    """
    if reader.remaining < 4:
        tail = reader.read_rest()
        if any(tail):
            raise SMPPPDUException(
                f'Could not read tag data: {len(tail)} trailing bytes'
            )
        return None

    tag = reader.read_uint16()
    length = reader.read_uint16()
    if tag == 0 and length == 0:
        return None

    if reader.remaining < length:
        raise SMPPPDUException(
            f'Insufficient data for TLV 0x{tag:04X}: '
            f'{reader.remaining} < {length} bytes'
        )
    return tag, reader.read_octets(length)


def encode_gsm0338(text: str, errors: str = 'replace') -> bytes:
    """
    Encode text into unpacked GSM 03.38 septets, one per octet.

    Extension characters are emitted as the escape byte followed by the
    extension code. Unmappable characters become '?' unless errors='strict'.
    """
    result = bytearray()
    for char in text:
        if char in _GSM_ENCODE:
            result.append(_GSM_ENCODE[char])
        elif char in GSM_EXTENSION_CHARSET:
            result.append(GSM_ESCAPE)
            result.append(GSM_EXTENSION_CHARSET[char])
        elif errors == 'strict':
            raise SMPPValidationException(
                f'Character {char!r} is not in the GSM 03.38 alphabet',
                field_name='short_message',
                validation_rule='gsm0338',
            )
        else:
            result.append(_GSM_ENCODE['?'])
    return bytes(result)


def decode_gsm0338(data: bytes) -> str:
    """
    Decode unpacked GSM 03.38 septets, the inverse of encode_gsm0338.

    An escape followed by an unknown extension code decodes as a space, as
    GSM 03.38 prescribes for unknown extension characters.
    """
    result = []
    escaped = False
    for octet in data:
        if escaped:
            result.append(_GSM_EXTENSION_DECODE.get(octet, ' '))
            escaped = False
        elif octet == GSM_ESCAPE:
            escaped = True
        elif octet < len(GSM_BASIC_CHARSET):
            result.append(GSM_BASIC_CHARSET[octet])
        else:
            result.append('?')
    return ''.join(result)


def encode_message(message: Union[str, bytes], data_coding: int) -> bytes:
    """
    Encode a message using the specified data coding scheme.

    Bytes are returned unchanged; the caller already chose the encoding.
    """
    if isinstance(message, (bytes, bytearray)):
        return bytes(message)

    try:
        if data_coding == DataCoding.DEFAULT:
            return encode_gsm0338(message)
        elif data_coding == DataCoding.IA5_ASCII:
            return message.encode('ascii')
        elif data_coding == DataCoding.LATIN_1:
            return message.encode('latin-1')
        elif data_coding == DataCoding.UCS2:
            return message.encode('utf-16-be')
        else:
            return message.encode('utf-8')
    except UnicodeEncodeError as e:
        raise SMPPValidationException(
            f'Message encoding error: {e}',
            field_name='short_message',
            validation_rule='data_coding',
            original_error=e,
        ) from e


def decode_message(data: bytes, data_coding: int) -> str:
    """
    Decode a received short message according to its data coding.

    Default-coding (0x00) text is read as octets, not converted back from
    GSM 03.38, since SMSCs commonly deliver it ASCII-compatible. Use
    decode_gsm0338 when the SMSC sends unpacked GSM septets.
    """
    if data_coding == DataCoding.IA5_ASCII:
        return data.decode('ascii', errors='replace')
    elif data_coding == DataCoding.UCS2:
        return data.decode('utf-16-be', errors='replace')
    elif data_coding == DataCoding.LATIN_1:
        return data.decode('latin-1')
    elif data_coding == DataCoding.DEFAULT:
        return data.decode('latin-1')
    else:
        return data.decode('utf-8', errors='replace')
