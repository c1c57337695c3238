"""
SMPP Bind PDU Bodies

bind_receiver, bind_transmitter and bind_transceiver share one body layout:
system_id, password, system_type, interface_version, addr_ton, addr_npi,
address_range.
"""

import struct

from ..codec import encode_cstring

MAX_SYSTEM_ID_LENGTH = 16
MAX_PASSWORD_LENGTH = 9
MAX_SYSTEM_TYPE_LENGTH = 13
MAX_ADDRESS_RANGE_LENGTH = 41


def encode_bind_body(
    system_id: str,
    password: str,
    system_type: str,
    interface_version: int,
    addr_ton: int,
    addr_npi: int,
    address_range: str,
) -> bytes:
    """Encode the mandatory parameters of a bind request.

    Raises:
        SMPPValidationException: If a string field exceeds its SMPP width
    """
    return (
        encode_cstring(system_id, MAX_SYSTEM_ID_LENGTH)
        + encode_cstring(password, MAX_PASSWORD_LENGTH)
        + encode_cstring(system_type, MAX_SYSTEM_TYPE_LENGTH)
        + struct.pack('BBB', interface_version, addr_ton, addr_npi)
        + encode_cstring(address_range, MAX_ADDRESS_RANGE_LENGTH)
    )
