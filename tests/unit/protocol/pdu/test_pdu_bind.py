"""
Unit tests for SMPP bind PDU bodies.
"""

import pytest

from smppclient.exceptions import SMPPValidationException
from smppclient.protocol.pdu.bind import encode_bind_body


class TestEncodeBindBody:
    """Tests for encode_bind_body."""

    def test_field_order(self):
        """Test the mandatory parameters are packed in SMPP order."""
        body = encode_bind_body('client', 'secret', 'WWW', 0x34, 1, 1, '')

        assert body == b'client\x00secret\x00WWW\x00\x34\x01\x01\x00'

    def test_address_range(self):
        body = encode_bind_body('id', 'pw', '', 0x34, 0, 0, '^45')
        assert body.endswith(b'\x34\x00\x00^45\x00')

    def test_system_id_too_long(self):
        with pytest.raises(SMPPValidationException):
            encode_bind_body('x' * 16, 'pw', '', 0x34, 0, 0, '')

    def test_password_too_long(self):
        with pytest.raises(SMPPValidationException):
            encode_bind_body('id', 'x' * 9, '', 0x34, 0, 0, '')
