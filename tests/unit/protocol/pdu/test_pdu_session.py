"""
Unit tests for session management PDUs: enquire_link, generic_nack,
query_sm and deliver_sm acknowledgement.
"""

from datetime import datetime, timedelta, timezone

from smppclient.protocol.constants import CommandId, MessageState, TonType
from smppclient.protocol.pdu.base import Address, Pdu
from smppclient.protocol.pdu.session import (
    decode_query_sm_resp,
    deliver_sm_response,
    encode_query_sm_body,
    enquire_link_response,
    is_generic_nack_for,
)


class TestResponses:
    """Tests for response builders."""

    def test_enquire_link_response_echoes_sequence(self):
        response = enquire_link_response(Pdu(CommandId.ENQUIRE_LINK, 0, 42))

        assert response.command_id == CommandId.ENQUIRE_LINK_RESP
        assert response.sequence_number == 42
        assert response.body == b'\x00'

    def test_deliver_sm_response(self):
        response = deliver_sm_response(Pdu(CommandId.DELIVER_SM, 0, 7, b'...'))

        assert response.command_id == CommandId.DELIVER_SM_RESP
        assert response.sequence_number == 7
        assert response.body == b'\x00'


class TestGenericNack:
    """Tests for generic_nack matching."""

    def test_matching_sequence(self):
        assert is_generic_nack_for(Pdu(CommandId.GENERIC_NACK, 3, 9), 9)

    def test_zero_sequence_matches_anything(self):
        assert is_generic_nack_for(Pdu(CommandId.GENERIC_NACK, 3, 0), 1234)

    def test_other_sequence(self):
        assert not is_generic_nack_for(Pdu(CommandId.GENERIC_NACK, 3, 8), 9)

    def test_other_command(self):
        assert not is_generic_nack_for(Pdu(CommandId.SUBMIT_SM_RESP, 0, 9), 9)


class TestQuerySm:
    """Tests for query_sm and query_sm_resp bodies."""

    def test_encode_query_sm_body(self):
        body = encode_query_sm_body('msg-1', Address('INFO', TonType.ALPHANUMERIC, 0))
        assert body == b'msg-1\x00\x05\x00INFO\x00'

    def test_decode_with_final_date(self):
        body = b'msg-1\x00230915120500004+\x00\x02\x00'
        result = decode_query_sm_resp(Pdu(CommandId.QUERY_SM_RESP, 0, 1, body))

        assert result.message_id == 'msg-1'
        assert result.final_date == datetime(
            2023, 9, 15, 12, 5, 0, tzinfo=timezone(timedelta(hours=1))
        )
        assert result.message_state == MessageState.DELIVERED
        assert result.error_code == 0

    def test_decode_without_final_date(self):
        body = b'msg-1\x00\x00\x01\x07'
        result = decode_query_sm_resp(Pdu(CommandId.QUERY_SM_RESP, 0, 1, body))

        assert result.final_date is None
        assert result.message_state == MessageState.ENROUTE
        assert result.error_code == 7
