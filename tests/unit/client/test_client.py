"""
Unit tests for the SMPP session engine.

The client runs against FakeTransport; a responder answers each request
the way an SMSC would, keyed on the request's command id.
"""

from unittest.mock import MagicMock

import pytest

from smppclient.client import BindMode, SMPPClient
from smppclient.config import CsmsMethod, create_client_config
from smppclient.exceptions import (
    SMPPBindException,
    SMPPConfigurationException,
    SMPPInvalidStateException,
    SMPPMessageException,
    SMPPParseException,
    SMPPProtocolException,
    SMPPTransportException,
)
from smppclient.protocol.constants import (
    MAX_SEQUENCE_NUMBER,
    CommandId,
    CommandStatus,
    DataCoding,
    EsmClass,
    MessageState,
    OptionalTag,
    RegisteredDelivery,
    TonType,
)
from smppclient.protocol.pdu import (
    Address,
    DeliveryReceipt,
    Pdu,
    Sms,
    Tag,
    decode_deliver_sm,
    encode_submit_sm_body,
)

SOURCE = Address('INFO', TonType.ALPHANUMERIC, 0)
DESTINATION = Address('4512345678', TonType.INTERNATIONAL, 0)


def smsc(statuses=None, extra=None):
    """
    Build a responder answering every request with ESME_ROK.

    statuses maps a command id to the status to answer with instead; extra
    maps a command id to PDUs sent ahead of the response.
    """
    statuses = statuses or {}
    extra = extra or {}

    def respond(pdu):
        if pdu.command_id & CommandId.GENERIC_NACK:
            return []
        if pdu.command_id == CommandId.SUBMIT_SM:
            body = f'id-{pdu.sequence_number}'.encode() + b'\x00'
        elif pdu.command_id == CommandId.QUERY_SM:
            body = b'id-1\x00\x00\x02\x00'
        elif pdu.command_id in (CommandId.UNBIND, CommandId.ENQUIRE_LINK):
            body = b''
        else:
            body = b'SMSC\x00'
        status = statuses.get(pdu.command_id, CommandStatus.ESME_ROK)
        response = Pdu(
            pdu.command_id | CommandId.GENERIC_NACK, status, pdu.sequence_number, body
        )
        return list(extra.get(pdu.command_id, [])) + [response]

    return respond


def deliver_sm(text, sequence, esm_class=0):
    body = encode_submit_sm_body(DESTINATION, SOURCE, text, esm_class=esm_class)
    return Pdu(CommandId.DELIVER_SM, 0, sequence, body)


def submitted(transport):
    """Decode every submit_sm written to transport (same layout as deliver_sm)."""
    return [
        decode_deliver_sm(Pdu(CommandId.DELIVER_SM, 0, p.sequence_number, p.body))
        for p in transport.sent_pdus
        if p.command_id == CommandId.SUBMIT_SM
    ]


@pytest.fixture
def client(client_config, fake_transport):
    return SMPPClient(client_config, transport=fake_transport)


@pytest.fixture
def bound_client(client, fake_transport):
    fake_transport.responder = smsc()
    client.bind_transceiver()
    client.set_sender('INFO').set_recipient('4512345678')
    fake_transport.written.clear()
    return client


def make_client(fake_transport, **kwargs):
    config = create_client_config('127.0.0.1', 2775, 'test_client', 'secret', **kwargs)
    fake_transport.responder = smsc()
    client = SMPPClient(config, transport=fake_transport)
    client.bind_transmitter()
    client.set_sender('INFO').set_recipient('4512345678')
    fake_transport.written.clear()
    return client


class TestBind:
    """Tests for binding."""

    @pytest.mark.parametrize(
        'method,mode,command_id',
        [
            ('bind_receiver', BindMode.RECEIVER, CommandId.BIND_RECEIVER),
            ('bind_transmitter', BindMode.TRANSMITTER, CommandId.BIND_TRANSMITTER),
            ('bind_transceiver', BindMode.TRANSCEIVER, CommandId.BIND_TRANSCEIVER),
        ],
    )
    def test_bind_modes(self, client, fake_transport, method, mode, command_id):
        fake_transport.responder = smsc()

        response = getattr(client, method)()

        assert client.mode == mode
        assert client.is_bound
        assert response.command_id == command_id | CommandId.GENERIC_NACK
        sent = fake_transport.sent_pdus[0]
        assert sent.command_id == command_id
        assert sent.sequence_number == 1
        assert sent.body.startswith(b'test_client\x00secret\x00')
        assert client.sequence_number == 2

    def test_bind_rejected(self, client, fake_transport):
        fake_transport.responder = smsc(
            statuses={CommandId.BIND_TRANSCEIVER: CommandStatus.ESME_RINVPASWD}
        )

        with pytest.raises(SMPPBindException) as exc_info:
            client.bind_transceiver()

        assert exc_info.value.command_status == CommandStatus.ESME_RINVPASWD
        assert client.mode == BindMode.UNBOUND
        assert client.sequence_number == 1

    def test_bind_without_response(self, client):
        with pytest.raises(SMPPProtocolException, match='Failed to read reply'):
            client.bind_transmitter()
        assert client.mode == BindMode.UNBOUND

    def test_bind_requires_open_transport(self, client, fake_transport):
        fake_transport.close()
        with pytest.raises(SMPPTransportException):
            client.bind_transmitter()

    def test_already_bound(self, bound_client):
        with pytest.raises(SMPPInvalidStateException):
            bound_client.bind_receiver()


class TestCommandCorrelation:
    """Tests for request/response matching."""

    def test_sequence_increments(self, bound_client, fake_transport):
        bound_client.enquire_link()
        bound_client.enquire_link()

        assert [p.sequence_number for p in fake_transport.sent_pdus] == [2, 3]
        assert bound_client.sequence_number == 4

    def test_error_status(self, bound_client, fake_transport):
        fake_transport.responder = smsc(
            statuses={CommandId.ENQUIRE_LINK: CommandStatus.ESME_RSYSERR}
        )

        with pytest.raises(SMPPProtocolException) as exc_info:
            bound_client.enquire_link()

        assert exc_info.value.command_status == CommandStatus.ESME_RSYSERR
        assert bound_client.sequence_number == 2

    def test_generic_nack_with_zero_sequence(self, bound_client, fake_transport):
        fake_transport.responder = lambda pdu: [
            Pdu(CommandId.GENERIC_NACK, CommandStatus.ESME_RINVCMDID, 0)
        ]

        with pytest.raises(SMPPProtocolException) as exc_info:
            bound_client.send_command(CommandId.ENQUIRE_LINK)

        assert exc_info.value.command_status == CommandStatus.ESME_RINVCMDID

    def test_unrelated_pdus_are_queued(self, bound_client, fake_transport):
        incoming = deliver_sm(b'queued', 99)
        fake_transport.responder = smsc(extra={CommandId.ENQUIRE_LINK: [incoming]})

        bound_client.enquire_link()

        assert bound_client.pdu_queue == [incoming]

    def test_response_found_in_queue(self, bound_client, fake_transport):
        fake_transport.responder = None
        bound_client.pdu_queue.append(
            Pdu(CommandId.ENQUIRE_LINK_RESP, 0, bound_client.sequence_number)
        )

        response = bound_client.enquire_link()

        assert response.command_id == CommandId.ENQUIRE_LINK_RESP
        assert bound_client.pdu_queue == []

    def test_sequence_wrap_reconnects(self, bound_client, fake_transport, monkeypatch):
        sleep = MagicMock()
        monkeypatch.setattr('smppclient.client.client.time.sleep', sleep)
        bound_client.sequence_number = MAX_SEQUENCE_NUMBER - 1

        bound_client.enquire_link()

        commands = [p.command_id for p in fake_transport.sent_pdus]
        assert commands == [
            CommandId.ENQUIRE_LINK,
            CommandId.UNBIND,
            CommandId.BIND_TRANSCEIVER,
        ]
        assert fake_transport.sent_pdus[2].sequence_number == 1
        assert fake_transport.close_calls == 1
        assert fake_transport.open_calls == 2
        assert bound_client.mode == BindMode.TRANSCEIVER
        assert bound_client.sequence_number == 2
        sleep.assert_called_once_with(1.0)

    def test_reconnect_unbound(self, client):
        with pytest.raises(SMPPConfigurationException):
            client.reconnect()


class TestIncoming:
    """Tests for reading SMS and answering enquire_link."""

    def test_read_sms_answers_enquire_link(self, bound_client, fake_transport):
        fake_transport.feed(Pdu(CommandId.ENQUIRE_LINK, 0, 50), deliver_sm(b'Hi', 51))

        message = bound_client.read_sms()

        assert isinstance(message, Sms)
        assert message.message == 'Hi'
        sent = fake_transport.sent_pdus
        assert (sent[0].command_id, sent[0].sequence_number) == (
            CommandId.ENQUIRE_LINK_RESP,
            50,
        )
        assert (sent[1].command_id, sent[1].sequence_number) == (
            CommandId.DELIVER_SM_RESP,
            51,
        )

    def test_read_sms_from_queue(self, bound_client, fake_transport):
        bound_client.pdu_queue.append(deliver_sm(b'queued', 99))

        message = bound_client.read_sms()

        assert message.message == 'queued'
        assert bound_client.pdu_queue == []
        assert fake_transport.sent_pdus[0].sequence_number == 99

    def test_read_sms_timeout(self, bound_client):
        assert bound_client.read_sms() is None

    def test_read_sms_queues_other_pdus(self, bound_client, fake_transport):
        stray = Pdu(CommandId.SUBMIT_SM_RESP, 0, 77, b'x\x00')
        fake_transport.feed(stray)

        assert bound_client.read_sms() is None
        assert bound_client.pdu_queue == [stray]

    def test_delivery_receipt(self, bound_client, fake_transport):
        text = (
            b'id:id-2 sub:001 dlvrd:001 submit date:2309151200 '
            b'done date:2309151205 stat:DELIVRD err:000 text:'
        )
        fake_transport.feed(
            deliver_sm(text, 60, esm_class=EsmClass.SMSC_DELIVERY_RECEIPT)
        )

        receipt = bound_client.read_sms()

        assert isinstance(receipt, DeliveryReceipt)
        assert receipt.message_id == 'id-2'
        assert receipt.status == 'DELIVRD'

    def test_unparseable_receipt_is_acknowledged(self, bound_client, fake_transport):
        fake_transport.feed(
            deliver_sm(b'garbage', 61, esm_class=EsmClass.SMSC_DELIVERY_RECEIPT)
        )

        with pytest.raises(SMPPParseException):
            bound_client.read_sms()

        assert fake_transport.sent_pdus[0].command_id == CommandId.DELIVER_SM_RESP
        assert fake_transport.sent_pdus[0].sequence_number == 61

    def test_respond_enquire_link(self, bound_client, fake_transport):
        stray = Pdu(CommandId.SUBMIT_SM_RESP, 0, 9, b'x\x00')
        bound_client.pdu_queue.extend([Pdu(CommandId.ENQUIRE_LINK, 0, 10), stray])
        fake_transport.feed(Pdu(CommandId.ENQUIRE_LINK, 0, 11))

        bound_client.respond_enquire_link()

        assert [p.sequence_number for p in fake_transport.sent_pdus] == [10, 11]
        assert all(
            p.command_id == CommandId.ENQUIRE_LINK_RESP
            for p in fake_transport.sent_pdus
        )
        assert bound_client.pdu_queue == [stray]

    def test_respond_enquire_link_without_data(self, bound_client, fake_transport):
        bound_client.respond_enquire_link()
        assert fake_transport.written == []


class TestSendSms:
    """Tests for sending single and concatenated messages."""

    def test_single_message(self, bound_client, fake_transport):
        message_id = bound_client.send_sms('Hello')

        parts = submitted(fake_transport)
        assert message_id == 'id-2'
        assert len(parts) == 1
        assert parts[0].short_message == b'Hello'
        assert parts[0].source == SOURCE
        assert parts[0].destination == Address('4512345678', TonType.INTERNATIONAL, 0)
        assert parts[0].tags == []

    def test_request_dlr(self, bound_client, fake_transport):
        bound_client.request_dlr()
        bound_client.send_sms('Hello')

        assert submitted(fake_transport)[0].registered_delivery == (
            RegisteredDelivery.SMSC_BOTH
        )

    def test_explicit_addresses_and_priority(self, bound_client, fake_transport):
        other = Address('100', TonType.INTERNATIONAL, 1)
        bound_client.send_sms('Hi', priority=2, source=other, destination=other)

        part = submitted(fake_transport)[0]
        assert part.source == other
        assert part.destination == other
        assert part.priority_flag == 2

    def test_missing_sender(self, client, fake_transport):
        fake_transport.responder = smsc()
        client.bind_transmitter()

        with pytest.raises(SMPPConfigurationException):
            client.send_sms('Hello', destination=DESTINATION)

    def test_sar_split(self, bound_client, fake_transport):
        message_id = bound_client.send_sms('a' * 320)

        parts = submitted(fake_transport)
        assert message_id == 'id-2'
        assert [len(p.short_message) for p in parts] == [152, 152, 16]

        references = {p.get_tag(OptionalTag.SAR_MSG_REF_NUM).int_value for p in parts}
        assert references == {bound_client.sar_message_reference_number}
        for seqnum, part in enumerate(parts, 1):
            assert part.get_tag(OptionalTag.SAR_TOTAL_SEGMENTS).value == b'\x03'
            assert part.get_tag(OptionalTag.SAR_SEGMENT_SEQNUM).int_value == seqnum
            assert len(part.get_tag(OptionalTag.SAR_MSG_REF_NUM).value) == 2

    def test_exactly_single_limit(self, bound_client, fake_transport):
        bound_client.send_sms('a' * 160)
        assert len(submitted(fake_transport)) == 1

    def test_udh_split(self, fake_transport):
        client = make_client(fake_transport, csms_method=CsmsMethod.UDH_8BIT)

        client.send_sms('a' * 320)

        parts = submitted(fake_transport)
        reference = client.sar_message_reference_number
        assert [len(p.short_message) for p in parts] == [159, 159, 20]
        for seqnum, part in enumerate(parts, 1):
            assert part.esm_class & EsmClass.UDHI_INDICATOR
            assert part.short_message[:6] == bytes([5, 0, 3, reference, 3, seqnum])
            assert part.tags == []

    def test_payload(self, fake_transport):
        client = make_client(fake_transport, csms_method=CsmsMethod.PAYLOAD)

        client.send_sms('a' * 200)

        parts = submitted(fake_transport)
        assert len(parts) == 1
        assert parts[0].short_message == b''
        assert parts[0].get_tag(OptionalTag.MESSAGE_PAYLOAD).value == b'a' * 200

    def test_ucs2_split(self, bound_client, fake_transport):
        bound_client.send_sms('é' * 100, data_coding=DataCoding.UCS2)

        parts = submitted(fake_transport)
        assert [len(p.short_message) for p in parts] == [132, 68]
        assert all(p.data_coding == DataCoding.UCS2 for p in parts)

    def test_ucs2_300_characters_even_parts(self, bound_client, fake_transport):
        bound_client.send_sms('é' * 300, data_coding=DataCoding.UCS2)

        parts = submitted(fake_transport)
        assert [len(p.short_message) for p in parts] == [132, 132, 132, 132, 72]
        assert all(len(p.short_message) % 2 == 0 for p in parts)

    def test_ucs2_keeps_surrogate_pair_together(self, bound_client, fake_transport):
        bound_client.send_sms(
            'a' * 65 + '\U0001F600' + 'b' * 10, data_coding=DataCoding.UCS2
        )

        parts = [p.short_message for p in submitted(fake_transport)]
        assert [len(p) for p in parts] == [130, 24]
        assert parts[0].decode('utf-16-be') == 'a' * 65
        assert parts[1].decode('utf-16-be') == '\U0001F600' + 'b' * 10

    def test_ucs2_single(self, bound_client, fake_transport):
        bound_client.send_sms('é' * 70, data_coding=DataCoding.UCS2)
        assert len(submitted(fake_transport)) == 1

    def test_escape_not_split(self, bound_client, fake_transport):
        bound_client.send_sms('a' * 151 + '€' + 'b' * 10)

        parts = submitted(fake_transport)
        assert parts[0].short_message == b'a' * 151
        assert parts[1].short_message == b'\x1b\x65' + b'b' * 10

    def test_octet_message_too_long(self, bound_client):
        with pytest.raises(SMPPMessageException):
            bound_client.send_sms('a' * 300, data_coding=DataCoding.LATIN_1)

    def test_octet_message_within_limit(self, bound_client, fake_transport):
        bound_client.send_sms('a' * 254, data_coding=DataCoding.LATIN_1)
        assert len(submitted(fake_transport)[0].short_message) == 254

    def test_extra_tags_on_every_part(self, bound_client, fake_transport):
        tag = Tag.numeric(OptionalTag.USER_MESSAGE_REFERENCE, 7, 2)
        bound_client.send_sms('a' * 200, tags=[tag])

        parts = submitted(fake_transport)
        assert len(parts) == 2
        assert all(
            p.get_tag(OptionalTag.USER_MESSAGE_REFERENCE).int_value == 7 for p in parts
        )

    def test_submit_rejected(self, bound_client, fake_transport):
        fake_transport.responder = smsc(
            statuses={CommandId.SUBMIT_SM: CommandStatus.ESME_RSUBMITFAIL}
        )

        with pytest.raises(SMPPProtocolException) as exc_info:
            bound_client.send_sms('Hello')
        assert exc_info.value.command_status == CommandStatus.ESME_RSUBMITFAIL

    def test_message_id_trimmed(self, bound_client, fake_transport):
        fake_transport.responder = lambda pdu: [
            Pdu(CommandId.SUBMIT_SM_RESP, 0, pdu.sequence_number, b'\n\tabc123\x00')
        ]

        assert bound_client.send_sms('Hi') == 'abc123'


class TestSplitting:
    """Tests for split_message_string and CSMS references."""

    def test_plain_split(self, client):
        parts = client.split_message_string(b'x' * 10, 4)
        assert parts == [b'xxxx', b'xxxx', b'xx']

    def test_escape_moves_to_next_part(self, client):
        parts = client.split_message_string(b'abc\x1b\x65def', 4)
        assert parts == [b'abc', b'\x1b\x65de', b'f']

    def test_non_gsm_ignores_escape(self, client):
        parts = client.split_message_string(b'abc\x1bdef', 4, DataCoding.UCS2)
        assert parts == [b'abc\x1b', b'def']

    def test_ucs2_high_surrogate_moves_to_next_part(self, client):
        message = '\U0001F600\U0001F600'.encode('utf-16-be')

        parts = client.split_message_string(b'\x00a' + message, 4, DataCoding.UCS2)

        assert parts == [b'\x00a', message[:4], message[4:]]
        for part in parts:
            part.decode('utf-16-be')

    def test_reference_wraps_16bit(self, client, monkeypatch):
        monkeypatch.setattr('smppclient.client.client.random.randint', lambda a, b: b)

        assert client.get_csms_reference() == 0
        assert client.get_csms_reference() == 1

    def test_reference_wraps_8bit(self, fake_transport, monkeypatch):
        monkeypatch.setattr(
            'smppclient.client.client.random.randint', lambda a, b: b - 1
        )
        client = make_client(fake_transport, csms_method=CsmsMethod.UDH_8BIT)

        assert client.get_csms_reference() == 255
        assert client.get_csms_reference() == 0


class TestQueryStatus:
    """Tests for query_status."""

    def test_delivered(self, bound_client, fake_transport):
        result = bound_client.query_status('id-1', SOURCE)

        assert result.message_id == 'id-1'
        assert result.message_state == MessageState.DELIVERED
        assert fake_transport.sent_pdus[0].body == b'id-1\x00\x05\x00INFO\x00'

    def test_error_returns_none(self, bound_client, fake_transport):
        fake_transport.responder = smsc(
            statuses={CommandId.QUERY_SM: CommandStatus.ESME_RQUERYFAIL}
        )
        assert bound_client.query_status('id-1', SOURCE) is None

    def test_no_response_raises(self, bound_client, fake_transport):
        fake_transport.responder = None
        with pytest.raises(SMPPProtocolException):
            bound_client.query_status('id-1', SOURCE)


class TestClose:
    """Tests for close and the context manager."""

    def test_close_unbinds(self, bound_client, fake_transport):
        bound_client.close()

        assert fake_transport.sent_pdus[0].command_id == CommandId.UNBIND
        assert not fake_transport.is_open()
        assert bound_client.mode == BindMode.UNBOUND

    def test_close_when_unbind_fails(self, bound_client, fake_transport):
        fake_transport.responder = None

        bound_client.close()

        assert fake_transport.close_calls == 1
        assert bound_client.mode == BindMode.UNBOUND

    def test_close_closed_transport(self, client, fake_transport):
        fake_transport.close()
        client.close()

        assert fake_transport.written == []

    def test_context_manager(self, client_config, fake_transport):
        fake_transport.close()
        fake_transport.responder = smsc()

        with SMPPClient(client_config, transport=fake_transport) as client:
            assert fake_transport.open_calls == 2
            client.bind_transmitter()

        assert not fake_transport.is_open()
        assert fake_transport.sent_pdus[-1].command_id == CommandId.UNBIND

    def test_debug_traces(self, fake_transport, mock_logger):
        config = create_client_config(
            '127.0.0.1', 2775, 'test_client', 'secret', debug=True
        )
        fake_transport.responder = smsc()
        client = SMPPClient(config, transport=fake_transport, debug_sink=mock_logger)

        client.bind_transmitter()

        messages = [call.args[0] for call in mock_logger.debug.call_args_list]
        assert 'Send PDU         : %d bytes' in messages
        assert 'Read PDU         : %d bytes' in messages

    def test_no_traces_without_debug(self, client_config, fake_transport, mock_logger):
        fake_transport.responder = smsc()
        client = SMPPClient(
            client_config, transport=fake_transport, debug_sink=mock_logger
        )

        client.bind_transmitter()

        mock_logger.debug.assert_not_called()

    def test_repr(self, client):
        assert 'test_client' in repr(client)
        assert 'unbound' in repr(client)
