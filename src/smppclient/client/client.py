"""
SMPP Client (ESME) Implementation

This module provides a blocking SMPP v3.4 session engine. It binds to an
SMSC over a transport, correlates responses with requests by sequence
number, buffers unsolicited PDUs for later consumers, answers enquire_link
requests, and splits long messages into concatenated SMS.
"""

import logging
import random
import struct
import time
from enum import Enum
from typing import Iterable, List, Optional, Union

from ..config.settings import CsmsMethod, SMPPClientConfig
from ..exceptions import (
    SMPPBindException,
    SMPPConfigurationException,
    SMPPException,
    SMPPInvalidStateException,
    SMPPMessageException,
    SMPPProtocolException,
    SMPPTransportException,
)
from ..protocol.codec import encode_message
from ..protocol.constants import (
    GSM_CSMS_SPLIT,
    GSM_CSMS_SPLIT_UDH,
    GSM_ESCAPE,
    GSM_SINGLE_SMS_LIMIT,
    MAX_SEQUENCE_NUMBER,
    OCTET_SINGLE_SMS_LIMIT,
    PDU_HEADER_SIZE,
    UCS2_CSMS_SPLIT,
    UCS2_SINGLE_SMS_LIMIT,
    CommandId,
    CommandStatus,
    DataCoding,
    EsmClass,
    NpiType,
    OptionalTag,
    RegisteredDelivery,
    TonType,
    get_error_message,
    get_response_command_id,
)
from ..protocol.pdu import (
    Address,
    InboundMessage,
    Pdu,
    QueryResult,
    Tag,
    decode_deliver_sm,
    decode_query_sm_resp,
    deliver_sm_response,
    encode_bind_body,
    encode_query_sm_body,
    encode_submit_sm_body,
    enquire_link_response,
    is_generic_nack_for,
    unpack_header,
)
from ..transport.base import DebugSink, Transport
from ..transport.socket import SocketTransport
from ..utils import hexdump

logger = logging.getLogger(__name__)


class BindMode(Enum):
    """SMPP session states"""

    UNBOUND = 'unbound'
    RECEIVER = 'receiver'
    TRANSMITTER = 'transmitter'
    TRANSCEIVER = 'transceiver'


_BIND_COMMANDS = {
    BindMode.RECEIVER: CommandId.BIND_RECEIVER,
    BindMode.TRANSMITTER: CommandId.BIND_TRANSMITTER,
    BindMode.TRANSCEIVER: CommandId.BIND_TRANSCEIVER,
}


class SMPPClient:
    """
    Blocking SMPP Client (ESME) Implementation

    One instance drives one session and must not be shared between threads
    without external serialization.

    Attributes:
        mode: Current session state
        sequence_number: Sequence number the next request will carry
        pdu_queue: PDUs read while waiting for something else, in arrival order
        sar_message_reference_number: Last CSMS reference handed out
    """

    def __init__(
        self,
        config: SMPPClientConfig,
        transport: Optional[Transport] = None,
        debug_sink: Optional[DebugSink] = None,
    ):
        """
        Initialize SMPP Client

        Args:
            config: Validated client configuration
            transport: Byte stream to the SMSC; a SocketTransport built from
                config.connection when omitted
            debug_sink: Receiver of PDU traces when config.debug is set
        """
        self.config = config
        self.debug_sink: DebugSink = debug_sink or logger

        if transport is None:
            transport = SocketTransport.from_config(
                config.connection, debug=config.debug, debug_sink=debug_sink
            )
        self.transport = transport

        self.mode = BindMode.UNBOUND
        self.sequence_number = 1
        self.pdu_queue: List[Pdu] = []
        self.sar_message_reference_number: Optional[int] = None

        self.sender: Optional[Address] = None
        self.recipient: Optional[Address] = None
        self.registered_delivery = config.submit.registered_delivery

    @property
    def is_bound(self) -> bool:
        return self.mode != BindMode.UNBOUND

    def _trace(self, msg: str, *args) -> None:
        if self.config.debug:
            self.debug_sink.debug(msg, *args)

    def connect(self) -> None:
        """Open the transport."""
        logger.info('Connecting to SMSC')
        self.transport.open()

    def __enter__(self) -> 'SMPPClient':
        if not self.transport.is_open():
            self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def set_sender(
        self,
        sender: str,
        ton: int = TonType.ALPHANUMERIC,
        npi: int = NpiType.UNKNOWN,
    ) -> 'SMPPClient':
        """Set the default source address for send_sms."""
        self.sender = Address(sender, ton, npi)
        return self

    def set_recipient(
        self,
        recipient: str,
        ton: int = TonType.INTERNATIONAL,
        npi: int = NpiType.UNKNOWN,
    ) -> 'SMPPClient':
        """Set the default destination address for send_sms."""
        self.recipient = Address(recipient, ton, npi)
        return self

    def request_dlr(
        self, registered_delivery: int = RegisteredDelivery.SMSC_BOTH
    ) -> 'SMPPClient':
        """Set the registered_delivery flag used by send_sms."""
        self.registered_delivery = registered_delivery
        return self

    # Session state

    def bind_receiver(self) -> Pdu:
        """Bind as receiver (can receive SMS and delivery receipts)"""
        return self._bind(BindMode.RECEIVER)

    def bind_transmitter(self) -> Pdu:
        """Bind as transmitter (can send SMS)"""
        return self._bind(BindMode.TRANSMITTER)

    def bind_transceiver(self) -> Pdu:
        """Bind as transceiver (can send and receive SMS)"""
        return self._bind(BindMode.TRANSCEIVER)

    def _bind(self, mode: BindMode) -> Pdu:
        """
        Perform bind operation

        Raises:
            SMPPTransportException: If the transport is not open
            SMPPInvalidStateException: If the session is already bound
            SMPPBindException: If the SMSC rejects the bind
        """
        if not self.transport.is_open():
            raise SMPPTransportException('Socket is not open')
        if self.is_bound:
            raise SMPPInvalidStateException(
                'Already bound',
                current_state=self.mode.value,
                expected_state=BindMode.UNBOUND.value,
                operation=f'bind_{mode.value}',
            )

        self._trace('Binding %s...', mode.value)
        bind = self.config.bind
        body = encode_bind_body(
            self.config.system_id,
            self.config.password,
            bind.system_type,
            bind.interface_version,
            bind.addr_ton,
            bind.addr_npi,
            bind.address_range,
        )

        try:
            response = self.send_command(_BIND_COMMANDS[mode], body)
        except SMPPProtocolException as e:
            if e.command_status is None:
                raise
            raise SMPPBindException(
                f'Bind failed: {get_error_message(e.command_status)}',
                bind_type=mode.value,
                system_id=self.config.system_id,
                command_status=e.command_status,
                original_error=e,
            ) from e

        self._trace('Binding status  : %s', response.command_status)
        self.mode = mode
        logger.info(f'Successfully bound as {mode.value}')
        return response

    def close(self) -> None:
        """
        Unbind and close the transport.

        The unbind is best-effort: failures are logged and the transport is
        closed regardless.
        """
        if not self.transport.is_open():
            self.mode = BindMode.UNBOUND
            return

        self._trace('Unbinding...')
        try:
            response = self._transact(CommandId.UNBIND, b'', reconnect_on_wrap=False)
            self._trace('Unbind status   : %s', response.command_status)
        except SMPPException as e:
            logger.warning(f'Error during unbind: {e}')
        finally:
            self.mode = BindMode.UNBOUND
            self.transport.close()

    def reconnect(self) -> None:
        """
        Close the session, reopen the transport and bind again in the same mode.

        Raises:
            SMPPConfigurationException: If the session was never bound
        """
        mode = self.mode
        if mode == BindMode.UNBOUND:
            raise SMPPConfigurationException(
                f'Invalid mode: {mode.value}', config_key='mode'
            )

        logger.info(f'Reconnecting to SMSC as {mode.value}')
        self.close()
        time.sleep(self.config.connection.reconnect_delay)
        self.transport.open()
        self.sequence_number = 1
        self._bind(mode)

    # Command/response correlation

    def send_command(self, command_id: int, body: bytes = b'') -> Pdu:
        """
        Send a request and wait for its response.

        Raises:
            SMPPTransportException: If the transport is not open or fails
            SMPPProtocolException: If no response arrives or its status is not ESME_ROK
        """
        return self._transact(command_id, body, reconnect_on_wrap=True)

    def _transact(self, command_id: int, body: bytes, reconnect_on_wrap: bool) -> Pdu:
        if not self.transport.is_open():
            raise SMPPTransportException('Socket is not open')

        pdu = Pdu(command_id, CommandStatus.ESME_ROK, self.sequence_number, body)
        self.send_pdu(pdu)
        response = self.read_pdu_response(pdu.sequence_number, command_id)

        if response is None:
            raise SMPPProtocolException(
                f'Failed to read reply to command: 0x{command_id:08x}',
                command_id=command_id,
                sequence_number=pdu.sequence_number,
            )
        if not response.is_success:
            raise SMPPProtocolException(
                get_error_message(response.command_status),
                command_id=response.command_id,
                sequence_number=response.sequence_number,
                command_status=response.command_status,
            )

        self.sequence_number += 1
        # post-wraparound behaviour is undefined in SMPP v3.4
        if reconnect_on_wrap and self.sequence_number >= MAX_SEQUENCE_NUMBER:
            self.reconnect()
        return response

    def send_pdu(self, pdu: Pdu) -> None:
        """Encode and write one PDU."""
        data = pdu.encode()
        if self.config.debug:
            self._trace('Send PDU         : %d bytes', pdu.length)
            self._trace('%s', hexdump(data))
            self._trace(' command_id      : 0x%08x', pdu.command_id)
            self._trace(' sequence number : %d', pdu.sequence_number)
        self.transport.write(data)

    def read_pdu(self) -> Optional[Pdu]:
        """
        Read one PDU from the transport.

        Returns:
            The PDU, or None when no data arrived within the receive timeout

        Raises:
            SMPPPDUException: If the header carries an invalid length
            SMPPTimeoutException: If a frame stops arriving part way through
        """
        head = self.transport.read(4)
        if not head:
            return None
        if len(head) < 4:
            head += self.transport.read_all(4 - len(head))
        header = head + self.transport.read_all(PDU_HEADER_SIZE - 4)
        length, command_id, command_status, sequence_number = unpack_header(header)

        body = b''
        if length > PDU_HEADER_SIZE:
            body = self.transport.read_all(length - PDU_HEADER_SIZE)

        if self.config.debug:
            self._trace('Read PDU         : %d bytes', length)
            self._trace('%s', hexdump(header + body))
            self._trace(' command id      : 0x%08x', command_id)
            self._trace(
                ' command status  : 0x%08x %s',
                command_status,
                get_error_message(command_status),
            )
            self._trace(' sequence number : %d', sequence_number)
        return Pdu(command_id, command_status, sequence_number, body)

    def read_pdu_response(self, sequence_number: int, command_id: int) -> Optional[Pdu]:
        """
        Wait for the response to a request.

        Queued PDUs are searched first, then PDUs are read from the transport.
        A generic_nack with a matching or zero sequence number is accepted as
        the response. Anything else read meanwhile is queued.

        Returns:
            The response, or None if the transport ran out of data
        """
        response_id = get_response_command_id(command_id)

        def matches(pdu: Pdu) -> bool:
            if pdu.sequence_number == sequence_number and pdu.command_id == response_id:
                return True
            return is_generic_nack_for(pdu, sequence_number)

        for index, pdu in enumerate(self.pdu_queue):
            if matches(pdu):
                del self.pdu_queue[index]
                return pdu

        while True:
            pdu = self.read_pdu()
            if pdu is None:
                return None
            if matches(pdu):
                return pdu
            self.pdu_queue.append(pdu)

    # Unsolicited PDUs

    def enquire_link(self) -> Pdu:
        """Send an enquire_link and return the response."""
        return self.send_command(CommandId.ENQUIRE_LINK)

    def respond_enquire_link(self) -> None:
        """
        Answer any enquire_link waiting in the queue or on the wire.

        At most one PDU is read from the transport, and only if data is
        already available; anything other than enquire_link is queued.
        """
        pending = []
        for pdu in self.pdu_queue:
            if pdu.command_id == CommandId.ENQUIRE_LINK:
                self.send_pdu(enquire_link_response(pdu))
            else:
                pending.append(pdu)
        self.pdu_queue[:] = pending

        if self.transport.has_data():
            pdu = self.read_pdu()
            if pdu is None:
                return
            if pdu.command_id == CommandId.ENQUIRE_LINK:
                self.send_pdu(enquire_link_response(pdu))
            else:
                self.pdu_queue.append(pdu)

    def read_sms(self) -> Optional[InboundMessage]:
        """
        Read one SMS or delivery receipt, blocking until one arrives.

        enquire_link requests seen while waiting are answered; other PDUs are
        queued.

        Returns:
            The parsed message, or None if the transport timed out first
        """
        for index, pdu in enumerate(self.pdu_queue):
            if pdu.command_id == CommandId.DELIVER_SM:
                del self.pdu_queue[index]
                return self.parse_sms(pdu)

        while True:
            pdu = self.read_pdu()
            if pdu is None:
                return None
            if pdu.command_id == CommandId.DELIVER_SM:
                return self.parse_sms(pdu)
            if pdu.command_id == CommandId.ENQUIRE_LINK:
                self.send_pdu(enquire_link_response(pdu))
            else:
                self.pdu_queue.append(pdu)

    def parse_sms(self, pdu: Pdu) -> InboundMessage:
        """
        Decode a deliver_sm and acknowledge it with deliver_sm_resp.

        The acknowledgement is sent even if the body cannot be parsed, so the
        SMSC does not redeliver a message the client can never decode.

        Raises:
            SMPPPDUException: If pdu is not a deliver_sm or is malformed
            SMPPParseException: If a delivery receipt matches no known format
        """
        try:
            message = decode_deliver_sm(pdu)
            self._trace('Received sms: %r', message)
            return message
        finally:
            if pdu.command_id == CommandId.DELIVER_SM:
                self.send_pdu(deliver_sm_response(pdu))

    # Sending

    def send_sms(
        self,
        message: Union[str, bytes],
        tags: Optional[Iterable[Tag]] = None,
        data_coding: int = DataCoding.DEFAULT,
        priority: Optional[int] = None,
        schedule_delivery_time: Optional[str] = None,
        validity_period: Optional[str] = None,
        source: Optional[Address] = None,
        destination: Optional[Address] = None,
    ) -> str:
        """
        Send an SMS, splitting it into concatenated parts when it is too long.

        Args:
            message: Text, encoded according to data_coding, or raw octets
            tags: Extra TLV parameters added to every submitted PDU
            data_coding: SMPP data_coding value
            priority: priority_flag, the configured default when omitted
            schedule_delivery_time: Absolute or relative SMPP time
            validity_period: Absolute or relative SMPP time
            source: Source address, set_sender() value when omitted
            destination: Destination address, set_recipient() value when omitted

        Returns:
            The message id the SMSC assigned to the first submitted PDU

        Raises:
            SMPPConfigurationException: If no source or destination is known
            SMPPMessageException: If the message is too long for its data coding
        """
        source = source or self.sender
        destination = destination or self.recipient
        if source is None:
            raise SMPPConfigurationException('Sender address is not set', config_key='sender')
        if destination is None:
            raise SMPPConfigurationException(
                'Recipient address is not set', config_key='recipient'
            )

        data = encode_message(message, data_coding)
        tags = list(tags or [])
        csms_method = self.config.csms_method
        submit = dict(
            data_coding=data_coding,
            priority=priority,
            schedule_delivery_time=schedule_delivery_time,
            validity_period=validity_period,
        )

        if data_coding == DataCoding.UCS2:
            single_limit = UCS2_SINGLE_SMS_LIMIT
            split = UCS2_CSMS_SPLIT
        elif data_coding == DataCoding.DEFAULT:
            single_limit = GSM_SINGLE_SMS_LIMIT
            split = (
                GSM_CSMS_SPLIT_UDH if csms_method == CsmsMethod.UDH_8BIT else GSM_CSMS_SPLIT
            )
        else:
            single_limit = OCTET_SINGLE_SMS_LIMIT
            split = None

        if len(data) <= single_limit:
            return self.submit_sm(source, destination, data, tags, **submit)

        if csms_method == CsmsMethod.PAYLOAD:
            payload = Tag(OptionalTag.MESSAGE_PAYLOAD, data)
            return self.submit_sm(source, destination, b'', tags + [payload], **submit)

        if split is None:
            raise SMPPMessageException(
                f'Message too long for data coding 0x{data_coding:02X}: '
                f'{len(data)} > {single_limit} octets',
                data_coding=data_coding,
                message_length=len(data),
            )

        parts = self.split_message_string(data, split, data_coding)
        reference = self.get_csms_reference()
        message_ids = []

        if csms_method == CsmsMethod.UDH_8BIT:
            esm_class = self.config.submit.esm_class | EsmClass.UDHI_INDICATOR
            for seqnum, part in enumerate(parts, 1):
                udh = struct.pack('BBBBBB', 5, 0, 3, reference & 0xFF, len(parts), seqnum)
                message_ids.append(
                    self.submit_sm(
                        source, destination, udh + part, tags, esm_class=esm_class, **submit
                    )
                )
        else:
            ref_num = Tag.numeric(OptionalTag.SAR_MSG_REF_NUM, reference, 2)
            total = Tag.numeric(OptionalTag.SAR_TOTAL_SEGMENTS, len(parts), 1)
            for seqnum, part in enumerate(parts, 1):
                sar_tags = [
                    ref_num,
                    total,
                    Tag.numeric(OptionalTag.SAR_SEGMENT_SEQNUM, seqnum, 1),
                ]
                message_ids.append(
                    self.submit_sm(source, destination, part, tags + sar_tags, **submit)
                )

        return message_ids[0]

    def submit_sm(
        self,
        source: Address,
        destination: Address,
        short_message: bytes = b'',
        tags: Optional[Iterable[Tag]] = None,
        data_coding: int = DataCoding.DEFAULT,
        priority: Optional[int] = None,
        schedule_delivery_time: Optional[str] = None,
        validity_period: Optional[str] = None,
        esm_class: Optional[int] = None,
    ) -> str:
        """
        Submit one short message.

        Returns:
            The SMSC message id, trimmed of control-byte padding
        """
        submit = self.config.submit
        body = encode_submit_sm_body(
            source,
            destination,
            short_message,
            tags,
            service_type=submit.service_type,
            esm_class=submit.esm_class if esm_class is None else esm_class,
            protocol_id=submit.protocol_id,
            priority_flag=submit.priority_flag if priority is None else priority,
            schedule_delivery_time=schedule_delivery_time,
            validity_period=validity_period,
            registered_delivery=self.registered_delivery,
            replace_if_present_flag=submit.replace_if_present_flag,
            data_coding=data_coding,
            sm_default_msg_id=submit.sm_default_msg_id,
            null_terminate_octet_strings=submit.null_terminate_octet_strings,
        )
        response = self.send_command(CommandId.SUBMIT_SM, body)
        return response.body.strip(bytes(range(0x20))).decode('latin-1')

    def get_csms_reference(self) -> int:
        """
        Return the next CSMS reference number.

        The counter starts at a random value and wraps to 0 past 255 in
        8-bit UDH mode, or past 65535 otherwise.
        """
        limit = 0xFF if self.config.csms_method == CsmsMethod.UDH_8BIT else 0xFFFF
        if self.sar_message_reference_number is None:
            self.sar_message_reference_number = random.randint(0, limit)
        self.sar_message_reference_number += 1
        if self.sar_message_reference_number > limit:
            self.sar_message_reference_number = 0
        return self.sar_message_reference_number

    def split_message_string(
        self, message: bytes, split: int, data_coding: int = DataCoding.DEFAULT
    ) -> List[bytes]:
        """
        Split an encoded message into parts of at most split octets.

        For the GSM default alphabet a part never ends with the escape byte,
        so extension characters stay in one part. For UCS-2 a part never ends
        with a high surrogate, so characters outside the BMP stay in one part.
        """
        if data_coding == DataCoding.UCS2:
            return _split_utf16(message, split)
        chunks = [message[i : i + split] for i in range(0, len(message), split)]
        if data_coding != DataCoding.DEFAULT:
            return chunks
        if not any(chunk[-1] == GSM_ESCAPE for chunk in chunks[:-1]):
            return chunks

        parts = []
        part = bytearray()
        for byte in message:
            if len(part) == split or (len(part) == split - 1 and byte == GSM_ESCAPE):
                parts.append(bytes(part))
                part = bytearray()
            part.append(byte)
        parts.append(bytes(part))
        return parts

    # Queries

    def query_status(self, message_id: str, source: Address) -> Optional[QueryResult]:
        """
        Query the state of a submitted message.

        Returns:
            The parsed query_sm_resp, or None if the SMSC answered with an error
        """
        body = encode_query_sm_body(message_id, source)
        try:
            response = self.send_command(CommandId.QUERY_SM, body)
        except SMPPProtocolException as e:
            if e.command_status is None:
                raise
            logger.debug(f'query_sm for {message_id} failed: {e}')
            return None
        return decode_query_sm_resp(response)

    def __repr__(self) -> str:
        return (
            f'SMPPClient(system_id={self.config.system_id}, mode={self.mode.value}, '
            f'sequence_number={self.sequence_number})'
        )


def _split_utf16(message: bytes, split: int) -> List[bytes]:
    parts = []
    start = 0
    while start < len(message):
        end = min(start + split, len(message))
        # high surrogate (0xD800-0xDBFF) at the cut belongs with its low half
        if end < len(message) and end - start >= 4 and 0xD8 <= message[end - 2] <= 0xDB:
            end -= 2
        parts.append(message[start:end])
        start = end
    return parts
