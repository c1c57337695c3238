"""
SMPP Exception Classes

This module defines the exception taxonomy used by the session engine, the
transport and the codec. Timeouts are kept apart from hard transport failures
so callers can tell "retry later" from "fatal" without inspecting error text.
"""

from enum import IntEnum
from typing import Any, Dict, Optional, Union


class SMPPErrorCode(IntEnum):
    """Coarse error categories attached to every SMPPException."""

    UNKNOWN = 0
    TRANSPORT_FAILED = 1000
    BIND_FAILED = 1001
    INVALID_PDU = 1002
    TIMEOUT = 1003
    PROTOCOL_ERROR = 1004
    VALIDATION_ERROR = 1005
    PARSE_ERROR = 1006
    MESSAGE_ERROR = 1008
    INVALID_STATE = 1009
    CONFIGURATION_ERROR = 1010


class SMPPException(Exception):
    """Root of every error raised by smppclient."""

    def __init__(
        self,
        message: str,
        command_status: Optional[int] = None,
        error_code: Optional[Union[str, SMPPErrorCode]] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.command_status = command_status
        self.error_code = error_code
        self.context = context or {}
        self.original_error = original_error

    def __str__(self) -> str:
        """Render the message followed by error code, command status and context."""
        parts = [super().__str__()]

        if self.error_code:
            if isinstance(self.error_code, SMPPErrorCode):
                parts.append(
                    f'Error Code: {self.error_code.name} ({self.error_code.value})'
                )
            else:
                parts.append(f'Error Code: {self.error_code}')

        if self.command_status is not None:
            parts.append(f'Command Status: 0x{self.command_status:08X}')

        if self.context:
            context_str = ', '.join(f'{k}={v}' for k, v in self.context.items())
            parts.append(f'Context: {context_str}')

        return ' | '.join(parts)


class SMPPConfigurationException(SMPPException):
    """Raised when the client configuration cannot be used."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[str] = None,
        original_error: Optional[BaseException] = None,
        **kwargs,
    ):
        context = {}
        if config_key:
            context['config_key'] = config_key
        if config_value:
            context['config_value'] = config_value

        kwargs.setdefault('error_code', SMPPErrorCode.CONFIGURATION_ERROR)
        super().__init__(
            message,
            context=context,
            original_error=original_error,
            **kwargs,
        )
        self.config_key = config_key
        self.config_value = config_value


class SMPPValidationException(SMPPConfigurationException):
    """Exception raised when a configuration value or field fails validation."""

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        field_value: Optional[str] = None,
        validation_rule: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(
            message,
            config_key=field_name,
            config_value=field_value,
            original_error=original_error,
            error_code=SMPPErrorCode.VALIDATION_ERROR,
        )
        if validation_rule:
            self.context['validation_rule'] = validation_rule
        self.field_name = field_name
        self.field_value = field_value
        self.validation_rule = validation_rule


class SMPPTransportException(SMPPException):
    """Exception raised for socket-level failures."""

    def __init__(
        self,
        message: str,
        host: Optional[str] = None,
        port: Optional[int] = None,
        errno: Optional[int] = None,
        original_error: Optional[BaseException] = None,
        **kwargs,
    ):
        context = {}
        if host:
            context['host'] = host
        if port:
            context['port'] = str(port)
        if errno is not None:
            context['errno'] = str(errno)

        super().__init__(
            message,
            error_code=SMPPErrorCode.TRANSPORT_FAILED,
            context=context,
            original_error=original_error,
            **kwargs,
        )
        self.host = host
        self.port = port
        self.errno = errno


class SMPPTimeoutException(SMPPException):
    """Exception raised when a connect, read or write deadline is exceeded."""

    def __init__(
        self,
        message: str,
        timeout_duration: Optional[float] = None,
        operation: Optional[str] = None,
        original_error: Optional[BaseException] = None,
        **kwargs,
    ):
        context = {}
        if timeout_duration is not None:
            context['timeout_duration'] = str(timeout_duration)
        if operation:
            context['operation'] = operation

        super().__init__(
            message,
            error_code=SMPPErrorCode.TIMEOUT,
            context=context,
            original_error=original_error,
            **kwargs,
        )
        self.timeout_duration = timeout_duration
        self.operation = operation


class SMPPProtocolException(SMPPException):
    """Exception raised when the SMSC rejects a command or fails to answer it."""

    def __init__(
        self,
        message: str,
        command_id: Optional[int] = None,
        sequence_number: Optional[int] = None,
        original_error: Optional[BaseException] = None,
        **kwargs,
    ):
        context = {}
        if command_id is not None:
            context['command_id'] = f'0x{command_id:08X}'
        if sequence_number is not None:
            context['sequence_number'] = str(sequence_number)

        kwargs.setdefault('error_code', SMPPErrorCode.PROTOCOL_ERROR)
        super().__init__(
            message,
            context=context,
            original_error=original_error,
            **kwargs,
        )
        self.command_id = command_id
        self.sequence_number = sequence_number


class SMPPPDUException(SMPPProtocolException):
    """Exception raised for PDUs that cannot be encoded or decoded."""

    def __init__(
        self,
        message: str,
        pdu_type: Optional[str] = None,
        command_id: Optional[int] = None,
        sequence_number: Optional[int] = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(
            message,
            command_id=command_id,
            sequence_number=sequence_number,
            original_error=original_error,
            error_code=SMPPErrorCode.INVALID_PDU,
        )
        if pdu_type:
            self.context['pdu_type'] = pdu_type
        self.pdu_type = pdu_type


class SMPPBindException(SMPPProtocolException):
    """Exception raised when the SMSC rejects a bind request."""

    def __init__(
        self,
        message: str,
        bind_type: Optional[str] = None,
        system_id: Optional[str] = None,
        command_status: Optional[int] = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(
            message,
            command_status=command_status,
            original_error=original_error,
            error_code=SMPPErrorCode.BIND_FAILED,
        )
        if bind_type:
            self.context['bind_type'] = bind_type
        if system_id:
            self.context['system_id'] = system_id
        self.bind_type = bind_type
        self.system_id = system_id


class SMPPInvalidStateException(SMPPException):
    """Raised when the session state does not allow the requested operation."""

    def __init__(
        self,
        message: str,
        current_state: Optional[str] = None,
        expected_state: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ):
        context = {}
        if current_state:
            context['current_state'] = current_state
        if expected_state:
            context['expected_state'] = expected_state
        if operation:
            context['operation'] = operation

        super().__init__(
            message,
            error_code=SMPPErrorCode.INVALID_STATE,
            context=context,
            original_error=original_error,
        )
        self.current_state = current_state
        self.expected_state = expected_state
        self.operation = operation


class SMPPMessageException(SMPPException):
    """Exception raised for messages that cannot be submitted."""

    def __init__(
        self,
        message: str,
        data_coding: Optional[int] = None,
        message_length: Optional[int] = None,
        original_error: Optional[BaseException] = None,
    ):
        context = {}
        if data_coding is not None:
            context['data_coding'] = f'0x{data_coding:02X}'
        if message_length is not None:
            context['message_length'] = str(message_length)

        super().__init__(
            message,
            error_code=SMPPErrorCode.MESSAGE_ERROR,
            context=context,
            original_error=original_error,
        )
        self.data_coding = data_coding
        self.message_length = message_length


class SMPPParseException(SMPPException):
    """Exception raised when a delivery receipt body cannot be parsed."""

    def __init__(
        self,
        message: str,
        text: str = '',
        body_hex: str = '',
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(
            message,
            error_code=SMPPErrorCode.PARSE_ERROR,
            original_error=original_error,
        )
        self.text = text
        self.body_hex = body_hex
