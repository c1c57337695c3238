"""
SMPP Configuration Settings

This module defines the configuration sections of the SMPP client and the
factory function that builds a validated client configuration.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Union

from ..exceptions import SMPPValidationException
from ..protocol.constants import (
    DEFAULT_ADDR_NPI,
    DEFAULT_ADDR_TON,
    DEFAULT_ADDRESS_RANGE,
    DEFAULT_ESM_CLASS,
    DEFAULT_INTERFACE_VERSION,
    DEFAULT_PRIORITY_FLAG,
    DEFAULT_PROTOCOL_ID,
    DEFAULT_REGISTERED_DELIVERY,
    DEFAULT_REPLACE_IF_PRESENT_FLAG,
    DEFAULT_SERVICE_TYPE,
    DEFAULT_SM_DEFAULT_MSG_ID,
    DEFAULT_SYSTEM_TYPE,
    MAX_SERVICE_TYPE_LENGTH,
)
from ..protocol.pdu.bind import (
    MAX_ADDRESS_RANGE_LENGTH,
    MAX_PASSWORD_LENGTH,
    MAX_SYSTEM_ID_LENGTH,
    MAX_SYSTEM_TYPE_LENGTH,
)
from .base import BaseConfig, require_byte, require_max_length


class IPFamily(Enum):
    """Address families the transport may connect over."""

    ANY = 'any'
    IPV4 = 'ipv4'
    IPV6 = 'ipv6'


class CsmsMethod(Enum):
    """How messages too long for one PDU are sent."""

    SAR_16BIT_TAGS = 'sar'
    PAYLOAD = 'payload'
    UDH_8BIT = 'udh'


@dataclass
class ConnectionConfig(BaseConfig):
    """
    Connection-related configuration settings.

    Timeouts are in milliseconds, reconnect_delay in seconds.
    """

    hosts: List[str] = field(default_factory=lambda: ['localhost'])
    ports: Union[int, List[int]] = 2775
    connect_timeout: int = 5000
    send_timeout: int = 100
    receive_timeout: int = 10000
    ip_family: IPFamily = IPFamily.ANY
    random_host: bool = False
    reconnect_delay: float = 1.0

    def host_ports(self) -> List[int]:
        """Return one port per configured host."""
        if isinstance(self.ports, int):
            return [self.ports] * len(self.hosts)
        return list(self.ports)

    def validate(self) -> None:
        """Validate connection configuration"""
        if not self.hosts or any(not host for host in self.hosts):
            raise SMPPValidationException(
                'hosts must be a non-empty list of host names',
                field_name='hosts',
                field_value=str(self.hosts),
                validation_rule='non_empty',
            )
        ports = self.host_ports()
        if len(ports) != len(self.hosts):
            raise SMPPValidationException(
                f'Expected {len(self.hosts)} ports, got {len(ports)}',
                field_name='ports',
                field_value=str(self.ports),
                validation_rule='one_port_per_host',
            )
        for port in ports:
            if not (1 <= port <= 65535):
                raise SMPPValidationException(
                    f'Invalid port: {port} (must be 1-65535)',
                    field_name='ports',
                    field_value=str(port),
                    validation_rule='port_range',
                )
        for name in ('connect_timeout', 'send_timeout', 'receive_timeout'):
            if getattr(self, name) <= 0:
                raise SMPPValidationException(
                    f'{name} must be positive',
                    field_name=name,
                    field_value=str(getattr(self, name)),
                    validation_rule='positive_number',
                )
        if self.reconnect_delay < 0:
            raise SMPPValidationException(
                'reconnect_delay must be non-negative',
                field_name='reconnect_delay',
                field_value=str(self.reconnect_delay),
                validation_rule='non_negative',
            )

    @classmethod
    def _convert_nested(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        data = dict(data)
        if isinstance(data.get('ip_family'), str):
            data['ip_family'] = IPFamily(data['ip_family'])
        if isinstance(data.get('hosts'), str):
            data['hosts'] = [data['hosts']]
        return data


@dataclass
class BindConfig(BaseConfig):
    """Parameters sent with every bind request."""

    system_type: str = DEFAULT_SYSTEM_TYPE
    interface_version: int = DEFAULT_INTERFACE_VERSION
    addr_ton: int = DEFAULT_ADDR_TON
    addr_npi: int = DEFAULT_ADDR_NPI
    address_range: str = DEFAULT_ADDRESS_RANGE

    def validate(self) -> None:
        require_max_length('system_type', self.system_type, MAX_SYSTEM_TYPE_LENGTH)
        if self.interface_version not in (0x33, 0x34):
            raise SMPPValidationException(
                f'Unsupported interface version: 0x{self.interface_version:02X}',
                field_name='interface_version',
                field_value=f'0x{self.interface_version:02X}',
                validation_rule='supported_version',
            )
        require_byte('addr_ton', self.addr_ton)
        require_byte('addr_npi', self.addr_npi)
        require_max_length(
            'address_range', self.address_range, MAX_ADDRESS_RANGE_LENGTH
        )


@dataclass
class SubmitConfig(BaseConfig):
    """Default submit_sm parameters."""

    service_type: str = DEFAULT_SERVICE_TYPE
    esm_class: int = DEFAULT_ESM_CLASS
    protocol_id: int = DEFAULT_PROTOCOL_ID
    priority_flag: int = DEFAULT_PRIORITY_FLAG
    registered_delivery: int = DEFAULT_REGISTERED_DELIVERY
    replace_if_present_flag: int = DEFAULT_REPLACE_IF_PRESENT_FLAG
    sm_default_msg_id: int = DEFAULT_SM_DEFAULT_MSG_ID
    # Some SMSCs expect short_message followed by a null octet
    null_terminate_octet_strings: bool = False

    def validate(self) -> None:
        require_max_length('service_type', self.service_type, MAX_SERVICE_TYPE_LENGTH)
        for name in (
            'esm_class',
            'protocol_id',
            'priority_flag',
            'registered_delivery',
            'replace_if_present_flag',
            'sm_default_msg_id',
        ):
            require_byte(name, getattr(self, name))


@dataclass
class SMPPClientConfig(BaseConfig):
    """Complete SMPP client configuration"""

    # Authentication
    system_id: str = ''
    password: str = ''

    # Emit PDU and socket traces to the debug sink
    debug: bool = False

    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    bind: BindConfig = field(default_factory=BindConfig)
    submit: SubmitConfig = field(default_factory=SubmitConfig)
    csms_method: CsmsMethod = CsmsMethod.SAR_16BIT_TAGS

    def validate(self) -> None:
        """Validate complete client configuration"""
        if not self.system_id:
            raise SMPPValidationException(
                'System ID is required',
                field_name='system_id',
                field_value=self.system_id,
                validation_rule='required',
            )
        require_max_length('system_id', self.system_id, MAX_SYSTEM_ID_LENGTH)
        if len(self.password) >= MAX_PASSWORD_LENGTH:
            raise SMPPValidationException(
                f'Password too long: {len(self.password)} > {MAX_PASSWORD_LENGTH - 1}',
                field_name='password',
                field_value='***',
                validation_rule='max_length',
            )

        # Validate nested configurations
        self.connection.validate()
        self.bind.validate()
        self.submit.validate()

    @classmethod
    def _convert_nested(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        data = dict(data)
        sections = {
            'connection': ConnectionConfig,
            'bind': BindConfig,
            'submit': SubmitConfig,
        }
        for key, section_cls in sections.items():
            if isinstance(data.get(key), dict):
                data[key] = section_cls.from_dict(data[key])
        if isinstance(data.get('csms_method'), str):
            data['csms_method'] = CsmsMethod(data['csms_method'])
        return data


def create_client_config(
    host: Union[str, List[str]],
    port: Union[int, List[int]],
    system_id: str,
    password: str,
    **kwargs,
) -> SMPPClientConfig:
    """
    Create a validated SMPP client configuration.

    Keyword arguments naming a field of ConnectionConfig, BindConfig or
    SubmitConfig are routed to that section; the rest go to SMPPClientConfig.

    Args:
        host: SMSC host name or list of host names tried in order
        port: Port shared by all hosts, or one port per host
        system_id: System identifier for authentication
        password: Password for authentication
        **kwargs: Additional configuration parameters

    Returns:
        Validated SMPPClientConfig instance

    Raises:
        SMPPValidationException: If configuration is invalid
    """
    sections: Dict[str, Dict[str, Any]] = {'connection': {}, 'bind': {}, 'submit': {}}
    section_fields = {
        'connection': ConnectionConfig.__dataclass_fields__,
        'bind': BindConfig.__dataclass_fields__,
        'submit': SubmitConfig.__dataclass_fields__,
    }
    client_kwargs: Dict[str, Any] = {}
    for key, value in kwargs.items():
        for section, names in section_fields.items():
            if key in names:
                sections[section][key] = value
                break
        else:
            client_kwargs[key] = value

    hosts = [host] if isinstance(host, str) else list(host)
    try:
        config = SMPPClientConfig(
            system_id=system_id,
            password=password,
            connection=ConnectionConfig(
                hosts=hosts, ports=port, **sections['connection']
            ),
            bind=BindConfig(**sections['bind']),
            submit=SubmitConfig(**sections['submit']),
            **client_kwargs,
        )
    except TypeError as e:
        raise SMPPValidationException(
            f'Invalid client configuration: {e}',
            field_name='config_data',
            validation_rule='type_conversion',
            original_error=e,
        ) from e
    config.validate()
    return config
