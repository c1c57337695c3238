"""
Shared test fixtures and configuration for SMPP unit tests.
"""

from typing import List, Optional
from unittest.mock import MagicMock

import pytest

from smppclient.config import create_client_config
from smppclient.exceptions import SMPPTimeoutException
from smppclient.protocol.pdu import Pdu


class FakeTransport:
    """
    Scripted in-memory transport.

    Frames queued with feed() are returned by read()/read_all(); everything
    written is recorded in written and decoded into sent_pdus. When responder
    is set it is called with each written PDU and the PDUs it returns are fed
    back as if the SMSC had answered.
    """

    def __init__(self):
        self.incoming = bytearray()
        self.written: List[bytes] = []
        self.opened = False
        self.open_calls = 0
        self.close_calls = 0
        self.responder = None

    def feed(self, *pdus: Pdu) -> None:
        for pdu in pdus:
            self.incoming += pdu.encode()

    def open(self) -> None:
        self.opened = True
        self.open_calls += 1

    def is_open(self) -> bool:
        return self.opened

    def read(self, length: int) -> Optional[bytes]:
        if not self.incoming:
            return None
        data = bytes(self.incoming[:length])
        del self.incoming[:length]
        return data

    def read_all(self, length: int) -> bytes:
        if len(self.incoming) < length:
            raise SMPPTimeoutException('Timed out waiting for data on socket')
        data = bytes(self.incoming[:length])
        del self.incoming[:length]
        return data

    def write(self, data: bytes) -> None:
        self.written.append(bytes(data))
        if self.responder is not None:
            self.feed(*(self.responder(Pdu.decode(data)) or ()))

    def close(self) -> None:
        self.opened = False
        self.close_calls += 1

    def has_data(self) -> bool:
        return bool(self.incoming)

    @property
    def sent_pdus(self) -> List[Pdu]:
        return [Pdu.decode(data) for data in self.written]


@pytest.fixture
def fake_transport():
    """Open scripted transport."""
    transport = FakeTransport()
    transport.open()
    return transport


@pytest.fixture
def client_config():
    """Validated client configuration pointing at a loopback SMSC."""
    return create_client_config(
        host='127.0.0.1',
        port=2775,
        system_id='test_client',
        password='secret',
    )


@pytest.fixture
def mock_logger():
    """Mock logger for testing debug output."""
    return MagicMock()

