"""
Transport Interfaces

Structural types the session engine depends on. Any object with matching
methods can stand in for the socket transport, which keeps the engine
testable without a network.
"""

from typing import Optional, Protocol


class DebugSink(Protocol):
    """Receiver of debug traces; a logging.Logger satisfies it."""

    def debug(self, msg: str, *args) -> None: ...


class Transport(Protocol):
    """Byte stream to an SMSC."""

    def open(self) -> None: ...

    def is_open(self) -> bool: ...

    def read(self, length: int) -> Optional[bytes]: ...

    def read_all(self, length: int) -> bytes: ...

    def write(self, data: bytes) -> None: ...

    def close(self) -> None: ...

    def has_data(self) -> bool: ...
