"""
Byte buffer for building outgoing GameSpy packets.

Modelled on a CString-style write buffer: writes chain, and single bytes can be
patched in place once the full message is known (e.g. a length header).
"""

from typing import Union


class PacketWriter:
    """Write buffer with chaining write methods"""

    def __init__(self, data: Union[bytes, str] = b''):
        if isinstance(data, str):
            self._buffer = bytearray(data.encode('latin-1'))
        else:
            self._buffer = bytearray(data)

    def __len__(self) -> int:
        return len(self._buffer)

    def __bytes__(self) -> bytes:
        return bytes(self._buffer)

    def write(self, data: Union[bytes, str]) -> 'PacketWriter':
        """Write raw data to buffer"""
        if isinstance(data, str):
            self._buffer.extend(data.encode('latin-1'))
        else:
            self._buffer.extend(data)
        return self

    def write_char(self, value: int) -> 'PacketWriter':
        """Write single byte"""
        self._buffer.append(value & 0xFF)
        return self

    def write_padding(self, count: int) -> 'PacketWriter':
        """Write count zero bytes"""
        self._buffer.extend(bytes(count))
        return self

    def write_cstring(self, value: str) -> 'PacketWriter':
        """Write null-terminated string"""
        return self.write(value).write_char(0)

    def set_char(self, pos: int, value: int) -> 'PacketWriter':
        """Overwrite the byte at pos"""
        self._buffer[pos] = value & 0xFF
        return self

    def to_bytes(self) -> bytes:
        return bytes(self._buffer)
