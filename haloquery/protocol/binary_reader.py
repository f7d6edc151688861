"""
Binary reader for GameSpy master server data

Reads are lenient: the master server data is only loosely understood, so
reading past the end returns whatever bytes remain instead of raising. Callers
check remaining() where a short read matters.
"""

import logging

logger = logging.getLogger(__name__)

IP_PORT_LEN = 6  # 4 bytes IP, 2 bytes big-endian port


class BinaryReader:
    """Sequential reader over a byte buffer"""

    def __init__(self, data: bytes, pos: int = 0):
        self.data = bytes(data)
        self.pos = pos

    def remaining(self) -> int:
        """Bytes remaining to read"""
        return max(0, len(self.data) - self.pos)

    def at_end(self) -> bool:
        return self.pos >= len(self.data)

    def read_byte(self) -> int:
        """Read a single byte"""
        if self.at_end():
            raise ValueError("End of data reached")
        value = self.data[self.pos]
        self.pos += 1
        return value

    def peek_fixed_data(self, size: int) -> bytes:
        """Read up to size bytes without advancing"""
        return self.data[self.pos:self.pos + size]

    def read_fixed_data(self, size: int) -> bytes:
        """Read up to size bytes"""
        data = self.peek_fixed_data(size)
        self.pos += size
        return data

    def skip(self, size: int):
        self.pos += size

    def read_pascal_string(self) -> str:
        """Read a length-prefixed string (1 byte length + data)

        Always advances past 1 + length bytes, even when the buffer ends early.
        """
        if self.at_end():
            self.pos += 1
            return ""
        length = self.read_byte()
        return self.read_fixed_data(length).decode('latin-1')

    def read_cstring(self) -> str:
        """Read a null-terminated string"""
        end = self.data.find(b'\x00', self.pos)
        if end == -1:
            end = len(self.data)
        value = self.data[self.pos:end].decode('latin-1')
        self.pos = end + 1
        return value

    def read_address(self):
        """Read a 4-byte IP and 2-byte big-endian port

        Returns:
            Tuple of (dotted-quad ip, port)
        """
        if self.remaining() < IP_PORT_LEN:
            raise ValueError(f"Not enough data for address: {self.remaining()} bytes left")
        return unpack_address(self.read_fixed_data(IP_PORT_LEN))


def unpack_address(data: bytes):
    """Unpack 6 bytes of IP + big-endian port into (ip, port)"""
    ip1, ip2, ip3, ip4, port1, port2 = data[:IP_PORT_LEN]
    return f"{ip1}.{ip2}.{ip3}.{ip4}", (port1 << 8) | port2
