"""
Bitfield struct definitions

Unpacks an integer into named sub-fields. Fields are declared left to right,
so the first field occupies the most significant bits of the container.
"""

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple


@dataclass(frozen=True)
class Bitfield:
    """A single named field within a BitfieldLayout"""
    name: str
    size: int  # Width in bits


class BitfieldLayout:
    """Ordered set of bitfields packed into a fixed-width container

    Usage:
        layout = BitfieldLayout([Bitfield('a', 4), Bitfield('b', 4)], size=8)
        layout.decode(0xA5)  # {'a': 10, 'b': 5}
    """

    def __init__(self, fields: Sequence[Bitfield], size: int = 32):
        """
        Args:
            fields: Fields in left-to-right (most significant first) order
            size: Width of the packed container in bits
        """
        fields = tuple(fields)
        for field in fields:
            if field.size < 1:
                raise ValueError(f"Bitfield '{field.name}' must be at least 1 bit wide")

        total = sum(field.size for field in fields)
        if total > size:
            raise ValueError(f"Bitfield sizes add up to {total} bits, container is only {size}")

        self._fields: Tuple[Bitfield, ...] = fields
        self._size = size

    @property
    def fields(self) -> Tuple[Bitfield, ...]:
        return self._fields

    @property
    def size(self) -> int:
        return self._size

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(field.name for field in self._fields)

    def decode(self, value: int) -> Dict[str, int]:
        """Decode a packed integer into a dict of field values"""
        record = {}
        offset = 0

        for field in self._fields:
            shift = self._size - (offset + field.size)
            mask = (1 << field.size) - 1
            record[field.name] = (value >> shift) & mask
            offset += field.size

        return record

    def encode(self, **values: int) -> int:
        """Pack field values into an integer (inverse of decode)

        Missing fields are packed as 0, oversized values are masked to fit.
        """
        unknown = set(values) - set(self.names)
        if unknown:
            raise ValueError(f"Unknown bitfield(s): {', '.join(sorted(unknown))}")

        packed = 0
        offset = 0

        for field in self._fields:
            shift = self._size - (offset + field.size)
            mask = (1 << field.size) - 1
            packed |= (values.get(field.name, 0) & mask) << shift
            offset += field.size

        return packed

    def __repr__(self) -> str:
        layout = ", ".join(f"{field.name}:{field.size}" for field in self._fields)
        return f"BitfieldLayout({layout}; size={self._size})"


def decode(layout: BitfieldLayout, value: int) -> Dict[str, int]:
    """Decode value according to layout"""
    return layout.decode(value)
