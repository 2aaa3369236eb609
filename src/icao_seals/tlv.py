"""
DER-TLV encoding for seal and barcode structures.

Only the subset of BER/DER used by ICAO Doc 9303 Part 13 and the ICAO
Datastructure for Barcode is supported:

- single-byte tags
- short form lengths (0..127) and long form lengths with one to three
  length bytes (``0x81``, ``0x82``, ``0x83`` prefixes)
"""

from __future__ import annotations

from dataclasses import dataclass

from .types import MalformedLengthError, OutOfRangeError, TruncatedInputError

MAX_SHORT_LENGTH = 0x7F
MAX_LENGTH_BYTES = 3
DER_INTEGER_TAG = 0x02
DER_SEQUENCE_TAG = 0x30


@dataclass(frozen=True)
class DerTLV:
    """A single tag-length-value entry."""

    tag: int
    value: bytes

    def __post_init__(self) -> None:
        if not 0 <= self.tag <= 0xFF:
            msg = f"Tag must fit in one byte, got {self.tag}"
            raise OutOfRangeError(msg)
        object.__setattr__(self, "value", bytes(self.value))

    @property
    def encoded(self) -> bytes:
        """Tag byte, DER length and value."""
        return bytes([self.tag]) + get_der_length(len(self.value)) + self.value

    @classmethod
    def decode(cls, data: bytes) -> DerTLV:
        """
        Decode the TLV at the start of ``data``.

        Trailing bytes after the value are ignored.

        Raises:
            TruncatedInputError: If the tag or length bytes are missing
            MalformedLengthError: If the length form is unsupported or the
                declared length exceeds the buffer
        """
        tag, length, start = _read_header(data, 0)
        end = start + length
        if end > len(data):
            msg = f"Declared length {length} exceeds remaining {len(data) - start} bytes"
            raise MalformedLengthError(msg)
        return cls(tag, data[start:end])


def get_der_length(length: int) -> bytes:
    """Encode a length using the minimal DER short or long form."""
    if length < 0:
        msg = f"Length must be non-negative, got {length}"
        raise MalformedLengthError(msg)
    if length <= MAX_SHORT_LENGTH:
        return bytes([length])

    length_bytes = length.to_bytes((length.bit_length() + 7) // 8, "big")
    if len(length_bytes) > MAX_LENGTH_BYTES:
        msg = f"Length {length} needs more than {MAX_LENGTH_BYTES} length bytes"
        raise MalformedLengthError(msg)
    return bytes([0x80 | len(length_bytes)]) + length_bytes


def get_der_integer(value: bytes) -> bytes:
    """
    Encode unsigned big-endian bytes as a DER INTEGER TLV.

    A zero byte is prepended when the high bit is set, otherwise redundant
    leading zero bytes are stripped.
    """
    if not value:
        value = b"\x00"
    if value[0] & 0x80:
        positive = b"\x00" + value
    else:
        start = 0
        while start < len(value) - 1 and value[start] == 0:
            start += 1
        positive = value[start:]
    return DerTLV(DER_INTEGER_TAG, positive).encoded


def parse_tlvs(data: bytes) -> list[DerTLV]:
    """
    Parse a flat sequence of TLVs filling ``data`` completely.

    Raises:
        TruncatedInputError: If the last entry is cut short
        MalformedLengthError: If a length uses an unsupported form
    """
    entries: list[DerTLV] = []
    position = 0

    while position < len(data):
        tag, length, start = _read_header(data, position)
        end = start + length
        if end > len(data):
            msg = (
                f"Unexpected end of data in value of tag 0x{tag:02X}: "
                f"need {length} bytes, have {len(data) - start}"
            )
            raise TruncatedInputError(msg)
        entries.append(DerTLV(tag, data[start:end]))
        position = end

    return entries


def _read_header(data: bytes, position: int) -> tuple[int, int, int]:
    """Read tag and length at ``position``; return (tag, length, value offset)."""
    if position >= len(data):
        msg = "Unexpected end of data while reading tag"
        raise TruncatedInputError(msg)
    tag = data[position]
    position += 1

    if position >= len(data):
        msg = "Unexpected end of data while reading length"
        raise TruncatedInputError(msg)
    first = data[position]
    position += 1

    if first <= MAX_SHORT_LENGTH:
        return tag, first, position

    count = first & 0x7F
    if not 1 <= count <= MAX_LENGTH_BYTES:
        msg = f"Can't decode length: {first:02X}"
        raise MalformedLengthError(msg)
    if position + count > len(data):
        msg = "Unexpected end of data while reading length"
        raise TruncatedInputError(msg)

    length = int.from_bytes(data[position:position + count], "big")
    return tag, length, position + count
