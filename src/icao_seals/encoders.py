"""
Text and date sub-encodings used inside seal headers and messages.

C40 compaction is described by ICAO Doc 9303 Part 13 section 2.6, the date
packing by section 2.3.1. Masked dates (dates with unknown digits) come from
the ICAO Datastructure for Barcode.
"""

from __future__ import annotations

import re
from datetime import date, datetime

from .types import InvalidCharacterError, InvalidFormatError, InvalidLengthError

C40_SHIFT_ESCAPE = 0xFE
C40_SPACE = 3
MASK_CHAR = "x"
MASKED_DATE_PATTERN = re.compile(r"^[0-9x]{4}-[0-9x]{2}-[0-9x]{2}$")

DATE_LENGTH = 3
DATETIME_LENGTH = 6
MASKED_DATE_LENGTH = 4


class C40Encoder:
    """String encoder/decoder based on the C40 scheme."""

    @staticmethod
    def get_c40_value(char: str) -> int:
        """Get the C40 value of a single character."""
        if char == " ":
            return C40_SPACE
        if "0" <= char <= "9":
            return ord(char) - 44
        if "A" <= char <= "Z":
            return ord(char) - 51
        msg = f"Not a C40 encodable char: {char!r}"
        raise InvalidCharacterError(msg)

    @staticmethod
    def get_char(value: int) -> str:
        """Get the character for a C40 value; 0 stands for no character."""
        if value == 0:
            return ""
        if value == C40_SPACE:
            return " "
        if 4 <= value <= 13:
            return chr(value + 44)
        if 14 <= value <= 39:
            return chr(value + 51)
        msg = f"Invalid C40 value: {value}"
        raise InvalidCharacterError(msg)

    @staticmethod
    def normalize(text: str) -> str:
        """Upper-case, map '<' to space and strip line breaks."""
        return text.upper().replace("<", " ").replace("\r", "").replace("\n", "")

    @classmethod
    def encode(cls, text: str) -> bytes:
        """
        Encode a string with C40.

        Full triplets and a trailing pair take two bytes each; a trailing
        single character is written as ``0xFE`` followed by its code + 1.
        """
        data = cls.normalize(text)
        out = bytearray()

        for i in range(0, len(data), 3):
            chunk = data[i:i + 3]
            values = [cls.get_c40_value(c) for c in chunk]
            if len(values) == 3:
                total = 1600 * values[0] + 40 * values[1] + values[2] + 1
            elif len(values) == 2:
                total = 1600 * values[0] + 40 * values[1] + 1
            else:
                out += bytes([C40_SHIFT_ESCAPE, ord(chunk) + 1])
                continue
            out += total.to_bytes(2, "big")

        return bytes(out)

    @classmethod
    def decode(cls, data: bytes) -> str:
        """Decode C40 bytes into a string (spaces are kept as spaces)."""
        if len(data) % 2:
            msg = f"C40 data must have an even length, got {len(data)}"
            raise InvalidLengthError(msg)

        result: list[str] = []
        for idx in range(0, len(data), 2):
            i1, i2 = data[idx], data[idx + 1]
            if i1 == C40_SHIFT_ESCAPE:
                if i2 == 0:
                    msg = "Invalid C40 escaped character"
                    raise InvalidCharacterError(msg)
                result.append(chr(i2 - 1))
                continue

            v16 = (i1 << 8) + i2 - 1
            if v16 < 0:
                msg = "Invalid C40 value: -1"
                raise InvalidCharacterError(msg)
            u1, remainder = divmod(v16, 1600)
            u2, u3 = divmod(remainder, 40)
            result.extend(cls.get_char(u) for u in (u1, u2, u3))

        return "".join(result)


class DateEncoder:
    """Packing of dates as decimal integers (MMDDYYYY)."""

    @staticmethod
    def encode(value: date) -> bytes:
        """Encode a date into 3 bytes."""
        packed = int(f"{value.month:02d}{value.day:02d}{value.year:04d}")
        return packed.to_bytes(DATE_LENGTH, "big")

    @staticmethod
    def decode(data: bytes) -> date:
        """Decode 3 bytes into a date."""
        _check_length(data, DATE_LENGTH, "date")
        packed = int.from_bytes(data, "big")
        month = packed // 1000000
        day = (packed % 1000000) // 10000
        year = packed % 10000
        try:
            return date(year, month, day)
        except ValueError as e:
            msg = f"Invalid packed date: {packed:08d}"
            raise InvalidFormatError(msg) from e

    @staticmethod
    def encode_datetime(value: datetime) -> bytes:
        """Encode a date and time (second precision) into 6 bytes."""
        packed = int(
            f"{value.month:02d}{value.day:02d}{value.year:04d}"
            f"{value.hour:02d}{value.minute:02d}{value.second:02d}"
        )
        return packed.to_bytes(DATETIME_LENGTH, "big")

    @staticmethod
    def decode_datetime(data: bytes) -> datetime:
        """Decode 6 bytes into a date and time."""
        _check_length(data, DATETIME_LENGTH, "date-time")
        digits = f"{int.from_bytes(data, 'big'):014d}"
        try:
            return datetime(
                int(digits[4:8]),
                int(digits[0:2]),
                int(digits[2:4]),
                int(digits[8:10]),
                int(digits[10:12]),
                int(digits[12:14]),
            )
        except ValueError as e:
            msg = f"Invalid packed date-time: {digits}"
            raise InvalidFormatError(msg) from e

    @staticmethod
    def encode_masked_date(value: str) -> bytes:
        """
        Encode a ``yyyy-MM-dd`` date with ``x`` for unknown digits into 4 bytes.

        The first byte is a mask with bit ``7 - i`` set when digit ``i`` of the
        reordered ``MMDDYYYY`` string is unknown; the remaining 3 bytes hold the
        packed date with unknown digits taken as 0.
        """
        text = value.lower()
        if not MASKED_DATE_PATTERN.match(text):
            msg = f"Masked date must look like yyyy-MM-dd with optional 'x' digits, got {value!r}"
            raise InvalidFormatError(msg)

        month = int(text[5:7].replace(MASK_CHAR, "0"))
        day = int(text[8:10].replace(MASK_CHAR, "0"))
        if month > 12 or day > 31:
            msg = f"Masked date has month or day out of range: {value!r}"
            raise InvalidFormatError(msg)

        reordered = text[5:7] + text[8:10] + text[0:4]
        mask = 0
        for i, char in enumerate(reordered):
            if char == MASK_CHAR:
                mask |= 1 << (7 - i)

        packed = int(reordered.replace(MASK_CHAR, "0"))
        return bytes([mask]) + packed.to_bytes(DATE_LENGTH, "big")

    @staticmethod
    def decode_masked_date(data: bytes) -> str:
        """Decode 4 bytes into a ``yyyy-MM-dd`` string with ``x`` for unknown digits."""
        _check_length(data, MASKED_DATE_LENGTH, "masked date")
        mask = data[0]
        packed = int.from_bytes(data[1:], "big")
        digits = list(f"{packed:08d}")
        for i in range(8):
            if mask & (1 << (7 - i)):
                digits[i] = MASK_CHAR
        text = "".join(digits)
        return f"{text[4:8]}-{text[0:2]}-{text[2:4]}"


def _check_length(data: bytes, expected: int, what: str) -> None:
    if len(data) != expected:
        msg = f"Encoded {what} must be {expected} bytes, got {len(data)}"
        raise InvalidLengthError(msg)
