"""
Core Types and Enumerations for ICAO Doc 9303 Part 13 seals and ICAO IDB barcodes.

This module defines the fundamental types and the exception hierarchy used
throughout the VDS (Visible Digital Seal) and IDB (ICAO Datastructure for
Barcode) implementation.
"""

from __future__ import annotations

from enum import Enum, IntEnum


class FeatureCoding(str, Enum):
    """Value codings of seal features (document-specific message fields)."""
    C40_STRING = "c40"          # String compacted with C40
    BINARY = "bytes"            # Raw bytes
    INT = "int"                 # Big-endian unsigned integer
    DATE = "date"               # 3-byte packed date
    MASKED_DATE = "masked_date" # 4-byte date with unknown digits
    MRZ = "mrz"                 # C40 string, spaces shown as '<' filler
    UTF8_STRING = "utf8"        # UTF-8 string


class IDBSignatureAlgorithm(IntEnum):
    """IDB header signature algorithm identifiers."""
    SHA256_WITH_ECDSA = 1
    SHA384_WITH_ECDSA = 2
    SHA512_WITH_ECDSA = 3


class SealError(Exception):
    """Base exception for seal and barcode related errors."""


class EncodingError(SealError):
    """Exception raised by the C40 and date sub-encoders."""


class DecodeError(SealError):
    """Exception raised for structural violations in seal or barcode bytes."""


class SignatureError(SealError):
    """Exception raised during signature operations."""


class MalformedLengthError(DecodeError):
    """TLV length field uses an unsupported form or exceeds the buffer."""


class TruncatedInputError(DecodeError):
    """Input ended in the middle of a structure."""


class UnsupportedVersionError(DecodeError):
    """VDS header carries a raw version other than 2 or 3."""


class UnknownTagError(DecodeError):
    """Unexpected tag at a position where only specific tags are allowed."""


class MissingMessageGroupError(DecodeError):
    """IDB payload has no message group."""


class UnrecognizedIdentifierError(DecodeError):
    """Magic constant or barcode identifier not recognized."""


class OutOfRangeError(SealError):
    """Header field outside its permitted range."""


class InvalidCharacterError(EncodingError):
    """Character (or C40 value) outside the C40 alphabet."""


class InvalidFormatError(EncodingError):
    """Malformed textual or encoded input."""


class InvalidLengthError(EncodingError):
    """Byte slice or string of unexpected size."""


class OddLengthError(SignatureError):
    """Raw signature value cannot be split into two equal halves."""


class EmptySignatureError(SignatureError):
    """Verification attempted on a seal or barcode without a signature."""


class UnsupportedFieldSizeError(SignatureError):
    """Curve field size has no matching digest."""


class UnsupportedAlgorithmError(SignatureError):
    """Barcode header does not declare a usable signature algorithm."""


class SchemaMismatchError(SealError):
    """Seal version or document reference differs from the schema."""


class RequiredFeatureMissingError(SealError):
    """Required feature absent from the seal or from the supplied values."""


class NegativeIntegerError(SealError):
    """Integer feature value is negative."""


class SchemaNotFoundError(SealError):
    """No schema registered for the requested document."""


class ConfigurationError(SealError):
    """Raised when there's an error loading configuration."""
