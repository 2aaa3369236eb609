"""
ICAO Datastructure for Barcode (IDB).

Payload layout::

    header (2 or 12 bytes) | TLV(0x61, messages) | [TLV(0x7E, certificate ref)]
                           | [TLV(0x7F, r || s)]

Barcode text::

    "RDB1" | flag | base32-no-padding(deflate?(payload))

The flag character is ``'A'`` plus 1 when signed plus 2 when zipped.
"""

from __future__ import annotations

import base64
import binascii
import logging
import zlib
from dataclasses import dataclass, field

from .config import get_settings
from .encoders import C40Encoder, DateEncoder
from .signature import IDB_SIGNATURE_TAG, ECDSASignature
from .tlv import DerTLV, parse_tlvs
from .types import (
    IDBSignatureAlgorithm,
    InvalidFormatError,
    InvalidLengthError,
    MissingMessageGroupError,
    TruncatedInputError,
    UnknownTagError,
    UnrecognizedIdentifierError,
)

logger = logging.getLogger(__name__)

UNSIGNED_HEADER_LENGTH = 2
SIGNED_HEADER_LENGTH = 12
CERTIFICATE_REFERENCE_LENGTH = 5

MESSAGE_GROUP_TAG = 0x61
SIGNER_CERTIFICATE_TAG = 0x7E

BARCODE_IDENTIFIER = "RDB1"
BARCODE_IDENTIFIER_OLD = "NDB1"
BARCODE_FLAGS = "ABCD"
FLAG_SIGNED = 1
FLAG_ZIPPED = 2


@dataclass
class IDBHeader:
    """Barcode header (ICAO Datastructure for Barcode section 3.2)."""

    country_identifier: str
    signature_algorithm: IDBSignatureAlgorithm | int | None = None
    certificate_reference: bytes | None = None
    signature_creation_date: str | None = None

    def __post_init__(self) -> None:
        signed_fields = (
            self.signature_algorithm,
            self.certificate_reference,
            self.signature_creation_date,
        )
        present = [f is not None for f in signed_fields]
        if any(present) and not all(present):
            msg = (
                "Signed header needs signature algorithm, certificate reference "
                "and signature creation date together"
            )
            raise InvalidLengthError(msg)
        if (
            self.certificate_reference is not None
            and len(self.certificate_reference) != CERTIFICATE_REFERENCE_LENGTH
        ):
            msg = (
                f"Certificate reference must be {CERTIFICATE_REFERENCE_LENGTH} bytes, "
                f"got {len(self.certificate_reference)}"
            )
            raise InvalidLengthError(msg)

    @property
    def is_signed(self) -> bool:
        return self.signature_algorithm is not None

    @property
    def encoded(self) -> bytes:
        """Encoded IDB header (2 bytes unsigned, 12 bytes signed)."""
        country = C40Encoder.encode(self.country_identifier)
        if len(country) != UNSIGNED_HEADER_LENGTH:
            msg = f"Country identifier {self.country_identifier!r} must encode to 2 bytes"
            raise InvalidLengthError(msg)
        if not self.is_signed:
            return country
        return (
            country
            + bytes([int(self.signature_algorithm)])
            + bytes(self.certificate_reference)
            + DateEncoder.encode_masked_date(self.signature_creation_date)
        )

    @classmethod
    def decode(cls, data: bytes) -> IDBHeader:
        """Decode an IDB header of exactly 2 or 12 bytes."""
        if len(data) not in (UNSIGNED_HEADER_LENGTH, SIGNED_HEADER_LENGTH):
            msg = f"Header must be 2 or 12 bytes long, got {len(data)}"
            raise InvalidLengthError(msg)

        country_identifier = C40Encoder.decode(data[0:2]).replace(" ", "<")
        if len(data) == UNSIGNED_HEADER_LENGTH:
            return cls(country_identifier)

        algorithm_id = data[2]
        try:
            signature_algorithm: IDBSignatureAlgorithm | int = IDBSignatureAlgorithm(algorithm_id)
        except ValueError:
            logger.debug("Unknown IDB signature algorithm %d kept as raw value", algorithm_id)
            signature_algorithm = algorithm_id

        return cls(
            country_identifier,
            signature_algorithm,
            bytes(data[3:8]),
            DateEncoder.decode_masked_date(data[8:12]),
        )


@dataclass
class IDBPayload:
    """Barcode payload (ICAO Datastructure for Barcode section 3)."""

    header: IDBHeader
    message_list: list[DerTLV] = field(default_factory=list)
    signer_certificate: bytes | None = None
    signature: ECDSASignature | None = None

    @property
    def message_list_encoded(self) -> bytes:
        """Messages wrapped in the message group TLV."""
        return DerTLV(
            MESSAGE_GROUP_TAG, b"".join(m.encoded for m in self.message_list)
        ).encoded

    @property
    def certificate_encoded(self) -> bytes | None:
        """Signer certificate reference TLV, if present."""
        if self.signer_certificate is None:
            return None
        return DerTLV(SIGNER_CERTIFICATE_TAG, self.signer_certificate).encoded

    @property
    def encoded(self) -> bytes:
        """Encoded IDB payload."""
        encoded = self.header.encoded + self.message_list_encoded
        certificate = self.certificate_encoded
        if certificate is not None:
            encoded += certificate
        if self.signature is not None:
            encoded += self.signature.encoded
        elif self.header.signature_algorithm is not None:
            logger.warning("Signature algorithm specified, but signature missing")
        return encoded

    @classmethod
    def decode(cls, data: bytes, is_signed: bool) -> IDBPayload:
        """
        Decode an IDB payload.

        Args:
            data: Payload bytes (already inflated)
            is_signed: Signed flag from the barcode; selects the header size

        Raises:
            UnknownTagError: On a top-level tag other than 0x61, 0x7E or 0x7F
            MissingMessageGroupError: If there is no message group
        """
        header_size = SIGNED_HEADER_LENGTH if is_signed else UNSIGNED_HEADER_LENGTH
        if len(data) < header_size:
            msg = f"Payload shorter than its {header_size} byte header"
            raise TruncatedInputError(msg)
        header = IDBHeader.decode(data[:header_size])

        message_list: list[DerTLV] | None = None
        signer_certificate: bytes | None = None
        signature: ECDSASignature | None = None

        for entry in parse_tlvs(data[header_size:]):
            if entry.tag == MESSAGE_GROUP_TAG:
                message_list = parse_tlvs(entry.value)
            elif entry.tag == SIGNER_CERTIFICATE_TAG:
                signer_certificate = entry.value
            elif entry.tag == IDB_SIGNATURE_TAG:
                signature = ECDSASignature.from_tlv(entry)
            else:
                msg = f"Found unknown tag 0x{entry.tag:02X}"
                raise UnknownTagError(msg)

        if message_list is None:
            msg = "Missing message group"
            raise MissingMessageGroupError(msg)

        return cls(header, message_list, signer_certificate, signature)


@dataclass
class ICAOBarcode:
    """ICAO Datastructure for Barcode (section 2)."""

    is_signed: bool
    is_zipped: bool
    payload: IDBPayload

    def __post_init__(self) -> None:
        if self.is_signed != self.payload.header.is_signed:
            state = "signed" if self.is_signed else "unsigned"
            msg = f"Barcode flagged {state} does not match its payload header"
            raise InvalidFormatError(msg)

    @property
    def barcode_flag(self) -> str:
        flag = (FLAG_SIGNED if self.is_signed else 0) | (FLAG_ZIPPED if self.is_zipped else 0)
        return BARCODE_FLAGS[flag]

    @property
    def header(self) -> IDBHeader:
        return self.payload.header

    @property
    def message_list(self) -> list[DerTLV]:
        return self.payload.message_list

    @property
    def signed_bytes(self) -> bytes:
        """Header and message group; certificate and signature are excluded."""
        return self.header.encoded + self.payload.message_list_encoded

    @property
    def signature_bytes(self) -> bytes | None:
        """Signature in ASN.1 DER form, if present."""
        return self.payload.signature.to_der() if self.payload.signature else None

    @property
    def encoded(self) -> str:
        """Barcode text."""
        payload_bytes = self.payload.encoded
        if self.is_zipped:
            payload_bytes = zlib.compress(payload_bytes, get_settings().deflate_level)
        text = base64.b32encode(payload_bytes).decode("ascii").rstrip("=")
        return f"{BARCODE_IDENTIFIER}{self.barcode_flag}{text}"

    @classmethod
    def decode(cls, data: str) -> ICAOBarcode:
        """Decode barcode text."""
        identifiers = [BARCODE_IDENTIFIER]
        if get_settings().accept_legacy_identifier:
            identifiers.append(BARCODE_IDENTIFIER_OLD)
        if data[:4] not in identifiers:
            msg = f"Barcode identifier not found: {data[:4]!r}"
            raise UnrecognizedIdentifierError(msg)

        if len(data) < 5 or data[4] not in BARCODE_FLAGS:
            msg = f"Invalid barcode flag: {data[4:5]!r}"
            raise InvalidFormatError(msg)
        flag = ord(data[4]) - ord("A")
        is_signed = bool(flag & FLAG_SIGNED)
        is_zipped = bool(flag & FLAG_ZIPPED)

        text = data[5:]
        try:
            payload_bytes = base64.b32decode(text + "=" * (-len(text) % 8))
        except (binascii.Error, ValueError) as e:
            msg = "Invalid base32 barcode payload"
            raise InvalidFormatError(msg) from e

        if is_zipped:
            try:
                payload_bytes = zlib.decompress(payload_bytes)
            except zlib.error as e:
                msg = "Invalid compressed barcode payload"
                raise InvalidFormatError(msg) from e

        logger.debug(
            "Decoded barcode flag %s (%d payload bytes)", data[4], len(payload_bytes)
        )
        return cls(is_signed, is_zipped, IDBPayload.decode(payload_bytes, is_signed))
