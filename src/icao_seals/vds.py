"""
Visible Digital Seal (VDS) structures per ICAO Doc 9303 Part 13.

Byte layout::

    0xDC | raw version | C40(country) | C40(signer id + certificate reference)
         | date(issuing) | date(signature) | feature ref | type category
         | TLV messages... | [TLV(0xFF, r || s)]

Raw version 2 is ICAO version 3, raw version 3 is ICAO version 4.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from .encoders import C40Encoder, DateEncoder
from .signature import VDS_SIGNATURE_TAG, ECDSASignature
from .tlv import DerTLV, parse_tlvs
from .types import (
    InvalidFormatError,
    InvalidLengthError,
    OutOfRangeError,
    TruncatedInputError,
    UnrecognizedIdentifierError,
    UnsupportedVersionError,
)

logger = logging.getLogger(__name__)

VDS_MAGIC = 0xDC
RAW_VERSION_3 = 2  # ICAO version 3
RAW_VERSION_4 = 3  # ICAO version 4
SUPPORTED_RAW_VERSIONS = (RAW_VERSION_3, RAW_VERSION_4)
V3_CERT_REF_LENGTH = 5


@dataclass(kw_only=True)
class VDSHeader:
    """Seal header (ICAO Doc 9303 Part 13 section 2.2)."""

    issuing_country: str = "UTO"
    signer_identifier: str = "UTXX"
    certificate_reference: str = "12345"
    issuing_date: date = field(default_factory=date.today)
    signature_date: date = field(default_factory=date.today)
    doc_feature_ref: int
    doc_type_cat: int
    raw_version: int = RAW_VERSION_4

    def __post_init__(self) -> None:
        self._validate_refs(self.doc_feature_ref, self.doc_type_cat)

    @staticmethod
    def _validate_refs(doc_feature_ref: int, doc_type_cat: int) -> None:
        if not 1 <= doc_feature_ref <= 254:
            msg = f"docFeatureRef MUST be in range between 1 and 254, got {doc_feature_ref}"
            raise OutOfRangeError(msg)
        # Range only; sample seals carry even categories.
        if not 1 <= doc_type_cat <= 253:
            msg = f"docTypeCat MUST be in range between 1 and 253, got {doc_type_cat}"
            raise OutOfRangeError(msg)

    @property
    def document_ref(self) -> int:
        """Document identifier (``docFeatureRef << 8 | docTypeCat``)."""
        return ((self.doc_feature_ref & 0xFF) << 8) | (self.doc_type_cat & 0xFF)

    @document_ref.setter
    def document_ref(self, document_ref: int) -> None:
        feature_ref = (document_ref >> 8) & 0xFF
        type_cat = document_ref & 0xFF
        self._validate_refs(feature_ref, type_cat)
        self.doc_feature_ref = feature_ref
        self.doc_type_cat = type_cat

    @property
    def version(self) -> int:
        """ICAO version of the seal (raw version + 1)."""
        return self.raw_version + 1

    @property
    def signer_cert_ref(self) -> str:
        """Signer identifier followed by the certificate reference without leading zeros."""
        cert_ref = self.certificate_reference.lstrip("0") or "0"
        return (self.signer_identifier + cert_ref).upper()

    def _encoded_signer_and_cert_ref(self) -> str:
        if self.raw_version == RAW_VERSION_3:
            if len(self.certificate_reference) > V3_CERT_REF_LENGTH:
                msg = "For version 3 certificateReference MUST be at most five characters"
                raise InvalidLengthError(msg)
            padded = self.certificate_reference.rjust(V3_CERT_REF_LENGTH)
            return f"{self.signer_identifier}{padded}".upper().replace(" ", "0")
        if self.raw_version == RAW_VERSION_4:
            if len(self.certificate_reference) > 0xFF:
                msg = "certificateReference MUST be at most 255 characters"
                raise InvalidLengthError(msg)
            cert_ref = self.certificate_reference
            return f"{self.signer_identifier}{len(cert_ref):02x}{cert_ref}".upper()
        msg = f"Unsupported raw version: {self.raw_version}"
        raise UnsupportedVersionError(msg)

    @property
    def encoded(self) -> bytes:
        """Encoded VDS header."""
        signer_and_cert_ref = self._encoded_signer_and_cert_ref()
        return b"".join(
            (
                bytes([VDS_MAGIC, self.raw_version]),
                C40Encoder.encode(self.issuing_country),
                C40Encoder.encode(signer_and_cert_ref),
                DateEncoder.encode(self.issuing_date),
                DateEncoder.encode(self.signature_date),
                bytes([self.doc_feature_ref, self.doc_type_cat]),
            )
        )

    @classmethod
    def decode(cls, data: bytes) -> VDSHeader:
        """Decode a VDS header from the start of ``data``."""
        header, _ = cls.decode_with_offset(data)
        return header

    @classmethod
    def decode_with_offset(cls, data: bytes) -> tuple[VDSHeader, int]:
        """Decode a VDS header and return it with the number of bytes consumed."""
        reader = _Reader(data)

        if reader.byte() != VDS_MAGIC:
            msg = "Magic Constant mismatch"
            raise UnrecognizedIdentifierError(msg)

        raw_version = reader.byte()
        if raw_version not in SUPPORTED_RAW_VERSIONS:
            msg = f"Unsupported raw version: {raw_version}"
            raise UnsupportedVersionError(msg)

        issuing_country = C40Encoder.decode(reader.take(2))

        if raw_version == RAW_VERSION_4:
            signer_and_length = C40Encoder.decode(reader.take(4))
            signer_identifier = signer_and_length[:4]
            try:
                cert_ref_length = int(signer_and_length[4:], 16)
            except ValueError as e:
                msg = f"Invalid certificate reference length: {signer_and_length[4:]!r}"
                raise InvalidFormatError(msg) from e
            byte_count = ((cert_ref_length - 1) // 3) * 2 + 2
            certificate_reference = C40Encoder.decode(reader.take(byte_count))
        else:
            signer_cert_ref = C40Encoder.decode(reader.take(6))
            signer_identifier = signer_cert_ref[:4]
            certificate_reference = signer_cert_ref[4:]

        issuing_date = DateEncoder.decode(reader.take(3))
        signature_date = DateEncoder.decode(reader.take(3))
        doc_feature_ref = reader.byte()
        doc_type_cat = reader.byte()

        header = cls(
            issuing_country=issuing_country,
            signer_identifier=signer_identifier,
            certificate_reference=certificate_reference,
            issuing_date=issuing_date,
            signature_date=signature_date,
            doc_feature_ref=doc_feature_ref,
            doc_type_cat=doc_type_cat,
            raw_version=raw_version,
        )
        logger.debug(
            "Decoded VDS header v%d %s/%s document 0x%04X",
            header.version,
            issuing_country,
            header.signer_cert_ref,
            header.document_ref,
        )
        return header, reader.offset


@dataclass
class Seal:
    """Visible digital seal (ICAO Doc 9303 Part 13 section 2)."""

    header: VDSHeader
    message_list: list[DerTLV] = field(default_factory=list)
    signature: ECDSASignature | None = None

    @property
    def signed_bytes(self) -> bytes:
        """Header and messages, the input of the seal signature."""
        return self.header.encoded + b"".join(m.encoded for m in self.message_list)

    @property
    def signature_bytes(self) -> bytes | None:
        """Signature in ASN.1 DER form, if present."""
        return self.signature.to_der() if self.signature else None

    @property
    def encoded(self) -> bytes:
        """Encoded visible digital seal."""
        encoded = self.signed_bytes
        if self.signature:
            encoded += self.signature.encoded
        return encoded

    @classmethod
    def decode(cls, data: bytes) -> Seal:
        """Decode a visible digital seal from bytes."""
        header, offset = VDSHeader.decode_with_offset(data)
        message_list: list[DerTLV] = []
        signature = None

        for entry in parse_tlvs(data[offset:]):
            if entry.tag == VDS_SIGNATURE_TAG:
                signature = ECDSASignature.from_tlv(entry)
            else:
                message_list.append(entry)

        logger.debug(
            "Decoded seal with %d messages (%s)",
            len(message_list),
            "signed" if signature else "unsigned",
        )
        return cls(header, message_list, signature)


class _Reader:
    """Sequential reader over header bytes."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.offset = 0

    def take(self, count: int) -> bytes:
        end = self.offset + count
        if end > len(self.data):
            msg = f"Header truncated: need {count} bytes at offset {self.offset}"
            raise TruncatedInputError(msg)
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def byte(self) -> int:
        return self.take(1)[0]
