"""
ECDSA signature values in raw (concatenated r || s) form.

VDS seals frame the raw value under tag ``0xFF`` (ICAO Doc 9303 Part 13
section 2.4), IDB barcodes under tag ``0x7F``; one type parameterized by its framing tag
serves both.
"""

from __future__ import annotations

from dataclasses import dataclass

from asn1crypto import algos

from .tlv import DER_SEQUENCE_TAG, DerTLV, get_der_integer
from .types import InvalidFormatError, OddLengthError, UnknownTagError

VDS_SIGNATURE_TAG = 0xFF
IDB_SIGNATURE_TAG = 0x7F


@dataclass(frozen=True)
class ECDSASignature:
    """ECDSA signature with fixed-width big-endian ``r`` and ``s`` components."""

    tag: int
    r_bytes: bytes
    s_bytes: bytes

    @property
    def r(self) -> int:
        return int.from_bytes(self.r_bytes, "big")

    @property
    def s(self) -> int:
        return int.from_bytes(self.s_bytes, "big")

    @property
    def encoded(self) -> bytes:
        """Raw form: ``TLV(tag, r || s)``."""
        return DerTLV(self.tag, self.r_bytes + self.s_bytes).encoded

    def to_der(self) -> bytes:
        """ASN.1 DER form: ``SEQUENCE { INTEGER r, INTEGER s }``."""
        return DerTLV(
            DER_SEQUENCE_TAG,
            get_der_integer(self.r_bytes) + get_der_integer(self.s_bytes),
        ).encoded

    @classmethod
    def decode(cls, tag: int, data: bytes) -> ECDSASignature:
        """
        Decode a raw signature TLV.

        Raises:
            UnknownTagError: If the leading byte is not ``tag``
            OddLengthError: If the value cannot be split in two equal halves
        """
        if not data or data[0] != tag:
            msg = f"Signature tag mismatch, expected 0x{tag:02X}"
            raise UnknownTagError(msg)
        return cls.from_tlv(DerTLV.decode(data))

    @classmethod
    def from_tlv(cls, tlv: DerTLV) -> ECDSASignature:
        """Split an already parsed signature TLV into ``r`` and ``s``."""
        if len(tlv.value) % 2:
            msg = f"Raw signature length {len(tlv.value)} is not even"
            raise OddLengthError(msg)
        half = len(tlv.value) // 2
        return cls(tlv.tag, tlv.value[:half], tlv.value[half:])

    @classmethod
    def from_der(
        cls, tag: int, der: bytes, component_length: int | None = None
    ) -> ECDSASignature:
        """
        Build a raw signature from an ASN.1 DER ``SEQUENCE { r, s }``.

        Args:
            tag: Framing tag of the resulting signature
            der: DER encoded signature
            component_length: Width of ``r`` and ``s`` in bytes; defaults to the
                minimal width holding both integers. DER drops leading zero
                bytes, so pass the curve width to get back the exact raw
                signature that ``to_der`` was called on.

        Returns:
            Raw signature
        """
        try:
            parsed = algos.DSASignature.load(der)
            r = parsed["r"].native
            s = parsed["s"].native
        except (ValueError, TypeError) as e:
            msg = "Invalid DER signature"
            raise InvalidFormatError(msg) from e

        if r < 0 or s < 0:
            msg = "DER signature components must be non-negative"
            raise InvalidFormatError(msg)

        if component_length is None:
            component_length = max(1, (max(r.bit_length(), s.bit_length()) + 7) // 8)
        try:
            return cls(tag, r.to_bytes(component_length, "big"), s.to_bytes(component_length, "big"))
        except OverflowError as e:
            msg = f"Signature component does not fit in {component_length} bytes"
            raise InvalidFormatError(msg) from e
