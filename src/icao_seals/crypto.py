"""
ECDSA signing and verification of seals and barcodes.

Seals pick their digest from the curve field size (ICAO Doc 9303 Part 13
section 2.4); barcodes take it from the signature algorithm in their header.
"""

from __future__ import annotations

import logging

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    Prehashed,
    decode_dss_signature,
)

from .idb import ICAOBarcode
from .signature import IDB_SIGNATURE_TAG, VDS_SIGNATURE_TAG, ECDSASignature
from .types import (
    EmptySignatureError,
    IDBSignatureAlgorithm,
    UnsupportedAlgorithmError,
    UnsupportedFieldSizeError,
)
from .vds import Seal

logger = logging.getLogger(__name__)

BARCODE_HASH_ALGORITHMS = {
    IDBSignatureAlgorithm.SHA256_WITH_ECDSA: hashes.SHA256,
    IDBSignatureAlgorithm.SHA384_WITH_ECDSA: hashes.SHA384,
    IDBSignatureAlgorithm.SHA512_WITH_ECDSA: hashes.SHA512,
}


def select_hash_algorithm(field_size: int) -> hashes.HashAlgorithm:
    """
    Select the digest matching a curve field size in bits.

    Raises:
        UnsupportedFieldSizeError: If the field size is above 512 bits or not positive
    """
    if 0 < field_size <= 224:
        return hashes.SHA224()
    if 225 <= field_size <= 256:
        return hashes.SHA256()
    if 257 <= field_size <= 384:
        return hashes.SHA384()
    if 385 <= field_size <= 512:
        return hashes.SHA512()
    msg = f"Bit length of Field is out of defined value: {field_size}"
    raise UnsupportedFieldSizeError(msg)


def barcode_hash_algorithm(barcode: ICAOBarcode) -> hashes.HashAlgorithm:
    """Digest declared by the barcode header."""
    algorithm = barcode.header.signature_algorithm
    try:
        return BARCODE_HASH_ALGORITHMS[IDBSignatureAlgorithm(algorithm)]()
    except (KeyError, ValueError, TypeError):
        msg = f"Barcode header declares no supported signature algorithm: {algorithm!r}"
        raise UnsupportedAlgorithmError(msg) from None


def _digest(data: bytes, algorithm: hashes.HashAlgorithm) -> bytes:
    h = hashes.Hash(algorithm)
    h.update(data)
    return h.finalize()


class Signer:
    """Seal and barcode signer."""

    def __init__(
        self,
        curve: ec.EllipticCurve,
        private_key: bytes,
        prehash: hashes.HashAlgorithm | None = None,
    ) -> None:
        """
        Initialize signer.

        Args:
            curve: Curve instance, e.g. ``ec.BrainpoolP256R1()``
            private_key: Private scalar as big-endian bytes
            prehash: Hash seals with this algorithm instead of the one selected
                from the field size
        """
        self.curve = curve
        self.private_key = private_key
        self.prehash = prehash
        self._key = ec.derive_private_key(int.from_bytes(private_key, "big"), curve)

    @property
    def field_size(self) -> int:
        """Curve field size in bits, derived from the private key length."""
        return len(self.private_key) * 8

    @property
    def public_key(self) -> bytes:
        """Public key as an uncompressed point."""
        return self._key.public_key().public_bytes(
            serialization.Encoding.X962, serialization.PublicFormat.UncompressedPoint
        )

    def _sign(
        self, data: bytes, algorithm: hashes.HashAlgorithm, tag: int, *, prehashed: bool = True
    ) -> ECDSASignature:
        if prehashed:
            der = self._key.sign(_digest(data, algorithm), ec.ECDSA(Prehashed(algorithm)))
        else:
            der = self._key.sign(data, ec.ECDSA(algorithm))
        width = (self.curve.key_size + 7) // 8
        r, s = decode_dss_signature(der)
        return ECDSASignature(tag, r.to_bytes(width, "big"), s.to_bytes(width, "big"))

    def sign_seal(self, seal: Seal) -> ECDSASignature:
        """Sign ``seal.signed_bytes``; the caller attaches the returned signature."""
        if self.prehash is not None:
            return self._sign(seal.signed_bytes, self.prehash, VDS_SIGNATURE_TAG, prehashed=False)
        algorithm = select_hash_algorithm(self.field_size)
        logger.debug("Signing seal with %s (field size %d)", algorithm.name, self.field_size)
        return self._sign(seal.signed_bytes, algorithm, VDS_SIGNATURE_TAG)

    def sign_barcode(self, barcode: ICAOBarcode) -> ECDSASignature:
        """Sign ``barcode.signed_bytes`` with the digest declared in its header."""
        algorithm = barcode_hash_algorithm(barcode)
        logger.debug("Signing barcode with %s", algorithm.name)
        return self._sign(barcode.signed_bytes, algorithm, IDB_SIGNATURE_TAG)


class Verifier:
    """Seal and barcode verifier."""

    def __init__(
        self,
        curve: ec.EllipticCurve,
        public_key: bytes,
        prehash: hashes.HashAlgorithm | None = None,
    ) -> None:
        """
        Initialize verifier.

        Args:
            curve: Curve instance, e.g. ``ec.BrainpoolP256R1()``
            public_key: Public key as an uncompressed point (``04 || X || Y``)
            prehash: Hash seals with this algorithm instead of the one selected
                from the field size
        """
        self.curve = curve
        self.public_key = public_key
        self.prehash = prehash
        self._key = ec.EllipticCurvePublicKey.from_encoded_point(curve, public_key)

    @property
    def field_size(self) -> int:
        """Curve field size in bits, derived from the uncompressed point length."""
        return (len(self.public_key) - 1) * 4

    def _verify(
        self, der: bytes, data: bytes, algorithm: hashes.HashAlgorithm, *, prehashed: bool = True
    ) -> bool:
        try:
            if prehashed:
                self._key.verify(der, _digest(data, algorithm), ec.ECDSA(Prehashed(algorithm)))
            else:
                self._key.verify(der, data, ec.ECDSA(algorithm))
        except InvalidSignature:
            return False
        return True

    def verify_seal(self, seal: Seal) -> bool:
        """
        Verify the seal signature.

        Raises:
            EmptySignatureError: If the seal carries no signature
        """
        der = seal.signature_bytes
        if der is None:
            msg = "Empty signature. Can't verify"
            raise EmptySignatureError(msg)
        if self.prehash is not None:
            return self._verify(der, seal.signed_bytes, self.prehash, prehashed=False)
        algorithm = select_hash_algorithm(self.field_size)
        return self._verify(der, seal.signed_bytes, algorithm)

    def verify_barcode(self, barcode: ICAOBarcode) -> bool:
        """
        Verify the barcode signature.

        Raises:
            EmptySignatureError: If the barcode carries no signature
            UnsupportedAlgorithmError: If the header declares no known algorithm
        """
        der = barcode.signature_bytes
        if der is None:
            msg = "Empty signature. Can't verify"
            raise EmptySignatureError(msg)
        algorithm = barcode_hash_algorithm(barcode)
        return self._verify(der, barcode.signed_bytes, algorithm)
