import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

from icao_seals.crypto import Signer, Verifier, select_hash_algorithm
from icao_seals.idb import ICAOBarcode, IDBHeader, IDBPayload
from icao_seals.signature import IDB_SIGNATURE_TAG, VDS_SIGNATURE_TAG
from icao_seals.tlv import DerTLV
from icao_seals.types import (
    EmptySignatureError,
    IDBSignatureAlgorithm,
    UnsupportedAlgorithmError,
    UnsupportedFieldSizeError,
)
from icao_seals.vds import Seal, VDSHeader


@pytest.fixture
def utts5b_verifier(vectors, brainpool_curve):
    return Verifier(brainpool_curve, vectors.UTTS5B_PUBLIC_KEY)


@pytest.fixture
def sample_signer(vectors, brainpool_curve):
    return Signer(brainpool_curve, vectors.TEST_PRIVATE_KEY)


@pytest.fixture
def sample_verifier(sample_signer, brainpool_curve):
    return Verifier(brainpool_curve, sample_signer.public_key)


@pytest.mark.parametrize(
    "field_size, expected",
    [
        (160, hashes.SHA224),
        (224, hashes.SHA224),
        (225, hashes.SHA256),
        (256, hashes.SHA256),
        (384, hashes.SHA384),
        (512, hashes.SHA512),
    ],
)
def test_select_hash_algorithm(field_size, expected):
    assert isinstance(select_hash_algorithm(field_size), expected)


@pytest.mark.parametrize("field_size", [0, 521, 1024])
def test_select_hash_algorithm_unsupported(field_size):
    with pytest.raises(UnsupportedFieldSizeError):
        select_hash_algorithm(field_size)


def test_field_sizes(sample_signer, utts5b_verifier):
    assert sample_signer.field_size == 256
    assert utts5b_verifier.field_size == 256
    assert len(sample_signer.public_key) == 65
    assert sample_signer.public_key[0] == 0x04


@pytest.mark.parametrize("sample", ["RESIDENCE_PERMIT_V4", "ARRIVAL_ATTESTATION_V3"])
def test_verify_sample_seal(vectors, utts5b_verifier, sample):
    seal = Seal.decode(getattr(vectors, sample))
    assert utts5b_verifier.verify_seal(seal)


@pytest.mark.parametrize("sample", ["RESIDENCE_PERMIT_V4", "ARRIVAL_ATTESTATION_V3"])
def test_sign_seal_with_other_key(vectors, utts5b_verifier, sample_signer, sample_verifier, sample):
    seal = Seal.decode(getattr(vectors, sample))

    seal.signature = sample_signer.sign_seal(seal)

    assert seal.signature.tag == VDS_SIGNATURE_TAG
    assert len(seal.signature.r_bytes) == len(seal.signature.s_bytes) == 32
    assert not utts5b_verifier.verify_seal(seal)
    assert sample_verifier.verify_seal(seal)


def test_signed_seal_survives_encoding(sample_signer, sample_verifier):
    seal = Seal(VDSHeader(doc_feature_ref=0xFB, doc_type_cat=0x06), [DerTLV(3, b"\x01")])
    seal.signature = sample_signer.sign_seal(seal)

    decoded = Seal.decode(seal.encoded)
    assert sample_verifier.verify_seal(decoded)

    decoded.message_list[0] = DerTLV(3, b"\x02")
    assert not sample_verifier.verify_seal(decoded)


def test_verify_unsigned_seal(utts5b_verifier):
    seal = Seal(VDSHeader(doc_feature_ref=1, doc_type_cat=1))
    with pytest.raises(EmptySignatureError):
        utts5b_verifier.verify_seal(seal)


def test_prehash_override(sample_signer, brainpool_curve, sample_verifier):
    """An explicit hash replaces the one selected from the field size."""
    seal = Seal(VDSHeader(doc_feature_ref=1, doc_type_cat=1), [DerTLV(1, b"\x00")])
    signer = Signer(brainpool_curve, sample_signer.private_key, prehash=hashes.SHA512())
    verifier = Verifier(brainpool_curve, sample_signer.public_key, prehash=hashes.SHA512())

    seal.signature = signer.sign_seal(seal)
    assert verifier.verify_seal(seal)
    assert not sample_verifier.verify_seal(seal)


def test_p384_seal():
    private_key = ec.generate_private_key(ec.SECP384R1())
    scalar = private_key.private_numbers().private_value.to_bytes(48, "big")
    public_key = private_key.public_key().public_bytes(
        serialization.Encoding.X962, serialization.PublicFormat.UncompressedPoint
    )
    signer = Signer(ec.SECP384R1(), scalar)
    verifier = Verifier(ec.SECP384R1(), public_key)
    assert signer.field_size == verifier.field_size == 384

    seal = Seal(VDSHeader(doc_feature_ref=1, doc_type_cat=1))
    seal.signature = signer.sign_seal(seal)
    assert len(seal.signature.r_bytes) == 48
    assert verifier.verify_seal(seal)


@pytest.mark.parametrize("algorithm", list(IDBSignatureAlgorithm))
def test_sign_barcode(sample_signer, sample_verifier, algorithm):
    header = IDBHeader("D<<", algorithm, bytes([5, 4, 3, 2, 1]), "2024-10-18")
    barcode = ICAOBarcode(True, True, IDBPayload(header, [DerTLV(4, b"\xb0\xb1")]))

    barcode.payload.signature = sample_signer.sign_barcode(barcode)
    assert barcode.payload.signature.tag == IDB_SIGNATURE_TAG

    decoded = ICAOBarcode.decode(barcode.encoded)
    assert sample_verifier.verify_barcode(decoded)


def test_verify_barcode_wrong_key(vectors, sample_verifier):
    barcode = ICAOBarcode.decode(vectors.SIGNED_ZIPPED_BARCODE)
    assert not sample_verifier.verify_barcode(barcode)


def test_verify_unsigned_barcode(vectors, sample_verifier):
    barcode = ICAOBarcode.decode(vectors.UNSIGNED_BARCODE)
    with pytest.raises(EmptySignatureError):
        sample_verifier.verify_barcode(barcode)


def test_sign_barcode_unknown_algorithm(sample_signer):
    header = IDBHeader("D<<", 9, bytes(5), "2024-10-18")
    barcode = ICAOBarcode(True, False, IDBPayload(header, [DerTLV(4, b"\x00")]))
    with pytest.raises(UnsupportedAlgorithmError):
        sample_signer.sign_barcode(barcode)


def test_sign_unsigned_barcode_header(sample_signer):
    barcode = ICAOBarcode(False, False, IDBPayload(IDBHeader("D<<"), [DerTLV(4, b"\x00")]))
    with pytest.raises(UnsupportedAlgorithmError):
        sample_signer.sign_barcode(barcode)
