"""
Visible Digital Seals and ICAO Datastructure for Barcode.

This package implements the binary wire formats of ICAO Doc 9303 Part 13
Visible Digital Seals (VDS) and of the ICAO Datastructure for Barcode (IDB).

Key Features:
- DER-TLV codec and C40 / packed date sub-encodings
- VDS header versions 3 and 4, message lists and raw ECDSA signatures
- IDB headers, payloads and RDB1 barcode text with optional compression
- Schema-driven mapping between messages and named feature values
- ECDSA signing and verification with field-size driven digest selection
"""

from .catalog import SchemaCatalog
from .config import SealSettings, get_settings, load_settings
from .crypto import Signer, Verifier, select_hash_algorithm
from .encoders import C40Encoder, DateEncoder
from .features import (
    Feature,
    SealSchema,
    create_seal,
    map_features_to_messages,
    map_seal_to_features,
)
from .idb import ICAOBarcode, IDBHeader, IDBPayload
from .logging_config import setup_logging
from .signature import IDB_SIGNATURE_TAG, VDS_SIGNATURE_TAG, ECDSASignature
from .tlv import DerTLV, parse_tlvs
from .types import (
    ConfigurationError,
    DecodeError,
    EmptySignatureError,
    EncodingError,
    FeatureCoding,
    IDBSignatureAlgorithm,
    InvalidCharacterError,
    InvalidFormatError,
    InvalidLengthError,
    MalformedLengthError,
    MissingMessageGroupError,
    NegativeIntegerError,
    OddLengthError,
    OutOfRangeError,
    RequiredFeatureMissingError,
    SchemaMismatchError,
    SchemaNotFoundError,
    SealError,
    SignatureError,
    TruncatedInputError,
    UnknownTagError,
    UnrecognizedIdentifierError,
    UnsupportedAlgorithmError,
    UnsupportedFieldSizeError,
    UnsupportedVersionError,
)
from .vds import Seal, VDSHeader

__version__ = "0.1.0"

__all__ = [
    "C40Encoder",
    "ConfigurationError",
    "DateEncoder",
    "DecodeError",
    "DerTLV",
    "ECDSASignature",
    "EmptySignatureError",
    "EncodingError",
    "Feature",
    "FeatureCoding",
    "ICAOBarcode",
    "IDBHeader",
    "IDBPayload",
    "IDBSignatureAlgorithm",
    "IDB_SIGNATURE_TAG",
    "InvalidCharacterError",
    "InvalidFormatError",
    "InvalidLengthError",
    "MalformedLengthError",
    "MissingMessageGroupError",
    "NegativeIntegerError",
    "OddLengthError",
    "OutOfRangeError",
    "RequiredFeatureMissingError",
    "SchemaCatalog",
    "SchemaMismatchError",
    "SchemaNotFoundError",
    "Seal",
    "SealError",
    "SealSchema",
    "SealSettings",
    "SignatureError",
    "Signer",
    "TruncatedInputError",
    "UnknownTagError",
    "UnrecognizedIdentifierError",
    "UnsupportedAlgorithmError",
    "UnsupportedFieldSizeError",
    "UnsupportedVersionError",
    "VDSHeader",
    "VDS_SIGNATURE_TAG",
    "Verifier",
    "create_seal",
    "get_settings",
    "load_settings",
    "map_features_to_messages",
    "map_seal_to_features",
    "parse_tlvs",
    "select_hash_algorithm",
    "setup_logging",
]
