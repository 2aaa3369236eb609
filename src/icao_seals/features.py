"""
Schema-driven mapping between seal messages and named feature values.

A schema lists the features of one document type (identified by its
``documentRef`` and ICAO version). Each feature names a message tag and the
coding of its value.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .encoders import C40Encoder, DateEncoder
from .tlv import DerTLV
from .types import (
    FeatureCoding,
    InvalidFormatError,
    NegativeIntegerError,
    RequiredFeatureMissingError,
    SchemaMismatchError,
)
from .vds import Seal, VDSHeader

logger = logging.getLogger(__name__)

MRZ_FILLER = "<"


class Feature(BaseModel):
    """A named, typed message of a seal."""

    model_config = ConfigDict(frozen=True)

    tag: int = Field(..., ge=0, le=0xFF, description="Message tag")
    name: str = Field(..., min_length=1, description="Feature name")
    coding: FeatureCoding = Field(..., description="Value coding")
    required: bool = Field(default=False, description="Feature must be present")


class SealSchema(BaseModel):
    """Ordered feature list for one document type and version."""

    model_config = ConfigDict(frozen=True)

    name: str | None = Field(default=None, description="Document type name")
    document_ref: int = Field(..., ge=0, le=0xFFFF, description="docFeatureRef << 8 | docTypeCat")
    version: int = Field(..., description="ICAO seal version (3 or 4)")
    features: tuple[Feature, ...] = Field(default=(), description="Features in schema order")

    def feature(self, name: str) -> Feature | None:
        """Look up a feature by name."""
        for feature in self.features:
            if feature.name == name:
                return feature
        return None


def decode_feature_value(coding: FeatureCoding, value: bytes) -> Any:
    """Decode a message value according to its coding."""
    if coding == FeatureCoding.C40_STRING:
        return C40Encoder.decode(value)
    if coding == FeatureCoding.MRZ:
        return C40Encoder.decode(value).replace(" ", MRZ_FILLER)
    if coding == FeatureCoding.UTF8_STRING:
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as e:
            msg = f"Invalid UTF-8 feature value: {value.hex()}"
            raise InvalidFormatError(msg) from e
    if coding == FeatureCoding.BINARY:
        return bytes(value)
    if coding == FeatureCoding.INT:
        return int.from_bytes(value, "big")
    if coding == FeatureCoding.DATE:
        return DateEncoder.decode(value)
    if coding == FeatureCoding.MASKED_DATE:
        return DateEncoder.decode_masked_date(value)
    msg = f"Unsupported feature coding: {coding}"
    raise ValueError(msg)


def encode_feature_value(coding: FeatureCoding, value: Any) -> bytes:
    """Encode a named value according to its coding."""
    if coding in (FeatureCoding.C40_STRING, FeatureCoding.MRZ):
        return C40Encoder.encode(value)
    if coding == FeatureCoding.UTF8_STRING:
        return value.encode("utf-8")
    if coding == FeatureCoding.BINARY:
        return bytes(value)
    if coding == FeatureCoding.INT:
        if value < 0:
            msg = f"Integer feature value must be non-negative, got {value}"
            raise NegativeIntegerError(msg)
        if value == 0:
            return b"\x00"
        return value.to_bytes((value.bit_length() + 7) // 8, "big")
    if coding == FeatureCoding.DATE:
        if not isinstance(value, date):
            msg = f"Date feature value must be a date, got {type(value).__name__}"
            raise TypeError(msg)
        return DateEncoder.encode(value)
    if coding == FeatureCoding.MASKED_DATE:
        return DateEncoder.encode_masked_date(value)
    msg = f"Unsupported feature coding: {coding}"
    raise ValueError(msg)


def check_schema(header: VDSHeader, schema: SealSchema) -> None:
    """Ensure the header belongs to the document type described by the schema."""
    if header.version != schema.version:
        msg = f"Seal version mismatch: seal {header.version}, schema {schema.version}"
        raise SchemaMismatchError(msg)
    if header.document_ref != schema.document_ref:
        msg = (
            f"Seal documentRef mismatch: seal 0x{header.document_ref:04X}, "
            f"schema 0x{schema.document_ref:04X}"
        )
        raise SchemaMismatchError(msg)


def map_seal_to_features(seal: Seal, schema: SealSchema) -> dict[str, Any]:
    """
    Map the messages of a seal to named values.

    For each feature the first message with a matching tag is used, wherever
    it sits in the message list. Missing optional features are omitted.

    Raises:
        SchemaMismatchError: If version or documentRef differ from the schema
        RequiredFeatureMissingError: If a required feature has no message
    """
    check_schema(seal.header, schema)

    result: dict[str, Any] = {}
    for feature in schema.features:
        message = next((m for m in seal.message_list if m.tag == feature.tag), None)
        if message is None:
            if feature.required:
                msg = (
                    f'Feature "{feature.name}" ({feature.tag}) required in schema, '
                    "but missing in seal"
                )
                raise RequiredFeatureMissingError(msg)
            continue
        result[feature.name] = decode_feature_value(feature.coding, message.value)

    return result


def map_features_to_messages(
    fields: Mapping[str, Any], schema: SealSchema
) -> list[DerTLV]:
    """
    Encode named values into messages, in schema order.

    Raises:
        RequiredFeatureMissingError: If a required feature has no value
        NegativeIntegerError: If an integer value is negative
    """
    messages: list[DerTLV] = []
    for feature in schema.features:
        value = fields.get(feature.name)
        if value is None:
            if feature.required:
                msg = f'Feature "{feature.name}" ({feature.tag}) required in schema, but missing'
                raise RequiredFeatureMissingError(msg)
            continue
        messages.append(DerTLV(feature.tag, encode_feature_value(feature.coding, value)))

    unknown = set(fields) - {f.name for f in schema.features}
    if unknown:
        logger.debug("Ignoring values without a feature in schema: %s", sorted(unknown))
    return messages


def create_seal(header: VDSHeader, fields: Mapping[str, Any], schema: SealSchema) -> Seal:
    """Build an unsigned seal from named values."""
    check_schema(header, schema)
    return Seal(header, map_features_to_messages(fields, schema))
