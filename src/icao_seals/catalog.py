"""
Registry of seal schemas loaded from YAML.

The catalog is populated once and only read afterwards. Entries are keyed by
``(document_ref, version)``; the YAML format is::

    schemas:
      - name: ICAO_VISA
        document_ref: 0x5d01
        version: 4
        features:
          - {name: MRZ_MRVA, tag: 1, coding: mrz}
          - {name: NUMBER_OF_ENTRIES, tag: 3, coding: int, required: true}
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from pydantic import ValidationError

from .config import get_settings
from .features import SealSchema
from .types import ConfigurationError, SchemaNotFoundError
from .vds import Seal

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_RESOURCE = "seal_codings.yaml"


class SchemaCatalog:
    """Read-only lookup of seal schemas."""

    def __init__(self, schemas: Iterable[SealSchema]) -> None:
        by_key: dict[tuple[int, int], SealSchema] = {}
        by_name: dict[str, SealSchema] = {}
        for schema in schemas:
            key = (schema.document_ref, schema.version)
            if key in by_key:
                msg = f"Duplicate schema for documentRef 0x{key[0]:04X} version {key[1]}"
                raise ConfigurationError(msg)
            by_key[key] = schema
            if schema.name:
                by_name[schema.name] = schema
        self._by_key = MappingProxyType(by_key)
        self._by_name = MappingProxyType(by_name)

    def __len__(self) -> int:
        return len(self._by_key)

    def __iter__(self) -> Iterator[SealSchema]:
        return iter(self._by_key.values())

    def get(self, document_ref: int, version: int) -> SealSchema:
        """Schema for a document reference and ICAO version."""
        try:
            return self._by_key[(document_ref, version)]
        except KeyError:
            msg = f"No schema for documentRef 0x{document_ref:04X} version {version}"
            raise SchemaNotFoundError(msg) from None

    def by_name(self, name: str) -> SealSchema:
        """Schema registered under ``name``."""
        try:
            return self._by_name[name]
        except KeyError:
            msg = f"No schema named {name!r}"
            raise SchemaNotFoundError(msg) from None

    def for_seal(self, seal: Seal) -> SealSchema:
        """Schema matching the header of a decoded seal."""
        return self.get(seal.header.document_ref, seal.header.version)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> SchemaCatalog:
        """Build a catalog from already parsed YAML data."""
        if not isinstance(data, dict) or not isinstance(data.get("schemas"), list):
            msg = "Schema catalog must contain a 'schemas' list"
            raise ConfigurationError(msg)
        try:
            schemas = [SealSchema(**entry) for entry in data["schemas"]]
        except (TypeError, ValidationError) as e:
            msg = f"Invalid schema catalog entry: {e}"
            raise ConfigurationError(msg) from e
        return cls(schemas)

    @classmethod
    def from_yaml(cls, path: str | Path) -> SchemaCatalog:
        """Load a catalog from a YAML file."""
        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            msg = f"Failed to load schema catalog from {path}: {e}"
            raise ConfigurationError(msg) from e
        catalog = cls.from_mapping(data)
        logger.debug("Loaded %d seal schemas from %s", len(catalog), path)
        return catalog

    @classmethod
    def default(cls) -> SchemaCatalog:
        """Catalog from ``schema_catalog_path`` in settings, or the bundled one."""
        override = get_settings().schema_catalog_path
        if override is not None:
            return cls.from_yaml(override)
        text = resources.files("icao_seals").joinpath(DEFAULT_CATALOG_RESOURCE).read_text(
            encoding="utf-8"
        )
        return cls.from_mapping(yaml.safe_load(text))
