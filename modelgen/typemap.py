# File: modelgen/typemap.py
"""
modelgen - Type Token Mapping
==============================
Resolves a raw command-line type token into the three representations the
renderers need:

    - the source-level type written into the struct field,
    - whether the attribute is nullable,
    - the schema column type written into the migration.

A token is parsed exactly once into a tagged ``TypeToken``
(``PLAIN(name)`` or ``NULLABLE(inner)``); every other function works on that
parsed form instead of re-matching string prefixes.

Recognised vocabulary: ``text``, ``time``, ``timestamp``, ``int`` and the
``nulls.<Inner>`` wrapper family.  Everything else passes through unchanged
as the source type and lower-cased as the schema type.
"""

from __future__ import annotations

import functools
import logging
from types import MappingProxyType
from typing import List, Mapping

from modelgen.models import NULLABLE_PREFIX, TypeKind, TypeToken

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelgen.typemap")

# ---------------------------------------------------------------------------
# Mapping tables (read-only)
# ---------------------------------------------------------------------------

_SOURCE_TYPE_MAP: Mapping[str, str] = MappingProxyType({
    "text": "string",
    "time": "time.Time",
    "timestamp": "time.Time",
})

_SCHEMA_TYPE_MAP: Mapping[str, str] = MappingProxyType({
    "int": "integer",
    "time": "timestamp",
})


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def parse_type(raw: str) -> TypeToken:
    """
    Parse a raw type token into its tagged form.

    Examples:
        >>> parse_type("nulls.Int").kind
        <TypeKind.NULLABLE: 'nullable'>
        >>> parse_type("text").name
        'text'
    """
    if raw.startswith(NULLABLE_PREFIX) and len(raw) > len(NULLABLE_PREFIX):
        return TypeToken(
            raw=raw,
            kind=TypeKind.NULLABLE,
            name=raw[len(NULLABLE_PREFIX):],
        )
    return TypeToken(raw=raw, kind=TypeKind.PLAIN, name=raw)


def is_nullable(raw: str) -> bool:
    """True iff *raw* is ``nulls.`` followed by at least one character."""
    return parse_type(raw).nullable


# ---------------------------------------------------------------------------
# Source types
# ---------------------------------------------------------------------------


def source_type_for(token: TypeToken) -> str:
    """Source-level type for a parsed token (nullable wrappers pass through)."""
    return _SOURCE_TYPE_MAP.get(token.raw.lower(), token.raw)


def resolve_source_type(raw: str) -> str:
    """
    Map a raw token to the type written into the struct field.

    Examples:
        >>> resolve_source_type("text")
        'string'
        >>> resolve_source_type("nulls.String")
        'nulls.String'
    """
    return source_type_for(parse_type(raw))


# ---------------------------------------------------------------------------
# Schema types
# ---------------------------------------------------------------------------


def schema_type_for(token: TypeToken) -> str:
    """
    Schema column type for a parsed token.

    Nullability is carried as a separate column option, so a nullable
    token resolves to the schema type of its inner token.
    """
    while token.nullable:
        token = parse_type(token.name)
    lowered: str = token.name.lower()
    return _SCHEMA_TYPE_MAP.get(lowered, lowered)


def resolve_schema_type(raw: str) -> str:
    """
    Map a raw token to the column type written into the migration.

    Examples:
        >>> resolve_schema_type("int")
        'integer'
        >>> resolve_schema_type("nulls.Int")
        'integer'
        >>> resolve_schema_type("String")
        'string'
    """
    return schema_type_for(parse_type(raw))


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "parse_type",
    "is_nullable",
    "source_type_for",
    "resolve_source_type",
    "schema_type_for",
    "resolve_schema_type",
]

logger.debug("modelgen.typemap loaded.")
