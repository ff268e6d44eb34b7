# File: modelgen/builder.py
"""
modelgen - Attribute Builder & Model Assembler
===============================================
Turns the raw command-line description of a model into a ``ModelSpec``:

    "post" ["title:text", "body:nulls.String"]
        → id, created_at, updated_at, title, body

The three reserved attributes are always built first, in a fixed order,
from ``RESERVED_ATTRIBUTES``.  User attributes follow in the order given.
This module does not validate user input; see ``modelgen.validators``.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from modelgen.models import (
    DEFAULT_PACKAGE,
    DEFAULT_TYPE,
    NULLS_IMPORT,
    PROPER_NAME_OVERRIDES,
    RESERVED_ATTRIBUTES,
    TIME_IMPORT,
    AttributeSpec,
    ModelSpec,
    NameSet,
    TypeToken,
)
from modelgen.typemap import parse_type, schema_type_for, source_type_for
from modelgen.utils import transform_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelgen.builder")

ATTRIBUTE_SEPARATOR: str = ":"


# ---------------------------------------------------------------------------
# AttributeBuilder
# ---------------------------------------------------------------------------


def _attribute_names(raw_name: str) -> NameSet:
    names: NameSet = transform_name(raw_name)
    for name, proper in PROPER_NAME_OVERRIDES:
        if raw_name == name:
            return names.with_proper(proper)
    return names


def build_attribute(raw_name: str, raw_type: Optional[str] = None) -> AttributeSpec:
    """
    Build one attribute from its name and (optional) type token.

    A missing or empty type defaults to ``string``.  The attribute named
    ``id`` always gets the proper name ``ID``.
    """
    if not raw_type:
        raw_type = DEFAULT_TYPE

    token: TypeToken = parse_type(raw_type)
    return AttributeSpec(
        names=_attribute_names(raw_name),
        raw_type=raw_type,
        resolved_type=source_type_for(token),
        schema_type=schema_type_for(token),
        nullable=token.nullable,
        type_token=token,
    )


def build_reserved_attributes() -> Tuple[AttributeSpec, ...]:
    """Identifier, creation timestamp and update timestamp, in that order."""
    return tuple(build_attribute(name, raw_type) for name, raw_type in RESERVED_ATTRIBUTES)


# ---------------------------------------------------------------------------
# ModelAssembler
# ---------------------------------------------------------------------------


def split_attribute_token(token: str) -> Tuple[str, Optional[str]]:
    """
    Split ``name:type`` into its two parts.

    Only the first separator splits, so ``a:b:c`` yields ``("a", "b:c")``.
    A token without a separator has no type.
    """
    name, sep, raw_type = token.partition(ATTRIBUTE_SEPARATOR)
    if not sep:
        return name, None
    return name, raw_type


def assemble_model(
    model_name: str,
    attribute_tokens: Sequence[str] = (),
    package_name: str = DEFAULT_PACKAGE,
) -> ModelSpec:
    """
    Assemble the full model specification.

    The ``time`` import is always present; the nulls import is appended
    once when at least one attribute is nullable.
    """
    attributes: List[AttributeSpec] = list(build_reserved_attributes())
    imports: List[str] = [TIME_IMPORT]

    for token in attribute_tokens:
        raw_name, raw_type = split_attribute_token(token)
        attribute: AttributeSpec = build_attribute(raw_name, raw_type)
        if attribute.nullable and NULLS_IMPORT not in imports:
            imports.append(NULLS_IMPORT)
        attributes.append(attribute)

    spec: ModelSpec = ModelSpec(
        package_name=package_name,
        imports=tuple(imports),
        names=transform_name(model_name),
        attributes=tuple(attributes),
    )
    logger.debug(
        "Assembled model '%s': %d attributes, imports=%s.",
        model_name,
        len(spec.attributes),
        ", ".join(spec.imports),
    )
    return spec


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ATTRIBUTE_SEPARATOR",
    "build_attribute",
    "build_reserved_attributes",
    "split_attribute_token",
    "assemble_model",
]
