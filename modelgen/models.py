# File: modelgen/models.py
"""
modelgen - Core Data Models
============================
Pydantic V2 models for the naming variants, parsed type tokens, attributes
and model specifications that flow through the pipeline:

    CLI tokens → AttributeSpec → ModelSpec → rendered source / migration

Every specification model is frozen: it is built once per invocation and
never mutated afterwards.  ``GenerationConfig`` carries the run settings.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import FrozenSet, List, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelgen.models")

# ---------------------------------------------------------------------------
# Shared constants
# ---------------------------------------------------------------------------

NULLABLE_PREFIX: str = "nulls."
DEFAULT_TYPE: str = "string"
TIME_IMPORT: str = "time"
NULLS_IMPORT: str = "github.com/markbates/going/nulls"
DEFAULT_PACKAGE: str = "models"
DEFAULT_MIGRATIONS_PATH: str = "./migrations"

# Bookkeeping columns present on every model, in declaration order.
# The migration runner manages these itself, so they never appear in
# create_table output.
RESERVED_ATTRIBUTES: Tuple[Tuple[str, str], ...] = (
    ("id", "int"),
    ("created_at", "timestamp"),
    ("updated_at", "timestamp"),
)
RESERVED_NAMES: FrozenSet[str] = frozenset(name for name, _ in RESERVED_ATTRIBUTES)

# Acronym overrides for the proper (type-cased) form of a name
PROPER_NAME_OVERRIDES: Tuple[Tuple[str, str], ...] = (("id", "ID"),)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TypeKind(str, Enum):
    """Shape of a raw type token."""

    PLAIN = "plain"
    NULLABLE = "nullable"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_FROZEN_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    frozen=True,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Specification models
# ---------------------------------------------------------------------------


class NameSet(BaseModel):
    """Derived naming variants for one identifier."""

    model_config = _FROZEN_CONFIG

    original: str = Field(..., description="Raw input token, case preserved.")
    table: str = Field(..., description="Snake-cased, pluralised table name.")
    proper: str = Field(..., description="PascalCase singular type name.")
    plural: str = Field(..., description="PascalCase plural collection name.")
    file: str = Field(..., description="Output file stem (equal to original).")

    def with_proper(self, proper: str) -> "NameSet":
        """Return a copy with the proper form replaced."""
        return self.model_copy(update={"proper": proper})

    def __repr__(self) -> str:
        return f"<NameSet {self.original} → {self.proper}/{self.table}>"


class TypeToken(BaseModel):
    """
    A raw type token parsed once into a tagged form.

    ``nulls.Int`` becomes ``kind=NULLABLE, name="Int"``; ``text`` becomes
    ``kind=PLAIN, name="text"``.  ``raw`` always keeps the token as given.
    """

    model_config = _FROZEN_CONFIG

    raw: str
    kind: TypeKind
    name: str

    @computed_field  # type: ignore[misc]
    @property
    def nullable(self) -> bool:
        return self.kind == TypeKind.NULLABLE

    @model_validator(mode="after")
    def _check_nullable_raw(self) -> "TypeToken":
        if self.kind == TypeKind.NULLABLE and self.raw != NULLABLE_PREFIX + self.name:
            raise ValueError(
                f"Nullable token '{self.raw}' does not wrap '{self.name}'."
            )
        return self

    def __repr__(self) -> str:
        return f"<TypeToken {self.kind.value}:{self.name}>"


class AttributeSpec(BaseModel):
    """One field of a generated record."""

    model_config = _FROZEN_CONFIG

    names: NameSet
    raw_type: str = Field(..., description="Type token as given, e.g. 'nulls.Int'.")
    resolved_type: str = Field(..., description="Source-level type after mapping.")
    schema_type: str = Field(..., description="Column type for the migration.")
    nullable: bool = False
    type_token: TypeToken

    @computed_field  # type: ignore[misc]
    @property
    def is_reserved(self) -> bool:
        return self.names.original in RESERVED_NAMES

    @model_validator(mode="after")
    def _nullable_matches_token(self) -> "AttributeSpec":
        if self.nullable != self.type_token.nullable:
            raise ValueError(
                f"Attribute '{self.names.original}' nullable flag disagrees "
                f"with its type token '{self.raw_type}'."
            )
        return self

    def __repr__(self) -> str:
        null_flag: str = " NULL" if self.nullable else ""
        return f"<Attribute {self.names.original} {self.resolved_type}{null_flag}>"


class ModelSpec(BaseModel):
    """One record declaration: package, imports, names and ordered attributes."""

    model_config = _FROZEN_CONFIG

    package_name: str = Field(default=DEFAULT_PACKAGE, min_length=1)
    imports: Tuple[str, ...] = Field(default=(TIME_IMPORT,))
    names: NameSet
    attributes: Tuple[AttributeSpec, ...] = Field(default=())

    @computed_field  # type: ignore[misc]
    @property
    def has_nullable(self) -> bool:
        return any(attr.nullable for attr in self.attributes)

    @property
    def user_attributes(self) -> Tuple[AttributeSpec, ...]:
        """Attributes that become schema columns (reserved ones excluded)."""
        return tuple(attr for attr in self.attributes if not attr.is_reserved)

    @field_validator("imports")
    @classmethod
    def _unique_imports(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        if len(v) != len(set(v)):
            dupes: List[str] = sorted({x for x in v if v.count(x) > 1})
            raise ValueError(f"Duplicate imports detected: {dupes}")
        return v

    @model_validator(mode="after")
    def _reserved_attributes_first(self) -> "ModelSpec":
        leading: Tuple[str, ...] = tuple(
            attr.names.original for attr in self.attributes[: len(RESERVED_ATTRIBUTES)]
        )
        expected: Tuple[str, ...] = tuple(name for name, _ in RESERVED_ATTRIBUTES)
        if leading != expected:
            raise ValueError(
                f"Model '{self.names.original}' must start with {expected}, got {leading}."
            )
        return self

    def __repr__(self) -> str:
        return (
            f"<ModelSpec {self.names.proper} table={self.names.table} "
            f"attributes={len(self.attributes)}>"
        )


# ---------------------------------------------------------------------------
# Generation configuration
# ---------------------------------------------------------------------------


class GenerationConfig(BaseModel):
    """Settings for one ``modelgen model`` invocation."""

    model_config = ConfigDict(
        strict=False,
        populate_by_name=True,
        validate_assignment=True,
        extra="forbid",
    )

    package_name: str = Field(
        default=DEFAULT_PACKAGE,
        min_length=1,
        description="Package declared at the top of generated source files.",
    )
    models_dir: str = Field(
        default="models",
        min_length=1,
        description="Directory (relative to the output root) for model files.",
    )
    migrations_path: str = Field(
        default=DEFAULT_MIGRATIONS_PATH,
        min_length=1,
        description="Directory the migration pair is written to.",
    )
    skip_migration: bool = Field(
        default=False, description="Skip creating the migration pair."
    )
    migration_type: str = Field(
        default="fizz", min_length=1, description="Migration file extension."
    )
    formatter_command: List[str] = Field(
        default_factory=lambda: ["gofmt", "-w"],
        description="Formatter invoked on the source file; empty disables it.",
    )
    source_extension: str = Field(default=".go", description="Source file suffix.")
    echo_source: bool = Field(
        default=True, description="Print the formatted source after writing it."
    )
    atomic_writes: bool = Field(default=True, description="Write via temp file + rename.")
    indent: str = Field(default="\t", description="Indent used inside rendered blocks.")

    @field_validator("source_extension")
    @classmethod
    def _dotted_extension(cls, v: str) -> str:
        if v and not v.startswith("."):
            return f".{v}"
        return v

    @field_validator("package_name")
    @classmethod
    def _package_is_identifier(cls, v: str) -> str:
        if not v.isidentifier():
            raise ValueError(f"Package name '{v}' is not a valid identifier.")
        return v


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "NULLABLE_PREFIX",
    "DEFAULT_TYPE",
    "TIME_IMPORT",
    "NULLS_IMPORT",
    "DEFAULT_PACKAGE",
    "DEFAULT_MIGRATIONS_PATH",
    "RESERVED_ATTRIBUTES",
    "RESERVED_NAMES",
    "PROPER_NAME_OVERRIDES",
    "TypeKind",
    "NameSet",
    "TypeToken",
    "AttributeSpec",
    "ModelSpec",
    "GenerationConfig",
]

logger.debug("modelgen.models loaded.")
