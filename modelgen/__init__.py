# File: modelgen/__init__.py
"""
modelgen — Model & Migration Scaffolder
========================================

Turns a terse command-line description of a record,

    modelgen model post title:text body:nulls.String

into two artifacts that always agree with each other: a tagged struct
declaration (``models/post.go``) and a fizz migration pair that creates
and drops the matching ``posts`` table.

Architecture overview::

    ┌──────────────┐     ┌────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ ModelGenerator │────▶│ TemplateGenerator│
    │   (cli.py)   │     │ (generator.py) │     │  (templates.py)  │
    └──────────────┘     └───────┬────────┘     └──────────────────┘
                                 │
                    ┌────────────┼────────────┐
                    ▼            ▼            ▼
             ┌──────────┐ ┌───────────┐ ┌───────────┐
             │validators│ │  builder  │ │ exporters │
             │  (.py)   │ │  typemap  │ │  (.py)    │
             └──────────┘ └───────────┘ └───────────┘

Usage::

    # As a library
    from modelgen import assemble_model, TemplateGenerator, GenerationConfig
    spec = assemble_model("post", ["title:text"])
    print(TemplateGenerator(GenerationConfig()).render_source(spec))

    # From the command line
    python -m modelgen model post title:text --skip-migration
"""

from __future__ import annotations

__version__: str = "0.1.0"
__license__: str = "MIT"

from modelgen.models import (
    NULLS_IMPORT,
    RESERVED_ATTRIBUTES,
    RESERVED_NAMES,
    TIME_IMPORT,
    AttributeSpec,
    GenerationConfig,
    ModelSpec,
    NameSet,
    TypeKind,
    TypeToken,
)
from modelgen.utils import transform_name
from modelgen.typemap import (
    is_nullable,
    parse_type,
    resolve_schema_type,
    resolve_source_type,
)
from modelgen.builder import (
    assemble_model,
    build_attribute,
    build_reserved_attributes,
    split_attribute_token,
)
from modelgen.validators import ValidationIssue, ValidationResult, validate_full
from modelgen.templates import TemplateGenerator
from modelgen.exceptions import (
    ExportError,
    FormatterError,
    MigrationWriteError,
    ModelGenError,
    ModelValidationError,
)
from modelgen.exporters import MigrationWriter, ModelExporter, SourceFormatter
from modelgen.generator import GenerationReport, ModelGenerator

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    "__version__",
    "__license__",
    # Models
    "NULLS_IMPORT",
    "RESERVED_ATTRIBUTES",
    "RESERVED_NAMES",
    "TIME_IMPORT",
    "AttributeSpec",
    "GenerationConfig",
    "ModelSpec",
    "NameSet",
    "TypeKind",
    "TypeToken",
    # Naming & types
    "transform_name",
    "is_nullable",
    "parse_type",
    "resolve_schema_type",
    "resolve_source_type",
    # Assembly
    "assemble_model",
    "build_attribute",
    "build_reserved_attributes",
    "split_attribute_token",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    "validate_full",
    # Rendering & export
    "TemplateGenerator",
    "MigrationWriter",
    "ModelExporter",
    "SourceFormatter",
    # Orchestration
    "ModelGenerator",
    "GenerationReport",
    # Errors
    "ModelGenError",
    "ModelValidationError",
    "FormatterError",
    "ExportError",
    "MigrationWriteError",
]
