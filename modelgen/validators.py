# File: modelgen/validators.py
"""
modelgen - Input Validators
============================
A **pure-function validation pipeline** over the raw command-line input of
``modelgen model``: the model name and the ``name:type`` attribute tokens.

The transformation core never fails on well-formed input, so every check
that can reject an invocation lives here and runs before anything is
generated.  Findings are accumulated in a ``ValidationResult``; the
generator turns a result with errors into a ``ModelValidationError``.

Usage by downstream modules:
    from modelgen.validators import validate_full
    result = validate_full(model_name, tokens, config)
    if not result.is_valid:
        ...
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from modelgen.builder import ATTRIBUTE_SEPARATOR, split_attribute_token
from modelgen.models import (
    NULLABLE_PREFIX,
    PROPER_NAME_OVERRIDES,
    RESERVED_ATTRIBUTES,
    RESERVED_NAMES,
    GenerationConfig,
)
from modelgen.utils import is_identifier, to_pascal_case

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelgen.validators")

# Names are pasted into quoted literals, struct tags and file paths
_UNSAFE_NAME_RE: re.Pattern[str] = re.compile(r"[\"`'\s/\\]")
_UNSAFE_TYPE_RE: re.Pattern[str] = re.compile(r"[\"`'\s]")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationIssue:
    """Lightweight issue descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class ValidationResult:
    """Accumulates ``ValidationIssue`` instances produced by the pipeline."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationIssue] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("error", code, message, context))

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("warning", code, message, context))

    def add_info(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("info", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        """Merge another result into this one."""
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationIssue]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [e for e in self._items if e.is_warning]

    @property
    def all_items(self) -> List[ValidationIssue]:
        return list(self._items)

    @property
    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def has_warnings(self) -> bool:
        return any(e.is_warning for e in self._items)

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._items if e.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for e in self._items if e.is_warning)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self, include_info: bool = False) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            if not include_info and item.level == "info":
                continue
            prefix: str = {
                "error": "❌",
                "warning": "⚠️",
                "info": "ℹ️",
            }.get(item.level, "•")
            lines.append(f"  {prefix} [{item.code}] {item.message}")
            for k, v in item.context.items():
                lines.append(f"       {k}: {v}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Individual validation functions
# ---------------------------------------------------------------------------


def _check_proper_name(
    result: ValidationResult,
    name: str,
    code: str,
    what: str,
    ctx: Dict[str, Any],
) -> None:
    unsafe: List[str] = sorted(set(_UNSAFE_NAME_RE.findall(name)))
    if unsafe:
        result.add_error(
            code,
            f"{what} '{name}' contains characters that cannot appear in "
            f"generated source: {unsafe}.",
            ctx,
        )
        return

    proper: str = to_pascal_case(name)
    if not proper or proper[0].isdigit():
        result.add_error(
            code,
            f"{what} '{name}' does not produce a usable type name.",
            ctx,
        )
    elif not is_identifier(name):
        result.add_warning(
            "NON_IDENTIFIER_NAME",
            f"{what} '{name}' is not a plain identifier; it will be "
            f"rendered as '{proper}'.",
            ctx,
        )


def validate_model_name(model_name: Optional[str]) -> ValidationResult:
    """
    Validate the model name:
    - Must be supplied and non-blank
    - Must produce a type name that does not start with a digit
    - Must not contain quotes, whitespace or path separators
    """
    result: ValidationResult = ValidationResult()

    if model_name is None or not model_name.strip():
        result.add_error(
            "MODEL_NAME_MISSING",
            "You must supply a name for your model!",
        )
        return result

    _check_proper_name(
        result, model_name, "INVALID_MODEL_NAME", "Model name", {"model": model_name}
    )
    return result


def validate_attribute_tokens(tokens: Sequence[str]) -> ValidationResult:
    """
    Validate every ``name:type`` token:
    - Non-empty attribute name
    - Not one of the reserved bookkeeping attributes (case-insensitive)
    - No quotes, whitespace or path separators in names, no quotes in types
    - No duplicate attribute names, or names that collapse to the same field
    - Warn on empty types (defaulted to string) and extra separators
    """
    result: ValidationResult = ValidationResult()
    seen_names: Dict[str, str] = {}
    seen_fields: Dict[str, str] = {
        dict(PROPER_NAME_OVERRIDES).get(name, to_pascal_case(name)): name
        for name, _ in RESERVED_ATTRIBUTES
    }

    for position, token in enumerate(tokens, start=1):
        name, raw_type = split_attribute_token(token)
        ctx: Dict[str, Any] = {"token": token, "position": position}

        if not name:
            result.add_error(
                "ATTRIBUTE_NAME_EMPTY",
                f"Attribute token '{token}' has no name.",
                ctx,
            )
            continue

        # Column names collide case-insensitively in most databases
        folded: str = name.lower()

        if folded in RESERVED_NAMES:
            result.add_error(
                "RESERVED_ATTRIBUTE",
                f"Attribute '{name}' is reserved and always generated; "
                f"remove it from the command line.",
                ctx,
            )
            continue

        if folded in seen_names:
            result.add_error(
                "DUPLICATE_ATTRIBUTE",
                f"Attribute '{name}' is defined more than once.",
                ctx,
            )
            continue
        seen_names[folded] = token

        _check_proper_name(
            result, name, "INVALID_ATTRIBUTE_NAME", "Attribute name", ctx
        )

        proper: str = to_pascal_case(name)
        if proper in seen_fields:
            result.add_error(
                "DUPLICATE_FIELD_NAME",
                f"Attributes '{seen_fields[proper]}' and '{name}' both render "
                f"as field '{proper}'.",
                ctx,
            )
        elif proper:
            seen_fields[proper] = name

        if raw_type and _UNSAFE_TYPE_RE.search(raw_type):
            result.add_error(
                "INVALID_ATTRIBUTE_TYPE",
                f"Attribute '{name}' type '{raw_type}' contains quotes or "
                f"whitespace.",
                ctx,
            )
        elif raw_type is not None and not raw_type:
            result.add_warning(
                "EMPTY_TYPE",
                f"Attribute '{name}' has an empty type; defaulting to string.",
                ctx,
            )
        elif raw_type is not None and ATTRIBUTE_SEPARATOR in raw_type:
            result.add_warning(
                "EXTRA_SEPARATOR",
                f"Attribute '{name}' type '{raw_type}' contains "
                f"'{ATTRIBUTE_SEPARATOR}'; it is used verbatim.",
                ctx,
            )
        elif raw_type == NULLABLE_PREFIX:
            result.add_warning(
                "EMPTY_NULLABLE_TYPE",
                f"Attribute '{name}' type '{raw_type}' wraps nothing; "
                f"it is treated as a plain type.",
                ctx,
            )

    logger.debug(
        "validate_attribute_tokens: checked %d tokens, %d issue(s).",
        len(tokens),
        len(result),
    )
    return result


def validate_config(config: GenerationConfig) -> ValidationResult:
    """Configuration sanity checks beyond what Pydantic enforces."""
    result: ValidationResult = ValidationResult()

    if not config.formatter_command:
        result.add_info(
            "FORMATTER_DISABLED",
            "No formatter configured; source files are written unformatted.",
        )

    if config.skip_migration:
        result.add_info(
            "MIGRATION_SKIPPED",
            "Migration creation is disabled for this run.",
        )

    return result


def validate_full(
    model_name: Optional[str],
    tokens: Sequence[str],
    config: GenerationConfig,
) -> ValidationResult:
    """
    **Master validation entry point.**

    This is the single function that ``generator.py`` calls before
    starting code generation.
    """
    logger.info(
        "Starting validation — model=%s, %d attribute token(s).",
        model_name,
        len(tokens),
    )

    result: ValidationResult = ValidationResult()
    result.merge(validate_model_name(model_name))
    result.merge(validate_attribute_tokens(tokens))
    result.merge(validate_config(config))

    if result.has_errors:
        logger.error(
            "Validation FAILED with %d error(s). %s",
            result.error_count,
            result.summary(),
        )
    else:
        logger.info("Validation PASSED. %s", result.summary())

    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationIssue",
    "ValidationResult",
    "validate_model_name",
    "validate_attribute_tokens",
    "validate_config",
    "validate_full",
]

logger.debug("modelgen.validators loaded — %d public symbols.", len(__all__))
