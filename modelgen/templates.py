# File: modelgen/templates.py
"""
modelgen - Source & Migration Templates
========================================
Renders one ``ModelSpec`` into the two coupled artifacts:

    1. a struct declaration with ``json``/``db`` tagged fields plus a plural
       collection alias, and
    2. a fizz migration pair (``create_table`` / ``drop_table``).

Both renderers walk ``spec.attributes`` in the same order so the struct
fields and the table columns always line up.  Reserved attributes are
declared on the struct but skipped in ``create_table``; the migration
runner adds those columns itself.

Thread-safe: no mutable instance state.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from modelgen.models import AttributeSpec, GenerationConfig, ModelSpec

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelgen.templates")

_NULL_OPTION: str = '{"null": true}'
_EMPTY_OPTIONS: str = "{}"


class TemplateGenerator:
    """
    Stateless code-generation engine.

    Each ``render_*`` method returns a complete, self-contained file
    content string for one ``ModelSpec``.
    """

    def __init__(self, config: GenerationConfig) -> None:
        self._config: GenerationConfig = config
        self._indent: str = config.indent
        logger.debug(
            "TemplateGenerator initialised (package=%s, migration=%s).",
            config.package_name,
            config.migration_type,
        )

    # ===================================================================
    # 1. Source declaration
    # ===================================================================

    def render_field(self, attr: AttributeSpec) -> str:
        """One struct field line with matching json and db tags."""
        original: str = attr.names.original
        return (
            f"{self._indent}{attr.names.proper} {attr.resolved_type} "
            f'`json:"{original}" db:"{original}"`'
        )

    def render_imports(self, spec: ModelSpec) -> List[str]:
        """Single-line import for one path, parenthesised block otherwise."""
        if len(spec.imports) == 1:
            return [f'import "{spec.imports[0]}"\n']

        lines: List[str] = ["import ("]
        lines.extend(f'{self._indent}"{path}"' for path in spec.imports)
        lines.append(")\n")
        return lines

    def render_source(self, spec: ModelSpec) -> str:
        """
        Render the record type declaration.

        Layout: package clause, import block, doc comment naming the
        backing table, the struct, then ``type <Plural> []<Proper>``.
        """
        proper: str = spec.names.proper
        lines: List[str] = [f"package {spec.package_name}\n"]
        lines.extend(self.render_imports(spec))

        lines.append(f"// {proper} maps to the database table '{spec.names.table}'")
        lines.append(f"type {proper} struct {{")
        lines.extend(self.render_field(attr) for attr in spec.attributes)
        lines.append("}")
        lines.append(f"\ntype {spec.names.plural} []{proper}")

        return "\n".join(lines)

    def render_test_stub(self, spec: ModelSpec) -> str:
        """Placeholder companion test file."""
        return f"package {spec.package_name}_test"

    # ===================================================================
    # 2. Migration descriptions
    # ===================================================================

    def render_column(self, attr: AttributeSpec) -> str:
        """One ``t.Column`` directive; nullable columns carry the null option."""
        options: str = _NULL_OPTION if attr.nullable else _EMPTY_OPTIONS
        return (
            f'{self._indent}t.Column("{attr.names.original}", '
            f'"{attr.schema_type}", {options})'
        )

    def render_create(self, spec: ModelSpec) -> str:
        """``create_table`` for the model's table, reserved columns skipped."""
        lines: List[str] = [f'create_table("{spec.names.table}", func(t) {{']
        lines.extend(self.render_column(attr) for attr in spec.user_attributes)
        lines.append("})")
        return "\n".join(lines)

    def render_drop(self, spec: ModelSpec) -> str:
        """``drop_table`` for the model's table."""
        return f'drop_table("{spec.names.table}")'

    @staticmethod
    def migration_name(spec: ModelSpec) -> str:
        """Slug the migration files are keyed by."""
        return f"create_{spec.names.table}"

    # ===================================================================
    # 3. Aggregate generation
    # ===================================================================

    def source_path(self, spec: ModelSpec) -> str:
        """Relative path of the model source file."""
        return f"{self._config.models_dir}/{spec.names.file}{self._config.source_extension}"

    def test_stub_path(self, spec: ModelSpec) -> str:
        """Relative path of the companion test file."""
        return (
            f"{self._config.models_dir}/{spec.names.file}_test"
            f"{self._config.source_extension}"
        )

    def generate_all(self, spec: ModelSpec) -> Dict[str, str]:
        """
        Render every model file for one spec.

        Returns a dict of relative_path → file_content.  The migration pair
        is rendered separately because it is persisted by the migration
        writer, not the file exporter.
        """
        result: Dict[str, str] = {
            self.source_path(spec): self.render_source(spec),
            self.test_stub_path(spec): self.render_test_stub(spec),
        }
        logger.debug(
            "Rendered %d files for model '%s'.",
            len(result),
            spec.names.original,
        )
        return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "TemplateGenerator",
]

logger.debug("modelgen.templates loaded.")
