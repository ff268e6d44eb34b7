# File: modelgen/generator.py
"""
modelgen - Generation Pipeline (Orchestrator)
==============================================

Connects every phase of ``modelgen model``:

    CLI tokens → Validation → Assembly → Rendering → Export → Format
               → Migration

Workflow::

    1. Validate the model name and attribute tokens (validators.py).
    2. Assemble the ``ModelSpec`` (builder.py).
    3. Render the source file, test stub and migration pair (templates.py).
    4. Write the model files atomically (exporters.py).
    5. Run the external formatter on the source file (best effort).
    6. Read the formatted source back for echoing.
    7. Write the timestamped migration pair unless skipped.
    8. Return a ``GenerationReport`` with metrics and status.

Error handling strategy:
    - Validation errors abort before anything is rendered.
    - Formatter failures are recorded as warnings; generation continues.
    - Any I/O or migration-write failure aborts the remaining steps.
    - The final report gives a clear pass/fail verdict.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import yaml
from pydantic import ValidationError as PydanticValidationError

from modelgen.builder import assemble_model
from modelgen.exceptions import (
    ExportError,
    FormatterError,
    MigrationWriteError,
    ModelGenError,
    ModelValidationError,
)
from modelgen.exporters import (
    FileRecord,
    MigrationFiles,
    MigrationWriter,
    ModelExporter,
    SourceFormatter,
)
from modelgen.models import GenerationConfig, ModelSpec
from modelgen.templates import TemplateGenerator
from modelgen.utils import Timer
from modelgen.validators import ValidationResult, validate_full

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelgen.generator")


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``ModelGenerator.generate()``.

    Holds the rendered artifacts, what was written where, timing
    information and any errors or warnings encountered.
    """

    success: bool = False
    model_name: str = ""
    table_name: str = ""
    output_directory: str = ""
    dry_run: bool = False

    # Artifacts
    source: str = ""
    up_migration: str = ""
    down_migration: str = ""
    files: List[FileRecord] = field(default_factory=list)
    migration: Optional[MigrationFiles] = None

    total_elapsed_seconds: float = 0.0

    # Sub-reports
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)
    formatter_warnings: List[str] = field(default_factory=list)

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        lines.append(f"{'='*60}")
        lines.append("  modelgen — Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:           {status}")
        lines.append(f"  Model:            {self.model_name}")
        lines.append(f"  Table:            {self.table_name}")
        lines.append(f"  Output:           {self.output_directory}")
        lines.append(f"  Files written:    {len(self.files)}")
        if self.migration is not None:
            lines.append(f"  Migration:        {self.migration.up_path.name}")
        if self.dry_run:
            lines.append("  Mode:             dry run (nothing written)")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'─'*60}")

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<24s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        sections = (
            ("Validation Errors", self.validation_errors, "✗"),
            ("Validation Warnings", self.validation_warnings, "⚠"),
            ("Generation Errors", self.generation_errors, "✗"),
            ("Export Errors", self.export_errors, "✗"),
            ("Formatter Warnings", self.formatter_warnings, "⚠"),
        )
        for title, items, icon in sections:
            if items:
                lines.append(f"{'─'*60}")
                lines.append(f"  {title} ({len(items)}):")
                for item in items:
                    lines.append(f"    {icon} {item}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Config loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_config_file(path: Path) -> GenerationConfig:
    """
    Load a ``GenerationConfig`` from a YAML or JSON file.

    Settings may sit at the top level or under a ``modelgen`` key.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed or holds invalid settings.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Config path is not a file: {path}")

    suffix: str = path.suffix.lower()
    if suffix == ".json":
        raw: Dict[str, Any] = _load_json_file(path)
    else:
        raw = _load_yaml_file(path)

    section: Any = raw.get("modelgen", raw)
    if not isinstance(section, dict):
        raise ValueError(f"'modelgen' section in {path} must be a mapping.")

    try:
        config: GenerationConfig = GenerationConfig.model_validate(section)
    except PydanticValidationError as exc:
        raise ValueError(f"Config validation failed: {exc}") from exc

    logger.info("Loaded config from %s (%d keys).", path, len(section))
    return config


def apply_overrides(
    config: GenerationConfig,
    overrides: Mapping[str, Any],
) -> GenerationConfig:
    """Return a new, re-validated config with *overrides* applied."""
    if not overrides:
        return config
    merged: Dict[str, Any] = {**config.model_dump(), **overrides}
    return GenerationConfig.model_validate(merged)


# ---------------------------------------------------------------------------
# ModelGenerator: pipeline orchestrator
# ---------------------------------------------------------------------------


class ModelGenerator:
    """
    Pipeline orchestrator for one ``modelgen model`` invocation.

    Usage::

        generator = ModelGenerator(GenerationConfig())
        report = generator.generate(
            "post", ["title:text", "body:nulls.String"],
            output_dir=Path("."),
        )
        print(report.source)

    The generator is reusable — create once, call generate() many times.
    """

    def __init__(
        self,
        config: Optional[GenerationConfig] = None,
        *,
        formatter: Optional[SourceFormatter] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._config: GenerationConfig = config or GenerationConfig()
        self._templates: TemplateGenerator = TemplateGenerator(self._config)
        self._formatter: SourceFormatter = formatter or SourceFormatter(
            self._config.formatter_command
        )
        self._clock: Optional[Callable[[], datetime]] = clock

        logger.debug(
            "ModelGenerator initialised: package=%s, skip_migration=%s.",
            self._config.package_name,
            self._config.skip_migration,
        )

    @property
    def config(self) -> GenerationConfig:
        return self._config

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def generate(
        self,
        model_name: Optional[str],
        attribute_tokens: Sequence[str] = (),
        *,
        output_dir: Path = Path("."),
        dry_run: bool = False,
    ) -> GenerationReport:
        """
        Full pipeline: validate → assemble → render → export → migrate.

        Never raises for expected failures; they are recorded on the
        returned report.
        """
        report: GenerationReport = GenerationReport()
        report.model_name = model_name or ""
        report.output_directory = str(output_dir.resolve())
        report.dry_run = dry_run
        pipeline_start: float = time.perf_counter()

        try:
            self._step_validate(model_name, attribute_tokens, report)
            spec: ModelSpec = self._step_assemble(
                model_name or "", attribute_tokens, report
            )
            files: Dict[str, str] = self._step_render(spec, report)

            if dry_run:
                report.source = files[self._templates.source_path(spec)]
                logger.info("Dry-run mode: files were not written to disk.")
            else:
                exporter: ModelExporter = ModelExporter(
                    self._config,
                    output_dir,
                    atomic_writes=self._config.atomic_writes,
                )
                self._step_export(exporter, files, report)
                self._step_format(exporter, spec, report)
                report.source = exporter.read_back(self._templates.source_path(spec))

                if not self._config.skip_migration:
                    self._step_migrate(spec, output_dir, report)

        except ModelValidationError as exc:
            logger.error("%s", exc.message)
        except (ExportError, MigrationWriteError) as exc:
            report.export_errors.append(str(exc))
            logger.error("%s", exc)
        except ModelGenError as exc:
            report.generation_errors.append(str(exc))
            logger.error("%s", exc)

        return self._finalise_report(report, time.perf_counter() - pipeline_start)

    # -----------------------------------------------------------------
    # Pipeline step: Validation
    # -----------------------------------------------------------------

    def _step_validate(
        self,
        model_name: Optional[str],
        attribute_tokens: Sequence[str],
        report: GenerationReport,
    ) -> None:
        with Timer("validation") as t:
            result: ValidationResult = validate_full(
                model_name, attribute_tokens, self._config
            )

        report.validation_errors.extend(str(e) for e in result.errors)
        report.validation_warnings.extend(str(w) for w in result.warnings)

        if result.has_errors:
            detail: str = f"{result.error_count} error(s)"
        elif result.has_warnings:
            detail = f"{result.warning_count} warning(s)"
        else:
            detail = "all checks passed"

        report.step_metrics.append(GenerationStepMetric(
            step_name="Validate Input",
            success=result.is_valid,
            elapsed_seconds=t.elapsed,
            detail=detail,
        ))

        for warn in result.warnings:
            logger.warning("  ⚠ %s", warn)

        if result.has_errors:
            for err in result.errors:
                logger.error("  ✗ %s", err)
            raise ModelValidationError(
                result.errors[0].message,
                issues=[str(e) for e in result.errors],
            )

    # -----------------------------------------------------------------
    # Pipeline step: Assembly
    # -----------------------------------------------------------------

    def _step_assemble(
        self,
        model_name: str,
        attribute_tokens: Sequence[str],
        report: GenerationReport,
    ) -> ModelSpec:
        with Timer("assembly") as t:
            spec: ModelSpec = assemble_model(
                model_name,
                attribute_tokens,
                package_name=self._config.package_name,
            )

        report.table_name = spec.names.table
        report.step_metrics.append(GenerationStepMetric(
            step_name="Assemble Model",
            success=True,
            elapsed_seconds=t.elapsed,
            detail=(
                f"{spec.names.proper}: {len(spec.attributes)} attributes, "
                f"{len(spec.imports)} import(s)"
            ),
        ))
        return spec

    # -----------------------------------------------------------------
    # Pipeline step: Rendering
    # -----------------------------------------------------------------

    def _step_render(self, spec: ModelSpec, report: GenerationReport) -> Dict[str, str]:
        with Timer("render") as t:
            files: Dict[str, str] = self._templates.generate_all(spec)
            report.up_migration = self._templates.render_create(spec)
            report.down_migration = self._templates.render_drop(spec)

        report.step_metrics.append(GenerationStepMetric(
            step_name="Render Artifacts",
            success=True,
            elapsed_seconds=t.elapsed,
            detail=f"{len(files)} files + migration pair",
        ))
        return files

    # -----------------------------------------------------------------
    # Pipeline step: Export
    # -----------------------------------------------------------------

    def _step_export(
        self,
        exporter: ModelExporter,
        files: Dict[str, str],
        report: GenerationReport,
    ) -> None:
        try:
            with Timer("export") as t:
                records: List[FileRecord] = exporter.export(files)
        except ExportError:
            report.step_metrics.append(GenerationStepMetric(
                step_name="Write Model Files",
                success=False,
                elapsed_seconds=t.elapsed,
                detail="aborted",
            ))
            raise

        report.files.extend(records)
        report.step_metrics.append(GenerationStepMetric(
            step_name="Write Model Files",
            success=True,
            elapsed_seconds=t.elapsed,
            detail=f"{len(records)} files, {sum(r.size_bytes for r in records):,} bytes",
        ))

    # -----------------------------------------------------------------
    # Pipeline step: Formatting (best effort)
    # -----------------------------------------------------------------

    def _step_format(
        self,
        exporter: ModelExporter,
        spec: ModelSpec,
        report: GenerationReport,
    ) -> None:
        source_path: Path = exporter.path_for(self._templates.source_path(spec))
        success: bool = True
        detail: str = "formatted" if self._formatter.enabled else "disabled"

        with Timer("format") as t:
            try:
                self._formatter.format(source_path)
            except FormatterError as exc:
                success = False
                detail = "failed (continuing)"
                report.formatter_warnings.append(str(exc))
                logger.warning("%s", exc)

        report.step_metrics.append(GenerationStepMetric(
            step_name="Format Source",
            success=success,
            elapsed_seconds=t.elapsed,
            detail=detail,
        ))

    # -----------------------------------------------------------------
    # Pipeline step: Migration
    # -----------------------------------------------------------------

    def _step_migrate(
        self,
        spec: ModelSpec,
        output_dir: Path,
        report: GenerationReport,
    ) -> None:
        migrations_path: Path = Path(self._config.migrations_path)
        if not migrations_path.is_absolute():
            migrations_path = output_dir / migrations_path

        writer_kwargs: Dict[str, Any] = {"atomic_writes": self._config.atomic_writes}
        if self._clock is not None:
            writer_kwargs["clock"] = self._clock
        writer: MigrationWriter = MigrationWriter(
            migrations_path,
            self._config.migration_type,
            **writer_kwargs,
        )

        try:
            with Timer("migration") as t:
                migration: MigrationFiles = writer.create(
                    self._templates.migration_name(spec),
                    report.up_migration,
                    report.down_migration,
                )
        except MigrationWriteError:
            report.step_metrics.append(GenerationStepMetric(
                step_name="Create Migration",
                success=False,
                elapsed_seconds=t.elapsed,
                detail="aborted",
            ))
            raise

        report.migration = migration
        report.step_metrics.append(GenerationStepMetric(
            step_name="Create Migration",
            success=True,
            elapsed_seconds=t.elapsed,
            detail=migration.up_path.name,
        ))

    # -----------------------------------------------------------------
    # Internal: finalise report
    # -----------------------------------------------------------------

    def _finalise_report(
        self,
        report: GenerationReport,
        total_elapsed: float,
    ) -> GenerationReport:
        """Set final status and timing on the report."""
        report.total_elapsed_seconds = total_elapsed
        report.success = not (
            report.validation_errors
            or report.generation_errors
            or report.export_errors
        )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ModelGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "load_config_file",
    "apply_overrides",
]

logger.debug("modelgen.generator loaded.")
