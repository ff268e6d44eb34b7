# File: modelgen/exporters.py
"""
modelgen - Artifact Exporters (File-System Manager)
====================================================

Responsible for:
    1. Creating the models directory and writing the rendered source and
       test stub atomically (write-to-temp then rename).
    2. Running the external source formatter on the written file.  This is
       best effort: a failure is reported, never fatal.
    3. Reading the formatted source back so it can be echoed.
    4. Writing the timestamped migration pair
       (``<YYYYMMDDHHMMSS>_<name>.up.<type>`` / ``.down.<type>``).

Failures other than formatting are wrapped in ``ExportError`` or
``MigrationWriteError`` and abort the command.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Sequence, Tuple

from modelgen.exceptions import ExportError, FormatterError, MigrationWriteError
from modelgen.models import GenerationConfig
from modelgen.utils import count_lines, ensure_directory, read_file, sha256_hex, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelgen.exporters")

MIGRATION_TIMESTAMP_FORMAT: str = "%Y%m%d%H%M%S"


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    sha256: str


@dataclass(frozen=True, slots=True)
class MigrationFiles:
    """Paths of one written migration pair."""

    name: str
    version: str
    up_path: Path
    down_path: Path


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _write_record(full_path: Path, content: str, rel_path: str, atomic: bool) -> FileRecord:
    size_bytes: int = write_file(full_path, content, atomic=atomic)
    return FileRecord(
        relative_path=rel_path,
        absolute_path=str(full_path),
        size_bytes=size_bytes,
        line_count=count_lines(content),
        sha256=sha256_hex(content),
    )


# ---------------------------------------------------------------------------
# Source formatter
# ---------------------------------------------------------------------------


class SourceFormatter:
    """
    Runs an external formatter (``gofmt -w`` by default) on one file.

    An empty command disables formatting.
    """

    def __init__(self, command: Sequence[str], *, timeout: float = 30.0) -> None:
        self._command: Tuple[str, ...] = tuple(command)
        self._timeout: float = timeout

    @property
    def enabled(self) -> bool:
        return bool(self._command)

    def format(self, path: Path) -> None:
        """
        Format *path* in place.

        Raises:
            FormatterError: the formatter is missing, timed out or exited
                non-zero.
        """
        if not self.enabled:
            logger.debug("Formatter disabled; leaving %s as rendered.", path)
            return

        argv: List[str] = [*self._command, str(path.resolve())]
        ctx: Dict[str, str] = {"command": " ".join(argv)}
        try:
            completed: subprocess.CompletedProcess = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self._timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise FormatterError(
                "Received an error when trying to run the formatter",
                context=ctx,
                original_exception=exc,
            ) from exc

        if completed.returncode != 0:
            output: str = completed.stdout.decode("utf-8", errors="replace").strip()
            ctx["exit_code"] = str(completed.returncode)
            if output:
                ctx["output"] = output
            raise FormatterError(
                "Received an error when trying to run the formatter",
                context=ctx,
            )

        logger.debug("Formatted %s with %s.", path, self._command[0])


# ---------------------------------------------------------------------------
# ModelExporter
# ---------------------------------------------------------------------------


class ModelExporter:
    """
    Writes rendered model files under the output root.

    Usage::

        exporter = ModelExporter(config, output_dir=Path("."))
        records = exporter.export(generated_files)
        text = exporter.read_back(records[0].relative_path)

    Thread-safety: NOT thread-safe.  Use one exporter per output directory.
    """

    def __init__(
        self,
        config: GenerationConfig,
        output_dir: Path,
        *,
        atomic_writes: bool = True,
    ) -> None:
        self._config: GenerationConfig = config
        self._output_dir: Path = output_dir.resolve()
        self._atomic_writes: bool = atomic_writes
        logger.debug(
            "ModelExporter initialised: output_dir=%s, atomic=%s.",
            self._output_dir,
            self._atomic_writes,
        )

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def path_for(self, rel_path: str) -> Path:
        return self._output_dir / rel_path

    def export(self, generated_files: Dict[str, str]) -> List[FileRecord]:
        """
        Write every file in *generated_files* (relative path → content).

        Raises:
            ExportError: a directory or file could not be written.  Files
                written before the failure are left in place.
        """
        models_dir: Path = self._output_dir / self._config.models_dir
        try:
            ensure_directory(models_dir)
        except OSError as exc:
            raise ExportError(
                "Failed to create directory",
                context={"path": str(models_dir)},
                original_exception=exc,
            ) from exc

        records: List[FileRecord] = []
        for rel_path, content in generated_files.items():
            full_path: Path = self.path_for(rel_path)
            try:
                record: FileRecord = _write_record(
                    full_path, content, rel_path, self._atomic_writes
                )
            except OSError as exc:
                raise ExportError(
                    "Failed to write file",
                    context={"path": str(full_path)},
                    original_exception=exc,
                ) from exc
            records.append(record)
            logger.debug(
                "Wrote file: %s (%d bytes, %d lines).",
                rel_path,
                record.size_bytes,
                record.line_count,
            )

        logger.info("Wrote %d model files to %s.", len(records), models_dir)
        return records

    def read_back(self, rel_path: str) -> str:
        """Read a previously exported file (after formatting)."""
        full_path: Path = self.path_for(rel_path)
        try:
            return read_file(full_path)
        except OSError as exc:
            raise ExportError(
                "Failed to read file",
                context={"path": str(full_path)},
                original_exception=exc,
            ) from exc


# ---------------------------------------------------------------------------
# MigrationWriter
# ---------------------------------------------------------------------------


class MigrationWriter:
    """
    Persists an up/down migration pair into a versioned directory.

    The version is the UTC creation time formatted as ``YYYYMMDDHHMMSS``,
    so migrations sort in creation order.
    """

    def __init__(
        self,
        migrations_path: Path,
        migration_type: str = "fizz",
        *,
        clock: Callable[[], datetime] = _utc_now,
        atomic_writes: bool = True,
    ) -> None:
        self._migrations_path: Path = migrations_path
        self._migration_type: str = migration_type
        self._clock: Callable[[], datetime] = clock
        self._atomic_writes: bool = atomic_writes

    def file_names(self, name: str, version: str) -> Tuple[str, str]:
        """Up and down file names for one migration."""
        stem: str = f"{version}_{name}"
        return (
            f"{stem}.up.{self._migration_type}",
            f"{stem}.down.{self._migration_type}",
        )

    def create(self, name: str, up: str, down: str) -> MigrationFiles:
        """
        Write the pair and return their paths.

        Raises:
            MigrationWriteError: the directory or either file could not be
                written.
        """
        version: str = self._clock().strftime(MIGRATION_TIMESTAMP_FORMAT)
        up_name, down_name = self.file_names(name, version)
        up_path: Path = self._migrations_path / up_name
        down_path: Path = self._migrations_path / down_name

        try:
            ensure_directory(self._migrations_path)
            write_file(up_path, up, atomic=self._atomic_writes)
            write_file(down_path, down, atomic=self._atomic_writes)
        except OSError as exc:
            raise MigrationWriteError(
                "Failed to write migration",
                context={"name": name, "path": str(self._migrations_path)},
                original_exception=exc,
            ) from exc

        logger.info("Created migration %s in %s.", up_name, self._migrations_path)
        return MigrationFiles(
            name=name,
            version=version,
            up_path=up_path,
            down_path=down_path,
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "MIGRATION_TIMESTAMP_FORMAT",
    "FileRecord",
    "MigrationFiles",
    "SourceFormatter",
    "ModelExporter",
    "MigrationWriter",
]

logger.debug("modelgen.exporters loaded.")
