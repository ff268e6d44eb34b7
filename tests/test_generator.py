"""
tests/test_generator.py
Integration tests for the ModelGenerator pipeline and config loading.
"""

from __future__ import annotations

import json
import pathlib
import sys
from datetime import datetime
from typing import Any, Callable, Dict, List

import pytest
from pydantic import ValidationError

from modelgen.exporters import SourceFormatter
from modelgen.generator import (
    GenerationReport,
    ModelGenerator,
    apply_overrides,
    load_config_file,
)
from modelgen.models import GenerationConfig


# ===========================================================================
# Helpers
# ===========================================================================


def _migration_files(directory: pathlib.Path) -> List[str]:
    return sorted(p.name for p in directory.iterdir())


def _step(report: GenerationReport, name: str):
    return next(s for s in report.step_metrics if s.step_name == name)


# ===========================================================================
# Full pipeline
# ===========================================================================


class TestModelGenerator:

    def test_widget_end_to_end(
        self,
        config: GenerationConfig,
        project_dir: pathlib.Path,
        fixed_clock: Callable[[], datetime],
        fixed_version: str,
    ) -> None:
        report = ModelGenerator(config, clock=fixed_clock).generate(
            "widget", output_dir=project_dir
        )

        assert report.success, report.summary()
        assert report.table_name == "widgets"
        assert (project_dir / "models" / "widget.go").is_file()
        assert (project_dir / "models" / "widget_test.go").is_file()
        assert report.source.startswith("package models\n")
        assert _migration_files(project_dir / "migrations") == [
            f"{fixed_version}_create_widgets.down.fizz",
            f"{fixed_version}_create_widgets.up.fizz",
        ]
        assert report.migration is not None
        assert report.migration.up_path.read_text(encoding="utf-8") == (
            'create_table("widgets", func(t) {\n})'
        )
        assert report.migration.down_path.read_text(encoding="utf-8") == 'drop_table("widgets")'

    def test_post_attributes(
        self,
        config: GenerationConfig,
        project_dir: pathlib.Path,
        fixed_clock: Callable[[], datetime],
        post_tokens: List[str],
    ) -> None:
        report = ModelGenerator(config, clock=fixed_clock).generate(
            "post", post_tokens, output_dir=project_dir
        )

        assert report.success
        assert '\tBody nulls.String `json:"body" db:"body"`' in report.source
        assert '"github.com/markbates/going/nulls"' in report.source
        assert '\tt.Column("body", "string", {"null": true})' in report.up_migration
        assert report.migration is not None
        assert report.migration.up_path.read_text(encoding="utf-8") == report.up_migration

    def test_skip_migration(self, project_dir: pathlib.Path) -> None:
        config = GenerationConfig(formatter_command=[], skip_migration=True)
        report = ModelGenerator(config).generate("widget", output_dir=project_dir)

        assert report.success
        assert report.migration is None
        assert not (project_dir / "migrations").exists()
        assert (project_dir / "models" / "widget.go").is_file()

    def test_absolute_migrations_path(
        self,
        tmp_path: pathlib.Path,
        project_dir: pathlib.Path,
        fixed_clock: Callable[[], datetime],
    ) -> None:
        migrations = tmp_path / "elsewhere"
        config = GenerationConfig(formatter_command=[], migrations_path=str(migrations))
        report = ModelGenerator(config, clock=fixed_clock).generate("widget", output_dir=project_dir)

        assert report.success
        assert len(_migration_files(migrations)) == 2
        assert not (project_dir / "migrations").exists()

    def test_dry_run_writes_nothing(self, config: GenerationConfig, project_dir: pathlib.Path) -> None:
        report = ModelGenerator(config).generate("widget", ["name"], output_dir=project_dir, dry_run=True)

        assert report.success
        assert report.dry_run
        assert '\tName string `json:"name" db:"name"`' in report.source
        assert report.files == []
        assert list(project_dir.iterdir()) == []

    def test_missing_name_fails_validation(self, config: GenerationConfig, project_dir: pathlib.Path) -> None:
        report = ModelGenerator(config).generate(None, output_dir=project_dir)

        assert not report.success
        assert any("You must supply a name for your model!" in e for e in report.validation_errors)
        assert list(project_dir.iterdir()) == []
        assert _step(report, "Validate Input").success is False

    def test_reserved_attribute_fails_validation(
        self, config: GenerationConfig, project_dir: pathlib.Path
    ) -> None:
        report = ModelGenerator(config).generate("widget", ["id:int"], output_dir=project_dir)
        assert not report.success
        assert any("RESERVED_ATTRIBUTE" in e for e in report.validation_errors)

    def test_path_escaping_model_name_writes_nothing(
        self, config: GenerationConfig, tmp_path: pathlib.Path, project_dir: pathlib.Path
    ) -> None:
        report = ModelGenerator(config).generate("../escape", output_dir=project_dir)

        assert not report.success
        assert any("INVALID_MODEL_NAME" in e for e in report.validation_errors)
        assert not (tmp_path / "escape.go").exists()
        assert list(project_dir.iterdir()) == []

    def test_quoted_attribute_name_fails_validation(
        self, config: GenerationConfig, project_dir: pathlib.Path
    ) -> None:
        report = ModelGenerator(config).generate("widget", ['a"b'], output_dir=project_dir)
        assert not report.success
        assert report.up_migration == ""

    def test_uppercase_reserved_attribute_fails_validation(
        self, config: GenerationConfig, project_dir: pathlib.Path
    ) -> None:
        report = ModelGenerator(config).generate("widget", ["ID:int"], output_dir=project_dir)
        assert not report.success
        assert any("RESERVED_ATTRIBUTE" in e for e in report.validation_errors)

    def test_todo_table_and_migration_names(
        self,
        config: GenerationConfig,
        project_dir: pathlib.Path,
        fixed_clock: Callable[[], datetime],
        fixed_version: str,
    ) -> None:
        report = ModelGenerator(config, clock=fixed_clock).generate("todo", output_dir=project_dir)

        assert report.success
        assert report.table_name == "todos"
        assert "type Todos []Todo" in report.source
        assert report.down_migration == 'drop_table("todos")'
        assert (project_dir / "migrations" / f"{fixed_version}_create_todos.up.fizz").is_file()

    def test_warnings_do_not_fail(self, config: GenerationConfig, project_dir: pathlib.Path) -> None:
        report = ModelGenerator(config).generate(
            "page", ["slug:"], output_dir=project_dir, dry_run=True
        )
        assert report.success
        assert any("EMPTY_TYPE" in w for w in report.validation_warnings)
        assert '\tSlug string `json:"slug" db:"slug"`' in report.source

    def test_formatter_failure_is_not_fatal(
        self,
        config: GenerationConfig,
        project_dir: pathlib.Path,
        fixed_clock: Callable[[], datetime],
    ) -> None:
        formatter = SourceFormatter(["modelgen-no-such-formatter-binary"])
        report = ModelGenerator(config, formatter=formatter, clock=fixed_clock).generate(
            "widget", output_dir=project_dir
        )

        assert report.success
        assert len(report.formatter_warnings) == 1
        assert _step(report, "Format Source").success is False
        assert report.migration is not None

    def test_formatted_source_is_read_back(
        self,
        config: GenerationConfig,
        project_dir: pathlib.Path,
    ) -> None:
        script = "import sys, pathlib; pathlib.Path(sys.argv[1]).write_text('formatted')"
        formatter = SourceFormatter([sys.executable, "-c", script])
        config.skip_migration = True
        report = ModelGenerator(config, formatter=formatter).generate("widget", output_dir=project_dir)

        assert report.success
        assert report.source == "formatted"

    def test_export_failure(self, config: GenerationConfig, project_dir: pathlib.Path) -> None:
        (project_dir / "models").write_text("", encoding="utf-8")
        report = ModelGenerator(config).generate("widget", output_dir=project_dir)

        assert not report.success
        assert len(report.export_errors) == 1
        assert _step(report, "Write Model Files").success is False
        assert not (project_dir / "migrations").exists()

    def test_migration_failure(
        self,
        config: GenerationConfig,
        project_dir: pathlib.Path,
        fixed_clock: Callable[[], datetime],
    ) -> None:
        (project_dir / "migrations").write_text("", encoding="utf-8")
        report = ModelGenerator(config, clock=fixed_clock).generate("widget", output_dir=project_dir)

        assert not report.success
        assert any("Failed to write migration" in e for e in report.export_errors)
        assert (project_dir / "models" / "widget.go").is_file()

    def test_generator_is_reusable(
        self,
        config: GenerationConfig,
        project_dir: pathlib.Path,
        fixed_clock: Callable[[], datetime],
    ) -> None:
        generator = ModelGenerator(config, clock=fixed_clock)
        first = generator.generate("widget", output_dir=project_dir)
        second = generator.generate("gadget", output_dir=project_dir)
        assert first.success and second.success
        assert len(_migration_files(project_dir / "migrations")) == 4

    def test_summary(self, config: GenerationConfig, project_dir: pathlib.Path) -> None:
        report = ModelGenerator(config).generate("widget", output_dir=project_dir, dry_run=True)
        summary = report.summary()
        assert "SUCCESS" in summary
        assert "widgets" in summary
        assert "dry run" in summary


# ===========================================================================
# Config loading
# ===========================================================================


class TestConfigLoading:

    def test_yaml_section(self, config_yaml_path: pathlib.Path) -> None:
        config = load_config_file(config_yaml_path)
        assert config.package_name == "records"
        assert config.models_dir == "app/records"
        assert config.migrations_path == "db/migrations"
        assert config.formatter_command == []

    def test_json_top_level(self, tmp_path: pathlib.Path, config_dict: Dict[str, Any]) -> None:
        path = tmp_path / "modelgen.json"
        path.write_text(json.dumps(config_dict["modelgen"]), encoding="utf-8")
        assert load_config_file(path).package_name == "records"

    def test_empty_yaml_gives_defaults(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config_file(path) == GenerationConfig()

    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config_file(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("modelgen: [unclosed", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config_file(path)

    def test_unknown_key(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "extra.yaml"
        path.write_text("modelgen:\n  colour: blue\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Config validation failed"):
            load_config_file(path)

    def test_generated_files_follow_config(
        self,
        config_yaml_path: pathlib.Path,
        project_dir: pathlib.Path,
        fixed_clock: Callable[[], datetime],
        fixed_version: str,
    ) -> None:
        config = load_config_file(config_yaml_path)
        report = ModelGenerator(config, clock=fixed_clock).generate("widget", output_dir=project_dir)

        assert report.success
        assert report.source.startswith("package records\n")
        assert (project_dir / "app" / "records" / "widget.go").is_file()
        assert (project_dir / "db" / "migrations" / f"{fixed_version}_create_widgets.up.fizz").is_file()


class TestApplyOverrides:

    def test_no_overrides_returns_same_object(self, config: GenerationConfig) -> None:
        assert apply_overrides(config, {}) is config

    def test_overrides_applied(self, config: GenerationConfig) -> None:
        updated = apply_overrides(config, {"skip_migration": True, "migrations_path": "db"})
        assert updated.skip_migration is True
        assert updated.migrations_path == "db"
        assert config.skip_migration is False

    def test_invalid_override(self, config: GenerationConfig) -> None:
        with pytest.raises(ValidationError):
            apply_overrides(config, {"package_name": "not a package"})
