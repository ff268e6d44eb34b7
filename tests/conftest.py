"""
tests/conftest.py
Shared fixtures for the modelgen test suite.

Real file I/O is performed inside temporary directories managed by
pytest's tmp_path fixture.  The external formatter is disabled unless a
test replaces it explicitly.
"""

from __future__ import annotations

import pathlib
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

import pytest
import yaml

from modelgen.models import GenerationConfig
from modelgen.templates import TemplateGenerator


FIXED_NOW: datetime = datetime(2024, 3, 5, 14, 7, 9, tzinfo=timezone.utc)
FIXED_VERSION: str = "20240305140709"


# ---------------------------------------------------------------------------
# Configuration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def config() -> GenerationConfig:
    """Default settings with the formatter disabled."""
    return GenerationConfig(formatter_command=[])


@pytest.fixture()
def templates(config: GenerationConfig) -> TemplateGenerator:
    return TemplateGenerator(config)


@pytest.fixture()
def fixed_clock() -> Callable[[], datetime]:
    """Clock returning a constant UTC instant for migration versions."""
    return lambda: FIXED_NOW


@pytest.fixture()
def fixed_version() -> str:
    """Migration version produced by ``fixed_clock``."""
    return FIXED_VERSION


# ---------------------------------------------------------------------------
# Filesystem fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def project_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Empty project root."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture()
def config_dict() -> Dict[str, Any]:
    return {
        "modelgen": {
            "package_name": "records",
            "models_dir": "app/records",
            "migrations_path": "db/migrations",
            "formatter_command": [],
            "echo_source": True,
        }
    }


@pytest.fixture()
def config_yaml_path(config_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the settings dict to a temporary YAML file and return its path."""
    path = tmp_path / "modelgen.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(config_dict, fh, default_flow_style=False)
    return path


# ---------------------------------------------------------------------------
# Attribute token fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def post_tokens() -> List[str]:
    return ["title:text", "body:nulls.String", "views:int", "published_at:timestamp"]
