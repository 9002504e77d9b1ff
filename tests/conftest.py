from __future__ import annotations

from pathlib import Path

import pytest

from glue_gen import Generator
from tests._fixtures.graph_builder import GraphBuilder


@pytest.fixture
def graph_builder() -> GraphBuilder:
    """Provide a graph builder seeded with the CoreUObject root classes."""
    return GraphBuilder().with_core()


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "Generated"


@pytest.fixture
def generator(tmp_path: Path, output_dir: Path) -> Generator:
    """Provide a fresh generation session writing under the pytest tmp_path."""
    return Generator(scripts_dir=str(output_dir), project_dir=str(tmp_path / "Project"))
