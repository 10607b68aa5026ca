"""Shared fixtures for architecture tests."""

import os

import pytest
from pytestarch import (
    EvaluableArchitecture,
    LayeredArchitecture,
    get_evaluable_architecture,
)


@pytest.fixture(scope="session")
def evaluable() -> EvaluableArchitecture:
    """Build evaluable architecture from src/missionguard."""
    src_dir = os.path.abspath(
        os.path.join(os.path.dirname(__file__), "..", "..", "src")
    )
    project_path = os.path.join(src_dir, "missionguard")
    return get_evaluable_architecture(src_dir, project_path)


@pytest.fixture(scope="session")
def layers() -> LayeredArchitecture:
    """Define the DDD layers plus the guards package.

    PyTestArch resolves module names relative to the source root,
    so modules appear as 'src.missionguard.domain', etc.
    """
    return (
        LayeredArchitecture()
        .layer("domain")
        .containing_modules(["src.missionguard.domain"])
        .layer("guards")
        .containing_modules(["src.missionguard.guards"])
        .layer("application")
        .containing_modules(["src.missionguard.application"])
        .layer("infrastructure")
        .containing_modules(["src.missionguard.infrastructure"])
    )
