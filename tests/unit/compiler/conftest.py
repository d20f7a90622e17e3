"""Fixtures for compiler stage tests."""

from __future__ import annotations

from typing import Any

import pytest

from kiln_core.compiler import (
    ArtifactRegistry,
    ModelAccessRecord,
    SnapshotCompiler,
    SnapshotDatabase,
)
from kiln_core.compiler.database import ContractDeclaration, CrateId, ModuleId
from kiln_core.schemas import CompilationSnapshot


@pytest.fixture
def snapshot(sample_snapshot_data: dict[str, Any]) -> CompilationSnapshot:
    return CompilationSnapshot.model_validate(sample_snapshot_data)


@pytest.fixture
def db(snapshot: CompilationSnapshot) -> SnapshotDatabase:
    return SnapshotDatabase(snapshot)


@pytest.fixture
def access(snapshot: CompilationSnapshot) -> ModelAccessRecord:
    return ModelAccessRecord.from_snapshot(snapshot)


@pytest.fixture
def full_registry(snapshot: CompilationSnapshot) -> ArtifactRegistry:
    """Registry holding every class of the sample snapshot, no files written."""
    declarations = [
        ContractDeclaration(ModuleId(CrateId(path.split("::", 1)[0]), path))
        for path in snapshot.classes
    ]
    classes = SnapshotCompiler(snapshot).compile(declarations)
    return ArtifactRegistry.build(declarations, classes)
