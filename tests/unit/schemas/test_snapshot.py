"""Unit tests for compilation snapshot and annotation models."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from kiln_core.schemas import (
    CompilationSnapshot,
    ComputedValueTag,
    ContractTag,
    GeneratedFileInfo,
    ModelTag,
    PathWrite,
    StructWrite,
)


class TestAnnotations:
    """Tests for the annotation union."""

    @pytest.mark.parametrize(
        ("aux_data", "expected"),
        [
            ({"kind": "contract", "declared_names": ["actions"]}, ContractTag),
            ({"kind": "model", "models": []}, ModelTag),
            ({"kind": "computed_value", "entrypoint": "calc", "model": "Position"}, ComputedValueTag),
        ],
    )
    def test_discriminated_by_kind(self, aux_data: dict[str, Any], expected: type) -> None:
        info = GeneratedFileInfo.model_validate({"name": "f", "aux_data": aux_data})
        assert isinstance(info.aux_data, expected)

    def test_no_aux_data(self) -> None:
        info = GeneratedFileInfo.model_validate({"name": "f"})
        assert info.aux_data is None

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GeneratedFileInfo.model_validate({"aux_data": {"kind": "event"}})


class TestCompilationSnapshot:
    """Tests for snapshot validation and loading."""

    def test_sample_snapshot_valid(self, sample_snapshot_data: dict[str, Any]) -> None:
        snapshot = CompilationSnapshot.model_validate(sample_snapshot_data)
        assert snapshot.main_crates == ["dojo_examples"]
        assert len(snapshot.crates) == 3
        assert "dojo::world::world" in snapshot.classes

    def test_write_operations_parsed(self, sample_snapshot_data: dict[str, Any]) -> None:
        snapshot = CompilationSnapshot.model_validate(sample_snapshot_data)
        writes = snapshot.model_writes["dojo_examples::actions::actions"]
        assert isinstance(writes[0], StructWrite)
        assert isinstance(writes[1], PathWrite)
        assert writes[1].variable == "next"

    def test_duplicate_crates_rejected(self, sample_snapshot_copy: Callable[[], dict[str, Any]]) -> None:
        data = sample_snapshot_copy()
        data["crates"].append({"name": "dojo", "modules": []})
        with pytest.raises(ValidationError, match="duplicate crates"):
            CompilationSnapshot.model_validate(data)

    def test_module_outside_crate_rejected(self) -> None:
        with pytest.raises(ValidationError, match="not part of crate"):
            CompilationSnapshot.model_validate(
                {"crates": [{"name": "dojo", "modules": [{"path": "other::world"}]}]}
            )

    def test_invalid_module_path_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CompilationSnapshot.model_validate(
                {"crates": [{"name": "dojo", "modules": [{"path": "dojo::"}]}]}
            )

    def test_from_json(self, tmp_path: Path, sample_snapshot_data: dict[str, Any]) -> None:
        path = tmp_path / "semantic.json"
        path.write_text(json.dumps(sample_snapshot_data))
        snapshot = CompilationSnapshot.from_json(path)
        assert len(snapshot.classes) == 8

    def test_from_json_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            CompilationSnapshot.from_json(tmp_path / "missing.json")

    def test_from_json_invalid(self, tmp_path: Path) -> None:
        path = tmp_path / "semantic.json"
        path.write_text("{not json")
        with pytest.raises(json.JSONDecodeError):
            CompilationSnapshot.from_json(path)
