"""Manifest file format contract tests.

Deployment tooling reads the manifests kiln writes. These tests pin the
keys, their order and their value types for each manifest kind, and check
that manifests edited by operators or other tools, with extra keys, still
load.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

import pytest
import tomli_w

from kiln_core.compiler import serialize_manifest
from kiln_core.compiler.writer import load_manifest
from kiln_core.schemas import (
    ClassManifest,
    ComputedValueEntrypoint,
    ContractManifest,
    ModelManifest,
    ModelMember,
)

pytestmark = pytest.mark.contract

HASH = "0x" + "0f" * 32


@pytest.fixture
def class_manifest() -> ClassManifest:
    return ClassManifest(name="dojo::world::world", class_hash=HASH, abi="abis/world.json")


@pytest.fixture
def contract_manifest() -> ContractManifest:
    return ContractManifest(
        name="dojo_examples::actions::actions",
        class_hash=HASH,
        abi="abis/contracts/actions.json",
        address="0x5e1",
        reads=["Moves", "Position"],
        writes=["Moves"],
        computed=[
            ComputedValueEntrypoint(
                contract="dojo_examples::actions::actions::computed",
                entrypoint="calc",
                model="Position",
            )
        ],
    )


@pytest.fixture
def model_manifest() -> ModelManifest:
    return ModelManifest(
        name="dojo_examples::models::position",
        class_hash=HASH,
        members=[
            ModelMember(name="player", type="ContractAddress", key=True),
            ModelMember(name="x", type="u32"),
        ],
    )


class TestSerializedLayout:
    """Serialized manifests match the published layout."""

    def test_class_manifest(self, class_manifest: ClassManifest) -> None:
        data = tomllib.loads(serialize_manifest(class_manifest))
        assert list(data) == ["kind", "class_hash", "abi", "name"]
        assert data == {
            "kind": "Class",
            "class_hash": HASH,
            "abi": "abis/world.json",
            "name": "dojo::world::world",
        }

    def test_contract_manifest(self, contract_manifest: ContractManifest) -> None:
        data = tomllib.loads(serialize_manifest(contract_manifest))
        assert list(data) == [
            "kind",
            "class_hash",
            "abi",
            "name",
            "address",
            "reads",
            "writes",
            "computed",
        ]
        assert data["kind"] == "DojoContract"
        assert data["computed"] == [
            {
                "contract": "dojo_examples::actions::actions::computed",
                "entrypoint": "calc",
                "model": "Position",
            }
        ]

    def test_model_manifest(self, model_manifest: ModelManifest) -> None:
        data = tomllib.loads(serialize_manifest(model_manifest))
        assert list(data) == ["kind", "class_hash", "name", "members"]
        assert data["members"] == [
            {"name": "player", "type": "ContractAddress", "key": True},
            {"name": "x", "type": "u32", "key": False},
        ]

    def test_empty_lists_written(self) -> None:
        """Empty reads and writes are written, so readers never see missing keys."""
        data = tomllib.loads(serialize_manifest(ContractManifest(name="a::b", class_hash=HASH)))
        assert data["reads"] == []
        assert data["writes"] == []
        assert data["computed"] == []


class TestForeignManifests:
    """Manifests edited by operators or other tools still load."""

    def test_serialized_manifests_load_back(
        self,
        tmp_path: Path,
        class_manifest: ClassManifest,
        contract_manifest: ContractManifest,
        model_manifest: ModelManifest,
    ) -> None:
        for manifest in (class_manifest, contract_manifest, model_manifest):
            path = tmp_path / "manifest.toml"
            path.write_text(serialize_manifest(manifest))
            assert load_manifest(path) == manifest

    def test_hand_written_layout(self, tmp_path: Path) -> None:
        """Key order and table style are not significant when reading."""
        path = tmp_path / "position.toml"
        path.write_text(
            'name = "dojo_examples::models::position"\n'
            f'class_hash = "{HASH}"\n'
            'kind = "DojoModel"\n'
            "\n"
            "[[members]]\n"
            'name = "player"\n'
            'type = "ContractAddress"\n'
            "key = true\n"
        )

        manifest = load_manifest(path)

        assert isinstance(manifest, ModelManifest)
        assert manifest.members == [ModelMember(name="player", type="ContractAddress", key=True)]

    def test_extra_keys_kept(self, tmp_path: Path, contract_manifest: ContractManifest) -> None:
        data = contract_manifest.model_dump(exclude_none=True)
        data["salt"] = "0x1"
        data["deployment"] = {"network": "katana"}
        path = tmp_path / "actions.toml"
        path.write_text(tomli_w.dumps(data))

        manifest = load_manifest(path)

        assert isinstance(manifest, ContractManifest)
        assert manifest.model_extra == {"salt": "0x1", "deployment": {"network": "katana"}}
        written = tomllib.loads(serialize_manifest(manifest))
        assert written["deployment"] == {"network": "katana"}
