"""Unit tests for manifest aggregation."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from kiln_core.compiler import (
    ArtifactRegistry,
    IssueSeverity,
    ManifestAggregator,
    ModelAccessRecord,
    SnapshotCompiler,
    SnapshotDatabase,
    build_system_manifests,
    classify_modules,
    to_snake_case,
)
from kiln_core.compiler.database import ContractDeclaration, CrateId, ModuleId
from kiln_core.compiler.models import ClassifiedModule
from kiln_core.errors import ManifestConsistencyError, MissingSystemContractError
from kiln_core.schemas import (
    CompilationSnapshot,
    ComputedValueEntrypoint,
    ComputedValueTag,
    ContractTag,
)

DOJO = CrateId("dojo")
EXAMPLES = CrateId("dojo_examples")
ERC = CrateId("dojo_erc")


def _registry_without(snapshot: CompilationSnapshot, *missing: str) -> ArtifactRegistry:
    declarations = [
        ContractDeclaration(ModuleId(CrateId(path.split("::", 1)[0]), path))
        for path in snapshot.classes
        if path not in missing
    ]
    return ArtifactRegistry.build(declarations, SnapshotCompiler(snapshot).compile(declarations))


class TestToSnakeCase:
    """Tests for model name conversion."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("PlayerPosition", "player_position"),
            ("Vec2", "vec_2"),
            ("HTTPServer", "http_server"),
            ("Moves", "moves"),
            ("position", "position"),
            ("ERC20Balance", "erc_20_balance"),
            ("already_snake", "already_snake"),
        ],
    )
    def test_conversion(self, name: str, expected: str) -> None:
        assert to_snake_case(name) == expected


class TestBuildSystemManifests:
    """Tests for system contract manifests."""

    def test_all_present(self, full_registry: ArtifactRegistry) -> None:
        manifests = build_system_manifests(full_registry)
        assert [m.name for m in manifests] == [
            "dojo::world::world",
            "dojo::executor::executor",
            "dojo::base::base",
        ]
        assert all(m.kind == "Class" for m in manifests)
        assert manifests[0].class_hash == full_registry["dojo::world::world"].class_hash

    def test_missing_names_every_absent_contract(self, snapshot: CompilationSnapshot) -> None:
        registry = _registry_without(snapshot, "dojo::world::world", "dojo::base::base")
        with pytest.raises(MissingSystemContractError) as exc_info:
            build_system_manifests(registry)
        assert exc_info.value.missing == ["dojo::world::world", "dojo::base::base"]
        assert "Did you include `dojo` as a dependency?" in str(exc_info.value)


class TestAggregate:
    """Tests for ManifestAggregator.aggregate on the sample project."""

    def test_contracts_and_models(
        self,
        db: SnapshotDatabase,
        full_registry: ArtifactRegistry,
        access: ModelAccessRecord,
    ) -> None:
        modules = classify_modules(db, [EXAMPLES, DOJO])
        aggregated = ManifestAggregator(db, full_registry, access).aggregate(modules)

        assert sorted(aggregated.contracts) == ["dojo_examples::actions::actions"]
        assert sorted(aggregated.models) == [
            "dojo_examples::models::moves",
            "dojo_examples::models::position",
        ]

    def test_system_contracts_excluded(
        self, db: SnapshotDatabase, full_registry: ArtifactRegistry
    ) -> None:
        aggregated = ManifestAggregator(db, full_registry).aggregate(classify_modules(db, [DOJO]))
        assert aggregated.contracts == {}
        assert aggregated.issues == []

    def test_model_precedence(
        self, db: SnapshotDatabase, full_registry: ArtifactRegistry
    ) -> None:
        """A key that is both a contract and a model is kept only as a model."""
        aggregated = ManifestAggregator(db, full_registry).aggregate(
            classify_modules(db, [EXAMPLES])
        )
        assert "dojo_examples::models::position" in aggregated.models
        assert "dojo_examples::models::position" not in aggregated.contracts

    def test_contract_manifest_fields(
        self,
        db: SnapshotDatabase,
        full_registry: ArtifactRegistry,
        access: ModelAccessRecord,
    ) -> None:
        aggregated = ManifestAggregator(db, full_registry, access).aggregate(
            classify_modules(db, [EXAMPLES])
        )
        actions = aggregated.contracts["dojo_examples::actions::actions"]

        assert actions.name == "dojo_examples::actions::actions"
        assert actions.class_hash == full_registry["dojo_examples::actions::actions"].class_hash
        assert actions.reads == ["Moves", "Position"]
        assert actions.writes == ["Moves", "Position", "Moves"]
        assert actions.abi is None

    def test_computed_value_attached_to_parent(
        self, db: SnapshotDatabase, full_registry: ArtifactRegistry
    ) -> None:
        aggregated = ManifestAggregator(db, full_registry).aggregate(
            classify_modules(db, [EXAMPLES])
        )
        actions = aggregated.contracts["dojo_examples::actions::actions"]
        assert actions.computed == [
            ComputedValueEntrypoint(
                contract="dojo_examples::actions::actions::computed",
                entrypoint="calc",
                model="Position",
            )
        ]

    def test_model_members(self, db: SnapshotDatabase, full_registry: ArtifactRegistry) -> None:
        aggregated = ManifestAggregator(db, full_registry).aggregate(
            classify_modules(db, [EXAMPLES])
        )
        position = aggregated.models["dojo_examples::models::position"]
        assert [(m.name, m.type, m.key) for m in position.members] == [
            ("player", "ContractAddress", True),
            ("x", "u32", False),
            ("y", "u32", False),
        ]

    def test_non_struct_model_skipped(
        self, db: SnapshotDatabase, full_registry: ArtifactRegistry
    ) -> None:
        """Direction is an enum and produces neither a manifest nor an issue."""
        aggregated = ManifestAggregator(db, full_registry).aggregate(
            classify_modules(db, [EXAMPLES])
        )
        assert not any("direction" in key for key in aggregated.models)
        assert not any("direction" in issue.name for issue in aggregated.issues)


class TestAggregateSkips:
    """Tests for non-fatal skips."""

    def test_missing_contract_is_warning(self, db: SnapshotDatabase, snapshot: CompilationSnapshot) -> None:
        registry = _registry_without(snapshot, "dojo_examples::models::position")
        aggregated = ManifestAggregator(db, registry).aggregate(classify_modules(db, [EXAMPLES]))

        assert "dojo_examples::models::position" not in aggregated.contracts
        (issue,) = [i for i in aggregated.issues if i.operation == "aggregate_contract"]
        assert issue.name == "dojo_examples::models::position"
        assert issue.severity is IssueSeverity.WARNING
        assert issue.message == "Contract position not found in target."

    def test_unselected_external_contract_is_info(
        self, db: SnapshotDatabase, snapshot: CompilationSnapshot
    ) -> None:
        registry = _registry_without(snapshot, "dojo_erc::erc721::ERC721")
        aggregated = ManifestAggregator(db, registry).aggregate(classify_modules(db, [DOJO], [ERC]))

        assert sorted(aggregated.contracts) == ["dojo_erc::erc20::ERC20"]
        (issue,) = aggregated.issues
        assert issue.name == "dojo_erc::erc721::ERC721"
        assert issue.severity is IssueSeverity.INFO

    def test_missing_model_is_info(self, db: SnapshotDatabase, snapshot: CompilationSnapshot) -> None:
        registry = _registry_without(snapshot, "dojo_examples::models::moves")
        aggregated = ManifestAggregator(db, registry).aggregate(classify_modules(db, [EXAMPLES]))

        assert "dojo_examples::models::moves" not in aggregated.models
        model_issues = [i for i in aggregated.issues if i.operation == "aggregate_model"]
        assert [i.name for i in model_issues] == ["dojo_examples::models::moves"]
        assert model_issues[0].severity is IssueSeverity.INFO


class TestReconciliation:
    """Tests for computed value reconciliation."""

    def test_missing_owner_is_fatal(self, db: SnapshotDatabase, snapshot: CompilationSnapshot) -> None:
        registry = _registry_without(snapshot, "dojo_examples::actions::actions")
        with pytest.raises(ManifestConsistencyError) as exc_info:
            ManifestAggregator(db, registry).aggregate(classify_modules(db, [EXAMPLES]))
        assert exc_info.value.name == "dojo_examples::actions::actions"

    def test_crate_root_computed_value_ignored(
        self, db: SnapshotDatabase, full_registry: ArtifactRegistry
    ) -> None:
        """Top-level modules cannot own computed values."""
        root = ModuleId(EXAMPLES, "dojo_examples")
        modules = [
            ClassifiedModule(root, ComputedValueTag(entrypoint="calc", model="Position")),
        ]
        aggregated = ManifestAggregator(db, full_registry).aggregate(modules)
        assert aggregated.computed == {}

    def test_property_computed_value_attachment(
        self, make_class: Callable[..., dict[str, Any]]
    ) -> None:
        """Exactly one entry lands on the owning contract."""
        snapshot = CompilationSnapshot.model_validate(
            {
                "crates": [
                    {
                        "name": "contract",
                        "modules": [
                            {"path": "contract"},
                            {"path": "contract::inner"},
                        ],
                    }
                ],
                "classes": {"contract": make_class(9)},
            }
        )
        db = SnapshotDatabase(snapshot)
        registry = _registry_without(snapshot)
        crate = CrateId("contract")
        modules = [
            ClassifiedModule(ModuleId(crate, "contract"), ContractTag(declared_names=["contract"])),
            ClassifiedModule(
                ModuleId(crate, "contract::inner"),
                ComputedValueTag(entrypoint="calc", model="Position"),
            ),
        ]

        aggregated = ManifestAggregator(db, registry).aggregate(modules)

        assert aggregated.contracts["contract"].computed == [
            ComputedValueEntrypoint(contract="contract::inner", entrypoint="calc", model="Position")
        ]

    def test_inputs_not_mutated(self, db: SnapshotDatabase, full_registry: ArtifactRegistry) -> None:
        modules = classify_modules(db, [EXAMPLES])
        before = list(modules)
        ManifestAggregator(db, full_registry).aggregate(modules)
        assert modules == before
