"""Manifest aggregation.

Turns classified modules into contract and model manifests:

- ContractTag: one ContractManifest per compiled user contract module
- ModelTag: one ModelManifest per compiled model struct
- ComputedValueTag: computed value entrypoints grouped by owning contract

After every module was scanned, computed value groups are attached to
their contracts and contracts that are also models are dropped.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import assert_never

import structlog

from kiln_core.compiler.access import ModelAccessRecord, extract_reads, extract_writes
from kiln_core.compiler.database import ModuleId, SemanticDatabase
from kiln_core.compiler.models import (
    AggregatedManifests,
    BuildIssue,
    ClassifiedModule,
    CompiledArtifact,
    IssueSeverity,
)
from kiln_core.compiler.selectors import SYSTEM_CONTRACT_NAMES, SYSTEM_CONTRACTS
from kiln_core.errors import ManifestConsistencyError, MissingSystemContractError
from kiln_core.schemas.annotations import ComputedValueTag, ContractTag, ModelTag
from kiln_core.schemas.manifest import (
    ClassManifest,
    ComputedValueEntrypoint,
    ContractManifest,
    ModelManifest,
)
from kiln_core.schemas.selector import CAIRO_PATH_SEPARATOR
from kiln_core.schemas.snapshot import ItemKind

logger = structlog.get_logger(__name__)

_WORD_BOUNDARY = re.compile(
    r"(?<=[a-z])(?=[A-Z0-9])"  # fooBar, foo2
    r"|(?<=[A-Z])(?=[A-Z][a-z])"  # HTTPServer
    r"|(?<=[A-Z])(?=[0-9])"  # V2
    r"|(?<=[0-9])(?=[A-Za-z])"  # 2D
)


def to_snake_case(name: str) -> str:
    """Convert a model name to the snake case used for its compiled contract.

    Example:
        >>> to_snake_case("PlayerPosition")
        'player_position'
        >>> to_snake_case("Vec2")
        'vec_2'
        >>> to_snake_case("HTTPServer")
        'http_server'
    """
    spaced = _WORD_BOUNDARY.sub("_", name)
    words = [word for word in re.split(r"[_\-\s]+", spaced) if word]
    return "_".join(word.lower() for word in words)


def build_system_manifests(registry: Mapping[str, CompiledArtifact]) -> list[ClassManifest]:
    """Return the manifests of world, executor and base.

    Raises:
        MissingSystemContractError: Naming every system contract absent
            from the registry.
    """
    missing = [path for path in SYSTEM_CONTRACTS if path not in registry]
    if missing:
        raise MissingSystemContractError(missing)

    return [
        ClassManifest(name=path, class_hash=registry[path].class_hash)
        for path in SYSTEM_CONTRACTS
    ]


class ManifestAggregator:
    """Builds contract and model manifests from classified modules.

    Attributes:
        db: Semantic database, used for item kinds and write resolution.
        registry: Compiled artifacts by qualified path.
        access: Model reads and writes recorded by the front end.

    Example:
        >>> aggregator = ManifestAggregator(db, registry, ModelAccessRecord.empty())
        >>> aggregated = aggregator.aggregate(classify_modules(db, crate_ids))
        >>> sorted(aggregated.contracts)
        ['dojo_examples::actions::actions']
    """

    def __init__(
        self,
        db: SemanticDatabase,
        registry: Mapping[str, CompiledArtifact],
        access: ModelAccessRecord | None = None,
    ) -> None:
        self.db = db
        self.registry = registry
        self.access = access or ModelAccessRecord.empty()
        self._log = logger.bind(component="manifest_aggregator")

    def aggregate(self, modules: Iterable[ClassifiedModule]) -> AggregatedManifests:
        """Scan every classified module, then reconcile.

        Raises:
            ManifestConsistencyError: If a computed value belongs to a
                contract without a manifest.
        """
        contracts: dict[str, ContractManifest] = {}
        models: dict[str, ModelManifest] = {}
        computed: dict[str, list[ComputedValueEntrypoint]] = {}
        issues: list[BuildIssue] = []

        for module in modules:
            annotation = module.annotation
            if isinstance(annotation, ContractTag):
                self._collect_contracts(module, annotation, contracts, issues)
            elif isinstance(annotation, ModelTag):
                self._collect_models(module.module_id, annotation, models, issues)
            elif isinstance(annotation, ComputedValueTag):
                self._collect_computed(module.module_id, annotation, computed)
            else:
                assert_never(annotation)

        contracts = self._reconcile(contracts, models, computed)

        self._log.info(
            "aggregation_completed",
            contracts=len(contracts),
            models=len(models),
            computed=sum(len(entries) for entries in computed.values()),
            issues=len(issues),
        )
        return AggregatedManifests(
            contracts=contracts,
            models=models,
            computed=computed,
            issues=issues,
        )

    def _collect_contracts(
        self,
        module: ClassifiedModule,
        tag: ContractTag,
        contracts: dict[str, ContractManifest],
        issues: list[BuildIssue],
    ) -> None:
        path = module.module_id.path
        for name in tag.declared_names:
            if name in SYSTEM_CONTRACT_NAMES:
                continue

            artifact = self.registry.get(path)
            if artifact is None:
                severity = IssueSeverity.INFO if module.external else IssueSeverity.WARNING
                message = f"Contract {name} not found in target."
                issues.append(
                    BuildIssue(
                        name=path,
                        operation="aggregate_contract",
                        severity=severity,
                        message=message,
                    )
                )
                if module.external:
                    self._log.info("contract_not_selected", contract=path, declared_name=name)
                else:
                    self._log.warning("contract_not_found", contract=path, declared_name=name)
                continue

            contracts[path] = ContractManifest(
                name=path,
                class_hash=artifact.class_hash,
                reads=extract_reads(self.access, path),
                writes=extract_writes(self.db, self.access, module.module_id),
            )

    def _collect_models(
        self,
        module_id: ModuleId,
        tag: ModelTag,
        models: dict[str, ModelManifest],
        issues: list[BuildIssue],
    ) -> None:
        for model in tag.models:
            if self.db.module_item_kind(module_id, model.name) is not ItemKind.STRUCT:
                self._log.debug("model_not_a_struct", module=module_id.path, model=model.name)
                continue

            key = f"{module_id.path}{CAIRO_PATH_SEPARATOR}{to_snake_case(model.name)}"
            artifact = self.registry.get(key)
            if artifact is None:
                self._log.info("model_not_found", model=key)
                issues.append(
                    BuildIssue(
                        name=key,
                        operation="aggregate_model",
                        severity=IssueSeverity.INFO,
                        message=f"Model {key} not found in target.",
                    )
                )
                continue

            models[key] = ModelManifest(
                name=key,
                class_hash=artifact.class_hash,
                members=list(model.members),
            )

    def _collect_computed(
        self,
        module_id: ModuleId,
        tag: ComputedValueTag,
        computed: dict[str, list[ComputedValueEntrypoint]],
    ) -> None:
        owner = module_id.parent_path
        if owner is None:
            self._log.debug("computed_value_on_crate_root", module=module_id.path)
            return

        computed.setdefault(owner, []).append(
            ComputedValueEntrypoint(
                contract=module_id.path,
                entrypoint=tag.entrypoint,
                model=tag.model,
            )
        )

    def _reconcile(
        self,
        contracts: dict[str, ContractManifest],
        models: dict[str, ModelManifest],
        computed: dict[str, list[ComputedValueEntrypoint]],
    ) -> dict[str, ContractManifest]:
        reconciled = dict(contracts)

        for owner, entries in computed.items():
            manifest = reconciled.get(owner)
            if manifest is None:
                self._log.error("computed_value_owner_missing", contract=owner)
                raise ManifestConsistencyError(
                    owner,
                    f"Computed value contract `{owner}` doesn't exist. "
                    "It was annotated by a nested module but produced no contract manifest.",
                )
            reconciled[owner] = manifest.model_copy(update={"computed": list(entries)})

        for key in models:
            if reconciled.pop(key, None) is not None:
                self._log.debug("contract_shadowed_by_model", name=key)

        return reconciled
