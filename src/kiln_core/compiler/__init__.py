"""Compiler module for kiln.

This module exports the build pipeline and its stages:
- Compiler: Runs a complete build
- ConfigResolver: Locate and load kiln.yaml
- ArtifactRegistry: Class hashes and ABIs by contract path
- classify_modules / find_project_contracts: Module classification
- ManifestAggregator: Contract and model manifests
- merge_manifest / ManifestWriter: Merge-on-write persistence
- ModelAccessRecord: Model reads and writes per contract
- SnapshotDatabase / SnapshotCompiler: Snapshot-backed collaborators
"""

from __future__ import annotations

from kiln_core.compiler.access import ModelAccessRecord, extract_reads, extract_writes
from kiln_core.compiler.aggregator import (
    ManifestAggregator,
    build_system_manifests,
    to_snake_case,
)
from kiln_core.compiler.classifier import (
    classify_modules,
    find_contracts,
    find_project_contracts,
    iter_module_annotations,
)
from kiln_core.compiler.compiler import KILN_CORE_VERSION, Compiler
from kiln_core.compiler.config_resolver import (
    CONFIG_ENV_VAR,
    CONFIG_FILE_NAME,
    CONFIG_SEARCH_PATHS,
    ConfigNotFoundError,
    ConfigResolver,
)
from kiln_core.compiler.database import (
    ContractCompiler,
    ContractDeclaration,
    CrateId,
    ModuleId,
    SemanticDatabase,
    SnapshotCompiler,
    SnapshotDatabase,
)
from kiln_core.compiler.hashing import HashableClass, compute_class_hash
from kiln_core.compiler.merge import merge_manifest
from kiln_core.compiler.models import (
    AggregatedManifests,
    BuildIssue,
    BuildPlan,
    BuildReport,
    ClassifiedModule,
    CompiledArtifact,
    IssueSeverity,
    ManifestEntry,
)
from kiln_core.compiler.registry import ArtifactRegistry
from kiln_core.compiler.selectors import (
    SYSTEM_CONTRACT_NAMES,
    SYSTEM_CONTRACTS,
    collect_core_crate_ids,
    collect_selector_crate_ids,
)
from kiln_core.compiler.writer import (
    ManifestLayout,
    ManifestWriter,
    WrittenManifest,
    load_manifest,
    serialize_manifest,
)

__all__: list[str] = [
    # Pipeline
    "Compiler",
    "KILN_CORE_VERSION",
    # Configuration
    "ConfigResolver",
    "ConfigNotFoundError",
    "CONFIG_ENV_VAR",
    "CONFIG_FILE_NAME",
    "CONFIG_SEARCH_PATHS",
    # Semantic database boundary
    "SemanticDatabase",
    "ContractCompiler",
    "SnapshotDatabase",
    "SnapshotCompiler",
    "CrateId",
    "ModuleId",
    "ContractDeclaration",
    # Registry
    "ArtifactRegistry",
    "HashableClass",
    "compute_class_hash",
    # Selectors and classification
    "SYSTEM_CONTRACTS",
    "SYSTEM_CONTRACT_NAMES",
    "collect_selector_crate_ids",
    "collect_core_crate_ids",
    "iter_module_annotations",
    "classify_modules",
    "find_contracts",
    "find_project_contracts",
    # Aggregation
    "ManifestAggregator",
    "build_system_manifests",
    "to_snake_case",
    "ModelAccessRecord",
    "extract_reads",
    "extract_writes",
    # Persistence
    "merge_manifest",
    "ManifestLayout",
    "ManifestWriter",
    "WrittenManifest",
    "load_manifest",
    "serialize_manifest",
    # Output models
    "CompiledArtifact",
    "ClassifiedModule",
    "ManifestEntry",
    "BuildIssue",
    "IssueSeverity",
    "AggregatedManifests",
    "BuildPlan",
    "BuildReport",
]
