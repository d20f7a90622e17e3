"""kiln-core: Artifact classification and manifest synthesis.

This package provides:
- Compiler: Build pipeline from compilation snapshot to manifests
- BuildConfig: Pydantic schema for kiln.yaml
- Manifest models persisted as TOML (Class, DojoContract, DojoModel)
- JSON Schema export utilities
"""

from __future__ import annotations

__version__ = "0.1.0"

# Compiler and output models
from kiln_core.compiler import (
    ArtifactRegistry,
    BuildIssue,
    BuildPlan,
    BuildReport,
    CompiledArtifact,
    Compiler,
    ManifestAggregator,
    ManifestWriter,
    merge_manifest,
)

# Error types
from kiln_core.errors import (
    ArtifactHashError,
    ArtifactRegistryError,
    CompilationError,
    ConfigurationError,
    KilnError,
    ManifestConsistencyError,
    ManifestParseError,
    ManifestWriteError,
    MissingSystemContractError,
)

# JSON Schema export functions
from kiln_core.export import export_build_config_schema, export_manifest_schema

# Schema models
from kiln_core.schemas import (
    BuildConfig,
    ClassManifest,
    CompilationSnapshot,
    ContractClass,
    ContractManifest,
    ContractSelector,
    ModelManifest,
)

__all__ = [
    "__version__",
    # Compiler
    "Compiler",
    "ArtifactRegistry",
    "ManifestAggregator",
    "ManifestWriter",
    "merge_manifest",
    "CompiledArtifact",
    "BuildIssue",
    "BuildPlan",
    "BuildReport",
    # Errors
    "KilnError",
    "ConfigurationError",
    "CompilationError",
    "ArtifactHashError",
    "ArtifactRegistryError",
    "MissingSystemContractError",
    "ManifestConsistencyError",
    "ManifestParseError",
    "ManifestWriteError",
    # JSON Schema exports
    "export_manifest_schema",
    "export_build_config_schema",
    # Schema models
    "BuildConfig",
    "ContractSelector",
    "CompilationSnapshot",
    "ContractClass",
    "ClassManifest",
    "ContractManifest",
    "ModelManifest",
]
