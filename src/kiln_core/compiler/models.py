"""Build output models for kiln.

This module defines the records produced while a build runs:

- CompiledArtifact: a compiled class with its class hash and ABI
- ClassifiedModule: a module annotation found during classification
- ManifestEntry: a manifest paired with the ABI document it references
- BuildIssue: a non-fatal per-item condition
- AggregatedManifests: result of manifest aggregation
- BuildPlan / BuildReport: results of ``Compiler.plan`` and ``Compiler.run``
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from kiln_core.compiler.database import ModuleId
from kiln_core.schemas.annotations import ModuleAnnotation
from kiln_core.schemas.manifest import (
    CLASS_HASH_PATTERN,
    ClassManifest,
    ComputedValueEntrypoint,
    ContractManifest,
    Manifest,
    ModelManifest,
)


class CompiledArtifact(BaseModel):
    """A compiled class identified by its fully qualified path.

    Attributes:
        qualified_path: Full module path of the contract.
        class_hash: Class hash rendered as 0x + 64 lowercase hex digits.
        abi: ABI entries, None when the class carries no ABI.

    Example:
        >>> artifact = CompiledArtifact(
        ...     qualified_path="dojo::world::world",
        ...     class_hash="0x" + "ab" * 32,
        ...     abi=[],
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    qualified_path: str = Field(..., min_length=1)
    class_hash: str = Field(..., pattern=CLASS_HASH_PATTERN)
    abi: list[dict[str, Any]] | None = None


@dataclass(frozen=True)
class ClassifiedModule:
    """An annotation found on a module.

    Attributes:
        module_id: Annotated module.
        annotation: The annotation.
        external: True when the module belongs to an external crate.
    """

    module_id: ModuleId
    annotation: ModuleAnnotation
    external: bool = False


@dataclass(frozen=True)
class ManifestEntry:
    """A manifest and the ABI document written beside it."""

    manifest: Manifest
    abi: list[dict[str, Any]] | None = None

    @property
    def name(self) -> str:
        return self.manifest.name


class IssueSeverity(str, Enum):
    """Severity of a non-fatal build issue."""

    INFO = "info"
    WARNING = "warning"


class BuildIssue(BaseModel):
    """A per-item condition reported without aborting the build.

    Attributes:
        name: Contract or model path involved.
        operation: Operation that skipped the item.
        severity: info for expected skips, warning for suspicious ones.
        message: Human-readable description.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1)
    operation: str = Field(..., min_length=1)
    severity: IssueSeverity = IssueSeverity.INFO
    message: str = Field(..., min_length=1)


class AggregatedManifests(BaseModel):
    """Contract and model manifests of a build, after reconciliation.

    Attributes:
        contracts: Contract manifests keyed by module path.
        models: Model manifests keyed by model path.
        computed: Computed value groups keyed by owning contract path.
        issues: Items skipped during aggregation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    contracts: dict[str, ContractManifest] = Field(default_factory=dict)
    models: dict[str, ModelManifest] = Field(default_factory=dict)
    computed: dict[str, list[ComputedValueEntrypoint]] = Field(default_factory=dict)
    issues: list[BuildIssue] = Field(default_factory=list)


class BuildPlan(BaseModel):
    """Everything a build would write, computed without touching the manifest tree.

    Attributes:
        declarations: Qualified paths of the contracts compiled.
        system: System contract manifests.
        aggregated: Contract and model manifests.
        abis: ABI entries per manifest name.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    declarations: list[str] = Field(default_factory=list)
    system: list[ClassManifest] = Field(default_factory=list)
    aggregated: AggregatedManifests = Field(default_factory=AggregatedManifests)
    abis: dict[str, list[dict[str, Any]] | None] = Field(default_factory=dict)

    @property
    def issues(self) -> list[BuildIssue]:
        return self.aggregated.issues

    def entries(self) -> list[ManifestEntry]:
        """Return the manifests to write: system, contracts then models, in key order."""
        manifests: list[Manifest] = [
            *sorted(self.system, key=lambda manifest: manifest.name),
            *(self.aggregated.contracts[key] for key in sorted(self.aggregated.contracts)),
            *(self.aggregated.models[key] for key in sorted(self.aggregated.models)),
        ]
        return [
            ManifestEntry(manifest=manifest, abi=self.abis.get(manifest.name))
            for manifest in manifests
        ]


class BuildReport(BaseModel):
    """Summary of a completed build.

    Attributes:
        project: Project name from kiln.yaml.
        compiled_at: Timestamp of the build (UTC).
        kiln_version: Version of kiln-core that produced the build.
        class_files: Class files written to the target directory.
        manifests: Manifest files written.
        contracts: Contract manifest names.
        models: Model manifest names.
        issues: Non-fatal issues.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    project: str
    compiled_at: datetime
    kiln_version: str = Field(..., min_length=1)
    class_files: list[str] = Field(default_factory=list)
    manifests: list[str] = Field(default_factory=list)
    contracts: list[str] = Field(default_factory=list)
    models: list[str] = Field(default_factory=list)
    issues: list[BuildIssue] = Field(default_factory=list)
