"""Schema definitions for kiln.

Input Models:
- BuildConfig / TargetConfig: kiln.yaml
- ContractSelector: External contract selection
- CompilationSnapshot: Semantic database and classes exported by the front end
- ContractClass: Compiled Sierra class
- ContractTag / ModelTag / ComputedValueTag: Module annotations

Persisted Models:
- ClassManifest / ContractManifest / ModelManifest: Manifest files
- ComputedValueEntrypoint: Computed value binding of a contract
"""

from __future__ import annotations

from kiln_core.schemas.annotations import (
    ComputedValueTag,
    ContractTag,
    ModelDeclaration,
    ModelMember,
    ModelTag,
    ModuleAnnotation,
)
from kiln_core.schemas.build_config import BuildConfig, TargetConfig
from kiln_core.schemas.contract_class import ContractClass, EntryPoint, EntryPointsByType
from kiln_core.schemas.manifest import (
    MANIFEST_TYPES,
    BaseManifest,
    ClassManifest,
    ComputedValueEntrypoint,
    ContractManifest,
    Manifest,
    ModelManifest,
)
from kiln_core.schemas.selector import CAIRO_PATH_SEPARATOR, ContractSelector
from kiln_core.schemas.snapshot import (
    CompilationSnapshot,
    CrateInfo,
    GeneratedFileInfo,
    ItemKind,
    ModuleInfo,
    PathWrite,
    StructWrite,
    WriteOperation,
)

__all__: list[str] = [
    # Configuration
    "BuildConfig",
    "TargetConfig",
    "ContractSelector",
    "CAIRO_PATH_SEPARATOR",
    # Snapshot
    "CompilationSnapshot",
    "CrateInfo",
    "ModuleInfo",
    "GeneratedFileInfo",
    "ItemKind",
    "StructWrite",
    "PathWrite",
    "WriteOperation",
    "ContractClass",
    "EntryPoint",
    "EntryPointsByType",
    # Annotations
    "ModuleAnnotation",
    "ContractTag",
    "ModelTag",
    "ModelDeclaration",
    "ModelMember",
    "ComputedValueTag",
    # Manifests
    "Manifest",
    "MANIFEST_TYPES",
    "BaseManifest",
    "ClassManifest",
    "ContractManifest",
    "ModelManifest",
    "ComputedValueEntrypoint",
]
