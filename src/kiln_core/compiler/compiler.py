"""Compiler class for kiln.

This module implements the build pipeline that turns a compilation
snapshot and kiln.yaml into class files, manifests and ABIs.

Pipeline:
1. Main crates: project crates plus the crates of the system contracts
2. Contracts to compile: every project contract plus selected externals
3. Compilation and class hashing (class files written to target-dir)
4. System contract check, before any manifest is written
5. Classification of every module of the main and external crates
6. Aggregation and reconciliation of contract and model manifests
7. Merge-on-write of system, contract and model manifests
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from kiln_core.compiler.access import ModelAccessRecord
from kiln_core.compiler.aggregator import ManifestAggregator, build_system_manifests
from kiln_core.compiler.classifier import classify_modules, find_project_contracts
from kiln_core.compiler.config_resolver import ConfigResolver
from kiln_core.compiler.database import (
    ContractCompiler,
    SemanticDatabase,
    SnapshotCompiler,
    SnapshotDatabase,
)
from kiln_core.compiler.models import BuildPlan, BuildReport
from kiln_core.compiler.registry import ArtifactRegistry
from kiln_core.compiler.selectors import collect_core_crate_ids, collect_selector_crate_ids
from kiln_core.compiler.writer import ManifestLayout, ManifestWriter
from kiln_core.errors import ConfigurationError
from kiln_core.schemas import BuildConfig, CompilationSnapshot

logger = logging.getLogger(__name__)

# Package version - keep in sync with pyproject.toml
KILN_CORE_VERSION = "0.1.0"


class Compiler:
    """Build a kiln project.

    Example:
        >>> compiler = Compiler()
        >>> # With auto-discovered kiln.yaml and the snapshot it names
        >>> report = compiler.compile()
        >>>
        >>> # With an explicit configuration and snapshot
        >>> report = compiler.compile("project/kiln.yaml", snapshot="out/semantic.json")
        >>>
        >>> # Against another SemanticDatabase / ContractCompiler
        >>> report = compiler.run(config, db, contract_compiler, access)
    """

    def __init__(self, project_dir: Path | None = None) -> None:
        """Initialize the Compiler.

        Args:
            project_dir: Directory searched for kiln.yaml and against which
                relative paths are resolved when no configuration file is
                involved. Defaults to the working directory.
        """
        self.project_dir = project_dir or Path.cwd()

    def compile(
        self,
        config_path: Path | str | None = None,
        snapshot: Path | str | None = None,
    ) -> BuildReport:
        """Load kiln.yaml and the snapshot, then run the full build.

        Args:
            config_path: Path to kiln.yaml. Discovered when None.
            snapshot: Snapshot path overriding the one in kiln.yaml.

        Returns:
            Report of the files written.

        Raises:
            FileNotFoundError: If kiln.yaml or the snapshot is missing.
            yaml.YAMLError: If kiln.yaml is invalid YAML.
            pydantic.ValidationError: If kiln.yaml is invalid.
            ConfigurationError: If the snapshot is invalid.
            KilnError: If the build fails.
        """
        config, base_dir, loaded = self._load(config_path, snapshot)
        return self.run(
            config,
            SnapshotDatabase(loaded),
            SnapshotCompiler(loaded),
            ModelAccessRecord.from_snapshot(loaded),
            base_dir=base_dir,
        )

    def plan(
        self,
        config_path: Path | str | None = None,
        snapshot: Path | str | None = None,
    ) -> BuildPlan:
        """Classify and aggregate without writing any file.

        Raises:
            Same as ``compile``.
        """
        config, _, loaded = self._load(config_path, snapshot)
        plan, _ = self._prepare(
            config,
            SnapshotDatabase(loaded),
            SnapshotCompiler(loaded),
            ModelAccessRecord.from_snapshot(loaded),
            target_dir=None,
        )
        return plan

    def run(
        self,
        config: BuildConfig,
        db: SemanticDatabase,
        contract_compiler: ContractCompiler,
        access: ModelAccessRecord | None = None,
        *,
        base_dir: Path | None = None,
    ) -> BuildReport:
        """Run the build against a semantic database and contract compiler.

        Args:
            config: Build configuration.
            db: Semantic database.
            contract_compiler: Compiles contract declarations.
            access: Model reads and writes recorded by the front end.
            base_dir: Directory relative config paths resolve against.
                Defaults to the project directory.

        Returns:
            Report of the files written.

        Raises:
            CompilationError: If the compiler output is unusable.
            ArtifactHashError / ArtifactRegistryError: If hashing fails.
            MissingSystemContractError: If world, executor or base is missing.
            ManifestConsistencyError: If a computed value has no contract.
            ManifestParseError / ManifestWriteError: If persistence fails.
        """
        base_dir = base_dir or self.project_dir
        target_dir = config.resolve_path(config.target_dir, base_dir)
        manifest_root = config.resolve_path(config.manifest_root, base_dir)

        plan, registry = self._prepare(
            config,
            db,
            contract_compiler,
            access or ModelAccessRecord.empty(),
            target_dir=target_dir,
        )

        writer = ManifestWriter(ManifestLayout(manifest_root))
        written = [writer.write(entry) for entry in plan.entries()]

        logger.info(
            "Build complete",
            extra={
                "project": config.name,
                "class_files": len(registry.class_files),
                "manifests": len(written),
                "issues": len(plan.issues),
            },
        )

        return BuildReport(
            project=config.name,
            compiled_at=datetime.now(timezone.utc),
            kiln_version=KILN_CORE_VERSION,
            class_files=[str(path) for path in registry.class_files],
            manifests=[str(item.manifest_path) for item in written],
            contracts=sorted(plan.aggregated.contracts),
            models=sorted(plan.aggregated.models),
            issues=list(plan.issues),
        )

    def _load(
        self,
        config_path: Path | str | None,
        snapshot: Path | str | None,
    ) -> tuple[BuildConfig, Path, CompilationSnapshot]:
        """Load kiln.yaml and the compilation snapshot.

        Returns:
            The configuration, its directory and the snapshot.
        """
        resolved = ConfigResolver(self.project_dir).find(config_path)
        config = BuildConfig.from_yaml(resolved)
        base_dir = resolved.parent

        snapshot_path = Path(snapshot) if snapshot else config.resolve_path(config.snapshot, base_dir)
        logger.info("Loading compilation snapshot from %s", snapshot_path)
        return config, base_dir, self._load_snapshot(snapshot_path)

    def _load_snapshot(self, path: Path) -> CompilationSnapshot:
        """Load the snapshot, reporting invalid content against its own file.

        Raises:
            FileNotFoundError: If the snapshot is missing.
            ConfigurationError: If it is not valid JSON or not a valid snapshot.
        """
        try:
            return CompilationSnapshot.from_json(path)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON at line {e.lineno}, column {e.colno}: {e.msg}",
                file_path=str(path),
                internal_details=str(e),
            ) from e
        except ValidationError as e:
            error = e.errors()[0]
            raise ConfigurationError(
                f"Invalid compilation snapshot: {error['msg']}",
                file_path=str(path),
                field_path=".".join(str(part) for part in error["loc"]),
                internal_details=str(e),
            ) from e

    def _prepare(
        self,
        config: BuildConfig,
        db: SemanticDatabase,
        contract_compiler: ContractCompiler,
        access: ModelAccessRecord,
        *,
        target_dir: Path | None,
    ) -> tuple[BuildPlan, ArtifactRegistry]:
        selectors = config.external_contracts

        main_crate_ids = list(dict.fromkeys([*db.main_crate_ids(), *collect_core_crate_ids(db)]))
        declarations = find_project_contracts(db, main_crate_ids, selectors)
        logger.debug("Contracts to compile: %s", [d.full_path for d in declarations])

        classes = contract_compiler.compile(declarations)
        registry = ArtifactRegistry.build(
            declarations,
            classes,
            target_dir=target_dir,
            fail_fast=config.fail_fast,
        )

        # Fatal before any manifest is written
        system = build_system_manifests(registry)

        external_crate_ids = collect_selector_crate_ids(db, selectors)
        modules = classify_modules(db, main_crate_ids, external_crate_ids)
        aggregated = ManifestAggregator(db, registry, access).aggregate(modules)

        names = [
            *(manifest.name for manifest in system),
            *aggregated.contracts,
            *aggregated.models,
        ]
        plan = BuildPlan(
            declarations=[declaration.full_path for declaration in declarations],
            system=system,
            aggregated=aggregated,
            abis={name: registry[name].abi for name in names},
        )
        return plan, registry
