"""Artifact registry.

Maps the fully qualified path of every compiled contract to its class
hash and ABI. Built once per build from the compiler's output and
read-only afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path
from types import MappingProxyType

from kiln_core.compiler.database import ContractDeclaration
from kiln_core.compiler.hashing import compute_class_hash
from kiln_core.compiler.models import CompiledArtifact
from kiln_core.compiler.writer import write_atomic
from kiln_core.errors import (
    ArtifactHashError,
    ArtifactRegistryError,
    CompilationError,
    ManifestWriteError,
)
from kiln_core.schemas.contract_class import ContractClass

logger = logging.getLogger(__name__)


class ArtifactRegistry(Mapping[str, CompiledArtifact]):
    """Read-only mapping of qualified path to CompiledArtifact.

    Example:
        >>> registry = ArtifactRegistry.build(declarations, classes, target_dir=Path("target/dev"))
        >>> registry["dojo::world::world"].class_hash
        '0x...'
    """

    def __init__(
        self,
        artifacts: Mapping[str, CompiledArtifact],
        class_files: Sequence[Path] = (),
    ) -> None:
        self._artifacts = MappingProxyType(dict(artifacts))
        self.class_files: tuple[Path, ...] = tuple(class_files)

    def __getitem__(self, key: str) -> CompiledArtifact:
        return self._artifacts[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._artifacts)

    def __len__(self) -> int:
        return len(self._artifacts)

    @classmethod
    def build(
        cls,
        declarations: Sequence[ContractDeclaration],
        classes: Sequence[ContractClass],
        *,
        target_dir: Path | None = None,
        fail_fast: bool = False,
    ) -> ArtifactRegistry:
        """Hash every compiled class and write its class file.

        Declarations and classes are paired by position.

        Args:
            declarations: Compiled contract declarations.
            classes: Compiled classes, one per declaration, in order.
            target_dir: Directory receiving ``<qualified_path>.json`` class
                files. None skips writing.
            fail_fast: Raise on the first hash failure instead of
                collecting all of them.

        Returns:
            The populated registry.

        Raises:
            CompilationError: If declarations and classes differ in length.
            ArtifactHashError: On the first failure when fail_fast is set.
            ArtifactRegistryError: After all classes were processed, when
                any of them failed.
            ManifestWriteError: If a class file cannot be written.
        """
        if len(declarations) != len(classes):
            raise CompilationError(
                f"Compiler returned {len(classes)} classes for {len(declarations)} contracts"
            )

        artifacts: dict[str, CompiledArtifact] = {}
        class_files: list[Path] = []
        failures: list[ArtifactHashError] = []

        for declaration, contract_class in zip(declarations, classes, strict=True):
            qualified_path = declaration.full_path

            if target_dir is not None:
                class_files.append(_write_class_file(target_dir, qualified_path, contract_class))

            try:
                class_hash = compute_class_hash(qualified_path, contract_class)
            except ArtifactHashError as e:
                if fail_fast:
                    raise
                logger.error("Skipping %s: %s", qualified_path, e.reason)
                failures.append(e)
                continue

            artifacts[qualified_path] = CompiledArtifact(
                qualified_path=qualified_path,
                class_hash=class_hash,
                abi=contract_class.abi,
            )

        if failures:
            raise ArtifactRegistryError(failures)

        logger.info(
            "Artifact registry built",
            extra={"artifacts": len(artifacts), "class_files": len(class_files)},
        )
        return cls(artifacts, class_files)


def _write_class_file(target_dir: Path, qualified_path: str, contract_class: ContractClass) -> Path:
    path = target_dir / f"{qualified_path}.json"
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        write_atomic(path, contract_class.model_dump_json(indent=2))
    except OSError as e:
        raise ManifestWriteError(str(path), qualified_path, str(e)) from e
    return path
