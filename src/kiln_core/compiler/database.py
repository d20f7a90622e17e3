"""Semantic database boundary.

kiln consumes the upstream compiler through two small protocols:

- SemanticDatabase: crates, modules, generated-file aux data, item kinds
  and entrypoint bindings
- ContractCompiler: turns contract declarations into compiled classes,
  one class per declaration, in order

SnapshotDatabase and SnapshotCompiler implement both over a
CompilationSnapshot exported by the front end.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, NewType, Protocol

from kiln_core.errors import CompilationError
from kiln_core.schemas.selector import CAIRO_PATH_SEPARATOR

if TYPE_CHECKING:
    from kiln_core.schemas.contract_class import ContractClass
    from kiln_core.schemas.snapshot import (
        CompilationSnapshot,
        GeneratedFileInfo,
        ItemKind,
        ModuleInfo,
    )

logger = logging.getLogger(__name__)

CrateId = NewType("CrateId", str)


@dataclass(frozen=True)
class ModuleId:
    """Identity of a module within a crate.

    Attributes:
        crate: Crate owning the module.
        path: Fully qualified module path.
    """

    crate: CrateId
    path: str

    @property
    def full_path(self) -> str:
        return self.path

    @property
    def is_submodule(self) -> bool:
        """True for every module except the crate root."""
        return CAIRO_PATH_SEPARATOR in self.path

    @property
    def parent_path(self) -> str | None:
        """Path of the enclosing module, None for the crate root."""
        if not self.is_submodule:
            return None
        return self.path.rsplit(CAIRO_PATH_SEPARATOR, 1)[0]


@dataclass(frozen=True)
class ContractDeclaration:
    """A module declared as a contract."""

    module_id: ModuleId

    @property
    def full_path(self) -> str:
        return self.module_id.path


class SemanticDatabase(Protocol):
    """Queries kiln needs from the compiler's semantic database."""

    def main_crate_ids(self) -> list[CrateId]:
        """Return the crates of the project being built."""
        ...

    def intern_crate(self, package_name: str) -> CrateId:
        """Map a package name to a crate id."""
        ...

    def crate_modules(self, crate_id: CrateId) -> list[ModuleId]:
        """Return every module of a crate, crate root first."""
        ...

    def module_generated_file_infos(self, module_id: ModuleId) -> list[GeneratedFileInfo | None]:
        """Return the generated files of a module; the first is its own source."""
        ...

    def module_item_kind(self, module_id: ModuleId, name: str) -> ItemKind | None:
        """Return the kind of a named item of a module, None if absent."""
        ...

    def resolve_binding(self, module_id: ModuleId, entrypoint: str, variable: str) -> str | None:
        """Return the type of a local variable of an entrypoint, None if unknown."""
        ...


class ContractCompiler(Protocol):
    """Compiles contract declarations into classes (1:1, order-preserving)."""

    def compile(self, declarations: Sequence[ContractDeclaration]) -> list[ContractClass]: ...


class SnapshotDatabase:
    """SemanticDatabase backed by a CompilationSnapshot.

    Example:
        >>> snapshot = CompilationSnapshot.from_json("target/dev/semantic.json")
        >>> db = SnapshotDatabase(snapshot)
        >>> db.crate_modules(db.intern_crate("dojo_examples"))
    """

    def __init__(self, snapshot: CompilationSnapshot) -> None:
        self.snapshot = snapshot
        self._modules: dict[CrateId, list[ModuleInfo]] = {
            CrateId(crate.name): list(crate.modules) for crate in snapshot.crates
        }
        self._module_index: dict[str, ModuleInfo] = {
            module.path: module for modules in self._modules.values() for module in modules
        }

    def main_crate_ids(self) -> list[CrateId]:
        return [CrateId(name) for name in self.snapshot.main_crates]

    def intern_crate(self, package_name: str) -> CrateId:
        return CrateId(package_name)

    def crate_modules(self, crate_id: CrateId) -> list[ModuleId]:
        modules = self._modules.get(crate_id)
        if modules is None:
            logger.debug("Crate %s not present in snapshot", crate_id)
            return []
        return [ModuleId(crate=crate_id, path=module.path) for module in modules]

    def module_generated_file_infos(self, module_id: ModuleId) -> list[GeneratedFileInfo | None]:
        module = self._module_index.get(module_id.path)
        return list(module.generated_files) if module else []

    def module_item_kind(self, module_id: ModuleId, name: str) -> ItemKind | None:
        module = self._module_index.get(module_id.path)
        return module.items.get(name) if module else None

    def resolve_binding(self, module_id: ModuleId, entrypoint: str, variable: str) -> str | None:
        module = self._module_index.get(module_id.path)
        if module is None:
            return None
        return module.bindings.get(entrypoint, {}).get(variable)


class SnapshotCompiler:
    """ContractCompiler returning the classes precompiled in a snapshot."""

    def __init__(self, snapshot: CompilationSnapshot) -> None:
        self.snapshot = snapshot

    def compile(self, declarations: Sequence[ContractDeclaration]) -> list[ContractClass]:
        """Return the compiled class of every declaration, in order.

        Raises:
            CompilationError: If a declaration has no compiled class.
        """
        classes: list[ContractClass] = []
        for declaration in declarations:
            contract_class = self.snapshot.classes.get(declaration.full_path)
            if contract_class is None:
                raise CompilationError(
                    f"Contract `{declaration.full_path}` has no compiled class in the snapshot"
                )
            classes.append(contract_class)
        return classes
