"""Compilation snapshot models.

The upstream Cairo front end exports its semantic database and the compiled
classes of a build as one JSON document. kiln reads that document through
these models and never talks to the compiler directly.

Document shape::

    {
      "version": "1.0.0",
      "main_crates": ["dojo_examples"],
      "crates": [
        {"name": "dojo_examples", "modules": [
          {"path": "dojo_examples::actions::actions",
           "items": {"spawn": "function"},
           "generated_files": [null, {"name": "contract", "aux_data": {...}}],
           "bindings": {"spawn": {"position": "Position"}}}
        ]}
      ],
      "classes": {"dojo_examples::actions::actions": {...}},
      "model_reads": {"dojo_examples::actions::actions": ["Moves"]},
      "model_writes": {"dojo_examples::actions::actions": [{"kind": "struct", "model": "Moves"}]}
    }
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from kiln_core.schemas.annotations import ModuleAnnotation
from kiln_core.schemas.contract_class import ContractClass

MODULE_PATH_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*(::[A-Za-z_][A-Za-z0-9_]*)*$"


class ItemKind(str, Enum):
    """Kind of a module item."""

    STRUCT = "struct"
    ENUM = "enum"
    FUNCTION = "function"
    MODULE = "module"
    TRAIT = "trait"
    IMPL = "impl"
    CONSTANT = "constant"
    USE = "use"
    TYPE_ALIAS = "type_alias"
    EXTERN = "extern"


class GeneratedFileInfo(BaseModel):
    """A file generated for a module by a compiler plugin.

    Attributes:
        name: Generated file name.
        aux_data: Annotation attached by the plugin, if any.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = ""
    aux_data: ModuleAnnotation | None = None


class StructWrite(BaseModel):
    """A model written from a struct literal."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["struct"] = "struct"
    model: str = Field(..., min_length=1)


class PathWrite(BaseModel):
    """A model written from a variable of an entrypoint."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["path"] = "path"
    entrypoint: str = Field(..., min_length=1)
    variable: str = Field(..., min_length=1)


WriteOperation = Annotated[StructWrite | PathWrite, Field(discriminator="kind")]


class ModuleInfo(BaseModel):
    """Semantic information about one module.

    Attributes:
        path: Fully qualified module path.
        items: Items declared by the module, by name.
        generated_files: Generated files; the first is the module's own source.
        bindings: Local variable types per entrypoint.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str = Field(..., pattern=MODULE_PATH_PATTERN)
    items: dict[str, ItemKind] = Field(default_factory=dict)
    generated_files: list[GeneratedFileInfo | None] = Field(default_factory=list)
    bindings: dict[str, dict[str, str]] = Field(default_factory=dict)


class CrateInfo(BaseModel):
    """A crate and its modules."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    modules: list[ModuleInfo] = Field(default_factory=list)

    @model_validator(mode="after")
    def _modules_belong_to_crate(self) -> CrateInfo:
        for module in self.modules:
            if module.path != self.name and not module.path.startswith(f"{self.name}::"):
                raise ValueError(f"module '{module.path}' is not part of crate '{self.name}'")
        return self


class CompilationSnapshot(BaseModel):
    """Semantic database and compiled classes exported by the front end.

    Attributes:
        version: Snapshot format version.
        main_crates: Crates of the project being built.
        crates: Every crate visible to the build.
        classes: Compiled classes by qualified contract path.
        model_reads: Models read per contract path.
        model_writes: Write operations per contract path.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str = Field(default="1.0.0")
    main_crates: list[str] = Field(default_factory=list)
    crates: list[CrateInfo] = Field(default_factory=list)
    classes: dict[str, ContractClass] = Field(default_factory=dict)
    model_reads: dict[str, list[str]] = Field(default_factory=dict)
    model_writes: dict[str, list[WriteOperation]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _unique_crates(self) -> CompilationSnapshot:
        names = [crate.name for crate in self.crates]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate crates in snapshot: {', '.join(duplicates)}")
        return self

    @classmethod
    def from_json(cls, path: str | Path) -> CompilationSnapshot:
        """Load and validate a snapshot from a JSON file.

        Args:
            path: Path to the snapshot file.

        Returns:
            Validated CompilationSnapshot instance.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            json.JSONDecodeError: If the JSON is invalid.
            pydantic.ValidationError: If validation fails.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        return cls.model_validate(json.loads(path.read_text()))
