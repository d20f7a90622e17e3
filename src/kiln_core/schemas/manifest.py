"""Manifest models persisted by kiln.

A manifest describes one compiled unit: its name, class hash, ABI
reference and derived metadata. Manifests are written as TOML and read back
on the next build so operator-owned fields survive regeneration.

Manifest kinds:
- ClassManifest ("Class"): world, executor and base system contracts
- ContractManifest ("DojoContract"): user contracts (systems)
- ModelManifest ("DojoModel"): data-schema models

Manifests accept unknown keys. Anything the build does not compute is
treated as operator-owned and carried over by the merge step.
"""

from __future__ import annotations

from typing import Annotated, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

from kiln_core.schemas.annotations import ModelMember

# Class hash rendering: 0x + 64 lowercase hex digits
CLASS_HASH_PATTERN = r"^0x[0-9a-f]{64}$"


class ComputedValueEntrypoint(BaseModel):
    """A contract entrypoint computing a value for a model.

    Attributes:
        contract: Qualified path of the module exposing the entrypoint.
        entrypoint: Entrypoint name.
        model: Model the value is computed for.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    contract: str = Field(..., min_length=1)
    entrypoint: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)


class BaseManifest(BaseModel):
    """Fields shared by every manifest kind.

    Attributes:
        class_hash: Class hash of the compiled artifact.
        abi: Path of the ABI file relative to the manifest root.
        name: Fully qualified path of the unit (registry key).
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    # Fields the build never recomputes; the previous value wins on merge.
    operator_fields: ClassVar[tuple[str, ...]] = ()

    class_hash: str = Field(
        ...,
        pattern=CLASS_HASH_PATTERN,
        description="Class hash of the compiled artifact",
    )
    abi: str | None = Field(
        default=None,
        description="ABI file path relative to the manifest root",
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Fully qualified path of the unit",
    )

    @property
    def short_name(self) -> str:
        """Last path segment of the name, used for file names."""
        return self.name.rsplit("::", 1)[-1]


class ClassManifest(BaseManifest):
    """Manifest of a system contract class (world, executor, base)."""

    kind: Literal["Class"] = "Class"


class ContractManifest(BaseManifest):
    """Manifest of a user contract.

    Attributes:
        address: Deployed address, set by deployment tooling or operators.
        init_calldata: Constructor calldata, set by operators.
        reads: Models read by the contract (sorted, unique).
        writes: Models written by the contract (encounter order).
        computed: Computed value entrypoints exposed by the contract.
    """

    operator_fields: ClassVar[tuple[str, ...]] = ("address", "init_calldata")

    kind: Literal["DojoContract"] = "DojoContract"
    address: str | None = Field(
        default=None,
        description="Deployed contract address (operator-owned)",
    )
    init_calldata: list[str] | None = Field(
        default=None,
        description="Constructor calldata (operator-owned)",
    )
    reads: list[str] = Field(
        default_factory=list,
        description="Models read by the contract",
    )
    writes: list[str] = Field(
        default_factory=list,
        description="Models written by the contract",
    )
    computed: list[ComputedValueEntrypoint] = Field(
        default_factory=list,
        description="Computed value entrypoints",
    )


class ModelManifest(BaseManifest):
    """Manifest of a model.

    Attributes:
        members: Model members in declaration order.
    """

    kind: Literal["DojoModel"] = "DojoModel"
    members: list[ModelMember] = Field(
        default_factory=list,
        description="Model members",
    )


Manifest = Annotated[
    ClassManifest | ContractManifest | ModelManifest,
    Field(discriminator="kind"),
]

MANIFEST_TYPES: dict[str, type[BaseManifest]] = {
    "Class": ClassManifest,
    "DojoContract": ContractManifest,
    "DojoModel": ModelManifest,
}
