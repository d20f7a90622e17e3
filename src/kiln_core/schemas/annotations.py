"""Module annotation models.

The semantic analyser attaches aux data to the files it generates for a
module. kiln understands three kinds, modelled as a closed union
discriminated by ``kind``:

- ContractTag: the module is a contract declaring one or more names
- ModelTag: the module declares one or more data-schema models
- ComputedValueTag: the module exposes a computed value bound to a model

A generated file without aux data carries ``None``.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class ContractTag(BaseModel):
    """Marks a module compiled as a contract.

    Attributes:
        declared_names: Contract names declared by the module.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["contract"] = "contract"
    declared_names: list[str] = Field(default_factory=list)


class ModelMember(BaseModel):
    """A single member of a model struct.

    Attributes:
        name: Member name.
        type: Member type as written in the source.
        key: Whether the member is part of the model key.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    key: bool = False


class ModelDeclaration(BaseModel):
    """A model struct declared in a module."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1)
    members: list[ModelMember] = Field(default_factory=list)


class ModelTag(BaseModel):
    """Marks a module declaring models.

    Attributes:
        models: Declared models with their members.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["model"] = "model"
    models: list[ModelDeclaration] = Field(default_factory=list)


class ComputedValueTag(BaseModel):
    """Marks a module exposing a computed value.

    Attributes:
        entrypoint: Function computing the value.
        model: Model the value is derived for.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["computed_value"] = "computed_value"
    entrypoint: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)


ModuleAnnotation = Annotated[
    ContractTag | ModelTag | ComputedValueTag,
    Field(discriminator="kind"),
]
