"""Compiled contract class models.

This module defines ContractClass, the Sierra class produced by the
contract compiler for one declaration. kiln never interprets the program
itself; it serializes the class to the target directory and hashes it.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EntryPoint(BaseModel):
    """A single Sierra entry point.

    Attributes:
        selector: Entry point selector (felt as a hex string).
        function_idx: Index of the function in the Sierra program.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    selector: str
    function_idx: int = Field(..., ge=0)


class EntryPointsByType(BaseModel):
    """Entry points grouped by kind, as emitted by the Sierra compiler."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    CONSTRUCTOR: list[EntryPoint] = Field(default_factory=list)
    EXTERNAL: list[EntryPoint] = Field(default_factory=list)
    L1_HANDLER: list[EntryPoint] = Field(default_factory=list)


class ContractClass(BaseModel):
    """Compiled Sierra contract class.

    Attributes:
        sierra_program: Sierra program words (felts as hex strings).
        sierra_program_debug_info: Optional debug names emitted by the compiler.
        contract_class_version: Sierra contract class version.
        entry_points_by_type: Entry points grouped by kind.
        abi: Interface description of the contract, if the compiler produced one.

    Example:
        >>> cls = ContractClass(
        ...     sierra_program=["0x1", "0x2"],
        ...     entry_points_by_type={"EXTERNAL": [{"selector": "0x3", "function_idx": 0}]},
        ...     abi=[{"type": "function", "name": "spawn"}],
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    sierra_program: list[str] = Field(
        ...,
        description="Sierra program words",
    )
    sierra_program_debug_info: dict[str, Any] | None = Field(
        default=None,
        description="Sierra debug information",
    )
    contract_class_version: str = Field(
        default="0.1.0",
        min_length=1,
        description="Sierra contract class version",
    )
    entry_points_by_type: EntryPointsByType = Field(
        default_factory=EntryPointsByType,
        description="Entry points grouped by kind",
    )
    abi: list[dict[str, Any]] | None = Field(
        default=None,
        description="Contract ABI",
    )
