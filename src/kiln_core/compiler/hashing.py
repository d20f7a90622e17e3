"""Class hash computation.

A class hash is computed in three steps:

1. serialize the compiled class to JSON
2. parse the JSON back into HashableClass, the hashing-ready form where
   program words and selectors are felt strings and the ABI is flattened
   to one canonical JSON string
3. SHA-256 over the canonical encoding of HashableClass, prefixed by a
   domain tag carrying the class version

Debug info is not part of the hash. Identical classes always hash to the
same value.
"""

from __future__ import annotations

import hashlib
import json
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from kiln_core.errors import ArtifactHashError
from kiln_core.schemas.contract_class import ContractClass

logger = logging.getLogger(__name__)

# Felt: field element rendered as hex
FELT_PATTERN = r"^0x[0-9a-fA-F]{1,64}$"

CLASS_HASH_DOMAIN = b"CONTRACT_CLASS_V"


class HashableEntryPoint(BaseModel):
    """Entry point in hashing-ready form."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    selector: str = Field(..., pattern=FELT_PATTERN)
    function_idx: int = Field(..., ge=0)

    @field_validator("selector")
    @classmethod
    def _normalize_selector(cls, value: str) -> str:
        return hex(int(value, 16))


class HashableEntryPoints(BaseModel):
    """Entry points by type in hashing-ready form."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    CONSTRUCTOR: list[HashableEntryPoint] = Field(default_factory=list)
    EXTERNAL: list[HashableEntryPoint] = Field(default_factory=list)
    L1_HANDLER: list[HashableEntryPoint] = Field(default_factory=list)


class HashableClass(BaseModel):
    """Compiled class reduced to the fields covered by the class hash.

    Attributes:
        contract_class_version: Sierra class version.
        entry_points_by_type: Entry points by type.
        sierra_program: Program words as felts.
        abi: ABI as canonical JSON text ("" when absent).
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    contract_class_version: str = Field(..., min_length=1)
    entry_points_by_type: HashableEntryPoints
    sierra_program: list[str] = Field(..., min_length=1)
    abi: str = ""

    @field_validator("sierra_program")
    @classmethod
    def _validate_program(cls, value: list[str]) -> list[str]:
        for index, word in enumerate(value):
            if not isinstance(word, str) or not _is_felt(word):
                raise ValueError(f"program word {index} is not a felt: {word!r}")
        return [hex(int(word, 16)) for word in value]

    @field_validator("abi", mode="before")
    @classmethod
    def _flatten_abi(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        return json.dumps(value, sort_keys=True, separators=(",", ":"))

    def canonical_bytes(self) -> bytes:
        """Return the canonical encoding the hash is computed over."""
        return json.dumps(
            self.model_dump(mode="json"),
            sort_keys=True,
            separators=(",", ":"),
        ).encode("utf-8")


def _is_felt(value: str) -> bool:
    if not value.startswith("0x") or not 2 < len(value) <= 66:
        return False
    try:
        int(value, 16)
    except ValueError:
        return False
    return True


def to_hashable(qualified_path: str, contract_class: ContractClass) -> HashableClass:
    """Round-trip a compiled class into its hashing-ready form.

    Raises:
        ArtifactHashError: If the serialized class does not parse back.
    """
    serialized = contract_class.model_dump_json()
    try:
        return HashableClass.model_validate(json.loads(serialized))
    except ValidationError as e:
        error = e.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        raise ArtifactHashError(qualified_path, f"{location}: {error['msg']}") from e
    except json.JSONDecodeError as e:
        raise ArtifactHashError(qualified_path, str(e)) from e


def compute_class_hash(qualified_path: str, contract_class: ContractClass) -> str:
    """Compute the class hash of a compiled class.

    Args:
        qualified_path: Contract path, used in error messages.
        contract_class: Compiled class.

    Returns:
        Class hash as 0x + 64 lowercase hex digits.

    Raises:
        ArtifactHashError: If the class cannot be brought into hashing form.

    Example:
        >>> compute_class_hash("dojo::world::world", world_class)
        '0x3f5c...'
    """
    hashable = to_hashable(qualified_path, contract_class)
    digest = hashlib.sha256()
    digest.update(CLASS_HASH_DOMAIN)
    digest.update(hashable.contract_class_version.encode("utf-8"))
    digest.update(hashable.canonical_bytes())
    class_hash = f"0x{digest.hexdigest()}"
    logger.debug("Computed class hash %s for %s", class_hash, qualified_path)
    return class_hash
