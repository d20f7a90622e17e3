"""Model read/write extraction.

The front end records which models each contract reads and writes while
it compiles. kiln receives that record as an immutable ModelAccessRecord
and derives the reads and writes listed in contract manifests.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, assert_never

from kiln_core.compiler.database import ModuleId, SemanticDatabase
from kiln_core.schemas.selector import CAIRO_PATH_SEPARATOR
from kiln_core.schemas.snapshot import PathWrite, StructWrite, WriteOperation

if TYPE_CHECKING:
    from kiln_core.schemas.snapshot import CompilationSnapshot

logger = logging.getLogger(__name__)


def _freeze(entries: Mapping[str, Iterable[object]]) -> Mapping[str, tuple]:
    return MappingProxyType({path: tuple(values) for path, values in entries.items()})


@dataclass(frozen=True)
class ModelAccessRecord:
    """Models read and written per contract path.

    Attributes:
        reads: Model names read, per contract path, as recorded.
        writes: Write operations, per contract path, as recorded.
    """

    reads: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))
    writes: Mapping[str, tuple[WriteOperation, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def create(
        cls,
        reads: Mapping[str, Iterable[str]] | None = None,
        writes: Mapping[str, Iterable[WriteOperation]] | None = None,
    ) -> ModelAccessRecord:
        """Build a record, copying the given mappings."""
        return cls(reads=_freeze(reads or {}), writes=_freeze(writes or {}))

    @classmethod
    def from_snapshot(cls, snapshot: CompilationSnapshot) -> ModelAccessRecord:
        return cls.create(reads=snapshot.model_reads, writes=snapshot.model_writes)

    @classmethod
    def empty(cls) -> ModelAccessRecord:
        return cls()


def extract_reads(record: ModelAccessRecord, contract_path: str) -> list[str]:
    """Return the models read by a contract, sorted and unique.

    Example:
        >>> record = ModelAccessRecord.create(reads={"c": ["B", "A", "A"]})
        >>> extract_reads(record, "c")
        ['A', 'B']
    """
    return sorted(set(record.reads.get(contract_path, ())))


def extract_writes(db: SemanticDatabase, record: ModelAccessRecord, module_id: ModuleId) -> list[str]:
    """Return the models written by a contract, in encounter order.

    The same model may appear several times when different entrypoints
    write it. A variable write whose type cannot be resolved is skipped.
    """
    writes: list[str] = []
    for operation in record.writes.get(module_id.path, ()):
        model = _resolve_write(db, module_id, operation)
        if model is not None:
            writes.append(model)
    return writes


def _resolve_write(db: SemanticDatabase, module_id: ModuleId, operation: WriteOperation) -> str | None:
    if isinstance(operation, StructWrite):
        return operation.model.rsplit(CAIRO_PATH_SEPARATOR, 1)[-1]
    if isinstance(operation, PathWrite):
        type_name = db.resolve_binding(module_id, operation.entrypoint, operation.variable)
        if type_name is None:
            logger.debug(
                "Unresolved write of %s in %s::%s",
                operation.variable,
                module_id.path,
                operation.entrypoint,
            )
            return None
        return type_name.rsplit(CAIRO_PATH_SEPARATOR, 1)[-1]
    assert_never(operation)
