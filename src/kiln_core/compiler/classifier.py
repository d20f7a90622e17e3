"""Module classification.

Walks the modules of a set of crates and reports the annotations attached
to their generated files. The first generated file of a module is the
module's own source and never carries an annotation of interest.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence

from kiln_core.compiler.database import (
    ContractDeclaration,
    CrateId,
    ModuleId,
    SemanticDatabase,
)
from kiln_core.compiler.models import ClassifiedModule
from kiln_core.compiler.selectors import collect_selector_crate_ids
from kiln_core.schemas.annotations import ContractTag, ModuleAnnotation
from kiln_core.schemas.selector import ContractSelector

logger = logging.getLogger(__name__)


def iter_module_annotations(db: SemanticDatabase, module_id: ModuleId) -> Iterator[ModuleAnnotation]:
    """Yield the annotations of a module's generated files, in file order."""
    for file_info in db.module_generated_file_infos(module_id)[1:]:
        if file_info is None or file_info.aux_data is None:
            continue
        yield file_info.aux_data


def classify_modules(
    db: SemanticDatabase,
    crate_ids: Iterable[CrateId],
    external_crate_ids: Iterable[CrateId] = (),
) -> list[ClassifiedModule]:
    """Classify every module of the given crates.

    A module with several annotations yields one ClassifiedModule per
    annotation. Crates listed more than once are scanned once.

    Args:
        db: Semantic database.
        crate_ids: Project and core crates.
        external_crate_ids: Crates added by contract selectors.

    Returns:
        Classified modules in crate, module then file order.
    """
    internal = list(crate_ids)
    ordered = dict.fromkeys([*internal, *external_crate_ids])

    classified: list[ClassifiedModule] = []
    for crate_id in ordered:
        is_external = crate_id not in internal
        for module_id in db.crate_modules(crate_id):
            for annotation in iter_module_annotations(db, module_id):
                classified.append(
                    ClassifiedModule(
                        module_id=module_id,
                        annotation=annotation,
                        external=is_external,
                    )
                )

    logger.debug("Classified %d annotated modules", len(classified))
    return classified


def find_contracts(db: SemanticDatabase, crate_ids: Iterable[CrateId]) -> list[ContractDeclaration]:
    """Return a declaration for every module tagged as a contract."""
    declarations: list[ContractDeclaration] = []
    for crate_id in dict.fromkeys(crate_ids):
        for module_id in db.crate_modules(crate_id):
            if any(isinstance(annotation, ContractTag) for annotation in iter_module_annotations(db, module_id)):
                declarations.append(ContractDeclaration(module_id=module_id))
    return declarations


def find_project_contracts(
    db: SemanticDatabase,
    main_crate_ids: Sequence[CrateId],
    selectors: Sequence[ContractSelector] | None,
) -> list[ContractDeclaration]:
    """Return the contracts to compile.

    Every contract of the main crates is compiled. Contracts of external
    crates are compiled only when their full path equals a selector's full
    path; a package-only selector selects nothing.

    Args:
        db: Semantic database.
        main_crate_ids: Project and core crates.
        selectors: External contract selectors, None for none.

    Returns:
        Internal declarations followed by selected external declarations,
        without duplicates.
    """
    internal = find_contracts(db, main_crate_ids)

    external: list[ContractDeclaration] = []
    if selectors:
        logger.debug("External contract selectors: %s", [str(s) for s in selectors])
        wanted = {selector.full_path() for selector in selectors}
        crate_ids = collect_selector_crate_ids(db, selectors)
        external = [
            declaration
            for declaration in find_contracts(db, crate_ids)
            if declaration.full_path in wanted
        ]
    else:
        logger.debug("No external contracts selected")

    return list(dict.fromkeys([*internal, *external]))
