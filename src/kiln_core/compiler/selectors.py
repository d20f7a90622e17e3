"""Selector resolution.

Turns contract selectors into the crates that must be scanned in addition
to the project's own. A selector contributes its package; whether it
selects any contract is decided later by exact path matching.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from kiln_core.compiler.database import CrateId, SemanticDatabase
from kiln_core.schemas.selector import ContractSelector

logger = logging.getLogger(__name__)

WORLD_CONTRACT = "dojo::world::world"
EXECUTOR_CONTRACT = "dojo::executor::executor"
BASE_CONTRACT = "dojo::base::base"

SYSTEM_CONTRACTS: tuple[str, ...] = (WORLD_CONTRACT, EXECUTOR_CONTRACT, BASE_CONTRACT)

# Declared names of the system contracts; never user contracts
SYSTEM_CONTRACT_NAMES: frozenset[str] = frozenset({"world", "executor", "base"})


def collect_crate_ids(db: SemanticDatabase, packages: Iterable[str]) -> list[CrateId]:
    """Intern package names into crate ids, deduplicated in first-seen order."""
    seen: dict[str, None] = dict.fromkeys(packages)
    return [db.intern_crate(package) for package in seen]


def collect_selector_crate_ids(
    db: SemanticDatabase,
    selectors: Iterable[ContractSelector] | None,
) -> list[CrateId]:
    """Return the crates owning the selected contracts.

    Args:
        db: Semantic database.
        selectors: Contract selectors, None for no external contracts.

    Returns:
        Crate ids of the selectors' packages, deduplicated.

    Example:
        >>> collect_selector_crate_ids(db, [ContractSelector("dojo_erc::erc20::ERC20")])
        ['dojo_erc']
    """
    if not selectors:
        return []
    crate_ids = collect_crate_ids(db, (selector.package() for selector in selectors))
    logger.debug("Resolved selectors to crates %s", crate_ids)
    return crate_ids


def collect_core_crate_ids(db: SemanticDatabase) -> list[CrateId]:
    """Return the crates owning the system contracts."""
    return collect_crate_ids(
        db,
        (ContractSelector(path).package() for path in SYSTEM_CONTRACTS),
    )
