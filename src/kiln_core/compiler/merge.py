"""Manifest merge.

Merging combines a freshly built manifest with the one persisted by the
previous build. Ownership per kind:

    kind          compiler-owned (new wins)                  operator-owned (old wins when set)
    Class         kind, name, class_hash, abi                 unknown keys
    DojoContract  kind, name, class_hash, abi, reads,         address, init_calldata, unknown keys
                  writes, computed
    DojoModel     kind, name, class_hash, abi, members        unknown keys
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from kiln_core.errors import ManifestParseError
from kiln_core.schemas.manifest import BaseManifest

logger = logging.getLogger(__name__)

ManifestT = TypeVar("ManifestT", bound=BaseManifest)


def operator_owned_fields(old: BaseManifest) -> dict[str, Any]:
    """Return the fields of a persisted manifest the build must keep.

    Declared operator fields are kept only when set. Unknown keys are
    always kept.
    """
    kept: dict[str, Any] = dict(old.model_extra or {})
    for field_name in old.operator_fields:
        value = getattr(old, field_name)
        if value is not None:
            kept[field_name] = value
    return kept


def merge_manifest(old: BaseManifest | None, new: ManifestT, *, path: str = "") -> ManifestT:
    """Merge a persisted manifest into a freshly built one.

    Args:
        old: Manifest read from disk, None when there is none.
        new: Manifest built by this build.
        path: Manifest file path, used in error messages.

    Returns:
        A new manifest; neither input is modified.

    Raises:
        ManifestParseError: If the persisted manifest is of another kind.

    Example:
        >>> merged = merge_manifest(old, new)
        >>> merged.address == old.address and merged.class_hash == new.class_hash
        True
    """
    if old is None:
        return new

    old_kind = getattr(old, "kind", None)
    new_kind = getattr(new, "kind", None)
    if old_kind != new_kind:
        raise ManifestParseError(
            path or new.name,
            f"expected a {new_kind} manifest, found {old_kind}",
        )

    kept = operator_owned_fields(old)
    if kept:
        logger.debug("Keeping operator fields %s of %s", sorted(kept), new.name)

    data = {**new.model_dump(exclude_none=True), **kept}
    return type(new).model_validate(data)
