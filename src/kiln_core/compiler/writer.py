"""Manifest persistence.

Manifests and ABIs are written to a fixed layout under the manifest root::

    manifests/base/world.toml
    manifests/base/contracts/actions.toml
    manifests/base/models/position.toml
    abis/world.json
    abis/contracts/actions.json
    abis/models/position.json

File names come from the last path segment of the manifest name. Every
file is written through a temporary file and an atomic replace, so a
failed write never leaves a partial file behind. A manifest and its ABI
are staged together: neither replaces its target until both temporary
files are written, and the ABI is replaced before the manifest that
references it.
"""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
import tomli_w
from pydantic import TypeAdapter, ValidationError

from kiln_core.compiler.merge import merge_manifest
from kiln_core.errors import ManifestParseError, ManifestWriteError
from kiln_core.schemas.manifest import BaseManifest, Manifest

if TYPE_CHECKING:
    from kiln_core.compiler.models import ManifestEntry

logger = structlog.get_logger(__name__)

MANIFESTS_DIR = "manifests"
BASE_DIR = "base"
ABIS_DIR = "abis"
CONTRACTS_DIR = "contracts"
MODELS_DIR = "models"

# Subdirectory per manifest kind; system classes live at the top level
KIND_DIRS: dict[str, str | None] = {
    "Class": None,
    "DojoContract": CONTRACTS_DIR,
    "DojoModel": MODELS_DIR,
}

_manifest_adapter: TypeAdapter[Manifest] = TypeAdapter(Manifest)


def write_atomic(path: Path, content: str) -> None:
    """Write text to path through a temporary file and an atomic replace.

    Raises:
        OSError: If the file cannot be written. No partial file is left.
    """
    temp_path = _temp_path(path)
    try:
        temp_path.write_text(content, encoding="utf-8")
        temp_path.replace(path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise


def _temp_path(path: Path) -> Path:
    return path.with_suffix(path.suffix + ".tmp")


def serialize_manifest(manifest: BaseManifest) -> str:
    """Serialize a manifest to TOML, ``kind`` first, unset fields omitted."""
    data: dict[str, Any] = manifest.model_dump(exclude_none=True)
    ordered = {"kind": data.pop("kind"), **data}
    return tomli_w.dumps(ordered)


def load_manifest(path: Path) -> Manifest | None:
    """Load a persisted manifest.

    Returns:
        The manifest, None when the file does not exist.

    Raises:
        ManifestParseError: If the file is not valid TOML or not a valid
            manifest.
    """
    if not path.exists():
        return None

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
        return _manifest_adapter.validate_python(data)
    except tomllib.TOMLDecodeError as e:
        raise ManifestParseError(str(path), f"invalid TOML: {e}") from e
    except ValidationError as e:
        error = e.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        raise ManifestParseError(str(path), f"{location}: {error['msg']}") from e
    except OSError as e:
        raise ManifestParseError(str(path), str(e)) from e


@dataclass(frozen=True)
class ManifestLayout:
    """Paths of manifest and ABI files under a manifest root."""

    root: Path

    @property
    def manifests_dir(self) -> Path:
        return self.root / MANIFESTS_DIR / BASE_DIR

    @property
    def abis_dir(self) -> Path:
        return self.root / ABIS_DIR

    def _relative(self, manifest: BaseManifest, suffix: str) -> Path:
        kind_dir = KIND_DIRS[getattr(manifest, "kind", "Class")]
        file_name = f"{manifest.short_name}{suffix}"
        return Path(kind_dir, file_name) if kind_dir else Path(file_name)

    def manifest_path(self, manifest: BaseManifest) -> Path:
        return self.manifests_dir / self._relative(manifest, ".toml")

    def abi_path(self, manifest: BaseManifest) -> Path:
        return self.abis_dir / self._relative(manifest, ".json")

    def abi_ref(self, manifest: BaseManifest) -> str:
        """ABI path relative to the root, as stored in the manifest."""
        return (Path(ABIS_DIR) / self._relative(manifest, ".json")).as_posix()


@dataclass(frozen=True)
class WrittenManifest:
    """Files written for one manifest."""

    name: str
    manifest_path: Path
    abi_path: Path | None = None


@dataclass
class ManifestWriter:
    """Merges manifests with their persisted versions and writes them.

    One writer is used per build; writing two manifests to the same file
    within a build is an error.

    Example:
        >>> writer = ManifestWriter(ManifestLayout(Path(".")))
        >>> writer.write(ManifestEntry(manifest=manifest, abi=abi))
        WrittenManifest(name='dojo_examples::actions::actions', ...)
    """

    layout: ManifestLayout
    _claimed: dict[Path, str] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self._log = logger.bind(component="manifest_writer", root=str(self.layout.root))

    def write(self, entry: ManifestEntry) -> WrittenManifest:
        """Merge and write one manifest and its ABI.

        Args:
            entry: ManifestEntry holding the manifest and its ABI.

        Returns:
            The files written.

        Raises:
            ManifestParseError: If the persisted manifest cannot be read.
            ManifestWriteError: If serialization or writing fails, or the
                path was already written by another manifest in this build.
        """
        manifest: BaseManifest = entry.manifest
        manifest_path = self.layout.manifest_path(manifest)
        abi_path = self.layout.abi_path(manifest) if entry.abi is not None else None

        self._claim(manifest_path, manifest.name)

        merged = merge_manifest(load_manifest(manifest_path), manifest, path=str(manifest_path))
        if abi_path is not None:
            merged = merged.model_copy(update={"abi": self.layout.abi_ref(merged)})

        try:
            manifest_text = serialize_manifest(merged)
            abi_text = json.dumps(entry.abi, indent=2) if entry.abi is not None else None
        except (TypeError, ValueError) as e:
            raise ManifestWriteError(str(manifest_path), manifest.name, f"serialization failed: {e}") from e

        files: list[tuple[Path, str]] = []
        if abi_path is not None and abi_text is not None:
            files.append((abi_path, abi_text))
        files.append((manifest_path, manifest_text))
        self._write_all(files, manifest.name)

        if abi_path is None:
            self._remove_stale_abi(self.layout.abi_path(manifest), manifest.name)

        self._log.info(
            "manifest_written",
            manifest=manifest.name,
            path=str(manifest_path),
            abi=str(abi_path) if abi_path else None,
        )
        return WrittenManifest(name=manifest.name, manifest_path=manifest_path, abi_path=abi_path)

    def _claim(self, path: Path, name: str) -> None:
        owner = self._claimed.get(path)
        if owner is not None and owner != name:
            raise ManifestWriteError(str(path), name, f"path already written by `{owner}`")
        self._claimed[path] = name

    def _write_all(self, files: list[tuple[Path, str]], name: str) -> None:
        """Stage every file, then replace the targets in order.

        No target is touched until all temporary files are written. On any
        failure the remaining temporary files are removed.

        Args:
            files: Target paths and contents, in replace order.
            name: Qualified path of the manifest being written.

        Raises:
            ManifestWriteError: If a file cannot be staged or replaced.
        """
        staged: list[Path] = []
        current = files[0][0]
        try:
            for path, content in files:
                current = path
                path.parent.mkdir(parents=True, exist_ok=True)
                temp_path = _temp_path(path)
                staged.append(temp_path)
                temp_path.write_text(content, encoding="utf-8")
            for path, _ in files:
                current = path
                _temp_path(path).replace(path)
        except OSError as e:
            for temp_path in staged:
                temp_path.unlink(missing_ok=True)
            self._log.error("manifest_write_failed", manifest=name, path=str(current), error=str(e))
            raise ManifestWriteError(str(current), name, str(e)) from e

    def _remove_stale_abi(self, path: Path, name: str) -> None:
        if not path.is_file():
            return
        try:
            path.unlink()
        except OSError as e:
            raise ManifestWriteError(str(path), name, f"cannot remove stale ABI: {e}") from e
        self._log.info("stale_abi_removed", manifest=name, path=str(path))
