"""Build configuration model for kiln.yaml.

kiln.yaml describes one build target: where class files go, where the
manifest tree lives, where the compilation snapshot is read from and which
contracts of dependency packages are built in addition to the project's own.

Keys are kebab-case, matching the build target props of the package manager.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

from kiln_core.schemas.selector import ContractSelector


class TargetConfig(BaseModel):
    """Build target properties.

    Attributes:
        kind: Target kind. Only "dojo" is supported.
        build_external_contracts: Selectors of contracts to build from
            dependency packages. None means no external contracts.

    Example:
        >>> config = TargetConfig.model_validate(
        ...     {"build-external-contracts": ["dojo_erc::erc20::ERC20"]}
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    kind: Literal["dojo"] = Field(
        default="dojo",
        description="Target kind",
    )
    build_external_contracts: list[ContractSelector] | None = Field(
        default=None,
        alias="build-external-contracts",
        description="Contracts to build from dependency packages",
    )


class BuildConfig(BaseModel):
    """Root configuration model for kiln.yaml.

    Relative paths are resolved against the directory holding kiln.yaml.

    Attributes:
        name: Project name.
        target_dir: Directory receiving one JSON file per compiled class.
        manifest_root: Directory holding the manifests/ and abis/ trees.
        snapshot: Compilation snapshot exported by the front end.
        fail_fast: Stop at the first class hash failure instead of
            collecting all of them.
        target: Build target properties.

    Example:
        >>> config = BuildConfig.from_yaml("kiln.yaml")
        >>> config.target.build_external_contracts
        [ContractSelector(root='dojo_erc::erc20::ERC20')]
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        pattern=r"^[A-Za-z_][A-Za-z0-9_-]*$",
        description="Project name",
    )
    target_dir: str = Field(
        default="target/dev",
        alias="target-dir",
        description="Directory for compiled class files",
    )
    manifest_root: str = Field(
        default=".",
        alias="manifest-root",
        description="Directory holding manifests/ and abis/",
    )
    snapshot: str = Field(
        default="target/dev/semantic.json",
        description="Compilation snapshot path",
    )
    fail_fast: bool = Field(
        default=False,
        alias="fail-fast",
        description="Stop at the first class hash failure",
    )
    target: TargetConfig = Field(
        default_factory=TargetConfig,
        description="Build target properties",
    )

    @property
    def external_contracts(self) -> list[ContractSelector] | None:
        """Shortcut to the target's external contract selectors."""
        return self.target.build_external_contracts

    def resolve_path(self, value: str, base_dir: Path) -> Path:
        """Resolve a configured path against the configuration directory."""
        path = Path(value)
        return path if path.is_absolute() else base_dir / path

    @classmethod
    def from_yaml(cls, path: str | Path) -> BuildConfig:
        """Load and validate BuildConfig from a YAML file.

        Args:
            path: Path to kiln.yaml.

        Returns:
            Validated BuildConfig instance.

        Raises:
            FileNotFoundError: If file doesn't exist.
            yaml.YAMLError: If YAML syntax is invalid.
            pydantic.ValidationError: If schema validation fails.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        with path.open("r") as f:
            data: dict[str, Any] = yaml.safe_load(f) or {}

        return cls.model_validate(data)
