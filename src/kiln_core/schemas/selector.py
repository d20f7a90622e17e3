"""External contract selector model."""

from __future__ import annotations

from pydantic import ConfigDict, Field, RootModel

# Separator between Cairo path segments
CAIRO_PATH_SEPARATOR = "::"

# package or package::path::to::contract
SELECTOR_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*(::[A-Za-z_][A-Za-z0-9_]*)*$"


class ContractSelector(RootModel[str]):
    """Selects contracts from a dependency package.

    A selector is either a package name (``dojo_erc``) or the full path of a
    contract module (``dojo_erc::erc20::ERC20``). Only full paths select
    contracts for compilation; a package-only selector still makes the
    package's modules visible to classification.

    Example:
        >>> selector = ContractSelector("dojo_erc::erc20::ERC20")
        >>> selector.package()
        'dojo_erc'
    """

    model_config = ConfigDict(frozen=True)

    root: str = Field(..., pattern=SELECTOR_PATTERN)

    def package(self) -> str:
        """Return the package owning the selected contracts."""
        return self.root.split(CAIRO_PATH_SEPARATOR, 1)[0]

    def full_path(self) -> str:
        """Return the full selector path."""
        return self.root

    def __str__(self) -> str:
        return self.root
