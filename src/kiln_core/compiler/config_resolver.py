"""Build configuration resolver for kiln.

This module locates and loads kiln.yaml:
- ConfigResolver: Load kiln.yaml from an explicit path or discovery
- Environment variable override (KILN_CONFIG)
- Discovery in standard locations relative to the project directory
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from kiln_core.schemas.build_config import BuildConfig

logger = logging.getLogger(__name__)

# Environment variable naming an explicit kiln.yaml
CONFIG_ENV_VAR = "KILN_CONFIG"

# Standard configuration file name
CONFIG_FILE_NAME = "kiln.yaml"

# Standard locations to search for kiln.yaml, relative to the project directory
CONFIG_SEARCH_PATHS = (
    Path("."),
    Path(".kiln"),
)


class ConfigNotFoundError(FileNotFoundError):
    """Raised when kiln.yaml cannot be found in any search path."""

    pass


class ConfigResolver:
    """Resolves the kiln.yaml of a project.

    Search order:
    1. Explicit path passed to ``find`` / ``load``
    2. $KILN_CONFIG
    3. <project_dir>/kiln.yaml
    4. <project_dir>/.kiln/kiln.yaml

    Attributes:
        project_dir: Directory the search paths are relative to.
        search_paths: Ordered directories to search for kiln.yaml.

    Example:
        >>> resolver = ConfigResolver()
        >>> config_path = resolver.find()
        >>> config = resolver.load()
    """

    def __init__(
        self,
        project_dir: Path | None = None,
        search_paths: tuple[Path, ...] | None = None,
    ) -> None:
        """Initialize the ConfigResolver.

        Args:
            project_dir: Project directory. Defaults to the working directory.
            search_paths: Custom search paths. If None, uses CONFIG_SEARCH_PATHS.
        """
        self.project_dir = project_dir or Path.cwd()
        self.search_paths = search_paths or CONFIG_SEARCH_PATHS

    def find(self, path: Path | str | None = None) -> Path:
        """Return the path of kiln.yaml.

        Raises:
            FileNotFoundError: If an explicit path or $KILN_CONFIG does not exist.
            ConfigNotFoundError: If discovery finds nothing.
        """
        if path is not None:
            explicit = Path(path)
            if not explicit.exists():
                raise FileNotFoundError(f"File not found: {explicit}")
            return explicit.resolve()

        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            candidate = Path(env_path)
            if not candidate.exists():
                raise FileNotFoundError(f"File not found: {candidate} (from ${CONFIG_ENV_VAR})")
            logger.debug("Using kiln.yaml from $%s: %s", CONFIG_ENV_VAR, candidate)
            return candidate.resolve()

        for base_path in self.search_paths:
            candidate = self.project_dir / base_path / CONFIG_FILE_NAME
            if candidate.exists():
                logger.debug("Found kiln.yaml at %s", candidate)
                return candidate.resolve()

        searched = [str(self.project_dir / p / CONFIG_FILE_NAME) for p in self.search_paths]
        raise ConfigNotFoundError(
            f"Build configuration not found. Searched: {', '.join(searched)}"
        )

    def load(self, path: Path | str | None = None) -> BuildConfig:
        """Find and load kiln.yaml.

        Raises:
            FileNotFoundError: If kiln.yaml cannot be found.
            yaml.YAMLError: If YAML is invalid.
            pydantic.ValidationError: If validation fails.
        """
        config_path = self.find(path)
        logger.info("Loading build configuration from %s", config_path)
        return BuildConfig.from_yaml(config_path)
