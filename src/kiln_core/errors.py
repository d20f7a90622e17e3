"""Exception hierarchy for kiln-core.

This module defines the exception classes raised by the build pipeline:
- KilnError: Base exception for all kiln errors
- ConfigurationError: kiln.yaml could not be loaded or validated
- CompilationError: The compiler collaborator returned unusable output
- ArtifactHashError / ArtifactRegistryError: Class hash computation failed
- MissingSystemContractError: world/executor/base missing from the build
- ManifestConsistencyError: Aggregated manifests contradict each other
- ManifestParseError / ManifestWriteError: Manifest persistence failed

User-facing messages always name the contract, model or file involved and
the operation that failed. Technical details are logged via structlog.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(__name__)


class KilnError(Exception):
    """Base exception for kiln.

    All kiln exceptions inherit from this class. Any exception that reaches
    the top of the pipeline aborts the build.

    Args:
        user_message: Message displayed to the user.
        internal_details: Optional technical details for logging.

    Example:
        >>> raise KilnError(
        ...     "Build failed",
        ...     internal_details="class dojo::world::world has no ABI",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize KilnError with user message and optional internal details.

        Args:
            user_message: Message displayed to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "kiln_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ConfigurationError(KilnError):
    """Raised when kiln.yaml or the compilation snapshot cannot be loaded.

    Attributes:
        file_path: Path to the configuration file (if known).
        field_path: Dot-separated path to the invalid field (if known).

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid contract selector",
        ...     file_path="kiln.yaml",
        ...     field_path="target.build-external-contracts.0",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ConfigurationError with context.

        Args:
            user_message: Message displayed to the user.
            file_path: Path to the configuration file (optional).
            field_path: Dot-separated path to the field (optional).
            internal_details: Technical details for internal logging only.
        """
        context_parts: list[str] = []
        if file_path:
            context_parts.append(f"in {file_path}")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path


class CompilationError(KilnError):
    """Raised when the contract compiler collaborator fails.

    Use this exception when:
    - The compiler returns a different number of classes than declarations
    - A declared contract has no compiled class in the snapshot
    """

    pass


class ArtifactHashError(KilnError):
    """Raised when the class hash of a single artifact cannot be computed.

    Attributes:
        qualified_path: Fully qualified path of the contract.
        reason: Why the hashing round-trip failed.
    """

    def __init__(self, qualified_path: str, reason: str) -> None:
        super().__init__(
            f"Problem computing class hash for contract `{qualified_path}`: {reason}"
        )
        self.qualified_path = qualified_path
        self.reason = reason


class ArtifactRegistryError(KilnError):
    """Raised after all artifacts were processed when any of them failed.

    Attributes:
        failures: Every per-artifact failure, in compilation order.
    """

    def __init__(self, failures: list[ArtifactHashError]) -> None:
        paths = ", ".join(f"`{failure.qualified_path}`" for failure in failures)
        super().__init__(
            f"Class hash computation failed for {len(failures)} contract(s): {paths}",
            internal_details="\n".join(failure.user_message for failure in failures),
        )
        self.failures = failures


class MissingSystemContractError(KilnError):
    """Raised when world, executor or base is absent from the compiled classes.

    Attributes:
        missing: Qualified paths of the missing system contracts.
    """

    def __init__(self, missing: list[str]) -> None:
        names = ", ".join(f"`{name}`" for name in missing)
        super().__init__(
            f"Contract {names} not found. Did you include `dojo` as a dependency?"
        )
        self.missing = missing


class ManifestConsistencyError(KilnError):
    """Raised when aggregated manifests reference each other inconsistently.

    A computed value whose owning contract produced no manifest means the
    contract failed to compile while its nested module still reported itself.

    Attributes:
        name: Qualified path of the missing owning contract.
    """

    def __init__(self, name: str, user_message: str) -> None:
        super().__init__(user_message)
        self.name = name


class ManifestParseError(KilnError):
    """Raised when a previously written manifest cannot be read back.

    The build stops instead of overwriting the file, so operator-set
    fields are never silently discarded.

    Attributes:
        path: Manifest file path.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            f"Failed to read existing manifest at {path}: {reason}",
            internal_details=reason,
        )
        self.path = path


class ManifestWriteError(KilnError):
    """Raised when a manifest or ABI file cannot be serialized or written.

    Attributes:
        path: Target file path.
        name: Qualified path of the manifest being written.
    """

    def __init__(self, path: str, name: str, reason: str) -> None:
        super().__init__(
            f"Unable to write manifest `{name}` to path {path}: {reason}",
            internal_details=reason,
        )
        self.path = path
        self.name = name
