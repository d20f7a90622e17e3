"""Shared pytest fixtures for kiln tests.

Provides a sample compilation snapshot of a small Dojo project:

- dojo: world, executor and base system contracts
- dojo_examples: Position and Moves models, the actions contract with a
  nested computed value module
- dojo_erc: ERC20 and ERC721 contracts, selectable as external contracts
"""

from __future__ import annotations

import copy
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import structlog
import yaml
from click.testing import CliRunner

KILN_YAML_FILENAME = "kiln.yaml"
SNAPSHOT_FILENAME = "semantic.json"


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        # No file: each logger picks up the sys.stdout active when it logs
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def make_class() -> Callable[..., dict[str, Any]]:
    """Factory for compiled class documents.

    Classes built from different seeds hash differently.
    """

    def _make(seed: int, *, abi: list[dict[str, Any]] | None = None, with_abi: bool = True) -> dict[str, Any]:
        document: dict[str, Any] = {
            "sierra_program": [hex(seed), "0x1", "0x2a", hex(seed * 7 + 3)],
            "sierra_program_debug_info": {"type_names": [], "libfunc_names": []},
            "contract_class_version": "0.1.0",
            "entry_points_by_type": {
                "CONSTRUCTOR": [],
                "EXTERNAL": [{"selector": hex(0x1000 + seed), "function_idx": 0}],
                "L1_HANDLER": [],
            },
        }
        if with_abi:
            document["abi"] = abi if abi is not None else [
                {"type": "function", "name": f"entry_{seed}", "inputs": [], "outputs": []}
            ]
        return document

    return _make


def _contract_file(*names: str) -> dict[str, Any]:
    return {"name": "contract", "aux_data": {"kind": "contract", "declared_names": list(names)}}


@pytest.fixture
def sample_snapshot_data(make_class: Callable[..., dict[str, Any]]) -> dict[str, Any]:
    """Return a valid compilation snapshot document."""
    return {
        "version": "1.0.0",
        "main_crates": ["dojo_examples"],
        "crates": [
            {
                "name": "dojo",
                "modules": [
                    {"path": "dojo", "generated_files": [None]},
                    {"path": "dojo::world::world", "generated_files": [None, _contract_file("world")]},
                    {
                        "path": "dojo::executor::executor",
                        "generated_files": [None, _contract_file("executor")],
                    },
                    {"path": "dojo::base::base", "generated_files": [None, _contract_file("base")]},
                ],
            },
            {
                "name": "dojo_examples",
                "modules": [
                    {"path": "dojo_examples", "items": {"models": "module", "actions": "module"}},
                    {
                        "path": "dojo_examples::models",
                        "items": {"Position": "struct", "Moves": "struct", "Direction": "enum"},
                        "generated_files": [
                            None,
                            {
                                "name": "models",
                                "aux_data": {
                                    "kind": "model",
                                    "models": [
                                        {
                                            "name": "Position",
                                            "members": [
                                                {"name": "player", "type": "ContractAddress", "key": True},
                                                {"name": "x", "type": "u32"},
                                                {"name": "y", "type": "u32"},
                                            ],
                                        },
                                        {
                                            "name": "Moves",
                                            "members": [
                                                {"name": "player", "type": "ContractAddress", "key": True},
                                                {"name": "remaining", "type": "u8"},
                                            ],
                                        },
                                        {"name": "Direction", "members": []},
                                    ],
                                },
                            },
                        ],
                    },
                    {
                        "path": "dojo_examples::models::position",
                        "generated_files": [None, _contract_file("position")],
                    },
                    {
                        "path": "dojo_examples::models::moves",
                        "generated_files": [None, _contract_file("moves")],
                    },
                    {
                        "path": "dojo_examples::actions::actions",
                        "items": {"spawn": "function", "move": "function", "computed": "module"},
                        "generated_files": [None, _contract_file("actions")],
                        "bindings": {"move": {"next": "dojo_examples::models::Position"}},
                    },
                    {
                        "path": "dojo_examples::actions::actions::computed",
                        "items": {"calc": "function"},
                        "generated_files": [
                            None,
                            {
                                "name": "computed",
                                "aux_data": {
                                    "kind": "computed_value",
                                    "entrypoint": "calc",
                                    "model": "Position",
                                },
                            },
                        ],
                    },
                ],
            },
            {
                "name": "dojo_erc",
                "modules": [
                    {"path": "dojo_erc::erc20::ERC20", "generated_files": [None, _contract_file("ERC20")]},
                    {
                        "path": "dojo_erc::erc721::ERC721",
                        "generated_files": [None, _contract_file("ERC721")],
                    },
                ],
            },
        ],
        "classes": {
            "dojo::world::world": make_class(1),
            "dojo::executor::executor": make_class(2),
            "dojo::base::base": make_class(3, with_abi=False),
            "dojo_examples::models::position": make_class(4),
            "dojo_examples::models::moves": make_class(5),
            "dojo_examples::actions::actions": make_class(6),
            "dojo_erc::erc20::ERC20": make_class(7),
            "dojo_erc::erc721::ERC721": make_class(8),
        },
        "model_reads": {
            "dojo_examples::actions::actions": ["Moves", "Position", "Moves"],
        },
        "model_writes": {
            "dojo_examples::actions::actions": [
                {"kind": "struct", "model": "dojo_examples::models::Moves"},
                {"kind": "path", "entrypoint": "move", "variable": "next"},
                {"kind": "path", "entrypoint": "move", "variable": "unknown"},
                {"kind": "struct", "model": "Moves"},
            ],
        },
    }


@pytest.fixture
def sample_snapshot_copy(sample_snapshot_data: dict[str, Any]) -> Callable[[], dict[str, Any]]:
    """Factory returning deep copies of the sample snapshot for mutation."""

    def _copy() -> dict[str, Any]:
        return copy.deepcopy(sample_snapshot_data)

    return _copy


@pytest.fixture
def sample_kiln_yaml() -> dict[str, Any]:
    """Return a kiln.yaml selecting the ERC20 contract of dojo_erc."""
    return {
        "name": "dojo_examples",
        "target-dir": "target/dev",
        "manifest-root": ".",
        "snapshot": f"target/dev/{SNAPSHOT_FILENAME}",
        "target": {
            "kind": "dojo",
            "build-external-contracts": ["dojo_erc::erc20::ERC20"],
        },
    }


@pytest.fixture
def write_project(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing kiln.yaml and a snapshot into a project directory.

    Returns:
        Function taking (config, snapshot) dicts and returning the kiln.yaml path.
    """

    def _write(config: dict[str, Any], snapshot: dict[str, Any], root: Path | None = None) -> Path:
        project = root or tmp_path
        project.mkdir(parents=True, exist_ok=True)
        config_path = project / KILN_YAML_FILENAME
        config_path.write_text(yaml.safe_dump(config, sort_keys=False))

        snapshot_path = project / config.get("snapshot", f"target/dev/{SNAPSHOT_FILENAME}")
        snapshot_path.parent.mkdir(parents=True, exist_ok=True)
        snapshot_path.write_text(json.dumps(snapshot, indent=2))
        return config_path

    return _write


@pytest.fixture
def sample_project(
    write_project: Callable[..., Path],
    sample_kiln_yaml: dict[str, Any],
    sample_snapshot_data: dict[str, Any],
) -> Path:
    """Write the sample project and return the path of its kiln.yaml."""
    return write_project(sample_kiln_yaml, sample_snapshot_data)
