"""
Readers for Hardhat build output.

Contracts are compiled outside this repository (``npx hardhat compile``);
these helpers load the ABI/bytecode artifacts and the build-info needed by
block explorers.
"""

import json
from pathlib import Path
from typing import List

from scripts.errors import DeployError, VerifyError


def artifact_path(name: str, artifacts_dir: str = "artifacts") -> Path:
    return Path(artifacts_dir) / "contracts" / f"{name}.sol" / f"{name}.json"


def read_json(path: Path, error=DeployError):
    """Parse a build output file, raising ``error`` when it is not valid JSON."""
    try:
        with open(path) as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise error(f"{path} is not valid JSON: {e}") from e


def load_artifact(name: str, artifacts_dir: str = "artifacts") -> dict:
    """Load ABI and bytecode for a compiled contract."""
    path = artifact_path(name, artifacts_dir)
    if not path.exists():
        raise DeployError(f"Artifact not found at {path}. Run `npx hardhat compile` first.")

    data = read_json(path)

    if not data.get("abi") or not data.get("bytecode") or data["bytecode"] == "0x":
        raise DeployError(f"Artifact {path} is missing abi/bytecode")

    return {
        "contractName": data.get("contractName", name),
        "sourceName": data.get("sourceName", f"contracts/{name}.sol"),
        "abi": data["abi"],
        "bytecode": data["bytecode"],
    }


def load_build_info(name: str, artifacts_dir: str = "artifacts") -> dict:
    """Follow the artifact's .dbg.json pointer to its Hardhat build-info."""
    dbg_path = artifact_path(name, artifacts_dir).with_suffix(".dbg.json")
    if not dbg_path.exists():
        raise VerifyError(f"Debug file not found: {dbg_path}")

    pointer = read_json(dbg_path, VerifyError).get("buildInfo")
    if not pointer:
        raise VerifyError(f"{dbg_path} has no buildInfo entry; recompile with `npx hardhat compile --force`")
    build_info_path = (dbg_path.parent / pointer).resolve()

    if not build_info_path.exists():
        raise VerifyError(f"Build info not found: {build_info_path}")

    build_info = read_json(build_info_path, VerifyError)

    # Explorers expect the full "0.8.22+commit.xxxx" form
    version = build_info.get("solcLongVersion") or build_info.get("solcVersion")
    if not version or not build_info.get("input"):
        raise VerifyError(f"{build_info_path} is missing the compiler version or standard JSON input")
    return {"compiler_version": f"v{version}", "input": build_info["input"]}


def constructor_types(abi: List[dict]) -> List[str]:
    """Input types of the constructor, empty when the ABI declares none."""
    for entry in abi:
        if entry.get("type") == "constructor":
            return [item["type"] for item in entry.get("inputs", [])]
    return []
