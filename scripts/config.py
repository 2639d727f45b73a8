"""
Configuration loading for the deployment scripts.

Network definitions live in config/networks.json. Secrets and addresses come
from the process environment (populated from .env by the entry points). All
required values are checked up front so that nothing touches the chain when
a key is missing.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from web3 import Web3

from scripts.errors import ConfigError

NETWORKS_FILE = Path(__file__).parent.parent / "config" / "networks.json"

DEFAULT_NETWORK = "base_sepolia"
DEFAULT_ARTIFACTS_DIR = "artifacts"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Needed by every deployment regardless of network
DEPLOY_ENV_VARS = [
    "MULTISIG_TREASURY",
    "LIQUIDITY_POOL",
    "MINTIUM_TOKEN",
]

TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    label: str
    chain_id: int
    rpc_url: str
    rpc_env: str
    rpc_required: bool
    credential_env: str
    explorer: Optional[str] = None
    explorer_key_env: Optional[str] = None

    def address_url(self, address: str) -> Optional[str]:
        if not self.explorer:
            return None
        return f"{self.explorer}/address/{address}"


@dataclass(frozen=True)
class DeployConfig:
    network: NetworkConfig
    private_key: str
    explorer_api_key: Optional[str]
    treasury: str
    liquidity_pool: str
    mintium_token: str
    verify_fail_fast: bool = False
    artifacts_dir: str = DEFAULT_ARTIFACTS_DIR


def load_networks(path: Path = NETWORKS_FILE) -> Dict[str, dict]:
    """Load the named network table."""
    if not Path(path).exists():
        raise ConfigError(f"{path} not found")
    with open(path) as f:
        return json.load(f)["networks"]


def get_network(name: str, environ: Mapping[str, str], path: Path = NETWORKS_FILE) -> NetworkConfig:
    """Resolve a named network, taking the RPC URL from its env var when set."""
    networks = load_networks(path)
    entry = networks.get(name)
    if entry is None:
        raise ConfigError(f"Unknown network: {name}. Available: {', '.join(networks)}")

    return NetworkConfig(
        name=name,
        label=entry.get("name", name),
        chain_id=int(entry["chain_id"]),
        rpc_url=environ.get(entry["rpc_env"]) or entry["rpc_url"],
        rpc_env=entry["rpc_env"],
        rpc_required=bool(entry.get("rpc_required", True)),
        credential_env=entry["credential_env"],
        explorer=entry.get("explorer"),
        explorer_key_env=entry.get("explorer_key_env"),
    )


def require_env(keys: List[str], environ: Mapping[str, str]) -> None:
    """Raise ConfigError naming every key that is absent or empty."""
    missing = [key for key in keys if not environ.get(key)]
    if missing:
        raise ConfigError(f"Missing {', '.join(missing)} in environment! Deployment halted.")


def network_env_vars(network: NetworkConfig) -> List[str]:
    """Env vars the given network needs to connect and sign."""
    keys = [network.credential_env]
    if network.rpc_required:
        keys.append(network.rpc_env)
    return keys


def deploy_env_vars(network: NetworkConfig) -> List[str]:
    keys = network_env_vars(network)
    if network.explorer_key_env:
        keys.append(network.explorer_key_env)
    return keys + DEPLOY_ENV_VARS


def checksum(key: str, value: str) -> str:
    if not Web3.is_address(value):
        raise ConfigError(f"{key} is not a valid address: {value!r}")
    return Web3.to_checksum_address(value)


def load_deploy_config(network_name: str, environ: Mapping[str, str]) -> DeployConfig:
    """Build the deployment configuration, failing before any network call."""
    network = get_network(network_name, environ)
    require_env(deploy_env_vars(network), environ)

    key_env = network.explorer_key_env
    return DeployConfig(
        network=network,
        private_key=environ[network.credential_env],
        explorer_api_key=environ.get(key_env) if key_env else None,
        treasury=checksum("MULTISIG_TREASURY", environ["MULTISIG_TREASURY"]),
        liquidity_pool=checksum("LIQUIDITY_POOL", environ["LIQUIDITY_POOL"]),
        mintium_token=checksum("MINTIUM_TOKEN", environ["MINTIUM_TOKEN"]),
        verify_fail_fast=environ.get("VERIFY_FAIL_FAST", "").strip().lower() in TRUTHY,
        artifacts_dir=environ.get("ARTIFACTS_DIR") or DEFAULT_ARTIFACTS_DIR,
    )


def is_zero_address(address: str) -> bool:
    return address.lower() == ZERO_ADDRESS
