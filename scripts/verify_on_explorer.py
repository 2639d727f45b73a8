#!/usr/bin/env python3
"""
Contract Verification Script for Block Explorers

Submits Hardhat-compiled Solidity contracts for verification on Basescan and
Gnosisscan using the Etherscan-compatible API, with the exact constructor
arguments used at deploy time.

Usage:
    python -m scripts.verify_on_explorer <network> <ContractName> <address> [constructor args...]
    python -m scripts.verify_on_explorer base_sepolia Mintium 0x... 0xOwner 0xTreasury
"""

import json
import os
import sys
import time

import requests
from dotenv import load_dotenv
from eth_abi import encode
from eth_abi.exceptions import EncodingError

from scripts.artifacts import constructor_types, load_artifact, load_build_info
from scripts.config import NetworkConfig, get_network
from scripts.deployer import ContractReference
from scripts.errors import DeploymentError, VerifyError

# Etherscan-compatible verification endpoints, keyed by network name
EXPLORER_APIS = {
    "base_sepolia": {
        "name": "Basescan Sepolia",
        "api_url": "https://api-sepolia.basescan.org/api",
    },
    "base_mainnet": {
        "name": "Basescan",
        "api_url": "https://api.basescan.org/api",
    },
    "gnosis_safe": {
        "name": "Gnosisscan",
        "api_url": "https://api.gnosisscan.io/api",
    },
}

STATUS_POLL_INTERVAL = 5
STATUS_MAX_ATTEMPTS = 10


def encode_constructor_args(abi: list, args) -> str:
    """ABI-encode constructor arguments as explorers expect them (hex, no 0x)."""
    types = constructor_types(abi)
    if len(types) != len(args):
        raise VerifyError(f"Constructor takes {len(types)} arguments, got {len(args)}")
    if not types:
        return ""
    try:
        # Values given on the command line arrive as strings
        values = [
            int(value, 0) if isinstance(value, str) and kind.startswith(("uint", "int")) else value
            for kind, value in zip(types, args)
        ]
        return encode(types, values).hex()
    except (ValueError, TypeError, EncodingError) as e:
        raise VerifyError(f"Cannot encode constructor arguments {list(args)} as {types}: {e}") from e


def submit_verification(
    network: str,
    api_key: str,
    contract_address: str,
    standard_json_input: dict,
    contract_name: str,
    compiler_version: str,
    constructor_args: str = "",
) -> str:
    """Submit contract for verification. Returns the GUID, or None if already verified."""
    config = EXPLORER_APIS.get(network)
    if not config:
        raise VerifyError(f"Unsupported network: {network}. Supported: {list(EXPLORER_APIS.keys())}")

    print(f"[*] Submitting verification to {config['name']}...")
    print(f"    Contract: {contract_name} at {contract_address}")
    print(f"    Compiler: solc {compiler_version}")

    data = {
        "apikey": api_key,
        "module": "contract",
        "action": "verifysourcecode",
        "contractaddress": contract_address,
        "sourceCode": json.dumps(standard_json_input),
        "codeformat": "solidity-standard-json-input",
        "contractname": contract_name,
        "compilerversion": compiler_version,
        "constructorArguements": constructor_args,  # Note: Etherscan has a typo in their API
    }

    try:
        response = requests.post(config["api_url"], data=data, timeout=60)
        response.raise_for_status()
        result = response.json()
    except requests.RequestException as e:
        raise VerifyError(f"API request failed: {e}") from e

    if result.get("status") == "1":
        guid = result.get("result")
        print(f"[+] Verification submitted successfully!")
        print(f"    GUID: {guid}")
        return guid

    error_msg = str(result.get("result", "Unknown error"))
    if "already verified" in error_msg.lower():
        print(f"[*] Contract is already verified!")
        return None
    if "unable to locate" in error_msg.lower():
        raise VerifyError(f"{contract_address} is not indexed yet: {error_msg}")
    raise VerifyError(f"Verification failed: {error_msg}")


def check_verification_status(
    network: str,
    api_key: str,
    guid: str,
    max_attempts: int = STATUS_MAX_ATTEMPTS,
    interval: float = STATUS_POLL_INTERVAL,
    sleep=time.sleep,
) -> bool:
    """Poll verification status until it passes; failure or timeout raises VerifyError."""
    config = EXPLORER_APIS[network]

    print(f"[*] Checking verification status...")

    for attempt in range(1, max_attempts + 1):
        sleep(interval)

        try:
            response = requests.get(
                config["api_url"],
                params={
                    "apikey": api_key,
                    "module": "contract",
                    "action": "checkverifystatus",
                    "guid": guid,
                },
                timeout=30,
            )
            response.raise_for_status()
            result = response.json()
        except requests.RequestException as e:
            print(f"    Attempt {attempt}/{max_attempts}: Request failed - {e}")
            continue

        status = str(result.get("result", ""))

        if result.get("status") == "1":
            print(f"[+] Verification successful!")
            return True
        elif "pending" in status.lower():
            print(f"    Attempt {attempt}/{max_attempts}: Pending...")
        elif "already verified" in status.lower():
            print(f"[*] Contract is already verified!")
            return True
        elif "fail" in status.lower():
            raise VerifyError(f"Verification failed: {status}")
        else:
            print(f"    Attempt {attempt}/{max_attempts}: {status}")

    raise VerifyError(f"Verification check timed out after {max_attempts} attempts")


class ExplorerVerifier:
    """Verifies deployed contracts on the explorer configured for a network."""

    def __init__(self, network: NetworkConfig, api_key: str, artifacts_dir: str = "artifacts", sleep=time.sleep):
        if network.name not in EXPLORER_APIS:
            raise VerifyError(f"Unsupported network: {network.name}. Supported: {list(EXPLORER_APIS.keys())}")
        if not api_key:
            raise VerifyError(f"Missing API key. Set {network.explorer_key_env} environment variable.")
        self.network = network
        self.api_key = api_key
        self.artifacts_dir = artifacts_dir
        self.sleep = sleep

    def verify(self, reference: ContractReference) -> bool:
        """Verify a ContractReference using its recorded constructor arguments."""
        artifact = load_artifact(reference.name, self.artifacts_dir)
        build_info = load_build_info(reference.name, self.artifacts_dir)

        guid = submit_verification(
            network=self.network.name,
            api_key=self.api_key,
            contract_address=reference.address,
            standard_json_input=build_info["input"],
            contract_name=f"{artifact['sourceName']}:{artifact['contractName']}",
            compiler_version=build_info["compiler_version"],
            constructor_args=encode_constructor_args(artifact["abi"], reference.constructor_args),
        )
        if guid is None:
            return True

        check_verification_status(self.network.name, self.api_key, guid, sleep=self.sleep)

        print(f"[+] View verified contract:")
        print(f"    {self.network.address_url(reference.address)}#code")
        return True


def main():
    load_dotenv()

    if len(sys.argv) < 4:
        print("Usage: python -m scripts.verify_on_explorer <network> <ContractName> <address> [constructor args...]")
        print(f"Supported networks: {', '.join(EXPLORER_APIS.keys())}")
        sys.exit(1)

    reference = ContractReference(sys.argv[2], sys.argv[3], tuple(sys.argv[4:]))

    try:
        network = get_network(sys.argv[1].lower(), os.environ)
        api_key = os.getenv(network.explorer_key_env or "", "")
        verifier = ExplorerVerifier(network, api_key, os.getenv("ARTIFACTS_DIR") or "artifacts")
        verifier.verify(reference)
    except DeploymentError as e:
        print(f"[-] {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"[-] [verify] Verification failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
