#!/usr/bin/env python3
"""
Solythra Deployment Script

Deploys Governance, NFTMarketplace, Mintium and Solythis in that order,
wires Mintium and Solythis to their collaborators, then verifies all four
contracts on the network's block explorer.

Usage:
    python -m scripts.deploy [network]

Environment variables:
    PRIVATE_KEY        - Deployer key (MULTISIG_WALLET on gnosis_safe)
    BASESCAN_API_KEY   - Explorer API key for Base networks
    MULTISIG_TREASURY  - Treasury address passed to every contract
    LIQUIDITY_POOL     - Mintium liquidity pool (zero address to skip)
    MINTIUM_TOKEN      - Token address given to the NFTMarketplace
    <NETWORK>_RPC      - RPC endpoint for the network
    VERIFY_FAIL_FAST   - Stop verifying at the first failure
"""

import os
import sys
import time
from dataclasses import dataclass, field
from typing import Dict, List

from dotenv import load_dotenv

from scripts.config import DEFAULT_NETWORK, DeployConfig, is_zero_address, load_deploy_config
from scripts.deployer import ContractReference, Deployer, connect
from scripts.errors import DeploymentError, VerifyError
from scripts.verify_on_explorer import ExplorerVerifier

VERIFY_DELAY_SECONDS = 10

VERIFY_ORDER = ("Mintium", "Solythis", "Governance", "NFTMarketplace")


@dataclass
class DeploymentResult:
    governance: ContractReference
    nft_marketplace: ContractReference
    mintium: ContractReference
    solythis: ContractReference
    wired: List[str] = field(default_factory=list)
    verification: Dict[str, str] = field(default_factory=dict)

    def references(self) -> Dict[str, ContractReference]:
        return {
            "Governance": self.governance,
            "NFTMarketplace": self.nft_marketplace,
            "Mintium": self.mintium,
            "Solythis": self.solythis,
        }

    def addresses(self) -> Dict[str, str]:
        return {name: ref.address for name, ref in self.references().items()}


def deploy_step(deployer, label: str, name: str, *args) -> ContractReference:
    print(f"\n🚀 Deploying {label}...")
    reference = deployer.deploy(name, *args)
    print(f"✅ {label} deployed at: {reference.address}")
    return reference


def wire_mintium(config: DeployConfig, deployer, marketplace: ContractReference) -> List[str]:
    """Point Mintium at the marketplace and liquidity pool, skipping unset addresses."""
    print("\n🛠 Configuring Mintium...")
    wired = []

    if not is_zero_address(marketplace.address):
        deployer.call("Mintium", "setNFTMarketplace", marketplace.address)
        wired.append("Mintium.setNFTMarketplace")
        print("✅ Mintium marketplace set.")

    if not is_zero_address(config.liquidity_pool):
        deployer.call("Mintium", "setLiquidityPool", config.liquidity_pool)
        wired.append("Mintium.setLiquidityPool")
        print("✅ Mintium liquidity pool set.")

    return wired


def wire_solythis(config: DeployConfig, deployer, governance: ContractReference) -> List[str]:
    print("\n🛠 Configuring Solythis Governance & Treasury...")
    deployer.call("Solythis", "setGovernanceContract", governance.address)
    deployer.call("Solythis", "setTreasury", config.treasury)
    print("✅ Solythis governance & treasury set.")
    return ["Solythis.setGovernanceContract", "Solythis.setTreasury"]


def verify_contracts(references: Dict[str, ContractReference], verifier, fail_fast: bool = False) -> Dict[str, str]:
    """
    Verify each contract in VERIFY_ORDER.

    Best-effort by default: every contract is attempted and a single
    VerifyError listing the failures is raised at the end. With fail_fast the
    first failure is raised and the remaining contracts are left unverified.
    """
    results = {name: "SKIPPED" for name in VERIFY_ORDER}
    failures = []

    for name in VERIFY_ORDER:
        print(f"\n--- {name} ---")
        try:
            verifier.verify(references[name])
        except Exception as e:
            # Unexpected errors from artifact parsing or encoding count as failures too
            error = e if isinstance(e, DeploymentError) else VerifyError(f"{type(e).__name__}: {e}")
            results[name] = f"FAILED: {error}"
            print(f"[-] {name}: {error}")
            if fail_fast:
                raise VerifyError(f"Verification of {name} failed: {error}") from e
            failures.append(name)
            continue
        results[name] = "VERIFIED"

    print("\nVerification Summary")
    for name, status in results.items():
        print(f"  {name:20} {status}")

    if failures:
        raise VerifyError(f"Verification failed for: {', '.join(failures)}")
    return results


def run(config: DeployConfig, deployer, verifier=None, sleep=time.sleep) -> DeploymentResult:
    """Deploy, wire and verify the four contracts in strict sequence."""
    initial_owner = deployer.address
    treasury = config.treasury
    print(f"🔹 Deploying from: {initial_owner}")

    governance = deploy_step(deployer, "Governance", "Governance", initial_owner, treasury)
    nft_marketplace = deploy_step(
        deployer, "NFT Marketplace", "NFTMarketplace", initial_owner, config.mintium_token, treasury
    )
    mintium = deploy_step(deployer, "Mintium", "Mintium", initial_owner, treasury)
    solythis = deploy_step(deployer, "Solythis", "Solythis", initial_owner, treasury)

    if mintium.address.lower() != config.mintium_token.lower():
        print(
            f"⚠️  NFTMarketplace was deployed with MINTIUM_TOKEN {config.mintium_token}, "
            f"but Mintium is at {mintium.address}. Check the marketplace token before use."
        )

    result = DeploymentResult(governance, nft_marketplace, mintium, solythis)
    result.wired.extend(wire_mintium(config, deployer, nft_marketplace))
    result.wired.extend(wire_solythis(config, deployer, governance))

    print("\n📍 Contract Addresses:")
    for name, address in result.addresses().items():
        print(f"  {name:20} {address}")

    if verifier is None:
        print(f"\n[*] No block explorer for {config.network.name}, skipping verification.")
        return result

    print(f"\n🔍 Waiting before verifying contracts on {config.network.label}...")
    sleep(VERIFY_DELAY_SECONDS)

    print("\n🔍 Verifying contracts...")
    result.verification = verify_contracts(result.references(), verifier, config.verify_fail_fast)
    print("✅ Contract verification complete.")

    return result


def main():
    load_dotenv()

    network = sys.argv[1].lower() if len(sys.argv) > 1 else os.getenv("DEPLOY_NETWORK", DEFAULT_NETWORK)

    try:
        config = load_deploy_config(network, os.environ)
        print(f"\n🚀 Starting Deployment on {config.network.label}...")

        w3 = connect(config.network)
        deployer = Deployer(w3, config.private_key, config.artifacts_dir)
        print(f"💰 Balance: {deployer.get_balance():.4f} ETH")

        verifier = None
        if config.explorer_api_key:
            verifier = ExplorerVerifier(config.network, config.explorer_api_key, config.artifacts_dir)

        run(config, deployer, verifier)
    except DeploymentError as e:
        print(f"❌ ERROR: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"❌ ERROR: Deployment failed: {e}", file=sys.stderr)
        sys.exit(1)

    print("\n🎉 Deployment successful! 🎉")


if __name__ == "__main__":
    main()
