"""
Chain connection and transaction signing for the deployment scripts.

The Deployer signs locally with the configured key, keeps its own nonce and
waits for every receipt before returning, so calls made through it are
strictly sequential.
"""

from dataclasses import dataclass
from typing import Tuple

from eth_account import Account
from web3 import Web3

from scripts.artifacts import load_artifact
from scripts.config import NetworkConfig
from scripts.errors import DeployError, DeploymentError, WireError

DEPLOY_GAS = 6_000_000
CALL_GAS = 200_000
RECEIPT_TIMEOUT = 300


@dataclass(frozen=True)
class ContractReference:
    """A contract deployed during this run."""

    name: str
    address: str
    constructor_args: Tuple
    tx_hash: str = ""


def connect(network: NetworkConfig) -> Web3:
    """Connect to a named network and make sure the node serves that chain."""
    w3 = Web3(Web3.HTTPProvider(network.rpc_url, request_kwargs={"timeout": 30}))
    if not w3.is_connected():
        raise DeploymentError(f"Failed to connect to {network.rpc_url}", step="connect")

    chain_id = w3.eth.chain_id
    if chain_id != network.chain_id:
        raise DeploymentError(
            f"{network.rpc_url} reports chain id {chain_id}, expected {network.chain_id} for {network.name}",
            step="connect",
        )
    return w3


class Deployer:
    """Handles contract deployment and configuration."""

    def __init__(self, w3: Web3, private_key: str, artifacts_dir: str = "artifacts"):
        self.w3 = w3
        self.private_key = private_key
        self.artifacts_dir = artifacts_dir
        self.deployer = Account.from_key(private_key).address
        self.chain_id = w3.eth.chain_id
        self.nonce = w3.eth.get_transaction_count(self.deployer)
        self.deployed = {}

    @property
    def address(self) -> str:
        return self.deployer

    def _send(self, tx: dict):
        signed_tx = self.w3.eth.account.sign_transaction(tx, self.private_key)
        tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        self.nonce += 1
        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=RECEIPT_TIMEOUT)
        return tx_hash, receipt

    def _tx_params(self, gas: int) -> dict:
        return {
            "from": self.deployer,
            "nonce": self.nonce,
            "gas": gas,
            "gasPrice": self.w3.eth.gas_price,
            "chainId": self.chain_id,
        }

    def deploy(self, name: str, *args) -> ContractReference:
        """Deploy a contract from its artifact and wait for confirmation."""
        artifact = load_artifact(name, self.artifacts_dir)
        contract = self.w3.eth.contract(abi=artifact["abi"], bytecode=artifact["bytecode"])

        try:
            tx = contract.constructor(*args).build_transaction(self._tx_params(DEPLOY_GAS))
            tx_hash, receipt = self._send(tx)
        except Exception as e:
            raise DeployError(f"Deployment of {name} failed: {e}") from e

        if receipt.status != 1 or not receipt.contractAddress:
            raise DeployError(f"Deployment of {name} reverted (tx {tx_hash.hex()})")

        address = receipt.contractAddress
        self.deployed[name] = {"address": address, "abi": artifact["abi"]}
        return ContractReference(name, address, tuple(args), tx_hash.hex())

    def at(self, name: str, address: str):
        """Attach to an already deployed contract."""
        artifact = load_artifact(name, self.artifacts_dir)
        self.deployed[name] = {
            "address": Web3.to_checksum_address(address),
            "abi": artifact["abi"],
        }
        return self.contract(name)

    def contract(self, name: str):
        info = self.deployed[name]
        return self.w3.eth.contract(address=info["address"], abi=info["abi"])

    def call(self, name: str, function: str, *args):
        """Send a state-changing call to a deployed contract."""
        if name not in self.deployed:
            raise WireError(f"{name} has not been deployed or attached")

        try:
            func = getattr(self.contract(name).functions, function)
            tx = func(*args).build_transaction(self._tx_params(CALL_GAS))
            tx_hash, receipt = self._send(tx)
        except Exception as e:
            raise WireError(f"Call failed: {name}.{function}: {e}") from e

        if receipt.status != 1:
            raise WireError(f"Call reverted: {name}.{function} (tx {tx_hash.hex()})")

        return receipt

    def get_balance(self) -> float:
        """Get deployer balance in ETH."""
        return self.w3.from_wei(self.w3.eth.get_balance(self.deployer), "ether")
