"""
Shared pytest fixtures for the deployment scripts.

Provides an in-process chain, a funded deployer key, stub Hardhat artifacts
and recording stand-ins for the deployer and explorer verifier.
"""

import json

import pytest
from eth_account import Account
from eth_tester import EthereumTester, PyEVMBackend
from web3 import Web3

from scripts.config import DeployConfig, ZERO_ADDRESS, get_network
from scripts.deployer import ContractReference
from scripts.errors import VerifyError, WireError

DEPLOYER_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
DEPLOYER_ADDRESS = Account.from_key(DEPLOYER_KEY).address

TREASURY = "0x1111111111111111111111111111111111111111"
LIQUIDITY_POOL = "0x2222222222222222222222222222222222222222"
MINTIUM_TOKEN = "0x3333333333333333333333333333333333333333"

# Init code that deploys a single STOP opcode: every call to it succeeds
ACCEPT_ALL_BYTECODE = "0x60016000f3"
# Init code that reverts immediately
REVERT_BYTECODE = "0x60006000fd"


def _address_inputs(*names):
    return [{"internalType": "address", "name": name, "type": "address"} for name in names]


def _setter(name):
    return {
        "type": "function",
        "name": name,
        "inputs": _address_inputs("target"),
        "outputs": [],
        "stateMutability": "nonpayable",
    }


ERC20_FUNCTIONS = [
    {
        "type": "function",
        "name": "transfer",
        "inputs": _address_inputs("to") + [{"internalType": "uint256", "name": "value", "type": "uint256"}],
        "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "totalSupply",
        "inputs": [],
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
    },
]

STUB_ABIS = {
    "Governance": [
        {"type": "constructor", "inputs": _address_inputs("initialOwner", "treasury"), "stateMutability": "nonpayable"},
    ],
    "NFTMarketplace": [
        {
            "type": "constructor",
            "inputs": _address_inputs("initialOwner", "mintiumToken", "treasury"),
            "stateMutability": "nonpayable",
        },
    ],
    "Mintium": [
        {"type": "constructor", "inputs": _address_inputs("initialOwner", "treasury"), "stateMutability": "nonpayable"},
        _setter("setNFTMarketplace"),
        _setter("setLiquidityPool"),
    ] + ERC20_FUNCTIONS,
    "Solythis": [
        {"type": "constructor", "inputs": _address_inputs("initialOwner", "treasury"), "stateMutability": "nonpayable"},
        _setter("setGovernanceContract"),
        _setter("setTreasury"),
    ] + ERC20_FUNCTIONS,
}


def write_artifacts(root, bytecode=ACCEPT_ALL_BYTECODE, overrides=None):
    """Write Hardhat-style artifacts, debug files and one build-info under root."""
    overrides = overrides or {}
    build_info_dir = root / "build-info"
    build_info_dir.mkdir(parents=True, exist_ok=True)

    build_info = {
        "solcVersion": "0.8.22",
        "solcLongVersion": "0.8.22+commit.4fc1097e",
        "input": {
            "language": "Solidity",
            "sources": {f"contracts/{name}.sol": {"content": "// stub"} for name in STUB_ABIS},
            "settings": {"optimizer": {"enabled": True, "runs": 10000}, "viaIR": True},
        },
    }
    with open(build_info_dir / "stub.json", "w") as f:
        json.dump(build_info, f)

    for name, abi in STUB_ABIS.items():
        contract_dir = root / "contracts" / f"{name}.sol"
        contract_dir.mkdir(parents=True, exist_ok=True)
        with open(contract_dir / f"{name}.json", "w") as f:
            json.dump(
                {
                    "_format": "hh-sol-artifact-1",
                    "contractName": name,
                    "sourceName": f"contracts/{name}.sol",
                    "abi": abi,
                    "bytecode": overrides.get(name, bytecode),
                },
                f,
            )
        with open(contract_dir / f"{name}.dbg.json", "w") as f:
            json.dump({"_format": "hh-sol-dbg-1", "buildInfo": "../../build-info/stub.json"}, f)

    return str(root)


@pytest.fixture
def artifacts_dir(tmp_path):
    """Stub artifacts whose contracts accept every call"""
    return write_artifacts(tmp_path / "artifacts")


@pytest.fixture
def eth_tester():
    """Create a fresh EthereumTester for each test"""
    return EthereumTester(backend=PyEVMBackend())


@pytest.fixture
def w3(eth_tester):
    """Create Web3 instance connected to EthereumTester"""
    from web3.providers.eth_tester import EthereumTesterProvider
    return Web3(EthereumTesterProvider(eth_tester))


@pytest.fixture
def owner(w3):
    """First pre-funded test account"""
    return w3.eth.accounts[0]


@pytest.fixture
def deployer_key(w3, owner):
    """Private key of a funded account the Deployer can sign for"""
    tx_hash = w3.eth.send_transaction({
        "from": owner,
        "to": DEPLOYER_ADDRESS,
        "value": w3.to_wei(10, "ether"),
    })
    w3.eth.wait_for_transaction_receipt(tx_hash)
    return DEPLOYER_KEY


@pytest.fixture
def base_sepolia():
    return get_network("base_sepolia", {})


@pytest.fixture
def make_config(base_sepolia, artifacts_dir):
    """Factory for DeployConfig with overridable fields"""
    def _make(**overrides):
        values = {
            "network": base_sepolia,
            "private_key": DEPLOYER_KEY,
            "explorer_api_key": "test-api-key",
            "treasury": TREASURY,
            "liquidity_pool": LIQUIDITY_POOL,
            "mintium_token": MINTIUM_TOKEN,
            "verify_fail_fast": False,
            "artifacts_dir": artifacts_dir,
        }
        values.update(overrides)
        return DeployConfig(**values)
    return _make


@pytest.fixture
def full_env():
    """Environment with every deployment variable for base_sepolia"""
    return {
        "PRIVATE_KEY": DEPLOYER_KEY,
        "BASESCAN_API_KEY": "test-api-key",
        "MULTISIG_TREASURY": TREASURY,
        "LIQUIDITY_POOL": LIQUIDITY_POOL,
        "MINTIUM_TOKEN": MINTIUM_TOKEN,
        "BASE_SEPOLIA_RPC": "https://sepolia.base.example",
    }


class FakeDeployer:
    """Records deploy and wiring calls instead of sending transactions"""

    def __init__(self, address=DEPLOYER_ADDRESS, zero_addresses=(), fail_call=None):
        self.address = address
        self.zero_addresses = set(zero_addresses)
        self.fail_call = fail_call
        self.deploys = []
        self.calls = []

    def deploy(self, name, *args):
        self.deploys.append((name, args))
        if name in self.zero_addresses:
            address = ZERO_ADDRESS
        else:
            address = Web3.to_checksum_address(f"0x{len(self.deploys):040x}")
        return ContractReference(name, address, tuple(args), f"0x{len(self.deploys):064x}")

    def call(self, name, function, *args):
        if self.fail_call == function:
            raise WireError(f"Call reverted: {name}.{function}")
        self.calls.append((name, function, args))

    def get_balance(self):
        return 1


class FakeVerifier:
    """Records verification requests, failing for the named contracts"""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.verified = []

    def verify(self, reference):
        self.verified.append(reference)
        if reference.name in self.failing:
            raise VerifyError(f"Verification failed: {reference.name}")
        return True


@pytest.fixture
def fake_deployer():
    return FakeDeployer()


@pytest.fixture
def fake_verifier():
    return FakeVerifier()
