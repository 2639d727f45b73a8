#!/usr/bin/env python3
"""
Governance vote signing.

Connects a wallet, signs "Voting for: <choice>" with the connected account
and prints the signature. The vote is not sent anywhere; storing it is left
to whatever off-chain tally consumes the signature.

Usage:
    python -m scripts.vote "Option A" [network]
"""

import os
import sys
from dataclasses import dataclass

from dotenv import load_dotenv
from eth_account import Account
from eth_account.messages import encode_defunct

from scripts.config import DEFAULT_NETWORK, get_network
from scripts.deployer import connect
from scripts.errors import DeploymentError, WalletError

VOTE_OPTIONS = ("Option A", "Option B")


def vote_message(choice: str) -> str:
    return f"Voting for: {choice}"


def _hex(signature) -> str:
    return "0x" + bytes(signature).hex()


@dataclass(frozen=True)
class VoteSignature:
    choice: str
    voter: str
    signature: str


class LocalWallet:
    """Wallet backed by a private key held by this process."""

    def __init__(self, private_key: str):
        self.account = Account.from_key(private_key)

    def request_accounts(self):
        return [self.account.address]

    def sign_message(self, address: str, message: str) -> str:
        if address.lower() != self.account.address.lower():
            raise WalletError(f"{address} is not managed by this wallet")
        signed = self.account.sign_message(encode_defunct(text=message))
        return _hex(signed.signature)


class NodeWallet:
    """Wallet backed by the accounts a node manages (e.g. a local Hardhat node)."""

    def __init__(self, w3):
        self.w3 = w3

    def request_accounts(self):
        return list(self.w3.eth.accounts)

    def sign_message(self, address: str, message: str) -> str:
        return _hex(self.w3.eth.sign(address, text=message))


class VotingSession:
    """Connect-then-vote flow of the governance voting page."""

    def __init__(self, wallet=None):
        self.wallet = wallet
        self.wallet_address = ""
        self.vote = None
        self.message = ""

    @property
    def connected(self) -> bool:
        return bool(self.wallet_address)

    @property
    def connect_label(self) -> str:
        if self.connected:
            return f"Connected: {self.wallet_address[:6]}..."
        return "Connect Wallet"

    def connect(self) -> str:
        if self.wallet is None:
            raise WalletError("Please install a wallet to use this feature.")
        accounts = self.wallet.request_accounts()
        if not accounts:
            raise WalletError("Wallet returned no accounts")
        self.wallet_address = accounts[0]
        return self.wallet_address

    def submit_vote(self, choice: str) -> VoteSignature:
        if not self.connected:
            raise WalletError("Please connect your wallet first.")
        if choice not in VOTE_OPTIONS:
            raise WalletError(f"Unknown vote option {choice!r}. Options: {', '.join(VOTE_OPTIONS)}")

        signature = self.wallet.sign_message(self.wallet_address, vote_message(choice))
        self.vote = choice
        self.message = f"Vote submitted! Signed message: {signature}"
        return VoteSignature(choice, self.wallet_address, signature)


def recover_voter(record: VoteSignature) -> str:
    """Address that produced the signature over the vote message."""
    return Account.recover_message(encode_defunct(text=vote_message(record.choice)), signature=record.signature)


def main():
    load_dotenv()

    if len(sys.argv) < 2:
        print("Usage: python -m scripts.vote <choice> [network]")
        print(f"Options: {', '.join(VOTE_OPTIONS)}")
        sys.exit(1)

    choice = sys.argv[1]
    network_name = sys.argv[2].lower() if len(sys.argv) > 2 else os.getenv("DEPLOY_NETWORK", DEFAULT_NETWORK)

    try:
        private_key = os.getenv("PRIVATE_KEY")
        if private_key:
            wallet = LocalWallet(private_key)
        else:
            wallet = NodeWallet(connect(get_network(network_name, os.environ)))

        session = VotingSession(wallet)
        session.connect()
        print(session.connect_label)

        record = session.submit_vote(choice)
        print(f"Your vote: {record.choice}")
        print(session.message)
    except DeploymentError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"❌ [vote] Vote failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
