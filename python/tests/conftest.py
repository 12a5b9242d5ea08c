"""
Shared pytest fixtures for turnkey-sdk tests.

This module provides common fixtures used across all test files,
including API and Solana key pairs, client configuration, unsigned
transactions and a fake clock for deterministic polling.
"""

import pytest
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import Message
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from turnkey_sdk.config import TurnkeyConfig


EXAMPLE_KEY_ID = "7d1d3a6c-2f4e-4b8a-9c3e-5f6a7b8c9d0e"
ORGANIZATION_ID = "org-11111111-2222-3333-4444-555555555555"
BASE_URL = "https://api.turnkey.test"


class FakeClock:
    """Monotonic clock whose time only moves when sleep() is awaited."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def api_key_pair():
    """Fresh P-256 API key pair as (private_hex, compressed_public_hex)."""
    private_key = ec.generate_private_key(ec.SECP256R1())
    private_hex = format(private_key.private_numbers().private_value, "064x")
    public_hex = private_key.public_key().public_bytes(
        Encoding.X962, PublicFormat.CompressedPoint
    ).hex()
    return private_hex, public_hex


@pytest.fixture
def example_keypair():
    """Solana key pair standing in for the enclave-held example key."""
    return Keypair()


@pytest.fixture
def recipient():
    """Transfer recipient."""
    return Keypair().pubkey()


@pytest.fixture
def config(api_key_pair, example_keypair):
    """Client configuration with the example key set up."""
    private_hex, public_hex = api_key_pair
    return TurnkeyConfig(
        organization_id=ORGANIZATION_ID,
        api_public_key=public_hex,
        api_private_key=private_hex,
        base_url=BASE_URL,
        example_private_key_id=EXAMPLE_KEY_ID,
        example_public_key=str(example_keypair.pubkey()),
    )


@pytest.fixture
def unsigned_tx(example_keypair, recipient):
    """Unsigned transfer paid and signed by the example key."""
    payer = example_keypair.pubkey()
    ix = transfer(TransferParams(from_pubkey=payer, to_pubkey=recipient, lamports=100))
    message = Message.new_with_blockhash([ix], payer, Hash.default())
    return Transaction.new_unsigned(message)


@pytest.fixture
def clock():
    """Fake clock starting at t=0."""
    return FakeClock()


def signature_parts(keypair: Keypair, message: bytes) -> tuple[str, str]:
    """Sign message like the enclave would and split into (r, s) hex."""
    raw = bytes(keypair.sign_message(message))
    return raw[:32].hex(), raw[32:].hex()


def activity_payload(
    activity_id: str,
    status: str,
    r: str = None,
    s: str = None,
    failure: str = None,
) -> dict:
    """Build an activity response body as the service returns it."""
    activity = {
        "id": activity_id,
        "organizationId": ORGANIZATION_ID,
        "status": f"ACTIVITY_STATUS_{status}",
        "type": "ACTIVITY_TYPE_SIGN_RAW_PAYLOAD_V2",
    }
    if r is not None:
        activity["result"] = {"signRawPayloadResult": {"r": r, "s": s, "v": "00"}}
    if failure is not None:
        activity["failure"] = {"code": 7, "message": failure}
    return {"activity": activity}
