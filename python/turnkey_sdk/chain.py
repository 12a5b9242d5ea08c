"""
Location: python/turnkey_sdk/chain.py

Summary:
    Protocols for the Solana collaborators the client depends on but does
    not implement: a source of recent blockhashes and a broadcaster for
    signed transactions.

Usage:
    Implement these protocols over your RPC client of choice (for example
    solana-py's AsyncClient) and pass them to build_unsigned_transaction()
    and TurnkeyClient.sign_and_send().

Example:
    from turnkey_sdk.chain import build_unsigned_transaction

    class RpcBlockhashes:
        async def get_latest_blockhash(self) -> Hash:
            resp = await rpc.get_latest_blockhash()
            return resp.value.blockhash

    tx = await build_unsigned_transaction([ix], payer, RpcBlockhashes())
"""

from typing import Protocol, Sequence, runtime_checkable

from solders.hash import Hash
from solders.instruction import Instruction
from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction


@runtime_checkable
class BlockhashSource(Protocol):
    """
    Protocol for fetching a recent network checkpoint.

    The blockhash is embedded in the message before it is signed.
    """

    async def get_latest_blockhash(self) -> Hash:
        """
        Get a recent blockhash.

        Returns:
            The blockhash to build the message with
        """
        ...


@runtime_checkable
class TransactionBroadcaster(Protocol):
    """Protocol for submitting a signed transaction to the network."""

    async def send_transaction(self, transaction: Transaction) -> Signature:
        """
        Broadcast a fully signed transaction.

        Args:
            transaction: The signed transaction

        Returns:
            The transaction signature reported by the network
        """
        ...


async def build_unsigned_transaction(
    instructions: Sequence[Instruction],
    fee_payer: Pubkey,
    blockhashes: BlockhashSource,
) -> Transaction:
    """
    Build an unsigned transaction over a fresh blockhash.

    Args:
        instructions: Instructions in execution order
        fee_payer: Account paying the fee (first required signer)
        blockhashes: Source of the recent blockhash

    Returns:
        Transaction with default (empty) signatures in every slot
    """
    blockhash = await blockhashes.get_latest_blockhash()
    message = Message.new_with_blockhash(list(instructions), fee_payer, blockhash)
    return Transaction.new_unsigned(message)
