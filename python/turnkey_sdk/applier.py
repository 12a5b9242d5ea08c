"""
Location: python/turnkey_sdk/applier.py

Summary:
    Writes a signature returned by the signer service into the matching
    signature slot of a Solana transaction.

Usage:
    Used by client.py as the last step of sign_transaction(). Works with
    both legacy solders Transaction and VersionedTransaction objects.

Example:
    from turnkey_sdk.applier import apply_signature

    tx, signature = apply_signature(result, tx, signer_pubkey)
"""

from typing import Optional, Union

from solders.message import to_bytes_versioned
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction, VersionedTransaction

from .errors import SignerNotRequired, SigningError
from .types import SignatureResult


SIGNATURE_LENGTH = 64

SolanaTransaction = Union[Transaction, VersionedTransaction]


def message_bytes(transaction: SolanaTransaction) -> bytes:
    """
    Return the canonical message bytes that signers sign.

    Args:
        transaction: Legacy or versioned transaction

    Returns:
        Serialized message
    """
    if isinstance(transaction, VersionedTransaction):
        return to_bytes_versioned(transaction.message)
    return bytes(transaction.message_data())


def required_signers(transaction: SolanaTransaction) -> list[Pubkey]:
    """The account keys whose signatures the transaction requires, in slot order."""
    message = transaction.message
    count = message.header.num_required_signatures
    return list(message.account_keys[:count])


def apply_signature(
    result: SignatureResult,
    transaction: SolanaTransaction,
    signer_public_key: Optional[Pubkey],
) -> tuple[SolanaTransaction, Signature]:
    """
    Place a signature into the transaction slot of its signer.

    Only the matched slot changes. All checks run before the transaction
    is touched, so on error it is left exactly as it was. Applying the
    same result twice gives the same transaction as applying it once.

    Args:
        result: Signature returned by the service
        transaction: Transaction to update in place
        signer_public_key: Public key of the signer, or None to locate the
            slot by verifying the signature against each required signer

    Returns:
        The updated transaction and the detached Signature

    Raises:
        SigningError: If the signature is not 64 bytes, or does not verify
            against signer_public_key
        SignerNotRequired: If no required signer matches
    """
    raw = result.raw_signature_bytes
    if len(raw) != SIGNATURE_LENGTH:
        raise SigningError(
            f"Expected a {SIGNATURE_LENGTH}-byte signature, got {len(raw)} bytes"
        )
    signature = Signature.from_bytes(raw)

    signers = required_signers(transaction)
    if signer_public_key is None:
        message = message_bytes(transaction)
        index = next(
            (i for i, key in enumerate(signers) if signature.verify(key, message)),
            None,
        )
    else:
        index = signers.index(signer_public_key) if signer_public_key in signers else None

    signatures = list(transaction.signatures)
    if index is None or index >= len(signatures):
        raise SignerNotRequired(None if signer_public_key is None else str(signer_public_key))
    if signer_public_key is not None and not signature.verify(
        signer_public_key, message_bytes(transaction)
    ):
        raise SigningError(
            f"Signature does not verify against {signer_public_key} for this message"
        )

    signatures[index] = signature
    transaction.signatures = signatures
    return transaction, signature
