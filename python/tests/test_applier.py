"""
Tests for turnkey_sdk.applier module.

Tests that signatures land in exactly the slot of their signer, that
failed applications leave the transaction untouched, and that legacy and
versioned transactions are both supported.
"""

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import Message, MessageV0
from solders.signature import Signature
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction, VersionedTransaction

from turnkey_sdk.applier import apply_signature, message_bytes, required_signers
from turnkey_sdk.errors import SignerNotRequired, SigningError
from turnkey_sdk.types import SignatureResult

from conftest import signature_parts


def _result_for(keypair: Keypair, tx) -> SignatureResult:
    r, s = signature_parts(keypair, message_bytes(tx))
    return SignatureResult(r=r, s=s, activity_id="act-1")


@pytest.fixture
def fee_payer():
    return Keypair()


@pytest.fixture
def two_signer_tx(fee_payer, example_keypair, recipient):
    """Transfer from the example key with a separate fee payer."""
    ix = transfer(TransferParams(
        from_pubkey=example_keypair.pubkey(),
        to_pubkey=recipient,
        lamports=100,
    ))
    message = Message.new_with_blockhash([ix], fee_payer.pubkey(), Hash.default())
    return Transaction.new_unsigned(message)


class TestApplySignature:
    """Tests for apply_signature."""

    def test_fills_signer_slot(self, unsigned_tx, example_keypair):
        """Test that the signature ends up in the signer's slot."""
        assert unsigned_tx.signatures[0] == Signature.default()
        result = _result_for(example_keypair, unsigned_tx)

        tx, signature = apply_signature(result, unsigned_tx, example_keypair.pubkey())

        assert tx is unsigned_tx
        assert bytes(signature) == result.raw_signature_bytes
        assert tx.signatures[0] == signature
        tx.verify()

    def test_message_unchanged(self, unsigned_tx, example_keypair):
        """Test that instructions, blockhash and payer are not touched."""
        before = message_bytes(unsigned_tx)
        apply_signature(
            _result_for(example_keypair, unsigned_tx), unsigned_tx, example_keypair.pubkey()
        )
        assert message_bytes(unsigned_tx) == before

    def test_second_signer_slot(self, two_signer_tx, fee_payer, example_keypair):
        """Test that only the matching slot changes in a multi-signer tx."""
        signers = required_signers(two_signer_tx)
        assert signers == [fee_payer.pubkey(), example_keypair.pubkey()]

        apply_signature(
            _result_for(example_keypair, two_signer_tx),
            two_signer_tx,
            example_keypair.pubkey(),
        )

        assert two_signer_tx.signatures[0] == Signature.default()
        assert two_signer_tx.signatures[1] != Signature.default()

    def test_idempotent(self, unsigned_tx, example_keypair):
        """Test that applying twice equals applying once."""
        result = _result_for(example_keypair, unsigned_tx)
        apply_signature(result, unsigned_tx, example_keypair.pubkey())
        once = bytes(unsigned_tx)
        apply_signature(result, unsigned_tx, example_keypair.pubkey())
        assert bytes(unsigned_tx) == once

    def test_signer_not_required(self, unsigned_tx, example_keypair, recipient):
        """Test that a non-signer is refused and the tx stays unchanged."""
        result = _result_for(example_keypair, unsigned_tx)
        before = bytes(unsigned_tx)

        with pytest.raises(SignerNotRequired) as exc_info:
            apply_signature(result, unsigned_tx, recipient)

        assert exc_info.value.public_key == str(recipient)
        assert bytes(unsigned_tx) == before

    def test_unrelated_key_not_required(self, unsigned_tx, example_keypair):
        """Test that a key absent from the message is refused."""
        before = bytes(unsigned_tx)
        with pytest.raises(SignerNotRequired):
            apply_signature(
                _result_for(example_keypair, unsigned_tx),
                unsigned_tx,
                Keypair().pubkey(),
            )
        assert bytes(unsigned_tx) == before

    def test_wrong_signature_length(self, unsigned_tx, example_keypair):
        """Test that a truncated signature is refused."""
        result = SignatureResult(r="01" * 32, s="02" * 31)
        before = bytes(unsigned_tx)
        with pytest.raises(SigningError, match="64-byte"):
            apply_signature(result, unsigned_tx, example_keypair.pubkey())
        assert bytes(unsigned_tx) == before

    def test_signature_from_other_key(self, unsigned_tx, example_keypair):
        """Test that a signature not made by the named signer is refused."""
        result = _result_for(Keypair(), unsigned_tx)
        before = bytes(unsigned_tx)

        with pytest.raises(SigningError, match="does not verify"):
            apply_signature(result, unsigned_tx, example_keypair.pubkey())

        assert bytes(unsigned_tx) == before

    def test_signature_over_other_message(self, unsigned_tx, two_signer_tx, example_keypair):
        """Test that a signature over a different message is refused."""
        result = _result_for(example_keypair, two_signer_tx)
        before = bytes(unsigned_tx)

        with pytest.raises(SigningError):
            apply_signature(result, unsigned_tx, example_keypair.pubkey())

        assert bytes(unsigned_tx) == before


class TestLocateByVerification:
    """Tests for slot lookup when the public key is unknown."""

    def test_finds_slot_by_signature(self, two_signer_tx, example_keypair):
        """Test that the verifying signer's slot is used."""
        apply_signature(_result_for(example_keypair, two_signer_tx), two_signer_tx, None)
        assert two_signer_tx.signatures[0] == Signature.default()
        assert two_signer_tx.signatures[1] != Signature.default()

    def test_no_verifying_signer(self, unsigned_tx):
        """Test that a signature from an outside key is refused."""
        before = bytes(unsigned_tx)
        with pytest.raises(SignerNotRequired) as exc_info:
            apply_signature(_result_for(Keypair(), unsigned_tx), unsigned_tx, None)
        assert exc_info.value.public_key is None
        assert bytes(unsigned_tx) == before


class TestVersionedTransaction:
    """Tests with v0 messages."""

    def test_fills_slot(self, example_keypair, recipient):
        """Test applying to a VersionedTransaction."""
        payer = example_keypair.pubkey()
        ix = transfer(TransferParams(from_pubkey=payer, to_pubkey=recipient, lamports=1))
        message = MessageV0.try_compile(payer, [ix], [], Hash.default())
        tx = VersionedTransaction.populate(message, [Signature.default()])

        result = _result_for(example_keypair, tx)
        signed, signature = apply_signature(result, tx, payer)

        assert signed.signatures[0] == signature
        assert signature.verify(payer, message_bytes(tx))
