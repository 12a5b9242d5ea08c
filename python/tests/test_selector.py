"""
Tests for turnkey_sdk.selector module.

Tests resolution of each KeySelector variant to a SignerIdentity and the
errors raised for missing configuration and malformed keys.
"""

import pytest
from solders.keypair import Keypair

from turnkey_sdk.errors import ConfigurationError, InvalidKeyFormat
from turnkey_sdk.selector import parse_key_id, parse_public_key, resolve_selector
from turnkey_sdk.types import ExampleKey, KeyIdSelector, PublicKeySelector

from conftest import EXAMPLE_KEY_ID


class TestExampleKey:
    """Tests for ExampleKey resolution."""

    def test_resolves_from_config(self, config, example_keypair):
        """Test that the configured example key is used."""
        identity = resolve_selector(ExampleKey(), config)
        assert identity.sign_with == EXAMPLE_KEY_ID
        assert identity.public_key == example_keypair.pubkey()

    def test_deterministic(self, config):
        """Test that resolving twice gives the same identity."""
        assert resolve_selector(ExampleKey(), config) == resolve_selector(ExampleKey(), config)

    def test_missing_key_id(self, config):
        """Test that a missing example key id is a configuration error."""
        config = config.model_copy(update={"example_private_key_id": None})
        with pytest.raises(ConfigurationError, match="example_private_key_id"):
            resolve_selector(ExampleKey(), config)

    def test_missing_public_key(self, config):
        """Test that a missing example public key is a configuration error."""
        config = config.model_copy(update={"example_public_key": None})
        with pytest.raises(ConfigurationError, match="example_public_key"):
            resolve_selector(ExampleKey(), config)

    def test_malformed_configured_public_key(self, config):
        """Test that a bad configured public key is a configuration error."""
        config = config.model_copy(update={"example_public_key": "not-base58-0OIl"})
        with pytest.raises(ConfigurationError, match="example_public_key") as exc_info:
            resolve_selector(ExampleKey(), config)
        assert isinstance(exc_info.value.__cause__, InvalidKeyFormat)


class TestPublicKeySelector:
    """Tests for PublicKeySelector resolution."""

    @pytest.mark.parametrize("form", ["pubkey", "bytes", "str"])
    def test_all_forms_resolve_alike(self, config, form):
        """Test Pubkey, bytes and base58 inputs resolve to the same identity."""
        pubkey = Keypair().pubkey()
        value = {"pubkey": pubkey, "bytes": bytes(pubkey), "str": str(pubkey)}[form]

        identity = resolve_selector(PublicKeySelector(public_key=value), config)

        assert identity.public_key == pubkey
        assert identity.sign_with == str(pubkey)

    def test_wrong_length_bytes(self, config):
        """Test that 31 bytes are rejected."""
        with pytest.raises(InvalidKeyFormat, match="32 bytes"):
            resolve_selector(PublicKeySelector(public_key=b"\x01" * 31), config)

    def test_invalid_base58(self, config):
        """Test that an invalid base58 string is rejected."""
        with pytest.raises(InvalidKeyFormat):
            resolve_selector(PublicKeySelector(public_key="0OIl"), config)

    def test_does_not_need_example_config(self, config):
        """Test that explicit keys work without example key config."""
        config = config.model_copy(
            update={"example_private_key_id": None, "example_public_key": None}
        )
        pubkey = Keypair().pubkey()
        identity = resolve_selector(PublicKeySelector(public_key=pubkey), config)
        assert identity.public_key == pubkey


class TestKeyIdSelector:
    """Tests for KeyIdSelector resolution."""

    def test_key_id_only(self, config):
        """Test a key id without public key."""
        identity = resolve_selector(KeyIdSelector(key_id=EXAMPLE_KEY_ID), config)
        assert identity.sign_with == EXAMPLE_KEY_ID
        assert identity.public_key is None

    def test_key_id_with_public_key(self, config):
        """Test a key id with its public key."""
        pubkey = Keypair().pubkey()
        identity = resolve_selector(
            KeyIdSelector(key_id=EXAMPLE_KEY_ID, public_key=str(pubkey)), config
        )
        assert identity.public_key == pubkey

    def test_key_id_normalized(self, config):
        """Test that key ids are normalized to lowercase UUID form."""
        identity = resolve_selector(KeyIdSelector(key_id=EXAMPLE_KEY_ID.upper()), config)
        assert identity.sign_with == EXAMPLE_KEY_ID

    def test_invalid_key_id(self, config):
        """Test that a non-UUID key id is rejected."""
        with pytest.raises(InvalidKeyFormat, match="private key id"):
            resolve_selector(KeyIdSelector(key_id="my-key"), config)

    def test_invalid_public_key(self, config):
        """Test that a malformed optional public key is rejected."""
        with pytest.raises(InvalidKeyFormat):
            resolve_selector(
                KeyIdSelector(key_id=EXAMPLE_KEY_ID, public_key=b"\x00" * 5), config
            )


class TestParsers:
    """Tests for the standalone parsing helpers."""

    def test_parse_public_key_strips_whitespace(self):
        """Test that surrounding whitespace is ignored."""
        pubkey = Keypair().pubkey()
        assert parse_public_key(f"  {pubkey}\n") == pubkey

    def test_parse_key_id_rejects_empty(self):
        """Test that an empty key id is rejected."""
        with pytest.raises(InvalidKeyFormat):
            parse_key_id("")

    def test_unsupported_selector_type(self, config):
        """Test that an object outside the union is refused."""
        with pytest.raises(TypeError):
            resolve_selector(object(), config)
