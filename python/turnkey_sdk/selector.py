"""
Location: python/turnkey_sdk/selector.py

Summary:
    Key selector resolution. Maps a KeySelector to the SignerIdentity the
    service should sign with, validating key formats on the way.

Usage:
    Used by client.py before building a signing activity. Resolution is a
    pure function of the selector and the client configuration.

Example:
    from turnkey_sdk.selector import resolve_selector
    from turnkey_sdk.types import ExampleKey

    identity = resolve_selector(ExampleKey(), config)
    identity.sign_with    # private key id
    identity.public_key   # Pubkey of the signature slot
"""

import uuid
from typing import Callable, Optional, Union

from solders.pubkey import Pubkey

from .config import TurnkeyConfig
from .errors import ConfigurationError, InvalidKeyFormat
from .types import (
    ExampleKey,
    KeyIdSelector,
    KeySelector,
    PublicKeySelector,
    SignerIdentity,
)


PUBKEY_LENGTH = 32


def parse_public_key(value: Union[Pubkey, bytes, str]) -> Pubkey:
    """
    Parse a Solana public key.

    Args:
        value: Pubkey, 32 raw bytes, or a base58 string

    Returns:
        The parsed Pubkey

    Raises:
        InvalidKeyFormat: If the value is not a 32-byte public key
    """
    if isinstance(value, Pubkey):
        return value
    if isinstance(value, bytes):
        if len(value) != PUBKEY_LENGTH:
            raise InvalidKeyFormat(
                f"Public key must be {PUBKEY_LENGTH} bytes, got {len(value)}"
            )
        return Pubkey.from_bytes(value)
    try:
        return Pubkey.from_string(value.strip())
    except ValueError:
        raise InvalidKeyFormat(f"Invalid base58 public key: {value!r}") from None


def parse_key_id(value: str) -> str:
    """
    Validate a private key id.

    Args:
        value: Private key id

    Returns:
        The key id in canonical lowercase UUID form

    Raises:
        InvalidKeyFormat: If the value is not a UUID
    """
    try:
        return str(uuid.UUID(value.strip()))
    except ValueError:
        raise InvalidKeyFormat(f"Invalid private key id: {value!r}") from None


def _resolve_example(selector: ExampleKey, config: TurnkeyConfig) -> SignerIdentity:
    missing = []
    if not config.example_private_key_id:
        missing.append("example_private_key_id")
    if not config.example_public_key:
        missing.append("example_public_key")
    if missing:
        raise ConfigurationError(
            f"ExampleKey requires {' and '.join(missing)} to be configured"
        )
    try:
        public_key = parse_public_key(config.example_public_key)
    except InvalidKeyFormat as exc:
        raise ConfigurationError(f"example_public_key is not a valid public key: {exc}") from exc
    return SignerIdentity(sign_with=config.example_private_key_id, public_key=public_key)


def _resolve_public_key(selector: PublicKeySelector, config: TurnkeyConfig) -> SignerIdentity:
    public_key = parse_public_key(selector.public_key)
    return SignerIdentity(sign_with=str(public_key), public_key=public_key)


def _resolve_key_id(selector: KeyIdSelector, config: TurnkeyConfig) -> SignerIdentity:
    key_id = parse_key_id(selector.key_id)
    public_key: Optional[Pubkey] = None
    if selector.public_key is not None:
        public_key = parse_public_key(selector.public_key)
    return SignerIdentity(sign_with=key_id, public_key=public_key)


_RESOLVERS: dict[type, Callable[..., SignerIdentity]] = {
    ExampleKey: _resolve_example,
    PublicKeySelector: _resolve_public_key,
    KeyIdSelector: _resolve_key_id,
}


def resolve_selector(selector: KeySelector, config: TurnkeyConfig) -> SignerIdentity:
    """
    Resolve a key selector to a signer identity.

    Args:
        selector: ExampleKey, PublicKeySelector or KeyIdSelector
        config: Client configuration (for the example key)

    Returns:
        A fully populated SignerIdentity

    Raises:
        ConfigurationError: If ExampleKey is used without a valid example
            key configured
        InvalidKeyFormat: If a key or key id is malformed
    """
    resolver = _RESOLVERS.get(type(selector))
    if resolver is None:
        raise TypeError(f"Unsupported key selector: {type(selector).__name__}")
    return resolver(selector, config)
