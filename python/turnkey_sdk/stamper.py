"""
Location: python/turnkey_sdk/stamper.py

Summary:
    Request stamping for the signer service. A stamp is an ECDSA P-256
    signature over the exact request body, made with the caller's API key
    and sent in the X-Stamp header.

Usage:
    Used by poller.py and client.py. The body passed to stamp() must be the
    very bytes handed to the transport; re-serializing in between
    invalidates the stamp at the service.

Example:
    from turnkey_sdk.stamper import Stamper, encode_stamp

    stamper = Stamper(config.credential)
    body = request.to_body()
    headers = {"X-Stamp": encode_stamp(stamper.stamp(body))}
"""

import base64

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from .errors import SigningError
from .types import ApiStamp, Credential, STAMP_SCHEME_P256


STAMP_HEADER = "X-Stamp"


class Stamper:
    """
    Stamps request bodies with the caller's API key.

    The private key is parsed once, at construction, and kept as opaque
    signing material for the lifetime of the stamper.

    Attributes:
        public_key: Compressed API public key, hex
    """

    def __init__(self, credential: Credential):
        """
        Initialize the stamper.

        Args:
            credential: API credential holding the hex P-256 key pair

        Raises:
            SigningError: If the private key is malformed or does not
                belong to the declared public key
        """
        self.public_key = credential.api_public_key.lower()
        self._private_key = _load_private_key(credential.api_private_key.get_secret_value())

        derived = self._private_key.public_key().public_bytes(
            Encoding.X962, PublicFormat.CompressedPoint
        ).hex()
        if derived != self.public_key:
            raise SigningError("API private key does not match the declared API public key")

    def __repr__(self) -> str:
        return f"Stamper(public_key={self.public_key!r})"

    def stamp(self, body: bytes) -> ApiStamp:
        """
        Compute the stamp for a request body.

        Args:
            body: Exact bytes that will be transmitted

        Returns:
            ApiStamp with the hex DER signature

        Raises:
            SigningError: If the signing operation fails
        """
        try:
            signature = self._private_key.sign(body, ec.ECDSA(hashes.SHA256()))
        except (ValueError, TypeError) as exc:
            raise SigningError(f"Failed to stamp request: {exc}") from exc
        return ApiStamp(
            public_key=self.public_key,
            signature=signature.hex(),
            scheme=STAMP_SCHEME_P256,
        )


def encode_stamp(stamp: ApiStamp) -> str:
    """
    Encode a stamp as the X-Stamp header value.

    The header is the compact JSON stamp, base64url encoded without
    padding.

    Args:
        stamp: The stamp to encode

    Returns:
        Header value string
    """
    raw = stamp.model_dump_json(by_alias=True).encode("utf-8")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def decode_stamp(header_value: str) -> ApiStamp:
    """
    Decode an X-Stamp header value back into an ApiStamp.

    Args:
        header_value: base64url encoded stamp

    Returns:
        The decoded ApiStamp
    """
    padded = header_value + "=" * (-len(header_value) % 4)
    return ApiStamp.model_validate_json(base64.urlsafe_b64decode(padded))


def verify_stamp(stamp: ApiStamp, body: bytes) -> bool:
    """
    Check a stamp against its declared public key.

    Args:
        stamp: The stamp to check
        body: The request body it claims to cover

    Returns:
        True if the signature verifies, False otherwise
    """
    if stamp.scheme != STAMP_SCHEME_P256:
        return False
    try:
        public_key = ec.EllipticCurvePublicKey.from_encoded_point(
            ec.SECP256R1(), bytes.fromhex(stamp.public_key)
        )
        public_key.verify(bytes.fromhex(stamp.signature), body, ec.ECDSA(hashes.SHA256()))
    except (InvalidSignature, ValueError):
        return False
    return True


def _load_private_key(private_key_hex: str) -> ec.EllipticCurvePrivateKey:
    try:
        scalar = bytes.fromhex(private_key_hex)
    except ValueError:
        raise SigningError("API private key is not valid hex") from None
    if len(scalar) != 32:
        raise SigningError("API private key must be 32 bytes")
    try:
        return ec.derive_private_key(int.from_bytes(scalar, "big"), ec.SECP256R1())
    except ValueError:
        raise SigningError("API private key is not a valid P-256 scalar") from None
