"""
Location: python/turnkey_sdk/errors.py

Summary:
    Exception hierarchy for turnkey-sdk. Every failure surfaced by the
    client is a subclass of TurnkeyError so callers can catch the whole
    family or a single category.

Usage:
    Raised by the stamper, transport, poller, selector resolver and
    signature applier. The client facade propagates them unchanged.

Example:
    from turnkey_sdk.errors import ActivityTimeoutError

    try:
        tx, result = await client.sign_transaction(tx, ExampleKey())
    except ActivityTimeoutError as exc:
        # Outcome unknown - the activity may still complete
        await reconcile_later(exc.activity_id)
"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .types import TurnkeyErrorResponse


class TurnkeyError(Exception):
    """Base exception for all turnkey-sdk errors."""
    pass


class ConfigurationError(TurnkeyError):
    """Exception raised when client configuration is missing or invalid."""
    pass


class InvalidKeyFormat(TurnkeyError):
    """Exception raised when a key selector carries a malformed key."""
    pass


class SigningError(TurnkeyError):
    """Exception raised when a local cryptographic operation fails."""
    pass


class NetworkError(TurnkeyError):
    """Exception raised when the signer service could not be reached."""
    pass


class MalformedResponseError(TurnkeyError):
    """Exception raised when the service returns an unexpected payload."""
    pass


class HttpError(TurnkeyError):
    """
    Exception raised when the signer service rejects a request.

    Attributes:
        status: HTTP status code
        body: Raw response body text
        error: Parsed service error payload, if the body had one
    """

    def __init__(
        self,
        status: int,
        body: str,
        error: Optional["TurnkeyErrorResponse"] = None,
    ):
        self.status = status
        self.body = body
        self.error = error
        if error is not None:
            message = f"HTTP {status}: {error.describe()}"
        else:
            message = f"HTTP {status}: {body[:200]}"
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        """Server faults (5xx) may succeed on a later poll."""
        return self.status >= 500


class ActivityFailedError(TurnkeyError):
    """
    Exception raised when the service definitively refused to sign.

    Attributes:
        activity_id: Identifier of the failed activity
        reason: Failure reason reported by the service
    """

    def __init__(self, activity_id: str, reason: str):
        self.activity_id = activity_id
        self.reason = reason
        super().__init__(f"Activity {activity_id} failed: {reason}")


class ActivityTimeoutError(TurnkeyError):
    """
    Exception raised when the deadline passed while an activity was pending.

    The activity was not observed to fail. It may still complete on the
    service side, so the outcome of the signing request is unknown.

    Attributes:
        activity_id: Identifier of the activity that was still pending
    """

    def __init__(self, activity_id: str):
        self.activity_id = activity_id
        super().__init__(
            f"Timed out waiting for activity {activity_id}; "
            "outcome unknown, the activity may still complete"
        )


class SignerNotRequired(TurnkeyError):
    """
    Exception raised when the signer is not a required signer of the transaction.

    Attributes:
        public_key: The public key that was not found, if known
    """

    def __init__(self, public_key: Optional[str] = None):
        self.public_key = public_key
        if public_key is None:
            message = "Signature does not match any required signer of the transaction"
        else:
            message = f"{public_key} is not a required signer of the transaction"
        super().__init__(message)
