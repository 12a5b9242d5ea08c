"""
Location: python/turnkey_sdk/__init__.py

Summary:
    Main package initialization for turnkey-sdk. Exports all public classes
    and functions for convenient importing.

Usage:
    from turnkey_sdk import TurnkeyClient, TurnkeyConfig, ExampleKey

    # Or import specific modules
    from turnkey_sdk.stamper import Stamper, verify_stamp
    from turnkey_sdk.applier import apply_signature

Version: 0.1.0
"""

from .client import TurnkeyClient
from .config import PollConfig, TurnkeyConfig
from .types import (
    Activity,
    ActivityStatus,
    ApiStamp,
    Credential,
    ExampleKey,
    KeyIdSelector,
    KeySelector,
    PublicKeySelector,
    SignatureResult,
    SignerIdentity,
    SignRawPayloadRequest,
    WhoAmIResponse,
)
from .errors import (
    TurnkeyError,
    ConfigurationError,
    InvalidKeyFormat,
    SigningError,
    NetworkError,
    HttpError,
    MalformedResponseError,
    ActivityFailedError,
    ActivityTimeoutError,
    SignerNotRequired,
)
from .selector import resolve_selector
from .stamper import Stamper, encode_stamp, verify_stamp
from .poller import ActivityPoller, PollState
from .applier import apply_signature, message_bytes
from .chain import BlockhashSource, TransactionBroadcaster, build_unsigned_transaction

__version__ = "0.1.0"

__all__ = [
    # Main client
    "TurnkeyClient",
    # Configuration
    "TurnkeyConfig",
    "PollConfig",
    # Types
    "Activity",
    "ActivityStatus",
    "ApiStamp",
    "Credential",
    "ExampleKey",
    "KeyIdSelector",
    "KeySelector",
    "PublicKeySelector",
    "SignatureResult",
    "SignerIdentity",
    "SignRawPayloadRequest",
    "WhoAmIResponse",
    # Exceptions
    "TurnkeyError",
    "ConfigurationError",
    "InvalidKeyFormat",
    "SigningError",
    "NetworkError",
    "HttpError",
    "MalformedResponseError",
    "ActivityFailedError",
    "ActivityTimeoutError",
    "SignerNotRequired",
    # Components
    "resolve_selector",
    "Stamper",
    "encode_stamp",
    "verify_stamp",
    "ActivityPoller",
    "PollState",
    "apply_signature",
    "message_bytes",
    # Chain collaborators
    "BlockhashSource",
    "TransactionBroadcaster",
    "build_unsigned_transaction",
]
