"""
Location: python/turnkey_sdk/config.py

Summary:
    Client configuration for turnkey-sdk. Holds the API credential, the
    service base URL, the example key defaults and the activity polling
    schedule.

Usage:
    Build a TurnkeyConfig directly (tests, embedding applications) or load
    it from the environment with TurnkeyConfig.from_env(), which also
    reads a .env file when present.

Example:
    from turnkey_sdk.config import TurnkeyConfig, PollConfig

    config = TurnkeyConfig.from_env()
    fast = config.model_copy(update={"poll": PollConfig(interval=0.2)})
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, ValidationError

from .errors import ConfigurationError
from .types import Credential


DEFAULT_BASE_URL = "https://api.turnkey.com"

# Environment variable names
ENV_API_PUBLIC_KEY = "TURNKEY_API_PUBLIC_KEY"
ENV_API_PRIVATE_KEY = "TURNKEY_API_PRIVATE_KEY"
ENV_ORGANIZATION_ID = "TURNKEY_ORGANIZATION_ID"
ENV_PRIVATE_KEY_ID = "TURNKEY_PRIVATE_KEY_ID"
ENV_EXAMPLE_PUBLIC_KEY = "TURNKEY_EXAMPLE_PUBLIC_KEY"
ENV_BASE_URL = "TURNKEY_BASE_URL"
ENV_REQUEST_TIMEOUT = "TURNKEY_REQUEST_TIMEOUT_SEC"
ENV_POLL_INTERVAL = "TURNKEY_POLL_INTERVAL_SEC"
ENV_POLL_TIMEOUT = "TURNKEY_POLL_TIMEOUT_SEC"


class PollConfig(BaseModel):
    """
    Polling schedule for pending activities.

    The wait between polls starts at interval, is multiplied by backoff
    after each poll and never exceeds max_interval. Polling stops once
    timeout seconds have passed since submission.

    Attributes:
        interval: First wait between polls, in seconds
        backoff: Multiplier applied to the wait after each poll
        max_interval: Upper bound for the wait, in seconds
        timeout: Default deadline for an activity, in seconds
    """
    interval: float = Field(0.5, gt=0)
    backoff: float = Field(2.0, ge=1.0)
    max_interval: float = Field(4.0, gt=0)
    timeout: float = Field(60.0, gt=0)

    model_config = {"frozen": True}


class TurnkeyConfig(BaseModel):
    """
    Configuration for TurnkeyClient.

    Attributes:
        organization_id: Turnkey organization identifier
        api_public_key: Compressed P-256 API public key, hex
        api_private_key: P-256 API private key, hex
        base_url: Service base URL (trailing slash removed)
        example_private_key_id: Private key id used by ExampleKey
        example_public_key: Base58 public key used by ExampleKey
        request_timeout: Per-request HTTP timeout in seconds
        poll: Activity polling schedule
    """
    organization_id: str
    api_public_key: str
    api_private_key: SecretStr
    base_url: str = DEFAULT_BASE_URL
    example_private_key_id: Optional[str] = None
    example_public_key: Optional[str] = None
    request_timeout: float = Field(30.0, gt=0)
    poll: PollConfig = Field(default_factory=PollConfig)

    model_config = {"frozen": True}

    @property
    def credential(self) -> Credential:
        """The immutable API credential."""
        return Credential(
            organization_id=self.organization_id,
            api_public_key=self.api_public_key,
            api_private_key=self.api_private_key,
        )

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "TurnkeyConfig":
        """
        Load configuration from environment variables.

        Values already present in the environment take precedence over
        the .env file.

        Args:
            env_file: Optional path to a .env file (default: search cwd)

        Returns:
            A validated TurnkeyConfig

        Raises:
            ConfigurationError: If a required variable is missing or a
                numeric variable is invalid
        """
        load_dotenv(env_file)

        missing = [
            name
            for name in (ENV_API_PUBLIC_KEY, ENV_API_PRIVATE_KEY, ENV_ORGANIZATION_ID)
            if not _env(name)
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        poll_values = {}
        if _env(ENV_POLL_INTERVAL):
            poll_values["interval"] = _env_float(ENV_POLL_INTERVAL)
        if _env(ENV_POLL_TIMEOUT):
            poll_values["timeout"] = _env_float(ENV_POLL_TIMEOUT)

        values = {
            "organization_id": _env(ENV_ORGANIZATION_ID),
            "api_public_key": _env(ENV_API_PUBLIC_KEY),
            "api_private_key": _env(ENV_API_PRIVATE_KEY),
            "base_url": (_env(ENV_BASE_URL) or DEFAULT_BASE_URL).rstrip("/"),
            "example_private_key_id": _env(ENV_PRIVATE_KEY_ID),
            "example_public_key": _env(ENV_EXAMPLE_PUBLIC_KEY),
        }
        if _env(ENV_REQUEST_TIMEOUT):
            values["request_timeout"] = _env_float(ENV_REQUEST_TIMEOUT)

        try:
            return cls(poll=PollConfig(**poll_values), **values)
        except ValidationError as exc:
            # Never echo input values: one of them is the private key
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
            raise ConfigurationError(f"Invalid configuration: {fields}") from None


def _env(name: str) -> Optional[str]:
    value = (os.getenv(name) or "").strip()
    return value or None


def _env_float(name: str) -> float:
    raw = _env(name)
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None
