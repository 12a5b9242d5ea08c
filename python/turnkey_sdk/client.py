"""
Location: python/turnkey_sdk/client.py

Summary:
    Main TurnkeyClient class for turnkey-sdk. Signs Solana transactions with
    keys held in the remote signer service and writes the signature back
    into the transaction.

Usage:
    The primary entry point for using the SDK. Create a TurnkeyClient from
    a TurnkeyConfig (or the environment), then sign transactions by key
    selector.

Example:
    from turnkey_sdk import TurnkeyClient, ExampleKey

    async with TurnkeyClient.from_env() as client:
        tx, result = await client.sign_transaction(tx, ExampleKey())
        print(result.activity_id, tx.signatures[0])
"""

import logging
from typing import Any, Awaitable, Callable, Optional

import httpx
from pydantic import ValidationError
from solders.signature import Signature

from .applier import SolanaTransaction, apply_signature, message_bytes
from .chain import TransactionBroadcaster
from .config import TurnkeyConfig
from .errors import MalformedResponseError
from .poller import ActivityPoller
from .selector import resolve_selector
from .stamper import Stamper
from .transport import QUERY_WHOAMI, SUBMIT_SIGN_RAW_PAYLOAD, TurnkeyTransport
from .types import (
    Activity,
    KeySelector,
    SignRawPayloadRequest,
    SignatureResult,
    WhoAmIRequest,
    WhoAmIResponse,
)


logger = logging.getLogger(__name__)


class TurnkeyClient:
    """
    Client for signing transactions through the signer service.

    Every request is stamped with the configured API key. Signing requests
    become activities which are awaited until they complete, fail or the
    deadline passes. Concurrent calls are independent; the only shared
    state is read-only configuration and the HTTP connection pool.

    Attributes:
        config: Client configuration
        organization_id: Organization all activities belong to
    """

    def __init__(
        self,
        config: TurnkeyConfig,
        http: Optional[httpx.AsyncClient] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize the TurnkeyClient.

        Args:
            config: Client configuration including the API credential
            http: Optional pre-configured httpx.AsyncClient
            sleep: Optional sleep function used between polls
            clock: Optional monotonic clock used for poll deadlines

        Raises:
            SigningError: If the API key pair in config is malformed
        """
        self.config = config
        self.organization_id = config.organization_id
        self._stamper = Stamper(config.credential)
        self._transport = TurnkeyTransport(
            config.base_url,
            timeout=config.request_timeout,
            http=http,
        )
        self._poller = ActivityPoller(
            self._transport,
            self._stamper,
            config.organization_id,
            config.poll,
            sleep=sleep,
            clock=clock,
        )

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "TurnkeyClient":
        """
        Create a client from environment variables.

        Args:
            env_file: Optional path to a .env file

        Returns:
            A configured TurnkeyClient

        Raises:
            ConfigurationError: If required variables are missing
        """
        return cls(TurnkeyConfig.from_env(env_file))

    async def close(self) -> None:
        """
        Close the HTTP client and release resources.

        Should be called when done with the client, or use
        the async context manager pattern.
        """
        await self._transport.close()

    async def __aenter__(self) -> "TurnkeyClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, *args) -> None:
        """Exit async context manager and close resources."""
        await self.close()

    async def sign_transaction(
        self,
        transaction: SolanaTransaction,
        selector: KeySelector,
        *,
        timeout: Optional[float] = None,
    ) -> tuple[SolanaTransaction, SignatureResult]:
        """
        Sign a transaction with the key chosen by selector.

        The steps are:
        1. Resolve the selector to a signer identity
        2. Serialize the transaction message
        3. Submit a stamped sign-raw-payload activity and await it
        4. Write the signature into the signer's slot

        Any error stops the chain and propagates unchanged. The transaction
        is only modified once a completed signature has been validated.

        Args:
            transaction: Unsigned or partially signed transaction
            selector: Which key to sign with
            timeout: Seconds to wait for the activity (default poll.timeout)

        Returns:
            The signed transaction and the SignatureResult

        Raises:
            ConfigurationError: If the selector needs missing configuration
            InvalidKeyFormat: If the selector carries a malformed key
            HttpError: If the service rejects the request
            NetworkError: If the submission could not reach the service
            ActivityFailedError: If the service refused to sign
            ActivityTimeoutError: If the outcome is still unknown at the deadline
            SignerNotRequired: If the key is not a required signer
        """
        identity = resolve_selector(selector, self.config)
        result = await self.sign_raw_payload(
            message_bytes(transaction),
            identity.sign_with,
            timeout=timeout,
        )
        signed, _ = apply_signature(result, transaction, identity.public_key)
        logger.debug("Applied signature from activity %s", result.activity_id)
        return signed, result

    async def sign_raw_payload(
        self,
        payload: bytes,
        sign_with: str,
        *,
        timeout: Optional[float] = None,
    ) -> SignatureResult:
        """
        Sign arbitrary bytes without hashing them first.

        Args:
            payload: Exact bytes to sign
            sign_with: Private key id or address
            timeout: Seconds to wait for the activity (default poll.timeout)

        Returns:
            SignatureResult of the completed activity
        """
        request = SignRawPayloadRequest.for_payload(
            organization_id=self.organization_id,
            sign_with=sign_with,
            payload=payload,
        )
        return await self._poller.submit_and_await(
            SUBMIT_SIGN_RAW_PAYLOAD,
            request,
            timeout=timeout,
        )

    async def sign_and_send(
        self,
        transaction: SolanaTransaction,
        selector: KeySelector,
        broadcaster: TransactionBroadcaster,
        *,
        timeout: Optional[float] = None,
    ) -> Signature:
        """
        Sign a transaction and broadcast it.

        Args:
            transaction: Transaction to sign
            selector: Which key to sign with
            broadcaster: Network collaborator that submits the transaction
            timeout: Seconds to wait for the signing activity

        Returns:
            The signature reported by the broadcaster
        """
        signed, _ = await self.sign_transaction(transaction, selector, timeout=timeout)
        return await broadcaster.send_transaction(signed)

    async def get_activity(self, activity_id: str) -> Activity:
        """
        Fetch an activity by id.

        Useful to reconcile an activity after ActivityTimeoutError.

        Args:
            activity_id: Activity identifier

        Returns:
            The current Activity
        """
        return await self._poller.get_activity(activity_id)

    async def who_am_i(self) -> WhoAmIResponse:
        """
        Return the identity behind the configured API key.

        Returns:
            WhoAmIResponse with organization and user details
        """
        body = WhoAmIRequest(organization_id=self.organization_id).to_body()
        data = await self._transport.send(QUERY_WHOAMI, body, self._stamper.stamp(body))
        try:
            return WhoAmIResponse.model_validate(data)
        except ValidationError as exc:
            raise MalformedResponseError("whoami returned an invalid payload") from exc


__all__ = ["TurnkeyClient"]
