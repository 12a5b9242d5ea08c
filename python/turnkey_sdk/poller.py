"""
Location: python/turnkey_sdk/poller.py

Summary:
    Activity submission and polling. Submits a signing activity once and,
    if the service leaves it pending, polls it on a capped backoff schedule
    until it completes, fails or the deadline passes.

Usage:
    Used by client.py. Each poll request is stamped separately, since every
    call to the service must carry its own stamp.

Example:
    from turnkey_sdk.poller import ActivityPoller

    poller = ActivityPoller(transport, stamper, organization_id, config.poll)
    result = await poller.submit_and_await(SUBMIT_SIGN_RAW_PAYLOAD, request)
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from pydantic import ValidationError

from .config import PollConfig
from .errors import (
    ActivityFailedError,
    ActivityTimeoutError,
    HttpError,
    MalformedResponseError,
    NetworkError,
)
from .stamper import Stamper
from .transport import QUERY_GET_ACTIVITY, TurnkeyTransport
from .types import (
    Activity,
    ActivityResponse,
    ActivityStatus,
    GetActivityRequest,
    SignRawPayloadRequest,
    SignatureResult,
)


logger = logging.getLogger(__name__)

# Lower bound on a single poll request, so the poll made at the deadline
# still gets a chance to answer.
MIN_POLL_WINDOW = 1.0


class PollState(str, Enum):
    """Client-side lifecycle of a submitted activity."""
    SUBMITTED = "submitted"
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


def state_for_status(status: ActivityStatus) -> PollState:
    """
    Map a service status to the poller state it leads to.

    Args:
        status: Status reported by the service

    Returns:
        COMPLETED, FAILED or PENDING
    """
    if status is ActivityStatus.COMPLETED:
        return PollState.COMPLETED
    if status in (ActivityStatus.FAILED, ActivityStatus.REJECTED):
        return PollState.FAILED
    return PollState.PENDING


class ActivityPoller:
    """
    Drives a signing activity to a terminal state.

    Attributes:
        organization_id: Organization used in poll requests
        poll: Backoff schedule and default deadline
    """

    def __init__(
        self,
        transport: TurnkeyTransport,
        stamper: Stamper,
        organization_id: str,
        poll: Optional[PollConfig] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize the poller.

        Args:
            transport: Transport used for submit and poll requests
            stamper: Stamper for every outbound body
            organization_id: Organization identifier
            poll: Polling schedule (default PollConfig())
            sleep: Awaitable sleep function (default asyncio.sleep)
            clock: Monotonic clock in seconds (default time.monotonic)
        """
        self._transport = transport
        self._stamper = stamper
        self.organization_id = organization_id
        self.poll = poll or PollConfig()
        self._sleep = sleep or asyncio.sleep
        self._clock = clock or time.monotonic

    async def submit_and_await(
        self,
        path: str,
        request: SignRawPayloadRequest,
        timeout: Optional[float] = None,
    ) -> SignatureResult:
        """
        Submit a signing activity and wait for its result.

        The submission is attempted exactly once. While the activity is
        pending, NetworkError and 5xx HttpError from poll requests are
        retried until the deadline; any other error propagates.

        Args:
            path: Submission endpoint path
            request: The signing activity to submit
            timeout: Seconds to wait for a terminal state
                (default poll.timeout)

        Returns:
            SignatureResult of the completed activity

        Raises:
            ActivityFailedError: If the service failed or rejected the activity
            ActivityTimeoutError: If the activity was still pending at the deadline
            HttpError: If submission was rejected, or a poll got a 4xx
            NetworkError: If submission could not reach the service
        """
        deadline = self._clock() + (timeout if timeout is not None else self.poll.timeout)

        state = PollState.SUBMITTED
        activity = await self._post_activity(path, request.to_body())
        state = state_for_status(activity.status)
        logger.debug("Submitted activity %s: %s", activity.id, activity.status.value)

        delay = min(self.poll.interval, self.poll.max_interval)
        while state is PollState.PENDING:
            remaining = deadline - self._clock()
            if remaining <= 0:
                state = PollState.TIMED_OUT
                break

            await self._sleep(min(delay, remaining))
            delay = min(delay * self.poll.backoff, self.poll.max_interval)

            polled = await self._poll_once(activity.id, deadline - self._clock())
            if polled is not None:
                activity = polled
                state = state_for_status(activity.status)

        if state is PollState.COMPLETED:
            return _signature_result(activity)
        if state is PollState.FAILED:
            raise ActivityFailedError(activity.id, activity.failure_reason)
        raise ActivityTimeoutError(activity.id)

    async def get_activity(self, activity_id: str) -> Activity:
        """
        Fetch the current state of an activity.

        Args:
            activity_id: Activity identifier

        Returns:
            The Activity as reported by the service
        """
        body = GetActivityRequest(
            organization_id=self.organization_id,
            activity_id=activity_id,
        ).to_body()
        return await self._post_activity(QUERY_GET_ACTIVITY, body)

    async def _poll_once(self, activity_id: str, remaining: float) -> Optional[Activity]:
        """Poll once; returns None when a transient failure should be retried."""
        try:
            activity = await asyncio.wait_for(
                self.get_activity(activity_id),
                max(remaining, MIN_POLL_WINDOW),
            )
        except asyncio.TimeoutError:
            logger.warning("Polling activity %s did not answer before the deadline", activity_id)
            return None
        except NetworkError as exc:
            logger.warning("Polling activity %s failed, retrying: %s", activity_id, exc)
            return None
        except HttpError as exc:
            if not exc.is_retryable:
                raise
            logger.warning("Polling activity %s got HTTP %d, retrying", activity_id, exc.status)
            return None
        logger.debug("Polled activity %s: %s", activity_id, activity.status.value)
        return activity

    async def _post_activity(self, path: str, body: bytes) -> Activity:
        stamp = self._stamper.stamp(body)
        data = await self._transport.send(path, body, stamp)
        try:
            return ActivityResponse.model_validate(data).activity
        except ValidationError as exc:
            raise MalformedResponseError(f"{path} returned an invalid activity") from exc


def _signature_result(activity: Activity) -> SignatureResult:
    """
    Extract the signature from a completed activity.

    Args:
        activity: Activity with status COMPLETED

    Returns:
        SignatureResult tagged with the activity id

    Raises:
        MalformedResponseError: If the result is missing or not hex
    """
    result = activity.result.sign_raw_payload_result if activity.result else None
    if result is None:
        raise MalformedResponseError(
            f"Activity {activity.id} completed without a sign raw payload result"
        )
    try:
        return SignatureResult(r=result.r, s=result.s, v=result.v, activity_id=activity.id)
    except ValidationError as exc:
        raise MalformedResponseError(f"Activity {activity.id} returned a malformed signature") from exc
