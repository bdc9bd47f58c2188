"""Tracking of asynchronous provider actions.

``ActionTracker.track`` turns a provider action into a stream of events:
zero or more ``ActionProgress`` followed by exactly one terminal event,
``ActionSucceeded`` or ``ActionFailed``. Consumers match on the events:

    for event in tracker.track(action):
        match event:
            case ActionProgress(progress=p):
                print(f"{p}%")
            case ActionFailed(error=err):
                raise err
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from hetzner_kube.exceptions import (
    ActionCancelledError,
    ActionFailedError,
    ActionTimeoutError,
    HetznerKubeError,
    TransportError,
)
from hetzner_kube.logging_config import get_logger
from hetzner_kube.provider.client import Action, ProviderClient

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ActionProgress:
    """Progress percentage observed for an action."""

    action_id: int
    progress: int


@dataclass(frozen=True, slots=True)
class ActionSucceeded:
    """The action finished successfully."""

    action_id: int


@dataclass(frozen=True, slots=True)
class ActionFailed:
    """The action failed, timed out, was cancelled, or could not be polled."""

    action_id: int
    error: HetznerKubeError


ActionEvent = ActionProgress | ActionSucceeded | ActionFailed


class ActionTracker:
    """Polls provider actions until they reach a terminal state."""

    def __init__(
        self,
        client: ProviderClient,
        poll_interval: float = 1.0,
        timeout: float = 600.0,
        poll_retries: int = 3,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the tracker.

        Args:
            client: Provider client used to fetch action status
            poll_interval: Seconds between status polls
            timeout: Maximum seconds to wait for one action
            poll_retries: Attempts per poll before a transport error is fatal
            sleep: Sleep function (injectable for tests)
            clock: Monotonic clock (injectable for tests)
        """
        self.client = client
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.poll_retries = max(1, poll_retries)
        self._sleep = sleep
        self._clock = clock

    def track(self, action: Action, cancel: threading.Event | None = None) -> Iterator[ActionEvent]:
        """Yield progress events for ``action`` followed by one terminal event."""
        deadline = self._clock() + self.timeout
        current = action
        logger.debug(f"Tracking action {action.id} ({action.command or 'unknown'})")

        while True:
            if cancel is not None and cancel.is_set():
                yield ActionFailed(
                    current.id, ActionCancelledError(f"Stopped waiting for action {current.id}")
                )
                return

            yield ActionProgress(current.id, current.progress)

            if current.failed:
                logger.error(
                    f"Action {current.id} failed: {current.error_code} {current.error_message}"
                )
                yield ActionFailed(
                    current.id,
                    ActionFailedError(
                        f"Action {current.id} ({current.command}) failed",
                        current.error_message,
                        code=current.error_code,
                    ),
                )
                return

            if current.done:
                if current.progress < 100:
                    yield ActionProgress(current.id, 100)
                logger.debug(f"Action {current.id} finished")
                yield ActionSucceeded(current.id)
                return

            if self._clock() >= deadline:
                yield ActionFailed(
                    current.id,
                    ActionTimeoutError(
                        f"Action {current.id} did not finish within {self.timeout:.0f}s",
                        f"Last reported progress: {current.progress}%",
                    ),
                )
                return

            if cancel is not None:
                cancel.wait(self.poll_interval)
                if cancel.is_set():
                    continue
            else:
                self._sleep(self.poll_interval)

            try:
                current = self._fetch(current.id)
            except TransportError as e:
                logger.error(f"Polling action {current.id} failed: {e.message}")
                yield ActionFailed(current.id, e)
                return

    def wait(self, action: Action, cancel: threading.Event | None = None) -> None:
        """Block until ``action`` terminates, raising its error on failure."""
        for event in self.track(action, cancel):
            if isinstance(event, ActionFailed):
                raise event.error

    def _fetch(self, action_id: int) -> Action:
        retrying = Retrying(
            stop=stop_after_attempt(self.poll_retries),
            wait=wait_exponential(multiplier=self.poll_interval, max=30),
            retry=retry_if_exception_type(TransportError),
            sleep=self._sleep,
            reraise=True,
        )
        return retrying(self.client.get_action, action_id)
