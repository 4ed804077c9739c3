"""In-process sensor sources.

The device pushes raw samples over HTTP; each provider fans them out to its
subscribers. Access is two-phase: `request_access()` first, `subscribe()`
only after GRANTED.
"""
import logging
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class AccessState(str, Enum):
    granted = "granted"
    denied = "denied"
    prompt = "prompt"  # waiting for the user's answer


class Subscription:
    def __init__(self, provider: "SensorProvider", on_sample: Callable, on_error: Optional[Callable]):
        self._provider = provider
        self.on_sample = on_sample
        self.on_error = on_error
        self.active = True

    def cancel(self) -> None:
        """Stop delivery. Safe to call more than once."""
        if not self.active:
            return
        self.active = False
        self._provider._remove(self)


class SensorProvider:
    name = "sensor"

    def __init__(self):
        self._subscriptions: list[Subscription] = []

    def request_access(self) -> AccessState:
        return AccessState.granted

    def subscribe(self, on_sample: Callable, on_error: Optional[Callable] = None) -> Subscription:
        if self.request_access() is not AccessState.granted:
            raise PermissionError(f"{self.name} access not granted")
        sub = Subscription(self, on_sample, on_error)
        self._subscriptions.append(sub)
        return sub

    def publish(self, sample) -> None:
        for sub in list(self._subscriptions):
            sub.on_sample(sample)

    def report_error(self, error) -> None:
        """Forward a device-side failure; subscriptions stay open."""
        logger.warning("%s provider error: %s", self.name, error)
        for sub in list(self._subscriptions):
            if sub.on_error is not None:
                sub.on_error(error)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def _remove(self, sub: Subscription) -> None:
        if sub in self._subscriptions:
            self._subscriptions.remove(sub)


class LocationProvider(SensorProvider):
    name = "location"


class MotionProvider(SensorProvider):
    """Motion source that may need a one-time user grant.

    A recorded denial is final for the lifetime of the provider.
    """

    name = "motion"

    def __init__(self, requires_permission: bool = False):
        super().__init__()
        self._state = AccessState.prompt if requires_permission else AccessState.granted

    def request_access(self) -> AccessState:
        return self._state

    def record_answer(self, granted: bool) -> AccessState:
        if self._state is AccessState.prompt:
            self._state = AccessState.granted if granted else AccessState.denied
            logger.info("Motion access %s", self._state.value)
        return self._state
