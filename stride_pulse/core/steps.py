import math


class StepDetector:
    """Peak detector over acceleration magnitude (gravity included).

    A step is a rising edge above `threshold` while armed, at least
    `cooldown_ms` after the previous step. The detector re-arms once the
    magnitude falls below `threshold - hysteresis`.
    """

    def __init__(self, threshold: float = 12.0, hysteresis: float = 1.0, cooldown_ms: int = 280):
        self.threshold = threshold
        self.release_threshold = threshold - hysteresis
        self.cooldown_ms = cooldown_ms
        self.reset()

    def reset(self) -> None:
        self.last_magnitude = 0.0
        self.is_at_peak = False
        self.last_event_ms = 0
        self.steps = 0

    def feed(self, x, y, z, timestamp_ms: int) -> bool:
        """Process one sample; return True when it produced a step."""
        if x is None or y is None or z is None:
            return False

        magnitude = math.sqrt(x ** 2 + y ** 2 + z ** 2)
        stepped = False

        if magnitude > self.threshold and magnitude > self.last_magnitude and not self.is_at_peak:
            # a peak inside the cooldown leaves the detector armed
            if timestamp_ms - self.last_event_ms > self.cooldown_ms:
                stepped = True
                self.steps += 1
                self.last_event_ms = timestamp_ms
                self.is_at_peak = True
        elif magnitude < self.release_threshold:
            self.is_at_peak = False

        self.last_magnitude = magnitude
        return stepped
