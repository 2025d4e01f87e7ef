# apps/core/domain/retry.py
import time
from dataclasses import dataclass
from typing import Callable, Iterator


@dataclass(frozen=True)
class RetryPolicy:
    """
    Ograniczona liczba prób z liniowo rosnącym opóźnieniem.

    Opóźnienie przed próbą n (n >= 2) wynosi base_delay * (n - 1).
    Przy delay_first=True czekamy też przed pierwszą próbą
    (base_delay * n dla każdej próby).
    """
    max_attempts: int = 3
    base_delay: float = 0.2
    delay_first: bool = False
    sleep: Callable[[float], None] = time.sleep

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay cannot be negative")

    def delay_before(self, attempt: int) -> float:
        if self.delay_first:
            return self.base_delay * attempt
        return self.base_delay * (attempt - 1)

    def attempts(self) -> Iterator[int]:
        """Zwraca kolejne numery prób (od 1), usypiając między nimi."""
        for attempt in range(1, self.max_attempts + 1):
            delay = self.delay_before(attempt)
            if delay > 0:
                self.sleep(delay)
            yield attempt

    def without_sleep(self) -> 'RetryPolicy':
        return RetryPolicy(
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            delay_first=self.delay_first,
            sleep=lambda _seconds: None,
        )

    @classmethod
    def from_settings(cls, name: str) -> 'RetryPolicy':
        """Buduje politykę z settings.TRACKER_RETRY_POLICIES[name]."""
        from django.conf import settings

        policies = getattr(settings, 'TRACKER_RETRY_POLICIES', {})
        if name not in policies:
            raise ValueError(f"Unknown retry policy: {name}")
        return cls(**policies[name])
