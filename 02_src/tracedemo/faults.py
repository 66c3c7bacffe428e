"""Simulated latency and failures for the demo handlers."""

import random

from .config import Settings


class FaultInjector:
    """Random delay and failure decisions from a single seedable RNG."""

    def __init__(
        self,
        failure_rate: float = 0.2,
        min_delay_ms: int = 100,
        max_delay_ms: int = 2000,
        seed: int | None = None,
    ):
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be within [0, 1], got {failure_rate}")
        if min_delay_ms < 0 or min_delay_ms >= max_delay_ms:
            raise ValueError(
                f"invalid delay bounds [{min_delay_ms}, {max_delay_ms})"
            )

        self.failure_rate = failure_rate
        self.min_delay_ms = min_delay_ms
        self.max_delay_ms = max_delay_ms
        # Independent streams: delay draws never shift the failure sequence
        self._failure_rng = random.Random(seed)
        self._delay_rng = random.Random(seed + 1 if seed is not None else None)

    @classmethod
    def from_settings(cls, settings: Settings) -> "FaultInjector":
        return cls(
            failure_rate=settings.error_rate,
            min_delay_ms=settings.slow_min_ms,
            max_delay_ms=settings.slow_max_ms,
            seed=settings.random_seed,
        )

    def pick_delay_ms(self) -> int:
        """Uniform delay in [min_delay_ms, max_delay_ms)."""
        return self._delay_rng.randrange(self.min_delay_ms, self.max_delay_ms)

    def should_fail(self) -> bool:
        return self._failure_rng.random() < self.failure_rate
