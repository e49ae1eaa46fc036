from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SpeedPolicy:
    """Auto-drop interval as a function of elapsed running time (milliseconds)."""

    base_interval_ms: int = 1_000
    decrement_ms: int = 20
    ramp_every_ms: int = 20_000
    floor_ms: int = 300
    soft_drop_ms: int = 100

    def __post_init__(self) -> None:
        if self.ramp_every_ms <= 0:
            raise ValueError("ramp_every_ms must be positive.")
        if self.floor_ms <= 0 or self.soft_drop_ms <= 0:
            raise ValueError("Drop intervals must be positive.")
        if self.decrement_ms < 0:
            raise ValueError("decrement_ms must be >= 0.")

    def ramp_steps(self, elapsed_ms: float) -> int:
        return int(max(0.0, float(elapsed_ms)) // self.ramp_every_ms)

    def interval_for(self, elapsed_ms: float, *, soft_drop: bool = False) -> int:
        if soft_drop:
            return int(self.soft_drop_ms)
        ramped = self.base_interval_ms - (self.decrement_ms * self.ramp_steps(elapsed_ms))
        return int(max(self.floor_ms, min(self.base_interval_ms, ramped)))

    def next_ramp_in(self, elapsed_ms: float) -> int:
        """Milliseconds of running time until the next speed step."""
        elapsed = max(0.0, float(elapsed_ms))
        return int(self.ramp_every_ms - (elapsed % self.ramp_every_ms)) or self.ramp_every_ms
